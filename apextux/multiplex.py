"""Forward items from whichever of several async streams is currently selected."""

from __future__ import annotations

from collections.abc import AsyncIterable, AsyncIterator, Callable, Iterable
from typing import Generic, TypeVar

T = TypeVar("T")


class Multiplexer(Generic[T]):
    """Each ``__anext__`` pulls from the stream whose index ``selector`` returns.

    A stream that has ended keeps reporting the end; the multiplexer is
    terminated once every stream has ended.
    """

    def __init__(self, streams: Iterable[AsyncIterable[T]], selector: Callable[[], int]) -> None:
        self._streams: list[AsyncIterator[T]] = [aiter(stream) for stream in streams]
        self._selector = selector
        self._finished: set[int] = set()

    def __aiter__(self) -> Multiplexer[T]:
        return self

    async def __anext__(self) -> T:
        index = self._selector()
        if not 0 <= index < len(self._streams):
            raise IndexError(f"bad stream index {index}")
        if index in self._finished:
            raise StopAsyncIteration
        try:
            return await anext(self._streams[index])
        except StopAsyncIteration:
            self._finished.add(index)
            raise

    def is_terminated(self) -> bool:
        return len(self._finished) == len(self._streams)


def multiplex(streams: Iterable[AsyncIterable[T]], selector: Callable[[], int]) -> Multiplexer[T]:
    return Multiplexer(streams, selector)