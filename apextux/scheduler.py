"""Runs the content providers and shows the selected one, or a notification, on a device."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Callable, Sequence
from typing import Any

from apextux.command import Command
from apextux.config import Settings
from apextux.content import (
    ContentProvider,
    content_provider_factories,
    notification_provider_factories,
)
from apextux.framebuffer import Device, FrameBuffer
from apextux.multiplex import Multiplexer, multiplex

logger = logging.getLogger(__name__)

DEFAULT_PRIORITY = 99
DEFAULT_REFRESH = 30

_END = object()


def _setting(getter: Callable[[str], Any], key: str, default: Any) -> Any:
    try:
        return getter(key)
    except (KeyError, ValueError):
        return default


async def _pull(stream: AsyncIterator[Any]) -> Any:
    """Fetch the next item, returning a sentinel at the end or after a failure."""
    try:
        return await anext(stream)
    except StopAsyncIteration:
        return _END
    except Exception as error:  # a failing provider must not stop the display
        logger.error("%s", error)
        return _END


class Scheduler:
    """Owns a device and drives it from the registered providers until shut down.

    ``content_factories`` and ``notification_factories`` default to the
    registries in :mod:`apextux.content`; assign sequences to override them.
    """

    def __init__(self, device: Device) -> None:
        self.device = device
        self.content_factories: Sequence[Callable[[Settings], ContentProvider]] | None = None
        self.notification_factories: Sequence[Callable[[], Any]] | None = None
        self.current = 0
        self.change_check_interval = 1.0

    def _content_streams(self, settings: Settings) -> list[AsyncIterator[FrameBuffer]]:
        factories = (
            content_provider_factories()
            if self.content_factories is None
            else self.content_factories
        )
        providers = [factory(settings) for factory in factories]
        logger.info("Found %d registered providers", len(providers))

        enabled = [
            provider
            for provider in providers
            if _setting(settings.get_bool, f"{provider.name()}.enabled", True)
        ]
        enabled.sort(
            key=lambda provider: _setting(
                settings.get_int, f"{provider.name()}.priority", DEFAULT_PRIORITY
            )
        )

        streams = []
        for provider in enabled:
            try:
                streams.append(aiter(provider.stream()))
            except Exception as error:
                logger.error(
                    "Failed to initialize provider: %s. Error: %s", provider.name(), error
                )
        return streams

    def _notification_streams(self) -> list[AsyncIterator[Any]]:
        factories = (
            notification_provider_factories()
            if self.notification_factories is None
            else self.notification_factories
        )
        providers = [factory() for factory in factories]
        streams = []
        for provider in providers:
            try:
                streams.append(aiter(provider.stream()))
            except Exception as error:
                logger.error("%s", error)
        return streams

    async def _next_frame(self, content: Multiplexer[FrameBuffer]) -> Any:
        return await _pull(content)

    async def start(self, commands: asyncio.Queue[Command], settings: Settings) -> None:
        """Run until a ``SHUTDOWN`` command arrives, then clear and release the device."""
        notification_streams = self._notification_streams()
        streams = self._content_streams(settings)
        if not streams:
            raise RuntimeError("no content provider could be started")
        size = len(streams)
        self.current = 0
        content = multiplex(streams, lambda: self.current)

        refresh = _setting(settings.get_int, "interval.refresh", DEFAULT_REFRESH)
        auto_change = refresh != 0

        loop = asyncio.get_running_loop()
        last_change = loop.time()

        command_task: asyncio.Task[Command] = asyncio.ensure_future(commands.get())
        content_tasks: dict[int, asyncio.Task[Any]] = {}
        stalled: set[int] = set()
        notification_tasks: dict[asyncio.Task[Any], AsyncIterator[Any]] = {
            asyncio.ensure_future(_pull(stream)): stream for stream in notification_streams
        }
        tick_task = (
            asyncio.ensure_future(asyncio.sleep(self.change_check_interval))
            if auto_change
            else None
        )

        try:
            while True:
                if self.current not in content_tasks and self.current not in stalled:
                    content_tasks[self.current] = asyncio.ensure_future(
                        self._next_frame(content)
                    )
                waiting: set[asyncio.Future[Any]] = {
                    command_task,
                    *content_tasks.values(),
                    *notification_tasks,
                }
                if tick_task is not None:
                    waiting.add(tick_task)
                done, _ = await asyncio.wait(waiting, return_when=asyncio.FIRST_COMPLETED)

                if command_task in done:
                    command = command_task.result()
                    last_change = loop.time()
                    if command is Command.SHUTDOWN:
                        break
                    self.current = command.select(self.current, size)
                    await self.device.clear()
                    command_task = asyncio.ensure_future(commands.get())

                for index, task in list(content_tasks.items()):
                    if task not in done:
                        continue
                    del content_tasks[index]
                    frame = task.result()
                    if frame is _END:
                        stalled.add(index)
                    elif index == self.current:
                        await self.device.draw(frame)

                for task in [task for task in notification_tasks if task in done]:
                    stream = notification_tasks.pop(task)
                    notification = task.result()
                    if notification is _END:
                        continue
                    async for frame in notification.stream():
                        await self.device.draw(frame)
                    notification_tasks[asyncio.ensure_future(_pull(stream))] = stream

                if tick_task is not None and tick_task in done:
                    if loop.time() - last_change > refresh:
                        commands.put_nowait(Command.NEXT_SOURCE)
                    tick_task = asyncio.ensure_future(asyncio.sleep(self.change_check_interval))
        finally:
            pending = [command_task, *content_tasks.values(), *notification_tasks]
            if tick_task is not None:
                pending.append(tick_task)
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)

        await self.device.clear()
        await self.device.shutdown()