"""Commands sent to the scheduler."""

from __future__ import annotations

from enum import Enum, auto


class Command(Enum):
    PREVIOUS_SOURCE = auto()
    NEXT_SOURCE = auto()
    SHUTDOWN = auto()

    def select(self, current: int, count: int) -> int:
        """Return the provider index this command moves to from ``current``."""
        if count <= 0:
            raise ValueError("there are no content providers to select from")
        if self is Command.NEXT_SOURCE:
            return (current + 1) % count
        if self is Command.PREVIOUS_SOURCE:
            return count - 1 if current == 0 else (current - 1) % count
        return current