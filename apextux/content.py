"""Content providers and the registries the scheduler builds them from."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Callable
from typing import Any

from apextux.framebuffer import FrameBuffer

TICK_LENGTH = 50
TICKS_PER_SECOND = 1000 // TICK_LENGTH


class ContentProvider(ABC):
    """A source of frames for the display."""

    @abstractmethod
    def stream(self) -> AsyncIterator[FrameBuffer]:
        """Return an async iterator of frames."""

    @abstractmethod
    def name(self) -> str:
        """The key under which this provider's settings live."""


ContentFactory = Callable[[Any], ContentProvider]
NotificationFactory = Callable[[], Any]

_content_factories: list[ContentFactory] = []
_notification_factories: list[NotificationFactory] = []


def register_content_provider(factory: ContentFactory) -> ContentFactory:
    """Record a factory taking the settings; usable as a decorator."""
    if factory not in _content_factories:
        _content_factories.append(factory)
    return factory


def content_provider_factories() -> tuple[ContentFactory, ...]:
    return tuple(_content_factories)


def register_notification_provider(factory: NotificationFactory) -> NotificationFactory:
    """Record a factory taking no arguments; usable as a decorator."""
    if factory not in _notification_factories:
        _notification_factories.append(factory)
    return factory


def notification_provider_factories() -> tuple[NotificationFactory, ...]:
    return tuple(_notification_factories)