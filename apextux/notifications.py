"""Transient notifications: an icon, a scrolling title, a line of content and a countdown."""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from dataclasses import dataclass, replace

from apextux.content import TICK_LENGTH, TICKS_PER_SECOND, ContentProvider
from apextux.framebuffer import CHAR_HEIGHT, CHAR_WIDTH, WIDTH, FrameBuffer
from apextux.progress import ProgressBar
from apextux.text import Scrollable, ScrollableBuilder

ICON_SIZE = 24
PADDING = (3, 10)
TITLE_TOP = 3
CONTENT_POSITION = (3 + ICON_SIZE, 12)
PROGRESS_ORIGIN = (117, 29)
DEFAULT_TITLE = "Notification"

Point = tuple[int, int]


@dataclass(frozen=True)
class Icon:
    """A packed 1bpp bitmap (rows padded to whole bytes, MSB first)."""

    data: bytes
    width: int
    height: int

    @property
    def size(self) -> tuple[int, int]:
        return self.width, self.height


@dataclass(eq=False)
class Notification(ContentProvider):
    frame: FrameBuffer
    ticks: int
    title: Scrollable
    scroll: bool
    content: str
    tick_length: float = TICK_LENGTH / 1000

    async def stream(self) -> AsyncIterator[FrameBuffer]:
        """Yield one frame per tick until the countdown has run out."""
        progress = ProgressBar(PROGRESS_ORIGIN, self.ticks)
        loop = asyncio.get_running_loop()
        next_tick = loop.time()
        for tick in range(self.ticks):
            image = self.frame.copy()
            self.title.at_tick(image, tick if self.scroll else 0)
            image.draw_text(self.content, CONTENT_POSITION)
            progress.draw_at(tick, image)
            yield image
            now = loop.time()
            if next_tick > now:
                await asyncio.sleep(next_tick - now)
            next_tick = max(next_tick, now) + self.tick_length

    def name(self) -> str:
        return "notification"


@dataclass(frozen=True)
class NotificationBuilder:
    """Immutable builder; each ``with_*`` returns an updated copy."""

    title: str | None = None
    content: str | None = None
    icon: Icon | None = None

    def with_content(self, content: str) -> NotificationBuilder:
        return replace(self, content=str(content))

    def with_title(self, title: str) -> NotificationBuilder:
        return replace(self, title=str(title))

    def with_icon(self, icon: Icon) -> NotificationBuilder:
        return replace(self, icon=icon)

    def _title(self) -> str:
        return DEFAULT_TITLE if self.title is None else self.title

    def _offset(self) -> tuple[int, int]:
        icon_width, icon_height = self.icon.size if self.icon is not None else (0, 0)
        return icon_width + PADDING[0], icon_height + PADDING[1]

    def _projection(self) -> tuple[int, int]:
        offset_width, _ = self._offset()
        return WIDTH - offset_width - 3, CHAR_HEIGHT

    def _projection_characters(self) -> int:
        return self._projection()[0] // CHAR_WIDTH

    def needs_scroll(self) -> bool:
        return self._projection_characters() < len(self._title())

    def required_ticks(self) -> int:
        """One second of stillness, the time to scroll the title through, one more second."""
        scroll_time = 0
        if self.needs_scroll():
            scroll_time = (len(self._title()) - self._projection_characters() + 2) * CHAR_WIDTH
        return TICKS_PER_SECOND + scroll_time + TICKS_PER_SECOND

    def build(self) -> Notification:
        frame = FrameBuffer()
        if self.icon is not None:
            if self.icon.size != (ICON_SIZE, ICON_SIZE):
                raise ValueError("Notification icons need to be 24x24 for the time being!")
            frame.draw_bitmap(self.icon.data, self.icon.width, (0, 0))

        offset_width, _ = self._offset()
        title = (
            ScrollableBuilder()
            .with_text(self._title())
            .with_position((offset_width, TITLE_TOP))
            .with_projection(self._projection())
            .build()
        )
        return Notification(
            frame=frame,
            ticks=self.required_ticks(),
            title=title,
            scroll=self.needs_scroll(),
            content=self.content or "",
        )


class NotificationProvider(ABC):
    """A source of notifications to interrupt the regular content with."""

    @abstractmethod
    def stream(self) -> AsyncIterator[Notification]:
        """Return an async iterator of notifications."""