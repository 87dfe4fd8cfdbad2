"""Shows the track that a media player is playing, with a progress bar."""

from __future__ import annotations

import asyncio
import functools
import logging
import math
from collections.abc import AsyncIterable, AsyncIterator, Callable

from apextux.content import ContentProvider
from apextux.framebuffer import FrameBuffer
from apextux.music import Metadata, PlaybackStatus, Player, PlayerEvent, Progress
from apextux.text import Scrollable, ScrollableBuilder

logger = logging.getLogger(__name__)

UNKNOWN_TITLE = "Unknown title"
UNKNOWN_ARTIST = "Unknown artist"
IDLE_TEXT = "No player found"

ICON_ORIGIN = (5, 5)
TEXT_LEFT = 5 + 3 + 24
TITLE_POSITION = (TEXT_LEFT, 3)
ARTIST_POSITION = (TEXT_LEFT, 3 + 10)
PROJECTION = (16 * 6, 10)
SPACING = 10
SCROLL_THRESHOLD = 16

BAR_LEFT = 3
BAR_ROW = 35
BAR_STROKE = 3
BAR_SPAN = 128 - 2 * 3

EVENT_INTERVAL = 0.1

EventSource = Callable[[], AsyncIterable[PlayerEvent]]


def _player_template() -> FrameBuffer:
    base = FrameBuffer()
    for start, end in (((0, 39), (127, 39)), ((0, 39), (0, 39 - 5)), ((127, 39), (127, 39 - 5))):
        base.draw_line(start, end)
    return base


def _draw_note(buffer: FrameBuffer, origin: tuple[int, int]) -> None:
    ox, oy = origin
    head_x, head_y, radius = ox + 6, oy + 18, 4
    buffer.draw_pixels(
        ((head_x + dx, head_y + dy), True)
        for dy in range(-radius, radius + 1)
        for dx in range(-radius - 1, radius + 2)
        if (dx / (radius + 1)) ** 2 + (dy / radius) ** 2 <= 1.0
    )
    buffer.draw_rectangle((ox + 10, oy + 2), (ox + 11, oy + 18), fill=True)
    buffer.draw_line((ox + 11, oy + 2), (ox + 19, oy + 8), 2)
    buffer.draw_line((ox + 19, oy + 8), (ox + 19, oy + 12))


def _draw_pause(buffer: FrameBuffer, origin: tuple[int, int]) -> None:
    ox, oy = origin
    buffer.draw_rectangle((ox + 5, oy + 3), (ox + 9, oy + 20), fill=True)
    buffer.draw_rectangle((ox + 14, oy + 3), (ox + 18, oy + 20), fill=True)


@functools.cache
def _play_template() -> FrameBuffer:
    base = _player_template()
    _draw_note(base, ICON_ORIGIN)
    return base


@functools.cache
def _pause_template() -> FrameBuffer:
    base = _player_template()
    _draw_pause(base, ICON_ORIGIN)
    return base


@functools.cache
def _idle_template() -> FrameBuffer:
    base = _pause_template().copy()
    base.draw_text(IDLE_TEXT, (TEXT_LEFT, 3))
    return base


def _completion(position: float, length: float) -> float:
    if length == 0:
        ratio = math.nan if position == 0 else math.copysign(math.inf, position)
    else:
        ratio = position / length
    if math.isnan(ratio):
        return 0.0
    return min(max(ratio, 0.0), 1.0)


class _ScrollingLine:
    """A line of scrolling text that is only re-rendered when its text changes."""

    def __init__(self, text: str, position: tuple[int, int]) -> None:
        self.position = position
        self.text = text
        self.scrollable: Scrollable = self._build(text)

    def _build(self, text: str) -> Scrollable:
        return (
            ScrollableBuilder()
            .with_text(text)
            .with_custom_spacing(SPACING)
            .with_position(self.position)
            .with_projection(PROJECTION)
            .build()
        )

    def update(self, text: str) -> bool:
        if text == self.text:
            return False
        self.scrollable = self._build(text)
        self.text = text
        return True


class MediaPlayerRenderer:
    """Turns player snapshots into frames; long titles scroll one pixel per update."""

    def __init__(self) -> None:
        self._artist = _ScrollingLine(UNKNOWN_ARTIST, ARTIST_POSITION)
        self._title = _ScrollingLine(UNKNOWN_TITLE, TITLE_POSITION)

    def update(self, progress: Progress[Metadata]) -> FrameBuffer:
        template = (
            _play_template() if progress.status is PlaybackStatus.PLAYING else _pause_template()
        )
        display = template.copy()
        metadata = progress.metadata

        try:
            length = float(metadata.length())
        except Exception:  # an unknown length leaves the bar empty
            length = 0.0
        pixels = int(BAR_SPAN * _completion(float(progress.position), length))
        display.draw_line((BAR_LEFT, BAR_ROW), (pixels + BAR_LEFT, BAR_ROW), BAR_STROKE)

        artists = metadata.artists()
        title = metadata.title()

        for line, text in ((self._artist, artists), (self._title, title)):
            if not line.update(text) and len(text.encode("utf-8")) > SCROLL_THRESHOLD:
                line.scrollable.advance()

        self._title.scrollable.draw(display)
        self._artist.scrollable.draw(display)
        return display


async def _timer_events(interval: float) -> AsyncIterator[PlayerEvent]:
    while True:
        await asyncio.sleep(interval)
        yield PlayerEvent.TIMER


class MediaPlayerProvider(ContentProvider):
    """Follows a player, redrawing on every event it reports.

    ``events`` is called for a fresh event stream each time the provider
    (re)connects; by default a timer fires every 100 ms.
    """

    def __init__(self, player: Player, events: EventSource | None = None) -> None:
        self.player = player
        self._events: EventSource = events or (lambda: _timer_events(EVENT_INTERVAL))

    def __repr__(self) -> str:
        return f"MediaPlayerProvider({self.player!r})"

    async def stream(self) -> AsyncIterator[FrameBuffer]:
        renderer = MediaPlayerRenderer()
        while True:
            yield _idle_template().copy()
            logger.info("Connected to music player: %s", await self.player.name())
            async for _event in self._events():
                try:
                    progress = await self.player.progress()
                except Exception as error:  # the player vanished; start over
                    logger.info("Lost the music player: %s", error)
                    break
                try:
                    frame = renderer.update(progress)
                except Exception as error:
                    logger.debug("Failed to render the player state: %s", error)
                    continue
                yield frame

    def name(self) -> str:
        return "mpris2"