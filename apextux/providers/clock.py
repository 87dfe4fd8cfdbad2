"""A clock showing the current local time in the middle of the display."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from apextux.config import Settings
from apextux.content import ContentProvider, register_content_provider
from apextux.framebuffer import HEIGHT, WIDTH, FrameBuffer, measure_text

logger = logging.getLogger(__name__)

REFRESH_INTERVAL = 0.05


class ClockFormat(Enum):
    """The clock formats a user can choose from."""

    TWELVE = "%I:%M:%S %p"
    TWENTY_FOUR = "%H:%M:%S"
    LOCALE = "%X"


@dataclass
class Clock(ContentProvider):
    clock_format: ClockFormat = ClockFormat.LOCALE

    def format_time(self, moment: datetime) -> str:
        return moment.strftime(self.clock_format.value)

    def render(self) -> FrameBuffer:
        """Draw the current time centred on a fresh frame."""
        text = self.format_time(datetime.now())
        width, height = measure_text(text)
        buffer = FrameBuffer()
        buffer.draw_text(text, (WIDTH // 2 - width // 2, HEIGHT // 2 - height // 2))
        return buffer

    async def stream(self) -> AsyncIterator[FrameBuffer]:
        while True:
            try:
                yield self.render()
            except ValueError as error:
                logger.error("Failed to render the clock: %s", error)
            await asyncio.sleep(REFRESH_INTERVAL)

    def name(self) -> str:
        return "clock"


@register_content_provider
def register(config: Settings) -> Clock:
    logger.info("Registering Clock display source.")
    try:
        twelve_hour = config.get_bool("clock.twelve_hour")
    except (KeyError, ValueError):
        return Clock(ClockFormat.LOCALE)
    return Clock(ClockFormat.TWELVE if twelve_hour else ClockFormat.TWENTY_FOUR)