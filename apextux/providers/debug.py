"""A test pattern: a vertical and a horizontal line sweeping across the display."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from dataclasses import dataclass

from apextux.config import Settings
from apextux.content import ContentProvider, register_content_provider
from apextux.framebuffer import HEIGHT, WIDTH, FrameBuffer

logger = logging.getLogger(__name__)

LINE_WIDTH = 2


@dataclass
class DummyProvider(ContentProvider):
    interval: float = 0.05

    async def stream(self) -> AsyncIterator[FrameBuffer]:
        x_index = 0
        y_index = 0
        while True:
            display = FrameBuffer()
            display.draw_line((x_index, 0), (x_index, HEIGHT - 1), LINE_WIDTH)
            display.draw_line((0, y_index), (WIDTH - 1, y_index), LINE_WIDTH)
            yield display
            await asyncio.sleep(self.interval)
            x_index = (x_index + 1) % WIDTH
            y_index = (y_index + 1) % HEIGHT

    def name(self) -> str:
        return "dummy"


@register_content_provider
def register(config: Settings) -> DummyProvider:
    logger.info("Registering dummy display source.")
    return DummyProvider()