"""Shows a still or animated image file."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator

from apextux.config import Settings
from apextux.content import ContentProvider, register_content_provider
from apextux.framebuffer import HEIGHT, WIDTH, FrameBuffer
from apextux.image_renderer import ImageRenderer, open_image_renderer

logger = logging.getLogger(__name__)

DEFAULT_PATH = "images/sample_1.gif"
# GIF frame delays come in steps of 10 ms.
REFRESH_INTERVAL = 0.01


class ImageProvider(ContentProvider):
    def __init__(self, renderer: ImageRenderer) -> None:
        self.renderer = renderer

    def __repr__(self) -> str:
        return f"ImageProvider({self.renderer!r})"

    def render(self) -> FrameBuffer:
        buffer = FrameBuffer()
        self.renderer.draw(buffer)
        return buffer

    async def stream(self) -> AsyncIterator[FrameBuffer]:
        while True:
            yield self.render()
            await asyncio.sleep(REFRESH_INTERVAL)

    def name(self) -> str:
        return "image"


@register_content_provider
def register(config: Settings) -> ImageProvider:
    logger.info("Registering Image display source.")
    try:
        path = config.get_str("image.path")
    except (KeyError, ValueError):
        path = DEFAULT_PATH
    return ImageProvider(open_image_renderer((0, 0), (WIDTH, HEIGHT), path))