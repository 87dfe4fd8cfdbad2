"""A window that shows the display, for working without the keyboard attached."""

from __future__ import annotations

import asyncio
import logging

import pygame

from apextux.command import Command
from apextux.framebuffer import HEIGHT, WIDTH, Device, FrameBuffer

logger = logging.getLogger(__name__)

WINDOW_TITLE = "apextux simulator"
ON_COLOR = (255, 255, 255)
OFF_COLOR = (0, 0, 0)

_KEY_COMMANDS = {
    pygame.K_LEFT: Command.PREVIOUS_SOURCE,
    pygame.K_RIGHT: Command.NEXT_SOURCE,
}


class Simulator(Device):
    """Draws frames into a scaled window; arrow keys switch sources, closing shuts down."""

    def __init__(self, commands: asyncio.Queue[Command], scale: int = 4) -> None:
        if scale < 1:
            raise ValueError("the scale must be at least 1")
        self.commands = commands
        self.scale = scale
        self._surface = pygame.Surface((WIDTH, HEIGHT))
        self._surface.fill(OFF_COLOR)
        pygame.display.init()
        self._window = pygame.display.set_mode((WIDTH * scale, HEIGHT * scale))
        pygame.display.set_caption(WINDOW_TITLE)
        self._closed = False

    def __repr__(self) -> str:
        return f"Simulator(scale={self.scale}, closed={self._closed})"

    def handle_key(self, key: int) -> Command | None:
        """Send the command bound to a released key; return it, or None if unbound."""
        command = _KEY_COMMANDS.get(key)
        if command is not None:
            self.commands.put_nowait(command)
        return command

    def _process_events(self) -> None:
        for event in pygame.event.get():
            if event.type == pygame.KEYUP:
                self.handle_key(event.key)
            elif event.type == pygame.QUIT:
                self.commands.put_nowait(Command.SHUTDOWN)
                self._closed = True
                break

    def _present(self) -> None:
        if self._closed:
            return
        scaled = pygame.transform.scale(self._surface, self._window.get_size())
        self._window.blit(scaled, (0, 0))
        pygame.display.flip()
        self._process_events()

    async def draw(self, framebuffer: FrameBuffer) -> None:
        for (x, y), on in framebuffer.pixels():
            self._surface.set_at((x, y), ON_COLOR if on else OFF_COLOR)
        self._present()

    async def clear(self) -> None:
        await self.draw(FrameBuffer())

    async def shutdown(self) -> None:
        self._closed = True
        pygame.display.quit()

    def surface_pixels(self) -> list[list[bool]]:
        """The simulated display as rows of booleans, True where a pixel is lit."""
        return [
            [self._surface.get_at((x, y)).r > 127 for x in range(WIDTH)]
            for y in range(HEIGHT)
        ]