import asyncio

import pygame
import pytest

from apextux.command import Command
from apextux.framebuffer import FrameBuffer
from apextux.simulator import Simulator


@pytest.fixture
def simulator(monkeypatch):
    monkeypatch.setenv("SDL_VIDEODRIVER", "dummy")
    monkeypatch.setenv("SDL_AUDIODRIVER", "dummy")
    sim = Simulator(asyncio.Queue(), scale=2)
    yield sim
    pygame.display.quit()


def test_scale_must_be_positive(monkeypatch):
    monkeypatch.setenv("SDL_VIDEODRIVER", "dummy")
    with pytest.raises(ValueError):
        Simulator(asyncio.Queue(), scale=0)


@pytest.mark.asyncio
async def test_draw_shows_lit_pixel(simulator):
    frame = FrameBuffer()
    frame.set_pixel(3, 4, True)
    await simulator.draw(frame)
    pixels = simulator.surface_pixels()
    assert pixels[4][3] is True
    assert sum(sum(row) for row in pixels) == 1


@pytest.mark.asyncio
async def test_surface_matches_framebuffer(simulator):
    frame = FrameBuffer()
    frame.draw_line((0, 0), (127, 39))
    await simulator.draw(frame)
    pixels = simulator.surface_pixels()
    assert all(pixels[y][x] == on for (x, y), on in frame.pixels())


@pytest.mark.asyncio
async def test_clear_blanks_display(simulator):
    frame = FrameBuffer()
    frame.draw_rectangle((0, 0), (127, 39), fill=True)
    await simulator.draw(frame)
    filled = simulator.surface_pixels()
    assert sum(sum(row) for row in filled) == 128 * 40
    await simulator.clear()
    cleared = simulator.surface_pixels()
    assert sum(sum(row) for row in cleared) == 0


def test_arrow_keys_send_commands(simulator):
    assert simulator.handle_key(pygame.K_LEFT) is Command.PREVIOUS_SOURCE
    assert simulator.handle_key(pygame.K_RIGHT) is Command.NEXT_SOURCE
    assert simulator.commands.get_nowait() is Command.PREVIOUS_SOURCE
    assert simulator.commands.get_nowait() is Command.NEXT_SOURCE


def test_other_keys_are_ignored(simulator):
    assert simulator.handle_key(pygame.K_a) is None
    assert simulator.commands.empty()


@pytest.mark.asyncio
async def test_quit_event_sends_shutdown(simulator):
    pygame.event.post(pygame.event.Event(pygame.QUIT))
    await simulator.draw(FrameBuffer())
    assert simulator.commands.get_nowait() is Command.SHUTDOWN