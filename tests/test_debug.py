import pytest

from apextux.config import Settings
from apextux.providers.debug import DummyProvider, register


def test_register_returns_dummy():
    provider = register(Settings())
    assert provider.name() == "dummy"
    assert provider.interval > 0


@pytest.mark.asyncio
async def test_first_frame_has_lines_at_origin():
    stream = DummyProvider(interval=0).stream()
    frame = await anext(stream)
    await stream.aclose()
    assert frame.get_pixel(0, 20) is True
    assert frame.get_pixel(64, 0) is True
    assert frame.get_pixel(64, 20) is False


@pytest.mark.asyncio
async def test_lines_move_each_frame():
    stream = DummyProvider(interval=0).stream()
    await anext(stream)
    second = await anext(stream)
    await stream.aclose()
    assert second.get_pixel(1, 20) is True
    assert second.get_pixel(64, 1) is True
    assert second.get_pixel(64, 20) is False


@pytest.mark.asyncio
async def test_vertical_line_wraps_around():
    stream = DummyProvider(interval=0).stream()
    frames = [await anext(stream) for _ in range(129)]
    await stream.aclose()
    wrapped = frames[128]
    assert wrapped.get_pixel(0, 30) is True
    assert wrapped.get_pixel(100, 30) is False