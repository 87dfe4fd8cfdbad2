import logging
import math
from contextlib import ExitStack
from types import SimpleNamespace
from unittest import mock

import pytest

from apextux.config import Settings
from apextux.framebuffer import FrameBuffer
from apextux.providers.sysinfo import (
    DEFAULT_INTERFACE,
    DEFAULT_SENSOR,
    Sysinfo,
    calculate_max_net_rate,
    format_net_load,
    register,
)


@pytest.fixture
def system():
    counters = {"eth0": SimpleNamespace(bytes_recv=0, bytes_sent=0)}
    temperatures = {"hwmon0": [SimpleNamespace(label="CPU Temperature", current=55.0)]}
    with ExitStack() as stack:
        enter = stack.enter_context
        enter(mock.patch("psutil.cpu_percent", return_value=50.0))
        enter(mock.patch("psutil.cpu_freq", return_value=SimpleNamespace(current=3500.0)))
        enter(
            mock.patch(
                "psutil.virtual_memory",
                return_value=SimpleNamespace(used=2 * 1024**3, total=8 * 1024**3),
            )
        )
        enter(mock.patch("psutil.net_io_counters", return_value=counters))
        enter(mock.patch("psutil.sensors_temperatures", create=True, return_value=temperatures))
        yield counters


def test_net_rate_units_by_magnitude():
    assert calculate_max_net_rate(500, 0, 1000) == (500.0, 0, "B")
    assert calculate_max_net_rate(10, 2048, 1000) == (2048.0, 1, "k")
    assert calculate_max_net_rate(3 * 1024**2, 0, 1000)[1:] == (2, "M")
    assert calculate_max_net_rate(0, 5 * 1024**3, 1000)[1:] == (3, "G")


def test_net_rate_scales_with_elapsed_time():
    rate, _, _ = calculate_max_net_rate(2048, 0, 500)
    assert rate == 4096.0


def test_net_rate_with_no_elapsed_time():
    rate, power, unit = calculate_max_net_rate(100, 0, 0)
    assert math.isinf(rate)
    assert (power, unit) == (3, "G")
    rate, power, unit = calculate_max_net_rate(0, 0, 0)
    assert math.isnan(rate)
    assert (power, unit) == (0, "B")


@pytest.mark.parametrize(
    "rate, power, expected",
    [(1.5, 0, "1.5"), (100.0, 0, "100"), (123.456, 0, "123"), (12.3456, 0, "12.3")],
)
def test_format_net_load_truncates(rate, power, expected):
    assert format_net_load(rate, power) == expected


def test_format_net_load_scales_by_power():
    assert format_net_load(1536.0, 1) == "1.5"
    assert format_net_load(2 * 1024.0**2, 2) == "2"


@pytest.mark.parametrize("rate", [0.001234, 999.99, 1023.5, 7.0, 0.5])
def test_format_net_load_is_short(rate):
    text = format_net_load(rate, 0)
    assert 0 < len(text) <= 4
    assert not text.endswith(".")


def test_render_stat_draws_border_and_fill(system):
    provider = Sysinfo()
    buffer = FrameBuffer()
    provider.render_stat(0, buffer, "C:   50%", 0.5)
    assert buffer.get_pixel(127, 1)
    assert buffer.get_pixel(127, 7)
    assert buffer.get_pixel(50, 1)
    assert buffer.get_pixel(70, 4)
    assert not buffer.get_pixel(100, 4)


@pytest.mark.parametrize("fill", [math.inf, math.nan])
def test_render_stat_ignores_unbounded_fill(system, fill):
    buffer = FrameBuffer()
    Sysinfo().render_stat(1, buffer, "F: 3.50G", fill)
    assert buffer.get_pixel(127, 9)
    assert not buffer.get_pixel(80, 12)


def test_render_stat_overfull_bar_is_clipped(system):
    buffer = FrameBuffer()
    Sysinfo().render_stat(2, buffer, "M:  2.0G", 3.0)
    assert buffer.get_pixel(126, 20)


def test_render_draws_all_rows(system):
    frame = Sysinfo().render()
    for top in (1, 9, 17, 25, 33):
        assert frame.get_pixel(127, top)
    assert frame.get_pixel(70, 4)
    assert not frame.get_pixel(100, 4)


def test_render_skips_missing_interface_and_sensor(system):
    frame = Sysinfo(net_interface_name="wlan9", sensor_name="nowhere").render()
    assert frame.get_pixel(127, 17)
    assert not frame.get_pixel(127, 25)
    assert not frame.get_pixel(127, 33)


def test_render_tracks_traffic_between_polls(system):
    provider = Sysinfo()
    system["eth0"] = SimpleNamespace(bytes_recv=4096, bytes_sent=16)
    provider.render()
    assert provider._traffic["eth0"] == (4096, 16)


def test_register_reads_settings(system):
    provider = register(
        Settings(
            {
                "sysinfo": {
                    "net_interface_name": "eth0",
                    "sensor_name": "hwmon0 CPU Temperature",
                    "polling_interval": 500,
                    "net_load_max": 10,
                    "cpu_frequency_max": 5.5,
                    "temperature_max": 90,
                }
            }
        )
    )
    assert provider.polling_interval == 500
    assert provider.net_load_max == 10.0
    assert provider.cpu_frequency_max == 5.5
    assert provider.temperature_max == 90.0
    assert provider.name() == "sysinfo"


def test_register_defaults(system):
    provider = register(Settings({}))
    assert provider.net_interface_name == DEFAULT_INTERFACE
    assert provider.sensor_name == DEFAULT_SENSOR
    assert provider.polling_interval == 2000


def test_register_warns_about_missing_devices(system, caplog):
    caplog.set_level(logging.INFO)
    register(Settings({"sysinfo": {"net_interface_name": "wlan9", "sensor_name": "nowhere"}}))
    assert "Couldn't find network interface `wlan9`" in caplog.text
    assert "Couldn't find sensor `nowhere`" in caplog.text
    assert "eth0" in caplog.text


@pytest.mark.asyncio
async def test_stream_yields_frames(system):
    provider = Sysinfo(polling_interval=0)
    frames = provider.stream()
    first = await anext(frames)
    second = await anext(frames)
    await frames.aclose()
    assert first.get_pixel(127, 1)
    assert second.get_pixel(127, 33)