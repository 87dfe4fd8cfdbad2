"""CPU load, CPU frequency, memory, network traffic and a temperature as bar graphs."""

from __future__ import annotations

import asyncio
import logging
import math
import time
from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

import psutil

from apextux.config import Settings
from apextux.content import ContentProvider, register_content_provider
from apextux.framebuffer import WIDTH, FrameBuffer, measure_text

logger = logging.getLogger(__name__)

DEFAULT_INTERFACE = "eth0"
DEFAULT_SENSOR = "hwmon0 CPU Temperature"
DEFAULT_POLLING_INTERVAL = 2000
DEFAULT_NET_LOAD_MAX = 100.0
DEFAULT_CPU_FREQUENCY_MAX = 7.0
DEFAULT_TEMPERATURE_MAX = 100.0

_RIGHT = WIDTH - 1
_INT_LIMIT = 2**31 - 1


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


def _ratio(numerator: float, denominator: float) -> float:
    if denominator == 0:
        if numerator == 0:
            return math.nan
        return math.copysign(math.inf, numerator)
    return numerator / denominator


def calculate_max_net_rate(
    received: int, transmitted: int, elapsed_ms: float
) -> tuple[float, int, str]:
    """The larger of both directions in bytes per second, with its power of 1024 and unit."""
    rate = _ratio(float(max(received, transmitted)), elapsed_ms / 1000.0)
    if rate > 1024.0**3:
        return rate, 3, "G"
    if rate > 1024.0**2:
        return rate, 2, "M"
    if rate > 1024.0:
        return rate, 1, "k"
    return rate, 0, "B"


def _display_float(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    if value.is_integer():
        return str(int(value))
    text = repr(value)
    if "e" in text or "E" in text:
        text = format(Decimal(text), "f")
    return text


def format_net_load(rate: float, power: int) -> str:
    """The scaled rate cut to at most four characters, without a dangling point."""
    text = _display_float(rate / 1024.0**power)[:4]
    if text.endswith("."):
        text = text.replace(".", "")
    return text


def _net_counters() -> dict[str, Any]:
    return dict(psutil.net_io_counters(pernic=True) or {})


def _temperatures() -> list[tuple[str, str, float]]:
    reader = getattr(psutil, "sensors_temperatures", None)
    if reader is None:
        return []
    try:
        chips = reader() or {}
    except (OSError, RuntimeError):
        return []
    found = []
    for chip, entries in chips.items():
        for entry in entries:
            label = entry.label or ""
            found.append((f"{chip} {label}".strip(), label, float(entry.current)))
    return found


def _find_temperature(sensor_name: str) -> float | None:
    for full, label, current in _temperatures():
        if sensor_name in (full, label):
            return current
    return None


@dataclass(eq=False)
class Sysinfo(ContentProvider):
    net_interface_name: str = DEFAULT_INTERFACE
    sensor_name: str = DEFAULT_SENSOR
    polling_interval: int = DEFAULT_POLLING_INTERVAL
    net_load_max: float = DEFAULT_NET_LOAD_MAX
    cpu_frequency_max: float = DEFAULT_CPU_FREQUENCY_MAX
    temperature_max: float = DEFAULT_TEMPERATURE_MAX
    _tick: int = field(init=False, repr=False, default=0)
    _last_tick: int = field(init=False, repr=False, default=0)
    _counters: dict[str, Any] = field(init=False, repr=False, default_factory=dict)
    _traffic: dict[str, tuple[int, int]] = field(init=False, repr=False, default_factory=dict)

    def __post_init__(self) -> None:
        psutil.cpu_percent(interval=None)
        self._counters = _net_counters()
        self._tick = _now_ms()
        self._last_tick = 0

    def _poll(self) -> None:
        counters = _net_counters()
        traffic = {}
        for name, current in counters.items():
            previous = self._counters.get(name)
            received = current.bytes_recv - (previous.bytes_recv if previous else 0)
            transmitted = current.bytes_sent - (previous.bytes_sent if previous else 0)
            traffic[name] = (max(0, received), max(0, transmitted))
        self._counters = counters
        self._traffic = traffic
        self._last_tick = self._tick
        self._tick = _now_ms()

    def render(self) -> FrameBuffer:
        self._poll()

        load = float(psutil.cpu_percent(interval=None))
        frequency_info = psutil.cpu_freq()
        freq = (frequency_info.current if frequency_info else 0.0) / 1000.0
        memory = psutil.virtual_memory()
        mem_used = memory.used / 1024**3

        buffer = FrameBuffer()
        self.render_stat(0, buffer, f"C: {load:>4.0f}%", load / 100.0)
        self.render_stat(
            1, buffer, f"F: {freq:>4.2f}G", _ratio(freq, self.cpu_frequency_max)
        )
        self.render_stat(
            2, buffer, f"M: {mem_used:>4.1f}G", _ratio(memory.used, memory.total)
        )

        traffic = self._traffic.get(self.net_interface_name)
        if traffic is not None:
            received, transmitted = traffic
            direction = "I" if received > transmitted else "O"
            rate, power, unit = calculate_max_net_rate(
                received, transmitted, self._tick - self._last_tick
            )
            load_text = format_net_load(rate, power)
            try:
                self.render_stat(
                    3,
                    buffer,
                    f"{direction}: {load_text:>4}{unit}",
                    _ratio(rate, self.net_load_max * 1024.0**2),
                )
            except (ValueError, OverflowError) as error:
                logger.debug("Failed to draw the network load: %s", error)

        temperature = _find_temperature(self.sensor_name)
        if temperature is not None:
            try:
                self.render_stat(
                    4,
                    buffer,
                    f"T: {temperature:>4.1f}C",
                    _ratio(temperature, self.temperature_max),
                )
            except (ValueError, OverflowError) as error:
                logger.debug("Failed to draw the temperature: %s", error)

        return buffer

    def render_stat(self, slot: int, buffer: FrameBuffer, text: str, fill: float) -> None:
        """Draw a labelled bar in one of the five rows, filled to ``fill`` (0 to 1)."""
        text_width, _ = measure_text(text)
        slot_y = slot * 8 + 1
        buffer.draw_text(text, (0, slot_y))

        bar_start = text_width + 2
        if math.isinf(fill) or math.isnan(fill):
            fill_width = 0
        else:
            fill_width = max(-_INT_LIMIT, min(_INT_LIMIT, math.floor(fill * (_RIGHT - bar_start))))

        buffer.draw_rectangle((bar_start, slot_y), (_RIGHT, slot_y + 6))
        buffer.draw_rectangle(
            (bar_start + 1, slot_y + 1), (bar_start + fill_width, slot_y + 5), fill=True
        )

    async def stream(self) -> AsyncIterator[FrameBuffer]:
        while True:
            try:
                yield self.render()
            except (OSError, RuntimeError, ValueError) as error:
                logger.error("Failed to render system information: %s", error)
            await asyncio.sleep(self.polling_interval / 1000)

    def name(self) -> str:
        return "sysinfo"


def _setting(getter: Any, key: str, default: Any) -> Any:
    try:
        return getter(key)
    except (KeyError, ValueError):
        return default


@register_content_provider
def register(config: Settings) -> Sysinfo:
    logger.info("Registering Sysinfo display source.")

    provider = Sysinfo(
        net_interface_name=_setting(
            config.get_str, "sysinfo.net_interface_name", DEFAULT_INTERFACE
        ),
        sensor_name=_setting(config.get_str, "sysinfo.sensor_name", DEFAULT_SENSOR),
        polling_interval=_setting(
            config.get_int, "sysinfo.polling_interval", DEFAULT_POLLING_INTERVAL
        ),
        net_load_max=_setting(config.get_float, "sysinfo.net_load_max", DEFAULT_NET_LOAD_MAX),
        cpu_frequency_max=_setting(
            config.get_float, "sysinfo.cpu_frequency_max", DEFAULT_CPU_FREQUENCY_MAX
        ),
        temperature_max=_setting(
            config.get_float, "sysinfo.temperature_max", DEFAULT_TEMPERATURE_MAX
        ),
    )

    interfaces = _net_counters()
    if provider.net_interface_name not in interfaces:
        logger.warning("Couldn't find network interface `%s`", provider.net_interface_name)
        logger.info("Instead, found those interfaces:")
        for interface_name in interfaces:
            logger.info("\t%s", interface_name)

    sensors = _temperatures()
    if not any(provider.sensor_name in (full, label) for full, label, _ in sensors):
        logger.warning("Couldn't find sensor `%s`", provider.sensor_name)
        logger.info("Instead, found those sensors:")
        for full, _, current in sensors:
            logger.info("\t%s: %.1f", full, current)

    return provider