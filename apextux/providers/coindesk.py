"""The current Bitcoin price as published by the CoinDesk price index."""

from __future__ import annotations

import asyncio
import logging
import math
from collections.abc import AsyncIterator, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

import requests

from apextux.config import Settings
from apextux.content import ContentProvider, register_content_provider
from apextux.framebuffer import HEIGHT, FrameBuffer, measure_text

logger = logging.getLogger(__name__)

COINDESK_URL = "https://api.coindesk.com/v1/bpi/currentprice.json"
APP_USER_AGENT = "apextux"
REFETCH_INTERVAL = 60.0
RENDER_INTERVAL = 0.05
REQUEST_TIMEOUT = 10.0
TEXT_LEFT = 24
ICON_SIZE = 20
_ICON_STROKE = 2


@dataclass(frozen=True)
class Currency:
    code: str
    symbol: str
    rate: str
    description: str
    rate_float: float


@dataclass(frozen=True)
class BitcoinPrice:
    usd: Currency
    gbp: Currency
    eur: Currency


class Target(Enum):
    """The currency the price is shown in."""

    EUR = "EUR"
    USD = "USD"
    GBP = "GBP"

    def format(self, price: BitcoinPrice) -> str:
        if self is Target.EUR:
            return f"{price.eur.rate}\u20ac"
        if self is Target.GBP:
            return f"\u00a3{price.gbp.rate}"
        return f"${price.usd.rate}"


_TARGET_NAMES = {
    "USD": Target.USD,
    "usd": Target.USD,
    "dollar": Target.USD,
    "eur": Target.EUR,
    "EUR": Target.EUR,
    "euro": Target.EUR,
    "Euro": Target.EUR,
    "gbp": Target.GBP,
    "GBP": Target.GBP,
}


def parse_target(value: str) -> Target:
    """Map a user supplied currency name to a target; raise ValueError if unknown."""
    try:
        return _TARGET_NAMES[value]
    except KeyError:
        raise ValueError("Unknown target currency!") from None


def _draw_coin(buffer: FrameBuffer, origin: tuple[int, int]) -> None:
    ox, oy = origin
    centre = (ICON_SIZE - 1) / 2
    outer = ICON_SIZE / 2
    inner = outer - _ICON_STROKE
    buffer.draw_pixels(
        ((ox + dx, oy + dy), True)
        for dy in range(ICON_SIZE)
        for dx in range(ICON_SIZE)
        if inner < math.hypot(dx - centre, dy - centre) <= outer
    )
    glyph_width, glyph_height = measure_text("B")
    buffer.draw_text(
        "B", (ox + (ICON_SIZE - glyph_width) // 2 + 1, oy + (ICON_SIZE - glyph_height) // 2)
    )


@dataclass(frozen=True)
class Status:
    updated: str
    updated_iso: str
    updateduk: str
    disclaimer: str
    chart_name: str
    bpi: BitcoinPrice

    def render(self, target: Target) -> FrameBuffer:
        """Draw the coin icon at the left and the price next to it."""
        buffer = FrameBuffer()
        _draw_coin(buffer, (0, HEIGHT // 2 - ICON_SIZE // 2))
        text = target.format(self.bpi)
        _, text_height = measure_text(text)
        buffer.draw_text(text, (TEXT_LEFT, HEIGHT // 2 - text_height // 2))
        return buffer


def _currency(data: Mapping[str, Any]) -> Currency:
    return Currency(
        code=str(data["code"]),
        symbol=str(data["symbol"]),
        rate=str(data["rate"]),
        description=str(data["description"]),
        rate_float=float(data["rate_float"]),
    )


def parse_status(data: Mapping[str, Any]) -> Status:
    """Build a status from the decoded JSON document; raise ValueError if malformed."""
    try:
        time = data["time"]
        bpi = data["bpi"]
        return Status(
            updated=str(time["updated"]),
            updated_iso=str(time["updatedISO"]),
            updateduk=str(time["updateduk"]),
            disclaimer=str(data["disclaimer"]),
            chart_name=str(data["chartName"]),
            bpi=BitcoinPrice(
                usd=_currency(bpi["USD"]),
                gbp=_currency(bpi["GBP"]),
                eur=_currency(bpi["EUR"]),
            ),
        )
    except (KeyError, TypeError, ValueError) as error:
        raise ValueError(f"malformed price data: {error}") from error


class Coindesk(ContentProvider):
    """Refetches the price every minute and shows the latest rendering in between."""

    def __init__(self, target: Target = Target.USD, session: Any = None) -> None:
        self.target = target
        self.session = requests.Session() if session is None else session
        self.session.headers.update(
            {"User-Agent": APP_USER_AGENT, "Content-Type": "application/json"}
        )
        self.refetch_interval = REFETCH_INTERVAL
        self.render_interval = RENDER_INTERVAL
        self.timeout = REQUEST_TIMEOUT

    def __repr__(self) -> str:
        return f"Coindesk(target={self.target})"

    async def fetch(self) -> Status:
        response = await asyncio.to_thread(
            self.session.get, COINDESK_URL, timeout=self.timeout
        )
        response.raise_for_status()
        return parse_status(response.json())

    async def stream(self) -> AsyncIterator[FrameBuffer]:
        loop = asyncio.get_running_loop()
        buffer = FrameBuffer()
        next_fetch = loop.time()
        while True:
            if loop.time() >= next_fetch:
                next_fetch = loop.time() + self.refetch_interval
                try:
                    buffer = (await self.fetch()).render(self.target)
                except (requests.RequestException, ValueError) as error:
                    logger.error("Failed to fetch the Bitcoin price: %s", error)
            yield buffer.copy()
            await asyncio.sleep(self.render_interval)

    def name(self) -> str:
        return "coindesk"


@register_content_provider
def register(config: Settings) -> Coindesk:
    logger.info("Registering Coindesk display source.")
    try:
        currency = config.get_str("crypto.currency")
    except (KeyError, ValueError):
        currency = "USD"
    try:
        target = parse_target(currency)
    except ValueError:
        target = Target.USD
    return Coindesk(target)