"""A circular countdown indicator."""

from __future__ import annotations

import math
from typing import Protocol

from collections.abc import Iterable

Point = tuple[int, int]


class PixelTarget(Protocol):
    def draw_pixels(self, pixels: Iterable[tuple[Point, bool]]) -> None: ...


class ProgressBar:
    """An arc starting at twelve o'clock that closes clockwise as progress grows."""

    DIAMETER = 10
    STROKE = 2
    START_ANGLE = 90.0

    def __init__(self, origin: Point, maximum: float) -> None:
        self.origin = origin
        self.maximum = float(maximum)

    def angle(self, current: float) -> float:
        """The arc's sweep in degrees; negative means clockwise."""
        return -(current / self.maximum) * 360.0

    def _arc_pixels(self, sweep: float) -> list[tuple[Point, bool]]:
        if sweep == 0:
            return []
        ox, oy = self.origin
        centre = (self.DIAMETER - 1) / 2
        outer = self.DIAMETER / 2
        inner = outer - self.STROKE
        extent = abs(sweep)
        pixels = []
        for dy in range(self.DIAMETER):
            for dx in range(self.DIAMETER):
                distance = math.hypot(dx - centre, dy - centre)
                if not inner < distance <= outer:
                    continue
                if extent < 360.0:
                    angle = math.degrees(math.atan2(centre - dy, dx - centre)) % 360.0
                    if sweep < 0:
                        delta = (self.START_ANGLE - angle) % 360.0
                    else:
                        delta = (angle - self.START_ANGLE) % 360.0
                    if delta > extent:
                        continue
                pixels.append(((ox + dx, oy + dy), True))
        return pixels

    def draw_at(self, current: float, target: PixelTarget) -> None:
        target.draw_pixels(self._arc_pixels(self.angle(current)))