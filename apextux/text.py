"""Text rendered once to an off-screen canvas and shown through a scrolling window."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from typing import Protocol

from apextux.framebuffer import measure_text, text_bitmap

Point = tuple[int, int]
Size = tuple[int, int]
Pixel = tuple[Point, bool]

DEFAULT_SPACING = 5


class PixelTarget(Protocol):
    def draw_pixels(self, pixels: Iterable[Pixel]) -> None: ...


class ScrollableCanvas:
    """A width x height bit grid stored row by row."""

    def __init__(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self.bits = [False] * (width * height)

    def __repr__(self) -> str:
        return f"ScrollableCanvas({self.width}x{self.height})"

    @property
    def size(self) -> Size:
        return self.width, self.height

    def draw_pixels(self, pixels: Iterable[Pixel]) -> None:
        for (x, y), on in pixels:
            if 0 <= x < self.width and 0 <= y < self.height:
                self.bits[x + y * self.width] = on

    def clear(self, on: bool = False) -> None:
        self.bits = [on] * (self.width * self.height)

    def get(self, index: int) -> bool:
        return self.bits[index]


@dataclass(frozen=True)
class ScrollableBuilder:
    """Immutable builder; each ``with_*`` returns an updated copy."""

    text: str = ""
    spacing: int | None = None
    position: Point | None = None
    projection: Size | None = None

    def with_text(self, text: str) -> ScrollableBuilder:
        return replace(self, text=str(text))

    def with_custom_spacing(self, spacing: int) -> ScrollableBuilder:
        return replace(self, spacing=spacing)

    def with_position(self, position: Point) -> ScrollableBuilder:
        return replace(self, position=position)

    def with_projection(self, projection: Size) -> ScrollableBuilder:
        return replace(self, projection=projection)

    def _spacing(self) -> int:
        return DEFAULT_SPACING if self.spacing is None else self.spacing

    def build(self) -> Scrollable:
        text_width, text_height = measure_text(self.text)
        canvas = ScrollableCanvas(text_width + self._spacing(), text_height)
        canvas.draw_pixels(
            ((x, y), True)
            for y, row in enumerate(text_bitmap(self.text))
            for x, on in enumerate(row)
            if on
        )
        return Scrollable(
            canvas=canvas,
            projection=self.projection or canvas.size,
            position=self.position or (0, 0),
            spacing=self._spacing(),
        )


@dataclass
class Scrollable:
    canvas: ScrollableCanvas
    projection: Size
    position: Point
    spacing: int
    scroll: int = field(default=0)

    def at_tick(self, target: PixelTarget, tick: int) -> None:
        """Draw the window onto ``target`` scrolled by ``tick`` columns, wrapping around."""
        canvas_width = self.canvas.width
        proj_width, proj_height = self.projection
        px, py = self.position
        bits = self.canvas.bits
        scroll = tick % canvas_width
        wraps = scroll + proj_width >= canvas_width and proj_width < canvas_width
        pixels: list[Pixel] = []
        for row in range(proj_height):
            start = scroll + row * canvas_width
            stop = min(start + proj_width, (row + 1) * canvas_width)
            pixels.extend(
                ((px + i - start, py + row), bits[i]) for i in range(start, stop) if i < len(bits)
            )
            if wraps:
                line_start = row * canvas_width
                overflow = scroll + proj_width - canvas_width
                shift = proj_width - overflow
                pixels.extend(
                    ((px + i - line_start + shift, py + row), bits[i])
                    for i in range(line_start, line_start + overflow)
                    if i < len(bits)
                )
        target.draw_pixels(pixels)

    def draw(self, target: PixelTarget) -> None:
        self.at_tick(target, self.scroll)

    def advance(self) -> None:
        self.scroll += 1


class StatefulScrollable:
    """A scrollable that remembers its builder so it can be re-rendered on change."""

    def __init__(self, builder: ScrollableBuilder) -> None:
        self.builder = builder
        self.text = builder.build()

    def update(self, text: str) -> bool:
        """Re-render if ``text`` differs; return whether it did."""
        if self.builder.text == text:
            return False
        builder = self.builder.with_text(text)
        self.text = builder.build()
        self.builder = builder
        return True