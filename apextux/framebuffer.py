"""The 128x40 monochrome frame buffer, its drawing primitives and the device interface."""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator

WIDTH = 128
HEIGHT = 40
HEADER = 0x61
BUFFER_SIZE = WIDTH * HEIGHT // 8 + 2
_PIXEL_OFFSET = 8

CHAR_WIDTH = 6
CHAR_HEIGHT = 10

Point = tuple[int, int]
Pixel = tuple[Point, bool]

# 5x7 glyphs, one byte per column, least significant bit at the top.
_ASCII_GLYPHS = (
    "0000000000", "00005f0000", "0007000700", "147f147f14", "242a7f2a12", "2313086462", "3649552250", "0005030000",
    "001c224100", "0041221c00", "14083e0814", "08083e0808", "0050300000", "0808080808", "0060600000", "2010080402",
    "3e5149453e", "00427f4000", "4261514946", "2141454b31", "1814127f10", "2745454539", "3c4a494930", "0171090503",
    "3649494936", "064949291e", "0036360000", "0056360000", "0814224100", "1414141414", "0041221408", "0201510906",
    "324979413e", "7e1111117e", "7f49494936", "3e41414122", "7f4141221c", "7f49494941", "7f09090101", "3e41415132",
    "7f0808087f", "00417f4100", "2040413f01", "7f08142241", "7f40404040", "7f0204027f", "7f0408107f", "3e4141413e",
    "7f09090906", "3e4151215e", "7f09192946", "4649494931", "01017f0101", "3f4040403f", "1f2040201f", "7f2018207f",
    "6314081463", "0304780403", "6151494543", "007f414100", "0204081020", "0041417f00", "0402010204", "4040404040",
    "0001020400", "2054545478", "7f48444438", "3844444420", "384444487f", "3854545418", "087e090102", "081454543c",
    "7f08040478", "00447d4000", "2040443d00", "007f102844", "00417f4000", "7c04180478", "7c08040478", "3844444438",
    "7c14141408", "081414187c", "7c08040408", "4854545420", "043f444020", "3c4040207c", "1c2040201c", "3c4030403c",
    "4428102844", "0c5050503c", "4464544c44", "0008364100", "00007f0000", "0041360800", "0201020402",
)

_GLYPHS: dict[str, bytes] = {
    chr(0x20 + offset): bytes.fromhex(data) for offset, data in enumerate(_ASCII_GLYPHS)
}
_GLYPHS["\u20ac"] = bytes.fromhex("143e555541")
_GLYPHS["\u00a3"] = bytes.fromhex("487e494122")
_FALLBACK = _GLYPHS["?"]


def measure_text(text: str) -> tuple[int, int]:
    """Return the (width, height) of ``text`` drawn in the built-in 6x10 font."""
    lines = text.split("\n")
    return max(len(line) for line in lines) * CHAR_WIDTH, len(lines) * CHAR_HEIGHT


def text_bitmap(text: str) -> list[list[bool]]:
    """Render ``text`` into rows of booleans, one row per pixel line."""
    width, height = measure_text(text)
    rows = [[False] * width for _ in range(height)]
    for line_number, line in enumerate(text.split("\n")):
        top = line_number * CHAR_HEIGHT + 1
        for column, char in enumerate(line):
            left = column * CHAR_WIDTH
            for dx, bits in enumerate(_GLYPHS.get(char, _FALLBACK)):
                for dy in range(7):
                    if bits >> dy & 1:
                        rows[top + dy][left + dx] = True
    return rows


def _line_points(start: Point, end: Point) -> Iterator[Point]:
    x0, y0 = start
    x1, y1 = end
    dx = abs(x1 - x0)
    dy = -abs(y1 - y0)
    sx = 1 if x0 < x1 else -1
    sy = 1 if y0 < y1 else -1
    err = dx + dy
    while True:
        yield x0, y0
        if (x0, y0) == (x1, y1):
            return
        doubled = 2 * err
        if doubled >= dy:
            err += dy
            x0 += sx
        if doubled <= dx:
            err += dx
            y0 += sy


class FrameBuffer:
    """One bit per pixel, framed by the ``0x61`` report header and a trailing zero byte."""

    width = WIDTH
    height = HEIGHT

    def __init__(self) -> None:
        self._data = bytearray(BUFFER_SIZE)
        self._data[0] = HEADER

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FrameBuffer):
            return NotImplemented
        return self._data == other._data

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        lit = sum(on for _, on in self.pixels())
        return f"FrameBuffer(lit={lit})"

    @staticmethod
    def _locate(x: int, y: int) -> tuple[int, int]:
        index = x + y * WIDTH + _PIXEL_OFFSET
        return index // 8, 0x80 >> (index % 8)

    @staticmethod
    def _inside(x: int, y: int) -> bool:
        return 0 <= x < WIDTH and 0 <= y < HEIGHT

    def get_pixel(self, x: int, y: int) -> bool:
        if not self._inside(x, y):
            raise IndexError(f"pixel ({x}, {y}) is outside the display")
        byte, mask = self._locate(x, y)
        return bool(self._data[byte] & mask)

    def set_pixel(self, x: int, y: int, on: bool) -> None:
        """Set one pixel; coordinates outside the display are ignored."""
        if not self._inside(x, y):
            return
        byte, mask = self._locate(x, y)
        if on:
            self._data[byte] |= mask
        else:
            self._data[byte] &= ~mask & 0xFF

    def draw_pixels(self, pixels: Iterable[Pixel]) -> None:
        for (x, y), on in pixels:
            self.set_pixel(x, y, on)

    def pixels(self) -> Iterator[Pixel]:
        """Yield every pixel in row-major order."""
        for y in range(HEIGHT):
            for x in range(WIDTH):
                yield (x, y), self.get_pixel(x, y)

    def to_bytes(self) -> bytes:
        """The raw report: header byte, pixel bits (MSB first), trailing zero."""
        return bytes(self._data)

    def copy(self) -> FrameBuffer:
        duplicate = FrameBuffer()
        duplicate._data[:] = self._data
        return duplicate

    def draw_line(self, start: Point, end: Point, width: int = 1) -> None:
        steep = abs(end[1] - start[1]) > abs(end[0] - start[0])
        offsets = range(-(width // 2), width - width // 2)
        for x, y in _line_points(start, end):
            for offset in offsets:
                if steep:
                    self.set_pixel(x + offset, y, True)
                else:
                    self.set_pixel(x, y + offset, True)

    def draw_rectangle(self, top_left: Point, bottom_right: Point, fill: bool = False) -> None:
        """Draw the rectangle spanned by two corners, as a 1px outline or filled."""
        left, right = sorted((top_left[0], bottom_right[0]))
        top, bottom = sorted((top_left[1], bottom_right[1]))
        for y in range(top, bottom + 1):
            for x in range(left, right + 1):
                if fill or x in (left, right) or y in (top, bottom):
                    self.set_pixel(x, y, True)

    def draw_text(self, text: str, position: Point) -> None:
        """Draw ``text`` with its top-left corner at ``position``; only lit pixels are drawn."""
        px, py = position
        for dy, row in enumerate(text_bitmap(text)):
            for dx, on in enumerate(row):
                if on:
                    self.set_pixel(px + dx, py + dy, True)

    def draw_bitmap(self, bitmap: bytes, width: int, position: Point) -> None:
        """Draw a packed 1bpp image (rows padded to whole bytes, MSB first)."""
        stride = math.ceil(width / 8)
        if stride == 0:
            return
        px, py = position
        for dy in range(len(bitmap) // stride):
            row = bitmap[dy * stride:(dy + 1) * stride]
            for dx in range(width):
                self.set_pixel(px + dx, py + dy, bool(row[dx // 8] & (0x80 >> (dx % 8))))


class Device(ABC):
    """Something that can show frame buffers."""

    closed = False

    @abstractmethod
    async def draw(self, framebuffer: FrameBuffer) -> None:
        """Send a frame buffer to the device."""

    async def clear(self) -> None:
        """Blank the whole screen."""
        await self.draw(FrameBuffer())

    async def shutdown(self) -> None:
        """Release the device; by default this only marks it closed."""
        self.closed = True