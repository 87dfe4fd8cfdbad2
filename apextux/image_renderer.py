"""Still and animated images reduced to 1bpp frames for the display."""

from __future__ import annotations

import io
import logging
import os
import time
from collections.abc import Iterable, Sequence

from PIL import Image, ImageSequence

from apextux.framebuffer import HEIGHT, WIDTH, FrameBuffer, measure_text, text_bitmap

logger = logging.getLogger(__name__)

DISPLAY_WIDTH = WIDTH
DISPLAY_HEIGHT = HEIGHT
STILL_IMAGE_DELAY = 500
ERROR_TEXT = "Image missing"

Point = tuple[int, int]


def _rgba(image: Image.Image) -> Image.Image:
    return image if image.mode == "RGBA" else image.convert("RGBA")


def _visible_extent(image: Image.Image, image_height: int, image_width: int) -> tuple[int, int]:
    rows = max(0, min(image_height, image.height, DISPLAY_HEIGHT))
    columns = max(0, min(image_width, image.width, DISPLAY_WIDTH))
    return rows, columns


def median_color_value(image: Image.Image, image_height: int, image_width: int) -> int:
    """The alpha-weighted median grey level of the visible part, never below 1."""
    rgba = _rgba(image)
    pixels = rgba.load()
    rows, columns = _visible_extent(rgba, image_height, image_width)
    colors = [0] * 256
    total_alpha = 0
    for y in range(rows):
        for x in range(columns):
            r, g, b, a = pixels[x, y]
            colors[(r + g + b) // 3] += a
            total_alpha += a
    total_alpha //= 255

    accumulated = 0
    for value, count in enumerate(colors):
        accumulated += count // 255
        if accumulated >= total_alpha // 2:
            return value or 1
    return 1


def read_image(image: Image.Image, image_height: int, image_width: int) -> bytes:
    """Threshold the image at its median grey level into packed rows, MSB first."""
    median = median_color_value(image, image_height, image_width)
    rgba = _rgba(image)
    pixels = rgba.load()
    rows, columns = _visible_extent(rgba, image_height, image_width)
    stride = max(1, (image_width + 7) // 8)
    data = bytearray()
    for y in range(rows):
        row = bytearray(stride)
        for x in range(columns):
            r, g, b, _ = pixels[x, y]
            if r // 3 + g // 3 + b // 3 >= median:
                row[x // 8] |= 0x80 >> (x % 8)
        data += row
    return bytes(data)


def fit_image(image: Image.Image, size: Point) -> Image.Image:
    """Shrink an image that is too tall, or else too wide, keeping its aspect ratio."""
    max_width, max_height = size
    if image.height > max_height:
        width = image.width * max_height // image.height
        height = max_height
    elif image.width > max_width:
        width = max_width
        height = image.height * max_width // image.width
    else:
        return image
    return image.resize((max(width, 1), max(height, 1)), Image.Resampling.NEAREST)


class ImageRenderer:
    """Cycles through decoded frames, each shown for at least its delay in milliseconds."""

    def __init__(
        self,
        origin: Point,
        stop: Point,
        frames: Iterable[bytes],
        delays: Iterable[int],
    ) -> None:
        self.origin = origin
        self.stop = stop
        self.frames = [bytes(frame) for frame in frames]
        self.delays = [int(delay) for delay in delays]
        if not self.frames:
            raise ValueError("an image renderer needs at least one frame")
        if len(self.frames) != len(self.delays):
            raise ValueError("every frame needs exactly one delay")
        self.current_frame = 0
        self._last_update = time.monotonic()

    def __repr__(self) -> str:
        return f"ImageRenderer(frames={len(self.frames)}, current={self.current_frame})"

    def draw(self, target: FrameBuffer) -> bool:
        """Draw the current frame; return True when the animation wrapped to its start."""
        index = self.current_frame
        target.draw_bitmap(self.frames[index], self.stop[0] - self.origin[0], self.origin)

        now = time.monotonic()
        if (now - self._last_update) * 1000 >= self.delays[index]:
            self._last_update = now
            following = index + 1
            ended = following >= len(self.frames)
            self.current_frame = 0 if ended else following
            return ended
        return False


def _decode(image: Image.Image, origin: Point, stop: Point) -> tuple[list[bytes], list[int]]:
    image_height = stop[1] - origin[1]
    image_width = stop[0] - origin[0]
    display = (DISPLAY_WIDTH, DISPLAY_HEIGHT)
    frames: list[bytes] = []
    delays: list[int] = []

    if image.format == "GIF":
        try:
            for frame in ImageSequence.Iterator(image):
                delay = int(frame.info.get("duration", 0))
                resized = fit_image(frame.convert("RGBA"), display)
                frames.append(read_image(resized, image_height, image_width))
                delays.append(delay)
        except (OSError, ValueError, EOFError) as error:
            logger.error("Failed to decode a GIF frame: %s", error)
    else:
        resized = fit_image(_rgba(image), display)
        frames.append(read_image(resized, image_height, image_width))
        delays.append(STILL_IMAGE_DELAY)
    return frames, delays


def error_renderer(origin: Point, stop: Point) -> ImageRenderer:
    """A still frame telling the user that the image could not be shown."""
    canvas = Image.new("RGBA", (DISPLAY_WIDTH, DISPLAY_HEIGHT), (0, 0, 0, 255))
    text_width, text_height = measure_text(ERROR_TEXT)
    left = (DISPLAY_WIDTH - text_width) // 2
    top = (DISPLAY_HEIGHT - text_height) // 2
    pixels = canvas.load()
    for dy, row in enumerate(text_bitmap(ERROR_TEXT)):
        for dx, on in enumerate(row):
            if on:
                pixels[left + dx, top + dy] = (255, 255, 255, 255)
    frame = read_image(canvas, stop[1] - origin[1], stop[0] - origin[0])
    return ImageRenderer(origin, stop, [frame], [STILL_IMAGE_DELAY])


def load_image_renderer(origin: Point, stop: Point, data: bytes) -> ImageRenderer:
    """Decode image bytes; fall back to the error image if they cannot be decoded."""
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except (OSError, ValueError, SyntaxError):
        logger.error("Failed to decode the image.")
        return error_renderer(origin, stop)

    frames, delays = _decode(image, origin, stop)
    if not frames:
        logger.error("The image holds no frame that could be decoded.")
        return error_renderer(origin, stop)
    return ImageRenderer(origin, stop, frames, delays)


def open_image_renderer(
    origin: Point, stop: Point, path: str | os.PathLike[str]
) -> ImageRenderer:
    """Read and decode an image file; fall back to the error image on failure."""
    try:
        with open(path, "rb") as handle:
            data = handle.read()
    except OSError as error:
        logger.error("Failed to read the image file '%s': %s", path, error)
        return error_renderer(origin, stop)
    return load_image_renderer(origin, stop, data)


__all__: Sequence[str] = (
    "ImageRenderer",
    "median_color_value",
    "read_image",
    "fit_image",
    "load_image_renderer",
    "open_image_renderer",
    "error_renderer",
)