"""In-memory raster images and PNG output.

Colour pixels are stored in blue, green, red (alpha) byte order, the layout
used by the game data; PNG encoding reorders them to red, green, blue.
"""

from __future__ import annotations

import struct
import zlib
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

PALETTE_SIZE = 256 * 3


class ImageFormat(Enum):
    P8 = "p8"
    G8 = "g8"
    RGB24 = "rgb24"
    RGBA32 = "rgba32"

    @property
    def bytes_per_pixel(self):
        return _BYTES_PER_PIXEL[self]

    @property
    def png_color_type(self):
        return _PNG_COLOR_TYPE[self]


_BYTES_PER_PIXEL = {
    ImageFormat.P8: 1,
    ImageFormat.G8: 1,
    ImageFormat.RGB24: 3,
    ImageFormat.RGBA32: 4,
}

_PNG_COLOR_TYPE = {
    ImageFormat.P8: 3,
    ImageFormat.G8: 0,
    ImageFormat.RGB24: 2,
    ImageFormat.RGBA32: 6,
}


@dataclass(eq=False)
class Image:
    """A tightly packed image; ``palette`` holds 256 RGB entries for P8."""

    width: int
    height: int
    fmt: ImageFormat
    pixels: bytearray
    palette: bytearray | None = None

    @classmethod
    def new(cls, width, height, fmt):
        """Create a zero-filled image."""
        if width <= 0 or height <= 0:
            raise ValueError(f"invalid image size {width}x{height}")
        palette = bytearray(PALETTE_SIZE) if fmt is ImageFormat.P8 else None
        return cls(width, height, fmt, bytearray(width * height * fmt.bytes_per_pixel), palette)

    @property
    def bytes_per_pixel(self):
        return self.fmt.bytes_per_pixel

    @property
    def scanline(self):
        return self.width * self.bytes_per_pixel

    def offset(self, x, y):
        """Byte offset of pixel (x, y) in ``pixels``."""
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"pixel ({x}, {y}) outside {self.width}x{self.height} image")
        return y * self.scanline + x * self.bytes_per_pixel

    def get_pixel(self, x, y):
        start = self.offset(x, y)
        return tuple(self.pixels[start:start + self.bytes_per_pixel])

    def set_pixel(self, x, y, value):
        raw = bytes([value]) if isinstance(value, int) else bytes(value)
        if len(raw) != self.bytes_per_pixel:
            raise ValueError(
                f"pixel needs {self.bytes_per_pixel} channels, got {len(raw)}"
            )
        start = self.offset(x, y)
        self.pixels[start:start + len(raw)] = raw

    def write_span(self, x, y, data):
        """Copy raw bytes into the buffer starting at pixel (x, y)."""
        start = self.offset(x, y)
        end = start + len(data)
        if end > len(self.pixels):
            raise IndexError(f"span of {len(data)} bytes overruns the image")
        self.pixels[start:end] = data

    def fill_span(self, x, y, count, value):
        """Set ``count`` consecutive pixels from (x, y) to ``value``."""
        pixel = bytes([value]) if isinstance(value, int) else bytes(value)
        if len(pixel) != self.bytes_per_pixel:
            raise ValueError(
                f"pixel needs {self.bytes_per_pixel} channels, got {len(pixel)}"
            )
        self.write_span(x, y, pixel * count)

    def rows(self):
        """Yield each scanline as bytes, top to bottom."""
        stride = self.scanline
        for y in range(self.height):
            yield bytes(self.pixels[y * stride:(y + 1) * stride])


def drop_alpha_if_opaque(image):
    """Return an RGB24 copy when every alpha value is 255, else the image itself."""
    if image.fmt is not ImageFormat.RGBA32:
        return image
    if any(alpha != 0xFF for alpha in image.pixels[3::4]):
        return image
    result = Image.new(image.width, image.height, ImageFormat.RGB24)
    for channel in range(3):
        result.pixels[channel::3] = image.pixels[channel::4]
    return result


def _chunk(tag, payload):
    crc = zlib.crc32(tag + payload) & 0xFFFFFFFF
    return struct.pack(">I", len(payload)) + tag + payload + struct.pack(">I", crc)


def _png_row(row, fmt):
    if fmt not in (ImageFormat.RGB24, ImageFormat.RGBA32):
        return row
    step = fmt.bytes_per_pixel
    swapped = bytearray(row)
    swapped[0::step] = row[2::step]
    swapped[2::step] = row[0::step]
    return bytes(swapped)


def encode_png(image):
    """Encode an image as PNG bytes at maximum compression."""
    header = struct.pack(
        ">IIBBBBB", image.width, image.height, 8, image.fmt.png_color_type, 0, 0, 0
    )
    raw = bytearray()
    for row in image.rows():
        raw.append(0)
        raw += _png_row(row, image.fmt)

    parts = [b"\x89PNG\r\n\x1a\n", _chunk(b"IHDR", header)]
    if image.palette is not None:
        parts.append(_chunk(b"PLTE", bytes(image.palette)))
    parts.append(_chunk(b"IDAT", zlib.compress(bytes(raw), 9)))
    parts.append(_chunk(b"IEND", b""))
    return b"".join(parts)


def save_png(image, path):
    Path(path).write_bytes(encode_png(image))


def optimize_and_save(image, path):
    save_png(drop_alpha_if_opaque(image), path)