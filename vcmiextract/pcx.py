"""Loading of the game's PCX and P32 raster images."""

from __future__ import annotations

import struct

from .image import PALETTE_SIZE, Image, ImageFormat

P32_MAGIC = 0x46323350
P32_HEADER_SIZE = 40
P32_BITS_PER_PIXEL = 32


class PcxFormatError(ValueError):
    """Raised when image data is neither a valid H3 PCX nor a P32 image."""


def _require(condition, message):
    if not condition:
        raise PcxFormatError(message)


def _load_p32(reader):
    (magic, unknown1, bits_per_pixel, size_raw, size_header, size_data,
     width, height, unknown8, unknown9) = struct.unpack("<10I", reader.read_bytes(P32_HEADER_SIZE))

    _require(magic == P32_MAGIC, f"bad P32 magic {magic:#x}")
    _require(size_header == P32_HEADER_SIZE, f"bad P32 header size {size_header}")
    _require(size_raw == size_header + size_data, f"bad P32 total size {size_raw}")
    _require(
        size_data == width * height * bits_per_pixel // 8,
        f"bad P32 data size {size_data}",
    )
    _require(bits_per_pixel == P32_BITS_PER_PIXEL, f"unsupported bit depth {bits_per_pixel}")
    _require(unknown1 == 0, f"unexpected P32 header field {unknown1}")
    _require(unknown8 == 8, f"unexpected P32 header field {unknown8}")
    _require(unknown9 == 0, f"unexpected P32 header field {unknown9}")
    _require(width > 0 and height > 0, f"invalid image size {width}x{height}")

    image = Image.new(width, height, ImageFormat.RGBA32)
    row_size = width * 4
    # Rows are stored bottom-up.
    for y in range(height):
        image.write_span(0, height - y - 1, reader.read_bytes(row_size))
    return image


def _load_h3(reader):
    size = reader.read_u32()
    width = reader.read_u32()
    height = reader.read_u32()
    _require(width > 0 and height > 0, f"invalid image size {width}x{height}")

    area = width * height
    if size == area:
        image = Image.new(width, height, ImageFormat.P8)
        image.pixels[:] = reader.read_bytes(area)
        image.palette[:] = reader.read_bytes(PALETTE_SIZE)
        return image

    if size == area * 3:
        image = Image.new(width, height, ImageFormat.RGB24)
        image.pixels[:] = reader.read_bytes(area * 3)
        return image

    raise PcxFormatError(f"data size {size} does not match a {width}x{height} image")


def load_image_pcx(reader):
    """Decode a P32 image or an 8-bit/24-bit H3 PCX image."""
    if reader.peek_u32() == P32_MAGIC:
        reader.seek(0)
        return _load_p32(reader)
    return _load_h3(reader)