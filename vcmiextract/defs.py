"""Decoding of DEF animations into PNG frames and an ``animation.json`` listing."""

from __future__ import annotations

import struct
from dataclasses import dataclass, replace

from .image import Image, ImageFormat
from .output import save_file, save_image

D32F_MAGIC = 0x46323344
DEF_NAME_LENGTH = 13
LISTING_NAME = "animation.json"
FRAME_HEADER_SIZE = 32

_RAW_SEGMENT_RLE = 0xFF
_RAW_SEGMENT_PACKED = 7


class DefFormatError(ValueError):
    """Raised when a DEF file does not match the expected layout."""


def _require(condition, message):
    if not condition:
        raise DefFormatError(message)


@dataclass(frozen=True)
class FrameHeader:
    """The header that precedes every frame of an 8-bit DEF animation."""

    size: int = 0
    format: int = 0
    full_width: int = 0
    full_height: int = 0
    stored_width: int = 0
    stored_height: int = 0
    margin_left: int = 0
    margin_top: int = 0


def _read_frame_header(reader):
    return FrameHeader(*struct.unpack("<8I", reader.read_bytes(FRAME_HEADER_SIZE)))


def _fix_legacy_header(header, reader):
    # Some old files (SGTWMTA.DEF, SGTWMTB.DEF) store bogus sizes; their
    # row table begins where the stored size would be.
    if (
        header.format == 1
        and header.stored_width > header.full_width
        and header.stored_height > header.full_height
    ):
        reader.seek(reader.tell() - 16)
        return replace(
            header,
            stored_width=header.full_width,
            stored_height=header.full_height,
            margin_left=0,
            margin_top=0,
        )
    return header


def _write(image, x, y, data):
    try:
        image.write_span(x, y, data)
    except IndexError as exc:
        raise DefFormatError(str(exc)) from exc


def _fill(image, x, y, count, value):
    try:
        image.fill_span(x, y, count, value)
    except IndexError as exc:
        raise DefFormatError(str(exc)) from exc


def _decode_packed_row(reader, image, start_x, y, width):
    x = 0
    while x < width:
        value = reader.read_u8()
        segment_type = value // 32
        length = (value & 31) + 1
        if segment_type == _RAW_SEGMENT_PACKED:
            _write(image, start_x + x, y, reader.read_bytes(length))
        else:
            _fill(image, start_x + x, y, length, segment_type)
        x += length


def decode_frame(reader, header, palette):
    """Decode one palettized frame whose pixel data starts at the reader's position."""
    image = Image.new(header.full_width, header.full_height, ImageFormat.P8)
    image.palette[:] = palette

    start_x = header.margin_left
    start_y = header.margin_top
    width = header.stored_width
    height = header.stored_height
    base = reader.tell()

    if header.format == 0:
        for y in range(height):
            _write(image, start_x, start_y + y, reader.read_bytes(width))
    elif header.format == 1:
        row_offsets = struct.unpack(f"<{height}I", reader.read_bytes(4 * height))
        for y, row_offset in enumerate(row_offsets):
            reader.seek(base + row_offset)
            x = 0
            while x < width:
                segment_type = reader.read_u8()
                length = reader.read_u8() + 1
                if segment_type == _RAW_SEGMENT_RLE:
                    _write(image, start_x + x, start_y + y, reader.read_bytes(length))
                else:
                    _fill(image, start_x + x, start_y + y, length, segment_type)
                x += length
    elif header.format == 2:
        reader.seek(base + reader.read_u16())
        for y in range(height):
            _decode_packed_row(reader, image, start_x, start_y + y, width)
    elif header.format == 3:
        for y in range(height):
            reader.seek(base + y * 2 * (width // 32))
            reader.seek(base + reader.read_u16())
            _decode_packed_row(reader, image, start_x, start_y + y, width)
    else:
        raise DefFormatError(f"unsupported frame format {header.format}")
    return image


def _png_name(name):
    dot = name.rfind(".")
    stem = name[:dot] if dot > 0 else name
    return stem + ".png"


def _read_frames(reader, size):
    names = [reader.read_name(DEF_NAME_LENGTH) for _ in range(size)]
    offsets = [reader.read_u32() for _ in range(size)]
    return list(zip(names, offsets))


def _add_group(groups, index, frames):
    _require(index not in groups, f"duplicate group {index}")
    groups[index] = frames


def _write_listing(records, multiple_groups, destination):
    text = '{\n\t"images" : [\n'
    for group_index, frame, name in records:
        text += "\t\t{ "
        if multiple_groups:
            text += f'"group" : {group_index}, '
        text += f'"frame" : {frame}, "file" : "{_png_name(name)}" }},\n'
    text = text[:-2] + "\n\t]\n}\n"
    return save_file(text.encode("latin-1"), destination, LISTING_NAME)


def _extract_h3(reader, destination):
    _type, _width, _height, total_groups = struct.unpack("<4I", reader.read_bytes(16))
    palette = reader.read_bytes(256 * 3)

    groups = {}
    for _ in range(total_groups):
        index, size, _unknown1, _unknown2 = struct.unpack("<4I", reader.read_bytes(16))
        _add_group(groups, index, _read_frames(reader, size))

    records = []
    for index, frames in sorted(groups.items()):
        for number, (name, offset) in enumerate(frames):
            reader.seek(offset)
            header = _fix_legacy_header(_read_frame_header(reader), reader)
            image = decode_frame(reader, header, palette)
            records.append((index, number, name))
            save_image(image, destination, f"{number}.png")

    return _write_listing(records, len(groups) > 1, destination)


def _extract_d32f(reader, destination):
    (magic, unknown1, unknown2, _width, _height, total_groups,
     unknown6, unknown7) = struct.unpack("<8I", reader.read_bytes(32))

    _require(magic == D32F_MAGIC, f"bad D32F magic {magic:#x}")
    _require(unknown1 == 1, f"unexpected header field {unknown1}")
    _require(unknown2 == 24, f"unexpected header field {unknown2}")
    _require(unknown6 == 8, f"unexpected header field {unknown6}")
    _require(unknown7 in (1, 22), f"unexpected header field {unknown7}")

    groups = {}
    for _ in range(total_groups):
        header_size, index, size, _unknown = struct.unpack("<4I", reader.read_bytes(16))
        _require(header_size == 17 * size + 16, f"bad group header size {header_size}")
        _add_group(groups, index, _read_frames(reader, size))

    records = []
    for index, frames in sorted(groups.items()):
        for number, (name, offset) in enumerate(frames):
            reader.seek(offset)
            (bits_per_pixel, image_size, full_width, full_height, stored_width,
             stored_height, margin_left, margin_top, entry_unknown1,
             entry_unknown2) = struct.unpack("<10I", reader.read_bytes(40))

            _require(stored_width <= full_width, "stored width exceeds frame width")
            _require(stored_height <= full_height, "stored height exceeds frame height")
            _require(entry_unknown1 == 8, f"unexpected frame field {entry_unknown1}")
            _require(entry_unknown2 in (0, 1), f"unexpected frame field {entry_unknown2}")
            _require(bits_per_pixel == 32, f"unsupported bit depth {bits_per_pixel}")
            _require(
                image_size == stored_width * stored_height * 4,
                f"bad frame data size {image_size}",
            )

            image = Image.new(full_width, full_height, ImageFormat.RGBA32)
            # Rows are stored bottom-up.
            for y in range(stored_height):
                _write(
                    image,
                    margin_left,
                    margin_top + stored_height - y - 1,
                    reader.read_bytes(stored_width * 4),
                )
            records.append((index, number, name))
            save_image(image, destination, name)

    _require(reader.eof(), "unexpected data after the last frame")
    return _write_listing(records, len(groups) > 1, destination)


def extract_def(reader, destination):
    """Extract every frame of a DEF or D32 animation; returns the listing path."""
    if reader.peek_u32() == D32F_MAGIC:
        return _extract_d32f(reader, destination)
    return _extract_h3(reader, destination)