"""Extraction of HD Edition sprite-sheet archives (``.pak``)."""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from .compression import decompress
from .dds import load_dds
from .output import save_image
from .reader import MemoryReader

PAK_MAGIC = 4
PAK_NAME_LENGTH = 20

_INTEGER = re.compile(r"\s*[+-]?\d+")


def split_string(text, separator):
    """Split ``text`` at ``separator``; the first character is always skipped."""
    result = []
    if not text:
        return result
    position = 0
    while position < len(text) - 1:
        position += 1
        split = text.find(separator, position)
        if split == -1:
            result.append(text[position:])
            break
        result.append(text[position:split])
        position = split
    return result


def string_to_table(text):
    """Split text into lines and each line into space-separated fields."""
    return [split_string(line, " ") for line in split_string(text, "\n")]


def _to_int(text):
    match = _INTEGER.match(text)
    if match is None:
        raise ValueError(f"invalid integer field {text!r}")
    return int(match.group())


@dataclass(frozen=True)
class SpriteEntry:
    """One sprite's placement on a sheet, from the archive's metadata."""

    name: str
    sheet_index: int = 0
    sprite_offset_x: int = 0
    unknown1: int = 0
    sprite_offset_y: int = 0
    unknown2: int = 0
    sheet_offset_x: int = 0
    sheet_offset_y: int = 0
    width: int = 0
    height: int = 0
    rotation: int = 0
    has_shadow: int = 0
    shadow_sheet_index: int = 0
    shadow_sheet_offset_x: int = 0
    shadow_sheet_offset_y: int = 0
    shadow_width: int = 0
    shadow_height: int = 0
    shadow_rotation: int = 0


def parse_sprite(fields):
    """Build a sprite entry from a metadata line of 12 or 18 fields."""
    if len(fields) not in (12, 18):
        raise ValueError(f"sprite line has {len(fields)} fields, expected 12 or 18")
    has_shadow = _to_int(fields[11])
    if has_shadow and len(fields) != 18:
        raise ValueError("sprite has a shadow but no shadow fields")
    numbers = fields[1:18] if has_shadow else fields[1:12]
    return SpriteEntry(fields[0], *(_to_int(value) for value in numbers))


@dataclass
class _PakEntry:
    name: str
    metadata_offset: int
    metadata_size: int
    sheets: list = field(default_factory=list)
    compressed_size: int = 0
    full_size: int = 0


def _read_entry(reader):
    name = reader.read_name(PAK_NAME_LENGTH)
    metadata_offset = reader.read_u32()
    metadata_size = reader.read_u32()
    sheet_count = reader.read_u32()
    sheets = [(reader.read_u32(), reader.read_u32()) for _ in range(sheet_count)]
    compressed_size = reader.read_u32()
    full_size = reader.read_u32()
    return _PakEntry(name, metadata_offset, metadata_size, sheets, compressed_size, full_size)


def extract_pak(reader, destination):
    """Extract the first sheet of every entry as PNG; returns the written paths."""
    magic = reader.read_u32()
    header_offset = reader.read_u32()
    if magic != PAK_MAGIC:
        raise ValueError(f"bad PAK magic {magic}")

    reader.seek(header_offset)
    count = reader.read_u32()
    entries = [_read_entry(reader) for _ in range(count)]

    written = []
    for entry in entries:
        reader.seek(entry.metadata_offset)
        metadata = reader.read_bytes(entry.metadata_size).decode("latin-1")
        for line in string_to_table(metadata):
            parse_sprite(line)

        if not entry.sheets:
            raise ValueError(f"entry '{entry.name}' has no sheets")
        compressed_size, full_size = entry.sheets[0]
        data = decompress(reader.read_bytes(compressed_size), full_size)
        image = load_dds(MemoryReader(data))
        written.append(save_image(image, destination, entry.name + ".png"))
    return written