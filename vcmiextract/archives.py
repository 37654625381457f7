"""Extraction of LOD, SND and VID archives."""

from __future__ import annotations

from dataclasses import dataclass

from .compression import decompress
from .output import save_file

LOD_COUNT_OFFSET = 8
LOD_TABLE_OFFSET = 0x5C
LOD_NAME_LENGTH = 16
MEDIA_NAME_LENGTH = 40


@dataclass(frozen=True)
class _LodEntry:
    name: str
    offset: int
    full_size: int
    compressed_size: int


@dataclass(frozen=True)
class _MediaEntry:
    name: str
    offset: int
    size: int


def _lod_entries(reader):
    reader.seek(LOD_COUNT_OFFSET)
    total = reader.read_u32()
    reader.seek(LOD_TABLE_OFFSET)
    entries = []
    for _ in range(total):
        name = reader.read_name(LOD_NAME_LENGTH)
        offset = reader.read_u32()
        full_size = reader.read_u32()
        reader.read_u32()  # unused
        compressed_size = reader.read_u32()
        entries.append(_LodEntry(name, offset, full_size, compressed_size))
    return entries


def extract_lod(reader, destination):
    """Extract every member of a LOD archive, inflating compressed ones."""
    for entry in _lod_entries(reader):
        reader.seek(entry.offset)
        if entry.compressed_size:
            data = decompress(reader.read_bytes(entry.compressed_size), entry.full_size)
        else:
            data = reader.read_bytes(entry.full_size)
        save_file(data, destination, entry.name)


def extract_snd(reader, destination):
    """Extract every sound of an SND archive as a ``.wav`` file."""
    total = reader.read_u32()
    entries = [
        _MediaEntry(reader.read_name(MEDIA_NAME_LENGTH), reader.read_u32(), reader.read_u32())
        for _ in range(total)
    ]
    for entry in entries:
        reader.seek(entry.offset)
        save_file(reader.read_bytes(entry.size), destination, entry.name + ".wav")


def extract_vid(reader, destination):
    """Extract every video of a VID archive; each runs to the next one's start."""
    total = reader.read_u32()
    starts = [(reader.read_name(MEDIA_NAME_LENGTH), reader.read_u32()) for _ in range(total)]
    ends = [begin for _, begin in starts[1:]] + [len(reader)]
    for (name, begin), end in zip(starts, ends):
        reader.seek(begin)
        save_file(reader.read_bytes(end - begin), destination, name)