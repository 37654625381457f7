import struct
import zlib
from pathlib import Path

import pytest

from vcmiextract.dds import (
    DDS_MAGIC,
    FOURCC_DXT1,
    REQUIRED_CAPS,
    REQUIRED_HEADER_FLAGS,
    REQUIRED_PIXEL_FORMAT_FLAGS,
)
from vcmiextract.hd import SpriteEntry, extract_pak, parse_sprite, split_string, string_to_table
from vcmiextract.reader import MemoryReader

METADATA = "\n name 0 0 0 0 0 0 0 16 16 0 0"


def _u32(*values):
    return struct.pack(f"<{len(values)}I", *values)


def _dds_dxt1(width, height, block):
    header = struct.pack(
        "<31I", 124, REQUIRED_HEADER_FLAGS, height, width, width * height // 2, 0, 1,
        *([0] * 11), 32, REQUIRED_PIXEL_FORMAT_FLAGS, FOURCC_DXT1, 0, 0, 0, 0, 0,
        REQUIRED_CAPS, 0, 0, 0, 0,
    )
    return _u32(DDS_MAGIC) + header + block * ((width // 4) * (height // 4))


def _pak(name, metadata, dds, magic=4):
    compressed = zlib.compress(dds)
    meta = metadata.encode()
    table_offset = 8 + len(meta) + len(compressed)
    table = (
        _u32(1) + name.encode().ljust(20, b"\0")
        + _u32(8, len(meta), 1, len(compressed), len(dds), len(compressed), len(dds))
    )
    return _u32(magic, table_offset) + meta + compressed + table


def _read_png_header(path):
    data = Path(path).read_bytes()
    assert data[:8] == b"\x89PNG\r\n\x1a\n"
    width, height, _, ctype = struct.unpack(">IIBB", data[16:26])
    return width, height, ctype, data


def test_split_string_skips_first_character():
    assert split_string("abc def", " ") == ["bc", "def"]


def test_split_string_short_inputs():
    assert split_string("", " ") == []
    assert split_string("x", " ") == []


def test_split_string_leading_separator_round_trip():
    words = ["alpha", "beta", "gamma"]
    assert split_string(" " + " ".join(words), " ") == words


def test_string_to_table():
    table = string_to_table("\n a 1 2\n b 3 4")
    assert table == [["a", "1", "2"], ["b", "3", "4"]]


def test_parse_sprite_without_shadow():
    fields = ["s", "1", "2", "3", "4", "5", "6", "7", "8", "9", "10", "0"]
    entry = parse_sprite(fields)
    assert entry == SpriteEntry("s", 1, 2, 3, 4, 5, 6, 7, 8, 9, 10, 0)
    assert entry.shadow_width == 0


def test_parse_sprite_with_shadow():
    fields = ["s"] + [str(n) for n in range(1, 11)] + ["1"] + [str(n) for n in range(20, 26)]
    entry = parse_sprite(fields)
    assert entry.has_shadow == 1
    assert entry.shadow_sheet_index == 20
    assert entry.shadow_rotation == 25


def test_parse_sprite_integer_prefix():
    fields = ["s", "12abc"] + ["0"] * 10
    assert parse_sprite(fields).sheet_index == 12


def test_parse_sprite_wrong_field_count():
    with pytest.raises(ValueError):
        parse_sprite(["s", "1", "2"])


def test_parse_sprite_not_a_number():
    with pytest.raises(ValueError):
        parse_sprite(["s", "x"] + ["0"] * 10)


def test_extract_pak(tmp_path):
    block = struct.pack("<HHI", 0xFFFF, 0x0000, 0)
    data = _pak("sheet", METADATA, _dds_dxt1(16, 16, block))
    written = extract_pak(MemoryReader(data), tmp_path)
    assert written == [tmp_path / "sheet.png"]
    width, height, ctype, png = _read_png_header(written[0])
    assert (width, height, ctype) == (16, 16, 2)
    idat_len = int.from_bytes(png[33:37], "big")
    raw = zlib.decompress(png[41:41 + idat_len])
    rows = [raw[y * 49 + 1:(y + 1) * 49] for y in range(16)]
    assert all(row == rows[0][:3] * 16 for row in rows)


def test_extract_pak_bad_magic(tmp_path):
    block = struct.pack("<HHI", 0, 0, 0)
    data = _pak("sheet", METADATA, _dds_dxt1(16, 16, block), magic=5)
    with pytest.raises(ValueError):
        extract_pak(MemoryReader(data), tmp_path)


def test_extract_pak_bad_metadata(tmp_path):
    block = struct.pack("<HHI", 0, 0, 0)
    data = _pak("sheet", "\n name 0 0 0", _dds_dxt1(16, 16, block))
    with pytest.raises(ValueError):
        extract_pak(MemoryReader(data), tmp_path)
    assert not (tmp_path / "sheet.png").exists()