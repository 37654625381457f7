import struct
import zlib

from vcmiextract.image import Image, ImageFormat
from vcmiextract.output import save_file, save_image

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


def _palette_pcx(width, height):
    return struct.pack("<3I", width * height, width, height) + bytes(width * height) + bytes(768)


def _ihdr_color_type(png):
    # IHDR payload starts after signature (8), length (4) and tag (4).
    return png[16 + 9]


def test_save_file_writes_raw_bytes(tmp_path):
    target = tmp_path / "out" / "nested"
    written = save_file(b"hello", target, "notes.txt")
    assert written == target / "notes.txt"
    assert written.read_bytes() == b"hello"


def test_save_file_converts_pcx(tmp_path):
    written = save_file(_palette_pcx(2, 2), tmp_path, "picture.pcx")
    assert written == tmp_path / "picture.png"
    assert written.read_bytes().startswith(PNG_SIGNATURE)
    assert not (tmp_path / "picture.pcx").exists()


def test_save_file_extension_is_case_insensitive(tmp_path):
    written = save_file(_palette_pcx(1, 1), tmp_path, "PICTURE.PCX")
    assert written.name == "PICTURE.png"
    assert written.read_bytes().startswith(PNG_SIGNATURE)


def test_save_file_invalid_pcx_falls_back_to_raw(tmp_path):
    payload = struct.pack("<3I", 99, 2, 2)
    written = save_file(payload, tmp_path, "broken.pcx")
    assert written == tmp_path / "broken.pcx"
    assert written.read_bytes() == payload


def test_save_image_replaces_extension_and_creates_dirs(tmp_path):
    image = Image.new(2, 1, ImageFormat.RGB24)
    written = save_image(image, tmp_path / "a" / "b", "frame.bmp")
    assert written == tmp_path / "a" / "b" / "frame.png"
    assert written.read_bytes().startswith(PNG_SIGNATURE)


def test_save_image_drops_opaque_alpha(tmp_path):
    image = Image.new(1, 1, ImageFormat.RGBA32)
    image.set_pixel(0, 0, (1, 2, 3, 255))
    png = save_image(image, tmp_path, "opaque").read_bytes()
    assert _ihdr_color_type(png) == ImageFormat.RGB24.png_color_type


def test_save_image_keeps_translucent_alpha(tmp_path):
    image = Image.new(1, 1, ImageFormat.RGBA32)
    image.set_pixel(0, 0, (1, 2, 3, 128))
    png = save_image(image, tmp_path, "clear").read_bytes()
    assert _ihdr_color_type(png) == ImageFormat.RGBA32.png_color_type


def test_saved_png_pixel_data_round_trips(tmp_path):
    image = Image.new(1, 1, ImageFormat.RGB24)
    image.set_pixel(0, 0, (30, 20, 10))
    png = save_image(image, tmp_path, "px").read_bytes()
    idat_start = png.index(b"IDAT") + 4
    idat_length = struct.unpack(">I", png[idat_start - 8:idat_start - 4])[0]
    raw = zlib.decompress(png[idat_start:idat_start + idat_length])
    assert raw == bytes([0, 10, 20, 30])