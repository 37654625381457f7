"""Decoding of the DXT1/DXT5 DDS textures found in HD Edition archives."""

from __future__ import annotations

import struct

from .image import Image, ImageFormat

DDS_MAGIC = 0x20534444
HEADER_SIZE = 124
PIXEL_FORMAT_SIZE = 32

DDSD_CAPS = 0x000001
DDSD_HEIGHT = 0x000002
DDSD_WIDTH = 0x000004
DDSD_PITCH = 0x000008
DDSD_PIXELFORMAT = 0x001000
DDSD_MIPMAPCOUNT = 0x020000
DDSD_LINEARSIZE = 0x080000
DDSD_DEPTH = 0x800000

DDSCAPS_COMPLEX = 0x000008
DDSCAPS_MIPMAP = 0x400000
DDSCAPS_TEXTURE = 0x001000

DDPF_ALPHAPIXELS = 0x0001
DDPF_ALPHA = 0x0002
DDPF_FOURCC = 0x0004
DDPF_RGB = 0x0040
DDPF_YUV = 0x0200
DDPF_LUMINANCE = 0x20000

FOURCC_DXT1 = 0x31545844
FOURCC_DXT2 = 0x32545844
FOURCC_DXT3 = 0x33545844
FOURCC_DXT4 = 0x34545844
FOURCC_DXT5 = 0x35545844
FOURCC_DX10 = 0x30315844

REQUIRED_HEADER_FLAGS = (
    DDSD_CAPS | DDSD_HEIGHT | DDSD_WIDTH | DDSD_PIXELFORMAT | DDSD_MIPMAPCOUNT | DDSD_LINEARSIZE
)
REQUIRED_CAPS = DDSCAPS_COMPLEX | DDSCAPS_MIPMAP | DDSCAPS_TEXTURE
REQUIRED_PIXEL_FORMAT_FLAGS = DDPF_ALPHAPIXELS | DDPF_FOURCC

BLOCK_SIZE = 4
_DIMENSION_MULTIPLE = BLOCK_SIZE * BLOCK_SIZE


class DdsFormatError(ValueError):
    """Raised for DDS files outside the supported subset."""


def _require(condition, message):
    if not condition:
        raise DdsFormatError(message)


def _expand565(value):
    return (
        (value & 31) << 3,
        ((value >> 5) & 63) << 2,
        (value >> 11) << 3,
    )


def _mix(first, first_weight, second, second_weight, divisor):
    return tuple(
        a * first_weight // divisor + b * second_weight // divisor
        for a, b in zip(first, second)
    )


def load_color_block(reader):
    """Read the two 5:6:5 endpoints and return the four palette colours."""
    raw0 = reader.read_u16()
    raw1 = reader.read_u16()
    c0 = _expand565(raw0)
    c1 = _expand565(raw1)
    if raw0 > raw1:
        return [c0, c1, _mix(c0, 2, c1, 1, 3), _mix(c0, 1, c1, 2, 3)]
    return [c0, c1, _mix(c0, 1, c1, 1, 2), (0, 0, 0)]


def load_alpha_block(reader):
    """Read the two alpha endpoints and return the eight alpha levels."""
    a0 = reader.read_u8()
    a1 = reader.read_u8()
    if a0 > a1:
        return [a0, a1] + [(a0 * (7 - i) + a1 * i) // 7 for i in range(1, 7)]
    return [a0, a1] + [(a0 * (5 - i) + a1 * i) // 5 for i in range(1, 5)] + [0, 255]


def _dxt1_block(reader):
    colors = load_color_block(reader)
    lookup = reader.read_u32()
    return [colors[(lookup >> (2 * i)) & 0x3] for i in range(BLOCK_SIZE * BLOCK_SIZE)]


def _dxt5_block(reader):
    alphas = load_alpha_block(reader)
    alpha_lookup = int.from_bytes(reader.read_bytes(6), "little")
    colors = load_color_block(reader)
    color_lookup = reader.read_u32()
    return [
        (*colors[(color_lookup >> (2 * i)) & 0x3], alphas[(alpha_lookup >> (3 * i)) & 0x7])
        for i in range(BLOCK_SIZE * BLOCK_SIZE)
    ]


def _decode(reader, width, height, fmt, decode_block):
    image = Image.new(width, height, fmt)
    for by in range(0, height, BLOCK_SIZE):
        for bx in range(0, width, BLOCK_SIZE):
            for i, texel in enumerate(decode_block(reader)):
                image.set_pixel(bx + i % BLOCK_SIZE, by + i // BLOCK_SIZE, texel)
    return image


def load_dds(reader):
    """Decode a single-surface DXT1 or DXT5 texture into an image."""
    magic = reader.read_u32()
    values = struct.unpack("<31I", reader.read_bytes(HEADER_SIZE))
    header_size, flags, height, width, linear_size, depth, mip_count = values[:7]
    (pf_size, pf_flags, fourcc, bits_count,
     mask_r, mask_g, mask_b, mask_a) = values[18:26]
    caps, caps2, caps3, caps4, reserved2 = values[26:31]

    _require(magic == DDS_MAGIC, f"bad DDS magic {magic:#x}")
    _require(header_size == HEADER_SIZE, f"bad header size {header_size}")
    _require(flags == REQUIRED_HEADER_FLAGS, f"unsupported header flags {flags:#x}")
    _require(depth == 0, "volume textures are not supported")
    _require(mip_count == 1, f"unsupported mipmap count {mip_count}")
    _require(caps == REQUIRED_CAPS, f"unsupported caps {caps:#x}")
    _require(caps2 == 0 and caps3 == 0 and caps4 == 0, "unsupported extended caps")
    _require(reserved2 == 0, "reserved field is not zero")
    _require(pf_size == PIXEL_FORMAT_SIZE, f"bad pixel format size {pf_size}")
    _require(pf_flags == REQUIRED_PIXEL_FORMAT_FLAGS, f"unsupported pixel format flags {pf_flags:#x}")
    _require(fourcc in (FOURCC_DXT1, FOURCC_DXT5), f"unsupported compression {fourcc:#x}")
    _require(
        bits_count == 0 and mask_r == 0 and mask_g == 0 and mask_b == 0 and mask_a == 0,
        "unexpected uncompressed pixel format fields",
    )
    _require(width > 0 and height > 0, f"invalid texture size {width}x{height}")
    _require(
        width % _DIMENSION_MULTIPLE == 0 and height % _DIMENSION_MULTIPLE == 0,
        f"texture size {width}x{height} is not a multiple of {_DIMENSION_MULTIPLE}",
    )

    if fourcc == FOURCC_DXT5:
        _require(linear_size == width * height, f"bad linear size {linear_size}")
        return _decode(reader, width, height, ImageFormat.RGBA32, _dxt5_block)

    _require(linear_size * 2 == width * height, f"bad linear size {linear_size}")
    return _decode(reader, width, height, ImageFormat.RGB24, _dxt1_block)