"""zlib decompression of archive members."""

from __future__ import annotations

import zlib


class DecompressionError(ValueError):
    """Raised when a compressed member cannot be inflated into its size."""


def decompress(data, size):
    """Inflate a zlib stream whose output must fit in ``size`` bytes.

    The result is zero-padded to exactly ``size`` bytes.
    """
    inflater = zlib.decompressobj(15)
    try:
        output = inflater.decompress(bytes(data), size + 1)
    except zlib.error as exc:
        raise DecompressionError(f"invalid compressed data: {exc}") from exc
    if len(output) > size:
        raise DecompressionError(f"decompressed data exceeds {size} bytes")
    if not inflater.eof:
        raise DecompressionError("compressed stream is truncated")
    return output + bytes(size - len(output))