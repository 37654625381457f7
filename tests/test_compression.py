import zlib

import pytest

from vcmiextract.compression import DecompressionError, decompress


def test_round_trip_exact_size():
    payload = b"heroes of might and magic " * 20
    assert decompress(zlib.compress(payload), len(payload)) == payload


def test_output_is_padded_to_size():
    payload = b"abc"
    result = decompress(zlib.compress(payload), 8)
    assert len(result) == 8
    assert result.startswith(payload)
    assert result[len(payload):] == bytes(8 - len(payload))


def test_empty_stream_with_zero_size():
    assert decompress(zlib.compress(b""), 0) == b""


def test_output_larger_than_size_raises():
    payload = b"x" * 100
    with pytest.raises(DecompressionError):
        decompress(zlib.compress(payload), 99)


def test_invalid_data_raises():
    with pytest.raises(DecompressionError):
        decompress(b"not zlib data at all", 64)


def test_truncated_stream_raises():
    payload = bytes(range(256)) * 4
    compressed = zlib.compress(payload)
    with pytest.raises(DecompressionError):
        decompress(compressed[:-6], len(payload))