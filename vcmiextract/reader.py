"""Sequential little-endian reader over an in-memory byte buffer."""

from __future__ import annotations

from pathlib import Path


class TruncatedDataError(ValueError):
    """Raised when a read or seek goes past the end of the buffer."""


class MemoryReader:
    """A cursor over a byte buffer with little-endian integer reads."""

    def __init__(self, data):
        self._data = bytes(data)
        self._pos = 0

    @classmethod
    def from_path(cls, path):
        """Load a whole file into memory; empty files are rejected."""
        data = Path(path).read_bytes()
        if not data:
            raise ValueError(f"file '{path}' is empty")
        return cls(data)

    def _check_span(self, count):
        if count < 0:
            raise ValueError(f"negative byte count {count}")
        end = self._pos + count
        if end > len(self._data):
            raise TruncatedDataError(
                f"need {count} bytes at offset {self._pos}, "
                f"only {len(self._data) - self._pos} available"
            )
        return end

    def _take(self, count):
        end = self._check_span(count)
        chunk = self._data[self._pos:end]
        self._pos = end
        return chunk

    def peek_u32(self):
        """Return the next 32-bit value without advancing."""
        end = self._check_span(4)
        return int.from_bytes(self._data[self._pos:end], "little")

    def read_u8(self):
        return self._take(1)[0]

    def read_u16(self):
        return int.from_bytes(self._take(2), "little")

    def read_u32(self):
        return int.from_bytes(self._take(4), "little")

    def read_bytes(self, count):
        return self._take(count)

    def read_name(self, length):
        """Read a fixed-size, NUL-padded name field."""
        raw = self._take(length)
        return raw.split(b"\0", 1)[0].decode("latin-1")

    def tell(self):
        return self._pos

    def seek(self, offset):
        if not 0 <= offset <= len(self._data):
            raise TruncatedDataError(
                f"offset {offset} outside buffer of {len(self._data)} bytes"
            )
        self._pos = offset

    def skip(self, count):
        self.seek(self._pos + count)

    def eof(self):
        return self._pos == len(self._data)

    def remaining(self):
        return len(self._data) - self._pos

    def __len__(self):
        return len(self._data)