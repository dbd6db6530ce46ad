"""Bounds-checked little-endian reader over a byte region."""

import struct


class BinaryReader:
    """Wraps a bytes-like region (bytes or mmap) with a moving cursor.

    Every read checks the requested range against the region end before
    touching the buffer, so corrupt length fields can never walk the
    cursor past it. Reads raise ValueError on overrun.
    """

    __slots__ = ("_data", "_pos", "_end")

    def __init__(self, data, offset: int = 0, end: int | None = None) -> None:
        self._data = data
        self._pos = offset
        self._end = end if end is not None else len(data)

    @property
    def position(self) -> int:
        return self._pos

    @property
    def end(self) -> int:
        return self._end

    @property
    def remaining(self) -> int:
        return self._end - self._pos

    def _check(self, what: str, size: int) -> None:
        if size < 0 or self._pos + size > self._end:
            raise ValueError(
                f"{what} of {size} bytes at offset {self._pos} "
                f"would exceed boundary at {self._end}"
            )

    def _read(self, size: int) -> bytes:
        self._check("Read", size)
        chunk = bytes(self._data[self._pos : self._pos + size])
        self._pos += size
        return chunk

    def uint32(self) -> int:
        return struct.unpack("<I", self._read(4))[0]

    def signature(self) -> str:
        """Read a 4-byte chunk tag (e.g. 'RIFF', 'LIST', 'fmt ')."""
        return self._read(4).decode("latin-1")

    def peek_signature(self) -> str:
        """Return the 4-byte tag at the cursor without consuming it."""
        self._check("Peek", 4)
        return bytes(self._data[self._pos : self._pos + 4]).decode("latin-1")

    def bytes_upto(self, size: int) -> bytes:
        """Read at most `size` bytes, stopping at the region end."""
        return self._read(min(size, self.remaining))

    def skip(self, size: int) -> None:
        self._check("Skip", size)
        self._pos += size

    def skip_upto(self, size: int) -> int:
        """Skip at most `size` bytes; return how many were actually skipped."""
        n = min(size, self.remaining)
        self._pos += n
        return n

    def seek(self, offset: int) -> None:
        """Seek to an absolute position within the bounded region."""
        if offset < 0 or offset > self._end:
            raise ValueError(f"Seek to {offset} is outside bounds [0, {self._end}]")
        self._pos = offset
