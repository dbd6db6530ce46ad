"""RIFF header, chunk, and diagnostic data classes."""

from dataclasses import dataclass


@dataclass(slots=True)
class RiffHeader:
    """12-byte file header: 'RIFF' + size + form type."""
    magic: str       # always "RIFF"
    size: int        # declared size after the first 8 bytes (informational)
    form_type: str   # 4-char form type (e.g. "WAVE", "AVI ")


@dataclass(slots=True)
class ChunkRecord:
    """A leaf chunk: 8-byte header followed by its payload."""
    id: str          # 4-char ASCII identifier
    size: int        # declared payload length
    offset: int      # region offset of the chunk header
    data: bytes      # payload, clipped to the region end

    @property
    def data_offset(self) -> int:
        return self.offset + 8

    @property
    def is_truncated(self) -> bool:
        """True when the declared size runs past the end of the region."""
        return len(self.data) < self.size


@dataclass(slots=True)
class GroupHeader:
    """A LIST group header. size covers the type tag and nested content."""
    id: str          # the group marker (normally "LIST")
    size: int
    list_type: str   # 4-char group type (e.g. "INFO", "hdrl")
    offset: int      # region offset of the group marker
    depth: int       # nesting depth this group opens
    opaque: bool = False  # skipped as a blob instead of descended into


@dataclass(frozen=True, slots=True)
class SizeUnderflow:
    """A deduction that exceeded the remaining budget of one nesting level."""
    level: int
    remaining: int   # budget before clamping
    requested: int
    offset: int      # cursor position when the deduction was attempted

    def __str__(self) -> str:
        return (
            f"size underflow at level {self.level}: "
            f"{self.requested} bytes requested, {self.remaining} left "
            f"(offset {self.offset})"
        )
