"""RIFF tags, header sizes, and per-format traversal profiles.

Tags are kept as 4-char strings decoded with latin-1, so any 4 raw bytes
map to exactly one tag and back.
"""

from dataclasses import dataclass


RIFF_MAGIC = "RIFF"
LIST_MARKER = "LIST"
INFO_MARKER = "INFO"

# AVI stores interleaved audio/video in a LIST of this type.
MOVI_TYPE = "movi"

# Sizes in bytes
FILE_HEADER_SIZE = 12   # magic + size + form type
CHUNK_HEADER_SIZE = 8   # id + size
TAG_SIZE = 4

# Budget table holds levels 0..9.
MAX_NESTING_DEPTH = 9


@dataclass(frozen=True, slots=True)
class FormatProfile:
    """Recommended traversal settings for one RIFF form type."""
    pad_odd: bool = False
    opaque_types: frozenset[str] = frozenset()


FORMAT_PROFILES: dict[str, FormatProfile] = {
    "WAVE": FormatProfile(pad_odd=True),
    "AVI ": FormatProfile(pad_odd=True, opaque_types=frozenset({MOVI_TYPE})),
    "WEBP": FormatProfile(pad_odd=True),
    "RMID": FormatProfile(pad_odd=True),
    "sfbk": FormatProfile(pad_odd=True),  # SoundFont 2
}


def normalize_tag(tag: str | bytes) -> str:
    """Return *tag* as a 4-char string, rejecting anything else."""
    if isinstance(tag, (bytes, bytearray)):
        tag = bytes(tag).decode("latin-1")
    if len(tag) != 4:
        raise ValueError(f"RIFF tags must be exactly 4 characters, got {tag!r}")
    return tag
