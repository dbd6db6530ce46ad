"""Nested RIFF chunk reader (WAV, AVI, WEBP, ...)."""

from riffwalk.models.chunks import ChunkRecord, GroupHeader, RiffHeader, SizeUnderflow
from riffwalk.parser.chunk_iterator import ChunkIterator, IteratorOptions, opaque_types
from riffwalk.parser.errors import (
    ClosedRegionError,
    FormatMismatchError,
    NestingTooDeepError,
    RiffError,
    RiffIOError,
    TooShortError,
)
from riffwalk.parser.riff_file import RiffFile, open_riff
from riffwalk.parser.walk import (
    GroupEnd,
    GroupStart,
    find_chunks,
    iter_chunks,
    walk,
    walk_with_path,
)

__all__ = [
    "ChunkIterator",
    "ChunkRecord",
    "ClosedRegionError",
    "FormatMismatchError",
    "GroupEnd",
    "GroupHeader",
    "GroupStart",
    "IteratorOptions",
    "NestingTooDeepError",
    "RiffError",
    "RiffFile",
    "RiffHeader",
    "RiffIOError",
    "SizeUnderflow",
    "TooShortError",
    "find_chunks",
    "iter_chunks",
    "open_riff",
    "opaque_types",
    "walk",
    "walk_with_path",
]
