"""Byte region provider: maps a RIFF file and validates its header.

The region stays resident for the lifetime of the RiffFile. Iterators only
hold a cursor into it, so close the file (or leave its `with` block) only
after every iterator built over it is done.
"""

import logging
import mmap
import os
from pathlib import Path

from riffwalk.models.chunks import RiffHeader
from riffwalk.models.constants import FILE_HEADER_SIZE, RIFF_MAGIC, normalize_tag
from riffwalk.parser.binary_reader import BinaryReader
from riffwalk.parser.chunk_iterator import ChunkIterator
from riffwalk.parser.errors import (
    ClosedRegionError,
    FormatMismatchError,
    RiffIOError,
    TooShortError,
)


logger = logging.getLogger(__name__)


def read_header(data, form_type: str | bytes) -> RiffHeader:
    """Validate the 12-byte header of *data* against *form_type*."""
    form_type = normalize_tag(form_type)
    if len(data) < FILE_HEADER_SIZE:
        raise TooShortError(
            f"RIFF header needs {FILE_HEADER_SIZE} bytes, got {len(data)}", offset=0
        )

    reader = BinaryReader(data)
    header = RiffHeader(
        magic=reader.signature(),
        size=reader.uint32(),
        form_type=reader.signature(),
    )
    if header.magic != RIFF_MAGIC:
        raise FormatMismatchError(f"Expected RIFF header, got {header.magic!r}", offset=0)
    if header.form_type != form_type:
        raise FormatMismatchError(
            f"Expected form type {form_type!r}, got {header.form_type!r}", offset=8
        )

    if header.size + 8 != len(data):
        logger.warning(
            "RIFF header declares %d bytes but region holds %d; using region length",
            header.size + 8, len(data),
        )
    return header


class RiffFile:
    """A validated, read-only RIFF byte region.

    Build one with `open_riff()` / `RiffFile.open()` for files on disk, or
    `RiffFile.from_bytes()` for data already in memory.
    """

    __slots__ = ("_data", "_mapping", "_header", "_path")

    def __init__(self, data, header: RiffHeader, *, path: Path | None = None,
                 mapping: mmap.mmap | None = None) -> None:
        self._data = data
        self._mapping = mapping
        self._header = header
        self._path = path

    @classmethod
    def from_bytes(cls, data: bytes, form_type: str | bytes) -> "RiffFile":
        header = read_header(data, form_type)
        return cls(bytes(data), header)

    @classmethod
    def open(cls, path: str | os.PathLike, form_type: str | bytes) -> "RiffFile":
        """Map *path* read-only and validate its header.

        Raises:
            FileNotFoundError: *path* does not exist.
            RiffIOError: the file exists but cannot be sized or mapped.
            TooShortError: fewer than 12 bytes.
            FormatMismatchError: not RIFF, or a different form type.
        """
        path = Path(path)
        form_type = normalize_tag(form_type)
        try:
            with path.open("rb") as fh:
                size = os.fstat(fh.fileno()).st_size
                if size < FILE_HEADER_SIZE:
                    # mmap refuses empty files, so this check comes first
                    raise TooShortError(
                        f"{path}: RIFF header needs {FILE_HEADER_SIZE} bytes, got {size}",
                        offset=0,
                    )
                mapping = mmap.mmap(fh.fileno(), 0, access=mmap.ACCESS_READ)
        except FileNotFoundError:
            raise
        except OSError as exc:
            raise RiffIOError(f"Cannot map {path}: {exc}") from exc

        try:
            header = read_header(mapping, form_type)
        except Exception:
            mapping.close()
            raise

        logger.debug("mapped %s (%d bytes, form %r)", path, len(mapping), header.form_type)
        return cls(mapping, header, path=path, mapping=mapping)

    @property
    def closed(self) -> bool:
        return self._data is None

    @property
    def data(self):
        """The whole region (bytes or read-only mmap)."""
        if self._data is None:
            raise ClosedRegionError("RIFF region accessed after close()")
        return self._data

    @property
    def length(self) -> int:
        return len(self.data)

    @property
    def header(self) -> RiffHeader:
        return self._header

    @property
    def path(self) -> Path | None:
        return self._path

    def chunks(self, on_group_start=None, on_group_end=None, **kwargs) -> ChunkIterator:
        """Return a new ChunkIterator over this region."""
        return ChunkIterator(self, on_group_start, on_group_end, **kwargs)

    def close(self) -> None:
        """Release the mapping. Further calls are no-ops."""
        if self._data is None:
            return
        self._data = None
        if self._mapping is not None:
            self._mapping.close()
            self._mapping = None

    def __enter__(self) -> "RiffFile":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def __len__(self) -> int:
        return self.length

    def __repr__(self) -> str:
        where = self._path if self._path is not None else "<bytes>"
        state = "closed" if self.closed else f"{len(self._data)} bytes"
        return f"<RiffFile {where} form={self._header.form_type!r} {state}>"


def open_riff(path: str | os.PathLike, form_type: str | bytes) -> RiffFile:
    """Open and validate a RIFF file; see RiffFile.open()."""
    return RiffFile.open(path, form_type)
