"""Chunk iterator: walks nested RIFF chunks as one flat sequence.

Layout walked here, after the 12-byte file header:
  chunk = id(4) + size(4) + payload(size)
  group = "LIST" + size(4) + type(4) + nested chunks/groups (size - 4 bytes)

Each active nesting level keeps a remaining-byte budget. Every byte the
cursor moves past is deducted from all active levels, so a level drains to
zero exactly when its group ends. A group is closed (on_group_end) once
its level is empty; the walk is over when the top level is empty.

Design: one explicit loop per next_chunk() call. Group and INFO markers are
consumed in place and the loop re-evaluates, so long runs of markers or
empty groups never grow the call stack.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from riffwalk.models.chunks import ChunkRecord, GroupHeader, SizeUnderflow
from riffwalk.models.constants import (
    CHUNK_HEADER_SIZE,
    FILE_HEADER_SIZE,
    FORMAT_PROFILES,
    INFO_MARKER,
    LIST_MARKER,
    MAX_NESTING_DEPTH,
    MOVI_TYPE,
    TAG_SIZE,
    normalize_tag,
)
from riffwalk.parser.binary_reader import BinaryReader
from riffwalk.parser.errors import NestingTooDeepError


logger = logging.getLogger(__name__)

GroupStartFn = Callable[[int, str, int, str], None]
GroupEndFn = Callable[[int], None]
UnderflowFn = Callable[[SizeUnderflow], None]


def _is_movi(list_type: str) -> bool:
    return list_type == MOVI_TYPE


def opaque_types(*types: str | bytes) -> Callable[[str], bool]:
    """Build an is_opaque predicate matching any of *types*."""
    wanted = frozenset(normalize_tag(t) for t in types)
    return wanted.__contains__


@dataclass(slots=True)
class IteratorOptions:
    """Traversal knobs. Defaults reproduce plain RIFF walking with AVI 'movi' skipped."""

    group_marker: str = LIST_MARKER
    info_marker: str | None = INFO_MARKER
    # Groups whose type matches are skipped whole instead of descended into.
    is_opaque: Callable[[str], bool] = field(default=_is_movi)
    # Consume the pad byte that follows odd-sized chunks.
    pad_odd: bool = False
    max_depth: int = MAX_NESTING_DEPTH

    @classmethod
    def for_format(cls, form_type: str | bytes, **overrides) -> "IteratorOptions":
        """Options recommended for *form_type*; unknown forms get the defaults."""
        profile = FORMAT_PROFILES.get(normalize_tag(form_type))
        if profile is not None:
            overrides.setdefault("pad_odd", profile.pad_odd)
            overrides.setdefault("is_opaque", profile.opaque_types.__contains__)
        return cls(**overrides)


class ChunkIterator:
    """Yields the leaf chunks of a RIFF region in file order.

    *riff* is anything with `data` and `length` (normally a RiffFile). The
    iterator never owns or mutates the region and must not outlive it.

    on_group_start(depth, group_id, size, list_type) fires after a group
    header is consumed; on_group_end(depth) fires when the group's budget
    is exhausted. Both are optional.
    """

    __slots__ = (
        "_riff",
        "_pos",
        "_budgets",
        "_groups",
        "_options",
        "_on_group_start",
        "_on_group_end",
        "_on_underflow",
        "_failure",
        "diagnostics",
    )

    def __init__(
        self,
        riff,
        on_group_start: GroupStartFn | None = None,
        on_group_end: GroupEndFn | None = None,
        *,
        options: IteratorOptions | None = None,
        on_underflow: UnderflowFn | None = None,
    ) -> None:
        self._riff = riff
        self._pos = FILE_HEADER_SIZE
        # _budgets[level] for level 0..depth; _groups[level - 1] is the group
        # that opened that level.
        self._budgets: list[int] | None = [max(riff.length - FILE_HEADER_SIZE, 0)]
        self._groups: list[GroupHeader] = []
        self._options = options if options is not None else IteratorOptions()
        self._on_group_start = on_group_start
        self._on_group_end = on_group_end
        self._on_underflow = on_underflow
        self._failure: NestingTooDeepError | None = None
        self.diagnostics: list[SizeUnderflow] = []

    # -- queries ---------------------------------------------------------

    @property
    def current_depth(self) -> int:
        """Nesting depth of the last returned chunk (0 = top level)."""
        return len(self._state()) - 1

    @property
    def position(self) -> int:
        return self._pos

    @property
    def budgets(self) -> tuple[int, ...]:
        """Remaining bytes per active level, outermost first."""
        return tuple(self._state())

    @property
    def open_groups(self) -> tuple[GroupHeader, ...]:
        """Headers of the groups currently open, outermost first."""
        self._state()
        return tuple(self._groups)

    @property
    def options(self) -> IteratorOptions:
        return self._options

    def _state(self) -> list[int]:
        if self._budgets is None:
            raise ValueError("ChunkIterator used after close()")
        return self._budgets

    # -- traversal -------------------------------------------------------

    def __iter__(self) -> "ChunkIterator":
        return self

    def __next__(self) -> ChunkRecord:
        chunk = self.next_chunk()
        if chunk is None:
            raise StopIteration
        return chunk

    def next_chunk(self) -> ChunkRecord | None:
        """Return the next leaf chunk, or None once the region is exhausted.

        Raises:
            NestingTooDeepError: a group would open past options.max_depth.
                The iterator stays failed and raises it again on every call.
        """
        if self._failure is not None:
            raise self._failure
        budgets = self._state()
        reader = BinaryReader(self._riff.data, self._pos)
        opts = self._options

        while True:
            self._close_finished_groups()
            if len(budgets) == 1 and budgets[0] == 0:
                self._pos = reader.position
                return None

            offset = reader.position
            try:
                tag = reader.peek_signature()
                if tag == opts.info_marker:
                    reader.skip(TAG_SIZE)
                else:
                    record_id = reader.signature()
                    size = reader.uint32()
                    list_type = reader.signature() if tag == opts.group_marker else None
            except ValueError as exc:
                # Region ends in the middle of a header
                self._truncate(reader, exc)
                continue

            if tag == opts.info_marker:
                self._deduct(TAG_SIZE, offset)
            elif list_type is not None:
                try:
                    self._enter_group(reader, offset, record_id, size, list_type)
                except NestingTooDeepError as exc:
                    self._failure = exc
                    self._pos = reader.position
                    raise
            else:
                chunk = self._read_chunk(reader, offset, record_id, size)
                self._pos = reader.position
                return chunk

    def _close_finished_groups(self) -> None:
        budgets = self._budgets
        while len(budgets) > 1 and budgets[-1] == 0:
            depth = len(budgets) - 1
            group = self._groups[-1]
            logger.debug("group %r (%r) closed at depth %d", group.id, group.list_type, depth)
            if self._on_group_end is not None:
                self._on_group_end(depth)
            budgets.pop()
            self._groups.pop()

    def _enter_group(self, reader: BinaryReader, offset: int, group_id: str,
                     size: int, list_type: str) -> None:
        opts = self._options
        # The type tag is deducted below, after the new level exists.
        self._deduct(CHUNK_HEADER_SIZE, offset)

        depth = len(self._budgets)
        if depth > opts.max_depth:
            raise NestingTooDeepError(
                f"{group_id!r} group at offset {offset} would open depth {depth}, "
                f"maximum is {opts.max_depth}",
                offset=offset,
            )

        opaque = bool(opts.is_opaque(list_type))
        group = GroupHeader(
            id=group_id, size=size, list_type=list_type,
            offset=offset, depth=depth, opaque=opaque,
        )
        self._budgets.append(size)
        self._groups.append(group)

        if opaque:
            # Skip the type tag and contents as one blob (e.g. AVI 'movi').
            reader.seek(offset + CHUNK_HEADER_SIZE)
            reader.skip_upto(size)
            self._deduct(size, offset + CHUNK_HEADER_SIZE)
            self._skip_pad(reader, size, depth - 1)
            logger.debug("skipped opaque %r group of %d bytes at offset %d",
                         list_type, size, offset)
        else:
            self._deduct(TAG_SIZE, offset + CHUNK_HEADER_SIZE)
            logger.debug("group %r (%r) opened at depth %d, %d bytes",
                         group_id, list_type, depth, size)

        if self._on_group_start is not None:
            self._on_group_start(depth, group_id, size, list_type)

    def _read_chunk(self, reader: BinaryReader, offset: int, chunk_id: str,
                    size: int) -> ChunkRecord:
        self._deduct(CHUNK_HEADER_SIZE, offset)

        data = reader.bytes_upto(size)
        self._deduct(size, offset + CHUNK_HEADER_SIZE)
        self._skip_pad(reader, size, len(self._budgets) - 1)
        return ChunkRecord(id=chunk_id, size=size, offset=offset, data=data)

    def _skip_pad(self, reader: BinaryReader, size: int, level: int) -> None:
        """Consume the pad byte after an odd-sized payload, if the level holds one."""
        if not (self._options.pad_odd and size % 2):
            return
        if self._budgets[level] > 0 and reader.remaining > 0:
            reader.skip(1)
            # An opaque level above *level* is already drained; leave it alone.
            self._deduct(1, reader.position - 1, upto=level)

    # -- budget bookkeeping ----------------------------------------------

    def _deduct(self, amount: int, offset: int, upto: int | None = None) -> None:
        """Deduct *amount* from every active level (or levels 0..*upto*), clamping on underflow."""
        budgets = self._budgets
        last = len(budgets) - 1 if upto is None else upto
        for level, remaining in enumerate(budgets[: last + 1]):
            if remaining >= amount:
                budgets[level] = remaining - amount
            else:
                budgets[level] = 0
                self._report(SizeUnderflow(
                    level=level, remaining=remaining, requested=amount, offset=offset,
                ))

    def _truncate(self, reader: BinaryReader, exc: ValueError) -> None:
        """Drain every level when the region cannot hold the next header."""
        offset = reader.position
        logger.warning("truncated header at offset %d: %s", offset, exc)
        budgets = self._budgets
        for level, remaining in enumerate(budgets):
            if remaining > 0:
                budgets[level] = 0
                self._report(SizeUnderflow(
                    level=level,
                    remaining=reader.remaining,
                    requested=max(remaining, CHUNK_HEADER_SIZE),
                    offset=offset,
                ))
        reader.seek(reader.end)

    def _report(self, underflow: SizeUnderflow) -> None:
        self.diagnostics.append(underflow)
        logger.warning("%s", underflow)
        if self._on_underflow is not None:
            self._on_underflow(underflow)

    # -- teardown --------------------------------------------------------

    def close(self) -> None:
        """Drop traversal state. The region is left untouched."""
        self._budgets = None
        self._groups = []
        self._riff = None
        self._on_group_start = None
        self._on_group_end = None
        self._on_underflow = None

    def __enter__(self) -> "ChunkIterator":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
