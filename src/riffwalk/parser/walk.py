"""Generator helpers over ChunkIterator.

Everything here is lazy: chunks are produced one at a time straight from
the region, so large AVI/WAV files never get materialized as lists.
"""

from collections.abc import Generator
from dataclasses import dataclass

from riffwalk.models.chunks import ChunkRecord, GroupHeader
from riffwalk.models.constants import normalize_tag
from riffwalk.parser.chunk_iterator import ChunkIterator, IteratorOptions, UnderflowFn
from riffwalk.parser.errors import NestingTooDeepError


@dataclass(slots=True)
class GroupStart:
    header: GroupHeader


@dataclass(slots=True)
class GroupEnd:
    header: GroupHeader

    @property
    def depth(self) -> int:
        return self.header.depth


WalkEvent = GroupStart | GroupEnd | ChunkRecord


def iter_chunks(
    riff,
    *,
    options: IteratorOptions | None = None,
    on_underflow: UnderflowFn | None = None,
) -> Generator[ChunkRecord, None, None]:
    """Yield every leaf chunk in *riff*, in file order."""
    with ChunkIterator(riff, options=options, on_underflow=on_underflow) as it:
        yield from it


def walk(
    riff,
    *,
    options: IteratorOptions | None = None,
    on_underflow: UnderflowFn | None = None,
) -> Generator[WalkEvent, None, None]:
    """Yield GroupStart / ChunkRecord / GroupEnd events in strict nesting order."""
    pending: list[WalkEvent] = []
    stack: list[GroupHeader] = []

    def _start(depth, group_id, size, list_type):
        header = it.open_groups[-1]
        stack.append(header)
        pending.append(GroupStart(header))

    def _end(depth):
        pending.append(GroupEnd(stack.pop()))

    with ChunkIterator(riff, _start, _end, options=options, on_underflow=on_underflow) as it:
        while True:
            try:
                chunk = it.next_chunk()
            except NestingTooDeepError:
                # Groups that did open are still reported before the failure.
                yield from pending
                pending.clear()
                raise
            yield from pending
            pending.clear()
            if chunk is None:
                return
            yield chunk


def walk_with_path(
    riff,
    *,
    options: IteratorOptions | None = None,
) -> Generator[tuple[tuple[str, ...], ChunkRecord], None, None]:
    """Yield (group type path, chunk) pairs, e.g. (("hdrl", "strl"), <strh>)."""
    path: list[str] = []
    for event in walk(riff, options=options):
        if isinstance(event, GroupStart):
            path.append(event.header.list_type)
        elif isinstance(event, GroupEnd):
            path.pop()
        else:
            yield tuple(path), event


def find_chunks(
    riff,
    chunk_id: str | bytes,
    *,
    options: IteratorOptions | None = None,
) -> Generator[ChunkRecord, None, None]:
    """Yield all leaf chunks with id *chunk_id* at any nesting depth."""
    wanted = normalize_tag(chunk_id)
    for chunk in iter_chunks(riff, options=options):
        if chunk.id == wanted:
            yield chunk
