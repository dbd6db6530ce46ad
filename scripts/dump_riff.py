"""Print the nested chunk structure of a RIFF file.

Usage:
    python -m scripts.dump_riff FILE FORMAT [--profile] [--pad-odd]
                                [--opaque TAG ...] [--max-depth N] [--preview N]

Set DEBUG in the environment for traversal logging.
"""

import argparse
import logging
import os
from collections.abc import Callable

from riffwalk.models.chunks import ChunkRecord
from riffwalk.parser.chunk_iterator import IteratorOptions, UnderflowFn, opaque_types
from riffwalk.parser.errors import RiffError
from riffwalk.parser.riff_file import RiffFile, open_riff


logging.basicConfig(level=logging.DEBUG if "DEBUG" in os.environ else logging.INFO)
logger = logging.getLogger(__name__)

RULE = "---------------------------------------"


def indent(level: int) -> str:
    return "||" * level


def format_group_start(depth: int, group_id: str, size: int, list_type: str) -> str:
    return f"{indent(depth)} p--LIST.START[{depth}]: TYPE <{group_id}> SIZE({size}) FORMAT <{list_type}>"


def format_group_end(depth: int) -> str:
    return f"{indent(depth)} b--LIST.END[{depth}]."


def hex_preview(data: bytes, size: int, limit: int = 16) -> str:
    """Space-separated hex of the first *limit* bytes, '...' if there are more."""
    shown = " ".join(f"{b:02x}" for b in data[:limit])
    if size > limit:
        shown += "..."
    return f"[{shown}]"


def format_chunk(chunk: ChunkRecord, depth: int, preview: int = 16) -> list[str]:
    pad = indent(depth + 1)
    lines = [
        f"{pad}....CHUNK: ID <{chunk.id}> SIZE({chunk.size}) OFFSET(0x{chunk.offset:016x})",
        f"{pad}....DATA : {hex_preview(chunk.data, chunk.size, preview)}",
    ]
    if chunk.is_truncated:
        lines.append(f"{pad}....(truncated: {len(chunk.data)} of {chunk.size} bytes present)")
    return lines


def dump(
    riff: RiffFile,
    options: IteratorOptions | None = None,
    *,
    preview: int = 16,
    out: Callable[[str], None] = print,
    on_underflow: UnderflowFn | None = None,
) -> list:
    """Write the structure of *riff* through *out*; return underflow diagnostics.

    *on_underflow* sees each diagnostic as it happens, so callers keep them
    even if the walk fails part way.
    """
    def _start(depth, group_id, size, list_type):
        out(format_group_start(depth, group_id, size, list_type))

    def _end(depth):
        out(format_group_end(depth))

    out(RULE)
    with riff.chunks(_start, _end, options=options, on_underflow=on_underflow) as it:
        for chunk in it:
            for line in format_chunk(chunk, it.current_depth, preview):
                out(line)
        out("EOF.")
        out(RULE)
        return list(it.diagnostics)


def build_options(args: argparse.Namespace) -> IteratorOptions:
    if args.profile:
        options = IteratorOptions.for_format(args.format)
    else:
        options = IteratorOptions()
    if args.pad_odd:
        options.pad_odd = True
    if args.opaque:
        options.is_opaque = opaque_types(*args.opaque)
    if args.max_depth is not None:
        options.max_depth = args.max_depth
    return options


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Dump the chunk tree of a RIFF file")
    parser.add_argument("file", help="RIFF file path")
    parser.add_argument("format", help="4-char form type, e.g. WAVE, 'AVI ', WEBP")
    parser.add_argument("--profile", action="store_true",
                        help="Use the recommended padding/opaque settings for FORMAT")
    parser.add_argument("--pad-odd", action="store_true",
                        help="Skip the pad byte after odd-sized chunks")
    parser.add_argument("--opaque", action="append", metavar="TAG",
                        help="LIST type to skip without descending; repeatable "
                             "(default: movi)")
    parser.add_argument("--max-depth", type=int, default=None,
                        help="Maximum LIST nesting depth")
    parser.add_argument("--preview", type=int, default=16,
                        help="Payload bytes to show per chunk")
    args = parser.parse_args(argv)

    print("RIFF file reader")
    print(f"Filename {args.file} type {args.format}")

    diagnostics: list = []
    status = 0
    try:
        options = build_options(args)
        with open_riff(args.file, args.format) as riff:
            dump(riff, options, preview=args.preview, on_underflow=diagnostics.append)
    except (FileNotFoundError, RiffError, ValueError) as exc:
        # ValueError also covers malformed tag arguments
        print(f"Error: {exc}")
        status = 1

    for diag in diagnostics:
        print(f"Warning: {diag}")
    return status


if __name__ == "__main__":
    raise SystemExit(main())
