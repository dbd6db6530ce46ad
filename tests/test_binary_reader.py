"""Tests for BinaryReader, all synthetic bytes."""

import mmap
import struct

import pytest

from riffwalk.parser.binary_reader import BinaryReader


def test_uint32_is_little_endian():
    data = struct.pack("<II", 42, 0xDEADBEEF)
    r = BinaryReader(data)
    assert r.uint32() == 42
    assert r.uint32() == 0xDEADBEEF


def test_signature():
    r = BinaryReader(b"LISTfmt ")
    assert r.signature() == "LIST"
    assert r.signature() == "fmt "


def test_signature_accepts_non_ascii_bytes():
    r = BinaryReader(b"\xff\x00\x80A")
    assert r.signature() == "\xff\x00\x80A"


def test_peek_signature_does_not_move():
    r = BinaryReader(b"RIFFxxxx")
    assert r.peek_signature() == "RIFF"
    assert r.position == 0
    assert r.signature() == "RIFF"


def test_bytes_upto_stops_at_end():
    r = BinaryReader(b"abcdef", offset=4)
    assert r.bytes_upto(100) == b"ef"
    assert r.remaining == 0


def test_skip():
    data = struct.pack("<III", 1, 2, 3)
    r = BinaryReader(data)
    r.skip(4)
    assert r.uint32() == 2


def test_skip_upto_reports_actual_count():
    r = BinaryReader(b"abcdef")
    assert r.skip_upto(4) == 4
    assert r.skip_upto(4) == 2
    assert r.remaining == 0


def test_remaining_and_position():
    r = BinaryReader(b"abcdef")
    assert r.position == 0
    assert r.remaining == 6
    r.skip(2)
    assert r.position == 2
    assert r.remaining == 4


def test_bounded_end():
    data = struct.pack("<III", 10, 20, 30)
    r = BinaryReader(data, offset=4, end=8)
    assert r.uint32() == 20
    with pytest.raises(ValueError, match="exceed boundary"):
        r.uint32()


def test_read_past_end():
    r = BinaryReader(b"\x01\x02\x03")
    with pytest.raises(ValueError, match="exceed boundary"):
        r.uint32()
    # failed read leaves the cursor alone
    assert r.position == 0


def test_peek_past_end():
    r = BinaryReader(b"abc")
    with pytest.raises(ValueError, match="exceed boundary"):
        r.peek_signature()


def test_skip_past_end():
    r = BinaryReader(b"\x01\x02")
    with pytest.raises(ValueError, match="exceed boundary"):
        r.skip(10)


def test_negative_sizes_are_rejected():
    r = BinaryReader(b"\x01\x02")
    with pytest.raises(ValueError, match="exceed boundary"):
        r.skip(-1)


def test_seek():
    data = struct.pack("<III", 100, 200, 300)
    r = BinaryReader(data)
    r.seek(8)
    assert r.uint32() == 300
    r.seek(0)
    assert r.uint32() == 100
    with pytest.raises(ValueError, match="outside bounds"):
        r.seek(13)


def test_reads_from_mmap(tmp_path):
    path = tmp_path / "blob.bin"
    path.write_bytes(b"fmt " + struct.pack("<I", 16))
    with path.open("rb") as fh:
        mapped = mmap.mmap(fh.fileno(), 0, access=mmap.ACCESS_READ)
    try:
        r = BinaryReader(mapped)
        assert r.signature() == "fmt "
        assert r.uint32() == 16
    finally:
        mapped.close()
