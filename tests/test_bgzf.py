import gzip
import random
import struct

import pytest

from deepbiop.bgzf import EOF_MARKER, MAX_BLOCK_SIZE, BgzfWriter, open_input


def _blocks(raw):
    offset = 0
    blocks = []
    while offset < len(raw):
        assert raw[offset : offset + 2] == b"\x1f\x8b"
        (bsize,) = struct.unpack_from("<H", raw, offset + 16)
        size = bsize + 1
        blocks.append(raw[offset : offset + size])
        offset += size
    assert offset == len(raw)
    return blocks


def test_round_trip_small(tmp_path):
    path = tmp_path / "out.gz"
    with BgzfWriter(path) as writer:
        writer.write(b"hello ")
        writer.write(b"world\n")
    assert gzip.decompress(path.read_bytes()) == b"hello world\n"


def test_ends_with_eof_marker(tmp_path):
    path = tmp_path / "out.gz"
    with BgzfWriter(path) as writer:
        writer.write(b"data")
    assert path.read_bytes().endswith(EOF_MARKER)


def test_empty_file_is_only_eof_marker(tmp_path):
    path = tmp_path / "empty.gz"
    with BgzfWriter(path):
        pass
    assert path.read_bytes() == EOF_MARKER


def test_large_data_splits_into_valid_blocks(tmp_path):
    data = random.Random(0).randbytes(200_000) + b"A" * 100_000
    path = tmp_path / "big.gz"
    with BgzfWriter(path) as writer:
        writer.write(data)
    raw = path.read_bytes()
    blocks = _blocks(raw)
    assert len(blocks) > 2
    assert all(len(block) <= MAX_BLOCK_SIZE for block in blocks)
    assert all(block[12:14] == b"BC" for block in blocks)
    assert blocks[-1] == EOF_MARKER
    assert gzip.decompress(raw) == data


def test_write_returns_length(tmp_path):
    with BgzfWriter(tmp_path / "x.gz") as writer:
        assert writer.write(b"abcde") == 5


def test_write_after_close_raises(tmp_path):
    writer = BgzfWriter(tmp_path / "x.gz")
    writer.close()
    assert writer.closed
    with pytest.raises(ValueError):
        writer.write(b"late")


def test_close_twice_keeps_single_marker(tmp_path):
    path = tmp_path / "x.gz"
    writer = BgzfWriter(path)
    writer.write(b"abc")
    writer.close()
    writer.close()
    assert path.read_bytes().count(EOF_MARKER) == 1


def test_open_input_plain(tmp_path):
    path = tmp_path / "plain.txt"
    path.write_bytes(b">r1\nACGT\n")
    with open_input(path) as handle:
        assert handle.read() == b">r1\nACGT\n"


def test_open_input_bgzf(tmp_path):
    path = tmp_path / "data.gz"
    with BgzfWriter(path) as writer:
        writer.write(b"compressed content")
    with open_input(path) as handle:
        assert handle.read() == b"compressed content"


def test_open_input_plain_gzip(tmp_path):
    path = tmp_path / "data.gz"
    path.write_bytes(gzip.compress(b"gzip content"))
    with open_input(path) as handle:
        assert handle.read() == b"gzip content"