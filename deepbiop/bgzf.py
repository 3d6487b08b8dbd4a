"""Writing BGZF (blocked gzip) files and opening plain or gzip input."""

from __future__ import annotations

import gzip
import os
import struct
import zlib
from typing import BinaryIO, Union

PathLike = Union[str, "os.PathLike[str]"]

MAX_BLOCK_DATA = 0xFF00
"""Largest amount of uncompressed data put in one block."""

MAX_BLOCK_SIZE = 0x10000
"""Largest size of one compressed block, header and footer included."""

EOF_MARKER = bytes.fromhex(
    "1f8b08040000000000ff0600424302001b0003000000000000000000"
)
"""The empty block that ends every BGZF file."""

COMPRESSION_LEVEL = 6

# ID1 ID2 CM FLG MTIME XFL OS XLEN SI1 SI2 SLEN BSIZE
_HEADER = struct.Struct("<BBBBIBBHBBHH")
_FOOTER = struct.Struct("<II")
_OVERHEAD = _HEADER.size + _FOOTER.size


def _compress_block(data: bytes) -> bytes | None:
    compressor = zlib.compressobj(COMPRESSION_LEVEL, zlib.DEFLATED, -15)
    payload = compressor.compress(data) + compressor.flush()
    size = len(payload) + _OVERHEAD
    if size > MAX_BLOCK_SIZE:
        return None
    header = _HEADER.pack(31, 139, 8, 4, 0, 0, 255, 6, 66, 67, 2, size - 1)
    footer = _FOOTER.pack(zlib.crc32(data), len(data))
    return header + payload + footer


class BgzfWriter:
    """A binary file writer that produces BGZF output."""

    def __init__(self, path: PathLike) -> None:
        self._file = open(path, "wb")
        self._buffer = bytearray()
        self.closed = False

    def _emit(self, data: bytes) -> None:
        block = _compress_block(data)
        if block is None:
            middle = len(data) // 2
            self._emit(data[:middle])
            self._emit(data[middle:])
            return
        self._file.write(block)

    def write(self, data: bytes) -> int:
        """Buffer ``data``, writing out every block that fills up."""
        if self.closed:
            raise ValueError("write to a closed BGZF writer")
        self._buffer += data
        while len(self._buffer) >= MAX_BLOCK_DATA:
            self._emit(bytes(self._buffer[:MAX_BLOCK_DATA]))
            del self._buffer[:MAX_BLOCK_DATA]
        return len(data)

    def close(self) -> None:
        """Write any buffered data and the end-of-file block, then close."""
        if self.closed:
            return
        try:
            if self._buffer:
                self._emit(bytes(self._buffer))
                self._buffer.clear()
            self._file.write(EOF_MARKER)
        finally:
            self._file.close()
            self.closed = True

    def __enter__(self) -> BgzfWriter:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


def open_input(path: PathLike) -> BinaryIO:
    """Open a file for binary reading, decompressing it if it is gzip or BGZF."""
    with open(path, "rb") as probe:
        magic = probe.read(2)
    if magic == b"\x1f\x8b":
        return gzip.open(path, "rb")  # type: ignore[return-value]
    return open(path, "rb")