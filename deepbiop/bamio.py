"""Reading and writing BAM files, and converting BAM records to FASTQ."""

from __future__ import annotations

import os
import struct
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from itertools import zip_longest
from typing import Union

from .bgzf import BgzfWriter, open_input
from .cigar import CigarKind, CigarOp, alignment_span
from .errors import QUAL_OFFSET, QualitySequenceLengthError

PathLike = Union[str, "os.PathLike[str]"]

FLAG_UNMAPPED = 0x4
FLAG_SECONDARY = 0x100
FLAG_SUPPLEMENTARY = 0x800

_MAGIC = b"BAM\x01"
_SEQ_CODES = "=ACMGRSVTWYHKDBN"
_SEQ_INDEX = {base: code for code, base in enumerate(_SEQ_CODES)}
_CIGAR_LETTERS = "MIDNSHP=X"
_FIXED = struct.Struct("<iiBBHHHiiii")
_INT32 = struct.Struct("<i")
_NUMERIC_TAG_FORMATS = {
    "c": "b", "C": "B", "s": "h", "S": "H", "i": "i", "I": "I", "f": "f",
}


@dataclass
class BamHeader:
    """The SAM header text and the reference sequences as (name, length)."""

    text: str = ""
    references: list[tuple[str, int]] = field(default_factory=list)


@dataclass
class BamRecord:
    """One alignment record. ``pos`` is 0-based; ``quality`` holds raw Phred scores."""

    name: str | None
    flag: int = 0
    ref_id: int = -1
    pos: int = -1
    mapq: int = 255
    cigar: list[CigarOp] = field(default_factory=list)
    sequence: str = ""
    quality: bytes | None = None
    next_ref_id: int = -1
    next_pos: int = -1
    tlen: int = 0
    tags: dict[str, object] = field(default_factory=dict)

    @property
    def is_unmapped(self) -> bool:
        return bool(self.flag & FLAG_UNMAPPED)

    @property
    def is_secondary(self) -> bool:
        return bool(self.flag & FLAG_SECONDARY)

    @property
    def is_supplementary(self) -> bool:
        return bool(self.flag & FLAG_SUPPLEMENTARY)

    @property
    def alignment_start(self) -> int | None:
        """1-based alignment start, or None when the record has no position."""
        return self.pos + 1 if self.pos >= 0 else None


@dataclass
class FastqRecord:
    """A FASTQ read with its quality string in Phred+33."""

    name: str
    sequence: str
    quality: str


def _check_threads(threads: int | None) -> None:
    if threads is not None and threads < 1:
        raise ValueError("threads must be a positive number")


# ---------------------------------------------------------------- decoding


def _decode_tags(data: bytes, offset: int) -> dict[str, object]:
    tags: dict[str, object] = {}
    while offset < len(data):
        tag = data[offset : offset + 2].decode("ascii")
        kind = chr(data[offset + 2])
        offset += 3
        value: object
        if kind == "A":
            value = chr(data[offset])
            offset += 1
        elif kind in _NUMERIC_TAG_FORMATS:
            fmt = "<" + _NUMERIC_TAG_FORMATS[kind]
            (value,) = struct.unpack_from(fmt, data, offset)
            offset += struct.calcsize(fmt)
        elif kind in "ZH":
            end = data.index(b"\0", offset)
            value = data[offset:end].decode("utf-8")
            offset = end + 1
        elif kind == "B":
            sub = chr(data[offset])
            (count,) = _INT32.unpack_from(data, offset + 1)
            offset += 5
            fmt = f"<{count}{_NUMERIC_TAG_FORMATS[sub]}"
            value = list(struct.unpack_from(fmt, data, offset))
            offset += struct.calcsize(fmt)
        else:
            raise ValueError(f"unknown tag type {kind!r} for tag {tag}")
        tags[tag] = value
    return tags


def _decode_record(data: bytes) -> BamRecord:
    (ref_id, pos, l_name, mapq, _bin, n_cigar, flag, l_seq,
     next_ref_id, next_pos, tlen) = _FIXED.unpack_from(data, 0)
    offset = _FIXED.size

    raw_name = data[offset : offset + l_name - 1].decode("ascii")
    offset += l_name

    cigar = [
        CigarOp(CigarKind(_CIGAR_LETTERS[value & 0xF]), value >> 4)
        for value in struct.unpack_from(f"<{n_cigar}I", data, offset)
    ]
    offset += 4 * n_cigar

    packed = data[offset : offset + (l_seq + 1) // 2]
    if len(packed) != (l_seq + 1) // 2:
        raise ValueError("truncated sequence")
    sequence = "".join(_SEQ_CODES[b >> 4] + _SEQ_CODES[b & 0xF] for b in packed)[:l_seq]
    offset += len(packed)

    quality: bytes | None = data[offset : offset + l_seq]
    if len(quality) != l_seq:
        raise ValueError("truncated quality scores")
    offset += l_seq
    if l_seq and all(q == 0xFF for q in quality):
        quality = None

    return BamRecord(
        name=None if raw_name == "*" else raw_name,
        flag=flag,
        ref_id=ref_id,
        pos=pos,
        mapq=mapq,
        cigar=cigar,
        sequence=sequence,
        quality=quality,
        next_ref_id=next_ref_id,
        next_pos=next_pos,
        tlen=tlen,
        tags=_decode_tags(data, offset),
    )


class BamReader:
    """Iterates the records of a BAM file; the header is read on opening."""

    def __init__(self, path: PathLike) -> None:
        self._stream = open_input(path)
        try:
            self.header = self._read_header()
        except BaseException:
            self._stream.close()
            raise

    def _read_exact(self, size: int) -> bytes:
        data = self._stream.read(size)
        if len(data) != size:
            raise ValueError("truncated BAM file")
        return data

    def _read_int(self) -> int:
        return _INT32.unpack(self._read_exact(4))[0]

    def _read_header(self) -> BamHeader:
        if self._read_exact(4) != _MAGIC:
            raise ValueError("not a BAM file")
        text = self._read_exact(self._read_int()).rstrip(b"\0").decode("utf-8")
        references = []
        for _ in range(self._read_int()):
            name = self._read_exact(self._read_int()).rstrip(b"\0").decode("ascii")
            references.append((name, self._read_int()))
        return BamHeader(text, references)

    def __iter__(self) -> Iterator[BamRecord]:
        while True:
            head = self._stream.read(4)
            if not head:
                return
            if len(head) != 4:
                raise ValueError("truncated BAM file")
            data = self._read_exact(_INT32.unpack(head)[0])
            try:
                record = _decode_record(data)
            except (struct.error, IndexError, UnicodeDecodeError) as exc:
                raise ValueError("malformed BAM record") from exc
            yield record

    def close(self) -> None:
        self._stream.close()

    def __enter__(self) -> BamReader:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


# ---------------------------------------------------------------- encoding


def _reg2bin(beg: int, end: int) -> int:
    end -= 1
    for shift, first in ((14, 4681), (17, 585), (20, 73), (23, 9), (26, 1)):
        if beg >> shift == end >> shift:
            return first + (beg >> shift)
    return 0


def _int_tag_type(value: int) -> str:
    if value >= 0:
        for kind, limit in (("C", 1 << 8), ("S", 1 << 16), ("I", 1 << 32)):
            if value < limit:
                return kind
    else:
        for kind, limit in (("c", 1 << 7), ("s", 1 << 15), ("i", 1 << 31)):
            if value >= -limit:
                return kind
    raise ValueError(f"integer tag value out of range: {value}")


def _encode_tag(tag: str, value: object) -> bytes:
    key = tag.encode("ascii")
    if len(key) != 2:
        raise ValueError(f"tag must be two characters: {tag!r}")
    if isinstance(value, str):
        return key + b"Z" + value.encode("utf-8") + b"\0"
    if isinstance(value, float):
        return key + b"f" + struct.pack("<f", value)
    if isinstance(value, int):
        kind = _int_tag_type(value)
        return key + kind.encode() + struct.pack("<" + _NUMERIC_TAG_FORMATS[kind], value)
    if isinstance(value, (list, tuple)):
        sub = "f" if any(isinstance(v, float) for v in value) else "i"
        body = struct.pack(f"<{len(value)}{_NUMERIC_TAG_FORMATS[sub]}", *value)
        return key + b"B" + sub.encode() + _INT32.pack(len(value)) + body
    raise TypeError(f"unsupported value for tag {tag}: {value!r}")


def _encode_record(record: BamRecord) -> bytes:
    name = (record.name or "*").encode("ascii") + b"\0"
    if len(name) > 255:
        raise ValueError(f"read name too long: {record.name}")
    l_seq = len(record.sequence)
    quality = b"\xff" * l_seq if record.quality is None else bytes(record.quality)
    if len(quality) != l_seq:
        raise QualitySequenceLengthError(str(record.name))

    span = alignment_span(record.cigar)
    end = record.pos + span if span > 0 else record.pos + 1
    codes = [_SEQ_INDEX.get(base, 15) for base in record.sequence.upper()]
    packed = bytes(
        (hi << 4) | lo for hi, lo in zip_longest(codes[0::2], codes[1::2], fillvalue=0)
    )
    cigar = struct.pack(
        f"<{len(record.cigar)}I",
        *(op.length << 4 | _CIGAR_LETTERS.index(op.kind.value) for op in record.cigar),
    )
    tags = b"".join(_encode_tag(tag, value) for tag, value in record.tags.items())
    body = (
        _FIXED.pack(
            record.ref_id, record.pos, len(name), record.mapq,
            _reg2bin(record.pos, end), len(record.cigar), record.flag, l_seq,
            record.next_ref_id, record.next_pos, record.tlen,
        )
        + name + cigar + packed + quality + tags
    )
    return _INT32.pack(len(body)) + body


def write_bam(path: PathLike, header: BamHeader, records: Iterable[BamRecord]) -> None:
    """Write a header and records as a BGZF-compressed BAM file."""
    text = header.text.encode("utf-8")
    with BgzfWriter(path) as writer:
        writer.write(_MAGIC + _INT32.pack(len(text)) + text)
        writer.write(_INT32.pack(len(header.references)))
        for name, length in header.references:
            raw = name.encode("ascii") + b"\0"
            writer.write(_INT32.pack(len(raw)) + raw + _INT32.pack(length))
        for record in records:
            writer.write(_encode_record(record))


# ------------------------------------------------------------------ FASTQ


def _to_fastq(record: BamRecord) -> FastqRecord:
    if record.name is None:
        raise ValueError("BAM record has no read name")
    quality = record.quality or b""
    if len(record.sequence) != len(quality):
        raise QualitySequenceLengthError(
            f"{record.name} seq and qual length are not equal"
        )
    return FastqRecord(
        record.name,
        record.sequence,
        "".join(chr(score + QUAL_OFFSET) for score in quality),
    )


def bam2fq(bam: PathLike, threads: int | None = None) -> list[FastqRecord]:
    """Convert every record of a BAM file to a FASTQ record.

    Raises QualitySequenceLengthError for a record whose quality scores are
    missing or differ in length from its sequence.
    """
    _check_threads(threads)
    with BamReader(bam) as reader:
        return [_to_fastq(record) for record in reader]


def _format_fastq(record: FastqRecord) -> bytes:
    return f"@{record.name}\n{record.sequence}\n+\n{record.quality}\n".encode("utf-8")


def write_fastq(records: Iterable[FastqRecord], path: PathLike) -> None:
    """Write FASTQ records to a plain file."""
    with open(path, "wb") as handle:
        for record in records:
            handle.write(_format_fastq(record))


def write_bgzip_fastq(records: Iterable[FastqRecord], path: PathLike) -> None:
    """Write FASTQ records to a BGZF-compressed file."""
    with BgzfWriter(path) as writer:
        for record in records:
            writer.write(_format_fastq(record))