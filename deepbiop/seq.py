"""Sequence normalisation and reverse complement."""

from __future__ import annotations

from typing import TypeVar

_Seq = TypeVar("_Seq", str, bytes)

_KEEP = frozenset(b"ACGTN-")
_IUPAC = frozenset(b"BDHVRYSWKM")
_WHITESPACE = frozenset(b" \t\r\n")

_COMPLEMENT_PAIRS = {
    "A": "T", "T": "A", "C": "G", "G": "C",
    "R": "Y", "Y": "R", "K": "M", "M": "K",
    "B": "V", "V": "B", "D": "H", "H": "D",
    "S": "S", "W": "W",
}
_COMPLEMENT_STR = str.maketrans(
    {
        **_COMPLEMENT_PAIRS,
        **{k.lower(): v.lower() for k, v in _COMPLEMENT_PAIRS.items()},
    }
)
_COMPLEMENT_BYTES = bytes.maketrans(
    "".join(_COMPLEMENT_STR_KEYS := [chr(c) for c in _COMPLEMENT_STR]).encode(),
    "".join(chr(_COMPLEMENT_STR[ord(k)]) if isinstance(_COMPLEMENT_STR[ord(k)], int)
            else _COMPLEMENT_STR[ord(k)] for k in _COMPLEMENT_STR_KEYS).encode(),
)


def _normalize_byte(byte: int, iupac: bool) -> int | None:
    if byte in _KEEP:
        return byte
    if byte in b"acg":
        return byte - 32
    if byte in b"tuU":
        return ord("T")
    if byte in b".~":
        return ord("-")
    if iupac:
        if byte in _IUPAC:
            return byte
        if byte - 32 in _IUPAC and 97 <= byte <= 122:
            return byte - 32
    if byte in _WHITESPACE:
        return None
    return ord("N")


def normalize_seq(seq: _Seq, iupac: bool) -> _Seq:
    """Normalize a DNA sequence.

    Lower-case bases become upper-case, U becomes T, gaps become '-',
    whitespace is removed and any other symbol becomes N. IUPAC ambiguity
    codes are kept (upper-cased) only when ``iupac`` is true.
    """
    raw = seq.encode("utf-8") if isinstance(seq, str) else bytes(seq)
    normalized = bytes(
        b for b in (_normalize_byte(byte, iupac) for byte in raw) if b is not None
    )
    return normalized.decode("ascii") if isinstance(seq, str) else normalized


def reverse_complement(seq: _Seq) -> _Seq:
    """Return the reverse complement of a DNA sequence.

    Standard and IUPAC bases are complemented preserving case; any other
    symbol passes through unchanged.
    """
    if isinstance(seq, str):
        return seq.translate(_COMPLEMENT_STR)[::-1]
    return bytes(seq).translate(_COMPLEMENT_BYTES)[::-1]