"""CIGAR string parsing and soft-clip inspection."""

from __future__ import annotations

import enum
import re
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Union

_CIGAR_RE = re.compile(r"(?:\d+[MIDNSHP=X])*")
_OP_RE = re.compile(r"(\d+)([MIDNSHP=X])")


class CigarKind(enum.Enum):
    """Kind of a CIGAR operation, valued by its SAM letter."""

    MATCH = "M"
    INSERTION = "I"
    DELETION = "D"
    SKIP = "N"
    SOFT_CLIP = "S"
    HARD_CLIP = "H"
    PAD = "P"
    SEQUENCE_MATCH = "="
    SEQUENCE_MISMATCH = "X"

    @property
    def consumes_reference(self) -> bool:
        return self in _REFERENCE_KINDS


_REFERENCE_KINDS = frozenset(
    {
        CigarKind.MATCH,
        CigarKind.DELETION,
        CigarKind.SKIP,
        CigarKind.SEQUENCE_MATCH,
        CigarKind.SEQUENCE_MISMATCH,
    }
)


@dataclass(frozen=True)
class CigarOp:
    """A single CIGAR operation."""

    kind: CigarKind
    length: int

    def __str__(self) -> str:
        return f"{self.length}{self.kind.value}"


CigarLike = Union[str, Iterable[CigarOp]]


def parse_cigar(cigar: str) -> list[CigarOp]:
    """Parse a CIGAR string into operations; raise ValueError if malformed."""
    if not _CIGAR_RE.fullmatch(cigar):
        raise ValueError(f"invalid CIGAR string: {cigar!r}")
    return [
        CigarOp(CigarKind(letter), int(length))
        for length, letter in _OP_RE.findall(cigar)
    ]


def _as_ops(ops: CigarLike) -> list[CigarOp]:
    return parse_cigar(ops) if isinstance(ops, str) else list(ops)


def cigar_to_string(ops: Iterable[CigarOp]) -> str:
    """Render CIGAR operations as a string."""
    return "".join(str(op) for op in ops)


def calc_softclips(ops: CigarLike) -> tuple[int, int]:
    """Return the leading and trailing soft-clip lengths.

    A soft clip directly inside a hard clip at either end is counted too.
    """
    ops = _as_ops(ops)
    soft, hard = CigarKind.SOFT_CLIP, CigarKind.HARD_CLIP

    left = 0
    if ops and ops[0].kind is soft:
        left = ops[0].length
    elif len(ops) > 1 and ops[0].kind is hard and ops[1].kind is soft:
        left = ops[1].length

    right = 0
    if ops and ops[-1].kind is soft:
        right = ops[-1].length
    elif len(ops) > 1 and ops[-1].kind is hard and ops[-2].kind is soft:
        right = ops[-2].length

    return left, right


def left_right_soft_clip(cigar_string: str) -> tuple[int, int]:
    """Leading and trailing soft-clip lengths of a CIGAR string."""
    return calc_softclips(parse_cigar(cigar_string))


def alignment_span(ops: CigarLike) -> int:
    """Number of reference bases covered by the alignment."""
    return sum(op.length for op in _as_ops(ops) if op.kind.consumes_reference)