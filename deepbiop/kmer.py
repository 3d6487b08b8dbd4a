"""Splitting sequences into k-mers, rebuilding them, and k-mer lookup tables."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from itertools import product
from typing import TypeVar, Union

from .errors import (
    InvalidKmerIdError,
    Kmer2IdTable,
    SeqShorterThanKmerError,
    TargetRegionInvalidError,
)

_Seq = TypeVar("_Seq", str, bytes)
Region = Union[range, tuple[int, int]]


def _bounds(region: Region) -> tuple[int, int]:
    if isinstance(region, range):
        return region.start, region.stop
    start, end = region
    return start, end


def _join(parts: Iterable[_Seq], like: _Seq) -> _Seq:
    return like[:0].join(parts)


def kmerids_to_seq(kmer_ids: Iterable[int], id2kmer_table: Mapping[int, _Seq]) -> _Seq:
    """Rebuild a sequence from overlapping k-mer ids.

    Raises InvalidKmerIdError if an id is not in the table.
    """
    kmers = []
    for kmer_id in kmer_ids:
        try:
            kmers.append(id2kmer_table[kmer_id])
        except KeyError:
            raise InvalidKmerIdError() from None
    return kmers_to_seq(kmers)


def to_original_target_region(kmer_target: Region, k: int) -> range:
    """Map a k-mer target region back to the matching base region."""
    start, end = _bounds(kmer_target)
    base_end = end + k - 1 if end > start else end
    return range(start, base_end)


def to_kmer_target_region(
    original_target: Region, k: int, seq_len: int | None = None
) -> range:
    """Map a base region of a sequence to the matching k-mer region.

    Raises TargetRegionInvalidError if the region is empty or reversed, if
    ``k`` is 0, or if the region runs past ``seq_len``.
    """
    start, end = _bounds(original_target)
    if start >= end or k == 0:
        raise TargetRegionInvalidError()
    if seq_len is not None and end > seq_len:
        raise TargetRegionInvalidError()

    length = end - start
    num_kmers = length - k + 1 if length >= k else 0
    new_end = start + num_kmers if num_kmers > 0 else end
    return range(start, new_end)


def seq_to_kmers(seq: _Seq, k: int, overlap: bool) -> list[_Seq]:
    """Split a sequence into k-mers.

    Overlapping k-mers step by one base; non-overlapping ones step by ``k``
    and keep a shorter final piece.
    """
    if k <= 0:
        raise ValueError("k must be positive")
    if overlap:
        return [seq[i : i + k] for i in range(len(seq) - k + 1)]
    return [seq[i : i + k] for i in range(0, len(seq), k)]


def kmers_to_seq(kmers: Sequence[_Seq]) -> _Seq:
    """Rebuild a sequence from ordered k-mers overlapping by k-1 bases.

    An empty list gives empty bytes. Raises InvalidKmerIdError if any k-mer
    is empty.
    """
    if not kmers:
        return b""
    first, *rest = kmers
    if not first or any(not kmer for kmer in rest):
        raise InvalidKmerIdError()
    return _join([first, *(kmer[-1:] for kmer in rest)], first)


def seq_to_kmers_and_offset(
    seq: _Seq, kmer_size: int, overlap: bool
) -> list[tuple[_Seq, tuple[int, int]]]:
    """Split a sequence into k-mers paired with their (start, end) offsets.

    Non-overlapping mode drops a trailing piece shorter than ``kmer_size``.
    Raises SeqShorterThanKmerError if ``kmer_size`` is 0 or longer than the
    sequence.
    """
    if kmer_size == 0 or kmer_size > len(seq):
        raise SeqShorterThanKmerError()
    step = 1 if overlap else kmer_size
    return [
        (seq[start : start + kmer_size], (start, start + kmer_size))
        for start in range(0, len(seq) - kmer_size + 1, step)
    ]


def generate_kmers(bases: _Seq, k: int) -> list[_Seq]:
    """All k-mers over ``bases``, in lexicographic order of base positions."""
    if k < 0:
        raise ValueError("k must not be negative")
    if isinstance(bases, str):
        return ["".join(combo) for combo in product(bases, repeat=k)]
    return [bytes(combo) for combo in product(bytes(bases), repeat=k)]


def generate_kmers_table(base: _Seq, k: int) -> Kmer2IdTable:
    """Map every k-mer over ``base`` to its index in generate_kmers order."""
    return {kmer: kmer_id for kmer_id, kmer in enumerate(generate_kmers(base, k))}