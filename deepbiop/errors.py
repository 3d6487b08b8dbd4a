"""Error types, default settings and shared type aliases."""

from __future__ import annotations

QUAL_OFFSET = 33
"""Quality score offset used in FASTQ files (Phred+33)."""

BASES = b"ATCGN"
"""Standard DNA bases used for k-mer generation, including N for ambiguous bases."""

KMER_SIZE = 3
"""Default k-mer size for sequence analysis."""

VECTORIZED_TARGET = False
"""Whether targets are vectorized by default."""

IGNORE_LABEL = -100
"""Label value marking entries that are ignored during processing."""

Element = int
Kmer2IdTable = dict[bytes, int]
Id2KmerTable = dict[int, bytes]


class DeepBiopError(Exception):
    """Base class for all errors raised by this package."""

    template = "An error occurred: {}"

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__(self.template.format(detail))


class SeqShorterThanKmerError(DeepBiopError, ValueError):
    """The sequence is shorter than the requested k-mer size."""

    template = "The sequence is shorter than the k-mer size"


class TargetRegionInvalidError(DeepBiopError, ValueError):
    """A target region is empty, reversed or out of bounds."""

    template = "The target region is invalid"


class InvalidKmerIdError(DeepBiopError, ValueError):
    """A k-mer id is unknown, or a k-mer is empty."""

    template = "The k-mer id is invalid"


class InvalidIntervalError(DeepBiopError, ValueError):
    """A genomic interval is malformed."""

    template = "The interval is invalid: {}"


class QualitySequenceLengthError(DeepBiopError, ValueError):
    """A read's sequence and quality scores differ in length."""

    template = "The sequence and quality scores have different lengths: {}"