"""Sequence utilities: k-mers, CIGAR strings, FASTA, BAM and chimeric reads."""

__version__ = "0.1.0"

__all__ = [
    "bamio",
    "bgzf",
    "chimeric",
    "cigar",
    "cli",
    "errors",
    "fasta",
    "kmer",
    "seq",
]