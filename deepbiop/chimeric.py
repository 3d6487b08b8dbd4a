"""Detecting chimeric reads in BAM files and describing chimeric events."""

from __future__ import annotations

import os
import sys
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from typing import Union

from .bamio import BamReader, BamRecord
from .cigar import alignment_span, parse_cigar
from .errors import InvalidIntervalError

PathLike = Union[str, "os.PathLike[str]"]

SA_TAG = "SA"
"""Tag holding other (supplementary) alignments of a read."""


@dataclass(frozen=True)
class GenomicInterval:
    """A region ``[start, end)`` on a named chromosome."""

    chr: str
    start: int
    end: int

    def __str__(self) -> str:
        return f"{self.chr}:{self.start}-{self.end}"


@dataclass
class ChimericEvent:
    """A read's alignments to several genomic intervals."""

    name: str | None = None
    intervals: list[GenomicInterval] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.intervals)

    @classmethod
    def parse_sa_tag(cls, sa_tag: str, name: str | None = None) -> ChimericEvent:
        """Parse an SA tag value of the form ``rname,pos,strand,CIGAR,mapQ,NM;...``.

        Raises InvalidIntervalError for a malformed entry.
        """
        entries = sa_tag.split(";")
        if entries and entries[-1] == "":
            entries.pop()

        intervals = []
        for entry in entries:
            fields = entry.split(",")
            if len(fields) < 6:
                raise InvalidIntervalError(entry)
            reference_name, position, _strand, cigar, _mapq, _nm = fields[:6]
            start = _parse_position(position, entry)
            try:
                span = alignment_span(parse_cigar(cigar))
            except ValueError:
                raise InvalidIntervalError(entry) from None
            intervals.append(GenomicInterval(reference_name, start, start + span))
        return cls(name, intervals)

    @classmethod
    def parse_list_pos(cls, s: str, name: str) -> ChimericEvent:
        """Parse intervals written as ``chr:start-end,chr:start-end``.

        Raises InvalidIntervalError for a malformed interval.
        """
        intervals = []
        for item in s.split(","):
            parts = item.split(":")
            if len(parts) < 2:
                raise InvalidIntervalError(item)
            positions = parts[1].split("-")
            if len(positions) < 2:
                raise InvalidIntervalError(item)
            intervals.append(
                GenomicInterval(
                    parts[0],
                    _parse_position(positions[0], item),
                    _parse_position(positions[1], item),
                )
            )
        return cls(name, intervals)

    @classmethod
    def from_bam_record(
        cls, record: BamRecord, references: Sequence[tuple[str, int]]
    ) -> ChimericEvent:
        """Build an event from a record's own alignment plus its SA tag, if any."""
        if record.ref_id < 0 or record.ref_id >= len(references):
            raise ValueError(f"record {record.name} has no valid reference sequence")
        start = record.alignment_start
        if start is None:
            raise ValueError(f"record {record.name} has no alignment start")
        if record.name is None:
            raise ValueError("BAM record has no read name")

        reference_name = references[record.ref_id][0]
        end = start + alignment_span(record.cigar)
        event = cls(record.name, [GenomicInterval(reference_name, start, end)])

        sa_value = record.tags.get(SA_TAG)
        if isinstance(sa_value, str):
            event.intervals.extend(cls.parse_sa_tag(sa_value).intervals)
        return event


def _parse_position(text: str, context: str) -> int:
    if not (text.isascii() and text.isdigit()):
        raise InvalidIntervalError(context)
    return int(text)


def _check_threads(threads: int | None) -> None:
    if threads is not None and threads < 1:
        raise ValueError("threads must be a positive number")


def is_retain_record(record: BamRecord) -> bool:
    """True for a mapped, primary (neither secondary nor supplementary) record."""
    return not (record.is_unmapped or record.is_secondary or record.is_supplementary)


def is_chimeric_record(record: BamRecord) -> bool:
    """True if the record carries a string SA tag."""
    return isinstance(record.tags.get(SA_TAG), str)


def chimeric_reads_for_bam(bam: PathLike, threads: int | None = None) -> list[BamRecord]:
    """The retained chimeric records of a BAM file, in file order."""
    _check_threads(threads)
    with BamReader(bam) as reader:
        return [
            record
            for record in reader
            if is_retain_record(record) and is_chimeric_record(record)
        ]


def count_chimeric_reads_for_path(bam: PathLike, threads: int | None = None) -> int:
    """Number of retained chimeric records in a BAM file."""
    return len(chimeric_reads_for_bam(bam, threads))


def count_chimeric_reads_for_paths(
    bams: Iterable[PathLike], threads: int | None = None
) -> dict[PathLike, int]:
    """Count chimeric reads for each BAM file.

    A file that cannot be read is reported on standard error and left out.
    """
    counts: dict[PathLike, int] = {}
    for path in bams:
        try:
            counts[path] = count_chimeric_reads_for_path(path, threads)
        except (OSError, ValueError) as exc:
            print(
                f"Error counting chimeric reads for {os.fspath(path)}: {exc}",
                file=sys.stderr,
            )
    return counts


def create_chimeric_events_from_bam(
    bam: PathLike,
    threads: int | None = None,
    predict: Callable[[BamRecord], bool] | None = None,
) -> list[ChimericEvent]:
    """Chimeric events for the retained chimeric records of a BAM file.

    When ``predict`` is given, only records it accepts are used.
    """
    _check_threads(threads)
    with BamReader(bam) as reader:
        references = reader.header.references
        return [
            ChimericEvent.from_bam_record(record, references)
            for record in reader
            if is_retain_record(record)
            and is_chimeric_record(record)
            and (predict is None or predict(record))
        ]