"""Reading, writing, merging and sampling FASTA records."""

from __future__ import annotations

import io
import os
import random
import sys
from collections.abc import Iterable, Iterator
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Union

from .bgzf import BgzfWriter, open_input

PathLike = Union[str, "os.PathLike[str]"]

LINE_WIDTH = 80


@dataclass
class FastaRecord:
    """A FASTA record: its name, sequence and optional description."""

    id: str
    seq: str
    description: str | None = None


def _parse(lines: Iterable[str]) -> Iterator[FastaRecord]:
    name: str | None = None
    description: str | None = None
    chunks: list[str] = []
    for raw in lines:
        line = raw.strip()
        if line.startswith(">"):
            if name is not None:
                yield FastaRecord(name, "".join(chunks), description)
            parts = line[1:].split(maxsplit=1)
            if not parts:
                raise ValueError("FASTA definition line without a name")
            name = parts[0]
            description = parts[1] if len(parts) > 1 else None
            chunks = []
        elif line:
            if name is None:
                raise ValueError("FASTA sequence before any definition line")
            chunks.append(line)
    if name is not None:
        yield FastaRecord(name, "".join(chunks), description)


def read_fasta(file_path: PathLike) -> list[FastaRecord]:
    """Read all records from a plain, gzip or BGZF FASTA file."""
    with open_input(file_path) as raw, io.TextIOWrapper(raw, encoding="utf-8") as text:
        return list(_parse(text))


def _format(record: FastaRecord) -> str:
    definition = f">{record.id}"
    if record.description:
        definition += f" {record.description}"
    lines = [definition]
    lines.extend(
        record.seq[start : start + LINE_WIDTH]
        for start in range(0, len(record.seq), LINE_WIDTH)
    )
    return "\n".join(lines) + "\n"


def write_fa(records: Iterable[FastaRecord], file_path: PathLike | None = None) -> None:
    """Write records as FASTA to ``file_path``, or to standard output if None."""
    if file_path is None:
        for record in records:
            sys.stdout.write(_format(record))
        sys.stdout.flush()
        return
    with open(file_path, "w", encoding="utf-8", newline="\n") as handle:
        for record in records:
            handle.write(_format(record))


def write_bgzip_fa(
    records: Iterable[FastaRecord], file_path: PathLike, threads: int | None = None
) -> None:
    """Write records as BGZF-compressed FASTA."""
    if threads is not None and threads < 1:
        raise ValueError("threads must be a positive number")
    with BgzfWriter(file_path) as writer:
        for record in records:
            writer.write(_format(record).encode("utf-8"))


def convert_multiple_fas_to_one_bgzip_fa(
    paths: Iterable[PathLike], result_path: PathLike, parallel: bool
) -> None:
    """Concatenate the records of several FASTA files into one BGZF file."""
    paths = list(paths)
    if parallel:
        with ThreadPoolExecutor() as pool:
            per_file = list(pool.map(read_fasta, paths))
    else:
        per_file = [read_fasta(path) for path in paths]
    write_bgzip_fa((record for records in per_file for record in records), result_path)


def select_record_from_fa(
    fa: PathLike, selected_records: Iterable[str]
) -> list[FastaRecord]:
    """Records of ``fa`` whose names are among ``selected_records``, in file order."""
    wanted = set(selected_records)
    return [record for record in read_fasta(fa) if record.id in wanted]


def select_record_from_fa_by_random(fa: PathLike, numbers: int) -> list[FastaRecord]:
    """Pick up to ``numbers`` records uniformly at random by reservoir sampling."""
    with open_input(fa) as raw, io.TextIOWrapper(raw, encoding="utf-8") as text:
        records = _parse(text)
        selected: list[FastaRecord] = []
        for count, record in enumerate(records, start=1):
            if len(selected) < numbers:
                selected.append(record)
                continue
            slot = random.randrange(count)
            if slot < numbers:
                selected[slot] = record
    return selected