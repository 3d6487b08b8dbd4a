"""Command-line tools for BAM and FASTA files."""

from __future__ import annotations

import argparse
import logging
import sys
import time
from collections.abc import Callable, Sequence
from pathlib import Path

from .bamio import FastqRecord, bam2fq, write_bgzip_fastq, write_fastq
from .chimeric import count_chimeric_reads_for_paths
from .errors import DeepBiopError
from .fasta import (
    convert_multiple_fas_to_one_bgzip_fa,
    read_fasta,
    select_record_from_fa,
    select_record_from_fa_by_random,
    write_bgzip_fa,
    write_fa,
)

logger = logging.getLogger("deepbiop")

DEFAULT_THREADS = 2
_FAKE_QUALITY = "@"
_LEVELS = [logging.ERROR, logging.WARNING, logging.INFO, logging.DEBUG]


def _with_extension(path: Path, extension: str) -> Path:
    return path.with_suffix("." + extension)


def _positive_int(text: str) -> int:
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number: {text!r}") from None
    if value < 1:
        raise argparse.ArgumentTypeError("must be a positive number")
    return value


def _non_negative_int(text: str) -> int:
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number: {text!r}") from None
    if value < 0:
        raise argparse.ArgumentTypeError("must not be negative")
    return value


def parse_reads(path: str | Path) -> set[str]:
    """Read names listed one per line in a text file."""
    with open(path, encoding="utf-8") as handle:
        return {line.removesuffix("\n").removesuffix("\r") for line in handle}


def _set_up_threads(threads: int) -> None:
    logger.info("Threads number: %s", threads)


def _count_chimeric(args: argparse.Namespace) -> None:
    _set_up_threads(args.threads)
    counts = count_chimeric_reads_for_paths(args.bam, args.threads)
    for path, count in counts.items():
        logger.info("%s: %s", path, count)


def _bam_to_fq(args: argparse.Namespace) -> None:
    _set_up_threads(args.threads)
    for bam in args.bam:
        records = bam2fq(bam, args.threads)
        if args.compressed:
            write_bgzip_fastq(records, _with_extension(bam, "fq.gz"))
        else:
            write_fastq(records, _with_extension(bam, "fq"))


def _fa_to_fq(args: argparse.Namespace) -> None:
    _set_up_threads(args.threads)
    for fa in args.fa:
        records = (
            FastqRecord(record.id, record.seq, _FAKE_QUALITY * len(record.seq))
            for record in read_fasta(fa)
        )
        write_fastq(records, _with_extension(fa, "fq"))


def _output_path(args: argparse.Namespace, extension: str) -> Path:
    if args.output is not None:
        path = _with_extension(args.output, extension)
        if path.exists():
            logger.info("%s already exists, overwriting", path)
        return path
    return _with_extension(args.fa, "selected." + extension)


def _extract_fa(args: argparse.Namespace) -> None:
    _set_up_threads(args.threads)
    if args.reads is not None:
        reads = parse_reads(args.reads)
        records = select_record_from_fa(args.fa, reads)
        logger.info("load %d selected reads from %s", len(reads), args.reads)
    elif args.number is not None:
        records = select_record_from_fa_by_random(args.fa, args.number)
        logger.info("select %d reads by random", args.number)
    else:
        raise ValueError("Either --reads or --number must be specified")

    logger.info("collect %d records", len(records))
    if args.compressed:
        path = _output_path(args, "fa.gz")
        logger.info("write to %s", path)
        write_bgzip_fa(records, path, args.threads)
    else:
        path = _output_path(args, "fa")
        logger.info("write to %s", path)
        write_fa(records, path)


def _fas_to_one(args: argparse.Namespace) -> None:
    _set_up_threads(args.threads)
    output = _with_extension(args.output, "fa.gz")
    convert_multiple_fas_to_one_bgzip_fa(args.fas, output, True)


def _add_threads(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-t", "--threads", type=_positive_int, default=DEFAULT_THREADS,
        help="threads number",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="deepbiop", description="Tools for BAM and FASTA files."
    )
    parser.add_argument("-v", "--verbose", action="count", default=0,
                        help="increase logging verbosity")
    parser.add_argument("-q", "--quiet", action="count", default=0,
                        help="decrease logging verbosity")
    commands = parser.add_subparsers(dest="command")

    count = commands.add_parser("count-chimeric", help="Count chimeric reads in a BAM file.")
    count.add_argument("bam", nargs="*", type=Path, help="path to the bam file")
    _add_threads(count)
    count.set_defaults(handler=_count_chimeric)

    b2f = commands.add_parser("bam-to-fq", help="BAM to fastq conversion.")
    b2f.add_argument("bam", nargs="*", type=Path, help="path to the bam file")
    _add_threads(b2f)
    b2f.add_argument("-c", "--compressed", action="store_true",
                     help="output bgzip compressed fastq file")
    b2f.set_defaults(handler=_bam_to_fq)

    f2q = commands.add_parser("fa-to-fq", help="Fasta to fastq conversion.")
    f2q.add_argument("fa", nargs="*", type=Path, help="path to the fa file")
    _add_threads(f2q)
    f2q.set_defaults(handler=_fa_to_fq)

    extract = commands.add_parser("extract-fa", help="Extract fasta reads from a fasta file.")
    extract.add_argument("fa", type=Path, help="path to the fa file")
    choice = extract.add_mutually_exclusive_group()
    choice.add_argument("--reads", type=Path, help="path to the selected reads")
    choice.add_argument("--number", type=_non_negative_int,
                        help="the number of selected reads by random")
    extract.add_argument("--output", type=Path, help="output file")
    _add_threads(extract)
    extract.add_argument("-c", "--compressed", action="store_true",
                         help="output bgzip compressed fasta file")
    extract.set_defaults(handler=_extract_fa)

    merge = commands.add_parser("fas-to-one", help="Multiple Fastas to one Fasta conversion.")
    merge.add_argument("fas", nargs="*", type=Path, help="path to the fa files")
    merge.add_argument("--output", type=Path, required=True,
                       help="output bgzip compressed file")
    _add_threads(merge)
    merge.set_defaults(handler=_fas_to_one)

    return parser


def _configure_logging(verbosity: int) -> None:
    if verbosity < 0:
        level = logging.CRITICAL + 1
    else:
        level = _LEVELS[min(verbosity, len(_LEVELS) - 1)]
    logger.setLevel(level)
    if not logger.handlers and not logging.getLogger().handlers:
        logging.basicConfig(format="%(levelname)s %(name)s: %(message)s")


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command line; return the process exit status."""
    start = time.perf_counter()
    args = _build_parser().parse_args(argv)
    _configure_logging(args.verbose - args.quiet)

    handler: Callable[[argparse.Namespace], None] | None = getattr(args, "handler", None)
    if handler is None:
        print("No command provided!")
        return 0

    try:
        handler(args)
    except (DeepBiopError, OSError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    logger.info("elapsed time: %.2fs", time.perf_counter() - start)
    return 0


if __name__ == "__main__":
    sys.exit(main())