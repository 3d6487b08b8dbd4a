# deepbiop

Sequence utilities for computational biology, in pure Python with no
third-party dependencies.

## What it covers

- `deepbiop.kmer`: split sequences into k-mers (`seq_to_kmers`,
  `seq_to_kmers_and_offset`), rebuild sequences from k-mers or k-mer ids
  (`kmers_to_seq`, `kmerids_to_seq`), enumerate k-mers and build lookup tables
  (`generate_kmers`, `generate_kmers_table`), and map target regions between
  base and k-mer coordinates (`to_kmer_target_region`,
  `to_original_target_region`). Functions accept `str` or `bytes`.
- `deepbiop.seq`: `normalize_seq` and `reverse_complement`.
- `deepbiop.cigar`: `parse_cigar`, `cigar_to_string`, `alignment_span`,
  `calc_softclips` and `left_right_soft_clip`, with the `CigarKind` enum and
  the `CigarOp` dataclass.
- `deepbiop.fasta`: `FastaRecord`, `read_fasta` (plain, gzip or BGZF input),
  `write_fa` (to a file or standard output), `write_bgzip_fa`,
  `convert_multiple_fas_to_one_bgzip_fa`, `select_record_from_fa` (by name)
  and `select_record_from_fa_by_random` (reservoir sampling).
- `deepbiop.bgzf`: `BgzfWriter`, a context-managed BGZF writer, and
  `open_input`, which opens plain or gzip-compressed files for reading.
- `deepbiop.bamio`: `BamReader`, `BamHeader`, `BamRecord`, `write_bam`,
  conversion of BAM records to `FastqRecord` with `bam2fq`, and
  `write_fastq` / `write_bgzip_fastq`.
- `deepbiop.chimeric`: `GenomicInterval`, `ChimericEvent` (built from an `SA`
  tag, a `chr:start-end,...` list or a BAM record), `is_retain_record`,
  `is_chimeric_record`, `chimeric_reads_for_bam`,
  `count_chimeric_reads_for_path`, `count_chimeric_reads_for_paths` and
  `create_chimeric_events_from_bam`.
- `deepbiop.errors`: the `DeepBiopError` hierarchy
  (`SeqShorterThanKmerError`, `TargetRegionInvalidError`,
  `InvalidKmerIdError`, `InvalidIntervalError`,
  `QualitySequenceLengthError`) and defaults such as `BASES` and
  `QUAL_OFFSET`.

## Installation

```
pip install .
```

## Library use

```python
from deepbiop.kmer import seq_to_kmers, kmers_to_seq, generate_kmers_table
from deepbiop.seq import reverse_complement
from deepbiop.cigar import left_right_soft_clip
from deepbiop.chimeric import ChimericEvent, count_chimeric_reads_for_path

seq_to_kmers(b"ATCGATCG", 3, True)        # [b"ATC", b"TCG", b"CGA", ...]
kmers_to_seq([b"ATC", b"TCG", b"CGA"])    # b"ATCGA"
generate_kmers_table(b"AC", 2)            # {b"AA": 0, b"AC": 1, b"CA": 2, b"CC": 3}
reverse_complement("ATCG")                # "CGAT"
left_right_soft_clip("10S50M5S")          # (10, 5)

event = ChimericEvent.parse_sa_tag("chr1,100,+,100M,60,0;chr2,200,+,100M,60,0", None)
len(event)                                # 2

count_chimeric_reads_for_path("reads.bam", None)
```

A chimeric read is a mapped, primary record (neither secondary nor
supplementary) that carries a string `SA` tag.

## Command line

```
deepbiop count-chimeric a.bam b.bam              # count chimeric reads per BAM file
deepbiop bam-to-fq reads.bam [-c]                # writes reads.fq, or reads.fq.gz with -c
deepbiop fa-to-fq seqs.fa                        # writes seqs.fq, every quality '@'
deepbiop extract-fa seqs.fa --reads names.txt    # keep the named records
deepbiop extract-fa seqs.fa --number 100         # keep 100 records at random
deepbiop fas-to-one a.fa b.fa --output merged    # merge into merged.fa.gz
```

- `extract-fa` takes either `--reads` (one name per line) or `--number`. It
  writes `<input>.selected.fa` unless `--output` is given, and BGZF output
  (`.fa.gz`) with `-c/--compressed`.
- Every subcommand accepts `-t/--threads` (a positive number, default 2).
- Logging is quiet by default; `-v` shows warnings, `-vv` information such as
  the chimeric counts, `-vvv` debug output. `-q` lowers the level again.
- Failures are printed to standard error and the command exits with status 1.

Run `deepbiop --help` or `deepbiop <subcommand> --help` for every option.

## What it does not do

There is no Parquet output, no FASTQ reading, and so no FASTQ-to-FASTA
conversion, FASTQ extraction or FASTQ merging; FASTQ is only written. Work is
done in a single thread apart from reading several FASTA files at once when
merging.

## Tests

```
pip install .[test]
pytest
```