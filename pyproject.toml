[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "deepbiop"
version = "0.1.0"
description = "Sequence utilities for computational biology: k-mers, CIGAR strings, FASTA and BAM handling, and chimeric read detection"
requires-python = ">=3.10"
keywords = ["bioinformatics", "bam", "fasta", "fastq", "kmer", "cigar", "chimeric", "bgzf"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Bio-Informatics",
]
dependencies = []

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
deepbiop = "deepbiop.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["deepbiop"]

[tool.pytest.ini_options]
addopts = "-ra"
