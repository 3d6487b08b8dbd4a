import gzip

import pytest

from deepbiop.fasta import (
    FastaRecord,
    convert_multiple_fas_to_one_bgzip_fa,
    read_fasta,
    select_record_from_fa,
    select_record_from_fa_by_random,
    write_bgzip_fa,
    write_fa,
)


@pytest.fixture
def fourteen_records():
    return [
        FastaRecord(f"read{i}", "ACGT" * (i + 1) + "N" * i, None if i % 2 else f"desc {i}")
        for i in range(14)
    ]


@pytest.fixture
def fa_path(tmp_path, fourteen_records):
    path = tmp_path / "test.fa"
    write_fa(fourteen_records, path)
    return path


def test_record_data_build():
    record = FastaRecord(id="id", seq="seq")
    assert record.id == "id"
    assert record.seq == "seq"


def test_read_noodle_records_from_fa(fa_path):
    assert len(read_fasta(fa_path)) == 14


def test_round_trip(fa_path, fourteen_records):
    assert read_fasta(fa_path) == fourteen_records


def test_multiline_and_blank_lines(tmp_path):
    path = tmp_path / "multi.fa"
    path.write_text(">r1 first read\nACGT\nTTGG\n\n>r2\nCC\n")
    assert read_fasta(path) == [
        FastaRecord("r1", "ACGTTTGG", "first read"),
        FastaRecord("r2", "CC"),
    ]


def test_long_sequence_wrapped(tmp_path):
    path = tmp_path / "long.fa"
    write_fa([FastaRecord("long", "A" * 200)], path)
    lines = path.read_text().splitlines()
    assert lines[0] == ">long"
    assert all(len(line) <= 80 for line in lines[1:])
    assert "".join(lines[1:]) == "A" * 200


def test_write_to_stdout(capsys):
    write_fa([FastaRecord("r", "ACGT")])
    assert capsys.readouterr().out == ">r\nACGT\n"


def test_sequence_before_definition_raises(tmp_path):
    path = tmp_path / "bad.fa"
    path.write_text("ACGT\n>r\nAC\n")
    with pytest.raises(ValueError):
        read_fasta(path)


def test_bgzip_round_trip(tmp_path, fourteen_records):
    path = tmp_path / "out.fa.gz"
    write_bgzip_fa(fourteen_records, path, threads=2)
    assert path.read_bytes()[:2] == b"\x1f\x8b"
    assert read_fasta(path) == fourteen_records


def test_bgzip_rejects_zero_threads(tmp_path, fourteen_records):
    with pytest.raises(ValueError):
        write_bgzip_fa(fourteen_records, tmp_path / "out.fa.gz", threads=0)


@pytest.mark.parametrize("parallel", [True, False])
def test_convert_multiple(tmp_path, fourteen_records, parallel):
    first, second = tmp_path / "a.fa", tmp_path / "b.fa"
    write_fa(fourteen_records[:5], first)
    write_fa(fourteen_records[5:], second)
    result = tmp_path / "all.fa.gz"
    convert_multiple_fas_to_one_bgzip_fa([first, second], result, parallel)
    assert read_fasta(result) == fourteen_records
    assert gzip.decompress(result.read_bytes()) == (
        first.read_bytes() + second.read_bytes()
    )


def test_select_by_name(fa_path, fourteen_records):
    chosen = select_record_from_fa(fa_path, {"read3", "read7", "missing"})
    assert chosen == [fourteen_records[3], fourteen_records[7]]


def test_select_by_random_subset(fa_path, fourteen_records):
    chosen = select_record_from_fa_by_random(fa_path, 5)
    assert len(chosen) == 5
    assert len({record.id for record in chosen}) == 5
    assert all(record in fourteen_records for record in chosen)


def test_select_by_random_more_than_available(fa_path, fourteen_records):
    chosen = select_record_from_fa_by_random(fa_path, 100)
    assert chosen == fourteen_records


def test_select_by_random_zero(fa_path):
    assert select_record_from_fa_by_random(fa_path, 0) == []