import pytest

from deepbiop.errors import (
    InvalidKmerIdError,
    SeqShorterThanKmerError,
    TargetRegionInvalidError,
)
from deepbiop.kmer import (
    generate_kmers,
    generate_kmers_table,
    kmerids_to_seq,
    kmers_to_seq,
    seq_to_kmers,
    seq_to_kmers_and_offset,
    to_kmer_target_region,
    to_original_target_region,
)


def test_seq_to_kmers():
    seq1 = b"ATCGT"
    k = 2
    assert len(seq_to_kmers(seq1, k, True)) == len(seq1) - k + 1
    assert seq_to_kmers(b"AT", 3, True) == []


def test_seq_to_kmers_examples():
    seq = b"ATCGATCG"
    assert seq_to_kmers(seq, 3, True) == [b"ATC", b"TCG", b"CGA", b"GAT", b"ATC", b"TCG"]
    assert seq_to_kmers(seq, 3, False) == [b"ATC", b"GAT", b"CG"]


def test_seq_to_kmers_str():
    assert seq_to_kmers("ACGT", 2, True) == ["AC", "CG", "GT"]


def test_seq_to_kmers_zero_k():
    with pytest.raises(ValueError):
        seq_to_kmers(b"ACGT", 0, True)


def test_generate_kmers():
    expected1 = [
        "AA", "AC", "AG", "AT", "CA", "CC", "CG", "CT",
        "GA", "GC", "GG", "GT", "TA", "TC", "TG", "TT",
    ]
    assert generate_kmers(b"ACGT", 2) == [s.encode() for s in expected1]

    expected2 = ["AAA", "AAC", "ACA", "ACC", "CAA", "CAC", "CCA", "CCC"]
    assert generate_kmers(b"AC", 3) == [s.encode() for s in expected2]


def test_generate_kmers_str():
    assert generate_kmers("AC", 2) == ["AA", "AC", "CA", "CC"]


def test_generate_kmers_table():
    expected = {
        "AA": 0, "GC": 9, "GT": 11, "CA": 4, "TA": 12, "TC": 13, "CG": 6, "CT": 7,
        "GA": 8, "AG": 2, "AC": 1, "AT": 3, "CC": 5, "GG": 10, "TG": 14, "TT": 15,
    }
    assert generate_kmers_table(b"ACGT", 2) == {k.encode(): v for k, v in expected.items()}


def test_generate_kmers_table_size():
    assert len(generate_kmers_table(b"AC", 2)) == 4


def test_generate_kmers_table_empty_base():
    assert generate_kmers_table(b"", 2) == {}


def test_construct_seq_from_kmers():
    seq = b"AAACGTACGTACGTACGTACGTACGTACGTACGTACGTACGTACGTACGTACGTACGTACGTACGT"
    kmers = seq_to_kmers(seq, 3, True)
    assert kmers_to_seq(kmers) == seq


def test_kmers_to_seq_example():
    assert kmers_to_seq([b"ATC", b"TCG", b"CGA"]) == b"ATCGA"
    assert kmers_to_seq(["ATC", "TCG", "CGA"]) == "ATCGA"


def test_kmers_to_seq_empty_input():
    assert kmers_to_seq([]) == b""


@pytest.mark.parametrize("kmers", [[b"", b"TCG"], [b"ATC", b""]])
def test_kmers_to_seq_empty_kmer(kmers):
    with pytest.raises(InvalidKmerIdError):
        kmers_to_seq(kmers)


def test_kmerids_to_seq():
    table = {kmer_id: kmer for kmer, kmer_id in generate_kmers_table(b"ACGT", 3).items()}
    seq = b"ACGTTGCA"
    ids = [generate_kmers_table(b"ACGT", 3)[kmer] for kmer in seq_to_kmers(seq, 3, True)]
    assert kmerids_to_seq(ids, table) == seq


def test_kmerids_to_seq_unknown_id():
    with pytest.raises(InvalidKmerIdError):
        kmerids_to_seq([0, 999], {0: b"AAA"})


def test_update_target_region():
    assert to_kmer_target_region(range(2, 6), 3, None) == range(2, 4)


def test_update_target_region_valid():
    new_target = to_kmer_target_region(range(0, 10), 3, 20)
    assert new_target.start == 0
    assert new_target.stop == 8


def test_update_target_region_invalid_start_greater_than_end():
    with pytest.raises(TargetRegionInvalidError) as excinfo:
        to_kmer_target_region(range(10, 10), 3, 20)
    assert str(excinfo.value) == "The target region is invalid"


def test_update_target_region_invalid_end_greater_than_seq_len():
    with pytest.raises(TargetRegionInvalidError) as excinfo:
        to_kmer_target_region(range(0, 25), 3, 20)
    assert str(excinfo.value) == "The target region is invalid"


def test_update_target_region_zero_k():
    with pytest.raises(TargetRegionInvalidError):
        to_kmer_target_region(range(0, 5), 0)


def test_kmer_target_region_shorter_than_k():
    assert to_kmer_target_region((3, 5), 4) == range(3, 5)


def test_to_original_target_region():
    assert to_kmer_target_region(range(2, 7), 3, None) == range(2, 5)
    assert to_original_target_region(range(2, 5), 3) == range(2, 7)
    assert to_original_target_region(range(5, 5), 3) == range(5, 5)


def test_target_region_doc_examples():
    assert to_original_target_region(range(0, 3), 4) == range(0, 6)
    assert to_kmer_target_region(range(0, 6), 4, 10) == range(0, 3)


def test_seq_to_kmers_and_offset_overlap():
    seq = b"ATCGATCGATCG"
    result = seq_to_kmers_and_offset(seq, 4, True)
    assert len(result) == len(seq) - 4 + 1
    assert result[0] == (b"ATCG", (0, 4))
    assert result[1] == (b"TCGA", (1, 5))
    assert result[-1] == (b"ATCG", (8, 12))


def test_seq_to_kmers_and_offset_non_overlap():
    seq = b"ATCGATCGATCG"
    result = seq_to_kmers_and_offset(seq, 4, False)
    assert len(result) == len(seq) // 4
    assert result[0] == (b"ATCG", (0, 4))
    assert result[1] == (b"ATCG", (4, 8))


def test_seq_to_kmers_and_offset_example():
    assert seq_to_kmers_and_offset(b"ATCGA", 3, True) == [
        (b"ATC", (0, 3)),
        (b"TCG", (1, 4)),
        (b"CGA", (2, 5)),
    ]


def test_seq_to_kmers_and_offset_drops_short_tail():
    assert seq_to_kmers_and_offset(b"ATCGA", 2, False) == [
        (b"AT", (0, 2)),
        (b"CG", (2, 4)),
    ]


@pytest.mark.parametrize("kmer_size", [0, 6])
def test_seq_to_kmers_and_offset_invalid_size(kmer_size):
    with pytest.raises(SeqShorterThanKmerError):
        seq_to_kmers_and_offset(b"ATCGA", kmer_size, True)