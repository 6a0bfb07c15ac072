import math
import numpy as np
import pytest

from rlkit.exceptions import InvalidArgumentError
from rlkit.genotyper import Allele, ReadLikelihoods, SimpleRead, select_allele_biased_reads
from rlkit.genotyper.downsampling import allele_removal_counts
from rlkit.params import LikelihoodParams

REF = Allele("A", is_reference=True)
ALT_T = Allele("T")
ALT_G = Allele("G")


def make_reads(prefix: str, n: int) -> list[SimpleRead]:
    return [SimpleRead(f"{prefix}{i}", "chr1", 100, 199, 100) for i in range(n)]


@pytest.mark.parametrize("counts,fraction,expected", [
    ([10, 5, 5], 0.5, [5, 3, 2]),
    ([3, 3, 3], 0.5, [2, 1, 1]),
    ([6, 4], 0.5, [3, 2]),
    ([10], 1.0, [10]),
    ([7, 0], 0.1, [0, 0]),
    ([0, 0], 0.3, [0, 0]),
    ([], 0.5, []),
    ([4, 4], 0.0, [0, 0]),
])
def test_allele_removal_counts(counts, fraction, expected):
    assert allele_removal_counts(counts, fraction).tolist() == expected


def test_select_allele_biased_reads():
    ref_reads = make_reads("ref", 10)
    alt_reads = make_reads("alt", 4)
    by_allele = {REF: ref_reads, ALT_T: alt_reads, ALT_G: []}

    chosen = select_allele_biased_reads(by_allele, 0.5, np.random.default_rng(42))
    assert len(chosen) == 7
    assert len(set(chosen)) == 7
    assert sum(1 for r in chosen if r in ref_reads) == 5
    assert sum(1 for r in chosen if r in alt_reads) == 2

    # same seed, same choice
    assert select_allele_biased_reads(by_allele, 0.5, np.random.default_rng(42)) == chosen

    assert select_allele_biased_reads(by_allele, 0.0) == []
    assert set(select_allele_biased_reads(by_allele, 1.0)) == set(ref_reads + alt_reads)
    assert select_allele_biased_reads({}, 0.5) == []


@pytest.mark.parametrize("fraction", [-0.1, 1.5, math.nan])
def test_select_allele_biased_reads_invalid(fraction):
    with pytest.raises(InvalidArgumentError):
        select_allele_biased_reads({REF: make_reads("r", 2)}, fraction)


def make_likelihoods(seed: int | None = None):
    ref_support = make_reads("ref", 6)
    alt_support = make_reads("alt", 4)
    uninformative = make_reads("unk", 2)
    s2_reads = make_reads("b", 3)
    s3_reads = make_reads("c", 2)

    lks = ReadLikelihoods(
        ["s1", "s2", "s3"],
        [REF, ALT_T],
        {"s1": ref_support + alt_support + uninformative, "s2": s2_reads, "s3": s3_reads},
        params=LikelihoodParams(downsampling_seed=seed),
    )

    m = lks.sample_matrix(0)
    for r in range(6):
        m[1, r] = -5.0
    for r in range(6, 10):
        m[0, r] = -5.0

    return lks, (ref_support, alt_support, uninformative, s2_reads, s3_reads)


def test_contamination_downsampling():
    lks, (ref_support, alt_support, uninformative, s2_reads, s3_reads) = make_likelihoods(seed=1234)

    lks.contamination_downsampling({"s1": 0.5, "s2": 1.0})

    remaining = lks.sample_reads(0)
    assert len(remaining) == 7
    assert sum(1 for r in remaining if r in ref_support) == 3
    assert sum(1 for r in remaining if r in alt_support) == 2
    assert all(r in remaining for r in uninformative)
    assert [lks.read_index(0, r) for r in remaining] == list(range(7))

    assert lks.sample_reads(1) == ()
    assert lks.sample_reads(2) == tuple(s3_reads)


def test_contamination_downsampling_seeded():
    a, _ = make_likelihoods(seed=99)
    b = a.copy()

    a.contamination_downsampling({"s1": 0.5})
    b.contamination_downsampling({"s1": 0.5})

    assert a.sample_reads(0) == b.sample_reads(0)
    assert a.sample_read_count(0) == 7


@pytest.mark.parametrize("fraction", [0.0, -0.5, math.nan])
def test_contamination_downsampling_ignored(fraction):
    lks, _ = make_likelihoods()
    lks.contamination_downsampling({"s1": fraction, "s2": fraction})
    assert lks.read_count() == 17


def test_contamination_downsampling_selector():
    lks, (ref_support, alt_support, uninformative, s2_reads, _) = make_likelihoods()
    calls = []

    def first_of_each(reads_by_allele, fraction):
        calls.append((dict(reads_by_allele), fraction))
        return [reads[0] for reads in reads_by_allele.values() if reads] + [s2_reads[0]]

    lks.contamination_downsampling({"s1": 0.25}, selector=first_of_each)

    assert len(calls) == 1
    by_allele, fraction = calls[0]
    assert fraction == 0.25
    assert by_allele == {REF: ref_support, ALT_T: alt_support}

    # reads the sample does not contain are ignored
    assert lks.sample_reads(0) == tuple(ref_support[1:] + alt_support[1:] + uninformative)
    assert lks.sample_reads(1) == tuple(s2_reads)

    with pytest.raises(InvalidArgumentError):
        lks.contamination_downsampling(None)
