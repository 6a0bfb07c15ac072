import math
import pytest

from rlkit.exceptions import InvalidArgumentError, UnsupportedStateError
from rlkit.genotyper import Allele, ReadLikelihoods, SimpleInterval, SimpleRead
from rlkit.params import LikelihoodParams

REF = Allele("A", is_reference=True)
ALT_T = Allele("T")


def test_filter_poorly_modeled_reads():
    short_bad = SimpleRead("short_bad", "chr1", 100, 109, 10)
    short_ok = SimpleRead("short_ok", "chr1", 100, 109, 10)
    long_ok = SimpleRead("long_ok", "chr1", 100, 249, 150)
    long_bad = SimpleRead("long_bad", "chr1", 100, 249, 150)
    other = SimpleRead("other", "chr1", 100, 109, 10)

    lks = ReadLikelihoods(
        ["s1", "s2"], [REF, ALT_T], {"s1": [short_bad, short_ok, long_ok, long_bad], "s2": [other]})
    m = lks.sample_matrix(0)

    # floor for 10 bases at 0.01: one error (-4.0); for 150 bases: two errors (-8.0)
    for a, lk in enumerate((-100.0, -100.0)):
        m[a, 0] = lk
    for a, lk in enumerate((-100.0, -3.0)):
        m[a, 1] = lk
    for a, lk in enumerate((-7.9, -100.0)):
        m[a, 2] = lk
    for a, lk in enumerate((-8.1, -9.0)):
        m[a, 3] = lk
    for a, lk in enumerate((-4.0, -4.0)):
        lks.sample_matrix(1)[a, 0] = lk

    lks.filter_poorly_modeled_reads(0.01)

    assert lks.sample_reads(0) == (short_ok, long_ok)
    assert m.as_array().tolist() == [[-100.0, -7.9], [-3.0, -100.0]]
    assert lks.read_index(0, long_ok) == 1
    assert lks.sample_reads(1) == (other,)


def test_filter_poorly_modeled_reads_params():
    read = SimpleRead("r", "chr1", 100, 109, 10)
    params = LikelihoodParams(log10_qual_per_base=-10.0)
    lks = ReadLikelihoods(["s1"], [REF], {"s1": [read]}, params=params)
    lks.sample_matrix(0)[0, 0] = -9.0

    lks.filter_poorly_modeled_reads(0.01)
    assert lks.sample_read_count(0) == 1


def test_filter_poorly_modeled_reads_errors():
    read = SimpleRead("r", "chr1", 100, 109, 10)

    no_alleles = ReadLikelihoods(["s1"], [], {"s1": [read]})
    with pytest.raises(UnsupportedStateError):
        no_alleles.filter_poorly_modeled_reads(0.01)

    lks = ReadLikelihoods(["s1"], [REF], {"s1": [read]})
    for rate in (0.0, -0.01, math.nan, math.inf):
        with pytest.raises(InvalidArgumentError):
            lks.filter_poorly_modeled_reads(rate)


def test_filter_to_only_overlapping_unclipped_reads():
    inside = SimpleRead("inside", "chr1", 90, 189, 100)
    left = SimpleRead("left", "chr1", 1, 99, 99)
    right = SimpleRead("right", "chr1", 201, 300, 100)
    other_contig = SimpleRead("other_contig", "chr2", 100, 199, 100)
    unmapped_in = SimpleRead("unmapped_in", "chr1", 150, 150, 100, is_unmapped=True)
    unplaced = SimpleRead("unplaced", None, 0, 0, 100, is_unmapped=True)

    lks = ReadLikelihoods(
        ["s1", "s2"], [REF, ALT_T],
        {"s1": [left, inside, right, unmapped_in], "s2": [other_contig, unplaced]})
    lks.sample_matrix(0)[1, 1] = -2.0

    lks.filter_to_only_overlapping_unclipped_reads(SimpleInterval("chr1", 100, 200))

    assert lks.sample_reads(0) == (inside, unmapped_in)
    assert lks.sample_matrix(0)[1, 0] == -2.0
    assert lks.sample_reads(1) == ()
    assert lks.read_count() == 2

    with pytest.raises(InvalidArgumentError):
        lks.filter_to_only_overlapping_unclipped_reads(None)
