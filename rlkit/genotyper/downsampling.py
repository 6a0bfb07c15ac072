from __future__ import annotations

import numpy as np

from numpy.typing import NDArray
from typing import Mapping, Sequence

from ..exceptions import InvalidArgumentError
from .types import AlleleLike, Read

__all__ = [
    "allele_removal_counts",
    "select_allele_biased_reads",
]


def allele_removal_counts(allele_counts: Sequence[int] | NDArray[np.int_], fraction: float) -> NDArray[np.int64]:
    """
    Splits floor(total * fraction) removals across alleles in proportion to their read counts, handing out the
    rounding remainder to the alleles with the largest fractional shares (ties go to the earlier allele).
    :param allele_counts: Number of reads supporting each allele.
    :param fraction: Fraction of all reads to remove, in [0, 1].
    :return: Number of reads to remove from each allele.
    """

    counts = np.asarray(allele_counts, dtype=np.int64)
    n_to_remove = int(counts.sum() * fraction)

    if not n_to_remove:
        return np.zeros_like(counts)

    shares = counts * fraction
    removals = np.floor(shares).astype(np.int64)

    remainder = n_to_remove - int(removals.sum())
    if remainder > 0:
        by_fractional_part = np.argsort(-(shares - removals), kind="stable")
        removals[by_fractional_part[:remainder]] += 1

    return np.minimum(removals, counts)


def select_allele_biased_reads(
    reads_by_allele: Mapping[AlleleLike, Sequence[Read]],
    fraction: float,
    rng: np.random.Generator | None = None,
) -> list[Read]:
    """
    Picks reads to remove so that each allele loses approximately the same fraction of its supporting reads.
    Reads are chosen uniformly at random (without replacement) within each allele.
    :param reads_by_allele: Reads stratified by the allele they best support.
    :param fraction: Fraction of reads to remove, in [0, 1].
    :param rng: Random number generator to use; a fresh, unseeded one if not given.
    :return: Reads to remove, grouped by allele in allele order.
    """

    if np.isnan(fraction) or not 0.0 <= fraction <= 1.0:
        raise InvalidArgumentError(f"downsampling fraction must be in [0, 1] (got {fraction})")

    allele_reads = tuple(reads_by_allele.values())
    removals = allele_removal_counts(tuple(map(len, allele_reads)), fraction)

    if not removals.any():
        return []

    rng = rng if rng is not None else np.random.default_rng()
    to_remove: list[Read] = []

    for reads, n in zip(allele_reads, removals):
        if not n:
            continue
        chosen = np.sort(rng.choice(len(reads), size=int(n), replace=False))
        to_remove.extend(reads[i] for i in chosen)

    return to_remove
