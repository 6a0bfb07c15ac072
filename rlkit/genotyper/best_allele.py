from __future__ import annotations

import math

from dataclasses import dataclass
from typing import Generic, Sequence

from ..constants import INFORMATIVE_THRESHOLD, MISSING_REF
from .types import AlleleT, Read

__all__ = [
    "BestAllele",
    "search_best_allele_index",
]

NEG_INF = -math.inf


@dataclass(frozen=True)
class BestAllele(Generic[AlleleT]):
    """
    Result of a best-allele search for a single read.

    allele is None when no allele was eligible; in that case both likelihoods are -inf.
    """

    allele: AlleleT | None
    sample: str
    read: Read
    likelihood: float
    second_best_likelihood: float
    informative_threshold: float = INFORMATIVE_THRESHOLD

    @property
    def confidence(self) -> float:
        # Difference between the best and runner-up likelihoods; 0 for ties or when nothing is possible.
        if self.likelihood == NEG_INF or self.likelihood == self.second_best_likelihood:
            return 0.0
        return self.likelihood - self.second_best_likelihood

    def is_informative(self) -> bool:
        return self.confidence > self.informative_threshold


def search_best_allele_index(
    column: Sequence[float], reference_index: int = MISSING_REF, can_be_reference: bool = True
) -> tuple[int, float, float]:
    """
    Single pass argmax / second-max over one read's allele likelihood column.
    Only strictly greater values replace the current best, so the first allele reaching the maximum wins ties.
    :param column: Likelihood of the read under each allele, in allele index order.
    :param reference_index: Index of the reference allele, or MISSING_REF.
    :param can_be_reference: Whether the reference allele is eligible.
    :return: (best allele index or -1, best likelihood, second-best likelihood)
    """

    skip = -1 if can_be_reference else reference_index

    best_index = -1
    best = NEG_INF
    second_best = NEG_INF

    for a, lk in enumerate(column):
        if a == skip:
            continue
        if best_index == -1:
            best_index = a
            best = lk
        elif lk > best:
            best_index = a
            second_best = best
            best = lk
        elif lk > second_best:
            second_best = lk

    return best_index, best, second_best
