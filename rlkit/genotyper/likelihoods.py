from __future__ import annotations

import logging
import math
import numpy as np

from functools import partial
from numpy.typing import NDArray
from typing import Callable, Generic, Iterable, Mapping, MutableSequence, Sequence

from ..constants import MISSING_REF
from ..exceptions import IndexOutOfRangeError, UnsupportedStateError
from ..logger import logger as main_logger
from ..params import LikelihoodParams
from ..utils import contains_no_null, is_positive_finite, is_reference_getter, non_null, valid_index, validate_arg
from .allele import NON_REF_SYMBOLIC_ALLELE
from .best_allele import BestAllele, search_best_allele_index
from .downsampling import select_allele_biased_reads
from .indexed_list import IndexedAlleleList, IndexedSampleList
from .intervals import unclipped_read_overlaps_region
from .types import AlleleBiasedReadSelector, AlleleT, Locatable, PerReadAlleleLikelihoodMap, Read, ReadsBySample

__all__ = [
    "LikelihoodMatrix",
    "ReadLikelihoods",
]

NEG_INF = -math.inf


class LikelihoodMatrix(Generic[AlleleT]):
    """
    Allele x read likelihood matrix for one sample of a ReadLikelihoods collection.

    The view holds no data of its own; every call goes through to the owning collection's current storage, so it
    stays valid across read and allele additions/removals.
    """

    __slots__ = ("_owner", "_sample_index")

    def __init__(self, owner: ReadLikelihoods[AlleleT], sample_index: int):
        self._owner = owner
        self._sample_index = sample_index

    def __repr__(self) -> str:
        return (
            f"LikelihoodMatrix(sample={self.sample!r}, alleles={self.number_of_alleles()}, "
            f"reads={self.number_of_reads()})"
        )

    def _values(self) -> NDArray[np.float64]:
        # noinspection PyProtectedMember
        return self._owner._values[self._sample_index]

    def _valid_cell(self, allele_index: int, read_index: int) -> NDArray[np.float64]:
        values = self._values()
        valid_index(allele_index, values.shape[0], "allele index")
        valid_index(read_index, values.shape[1], "read index")
        return values

    @property
    def sample_index(self) -> int:
        return self._sample_index

    @property
    def sample(self) -> str:
        return self._owner.sample_at(self._sample_index)

    @property
    def reads(self) -> tuple[Read, ...]:
        return self._owner.sample_reads(self._sample_index)

    @property
    def alleles(self) -> tuple[AlleleT, ...]:
        return self._owner.alleles

    def number_of_alleles(self) -> int:
        return self._owner.number_of_alleles()

    def number_of_reads(self) -> int:
        return self._owner.sample_read_count(self._sample_index)

    def get(self, allele_index: int, read_index: int) -> float:
        return float(self._valid_cell(allele_index, read_index)[allele_index, read_index])

    def set(self, allele_index: int, read_index: int, value: float) -> None:
        self._valid_cell(allele_index, read_index)[allele_index, read_index] = value

    def __getitem__(self, key: tuple[int, int]) -> float:
        return self.get(*key)

    def __setitem__(self, key: tuple[int, int], value: float) -> None:
        self.set(*key, value)

    def allele_at(self, allele_index: int) -> AlleleT:
        return self._owner.allele_at(allele_index)

    def read_at(self, read_index: int) -> Read:
        # noinspection PyProtectedMember
        sample_reads = self._owner._reads[self._sample_index]
        return sample_reads[valid_index(read_index, len(sample_reads), "read index")]

    def index_of_allele(self, allele: AlleleT) -> int:
        return self._owner.index_of_allele(non_null(allele, "allele cannot be None"))

    def index_of_read(self, read: Read) -> int:
        return self._owner.read_index(self._sample_index, non_null(read, "read cannot be None"))

    def copy_allele_likelihoods(self, allele_index: int, dest: MutableSequence[float], offset: int = 0) -> None:
        """
        Copies one allele's likelihoods, in read order, into a caller-provided buffer.
        :param allele_index: The allele whose row is copied.
        :param dest: Destination buffer (list or numpy array) with room for number_of_reads() values from offset.
        :param offset: Position in dest to start writing at.
        """
        non_null(dest, "destination buffer cannot be None")
        values = self._values()
        valid_index(allele_index, values.shape[0], "allele index")
        n_reads = values.shape[1]
        if offset < 0 or offset + n_reads > len(dest):
            raise IndexOutOfRangeError(
                f"destination of length {len(dest)} cannot hold {n_reads} values from offset {offset}")
        dest[offset:offset + n_reads] = values[allele_index]

    def as_array(self) -> NDArray[np.float64]:
        """
        :return: A copy of the sample's likelihoods, shaped (number of alleles, number of reads).
        """
        return self._values().copy()


class ReadLikelihoods(Generic[AlleleT]):
    """
    Read-likelihood collection: for each sample, allele and read of that sample, the log10 likelihood of the read
    given the allele.

    Storage is one float64 array per sample, shaped (alleles, reads); values[s][a, r] == lk(read r | allele a) where
    read r belongs to sample s. All likelihoods start at 0.

    Not thread-safe; callers must serialize mutating calls against any other access.
    """

    def __init__(
        self,
        samples: IndexedSampleList | Iterable[str],
        alleles: IndexedAlleleList[AlleleT] | Iterable[AlleleT],
        reads: ReadsBySample,
        params: LikelihoodParams | None = None,
        logger_: logging.Logger | None = None,
    ):
        non_null(samples, "sample list cannot be None")
        non_null(alleles, "allele list cannot be None")
        non_null(reads, "read map cannot be None")

        sample_list = samples if isinstance(samples, IndexedSampleList) else IndexedSampleList(samples)
        allele_list = alleles if isinstance(alleles, IndexedAlleleList) else IndexedAlleleList(alleles)

        unknown_samples = [s for s in reads if s not in sample_list]
        validate_arg(not unknown_samples, f"read map references samples not in the sample list: {unknown_samples}")

        n_alleles = len(allele_list)
        reads_by_sample: list[list[Read]] = []
        values_by_sample: list[NDArray[np.float64]] = []

        for sample in sample_list:
            sample_reads = list(reads.get(sample) or ())
            contains_no_null(sample_reads, f"reads for sample {sample} cannot contain None")
            validate_arg(
                len(set(sample_reads)) == len(sample_reads), f"reads for sample {sample} must be pairwise distinct")
            reads_by_sample.append(sample_reads)
            values_by_sample.append(np.zeros((n_alleles, len(sample_reads)), dtype=np.float64))

        self._setup(sample_list, allele_list, reads_by_sample, values_by_sample, params, logger_)

    def _setup(
        self,
        samples: IndexedSampleList,
        alleles: IndexedAlleleList[AlleleT],
        reads: list[list[Read]],
        values: list[NDArray[np.float64]],
        params: LikelihoodParams | None,
        logger_: logging.Logger | None,
    ) -> None:
        self._samples: IndexedSampleList = samples
        self._alleles: IndexedAlleleList[AlleleT] = alleles
        self._reads: list[list[Read]] = reads
        self._values: list[NDArray[np.float64]] = values

        n_samples = len(samples)
        # Lazily built by _read_indices; kept in sync (or renumbered) by every structural read edit
        self._read_index: list[dict[Read, int] | None] = [None] * n_samples
        self._sample_matrices: list[LikelihoodMatrix[AlleleT] | None] = [None] * n_samples

        self._reference_allele_index: int = alleles.reference_index()

        self._params: LikelihoodParams = params or LikelihoodParams()
        self._logger: logging.Logger = logger_ or main_logger

    @classmethod
    def _from_arrays(
        cls,
        samples: IndexedSampleList,
        alleles: IndexedAlleleList,
        reads: list[list[Read]],
        values: list[NDArray[np.float64]],
        params: LikelihoodParams | None,
        logger_: logging.Logger | None,
    ) -> ReadLikelihoods:
        obj = cls.__new__(cls)
        obj._setup(samples, alleles, reads, values, params, logger_)
        return obj

    def __repr__(self) -> str:
        return (
            f"ReadLikelihoods(samples={self.number_of_samples()}, alleles={self.number_of_alleles()}, "
            f"reads={self.read_count()})"
        )

    # ------------------------------------------------------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------------------------------------------------------

    @property
    def params(self) -> LikelihoodParams:
        return self._params

    @property
    def samples(self) -> tuple[str, ...]:
        return self._samples.as_tuple()

    @property
    def alleles(self) -> tuple[AlleleT, ...]:
        return self._alleles.as_tuple()

    @property
    def sample_list(self) -> IndexedSampleList:
        return self._samples

    @property
    def allele_list(self) -> IndexedAlleleList[AlleleT]:
        return self._alleles

    @property
    def reference_allele_index(self) -> int:
        return self._reference_allele_index

    def number_of_samples(self) -> int:
        return len(self._samples)

    def number_of_alleles(self) -> int:
        return len(self._alleles)

    def index_of_sample(self, sample: str) -> int:
        return self._samples.index_of(sample)

    def index_of_allele(self, allele: AlleleT) -> int:
        return self._alleles.index_of(allele)

    def sample_at(self, sample_index: int) -> str:
        return self._samples.sample_at(sample_index)

    def allele_at(self, allele_index: int) -> AlleleT:
        return self._alleles.allele_at(allele_index)

    def _valid_sample_index(self, sample_index: int) -> int:
        return valid_index(sample_index, len(self._samples), "sample index")

    def sample_reads(self, sample_index: int) -> tuple[Read, ...]:
        return tuple(self._reads[self._valid_sample_index(sample_index)])

    def sample_read_count(self, sample_index: int) -> int:
        return len(self._reads[self._valid_sample_index(sample_index)])

    def read_count(self) -> int:
        return sum(map(len, self._reads))

    def sample_matrix(self, sample_index: int) -> LikelihoodMatrix[AlleleT]:
        self._valid_sample_index(sample_index)
        if (matrix := self._sample_matrices[sample_index]) is None:
            matrix = self._sample_matrices[sample_index] = LikelihoodMatrix(self, sample_index)
        return matrix

    def _read_indices(self, sample_index: int) -> dict[Read, int]:
        if (read_index := self._read_index[sample_index]) is None:
            read_index = self._read_index[sample_index] = {r: i for i, r in enumerate(self._reads[sample_index])}
        return read_index

    def read_index(self, sample_index: int, read: Read) -> int:
        """
        :return: Index of the read within the sample, or -1 if the sample does not contain it.
        """
        return self._read_indices(self._valid_sample_index(sample_index)).get(read, -1)

    def copy(self) -> ReadLikelihoods[AlleleT]:
        """
        :return: An independent copy of this collection; no mutable storage is shared with the original.
        """
        return ReadLikelihoods._from_arrays(
            self._samples,
            self._alleles,
            [list(sample_reads) for sample_reads in self._reads],
            [values.copy() for values in self._values],
            self._params.model_copy(),
            self._logger,
        )

    # ------------------------------------------------------------------------------------------------------------------
    # Best allele search
    # ------------------------------------------------------------------------------------------------------------------

    def search_best_allele(self, sample_index: int, read_index: int, can_be_reference: bool = True) -> BestAllele:
        """
        Finds the most likely allele for a read, and the likelihood of the runner-up.
        :param sample_index: Index of the sample the read belongs to.
        :param read_index: Index of the read within the sample.
        :param can_be_reference: Whether the reference allele is eligible as a result.
        :return: The search result; its allele is None if there were no eligible alleles.
        """

        self._valid_sample_index(sample_index)
        values = self._values[sample_index]
        valid_index(read_index, values.shape[1], "read index")

        best_index, best, second_best = search_best_allele_index(
            values[:, read_index].tolist(), self._reference_allele_index, can_be_reference)

        return BestAllele(
            allele=self._alleles.allele_at(best_index) if best_index != -1 else None,
            sample=self._samples.sample_at(sample_index),
            read=self._reads[sample_index][read_index],
            likelihood=best,
            second_best_likelihood=second_best,
            informative_threshold=self._params.informative_threshold,
        )

    def best_alleles(self) -> list[BestAllele]:
        """
        :return: Best allele (reference included) for every read, sample by sample, in read order.
        """
        return [
            self.search_best_allele(s, r, True)
            for s in range(len(self._samples))
            for r in range(len(self._reads[s]))
        ]

    def reads_by_best_allele(self, sample_index: int | None = None) -> dict[AlleleT, list[Read]]:
        """
        Stratifies reads by their best allele. Reads whose best allele is not informative are left out.
        :param sample_index: Restrict to one sample; all samples if None.
        :return: Dictionary with every allele as a key, in allele order.
        """

        result: dict[AlleleT, list[Read]] = {allele: [] for allele in self._alleles}

        sample_indices = range(len(self._samples)) if sample_index is None else (
            self._valid_sample_index(sample_index),)

        for s in sample_indices:
            for r in range(len(self._reads[s])):
                best = self.search_best_allele(s, r, True)
                if best.is_informative():
                    result[best.allele].append(best.read)

        return result

    # ------------------------------------------------------------------------------------------------------------------
    # Normalization
    # ------------------------------------------------------------------------------------------------------------------

    def normalize_likelihoods(self, best_to_zero: bool, maximum_likelihood_difference_cap: float) -> None:
        """
        Caps each read's likelihoods from below, relative to its best alternative allele, and optionally shifts them
        so that the best allele (reference included) has likelihood 0.
        :param best_to_zero: Shift each read's likelihoods so the best one becomes 0.
        :param maximum_likelihood_difference_cap: Maximum difference allowed between the best alternative allele
                                                  likelihood and any other; 0 or negative, -inf for no cap.
        """

        cap = maximum_likelihood_difference_cap
        validate_arg(
            not math.isnan(cap) and cap <= 0.0,
            f"the maximum likelihood difference cap must be 0 or negative (got {cap})")

        if cap == NEG_INF and not best_to_zero:
            return

        n_alleles = len(self._alleles)
        if n_alleles == 0 or (n_alleles == 1 and not best_to_zero):
            return

        for values in self._values:
            if values.shape[1]:
                self._normalize_sample_likelihoods(values, best_to_zero, cap)

    def _normalize_sample_likelihoods(self, values: NDArray[np.float64], best_to_zero: bool, cap: float) -> None:
        # Works on all reads of a sample at once; values is modified in place.
        n_reads = values.shape[1]
        ref = self._reference_allele_index

        alt_values = values if ref == MISSING_REF else np.delete(values, ref, axis=0)
        best_alt = alt_values.max(axis=0) if alt_values.shape[0] else np.full(n_reads, NEG_INF)
        ref_lk = np.full(n_reads, NEG_INF) if ref == MISSING_REF else values[ref]

        worst_cap = best_alt + cap

        if not best_to_zero:
            np.maximum(values, worst_cap, out=values)
            return

        best_abs = np.maximum(best_alt, ref_lk)
        all_impossible = best_abs == NEG_INF

        with np.errstate(invalid="ignore"):
            # Cap (when there is a finite best alternative) and then shift; rows where every allele is impossible
            # would give NaN here and are set to 0 afterwards.
            shifted = np.where(worst_cap != NEG_INF, np.maximum(values, worst_cap), values) - best_abs

        shifted[:, all_impossible] = 0.0
        values[...] = shifted

    # ------------------------------------------------------------------------------------------------------------------
    # Marginalization
    # ------------------------------------------------------------------------------------------------------------------

    def marginalize(
        self,
        new_to_old_allele_map: Mapping[object, Sequence[AlleleT]],
        overlap: Locatable | None = None,
    ) -> ReadLikelihoods:
        """
        Collapses this collection's alleles into a new (usually smaller) allele set, keeping for each read and new
        allele the maximum likelihood among the old alleles it subsumes.
        :param new_to_old_allele_map: Keys are the new alleles, in order; values list the old alleles each replaces.
                                      Old alleles not listed anywhere are dropped.
        :param overlap: If given, only reads whose unclipped span overlaps this interval are kept.
        :return: A new collection with the same samples and the same (or filtered) reads. This one is untouched.
        """

        non_null(new_to_old_allele_map, "the input allele mapping cannot be None")

        new_alleles = tuple(new_to_old_allele_map.keys())
        old_to_new = self._old_to_new_allele_index_map(new_to_old_allele_map, new_alleles)

        reads_to_keep = None if overlap is None else self._overlapping_read_indices_by_sample(overlap)

        new_reads: list[list[Read]] = []
        new_values: list[NDArray[np.float64]] = []

        for s, (sample_reads, values) in enumerate(zip(self._reads, self._values)):
            keep = None
            if reads_to_keep is not None and len(reads_to_keep[s]) != len(sample_reads):
                keep = reads_to_keep[s]

            if keep is None:
                new_reads.append(list(sample_reads))
                new_values.append(self._marginal_likelihoods(values, old_to_new, len(new_alleles)))
            else:
                new_reads.append([sample_reads[r] for r in keep])
                new_values.append(self._marginal_likelihoods(values[:, keep], old_to_new, len(new_alleles)))

        self._logger.debug(
            f"marginalized {len(self._alleles)} alleles into {len(new_alleles)} "
            f"({self.read_count()} -> {sum(map(len, new_reads))} reads)")

        return ReadLikelihoods._from_arrays(
            self._samples,
            IndexedAlleleList(new_alleles),
            new_reads,
            new_values,
            self._params.model_copy(),
            self._logger,
        )

    def _old_to_new_allele_index_map(
        self, new_to_old_allele_map: Mapping[object, Sequence[AlleleT]], new_alleles: tuple
    ) -> NDArray[np.int64]:
        contains_no_null(new_alleles, "new alleles cannot be None")
        IndexedAlleleList(new_alleles).reference_index(strict=True)

        # -1: old allele does not map to any new allele
        old_to_new = np.full(len(self._alleles), -1, dtype=np.int64)

        for new_index, new_allele in enumerate(new_alleles):
            old_alleles = new_to_old_allele_map[new_allele]
            contains_no_null(old_alleles, f"old allele list for new allele {new_allele} cannot be or contain None")
            for old_allele in old_alleles:
                old_index = self._alleles.index_of(old_allele)
                validate_arg(old_index != -1, f"missing old allele {old_allele} in likelihood collection")
                validate_arg(
                    old_to_new[old_index] == -1,
                    f"collision: two new alleles make reference to the same old allele {old_allele}")
                old_to_new[old_index] = new_index

        return old_to_new

    @staticmethod
    def _marginal_likelihoods(
        values: NDArray[np.float64], old_to_new: NDArray[np.int64], n_new_alleles: int
    ) -> NDArray[np.float64]:
        # New alleles with no contributing old alleles stay at -inf.
        result = np.full((n_new_alleles, values.shape[1]), NEG_INF, dtype=np.float64)
        for new_index in range(n_new_alleles):
            old_indices = np.flatnonzero(old_to_new == new_index)
            if old_indices.size:
                result[new_index] = values[old_indices].max(axis=0)
        return result

    def _overlapping_read_indices_by_sample(self, overlap: Locatable) -> list[NDArray[np.intp]]:
        return [
            np.fromiter(
                (r for r, read in enumerate(sample_reads) if unclipped_read_overlaps_region(read, overlap)),
                dtype=np.intp,
            )
            for sample_reads in self._reads
        ]

    # ------------------------------------------------------------------------------------------------------------------
    # Allele-set mutation
    # ------------------------------------------------------------------------------------------------------------------

    def _append_alleles(
        self, new_alleles: Sequence[AlleleT], make_rows: Callable[[NDArray[np.float64]], NDArray[np.float64]]
    ) -> None:
        # Single owner of the allele dimension: every sample's array grows in lockstep with the allele list.
        # New rows are computed from the current values before anything is replaced.
        new_rows = [make_rows(values) for values in self._values]

        alleles = IndexedAlleleList(self._alleles.as_tuple() + tuple(new_alleles))
        ref_index = self._reference_allele_index
        if ref_index == MISSING_REF:
            ref_index = alleles.reference_index(strict=True)

        self._alleles = alleles
        self._reference_allele_index = ref_index

        for s, rows in enumerate(new_rows):
            self._values[s] = np.vstack((self._values[s], rows))

        self._logger.debug(f"added alleles {', '.join(map(str, new_alleles))}; now {len(self._alleles)} alleles")

    @staticmethod
    def _second_best_likelihoods(values: NDArray[np.float64]) -> NDArray[np.float64]:
        # Per read, the second-best likelihood over all alleles; if there is no finite runner-up (including the
        # single-allele case), the best likelihood itself.
        n_alleles, n_reads = values.shape
        if n_alleles == 0:
            return np.full(n_reads, NEG_INF)
        if n_alleles == 1:
            return values[0].copy()
        second_best, best = np.partition(values, n_alleles - 2, axis=0)[-2:]
        return np.where(second_best == NEG_INF, best, second_best)

    def add_non_reference_allele(self, non_ref_allele: AlleleT) -> None:
        """
        Adds the <NON_REF> symbolic allele, giving each read the second-best likelihood among the existing alleles
        (or the best one, if there is no runner-up). Does nothing if <NON_REF> is already present.
        :param non_ref_allele: Must be NON_REF_SYMBOLIC_ALLELE.
        """

        non_null(non_ref_allele, "non-ref allele cannot be None")
        validate_arg(
            non_ref_allele == NON_REF_SYMBOLIC_ALLELE,
            f"the non-ref allele is not valid: {non_ref_allele}",
            f"use {NON_REF_SYMBOLIC_ALLELE} (rlkit.genotyper.allele.NON_REF_SYMBOLIC_ALLELE)")

        if non_ref_allele in self._alleles:
            return

        self._append_alleles((non_ref_allele,), lambda values: self._second_best_likelihoods(values)[np.newaxis, :])

    def add_missing_alleles(self, candidate_alleles: Iterable[AlleleT], default_likelihood: float) -> None:
        """
        Appends the candidate alleles not already present, with every read given the default likelihood.
        :param candidate_alleles: Potentially missing alleles.
        :param default_likelihood: Likelihood for all reads under the added alleles.
        """

        non_null(candidate_alleles, "the candidate allele collection cannot be None")
        candidates = tuple(candidate_alleles)
        contains_no_null(candidates, "candidate alleles cannot be None")

        to_add = tuple(a for a in dict.fromkeys(candidates) if a not in self._alleles)
        if not to_add:
            return

        n_new_refs = sum(map(is_reference_getter, to_add))
        if self._reference_allele_index != MISSING_REF:
            validate_arg(not n_new_refs, "there can only be one reference allele")
        else:
            validate_arg(n_new_refs <= 1, "there can only be one reference allele")

        def _default_rows(values: NDArray[np.float64]) -> NDArray[np.float64]:
            if default_likelihood == 0.0:
                return np.zeros((len(to_add), values.shape[1]), dtype=np.float64)
            return np.full((len(to_add), values.shape[1]), default_likelihood, dtype=np.float64)

        self._append_alleles(to_add, _default_rows)

    # ------------------------------------------------------------------------------------------------------------------
    # Read-set mutation
    # ------------------------------------------------------------------------------------------------------------------

    def add_reads(self, reads_by_sample: ReadsBySample, initial_likelihood: float) -> None:
        """
        Appends reads to samples. Each entry is validated and applied in turn, so a failure on one sample leaves the
        reads of samples processed before it added.
        :param reads_by_sample: New reads for each (existing) sample.
        :param initial_likelihood: Likelihood for every new read under every allele.
        """

        non_null(reads_by_sample, "the read map cannot be None")

        for sample, new_reads in reads_by_sample.items():
            sample_index = self._samples.index_of(sample)
            validate_arg(sample_index != -1, f"input sample {sample} is not part of the read-likelihoods collection")

            if not new_reads:
                continue

            new_reads = list(new_reads)
            contains_no_null(new_reads, f"new reads for sample {sample} cannot contain None")

            existing = self._read_indices(sample_index)
            validate_arg(
                len(set(new_reads)) == len(new_reads) and not any(r in existing for r in new_reads),
                f"new reads for sample {sample} must be distinct and not already in the collection")

            self._append_reads(sample_index, new_reads, initial_likelihood)

    def _append_reads(self, sample_index: int, new_reads: list[Read], initial_likelihood: float) -> None:
        sample_reads = self._reads[sample_index]
        first_new = len(sample_reads)
        sample_reads.extend(new_reads)

        if (read_index := self._read_index[sample_index]) is not None:
            read_index.update((read, first_new + i) for i, read in enumerate(new_reads))

        values = self._values[sample_index]
        shape = (values.shape[0], len(new_reads))
        extension = np.zeros(shape) if initial_likelihood == 0.0 else np.full(shape, initial_likelihood)
        self._values[sample_index] = np.hstack((values, extension))

    def change_reads(self, read_realignments: Mapping[Read, Read]) -> None:
        """
        Replaces read handles in place (e.g. with realigned versions); likelihoods are kept as they are.
        :param read_realignments: Mapping of old read to its replacement.
        """

        non_null(read_realignments, "the read replacement map cannot be None")

        # Resulting read lists are computed and checked for every sample before any is replaced
        changed_by_sample: list[list[tuple[int, Read, Read]]] = []
        for s, sample_reads in enumerate(self._reads):
            changed = [
                (r, read, replacement)
                for r, read in enumerate(sample_reads)
                if (replacement := read_realignments.get(read)) is not None
            ]
            if changed:
                new_reads = list(sample_reads)
                for r, _, replacement in changed:
                    new_reads[r] = replacement
                validate_arg(
                    len(set(new_reads)) == len(new_reads),
                    f"read replacements for sample {self._samples.sample_at(s)} would duplicate a read")
            changed_by_sample.append(changed)

        for s, changed in enumerate(changed_by_sample):
            sample_reads = self._reads[s]
            read_index = self._read_index[s]
            for r, read, replacement in changed:
                sample_reads[r] = replacement
                if read_index is not None:
                    # An earlier replacement in this loop may already have claimed the old read's entry
                    if read_index.get(read) == r:
                        del read_index[read]
                    read_index[replacement] = r

    def remove_sample_read_indices(self, sample_index: int, remove_indices: Iterable[int]) -> int:
        """
        Removes reads from a sample by position, compacting the read list and every allele row.
        :param sample_index: The sample to remove reads from.
        :param remove_indices: Positions of the reads to remove; order and repeats do not matter.
        :return: Number of reads removed.
        """

        self._valid_sample_index(sample_index)
        non_null(remove_indices, "the read indices to remove cannot be None")
        n_reads = len(self._reads[sample_index])

        remove = sorted(set(valid_index(int(r), n_reads, "read index") for r in remove_indices))
        if not remove:
            return 0

        keep_mask = np.ones(n_reads, dtype=bool)
        keep_mask[remove] = False
        self._compact_sample_reads(sample_index, keep_mask, remove[0])
        return len(remove)

    def remove_sample_reads(self, sample_index: int, reads_to_remove: Iterable[Read]) -> int:
        """
        Removes reads from a sample by handle. Reads not in the sample are ignored.
        :param sample_index: The sample to remove reads from.
        :param reads_to_remove: Read handles to remove.
        :return: Number of reads removed.
        """

        non_null(reads_to_remove, "the reads to remove cannot be None")
        read_index = self._read_indices(self._valid_sample_index(sample_index))
        return self.remove_sample_read_indices(
            sample_index, [read_index[read] for read in reads_to_remove if read in read_index])

    def _compact_sample_reads(self, sample_index: int, keep_mask: NDArray[np.bool_], first_removed: int) -> None:
        old_reads = self._reads[sample_index]

        # Reads before the first removed position do not move.
        new_reads = old_reads[:first_removed]
        new_reads.extend(read for read, keep in zip(old_reads[first_removed:], keep_mask[first_removed:]) if keep)

        self._values[sample_index] = self._values[sample_index][:, keep_mask]

        if (read_index := self._read_index[sample_index]) is not None:
            for r in np.flatnonzero(~keep_mask):
                del read_index[old_reads[r]]
            for r in range(first_removed, len(new_reads)):
                read_index[new_reads[r]] = r

        self._reads[sample_index] = new_reads

    # ------------------------------------------------------------------------------------------------------------------
    # Filtering and downsampling
    # ------------------------------------------------------------------------------------------------------------------

    def filter_poorly_modeled_reads(self, maximum_error_per_base: float) -> None:
        """
        Removes reads whose likelihood under every allele falls below what a read with a small number of base errors
        (at most ceil(read length * maximum_error_per_base), capped) would have.
        :param maximum_error_per_base: Tolerated error rate per read base; a positive, finite number.
        """

        if not self._alleles:
            raise UnsupportedStateError("unsupported for read-likelihood collections with no alleles")
        validate_arg(
            is_positive_finite(maximum_error_per_base),
            f"the maximum error per base must be a positive finite number (got {maximum_error_per_base})")

        for s, sample_reads in enumerate(self._reads):
            if not sample_reads:
                continue

            floors = np.fromiter(
                (self._params.poorly_modeled_floor(read.length, maximum_error_per_base) for read in sample_reads),
                dtype=np.float64,
                count=len(sample_reads),
            )
            poorly_modeled = ~(self._values[s] >= floors).any(axis=0)

            if n_removed := self.remove_sample_read_indices(s, np.flatnonzero(poorly_modeled).tolist()):
                self._logger.debug(f"{self._samples.sample_at(s)}: removed {n_removed} poorly modeled reads")

    def filter_to_only_overlapping_unclipped_reads(self, location: Locatable) -> None:
        """
        Removes reads whose unclipped span does not overlap a location.
        :param location: The target location.
        """

        non_null(location, "the location cannot be None")

        for s, sample_reads in enumerate(self._reads):
            remove = [r for r, read in enumerate(sample_reads) if not unclipped_read_overlaps_region(read, location)]
            if n_removed := self.remove_sample_read_indices(s, remove):
                self._logger.debug(f"{self._samples.sample_at(s)}: removed {n_removed} reads not overlapping {location}")

    def contamination_downsampling(
        self,
        per_sample_downsampling_fraction: Mapping[str, float],
        selector: AlleleBiasedReadSelector | None = None,
    ) -> None:
        """
        Downsamples reads based on contamination fractions, making sure all alleles are affected proportionally.
        Only reads with an informative best allele are candidates for removal, unless the fraction is 1 or more, in
        which case all of the sample's reads are removed.
        :param per_sample_downsampling_fraction: Fraction per sample name; missing, NaN or non-positive fractions are
                                                 ignored.
        :param selector: Picks the reads to remove given reads stratified by best allele and a fraction. Defaults to
                         select_allele_biased_reads, seeded from params.downsampling_seed.
        """

        non_null(per_sample_downsampling_fraction, "the downsampling fraction map cannot be None")

        if selector is None:
            selector = partial(
                select_allele_biased_reads, rng=np.random.default_rng(self._params.downsampling_seed))

        for s, sample in enumerate(self._samples):
            fraction = per_sample_downsampling_fraction.get(sample)
            if fraction is None or math.isnan(fraction) or fraction <= 0.0:
                continue

            if fraction >= 1.0:
                n_removed = self.remove_sample_read_indices(s, range(len(self._reads[s])))
            else:
                n_removed = self.remove_sample_reads(s, selector(self.reads_by_best_allele(s), fraction))

            self._logger.debug(f"{sample}: contamination downsampling ({fraction}) removed {n_removed} reads")

    # ------------------------------------------------------------------------------------------------------------------
    # Conversion
    # ------------------------------------------------------------------------------------------------------------------

    @classmethod
    def from_per_read_allele_likelihood_map(
        cls,
        likelihood_map: PerReadAlleleLikelihoodMap,
        params: LikelihoodParams | None = None,
        logger_: logging.Logger | None = None,
    ) -> ReadLikelihoods:
        """
        Builds a collection from nested {sample: {read: {allele: likelihood}}} dictionaries. Alleles are ordered by
        first appearance; read-allele pairs missing from the input get likelihood 0.
        """

        non_null(likelihood_map, "the likelihood map cannot be None")

        alleles: dict = {}
        reads: dict[str, list[Read]] = {}
        for sample, per_read in likelihood_map.items():
            for read_likelihoods in per_read.values():
                alleles.update(dict.fromkeys(read_likelihoods))
            reads[sample] = list(per_read)

        result = cls(IndexedSampleList(likelihood_map), IndexedAlleleList(alleles), reads, params, logger_)

        for sample, per_read in likelihood_map.items():
            values = result._values[result.index_of_sample(sample)]
            for r, read_likelihoods in enumerate(per_read.values()):
                for allele, lk in read_likelihoods.items():
                    values[result.index_of_allele(allele), r] = lk

        return result

    def to_per_read_allele_likelihood_map(self) -> PerReadAlleleLikelihoodMap:
        """
        :return: Nested {sample: {read: {allele: likelihood}}} dictionaries, in sample, read and allele order.
        """
        alleles = self._alleles.as_tuple()
        return {
            sample: {
                read: dict(zip(alleles, values[:, r].tolist()))
                for r, read in enumerate(sample_reads)
            }
            for sample, sample_reads, values in zip(self._samples, self._reads, self._values)
        }
