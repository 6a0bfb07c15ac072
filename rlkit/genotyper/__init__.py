from __future__ import annotations

from .allele import Allele, NON_REF_SYMBOLIC_ALLELE
from .best_allele import BestAllele
from .downsampling import select_allele_biased_reads
from .indexed_list import IndexedAlleleList, IndexedSampleList
from .intervals import SimpleInterval, unclipped_read_overlaps_region
from .likelihoods import LikelihoodMatrix, ReadLikelihoods
from .reads import AlignedRead, SimpleRead

__all__ = [
    "Allele",
    "NON_REF_SYMBOLIC_ALLELE",
    "BestAllele",
    "select_allele_biased_reads",
    "IndexedAlleleList",
    "IndexedSampleList",
    "SimpleInterval",
    "unclipped_read_overlaps_region",
    "LikelihoodMatrix",
    "ReadLikelihoods",
    "AlignedRead",
    "SimpleRead",
]
