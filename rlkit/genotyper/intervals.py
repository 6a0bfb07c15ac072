from dataclasses import dataclass

from ..exceptions import InvalidArgumentError
from .types import Locatable, Read

__all__ = [
    "SimpleInterval",
    "unclipped_read_overlaps_region",
]


@dataclass(frozen=True)
class SimpleInterval:
    """
    Genomic interval on a single contig; 1-based, closed - [start, end].
    """

    contig: str
    start: int
    end: int

    def __post_init__(self):
        if not self.contig:
            raise InvalidArgumentError("interval contig cannot be empty")
        if self.start < 1:
            raise InvalidArgumentError(f"interval start ({self.start}) must be 1 or greater (1-based coordinates)")
        if self.end < self.start:
            raise InvalidArgumentError(f"invalid interval: start ({self.start}) > end ({self.end})")

    def __len__(self) -> int:
        return self.end - self.start + 1

    def __str__(self) -> str:
        return f"{self.contig}:{self.start}-{self.end}"


def unclipped_read_overlaps_region(read: Read, region: Locatable) -> bool:
    """
    Determines whether a read, extended to include its clipped bases, overlaps a region.
    Unmapped reads without a contig never overlap anything.
    :param read: The read to test.
    :param region: The target region (1-based, closed).
    :return: Whether the unclipped span of the read overlaps the region.
    """

    if read.contig is None or read.contig != region.contig:
        return False

    read_start = read.unclipped_start
    if read_start > region.end:
        return False

    read_end = read.unclipped_end if read.is_unmapped else max(read.unclipped_end, read_start)
    return read_end >= region.start
