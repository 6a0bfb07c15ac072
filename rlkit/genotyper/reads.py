from __future__ import annotations

from dataclasses import dataclass
from pysam import AlignedSegment

__all__ = [
    "SimpleRead",
    "AlignedRead",
]


# BAM CIGAR operation codes for clipping
CIGAR_SOFT_CLIP = 4
CIGAR_HARD_CLIP = 5
CIGAR_CLIP_OPS = frozenset({CIGAR_SOFT_CLIP, CIGAR_HARD_CLIP})


@dataclass(frozen=True, eq=False)
class SimpleRead:
    """
    Minimal in-memory read handle. Equality and hashing are by identity (eq=False), so two reads with the same
    fields are still distinct reads.
    """

    name: str
    contig: str | None
    unclipped_start: int
    unclipped_end: int
    length: int
    is_unmapped: bool = False


def _clipped_bases(cigar: list[tuple[int, int]] | None) -> int:
    n = 0
    for op, op_len in (cigar or ()):
        if op not in CIGAR_CLIP_OPS:
            break
        n += op_len
    return n


class AlignedRead:
    """
    Read handle backed by a pysam AlignedSegment. pysam segments compare by content, so they are wrapped here to
    get identity-based equality. Coordinates are converted to 1-based, closed.
    """

    __slots__ = ("_segment",)

    def __init__(self, segment: AlignedSegment):
        self._segment = segment

    def __repr__(self) -> str:
        return f"AlignedRead({self.name!r}, {self.contig}:{self.unclipped_start}-{self.unclipped_end})"

    @property
    def segment(self) -> AlignedSegment:
        return self._segment

    @property
    def name(self) -> str | None:
        return self._segment.query_name

    @property
    def contig(self) -> str | None:
        if self._segment.reference_id < 0:
            return None
        return self._segment.reference_name

    @property
    def is_unmapped(self) -> bool:
        return self._segment.is_unmapped

    @property
    def length(self) -> int:
        return self._segment.query_length

    @property
    def unclipped_start(self) -> int:
        start = self._segment.reference_start + 1
        if self.is_unmapped:
            return start
        return start - _clipped_bases(self._segment.cigartuples)

    @property
    def unclipped_end(self) -> int:
        if self.is_unmapped:
            # Placed unmapped reads take their mate's position and have no aligned extent
            return self.unclipped_start
        cigar = self._segment.cigartuples
        return self._segment.reference_end + _clipped_bases(cigar[::-1] if cigar else None)
