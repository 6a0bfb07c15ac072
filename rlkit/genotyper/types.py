from typing import Callable, Collection, Mapping, Protocol, Sequence, TypeVar

__all__ = [
    "AlleleLike",
    "Read",
    "Locatable",
    "AlleleT",
    "ReadsBySample",
    "AlleleBiasedReadSelector",
    "PerReadAlleleLikelihoodMap",
]


class AlleleLike(Protocol):
    @property
    def is_reference(self) -> bool: ...


class Read(Protocol):
    """
    Opaque handle for a sequencing read. Coordinates are 1-based and closed. Implementations must use identity-based
    equality and hashing, since the same sequence may legitimately be seen twice in one sample.
    """

    @property
    def contig(self) -> str | None: ...

    @property
    def unclipped_start(self) -> int: ...

    @property
    def unclipped_end(self) -> int: ...

    @property
    def is_unmapped(self) -> bool: ...

    @property
    def length(self) -> int: ...


class Locatable(Protocol):
    @property
    def contig(self) -> str: ...

    @property
    def start(self) -> int: ...

    @property
    def end(self) -> int: ...


AlleleT = TypeVar("AlleleT", bound=AlleleLike)

ReadsBySample = Mapping[str, Sequence[Read]]

# Given reads stratified by their best allele and a fraction, returns the reads to remove
AlleleBiasedReadSelector = Callable[[Mapping[AlleleLike, list[Read]], float], Collection[Read]]

# key: sample, value: dict of (key: read, value: dict of (key: allele, value: log-likelihood))
PerReadAlleleLikelihoodMap = dict[str, dict[Read, dict[AlleleLike, float]]]
