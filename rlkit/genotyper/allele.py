from dataclasses import dataclass

from ..constants import NON_REF_SYMBOLIC_ALLELE_BASES
from ..exceptions import InvalidArgumentError

__all__ = [
    "Allele",
    "NON_REF_SYMBOLIC_ALLELE",
]


@dataclass(frozen=True)
class Allele:
    """
    A candidate sequence hypothesis at a site. Alleles compare equal when both their bases and their reference flag
    match, so the reference "A" and a non-reference "A" are distinct alleles.
    """

    bases: str
    is_reference: bool = False

    def __post_init__(self):
        if not self.bases:
            raise InvalidArgumentError("allele bases cannot be empty")
        if self.is_reference and self.is_symbolic:
            raise InvalidArgumentError(f"symbolic allele {self.bases} cannot be the reference")

    @property
    def is_symbolic(self) -> bool:
        return self.bases.startswith("<") and self.bases.endswith(">")

    def __str__(self) -> str:
        return f"{self.bases}*" if self.is_reference else self.bases


# Stands in for any alternate allele not explicitly enumerated at a site
NON_REF_SYMBOLIC_ALLELE = Allele(NON_REF_SYMBOLIC_ALLELE_BASES)
