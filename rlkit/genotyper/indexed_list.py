from __future__ import annotations

from typing import Generic, Iterable, Iterator, TypeVar

from ..exceptions import InvalidArgumentError
from ..utils import contains_no_null, is_reference_getter, non_null, valid_index

__all__ = [
    "IndexedList",
    "IndexedSampleList",
    "IndexedAlleleList",
]

T = TypeVar("T")


class IndexedList(Generic[T]):
    """
    Immutable, order-preserving, duplicate-free collection mapping each element to a dense 0-based index.
    Duplicates in the input are dropped, keeping the first occurrence.
    """

    _what: str = "element"

    def __init__(self, items: Iterable[T] = ()):
        items = tuple(non_null(items, f"{self._what} list cannot be None"))
        contains_no_null(items, f"{self._what}s cannot be None")
        self._items: tuple[T, ...] = tuple(dict.fromkeys(items))
        self._index: dict[T, int] = {x: i for i, x in enumerate(self._items)}

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(self._items)

    def __contains__(self, item) -> bool:
        return item in self._index

    def __eq__(self, other) -> bool:
        if isinstance(other, IndexedList):
            return self._items == other._items
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._items)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({list(self._items)!r})"

    def index_of(self, item: T) -> int:
        """
        :param item: The element to look up.
        :return: The element's index, or -1 if it is not in the list.
        """
        return self._index.get(item, -1)

    def item_at(self, index: int) -> T:
        return self._items[valid_index(index, len(self._items), self._what + " index")]

    def as_tuple(self) -> tuple[T, ...]:
        return self._items


class IndexedSampleList(IndexedList[str]):
    _what = "sample"

    def number_of_samples(self) -> int:
        return len(self._items)

    def sample_at(self, index: int) -> str:
        return self.item_at(index)


class IndexedAlleleList(IndexedList[T]):
    _what = "allele"

    def number_of_alleles(self) -> int:
        return len(self._items)

    def allele_at(self, index: int) -> T:
        return self.item_at(index)

    def reference_index(self, strict: bool = False) -> int:
        """
        :param strict: Raise InvalidArgumentError if more than one allele is flagged as reference.
        :return: Index of the first allele flagged as reference, or -1 if there is none.
        """
        ref_indices = [i for i, a in enumerate(self._items) if is_reference_getter(a)]
        if strict and len(ref_indices) > 1:
            raise InvalidArgumentError(
                f"there can only be one reference allele (got {', '.join(str(self._items[i]) for i in ref_indices)})")
        return ref_indices[0] if ref_indices else -1
