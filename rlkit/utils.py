from __future__ import annotations

import math
import operator
from functools import partial
from typing import Any, Iterable

from .exceptions import IndexOutOfRangeError, InvalidArgumentError

__all__ = [
    "is_none",
    "is_reference_getter",
    "non_null",
    "contains_no_null",
    "validate_arg",
    "valid_index",
    "is_positive_finite",
]


# index/property getters and other partials
is_none = partial(operator.is_, None)
is_reference_getter = operator.attrgetter("is_reference")


def non_null(x: Any, msg: str = "argument cannot be None") -> Any:
    if x is None:
        raise InvalidArgumentError(msg)
    return x


def contains_no_null(xs: Iterable, msg: str = "collection cannot contain None") -> None:
    if any(map(is_none, non_null(xs, msg))):
        raise InvalidArgumentError(msg)


def validate_arg(condition: bool, msg: str, hint: str | None = None) -> None:
    if not condition:
        raise InvalidArgumentError(msg, hint)


def valid_index(index: int, length: int, what: str = "index") -> int:
    """
    Checks that an index falls within [0, length). Negative (Python-style, from-the-end) indices are rejected.
    :param index: The index to check.
    :param length: Length of the indexed dimension.
    :param what: Name of the dimension, for the error message.
    :return: The index itself, so this can be used inline.
    """
    if not 0 <= index < length:
        raise IndexOutOfRangeError(f"{what} {index} out of range [0, {length})")
    return index


def is_positive_finite(x: float) -> bool:
    return not math.isnan(x) and not math.isinf(x) and x > 0.0
