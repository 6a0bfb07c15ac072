import logging
import math
import pytest

from rlkit.exceptions import IndexOutOfRangeError, InvalidArgumentError
from rlkit.logger import attach_stream_handler, get_main_logger, log_levels
from rlkit.utils import contains_no_null, is_positive_finite, non_null, valid_index, validate_arg


def test_valid_index():
    assert valid_index(0, 3) == 0
    assert valid_index(2, 3) == 2

    with pytest.raises(IndexOutOfRangeError):
        valid_index(3, 3)

    with pytest.raises(IndexOutOfRangeError):
        # no from-the-end indexing
        valid_index(-1, 3)

    with pytest.raises(IndexError):
        valid_index(0, 0)


def test_non_null():
    assert non_null(0) == 0
    assert non_null("") == ""

    with pytest.raises(InvalidArgumentError):
        non_null(None)

    with pytest.raises(ValueError):
        contains_no_null(["a", None])

    contains_no_null(["a", "b"])
    contains_no_null([])


def test_validate_arg():
    validate_arg(True, "unused")

    with pytest.raises(InvalidArgumentError) as e:
        validate_arg(False, "bad argument", "try a different one")

    assert str(e.value) == "bad argument"
    assert e.value.hint == "try a different one"


@pytest.mark.parametrize("x,res", [
    (0.01, True),
    (1, True),
    (0.0, False),
    (-0.5, False),
    (math.inf, False),
    (math.nan, False),
])
def test_is_positive_finite(x, res):
    assert is_positive_finite(x) == res


def test_error_logging(caplog):
    lg = logging.getLogger("rlkit-test-errors")

    with caplog.at_level(logging.CRITICAL, logger="rlkit-test-errors"):
        InvalidArgumentError("bad argument", "try a different one").log_error(lg)

    assert [rec.getMessage() for rec in caplog.records] == ["bad argument", "try a different one"]


def test_main_logger():
    lg = get_main_logger(logging.INFO)
    assert lg.name == "rlkit-main"
    assert lg.level == logging.INFO
    assert log_levels["debug"] == logging.DEBUG

    n_handlers = len(lg.handlers)
    attach_stream_handler(logging.DEBUG, lg)
    assert len(lg.handlers) == n_handlers + 1
    lg.removeHandler(lg.handlers[-1])
    lg.setLevel(logging.WARNING)
