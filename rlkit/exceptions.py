from logging import Logger

__all__ = [
    "RLKitError",
    "InvalidArgumentError",
    "IndexOutOfRangeError",
    "UnsupportedStateError",
]


class RLKitError(Exception):
    def __init__(self, error_str: str, hint_msg: str | None = None):
        self._error_str = error_str
        self._hint_msg = hint_msg
        super().__init__(error_str)

    @property
    def hint(self) -> str | None:
        return self._hint_msg

    def log_error(self, logger: Logger) -> None:
        logger.critical(self._error_str)
        if self._hint_msg:
            logger.critical(self._hint_msg)


class InvalidArgumentError(RLKitError, ValueError):
    """
    Raised for absent required inputs, out-of-range numeric parameters, references to unknown samples/alleles/reads,
    attempts to add a second reference allele and allele-mapping collisions.
    """
    pass


class IndexOutOfRangeError(RLKitError, IndexError):
    pass


class UnsupportedStateError(RLKitError, RuntimeError):
    pass
