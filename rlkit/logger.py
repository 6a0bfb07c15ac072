import logging
import sys

__all__ = [
    "logger",
    "get_main_logger",
    "attach_stream_handler",
    "log_levels",
]

fmt = logging.Formatter(fmt="%(name)s:\t[%(levelname)s]\t%(message)s")


def get_main_logger(level: int = logging.WARNING) -> logging.Logger:
    lg = logging.getLogger("rlkit-main")
    lg.setLevel(level)
    return lg


def attach_stream_handler(level: int, logger_: logging.Logger | None = None) -> None:
    logger_ = logger_ or logging.getLogger("rlkit-main")
    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(level)
    ch.setFormatter(fmt)
    logger_.addHandler(ch)


log_levels = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}

logger = get_main_logger()
