"""
Logging utilities: colored console output when running in a TTY.
"""

import logging
import os
import sys

DEFAULT_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"
VERBOSE_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DEFAULT_DATEFMT = "%Y-%m-%d %H:%M:%S"

_RESET = "\033[0m"
_LEVEL_COLORS = {
    logging.DEBUG: "\033[2m",
    logging.INFO: "\033[32m",
    logging.WARNING: "\033[33m",
    logging.ERROR: "\033[31m",
    logging.CRITICAL: "\033[1;31m",
}


class ColoredFormatter(logging.Formatter):
    """Colors whole records by level when the target stream is a terminal."""

    def __init__(self, fmt=None, datefmt=None, stream=None):
        super().__init__(fmt, datefmt)
        stream = stream if stream is not None else sys.stderr
        self.use_color = bool(getattr(stream, "isatty", None) and stream.isatty())

    def format(self, record):
        message = super().format(record)
        color = _LEVEL_COLORS.get(record.levelno) if self.use_color else None
        return f"{color}{message}{_RESET}" if color else message


def setup_logging(
    verbose=False,
    log_file=None,
    log_format=None,
    datefmt=DEFAULT_DATEFMT,
    console_level=None,
):
    """
    Configure the root logger: colored console (when TTY) and optional file.

    Console output is WARNING and above unless verbose (DEBUG) or an
    explicit console_level is given. The file handler, when
    configured, always records DEBUG. If PINGONE_FORMS_LOG_FILE is set, it
    is used when log_file is not given.
    """
    if log_format is None:
        log_format = VERBOSE_LOG_FORMAT if verbose else DEFAULT_LOG_FORMAT

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    # Replace any handlers installed earlier in the process
    for handler in list(root.handlers):
        root.removeHandler(handler)

    console = logging.StreamHandler(sys.stderr)
    if console_level is None:
        console_level = logging.DEBUG if verbose else logging.WARNING
    console.setLevel(console_level)
    console.setFormatter(ColoredFormatter(log_format, datefmt=datefmt, stream=console.stream))
    root.addHandler(console)

    path = log_file or os.environ.get("PINGONE_FORMS_LOG_FILE")
    if path:
        file_handler = logging.FileHandler(path, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(VERBOSE_LOG_FORMAT, datefmt=datefmt))
        root.addHandler(file_handler)

    # urllib3 connection chatter is noise even in verbose mode
    logging.getLogger("urllib3").setLevel(logging.WARNING)
