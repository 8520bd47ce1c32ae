"""Configure logging for ctest_tracing.

Several CTest logs are often converted side by side (one per build directory,
possibly in a process pool). The formatter here therefore names the log a
message is about, when the message carries one, and the worker process that
emitted it, so that interleaved output can still be told apart.
"""

import logging
import sys
from multiprocessing import current_process

LOGGER_NAME = "ctest_tracing"

# Attribute set on log records (through ``extra=``) naming the CTest log being read.
SOURCE_ATTR = "ctest_log"


def source_extra(source: str | None) -> dict:
    """The ``extra`` mapping that tags a log record with its CTest log."""
    return {SOURCE_ATTR: source} if source else {}


class ConversionFormatter(logging.Formatter):
    """Logging formatter tagging records with their CTest log and worker process."""

    def __init__(self, logger_name: str = LOGGER_NAME):
        super().__init__(style="{")
        self._logger = logging.getLogger(logger_name)

    def _fields(self, record) -> list[str]:
        fields = ["{asctime}", "{levelname}"]

        if self._logger.getEffectiveLevel() <= logging.DEBUG:
            fields.append("{filename}::{funcName}()")

        if current_process().name != "MainProcess":
            fields.append("worker={processName}[{process}]")

        if getattr(record, SOURCE_ATTR, None):
            fields.append(f"{{{SOURCE_ATTR}}}")

        return fields

    def format(self, record):  # noqa
        """Set the format of the log for this record."""
        self._style = logging.StrFormatStyle(
            " | ".join(self._fields(record)) + " | {message}"
        )
        return super().format(record)


def configure_logging():
    """Configure logging for the 'ctest_tracing' logger.

    Calling this more than once does not add a second handler.
    """
    logger = logging.getLogger(LOGGER_NAME)
    if any(isinstance(h.formatter, ConversionFormatter) for h in logger.handlers):
        return logger

    hdlr = logging.StreamHandler(sys.stderr)
    hdlr.setFormatter(ConversionFormatter())
    logger.addHandler(hdlr)
    return logger
