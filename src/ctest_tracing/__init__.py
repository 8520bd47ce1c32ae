"""The ctest_tracing package."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("ctest-tracing")
except PackageNotFoundError:
    # package is not installed
    __version__ = "unknown"

__all__ = [
    "FinishToken",
    "LanePool",
    "OrphanedFinishError",
    "PendingEntry",
    "Reconstructor",
    "StartToken",
    "Trace",
    "__version__",
    "classify_line",
    "config",
    "configure_logging",
    "dump",
    "dumps",
    "parse_test_finish",
    "parse_test_start",
    "reconstruct",
    "to_event",
]

from ._cfg import config
from ._logging import configure_logging
from .exceptions import OrphanedFinishError
from .parser import (
    FinishToken,
    StartToken,
    classify_line,
    parse_test_finish,
    parse_test_start,
)
from .reconstruct import LanePool, PendingEntry, Reconstructor, reconstruct
from .trace import Trace, dump, dumps, to_event

configure_logging()
