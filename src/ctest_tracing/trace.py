"""Trace records and their serialization to the trace event format.

The output is a JSON array of "complete" events as understood by
``chrome://tracing`` and Perfetto, see
https://docs.google.com/document/d/1CvAClvFfyA5R-PhYUmn5OOQtYMH4h6I0nSsKchNAySU/preview#heading=h.lpfof2aylapb
"""

import json
from collections.abc import Iterable
from datetime import timedelta
from typing import IO

import attrs

CATEGORY = "test"
COMPLETE_EVENT = "X"
PROCESS_ID = 0

_MICROSECOND = timedelta(microseconds=1)


@attrs.define(frozen=True)
class Trace:
    """The reconstructed interval of one test.

    Parameters
    ----------
    name
        The name of the test.
    start
        Offset of the test start from the beginning of the run.
    duration
        How long the test ran.
    lane
        The synthetic thread the test is drawn on.
    """

    name: str
    start: timedelta
    duration: timedelta = attrs.field()
    lane: int = attrs.field(validator=attrs.validators.ge(0))

    @duration.validator
    def _duration_vld(self, attribute, value):
        if value < timedelta(0):
            raise ValueError("duration must be non-negative")

    @property
    def end(self) -> timedelta:
        """Offset of the test end from the beginning of the run."""
        return self.start + self.duration


def _microseconds(td: timedelta) -> int:
    return td // _MICROSECOND


def to_event(trace: Trace) -> dict:
    """Convert a trace into a complete event, with keys in their output order."""
    return {
        "name": trace.name,
        "cat": CATEGORY,
        "ph": COMPLETE_EVENT,
        "ts": _microseconds(trace.start),
        "dur": _microseconds(trace.duration),
        "pid": PROCESS_ID,
        "tid": trace.lane,
    }


def dumps(traces: Iterable[Trace]) -> str:
    """Serialize traces to a compact JSON array."""
    return json.dumps(
        [to_event(t) for t in traces], separators=(",", ":"), ensure_ascii=False
    )


def dump(traces: Iterable[Trace], fp: IO[str]):
    """Write traces as a compact JSON array to a text file object."""
    fp.write(dumps(traces))
