"""Recognise the two kinds of CTest console lines that matter for tracing.

CTest prints one line when a test is launched::

        Start  1: test_one

and one line when it completes, whatever the outcome::

    1/2 Test #1: test_one .........................   Passed    0.20 sec
    2/2 Test #2: test_two .........................***Not Run   0.00 sec

Every other line is of no interest. None of the functions here raise for any
input string; a line that does not fit a grammar gives ``None``.
"""

import re
from datetime import timedelta

import attrs

# The run index after "Start" only orders the console display, the name is the key.
_START = re.compile(r"\s*Start\s+\d+:\s+(?P<name>\S+)", re.ASCII)

_FINISH = re.compile(
    r"[^:]*:\s+(?P<name>\S+)\D*(?P<seconds>\d+)\.(?P<centiseconds>\d{2})\s+sec",
    re.ASCII,
)


@attrs.define(frozen=True)
class StartToken:
    """A test was launched."""

    test_name: str


@attrs.define(frozen=True)
class FinishToken:
    """A test completed (or was reported as not run) after ``duration``."""

    test_name: str
    duration: timedelta


def parse_test_start(line: str) -> str | None:
    """Return the test name of a "Start" line, or None if ``line`` is not one."""
    match = _START.match(line)
    if match is None:
        return None
    return match["name"]


def parse_test_finish(line: str) -> FinishToken | None:
    """Return the name and duration of a test-completion line.

    The time is read as whole seconds plus centiseconds, both as integers, so
    ``3.32 sec`` gives exactly 3320 milliseconds.
    """
    match = _FINISH.match(line)
    if match is None:
        return None

    duration = timedelta(
        seconds=int(match["seconds"]),
        milliseconds=int(match["centiseconds"]) * 10,
    )
    return FinishToken(test_name=match["name"], duration=duration)


def classify_line(line: str) -> StartToken | FinishToken | None:
    """Turn a raw log line into a token, or None for lines of no interest."""
    if (name := parse_test_start(line)) is not None:
        return StartToken(test_name=name)
    return parse_test_finish(line)
