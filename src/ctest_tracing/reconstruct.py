"""Rebuild timed test intervals from the order of start and finish lines.

The CTest console log carries no timestamps and no thread information: it only
says that a test started, and later that it finished after some time. The
:class:`Reconstructor` keeps a virtual clock which is moved forward to the end
of every test that finishes; tests starting afterwards are taken to start at
that time. Tests that are running at the same time are put on separate lanes
so that they do not overlap when drawn, and lanes are handed out again in the
order they were given back.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Iterable
from datetime import timedelta

import attrs

from ._cfg import config
from ._logging import source_extra
from .exceptions import OrphanedFinishError
from .parser import FinishToken, StartToken, classify_line
from .trace import Trace

logger = logging.getLogger(__name__)


@attrs.define(frozen=True)
class PendingEntry:
    """A test which has started but not yet finished."""

    start: timedelta
    lane: int


@attrs.define
class LanePool:
    """Lane numbers that can be handed out to starting tests.

    Released lanes are reused first-in first-out; a new lane is only opened
    when none is free.
    """

    free: deque[int] = attrs.field(factory=deque, converter=deque)
    next_lane: int = 0

    def acquire(self) -> int:
        """Take the oldest released lane, or open a new one."""
        if self.free:
            return self.free.popleft()

        lane = self.next_lane
        self.next_lane += 1
        return lane

    def release(self, lane: int):
        """Hand a lane back for reuse."""
        self.free.append(lane)


@attrs.define
class Reconstructor:
    """Fold CTest log lines, in log order, into a list of :class:`Trace`.

    Parameters
    ----------
    strict
        What to do with a test that finishes without having started (e.g. a
        test reported as "Not Run"). By default it is ignored; with
        ``strict=True`` an :class:`OrphanedFinishError` is raised.
    source
        Name of the CTest log being read, attached to log messages.
    """

    strict: bool = attrs.field(default=False, kw_only=True)
    source: str | None = attrs.field(default=None, kw_only=True)
    pending: dict[str, PendingEntry] = attrs.field(factory=dict, init=False)
    lanes: LanePool = attrs.field(factory=LanePool, init=False)
    clock: timedelta = attrs.field(factory=timedelta, init=False)
    traces: list[Trace] = attrs.field(factory=list, init=False)

    @property
    def unfinished(self) -> list[str]:
        """Names of the tests that started but have not finished yet."""
        return list(self.pending)

    def start(self, name: str):
        """Record the start of test ``name`` at the current clock time."""
        lane = self.lanes.acquire()

        if name in self.pending:
            logger.debug(
                f"Test '{name}' started again before finishing, "
                f"dropping its start on lane {self.pending[name].lane}.",
                extra=source_extra(self.source),
            )

        self.pending[name] = PendingEntry(start=self.clock, lane=lane)

    def finish(self, name: str, duration: timedelta) -> Trace | None:
        """Close the interval of test ``name``.

        Returns the new trace, or None if the test was never started (and the
        reconstruction is not strict).
        """
        entry = self.pending.pop(name, None)
        if entry is None:
            if self.strict:
                raise OrphanedFinishError(name)
            logger.debug(
                f"Ignoring end of '{name}' which was never started.",
                extra=source_extra(self.source),
            )
            return None

        trace = Trace(name=name, start=entry.start, duration=duration, lane=entry.lane)
        self.traces.append(trace)
        self.clock = max(self.clock, trace.end)
        self.lanes.release(entry.lane)
        return trace

    def feed_token(self, token: StartToken | FinishToken | None) -> Trace | None:
        """Apply one classified line to the state."""
        match token:
            case StartToken(test_name=name):
                self.start(name)
            case FinishToken(test_name=name, duration=duration):
                return self.finish(name, duration)
        return None

    def feed(self, line: str) -> Trace | None:
        """Apply one raw log line to the state; uninteresting lines do nothing."""
        return self.feed_token(classify_line(line))

    def feed_lines(self, lines: Iterable[str]) -> Reconstructor:
        """Apply every line of ``lines`` in order."""
        for line in lines:
            self.feed(line)
        return self

    def close(self) -> list[Trace]:
        """Finish the reconstruction and return the traces in order of completion.

        Tests which never finished are left out.
        """
        if self.pending:
            logger.info(
                f"{len(self.pending)} test(s) never finished and are left out: "
                f"{', '.join(self.pending)}",
                extra=source_extra(self.source),
            )
        return self.traces


def reconstruct(
    lines: Iterable[str], strict: bool | None = None, source: str | None = None
) -> list[Trace]:
    """Reconstruct the traces of a whole CTest log.

    Parameters
    ----------
    lines
        The lines of the log, in order.
    strict
        Whether a test finishing without a start is an error. Defaults to
        ``config["strict"]``.
    source
        Name of the log, used in log messages.
    """
    if strict is None:
        strict = config["strict"]

    return Reconstructor(strict=strict, source=source).feed_lines(lines).close()
