"""
collectors
==========

Diagnostic collection for one profiled query.

Three collectors run against the session opened for a query:

- :class:`StatusCollector`: ``SHOW STATUS`` before/after a measured run
- :class:`ExplainCollector`: ``EXPLAIN`` rows, passed through untouched
- :class:`TraceCollector`: ``INFORMATION_SCHEMA.PROFILING`` steps

The orchestration layer (:mod:`query_profiler.runner`) drives which session
each collector gets.

Design choices
--------------
- A failing diagnostic statement never aborts the report: the collector logs
  a warning and returns an empty result.
- Collectors only depend on the :class:`Session` capabilities, so tests can
  script statement results without a server.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Dict, List, Mapping, Protocol, Sequence

import mysql.connector

from .diffing import status_delta
from .log import get_logger
from .models import ExplainRow, StatusDelta, StatusSnapshot, TraceStep

logger = get_logger(__name__)


class Session(Protocol):
    def query(self, statement: str) -> List[Dict[str, Any]]: ...

    def execute(self, statement: str) -> None: ...


class DiagnosticCollector(Protocol):
    """Anything that turns one query run into a diagnostic result."""

    name: ClassVar[str]

    def collect(self, session: Session, query: str) -> Any: ...


# ---- common queries ----
Q_SHOW_STATUS = "SHOW STATUS"

Q_PROFILING_ON = "SET profiling = 1"
Q_PROFILING_OFF = "SET profiling = 0"

# Query ids restart at 1 for every connection.
PROFILED_QUERY_ID = 1

Q_PROFILE_STEPS = f"""
SELECT STATE, DURATION
FROM INFORMATION_SCHEMA.PROFILING
WHERE QUERY_ID = {PROFILED_QUERY_ID}
ORDER BY SEQ
""".strip()


def q_explain(query: str) -> str:
    """EXPLAIN statement for *query*."""
    return f"EXPLAIN {query}"


# ---- row parsing ----
def parse_status_rows(rows: Sequence[Mapping[str, Any]]) -> StatusSnapshot:
    """Turn ``SHOW STATUS`` rows into a counter name -> raw value mapping."""
    snapshot: StatusSnapshot = {}
    for row in rows:
        name = row.get("Variable_name")
        if name is None:
            continue
        value = row.get("Value")
        snapshot[str(name)] = "" if value is None else str(value)
    return snapshot


def parse_trace_rows(rows: Sequence[Mapping[str, Any]]) -> List[TraceStep]:
    """Turn ``INFORMATION_SCHEMA.PROFILING`` rows into trace steps."""
    return [TraceStep(state=str(row["STATE"]), duration=float(row["DURATION"])) for row in rows]


def take_snapshot(session: Session) -> StatusSnapshot:
    return parse_status_rows(session.query(Q_SHOW_STATUS))


# ---- collectors ----
@dataclass(frozen=True)
class StatusCollector:
    """Status counter deltas for one measured run.

    The query runs ``warm_up_runs`` times first so that engine caches are
    populated, then once more between two ``SHOW STATUS`` snapshots. That is
    ``warm_up_runs + 3`` statements in total.
    """

    warm_up_runs: int = 3

    name: ClassVar[str] = "status"

    def collect(self, session: Session, query: str) -> StatusDelta:
        try:
            for _ in range(self.warm_up_runs):
                session.execute(query)

            before = take_snapshot(session)
            session.execute(query)
            after = take_snapshot(session)
        except mysql.connector.Error as e:
            logger.warning("Status collection failed, no status data: %s", e)
            return {}

        return status_delta(before, after)


@dataclass(frozen=True)
class ExplainCollector:
    """Execution plan rows, in server order."""

    name: ClassVar[str] = "explain"

    def collect(self, session: Session, query: str) -> List[ExplainRow]:
        try:
            return list(session.query(q_explain(query)))
        except mysql.connector.Error as e:
            logger.warning("EXPLAIN failed, no plan data: %s", e)
            return []


@dataclass(frozen=True)
class TraceCollector:
    """Step-by-step timing trace of a single run (no warm-up).

    Precondition: *session* is fresh. Steps are read for profiling query id 1,
    which only designates the profiled query when it is the first statement
    profiled on the connection. Never trace two queries on one session; open
    a new one per query instead.
    """

    name: ClassVar[str] = "trace"

    def collect(self, session: Session, query: str) -> List[TraceStep]:
        try:
            session.execute(Q_PROFILING_ON)
            try:
                session.execute(query)
                rows = session.query(Q_PROFILE_STEPS)
            finally:
                session.execute(Q_PROFILING_OFF)
        except mysql.connector.Error as e:
            logger.warning("Trace collection failed, no trace data: %s", e)
            return []

        return parse_trace_rows(rows)
