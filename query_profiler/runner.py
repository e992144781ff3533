"""
runner
======

Profile one or two queries, one session each.

Trace steps are looked up by profiling query id, and query ids are scoped to a
connection. Each query therefore gets its own session here, used for its
warm-up, status, trace and explain collection and closed afterwards.
"""

from __future__ import annotations

from typing import Callable, List, Tuple

from .collectors import ExplainCollector, Session, StatusCollector, TraceCollector
from .config import ProfilerSettings
from .log import get_logger
from .models import QueryProfile
from .session import MySQLSession, MySQLTarget, open_session

logger = get_logger(__name__)

SessionOpener = Callable[[MySQLTarget, int], MySQLSession]


def normalize_queries(query: str, query_compare: str = "") -> Tuple[str, ...]:
    """Return the queries to profile, in order.

    A lone second query is promoted to first. Blank input yields ``()``.

    >>> normalize_queries("", "SELECT 1")
    ('SELECT 1',)
    """
    query = (query or "").strip()
    query_compare = (query_compare or "").strip()
    if not query and query_compare:
        query, query_compare = query_compare, ""
    return tuple(q for q in (query, query_compare) if q)


def profile_query(session: Session, query: str, settings: ProfilerSettings) -> QueryProfile:
    """Collect status, trace and explain data for *query* on *session*.

    *session* must be fresh and must not be reused for another query.
    """
    profile = QueryProfile(query=query)
    profile.status = StatusCollector(warm_up_runs=settings.warm_up_runs).collect(session, query)
    profile.trace = TraceCollector().collect(session, query)
    profile.explain = ExplainCollector().collect(session, query)
    return profile


def profile_queries(
    target: MySQLTarget,
    queries: Tuple[str, ...],
    settings: ProfilerSettings,
    opener: SessionOpener = open_session,
) -> List[QueryProfile]:
    """Profile each query on a session of its own.

    Raises
    ------
    ProfilerConnectionError
        If a session cannot be opened; nothing is returned in that case.
    ValueError
        If more than two queries are given.
    """
    if len(queries) > 2:
        raise ValueError(f"expected one or two queries, got {len(queries)}")

    profiles: List[QueryProfile] = []
    for position, query in enumerate(queries, start=1):
        logger.info("Profiling query %d/%d (%d warm-up runs)...", position, len(queries), settings.warm_up_runs)
        with opener(target, settings.max_execution_time) as session:
            profiles.append(profile_query(session, query, settings))
    return profiles
