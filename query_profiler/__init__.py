"""
query_profiler
==============

Profile one or two MySQL queries and compare their runtime diagnostics.

For every query the tool collects:

- status counter deltas (``SHOW STATUS`` before/after a measured run)
- the execution plan (``EXPLAIN``)
- the step-by-step timing trace (``INFORMATION_SCHEMA.PROFILING``)

Modules are intended to be used together via the CLI entry point:

- :mod:`query_profiler.cli`
"""

from .collectors import ExplainCollector, StatusCollector, TraceCollector
from .diffing import compare_status, compare_traces, status_delta
from .runner import profile_queries, profile_query

__all__ = [
    "ExplainCollector",
    "StatusCollector",
    "TraceCollector",
    "compare_status",
    "compare_traces",
    "profile_queries",
    "profile_query",
    "status_delta",
]
