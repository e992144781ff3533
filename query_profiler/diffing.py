"""
diffing
=======

Status deltas and run-to-run comparison.

This module contains:
- the before/after status snapshot delta
- the status comparison between one or two runs
- the trace alignment flagging steps that only one run went through

Everything here is a pure function of its inputs, which keeps the collectors
in :mod:`query_profiler.collectors` small and easy to reason about.
"""

from __future__ import annotations

from typing import Dict, List, Sequence

from .models import (
    ComparisonRow,
    RunPair,
    StatusDelta,
    StatusSnapshot,
    TraceComparison,
    TraceLine,
    TraceStep,
    Verdict,
)
from .utils import Number, normalize_label, to_number

# Static cost estimate of the last compiled query, not a cumulative counter.
LAST_QUERY_COST = "Last_query_cost"

IMPORTANT_COUNTERS = frozenset({LAST_QUERY_COST})


def _check_runs(runs: Sequence[object]) -> None:
    if len(runs) > 2:
        raise ValueError(f"expected one or two runs, got {len(runs)}")


def status_delta(before: StatusSnapshot, after: StatusSnapshot) -> StatusDelta:
    """Return per-counter ``after - before``.

    Parameters
    ----------
    before, after:
        Snapshots taken around the measured run.

    Returns
    -------
    dict
        Deltas for counters present in both snapshots with numeric values on
        both sides. ``Last_query_cost`` carries the raw *after* value when the
        after snapshot has it.

    Examples
    --------
    >>> status_delta({"Bytes_sent": "100", "Queries": "5"}, {"Bytes_sent": "340", "Queries": "6"})
    {'Bytes_sent': 240, 'Queries': 1}
    """
    delta: StatusDelta = {}
    for name, value in before.items():
        if name not in after:
            continue
        start = to_number(value)
        end = to_number(after[name])
        if start is None or end is None:
            continue
        delta[name] = end - start

    if LAST_QUERY_COST in after:
        delta[LAST_QUERY_COST] = after[LAST_QUERY_COST]
    return delta


def _numeric_values(delta: StatusDelta) -> Dict[str, Number]:
    out: Dict[str, Number] = {}
    for name, value in delta.items():
        number = to_number(value)
        if number is not None:
            out[name] = number
    return out


def compare_status(deltas: RunPair[StatusDelta]) -> List[ComparisonRow]:
    """Merge one or two status deltas into display rows.

    Counter names are sorted. A counter reported by a single run, or with the
    same value in both runs, yields one equal row unless its value is zero.
    Differing values yield a row with both values where the strictly lower
    one is better; lower is better for every counter.
    """
    _check_runs(deltas)
    if not deltas:
        return []

    first = _numeric_values(deltas[0])
    second = _numeric_values(deltas[1]) if len(deltas) == 2 else {}

    rows: List[ComparisonRow] = []
    for name in sorted(set(first) | set(second)):
        a = first.get(name)
        b = second.get(name)
        important = name in IMPORTANT_COUNTERS

        if a is None or b is None or a == b:
            value = a if a is not None else b
            if value != 0:
                rows.append(ComparisonRow(name, value, None, Verdict.EQUAL, important))
            continue

        verdict = Verdict.FIRST_BETTER if a < b else Verdict.SECOND_BETTER
        rows.append(ComparisonRow(name, a, b, verdict, important))
    return rows


def compare_traces(traces: RunPair[List[TraceStep]]) -> List[TraceComparison]:
    """Annotate each run's steps with whether the other run lacks them.

    Labels are compared trimmed and lower-cased. Step order plays no part:
    a step differs when its label is absent from the other run. With a
    single run nothing differs.
    """
    _check_runs(traces)
    labels = [{normalize_label(step.state) for step in trace} for trace in traces]
    compare = len(traces) == 2

    out: List[TraceComparison] = []
    for index, trace in enumerate(traces):
        other = labels[1 - index] if compare else set()
        lines = [
            TraceLine(step, differs=compare and normalize_label(step.state) not in other)
            for step in trace
        ]
        out.append(TraceComparison(lines))
    return out
