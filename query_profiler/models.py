"""Records produced by the collectors and the comparison engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple, TypeVar

from .utils import Number

T = TypeVar("T")

# Counter name -> raw value, as reported by SHOW STATUS.
StatusSnapshot = Dict[str, str]
# Counter name -> after - before (raw value for Last_query_cost).
StatusDelta = Dict[str, Any]
# One EXPLAIN row, passed through untouched.
ExplainRow = Mapping[str, Any]
# One result per profiled query: length 1, or 2 in comparison mode.
RunPair = Tuple[T, ...]


@dataclass(frozen=True)
class TraceStep:
    """One profiling step: state label and duration in seconds."""

    state: str
    duration: float

    @property
    def duration_ms(self) -> float:
        return self.duration * 1000


class Verdict(str, Enum):
    """Classification of a status counter between two runs."""

    EQUAL = "equal"
    FIRST_BETTER = "first_better"
    SECOND_BETTER = "second_better"


@dataclass(frozen=True)
class ComparisonRow:
    """One status counter as displayed in the report.

    ``second`` is ``None`` for equal rows (a single value stands for both
    runs) and in single-query mode.
    """

    name: str
    first: Number
    second: Optional[Number]
    verdict: Verdict = Verdict.EQUAL
    important: bool = False


@dataclass(frozen=True)
class TraceLine:
    step: TraceStep
    differs: bool = False


@dataclass(frozen=True)
class TraceComparison:
    """Annotated trace of one run."""

    lines: List[TraceLine]

    @property
    def total_ms(self) -> float:
        return sum(line.step.duration_ms for line in self.lines)


@dataclass
class QueryProfile:
    """Everything collected for one query on its own session."""

    query: str
    status: StatusDelta = field(default_factory=dict)
    explain: List[ExplainRow] = field(default_factory=list)
    trace: List[TraceStep] = field(default_factory=list)
