"""
reporting
=========

Markdown and JSON report generation.

The report puts the one or two profiled queries side by side:

- status counters, with the better (lower) value marked
- the trace of each query, with steps only one query went through marked
- the execution plans

Primary API
-----------
- :func:`generate_report_md`
- :func:`write_json_report`

"""

from __future__ import annotations

import datetime as dt
import json
import re
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, List, Sequence

from .diffing import compare_status, compare_traces
from .models import ComparisonRow, ExplainRow, QueryProfile, TraceComparison, Verdict
from .utils import Number

URL_STATUS_DOC = "https://dev.mysql.com/doc/refman/en/server-status-variables.html#statvar_"

EXPLAIN_COLUMNS = (
    "id",
    "select_type",
    "table",
    "type",
    "possible_keys",
    "key",
    "key_len",
    "ref",
    "rows",
    "filtered",
    "Extra",
)
EXPLAIN_HEADERS = (
    "id",
    "select_type",
    "Table",
    "Type",
    "Possible keys",
    "Key",
    "Key len",
    "Ref",
    "Rows",
    "Filtered",
    "Extra",
)

NO_DATA = "_No data_\n\n"
BETTER_MARK = " ✓"
DIFFERENT_MARK = " *"


def write_text(path: Path, content: str) -> None:
    """Write UTF-8 text to *path* with normalized newlines."""
    path.parent.mkdir(parents=True, exist_ok=True)
    content = content.replace("\r\n", "\n").replace("\r", "\n")
    path.write_text(content, encoding="utf-8")


def md_anchor(title: str) -> str:
    """Create an approximate GitHub-style markdown anchor from a section title."""
    return re.sub(r"[^a-z0-9]+", "-", title.lower()).strip("-")


def md_cell(value: Any) -> str:
    """Render a table cell: ``None`` as blank, pipes and newlines escaped."""
    if value is None:
        return ""
    return str(value).replace("|", "\\|").replace("\n", " ")


def format_count(value: Number) -> str:
    if isinstance(value, float) and not value.is_integer():
        return f"{value:.3f}"
    return str(int(value))


def format_ms(value: float) -> str:
    """Milliseconds with 3 decimals."""
    return f"{value:.3f}"


def format_state(state: str) -> str:
    return state[:1].upper() + state[1:]


def format_filtered(value: Any) -> str:
    if value is None or value == "":
        return ""
    try:
        return f"{float(value):.0f}%"
    except (TypeError, ValueError):
        return md_cell(value)


# ---- sections ----
def status_lines(rows: Sequence[ComparisonRow], compare: bool) -> List[str]:
    if not rows:
        return [NO_DATA]

    lines = ["| Counter | Query 1 |" + (" Query 2 |" if compare else "") + "\n"]
    lines.append("|---|---:|" + ("---:|" if compare else "") + "\n")
    for row in rows:
        name = f"[{row.name}]({URL_STATUS_DOC}{row.name})"
        if row.important:
            name = f"**{name}**"

        if row.second is None:
            cells = [format_count(row.first)] + (["="] if compare else [])
        else:
            first = format_count(row.first)
            second = format_count(row.second)
            if row.verdict is Verdict.FIRST_BETTER:
                first = f"**{first}**{BETTER_MARK}"
            elif row.verdict is Verdict.SECOND_BETTER:
                second = f"**{second}**{BETTER_MARK}"
            cells = [first, second]
        lines.append(f"| {name} | " + " | ".join(cells) + " |\n")
    lines.append("\n")
    return lines


def trace_lines(traces: Sequence[TraceComparison]) -> List[str]:
    if not any(trace.lines for trace in traces):
        return [NO_DATA]

    lines: List[str] = []
    if len(traces) == 2:
        lines.append(f"Steps marked `{DIFFERENT_MARK.strip()}` only appear in one of the queries.\n\n")
    for position, trace in enumerate(traces, start=1):
        lines.append(f"### Query {position}\n\n")
        lines.append("| Step | Duration (ms) |\n")
        lines.append("|---|---:|\n")
        for line in trace.lines:
            mark = DIFFERENT_MARK if line.differs else ""
            lines.append(f"| {md_cell(format_state(line.step.state))}{mark} | {format_ms(line.step.duration_ms)} |\n")
        lines.append(f"| **Total** | {format_ms(trace.total_ms)} |\n\n")
    return lines


def explain_row_cells(row: ExplainRow) -> List[str]:
    cells: List[str] = []
    for column in EXPLAIN_COLUMNS:
        value = row.get(column)
        if column == "possible_keys" and value is not None:
            value = str(value).replace(",", ", ")
        if column == "filtered":
            cells.append(format_filtered(value))
            continue
        cells.append(md_cell(value))
    return cells


def explain_lines(plans: Sequence[Sequence[ExplainRow]]) -> List[str]:
    if not any(plans):
        return [NO_DATA]

    lines = ["| " + " | ".join(EXPLAIN_HEADERS) + " |\n"]
    lines.append("|" + "---|" * len(EXPLAIN_HEADERS) + "\n")
    for position, plan in enumerate(plans, start=1):
        lines.append(f"| **Query {position}** |" + " |" * (len(EXPLAIN_HEADERS) - 1) + "\n")
        for row in plan:
            lines.append("| " + " | ".join(explain_row_cells(row)) + " |\n")
    lines.append("\n")
    return lines


def generate_report_md(out_dir: Path, header_lines: List[str], profiles: Sequence[QueryProfile]) -> Path:
    """Generate the Markdown report for one or two profiled queries.

    Parameters
    ----------
    out_dir:
        Output directory where ``REPORT.md`` is written.
    header_lines:
        Bullet-style lines to include near the top (target, settings).
    profiles:
        One profile per query, in query order.

    Returns
    -------
    pathlib.Path
        The path to the generated ``REPORT.md``.
    """
    report_path = out_dir / "REPORT.md"
    now = dt.datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    compare = len(profiles) == 2

    query_lines = [
        f"**Query {position}**\n\n```sql\n{profile.query.strip()}\n```\n\n"
        for position, profile in enumerate(profiles, start=1)
    ]
    sections = [
        ("Queries", query_lines or [NO_DATA]),
        ("Status", status_lines(compare_status(tuple(p.status for p in profiles)), compare)),
        ("Trace", trace_lines(compare_traces(tuple(p.trace for p in profiles)))),
        ("Explain", explain_lines([p.explain for p in profiles])),
    ]

    lines: List[str] = []
    lines.append("# MySQL Query Profile\n\n")
    lines.append(f"_Generated: {now}_\n\n")

    if header_lines:
        for h in header_lines:
            lines.append(h + "\n")
        lines.append("\n")

    lines.append("## Contents\n")
    for title, _ in sections:
        lines.append(f"- [{title}](#{md_anchor(title)})\n")
    lines.append("\n")

    for title, body in sections:
        lines.append(f"## {title}\n\n")
        lines.extend(body)

    write_text(report_path, "".join(lines))
    return report_path


def report_payload(profiles: Sequence[QueryProfile]) -> Dict[str, Any]:
    """Structured form of the report, ready for ``json.dumps``."""
    traces = compare_traces(tuple(p.trace for p in profiles))
    return {
        "queries": [p.query for p in profiles],
        "status": [
            {**asdict(row), "verdict": row.verdict.value}
            for row in compare_status(tuple(p.status for p in profiles))
        ],
        "trace": [
            {
                "steps": [
                    {"state": line.step.state, "duration_ms": round(line.step.duration_ms, 3), "differs": line.differs}
                    for line in trace.lines
                ],
                "total_ms": round(trace.total_ms, 3),
            }
            for trace in traces
        ],
        "explain": [[dict(row) for row in p.explain] for p in profiles],
    }


def write_json_report(out_dir: Path, profiles: Sequence[QueryProfile]) -> Path:
    """Write ``report.json`` next to the Markdown report."""
    path = out_dir / "report.json"
    write_text(path, json.dumps(report_payload(profiles), indent=2, default=str))
    return path
