#!/usr/bin/env python3
"""
cli
===

Profile one or two MySQL queries and write a side-by-side report.

!! Use against development databases only: every query is executed
``warm_up_runs + 2`` times, writes included.

CLI Usage
---------

Single query::

    query-profiler --config config.yml --query "SELECT * FROM orders WHERE id = 42"

Compare two queries::

    query-profiler --config config.yml \\
        --query "SELECT * FROM orders WHERE status = 'new'" \\
        --compare "SELECT * FROM orders FORCE INDEX (idx_status) WHERE status = 'new'"

Read queries from files and override the output directory::

    query-profiler --query-file q1.sql --compare-file q2.sql --out out_orders

Check connectivity only::

    query-profiler --config config.yml --check
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Sequence

from .config import build_target, load_config, read_settings
from .log import get_logger
from .reporting import generate_report_md, write_json_report
from .runner import normalize_queries, profile_queries
from .session import ProfilerConnectionError, connection_test

logger = get_logger(__name__)


def _read_query(text: str | None, path: Path | None) -> str:
    if path is not None:
        if not path.exists():
            raise SystemExit(f"ERROR: query file not found: {path}")
        return path.read_text(encoding="utf-8")
    return text or ""


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        description="Profile one or two MySQL queries (status deltas, EXPLAIN, profiling trace) and compare them."
    )
    ap.add_argument("--config", type=Path, default=Path("config.yml"), help="Path to config.yml (default: config.yml)")
    ap.add_argument("--out", default=None, help="Override out_dir from config")

    ap.add_argument("--query", default=None, help="Query to profile")
    ap.add_argument("--compare", default=None, help="Second query to compare with the first")
    ap.add_argument("--query-file", type=Path, default=None, help="Read the first query from a file")
    ap.add_argument("--compare-file", type=Path, default=None, help="Read the second query from a file")

    ap.add_argument("--warm-up-runs", type=int, default=None, help="Override profiler.warm_up_runs")
    ap.add_argument("--check", action="store_true", help="Only test the database connection")
    ap.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING, ...")

    # optional overrides (override config from CLI)
    ap.add_argument("--host", default=None)
    ap.add_argument("--port", default=None)
    ap.add_argument("--user", default=None)
    ap.add_argument("--database", default=None)
    return ap


def main(argv: Sequence[str] | None = None) -> int:
    """Run the CLI entry-point."""
    args = build_parser().parse_args(argv)
    if args.log_level:
        get_logger(__name__, args.log_level)

    cfg_path = args.config.resolve()
    cfg = load_config(cfg_path)

    overrides = {"host": args.host, "port": args.port, "user": args.user, "database": args.database}
    target = build_target(cfg, overrides)
    try:
        settings = read_settings(cfg, args.warm_up_runs)
    except ValueError as e:
        raise SystemExit(f"ERROR: invalid profiler settings: {e}")

    if args.check:
        ok, message = connection_test(target, settings.max_execution_time)
        print(("OK: " if ok else "FAILED: ") + message)
        return 0 if ok else 1

    queries = normalize_queries(
        _read_query(args.query, args.query_file),
        _read_query(args.compare, args.compare_file),
    )
    if not queries:
        raise SystemExit("ERROR: nothing to profile, pass --query or --query-file")

    out_root = Path(args.out or cfg.get("out_dir", "out")).resolve()

    logger.info("Target: %s", target.describe())
    try:
        profiles = profile_queries(target, queries, settings)
    except ProfilerConnectionError as e:
        raise SystemExit(f"ERROR: {e}")

    header = [
        f"- Config: `{cfg_path.name}`",
        f"- Target: {target.describe()}",
        f"- Warm-up runs: {settings.warm_up_runs}",
        f"- Mode: {'comparison' if len(profiles) == 2 else 'single query'}",
    ]
    report_path = generate_report_md(out_root, header, profiles)
    json_path = write_json_report(out_root, profiles)

    print("\nDone.")
    print(f"Report : {report_path}")
    print(f"JSON   : {json_path}")
    return 0


if __name__ == "__main__":
    if sys.version_info < (3, 10):
        raise SystemExit("Python 3.10+ required.")
    raise SystemExit(main())
