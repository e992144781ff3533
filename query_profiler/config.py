"""
config
======

YAML configuration, environment and CLI overrides.

Example ``config.yml``::

    out_dir: out

    database:
      host: localhost
      port: 3306
      user: profiler
      password: ""
      database: shop
      charset: utf8mb4

    profiler:
      warm_up_runs: 3          # cache priming runs before the measured run
      max_execution_time: 600  # seconds, per statement
      allowed_ips: []          # empty = no filtering

Connection fields resolve in this order: environment variable
(``QUERY_PROFILER_HOST``, ``QUERY_PROFILER_PASSWORD``, ...), CLI flag, config
file.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

import yaml

from .session import DEFAULT_TIMEOUT_SECONDS, MySQLTarget

ENV_PREFIX = "QUERY_PROFILER"

DEFAULT_WARM_UP_RUNS = 3
DEFAULT_PORT = 3306
DEFAULT_CHARSET = "utf8mb4"

REQUIRED_FIELDS = ("host", "user", "database")


@dataclass(frozen=True)
class ProfilerSettings:
    """Profiling knobs, passed explicitly to the entry point."""

    warm_up_runs: int = DEFAULT_WARM_UP_RUNS
    max_execution_time: int = DEFAULT_TIMEOUT_SECONDS
    allowed_ips: Tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if self.warm_up_runs < 0:
            raise ValueError(f"warm_up_runs must be >= 0, got {self.warm_up_runs}")
        if self.max_execution_time <= 0:
            raise ValueError(f"max_execution_time must be positive, got {self.max_execution_time}")

    def allows(self, address: str) -> bool:
        """Return True if *address* may use the profiler (empty list = everyone)."""
        return not self.allowed_ips or address in self.allowed_ips


def load_config(path: Path) -> Dict[str, Any]:
    """Load YAML config file."""
    if not path.exists():
        raise SystemExit(f"ERROR: config not found: {path}")
    with path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def deep_get(d: Mapping[str, Any], keys: List[str], default: Any = None) -> Any:
    """Safely get nested dict value with default."""
    cur: Any = d
    for k in keys:
        if not isinstance(cur, dict) or k not in cur:
            return default
        cur = cur[k]
    return cur


def get_env_var(name: str) -> Optional[str]:
    """Return ``QUERY_PROFILER_<NAME>`` from the environment, if set and non-empty."""
    value = os.environ.get(f"{ENV_PREFIX}_{name.upper()}")
    return value if value else None


def resolve_field(cfg: Mapping[str, Any], name: str, overrides: Mapping[str, Any], default: Any = None) -> Any:
    """Resolve a connection field: env var > CLI override > config > default."""
    env = get_env_var(name)
    if env is not None:
        return env
    cli = overrides.get(name)
    if cli is not None and cli != "":
        return cli
    value = deep_get(cfg, ["database", name])
    return default if value is None else value


def build_target(cfg: Mapping[str, Any], overrides: Mapping[str, Any]) -> MySQLTarget:
    """Build the MySQL target from config, CLI overrides and environment.

    Raises
    ------
    SystemExit
        If a required field is missing or the port is not a number.
    """
    values: Dict[str, Any] = {}
    for name in REQUIRED_FIELDS:
        value = resolve_field(cfg, name, overrides)
        if value is None or value == "":
            raise SystemExit(
                f"ERROR: missing database.{name} "
                f"(set it in the config, via {ENV_PREFIX}_{name.upper()} or with --{name})"
            )
        values[name] = str(value)

    port = resolve_field(cfg, "port", overrides, DEFAULT_PORT)
    try:
        port = int(port)
    except (TypeError, ValueError):
        raise SystemExit(f"ERROR: database.port must be a number, got {port!r}")

    return MySQLTarget(
        host=values["host"],
        port=port,
        user=values["user"],
        password=str(resolve_field(cfg, "password", overrides, "")),
        database=values["database"],
        charset=str(resolve_field(cfg, "charset", overrides, DEFAULT_CHARSET)),
    )


def read_settings(cfg: Mapping[str, Any], warm_up_runs: Optional[int] = None) -> ProfilerSettings:
    """Read the ``profiler`` section; a CLI warm-up count wins over the config."""
    if warm_up_runs is None:
        warm_up_runs = deep_get(cfg, ["profiler", "warm_up_runs"], DEFAULT_WARM_UP_RUNS)
    max_execution_time = deep_get(cfg, ["profiler", "max_execution_time"], DEFAULT_TIMEOUT_SECONDS)
    allowed_ips = deep_get(cfg, ["profiler", "allowed_ips"], []) or []
    return ProfilerSettings(
        warm_up_runs=int(warm_up_runs),
        max_execution_time=int(max_execution_time),
        allowed_ips=tuple(str(ip) for ip in allowed_ips),
    )
