"""Configuration system for oracle-dashboard.

All sections are pydantic models with working defaults, so the service runs
without a config file. A YAML file overrides any subset of fields.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field


# ═══════════════════════════════════════════════════════════════
#  Upstream APIs
# ═══════════════════════════════════════════════════════════════

class HistoryApiConfig(BaseModel):
    url: str = "https://oracle.imamkatz.com/api/history"
    timeout_seconds: float = 10.0


class EnsConfig(BaseModel):
    base_url: str = "https://api.ensideas.com/ens/resolve"
    timeout_seconds: float = 10.0
    max_concurrency: int = Field(default=8, ge=1, description="Lookups in flight per fan-out")
    cache_failures: bool = Field(
        default=False,
        description="Cache failed lookups as permanent misses instead of retrying on next render",
    )


# ═══════════════════════════════════════════════════════════════
#  Aggregation & display
# ═══════════════════════════════════════════════════════════════

class AggregationConfig(BaseModel):
    bet_policy: Literal["first", "all"] = Field(
        default="first",
        description="'first' counts only bets[0] of each round, 'all' counts every bet",
    )


class DisplayConfig(BaseModel):
    title: str = "Oracle History"
    roster_title: str = "Recent Players"
    placeholder_avatar: str = "https://via.placeholder.com/{size}"
    timestamp_format: str = "%Y-%m-%d %H:%M:%S"

    def placeholder(self, size: int) -> str:
        return self.placeholder_avatar.format(size=size)


# ═══════════════════════════════════════════════════════════════
#  Web server & metrics
# ═══════════════════════════════════════════════════════════════

class ServerConfig(BaseModel):
    host: str = "0.0.0.0"
    port: int = 8080


class MetricsConfig(BaseModel):
    enabled: bool = True
    health_path: str = "/health"
    metrics_path: str = "/metrics"


# ═══════════════════════════════════════════════════════════════
#  Top-Level Dashboard Config
# ═══════════════════════════════════════════════════════════════

class DashboardConfig(BaseModel):
    """Full dashboard config."""

    history_api: HistoryApiConfig = Field(default_factory=HistoryApiConfig)
    ens: EnsConfig = Field(default_factory=EnsConfig)
    aggregation: AggregationConfig = Field(default_factory=AggregationConfig)
    display: DisplayConfig = Field(default_factory=DisplayConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    metrics: MetricsConfig = Field(default_factory=MetricsConfig)


# ═══════════════════════════════════════════════════════════════
#  Config Loading
# ═══════════════════════════════════════════════════════════════

def _expand_env_vars(obj: Any) -> Any:
    """Recursively expand ${VAR} and ${VAR:-default} in string values."""
    if isinstance(obj, str):
        return re.sub(
            r"\$\{([^}:]+)(?::-(.*?))?\}",
            lambda m: os.environ.get(m.group(1), m.group(2) or ""),
            obj,
        )
    elif isinstance(obj, dict):
        return {k: _expand_env_vars(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [_expand_env_vars(v) for v in obj]
    return obj


def load_config(config_path: str) -> DashboardConfig:
    """Load and validate YAML config file into DashboardConfig."""
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)

    # An empty file means "all defaults"
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ValueError("Config file must contain a YAML mapping at the top level.")

    raw = _expand_env_vars(raw)
    return DashboardConfig(**raw)
