"""App-wide defaults, overridable through PLANNER_* environment variables."""

from __future__ import annotations

import logging
import os
from typing import Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

DEFAULTS = {
    "cors_origins": [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://127.0.0.1:3000",
        "http://127.0.0.1:5173",
    ],
    "log_level": "INFO",
    # caller-side coalescing window for recalculation requests
    "debounce_ms": 300,
    # balances below one Rand are treated as depleted
    "depletion_epsilon": 1.0,
    "max_projection_years": 100,
    "default_life_expectancy": 90,
    "default_drawdown_rate_pct": 4.0,
    "tax_table_ttl_days": 365,
}

ENV_PREFIX = "PLANNER_"


class Settings(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    cors_origins: List[str] = Field(default_factory=lambda: list(DEFAULTS["cors_origins"]))
    log_level: str = DEFAULTS["log_level"]
    debounce_ms: int = Field(default=DEFAULTS["debounce_ms"], ge=0)
    depletion_epsilon: float = Field(default=DEFAULTS["depletion_epsilon"], ge=0)
    max_projection_years: int = Field(default=DEFAULTS["max_projection_years"], ge=1, le=150)
    default_life_expectancy: int = Field(default=DEFAULTS["default_life_expectancy"], ge=1, le=130)
    default_drawdown_rate_pct: float = Field(default=DEFAULTS["default_drawdown_rate_pct"], ge=0, le=100)
    tax_table_ttl_days: int = Field(default=DEFAULTS["tax_table_ttl_days"], ge=1)


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Build Settings from DEFAULTS plus any PLANNER_<FIELD> overrides."""
    environ = os.environ if environ is None else environ
    overrides: Dict[str, object] = {}
    for name in Settings.model_fields:
        raw = environ.get(f"{ENV_PREFIX}{name.upper()}")
        if raw is None:
            continue
        if name == "cors_origins":
            overrides[name] = [origin.strip() for origin in raw.split(",") if origin.strip()]
        else:
            overrides[name] = raw
    # pydantic coerces the string values ("300" -> 300) in lax mode
    return Settings.model_validate(overrides)


def configure_logging(level: str = DEFAULTS["log_level"]) -> None:
    """Install a basic root handler once; later calls only adjust the level."""
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(
            level=level,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )
    root.setLevel(level)


settings = load_settings()
