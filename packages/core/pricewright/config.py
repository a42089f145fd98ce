"""Runtime settings, read from the environment with explicit overrides."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in _TRUE_VALUES


class PricewrightSettings(BaseModel):
    oracle_bin: str = "infracost"
    oracle_timeout: float = Field(default=60.0, gt=0)
    work_dir: Path = Field(default_factory=lambda: Path(tempfile.gettempdir()) / "pricewright-runs")
    api_key: str | None = None
    parallel: bool = False
    max_workers: int = Field(default=3, ge=1)
    keep_artifacts: bool = False
    region: str = "us-east-1"

    @classmethod
    def from_env(cls, **overrides: Any) -> PricewrightSettings:
        """Build settings from PRICEWRIGHT_* variables; keyword overrides win."""
        values: dict[str, Any] = {}
        if os.environ.get("PRICEWRIGHT_ORACLE_BIN"):
            values["oracle_bin"] = os.environ["PRICEWRIGHT_ORACLE_BIN"]
        if os.environ.get("PRICEWRIGHT_ORACLE_TIMEOUT"):
            values["oracle_timeout"] = float(os.environ["PRICEWRIGHT_ORACLE_TIMEOUT"])
        if os.environ.get("PRICEWRIGHT_WORK_DIR"):
            values["work_dir"] = Path(os.environ["PRICEWRIGHT_WORK_DIR"])
        if os.environ.get("INFRACOST_API_KEY"):
            values["api_key"] = os.environ["INFRACOST_API_KEY"]
        if os.environ.get("PRICEWRIGHT_MAX_WORKERS"):
            values["max_workers"] = int(os.environ["PRICEWRIGHT_MAX_WORKERS"])
        values["parallel"] = _env_bool("PRICEWRIGHT_PARALLEL")
        values["keep_artifacts"] = _env_bool("PRICEWRIGHT_KEEP_ARTIFACTS")
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
