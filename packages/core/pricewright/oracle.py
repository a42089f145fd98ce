"""External pricing oracle: a narrow interface over the infracost CLI.

The rest of the pipeline talks to `PricingOracle.run(work_dir, usage_file)`
only, so tests swap in a fake without touching the filesystem or PATH.
"""

from __future__ import annotations

import json
import logging
import os
import re
import shutil
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pricewright.errors import OracleError

log = logging.getLogger(__name__)

_QUOTA_RE = re.compile(r"quota|rate[\s_-]*limit|\b401\b|\b403\b|unauthori[sz]ed|api[\s_-]*key|too many requests", re.IGNORECASE)


@dataclass
class OracleResource:
    """One priced resource in an oracle report."""

    address: str  # "<resource_type>.<name>"
    resource_type: str
    monthly_cost: float = 0.0

    @property
    def name(self) -> str:
        return self.address.split(".", 1)[1] if "." in self.address else self.address


@dataclass
class OracleReport:
    """Structured oracle output for a single working directory."""

    resources: list[OracleResource] = field(default_factory=list)
    total_monthly_cost: float = 0.0
    # resource_type -> count of resources the oracle could not price
    unsupported: dict[str, int] = field(default_factory=dict)
    currency: str = "USD"

    @property
    def has_unsupported(self) -> bool:
        return any(count > 0 for count in self.unsupported.values())

    @classmethod
    def from_json(cls, text: str) -> OracleReport:
        """Parse `infracost breakdown --format json` output."""
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise OracleError(f"Oracle output is not valid JSON: {e}", kind="malformed") from e
        if not isinstance(data, dict):
            raise OracleError("Oracle output is not a JSON object", kind="malformed")
        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> OracleReport:
        """Build a report from decoded JSON. Raises OracleError(kind="malformed") on unexpected shapes."""
        projects = _expect(data.get("projects") or [], list, "projects")
        resources: list[OracleResource] = []
        if projects:
            project = _expect(projects[0] or {}, dict, "projects[0]")
            breakdown = _expect(project.get("breakdown") or {}, dict, "breakdown")
            for raw in _expect(breakdown.get("resources") or [], list, "breakdown.resources"):
                raw = _expect(raw, dict, "resource entry")
                address = str(raw.get("name", ""))
                resource_type = str(raw.get("resourceType") or address.split(".", 1)[0])
                resources.append(
                    OracleResource(
                        address=address,
                        resource_type=resource_type,
                        monthly_cost=_to_float(raw.get("monthlyCost")),
                    )
                )

        summary = _expect(data.get("summary") or {}, dict, "summary")
        counts = _expect(summary.get("unsupportedResourceCounts") or {}, dict, "unsupportedResourceCounts")
        unsupported = {str(k): _to_count(v) for k, v in counts.items()}

        total = data.get("totalMonthlyCost")
        return cls(
            resources=resources,
            total_monthly_cost=_to_float(total) if total is not None else sum(r.monthly_cost for r in resources),
            unsupported=unsupported,
            currency=str(data.get("currency") or "USD"),
        )


def _expect(value: Any, kind: type, what: str) -> Any:
    if not isinstance(value, kind):
        raise OracleError(f"Oracle output field {what} is {type(value).__name__}, expected {kind.__name__}", kind="malformed")
    return value


def _to_count(value: Any) -> int:
    if value is None:
        return 0
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise OracleError(f"Unparseable resource count {value!r}", kind="malformed") from e


def _to_float(value: Any) -> float:
    # infracost serializes costs as decimal strings and uses null for free resources
    if value in (None, ""):
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise OracleError(f"Unparseable cost value {value!r}", kind="malformed") from e


class PricingOracle(ABC):
    """Prices a directory holding an HCL artifact and an optional usage file."""

    name: str = "oracle"

    @abstractmethod
    def is_available(self) -> bool:
        """True when the oracle can be invoked at all."""

    @abstractmethod
    def run(self, work_dir: Path, usage_file: Path | None = None) -> OracleReport | None:
        """Price `work_dir`.

        Returns None when there is nothing to price (missing directory or no
        .tf files). Raises OracleError for every failure the fallback cascade
        should absorb.
        """


class InfracostOracle(PricingOracle):
    name = "infracost"

    def __init__(self, binary: str = "infracost", timeout: float = 60.0, api_key: str | None = None):
        self.binary = binary
        self.timeout = timeout
        self.api_key = api_key or os.environ.get("INFRACOST_API_KEY")

    def is_available(self) -> bool:
        return shutil.which(self.binary) is not None

    def command(self, work_dir: Path, usage_file: Path | None = None) -> list[str]:
        cmd = [self.binary, "breakdown", "--path", str(work_dir), "--format", "json", "--log-level", "info"]
        if usage_file is not None:
            cmd += ["--usage-file", str(usage_file)]
        return cmd

    def run(self, work_dir: Path, usage_file: Path | None = None) -> OracleReport | None:
        work_dir = Path(work_dir)
        if not work_dir.is_dir() or not any(work_dir.glob("*.tf")):
            log.warning("No Terraform files in %s, skipping oracle", work_dir)
            return None
        if not self.is_available():
            raise OracleError(f"{self.binary} not found on PATH", kind="unavailable")

        env = dict(os.environ)
        if self.api_key:
            env["INFRACOST_API_KEY"] = self.api_key

        cmd = self.command(work_dir, usage_file)
        log.debug("Running %s", " ".join(cmd))
        try:
            result = subprocess.run(cmd, capture_output=True, text=True, timeout=self.timeout, env=env)
        except subprocess.TimeoutExpired as e:
            raise OracleError(f"{self.binary} timed out after {self.timeout:g}s", kind="timeout") from e
        except FileNotFoundError as e:
            raise OracleError(f"{self.binary} not found", kind="unavailable") from e
        except UnicodeDecodeError as e:
            raise OracleError(f"{self.binary} produced undecodable output", kind="malformed") from e

        if result.returncode != 0:
            stderr = (result.stderr or "").strip()
            kind = "quota" if _QUOTA_RE.search(stderr) else "process"
            raise OracleError(f"{self.binary} exited with code {result.returncode}", kind=kind, stderr=stderr)

        return OracleReport.from_json(result.stdout)
