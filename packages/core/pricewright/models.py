"""Data models for the cost-resolution pipeline.

Everything the pipeline consumes or produces is a pydantic model: the
architecture and usage profile come in, ProviderEstimates are produced once per
(provider, scenario) cell, and a CostReport is the single artifact handed back
to callers for rendering or persistence.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from pricewright.catalog import normalize_profile, normalize_service_id

PROVIDERS = ("aws", "gcp", "azure")
SCENARIOS = ("low", "expected", "high")

# Inclusion states on an architecture entry
INCLUDED = "INCLUDED"
USER_DISABLED = "USER_DISABLED"
EXCLUDED = "EXCLUDED"
_STATES = (INCLUDED, USER_DISABLED, EXCLUDED)

# ProviderEstimate.estimate_type
EXACT = "exact"
HEURISTIC = "heuristic"

# ProviderEstimate.pricing_status
COMPLETE = "COMPLETE"
INCOMPLETE = "INCOMPLETE"
FALLBACK = "FALLBACK"

# ServiceCost.service_class for priced resources that map to no known service
UNMAPPED_BUCKET = "unknown"


class ServiceEntry(BaseModel):
    id: str
    engine: str | None = None
    state: str = INCLUDED
    config: dict[str, Any] = Field(default_factory=dict)

    @field_validator("id")
    @classmethod
    def normalize_id(cls, v: str) -> str:
        normalized = normalize_service_id(v)
        if not normalized:
            raise ValueError(f"Service id {v!r} is empty after normalization")
        return normalized

    @field_validator("state")
    @classmethod
    def validate_state(cls, v: str) -> str:
        state = (v or INCLUDED).strip().upper()
        if state not in _STATES:
            raise ValueError(f"Unknown service state {v!r}, must be one of {_STATES}")
        return state

    @property
    def included(self) -> bool:
        return self.state == INCLUDED


class ArchitectureSpec(BaseModel):
    """The set of canonical services a design calls for.

    Read-only input for a single estimation request. `pattern` carries an
    explicit architecture-pattern flag (e.g. STATIC_WEB_HOSTING) and `intent`
    is the free-text project description the workload classifier scans.
    """

    name: str = "architecture"
    services: list[ServiceEntry] = Field(default_factory=list)
    pattern: str | None = None
    intent: str = ""
    scale: str = ""
    cost_profile: str = "cost_effective"
    priority: str | None = None  # cost_effective | balanced | premium
    region: str = "us-east-1"
    metadata: dict[str, Any] = Field(default_factory=dict)

    @field_validator("services", mode="before")
    @classmethod
    def coerce_services(cls, v: Any) -> Any:
        if v is None:
            return []
        return [{"id": item} if isinstance(item, str) else item for item in v]

    @field_validator("cost_profile", mode="before")
    @classmethod
    def coerce_profile(cls, v: Any) -> str:
        return normalize_profile(v)

    @field_validator("pattern", mode="before")
    @classmethod
    def coerce_pattern(cls, v: Any) -> str | None:
        if not v:
            return None
        return str(v).strip().upper().replace("-", "_").replace(" ", "_")

    def service_ids(self) -> list[str]:
        return [s.id for s in self.services]

    def engine_hints(self) -> dict[str, str]:
        return {s.id: s.engine for s in self.services if s.engine}

    def to_yaml(self) -> str:
        return yaml.dump(self.model_dump(exclude_defaults=True), default_flow_style=False, sort_keys=False)

    @classmethod
    def from_yaml(cls, text: str) -> ArchitectureSpec:
        data = yaml.safe_load(text) or {}
        if "architecture" in data:
            data = data["architecture"] or {}
        return cls.model_validate(data)

    @classmethod
    def from_file(cls, path: str | Path) -> ArchitectureSpec:
        return cls.from_yaml(Path(path).read_text())


class UsageVariant(BaseModel):
    """One named usage level. All counters are monthly."""

    monthly_users: int = Field(default=5000, ge=0)
    requests_per_user: float = Field(default=30, ge=0)
    storage_gb: float = Field(default=20, ge=0)
    data_transfer_gb: float = Field(default=50, ge=0)
    peak_concurrency: int = Field(default=100, ge=0)
    # IoT / ML / consumption counters
    device_count: int = Field(default=0, ge=0)
    messages_per_device: int = Field(default=0, ge=0)
    monthly_tokens: int = Field(default=1_000_000, ge=0)
    archive_storage_gb: float = Field(default=1000, ge=0)
    training_hours: float = Field(default=0, ge=0)
    inference_hours: float = Field(default=0, ge=0)

    @property
    def monthly_requests(self) -> int:
        return int(self.monthly_users * self.requests_per_user)


_DEFAULT_VARIANTS: dict[str, dict[str, Any]] = {
    "low": {
        "monthly_users": 1000,
        "requests_per_user": 10,
        "storage_gb": 5,
        "data_transfer_gb": 10,
        "peak_concurrency": 25,
        "monthly_tokens": 250_000,
        "archive_storage_gb": 500,
    },
    "expected": {
        "monthly_users": 5000,
        "requests_per_user": 30,
        "storage_gb": 20,
        "data_transfer_gb": 50,
        "peak_concurrency": 100,
        "monthly_tokens": 1_000_000,
        "archive_storage_gb": 1000,
    },
    "high": {
        "monthly_users": 20000,
        "requests_per_user": 100,
        "storage_gb": 100,
        "data_transfer_gb": 200,
        "peak_concurrency": 400,
        "monthly_tokens": 4_000_000,
        "archive_storage_gb": 2000,
    },
}


def default_variant(name: str) -> UsageVariant:
    return UsageVariant(**_DEFAULT_VARIANTS[name])


class UsageProfile(BaseModel):
    """Low / expected / high usage. Missing or empty variants get documented defaults.

    A partially specified variant is layered over that variant's defaults, so
    `{"expected": {"monthly_users": 800}}` keeps the other expected counters.
    """

    low: UsageVariant = Field(default_factory=lambda: default_variant("low"))
    expected: UsageVariant = Field(default_factory=lambda: default_variant("expected"))
    high: UsageVariant = Field(default_factory=lambda: default_variant("high"))

    @model_validator(mode="before")
    @classmethod
    def fill_defaults(cls, data: Any) -> Any:
        if data is None:
            return {}
        if not isinstance(data, dict):
            return data
        filled: dict[str, Any] = {}
        for name in SCENARIOS:
            raw = data.get(name)
            if isinstance(raw, UsageVariant):
                filled[name] = raw
                continue
            merged = dict(_DEFAULT_VARIANTS[name])
            merged.update({k: v for k, v in (raw or {}).items() if v is not None})
            filled[name] = merged
        return filled

    def variant(self, scenario: str) -> UsageVariant:
        if scenario not in SCENARIOS:
            raise ValueError(f"Unknown scenario {scenario!r}, must be one of {SCENARIOS}")
        return getattr(self, scenario)

    @classmethod
    def from_yaml(cls, text: str) -> UsageProfile:
        data = yaml.safe_load(text) or {}
        if "usage" in data:
            data = data["usage"] or {}
        return cls.model_validate(data)


class ServiceCost(BaseModel):
    service_class: str
    display_name: str
    product_id: str | None = None
    category: str = "other"
    monthly_cost: float = Field(default=0.0, ge=0)
    resource_count: int = 0
    sizing: str = "Standard"
    notes: str = ""


class ProviderEstimate(BaseModel):
    """Priced result for one (provider, scenario) cell. Immutable once built."""

    model_config = ConfigDict(frozen=True)

    provider: str
    scenario: str = "expected"
    total_monthly_cost: float = Field(default=0.0, ge=0)
    breakdown: tuple[ServiceCost, ...] = ()
    # Never shared between estimates: with_consumption builds a fresh dict for the copy
    consumption: dict[str, float] = Field(default_factory=dict)
    estimate_type: str = EXACT
    pricing_status: str = COMPLETE
    estimate_source: str = "oracle"  # oracle | heuristic | formula | placeholder
    confidence: float = Field(default=1.0, ge=0, le=1)
    resource_count: int = 0
    unmapped_resources: tuple[str, ...] = ()
    reason: str = ""
    warnings: tuple[str, ...] = ()

    @property
    def service_count(self) -> int:
        return len(self.breakdown)

    @property
    def formatted_cost(self) -> str:
        return f"${self.total_monthly_cost:,.2f}/month"


class CostRange(BaseModel):
    min: float = 0.0
    max: float = 0.0
    formatted: str = ""


class ProviderRanking(BaseModel):
    provider: str
    rank: int
    score: int
    cost_score: int
    performance_score: int
    monthly_cost: float
    recommended: bool = False
    range_low: float = 0.0
    range_high: float = 0.0


class Recommendation(BaseModel):
    provider: str
    monthly_cost: float
    score: int
    cost_range: CostRange = Field(default_factory=CostRange)
    confidence: float = 0.0


class CostDriver(BaseModel):
    name: str
    service_class: str
    impact: str = ""
    monthly_cost: float = 0.0
    share: float = 0.0  # percent of the provider total


class CategoryCost(BaseModel):
    category: str
    total: float
    service_count: int
    services: list[str] = Field(default_factory=list)


class MissingComponent(BaseModel):
    service_class: str
    name: str
    impact: str
    estimated_additional_cost: str
    warning: str


class CostSensitivity(BaseModel):
    level: str = "medium"
    label: str = "Standard sensitivity"
    factor: str = "overall usage"


class CostReport(BaseModel):
    """Output contract handed to downstream collaborators."""

    run_id: str = ""
    pricing_mode: str = ""
    cost_profile: str = "cost_effective"
    scale_tier: str = "MEDIUM"
    deployable_services: list[str] = Field(default_factory=list)
    scenarios: dict[str, dict[str, ProviderEstimate]] = Field(default_factory=dict)
    cost_range: CostRange = Field(default_factory=CostRange)
    recommended: Recommendation | None = None
    rankings: list[ProviderRanking] = Field(default_factory=list)
    confidence: float = 0.0
    confidence_percentage: int = 0
    drivers: list[CostDriver] = Field(default_factory=list)
    per_service_breakdown: list[ServiceCost] = Field(default_factory=list)
    category_breakdown: list[CategoryCost] = Field(default_factory=list)
    missing_components: list[MissingComponent] = Field(default_factory=list)
    sensitivity: CostSensitivity = Field(default_factory=CostSensitivity)
    estimate_type: str = EXACT
    warnings: list[str] = Field(default_factory=list)
    is_placeholder: bool = False

    def estimate_for(self, provider: str, scenario: str = "expected") -> ProviderEstimate | None:
        return self.scenarios.get(scenario, {}).get(provider)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json")
