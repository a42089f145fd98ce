"""Scenario matrix, provider ranking, cost ranges, and confidence scoring."""

from __future__ import annotations

from collections import defaultdict
from typing import Iterable

from pricewright.catalog import HIGH_PERFORMANCE, ServiceCatalog, get_catalog, normalize_profile
from pricewright.models import (
    PROVIDERS,
    SCENARIOS,
    CategoryCost,
    CostDriver,
    CostRange,
    CostSensitivity,
    MissingComponent,
    ProviderEstimate,
    ProviderRanking,
)

# Static per-provider performance scores by category (0-100)
PROVIDER_PERFORMANCE_SCORES: dict[str, dict[str, int]] = {
    "aws": {"compute": 95, "database": 92, "networking": 90, "overall": 92},
    "gcp": {"compute": 93, "database": 88, "networking": 92, "overall": 90},
    "azure": {"compute": 90, "database": 90, "networking": 88, "overall": 89},
}
_DEFAULT_PERFORMANCE = 85

# priority -> (cost weight, performance weight)
PRIORITY_WEIGHTS: dict[str, tuple[float, float]] = {
    "cost_effective": (0.7, 0.3),
    "balanced": (0.5, 0.5),
    "premium": (0.3, 0.7),
}

# Catalog category -> performance category
_PERFORMANCE_CATEGORY = {"compute": "compute", "database": "database", "network": "networking"}

DRIVER_DEFINITIONS: dict[str, str] = {
    "identityauth": "Auth + session scaling",
    "computeserverless": "Lambda invocation costs",
    "cdn": "CDN egress dominates at scale",
    "objectstorage": "Asset storage costs",
    "computecontainer": "Compute dominates",
    "loadbalancer": "Always-on LB costs",
    "vpcnetworking": "Data transfer out",
    "apigateway": "API Gateway pricing",
    "nosqldatabase": "Read/write units",
    "computevm": "VM runtime costs",
    "blockstorage": "Persistent storage",
    "relationaldatabase": "Database instance hours",
    "cache": "Cache node hours",
}

# Components that commonly get added later: service -> (name, impact, reason)
FUTURE_RISK_SERVICES: dict[str, tuple[str, str, str]] = {
    "messagequeue": ("Async Processing", "low", "Adding async processing or background jobs later"),
    "eventbus": ("Event-Driven Architecture", "medium", "Migrating to event-driven patterns later"),
    "searchengine": ("Full-Text Search", "high", "Adding search functionality later"),
    "cache": ("Caching Layer", "medium", "Adding caching for performance optimization"),
    "cdn": ("CDN", "low", "Adding global content delivery later"),
}
_IMPACT_COST = {"high": "$50-100", "medium": "$20-50", "low": "$5-20"}

_SENSITIVITY: dict[str, tuple[str, str, str]] = {
    "STATIC_WEB_HOSTING": ("low", "Storage-bound", "bandwidth usage"),
    "SERVERLESS_WEB_APP": ("medium", "Usage-sensitive", "API request volume"),
    "MOBILE_BACKEND_API": ("medium", "Usage-sensitive", "API request volume"),
    "CONTAINERIZED_WEB_APP": ("high", "Compute-heavy", "node count and instance size"),
    "TRADITIONAL_VM_APP": ("high", "Compute-heavy", "node count and instance size"),
    "DATA_PROCESSING_PIPELINE": ("high", "Data-volume sensitive", "data volume processed"),
}


class ScenarioMatrix:
    """{low, expected, high} x {aws, gcp, azure} -> ProviderEstimate.

    Filled one cell at a time. A cell is either an estimate or explicitly
    marked unavailable; aggregation waits until every cell is settled.
    """

    def __init__(self, providers: Iterable[str] = PROVIDERS, scenarios: Iterable[str] = SCENARIOS):
        self.providers = tuple(providers)
        self.scenarios = tuple(scenarios)
        self._cells: dict[tuple[str, str], ProviderEstimate | None] = {}

    def set(self, scenario: str, provider: str, estimate: ProviderEstimate) -> None:
        self._check_cell(scenario, provider)
        self._cells[(scenario, provider)] = estimate

    def mark_unavailable(self, scenario: str, provider: str) -> None:
        self._check_cell(scenario, provider)
        self._cells[(scenario, provider)] = None

    def _check_cell(self, scenario: str, provider: str) -> None:
        if scenario not in self.scenarios or provider not in self.providers:
            raise KeyError(f"No matrix cell for ({scenario}, {provider})")
        if (scenario, provider) in self._cells:
            raise ValueError(f"Cell ({scenario}, {provider}) is already filled")

    def get(self, scenario: str, provider: str) -> ProviderEstimate | None:
        return self._cells.get((scenario, provider))

    @property
    def is_complete(self) -> bool:
        return all((s, p) in self._cells for s in self.scenarios for p in self.providers)

    def estimates(self, scenario: str | None = None) -> list[ProviderEstimate]:
        scenarios = (scenario,) if scenario else self.scenarios
        return [e for s in scenarios for p in self.providers if (e := self._cells.get((s, p))) is not None]

    def costs(self, scenario: str) -> dict[str, float]:
        return {e.provider: e.total_monthly_cost for e in self.estimates(scenario)}

    def to_dict(self) -> dict[str, dict[str, ProviderEstimate]]:
        return {s: {e.provider: e for e in self.estimates(s)} for s in self.scenarios}


def estimate_confidence(resource_count: int, total_cost: float, billable_count: int, unmapped_count: int = 0) -> float:
    """Per-estimate confidence for oracle-derived results.

    Starts at 1.0, halves when the oracle priced nothing although billable
    services exist, and loses up to 0.2 for unmapped priced resources.
    """
    confidence = 1.0
    if billable_count > 0 and (resource_count == 0 or total_cost == 0):
        confidence *= 0.5
    if resource_count > 0 and unmapped_count > 0:
        confidence -= 0.2 * min(1.0, unmapped_count / resource_count)
    return round(max(0.0, min(1.0, confidence)), 3)


def overall_confidence(estimates: Iterable[ProviderEstimate]) -> float:
    """Average of the minimum and the mean provider confidence."""
    values = [e.confidence for e in estimates]
    if not values:
        return 0.0
    return round((min(values) + sum(values) / len(values)) / 2, 3)


def performance_score(provider: str, services: Iterable[str] = (), catalog: ServiceCatalog | None = None) -> int:
    """Category-weighted performance score for a provider.

    Averages the provider's compute/database/networking scores over the
    services present, using `overall` for everything else.
    """
    scores = PROVIDER_PERFORMANCE_SCORES.get(provider)
    services = list(services)
    if not scores:
        return _DEFAULT_PERFORMANCE
    if not services:
        return scores["overall"]
    catalog = catalog or get_catalog()
    values = [scores.get(_PERFORMANCE_CATEGORY.get(catalog.category_of(s), "overall"), scores["overall"]) for s in services]
    return round(sum(values) / len(values))


def resolve_priority(priority: str | None, cost_profile: str) -> str:
    if priority in PRIORITY_WEIGHTS:
        return priority
    return "premium" if normalize_profile(cost_profile) == HIGH_PERFORMANCE else "cost_effective"


def cost_score(cost: float, min_cost: float, max_cost: float) -> int:
    """0-100, cheaper is higher, relative to the other providers."""
    if max_cost == min_cost:
        return 100
    return round(100 - (cost - min_cost) / (max_cost - min_cost) * 100)


def provider_score(cost: float, min_cost: float, max_cost: float, perf: int, priority: str) -> int:
    cost_weight, perf_weight = PRIORITY_WEIGHTS.get(priority, PRIORITY_WEIGHTS["cost_effective"])
    return round(cost_score(cost, min_cost, max_cost) * cost_weight + perf * perf_weight)


def provider_cost_range(cost: float, scale_tier: str, cost_profile: str, stateful: bool = False) -> tuple[float, float]:
    """Uncertainty band around one provider's expected cost.

    +-20% base, widened for LARGE scale, high_performance and stateful
    workloads, narrowed for SMALL scale. Never wider than +-30%.
    """
    spread = 0.20
    if scale_tier == "LARGE":
        spread += 0.05
    elif scale_tier == "SMALL":
        spread -= 0.05
    if normalize_profile(cost_profile) == HIGH_PERFORMANCE:
        spread += 0.05
    if stateful:
        spread += 0.05
    spread = min(spread, 0.30)
    return round(cost * (1 - spread), 2), round(cost * (1 + spread), 2)


def rank_providers(
    costs: dict[str, float],
    priority: str,
    services: Iterable[str] = (),
    ranges: dict[str, tuple[float, float]] | None = None,
    catalog: ServiceCatalog | None = None,
) -> list[ProviderRanking]:
    """Rank providers by weighted score, descending. Rank 1 is recommended.

    Ties keep provider declaration order.
    """
    if not costs:
        return []
    services = list(services)
    ranges = ranges or {}
    min_cost, max_cost = min(costs.values()), max(costs.values())
    rows = []
    for provider, cost in costs.items():
        perf = performance_score(provider, services, catalog)
        rows.append(
            (
                provider_score(cost, min_cost, max_cost, perf, priority),
                cost_score(cost, min_cost, max_cost),
                perf,
                provider,
                cost,
            )
        )
    rows.sort(key=lambda r: r[0], reverse=True)
    return [
        ProviderRanking(
            provider=provider,
            rank=i,
            score=score,
            cost_score=c_score,
            performance_score=perf,
            monthly_cost=round(cost, 2),
            recommended=i == 1,
            range_low=ranges.get(provider, (cost, cost))[0],
            range_high=ranges.get(provider, (cost, cost))[1],
        )
        for i, (score, c_score, perf, provider, cost) in enumerate(rows, start=1)
    ]


def format_range(low: float, high: float) -> str:
    return f"${low:,.2f} - ${high:,.2f}/month"


def cost_range(matrix: ScenarioMatrix) -> CostRange:
    """[min of low-scenario costs, max of high-scenario costs] across providers.

    Expected costs are folded in so the range always brackets them.
    """
    low = [e.total_monthly_cost for e in matrix.estimates("low")]
    high = [e.total_monthly_cost for e in matrix.estimates("high")]
    expected = [e.total_monthly_cost for e in matrix.estimates("expected")]
    lows = low + expected
    highs = high + expected
    if not lows and not highs:
        return CostRange(min=0.0, max=0.0, formatted=format_range(0, 0))
    lo = round(min(lows or highs), 2)
    hi = round(max(highs or lows), 2)
    return CostRange(min=lo, max=hi, formatted=format_range(lo, hi))


def cost_drivers(estimate: ProviderEstimate | None, limit: int = 3) -> list[CostDriver]:
    """Top services by monthly cost, with an impact blurb per service."""
    if estimate is None or not estimate.breakdown:
        return []
    total = estimate.total_monthly_cost or 1.0
    ranked = sorted((s for s in estimate.breakdown if s.monthly_cost > 0), key=lambda s: s.monthly_cost, reverse=True)
    return [
        CostDriver(
            name=s.display_name or s.service_class,
            service_class=s.service_class,
            impact=DRIVER_DEFINITIONS.get(s.service_class, "Usage-driven cost"),
            monthly_cost=round(s.monthly_cost, 2),
            share=round(s.monthly_cost / total * 100, 1),
        )
        for s in ranked[:limit]
    ]


def category_breakdown(estimate: ProviderEstimate | None) -> list[CategoryCost]:
    if estimate is None:
        return []
    totals: dict[str, float] = defaultdict(float)
    members: dict[str, list[str]] = defaultdict(list)
    for s in estimate.breakdown:
        totals[s.category] += s.monthly_cost
        members[s.category].append(s.service_class)
    rows = [
        CategoryCost(category=cat, total=round(total, 2), service_count=len(members[cat]), services=members[cat])
        for cat, total in totals.items()
    ]
    return sorted(rows, key=lambda c: c.total, reverse=True)


def missing_components(services: Iterable[str]) -> list[MissingComponent]:
    """Commonly added components the architecture does not have yet."""
    present = set(services)
    return [
        MissingComponent(
            service_class=service_class,
            name=name,
            impact=impact,
            estimated_additional_cost=_IMPACT_COST[impact],
            warning=f"{reason} may increase monthly cost.",
        )
        for service_class, (name, impact, reason) in FUTURE_RISK_SERVICES.items()
        if service_class not in present
    ]


def cost_sensitivity(pattern: str | None, operational: bool = False) -> CostSensitivity:
    if operational:
        return CostSensitivity(level="n/a", label="Operational Impact", factor="incident scope")
    level, label, factor = _SENSITIVITY.get(pattern or "", ("medium", "Standard sensitivity", "overall usage"))
    return CostSensitivity(level=level, label=label, factor=factor)
