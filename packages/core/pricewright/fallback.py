"""Completeness gate, heuristic fallback estimates, and the static-site formula."""

from __future__ import annotations

import logging

from pricewright.catalog import HIGH_PERFORMANCE, ServiceCatalog, get_catalog, normalize_profile
from pricewright.errors import StaticComputeError
from pricewright.models import COMPLETE, FALLBACK, HEURISTIC, ProviderEstimate, ServiceCost, UsageVariant
from pricewright.oracle import OracleReport
from pricewright.resolver import DIRECT, UNKNOWN, USAGE_BASED, PricingClassification
from pricewright.sizing import LARGE, MEDIUM, SMALL, sizing_label
from pricewright.terraform import forbidden_compute, render

log = logging.getLogger(__name__)

SCALE_MULTIPLIERS = {SMALL: 0.5, MEDIUM: 1.0, LARGE: 2.5}
HIGH_PERFORMANCE_PREMIUM = 1.4
PROVIDER_ADJUSTMENTS = {"aws": 1.0, "gcp": 0.92, "azure": 0.95}
UNKNOWN_SERVICE_COST = 20.0
HEURISTIC_CONFIDENCE = 0.6
# Usage-based heuristics are calibrated for this many requests a month
_BASELINE_REQUESTS = 150_000
_USAGE_SCALE_BOUNDS = (0.25, 4.0)

# Static hosting rates: storage per GB, bandwidth per GB, DNS zone per month, CDN per GB
STATIC_RATES: dict[str, dict[str, float]] = {
    "aws": {"storage": 0.023, "bandwidth": 0.085, "dns": 0.5, "cdn": 0.01},
    "gcp": {"storage": 0.020, "bandwidth": 0.080, "dns": 0.3, "cdn": 0.008},
    "azure": {"storage": 0.024, "bandwidth": 0.087, "dns": 0.4, "cdn": 0.011},
}
STATIC_PLATFORM_FEE = 0.5
STATIC_CONFIDENCE = 0.95
STATIC_SERVICES = ("objectstorage", "cdn", "dns")


def completeness_gate(report: OracleReport, pricing: PricingClassification) -> str | None:
    """Return a reason when oracle output cannot be trusted, else None."""
    if pricing.direct and report.total_monthly_cost == 0:
        return f"oracle priced {len(pricing.direct)} direct service(s) at $0"
    if report.has_unsupported:
        unsupported = ", ".join(sorted(t for t, n in report.unsupported.items() if n))
        return f"oracle flagged unsupported resources: {unsupported}"
    return None


def _usage_scale(variant: UsageVariant | None) -> float:
    if variant is None:
        return 1.0
    low, high = _USAGE_SCALE_BOUNDS
    return max(low, min(high, variant.monthly_requests / _BASELINE_REQUESTS))


def heuristic_service_cost(
    service_id: str,
    provider: str,
    pricing_class: str,
    scale_tier: str = MEDIUM,
    cost_profile: str = "cost_effective",
    variant: UsageVariant | None = None,
    catalog: ServiceCatalog | None = None,
) -> float:
    """Flat monthly cost for one service, adjusted by tier, profile and provider."""
    catalog = catalog or get_catalog()
    svc = catalog.get(service_id)
    if pricing_class not in (DIRECT, USAGE_BASED, UNKNOWN):
        return 0.0
    if svc is None or "base" not in svc.heuristic:
        base = UNKNOWN_SERVICE_COST
        perf = 1.0
    else:
        base = float(svc.heuristic["base"])
        perf = float(svc.heuristic.get("performance", 1.0))

    cost = base * SCALE_MULTIPLIERS.get(scale_tier, 1.0)
    if normalize_profile(cost_profile) == HIGH_PERFORMANCE:
        cost *= HIGH_PERFORMANCE_PREMIUM * perf
    cost *= PROVIDER_ADJUSTMENTS.get(provider, 1.0)
    if pricing_class == USAGE_BASED:
        cost *= _usage_scale(variant)
    return round(cost, 2)


def heuristic_estimate(
    provider: str,
    scenario: str,
    pricing: PricingClassification,
    scale_tier: str = MEDIUM,
    cost_profile: str = "cost_effective",
    variant: UsageVariant | None = None,
    reason: str = "",
    warnings: list[str] | None = None,
    catalog: ServiceCatalog | None = None,
) -> ProviderEstimate:
    """Synthesize a FALLBACK estimate from the static heuristic table."""
    catalog = catalog or get_catalog()
    breakdown: list[ServiceCost] = []
    for service_id in pricing.billable + pricing.unknown:
        pricing_class = pricing.pricing_class(service_id)
        cost = heuristic_service_cost(service_id, provider, pricing_class, scale_tier, cost_profile, variant, catalog)
        product = catalog.resolve_product(provider, service_id, cost_profile)
        svc = catalog.get(service_id)
        breakdown.append(
            ServiceCost(
                service_class=service_id,
                display_name=catalog.display_name(product) or (svc.name if svc else service_id),
                product_id=product,
                category=catalog.category_of(service_id),
                monthly_cost=cost,
                sizing=sizing_label(cost_profile),
                notes="default estimate for unclassified service" if pricing_class == UNKNOWN else "heuristic",
            )
        )
    total = round(sum(s.monthly_cost for s in breakdown), 2)
    log.info("Heuristic %s/%s estimate: $%.2f (%s)", provider, scenario, total, reason or "fallback")
    return ProviderEstimate(
        provider=provider,
        scenario=scenario,
        total_monthly_cost=total,
        breakdown=breakdown,
        estimate_type=HEURISTIC,
        pricing_status=FALLBACK,
        estimate_source="heuristic",
        confidence=HEURISTIC_CONFIDENCE,
        reason=reason,
        warnings=list(warnings or []),
    )


def static_estimate(
    provider: str,
    scenario: str,
    services: list[str],
    variant: UsageVariant,
    catalog: ServiceCatalog | None = None,
) -> ProviderEstimate:
    """Closed-form cost for static-content hosting. Never invokes the oracle.

    Raises StaticComputeError when the architecture would declare compute,
    since the formula only holds for storage and delivery.
    """
    catalog = catalog or get_catalog()
    leaked = forbidden_compute(render(provider, services, catalog=catalog))
    if leaked:
        raise StaticComputeError(
            f"Static architecture declares compute resources on {provider}: {', '.join(leaked)}",
            provider=provider,
            service_class=catalog.service_for_resource(provider, leaked[0]) or "",
        )

    rates = STATIC_RATES[provider]
    present = set(services)
    lines: dict[str, float] = {}
    if "objectstorage" in present:
        lines["objectstorage"] = variant.storage_gb * rates["storage"]
    if "cdn" in present:
        lines["cdn"] = variant.data_transfer_gb * (rates["bandwidth"] + rates["cdn"])
    if "dns" in present:
        lines["dns"] = rates["dns"]

    breakdown = []
    for service_id, cost in lines.items():
        product = catalog.resolve_product(provider, service_id)
        breakdown.append(
            ServiceCost(
                service_class=service_id,
                display_name=catalog.display_name(product) or service_id,
                product_id=product,
                category=catalog.category_of(service_id),
                monthly_cost=round(cost, 4),
                resource_count=1,
                notes="static hosting formula",
            )
        )
    total = round(sum(lines.values()) + STATIC_PLATFORM_FEE, 2)
    return ProviderEstimate(
        provider=provider,
        scenario=scenario,
        total_monthly_cost=total,
        breakdown=breakdown,
        consumption={"platform_fee": STATIC_PLATFORM_FEE},
        estimate_type=HEURISTIC,
        pricing_status=COMPLETE,
        estimate_source="formula",
        confidence=STATIC_CONFIDENCE,
        resource_count=len(breakdown),
        reason=f"static hosting: {variant.storage_gb:g} GB stored, {variant.data_transfer_gb:g} GB transferred",
    )
