"""Deployable/billable service resolution and pricing-class bucketing."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Callable

from pricewright.catalog import ServiceCatalog, get_catalog, normalize_service_id
from pricewright.models import ArchitectureSpec

log = logging.getLogger(__name__)

DIRECT = "DIRECT"
USAGE_BASED = "USAGE_BASED"
EXTERNAL = "EXTERNAL"
FREE_TIER = "FREE_TIER"
UNKNOWN = "UNKNOWN"

# Categories billed outside the platform, dropped from the deployable set
_OFF_PLATFORM_CATEGORIES = frozenset({"identity", "security", "fintech"})
# Security services that stay billable on the platform
_BILLABLE_SECURITY = frozenset({"secretsmanagement", "waf"})


def _has(*words: str) -> Callable[[str], bool]:
    pattern = re.compile("|".join(words))
    return lambda service_id: bool(pattern.search(service_id))


# Heuristic pricing-class rules for ids the catalog does not know.
# Evaluated top to bottom, first match wins.
_HEURISTIC_RULES: list[tuple[Callable[[str], bool], str, str]] = [
    (_has("payment", "stripe", "paypal", "email", "sendgrid", "sms", "twilio", "auth0", "okta", "datadog"),
     EXTERNAL, "third-party service billed outside the platform"),
    (_has("^iam$", "role", "policy", "securitygroup", "subnet", "vpc", "certificate"),
     FREE_TIER, "control-plane resource with no direct charge"),
    (_has("database", "db$", "sql", "cluster", "instance", "vm$", "server", "warehouse", "cache"),
     DIRECT, "provisioned capacity billed per hour"),
    (_has("storage", "bucket", "queue", "topic", "stream", "function", "serverless", "gateway", "log", "cdn"),
     USAGE_BASED, "metered by usage volume"),
]


@dataclass
class PricingClassification:
    direct: list[str] = field(default_factory=list)
    usage_based: list[str] = field(default_factory=list)
    external: list[str] = field(default_factory=list)
    free_tier: list[str] = field(default_factory=list)
    unknown: list[str] = field(default_factory=list)
    # service_id -> {"pricing_class": ..., "reason": ...}
    details: dict[str, dict[str, str]] = field(default_factory=dict)

    @property
    def billable(self) -> list[str]:
        """Services sent to the pricing oracle, in declaration order."""
        return [s for s in self.details if s in self.direct or s in self.usage_based]

    def pricing_class(self, service_id: str) -> str:
        return self.details.get(service_id, {}).get("pricing_class", UNKNOWN)

    def to_dict(self) -> dict[str, Any]:
        return {
            "direct": list(self.direct),
            "usage_based": list(self.usage_based),
            "external": list(self.external),
            "free_tier": list(self.free_tier),
            "unknown": list(self.unknown),
            "details": {k: dict(v) for k, v in self.details.items()},
        }


def _is_off_platform(service_id: str, catalog: ServiceCatalog) -> str | None:
    """Return a reason string when a service is billed outside the platform."""
    svc = catalog.get(service_id)
    if svc is None:
        pricing_class, reason = _heuristic_class(service_id)
        return reason if pricing_class == EXTERNAL else None
    if svc.pricing_class == EXTERNAL:
        return "external pricing class"
    if svc.category in _OFF_PLATFORM_CATEGORIES and service_id not in _BILLABLE_SECURITY:
        return f"{svc.category} category billed outside the platform"
    return None


def resolve_deployable(spec: ArchitectureSpec, catalog: ServiceCatalog | None = None) -> list[str]:
    """Reduce an architecture to infrastructure-backed, billable canonical ids.

    Disabled services and off-platform services are dropped; unknown ids pass
    through unchanged. Order follows the architecture, duplicates collapse.
    """
    catalog = catalog or get_catalog()
    deployable: list[str] = []
    for entry in spec.services:
        service_id = normalize_service_id(entry.id)
        if not entry.included:
            log.debug("Skipping %s: state %s", service_id, entry.state)
            continue
        reason = _is_off_platform(service_id, catalog)
        if reason:
            log.debug("Skipping %s: %s", service_id, reason)
            continue
        if service_id not in catalog:
            log.info("Unknown service %s kept as best-effort id", service_id)
        if service_id not in deployable:
            deployable.append(service_id)
    return deployable


def _heuristic_class(service_id: str) -> tuple[str, str]:
    for predicate, pricing_class, reason in _HEURISTIC_RULES:
        if predicate(service_id):
            return pricing_class, f"heuristic: {reason}"
    return UNKNOWN, "no catalog metadata and no heuristic match"


def classify_pricing(services: list[str], catalog: ServiceCatalog | None = None) -> PricingClassification:
    """Bucket each service into a pricing class with a human-readable reason."""
    catalog = catalog or get_catalog()
    result = PricingClassification()
    buckets = {
        DIRECT: result.direct,
        USAGE_BASED: result.usage_based,
        EXTERNAL: result.external,
        FREE_TIER: result.free_tier,
        UNKNOWN: result.unknown,
    }
    for raw in services:
        service_id = normalize_service_id(raw)
        if service_id in result.details:
            continue
        svc = catalog.get(service_id)
        if svc is not None and svc.pricing_class != UNKNOWN:
            pricing_class = svc.pricing_class
            reason = f"catalog: {svc.name} is {pricing_class.lower().replace('_', '-')}"
        else:
            pricing_class, reason = _heuristic_class(service_id)
        buckets[pricing_class].append(service_id)
        result.details[service_id] = {"pricing_class": pricing_class, "reason": reason}
    return result
