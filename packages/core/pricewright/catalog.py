"""Service catalog: canonical service id -> provider product id -> display name.

Catalog data lives in data/catalog/*.yaml, one file per service category, and
data/aliases.yaml maps drifted ids onto canonical ones. Everything is loaded
once and never mutated afterwards; lookups hand out copies.
"""

from __future__ import annotations

import logging
import re
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml

log = logging.getLogger(__name__)

_DATA_DIR = Path(__file__).parent / "data"
_CATALOG_DIR = _DATA_DIR / "catalog"

PRICING_CLASSES = ("DIRECT", "USAGE_BASED", "EXTERNAL", "FREE_TIER", "UNKNOWN")

COST_EFFECTIVE = "cost_effective"
HIGH_PERFORMANCE = "high_performance"

_PROVIDER_ALIASES = {
    "aws": "aws",
    "amazon": "aws",
    "amazon_web_services": "aws",
    "gcp": "gcp",
    "google": "gcp",
    "google_cloud": "gcp",
    "googlecloud": "gcp",
    "azure": "azure",
    "microsoft": "azure",
    "msazure": "azure",
}

_HIGH_PERF_PROFILES = {"high", "performance", "high_perf", "high_performance", "premium"}

# Resource type prefixes per provider namespace
PROVIDER_PREFIXES = {
    "aws": "aws_",
    "gcp": "google_",
    "azure": "azurerm_",
}

_ID_SEPARATORS = re.compile(r"[\s_\-./]+")


def normalize_provider(provider: str | None) -> str:
    key = _ID_SEPARATORS.sub("_", str(provider or "").strip().lower())
    return _PROVIDER_ALIASES.get(key, key)


def normalize_profile(profile: str | None) -> str:
    key = _ID_SEPARATORS.sub("_", str(profile or "").strip().lower())
    return HIGH_PERFORMANCE if key in _HIGH_PERF_PROFILES else COST_EFFECTIVE


@lru_cache(maxsize=1)
def _aliases() -> dict[str, str]:
    data = yaml.safe_load((_DATA_DIR / "aliases.yaml").read_text()) or {}
    return dict(data.get("aliases", {}))


def normalize_service_id(service_id: str | None) -> str:
    """Map any drifted id onto its canonical form.

    Known aliases win; anything else is lower-cased with separators stripped,
    so unknown ids still come through as stable best-effort strings.
    """
    raw = str(service_id or "").strip().lower()
    if not raw:
        return ""
    snake = _ID_SEPARATORS.sub("_", raw).strip("_")
    aliases = _aliases()
    if snake in aliases:
        return aliases[snake]
    return snake.replace("_", "")


class ServiceDef:
    """A single canonical service definition."""

    __slots__ = ("service_id", "name", "category", "pricing_class", "stateful", "products", "resources", "heuristic")

    def __init__(
        self,
        service_id: str,
        name: str,
        category: str,
        pricing_class: str,
        stateful: bool,
        products: dict[str, dict[str, str]],
        resources: dict[str, list[str]],
        heuristic: dict[str, float],
    ):
        self.service_id = service_id
        self.name = name
        self.category = category
        self.pricing_class = pricing_class
        self.stateful = stateful
        self.products = products
        self.resources = resources
        self.heuristic = heuristic

    def resource_type(self, provider: str) -> str | None:
        types = self.resources.get(provider)
        return types[0] if types else None

    def to_dict(self) -> dict[str, Any]:
        return {
            "service_id": self.service_id,
            "name": self.name,
            "category": self.category,
            "pricing_class": self.pricing_class,
            "stateful": self.stateful,
            "products": {p: dict(t) for p, t in self.products.items()},
            "resources": {p: list(t) for p, t in self.resources.items()},
        }


class ServiceCatalog:
    """Canonical services loaded from YAML category files.

    Provides O(1) lookup by service id, product resolution per provider and
    cost profile, and the reverse resource-type -> service id table the
    oracle normalizer uses.
    """

    def __init__(self, catalog_dir: str | Path | None = None):
        self._dir = Path(catalog_dir) if catalog_dir else _CATALOG_DIR
        self._services: dict[str, ServiceDef] = {}
        self._display_names: dict[str, str] = {}
        # (provider, resource_type) -> service_id
        self._by_resource: dict[tuple[str, str], str] = {}
        self._load()

    def _load(self) -> None:
        for yaml_path in sorted(self._dir.glob("*.yaml")):
            data = yaml.safe_load(yaml_path.read_text()) or {}
            category = data["category"]

            for service_id, svc in (data.get("services") or {}).items():
                pricing_class = str(svc.get("pricing_class", "UNKNOWN")).upper()
                if pricing_class not in PRICING_CLASSES:
                    raise ValueError(f"{yaml_path.name}: {service_id} has unknown pricing class {pricing_class!r}")
                defn = ServiceDef(
                    service_id=service_id,
                    name=svc.get("name", service_id),
                    category=svc.get("category", category),
                    pricing_class=pricing_class,
                    stateful=bool(svc.get("stateful", False)),
                    products={p: dict(t) for p, t in (svc.get("products") or {}).items()},
                    resources={p: list(t) for p, t in (svc.get("resources") or {}).items()},
                    heuristic=dict(svc.get("heuristic") or {}),
                )
                if service_id in self._services:
                    raise ValueError(f"Duplicate service id {service_id!r} in {yaml_path.name}")
                self._services[service_id] = defn

                for provider, types in defn.resources.items():
                    for resource_type in types:
                        key = (provider, resource_type)
                        if key in self._by_resource:
                            log.debug(
                                "Resource type %s already mapped to %s, ignoring %s",
                                resource_type,
                                self._by_resource[key],
                                service_id,
                            )
                            continue
                        self._by_resource[key] = service_id

            self._display_names.update(data.get("display_names") or {})

    def get(self, service_id: str) -> ServiceDef | None:
        """Return service definition or None if not registered."""
        return self._services.get(normalize_service_id(service_id))

    def __contains__(self, service_id: str) -> bool:
        return self.get(service_id) is not None

    def list_services(self, category: str | None = None) -> list[ServiceDef]:
        services = sorted(self._services.values(), key=lambda s: s.service_id)
        if category:
            services = [s for s in services if s.category == category]
        return services

    def list_categories(self) -> list[str]:
        return sorted({s.category for s in self._services.values()})

    def category_of(self, service_id: str) -> str:
        svc = self.get(service_id)
        return svc.category if svc else "other"

    def resolve_product(
        self,
        provider: str,
        service_id: str,
        cost_profile: str | None = None,
        hints: dict[str, str] | None = None,
    ) -> str | None:
        """Pick the provider product for a canonical service.

        Engine-keyed tables ({ENGINE}_{COST|PERF}) are selected by the `engine`
        hint. Otherwise the cost profile key is tried, then DEFAULT, then the
        first defined variant. Returns None only when the service has no table
        for the provider.
        """
        svc = self.get(service_id)
        if svc is None:
            return None
        table = svc.products.get(normalize_provider(provider))
        if not table:
            return None

        high_perf = normalize_profile(cost_profile) == HIGH_PERFORMANCE
        if any(k.endswith(("_COST", "_PERF")) for k in table):
            engine = str((hints or {}).get("engine") or "").lower()
            engine_key = "MYSQL" if "mysql" in engine else "POSTGRES"
            key = f"{engine_key}_{'PERF' if high_perf else 'COST'}"
        else:
            key = "HIGH_PERFORMANCE" if high_perf else "COST_EFFECTIVE"

        return table.get(key) or table.get("DEFAULT") or next(iter(table.values()))

    def display_name(self, product_id: str | None) -> str:
        if not product_id:
            return ""
        return self._display_names.get(product_id, product_id)

    def resource_type(self, provider: str, service_id: str) -> str | None:
        svc = self.get(service_id)
        if svc is None:
            return None
        return svc.resource_type(normalize_provider(provider))

    def service_for_resource(self, provider: str, resource_type: str) -> str | None:
        """Reverse lookup: provider resource type -> canonical service id."""
        return self._by_resource.get((normalize_provider(provider), resource_type))


_catalog: ServiceCatalog | None = None


def get_catalog() -> ServiceCatalog:
    """Return the shared catalog singleton, loading from disk if needed."""
    global _catalog
    if _catalog is None:
        _catalog = ServiceCatalog()
    return _catalog


def resolve_product(
    provider: str,
    service_id: str,
    cost_profile: str | None = None,
    hints: dict[str, str] | None = None,
) -> str | None:
    return get_catalog().resolve_product(provider, service_id, cost_profile, hints)


def display_name(product_id: str | None) -> str:
    return get_catalog().display_name(product_id)
