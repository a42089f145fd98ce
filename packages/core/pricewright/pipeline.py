"""Pricing execution for one (run, provider, scenario) cell.

Each cell is a small state machine:

    ATTEMPT_ORACLE -> SUCCESS_COMPLETE
    ATTEMPT_ORACLE -> SUCCESS_INCOMPLETE -> FALLBACK
    ATTEMPT_ORACLE -> PROCESS_ERROR -> FALLBACK

The oracle is never retried. A provider-namespace leak in oracle output is
the one condition that escapes as an exception.
"""

from __future__ import annotations

import logging
import re
import shutil
from collections import defaultdict
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pricewright.catalog import PROVIDER_PREFIXES, ServiceCatalog, get_catalog
from pricewright.errors import OracleError, ProviderLeakError
from pricewright.fallback import completeness_gate, heuristic_estimate
from pricewright.models import COMPLETE, EXACT, UNMAPPED_BUCKET, ProviderEstimate, ServiceCost, UsageVariant
from pricewright.oracle import OracleReport, PricingOracle
from pricewright.resolver import PricingClassification
from pricewright.scenarios import estimate_confidence
from pricewright.sizing import MEDIUM, sizing_label
from pricewright.terraform import render
from pricewright.usage import normalize_usage, to_usage_yaml

log = logging.getLogger(__name__)

ATTEMPT_ORACLE = "ATTEMPT_ORACLE"
SUCCESS_COMPLETE = "SUCCESS_COMPLETE"
SUCCESS_INCOMPLETE = "SUCCESS_INCOMPLETE"
PROCESS_ERROR = "PROCESS_ERROR"
FALLBACK_STATE = "FALLBACK"

ARTIFACT_FILE = "main.tf"
USAGE_FILE = "infracost-usage.yml"

_INDEX_SUFFIX = re.compile(r"\[[^\]]*\]$")


@dataclass
class PricingRun:
    """A disposable unit of work with its own working directory.

    The directory is keyed by run id, provider and scenario, so two runs never
    share one.
    """

    run_id: str
    provider: str
    scenario: str
    base_dir: Path

    @property
    def work_dir(self) -> Path:
        return Path(self.base_dir) / self.run_id / self.provider / self.scenario

    def prepare(self) -> Path:
        """Clean and recreate the working directory."""
        if self.work_dir.exists():
            shutil.rmtree(self.work_dir)
        self.work_dir.mkdir(parents=True)
        return self.work_dir

    def write(self, files: dict[str, str]) -> dict[str, Path]:
        paths = {}
        for name, content in files.items():
            path = self.work_dir / name
            path.write_text(content)
            paths[name] = path
        return paths

    def cleanup(self) -> None:
        shutil.rmtree(self.work_dir, ignore_errors=True)


@dataclass
class PricingRequest:
    """Everything one pricing run needs, computed up front by the estimator."""

    provider: str
    scenario: str
    pricing: PricingClassification
    variant: UsageVariant
    sizing: dict[str, dict[str, Any]] = field(default_factory=dict)
    cost_profile: str = "cost_effective"
    scale_tier: str = MEDIUM
    engines: dict[str, str] = field(default_factory=dict)
    region: str | None = None

    @property
    def billable(self) -> list[str]:
        return self.pricing.billable


@dataclass
class RunOutcome:
    estimate: ProviderEstimate
    state: str
    transitions: list[str] = field(default_factory=list)
    error_kind: str | None = None
    reason: str = ""

    @property
    def used_fallback(self) -> bool:
        return self.state == FALLBACK_STATE


def check_namespace(report: OracleReport, provider: str) -> None:
    """Raise ProviderLeakError if the report holds another provider's resources."""
    foreign_prefixes = tuple(prefix for p, prefix in PROVIDER_PREFIXES.items() if p != provider)
    leaked = sorted({r.resource_type for r in report.resources if r.resource_type.startswith(foreign_prefixes)})
    if leaked:
        raise ProviderLeakError(
            f"Oracle output for {provider} contains foreign resources: {', '.join(leaked)}",
            provider=provider,
            resource_types=leaked,
        )


def normalize_report(
    report: OracleReport,
    provider: str,
    cost_profile: str = "cost_effective",
    engines: dict[str, str] | None = None,
    catalog: ServiceCatalog | None = None,
) -> tuple[list[ServiceCost], list[str]]:
    """Map priced resources back to canonical services.

    Returns the per-service breakdown and the addresses of resources that
    mapped to no known service. Their cost is collected in one "unknown" line.
    """
    catalog = catalog or get_catalog()
    engines = engines or {}
    costs: dict[str, float] = defaultdict(float)
    counts: dict[str, int] = defaultdict(int)
    unmapped: list[str] = []
    unmapped_cost = 0.0

    for resource in report.resources:
        service_id = catalog.service_for_resource(provider, resource.resource_type)
        if service_id is None:
            # Artifact resources are named after their service
            name = _INDEX_SUFFIX.sub("", resource.name)
            service_id = name if name in catalog else None
        if service_id is None:
            unmapped.append(resource.address)
            unmapped_cost += resource.monthly_cost
            continue
        costs[service_id] += resource.monthly_cost
        counts[service_id] += 1

    breakdown = []
    for service_id, cost in costs.items():
        hints = {"engine": engines[service_id]} if service_id in engines else None
        product = catalog.resolve_product(provider, service_id, cost_profile, hints)
        svc = catalog.get(service_id)
        breakdown.append(
            ServiceCost(
                service_class=service_id,
                display_name=catalog.display_name(product) or (svc.name if svc else service_id),
                product_id=product,
                category=catalog.category_of(service_id),
                monthly_cost=round(cost, 2),
                resource_count=counts[service_id],
                sizing=sizing_label(cost_profile),
            )
        )
    if unmapped:
        # Breakdown lines must sum to the oracle total
        breakdown.append(
            ServiceCost(
                service_class=UNMAPPED_BUCKET,
                display_name="Unmapped resources",
                monthly_cost=round(unmapped_cost, 2),
                resource_count=len(unmapped),
                notes=", ".join(unmapped),
            )
        )
    return breakdown, unmapped


def _artifacts(request: PricingRequest, catalog: ServiceCatalog) -> dict[str, str]:
    hcl = render(
        request.provider,
        request.billable,
        sizing=request.sizing,
        cost_profile=request.cost_profile,
        engines=request.engines,
        region=request.region,
        catalog=catalog,
    )
    usage = normalize_usage(request.variant, request.billable, request.provider, catalog)
    return {ARTIFACT_FILE: hcl, USAGE_FILE: to_usage_yaml(usage)}


def _fallback(request: PricingRequest, transitions: list[str], reason: str, warnings: list[str], catalog: ServiceCatalog, error_kind: str | None = None) -> RunOutcome:
    transitions.append(FALLBACK_STATE)
    estimate = heuristic_estimate(
        request.provider,
        request.scenario,
        request.pricing,
        scale_tier=request.scale_tier,
        cost_profile=request.cost_profile,
        variant=request.variant,
        reason=reason,
        warnings=warnings,
        catalog=catalog,
    )
    return RunOutcome(estimate=estimate, state=FALLBACK_STATE, transitions=transitions, error_kind=error_kind, reason=reason)


def execute(
    request: PricingRequest,
    oracle: PricingOracle | None,
    run: PricingRun,
    catalog: ServiceCatalog | None = None,
    keep_artifacts: bool = False,
) -> RunOutcome:
    """Price one (provider, scenario) cell, falling back to heuristics when needed."""
    catalog = catalog or get_catalog()
    provider, scenario = request.provider, request.scenario

    if not request.billable:
        if request.pricing.unknown:
            warning = f"Unclassified services priced heuristically: {', '.join(request.pricing.unknown)}"
            return _fallback(request, [], "no oracle-priceable services", [warning], catalog)
        estimate = ProviderEstimate(
            provider=provider,
            scenario=scenario,
            total_monthly_cost=0.0,
            estimate_type=EXACT,
            pricing_status=COMPLETE,
            estimate_source="none",
            confidence=1.0,
            reason="no billable services",
        )
        return RunOutcome(estimate=estimate, state=SUCCESS_COMPLETE, transitions=[SUCCESS_COMPLETE], reason="no billable services")

    transitions = [ATTEMPT_ORACLE]
    if oracle is None:
        transitions.append(PROCESS_ERROR)
        return _fallback(request, transitions, "pricing oracle disabled", [], catalog, error_kind="unavailable")

    run.prepare()
    try:
        paths = run.write(_artifacts(request, catalog))
        log.info("Pricing %s/%s in %s (%d services)", provider, scenario, run.work_dir, len(request.billable))
        try:
            report = oracle.run(run.work_dir, paths[USAGE_FILE])
        except OracleError as e:
            transitions.append(PROCESS_ERROR)
            warnings = []
            if e.kind == "quota":
                warnings.append(f"Pricing oracle quota or authorization error on {provider}; using heuristic estimate")
            log.warning("Oracle failed for %s/%s (%s): %s", provider, scenario, e.kind, e)
            return _fallback(request, transitions, f"oracle {e.kind} error: {e}", warnings, catalog, error_kind=e.kind)
    finally:
        if not keep_artifacts:
            run.cleanup()

    if report is None:
        transitions.append(PROCESS_ERROR)
        return _fallback(request, transitions, "oracle produced no report", [], catalog, error_kind="process")

    check_namespace(report, provider)

    incomplete = completeness_gate(report, request.pricing)
    if incomplete:
        transitions.append(SUCCESS_INCOMPLETE)
        log.warning("Discarding %s/%s oracle result: %s", provider, scenario, incomplete)
        return _fallback(request, transitions, incomplete, [], catalog)

    breakdown, unmapped = normalize_report(report, provider, request.cost_profile, request.engines, catalog)
    warnings = []
    if unmapped:
        warnings.append(f"{len(unmapped)} priced resource(s) did not map to a known service")
    if request.pricing.unknown:
        warnings.append(f"Unclassified services not priced: {', '.join(request.pricing.unknown)}")

    transitions.append(SUCCESS_COMPLETE)
    estimate = ProviderEstimate(
        provider=provider,
        scenario=scenario,
        total_monthly_cost=round(report.total_monthly_cost, 2),
        breakdown=breakdown,
        estimate_type=EXACT,
        pricing_status=COMPLETE,
        estimate_source="oracle",
        confidence=estimate_confidence(len(report.resources), report.total_monthly_cost, len(request.billable), len(unmapped)),
        resource_count=len(report.resources),
        unmapped_resources=unmapped,
        warnings=warnings,
    )
    return RunOutcome(estimate=estimate, state=SUCCESS_COMPLETE, transitions=transitions)
