"""CostEstimator: the full cost-resolution pipeline behind one call."""

from __future__ import annotations

import logging
import uuid
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

from pricewright.catalog import ServiceCatalog, get_catalog, normalize_provider
from pricewright.classifier import AI_CONSUMPTION, HYBRID, STATIC_BYPASS, STORAGE_POLICY, Classification, classify
from pricewright.config import PricewrightSettings
from pricewright.consumption import (
    ai_consumption_estimate,
    ai_token_cost,
    operational_estimate,
    storage_policy_cost,
    storage_policy_estimate,
    with_consumption,
)
from pricewright.errors import PricingIntegrityError, ProviderLeakError
from pricewright.fallback import static_estimate
from pricewright.firewall import validate_pricing_integrity
from pricewright.models import (
    EXACT,
    FALLBACK,
    HEURISTIC,
    PROVIDERS,
    SCENARIOS,
    ArchitectureSpec,
    CostRange,
    CostReport,
    ProviderEstimate,
    Recommendation,
    UsageProfile,
)
from pricewright.oracle import InfracostOracle, PricingOracle
from pricewright.pipeline import PricingRequest, PricingRun, execute
from pricewright.resolver import PricingClassification, classify_pricing, resolve_deployable
from pricewright.scenarios import (
    ScenarioMatrix,
    category_breakdown,
    cost_drivers,
    cost_range,
    cost_sensitivity,
    format_range,
    missing_components,
    overall_confidence,
    provider_cost_range,
    rank_providers,
    resolve_priority,
)
from pricewright.sizing import scale_tier_for, sizing_for

log = logging.getLogger(__name__)

HYBRID_CONFIDENCE_CAP = 0.9
HYBRID_CONFIDENCE_FACTOR = 0.8

PLACEHOLDER_COSTS = {
    "low": {"aws": 80.0, "gcp": 85.0, "azure": 82.0},
    "expected": {"aws": 100.0, "gcp": 110.0, "azure": 105.0},
    "high": {"aws": 150.0, "gcp": 160.0, "azure": 155.0},
}
PLACEHOLDER_CONFIDENCE = 0.5


@dataclass
class _Context:
    """Per-request state shared read-only by every pricing cell."""

    run_id: str
    spec: ArchitectureSpec
    usage: UsageProfile
    classification: Classification
    deployable: list[str]
    pricing: PricingClassification
    scale_tier: str
    oracle: PricingOracle | None


class CostEstimator:
    """Estimates monthly cost across providers and recommends one.

    Pass `oracle=None, use_oracle=False` to force heuristic pricing.
    """

    def __init__(
        self,
        oracle: PricingOracle | None = None,
        settings: PricewrightSettings | None = None,
        catalog: ServiceCatalog | None = None,
        use_oracle: bool = True,
    ):
        self.settings = settings or PricewrightSettings.from_env()
        self.catalog = catalog or get_catalog()
        if oracle is None and use_oracle:
            oracle = InfracostOracle(
                binary=self.settings.oracle_bin,
                timeout=self.settings.oracle_timeout,
                api_key=self.settings.api_key,
            )
        self.oracle = oracle

    def estimate(
        self,
        spec: ArchitectureSpec,
        usage: UsageProfile | None = None,
        run_id: str | None = None,
        providers: list[str] | None = None,
    ) -> CostReport:
        """Run the pipeline for every (scenario, provider) cell.

        Integrity violations and provider leaks propagate. Any other failure
        yields a labeled low-confidence placeholder report.
        """
        run_id = run_id or uuid.uuid4().hex[:12]
        try:
            return self._estimate(spec, usage or UsageProfile(), run_id, providers)
        except (PricingIntegrityError, ProviderLeakError):
            raise
        except Exception as e:
            log.exception("Cost estimation failed for run %s, returning placeholder", run_id)
            return placeholder_report(run_id, reason=str(e) or type(e).__name__, cost_profile=spec.cost_profile)

    def _estimate(self, spec: ArchitectureSpec, usage: UsageProfile, run_id: str, providers: list[str] | None) -> CostReport:
        classification = classify(spec)
        deployable = resolve_deployable(spec, self.catalog)
        pricing = classify_pricing(deployable, self.catalog)
        warnings: list[str] = []
        requested = [normalize_provider(p) for p in providers or ()]
        selected = [p for p in PROVIDERS if p in requested]
        for p in sorted(set(requested) - set(PROVIDERS)):
            warnings.append(f"Unsupported provider '{p}' ignored")
        if not selected:
            selected = list(PROVIDERS)

        oracle = self.oracle
        if oracle is not None and not oracle.is_available():
            log.warning("Pricing oracle %s is not available, using heuristic estimates", oracle.name)
            warnings.append(f"Pricing oracle '{oracle.name}' not available; costs are heuristic estimates")
            oracle = None

        ctx = _Context(
            run_id=run_id,
            spec=spec,
            usage=usage,
            classification=classification,
            deployable=deployable,
            pricing=pricing,
            scale_tier=scale_tier_for(spec.scale),
            oracle=oracle,
        )
        log.info(
            "Run %s: mode=%s (%s), %d deployable, %d billable, tier=%s",
            run_id,
            classification.mode,
            classification.rule,
            len(deployable),
            len(pricing.billable),
            ctx.scale_tier,
        )

        cells = [(s, p) for s in SCENARIOS for p in selected]
        if self.settings.parallel and len(cells) > 1:
            with ThreadPoolExecutor(max_workers=self.settings.max_workers) as pool:
                results = list(pool.map(lambda cell: self._price_cell(ctx, *cell), cells))
        else:
            results = [self._price_cell(ctx, s, p) for s, p in cells]

        matrix = ScenarioMatrix()
        for (scenario, provider), estimate in zip(cells, results):
            matrix.set(scenario, provider, estimate)
        for scenario in SCENARIOS:
            for provider in PROVIDERS:
                if provider not in selected:
                    matrix.mark_unavailable(scenario, provider)

        validate_pricing_integrity(matrix.estimates(), deployable)
        return self._assemble(ctx, matrix, warnings)

    def _price_cell(self, ctx: _Context, scenario: str, provider: str) -> ProviderEstimate:
        mode = ctx.classification.mode
        variant = ctx.usage.variant(scenario)

        if mode == STATIC_BYPASS:
            return static_estimate(provider, scenario, ctx.deployable, variant, self.catalog)
        if mode == AI_CONSUMPTION:
            return ai_consumption_estimate(provider, scenario, variant)
        if mode == STORAGE_POLICY:
            return storage_policy_estimate(provider, scenario, variant)
        if mode == HYBRID and ctx.classification.operational:
            return operational_estimate(provider, scenario)

        request = PricingRequest(
            provider=provider,
            scenario=scenario,
            pricing=ctx.pricing,
            variant=variant,
            sizing=sizing_for(ctx.pricing.billable, ctx.scale_tier, ctx.spec.cost_profile),
            cost_profile=ctx.spec.cost_profile,
            scale_tier=ctx.scale_tier,
            engines=ctx.spec.engine_hints(),
            region=ctx.spec.region,
        )
        run = PricingRun(ctx.run_id, provider, scenario, self.settings.work_dir)
        outcome = execute(request, ctx.oracle, run, self.catalog, keep_artifacts=self.settings.keep_artifacts)
        log.debug("%s/%s: %s", provider, scenario, " -> ".join(outcome.transitions))
        estimate = outcome.estimate

        if mode == HYBRID:
            extras: dict[str, float] = {}
            if ctx.classification.wants_ai:
                extras["ai_tokens"] = ai_token_cost(provider, variant.monthly_tokens)
            if ctx.classification.wants_storage_policy:
                extras["storage_policy"] = storage_policy_cost(provider, variant.archive_storage_gb)
            confidence = min(HYBRID_CONFIDENCE_CAP, estimate.confidence * HYBRID_CONFIDENCE_FACTOR)
            estimate = with_consumption(estimate, extras, confidence=round(confidence, 3))
        return estimate

    def _assemble(self, ctx: _Context, matrix: ScenarioMatrix, warnings: list[str]) -> CostReport:
        spec = ctx.spec
        expected = {e.provider: e for e in matrix.estimates("expected")}
        stateful = any((svc := self.catalog.get(s)) is not None and svc.stateful for s in ctx.pricing.billable)
        ranges = {
            p: provider_cost_range(e.total_monthly_cost, ctx.scale_tier, spec.cost_profile, stateful)
            for p, e in expected.items()
        }
        priority = resolve_priority(spec.priority, spec.cost_profile)
        rankings = rank_providers(
            {p: e.total_monthly_cost for p, e in expected.items()},
            priority,
            ctx.deployable,
            ranges,
            self.catalog,
        )

        overall_range = cost_range(matrix)
        confidence = overall_confidence(matrix.estimates())
        recommended = None
        best: ProviderEstimate | None = None
        if rankings:
            top = rankings[0]
            best = expected[top.provider]
            recommended = Recommendation(
                provider=top.provider,
                monthly_cost=top.monthly_cost,
                score=top.score,
                cost_range=overall_range,
                confidence=confidence,
            )

        estimates = matrix.estimates()
        for e in estimates:
            for w in e.warnings:
                if w not in warnings:
                    warnings.append(w)
        fallbacks = sorted({e.provider for e in estimates if e.pricing_status == FALLBACK})
        if fallbacks:
            warnings.append(f"Heuristic fallback pricing used for: {', '.join(fallbacks)}")
        for entry in spec.services:
            if entry.included and entry.id not in ctx.deployable:
                warnings.append(f"{entry.id} is billed outside the cloud provider and not included")

        return CostReport(
            run_id=ctx.run_id,
            pricing_mode=ctx.classification.mode,
            cost_profile=spec.cost_profile,
            scale_tier=ctx.scale_tier,
            deployable_services=ctx.deployable,
            scenarios=matrix.to_dict(),
            cost_range=overall_range,
            recommended=recommended,
            rankings=rankings,
            confidence=confidence,
            confidence_percentage=round(confidence * 100),
            drivers=cost_drivers(best),
            per_service_breakdown=list(best.breakdown) if best else [],
            category_breakdown=category_breakdown(best),
            missing_components=missing_components(s.id for s in spec.services if s.included),
            sensitivity=cost_sensitivity(spec.pattern, ctx.classification.operational),
            estimate_type=HEURISTIC if any(e.estimate_type == HEURISTIC for e in estimates) else EXACT,
            warnings=warnings,
        )


def placeholder_report(run_id: str, reason: str = "", cost_profile: str = "cost_effective") -> CostReport:
    """Well-formed, clearly labeled low-confidence report for catastrophic failures."""
    scenarios = {
        scenario: {
            provider: ProviderEstimate(
                provider=provider,
                scenario=scenario,
                total_monthly_cost=cost,
                estimate_type=HEURISTIC,
                pricing_status=FALLBACK,
                estimate_source="placeholder",
                confidence=PLACEHOLDER_CONFIDENCE,
                reason=f"placeholder estimate: {reason}" if reason else "placeholder estimate",
            )
            for provider, cost in costs.items()
        }
        for scenario, costs in PLACEHOLDER_COSTS.items()
    }
    rankings = rank_providers(PLACEHOLDER_COSTS["expected"], resolve_priority(None, cost_profile))
    lo = min(PLACEHOLDER_COSTS["low"].values())
    hi = max(PLACEHOLDER_COSTS["high"].values())
    overall_range = CostRange(min=lo, max=hi, formatted=format_range(lo, hi))
    top = rankings[0]
    return CostReport(
        run_id=run_id,
        cost_profile=cost_profile,
        scenarios=scenarios,
        cost_range=overall_range,
        recommended=Recommendation(
            provider=top.provider,
            monthly_cost=top.monthly_cost,
            score=top.score,
            cost_range=overall_range,
            confidence=PLACEHOLDER_CONFIDENCE,
        ),
        rankings=rankings,
        confidence=PLACEHOLDER_CONFIDENCE,
        confidence_percentage=round(PLACEHOLDER_CONFIDENCE * 100),
        estimate_type=HEURISTIC,
        warnings=[f"Cost estimation failed, showing placeholder figures: {reason}" if reason else "Cost estimation failed, showing placeholder figures"],
        is_placeholder=True,
    )
