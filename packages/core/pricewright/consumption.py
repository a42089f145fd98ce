"""Closed-form consumption pricing: archive storage, AI tokens, operational analysis."""

from __future__ import annotations

from pricewright.models import COMPLETE, HEURISTIC, ProviderEstimate, UsageVariant

# Per GB-month storage rates by tier
STORAGE_RATES: dict[str, dict[str, float]] = {
    "aws": {"standard": 0.023, "cold": 0.004, "archive": 0.0009},
    "gcp": {"standard": 0.020, "cold": 0.01, "archive": 0.0012},
    "azure": {"standard": 0.018, "cold": 0.01, "archive": 0.00099},
}

# Per 1K tokens
AI_TOKEN_RATES: dict[str, dict[str, float]] = {
    "aws": {"input": 0.0008, "output": 0.0024},
    "gcp": {"input": 0.0025, "output": 0.0075},
    "azure": {"input": 0.0015, "output": 0.002},
}
INPUT_TOKEN_SHARE = 0.7

STORAGE_POLICY_CONFIDENCE = 0.85
AI_CONSUMPTION_CONFIDENCE = 0.75
OPERATIONAL_CONFIDENCE = 0.95


def storage_tier_costs(provider: str, storage_gb: float) -> dict[str, float]:
    rates = STORAGE_RATES[provider]
    return {tier: round(storage_gb * rate, 2) for tier, rate in rates.items()}


def storage_policy_cost(provider: str, storage_gb: float) -> float:
    """Monthly cost of a retention policy, billed at the standard tier."""
    return storage_tier_costs(provider, storage_gb)["standard"]


def ai_token_cost(provider: str, monthly_tokens: int) -> float:
    rates = AI_TOKEN_RATES[provider]
    thousands = monthly_tokens / 1000
    input_cost = thousands * INPUT_TOKEN_SHARE * rates["input"]
    output_cost = thousands * (1 - INPUT_TOKEN_SHARE) * rates["output"]
    return round(input_cost + output_cost, 2)


def storage_policy_estimate(provider: str, scenario: str, variant: UsageVariant) -> ProviderEstimate:
    tiers = storage_tier_costs(provider, variant.archive_storage_gb)
    cost = tiers["standard"]
    return ProviderEstimate(
        provider=provider,
        scenario=scenario,
        total_monthly_cost=cost,
        consumption={"storage_policy": cost},
        estimate_type=HEURISTIC,
        pricing_status=COMPLETE,
        estimate_source="formula",
        confidence=STORAGE_POLICY_CONFIDENCE,
        reason=(
            f"{variant.archive_storage_gb:g} GB retention: standard ${tiers['standard']:.2f}, "
            f"cold ${tiers['cold']:.2f}, archive ${tiers['archive']:.2f}"
        ),
    )


def ai_consumption_estimate(provider: str, scenario: str, variant: UsageVariant) -> ProviderEstimate:
    cost = ai_token_cost(provider, variant.monthly_tokens)
    return ProviderEstimate(
        provider=provider,
        scenario=scenario,
        total_monthly_cost=cost,
        consumption={"ai_tokens": cost},
        estimate_type=HEURISTIC,
        pricing_status=COMPLETE,
        estimate_source="formula",
        confidence=AI_CONSUMPTION_CONFIDENCE,
        reason=f"{variant.monthly_tokens:,} tokens/month at {provider} model rates",
    )


def operational_estimate(provider: str, scenario: str) -> ProviderEstimate:
    """Incident/impact analysis adds no infrastructure, so it costs nothing."""
    return ProviderEstimate(
        provider=provider,
        scenario=scenario,
        total_monthly_cost=0.0,
        estimate_type=HEURISTIC,
        pricing_status=COMPLETE,
        estimate_source="formula",
        confidence=OPERATIONAL_CONFIDENCE,
        reason="operational analysis: no new infrastructure cost",
    )


def with_consumption(estimate: ProviderEstimate, consumption: dict[str, float], confidence: float | None = None) -> ProviderEstimate:
    """Copy of `estimate` with extra consumption lines folded into the total."""
    merged = dict(estimate.consumption)
    for key, value in consumption.items():
        merged[key] = round(merged.get(key, 0.0) + value, 2)
    update: dict = {
        "consumption": merged,
        "total_monthly_cost": round(estimate.total_monthly_cost + sum(consumption.values()), 2),
    }
    if confidence is not None:
        update["confidence"] = confidence
    return estimate.model_copy(update=update)
