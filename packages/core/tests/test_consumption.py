"""Tests for closed-form consumption pricing."""

from __future__ import annotations

import pytest
from pricewright.consumption import (
    ai_consumption_estimate,
    ai_token_cost,
    operational_estimate,
    storage_policy_cost,
    storage_policy_estimate,
    storage_tier_costs,
    with_consumption,
)
from pricewright.models import COMPLETE, HEURISTIC, ProviderEstimate, UsageVariant
from pydantic import ValidationError


class TestStoragePolicy:
    def test_tiers(self):
        tiers = storage_tier_costs("aws", 1000)
        assert tiers == {"standard": 23.0, "cold": 4.0, "archive": 0.9}

    def test_policy_billed_at_standard(self):
        assert storage_policy_cost("gcp", 500) == 10.0

    def test_estimate(self):
        est = storage_policy_estimate("azure", "expected", UsageVariant(archive_storage_gb=1000))
        assert est.total_monthly_cost == 18.0
        assert est.consumption == {"storage_policy": 18.0}
        assert est.breakdown == ()
        assert est.estimate_type == HEURISTIC
        assert est.pricing_status == COMPLETE
        assert est.confidence == 0.85
        assert "1000 GB retention" in est.reason


class TestAiConsumption:
    def test_token_split(self):
        # 1000K tokens: 700K input at 0.0008, 300K output at 0.0024
        assert ai_token_cost("aws", 1_000_000) == pytest.approx(0.56 + 0.72)

    def test_zero_tokens(self):
        assert ai_token_cost("gcp", 0) == 0.0

    def test_estimate(self):
        est = ai_consumption_estimate("gcp", "high", UsageVariant(monthly_tokens=4_000_000))
        assert est.total_monthly_cost == pytest.approx(4000 * 0.7 * 0.0025 + 4000 * 0.3 * 0.0075)
        assert set(est.consumption) == {"ai_tokens"}
        assert est.estimate_source == "formula"
        assert est.confidence == 0.75


class TestOperational:
    def test_zero_cost(self):
        est = operational_estimate("aws", "low")
        assert est.total_monthly_cost == 0.0
        assert est.pricing_status == COMPLETE
        assert est.confidence == 0.95


class TestWithConsumption:
    def test_folds_into_total(self):
        base = ProviderEstimate(provider="aws", total_monthly_cost=100.0, consumption={"ai_tokens": 1.0})
        merged = with_consumption(base, {"ai_tokens": 2.5, "storage_policy": 4.0}, confidence=0.7)
        assert merged.total_monthly_cost == 106.5
        assert merged.consumption == {"ai_tokens": 3.5, "storage_policy": 4.0}
        assert merged.confidence == 0.7
        assert base.total_monthly_cost == 100.0

    def test_keeps_confidence_by_default(self):
        base = ProviderEstimate(provider="gcp", total_monthly_cost=10.0, confidence=0.8)
        assert with_consumption(base, {"storage_policy": 1.0}).confidence == 0.8

    def test_base_consumption_untouched(self):
        base = ProviderEstimate(provider="aws", total_monthly_cost=10.0, consumption={"ai_tokens": 1.0})
        with_consumption(base, {"ai_tokens": 2.0})
        assert base.consumption == {"ai_tokens": 1.0}


class TestEstimateImmutability:
    def test_sequence_fields_are_tuples(self):
        est = ProviderEstimate(provider="aws", breakdown=[], unmapped_resources=["a.b"], warnings=["w"])
        assert isinstance(est.breakdown, tuple)
        assert est.unmapped_resources == ("a.b",)
        with pytest.raises(AttributeError):
            est.warnings.append("late")  # type: ignore[attr-defined]

    def test_fields_cannot_be_reassigned(self):
        est = ProviderEstimate(provider="aws")
        with pytest.raises(ValidationError):
            est.breakdown = ()  # type: ignore[misc]
