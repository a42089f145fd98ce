"""Tests for the completeness gate, heuristic estimates and the static formula."""

from __future__ import annotations

import pytest
from pricewright.errors import PricingIntegrityError, StaticComputeError
from pricewright.fallback import (
    STATIC_PLATFORM_FEE,
    completeness_gate,
    heuristic_estimate,
    heuristic_service_cost,
    static_estimate,
)
from pricewright.models import COMPLETE, FALLBACK, HEURISTIC, UsageVariant, default_variant
from pricewright.oracle import OracleReport, OracleResource
from pricewright.resolver import DIRECT, EXTERNAL, FREE_TIER, USAGE_BASED, classify_pricing


class TestCompletenessGate:
    def test_zero_total_with_direct_service(self):
        pricing = classify_pricing(["computevm"])
        assert "direct" in completeness_gate(OracleReport(), pricing)

    def test_zero_total_usage_only_is_fine(self):
        pricing = classify_pricing(["objectstorage"])
        assert completeness_gate(OracleReport(), pricing) is None

    def test_unsupported_resources(self):
        pricing = classify_pricing(["computevm"])
        report = OracleReport(
            resources=[OracleResource("aws_instance.computevm", "aws_instance", 30.0)],
            total_monthly_cost=30.0,
            unsupported={"aws_instance": 0, "aws_route53_zone": 2},
        )
        assert completeness_gate(report, pricing) == "oracle flagged unsupported resources: aws_route53_zone"

    def test_priced_report_passes(self):
        pricing = classify_pricing(["computevm"])
        report = OracleReport(total_monthly_cost=30.0)
        assert completeness_gate(report, pricing) is None


class TestHeuristicCost:
    def test_scale_tier_multipliers(self):
        small = heuristic_service_cost("computevm", "aws", DIRECT, "SMALL")
        medium = heuristic_service_cost("computevm", "aws", DIRECT, "MEDIUM")
        large = heuristic_service_cost("computevm", "aws", DIRECT, "LARGE")
        assert small == medium * 0.5
        assert large == medium * 2.5

    def test_high_performance_premium(self):
        base = heuristic_service_cost("computevm", "aws", DIRECT)
        premium = heuristic_service_cost("computevm", "aws", DIRECT, cost_profile="high_performance")
        assert premium == pytest.approx(base * 1.4)

    def test_provider_adjustment(self):
        aws = heuristic_service_cost("computevm", "aws", DIRECT)
        gcp = heuristic_service_cost("computevm", "gcp", DIRECT)
        assert gcp == pytest.approx(aws * 0.92)

    def test_usage_based_scales_with_requests(self):
        quiet = UsageVariant(monthly_users=10, requests_per_user=1)
        busy = UsageVariant(monthly_users=100_000, requests_per_user=100)
        low = heuristic_service_cost("computeserverless", "aws", USAGE_BASED, variant=quiet)
        high = heuristic_service_cost("computeserverless", "aws", USAGE_BASED, variant=busy)
        assert high == pytest.approx(low * 16)

    def test_non_billable_classes_cost_nothing(self):
        assert heuristic_service_cost("paymentgateway", "aws", EXTERNAL) == 0.0
        assert heuristic_service_cost("vpcnetworking", "aws", FREE_TIER) == 0.0


class TestHeuristicEstimate:
    def test_labelled_fallback(self):
        pricing = classify_pricing(["computeserverless", "relationaldatabase", "vpcnetworking", "paymentgateway"])
        est = heuristic_estimate("azure", "expected", pricing, variant=default_variant("expected"), reason="oracle timeout")
        assert est.estimate_type == HEURISTIC
        assert est.pricing_status == FALLBACK
        assert est.confidence == 0.6
        assert est.reason == "oracle timeout"
        assert [s.service_class for s in est.breakdown] == ["computeserverless", "relationaldatabase"]
        assert est.total_monthly_cost == pytest.approx(sum(s.monthly_cost for s in est.breakdown), abs=0.01)

    def test_unknown_services_get_default_cost(self):
        pricing = classify_pricing(["mystery"])
        est = heuristic_estimate("aws", "low", pricing)
        assert est.breakdown[0].monthly_cost == 20.0
        assert "unclassified" in est.breakdown[0].notes


class TestStaticEstimate:
    def test_formula(self):
        variant = UsageVariant(storage_gb=2, data_transfer_gb=10)
        est = static_estimate("aws", "expected", ["objectstorage", "cdn", "dns"], variant)
        expected_total = 2 * 0.023 + 10 * 0.085 + 10 * 0.01 + 0.5 + STATIC_PLATFORM_FEE
        assert est.total_monthly_cost == pytest.approx(round(expected_total, 2))
        assert [s.service_class for s in est.breakdown] == ["objectstorage", "cdn", "dns"]
        assert est.pricing_status == COMPLETE
        assert est.estimate_source == "formula"
        assert est.consumption == {"platform_fee": STATIC_PLATFORM_FEE}

    def test_only_present_services_are_priced(self):
        est = static_estimate("gcp", "low", ["objectstorage"], UsageVariant(storage_gb=100))
        assert [s.service_class for s in est.breakdown] == ["objectstorage"]
        assert est.total_monthly_cost == pytest.approx(100 * 0.020 + STATIC_PLATFORM_FEE)

    def test_compute_triggers_kill_switch(self):
        with pytest.raises(StaticComputeError) as exc:
            static_estimate("aws", "expected", ["objectstorage", "computeserverless"], UsageVariant())
        assert exc.value.service_class == "computeserverless"
        assert isinstance(exc.value, PricingIntegrityError)
