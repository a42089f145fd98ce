"""Tests for usage normalization and the oracle usage file."""

from __future__ import annotations

import yaml
from pricewright.models import UsageProfile, UsageVariant, default_variant
from pricewright.usage import normalize_usage, resource_address, to_usage_yaml


class TestUsageProfile:
    def test_missing_variants_get_defaults(self):
        profile = UsageProfile()
        assert profile.low.monthly_users == 1000
        assert profile.expected.monthly_requests == 150_000
        assert profile.high.storage_gb == 100

    def test_partial_variant_layers_over_defaults(self):
        profile = UsageProfile(expected={"monthly_users": 800})
        assert profile.expected.monthly_users == 800
        assert profile.expected.requests_per_user == 30

    def test_none_is_defaults(self):
        assert UsageProfile.model_validate(None) == UsageProfile()

    def test_variants_do_not_share_state(self):
        profile = UsageProfile()
        assert profile.low is not profile.expected
        assert default_variant("low") is not default_variant("low")

    def test_from_yaml_accepts_wrapper_key(self):
        profile = UsageProfile.from_yaml("usage:\n  high:\n    monthly_users: 50000\n")
        assert profile.high.monthly_users == 50000


class TestNormalizeUsage:
    def test_requests_derived_from_users(self):
        variant = UsageVariant(monthly_users=1000, requests_per_user=20)
        usage = normalize_usage(variant, ["computeserverless"], "aws")
        assert usage == {"aws_lambda_function.computeserverless": {"monthly_requests": 20000, "request_duration_ms": 250}}

    def test_only_priced_services_get_usage(self):
        usage = normalize_usage(default_variant("expected"), ["objectstorage"], "aws")
        assert list(usage) == ["aws_s3_bucket.objectstorage"]

    def test_provider_vocabulary_differs(self):
        variant = default_variant("expected")
        aws = normalize_usage(variant, ["computeserverless"], "aws")
        gcp = normalize_usage(variant, ["computeserverless"], "gcp")
        assert "monthly_requests" in aws["aws_lambda_function.computeserverless"]
        assert "monthly_function_invocations" in gcp["google_cloudfunctions_function.computeserverless"]

    def test_services_without_usage_are_skipped(self):
        usage = normalize_usage(default_variant("expected"), ["computevm", "quantumledger"], "aws")
        assert usage == {}

    def test_deterministic(self):
        services = ["cdn", "objectstorage", "relationaldatabase", "messagequeue"]
        variant = default_variant("high")
        assert to_usage_yaml(normalize_usage(variant, services, "azure")) == to_usage_yaml(
            normalize_usage(variant, list(services), "azure")
        )

    def test_resource_address(self):
        assert resource_address("gcp", "relational_database") == "google_sql_database_instance.relationaldatabase"
        assert resource_address("aws", "paymentgateway") is None


class TestUsageFile:
    def test_schema_version(self):
        text = to_usage_yaml(normalize_usage(default_variant("low"), ["cdn"], "aws"))
        data = yaml.safe_load(text)
        assert data["version"] == 0.1
        assert "aws_cloudfront_distribution.cdn" in data["usage"]

    def test_empty_usage(self):
        assert yaml.safe_load(to_usage_yaml({})) == {"version": 0.1, "usage": {}}
