"""Tests for scale tiers and sizing lookups."""

from __future__ import annotations

import pytest
from pricewright.sizing import LARGE, MEDIUM, SMALL, scale_tier_for, size_for, sizing_for, sizing_label


class TestScaleTier:
    @pytest.mark.parametrize(
        "declared,tier",
        [
            ("poc", SMALL),
            ("Proof of concept", SMALL),
            ("startup", SMALL),
            ("smb", MEDIUM),
            ("medium", MEDIUM),
            ("enterprise", LARGE),
            ("large", LARGE),
            ("global scale", LARGE),
            ("LARGE", LARGE),
            ("", MEDIUM),
            (None, MEDIUM),
            ("unspecified", MEDIUM),
        ],
    )
    def test_declared_scale(self, declared, tier):
        assert scale_tier_for(declared) == tier


class TestSizeFor:
    def test_lookup(self):
        assert size_for("relationaldatabase", SMALL, "cost_effective")["instance_class"] == "db.t3.micro"
        assert size_for("relationaldatabase", SMALL, "high_performance")["instance_class"] == "db.r6i.large"

    def test_alias_accepted(self):
        assert size_for("relational_database", MEDIUM) == size_for("relationaldatabase", MEDIUM)

    def test_unknown_tier_falls_back_to_medium(self):
        assert size_for("computevm", "HUGE") == size_for("computevm", MEDIUM)

    def test_unknown_service_is_empty(self):
        assert size_for("quantumledger", LARGE) == {}

    def test_returns_fresh_copy(self):
        first = size_for("computecontainer", MEDIUM)
        first["instances"] = 999
        assert size_for("computecontainer", MEDIUM)["instances"] != 999

    def test_sizing_for_many(self):
        sizing = sizing_for(["computevm", "cache"], LARGE, "high_performance")
        assert set(sizing) == {"computevm", "cache"}
        assert sizing["computevm"]["instance_type"] == "c7i.2xlarge"

    def test_label(self):
        assert sizing_label("high_performance") == "Performance"
        assert sizing_label("cost_effective") == "Standard"
