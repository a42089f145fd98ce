"""Shared fixtures for core tests."""

from __future__ import annotations

from pathlib import Path

import pytest
from pricewright.config import PricewrightSettings
from pricewright.models import ArchitectureSpec, UsageProfile
from pricewright.oracle import OracleReport, OracleResource, PricingOracle
from pricewright.terraform import declared_resources


class FakeOracle(PricingOracle):
    """Prices whatever the artifact declares at a flat per-resource cost.

    Reads main.tf from the working directory, so a call only succeeds when the
    pipeline has written its artifacts first.
    """

    name = "fake"

    def __init__(
        self,
        cost: float = 10.0,
        prices: dict[str, float] | None = None,
        error: Exception | None = None,
        unsupported: dict[str, int] | None = None,
        extra: list[OracleResource] | None = None,
        available: bool = True,
    ):
        self.cost = cost
        self.prices = prices or {}
        self.error = error
        self.unsupported = unsupported or {}
        self.extra = extra or []
        self.available = available
        self.calls: list[tuple[Path, Path | None]] = []
        self.seen: list[dict[str, str]] = []

    def is_available(self) -> bool:
        return self.available

    def run(self, work_dir: Path, usage_file: Path | None = None) -> OracleReport | None:
        self.calls.append((work_dir, usage_file))
        files = {p.name: p.read_text() for p in Path(work_dir).iterdir()}
        self.seen.append(files)
        if self.error is not None:
            raise self.error
        resources = [
            OracleResource(
                address=f"{rtype}.{name}",
                resource_type=rtype,
                monthly_cost=self.prices.get(rtype, self.cost),
            )
            for rtype, name in declared_resources(files["main.tf"])
        ]
        resources += self.extra
        return OracleReport(
            resources=resources,
            total_monthly_cost=sum(r.monthly_cost for r in resources),
            unsupported=dict(self.unsupported),
        )


@pytest.fixture
def fake_oracle() -> FakeOracle:
    return FakeOracle()


@pytest.fixture
def settings(tmp_path: Path) -> PricewrightSettings:
    return PricewrightSettings(work_dir=tmp_path / "runs")


@pytest.fixture
def web_app_spec() -> ArchitectureSpec:
    """Containerized web app with a database, cache and an external payment provider."""
    return ArchitectureSpec(
        name="Web App",
        pattern="CONTAINERIZED_WEB_APP",
        intent="Customer portal for a mid-size retailer",
        scale="medium",
        services=[
            "computecontainer",
            {"id": "relational_database", "engine": "postgres"},
            "cache",
            "objectstorage",
            "loadbalancer",
            "payment_gateway",
            "vpcnetworking",
        ],
    )


@pytest.fixture
def serverless_spec() -> ArchitectureSpec:
    return ArchitectureSpec(
        name="Serverless API",
        intent="Backend for a booking app",
        services=["computeserverless", "relationaldatabase"],
    )


@pytest.fixture
def static_spec() -> ArchitectureSpec:
    return ArchitectureSpec(
        name="Marketing Site",
        pattern="STATIC_WEB_HOSTING",
        intent="Company landing page",
        services=["objectstorage", "cdn", "dns"],
    )


@pytest.fixture
def static_usage() -> UsageProfile:
    return UsageProfile(
        low={"storage_gb": 1, "data_transfer_gb": 5},
        expected={"storage_gb": 2, "data_transfer_gb": 10},
        high={"storage_gb": 5, "data_transfer_gb": 40},
    )
