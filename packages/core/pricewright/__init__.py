"""Pricewright: multi-provider cloud cost estimation for architecture designs."""

from pricewright.errors import (
    OracleError,
    PricewrightError,
    PricingIntegrityError,
    ProviderLeakError,
    StaticComputeError,
)
from pricewright.models import (
    ArchitectureSpec,
    CostRange,
    CostReport,
    ProviderEstimate,
    Recommendation,
    ServiceCost,
    ServiceEntry,
    UsageProfile,
    UsageVariant,
)

__version__ = "0.1.0"

__all__ = [
    "ArchitectureSpec",
    "CostEstimator",
    "CostRange",
    "CostReport",
    "InfracostOracle",
    "OracleError",
    "PricewrightError",
    "PricewrightSettings",
    "PricingIntegrityError",
    "ProviderEstimate",
    "ProviderLeakError",
    "Recommendation",
    "ServiceCatalog",
    "ServiceCost",
    "ServiceEntry",
    "StaticComputeError",
    "UsageProfile",
    "UsageVariant",
    "classify",
]


def __getattr__(name: str):
    # Lazy imports keep `import pricewright` light for model-only callers
    if name == "CostEstimator":
        from pricewright.estimator import CostEstimator

        return CostEstimator
    if name == "InfracostOracle":
        from pricewright.oracle import InfracostOracle

        return InfracostOracle
    if name == "PricewrightSettings":
        from pricewright.config import PricewrightSettings

        return PricewrightSettings
    if name == "ServiceCatalog":
        from pricewright.catalog import ServiceCatalog

        return ServiceCatalog
    if name == "classify":
        from pricewright.classifier import classify

        return classify
    raise AttributeError(f"module 'pricewright' has no attribute {name!r}")
