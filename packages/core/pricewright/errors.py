"""Exception hierarchy for the pricing pipeline.

Only PricingIntegrityError and ProviderLeakError ever reach callers: they mean
the pipeline produced wrong billing data. OracleError is raised and consumed
inside the pipeline to drive the fallback cascade.
"""

from __future__ import annotations


class PricewrightError(Exception):
    """Base class for all pricewright errors."""


class PricingIntegrityError(PricewrightError):
    """A priced service is not part of the run's deployable set."""

    def __init__(self, message: str, provider: str = "", service_class: str = ""):
        super().__init__(message)
        self.provider = provider
        self.service_class = service_class


class StaticComputeError(PricingIntegrityError):
    """A static-content architecture tried to declare a compute resource."""


class ProviderLeakError(PricewrightError):
    """Oracle output for one provider contains another provider's resources."""

    def __init__(self, message: str, provider: str = "", resource_types: list[str] | None = None):
        super().__init__(message)
        self.provider = provider
        self.resource_types = resource_types or []


class OracleError(PricewrightError):
    """The external pricing oracle could not produce a usable report.

    `kind` is one of: unavailable, process, timeout, quota, malformed.
    """

    KINDS = ("unavailable", "process", "timeout", "quota", "malformed")

    def __init__(self, message: str, kind: str = "process", stderr: str = ""):
        if kind not in self.KINDS:
            raise ValueError(f"Unknown oracle error kind {kind!r}")
        super().__init__(message)
        self.kind = kind
        self.stderr = stderr
