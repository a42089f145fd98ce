"""Pricing integrity firewall: the last check before a report leaves the pipeline."""

from __future__ import annotations

import logging
from typing import Iterable

from pricewright.catalog import normalize_service_id
from pricewright.errors import PricingIntegrityError
from pricewright.models import UNMAPPED_BUCKET, ProviderEstimate

log = logging.getLogger(__name__)

# Supporting infrastructure an artifact may imply without it being declared,
# plus the bucket holding priced resources that map to no known service
SUPPORTING_INFRA = frozenset({"vpcnetworking", "iam", UNMAPPED_BUCKET})


def validate_pricing_integrity(
    estimates: Iterable[ProviderEstimate],
    deployable: Iterable[str],
    whitelist: frozenset[str] = SUPPORTING_INFRA,
) -> None:
    """Raise PricingIntegrityError if any breakdown prices a service outside the deployable set."""
    allowed = {normalize_service_id(s) for s in deployable} | set(whitelist)
    checked = 0
    for estimate in estimates:
        for line in estimate.breakdown:
            service_id = normalize_service_id(line.service_class)
            if service_id not in allowed:
                log.error("Integrity violation: %s/%s prices %s", estimate.provider, estimate.scenario, service_id)
                raise PricingIntegrityError(
                    f"{estimate.provider}/{estimate.scenario} prices {service_id!r}, "
                    f"which is not in the deployable set {sorted(allowed - set(whitelist))}",
                    provider=estimate.provider,
                    service_class=service_id,
                )
            checked += 1
    log.debug("Integrity firewall passed (%d breakdown lines)", checked)
