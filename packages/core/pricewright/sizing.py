"""Sizing tables: (service, scale tier, cost profile) -> sizing parameters."""

from __future__ import annotations

import copy
import re
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml

from pricewright.catalog import COST_EFFECTIVE, normalize_profile, normalize_service_id

_SIZING_FILE = Path(__file__).parent / "data" / "sizing.yaml"

SMALL = "SMALL"
MEDIUM = "MEDIUM"
LARGE = "LARGE"
SCALE_TIERS = (SMALL, MEDIUM, LARGE)

# Declared-scale keywords, checked in order. First match wins.
_SCALE_RULES: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"\b(poc|proof[\s_-]*of[\s_-]*concept|prototype|small|hobby|startup)\b"), SMALL),
    (re.compile(r"\b(smb|medium|mid[\s_-]*size|growth)\b"), MEDIUM),
    (re.compile(r"\b(enterprise|large|global|high[\s_-]*scale)\b"), LARGE),
]


def scale_tier_for(declared_scale: str | None) -> str:
    """Map an intent's declared scale onto SMALL/MEDIUM/LARGE. Defaults to MEDIUM."""
    text = str(declared_scale or "").strip().lower()
    if text.upper() in SCALE_TIERS:
        return text.upper()
    for pattern, tier in _SCALE_RULES:
        if pattern.search(text):
            return tier
    return MEDIUM


@lru_cache(maxsize=1)
def _tables() -> dict[str, dict[str, dict[str, dict[str, Any]]]]:
    return yaml.safe_load(_SIZING_FILE.read_text()) or {}


def size_for(service_id: str, scale_tier: str = MEDIUM, cost_profile: str = COST_EFFECTIVE) -> dict[str, Any]:
    """Sizing parameters for one service.

    Unknown tiers fall back to MEDIUM, missing profiles to cost_effective.
    Services with no table get an empty dict. Always returns a fresh copy.
    """
    table = _tables().get(normalize_service_id(service_id))
    if not table:
        return {}
    by_tier = table.get(normalize_profile(cost_profile)) or table.get(COST_EFFECTIVE) or {}
    tier = scale_tier if scale_tier in by_tier else MEDIUM
    return copy.deepcopy(by_tier.get(tier, {}))


def sizing_for(services: list[str], scale_tier: str = MEDIUM, cost_profile: str = COST_EFFECTIVE) -> dict[str, dict[str, Any]]:
    return {service_id: size_for(service_id, scale_tier, cost_profile) for service_id in services}


def sizing_label(cost_profile: str) -> str:
    return "Performance" if normalize_profile(cost_profile) != COST_EFFECTIVE else "Standard"
