"""Workload classifier: picks the pricing mode for an architecture.

Rules are an ordered list of (name, predicate, mode) evaluated top to bottom;
the first predicate that matches decides. Keyword matching is whole-word so
"email" never reads as "ai" and "address" never reads as "dr".
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable

from pricewright.models import ArchitectureSpec

INFRASTRUCTURE = "INFRASTRUCTURE"
STORAGE_POLICY = "STORAGE_POLICY"
AI_CONSUMPTION = "AI_CONSUMPTION"
HYBRID = "HYBRID"
STATIC_BYPASS = "STATIC_BYPASS"

PRICING_MODES = (INFRASTRUCTURE, STORAGE_POLICY, AI_CONSUMPTION, HYBRID, STATIC_BYPASS)

STATIC_PATTERNS = frozenset({"STATIC_WEB_HOSTING", "STATIC_SITE", "STATIC_WEBSITE", "STATIC"})

AI_CONSUMPTION_TERMS = ("llm", "llms", "token", "tokens", "openai", "chatgpt", "gpt", "inference", "generation", "genai")
AI_TERMS = ("ai", "ml", "machine learning", "artificial intelligence") + AI_CONSUMPTION_TERMS
STORAGE_TERMS = ("backup", "backups", "archive", "archival", "cold", "vault", "dr", "disaster", "retention")
OPERATIONAL_TERMS = ("fail", "failure", "outage", "downtime", "operational", "impact", "blast radius", "mitigation")

INFRA_SERVICES = frozenset(
    {
        "computecontainer",
        "computeserverless",
        "computevm",
        "relationaldatabase",
        "nosqldatabase",
        "cache",
        "objectstorage",
        "loadbalancer",
        "apigateway",
    }
)


def _term_pattern(terms: tuple[str, ...]) -> re.Pattern[str]:
    alternatives = "|".join(re.escape(t) for t in sorted(terms, key=len, reverse=True))
    return re.compile(rf"\b(?:{alternatives})\b", re.IGNORECASE)


_AI_CONSUMPTION_RE = _term_pattern(AI_CONSUMPTION_TERMS)
_AI_RE = _term_pattern(AI_TERMS)
_STORAGE_RE = _term_pattern(STORAGE_TERMS)
_OPERATIONAL_RE = _term_pattern(OPERATIONAL_TERMS)


@dataclass
class Classification:
    mode: str
    rule: str
    operational: bool = False
    wants_ai: bool = False
    wants_storage_policy: bool = False
    reason: str = ""

    @property
    def is_static(self) -> bool:
        return self.mode == STATIC_BYPASS


def _included(spec: ArchitectureSpec) -> set[str]:
    return {s.id for s in spec.services if s.included}


def _is_static_pattern(spec: ArchitectureSpec) -> bool:
    return spec.pattern in STATIC_PATTERNS


def _mentions_ai_consumption(spec: ArchitectureSpec) -> bool:
    return bool(_AI_CONSUMPTION_RE.search(spec.intent))


def _mentions_storage_policy(spec: ArchitectureSpec) -> bool:
    return bool(_STORAGE_RE.search(spec.intent))


def _has_infra_with_ai(spec: ArchitectureSpec) -> bool:
    return bool(_included(spec) & INFRA_SERVICES) and bool(_AI_RE.search(spec.intent))


def _has_infra(spec: ArchitectureSpec) -> bool:
    return bool(_included(spec) & INFRA_SERVICES)


def _mentions_ai_without_infra(spec: ArchitectureSpec) -> bool:
    return bool(_AI_RE.search(spec.intent)) and not _has_infra(spec)


def _mentions_operational(spec: ArchitectureSpec) -> bool:
    return bool(_OPERATIONAL_RE.search(spec.intent))


Rule = tuple[str, Callable[[ArchitectureSpec], bool], str]

# First match wins. Order is the precedence chain.
RULES: list[Rule] = [
    ("static_pattern", _is_static_pattern, STATIC_BYPASS),
    ("ai_keywords", _mentions_ai_consumption, AI_CONSUMPTION),
    ("ai_without_infra", _mentions_ai_without_infra, AI_CONSUMPTION),
    ("storage_keywords", _mentions_storage_policy, STORAGE_POLICY),
    ("infra_with_ai", _has_infra_with_ai, HYBRID),
    ("infra_services", _has_infra, INFRASTRUCTURE),
    ("operational_keywords", _mentions_operational, HYBRID),
]

_DEFAULT_RULE = "default"


def classify(spec: ArchitectureSpec, rules: list[Rule] | None = None) -> Classification:
    """Select the pricing mode for an architecture and its intent text."""
    for name, predicate, mode in rules if rules is not None else RULES:
        if predicate(spec):
            return Classification(
                mode=mode,
                rule=name,
                operational=name == "operational_keywords",
                wants_ai=bool(_AI_RE.search(spec.intent)),
                wants_storage_policy=_mentions_storage_policy(spec),
                reason=f"matched rule '{name}'",
            )
    return Classification(
        mode=HYBRID,
        rule=_DEFAULT_RULE,
        wants_ai=bool(_AI_RE.search(spec.intent)),
        wants_storage_policy=_mentions_storage_policy(spec),
        reason="no rule matched, defaulting to hybrid",
    )
