"""
Strategy Normalizer.

Maps generated strategies to the stable external shape consumed by
callers, and screens all output text for vocabulary that belongs to a
different practice area.

Leakage is a finding, not an error: offending terms are redacted and a
non-fatal warning banner is returned alongside the cleaned output.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, fields, is_dataclass, replace
from enum import Enum
from typing import Optional, Sequence, TypeVar, Union

from ..domain import PracticeArea
from .generator import Strategy


logger = logging.getLogger(__name__)

T = TypeVar("T")


# =============================================================================
# CONFIGURATION CONSTANTS
# =============================================================================

LABEL_MAX_WORDS = 4

DISCLOSURE_DEPENDENCIES = ("Disclosure completion", "Outstanding material")

# Strategy id substring -> documents to request, applied in order
NEXT_DOCS: tuple[tuple[tuple[str, ...], tuple[str, ...]], ...] = (
    (("intent",), (
        "Full medical causation narrative from prosecution",
        "CPS intent basis (written confirmation of why s18 not s20)",
        "Medical records to assess injury severity and mechanism",
        "Expert evidence on intent (if medical evidence is ambiguous)",
    )),
    (("disclosure",), (
        "Full unedited CCTV + continuity log + download path",
        "MG6C/D + unused material categories",
        "Forensic continuity + lab notes + mixture interpretation",
        "999 call + CAD log + BWV",
        "All outstanding disclosure material",
    )),
    (("identification",), (
        "Full VIPER pack and procedure documentation",
        "Facial recognition methodology and confidence scores",
        "All CCTV footage and continuity evidence",
        "Officer statement re Code D compliance",
        "Facial recognition operator notes (if referenced)",
    )),
    (("pace",), (
        "Full custody record",
        "Interview recording + log",
        "Solicitor attendance records",
        "PACE Code C compliance documentation",
        "All interview-related material",
    )),
    (("plea",), (
        "Medical clarification on injury mechanism",
        "Expert evidence on intent before plea",
        "Sentencing guidelines and credit calculations",
    )),
    (("evidence-weakness", "no-case"), (
        "All evidence supporting each element of offence",
        "Contradictions in prosecution case",
        "Expert evidence to challenge prosecution case",
    )),
    (("disclosure-first",), (
        "All outstanding disclosure",
        "MG6 schedules",
        "Primary media integrity confirmation",
    )),
)

CIVIL_ONLY_TERMS = (
    "CFA",
    "Conditional Fee Agreement",
    "retainer",
    "engagement letter",
    "Part 36",
    "pre-action protocol",
    "PAP",
    "letter before action",
    "LBA",
    "Part 7",
    "Part 8",
    "costs budget",
    "costs management",
)

CRIMINAL_ONLY_TERMS = (
    "PTPH",
    "CPS",
    "MG6",
    "MG11",
    "PACE",
    "Turnbull",
    "VIPER",
    "mens rea",
)

CIVIL_REDACTION = "[CIVIL TERM FILTERED]"
CRIMINAL_REDACTION = "[CRIMINAL TERM FILTERED]"


# =============================================================================
# NORMALISED STRATEGY
# =============================================================================

@dataclass(frozen=True)
class NormalizedStrategy:
    id: str
    title: str
    label: str
    why: str
    immediate_actions: tuple[str, ...]
    risks: tuple[str, ...]
    dependencies: tuple[str, ...]
    next_docs_to_request: tuple[str, ...]
    provisional: bool
    downgrade_target: Optional[str] = None


def extract_label(title: str) -> str:
    """
    Short badge label for a strategy title.

    >>> extract_label("Intent Downgrade (s18 → s20)")
    'Intent Downgrade'
    """
    cleaned = re.sub(r"^Strategy\s+", "", title, flags=re.IGNORECASE)
    cleaned = re.sub(r"\s*\(.*?\)", "", cleaned)
    cleaned = re.sub(r"\s+-\s+.*$", "", cleaned).strip()
    words = cleaned.split()
    return " ".join(words[:LABEL_MAX_WORDS]) or title


def next_docs_for(strategy_id: str) -> tuple[str, ...]:
    docs: list[str] = []
    for needles, entries in NEXT_DOCS:
        if any(needle in strategy_id for needle in needles):
            docs.extend(doc for doc in entries if doc not in docs)
    return tuple(docs)


def normalize_strategy(strategy: Strategy) -> NormalizedStrategy:
    return NormalizedStrategy(
        id=strategy.id,
        title=strategy.title,
        label=extract_label(strategy.title),
        why=strategy.theory,
        immediate_actions=tuple(strategy.immediate_actions),
        risks=tuple(strategy.risks),
        dependencies=DISCLOSURE_DEPENDENCIES if strategy.disclosure_dependency else (),
        next_docs_to_request=next_docs_for(strategy.id),
        provisional=strategy.provisional,
        downgrade_target=strategy.downgrade_target,
    )


def normalize_strategies(strategies: Sequence[Strategy]) -> list[NormalizedStrategy]:
    return [normalize_strategy(strategy) for strategy in strategies]


# =============================================================================
# VOCABULARY LEAKAGE FILTER
# =============================================================================

@dataclass(frozen=True)
class FilterResult:
    filtered: str
    had_leakage: bool
    matched_terms: tuple[str, ...] = ()


@dataclass(frozen=True)
class Banner:
    severity: str
    title: str
    message: str


@dataclass(frozen=True)
class LeakageCheck:
    has_leakage: bool
    banner: Optional[Banner] = None


def _screen(practice_area: PracticeArea) -> tuple[tuple[str, ...], str]:
    if practice_area.is_criminal:
        return CIVIL_ONLY_TERMS, CIVIL_REDACTION
    return CRIMINAL_ONLY_TERMS, CRIMINAL_REDACTION


def _term_pattern(term: str) -> re.Pattern:
    return re.compile(r"\b" + re.escape(term) + r"\b", re.IGNORECASE)


def filter_out_of_domain_terms(text: str, practice_area: PracticeArea) -> FilterResult:
    """Redact every term that belongs to another practice area's vocabulary."""
    terms, marker = _screen(practice_area)
    filtered = text
    matched = []
    for term in terms:
        pattern = _term_pattern(term)
        if pattern.search(filtered):
            matched.append(term)
            filtered = pattern.sub(marker, filtered)
    return FilterResult(filtered, bool(matched), tuple(matched))


def _leakage_banner(practice_area: PracticeArea) -> Banner:
    if practice_area.is_criminal:
        return Banner(
            severity="warning",
            title="Civil terms filtered",
            message="Pack mismatch detected: civil terms filtered from criminal case output.",
        )
    area = practice_area.value.replace("_", " ")
    return Banner(
        severity="warning",
        title="Criminal terms filtered",
        message=f"Pack mismatch detected: criminal terms filtered from {area} case output.",
    )


def check_for_leakage(
    output: Union[str, Sequence[str]],
    practice_area: PracticeArea,
) -> LeakageCheck:
    text = output if isinstance(output, str) else " ".join(output)
    result = filter_out_of_domain_terms(text, practice_area)
    if not result.had_leakage:
        return LeakageCheck(has_leakage=False)
    logger.warning(
        "vocabulary leakage in %s output: %s",
        practice_area.value, ", ".join(result.matched_terms),
    )
    return LeakageCheck(has_leakage=True, banner=_leakage_banner(practice_area))


class LeakageScreen:
    """
    Redacts out-of-domain vocabulary from any output value.

    Strings are filtered, and dataclasses, tuples, lists and dict keys and
    values are rebuilt with their text filtered. Enums and non-text
    values pass through unchanged. One screen is shared across every
    stage of an analysis so its banner covers all of them.
    """

    def __init__(self, practice_area: PracticeArea):
        self.practice_area = practice_area
        self.matched_terms: list[str] = []

    @property
    def had_leakage(self) -> bool:
        return bool(self.matched_terms)

    @property
    def banner(self) -> Optional[Banner]:
        if not self.matched_terms:
            return None
        return _leakage_banner(self.practice_area)

    def text(self, text: str) -> str:
        result = filter_out_of_domain_terms(text, self.practice_area)
        if result.had_leakage:
            new_terms = [t for t in result.matched_terms if t not in self.matched_terms]
            if new_terms:
                logger.warning(
                    "vocabulary leakage in %s output: %s",
                    self.practice_area.value, ", ".join(new_terms),
                )
            self.matched_terms.extend(new_terms)
        return result.filtered

    def clean(self, value: T) -> T:
        if isinstance(value, Enum):
            return value
        if isinstance(value, str):
            return self.text(value)
        if is_dataclass(value) and not isinstance(value, type):
            changes = {f.name: self.clean(getattr(value, f.name)) for f in fields(value)}
            return replace(value, **changes)
        if isinstance(value, tuple):
            return tuple(self.clean(item) for item in value)
        if isinstance(value, list):
            return [self.clean(item) for item in value]
        if isinstance(value, dict):
            return {self.clean(key): self.clean(item) for key, item in value.items()}
        return value


def screen_output(value: T, practice_area: PracticeArea) -> tuple[T, Optional[Banner]]:
    """Apply the leakage filter to every string inside an output value."""
    screen = LeakageScreen(practice_area)
    return screen.clean(value), screen.banner


def screen_strategies(
    strategies: Sequence[NormalizedStrategy],
    practice_area: PracticeArea,
) -> tuple[list[NormalizedStrategy], Optional[Banner]]:
    """
    Apply the leakage filter to every text field of every strategy.

    Returns the cleaned strategies and a warning banner if anything was
    redacted.
    """
    return screen_output(list(strategies), practice_area)
