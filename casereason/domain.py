"""
Core Domain Objects for the Case Reasoning Engine.

Domain Objects:
    CaseMeta       — Authoritative case metadata (reference, court, parties)
    Diagnostics    — Text-extraction diagnostics for a document set
    Readiness      — Graph-level verdict on whether strategy may be committed
    EvidenceGraph  — Aggregate root: items, gaps, contradictions, readiness
    PracticeArea   — Closed set of practice areas, one lens each
    ImpactItem     — Named material with an urgency label

One EvidenceGraph exists per case per build. It is rebuilt wholesale
whenever the document set changes and is never patched in place.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .evidence import (
    Contradiction,
    DisclosureGap,
    EvidenceItem,
    EvidenceType,
    Severity,
)


# =============================================================================
# CASE METADATA
# =============================================================================

@dataclass(frozen=True)
class CaseMeta:
    """Case metadata. Every field is optional; unknown stays None."""
    case_ref: Optional[str] = None
    court: Optional[str] = None
    defendant: Optional[str] = None
    charge: Optional[str] = None
    incident_date: Optional[str] = None
    custody_status: Optional[str] = None


# =============================================================================
# DIAGNOSTICS
# =============================================================================

class ReasonCode(Enum):
    """Diagnostic reason codes for a document set."""
    DOCS_NONE = "DOCS_NONE"
    TEXT_NONE = "TEXT_NONE"
    SCANNED_SUSPECTED = "SCANNED_SUSPECTED"
    TEXT_THIN = "TEXT_THIN"
    OK = "OK"


@dataclass(frozen=True)
class Diagnostics:
    """
    Text-extraction diagnostics.

    Normally supplied by the document normaliser; computed from the
    documents themselves when absent (see validation.compute_diagnostics).
    """
    doc_count: int
    raw_chars_total: int
    json_chars_total: int = 0
    suspected_scanned: bool = False
    reason_codes: tuple[ReasonCode, ...] = field(default_factory=tuple)


# =============================================================================
# READINESS
# =============================================================================

@dataclass(frozen=True)
class Readiness:
    """Whether enough text/evidence exists to responsibly commit a strategy."""
    can_commit_strategy: bool
    reasons: tuple[str, ...] = field(default_factory=tuple)


# =============================================================================
# EVIDENCE GRAPH
# =============================================================================

@dataclass(frozen=True)
class EvidenceGraph:
    """
    Aggregate root for one case's evidence state.

    Invariant: the graph is a pure function of the current document set.
    """
    case_meta: CaseMeta
    evidence_items: tuple[EvidenceItem, ...]
    disclosure_gaps: tuple[DisclosureGap, ...]
    contradictions: tuple[Contradiction, ...]
    readiness: Readiness

    @classmethod
    def empty(cls, readiness: Readiness) -> EvidenceGraph:
        """A fully-typed graph with no evidence, carrying its readiness reasons."""
        return cls(
            case_meta=CaseMeta(),
            evidence_items=(),
            disclosure_gaps=(),
            contradictions=(),
            readiness=readiness,
        )

    @property
    def has_disclosure_gaps(self) -> bool:
        return len(self.disclosure_gaps) > 0

    def items_of_type(self, *types: EvidenceType) -> list[EvidenceItem]:
        """All evidence items whose type is one of `types`, in graph order."""
        return [item for item in self.evidence_items if item.type in types]

    def has_item(self, *types: EvidenceType, include_withheld: bool = False) -> bool:
        """
        Whether at least one item of the given types exists.

        Withheld (not disclosed) items are ignored unless include_withheld.
        """
        for item in self.items_of_type(*types):
            if include_withheld or not item.is_withheld:
                return True
        return False

    def gaps_at_least(self, severity: Severity) -> list[DisclosureGap]:
        """Gaps whose severity is at or above `severity`."""
        order = [Severity.LOW, Severity.MEDIUM, Severity.HIGH, Severity.CRITICAL]
        threshold = order.index(severity)
        return [
            gap for gap in self.disclosure_gaps
            if order.index(gap.severity) >= threshold
        ]

    def missing_item_names(self) -> list[str]:
        """
        Names of material known to be missing: every gap item plus every
        withheld evidence item, de-duplicated in first-seen order.
        """
        names: list[str] = []
        for gap in self.disclosure_gaps:
            if gap.item not in names:
                names.append(gap.item)
        for item in self.evidence_items:
            if item.is_withheld:
                name = item.display_name()
                if name not in names:
                    names.append(name)
        return names


# =============================================================================
# PRACTICE AREAS
# =============================================================================

class PracticeArea(Enum):
    """Closed set of practice areas. Each has exactly one lens."""
    CRIMINAL = "criminal"
    HOUSING_DISREPAIR = "housing_disrepair"
    PERSONAL_INJURY = "personal_injury"
    CLINICAL_NEGLIGENCE = "clinical_negligence"
    FAMILY = "family"
    GENERAL_LITIGATION = "general_litigation"

    @property
    def is_criminal(self) -> bool:
        return self is PracticeArea.CRIMINAL


# =============================================================================
# EVIDENCE IMPACT ITEMS
# =============================================================================

@dataclass(frozen=True)
class ImpactItem:
    """
    A named piece of material and how urgently it matters.

    urgency is a severity label ("CRITICAL", "HIGH", ...) or a free-form
    note such as "outstanding"; missing marks material known to be absent.
    """
    name: str
    urgency: str = ""
    missing: bool = False

    @property
    def is_critical(self) -> bool:
        return self.urgency.strip().upper() == Severity.CRITICAL.value

    @property
    def is_marked_missing(self) -> bool:
        if self.missing:
            return True
        text = self.urgency.lower()
        return any(
            marker in text
            for marker in ("missing", "outstanding", "not received", "not disclosed")
        )
