"""
Evidence Ledger — typed evidence records for the Case Reasoning Engine.

SYSTEM INVARIANT:
    Every evidence item, disclosure gap and contradiction is created during
    a graph build and is immutable afterwards. Nothing is deleted; a newer
    graph build supersedes the old one wholesale.

Free-form type and status strings coming out of documents are normalised
here, once, into closed enums. Downstream stages never re-read the raw
strings.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class EvidenceType(Enum):
    """Closed vocabulary of evidence item types."""
    CCTV = "CCTV"
    BWV = "BWV"
    WITNESS_STATEMENT = "witness_statement"
    POLICE_STATEMENT = "police_statement"
    FORENSIC = "forensic"
    MEDICAL = "medical"
    IDENTIFICATION = "identification"
    CUSTODY_INTERVIEW = "custody_interview"
    AMBULANCE = "ambulance"
    EMERGENCY_CALL = "emergency_call"
    OTHER = "other"


class DisclosureState(Enum):
    """Disclosure state of a single evidence item."""
    DISCLOSED = "disclosed"
    PARTIALLY_DISCLOSED = "partially_disclosed"
    NOT_DISCLOSED = "not_disclosed"
    UNKNOWN = "unknown"


class EvidenceSource(Enum):
    """Where an evidence item was read from."""
    PRIMARY_BUNDLE = "primary_bundle"    # Unstructured bundle documents
    OPPOSING_REVIEW = "opposing_review"  # Structured case review document
    OTHER = "other"


class Severity(Enum):
    CRITICAL = "CRITICAL"
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


class GapSource(Enum):
    OPPOSING_REVIEW = "opposing_review"
    INFERRED = "inferred"


# =============================================================================
# TYPE NORMALISATION
# =============================================================================

# Ordered: the first matching rule wins.
EVIDENCE_TYPE_RULES: list[tuple[EvidenceType, tuple[str, ...]]] = [
    (EvidenceType.CCTV, ("cctv",)),
    (EvidenceType.BWV, ("bwv", "body worn", "body-worn")),
    (EvidenceType.WITNESS_STATEMENT, ("witness",)),
    (EvidenceType.POLICE_STATEMENT, ("police statement", "officer statement", "mg11")),
    (EvidenceType.FORENSIC, ("forensic", "dna", "fingerprint")),
    (EvidenceType.MEDICAL, ("medical", "hospital", "injury report")),
    (EvidenceType.IDENTIFICATION, ("identification", "viper", r"\bid\b")),
    (EvidenceType.CUSTODY_INTERVIEW, ("pace", "custody", "interview")),
    (EvidenceType.AMBULANCE, ("ambulance", "paramedic")),
    (EvidenceType.EMERGENCY_CALL, ("999", "emergency call")),
]


def _keyword_hit(keyword: str, text: str) -> bool:
    if keyword.startswith(r"\b"):
        return re.search(keyword, text) is not None
    return keyword in text


def map_evidence_type(raw_type: Optional[str]) -> EvidenceType:
    """
    Normalise a free-form evidence type string into EvidenceType.

    Keyword-substring matching in fixed order; the first rule that matches
    wins and anything unmatched is OTHER. "id" only matches as a whole
    word so that "video" is not read as identification.

    Example:
        map_evidence_type("CCTV footage from corner shop") -> EvidenceType.CCTV
    """
    if not raw_type:
        return EvidenceType.OTHER

    text = raw_type.lower()

    for evidence_type, keywords in EVIDENCE_TYPE_RULES:
        if any(_keyword_hit(kw, text) for kw in keywords):
            return evidence_type

    return EvidenceType.OTHER


def map_disclosure_status(raw_status: Optional[str]) -> DisclosureState:
    """
    Normalise a free-form disclosure status string.

    "disclosed" (not negated, not partial) -> DISCLOSED
    "partial"                              -> PARTIALLY_DISCLOSED
    "not" / "outstanding" / "missing"      -> NOT_DISCLOSED
    anything else                          -> UNKNOWN
    """
    if not raw_status:
        return DisclosureState.UNKNOWN

    text = raw_status.lower()
    negated = re.search(r"\bnot\b", text) is not None

    if "disclosed" in text and not negated and "partial" not in text:
        return DisclosureState.DISCLOSED
    if "partial" in text:
        return DisclosureState.PARTIALLY_DISCLOSED
    if negated or "outstanding" in text or "missing" in text:
        return DisclosureState.NOT_DISCLOSED
    return DisclosureState.UNKNOWN


# =============================================================================
# EVIDENCE RECORDS
# =============================================================================

class EvidenceValidationError(Exception):
    """Raised when an evidence record is constructed with invalid fields."""
    pass


@dataclass(frozen=True)
class EvidenceItem:
    """A single typed piece of evidence in the graph."""
    type: EvidenceType
    description: str
    disclosure_status: DisclosureState
    source: EvidenceSource
    notes: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.type, EvidenceType):
            raise EvidenceValidationError(
                f"type must be EvidenceType, got {type(self.type)}"
            )
        if not isinstance(self.disclosure_status, DisclosureState):
            raise EvidenceValidationError(
                f"disclosure_status must be DisclosureState, got {type(self.disclosure_status)}"
            )

    @property
    def is_withheld(self) -> bool:
        return self.disclosure_status == DisclosureState.NOT_DISCLOSED

    @property
    def is_disclosed(self) -> bool:
        return self.disclosure_status == DisclosureState.DISCLOSED

    def display_name(self) -> str:
        """Type label plus description, used for keyword matching downstream."""
        if self.description:
            return f"{self.type.value} {self.description}"
        return self.type.value


@dataclass(frozen=True)
class DisclosureGap:
    """A named, missing or incomplete piece of required material."""
    category: str
    item: str
    severity: Severity
    requested_items: tuple[str, ...] = field(default_factory=tuple)
    source: GapSource = GapSource.OPPOSING_REVIEW

    def __post_init__(self):
        if not self.item:
            raise EvidenceValidationError("DisclosureGap.item is required")


@dataclass(frozen=True)
class Contradiction:
    """The same semantic field extracted with different values from two sources."""
    field: str
    value_a: Optional[str]
    value_b: Optional[str]
    severity: Severity
    notes: str


# =============================================================================
# FACTORY FUNCTIONS
# =============================================================================

def create_evidence_item(
    raw_type: Optional[str],
    description: str,
    raw_status: Optional[str],
    source: EvidenceSource,
    notes: Optional[str] = None,
) -> EvidenceItem:
    """Create an EvidenceItem from raw strings, normalising type and status."""
    return EvidenceItem(
        type=map_evidence_type(raw_type),
        description=(description or "").strip(),
        disclosure_status=map_disclosure_status(raw_status),
        source=source,
        notes=notes.strip() if notes else None,
    )


def create_gap(
    category: str,
    item: str,
    severity: Severity,
    source: GapSource = GapSource.OPPOSING_REVIEW,
) -> DisclosureGap:
    """Create a DisclosureGap that requests exactly the missing item."""
    return DisclosureGap(
        category=category,
        item=item,
        severity=severity,
        requested_items=(item,),
        source=source,
    )


# =============================================================================
# CASE DOCUMENTS (input boundary)
# =============================================================================

@dataclass(frozen=True)
class CaseDocument:
    """
    One document as supplied by the external document normaliser.

    raw_text and extracted_json are both optional; a document with
    neither still counts towards the document total.
    """
    id: str
    name: str = ""
    raw_text: Optional[str] = None
    extracted_json: Optional[dict[str, Any]] = None

    @property
    def text_length(self) -> int:
        return len(self.raw_text.strip()) if self.raw_text else 0
