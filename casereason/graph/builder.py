"""
Evidence Graph Builder.

Combines primary bundle documents and a structured case review into one
EvidenceGraph that surfaces evidence, disclosure gaps, contradictions
and readiness.

Rules:
- The first document that parses as a case review is authoritative;
  its metadata takes precedence
- Every other document is treated as unstructured bundle material
- Gaps come only from the review's outstanding lists, verbatim
- Contradiction detection is narrow: a missed contradiction is
  acceptable, a false one is not
- The graph is a pure function of the documents; nothing is patched
"""

from __future__ import annotations

import logging
import re
from typing import Any, Iterator, Optional, Sequence

from ..domain import CaseMeta, Diagnostics, EvidenceGraph
from ..evidence import (
    CaseDocument,
    Contradiction,
    DisclosureGap,
    DisclosureState,
    EvidenceItem,
    EvidenceSource,
    Severity,
    create_evidence_item,
    create_gap,
    map_disclosure_status,
    map_evidence_type,
)
from ..ingestion.case_review import (
    MAX_EVIDENCE_ROWS,
    MAX_OUTSTANDING_ITEMS,
    MIN_REVIEW_CHARS,
    CaseReview,
    parse_case_review,
)
from ..validation import MIN_TEXT_CHARS, readiness_for


logger = logging.getLogger(__name__)


# =============================================================================
# CONFIGURATION CONSTANTS
# =============================================================================

# Outstanding list -> (gap category, severity)
GAP_CATEGORIES = {
    "visual": ("CCTV", Severity.HIGH),
    "identification": ("Identification", Severity.HIGH),
    "forensic": ("Forensic", Severity.MEDIUM),
    "disclosure": ("Disclosure", Severity.MEDIUM),
}

COURT_MISMATCH_NOTE = "Court mismatch between primary bundle and case review"

# Capitalised place name followed by a court tier. Case-sensitive so that
# prose such as "the court" never matches.
COURT_PATTERN = re.compile(
    r"\b((?:[A-Z][a-z]+[ \-])*[A-Z][a-z]+\s+(?:Magistrates'?|Crown|County|High)\s+Court)\b"
)

LEADING_PREPOSITIONS = ("at ", "in ", "before ", "the ", "to ", "from ")


# =============================================================================
# COURT CONTRADICTIONS
# =============================================================================

def extract_court_from_text(text: Optional[str]) -> Optional[str]:
    """
    First court name in free text, or None.

    Example:
        extract_court_from_text("Listed at Leeds Magistrates' Court on 3 May")
        -> "Leeds Magistrates' Court"
    """
    if not text:
        return None
    match = COURT_PATTERN.search(text)
    return match.group(1).strip() if match else None


def normalise_court(name: Optional[str]) -> Optional[str]:
    """Lowercase, drop apostrophes and leading prepositions, collapse spaces."""
    if not name:
        return None
    value = name.lower().replace("'", "").replace("’", "")
    value = re.sub(r"\s+", " ", value).strip()
    stripped = True
    while stripped:
        stripped = False
        for prefix in LEADING_PREPOSITIONS:
            if value.startswith(prefix):
                value = value[len(prefix):]
                stripped = True
    return value or None


def detect_contradictions(
    review: Optional[CaseReview],
    unstructured: Sequence[CaseDocument],
) -> list[Contradiction]:
    """Compare the review's court with the court named in each bundle document."""
    if review is None or not review.meta.court:
        return []

    review_court = review.meta.court
    review_key = normalise_court(review_court)
    contradictions = []
    seen = set()

    for doc in unstructured:
        bundle_court = extract_court_from_text(doc.raw_text)
        bundle_key = normalise_court(bundle_court)
        if not bundle_key or bundle_key == review_key or bundle_key in seen:
            continue
        seen.add(bundle_key)
        logger.warning(
            "court contradiction: bundle %r vs review %r (document %s)",
            bundle_court, review_court, doc.id,
        )
        contradictions.append(Contradiction(
            field="court",
            value_a=bundle_court,
            value_b=review_court,
            severity=Severity.HIGH,
            notes=COURT_MISMATCH_NOTE,
        ))

    return contradictions


# =============================================================================
# EVIDENCE AND GAPS
# =============================================================================

def _review_items(review: CaseReview) -> Iterator[EvidenceItem]:
    for row in review.evidence_rows:
        yield create_evidence_item(
            raw_type=row.evidence_type,
            description=row.description,
            raw_status=row.disclosure_status,
            source=EvidenceSource.OPPOSING_REVIEW,
            notes=row.notes or None,
        )


def _bundle_entries(extracted_json: Optional[dict[str, Any]]) -> list[dict[str, Any]]:
    if not isinstance(extracted_json, dict):
        return []
    meta = extracted_json.get("criminalMeta")
    if not isinstance(meta, dict):
        return []
    entries = meta.get("prosecutionEvidence")
    if not isinstance(entries, list):
        return []
    return [entry for entry in entries if isinstance(entry, dict)]


def _bundle_items(doc: CaseDocument) -> Iterator[EvidenceItem]:
    """
    Evidence listed in a bundle document's structured extraction.

    Bundle evidence is served material, so it is disclosed unless the
    entry states its own status.
    """
    for entry in _bundle_entries(doc.extracted_json):
        raw_status = entry.get("status") or entry.get("disclosureStatus")
        status = map_disclosure_status(raw_status) if raw_status else DisclosureState.DISCLOSED

        issues = entry.get("issues") or []
        if isinstance(issues, str):
            issues = [issues]
        notes = ", ".join(str(issue) for issue in issues) or None

        yield EvidenceItem(
            type=map_evidence_type(entry.get("type") or "Other"),
            description=str(entry.get("content") or entry.get("description") or "").strip(),
            disclosure_status=status,
            source=EvidenceSource.PRIMARY_BUNDLE,
            notes=notes,
        )


def _review_gaps(review: CaseReview) -> list[DisclosureGap]:
    gaps = []
    for list_name, (category, severity) in GAP_CATEGORIES.items():
        for item in getattr(review.outstanding, list_name):
            gaps.append(create_gap(category, item, severity))
    return gaps


# =============================================================================
# GRAPH BUILD
# =============================================================================

def build_evidence_graph(
    documents: Sequence[CaseDocument],
    diagnostics: Optional[Diagnostics] = None,
    min_text_chars: int = MIN_TEXT_CHARS,
    min_review_chars: int = MIN_REVIEW_CHARS,
    max_evidence_rows: int = MAX_EVIDENCE_ROWS,
    max_outstanding_items: int = MAX_OUTSTANDING_ITEMS,
) -> EvidenceGraph:
    """
    Build the evidence graph for one document set.

    Args:
        documents: Every document currently on the case
        diagnostics: Extraction diagnostics; computed when None

    Returns:
        EvidenceGraph. Never raises for missing or empty input; an empty
        document list yields an empty graph whose readiness explains why.
    """
    review: Optional[CaseReview] = None
    unstructured: list[CaseDocument] = []

    for doc in documents:
        if review is None and doc.raw_text:
            result = parse_case_review(
                doc.raw_text,
                doc.name or doc.id,
                min_chars=min_review_chars,
                max_evidence_rows=max_evidence_rows,
                max_outstanding_items=max_outstanding_items,
            )
            if result.ok:
                review = result.review
                continue
        unstructured.append(doc)

    items: list[EvidenceItem] = []
    gaps: list[DisclosureGap] = []
    case_meta = CaseMeta()

    if review is not None:
        case_meta = review.to_case_meta()
        items.extend(_review_items(review))
        gaps.extend(_review_gaps(review))

    for doc in unstructured:
        items.extend(_bundle_items(doc))

    contradictions = detect_contradictions(review, unstructured)

    diagnostics, readiness = readiness_for(
        documents, diagnostics, gap_count=len(gaps), min_text_chars=min_text_chars
    )

    graph = EvidenceGraph(
        case_meta=case_meta,
        evidence_items=tuple(items),
        disclosure_gaps=tuple(gaps),
        contradictions=tuple(contradictions),
        readiness=readiness,
    )

    logger.debug(
        "graph: docs=%d review=%s items=%d gaps=%d contradictions=%d commit=%s",
        len(documents),
        review is not None,
        len(graph.evidence_items),
        len(graph.disclosure_gaps),
        len(graph.contradictions),
        readiness.can_commit_strategy,
    )
    return graph
