"""
Readiness Gating for the Case Reasoning Engine.

This module decides whether a document set carries enough extractable
text for strategy output to be committed. The decision is a three-tier
tree over diagnostics; the first failing tier wins:

1. No extractable text at all
2. Documents look like scanned images
3. Less text than the minimum threshold

Readiness never raises. A failing tier is a finding returned as data.
"""

from __future__ import annotations

import json
import logging
from typing import Optional, Sequence

from .domain import Diagnostics, Readiness, ReasonCode
from .evidence import CaseDocument


logger = logging.getLogger(__name__)


# =============================================================================
# CONFIGURATION CONSTANTS
# =============================================================================

# Minimum characters of extracted text before strategy may be committed
MIN_TEXT_CHARS = 800

# Below this many text characters per document, a set that still carries
# structured JSON is treated as scanned images
SCANNED_CHARS_PER_DOC = 50

# Readiness reason strings
REASON_NO_TEXT = "No extractable text from documents"
REASON_SCANNED = "Documents appear to be scanned images (OCR may be needed)"
REASON_INSUFFICIENT = "Insufficient text extracted (less than {threshold} characters)"
REASON_GAPS = "{count} disclosure gap(s) identified - strategy should be disclosure-first"


# =============================================================================
# DIAGNOSTICS
# =============================================================================

def _json_length(payload: object) -> int:
    if not payload:
        return 0
    try:
        return len(json.dumps(payload, sort_keys=True, default=str))
    except (TypeError, ValueError):
        return 0


def compute_diagnostics(
    documents: Sequence[CaseDocument],
    min_text_chars: int = MIN_TEXT_CHARS,
    scanned_chars_per_doc: int = SCANNED_CHARS_PER_DOC,
) -> Diagnostics:
    """
    Derive diagnostics from the documents themselves.

    Used when the document normaliser did not supply diagnostics.
    """
    doc_count = len(documents)
    raw_chars_total = sum(doc.text_length for doc in documents)
    json_chars_total = sum(_json_length(doc.extracted_json) for doc in documents)

    suspected_scanned = (
        doc_count > 0
        and json_chars_total > 0
        and 0 < raw_chars_total < scanned_chars_per_doc * doc_count
    )

    if doc_count == 0:
        codes = (ReasonCode.DOCS_NONE,)
    elif raw_chars_total == 0:
        codes = (ReasonCode.TEXT_NONE,)
    elif suspected_scanned:
        codes = (ReasonCode.SCANNED_SUSPECTED,)
    elif raw_chars_total < min_text_chars:
        codes = (ReasonCode.TEXT_THIN,)
    else:
        codes = (ReasonCode.OK,)

    return Diagnostics(
        doc_count=doc_count,
        raw_chars_total=raw_chars_total,
        json_chars_total=json_chars_total,
        suspected_scanned=suspected_scanned,
        reason_codes=codes,
    )


# =============================================================================
# READINESS DECISION
# =============================================================================

def assess_readiness(
    diagnostics: Diagnostics,
    gap_count: int = 0,
    min_text_chars: int = MIN_TEXT_CHARS,
) -> Readiness:
    """
    Apply the readiness decision tree.

    Returns:
        Readiness with can_commit_strategy and the reasons behind it.
        A ready graph with disclosure gaps carries a non-blocking note.
    """
    if diagnostics.raw_chars_total <= 0:
        readiness = Readiness(False, (REASON_NO_TEXT,))
    elif diagnostics.suspected_scanned:
        readiness = Readiness(False, (REASON_SCANNED,))
    elif diagnostics.raw_chars_total < min_text_chars:
        readiness = Readiness(
            False, (REASON_INSUFFICIENT.format(threshold=min_text_chars),)
        )
    elif gap_count > 0:
        readiness = Readiness(True, (REASON_GAPS.format(count=gap_count),))
    else:
        readiness = Readiness(True, ())

    logger.debug(
        "readiness: chars=%d scanned=%s gaps=%d -> commit=%s",
        diagnostics.raw_chars_total,
        diagnostics.suspected_scanned,
        gap_count,
        readiness.can_commit_strategy,
    )
    return readiness


def is_thin_bundle(readiness: Readiness) -> bool:
    """True when readiness failed for lack of text (not for scanning)."""
    return any(
        reason == REASON_NO_TEXT or reason.startswith("Insufficient text")
        for reason in readiness.reasons
    )


def readiness_for(
    documents: Sequence[CaseDocument],
    diagnostics: Optional[Diagnostics] = None,
    gap_count: int = 0,
    min_text_chars: int = MIN_TEXT_CHARS,
) -> tuple[Diagnostics, Readiness]:
    """Convenience: compute diagnostics if absent, then assess readiness."""
    if diagnostics is None:
        diagnostics = compute_diagnostics(documents, min_text_chars=min_text_chars)
    return diagnostics, assess_readiness(diagnostics, gap_count, min_text_chars)
