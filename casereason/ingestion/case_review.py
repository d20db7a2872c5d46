"""
Case Review Parsing for the Case Reasoning Engine.

This module handles one document type: the formal "Defence Review &
Disclosure Readiness Assessment" prepared on a criminal file. These
documents have predictable headings, so they are read deterministically.

Design principles:
- Line-anchored extraction, no inference
- Unknown fields stay None; nothing is guessed
- Failure is data: parse_case_review never raises
- Extraction problems raise DocumentParseError internally and are
  converted to a failed result at the parse boundary

Layout expected (headings may be numbered, tables may use pipes or
aligned columns):

    DEFENCE REVIEW & DISCLOSURE READINESS ASSESSMENT
    Case Reference: T2024/0172
    Court: Leeds Crown Court
    ...
    2. Hearing History
    12/01/2024 | Leeds Magistrates' Court | First Appearance | Sent to Crown
    3. EVIDENCE MAP
    Evidence Type | Description | Disclosure Status | Notes
    CCTV | Shop frontage camera | Not Disclosed | Requested 14/02
    4. OUTSTANDING CCTV
    - Full window 22:00-23:30
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Optional

from ..domain import CaseMeta
from ..errors import DocumentParseError


logger = logging.getLogger(__name__)


# =============================================================================
# CONFIGURATION CONSTANTS
# =============================================================================

MIN_REVIEW_CHARS = 500
MAX_EVIDENCE_ROWS = 50
MAX_OUTSTANDING_ITEMS = 20
MAX_CONCLUSION_ITEMS = 10

REASON_TOO_SHORT = "Text too short"
REASON_NOT_REVIEW = "Not a case review document"

# Any one marker identifies the document type
REVIEW_MARKERS = [
    re.compile(r"DEFENCE REVIEW.*DISCLOSURE.*ASSESSMENT", re.IGNORECASE),
    re.compile(r"DEFENCE REVIEW.*DISCLOSURE.*READINESS", re.IGNORECASE),
    re.compile(r"DEFENCE REVIEW.*DISCLOSURE.*STRESS.*TEST", re.IGNORECASE),
    re.compile(r"This document is.*NOT a defence statement", re.IGNORECASE),
    re.compile(r"procedural-first.*evidence-anchored", re.IGNORECASE),
]

# A numbered heading ("3. ") or a SECTION heading ends the current section
SECTION_BREAK = re.compile(r"^\s*(?:\d+\.\s|SECTION\b)", re.IGNORECASE)

BULLET = re.compile(r"^\s*[•\-\*]\s*(.+?)\s*$")
DATE_CELL = re.compile(r"^\d{1,2}[/\-.]\d{1,2}[/\-.]\d{2,4}$")

HEADER_CELLS = {
    "evidence type", "type", "description", "disclosure status", "status",
    "notes", "date", "court", "hearing type", "outcome",
}

# Outstanding-material headings, checked in order; the first hit wins
OUTSTANDING_HEADINGS = [
    ("visual", re.compile(
        r"(?:CCTV|VISUAL|BWV).*OUTSTANDING|OUTSTANDING.*(?:CCTV|VISUAL|BWV)",
        re.IGNORECASE,
    )),
    ("identification", re.compile(
        r"IDENTIFICATION.*OUTSTANDING|OUTSTANDING.*IDENTIFICATION",
        re.IGNORECASE,
    )),
    ("forensic", re.compile(
        r"FORENSIC.*OUTSTANDING|OUTSTANDING.*FORENSIC|METHODOLOGY.*GAP",
        re.IGNORECASE,
    )),
    ("disclosure", re.compile(
        r"OUTSTANDING.*MATERIAL|DISCLOSURE.*OUTSTANDING|OUTSTANDING.*DISCLOSURE",
        re.IGNORECASE,
    )),
]

INTENT_LIVE = re.compile(
    r"s18.*s20|section 18.*section 20|intent.*distinction|mental element.*live",
    re.IGNORECASE,
)
INTENT_HEADING = re.compile(r"INTENT.*DISTINCTION|MENTAL ELEMENT", re.IGNORECASE)

CONCLUSION_HEADING = re.compile(r"^\s*(?:\d+\.\s*)?CONCLUSIONS?\b", re.IGNORECASE)
CONCLUSION_END = re.compile(r"^\s*(?:Prepared by|Date:)", re.IGNORECASE)
OUTSTANDING_MENTION = re.compile(
    r"(?:outstanding|missing|required).*?material", re.IGNORECASE
)


# =============================================================================
# PARSED STRUCTURES
# =============================================================================

@dataclass(frozen=True)
class ReviewMeta:
    """Metadata block at the head of a case review."""
    case_ref: Optional[str] = None
    court: Optional[str] = None
    defendant: Optional[str] = None
    date_of_birth: Optional[str] = None
    charge: Optional[str] = None
    complainant: Optional[str] = None
    incident_date: Optional[str] = None
    custody_status: Optional[str] = None


@dataclass(frozen=True)
class HearingEntry:
    date: str
    court: str
    hearing_type: str
    outcome: str


@dataclass(frozen=True)
class PaceCompliance:
    """
    PACE compliance flags.

    None means the review does not mention the point at all.
    """
    caution_given: Optional[bool] = None
    interview_recorded: Optional[bool] = None
    solicitor_present: Optional[bool] = None
    custody_record_disclosed: Optional[bool] = None
    detention_hours: Optional[int] = None


@dataclass(frozen=True)
class EvidenceRow:
    """One row of the review's evidence map, as written."""
    evidence_type: str
    description: str
    disclosure_status: str
    notes: str = ""


@dataclass(frozen=True)
class OutstandingMaterial:
    visual: tuple[str, ...] = ()
    identification: tuple[str, ...] = ()
    forensic: tuple[str, ...] = ()
    disclosure: tuple[str, ...] = ()

    @property
    def total(self) -> int:
        return (
            len(self.visual) + len(self.identification)
            + len(self.forensic) + len(self.disclosure)
        )


@dataclass(frozen=True)
class IntentDistinction:
    live: bool = False
    notes: Optional[str] = None


@dataclass(frozen=True)
class Conclusion:
    summary: tuple[str, ...] = ()
    outstanding_material: tuple[str, ...] = ()


@dataclass(frozen=True)
class CaseReview:
    """Structured content of one case review document."""
    meta: ReviewMeta
    hearings: tuple[HearingEntry, ...] = ()
    pace: PaceCompliance = field(default_factory=PaceCompliance)
    evidence_rows: tuple[EvidenceRow, ...] = ()
    outstanding: OutstandingMaterial = field(default_factory=OutstandingMaterial)
    intent: IntentDistinction = field(default_factory=IntentDistinction)
    conclusion: Conclusion = field(default_factory=Conclusion)

    def to_case_meta(self) -> CaseMeta:
        return CaseMeta(
            case_ref=self.meta.case_ref,
            court=self.meta.court,
            defendant=self.meta.defendant,
            charge=self.meta.charge,
            incident_date=self.meta.incident_date,
            custody_status=self.meta.custody_status,
        )


@dataclass(frozen=True)
class ReviewParseResult:
    """Outcome of parsing one document; ok=False carries a reason."""
    ok: bool
    review: Optional[CaseReview] = None
    reason: Optional[str] = None
    document_name: Optional[str] = None

    @classmethod
    def success(cls, review: CaseReview, document_name: Optional[str] = None) -> ReviewParseResult:
        return cls(ok=True, review=review, document_name=document_name)

    @classmethod
    def failure(cls, reason: str, document_name: Optional[str] = None) -> ReviewParseResult:
        return cls(ok=False, reason=reason, document_name=document_name)


# =============================================================================
# DETECTION
# =============================================================================

def looks_like_case_review(text: str) -> bool:
    """True if any document-type marker matches."""
    return any(marker.search(text) for marker in REVIEW_MARKERS)


# =============================================================================
# SECTION EXTRACTORS
# =============================================================================

META_FIELDS = {
    "case_ref": re.compile(r"^\s*Case Reference\s*:\s*([A-Z0-9/\-]+)", re.IGNORECASE | re.MULTILINE),
    "court": re.compile(r"^\s*Court\s*:\s*(.+?)\s*$", re.IGNORECASE | re.MULTILINE),
    "defendant": re.compile(r"^\s*Defendant\s*:\s*(.+?)\s*$", re.IGNORECASE | re.MULTILINE),
    "date_of_birth": re.compile(r"^\s*Date of Birth\s*:\s*([0-9/\-.]+)", re.IGNORECASE | re.MULTILINE),
    "charge": re.compile(r"^\s*Charge\s*:\s*(.+?)\s*$", re.IGNORECASE | re.MULTILINE),
    "complainant": re.compile(r"^\s*Complainant\s*:\s*(.+?)\s*$", re.IGNORECASE | re.MULTILINE),
    "incident_date": re.compile(r"^\s*Incident Date\s*:\s*([0-9/\-.]+)", re.IGNORECASE | re.MULTILINE),
    "custody_status": re.compile(r"^\s*Custody Status\s*:\s*(.+?)\s*$", re.IGNORECASE | re.MULTILINE),
}


def parse_meta(text: str) -> ReviewMeta:
    values = {}
    for name, pattern in META_FIELDS.items():
        match = pattern.search(text)
        values[name] = match.group(1).strip() if match else None
    return ReviewMeta(**values)


def _section_lines(lines: list[str], heading: re.Pattern) -> list[str]:
    """Lines after the first heading match, up to the next section break."""
    for index, line in enumerate(lines):
        if heading.search(line):
            body = []
            for following in lines[index + 1:]:
                if SECTION_BREAK.match(following):
                    break
                body.append(following)
            return body
    return []


def _split_row(line: str) -> list[str]:
    if "|" in line:
        cells = [cell.strip() for cell in line.split("|")]
        # Leading and trailing pipes produce empty edge cells
        if cells and cells[0] == "":
            cells = cells[1:]
        if cells and cells[-1] == "":
            cells = cells[:-1]
        return cells
    return [cell.strip() for cell in re.split(r"\t+|\s{2,}", line.strip()) if cell.strip()]


def _table_rows(lines: list[str], section: str) -> list[list[str]]:
    """
    Data rows of a pipe- or column-aligned table.

    Header and separator rows are dropped. Once a header is seen, every
    row must have the header's width.

    Raises:
        DocumentParseError: If a row does not fit the table's shape
    """
    rows = []
    width = None
    for line in lines:
        if not line.strip() or BULLET.match(line) and "|" not in line:
            continue
        cells = _split_row(line)
        if len(cells) < 2:
            continue
        if all(re.fullmatch(r"[-:= ]*", cell) for cell in cells):
            continue
        if cells[0].lower() in HEADER_CELLS:
            width = len(cells)
            continue
        if width is not None and len(cells) != width:
            raise DocumentParseError(
                f"{section} row has {len(cells)} columns, expected {width}: {line.strip()!r}"
            )
        rows.append(cells)
    return rows


def parse_hearings(lines: list[str]) -> tuple[HearingEntry, ...]:
    section = _section_lines(lines, re.compile(r"Hearing History", re.IGNORECASE))
    hearings = []
    for cells in _table_rows(section, "Hearing history"):
        if not DATE_CELL.match(cells[0]):
            continue
        padded = cells + [""] * (4 - len(cells))
        hearings.append(HearingEntry(
            date=padded[0],
            court=padded[1],
            hearing_type=padded[2] or "Hearing",
            outcome=" ".join(padded[3:]).strip(),
        ))
    return tuple(hearings)


def _flag(text: str, mentioned: str, negated: str) -> Optional[bool]:
    if not re.search(mentioned, text, re.IGNORECASE):
        return None
    return re.search(negated, text, re.IGNORECASE) is None


def parse_pace(text: str) -> PaceCompliance:
    detention = re.search(r"detention.*?(\d+)\s*hours?", text, re.IGNORECASE)
    return PaceCompliance(
        caution_given=_flag(text, r"caution.*given", r"caution.*not.*given|\bno\b.*caution"),
        interview_recorded=_flag(
            text, r"interview.*recorded", r"interview.*not.*recorded|\bno\b.*interview.*recording"
        ),
        solicitor_present=_flag(
            text, r"solicitor.*present", r"solicitor.*not.*present|\bno\b.*solicitor"
        ),
        custody_record_disclosed=_flag(
            text,
            r"custody record",
            r"custody record.*(?:not.*served|not.*disclosed|missing|outstanding)",
        ),
        detention_hours=int(detention.group(1)) if detention else None,
    )


def parse_evidence_map(
    lines: list[str],
    max_rows: int = MAX_EVIDENCE_ROWS,
) -> tuple[EvidenceRow, ...]:
    section = _section_lines(lines, re.compile(r"EVIDENCE MAP", re.IGNORECASE))
    rows = []
    for cells in _table_rows(section, "Evidence map"):
        if len(cells) < 3:
            raise DocumentParseError(
                f"Evidence map row needs type, description and status: {cells!r}"
            )
        rows.append(EvidenceRow(
            evidence_type=cells[0],
            description=cells[1],
            disclosure_status=cells[2],
            notes=" ".join(cells[3:]).strip(),
        ))
        if len(rows) >= max_rows:
            break
    return tuple(rows)


def _classify_heading(line: str) -> Optional[str]:
    for category, pattern in OUTSTANDING_HEADINGS:
        if pattern.search(line):
            return category
    return None


def parse_outstanding(
    lines: list[str],
    max_items: int = MAX_OUTSTANDING_ITEMS,
) -> OutstandingMaterial:
    """
    Bullet lists under outstanding-material headings.

    Every non-bullet line re-classifies the bullets that follow it;
    lines matching no category stop collection.
    """
    collected: dict[str, list[str]] = {
        "visual": [], "identification": [], "forensic": [], "disclosure": [],
    }
    current = None
    for line in lines:
        if not line.strip():
            continue
        bullet = BULLET.match(line)
        if bullet is None:
            current = _classify_heading(line)
            continue
        if current is not None and len(collected[current]) < max_items:
            item = bullet.group(1).strip()
            if item and item not in collected[current]:
                collected[current].append(item)

    return OutstandingMaterial(
        visual=tuple(collected["visual"]),
        identification=tuple(collected["identification"]),
        forensic=tuple(collected["forensic"]),
        disclosure=tuple(collected["disclosure"]),
    )


def parse_intent(lines: list[str]) -> IntentDistinction:
    live = any(INTENT_LIVE.search(line) for line in lines)
    body = " ".join(
        line.strip() for line in _section_lines(lines, INTENT_HEADING) if line.strip()
    )
    notes = body if 20 < len(body) < 500 else None
    return IntentDistinction(live=live, notes=notes)


def parse_conclusion(lines: list[str]) -> Conclusion:
    section = []
    inside = False
    for line in lines:
        if not inside:
            inside = CONCLUSION_HEADING.match(line) is not None
            continue
        if CONCLUSION_END.match(line):
            break
        section.append(line)

    summary = []
    mentions = []
    for line in section:
        bullet = BULLET.match(line)
        text = bullet.group(1) if bullet else line.strip()
        if bullet and len(text) > 10 and len(summary) < MAX_CONCLUSION_ITEMS:
            summary.append(text)
        if OUTSTANDING_MENTION.search(text) and len(mentions) < MAX_CONCLUSION_ITEMS:
            mentions.append(text)

    return Conclusion(summary=tuple(summary), outstanding_material=tuple(mentions))


# =============================================================================
# PARSE BOUNDARY
# =============================================================================

def parse_case_review(
    raw_text: Optional[str],
    document_name: Optional[str] = None,
    min_chars: int = MIN_REVIEW_CHARS,
    max_evidence_rows: int = MAX_EVIDENCE_ROWS,
    max_outstanding_items: int = MAX_OUTSTANDING_ITEMS,
) -> ReviewParseResult:
    """
    Parse a case review document into structured data.

    Args:
        raw_text: Extracted document text
        document_name: Used only for provenance in the result and logs

    Returns:
        ReviewParseResult; ok=False with a reason when the text is too
        short, carries no document marker, or cannot be extracted.
    """
    if not raw_text or len(raw_text) < min_chars:
        return ReviewParseResult.failure(REASON_TOO_SHORT, document_name)

    if not looks_like_case_review(raw_text):
        return ReviewParseResult.failure(REASON_NOT_REVIEW, document_name)

    lines = raw_text.splitlines()

    try:
        review = CaseReview(
            meta=parse_meta(raw_text),
            hearings=parse_hearings(lines),
            pace=parse_pace(raw_text),
            evidence_rows=parse_evidence_map(lines, max_evidence_rows),
            outstanding=parse_outstanding(lines, max_outstanding_items),
            intent=parse_intent(lines),
            conclusion=parse_conclusion(lines),
        )
    except DocumentParseError as e:
        logger.info("case review %s not parsed: %s", document_name or "<unnamed>", e.reason)
        return ReviewParseResult.failure(e.reason, document_name)

    logger.debug(
        "case review %s: %d evidence rows, %d outstanding items",
        document_name or "<unnamed>",
        len(review.evidence_rows),
        review.outstanding.total,
    )
    return ReviewParseResult.success(review, document_name)
