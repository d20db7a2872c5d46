"""
Request models for case files and the HTTP API.

A case file on disk and a POST body share one shape, so the CLI and the
API validate input the same way before anything reaches the engine.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Optional

from pydantic import BaseModel, Field

from .disclosure import DependencyStatus
from .domain import PracticeArea, ReasonCode


class DocumentIn(BaseModel):
    id: str = Field(..., min_length=1, description="Document identifier")
    name: str = Field("", description="Display name, e.g. the uploaded filename")
    raw_text: Optional[str] = Field(None, description="Extracted document text")
    extracted_json: Optional[dict[str, Any]] = Field(
        None, description="Structured extraction from the document normaliser"
    )


class DiagnosticsIn(BaseModel):
    doc_count: int = Field(..., ge=0)
    raw_chars_total: int = Field(..., ge=0)
    json_chars_total: int = Field(0, ge=0)
    suspected_scanned: bool = False
    reason_codes: list[ReasonCode] = Field(default_factory=list)


class ChargeIn(BaseModel):
    offence: str = Field(..., min_length=1, description="Charge or claim, e.g. 's18 OAPA 1861'")
    section: Optional[str] = Field(None, description="Section number when known")
    description: Optional[str] = None


class TimelineEntryIn(BaseModel):
    item: str = Field(..., description="Disclosure item, e.g. 'BWV'")
    action: str = Field(..., description="requested, chased, served or reviewed")
    date: Optional[str] = None


class DependencyIn(BaseModel):
    id: str
    label: str = ""
    status: DependencyStatus = DependencyStatus.REQUIRED


class ImpactItemIn(BaseModel):
    name: str
    urgency: str = Field("", description="Severity label such as CRITICAL, or a note")
    missing: bool = False


class LensFactsIn(BaseModel):
    """Typed facts the practice lenses read. Unknown stays None."""

    primary_strategy: Optional[str] = None
    has_ptph: bool = False
    saved_position_text: Optional[str] = None

    hazard_type: Optional[str] = None
    notice_date: Optional[date] = None
    vulnerability_flags: list[str] = Field(default_factory=list)
    investigation_date: Optional[date] = None
    work_start_date: Optional[date] = None

    accident_date: Optional[date] = None

    date_of_knowledge: Optional[date] = None
    letter_of_claim_sent: Optional[bool] = None
    letter_of_claim_date: Optional[date] = None
    response_received: Optional[bool] = None

    limitation_start_date: Optional[date] = None
    limitation_expired: Optional[bool] = None

    welfare_threshold_engaged: Optional[bool] = None


class CaseRequest(BaseModel):
    """One case: its documents plus the caller-supplied facts."""

    practice_area: PracticeArea = Field(
        PracticeArea.CRIMINAL, description="Practice area whose lens applies"
    )
    documents: list[DocumentIn] = Field(default_factory=list)
    diagnostics: Optional[DiagnosticsIn] = Field(
        None, description="Extraction diagnostics; computed from the documents when absent"
    )
    charge: Optional[ChargeIn] = None
    interview_stance: Optional[str] = Field(
        None, description="no_comment, answered or silent"
    )
    phase: Optional[int] = Field(None, ge=1, le=3, description="Lifecycle phase override")
    facts: LensFactsIn = Field(default_factory=LensFactsIn)
    timeline: list[TimelineEntryIn] = Field(default_factory=list)
    declared_dependencies: list[DependencyIn] = Field(default_factory=list)
    impact_items: list[ImpactItemIn] = Field(default_factory=list)
    case_id: Optional[str] = None
    client_name: Optional[str] = None
    reference_date: Optional[date] = Field(
        None, description="Date deadline checks are measured from"
    )
