"""
Analysis pipeline for the Case Reasoning Engine.

Ties every stage together into a single execution flow for one case.

Pipeline stages:
    1. Evidence Graph Builder (with the case review parser)
    2. Disclosure Status Evaluator and standard checklist
    3. Practice Lens Engine
    4. Strategy Generator (criminal cases)
    5. Strategy Fight Engine (criminal cases)
    6. Strategy Normalizer and leakage screen

The pipeline is read-only and deterministic for a fixed reference date.
No persistence. Nothing is cached between calls.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Optional, Union

from pydantic import ValidationError

from ..config import EngineSettings, get_settings
from ..disclosure import (
    DeclaredDependency,
    DisclosureChecklist,
    DisclosureStatus,
    TimelineEntry,
    compute_disclosure_checklist,
    evaluate_disclosure,
)
from ..domain import Diagnostics, EvidenceGraph, ImpactItem, PracticeArea
from ..errors import CaseInputError
from ..evidence import CaseDocument
from ..graph.builder import build_evidence_graph
from ..lenses.base import EvidencePresence, LensContext, LensEvaluation, evaluate_lens, resolve_phase
from ..lenses.registry import LensRegistry
from ..schemas import CaseRequest
from ..serialization import to_jsonable
from ..strategy.artifacts import CaseDetails
from ..strategy.facts import RouteType
from ..strategy.generator import Charge, InterviewStance, Strategy, extract_section, generate_strategies
from ..strategy.normalizer import (
    Banner,
    NormalizedStrategy,
    LeakageScreen,
    normalize_strategies,
)
from ..strategy.routes import RoutePlan, build_route_plans
from ..validation import compute_diagnostics


logger = logging.getLogger(__name__)


# =============================================================================
# CASE INPUT
# =============================================================================

@dataclass(frozen=True)
class CaseInput:
    """Everything one analysis reads. Built from a CaseRequest."""
    practice_area: PracticeArea
    documents: tuple[CaseDocument, ...] = ()
    diagnostics: Optional[Diagnostics] = None
    charge: Optional[Charge] = None
    interview_stance: Optional[InterviewStance] = None
    phase: Optional[int] = None
    facts: dict[str, Any] = field(default_factory=dict)
    timeline: tuple[TimelineEntry, ...] = ()
    declared_dependencies: tuple[DeclaredDependency, ...] = ()
    impact_items: tuple[ImpactItem, ...] = ()
    case_id: Optional[str] = None
    client_name: Optional[str] = None
    reference_date: Optional[date] = None


def case_input_from_request(
    request: CaseRequest,
    reference_date: Optional[date] = None,
) -> CaseInput:
    """
    Convert a validated request into engine input.

    An explicit reference_date overrides the one in the request.
    """
    diagnostics = None
    if request.diagnostics is not None:
        d = request.diagnostics
        diagnostics = Diagnostics(
            doc_count=d.doc_count,
            raw_chars_total=d.raw_chars_total,
            json_chars_total=d.json_chars_total,
            suspected_scanned=d.suspected_scanned,
            reason_codes=tuple(d.reason_codes),
        )

    charge = None
    if request.charge is not None:
        charge = Charge(
            offence=request.charge.offence,
            section=request.charge.section,
            description=request.charge.description,
        )

    stance = None
    if request.interview_stance:
        try:
            stance = InterviewStance(request.interview_stance.strip().lower())
        except ValueError:
            raise CaseInputError(
                f"unknown interview stance {request.interview_stance!r}", "interview_stance"
            )

    facts = request.facts.model_dump()
    facts["vulnerability_flags"] = tuple(facts["vulnerability_flags"])

    return CaseInput(
        practice_area=request.practice_area,
        documents=tuple(
            CaseDocument(
                id=doc.id,
                name=doc.name,
                raw_text=doc.raw_text,
                extracted_json=doc.extracted_json,
            )
            for doc in request.documents
        ),
        diagnostics=diagnostics,
        charge=charge,
        interview_stance=stance,
        phase=request.phase,
        facts=facts,
        timeline=tuple(
            TimelineEntry(entry.item, entry.action, entry.date) for entry in request.timeline
        ),
        declared_dependencies=tuple(
            DeclaredDependency(dep.id, dep.label, dep.status)
            for dep in request.declared_dependencies
        ),
        impact_items=tuple(
            ImpactItem(item.name, item.urgency, item.missing) for item in request.impact_items
        ),
        case_id=request.case_id,
        client_name=request.client_name,
        reference_date=reference_date or request.reference_date,
    )


def parse_case(
    data: Any,
    source: str = "case",
    reference_date: Optional[date] = None,
) -> CaseInput:
    """
    Validate raw case data (a decoded JSON object).

    Raises:
        CaseInputError: If the data does not match the case shape
    """
    if not isinstance(data, dict):
        raise CaseInputError("case data must be a JSON object", source)
    try:
        request = CaseRequest.model_validate(data)
    except ValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first["loc"]) or "case"
        raise CaseInputError(f"{location}: {first['msg']}", source) from e
    return case_input_from_request(request, reference_date)


def load_case_file(
    path: Union[str, Path],
    reference_date: Optional[date] = None,
) -> CaseInput:
    """
    Read and validate a JSON case file.

    Raises:
        CaseInputError: If the file is unreadable, not JSON, or invalid
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise CaseInputError(f"cannot read case file ({e.strerror or e})", str(path)) from e
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise CaseInputError(f"invalid JSON at line {e.lineno}: {e.msg}", str(path)) from e
    return parse_case(data, str(path), reference_date)


# =============================================================================
# ANALYSIS RESULT
# =============================================================================

def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class CaseAnalysis:
    """
    Complete result of analysing one case.

    Exposes:
    - The evidence graph and its diagnostics
    - Disclosure status and the standard checklist (criminal only)
    - The lens evaluation for the case's practice area
    - Strategies and per-route plans (criminal only)
    - A leakage banner and the filtered terms, if any output had to be redacted
    """
    practice_area: PracticeArea
    graph: EvidenceGraph
    diagnostics: Diagnostics
    disclosure: DisclosureStatus
    lens: LensEvaluation
    pillar_labels: dict[str, str]
    checklist: Optional[DisclosureChecklist] = None
    strategies: list[Strategy] = field(default_factory=list)
    normalized_strategies: list[NormalizedStrategy] = field(default_factory=list)
    route_plans: dict[RouteType, RoutePlan] = field(default_factory=dict)
    banner: Optional[Banner] = None
    filtered_terms: tuple[str, ...] = ()
    reference_date: Optional[date] = None

    # Metadata
    created_at: datetime = field(default_factory=_utcnow)

    @property
    def can_commit_strategy(self) -> bool:
        return self.graph.readiness.can_commit_strategy


# =============================================================================
# SAMPLE DATA (For Demo Purposes)
# =============================================================================

SAMPLE_REVIEW_TEXT = """DEFENCE REVIEW & DISCLOSURE READINESS ASSESSMENT

This document is a procedural-first, evidence-anchored review.
This document is NOT a defence statement.

Case Reference: T20240117
Court: Snaresbrook Crown Court
Defendant: A. Sample
Charge: Wounding with intent, s18 Offences Against the Person Act 1861
Incident Date: 14/02/2024
Custody Status: Conditional bail

1. HEARING HISTORY
Date | Court | Hearing Type | Outcome
12/03/2024 | Snaresbrook Crown Court | PTPH | Not guilty plea entered

2. PACE COMPLIANCE
Caution given at arrest. Interview recorded. Solicitor present throughout.
Custody record not served. Detention lasted 19 hours.

3. EVIDENCE MAP
Evidence Type | Description | Disclosure Status | Notes
CCTV | Shop frontage camera, High Street | Partially disclosed | First 4 minutes only
Witness statement | Complainant account | Disclosed | Describes single punch
Medical | A&E discharge summary | Disclosed | Laceration to left eyebrow
Custody interview | Interview under caution | Disclosed | No comment interview
Body worn video | Arresting officer camera | Not disclosed | Referred to in MG11

4. CCTV / VISUAL MATERIAL OUTSTANDING
- Full unedited CCTV window 22:00 to 22:30
- CCTV continuity log and download path
- BWV from both attending officers

5. OUTSTANDING DISCLOSURE MATERIAL
- MG6C schedule of unused material
- 999 call audio and CAD log

6. INTENT DISTINCTION
The s18 / s20 intent distinction is live: medical evidence describes a single
laceration consistent with one blow and no weapon is alleged.

7. CONCLUSION
- Disclosure is incomplete and the case is not ready for trial preparation
- Outstanding material must be chased before any position is taken
- The intent distinction should be raised with the prosecution

Prepared by: Defence case team
"""

SAMPLE_BUNDLE_TEXT = """Prosecution case summary served for Snaresbrook Crown Court.
The prosecution allege that the defendant struck the complainant outside a
shop on the High Street, causing a cut above the left eye. The complainant
was treated at hospital and discharged the same night.
"""

SAMPLE_CASE: dict[str, Any] = {
    "practice_area": "criminal",
    "case_id": "T20240117",
    "client_name": "A. Sample",
    "charge": {"offence": "s18 OAPA 1861 wounding with intent"},
    "interview_stance": "no_comment",
    "documents": [
        {
            "id": "doc-review",
            "name": "Defence review.pdf",
            "raw_text": SAMPLE_REVIEW_TEXT,
        },
        {
            "id": "doc-bundle",
            "name": "Prosecution bundle.pdf",
            "raw_text": SAMPLE_BUNDLE_TEXT,
            "extracted_json": {
                "criminalMeta": {
                    "prosecutionEvidence": [
                        {"type": "Witness statement", "content": "Statement of complainant"},
                        {"type": "Medical", "content": "Hospital discharge summary"},
                        {
                            "type": "CCTV",
                            "content": "Extract of shop CCTV",
                            "status": "Partially disclosed",
                            "issues": ["Extract only"],
                        },
                    ],
                },
            },
        },
    ],
    "timeline": [
        {"item": "Custody record", "action": "requested", "date": "2024-03-12"},
    ],
}


# =============================================================================
# PIPELINE
# =============================================================================

def analyse_case(
    case_input: CaseInput,
    registry: LensRegistry,
    settings: Optional[EngineSettings] = None,
) -> CaseAnalysis:
    """
    Run every stage for one case.

    Lens, strategy and route output all pass through one leakage screen
    before they are stored, so the banner reflects every redaction.

    Args:
        case_input: Validated case input
        registry: Lens registry used to look up the case's practice area
        settings: Thresholds; read from the environment when None

    Returns:
        CaseAnalysis. Thin or empty document sets still produce a full
        result whose readiness explains what is missing.
    """
    settings = settings or get_settings()
    area = case_input.practice_area
    documents = list(case_input.documents)
    screen = LeakageScreen(area)

    # Stage 1: Evidence graph
    diagnostics = case_input.diagnostics or compute_diagnostics(
        documents,
        min_text_chars=settings.min_text_chars,
        scanned_chars_per_doc=settings.scanned_chars_per_doc,
    )
    graph = build_evidence_graph(
        documents,
        diagnostics,
        min_text_chars=settings.min_text_chars,
        min_review_chars=settings.min_review_chars,
        max_evidence_rows=settings.max_evidence_rows,
        max_outstanding_items=settings.max_outstanding_items,
    )

    # Stage 2: Disclosure
    disclosure = evaluate_disclosure(graph, area)
    checklist = None
    if area.is_criminal:
        checklist = compute_disclosure_checklist(
            document_names=[doc.name for doc in documents if doc.name],
            timeline=case_input.timeline,
            impact_items=case_input.impact_items,
            declared_dependencies=case_input.declared_dependencies,
        )

    # Stage 3: Practice lens
    lens = registry.get(area)
    context = LensContext(
        presence=EvidencePresence.from_graph(graph, case_input.impact_items),
        has_disclosure_gaps=graph.has_disclosure_gaps,
        phase=resolve_phase(case_input.phase, disclosure.is_complete),
        reference_date=case_input.reference_date,
        **case_input.facts,
    )
    evaluation = screen.clean(evaluate_lens(lens, context))

    analysis = CaseAnalysis(
        practice_area=area,
        graph=graph,
        diagnostics=diagnostics,
        disclosure=disclosure,
        lens=evaluation,
        pillar_labels={pillar.id: pillar.label for pillar in lens.pillars},
        checklist=checklist,
        reference_date=case_input.reference_date,
    )

    if area.is_criminal:
        # Stage 4-6: Strategies, route plans, normalisation
        strategies = generate_strategies(
            case_input.charge, graph, disclosure, case_input.interview_stance
        )
        charge = case_input.charge
        section = charge.resolved_section if charge else extract_section(graph.case_meta.charge)
        details = CaseDetails(
            case_id=case_input.case_id or graph.case_meta.case_ref,
            charge=charge.offence if charge else graph.case_meta.charge,
            client_name=case_input.client_name or graph.case_meta.defendant,
            date=case_input.reference_date.isoformat() if case_input.reference_date else None,
        )

        analysis.strategies = strategies
        analysis.normalized_strategies = screen.clean(normalize_strategies(strategies))
        analysis.route_plans = screen.clean(
            build_route_plans(graph, section or None, case_details=details)
        )
    else:
        logger.debug("analysis (%s): no strategy stage for this practice area", area.value)

    analysis.banner = screen.banner
    analysis.filtered_terms = tuple(screen.matched_terms)

    logger.debug(
        "analysis (%s): %d strategies, commit=%s",
        area.value, len(analysis.strategies), analysis.can_commit_strategy,
    )
    return analysis


# =============================================================================
# RESPONSE ENVELOPE
# =============================================================================

def pillars_data(analysis: CaseAnalysis) -> dict[str, Any]:
    lens = analysis.lens
    return {
        "practice_area": analysis.practice_area.value,
        "phase": lens.phase,
        "phase_label": lens.phase_label,
        "pillars": {
            pillar_id: {
                "label": analysis.pillar_labels.get(pillar_id, pillar_id),
                "status": assessment.status.value,
                "reason": assessment.reason,
            }
            for pillar_id, assessment in lens.pillars.items()
        },
        "safety_checks": to_jsonable(lens.safety_checks),
        "irreversible_decisions": to_jsonable(lens.irreversible_decisions),
        "judicial_patterns": to_jsonable(lens.judicial_patterns),
        "visible_tools": list(lens.visible_tools),
        "deadline_checks": to_jsonable(lens.deadline_checks),
    }


def strategies_data(analysis: CaseAnalysis) -> dict[str, Any]:
    return {
        "practice_area": analysis.practice_area.value,
        "can_commit_strategy": analysis.can_commit_strategy,
        "readiness_reasons": list(analysis.graph.readiness.reasons),
        "strategies": to_jsonable(analysis.normalized_strategies),
    }


def routes_data(
    analysis: CaseAnalysis,
    route: Optional[RouteType] = None,
) -> dict[str, Any]:
    plans = analysis.route_plans
    if route is not None:
        plans = {route: plans[route]} if route in plans else {}
    return {
        "practice_area": analysis.practice_area.value,
        "routes": to_jsonable(plans),
    }


def analysis_data(analysis: CaseAnalysis) -> dict[str, Any]:
    return {
        "practice_area": analysis.practice_area.value,
        "graph": to_jsonable(analysis.graph),
        "disclosure": to_jsonable(analysis.disclosure),
        "checklist": to_jsonable(analysis.checklist),
        "lens": pillars_data(analysis),
        "strategies": to_jsonable(analysis.normalized_strategies),
        "routes": to_jsonable(analysis.route_plans),
        "reference_date": to_jsonable(analysis.reference_date),
        "created_at": analysis.created_at.isoformat(),
    }


def build_envelope(
    analysis: CaseAnalysis,
    data: Optional[dict[str, Any]] = None,
) -> dict[str, Any]:
    """
    Transport envelope: {ok, data, banner?, diagnostics?}.

    Diagnostics are attached only when the graph is not ready for a
    committed strategy.
    """
    envelope: dict[str, Any] = {
        "ok": True,
        "data": analysis_data(analysis) if data is None else data,
    }
    if analysis.banner is not None:
        envelope["banner"] = to_jsonable(analysis.banner)
    if not analysis.can_commit_strategy:
        envelope["diagnostics"] = to_jsonable(analysis.diagnostics)
    return envelope


def error_envelope(error: str, source: Optional[str] = None) -> dict[str, Any]:
    envelope: dict[str, Any] = {"ok": False, "error": error}
    if source:
        envelope["source"] = source
    return envelope
