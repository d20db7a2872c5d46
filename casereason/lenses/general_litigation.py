"""
General litigation lens.

Disclosure gaps and limitation are the two hard stops; everything else
is PREMATURE until the cause of action, defence and quantum are evidenced.
"""

from __future__ import annotations

from typing import Optional

from ..domain import PracticeArea
from .base import (
    DeadlineCheck,
    EvidenceTag as T,
    IrreversibleDecision,
    JudicialPattern,
    LensContext,
    Pillar,
    PillarStatus,
    PracticeLens,
    SafetyCheck,
    always,
)
from .deadlines import check_limitation


def limitation_check(context: LensContext) -> Optional[DeadlineCheck]:
    if context.reference_date is None or context.limitation_start_date is None:
        return None
    return check_limitation(
        context.limitation_start_date,
        context.reference_date,
        missing_reason="Limitation start date not recorded",
    )


def limitation_unsafe(context: LensContext) -> bool:
    if context.limitation_expired:
        return True
    check = limitation_check(context)
    return check is not None and check.status is PillarStatus.UNSAFE


def limitation_pressing(context: LensContext) -> bool:
    check = limitation_check(context)
    return limitation_unsafe(context) or (
        check is not None and check.status is PillarStatus.PREMATURE
    )


class GeneralLitigationLens(PracticeLens):
    practice_area = PracticeArea.GENERAL_LITIGATION

    pillars = (
        Pillar(
            "cause_action", "Cause of Action",
            evidence_dependency_keys=(T.CAUSE, T.ACTION, T.ELEMENTS),
            premature_trigger_keys=(T.CAUSE,),
        ),
        Pillar(
            "evidence_disclosure", "Evidence / Disclosure",
            evidence_dependency_keys=(T.EVIDENCE, T.DOCUMENT, T.DISCLOSURE),
            unsafe_trigger_keys=(T.DISCLOSURE,),
        ),
        Pillar(
            "defences_admissions", "Defences / Admissions",
            evidence_dependency_keys=(T.DEFENCE, T.ADMISSION, T.RESPONSE),
            premature_trigger_keys=(T.DEFENCE,),
        ),
        Pillar(
            "procedure_deadlines", "Procedure / Deadlines",
            evidence_dependency_keys=(T.DISCLOSURE, T.PROTOCOL, T.DEADLINE, T.LIMITATION),
            unsafe_trigger_keys=(T.DISCLOSURE, T.LIMITATION),
        ),
        Pillar(
            "remedy_quantum", "Remedy / Quantum",
            evidence_dependency_keys=(T.REMEDY, T.QUANTUM, T.DAMAGES),
            premature_trigger_keys=(T.QUANTUM,),
        ),
    )

    irreversible_decisions = (
        IrreversibleDecision(
            "limitation", "Limitation period",
            "Limitation period expiry - issue proceedings before expiry (irreversible if missed)",
            always,
        ),
        IrreversibleDecision(
            "issue_proceedings", "Issue proceedings",
            "Issue proceedings - decision affects case timeline, costs, and strategy",
            always,
        ),
        IrreversibleDecision(
            "admissions_recorded", "Admissions recorded",
            "Admissions made or recorded - cannot be withdrawn without court permission",
            always,
        ),
    )

    judicial_patterns = (
        JudicialPattern(
            "limitation_awareness",
            "Courts are generally slow to accept limitation extension arguments without "
            "clear justification. Issue proceedings before expiry.",
            lambda ctx: ctx.has_disclosure_gaps,
        ),
        JudicialPattern(
            "issue_timing",
            "Issue timing affects leverage. Early issue may strengthen position, but "
            "requires sufficient evidence.",
            always,
        ),
    )

    safety_checks = (
        SafetyCheck(
            "limitation_approaching", "high",
            "Limitation approaching: Issue proceedings before expiry or risk claim being time-barred.",
            limitation_pressing,
        ),
        SafetyCheck(
            "admissions_inconsistency", "medium",
            "Admissions inconsistencies: Admissions recorded but position may be "
            "inconsistent - verify before proceeding.",
            lambda ctx: ctx.has_disclosure_gaps and ctx.presence.any_absent(T.ADMISSION),
        ),
        SafetyCheck(
            "issue_premature", "medium",
            "Unsafe to rely on until evidence arrives: Issue proceedings requires sufficient evidence.",
            lambda ctx: ctx.has_disclosure_gaps and ctx.presence.any_absent(T.EVIDENCE),
        ),
    )

    tool_visibility = {
        1: ("disclosure",),
        2: ("strategy", "limitation"),
        3: ("outcome",),
    }

    unsafe_reasons = {
        "evidence_disclosure": "Disclosure gaps create procedural risk",
        "procedure_deadlines": "Limitation period expired or approaching - issue proceedings required",
    }

    premature_reasons = {
        "procedure_deadlines": "Limitation period approaching or deadline not recorded",
    }

    def unsafe_override(self, pillar: Pillar, context: LensContext) -> Optional[str]:
        if pillar.id == "evidence_disclosure" and context.has_disclosure_gaps:
            return self.unsafe_reasons["evidence_disclosure"]
        if pillar.id == "procedure_deadlines" and limitation_unsafe(context):
            return self.unsafe_reasons["procedure_deadlines"]
        return None

    def premature_override(self, pillar: Pillar, context: LensContext) -> Optional[str]:
        if pillar.id == "procedure_deadlines" and limitation_pressing(context):
            return self.premature_reasons["procedure_deadlines"]
        return None

    def deadline_checks(self, context: LensContext) -> dict[str, DeadlineCheck]:
        check = limitation_check(context)
        return {"limitation": check} if check else {}
