"""
Housing disrepair lens.

Notice and Awaab's Law deadlines drive the two UNSAFE pillars: without a
recorded notice the landlord's knowledge cannot be asserted, and an
elapsed statutory deadline cannot be cured.
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
from .deadlines import check_awaabs_law


def awaabs_check(context: LensContext) -> Optional[DeadlineCheck]:
    """Awaab's Law check, or None without a reference date."""
    if context.reference_date is None:
        return None
    return check_awaabs_law(
        context.hazard_type,
        context.notice_date,
        context.vulnerability_flags,
        context.investigation_date,
        context.work_start_date,
        context.reference_date,
    )


def _awaabs_status(context: LensContext) -> Optional[PillarStatus]:
    check = awaabs_check(context)
    return check.status if check else None


def notice_missing(context: LensContext) -> bool:
    return context.presence.any_absent(T.NOTICE)


def notice_date_unrecorded(context: LensContext) -> bool:
    return bool(context.hazard_type) and context.notice_date is None


class HousingLens(PracticeLens):
    practice_area = PracticeArea.HOUSING_DISREPAIR

    pillars = (
        Pillar(
            "duty_standard", "Duty / Standard",
            evidence_dependency_keys=(T.TENANCY, T.LANDLORD, T.DUTY),
            premature_trigger_keys=(T.TENANCY,),
        ),
        Pillar(
            "disrepair_condition", "Disrepair Condition",
            evidence_dependency_keys=(T.INSPECTION, T.PHOTOGRAPH, T.REPORT, T.DEFECT),
            premature_trigger_keys=(T.INSPECTION,),
        ),
        Pillar(
            "notice_knowledge", "Notice & Knowledge",
            evidence_dependency_keys=(T.NOTICE, T.KNOWLEDGE, T.COMPLAINT),
            unsafe_trigger_keys=(T.NOTICE,),
        ),
        Pillar(
            "risk_health_impact", "Risk / Health Impact",
            evidence_dependency_keys=(T.MEDICAL, T.INJURY, T.HEALTH, T.HAZARD),
            premature_trigger_keys=(T.MEDICAL,),
        ),
        Pillar(
            "compliance_enforcement", "Compliance / Enforcement",
            evidence_dependency_keys=(T.AWAABS, T.DEADLINE, T.ENFORCEMENT, T.OMBUDSMAN),
            unsafe_trigger_keys=(T.AWAABS,),
        ),
    )

    irreversible_decisions = (
        IrreversibleDecision(
            "issue_claim_injunction", "Issue claim / seek injunction",
            "Issue proceedings or seek urgent injunction - decision affects case timeline and costs",
            always,
        ),
        IrreversibleDecision(
            "escalate_ombudsman", "Escalate to Environmental Health / Ombudsman",
            "Escalate to Environmental Health or Housing Ombudsman - may affect landlord "
            "response and case strategy",
            lambda ctx: ctx.has_disclosure_gaps,
        ),
        IrreversibleDecision(
            "notice_knowledge", "Notice & Knowledge recording",
            "Notice date and method of knowledge must be recorded before liability can be established",
            always,
        ),
        IrreversibleDecision(
            "awaabs_deadline", "Awaab's Law deadline",
            "Awaab's Law deadlines (7-day assessment, 28-day repair) are statutory and "
            "cannot be extended",
            always,
        ),
    )

    judicial_patterns = (
        JudicialPattern(
            "awaabs_compliance",
            "Courts are generally slow to accept landlord defences where Awaab's Law "
            "deadlines have been missed without clear justification.",
            lambda ctx: ctx.has_disclosure_gaps,
        ),
        JudicialPattern(
            "notice_requirement",
            "Notice and knowledge are threshold requirements. Without clear evidence of "
            "when and how the landlord knew, liability arguments are weakened.",
            always,
        ),
    )

    safety_checks = (
        SafetyCheck(
            "awaabs_breach", "high",
            "Awaab's Law: Statutory deadline breach detected. Requires urgent action.",
            lambda ctx: _awaabs_status(ctx) is PillarStatus.UNSAFE,
        ),
        SafetyCheck(
            "notice_missing", "high",
            "Notice missing: Unsafe to assert knowledge without recorded notice date and method.",
            notice_missing,
        ),
        SafetyCheck(
            "deadline_passed", "high",
            "Deadline passed: Escalation window - consider Environmental Health / Ombudsman action.",
            lambda ctx: (
                ctx.has_disclosure_gaps
                and ctx.presence.any_absent(T.AWAABS, T.DEADLINE)
            ),
        ),
    )

    tool_visibility = {
        1: ("disclosure", "notice"),
        2: ("strategy", "awaabs"),
        3: ("quantum", "outcome"),
    }

    unsafe_reasons = {
        "notice_knowledge": "Notice date or method of knowledge not recorded - unsafe to assert knowledge",
        "compliance_enforcement": "Awaab's Law deadline breach detected - statutory deadline elapsed",
    }

    premature_reasons = {
        "notice_knowledge": "Notice date not recorded",
        "compliance_enforcement": "Awaab's Law deadline approaching or not yet assessed",
    }

    safe_reasons = {
        "duty_standard": "Evidence present and deadlines met",
        "disrepair_condition": "Evidence present and deadlines met",
        "notice_knowledge": "Evidence present and deadlines met",
        "risk_health_impact": "Evidence present and deadlines met",
        "compliance_enforcement": "Awaab's Law deadlines met and compliance verified",
    }

    def unsafe_override(self, pillar: Pillar, context: LensContext) -> Optional[str]:
        if pillar.id == "compliance_enforcement" and _awaabs_status(context) is PillarStatus.UNSAFE:
            return self.unsafe_reasons["compliance_enforcement"]
        return None

    def premature_override(self, pillar: Pillar, context: LensContext) -> Optional[str]:
        if pillar.id == "notice_knowledge" and notice_date_unrecorded(context):
            return self.premature_reasons["notice_knowledge"]
        if pillar.id == "compliance_enforcement":
            check = awaabs_check(context)
            if check and check.status is PillarStatus.PREMATURE:
                return check.reason
        return None

    def deadline_checks(self, context: LensContext) -> dict[str, DeadlineCheck]:
        check = awaabs_check(context)
        return {"awaabs_law": check} if check else {}
