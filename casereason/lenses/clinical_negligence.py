"""
Clinical negligence lens.

Breach and causation cannot be established without expert evidence, and
the Pre-Action Protocol response window gates issue. No Bolam/Bolitho
conclusions are drawn.
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
from .deadlines import check_limitation, check_pre_action_protocol


def protocol_check(context: LensContext) -> Optional[DeadlineCheck]:
    """Pre-Action Protocol check, or None when nothing about it is recorded."""
    if context.reference_date is None or context.letter_of_claim_sent is None:
        return None
    return check_pre_action_protocol(
        context.letter_of_claim_sent,
        context.letter_of_claim_date,
        context.response_received,
        context.reference_date,
    )


def _protocol_elapsed(context: LensContext) -> bool:
    check = protocol_check(context)
    return check is not None and check.status is PillarStatus.UNSAFE


def _protocol_incomplete(context: LensContext) -> bool:
    return (
        context.presence.any_absent(T.PROTOCOL, T.LETTER) and context.has_disclosure_gaps
    ) or _protocol_elapsed(context)


class ClinicalNegligenceLens(PracticeLens):
    practice_area = PracticeArea.CLINICAL_NEGLIGENCE

    pillars = (
        Pillar(
            "duty", "Duty",
            evidence_dependency_keys=(T.DUTY, T.RELATIONSHIP, T.STANDARD),
            premature_trigger_keys=(T.DUTY,),
        ),
        Pillar(
            "breach", "Breach (expert)",
            evidence_dependency_keys=(T.EXPERT, T.BREACH, T.MEDICAL),
            unsafe_trigger_keys=(T.EXPERT,),
        ),
        Pillar(
            "causation", "Causation (expert)",
            evidence_dependency_keys=(T.EXPERT, T.MEDICAL, T.CAUSATION),
            unsafe_trigger_keys=(T.EXPERT,),
        ),
        Pillar(
            "injury_prognosis", "Injury / Prognosis",
            evidence_dependency_keys=(T.EXPERT, T.MEDICAL, T.PROGNOSIS, T.INJURY),
            premature_trigger_keys=(T.EXPERT, T.MEDICAL),
        ),
        Pillar(
            "protocol_compliance", "Protocol / Compliance",
            evidence_dependency_keys=(T.DISCLOSURE, T.PROTOCOL, T.LETTER, T.RESPONSE),
            unsafe_trigger_keys=(T.DISCLOSURE, T.PROTOCOL),
        ),
    )

    irreversible_decisions = (
        IrreversibleDecision(
            "pre_action_protocol", "Pre-Action Protocol compliance",
            "Letter of claim sent and 4-month response window - protocol steps are mandatory",
            always,
        ),
        IrreversibleDecision(
            "expert_breach", "Breach expert dependency",
            "Breach expert report required before breach can be established - unsafe to "
            "proceed without",
            lambda ctx: ctx.has_disclosure_gaps,
        ),
        IrreversibleDecision(
            "expert_causation", "Causation expert dependency",
            "Causation expert report required before causation can be established - unsafe "
            "to proceed without",
            lambda ctx: ctx.has_disclosure_gaps,
        ),
        IrreversibleDecision(
            "limitation_date_knowledge", "Limitation / date of knowledge",
            "3-year limitation from date of knowledge (if available) - issue proceedings "
            "before expiry",
            always,
        ),
    )

    judicial_patterns = (
        JudicialPattern(
            "protocol_compliance",
            "Courts are generally slow to accept cases where Pre-Action Protocol has not "
            "been followed. Letter of claim and response window must be observed.",
            lambda ctx: ctx.has_disclosure_gaps,
        ),
        JudicialPattern(
            "expert_breach_dependency",
            "Breach of duty typically requires expert evidence. Proceeding without breach "
            "expert weakens breach arguments.",
            always,
        ),
    )

    safety_checks = (
        SafetyCheck(
            "no_breach_expert", "high",
            "Expert missing: Breach expert report outstanding. Breach pillar is UNSAFE "
            "without expert.",
            lambda ctx: ctx.presence.any_absent(T.EXPERT, T.BREACH),
        ),
        SafetyCheck(
            "no_causation_expert", "high",
            "Expert missing: Causation expert report outstanding. Causation pillar is "
            "UNSAFE without expert.",
            lambda ctx: ctx.presence.any_absent(T.EXPERT, T.CAUSATION),
        ),
        SafetyCheck(
            "protocol_steps_incomplete", "high",
            "Protocol steps incomplete: Pre-Action Protocol letter of claim or response "
            "missing. Required before issue.",
            _protocol_incomplete,
        ),
    )

    tool_visibility = {
        1: ("disclosure", "expert"),
        2: ("strategy", "protocol"),
        3: ("quantum", "outcome"),
    }

    unsafe_reasons = {
        "breach": "Breach expert report outstanding - unsafe to proceed without expert",
        "causation": "Causation expert report outstanding - unsafe to proceed without expert",
        "protocol_compliance": "Pre-Action Protocol steps incomplete - letter of claim or response missing",
    }

    def unsafe_override(self, pillar: Pillar, context: LensContext) -> Optional[str]:
        presence = context.presence
        if pillar.id == "breach" and presence.any_absent(T.EXPERT, T.BREACH):
            return self.unsafe_reasons["breach"]
        if pillar.id == "causation" and presence.any_absent(T.EXPERT, T.CAUSATION):
            return self.unsafe_reasons["causation"]
        if pillar.id == "protocol_compliance" and _protocol_incomplete(context):
            return self.unsafe_reasons["protocol_compliance"]
        return None

    def premature_override(self, pillar: Pillar, context: LensContext) -> Optional[str]:
        if pillar.id == "protocol_compliance":
            check = protocol_check(context)
            if check and check.status is PillarStatus.PREMATURE:
                return check.reason
        return None

    def deadline_checks(self, context: LensContext) -> dict[str, DeadlineCheck]:
        if context.reference_date is None:
            return {}
        checks = {}
        protocol = protocol_check(context)
        if protocol:
            checks["pre_action_protocol"] = protocol
        if context.date_of_knowledge is not None:
            checks["limitation"] = check_limitation(
                context.date_of_knowledge, context.reference_date
            )
        return checks
