"""
Personal injury lens.

Medical expert evidence gates injury and quantum. Limitation runs three
years from the accident date and is reported as a deadline check.
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


EXPERT_GATED = ("injury_prognosis", "quantum_settlement")


def limitation_check(context: LensContext) -> Optional[DeadlineCheck]:
    if context.reference_date is None:
        return None
    return check_limitation(context.accident_date, context.reference_date)


def _limitation_pressing(context: LensContext) -> bool:
    if context.accident_date is None:
        return False
    check = limitation_check(context)
    return check is not None and check.status is not PillarStatus.SAFE


def _expert_outstanding(context: LensContext) -> bool:
    return context.presence.any_absent(T.EXPERT, T.MEDICAL)


class PersonalInjuryLens(PracticeLens):
    practice_area = PracticeArea.PERSONAL_INJURY

    pillars = (
        Pillar(
            "duty", "Duty",
            evidence_dependency_keys=(T.DUTY, T.RELATIONSHIP, T.STANDARD),
            premature_trigger_keys=(T.DUTY,),
        ),
        Pillar(
            "breach", "Breach",
            evidence_dependency_keys=(T.BREACH, T.NEGLIGENCE, T.STANDARD),
            premature_trigger_keys=(T.BREACH,),
        ),
        Pillar(
            "causation", "Causation",
            evidence_dependency_keys=(T.MEDICAL, T.EXPERT, T.CAUSATION),
            premature_trigger_keys=(T.MEDICAL,),
        ),
        Pillar(
            "injury_prognosis", "Injury / Prognosis",
            evidence_dependency_keys=(T.MEDICAL, T.EXPERT, T.PROGNOSIS, T.INJURY),
            premature_trigger_keys=(T.MEDICAL, T.EXPERT),
        ),
        Pillar(
            "quantum_settlement", "Quantum / Settlement",
            evidence_dependency_keys=(T.MEDICAL, T.EXPERT, T.QUANTUM, T.PART36),
            premature_trigger_keys=(T.MEDICAL, T.EXPERT),
        ),
    )

    irreversible_decisions = (
        IrreversibleDecision(
            "limitation_expiry", "Limitation period expiry",
            "3-year limitation period from accident date - issue proceedings before expiry "
            "(irreversible if missed)",
            always,
        ),
        IrreversibleDecision(
            "part36_response", "Part 36 offer response",
            "Part 36 offer made/received - response period is time-limited and affects costs",
            always,
        ),
        IrreversibleDecision(
            "expert_quantum", "Medical expert for quantum",
            "Medical expert report required before quantum can be established",
            lambda ctx: ctx.has_disclosure_gaps,
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
            "expert_dependency",
            "Quantum assessments typically require medical expert evidence. Proceeding "
            "without expert report weakens quantum arguments.",
            always,
        ),
    )

    safety_checks = (
        SafetyCheck(
            "limitation_approaching", "high",
            "Limitation approaching: Issue proceedings before expiry or risk claim being time-barred.",
            _limitation_pressing,
        ),
        SafetyCheck(
            "settlement_offer_outstanding", "medium",
            "Settlement offer outstanding without instructions: Part 36 offer response "
            "period requires client decision.",
            lambda ctx: ctx.has_disclosure_gaps and ctx.presence.mentions("part36", "part 36", "offer"),
        ),
        SafetyCheck(
            "expert_missing", "high",
            "Medical expert report outstanding. Injury/Quantum pillars are PREMATURE until "
            "expert evidence received.",
            lambda ctx: ctx.has_disclosure_gaps and _expert_outstanding(ctx),
        ),
    )

    tool_visibility = {
        1: ("disclosure", "expert"),
        2: ("strategy", "limitation"),
        3: ("quantum", "outcome"),
    }

    def premature_override(self, pillar: Pillar, context: LensContext) -> Optional[str]:
        if pillar.id in EXPERT_GATED and _expert_outstanding(context):
            return "Medical expert report outstanding"
        return None

    def deadline_checks(self, context: LensContext) -> dict[str, DeadlineCheck]:
        check = limitation_check(context)
        return {"limitation": check} if check else {}
