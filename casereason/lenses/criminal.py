"""
Criminal lens.

Pillars follow the s18/s20 offence structure: who did it, what was done,
how serious the injury is, what was intended, and whether the procedural
position is stable enough to build on.
"""

from __future__ import annotations

from typing import Optional

from ..domain import PracticeArea
from .base import (
    EvidenceTag as T,
    IrreversibleDecision,
    JudicialPattern,
    LensContext,
    Pillar,
    PracticeLens,
    SafetyCheck,
)


FIGHT = "fight_charge"
REDUCE = "charge_reduction"
OUTCOME = "outcome_management"


def _strategy_is(route: str):
    return lambda ctx: ctx.primary_strategy == route


def _denial_with_outcome(ctx: LensContext) -> bool:
    return ctx.primary_strategy == OUTCOME and ctx.position_denies()


def _plea_window_open(ctx: LensContext) -> bool:
    return not ctx.has_ptph and ctx.phase >= 2


class CriminalLens(PracticeLens):
    practice_area = PracticeArea.CRIMINAL

    pillars = (
        Pillar(
            "identification", "Identification",
            evidence_dependency_keys=(T.CCTV, T.BWV, T.IDENTIFICATION),
            premature_trigger_keys=(T.CCTV, T.IDENTIFICATION),
        ),
        Pillar(
            "act_causation", "Act & Causation",
            evidence_dependency_keys=(T.CONTINUITY, T.CALL_999),
            premature_trigger_keys=(T.CONTINUITY,),
        ),
        Pillar(
            "injury_classification", "Injury / Classification",
            evidence_dependency_keys=(T.MEDICAL, T.INJURY),
            premature_trigger_keys=(T.MEDICAL,),
        ),
        Pillar(
            "intent", "Intent (s18 vs s20)",
            evidence_dependency_keys=(T.MEDICAL, T.CCTV),
            premature_trigger_keys=(T.MEDICAL, T.CCTV),
        ),
        Pillar("procedure_disclosure", "Procedure / Disclosure"),
    )

    irreversible_decisions = (
        IrreversibleDecision(
            "ptph_plea", "PTPH plea decision",
            "PTPH plea decision window approaching",
            lambda ctx: not ctx.has_ptph,
        ),
        IrreversibleDecision(
            "disclosure_app", "Disclosure application timing",
            "Disclosure application timing affects leverage",
            lambda ctx: ctx.has_disclosure_gaps,
        ),
        IrreversibleDecision(
            "trial_theory", "Trial theory finalisation",
            "Trial theory finalisation before disclosure may limit flexibility",
            _strategy_is(FIGHT),
        ),
    )

    judicial_patterns = (
        JudicialPattern(
            "turnbull_compliance",
            "Courts are generally slow to accept identification challenges without "
            "early Turnbull compliance requests.",
            _strategy_is(FIGHT),
        ),
        JudicialPattern(
            "disclosure_before_theory",
            "Judges often expect disclosure requests to precede trial theory finalisation.",
            _strategy_is(FIGHT),
        ),
        JudicialPattern(
            "late_disclosure_scepticism",
            "Late disclosure applications may attract scepticism if not preceded by "
            "documented chase sequences.",
            lambda ctx: ctx.has_disclosure_gaps and ctx.primary_strategy == FIGHT,
        ),
        JudicialPattern(
            "ptph_flexibility",
            "Trial posture established before PTPH may limit later flexibility if "
            "disclosure changes the case.",
            lambda ctx: not ctx.has_ptph and ctx.primary_strategy == FIGHT,
        ),
        JudicialPattern(
            "charge_reduction_medical",
            "Charge reduction arguments are typically only tolerated where medical "
            "evidence clearly supports recklessness over intent.",
            _strategy_is(REDUCE),
        ),
        JudicialPattern(
            "early_intent_challenge",
            "Judges often expect early indication of intent challenge, not late-stage negotiation.",
            _strategy_is(REDUCE),
        ),
        JudicialPattern(
            "medical_gaps_charge_reduction",
            "Medical evidence gaps may undermine charge reduction if not addressed before PTPH.",
            lambda ctx: ctx.has_disclosure_gaps and ctx.primary_strategy == REDUCE,
        ),
        JudicialPattern(
            "plea_timing_irreversible",
            "Plea timing decisions are generally irreversible once PTPH passes.",
            _strategy_is(OUTCOME),
        ),
        JudicialPattern(
            "consistent_mitigation",
            "Courts typically expect consistent mitigation language across position "
            "statements and sentencing submissions.",
            _strategy_is(OUTCOME),
        ),
        JudicialPattern(
            "inconsistent_position",
            "Inconsistent positions between recorded defence stance and plea may "
            "attract judicial scrutiny.",
            lambda ctx: (
                ctx.primary_strategy == OUTCOME
                and "deny" in (ctx.saved_position_text or "").lower()
            ),
        ),
    )

    safety_checks = (
        SafetyCheck(
            "position_mitigation_tension", "high",
            "Potential inconsistency: Position contains denial but outcome management "
            "strategy active. Requires solicitor confirmation.",
            _denial_with_outcome,
        ),
        SafetyCheck(
            "disclosure_dependency_unmet", "high",
            "Disclosure dependency unmet: Key disclosure items (CCTV/continuity/BWV/999) "
            "outstanding. Unsafe to rely on trial strategy until evidence arrives.",
            lambda ctx: (
                ctx.primary_strategy == FIGHT
                and ctx.has_disclosure_gaps
                and ctx.presence.mentions("cctv", "continuity", "bwv", "999")
            ),
        ),
        SafetyCheck(
            "irreversible_decision_risk", "high",
            "Irreversible decision risk: Plea direction while position still denial "
            "without explicit pivot recorded. Requires solicitor confirmation.",
            lambda ctx: _plea_window_open(ctx) and _denial_with_outcome(ctx),
        ),
        SafetyCheck(
            "charge_reduction_medical", "high",
            "Unsafe to rely on until evidence arrives: Charge reduction strategy "
            "requires medical evidence currently outstanding.",
            lambda ctx: (
                ctx.primary_strategy == REDUCE
                and ctx.has_disclosure_gaps
                and ctx.presence.mentions("medical", "injury")
            ),
        ),
    )

    tool_visibility = {
        1: ("disclosure", "pace", "hearings"),
        2: ("bail", "strategy", "position"),
        3: ("sentencing", "mitigation"),
    }

    unsafe_reasons = {
        "procedure_disclosure": "Disclosure gaps create procedural risk",
    }

    safe_reasons = {
        "identification": "Identification evidence present",
        "act_causation": "Act and causation evidence present",
        "injury_classification": "Medical evidence present",
        "intent": "Evidence present to assess intent",
        "procedure_disclosure": "Disclosure position stabilised",
    }

    def unsafe_override(self, pillar: Pillar, context: LensContext) -> Optional[str]:
        if pillar.id == "procedure_disclosure" and context.has_disclosure_gaps:
            return self.unsafe_reasons["procedure_disclosure"]
        return None
