"""
Family lens.

Safeguarding sources and fact-finding gate every concession. An engaged
s31 threshold without fact-finding is UNSAFE to concede.
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
    always,
)


SAFEGUARDING_SOURCES = (T.SAFEGUARDING, T.POLICE, T.SOCIAL, T.MARAC)

THRESHOLD_WITHOUT_FINDINGS_REASON = (
    "s31 threshold engaged but fact-finding missing - unsafe to concede without fact-finding"
)


def safeguarding_missing(context: LensContext) -> bool:
    return context.has_disclosure_gaps and context.presence.any_absent(*SAFEGUARDING_SOURCES)


def fact_finding_missing(context: LensContext) -> bool:
    return context.has_disclosure_gaps and context.presence.any_absent(T.FACT_FINDING, T.HEARING)


def threshold_without_findings(context: LensContext) -> bool:
    return bool(context.welfare_threshold_engaged) and context.presence.any_absent(T.FACT_FINDING)


class FamilyLens(PracticeLens):
    practice_area = PracticeArea.FAMILY

    pillars = (
        Pillar(
            "threshold_welfare", "Threshold / Welfare Framework",
            evidence_dependency_keys=(T.THRESHOLD, T.WELFARE, T.S31),
            unsafe_trigger_keys=(T.SAFEGUARDING,),
        ),
        Pillar(
            "safeguarding_evidence", "Safeguarding Evidence",
            evidence_dependency_keys=(T.SAFEGUARDING, T.POLICE, T.SOCIAL, T.MARAC, T.GP, T.SCHOOL),
            unsafe_trigger_keys=(T.SAFEGUARDING,),
        ),
        Pillar(
            "findings_fact", "Findings of Fact",
            evidence_dependency_keys=(T.FACT_FINDING, T.HEARING, T.ALLEGATION),
            unsafe_trigger_keys=(T.FACT_FINDING,),
        ),
        Pillar(
            "risk_management", "Risk Management",
            evidence_dependency_keys=(T.RISK, T.ASSESSMENT, T.SAFETY),
            premature_trigger_keys=(T.ASSESSMENT,),
        ),
        Pillar(
            "orders_timetable", "Orders / Timetable",
            evidence_dependency_keys=(T.ORDER, T.TIMETABLE, T.HEARING),
            premature_trigger_keys=(T.TIMETABLE,),
        ),
    )

    irreversible_decisions = (
        IrreversibleDecision(
            "s31_threshold", "s31 threshold engagement",
            "s31 threshold engaged - LA involvement present. Conceding or settling without "
            "fact-finding is unsafe.",
            always,
        ),
        IrreversibleDecision(
            "fact_finding", "Fact-finding dependency",
            "Unresolved facts require fact-finding hearing before settlement or concession "
            "- unsafe to proceed without",
            lambda ctx: ctx.has_disclosure_gaps,
        ),
        IrreversibleDecision(
            "safeguarding_checklist", "Safeguarding evidence checklist",
            "Safeguarding evidence (police logs, social services, MARAC, GP/school) must be "
            "complete before final arrangements",
            always,
        ),
    )

    judicial_patterns = (
        JudicialPattern(
            "s31_threshold",
            "Courts are generally slow to accept concessions or settlements where s31 "
            "threshold is engaged without fact-finding. LA involvement requires careful handling.",
            lambda ctx: ctx.has_disclosure_gaps,
        ),
        JudicialPattern(
            "fact_finding_requirement",
            "Unresolved facts typically require fact-finding hearing. Proceeding to "
            "settlement or concession without fact-finding weakens position.",
            always,
        ),
    )

    safety_checks = (
        SafetyCheck(
            "safeguarding_evidence_missing", "high",
            "Safeguarding evidence missing: Police logs, social services, MARAC, GP/school "
            "records required before final arrangements.",
            safeguarding_missing,
        ),
        SafetyCheck(
            "fact_finding_needed", "high",
            "Fact-finding needed before final resolution: Unresolved allegations require "
            "fact-finding hearing before settlement or concession.",
            fact_finding_missing,
        ),
        SafetyCheck(
            "s31_engaged", "high",
            "Potential inconsistency: s31 threshold engaged but position contains "
            "concession. Requires fact-finding before settlement.",
            lambda ctx: bool(ctx.welfare_threshold_engaged) and ctx.has_disclosure_gaps,
        ),
    )

    tool_visibility = {
        1: ("disclosure", "safeguarding"),
        2: ("strategy", "fact_finding"),
        3: ("outcome",),
    }

    unsafe_reasons = {
        "safeguarding_evidence": (
            "Safeguarding evidence missing (police logs, social services, MARAC, GP/school) "
            "- unsafe to proceed to final arrangements"
        ),
        "findings_fact": (
            "Fact-finding required before settlement or concession - unresolved allegations present"
        ),
        "threshold_welfare": (
            "Safeguarding evidence missing - unsafe to assess threshold or welfare without it"
        ),
    }

    premature_reasons = {
        "safeguarding_evidence": "Safeguarding evidence checklist incomplete",
        "findings_fact": "Fact-finding hearing not yet completed",
    }

    def unsafe_override(self, pillar: Pillar, context: LensContext) -> Optional[str]:
        if pillar.id == "safeguarding_evidence" and safeguarding_missing(context):
            return self.unsafe_reasons["safeguarding_evidence"]
        if pillar.id == "findings_fact" and fact_finding_missing(context):
            return self.unsafe_reasons["findings_fact"]
        if pillar.id == "threshold_welfare" and threshold_without_findings(context):
            return THRESHOLD_WITHOUT_FINDINGS_REASON
        return None
