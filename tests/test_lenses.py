"""
Tests for the Practice Lens Engine.

These tests verify:
1. Evidence presence is driven only by CRITICAL impact items
2. Pillar status precedence: UNSAFE, then PREMATURE, then SAFE
3. Each lens's domain overrides and deadline checks
4. Phase-gated decisions and tool visibility
"""

from datetime import date

from casereason.domain import CaseMeta, EvidenceGraph, ImpactItem, Readiness
from casereason.evidence import Severity, create_gap
from casereason.lenses.base import (
    EvidencePresence,
    EvidenceTag,
    LensContext,
    PillarStatus,
    evaluate_lens,
    impact_items_from_graph,
    resolve_phase,
)
from casereason.lenses.clinical_negligence import ClinicalNegligenceLens
from casereason.lenses.criminal import CriminalLens
from casereason.lenses.family import THRESHOLD_WITHOUT_FINDINGS_REASON, FamilyLens
from casereason.lenses.general_litigation import GeneralLitigationLens
from casereason.lenses.housing import HousingLens
from casereason.lenses.personal_injury import PersonalInjuryLens


def make_context(critical=(), gaps=False, **kwargs):
    """Context whose CRITICAL items are named by `critical`."""
    items = [ImpactItem(name, "CRITICAL", missing=True) for name in critical]
    return LensContext(
        presence=EvidencePresence.from_items(items),
        has_disclosure_gaps=gaps,
        **kwargs,
    )


def statuses(lens, context):
    return {pid: a.status for pid, a in evaluate_lens(lens, context).pillars.items()}


# =============================================================================
# EVIDENCE PRESENCE
# =============================================================================

class TestEvidencePresence:
    """Test tag presence semantics."""

    def test_everything_present_by_default(self):
        presence = EvidencePresence()
        assert all(presence.is_present(tag) for tag in EvidenceTag)

    def test_critical_item_absents_its_tags(self):
        presence = EvidencePresence.from_items([ImpactItem("Medical records", "CRITICAL")])
        assert not presence.is_present(EvidenceTag.MEDICAL)
        assert presence.is_present(EvidenceTag.CCTV)

    def test_non_critical_item_is_ignored(self):
        presence = EvidencePresence.from_items([ImpactItem("Medical records", "HIGH")])
        assert presence.is_present(EvidenceTag.MEDICAL)
        assert presence.mentions("medical")

    def test_keywords_match_word_prefixes_only(self):
        presence = EvidencePresence.from_items([ImpactItem("Biomedical assay", "CRITICAL")])
        assert presence.is_present(EvidenceTag.MEDICAL)

    def test_alternate_spellings(self):
        presence = EvidencePresence.from_items([
            ImpactItem("Body worn footage", "CRITICAL"),
            ImpactItem("Part 36 offer", "CRITICAL"),
        ])
        assert not presence.is_present(EvidenceTag.BWV)
        assert not presence.is_present(EvidenceTag.PART36)

    def test_impact_items_from_graph(self):
        graph = EvidenceGraph(
            case_meta=CaseMeta(),
            evidence_items=(),
            disclosure_gaps=(
                create_gap("CCTV", "Full window", Severity.HIGH),
                create_gap("Forensic", "Lab notes", Severity.MEDIUM),
            ),
            contradictions=(),
            readiness=Readiness(True),
        )
        items = impact_items_from_graph(graph)
        assert [(i.name, i.urgency) for i in items] == [
            ("CCTV Full window", "CRITICAL"),
            ("Forensic Lab notes", "MEDIUM"),
        ]
        presence = EvidencePresence.from_graph(graph)
        assert not presence.is_present(EvidenceTag.CCTV)
        assert presence.mentions("lab notes")


# =============================================================================
# PHASES
# =============================================================================

class TestPhases:
    """Test phase resolution and phase-gated output."""

    def test_resolve_phase(self):
        assert resolve_phase(None, disclosure_complete=False) == 1
        assert resolve_phase(None, disclosure_complete=True) == 2
        assert resolve_phase(3, disclosure_complete=False) == 3
        assert resolve_phase(9, disclosure_complete=False) == 3
        assert resolve_phase(0, disclosure_complete=True) == 1

    def test_decisions_hidden_in_phase_one(self):
        lens = CriminalLens()
        assert lens.active_decisions(make_context(gaps=True, phase=1)) == []
        ids = [d.id for d in lens.active_decisions(make_context(gaps=True, phase=2))]
        assert ids == ["ptph_plea", "disclosure_app"]

    def test_tools_accumulate_by_phase(self):
        lens = CriminalLens()
        assert lens.visible_tools(1) == ["disclosure", "pace", "hearings"]
        assert lens.visible_tools(3)[-2:] == ["sentencing", "mitigation"]
        assert len(lens.visible_tools(3)) == 8

    def test_phase_label(self):
        evaluation = evaluate_lens(CriminalLens(), make_context(phase=2))
        assert evaluation.phase_label == "Positioning & Options"


# =============================================================================
# CRIMINAL
# =============================================================================

class TestCriminalLens:
    """Test the criminal lens."""

    def test_all_safe_without_gaps(self):
        result = statuses(CriminalLens(), make_context())
        assert set(result.values()) == {PillarStatus.SAFE}

    def test_gaps_make_procedure_unsafe(self):
        evaluation = evaluate_lens(CriminalLens(), make_context(gaps=True))
        assert evaluation.status_of("procedure_disclosure") is PillarStatus.UNSAFE
        assert evaluation.pillars["procedure_disclosure"].reason == (
            "Disclosure gaps create procedural risk"
        )
        assert evaluation.unsafe_pillars == ["procedure_disclosure"]

    def test_missing_cctv_is_premature(self):
        result = statuses(CriminalLens(), make_context(critical=["CCTV footage"]))
        assert result["identification"] is PillarStatus.PREMATURE
        assert result["intent"] is PillarStatus.PREMATURE
        assert result["injury_classification"] is PillarStatus.SAFE

    def test_missing_medical(self):
        result = statuses(CriminalLens(), make_context(critical=["Medical report"]))
        assert result["injury_classification"] is PillarStatus.PREMATURE
        assert result["intent"] is PillarStatus.PREMATURE

    def test_reason_for_other_status(self):
        lens = CriminalLens()
        pillar = lens.get_pillar("identification")
        context = make_context()
        assert lens.get_pillar_reason(pillar, PillarStatus.SAFE, context) == (
            "Identification evidence present"
        )
        assert lens.get_pillar_reason(pillar, PillarStatus.UNSAFE, context) == "Unsafe to proceed"

    def test_fight_patterns(self):
        context = make_context(gaps=True, primary_strategy="fight_charge")
        ids = [p.id for p in CriminalLens().active_patterns(context)]
        assert ids == [
            "turnbull_compliance",
            "disclosure_before_theory",
            "late_disclosure_scepticism",
            "ptph_flexibility",
        ]

    def test_denial_with_outcome_strategy(self):
        context = make_context(
            primary_strategy="outcome_management",
            saved_position_text="Client denies the assault",
            phase=2,
        )
        ids = [f.id for f in CriminalLens().run_safety_checks(context)]
        assert "position_mitigation_tension" in ids
        assert "irreversible_decision_risk" in ids

    def test_no_safety_flags_without_strategy(self):
        assert CriminalLens().run_safety_checks(make_context(gaps=True)) == []


# =============================================================================
# HOUSING
# =============================================================================

class TestHousingLens:
    """Test the housing disrepair lens."""

    REF = date(2024, 2, 1)

    def test_hazard_without_notice_date_is_premature(self):
        """Only absent notice evidence makes knowledge unsafe; a missing date waits."""
        context = make_context(hazard_type="Damp and mould", reference_date=self.REF)
        evaluation = evaluate_lens(HousingLens(), context)
        assert evaluation.status_of("notice_knowledge") is PillarStatus.PREMATURE
        assert evaluation.pillars["notice_knowledge"].reason == "Notice date not recorded"
        assert "notice_missing" not in [f.id for f in evaluation.safety_checks]

    def test_missing_notice_evidence_is_unsafe(self):
        context = make_context(critical=["Notice letter"])
        evaluation = evaluate_lens(HousingLens(), context)
        assert evaluation.status_of("notice_knowledge") is PillarStatus.UNSAFE
        assert "notice_missing" in [f.id for f in evaluation.safety_checks]

    def test_missing_notice_evidence_beats_missing_date(self):
        context = make_context(critical=["Notice letter"], hazard_type="Damp and mould")
        assert statuses(HousingLens(), context)["notice_knowledge"] is PillarStatus.UNSAFE

    def test_notice_recorded_is_safe(self):
        context = make_context(hazard_type="Broken boiler", notice_date=date(2024, 1, 1))
        assert statuses(HousingLens(), context)["notice_knowledge"] is PillarStatus.SAFE

    def test_awaabs_breach_is_unsafe(self):
        context = make_context(
            hazard_type="mould",
            notice_date=date(2024, 1, 1),
            vulnerability_flags=("child",),
            reference_date=self.REF,
        )
        evaluation = evaluate_lens(HousingLens(), context)
        assert evaluation.status_of("compliance_enforcement") is PillarStatus.UNSAFE
        assert evaluation.deadline_checks["awaabs_law"].status is PillarStatus.UNSAFE
        assert "awaabs_breach" in [f.id for f in evaluation.safety_checks]

    def test_awaabs_running_is_premature(self):
        context = make_context(
            hazard_type="mould",
            notice_date=date(2024, 1, 30),
            vulnerability_flags=("child",),
            reference_date=self.REF,
        )
        evaluation = evaluate_lens(HousingLens(), context)
        assert evaluation.status_of("compliance_enforcement") is PillarStatus.PREMATURE
        assert evaluation.pillars["compliance_enforcement"].reason == (
            "Awaab's Law: 7-day assessment deadline approaching"
        )

    def test_no_reference_date_no_deadline_checks(self):
        context = make_context(hazard_type="mould", notice_date=date(2024, 1, 1))
        assert evaluate_lens(HousingLens(), context).deadline_checks == {}


# =============================================================================
# PERSONAL INJURY
# =============================================================================

class TestPersonalInjuryLens:
    """Test the personal injury lens."""

    def test_expert_gates_injury_and_quantum(self):
        evaluation = evaluate_lens(PersonalInjuryLens(), make_context(critical=["Expert opinion"]))
        for pillar_id in ("injury_prognosis", "quantum_settlement"):
            assert evaluation.status_of(pillar_id) is PillarStatus.PREMATURE
            assert evaluation.pillars[pillar_id].reason == "Medical expert report outstanding"
        assert evaluation.status_of("duty") is PillarStatus.SAFE

    def test_limitation_deadline(self):
        context = make_context(accident_date=date(2021, 6, 1), reference_date=date(2024, 4, 1))
        evaluation = evaluate_lens(PersonalInjuryLens(), context)
        assert evaluation.deadline_checks["limitation"].status is PillarStatus.PREMATURE
        assert "limitation_approaching" in [f.id for f in evaluation.safety_checks]

    def test_missing_accident_date_is_reported_not_flagged(self):
        context = make_context(reference_date=date(2024, 4, 1))
        evaluation = evaluate_lens(PersonalInjuryLens(), context)
        assert evaluation.deadline_checks["limitation"].reason == "Accident date not recorded"
        assert "limitation_approaching" not in [f.id for f in evaluation.safety_checks]

    def test_part36_offer_flag(self):
        items = [ImpactItem("Part 36 offer from insurer", "outstanding")]
        context = LensContext(presence=EvidencePresence.from_items(items), has_disclosure_gaps=True)
        ids = [f.id for f in PersonalInjuryLens().run_safety_checks(context)]
        assert "settlement_offer_outstanding" in ids


# =============================================================================
# CLINICAL NEGLIGENCE
# =============================================================================

class TestClinicalNegligenceLens:
    """Test the clinical negligence lens."""

    REF = date(2024, 6, 1)

    def test_missing_expert_is_unsafe(self):
        result = statuses(ClinicalNegligenceLens(), make_context(critical=["Expert report"]))
        assert result["breach"] is PillarStatus.UNSAFE
        assert result["causation"] is PillarStatus.UNSAFE

    def test_protocol_window_elapsed(self):
        context = make_context(
            letter_of_claim_sent=True,
            letter_of_claim_date=date(2024, 1, 1),
            response_received=False,
            reference_date=self.REF,
        )
        evaluation = evaluate_lens(ClinicalNegligenceLens(), context)
        assert evaluation.status_of("protocol_compliance") is PillarStatus.UNSAFE
        assert evaluation.deadline_checks["pre_action_protocol"].status is PillarStatus.UNSAFE

    def test_letter_not_sent_is_premature(self):
        context = make_context(letter_of_claim_sent=False, reference_date=self.REF)
        evaluation = evaluate_lens(ClinicalNegligenceLens(), context)
        assert evaluation.status_of("protocol_compliance") is PillarStatus.PREMATURE
        assert evaluation.pillars["protocol_compliance"].reason == "Letter of claim not sent"

    def test_limitation_from_date_of_knowledge(self):
        context = make_context(date_of_knowledge=date(2020, 1, 1), reference_date=self.REF)
        checks = evaluate_lens(ClinicalNegligenceLens(), context).deadline_checks
        assert checks["limitation"].status is PillarStatus.UNSAFE
        assert "pre_action_protocol" not in checks


# =============================================================================
# FAMILY
# =============================================================================

class TestFamilyLens:
    """Test the family lens."""

    def test_threshold_without_fact_finding(self):
        context = make_context(critical=["Fact-finding hearing"], welfare_threshold_engaged=True)
        result = statuses(FamilyLens(), context)
        assert result["threshold_welfare"] is PillarStatus.UNSAFE
        assert result["findings_fact"] is PillarStatus.UNSAFE

    def test_threshold_reason_cites_fact_finding(self):
        context = make_context(critical=["Fact-finding hearing"], welfare_threshold_engaged=True)
        evaluation = evaluate_lens(FamilyLens(), context)
        assert evaluation.pillars["threshold_welfare"].reason == THRESHOLD_WITHOUT_FINDINGS_REASON

    def test_threshold_unsafe_from_safeguarding_alone(self):
        context = make_context(critical=["Safeguarding report"])
        assessment = evaluate_lens(FamilyLens(), context).pillars["threshold_welfare"]
        assert assessment.status is PillarStatus.UNSAFE
        assert assessment.reason == (
            "Safeguarding evidence missing - unsafe to assess threshold or welfare without it"
        )
        assert "s31" not in assessment.reason

    def test_safeguarding_gap(self):
        context = make_context(critical=["Police disclosure log"], gaps=True)
        evaluation = evaluate_lens(FamilyLens(), context)
        assert evaluation.status_of("safeguarding_evidence") is PillarStatus.UNSAFE
        assert "safeguarding_evidence_missing" in [f.id for f in evaluation.safety_checks]

    def test_clean_case_is_safe(self):
        result = statuses(FamilyLens(), make_context())
        assert set(result.values()) == {PillarStatus.SAFE}


# =============================================================================
# GENERAL LITIGATION
# =============================================================================

class TestGeneralLitigationLens:
    """Test the general litigation lens."""

    def test_gaps_make_evidence_unsafe(self):
        result = statuses(GeneralLitigationLens(), make_context(gaps=True))
        assert result["evidence_disclosure"] is PillarStatus.UNSAFE

    def test_expired_limitation_flag(self):
        result = statuses(GeneralLitigationLens(), make_context(limitation_expired=True))
        assert result["procedure_deadlines"] is PillarStatus.UNSAFE

    def test_limitation_approaching_is_premature(self):
        context = make_context(
            limitation_start_date=date(2021, 6, 1),
            reference_date=date(2024, 4, 1),
        )
        evaluation = evaluate_lens(GeneralLitigationLens(), context)
        assert evaluation.status_of("procedure_deadlines") is PillarStatus.PREMATURE
        assert evaluation.deadline_checks["limitation"].days_remaining == 61

    def test_no_start_date_no_check(self):
        context = make_context(reference_date=date(2024, 4, 1))
        assert evaluate_lens(GeneralLitigationLens(), context).deadline_checks == {}
