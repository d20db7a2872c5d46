"""
Tests for the Strategy Fight Engine.

These tests verify:
1. Route viability is weighted from evidence facts
2. Attack paths stay hypotheses until their evidence arrives
3. Kill switches, pivots, optics and evidence impact
4. Artifacts never invent case details
"""

from casereason.domain import CaseMeta, EvidenceGraph, Readiness
from casereason.evidence import EvidenceSource, create_evidence_item
from casereason.strategy.artifacts import (
    PLACEHOLDER_DATE,
    ArtifactType,
    CaseDetails,
    generate_artifacts,
)
from casereason.strategy.facts import ExtractedFacts, RouteType, facts_from_graph
from casereason.strategy.routes import (
    PENDING_VIABILITY_REASON,
    JudicialOptics,
    RouteImpact,
    Urgency,
    ViabilityStatus,
    build_route_plans,
    generate_attack_paths,
    generate_evidence_impact,
    generate_kill_switches,
    generate_route_viability,
    get_judicial_optics,
)
from casereason.validation import REASON_NO_TEXT


def make_item(raw_type, description, status="Disclosed"):
    return create_evidence_item(raw_type, description, status, EvidenceSource.PRIMARY_BUNDLE)


def make_graph(items=(), ready=True):
    readiness = Readiness(True) if ready else Readiness(False, (REASON_NO_TEXT,))
    return EvidenceGraph(
        case_meta=CaseMeta(),
        evidence_items=tuple(items),
        disclosure_gaps=(),
        contradictions=(),
        readiness=readiness,
    )


# =============================================================================
# FACTS
# =============================================================================

class TestFacts:
    """Test facts derived from the graph."""

    def test_withheld_items_do_not_count(self):
        graph = make_graph([make_item("CCTV", "Shop camera", "Not disclosed")])
        assert not facts_from_graph(graph).has_cctv

    def test_facts_from_descriptions(self):
        graph = make_graph([
            make_item("Other", "MG6C schedule"),
            make_item("Custody interview", "Custody record and interview transcript"),
            make_item("Other", "Knife recovered at scene"),
            make_item("Ambulance", "Paramedic notes"),
        ])
        facts = facts_from_graph(graph, "18")
        assert facts.has_mg6
        assert facts.has_custody
        assert facts.has_interview
        assert facts.has_weapon
        assert facts.has_medical_evidence
        assert facts.charge_section == "18"
        assert not facts.has_visual

    def test_route_labels(self):
        assert RouteType.CHARGE_REDUCTION.label == "Charge Reduction (s18 → s20)"


# =============================================================================
# VIABILITY
# =============================================================================

class TestViability:
    """Test weighted route viability."""

    def test_pending_without_analysis(self):
        viability = generate_route_viability(RouteType.FIGHT_CHARGE, False)
        assert viability.status is ViabilityStatus.VIABLE
        assert not viability.evidence_backed
        assert viability.reasons == (PENDING_VIABILITY_REASON,)

    def test_fight_weakening_without_visual_or_mg6(self):
        viability = generate_route_viability(RouteType.FIGHT_CHARGE, True, ExtractedFacts())
        assert viability.status is ViabilityStatus.WEAKENING
        assert viability.weight == 2
        assert len(viability.reasons) == 2

    def test_fight_viable_with_evidence(self):
        facts = ExtractedFacts(has_cctv=True, has_bwv=True, has_mg6=True)
        viability = generate_route_viability(RouteType.FIGHT_CHARGE, True, facts)
        assert viability.status is ViabilityStatus.VIABLE
        assert viability.reasons == (
            "Visual evidence available - identification challenge possible",
        )

    def test_reduction_unsafe_with_nothing(self):
        viability = generate_route_viability(RouteType.CHARGE_REDUCTION, True, ExtractedFacts())
        assert viability.status is ViabilityStatus.UNSAFE
        assert viability.weight == 3

    def test_reduction_viable_with_medical_and_cctv(self):
        facts = ExtractedFacts(has_cctv=True, has_medical_evidence=True, charge_section="18")
        viability = generate_route_viability(RouteType.CHARGE_REDUCTION, True, facts)
        assert viability.status is ViabilityStatus.VIABLE
        assert len(viability.reasons) == 2

    def test_outcome_always_viable(self):
        viability = generate_route_viability(RouteType.OUTCOME_MANAGEMENT, True, ExtractedFacts())
        assert viability.status is ViabilityStatus.VIABLE
        assert viability.evidence_backed


# =============================================================================
# ATTACK PATHS AND KILL SWITCHES
# =============================================================================

class TestAttackPaths:
    """Test attack path catalogues."""

    def test_fight_paths_without_analysis(self):
        paths = generate_attack_paths(RouteType.FIGHT_CHARGE, False)
        assert [p.id for p in paths] == [
            "ap_fight_001", "ap_fight_002", "ap_fight_003", "ap_fight_004",
        ]
        assert all(p.is_hypothesis for p in paths)
        assert paths[0].evidence_inputs == ("CCTV footage (pending)", "VIPER pack (pending)")

    def test_evidence_turns_hypothesis_into_plan(self):
        paths = generate_attack_paths(
            RouteType.FIGHT_CHARGE, True, ExtractedFacts(has_cctv=True)
        )
        assert not paths[0].is_hypothesis
        assert paths[0].evidence_inputs == ("CCTV footage", "VIPER pack")
        assert paths[1].is_hypothesis
        assert not paths[3].is_hypothesis

    def test_reduction_and_outcome(self):
        reduction = generate_attack_paths(RouteType.CHARGE_REDUCTION, True)
        outcome = generate_attack_paths(RouteType.OUTCOME_MANAGEMENT, False)
        assert len(reduction) == 3
        assert len(outcome) == 2
        assert not any(p.is_hypothesis for p in outcome)

    def test_kill_switches(self):
        fight = generate_kill_switches(RouteType.FIGHT_CHARGE)
        reduction = generate_kill_switches(RouteType.CHARGE_REDUCTION)
        assert len(fight) == 4
        assert fight[0].id == "ks_fight_001"
        assert all(k.pivot_to == (RouteType.OUTCOME_MANAGEMENT,) for k in reduction)
        assert len(generate_kill_switches(RouteType.OUTCOME_MANAGEMENT)) == 2


# =============================================================================
# OPTICS AND EVIDENCE IMPACT
# =============================================================================

class TestOptics:
    """Test lexical judicial optics."""

    def test_optics(self):
        assert get_judicial_optics("Send disclosure request") is JudicialOptics.FAVOURABLE
        assert get_judicial_optics("Frivolous application") is JudicialOptics.RISKY
        assert get_judicial_optics("Review file") is JudicialOptics.NEUTRAL

    def test_favourable_wins(self):
        action = "Written submission rather than frivolous application"
        assert get_judicial_optics(action) is JudicialOptics.FAVOURABLE


class TestEvidenceImpact:
    """Test missing item impact mapping."""

    PATHS = generate_attack_paths(RouteType.FIGHT_CHARGE, False)

    def impact(self, item, route=RouteType.FIGHT_CHARGE):
        return generate_evidence_impact([item], route, self.PATHS)[0]

    def test_cctv_feeds_paths(self):
        impact = self.impact("Full CCTV window")
        assert impact.attack_paths == ("ap_fight_001", "ap_fight_002")
        assert impact.impact is RouteImpact.WEAKENS
        assert impact.urgency is Urgency.BEFORE_TRIAL

    def test_disclosure_failure_strengthens_fight(self):
        impact = self.impact("MG6C schedule")
        assert impact.attack_paths == ("ap_fight_002", "ap_fight_004")
        assert impact.impact is RouteImpact.STRENGTHENS

    def test_same_item_weakens_reduction(self):
        impact = self.impact("MG6C schedule", RouteType.CHARGE_REDUCTION)
        assert impact.impact is RouteImpact.WEAKENS

    def test_disclosure_is_before_ptph(self):
        impact = self.impact("Outstanding disclosure")
        assert impact.urgency is Urgency.BEFORE_PTPH
        assert impact.attack_paths == ()

    def test_item_naming_an_input_feeds_its_path(self):
        impact = self.impact("VIPER pack")
        assert impact.attack_paths == ("ap_fight_001",)
        assert impact.impact is RouteImpact.WEAKENS
        assert impact.urgency is Urgency.BEFORE_TRIAL

    def test_input_inside_item_text(self):
        impact = self.impact("Custody record for 12 March")
        assert impact.attack_paths == ("ap_fight_003",)
        assert impact.impact is RouteImpact.WEAKENS

    def test_item_inside_input_matches_any_case(self):
        impact = self.impact("CHASE TRAIL")
        assert impact.attack_paths == ("ap_fight_004",)

    def test_matching_ignores_pending_marker(self):
        impacts = generate_evidence_impact(
            ["VIPER pack", "Custody record"], RouteType.FIGHT_CHARGE, self.PATHS
        )
        assert [i.attack_paths for i in impacts] == [("ap_fight_001",), ("ap_fight_003",)]

    def test_unrelated_item(self):
        impact = self.impact("Character letter")
        assert impact.impact is RouteImpact.NEUTRAL
        assert impact.urgency is Urgency.ANYTIME


# =============================================================================
# ROUTE PLANS AND ARTIFACTS
# =============================================================================

class TestRoutePlans:
    """Test full route plans."""

    def make_plans(self, ready=True):
        graph = make_graph(
            [make_item("CCTV", "Shop camera"), make_item("Medical", "Discharge summary")],
            ready=ready,
        )
        return build_route_plans(
            graph, "18", case_details=CaseDetails(case_id="T1", client_name="A. Sample"),
        )

    def test_one_plan_per_route(self):
        plans = self.make_plans()
        assert set(plans) == set(RouteType)
        assert plans[RouteType.CHARGE_REDUCTION].viability.status is ViabilityStatus.VIABLE
        assert plans[RouteType.FIGHT_CHARGE].viability.status is ViabilityStatus.WEAKENING

    def test_hypothesis_count(self):
        plans = self.make_plans()
        assert plans[RouteType.FIGHT_CHARGE].hypothesis_count == 1
        assert plans[RouteType.OUTCOME_MANAGEMENT].hypothesis_count == 0

    def test_optics_cover_actions(self):
        optics = self.make_plans()[RouteType.CHARGE_REDUCTION].action_optics
        assert optics["Prepare case management submissions on charge reduction"] is (
            JudicialOptics.FAVOURABLE
        )

    def test_no_missing_items_no_impact(self):
        plan = self.make_plans()[RouteType.FIGHT_CHARGE]
        assert plan.evidence_impact == ()

    def test_artifacts_use_placeholders(self):
        artifacts = self.make_plans()[RouteType.FIGHT_CHARGE].artifacts
        assert [a.type for a in artifacts] == [
            ArtifactType.DEFENCE_POSITION,
            ArtifactType.DISCLOSURE_REQUEST,
            ArtifactType.CASE_MANAGEMENT_NOTE,
            ArtifactType.NEGOTIATION_BRIEF,
        ]
        for artifact in artifacts:
            assert "Case: T1" in artifact.content
            assert "Client: A. Sample" in artifact.content
            assert "Charge: [CHARGE]" in artifact.content
            assert f"Date: {PLACEHOLDER_DATE}" in artifact.content

    def test_pending_snapshot_without_analysis(self):
        snapshot = self.make_plans(ready=False)[RouteType.FIGHT_CHARGE].artifacts[0]
        assert "EVIDENCE STATUS: Pending disclosure" in snapshot.content

    def test_negotiation_brief_uses_cctv_only_with_analysis(self):
        facts = ExtractedFacts(has_cctv=True)
        with_analysis = generate_artifacts(RouteType.CHARGE_REDUCTION, True, facts)[3]
        without = generate_artifacts(RouteType.CHARGE_REDUCTION, False, facts)[3]
        assert "CCTV sequence shows brief contact" in with_analysis.content
        assert "CCTV sequence" not in without.content
