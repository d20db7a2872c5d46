"""
Strategy Fight Engine.

Expands each route archetype into a full plan:

    viability          — VIABLE / WEAKENING / UNSAFE with itemised reasons
    attack paths       — fixed catalogue, hypothesis until facts arrive
    opponent responses — likely prosecution moves and the defence counter
    kill switches      — evidence events that end the route
    pivot plan         — triggers, timing and stop/start lists
    evidence impact    — what each missing item feeds and how urgently
    artifacts          — four fill-in templates (see artifacts.py)

Every generator is keyed only by route and ExtractedFacts. Without
analysis (readiness failed) the engine still returns the procedural
templates, clearly marked as pending.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional, Sequence

from ..domain import EvidenceGraph
from .artifacts import CaseDetails, StrategyArtifact, generate_artifacts
from .facts import ExtractedFacts, RouteType, facts_from_graph


logger = logging.getLogger(__name__)


# =============================================================================
# CONFIGURATION CONSTANTS
# =============================================================================

# Summed rule weight at which a route stops being safe to run
UNSAFE_THRESHOLD = 3

PENDING_VIABILITY_REASON = (
    "Pending disclosure review - viability assessment requires full disclosure"
)
DEFAULT_VIABILITY_REASON = "Route appears viable based on available evidence"

PENDING_SUFFIX = " (pending)"

FAVOURABLE_ACTIONS = (
    "disclosure request",
    "continuity request",
    "written submission",
    "case management",
    "structured request",
)
RISKY_ACTIONS = (
    "abuse of process without chase",
    "unsubstantiated challenge",
    "frivolous application",
)

# Missing material that strengthens the disclosure-failure attack
DISCLOSURE_FAILURE_TERMS = ("mg6", "unused", "disclosure")


# =============================================================================
# OUTPUT TYPES
# =============================================================================

class ViabilityStatus(Enum):
    VIABLE = "VIABLE"
    WEAKENING = "WEAKENING"
    UNSAFE = "UNSAFE"


class JudicialOptics(Enum):
    FAVOURABLE = "favourable"
    NEUTRAL = "neutral"
    RISKY = "risky"


class RouteImpact(Enum):
    STRENGTHENS = "strengthens"
    WEAKENS = "weakens"
    NEUTRAL = "neutral"


class Urgency(Enum):
    BEFORE_PTPH = "before_ptph"
    BEFORE_TRIAL = "before_trial"
    ANYTIME = "anytime"


@dataclass(frozen=True)
class RouteViability:
    status: ViabilityStatus
    reasons: tuple[str, ...]
    evidence_backed: bool
    weight: int = 0


@dataclass(frozen=True)
class AttackPath:
    id: str
    target: str
    method: str
    evidence_inputs: tuple[str, ...]
    expected_effect: str
    opponent_likely_response: str
    counter_response: str
    kill_switch: str
    next_48_hours_actions: tuple[str, ...]
    is_hypothesis: bool


@dataclass(frozen=True)
class OpponentResponse:
    id: str
    opponent_move: str
    defence_counter: str
    resulting_pressure: str


@dataclass(frozen=True)
class KillSwitch:
    id: str
    evidence_event: str
    pivot_recommendation: str
    pivot_to: tuple[RouteType, ...]


@dataclass(frozen=True)
class PivotPlan:
    triggers: tuple[str, ...]
    timing: str
    stop: tuple[str, ...]
    start: tuple[str, ...]


@dataclass(frozen=True)
class EvidenceImpact:
    item: str
    attack_paths: tuple[str, ...]
    route: RouteType
    impact: RouteImpact
    urgency: Urgency


# =============================================================================
# ROUTE VIABILITY
# =============================================================================

@dataclass(frozen=True)
class ViabilityRule:
    """A weighted rule. Weight 0 rules only add an informational reason."""
    reason: str
    weight: int
    applies: Callable[[ExtractedFacts], bool]


VIABILITY_RULES: dict[RouteType, tuple[ViabilityRule, ...]] = {
    RouteType.FIGHT_CHARGE: (
        ViabilityRule(
            "Missing visual evidence (CCTV/BWV) - identification challenge may be weaker",
            1, lambda f: not f.has_visual,
        ),
        ViabilityRule(
            "Missing MG6 schedules - disclosure position unclear",
            1, lambda f: not f.has_mg6,
        ),
        ViabilityRule(
            "Visual evidence available - identification challenge possible",
            0, lambda f: f.has_cctv and f.has_bwv,
        ),
        ViabilityRule(
            "Interview evidence present - PACE compliance review required",
            0, lambda f: f.has_interview,
        ),
        ViabilityRule(
            "s18 charge without weapon evidence - intent challenge viable",
            0, lambda f: f.charge_section == "18" and not f.has_weapon,
        ),
    ),
    RouteType.CHARGE_REDUCTION: (
        ViabilityRule(
            "Missing medical evidence - intent distinction assessment limited",
            2, lambda f: not f.has_medical_evidence,
        ),
        ViabilityRule(
            "Medical evidence available - can assess s18 vs s20 intent distinction",
            0, lambda f: f.charge_section == "18" and f.has_medical_evidence,
        ),
        ViabilityRule(
            "CCTV available - sequence/duration analysis possible for intent",
            0, lambda f: f.has_cctv,
        ),
        ViabilityRule(
            "No visual evidence - sequence evidence unavailable",
            1, lambda f: not f.has_visual,
        ),
    ),
    RouteType.OUTCOME_MANAGEMENT: (
        ViabilityRule(
            "Case proceeding - mitigation strategy always available",
            0, lambda f: True,
        ),
        ViabilityRule(
            "Interview evidence may support early plea position",
            0, lambda f: f.has_interview,
        ),
    ),
}


def generate_route_viability(
    route: RouteType,
    can_generate_analysis: bool,
    facts: Optional[ExtractedFacts] = None,
) -> RouteViability:
    """
    Weighted viability for a route.

    A summed weight of 1-2 is WEAKENING, UNSAFE_THRESHOLD or more is
    UNSAFE. Without analysis the route is reported VIABLE but not
    evidence-backed.
    """
    if not can_generate_analysis:
        return RouteViability(
            status=ViabilityStatus.VIABLE,
            reasons=(PENDING_VIABILITY_REASON,),
            evidence_backed=False,
        )

    facts = facts or ExtractedFacts()
    hits = [rule for rule in VIABILITY_RULES[route] if rule.applies(facts)]
    weight = sum(rule.weight for rule in hits)

    if weight >= UNSAFE_THRESHOLD:
        status = ViabilityStatus.UNSAFE
    elif weight > 0:
        status = ViabilityStatus.WEAKENING
    else:
        status = ViabilityStatus.VIABLE

    reasons = tuple(rule.reason for rule in hits) or (DEFAULT_VIABILITY_REASON,)
    return RouteViability(status, reasons, evidence_backed=True, weight=weight)


# =============================================================================
# ATTACK PATHS
# =============================================================================

def _inputs(available: bool, *names: str) -> tuple[str, ...]:
    if available:
        return names
    return tuple(name + PENDING_SUFFIX for name in names)


def _fight_paths(ready: bool, facts: ExtractedFacts) -> list[AttackPath]:
    return [
        AttackPath(
            id="ap_fight_001",
            target="Identification evidence",
            method="Turnbull challenge - reliability and quality of identification",
            evidence_inputs=_inputs(ready and facts.has_cctv, "CCTV footage", "VIPER pack"),
            expected_effect="Identification evidence excluded or weakened, prosecution case collapses",
            opponent_likely_response="Argue identification is reliable and supported by multiple sources",
            counter_response=(
                "Apply Turnbull guidelines strictly - if single witness or poor conditions, "
                "challenge reliability"
            ),
            kill_switch="Multiple independent witnesses with strong identification under good conditions",
            next_48_hours_actions=(
                "Request CCTV footage and continuity evidence",
                "Request VIPER pack if identification procedure used",
                "Review identification conditions (lighting, distance, duration, stress)",
                "Assess whether Turnbull warning required",
            ),
            is_hypothesis=not (ready and facts.has_cctv),
        ),
        AttackPath(
            id="ap_fight_002",
            target="Intent (mens rea)",
            method="Challenge prosecution's ability to prove specific intent beyond reasonable doubt",
            evidence_inputs=_inputs(
                ready and facts.has_medical_evidence, "Medical reports", "CCTV sequence"
            ),
            expected_effect="Prosecution cannot prove intent, charge reduced or dismissed",
            opponent_likely_response="Argue intent is clear from circumstances and medical evidence",
            counter_response=(
                "Medical evidence shows single/brief blow consistent with recklessness, "
                "not specific intent"
            ),
            kill_switch="Medical evidence shows sustained/targeted injuries clearly indicating specific intent",
            next_48_hours_actions=(
                "Request full medical evidence disclosure",
                "Review medical reports for injury pattern (single vs sustained)",
                "Analyse CCTV for sequence/duration (if available)",
                "Prepare intent distinction submissions",
            ),
            is_hypothesis=not (ready and facts.has_medical_evidence),
        ),
        AttackPath(
            id="ap_fight_003",
            target="PACE compliance",
            method="Challenge admissibility of interview/custody evidence under PACE",
            evidence_inputs=(
                ("Interview recording/transcript", "Custody record")
                if ready and facts.has_interview
                else ("Interview recording (pending)", "Custody record (pending)")
            ),
            expected_effect="Interview/custody evidence excluded, prosecution case weakened",
            opponent_likely_response="Argue PACE compliance was adequate and any breaches were minor",
            counter_response="PACE breaches are material and render evidence unreliable - apply s78 PACE",
            kill_switch="PACE compliance confirmed with no material breaches",
            next_48_hours_actions=(
                "Request interview recording and transcript",
                "Request custody record and PACE compliance documentation",
                "Review for PACE breaches (access to legal advice, appropriate adult, recording issues)",
                "Prepare s78 PACE exclusion application if breaches found",
            ),
            is_hypothesis=not (ready and facts.has_interview),
        ),
        AttackPath(
            id="ap_fight_004",
            target="Disclosure failures",
            method="Abuse of process application if disclosure failures persist after chase trail",
            evidence_inputs=("MG6 schedules", "Disclosure requests", "Chase trail"),
            expected_effect=(
                "Stay of proceedings or material exclusion if disclosure failures are "
                "persistent and material"
            ),
            opponent_likely_response="Argue disclosure is complete or failures are not material",
            counter_response="Disclosure failures are material and persistent despite proper chase - abuse of process",
            kill_switch="Full disclosure provided with no material gaps",
            next_48_hours_actions=(
                "Request full MG6 schedules (MG6A, MG6B, MG6C)",
                "Document all disclosure requests and chase trail",
                "Assess materiality of missing items",
                "Prepare abuse of process application only if failures persist after chase",
            ),
            is_hypothesis=not ready,
        ),
    ]


def _reduction_paths(ready: bool, facts: ExtractedFacts) -> list[AttackPath]:
    return [
        AttackPath(
            id="ap_reduction_001",
            target="Intent threshold (s18 → s20)",
            method="Medical evidence analysis - single/brief vs sustained/targeted injuries",
            evidence_inputs=_inputs(
                ready and facts.has_medical_evidence, "Medical reports", "CCTV sequence"
            ),
            expected_effect="Court accepts injuries consistent with recklessness (s20) not specific intent (s18)",
            opponent_likely_response="Argue medical evidence supports specific intent based on injury pattern",
            counter_response="Medical evidence shows single blow or brief contact - consistent with recklessness",
            kill_switch="Medical evidence clearly shows sustained/targeted injuries indicating specific intent",
            next_48_hours_actions=(
                "Request full medical evidence disclosure",
                "Review medical reports for injury pattern analysis",
                "Analyse CCTV for sequence/duration (if available)",
                "Prepare written submissions on intent distinction",
            ),
            is_hypothesis=not (ready and facts.has_medical_evidence),
        ),
        AttackPath(
            id="ap_reduction_002",
            target="Sequence/duration evidence",
            method="CCTV analysis - brief contact vs prolonged attack",
            evidence_inputs=_inputs(
                ready and facts.has_cctv, "CCTV footage", "Continuity evidence"
            ),
            expected_effect=(
                "CCTV shows brief contact supporting recklessness, not prolonged attack "
                "supporting intent"
            ),
            opponent_likely_response="Argue CCTV shows prolonged or targeted conduct supporting intent",
            counter_response="CCTV shows single brief contact - consistent with recklessness not specific intent",
            kill_switch="CCTV clearly shows prolonged or targeted attack supporting specific intent",
            next_48_hours_actions=(
                "Request CCTV footage and continuity evidence",
                "Review CCTV for sequence and duration",
                "Assess whether conduct supports intent or recklessness",
                "Prepare case management submissions on charge reduction",
            ),
            is_hypothesis=not (ready and facts.has_cctv),
        ),
        AttackPath(
            id="ap_reduction_003",
            target="Weapon use context",
            method="Weapon use analysis - duration and targeting",
            evidence_inputs=_inputs(
                ready and facts.has_weapon, "Weapon evidence", "CCTV/sequence"
            ),
            expected_effect="Weapon use lacks duration/targeting to prove specific intent",
            opponent_likely_response="Argue weapon use demonstrates specific intent",
            counter_response="Weapon use was brief/incidental - not sustained/targeted to prove specific intent",
            kill_switch="Weapon use clearly sustained/targeted indicating specific intent",
            next_48_hours_actions=(
                "Request weapon evidence disclosure",
                "Review weapon use context (duration, targeting, circumstances)",
                "Assess whether weapon use supports intent or recklessness",
                "Prepare charge reduction negotiation position",
            ),
            is_hypothesis=not (ready and facts.has_weapon),
        ),
    ]


def _outcome_paths() -> list[AttackPath]:
    # Always available, never hypothesis
    return [
        AttackPath(
            id="ap_outcome_001",
            target="Early plea credit",
            method="Guilty plea at earliest opportunity for maximum sentence reduction",
            evidence_inputs=("Prosecution case strength assessment", "Sentencing guidelines"),
            expected_effect="Maximum sentence reduction (up to 1/3) through early plea",
            opponent_likely_response="Accept early plea and recommend reduced sentence",
            counter_response="Early plea demonstrates remorse and saves court time - maximum credit",
            kill_switch="Case is weak and acquittal likely - early plea not in client's interest",
            next_48_hours_actions=(
                "Assess prosecution case strength realistically",
                "Consider early guilty plea if case is strong",
                "Prepare mitigation package",
                "Review sentencing guidelines for credit calculation",
            ),
            is_hypothesis=False,
        ),
        AttackPath(
            id="ap_outcome_002",
            target="Mitigation evidence",
            method="Comprehensive mitigation package including character, circumstances, and remorse",
            evidence_inputs=("Character references", "Personal circumstances", "Employment/health evidence"),
            expected_effect="Sentence reduced or non-custodial outcome through strong mitigation",
            opponent_likely_response="Consider mitigation but maintain appropriate sentence",
            counter_response="Strong mitigation supports reduced sentence or non-custodial outcome",
            kill_switch="Mitigation evidence is weak or contradicted",
            next_48_hours_actions=(
                "Gather character references",
                "Collect personal circumstances evidence (employment, family, health)",
                "Prepare mitigation statement",
                "Review sentencing guidelines for mitigation factors",
            ),
            is_hypothesis=False,
        ),
    ]


def generate_attack_paths(
    route: RouteType,
    can_generate_analysis: bool,
    facts: Optional[ExtractedFacts] = None,
) -> list[AttackPath]:
    facts = facts or ExtractedFacts()
    if route is RouteType.FIGHT_CHARGE:
        return _fight_paths(can_generate_analysis, facts)
    if route is RouteType.CHARGE_REDUCTION:
        return _reduction_paths(can_generate_analysis, facts)
    return _outcome_paths()


# =============================================================================
# OPPONENT RESPONSES
# =============================================================================

OPPONENT_RESPONSES: dict[RouteType, tuple[OpponentResponse, ...]] = {
    RouteType.FIGHT_CHARGE: (
        OpponentResponse(
            "resp_fight_001",
            "Maintain s18 charge and proceed to trial",
            "Apply for charge reduction to s20 based on intent evidence",
            "Court may order case management hearing to resolve charge issue",
        ),
        OpponentResponse(
            "resp_fight_002",
            "Oppose disclosure requests and argue disclosure is complete",
            "Document chase trail and apply for abuse of process if failures persist",
            "Court may order disclosure or stay proceedings if failures are material",
        ),
        OpponentResponse(
            "resp_fight_003",
            "Argue identification is reliable and Turnbull warning not required",
            "Apply Turnbull guidelines strictly and challenge identification reliability",
            "Court may exclude identification evidence if reliability is poor",
        ),
    ),
    RouteType.CHARGE_REDUCTION: (
        OpponentResponse(
            "resp_reduction_001",
            "Maintain s18 charge based on medical evidence",
            "Argue medical evidence supports s20 (recklessness) not s18 (intent)",
            "Court may order case management hearing or accept reduction",
        ),
        OpponentResponse(
            "resp_reduction_002",
            "Oppose charge reduction and proceed to trial",
            "Prepare written submissions on intent distinction for case management",
            "Court may order reduction before trial or maintain charge",
        ),
        OpponentResponse(
            "resp_reduction_003",
            "Offer s20 plea deal with reduced sentence",
            "Accept if favourable, or proceed to trial on intent issue",
            "Early resolution or trial on intent distinction",
        ),
    ),
    RouteType.OUTCOME_MANAGEMENT: (
        OpponentResponse(
            "resp_outcome_001",
            "Accept early guilty plea and recommend reduced sentence",
            "Maximise plea credit and mitigation evidence",
            "Early resolution with reduced sentence",
        ),
        OpponentResponse(
            "resp_outcome_002",
            "Maintain prosecution case and proceed to trial",
            "Prepare mitigation package and sentencing submissions",
            "Trial with mitigation focus if conviction",
        ),
        OpponentResponse(
            "resp_outcome_003",
            "Oppose non-custodial outcome based on seriousness",
            "Argue mitigation and personal circumstances support non-custodial",
            "Sentencing hearing with mitigation focus",
        ),
    ),
}


def generate_opponent_responses(route: RouteType) -> list[OpponentResponse]:
    return list(OPPONENT_RESPONSES[route])


# =============================================================================
# KILL SWITCHES
# =============================================================================

_FIGHT, _REDUCE, _OUTCOME = (
    RouteType.FIGHT_CHARGE,
    RouteType.CHARGE_REDUCTION,
    RouteType.OUTCOME_MANAGEMENT,
)

KILL_SWITCHES: dict[RouteType, tuple[KillSwitch, ...]] = {
    _FIGHT: (
        KillSwitch(
            "ks_fight_001",
            "Full disclosure provided with no material gaps",
            "Pivot to charge reduction or outcome management if disclosure strengthens prosecution case",
            (_REDUCE, _OUTCOME),
        ),
        KillSwitch(
            "ks_fight_002",
            "Multiple independent witnesses with strong identification under good conditions",
            "Pivot to charge reduction or outcome management - identification challenge unlikely to succeed",
            (_REDUCE, _OUTCOME),
        ),
        KillSwitch(
            "ks_fight_003",
            "Medical evidence shows sustained/targeted injuries clearly indicating specific intent",
            "Pivot to outcome management - intent challenge unlikely to succeed",
            (_OUTCOME,),
        ),
        KillSwitch(
            "ks_fight_004",
            "PACE compliance confirmed with no material breaches",
            "Pivot to charge reduction or outcome management - PACE challenge unavailable",
            (_REDUCE, _OUTCOME),
        ),
    ),
    _REDUCE: (
        KillSwitch(
            "ks_reduction_001",
            "Medical evidence clearly shows sustained/targeted injuries indicating specific intent",
            "Pivot to outcome management - charge reduction unlikely to succeed",
            (_OUTCOME,),
        ),
        KillSwitch(
            "ks_reduction_002",
            "CCTV clearly shows prolonged or targeted attack supporting specific intent",
            "Pivot to outcome management - sequence evidence supports intent",
            (_OUTCOME,),
        ),
        KillSwitch(
            "ks_reduction_003",
            "Weapon use clearly sustained/targeted indicating specific intent",
            "Pivot to outcome management - weapon evidence supports intent",
            (_OUTCOME,),
        ),
    ),
    _OUTCOME: (
        KillSwitch(
            "ks_outcome_001",
            "Case is weak and acquittal likely",
            "Pivot to fight charge - early plea not in client's interest",
            (_FIGHT,),
        ),
        KillSwitch(
            "ks_outcome_002",
            "Mitigation evidence is weak or contradicted",
            "Pivot to fight charge or charge reduction - mitigation unlikely to succeed",
            (_FIGHT, _REDUCE),
        ),
    ),
}


def generate_kill_switches(route: RouteType) -> list[KillSwitch]:
    return list(KILL_SWITCHES[route])


# =============================================================================
# PIVOT PLANS
# =============================================================================

PIVOT_PLANS: dict[RouteType, PivotPlan] = {
    _FIGHT: PivotPlan(
        triggers=(
            "Full disclosure provided with no material gaps",
            "Strong identification evidence from multiple sources",
            "Medical evidence clearly supports specific intent",
            "PACE compliance confirmed",
        ),
        timing="Before PTPH to preserve leverage and plea credit",
        stop=(
            "Pursuing disclosure-based abuse of process applications",
            "Challenging identification evidence if strong",
            "Challenging intent if medical evidence is clear",
        ),
        start=(
            "Negotiating charge reduction (s18 → s20) if intent is weak",
            "Preparing mitigation package for outcome management",
            "Assessing early plea position if case is strong",
        ),
    ),
    _REDUCE: PivotPlan(
        triggers=(
            "Medical evidence clearly shows sustained/targeted injuries",
            "CCTV shows prolonged or targeted attack",
            "Weapon evidence clearly supports specific intent",
        ),
        timing="Before PTPH to preserve plea credit if pivoting to outcome management",
        stop=(
            "Pursuing charge reduction if intent evidence is strong",
            "Arguing intent distinction if medical/CCTV evidence is clear",
        ),
        start=(
            "Preparing comprehensive mitigation package",
            "Assessing early plea position",
            "Focusing on sentencing position and non-custodial outcome",
        ),
    ),
    _OUTCOME: PivotPlan(
        triggers=(
            "Case is weak and acquittal likely",
            "Disclosure failures emerge",
            "Strong defence evidence discovered",
        ),
        timing="Before PTPH to preserve leverage - early plea credit may be lost if pivoting",
        stop=(
            "Pursuing early guilty plea if case is weak",
            "Focusing solely on mitigation if acquittal is possible",
        ),
        start=(
            "Challenging prosecution case at trial",
            "Pursuing disclosure-based challenges",
            "Preparing full trial defence",
        ),
    ),
}


def generate_pivot_plan(route: RouteType) -> PivotPlan:
    return PIVOT_PLANS[route]


# =============================================================================
# JUDICIAL OPTICS
# =============================================================================

def get_judicial_optics(action: str) -> JudicialOptics:
    """Lexical check of how an action reads to the court. Favourable wins."""
    text = action.lower()
    if any(term in text for term in FAVOURABLE_ACTIONS):
        return JudicialOptics.FAVOURABLE
    if any(term in text for term in RISKY_ACTIONS):
        return JudicialOptics.RISKY
    return JudicialOptics.NEUTRAL


# =============================================================================
# EVIDENCE IMPACT
# =============================================================================

def _input_name(evidence_input: str) -> str:
    name = evidence_input.lower()
    if name.endswith(PENDING_SUFFIX):
        name = name[: -len(PENDING_SUFFIX)]
    return name.strip()


def _paths_naming(attack_paths: Sequence[AttackPath], text: str) -> list[str]:
    """Paths with an evidence input inside the item text, or the item inside an input."""
    if not text:
        return []
    return [
        path.id for path in attack_paths
        if any(
            name and (name in text or text in name)
            for name in map(_input_name, path.evidence_inputs)
        )
    ]


def _paths_using(attack_paths: Sequence[AttackPath], *needles: str) -> list[str]:
    return [
        path.id for path in attack_paths
        if any(needle in inp.lower() for inp in path.evidence_inputs for needle in needles)
    ]


def _paths_by_keyword(attack_paths: Sequence[AttackPath], text: str) -> list[str]:
    fed: list[str] = []
    if "cctv" in text:
        fed.extend(_paths_using(attack_paths, "cctv"))
    if "medical" in text or "mg6" in text:
        fed.extend(_paths_using(attack_paths, "medical", "mg6"))
    if "interview" in text:
        fed.extend(_paths_using(attack_paths, "interview"))
    return fed


def generate_evidence_impact(
    missing_items: Sequence[str],
    route: RouteType,
    attack_paths: Sequence[AttackPath],
) -> list[EvidenceImpact]:
    """
    Map each missing item to the attack paths it feeds, its effect on
    the route and how urgently it is needed.

    An item feeds a path when it and one of the path's evidence inputs
    contain each other, case-insensitively. Items that name no input
    fall back to the cctv/medical/mg6/interview keyword families.
    """
    impacts = []
    for item in missing_items:
        text = item.lower().strip()
        fed = _paths_naming(attack_paths, text) or _paths_by_keyword(attack_paths, text)
        fed = list(dict.fromkeys(fed))

        if route is RouteType.FIGHT_CHARGE and any(t in text for t in DISCLOSURE_FAILURE_TERMS):
            impact = RouteImpact.STRENGTHENS
        elif fed:
            impact = RouteImpact.WEAKENS
        else:
            impact = RouteImpact.NEUTRAL

        if "ptph" in text or "disclosure" in text:
            urgency = Urgency.BEFORE_PTPH
        elif fed:
            urgency = Urgency.BEFORE_TRIAL
        else:
            urgency = Urgency.ANYTIME

        impacts.append(EvidenceImpact(item, tuple(fed), route, impact, urgency))
    return impacts


# =============================================================================
# ROUTE PLANS
# =============================================================================

@dataclass(frozen=True)
class RoutePlan:
    route: RouteType
    viability: RouteViability
    attack_paths: tuple[AttackPath, ...]
    opponent_responses: tuple[OpponentResponse, ...]
    kill_switches: tuple[KillSwitch, ...]
    pivot_plan: PivotPlan
    evidence_impact: tuple[EvidenceImpact, ...]
    artifacts: tuple[StrategyArtifact, ...]
    action_optics: dict[str, JudicialOptics] = field(default_factory=dict)

    @property
    def hypothesis_count(self) -> int:
        return sum(1 for path in self.attack_paths if path.is_hypothesis)


def build_route_plan(
    route: RouteType,
    graph: EvidenceGraph,
    charge_section: Optional[str] = None,
    missing_items: Optional[Sequence[str]] = None,
    case_details: Optional[CaseDetails] = None,
) -> RoutePlan:
    """Everything the fight engine knows about one route for one graph."""
    ready = graph.readiness.can_commit_strategy
    facts = facts_from_graph(graph, charge_section)
    if missing_items is None:
        missing_items = graph.missing_item_names()

    paths = generate_attack_paths(route, ready, facts)
    optics = {
        action: get_judicial_optics(action)
        for path in paths
        for action in path.next_48_hours_actions
    }
    plan = RoutePlan(
        route=route,
        viability=generate_route_viability(route, ready, facts),
        attack_paths=tuple(paths),
        opponent_responses=tuple(generate_opponent_responses(route)),
        kill_switches=tuple(generate_kill_switches(route)),
        pivot_plan=generate_pivot_plan(route),
        evidence_impact=tuple(generate_evidence_impact(missing_items, route, paths)),
        artifacts=tuple(generate_artifacts(route, ready, facts, case_details)),
        action_optics=optics,
    )
    logger.debug(
        "route %s: %s (weight=%d) paths=%d hypotheses=%d",
        route.value, plan.viability.status.value, plan.viability.weight,
        len(paths), plan.hypothesis_count,
    )
    return plan


def build_route_plans(
    graph: EvidenceGraph,
    charge_section: Optional[str] = None,
    missing_items: Optional[Sequence[str]] = None,
    case_details: Optional[CaseDetails] = None,
) -> dict[RouteType, RoutePlan]:
    return {
        route: build_route_plan(route, graph, charge_section, missing_items, case_details)
        for route in RouteType
    }
