"""
Practice Lens Core.

A lens turns one practice area's evidence state into a verdict per
pillar:

    SAFE       - every dependency is present
    PREMATURE  - something the pillar needs is still outstanding
    UNSAFE     - acting now would assert something the evidence cannot carry

Evaluation order per pillar, first hit wins:

1. Domain UNSAFE override (deadline elapsed, expert missing, ...)
2. Generic unsafe trigger tag absent
3. Domain PREMATURE hook (deadline approaching, expert outstanding)
4. Generic premature trigger tag absent
5. Any dependency tag absent -> PREMATURE, else SAFE

UNSAFE always dominates PREMATURE. Status is computed fresh per call and
never cached.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Callable, Iterable, Optional, Sequence

from ..domain import EvidenceGraph, ImpactItem, PracticeArea
from ..evidence import Severity


logger = logging.getLogger(__name__)


# =============================================================================
# PILLAR STATUS
# =============================================================================

class PillarStatus(Enum):
    SAFE = "SAFE"
    PREMATURE = "PREMATURE"
    UNSAFE = "UNSAFE"


# =============================================================================
# EVIDENCE TAGS
# =============================================================================

class EvidenceTag(Enum):
    """Every evidence keyword a lens pillar may depend on."""
    CCTV = "cctv"
    BWV = "bwv"
    IDENTIFICATION = "identification"
    CONTINUITY = "continuity"
    CALL_999 = "999"
    MEDICAL = "medical"
    INJURY = "injury"
    TENANCY = "tenancy"
    LANDLORD = "landlord"
    DUTY = "duty"
    INSPECTION = "inspection"
    PHOTOGRAPH = "photograph"
    REPORT = "report"
    DEFECT = "defect"
    NOTICE = "notice"
    KNOWLEDGE = "knowledge"
    COMPLAINT = "complaint"
    HEALTH = "health"
    HAZARD = "hazard"
    AWAABS = "awaabs"
    DEADLINE = "deadline"
    ENFORCEMENT = "enforcement"
    OMBUDSMAN = "ombudsman"
    RELATIONSHIP = "relationship"
    STANDARD = "standard"
    EXPERT = "expert"
    BREACH = "breach"
    CAUSATION = "causation"
    PROGNOSIS = "prognosis"
    DISCLOSURE = "disclosure"
    PROTOCOL = "protocol"
    LETTER = "letter"
    RESPONSE = "response"
    THRESHOLD = "threshold"
    WELFARE = "welfare"
    S31 = "s31"
    SAFEGUARDING = "safeguarding"
    POLICE = "police"
    SOCIAL = "social"
    MARAC = "marac"
    GP = "gp"
    SCHOOL = "school"
    FACT_FINDING = "fact_finding"
    HEARING = "hearing"
    ALLEGATION = "allegation"
    RISK = "risk"
    ASSESSMENT = "assessment"
    SAFETY = "safety"
    ORDER = "order"
    TIMETABLE = "timetable"
    CAUSE = "cause"
    ACTION = "action"
    ELEMENTS = "elements"
    EVIDENCE = "evidence"
    DOCUMENT = "document"
    DEFENCE = "defence"
    ADMISSION = "admission"
    LIMITATION = "limitation"
    REMEDY = "remedy"
    QUANTUM = "quantum"
    DAMAGES = "damages"
    NEGLIGENCE = "negligence"
    PART36 = "part36"

    @property
    def keywords(self) -> tuple[str, ...]:
        return TAG_KEYWORDS.get(self, (self.value,))

    @property
    def label(self) -> str:
        text = self.value.replace("_", " ")
        return text[:1].upper() + text[1:]


# Tags whose spelling in documents differs from the tag value
TAG_KEYWORDS: dict[EvidenceTag, tuple[str, ...]] = {
    EvidenceTag.AWAABS: ("awaab",),
    EvidenceTag.FACT_FINDING: ("fact_finding", "fact-finding", "fact finding"),
    EvidenceTag.PART36: ("part36", "part 36"),
    EvidenceTag.S31: ("s31", "section 31"),
    EvidenceTag.BWV: ("bwv", "body worn", "body-worn"),
}


def _word_prefix(keyword: str, text: str) -> bool:
    return re.search(r"\b" + re.escape(keyword.lower()), text) is not None


# =============================================================================
# EVIDENCE PRESENCE
# =============================================================================

@dataclass(frozen=True)
class EvidencePresence:
    """
    Which tags are absent for one evaluation.

    A tag is absent exactly when a CRITICAL item's name word-prefix-matches
    one of its keywords. Everything else counts as present.
    """
    items: tuple[ImpactItem, ...] = ()
    absent: frozenset = field(default_factory=frozenset)

    @classmethod
    def from_items(cls, items: Iterable[ImpactItem]) -> EvidencePresence:
        items = tuple(items)
        absent = set()
        for item in items:
            if not item.is_critical:
                continue
            name = item.name.lower()
            for tag in EvidenceTag:
                if any(_word_prefix(kw, name) for kw in tag.keywords):
                    absent.add(tag)
        return cls(items=items, absent=frozenset(absent))

    @classmethod
    def from_graph(
        cls,
        graph: EvidenceGraph,
        extra_items: Sequence[ImpactItem] = (),
    ) -> EvidencePresence:
        return cls.from_items(list(impact_items_from_graph(graph)) + list(extra_items))

    def is_present(self, tag: EvidenceTag) -> bool:
        return tag not in self.absent

    def all_present(self, *tags: EvidenceTag) -> bool:
        return all(self.is_present(tag) for tag in tags)

    def any_absent(self, *tags: EvidenceTag) -> bool:
        return not self.all_present(*tags)

    def mentions(self, *needles: str) -> bool:
        """True if any impact item (critical or not) names one of `needles`."""
        return any(
            needle in item.name.lower()
            for item in self.items
            for needle in needles
        )


def impact_items_from_graph(graph: EvidenceGraph) -> list[ImpactItem]:
    """
    Impact items implied by a graph.

    CRITICAL/HIGH gaps and withheld evidence are CRITICAL; lesser gaps
    are recorded at their own severity.
    """
    items = []
    for gap in graph.disclosure_gaps:
        name = f"{gap.category} {gap.item}"
        if gap.severity in (Severity.CRITICAL, Severity.HIGH):
            items.append(ImpactItem(name, Severity.CRITICAL.value, missing=True))
        else:
            items.append(ImpactItem(name, gap.severity.value, missing=True))
    for evidence in graph.evidence_items:
        if evidence.is_withheld:
            items.append(ImpactItem(evidence.display_name(), Severity.CRITICAL.value, missing=True))
    return items


# =============================================================================
# PILLARS AND CONTEXT
# =============================================================================

@dataclass(frozen=True)
class Pillar:
    """A static pillar definition. Never mutated."""
    id: str
    label: str
    evidence_dependency_keys: tuple[EvidenceTag, ...] = ()
    unsafe_trigger_keys: tuple[EvidenceTag, ...] = ()
    premature_trigger_keys: tuple[EvidenceTag, ...] = ()


@dataclass(frozen=True)
class LensContext:
    """Everything a lens may read. Deadline facts are typed, never guessed."""
    presence: EvidencePresence = field(default_factory=EvidencePresence)
    has_disclosure_gaps: bool = False
    phase: int = 1
    primary_strategy: Optional[str] = None
    has_ptph: bool = False
    saved_position_text: Optional[str] = None

    # Housing disrepair
    hazard_type: Optional[str] = None
    notice_date: Optional[date] = None
    vulnerability_flags: tuple[str, ...] = ()
    investigation_date: Optional[date] = None
    work_start_date: Optional[date] = None

    # Personal injury
    accident_date: Optional[date] = None

    # Clinical negligence
    date_of_knowledge: Optional[date] = None
    letter_of_claim_sent: Optional[bool] = None
    letter_of_claim_date: Optional[date] = None
    response_received: Optional[bool] = None

    # General litigation
    limitation_start_date: Optional[date] = None
    limitation_expired: Optional[bool] = None

    # Family
    welfare_threshold_engaged: Optional[bool] = None

    reference_date: Optional[date] = None

    def position_denies(self) -> bool:
        """Saved position text contains a denial or dispute."""
        if not self.saved_position_text:
            return False
        return re.search(
            r"\b(?:den(?:y|ies|ied)|not|disput\w*)\b",
            self.saved_position_text.lower(),
        ) is not None


@dataclass(frozen=True)
class PillarAssessment:
    status: PillarStatus
    reason: str


# =============================================================================
# LENS OUTPUT RULES
# =============================================================================

@dataclass(frozen=True)
class IrreversibleDecision:
    id: str
    label: str
    description: str
    condition: Callable[[LensContext], bool]


@dataclass(frozen=True)
class JudicialPattern:
    id: str
    pattern: str
    condition: Callable[[LensContext], bool]


@dataclass(frozen=True)
class SafetyCheck:
    id: str
    severity: str  # "high" | "medium"
    message: str
    condition: Callable[[LensContext], bool]


@dataclass(frozen=True)
class DecisionFlag:
    id: str
    label: str
    description: str


@dataclass(frozen=True)
class PatternNote:
    id: str
    pattern: str


@dataclass(frozen=True)
class SafetyFlag:
    id: str
    severity: str
    message: str


@dataclass(frozen=True)
class DeadlineCheck:
    """Result of a statutory or protocol deadline check."""
    status: PillarStatus
    reason: str
    days_remaining: Optional[int] = None


# Phase lifecycle
PHASE_LABELS = {
    1: "Disclosure & Readiness",
    2: "Positioning & Options",
    3: "Sentencing/Outcome",
}

GENERIC_UNSAFE_REASON = "Unsafe to proceed"
GENERIC_PREMATURE_REASON = "Key evidence outstanding"
GENERIC_SAFE_REASON = "Evidence present"


def always(context: LensContext) -> bool:
    return True


# =============================================================================
# PRACTICE LENS
# =============================================================================

class PracticeLens:
    """
    Base lens. Subclasses declare pillars and rule tables as class
    attributes and override the three domain hooks where needed.
    """

    practice_area: PracticeArea
    pillars: tuple[Pillar, ...] = ()
    irreversible_decisions: tuple[IrreversibleDecision, ...] = ()
    judicial_patterns: tuple[JudicialPattern, ...] = ()
    safety_checks: tuple[SafetyCheck, ...] = ()
    tool_visibility: dict[int, tuple[str, ...]] = {}
    unsafe_reasons: dict[str, str] = {}
    premature_reasons: dict[str, str] = {}
    safe_reasons: dict[str, str] = {}

    # -------------------------------------------------------------------------
    # Domain hooks
    # -------------------------------------------------------------------------

    def unsafe_override(self, pillar: Pillar, context: LensContext) -> Optional[str]:
        """Reason the pillar is UNSAFE regardless of tags, or None."""
        return None

    def premature_override(self, pillar: Pillar, context: LensContext) -> Optional[str]:
        """Reason the pillar is PREMATURE regardless of tags, or None."""
        return None

    def deadline_checks(self, context: LensContext) -> dict[str, DeadlineCheck]:
        return {}

    # -------------------------------------------------------------------------
    # Pillar evaluation
    # -------------------------------------------------------------------------

    def _missing_reason(self, pillar: Pillar, context: LensContext) -> str:
        if pillar.id in self.premature_reasons:
            return self.premature_reasons[pillar.id]
        missing = [
            tag for tag in pillar.evidence_dependency_keys
            if not context.presence.is_present(tag)
        ]
        if missing:
            return f"{missing[0].label} evidence outstanding"
        return GENERIC_PREMATURE_REASON

    def assess_pillar(self, pillar: Pillar, context: LensContext) -> PillarAssessment:
        presence = context.presence

        reason = self.unsafe_override(pillar, context)
        if reason:
            return PillarAssessment(PillarStatus.UNSAFE, reason)

        if presence.any_absent(*pillar.unsafe_trigger_keys):
            return PillarAssessment(
                PillarStatus.UNSAFE,
                self.unsafe_reasons.get(pillar.id, GENERIC_UNSAFE_REASON),
            )

        reason = self.premature_override(pillar, context)
        if reason:
            return PillarAssessment(PillarStatus.PREMATURE, reason)

        if (
            presence.any_absent(*pillar.premature_trigger_keys)
            or presence.any_absent(*pillar.evidence_dependency_keys)
        ):
            return PillarAssessment(
                PillarStatus.PREMATURE, self._missing_reason(pillar, context)
            )

        return PillarAssessment(
            PillarStatus.SAFE,
            self.safe_reasons.get(pillar.id, GENERIC_SAFE_REASON),
        )

    def get_pillar_status(self, pillar: Pillar, context: LensContext) -> PillarStatus:
        return self.assess_pillar(pillar, context).status

    def get_pillar_reason(
        self,
        pillar: Pillar,
        status: PillarStatus,
        context: LensContext,
    ) -> str:
        """
        Reason text for `status`, following the same precedence as
        get_pillar_status. A status other than the computed one gets the
        generic reason for that status.
        """
        assessment = self.assess_pillar(pillar, context)
        if assessment.status is status:
            return assessment.reason
        if status is PillarStatus.UNSAFE:
            return self.unsafe_reasons.get(pillar.id, GENERIC_UNSAFE_REASON)
        if status is PillarStatus.PREMATURE:
            return self._missing_reason(pillar, context)
        return self.safe_reasons.get(pillar.id, GENERIC_SAFE_REASON)

    def get_pillar(self, pillar_id: str) -> Pillar:
        for pillar in self.pillars:
            if pillar.id == pillar_id:
                return pillar
        raise KeyError(pillar_id)

    # -------------------------------------------------------------------------
    # Advisory outputs
    # -------------------------------------------------------------------------

    def active_decisions(self, context: LensContext) -> list[DecisionFlag]:
        return [
            DecisionFlag(rule.id, rule.label, rule.description)
            for rule in self.irreversible_decisions
            if context.phase >= 2 and rule.condition(context)
        ]

    def active_patterns(self, context: LensContext) -> list[PatternNote]:
        return [
            PatternNote(rule.id, rule.pattern)
            for rule in self.judicial_patterns
            if rule.condition(context)
        ]

    def run_safety_checks(self, context: LensContext) -> list[SafetyFlag]:
        return [
            SafetyFlag(check.id, check.severity, check.message)
            for check in self.safety_checks
            if check.condition(context)
        ]

    def visible_tools(self, phase: int) -> list[str]:
        """Tools for every phase up to and including `phase`."""
        tools: list[str] = []
        for step in sorted(self.tool_visibility):
            if step <= phase:
                tools.extend(t for t in self.tool_visibility[step] if t not in tools)
        return tools


# =============================================================================
# PHASE RESOLUTION
# =============================================================================

def resolve_phase(requested: Optional[int], disclosure_complete: bool) -> int:
    """
    Lifecycle phase for an evaluation.

    A caller-supplied phase wins (clamped to 1..3). Otherwise incomplete
    disclosure gives phase 1 and complete disclosure gives phase 2.
    """
    if requested is not None:
        return max(1, min(3, int(requested)))
    return 2 if disclosure_complete else 1


# =============================================================================
# LENS EVALUATION
# =============================================================================

@dataclass(frozen=True)
class LensEvaluation:
    practice_area: PracticeArea
    phase: int
    phase_label: str
    pillars: dict[str, PillarAssessment]
    safety_checks: tuple[SafetyFlag, ...] = ()
    irreversible_decisions: tuple[DecisionFlag, ...] = ()
    judicial_patterns: tuple[PatternNote, ...] = ()
    visible_tools: tuple[str, ...] = ()
    deadline_checks: dict[str, DeadlineCheck] = field(default_factory=dict)

    def status_of(self, pillar_id: str) -> PillarStatus:
        return self.pillars[pillar_id].status

    @property
    def unsafe_pillars(self) -> list[str]:
        return [pid for pid, a in self.pillars.items() if a.status is PillarStatus.UNSAFE]


def evaluate_lens(lens: PracticeLens, context: LensContext) -> LensEvaluation:
    """Evaluate every pillar and advisory rule of a lens for one context."""
    pillars = {pillar.id: lens.assess_pillar(pillar, context) for pillar in lens.pillars}
    logger.debug(
        "lens %s phase=%d: %s",
        lens.practice_area.value,
        context.phase,
        ", ".join(f"{pid}={a.status.value}" for pid, a in pillars.items()),
    )
    return LensEvaluation(
        practice_area=lens.practice_area,
        phase=context.phase,
        phase_label=PHASE_LABELS.get(context.phase, PHASE_LABELS[1]),
        pillars=pillars,
        safety_checks=tuple(lens.run_safety_checks(context)),
        irreversible_decisions=tuple(lens.active_decisions(context)),
        judicial_patterns=tuple(lens.active_patterns(context)),
        visible_tools=tuple(lens.visible_tools(context.phase)),
        deadline_checks=lens.deadline_checks(context),
    )
