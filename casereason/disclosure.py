"""
Disclosure Status Evaluation.

Two views of disclosure, both pure:

1. evaluate_disclosure: graph-level completeness with named key-item
   flags per practice area
2. compute_disclosure_checklist: the seven standard criminal disclosure
   items checked against documents, timeline, impact map and declared
   dependencies

Neither view is ever persisted; both are recomputed from their inputs.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Sequence

from .domain import EvidenceGraph, ImpactItem, PracticeArea
from .evidence import DisclosureState, EvidenceType


logger = logging.getLogger(__name__)


# =============================================================================
# GRAPH-LEVEL DISCLOSURE STATUS
# =============================================================================

@dataclass(frozen=True)
class DisclosureStatus:
    """
    Whether disclosure is complete for a graph.

    is_complete is True only when there are no gaps and every key item
    flag is True.
    """
    is_complete: bool
    gaps: tuple[str, ...] = ()
    key_item_flags: dict[str, bool] = field(default_factory=dict)


def _mentions(text: Optional[str], needle: str) -> bool:
    return bool(text) and needle in text.lower()


def _criminal_flags(graph: EvidenceGraph) -> dict[str, bool]:
    cctv_items = graph.items_of_type(EvidenceType.CCTV)
    cctv_gap = any(
        gap.category.lower() == "cctv" or _mentions(gap.item, "cctv")
        for gap in graph.disclosure_gaps
    )
    cctv_disclosed = (
        len(cctv_items) > 0
        and all(item.is_disclosed for item in cctv_items)
        and not cctv_gap
    )

    mg6_served = any(
        item.is_disclosed
        and (_mentions(item.description, "mg6") or _mentions(item.notes, "mg6"))
        for item in graph.evidence_items
    )
    mg6_gap = any(_mentions(gap.item, "mg6") for gap in graph.disclosure_gaps)

    return {
        "cctv_disclosed": cctv_disclosed,
        "mg6c_disclosed": mg6_served and not mg6_gap,
    }


def _general_flags(graph: EvidenceGraph) -> dict[str, bool]:
    outstanding = any(
        item.disclosure_status in (
            DisclosureState.NOT_DISCLOSED,
            DisclosureState.PARTIALLY_DISCLOSED,
        )
        for item in graph.evidence_items
    )
    return {"evidence_disclosed": not outstanding}


def evaluate_disclosure(
    graph: EvidenceGraph,
    practice_area: PracticeArea = PracticeArea.CRIMINAL,
) -> DisclosureStatus:
    """
    Evaluate disclosure completeness for a graph.

    Criminal cases carry cctv_disclosed and mg6c_disclosed; every other
    area carries evidence_disclosed.
    """
    if practice_area is PracticeArea.CRIMINAL:
        flags = _criminal_flags(graph)
    else:
        flags = _general_flags(graph)

    gaps = tuple(gap.item for gap in graph.disclosure_gaps)
    status = DisclosureStatus(
        is_complete=not gaps and all(flags.values()),
        gaps=gaps,
        key_item_flags=flags,
    )
    logger.debug(
        "disclosure (%s): complete=%s gaps=%d flags=%s",
        practice_area.value, status.is_complete, len(gaps), flags,
    )
    return status


# =============================================================================
# STANDARD DISCLOSURE CHECKLIST
# =============================================================================

class ChecklistStatus(Enum):
    UNSAFE = "unsafe"
    CONDITIONALLY_UNSAFE = "conditionally_unsafe"
    SAFE = "safe"


class DependencyStatus(Enum):
    REQUIRED = "required"
    HELPFUL = "helpful"
    NOT_NEEDED = "not_needed"


@dataclass(frozen=True)
class ChecklistItem:
    key: str
    label: str
    severity: str  # "critical" | "high"
    patterns: tuple[str, ...]


STANDARD_DISCLOSURE_ITEMS = (
    ChecklistItem(
        "cctv_full_window", "CCTV Full Window", "critical",
        ("cctv", "camera footage", "video footage", "cctv footage", "cctv window"),
    ),
    ChecklistItem(
        "cctv_continuity", "CCTV Continuity", "critical",
        ("cctv continuity", "continuity log", "cctv chain of custody"),
    ),
    ChecklistItem(
        "bwv", "Body Worn Video (BWV)", "critical",
        ("bwv", "body worn video", "body-worn video", "body worn"),
    ),
    ChecklistItem(
        "call_999_audio", "999 Call Audio", "high",
        ("999", "emergency call", "999 call", "emergency recording", "999 audio"),
    ),
    ChecklistItem(
        "cad_log", "CAD Log", "high",
        ("cad", "computer aided dispatch", "dispatch log", "cad log"),
    ),
    ChecklistItem(
        "interview_recording", "Interview Recording", "critical",
        ("interview recording", "interview audio", "interview video",
         "interview transcript", "pace interview"),
    ),
    ChecklistItem(
        "custody_record_or_custody_cctv", "Custody Record / Custody CCTV", "high",
        ("custody record", "custody cctv", "custody footage", "custody video"),
    ),
)

SATISFYING_ACTIONS = ("served", "reviewed")


@dataclass(frozen=True)
class TimelineEntry:
    """One disclosure event, e.g. ("BWV", "served", "2024-03-01")."""
    item: str
    action: str
    date: Optional[str] = None

    @property
    def is_satisfying(self) -> bool:
        return self.action.strip().lower() in SATISFYING_ACTIONS


@dataclass(frozen=True)
class DeclaredDependency:
    id: str
    label: str = ""
    status: DependencyStatus = DependencyStatus.REQUIRED


@dataclass(frozen=True)
class DisclosureChecklist:
    status: ChecklistStatus
    missing_items: tuple[ChecklistItem, ...]
    satisfied_items: tuple[ChecklistItem, ...]
    rationale: tuple[str, ...]
    is_simulated: bool = False


def _matches_name(item: ChecklistItem, name: str) -> bool:
    """Loose match used for timeline entries and dependencies."""
    if not name:
        return False
    key = item.key.lower()
    label = item.label.lower()
    return (
        name in key or key in name
        or name in label or label in name
        or any(p in name or p.replace(" ", "") in name for p in item.patterns)
    )


def _satisfied_by_timeline(item: ChecklistItem, timeline: Sequence[TimelineEntry]) -> bool:
    return any(
        entry.is_satisfying and _matches_name(item, entry.item.lower())
        for entry in timeline
    )


def _satisfied_by_documents(item: ChecklistItem, document_names: Sequence[str]) -> bool:
    return any(
        any(pattern in name.lower() for pattern in item.patterns)
        for name in document_names
    )


def _satisfied_by_dependencies(
    item: ChecklistItem,
    dependencies: Sequence[DeclaredDependency],
    timeline: Sequence[TimelineEntry],
) -> bool:
    for dep in dependencies:
        dep_id = dep.id.lower()
        dep_label = dep.label.lower()
        if not (_matches_name(item, dep_id) or _matches_name(item, dep_label)):
            continue
        if dep.status is DependencyStatus.NOT_NEEDED:
            return True
        # A required dependency is still satisfied once served
        for entry in timeline:
            entry_item = entry.item.lower()
            if entry.is_satisfying and (
                (dep_id and dep_id in entry_item) or (dep_label and dep_label in entry_item)
            ):
                return True
    return False


def _satisfied_by_impact(item: ChecklistItem, impact_items: Sequence[ImpactItem]) -> bool:
    for impact in impact_items:
        name = impact.name.lower()
        if any(pattern in name for pattern in item.patterns) and not impact.is_marked_missing:
            return True
    return False


def is_item_satisfied(
    item: ChecklistItem,
    document_names: Sequence[str] = (),
    timeline: Sequence[TimelineEntry] = (),
    impact_items: Sequence[ImpactItem] = (),
    declared_dependencies: Sequence[DeclaredDependency] = (),
) -> bool:
    """Any single source is enough to satisfy a checklist item."""
    return (
        _satisfied_by_timeline(item, timeline)
        or _satisfied_by_documents(item, document_names)
        or _satisfied_by_dependencies(item, declared_dependencies, timeline)
        or _satisfied_by_impact(item, impact_items)
    )


def compute_disclosure_checklist(
    document_names: Sequence[str] = (),
    timeline: Sequence[TimelineEntry] = (),
    impact_items: Sequence[ImpactItem] = (),
    declared_dependencies: Sequence[DeclaredDependency] = (),
) -> DisclosureChecklist:
    """
    Check the standard disclosure items.

    Status:
        unsafe               — any critical item missing
        conditionally_unsafe — any high item missing, or 3+ items missing
        safe                 — otherwise
    """
    is_simulated = any("SIMULATED" in name.upper() for name in document_names)

    missing: list[ChecklistItem] = []
    satisfied: list[ChecklistItem] = []
    for item in STANDARD_DISCLOSURE_ITEMS:
        if is_item_satisfied(item, document_names, timeline, impact_items, declared_dependencies):
            satisfied.append(item)
        else:
            missing.append(item)

    critical = [item for item in missing if item.severity == "critical"]
    high = [item for item in missing if item.severity == "high"]
    rationale: list[str] = []

    if critical:
        status = ChecklistStatus.UNSAFE
        rationale.append(
            f"{len(critical)} critical disclosure item(s) missing: "
            + ", ".join(item.label for item in critical)
        )
        rationale.append("Case cannot safely progress until critical disclosure is received.")
    elif high or len(missing) >= 3:
        status = ChecklistStatus.CONDITIONALLY_UNSAFE
        count = f"{len(high)} high" if high else str(len(missing))
        rationale.append(f"{count} disclosure item(s) missing")
        rationale.append(
            "Case may be conditionally unsafe to proceed. Core trial viability may be affected."
        )
    else:
        status = ChecklistStatus.SAFE
        rationale.append("All critical and high-priority disclosure items are satisfied.")
        if missing:
            rationale.append(
                f"{len(missing)} lower-priority item(s) remain outstanding but do not block progression."
            )

    if is_simulated:
        rationale.append("Simulated documents detected (demo case).")
    if satisfied:
        rationale.append(f"Satisfied: {len(satisfied)} item(s)")
    if missing:
        rationale.append(f"Missing: {len(missing)} item(s)")

    return DisclosureChecklist(
        status=status,
        missing_items=tuple(missing),
        satisfied_items=tuple(satisfied),
        rationale=tuple(rationale),
        is_simulated=is_simulated,
    )
