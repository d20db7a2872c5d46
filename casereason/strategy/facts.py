"""
Route archetypes and the evidence facts the fight engine reads.

Facts are booleans derived once from the evidence graph. Withheld items
never count as present.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..domain import EvidenceGraph
from ..evidence import EvidenceItem, EvidenceType


class RouteType(Enum):
    FIGHT_CHARGE = "fight_charge"
    CHARGE_REDUCTION = "charge_reduction"
    OUTCOME_MANAGEMENT = "outcome_management"

    @property
    def label(self) -> str:
        return ROUTE_LABELS[self]


ROUTE_LABELS = {
    RouteType.FIGHT_CHARGE: "Fight Charge (Full Trial)",
    RouteType.CHARGE_REDUCTION: "Charge Reduction (s18 → s20)",
    RouteType.OUTCOME_MANAGEMENT: "Outcome Management (Plea/Mitigation)",
}

WEAPON_TERMS = ("weapon", "knife", "blade", "bottle")


@dataclass(frozen=True)
class ExtractedFacts:
    has_cctv: bool = False
    has_bwv: bool = False
    has_mg6: bool = False
    has_custody: bool = False
    has_interview: bool = False
    has_999: bool = False
    has_weapon: bool = False
    has_medical_evidence: bool = False
    charge_section: Optional[str] = None

    @property
    def has_visual(self) -> bool:
        return self.has_cctv or self.has_bwv


def _text(item: EvidenceItem) -> str:
    return f"{item.description} {item.notes or ''}".lower()


def _any_mentions(items: list[EvidenceItem], *needles: str) -> bool:
    return any(needle in _text(item) for item in items for needle in needles)


def facts_from_graph(
    graph: EvidenceGraph,
    charge_section: Optional[str] = None,
) -> ExtractedFacts:
    """Derive fight-engine facts from the disclosed (or partly disclosed) evidence."""
    available = [item for item in graph.evidence_items if not item.is_withheld]
    custody = [i for i in available if i.type is EvidenceType.CUSTODY_INTERVIEW]

    return ExtractedFacts(
        has_cctv=graph.has_item(EvidenceType.CCTV),
        has_bwv=graph.has_item(EvidenceType.BWV),
        has_mg6=_any_mentions(available, "mg6"),
        has_custody=_any_mentions(custody, "custody"),
        has_interview=_any_mentions(custody, "interview"),
        has_999=graph.has_item(EvidenceType.EMERGENCY_CALL),
        has_weapon=_any_mentions(available, *WEAPON_TERMS),
        has_medical_evidence=graph.has_item(EvidenceType.MEDICAL, EvidenceType.AMBULANCE),
        charge_section=charge_section or None,
    )
