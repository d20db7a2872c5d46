"""
Strategy artifacts.

Four plain-text templates per route: defence position snapshot,
disclosure request pack, case management note and negotiation brief.
Values come only from typed case details; anything unknown is left as a
bracketed placeholder for the solicitor to fill in. No template reads
the clock.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .facts import ExtractedFacts, RouteType


PLACEHOLDER_CASE_ID = "[CASE_ID]"
PLACEHOLDER_CHARGE = "[CHARGE]"
PLACEHOLDER_CLIENT = "[CLIENT_NAME]"
PLACEHOLDER_DATE = "[DATE]"


class ArtifactType(Enum):
    DEFENCE_POSITION = "defence_position"
    DISCLOSURE_REQUEST = "disclosure_request"
    CASE_MANAGEMENT_NOTE = "case_management_note"
    NEGOTIATION_BRIEF = "negotiation_brief"


@dataclass(frozen=True)
class CaseDetails:
    case_id: Optional[str] = None
    charge: Optional[str] = None
    client_name: Optional[str] = None
    date: Optional[str] = None


@dataclass(frozen=True)
class StrategyArtifact:
    type: ArtifactType
    title: str
    content: str


def _header(title: str, details: CaseDetails) -> list[str]:
    return [
        title,
        f"Case: {details.case_id or PLACEHOLDER_CASE_ID}",
        f"Client: {details.client_name or PLACEHOLDER_CLIENT}",
        f"Charge: {details.charge or PLACEHOLDER_CHARGE}",
        f"Date: {details.date or PLACEHOLDER_DATE}",
        "",
    ]


def defence_position_snapshot(
    route: RouteType,
    can_generate_analysis: bool,
    facts: Optional[ExtractedFacts],
    details: CaseDetails,
) -> str:
    lines = _header("DEFENCE POSITION SNAPSHOT", details)
    evidence_known = can_generate_analysis and facts is not None

    if route is RouteType.FIGHT_CHARGE:
        lines += [
            f"PRIMARY STRATEGY: {route.label}",
            "",
            "POSITION:",
            "- Challenge prosecution case at trial",
            "- Target: Acquittal or dismissal",
            "- Focus: Evidence, intent, identification, procedural breaches",
            "",
        ]
        if evidence_known:
            lines.append("EVIDENCE STATUS:")
            if facts.has_cctv:
                lines.append("- CCTV: Available")
            if facts.has_bwv:
                lines.append("- BWV: Available")
            if facts.has_mg6:
                lines.append("- MG6: Available")
            if facts.has_interview:
                lines.append("- Interview: Available (PACE review required)")
        else:
            lines.append("EVIDENCE STATUS: Pending disclosure")

    elif route is RouteType.CHARGE_REDUCTION:
        lines += [
            f"PRIMARY STRATEGY: {route.label}",
            "",
            "POSITION:",
            "- Accept harm occurred but challenge intent threshold",
            "- Target: Reduction from s18 to s20 or lesser offence",
            "- Focus: Medical evidence, sequence, intent distinction",
            "",
        ]
        if evidence_known:
            lines.append("EVIDENCE STATUS:")
            if facts.has_medical_evidence:
                lines.append("- Medical evidence: Available")
            if facts.has_cctv:
                lines.append("- CCTV: Available (sequence analysis)")
        else:
            lines.append("EVIDENCE STATUS: Pending disclosure")

    else:
        lines += [
            f"PRIMARY STRATEGY: {route.label}",
            "",
            "POSITION:",
            "- Focus on sentencing position and mitigation",
            "- Target: Reduced sentence or non-custodial outcome",
            "- Focus: Early plea, mitigation, character evidence",
        ]

    return "\n".join(lines) + "\n"


DISCLOSURE_REQUESTS = {
    RouteType.FIGHT_CHARGE: (
        "Full MG6 schedules (MG6A, MG6B, MG6C)",
        "CCTV footage and continuity evidence",
        "BWV footage if available",
        "VIPER pack if identification procedure used",
        "Interview recording and transcript",
        "Custody record and PACE compliance documentation",
        "999 call recording if available",
        "All unused material",
    ),
    RouteType.CHARGE_REDUCTION: (
        "Full medical evidence and reports",
        "CCTV footage and continuity evidence",
        "Sequence evidence (timeline, duration)",
        "Weapon evidence if applicable",
        "MG6 schedules",
    ),
    RouteType.OUTCOME_MANAGEMENT: (
        "Full prosecution case bundle",
        "Sentencing guidelines and case law",
        "Previous convictions if applicable",
    ),
}


def disclosure_request_pack(route: RouteType, details: CaseDetails) -> str:
    lines = _header("DISCLOSURE REQUEST PACK", details)
    lines += ["REQUESTED ITEMS:", ""]
    lines += [f"{n}. {item}" for n, item in enumerate(DISCLOSURE_REQUESTS[route], start=1)]
    lines += [
        "",
        "URGENCY: Before PTPH",
        "CHASE TRAIL: Document all requests and follow-up",
    ]
    return "\n".join(lines) + "\n"


DIRECTIONS_SOUGHT = {
    RouteType.FIGHT_CHARGE: (
        ("Disclosure directions", (
            "Order prosecution to provide full MG6 schedules",
            "Order disclosure of CCTV/BWV footage",
            "Set deadline for disclosure compliance",
        )),
        ("Case management", (
            "List trial date",
            "Set timetable for defence case statement",
            "Consider abuse of process application if disclosure failures persist",
        )),
    ),
    RouteType.CHARGE_REDUCTION: (
        ("Charge review", (
            "Request prosecution review charge (s18 → s20)",
            "Directions on intent distinction evidence",
        )),
        ("Case management", (
            "List case management hearing if charge not reduced",
            "Set timetable for written submissions on intent",
        )),
    ),
    RouteType.OUTCOME_MANAGEMENT: (
        ("Sentencing preparation", (
            "Directions on mitigation evidence",
            "Timetable for character references",
        )),
        ("Case management", (
            "Consider early guilty plea if appropriate",
            "List sentencing hearing if plea entered",
        )),
    ),
}


def case_management_note(route: RouteType, details: CaseDetails) -> str:
    lines = _header("CASE MANAGEMENT NOTE", details)
    lines += ["DIRECTIONS SOUGHT:", ""]
    for n, (heading, directions) in enumerate(DIRECTIONS_SOUGHT[route], start=1):
        lines.append(f"{n}. {heading}:")
        lines += [f"   - {direction}" for direction in directions]
        lines.append("")
    return "\n".join(lines)


def negotiation_brief(
    route: RouteType,
    can_generate_analysis: bool,
    facts: Optional[ExtractedFacts],
    details: CaseDetails,
) -> str:
    lines = _header("NEGOTIATION BRIEF", details)
    lines += ["NEGOTIATION POSITION:", ""]

    if route is RouteType.FIGHT_CHARGE:
        lines += [
            "RATIONALE FOR DOWNGRADE:",
            "- Evidence gaps in prosecution case",
            "- Identification evidence may be challengeable",
            "- Intent may not be provable beyond reasonable doubt",
            "- Disclosure position unclear",
            "",
            "PROPOSED OUTCOME:",
            "- Consider charge reduction (s18 → s20) or lesser offence",
            "- Alternative: Dismissal if evidence gaps are material",
        ]
    elif route is RouteType.CHARGE_REDUCTION:
        lines += [
            "RATIONALE FOR DOWNGRADE:",
            "- Medical evidence supports recklessness (s20) not specific intent (s18)",
        ]
        if can_generate_analysis and facts is not None and facts.has_cctv:
            lines.append("- CCTV sequence shows brief contact, not prolonged attack")
        lines += [
            "- Intent distinction favours s20 charge",
            "",
            "PROPOSED OUTCOME:",
            "- Accept s20 plea with reduced sentence",
            "- Alternative: Proceed to trial on intent issue",
        ]
    else:
        lines += [
            "RATIONALE FOR SENTENCE REDUCTION:",
            "- Early guilty plea (maximum credit)",
            "- Strong mitigation evidence",
            "- Personal circumstances support non-custodial outcome",
            "",
            "PROPOSED OUTCOME:",
            "- Reduced sentence or non-custodial outcome",
            "- Consider suspended sentence or community order",
        ]

    return "\n".join(lines) + "\n"


def generate_artifacts(
    route: RouteType,
    can_generate_analysis: bool,
    facts: Optional[ExtractedFacts] = None,
    case_details: Optional[CaseDetails] = None,
) -> list[StrategyArtifact]:
    details = case_details or CaseDetails()
    return [
        StrategyArtifact(
            ArtifactType.DEFENCE_POSITION,
            "Defence Position Snapshot",
            defence_position_snapshot(route, can_generate_analysis, facts, details),
        ),
        StrategyArtifact(
            ArtifactType.DISCLOSURE_REQUEST,
            "Disclosure Request Pack",
            disclosure_request_pack(route, details),
        ),
        StrategyArtifact(
            ArtifactType.CASE_MANAGEMENT_NOTE,
            "Case Management Note",
            case_management_note(route, details),
        ),
        StrategyArtifact(
            ArtifactType.NEGOTIATION_BRIEF,
            "Negotiation Brief",
            negotiation_brief(route, can_generate_analysis, facts, details),
        ),
    ]
