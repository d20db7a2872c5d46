"""
Deadline helpers for civil lenses.

Pure functions over explicit dates. None of them reads the clock; the
caller always supplies reference_date.

    check_awaabs_law          — 7-day assessment / 28-day repair (damp & mould)
    check_limitation          — limitation window from a start date
    check_pre_action_protocol — 4-month letter-of-claim response window
"""

from __future__ import annotations

import calendar
from datetime import date, timedelta
from typing import Optional, Sequence

from .base import DeadlineCheck, PillarStatus


# =============================================================================
# CONFIGURATION CONSTANTS
# =============================================================================

AWAABS_ASSESSMENT_DAYS = 7
AWAABS_REPAIR_DAYS = 28

LIMITATION_YEARS = 3
LIMITATION_UNSAFE_DAYS = 30
LIMITATION_PREMATURE_DAYS = 90

PROTOCOL_RESPONSE_MONTHS = 4


def add_months(start: date, months: int) -> date:
    """Calendar month arithmetic, clamping to the last day of the month."""
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def add_years(start: date, years: int) -> date:
    """29 February rolls back to 28 February in non-leap years."""
    return add_months(start, years * 12)


# =============================================================================
# AWAAB'S LAW
# =============================================================================

def awaabs_law_applies(
    hazard_type: Optional[str],
    vulnerability_flags: Sequence[str],
) -> bool:
    if not hazard_type or not vulnerability_flags:
        return False
    hazard = hazard_type.lower()
    return "damp" in hazard or "mould" in hazard or "mold" in hazard


def check_awaabs_law(
    hazard_type: Optional[str],
    notice_date: Optional[date],
    vulnerability_flags: Sequence[str],
    investigation_date: Optional[date],
    work_start_date: Optional[date],
    reference_date: date,
) -> DeadlineCheck:
    """
    Awaab's Law deadlines for a damp/mould hazard affecting a vulnerable
    occupant.

    An elapsed deadline is UNSAFE, a running one is PREMATURE.
    """
    if not awaabs_law_applies(hazard_type, vulnerability_flags):
        return DeadlineCheck(PillarStatus.SAFE, "Awaab's Law not applicable")

    if notice_date is None:
        return DeadlineCheck(PillarStatus.PREMATURE, "Notice date not recorded")

    assessment_deadline = notice_date + timedelta(days=AWAABS_ASSESSMENT_DAYS)
    repair_deadline = notice_date + timedelta(days=AWAABS_REPAIR_DAYS)

    if investigation_date is None or investigation_date > assessment_deadline:
        days = (assessment_deadline - reference_date).days
        if reference_date > assessment_deadline:
            return DeadlineCheck(
                PillarStatus.UNSAFE,
                "Awaab's Law: 7-day assessment deadline elapsed",
                days,
            )
        return DeadlineCheck(
            PillarStatus.PREMATURE,
            "Awaab's Law: 7-day assessment deadline approaching",
            days,
        )

    if work_start_date is None or work_start_date > repair_deadline:
        days = (repair_deadline - reference_date).days
        if reference_date > repair_deadline:
            return DeadlineCheck(
                PillarStatus.UNSAFE,
                "Awaab's Law: 28-day repair deadline elapsed",
                days,
            )
        return DeadlineCheck(
            PillarStatus.PREMATURE,
            "Awaab's Law: 28-day repair deadline approaching",
            days,
        )

    return DeadlineCheck(PillarStatus.SAFE, "Awaab's Law deadlines met")


# =============================================================================
# LIMITATION
# =============================================================================

def check_limitation(
    start_date: Optional[date],
    reference_date: date,
    years: int = LIMITATION_YEARS,
    missing_reason: str = "Accident date not recorded",
) -> DeadlineCheck:
    """
    Days left in a limitation period.

    Expired or 30 days or fewer: UNSAFE. 90 days or fewer: PREMATURE.
    A missing start date is PREMATURE.
    """
    if start_date is None:
        return DeadlineCheck(PillarStatus.PREMATURE, missing_reason)

    expiry = add_years(start_date, years)
    days_remaining = (expiry - reference_date).days

    if days_remaining < 0:
        return DeadlineCheck(PillarStatus.UNSAFE, "Limitation period expired", 0)
    if days_remaining <= LIMITATION_UNSAFE_DAYS:
        return DeadlineCheck(
            PillarStatus.UNSAFE,
            f"Limitation expires in {days_remaining} days - irreversible decision required",
            days_remaining,
        )
    if days_remaining <= LIMITATION_PREMATURE_DAYS:
        return DeadlineCheck(
            PillarStatus.PREMATURE,
            f"Limitation expires in {days_remaining} days",
            days_remaining,
        )
    return DeadlineCheck(
        PillarStatus.SAFE,
        f"Limitation expires in {days_remaining} days",
        days_remaining,
    )


# =============================================================================
# PRE-ACTION PROTOCOL
# =============================================================================

def check_pre_action_protocol(
    letter_sent: Optional[bool],
    letter_date: Optional[date],
    response_received: Optional[bool],
    reference_date: date,
) -> DeadlineCheck:
    if not letter_sent:
        return DeadlineCheck(PillarStatus.PREMATURE, "Letter of claim not sent")

    if letter_date is None:
        return DeadlineCheck(PillarStatus.PREMATURE, "Letter of claim date not recorded")

    if response_received:
        return DeadlineCheck(PillarStatus.SAFE, "Pre-Action Protocol response received")

    deadline = add_months(letter_date, PROTOCOL_RESPONSE_MONTHS)
    days = (deadline - reference_date).days
    if reference_date > deadline:
        return DeadlineCheck(
            PillarStatus.UNSAFE,
            "Pre-Action Protocol response window elapsed without response",
            days,
        )
    return DeadlineCheck(
        PillarStatus.PREMATURE,
        "Pre-Action Protocol response window pending",
        days,
    )
