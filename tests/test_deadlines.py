"""
Tests for the civil deadline helpers.

All checks take an explicit reference date; none of them reads the clock.
"""

from datetime import date

import pytest

from casereason.lenses.base import PillarStatus
from casereason.lenses.deadlines import (
    add_months,
    add_years,
    awaabs_law_applies,
    check_awaabs_law,
    check_limitation,
    check_pre_action_protocol,
)


NOTICE = date(2024, 1, 1)


class TestDateArithmetic:
    """Test calendar helpers."""

    def test_month_end_clamps(self):
        assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)
        assert add_months(date(2023, 1, 31), 1) == date(2023, 2, 28)

    def test_year_rollover(self):
        assert add_months(date(2024, 11, 15), 3) == date(2025, 2, 15)

    def test_leap_day_years(self):
        assert add_years(date(2024, 2, 29), 1) == date(2025, 2, 28)
        assert add_years(date(2024, 2, 29), 4) == date(2028, 2, 29)


class TestAwaabsLaw:
    """Test the 7-day assessment / 28-day repair deadlines."""

    def test_applies_only_to_damp_with_vulnerability(self):
        assert awaabs_law_applies("Damp and mould", ["child"])
        assert not awaabs_law_applies("Damp and mould", [])
        assert not awaabs_law_applies("Broken boiler", ["elderly"])

    def test_not_applicable_is_safe(self):
        check = check_awaabs_law("Leaking roof", NOTICE, ["child"], None, None, date(2024, 6, 1))
        assert check.status is PillarStatus.SAFE
        assert check.reason == "Awaab's Law not applicable"

    def test_missing_notice_is_premature(self):
        check = check_awaabs_law("mould", None, ["child"], None, None, date(2024, 6, 1))
        assert check.status is PillarStatus.PREMATURE
        assert check.reason == "Notice date not recorded"

    def test_assessment_running(self):
        check = check_awaabs_law("mould", NOTICE, ["child"], None, None, date(2024, 1, 5))
        assert check.status is PillarStatus.PREMATURE
        assert check.days_remaining == 3

    def test_assessment_elapsed(self):
        check = check_awaabs_law("mould", NOTICE, ["child"], None, None, date(2024, 1, 10))
        assert check.status is PillarStatus.UNSAFE
        assert "7-day" in check.reason
        assert check.days_remaining == -2

    def test_late_investigation_counts_as_missed(self):
        check = check_awaabs_law(
            "mould", NOTICE, ["child"], date(2024, 1, 20), None, date(2024, 1, 25)
        )
        assert check.status is PillarStatus.UNSAFE
        assert "7-day" in check.reason

    def test_repair_running_and_elapsed(self):
        running = check_awaabs_law(
            "mould", NOTICE, ["child"], date(2024, 1, 5), None, date(2024, 1, 20)
        )
        elapsed = check_awaabs_law(
            "mould", NOTICE, ["child"], date(2024, 1, 5), None, date(2024, 2, 1)
        )
        assert running.status is PillarStatus.PREMATURE
        assert running.days_remaining == 9
        assert elapsed.status is PillarStatus.UNSAFE
        assert "28-day" in elapsed.reason

    def test_all_deadlines_met(self):
        check = check_awaabs_law(
            "mould", NOTICE, ["child"], date(2024, 1, 5), date(2024, 1, 20), date(2024, 6, 1)
        )
        assert check.status is PillarStatus.SAFE


class TestLimitation:
    """Test the limitation window."""

    START = date(2021, 6, 1)

    @pytest.mark.parametrize("reference, status, days", [
        (date(2024, 6, 2), PillarStatus.UNSAFE, 0),
        (date(2024, 5, 12), PillarStatus.UNSAFE, 20),
        (date(2024, 4, 1), PillarStatus.PREMATURE, 61),
        (date(2023, 6, 1), PillarStatus.SAFE, 366),
    ])
    def test_windows(self, reference, status, days):
        check = check_limitation(self.START, reference)
        assert check.status is status
        assert check.days_remaining == days

    def test_expired_reason(self):
        assert check_limitation(self.START, date(2025, 1, 1)).reason == "Limitation period expired"

    def test_missing_start(self):
        check = check_limitation(None, date(2024, 1, 1), missing_reason="No start")
        assert check.status is PillarStatus.PREMATURE
        assert check.reason == "No start"
        assert check.days_remaining is None


class TestPreActionProtocol:
    """Test the letter-of-claim response window."""

    LETTER = date(2024, 1, 31)

    def test_letter_not_sent(self):
        check = check_pre_action_protocol(False, None, None, date(2024, 6, 1))
        assert check.status is PillarStatus.PREMATURE
        assert check.reason == "Letter of claim not sent"

    def test_letter_date_missing(self):
        check = check_pre_action_protocol(True, None, None, date(2024, 6, 1))
        assert check.reason == "Letter of claim date not recorded"

    def test_response_received(self):
        check = check_pre_action_protocol(True, self.LETTER, True, date(2025, 1, 1))
        assert check.status is PillarStatus.SAFE

    def test_window_pending(self):
        check = check_pre_action_protocol(True, self.LETTER, False, date(2024, 5, 1))
        assert check.status is PillarStatus.PREMATURE
        assert check.days_remaining == 30

    def test_window_elapsed(self):
        check = check_pre_action_protocol(True, self.LETTER, False, date(2024, 6, 1))
        assert check.status is PillarStatus.UNSAFE
