from datetime import date, datetime, timedelta, timezone

import pytest

from risk_classifier import RiskLevel, classify, days_until

R = date(2026, 1, 2)


@pytest.mark.parametrize(
    "days, expected",
    [
        (29, RiskLevel.HIGH),
        (30, RiskLevel.MEDIUM),
        (59, RiskLevel.MEDIUM),
        (60, RiskLevel.LOW),
        (365, RiskLevel.LOW),
    ],
)
def test_boundaries_are_exact(days, expected):
    assert classify(R, R + timedelta(days=days)) is expected


def test_already_expired_is_high():
    assert classify(R, R - timedelta(days=1)) is RiskLevel.HIGH
    assert classify(R, R - timedelta(days=400)) is RiskLevel.HIGH


def test_same_day_is_high():
    assert classify(R, R) is RiskLevel.HIGH


def test_partial_days_round_up():
    ref = datetime(2026, 1, 2, 12, 0)
    # 29.5 days -> ceil 30 -> Medium
    assert days_until(ref, ref + timedelta(days=29, hours=12)) == 30
    assert classify(ref, ref + timedelta(days=29, hours=12)) is RiskLevel.MEDIUM
    # 59 days and one second -> 60 -> Low
    assert classify(ref, ref + timedelta(days=59, seconds=1)) is RiskLevel.LOW


def test_mixed_date_and_datetime():
    # date is midnight: from noon on Jan 2 to Feb 1 is 29.5 days -> 30
    assert days_until(datetime(2026, 1, 2, 12), date(2026, 2, 1)) == 30


def test_aware_datetimes_compared_in_utc():
    ref = datetime(2026, 1, 2, 0, 0, tzinfo=timezone.utc)
    exp = datetime(2026, 3, 3, 3, 0, tzinfo=timezone(timedelta(hours=3)))  # == 2026-03-03 00:00 UTC
    assert days_until(ref, exp) == 60
    assert classify(ref, exp) is RiskLevel.LOW


def test_total_over_range():
    for offset in range(-100, 200):
        assert classify(R, R + timedelta(days=offset)) in set(RiskLevel)


def test_risk_values_match_display_strings():
    assert [lvl.value for lvl in RiskLevel] == ["Low", "Medium", "High"]
