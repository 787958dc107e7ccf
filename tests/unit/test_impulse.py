"""Unit tests for impulse spending detection"""

import uuid
from datetime import datetime, timedelta

from spendguard.domain.impulse import detect_impulse, rapid_purchases, recent_income
from spendguard.domain.models import AlertType
from tests.conftest import NOW, make_expense, make_income, minutes


def alert_types(findings):
    return [alert.type for alert in findings.alerts]


def test_three_purchases_within_an_hour_flag_impulse():
    """Purchases at t, t+10 and t+20 minutes: the third one triggers IMPULSE"""
    first = make_expense("12.00", id=uuid.uuid4(), occurred_at=NOW)
    second = make_expense("8.00", id=uuid.uuid4(), occurred_at=NOW + minutes(10))
    third = make_expense("20.00", id=uuid.uuid4(), occurred_at=NOW + minutes(20))

    findings = detect_impulse(third, [first, second, third], [])

    assert findings.flag_impulse is True
    assert findings.rapid_purchase_count == 3
    assert alert_types(findings) == [AlertType.IMPULSE]
    assert findings.alerts[0].message == (
        "Impulse spending detected: 3 purchases made within the last 60 minutes totaling $40.00."
    )


def test_second_purchase_does_not_trigger():
    first = make_expense(id=uuid.uuid4(), occurred_at=NOW)
    second = make_expense(id=uuid.uuid4(), occurred_at=NOW + minutes(10))

    findings = detect_impulse(second, [first, second], [])

    assert findings.flag_impulse is False
    assert findings.alerts == []


def test_later_purchase_outside_window_does_not_retrigger():
    """A fourth purchase 90 minutes after the first sees none of the earlier burst"""
    burst = [make_expense(id=uuid.uuid4(), occurred_at=NOW + minutes(m)) for m in (0, 10, 20)]
    later = make_expense(id=uuid.uuid4(), occurred_at=NOW + minutes(90))

    findings = detect_impulse(later, burst + [later], [])

    assert findings.flag_impulse is False
    assert findings.rapid_purchase_count == 1


def test_rapid_purchase_window_is_inclusive():
    trigger = make_expense(id=uuid.uuid4(), occurred_at=NOW)
    edge = make_expense(id=uuid.uuid4(), occurred_at=NOW - minutes(60))
    outside = make_expense(id=uuid.uuid4(), occurred_at=NOW - minutes(61))

    assert rapid_purchases(trigger, [edge, outside]) == [trigger, edge]


def test_rapid_purchases_use_recorded_at():
    """Back-dated expenses cluster by when they were recorded"""
    trigger = make_expense(id=uuid.uuid4(), occurred_at=NOW - timedelta(days=3), recorded_at=NOW)
    other = make_expense(id=uuid.uuid4(), occurred_at=NOW - timedelta(days=5), recorded_at=NOW - minutes(5))

    assert len(rapid_purchases(trigger, [other])) == 2


def test_late_night_alert():
    expense = make_expense("45.50", "ENTERTAINMENT", occurred_at=datetime(2024, 5, 15, 23, 42))

    findings = detect_impulse(expense, [], [])

    assert alert_types(findings) == [AlertType.LATE_NIGHT]
    assert findings.alerts[0].message == "Late night spending detected: $45.50 on ENTERTAINMENT at 23:42."
    assert findings.flag_impulse is False


def test_two_am_is_not_late_night():
    findings = detect_impulse(make_expense(occurred_at=datetime(2024, 5, 15, 2, 0)), [], [])
    assert findings.alerts == []


def test_post_income_alert_names_most_recent_income():
    expense = make_expense("60.00", "SHOPPING")
    incomes = [
        make_income("500.00", "Allowance", occurred_at=NOW - timedelta(hours=20)),
        make_income("1500.00", "Salary", occurred_at=NOW - timedelta(hours=2)),
    ]

    findings = detect_impulse(expense, [], incomes)

    assert alert_types(findings) == [AlertType.POST_INCOME]
    assert "$1500.00 from Salary" in findings.alerts[0].message


def test_income_older_than_a_day_is_ignored():
    expense = make_expense()
    income = make_income(occurred_at=NOW - timedelta(hours=24, seconds=1))

    assert recent_income(expense, [income]) is None


def test_all_three_patterns_together():
    late = datetime(2024, 5, 15, 23, 30)
    others = [make_expense(id=uuid.uuid4(), occurred_at=late - minutes(m)) for m in (5, 15)]
    trigger = make_expense(id=uuid.uuid4(), occurred_at=late)

    findings = detect_impulse(trigger, others, [make_income(occurred_at=late - timedelta(hours=3))])

    assert alert_types(findings) == [AlertType.IMPULSE, AlertType.LATE_NIGHT, AlertType.POST_INCOME]
