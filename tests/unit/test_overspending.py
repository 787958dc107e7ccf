"""Unit tests for budget overspend and weekly spike alerts"""

from decimal import Decimal

from spendguard.domain.features import budget_usage, detect_spending_spike
from spendguard.domain.models import AlertType, Budget, BudgetPeriod
from spendguard.domain.overspending import check_budget_overspend, check_weekly_spike, detect_overspending
from tests.conftest import make_expense


def food_budget(limit="200.00", period=BudgetPeriod.MONTHLY) -> Budget:
    return Budget(user_id="user_1", category="FOOD", limit=Decimal(limit), period=period)


def test_spend_at_tolerance_does_not_alert():
    """Spending exactly limit * 1.10 is allowed"""
    usage = budget_usage(food_budget(), [make_expense("220.00")])
    assert check_budget_overspend(usage) is None


def test_spend_above_tolerance_alerts():
    usage = budget_usage(food_budget(), [make_expense("220.01")])
    alert = check_budget_overspend(usage)

    assert alert is not None
    assert alert.type is AlertType.OVERSPENDING


def test_overspend_message_rounds_percent_half_up():
    """(235 - 200) / 200 = 17.5% is reported as 18%"""
    usage = budget_usage(food_budget(), [make_expense("150.00"), make_expense("85.00")])
    alert = check_budget_overspend(usage)

    assert alert.message == (
        "You have exceeded your monthly FOOD budget of $200.00 by 18%. Total spent: $235.00."
    )


def test_weekly_budget_message_names_period():
    usage = budget_usage(food_budget("50.00", BudgetPeriod.WEEKLY), [make_expense("100.00")])
    alert = check_budget_overspend(usage)

    assert "weekly FOOD budget" in alert.message
    assert "by 100%" in alert.message


def test_spike_alert_message():
    alert = check_weekly_spike(detect_spending_spike(Decimal("300"), Decimal("200")))

    assert alert.type is AlertType.SPIKE
    assert alert.message == "Your spending this week ($300.00) is 50% higher than last week ($200.00)."


def test_spike_message_rounds_exact_increase_once():
    """280.99 vs 200 is +40.495%: reported as 40%, not 41% via the cents-rounded 40.50"""
    spike = detect_spending_spike(Decimal("280.99"), Decimal("200"))
    alert = check_weekly_spike(spike)

    assert spike.percent_change == Decimal("40.50")
    assert alert.message == "Your spending this week ($280.99) is 40% higher than last week ($200.00)."


def test_spike_alert_from_empty_previous_week():
    alert = check_weekly_spike(detect_spending_spike(Decimal("80"), Decimal("0")))

    assert alert.type is AlertType.SPIKE
    assert "no recorded spending last week" in alert.message


def test_no_spike_no_alert():
    assert check_weekly_spike(detect_spending_spike(Decimal("100"), Decimal("100"))) is None


def test_detect_overspending_checks_are_independent():
    """Two overspent budgets plus a spike give three alerts, one of them SPIKE"""
    usages = [
        budget_usage(food_budget("50.00", BudgetPeriod.WEEKLY), [make_expense("100.00")]),
        budget_usage(food_budget("80.00", BudgetPeriod.MONTHLY), [make_expense("100.00")]),
    ]
    spike = detect_spending_spike(Decimal("100"), Decimal("0"))

    alerts = detect_overspending(usages, spike)

    assert [a.type for a in alerts] == [AlertType.OVERSPENDING, AlertType.OVERSPENDING, AlertType.SPIKE]


def test_detect_overspending_without_budgets():
    spike = detect_spending_spike(Decimal("100"), Decimal("100"))
    assert detect_overspending([], spike) == []
