"""Unit tests for feature aggregation"""

from datetime import datetime, timedelta
from decimal import Decimal

from spendguard.domain.features import (
    build_feature_vector,
    budget_usage,
    category_totals,
    detect_spending_spike,
    format_money,
    impulse_score,
    late_night_count,
    percent_of,
    round_whole,
    savings_rate,
    top_category,
)
from spendguard.domain.models import Budget, BudgetPeriod
from tests.conftest import NOW, make_expense, make_income, minutes


def test_impulse_score_counts_pairs_not_purchases():
    """Three purchases 10 minutes apart form two clustered pairs"""
    expenses = [
        make_expense(occurred_at=NOW),
        make_expense(occurred_at=NOW + minutes(10)),
        make_expense(occurred_at=NOW + minutes(20)),
    ]

    assert impulse_score(expenses) == 2


def test_impulse_score_sorts_by_occurrence():
    expenses = [
        make_expense(occurred_at=NOW + minutes(20)),
        make_expense(occurred_at=NOW),
        make_expense(occurred_at=NOW + minutes(10)),
    ]

    assert impulse_score(expenses) == 2


def test_impulse_score_window_boundary():
    """30 minutes apart still clusters, 31 does not"""
    assert impulse_score([make_expense(occurred_at=NOW), make_expense(occurred_at=NOW + minutes(30))]) == 1
    assert impulse_score([make_expense(occurred_at=NOW), make_expense(occurred_at=NOW + minutes(31))]) == 0


def test_impulse_score_needs_two_expenses():
    assert impulse_score([]) == 0
    assert impulse_score([make_expense()]) == 0


def test_savings_rate_without_income_is_zero():
    assert savings_rate(Decimal("0"), Decimal("500")) == 0


def test_savings_rate_can_go_negative():
    assert savings_rate(Decimal("1000"), Decimal("1200")) == Decimal("-20")


def test_percent_of_zero_whole():
    assert percent_of(Decimal("50"), Decimal("0")) == 0


def test_category_totals_and_top_category():
    expenses = [
        make_expense("30.00", "FOOD"),
        make_expense("50.00", "SHOPPING"),
        make_expense("25.00", "FOOD"),
    ]

    assert category_totals(expenses) == {"FOOD": Decimal("55.00"), "SHOPPING": Decimal("50.00")}
    assert top_category(expenses) == "FOOD"


def test_top_category_tie_goes_to_first_seen():
    expenses = [make_expense("40.00", "TRANSPORT"), make_expense("40.00", "FOOD")]
    assert top_category(expenses) == "TRANSPORT"


def test_top_category_empty():
    assert top_category([]) is None


def test_late_night_count():
    expenses = [
        make_expense(occurred_at=datetime(2024, 5, 14, 23, 15)),
        make_expense(occurred_at=datetime(2024, 5, 15, 1, 59)),
        make_expense(occurred_at=datetime(2024, 5, 15, 2, 0)),
    ]

    assert late_night_count(expenses) == 2


def test_spike_from_zero_previous_week():
    """Any spend after a week with none is a spike reported as 100%"""
    spike = detect_spending_spike(Decimal("100"), Decimal("0"))

    assert spike.spiked is True
    assert spike.percent_change == Decimal("100")


def test_no_spike_when_both_weeks_empty():
    spike = detect_spending_spike(Decimal("0"), Decimal("0"))

    assert spike.spiked is False
    assert spike.percent_change == 0


def test_spike_threshold_is_strict():
    """Exactly +40% is not a spike; anything above is"""
    assert detect_spending_spike(Decimal("140"), Decimal("100")).spiked is False
    assert detect_spending_spike(Decimal("140.01"), Decimal("100")).spiked is True


def test_spike_percent_change_rounded():
    spike = detect_spending_spike(Decimal("200"), Decimal("150"))

    assert spike.percent_change == Decimal("33.33")
    assert spike.spiked is False


def test_budget_usage_filters_category():
    budget = Budget(user_id="user_1", category="FOOD", limit=Decimal("200"), period=BudgetPeriod.MONTHLY)
    expenses = [make_expense("150.00", "FOOD"), make_expense("500.00", "SHOPPING")]

    usage = budget_usage(budget, expenses)

    assert usage.spent == Decimal("150.00")
    assert usage.threshold == Decimal("220.00")
    assert usage.overspent is False


def test_build_feature_vector():
    month_expenses = [
        make_expense("450.00", "FOOD", occurred_at=NOW - timedelta(days=3)),
        make_expense("300.00", "SHOPPING", occurred_at=NOW - timedelta(days=2)),
        make_expense("250.00", "TRANSPORT", occurred_at=NOW),
    ]
    features = build_feature_vector(
        month_expenses=month_expenses,
        month_income=[make_income("2000.00")],
        this_week_expenses=month_expenses,
        previous_week_expenses=[],
    )

    assert features.total_expense == Decimal("1000.00")
    assert features.total_income == Decimal("2000.00")
    assert features.savings_rate == Decimal("50")
    assert features.food_percent == Decimal("45")
    assert features.shopping_percent == Decimal("30")
    assert features.entertainment_percent == 0
    assert features.transport_total == Decimal("250.00")
    assert features.weekly_spike is True
    assert features.impulse_score == 0


def test_round_whole_half_up():
    assert round_whole(Decimal("17.5")) == 18
    assert round_whole(Decimal("17.49")) == 17


def test_format_money():
    assert format_money(Decimal("1234.5")) == "$1234.50"
