"""Feature aggregation - derived spending quantities from raw event collections"""

from collections import OrderedDict
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List, Optional, Sequence

from spendguard.domain.models import (
    Budget,
    BudgetUsage,
    Expense,
    FeatureVector,
    Income,
    SpikeResult,
)
from spendguard.utils.date_utils import is_late_night, is_within_minutes

ZERO = Decimal("0")
HUNDRED = Decimal("100")

IMPULSE_CLUSTER_MINUTES = 30
SPIKE_PERCENT_THRESHOLD = Decimal("40")
OVERSPEND_TOLERANCE = Decimal("1.10")


def round2(value: Decimal) -> Decimal:
    """Round half-up to two decimal places"""
    return value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def round_whole(value: Decimal) -> int:
    """Round half-up to the nearest integer (17.5 -> 18)"""
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def sum_amounts(events: Iterable) -> Decimal:
    return sum((e.amount for e in events), ZERO)


def percent_of(part: Decimal, whole: Decimal) -> Decimal:
    """part / whole * 100, or 0 when whole is 0"""
    if whole == 0:
        return ZERO
    return part / whole * HUNDRED


def category_totals(expenses: Iterable[Expense]) -> Dict[str, Decimal]:
    """Total per category, in order of first appearance"""
    totals: Dict[str, Decimal] = OrderedDict()
    for expense in expenses:
        totals[expense.category] = totals.get(expense.category, ZERO) + expense.amount
    return totals


def category_percentages(totals: Dict[str, Decimal], reference_total: Decimal) -> Dict[str, Decimal]:
    return {category: percent_of(total, reference_total) for category, total in totals.items()}


def top_category(expenses: Iterable[Expense]) -> Optional[str]:
    """Category with the highest total; ties go to the one seen first"""
    best: Optional[str] = None
    best_total = ZERO
    for category, total in category_totals(expenses).items():
        if total > best_total:
            best, best_total = category, total
    return best


def savings_rate(income: Decimal, expense: Decimal) -> Decimal:
    """(income - expense) / income * 100, defined as 0 without income"""
    if income == 0:
        return ZERO
    return (income - expense) / income * HUNDRED


def impulse_score(expenses: Sequence[Expense], window_minutes: int = IMPULSE_CLUSTER_MINUTES) -> int:
    """
    Count adjacent purchase pairs no more than window_minutes apart.

    This is a pairwise metric: purchases at t, t+10 and t+20 minutes form two
    clustered pairs and score 2, not 3.
    """
    if len(expenses) < 2:
        return 0

    ordered = sorted(expenses, key=lambda e: e.occurred_at)
    return sum(
        1
        for previous, current in zip(ordered, ordered[1:])
        if is_within_minutes(previous.occurred_at, current.occurred_at, window_minutes)
    )


def late_night_count(expenses: Iterable[Expense]) -> int:
    return sum(1 for e in expenses if is_late_night(e.occurred_at))


def detect_spending_spike(current_total: Decimal, previous_total: Decimal) -> SpikeResult:
    """
    Compare this week's spend with the previous week's.

    - previous == 0: any current spend is a spike (percent_change reported as 100)
    - otherwise: spike when the increase is strictly above 40%
    percent_change is rounded to two decimals; the threshold test uses the exact value.
    """
    if previous_total == 0:
        spiked = current_total > 0
        return SpikeResult(
            spiked=spiked,
            percent_change=HUNDRED if spiked else ZERO,
            current_total=current_total,
            previous_total=previous_total,
        )

    change = percent_of(current_total - previous_total, previous_total)
    return SpikeResult(
        spiked=change > SPIKE_PERCENT_THRESHOLD,
        percent_change=round2(change),
        current_total=current_total,
        previous_total=previous_total,
    )


def change_percent(current: Decimal, previous: Decimal) -> Decimal:
    """Percent change vs a prior total: 100 from a zero prior with spend, 0 when both are 0"""
    if previous > 0:
        return round2(percent_of(current - previous, previous))
    if current > 0:
        return HUNDRED
    return ZERO


def budget_usage(budget: Budget, period_expenses: Iterable[Expense]) -> BudgetUsage:
    """Measure spend in the budget's category against limit * 1.10"""
    spent = sum_amounts(e for e in period_expenses if e.category == budget.category)
    threshold = budget.limit * OVERSPEND_TOLERANCE
    return BudgetUsage(
        budget=budget,
        spent=spent,
        threshold=threshold,
        percent_over=percent_of(spent - budget.limit, budget.limit),
        overspent=spent > threshold,
    )


def build_feature_vector(
    month_expenses: List[Expense],
    month_income: List[Income],
    this_week_expenses: List[Expense],
    previous_week_expenses: List[Expense],
) -> FeatureVector:
    """Aggregate one calendar month plus the current and previous ISO week"""
    total_expense = sum_amounts(month_expenses)
    total_income = sum_amounts(month_income)
    totals = category_totals(month_expenses)
    spike = detect_spending_spike(
        sum_amounts(this_week_expenses),
        sum_amounts(previous_week_expenses),
    )

    return FeatureVector(
        category_totals=dict(totals),
        category_percentages=category_percentages(totals, total_expense),
        total_income=total_income,
        total_expense=total_expense,
        savings_rate=savings_rate(total_income, total_expense),
        impulse_score=impulse_score(month_expenses),
        late_night_count=late_night_count(month_expenses),
        this_week_total=spike.current_total,
        previous_week_total=spike.previous_total,
        week_percent_change=spike.percent_change,
        weekly_spike=spike.spiked,
    )


def format_money(amount: Decimal) -> str:
    return f"${round2(amount):.2f}"
