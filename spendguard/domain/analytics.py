"""Spending analytics - category breakdowns, week comparison and the monthly behavior summary"""

from datetime import datetime
from typing import Dict, Iterable, List

from spendguard.domain.features import (
    ZERO,
    category_totals,
    change_percent,
    detect_spending_spike,
    percent_of,
    round2,
    savings_rate,
    sum_amounts,
    top_category,
)
from spendguard.domain.models import (
    BehavioralSummary,
    CategoryChange,
    CategoryShare,
    Expense,
    Income,
    WeeklyComparison,
)


def category_dominance(expenses: Iterable[Expense]) -> List[CategoryShare]:
    """Total, share of spend and count per category, largest total first"""
    expenses = list(expenses)
    totals = category_totals(expenses)
    grand_total = sum(totals.values(), ZERO)

    counts: Dict[str, int] = {}
    for expense in expenses:
        counts[expense.category] = counts.get(expense.category, 0) + 1

    shares = [
        CategoryShare(
            category=category,
            total=round2(total),
            percentage=round2(percent_of(total, grand_total)),
            count=counts[category],
        )
        for category, total in totals.items()
    ]
    return sorted(shares, key=lambda share: share.total, reverse=True)


def weekly_comparison(
    this_week_expenses: Iterable[Expense],
    previous_week_expenses: Iterable[Expense],
) -> WeeklyComparison:
    """
    Compare two ISO weeks overall and per category.

    Categories seen in either week are listed, sorted by this week's total
    (descending). Per-category change follows the same zero-prior convention
    as the month-over-month change; the overall figures come from the spike
    check.
    """
    this_week_expenses = list(this_week_expenses)
    previous_week_expenses = list(previous_week_expenses)
    current_totals = category_totals(this_week_expenses)
    previous_totals = category_totals(previous_week_expenses)

    categories = list(current_totals) + [c for c in previous_totals if c not in current_totals]
    changes = []
    for category in categories:
        current = round2(current_totals.get(category, ZERO))
        previous = round2(previous_totals.get(category, ZERO))
        changes.append(CategoryChange(
            category=category,
            current=current,
            previous=previous,
            change_percent=change_percent(current, previous),
        ))
    changes.sort(key=lambda change: change.current, reverse=True)

    spike = detect_spending_spike(sum_amounts(this_week_expenses), sum_amounts(previous_week_expenses))
    return WeeklyComparison(
        this_week_total=round2(spike.current_total),
        previous_week_total=round2(spike.previous_total),
        percent_change=spike.percent_change,
        spiked=spike.spiked,
        categories=changes,
    )


def behavioral_summary(
    now: datetime,
    month_income: Iterable[Income],
    month_expenses: Iterable[Expense],
    previous_month_expenses: Iterable[Expense],
) -> BehavioralSummary:
    """
    Summarize the current calendar month.

    Average daily spend divides by the days elapsed so far (the day of month
    of `now`). Impulse figures count expenses carrying the impulse flag.
    """
    month_expenses = list(month_expenses)
    total_income = sum_amounts(month_income)
    total_expenses = sum_amounts(month_expenses)
    top = top_category(month_expenses)
    impulse_expenses = [e for e in month_expenses if e.is_impulse]

    return BehavioralSummary(
        total_income=round2(total_income),
        total_expenses=round2(total_expenses),
        net_savings=round2(total_income - total_expenses),
        savings_rate=round2(savings_rate(total_income, total_expenses)),
        top_category=top,
        top_category_total=round2(category_totals(month_expenses)[top]) if top else ZERO,
        average_daily_spend=round2(total_expenses / now.day),
        impulse_count=len(impulse_expenses),
        impulse_total=round2(sum_amounts(impulse_expenses)),
        spending_change_percent=change_percent(total_expenses, sum_amounts(previous_month_expenses)),
    )
