"""Overspending and weekly spike detection for a newly recorded expense"""

from typing import Iterable, List, Optional

from spendguard.domain.features import format_money, percent_of, round_whole
from spendguard.domain.models import AlertDraft, AlertType, BudgetUsage, SpikeResult


def check_budget_overspend(usage: BudgetUsage) -> Optional[AlertDraft]:
    """
    Emit an OVERSPENDING alert when spend exceeds limit * 1.10.

    Spending exactly limit * 1.10 does not trigger. The percent over the
    limit in the message is rounded half-up to the nearest integer.
    """
    if not usage.overspent:
        return None

    budget = usage.budget
    percent_over = round_whole(usage.percent_over)
    return AlertDraft(
        type=AlertType.OVERSPENDING,
        message=(
            f"You have exceeded your {budget.period.value.lower()} {budget.category} budget of "
            f"{format_money(budget.limit)} by {percent_over}%. "
            f"Total spent: {format_money(usage.spent)}."
        ),
    )


def check_weekly_spike(spike: SpikeResult) -> Optional[AlertDraft]:
    """Emit a single SPIKE alert when this week outpaces the previous one"""
    if not spike.spiked:
        return None

    if spike.previous_total == 0:
        message = (
            f"Spending spike detected. You spent {format_money(spike.current_total)} "
            f"this week with no recorded spending last week."
        )
    else:
        # percent_change is already rounded to cents; round the exact value instead
        increase = percent_of(spike.current_total - spike.previous_total, spike.previous_total)
        message = (
            f"Your spending this week ({format_money(spike.current_total)}) is "
            f"{round_whole(increase)}% higher than last week "
            f"({format_money(spike.previous_total)})."
        )
    return AlertDraft(type=AlertType.SPIKE, message=message)


def detect_overspending(usages: Iterable[BudgetUsage], spike: SpikeResult) -> List[AlertDraft]:
    """
    Run the budget and spike checks independently.

    Args:
        usages: One BudgetUsage per budget defined for the expense's category
            (empty when the category has no budget)
        spike: Current vs previous ISO week comparison

    Returns:
        Zero or more alerts; at most one of them is a SPIKE
    """
    alerts: List[AlertDraft] = []

    for usage in usages:
        alert = check_budget_overspend(usage)
        if alert is not None:
            alerts.append(alert)

    spike_alert = check_weekly_spike(spike)
    if spike_alert is not None:
        alerts.append(spike_alert)

    return alerts
