"""Impulse spending patterns evaluated on a single new expense"""

from datetime import datetime, timedelta
from typing import Iterable, List, Optional

from spendguard.domain.features import format_money, sum_amounts
from spendguard.domain.models import AlertDraft, AlertType, Expense, ImpulseFindings, Income
from spendguard.utils.date_utils import is_late_night

RAPID_PURCHASE_WINDOW = timedelta(minutes=60)
RAPID_PURCHASE_MIN_COUNT = 3
POST_INCOME_WINDOW = timedelta(hours=24)


def rapid_purchases(expense: Expense, others: Iterable[Expense]) -> List[Expense]:
    """
    The triggering expense plus every other expense recorded within the
    60 minutes before it (inclusive on both ends).
    """
    reference = expense.recorded_at
    window_start = reference - RAPID_PURCHASE_WINDOW
    in_window = [
        other
        for other in others
        if not _same_event(other, expense) and window_start <= other.recorded_at <= reference
    ]
    return [expense] + in_window


def recent_income(expense: Expense, incomes: Iterable[Income]) -> Optional[Income]:
    """Most recent income that occurred within 24 hours before the expense"""
    reference = expense.recorded_at
    window_start = reference - POST_INCOME_WINDOW
    candidates = [i for i in incomes if window_start <= i.occurred_at <= reference]
    if not candidates:
        return None
    return max(candidates, key=lambda i: i.occurred_at)


def detect_impulse(
    expense: Expense,
    recent_expenses: Iterable[Expense],
    incomes: Iterable[Income],
) -> ImpulseFindings:
    """
    Evaluate the three impulse patterns independently.

    1. Rapid purchases: >= 3 purchases within 60 minutes flags the triggering
       expense and emits IMPULSE
    2. Late night: occurred between 23:00 and 01:59:59 emits LATE_NIGHT
    3. Post-income: income in the preceding 24 hours emits POST_INCOME

    Zero to three alerts may result.
    """
    alerts: List[AlertDraft] = []

    burst = rapid_purchases(expense, recent_expenses)
    flag_impulse = len(burst) >= RAPID_PURCHASE_MIN_COUNT
    if flag_impulse:
        alerts.append(AlertDraft(
            type=AlertType.IMPULSE,
            message=(
                f"Impulse spending detected: {len(burst)} purchases made within the last "
                f"60 minutes totaling {format_money(sum_amounts(burst))}."
            ),
        ))

    if is_late_night(expense.occurred_at):
        alerts.append(AlertDraft(
            type=AlertType.LATE_NIGHT,
            message=(
                f"Late night spending detected: {format_money(expense.amount)} on "
                f"{expense.category} at {_clock_time(expense.occurred_at)}."
            ),
        ))

    income = recent_income(expense, incomes)
    if income is not None:
        alerts.append(AlertDraft(
            type=AlertType.POST_INCOME,
            message=(
                f"Post-income spending detected: {format_money(expense.amount)} spent on "
                f"{expense.category} within 24 hours of receiving "
                f"{format_money(income.amount)} from {income.source}."
            ),
        ))

    return ImpulseFindings(
        alerts=alerts,
        flag_impulse=flag_impulse,
        rapid_purchase_count=len(burst),
    )


def _same_event(first: Expense, second: Expense) -> bool:
    if first is second:
        return True
    return first.id is not None and first.id == second.id


def _clock_time(moment: datetime) -> str:
    return moment.strftime("%H:%M")
