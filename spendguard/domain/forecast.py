"""Forecast engine - balance, burn rate, survival days and risk classification"""

from datetime import datetime
from decimal import Decimal, ROUND_FLOOR
from typing import Iterable, Optional

from spendguard.domain.features import ZERO, change_percent, round2, sum_amounts
from spendguard.domain.models import (
    BurnRates,
    Expense,
    FinancialHealth,
    ForecastResult,
    Income,
    RiskLevel,
)
from spendguard.utils.date_utils import days_between, end_of_month

BURN_RATE_WINDOW_DAYS = 7
SAFE_MIN_DAYS = 30
WARNING_MIN_DAYS = 15

# Stored in place of an infinite runway
INFINITE_DAYS_SENTINEL = 9999

RISK_LEVEL_DESCRIPTIONS = {
    RiskLevel.SAFE: "Your finances are healthy. Keep it up!",
    RiskLevel.WARNING: "Spending is elevated. Consider reviewing your budget.",
    RiskLevel.DANGER: "Funds are critically low. Immediate action recommended.",
}


def calculate_burn_rate(expenses: Iterable[Expense], days: int = BURN_RATE_WINDOW_DAYS) -> Decimal:
    """Average daily spend over `days`, rounded to two decimals; 0 without expenses"""
    if days <= 0:
        return ZERO
    total = sum_amounts(expenses)
    if total == 0:
        return ZERO
    return round2(total / days)


def estimate_survival_days(balance: Decimal, burn_rate: Decimal) -> Optional[int]:
    """
    Days until the balance reaches zero at the current burn rate.

    Returns None for an infinite runway (burn rate <= 0), 0 for a balance
    that is already exhausted, otherwise floor(balance / burn_rate).
    """
    if burn_rate <= 0:
        return None
    if balance <= 0:
        return 0
    return int((balance / burn_rate).to_integral_value(rounding=ROUND_FLOOR))


def classify_risk(days_left: Optional[int]) -> RiskLevel:
    """
    Map runway to a risk level.

    > 30 days is SAFE, 15..30 inclusive is WARNING, < 15 is DANGER.
    Exactly 30 days is WARNING. An infinite runway is SAFE.
    """
    if days_left is None or days_left > SAFE_MIN_DAYS:
        return RiskLevel.SAFE
    if days_left >= WARNING_MIN_DAYS:
        return RiskLevel.WARNING
    return RiskLevel.DANGER


def persisted_days(days_left: Optional[int]) -> int:
    return INFINITE_DAYS_SENTINEL if days_left is None else days_left


def compute_forecast(
    month_income: Iterable[Income],
    month_expenses: Iterable[Expense],
    trailing_expenses: Iterable[Expense],
) -> ForecastResult:
    """
    Compute the runway snapshot from the current calendar month.

    Args:
        month_income: Income events in the current calendar month
        month_expenses: Expense events in the current calendar month
        trailing_expenses: Expense events in the trailing 7-day window
    """
    balance = sum_amounts(month_income) - sum_amounts(month_expenses)
    burn_rate = calculate_burn_rate(trailing_expenses)
    days_left = estimate_survival_days(balance, burn_rate)

    return ForecastResult(
        balance=balance,
        burn_rate=burn_rate,
        days_left=days_left,
        risk_level=classify_risk(days_left),
    )


def suggested_daily_budget(balance: Decimal, now: datetime) -> Decimal:
    """Spread a positive balance over the whole days left in the month (at least one)"""
    if balance <= 0:
        return ZERO
    days_remaining = days_between(now, end_of_month(now)) or 1
    return round2(balance / days_remaining)


def compute_financial_health(
    now: datetime,
    month_income: Iterable[Income],
    month_expenses: Iterable[Expense],
    trailing_expenses: Iterable[Expense],
    previous_month_expenses: Iterable[Expense],
) -> FinancialHealth:
    """Forecast plus weekly/monthly projections, month-over-month change and a daily budget"""
    month_expenses = list(month_expenses)
    forecast = compute_forecast(month_income, month_expenses, trailing_expenses)
    daily = forecast.burn_rate

    return FinancialHealth(
        balance=forecast.balance,
        burn_rate=BurnRates(
            daily=daily,
            weekly=round2(daily * 7),
            monthly=round2(daily * 30),
        ),
        estimated_days_left=forecast.days_left,
        risk_level=forecast.risk_level,
        risk_description=RISK_LEVEL_DESCRIPTIONS[forecast.risk_level],
        month_over_month_change=change_percent(
            sum_amounts(month_expenses),
            sum_amounts(previous_month_expenses),
        ),
        suggested_daily_budget=suggested_daily_budget(forecast.balance, now),
    )
