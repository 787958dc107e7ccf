"""Domain models - pure Python dataclasses representing business entities"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Dict, List, Optional

from spendguard.domain.exceptions import InvalidAmountError, UnsupportedPeriodError


class AlertType(str, Enum):
    """Alert kinds emitted by the detectors"""

    OVERSPENDING = "OVERSPENDING"
    SPIKE = "SPIKE"
    IMPULSE = "IMPULSE"
    LATE_NIGHT = "LATE_NIGHT"
    POST_INCOME = "POST_INCOME"


class RiskLevel(str, Enum):
    """Runway classification, most severe last"""

    SAFE = "SAFE"
    WARNING = "WARNING"
    DANGER = "DANGER"


class BudgetPeriod(str, Enum):
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"


def parse_period(value) -> BudgetPeriod:
    """
    Coerce an enum member or its string value to a BudgetPeriod.

    Raises:
        UnsupportedPeriodError: value is not WEEKLY or MONTHLY
    """
    try:
        return BudgetPeriod(value)
    except ValueError as e:
        raise UnsupportedPeriodError(
            f'Unsupported period: {value}. Expected "WEEKLY" or "MONTHLY".'
        ) from e


class ExpenseCategory(str, Enum):
    FOOD = "FOOD"
    TRANSPORT = "TRANSPORT"
    ENTERTAINMENT = "ENTERTAINMENT"
    SHOPPING = "SHOPPING"
    UTILITIES = "UTILITIES"
    HOUSING = "HOUSING"
    HEALTHCARE = "HEALTHCARE"
    EDUCATION = "EDUCATION"
    PERSONAL_CARE = "PERSONAL_CARE"
    TRAVEL = "TRAVEL"
    GIFTS = "GIFTS"
    SUBSCRIPTIONS = "SUBSCRIPTIONS"
    OTHER = "OTHER"


CATEGORY_DISPLAY_NAMES: Dict[str, str] = {
    "FOOD": "Food & Dining",
    "TRANSPORT": "Transport",
    "ENTERTAINMENT": "Entertainment",
    "SHOPPING": "Shopping",
    "UTILITIES": "Utilities",
    "HOUSING": "Housing & Rent",
    "HEALTHCARE": "Healthcare",
    "EDUCATION": "Education",
    "PERSONAL_CARE": "Personal Care",
    "TRAVEL": "Travel",
    "GIFTS": "Gifts & Donations",
    "SUBSCRIPTIONS": "Subscriptions",
    "OTHER": "Other",
}


def _require_positive(amount: Decimal, what: str) -> None:
    if amount <= 0:
        raise InvalidAmountError(f"{what} amount must be > 0, got {amount}")


@dataclass
class Expense:
    """Expense event as read from persistence"""

    user_id: str
    amount: Decimal
    category: str
    occurred_at: datetime
    recorded_at: datetime
    is_impulse: bool = False
    id: Optional[uuid.UUID] = None

    def __post_init__(self):
        _require_positive(self.amount, "Expense")


@dataclass
class Income:
    """Income event as read from persistence"""

    user_id: str
    amount: Decimal
    source: str
    occurred_at: datetime
    recorded_at: datetime
    id: Optional[uuid.UUID] = None

    def __post_init__(self):
        _require_positive(self.amount, "Income")


@dataclass
class Budget:
    """Spending limit for one category over a weekly or monthly period"""

    user_id: str
    category: str
    limit: Decimal
    period: BudgetPeriod

    def __post_init__(self):
        _require_positive(self.limit, "Budget limit")
        self.period = parse_period(self.period)


@dataclass(frozen=True)
class AlertDraft:
    """Alert produced by a detector, not yet persisted"""

    type: AlertType
    message: str


@dataclass(frozen=True)
class SpikeResult:
    """Week-over-week comparison outcome"""

    spiked: bool
    percent_change: Decimal
    current_total: Decimal
    previous_total: Decimal


@dataclass(frozen=True)
class BudgetUsage:
    """Spend against a single budget within its active period"""

    budget: Budget
    spent: Decimal
    threshold: Decimal
    percent_over: Decimal
    overspent: bool


@dataclass
class FeatureVector:
    """Derived quantities consumed by the detectors and the rule engine"""

    category_totals: Dict[str, Decimal]
    category_percentages: Dict[str, Decimal]
    total_income: Decimal
    total_expense: Decimal
    savings_rate: Decimal
    impulse_score: int
    late_night_count: int
    this_week_total: Decimal
    previous_week_total: Decimal
    week_percent_change: Decimal
    weekly_spike: bool

    def category_total(self, category: str) -> Decimal:
        return self.category_totals.get(category, Decimal("0"))

    def category_percent(self, category: str) -> Decimal:
        return self.category_percentages.get(category, Decimal("0"))

    @property
    def food_percent(self) -> Decimal:
        return self.category_percent(ExpenseCategory.FOOD.value)

    @property
    def entertainment_percent(self) -> Decimal:
        return self.category_percent(ExpenseCategory.ENTERTAINMENT.value)

    @property
    def shopping_percent(self) -> Decimal:
        return self.category_percent(ExpenseCategory.SHOPPING.value)

    @property
    def transport_total(self) -> Decimal:
        return self.category_total(ExpenseCategory.TRANSPORT.value)


@dataclass(frozen=True)
class ImpulseFindings:
    """Outcome of the impulse checks for one expense"""

    alerts: List[AlertDraft]
    flag_impulse: bool
    rapid_purchase_count: int


@dataclass(frozen=True)
class ForecastResult:
    """Point-in-time runway estimate; days_left is None for infinite runway"""

    balance: Decimal
    burn_rate: Decimal
    days_left: Optional[int]
    risk_level: RiskLevel


@dataclass(frozen=True)
class BurnRates:
    daily: Decimal
    weekly: Decimal
    monthly: Decimal


@dataclass(frozen=True)
class FinancialHealth:
    """Extended forecast with projections and month-over-month change"""

    balance: Decimal
    burn_rate: BurnRates
    estimated_days_left: Optional[int]
    risk_level: RiskLevel
    risk_description: str
    month_over_month_change: Decimal
    suggested_daily_budget: Decimal


@dataclass(frozen=True)
class Digest:
    """Composed weekly summary"""

    title: str
    body: str
    tip: str
    lines: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class CategoryShare:
    """One category's slice of spending over a range"""

    category: str
    total: Decimal
    percentage: Decimal
    count: int


@dataclass(frozen=True)
class CategoryChange:
    category: str
    current: Decimal
    previous: Decimal
    change_percent: Decimal


@dataclass(frozen=True)
class WeeklyComparison:
    """This ISO week against the previous one, overall and per category"""

    this_week_total: Decimal
    previous_week_total: Decimal
    percent_change: Decimal
    spiked: bool
    categories: List[CategoryChange]


@dataclass(frozen=True)
class BehavioralSummary:
    """Current-month spending profile"""

    total_income: Decimal
    total_expenses: Decimal
    net_savings: Decimal
    savings_rate: Decimal
    top_category: Optional[str]
    top_category_total: Decimal
    average_daily_spend: Decimal
    impulse_count: int
    impulse_total: Decimal
    spending_change_percent: Decimal
