"""Behavior engine trigger surface - wires repositories, domain checks and observability"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Iterator, List, Optional

from sqlalchemy.orm import Session

from spendguard.config import settings
from spendguard.domain.analytics import behavioral_summary, category_dominance, weekly_comparison
from spendguard.domain.digest import compose_digest
from spendguard.domain.features import budget_usage, build_feature_vector, detect_spending_spike, sum_amounts, top_category
from spendguard.domain.forecast import BURN_RATE_WINDOW_DAYS, compute_financial_health, compute_forecast
from spendguard.domain.impulse import POST_INCOME_WINDOW, RAPID_PURCHASE_WINDOW, detect_impulse
from spendguard.domain.models import (
    AlertDraft,
    BehavioralSummary,
    CategoryShare,
    Expense,
    FeatureVector,
    FinancialHealth,
    RiskLevel,
    WeeklyComparison,
)
from spendguard.domain.overspending import detect_overspending
from spendguard.domain.rules import evaluate_rules
from spendguard.infrastructure.database.models import (
    AlertRecord,
    ExpenseRecord,
    ForecastSnapshotRecord,
    NotificationRecord,
    RecommendationRecord,
)
from spendguard.infrastructure.database.repositories import (
    AlertRepository,
    BudgetRepository,
    ExpenseRepository,
    ForecastRepository,
    IncomeRepository,
    NotificationRepository,
    RecommendationRepository,
    to_expense,
)
from spendguard.infrastructure.observability.logging import (
    log_alert_check_failure,
    log_alerts_emitted,
    log_forecast,
    log_recommendations,
)
from spendguard.infrastructure.observability.metrics import (
    alert_check_failures_counter,
    record_alerts,
    record_forecast,
    recommendations_counter,
)
from spendguard.schemas import ExpenseCreate
from spendguard.utils.date_utils import (
    Clock,
    SystemClock,
    custom_range,
    month_bounds,
    period_bounds,
    previous_month_bounds,
    previous_week_bounds,
    trailing_days_start,
    week_bounds,
)

logger = logging.getLogger(__name__)


class OutcomeStatus(str, Enum):
    RECORDED = "RECORDED"
    RECORDED_WITH_ALERT_FAILURE = "RECORDED_WITH_ALERT_FAILURE"
    FAILED = "FAILED"


@dataclass
class ExpenseRecordingOutcome:
    """
    Result of recording an expense.

    RECORDED_WITH_ALERT_FAILURE means the expense is saved but the alert
    checks failed; FAILED means the expense itself was not saved.
    """

    status: OutcomeStatus
    expense: Optional[ExpenseRecord] = None
    alerts: List[AlertRecord] = field(default_factory=list)
    error: Optional[Exception] = None

    @property
    def saved(self) -> bool:
        return self.status is not OutcomeStatus.FAILED


class BehaviorEngine:
    """
    Entry points invoked by the application layer and the scheduler.

    Each call is one unit of work on the given session: it commits on
    success and rolls back before re-raising on failure.
    """

    def __init__(self, db: Session, clock: Optional[Clock] = None):
        self.db = db
        self.clock = clock or SystemClock()
        self.expenses = ExpenseRepository(db)
        self.income = IncomeRepository(db)
        self.budgets = BudgetRepository(db)
        self.alerts = AlertRepository(db)
        self.forecasts = ForecastRepository(db)
        self.recommendations = RecommendationRepository(db)
        self.notifications = NotificationRepository(db)

    @contextmanager
    def _unit_of_work(self) -> Iterator[None]:
        try:
            yield
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

    # --- Expense triggers ---

    def record_expense(self, user_id: str, payload: ExpenseCreate) -> ExpenseRecordingOutcome:
        """
        Save an expense, then run the alert checks as a best-effort side effect.

        The expense is committed before any check runs, so a failing check
        never rolls it back.
        """
        try:
            with self._unit_of_work():
                record = self.expenses.add(
                    user_id=user_id,
                    amount=payload.amount,
                    category=payload.category.value,
                    occurred_at=payload.occurred_at,
                    recorded_at=self.clock.now(),
                    notes=payload.notes,
                )
        except Exception as e:
            logger.error(f"Expense write failed: {e}", extra={"user_id": user_id, "step": "record_expense"})
            return ExpenseRecordingOutcome(status=OutcomeStatus.FAILED, error=e)

        expense = to_expense(record)
        try:
            alerts = self.on_expense_recorded(expense)
        except Exception as e:
            alert_check_failures_counter.inc()
            log_alert_check_failure(user_id, str(expense.id), e)
            return ExpenseRecordingOutcome(
                status=OutcomeStatus.RECORDED_WITH_ALERT_FAILURE,
                expense=record,
                error=e,
            )

        return ExpenseRecordingOutcome(status=OutcomeStatus.RECORDED, expense=record, alerts=alerts)

    def on_expense_recorded(self, expense: Expense) -> List[AlertRecord]:
        """Run the overspending/spike and impulse checks for a saved expense"""
        now = self.clock.now()

        with self._unit_of_work():
            drafts = self._overspending_alerts(expense, now)
            drafts.extend(self._impulse_alerts(expense))
            created = [self.alerts.create(expense.user_id, draft, triggered_at=now) for draft in drafts]

        alert_types = [draft.type.value for draft in drafts]
        record_alerts(alert_types)
        log_alerts_emitted(expense.user_id, str(expense.id), alert_types)
        return created

    def _overspending_alerts(self, expense: Expense, now: datetime) -> List[AlertDraft]:
        usages = []
        for budget in self.budgets.list_for_category(expense.user_id, expense.category):
            start, end = period_bounds(now, budget.period)
            period_expenses = self.expenses.list_between(expense.user_id, start, end, category=budget.category)
            usages.append(budget_usage(budget, period_expenses))

        this_week_start, this_week_end = week_bounds(now)
        prev_week_start, prev_week_end = previous_week_bounds(now)
        spike = detect_spending_spike(
            sum_amounts(self.expenses.list_between(expense.user_id, this_week_start, this_week_end)),
            sum_amounts(self.expenses.list_between(expense.user_id, prev_week_start, prev_week_end)),
        )
        return detect_overspending(usages, spike)

    def _impulse_alerts(self, expense: Expense) -> List[AlertDraft]:
        reference = expense.recorded_at
        findings = detect_impulse(
            expense,
            self.expenses.list_recorded_between(expense.user_id, reference - RAPID_PURCHASE_WINDOW, reference),
            self.income.list_between(expense.user_id, reference - POST_INCOME_WINDOW, reference),
        )
        if findings.flag_impulse and expense.id is not None:
            self.expenses.mark_impulse(expense.id)
            expense.is_impulse = True
        return list(findings.alerts)

    # --- Forecast ---

    def generate_forecast(self, user_id: str) -> ForecastSnapshotRecord:
        """Compute the current runway and append one new snapshot"""
        now = self.clock.now()
        month_start, month_end = month_bounds(now)

        with self._unit_of_work():
            forecast = compute_forecast(
                self.income.list_between(user_id, month_start, month_end),
                self.expenses.list_between(user_id, month_start, month_end),
                self.expenses.list_between(user_id, trailing_days_start(now, BURN_RATE_WINDOW_DAYS), now),
            )
            snapshot = self.forecasts.create(user_id, forecast, created_at=now)

        record_forecast(forecast.risk_level.value)
        log_forecast(user_id, forecast.risk_level.value, snapshot.estimated_days_left, str(forecast.burn_rate))
        return snapshot

    def get_financial_health(self, user_id: str) -> FinancialHealth:
        now = self.clock.now()
        month_start, month_end = month_bounds(now)
        prev_start, prev_end = previous_month_bounds(now)

        return compute_financial_health(
            now,
            self.income.list_between(user_id, month_start, month_end),
            self.expenses.list_between(user_id, month_start, month_end),
            self.expenses.list_between(user_id, trailing_days_start(now, BURN_RATE_WINDOW_DAYS), now),
            self.expenses.list_between(user_id, prev_start, prev_end),
        )

    def latest_forecast(self, user_id: str) -> Optional[ForecastSnapshotRecord]:
        return self.forecasts.latest(user_id)

    def forecast_history(self, user_id: str, limit: Optional[int] = None) -> List[ForecastSnapshotRecord]:
        return self.forecasts.history(user_id, limit or settings.forecast_history_limit)

    # --- Recommendations ---

    def build_features(self, user_id: str) -> FeatureVector:
        """Feature vector over the current month plus this and the previous ISO week"""
        now = self.clock.now()
        month_start, month_end = month_bounds(now)
        this_week_start, this_week_end = week_bounds(now)
        prev_week_start, prev_week_end = previous_week_bounds(now)

        return build_feature_vector(
            month_expenses=self.expenses.list_between(user_id, month_start, month_end),
            month_income=self.income.list_between(user_id, month_start, month_end),
            this_week_expenses=self.expenses.list_between(user_id, this_week_start, this_week_end),
            previous_week_expenses=self.expenses.list_between(user_id, prev_week_start, prev_week_end),
        )

    def generate_recommendations(self, user_id: str) -> List[RecommendationRecord]:
        """Evaluate the rule table and replace the user's recommendations atomically"""
        features = self.build_features(user_id)
        matched = evaluate_rules(features)

        with self._unit_of_work():
            records = self.recommendations.replace_for_user(user_id, matched, generated_at=self.clock.now())

        recommendations_counter.inc(len(records))
        log_recommendations(user_id, len(records))
        return records

    # --- Analytics ---

    def get_behavioral_summary(self, user_id: str) -> BehavioralSummary:
        """Current-month income, spend, impulse totals and change vs last month"""
        now = self.clock.now()
        month_start, month_end = month_bounds(now)
        prev_start, prev_end = previous_month_bounds(now)

        return behavioral_summary(
            now,
            self.income.list_between(user_id, month_start, month_end),
            self.expenses.list_between(user_id, month_start, month_end),
            self.expenses.list_between(user_id, prev_start, prev_end),
        )

    def get_category_dominance(self, user_id: str, start: datetime, end: datetime) -> List[CategoryShare]:
        """Per-category share of spend over whole days from start to end"""
        range_start, range_end = custom_range(start, end)
        return category_dominance(self.expenses.list_between(user_id, range_start, range_end))

    def get_weekly_comparison(self, user_id: str) -> WeeklyComparison:
        now = self.clock.now()
        this_week_start, this_week_end = week_bounds(now)
        prev_week_start, prev_week_end = previous_week_bounds(now)

        return weekly_comparison(
            self.expenses.list_between(user_id, this_week_start, this_week_end),
            self.expenses.list_between(user_id, prev_week_start, prev_week_end),
        )

    # --- Digest ---

    def run_weekly_digest_for_user(self, user_id: str) -> NotificationRecord:
        """Summarize the previous ISO week and store it as a notification"""
        now = self.clock.now()
        week_start, week_end = previous_week_bounds(now)

        expenses = self.expenses.list_between(user_id, week_start, week_end)
        incomes = self.income.list_between(user_id, week_start, week_end)
        latest = self.forecasts.latest(user_id)

        digest = compose_digest(
            title=settings.digest_title,
            total_spent=sum_amounts(expenses),
            total_income=sum_amounts(incomes),
            top_category=top_category(expenses),
            alert_count=self.alerts.count_between(user_id, week_start, week_end),
            risk_level=RiskLevel(latest.risk_level) if latest is not None else RiskLevel.SAFE,
        )

        with self._unit_of_work():
            notification = self.notifications.create(user_id, digest, created_at=now)
        return notification
