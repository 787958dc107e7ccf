"""Data access layer - read and write capabilities used by the engine"""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Sequence

from sqlalchemy import func
from sqlalchemy.orm import Session

from spendguard.domain.models import (
    AlertDraft,
    Budget,
    BudgetPeriod,
    Digest,
    Expense,
    ForecastResult,
    Income,
    parse_period,
)
from spendguard.domain.forecast import persisted_days
from spendguard.domain.rules import RecommendationRule
from spendguard.infrastructure.database.models import (
    AlertRecord,
    BudgetRecord,
    ExpenseRecord,
    ForecastSnapshotRecord,
    IncomeRecord,
    NotificationRecord,
    RecommendationRecord,
    UserRecord,
)


def to_expense(record: ExpenseRecord) -> Expense:
    return Expense(
        id=record.id,
        user_id=record.user_id,
        amount=Decimal(record.amount),
        category=record.category,
        occurred_at=record.occurred_at,
        recorded_at=record.recorded_at,
        is_impulse=record.is_impulse,
    )


def to_income(record: IncomeRecord) -> Income:
    return Income(
        id=record.id,
        user_id=record.user_id,
        amount=Decimal(record.amount),
        source=record.source,
        occurred_at=record.occurred_at,
        recorded_at=record.recorded_at,
    )


def to_budget(record: BudgetRecord) -> Budget:
    return Budget(
        user_id=record.user_id,
        category=record.category,
        limit=Decimal(record.limit),
        period=BudgetPeriod(record.period),
    )


class ExpenseRepository:
    """Repository for expense events"""

    def __init__(self, db: Session):
        self.db = db

    def add(
        self,
        user_id: str,
        amount: Decimal,
        category: str,
        occurred_at: datetime,
        recorded_at: datetime,
        notes: Optional[str] = None,
    ) -> ExpenseRecord:
        record = ExpenseRecord(
            user_id=user_id,
            amount=amount,
            category=category,
            occurred_at=occurred_at,
            recorded_at=recorded_at,
            is_impulse=False,
            notes=notes,
        )
        self.db.add(record)
        self.db.flush()  # Get ID without committing
        return record

    def get(self, expense_id: uuid.UUID) -> Optional[ExpenseRecord]:
        return self.db.get(ExpenseRecord, expense_id)

    def list_between(
        self,
        user_id: str,
        start: datetime,
        end: datetime,
        category: Optional[str] = None,
    ) -> List[Expense]:
        """Expenses whose occurred_at falls in [start, end]"""
        query = self.db.query(ExpenseRecord).filter(
            ExpenseRecord.user_id == user_id,
            ExpenseRecord.occurred_at >= start,
            ExpenseRecord.occurred_at <= end,
        )
        if category is not None:
            query = query.filter(ExpenseRecord.category == category)
        return [to_expense(r) for r in query.order_by(ExpenseRecord.occurred_at).all()]

    def list_recorded_between(self, user_id: str, start: datetime, end: datetime) -> List[Expense]:
        """Expenses whose recorded_at falls in [start, end]"""
        records = (
            self.db.query(ExpenseRecord)
            .filter(
                ExpenseRecord.user_id == user_id,
                ExpenseRecord.recorded_at >= start,
                ExpenseRecord.recorded_at <= end,
            )
            .order_by(ExpenseRecord.recorded_at)
            .all()
        )
        return [to_expense(r) for r in records]

    def mark_impulse(self, expense_id: uuid.UUID) -> None:
        """Set the impulse flag; a flag already set is left alone"""
        record = self.get(expense_id)
        if record is not None and not record.is_impulse:
            record.is_impulse = True
            self.db.flush()


class IncomeRepository:
    """Repository for income events"""

    def __init__(self, db: Session):
        self.db = db

    def add(
        self,
        user_id: str,
        amount: Decimal,
        source: str,
        occurred_at: datetime,
        recorded_at: datetime,
    ) -> IncomeRecord:
        record = IncomeRecord(
            user_id=user_id,
            amount=amount,
            source=source,
            occurred_at=occurred_at,
            recorded_at=recorded_at,
        )
        self.db.add(record)
        self.db.flush()
        return record

    def list_between(self, user_id: str, start: datetime, end: datetime) -> List[Income]:
        records = (
            self.db.query(IncomeRecord)
            .filter(
                IncomeRecord.user_id == user_id,
                IncomeRecord.occurred_at >= start,
                IncomeRecord.occurred_at <= end,
            )
            .order_by(IncomeRecord.occurred_at)
            .all()
        )
        return [to_income(r) for r in records]


class BudgetRepository:
    """Repository for budgets"""

    def __init__(self, db: Session):
        self.db = db

    def add(self, user_id: str, category: str, limit: Decimal, period: BudgetPeriod) -> BudgetRecord:
        record = BudgetRecord(user_id=user_id, category=category, limit=limit, period=parse_period(period).value)
        self.db.add(record)
        self.db.flush()
        return record

    def list_for_category(self, user_id: str, category: str) -> List[Budget]:
        records = (
            self.db.query(BudgetRecord)
            .filter(BudgetRecord.user_id == user_id, BudgetRecord.category == category)
            .order_by(BudgetRecord.period)
            .all()
        )
        return [to_budget(r) for r in records]

    def list_for_user(self, user_id: str) -> List[Budget]:
        records = self.db.query(BudgetRecord).filter(BudgetRecord.user_id == user_id).all()
        return [to_budget(r) for r in records]


class AlertRepository:
    """Repository for alerts; the engine only ever inserts"""

    def __init__(self, db: Session):
        self.db = db

    def create(self, user_id: str, draft: AlertDraft, triggered_at: datetime) -> AlertRecord:
        record = AlertRecord(
            user_id=user_id,
            type=draft.type.value,
            message=draft.message,
            is_read=False,
            triggered_at=triggered_at,
        )
        self.db.add(record)
        self.db.flush()
        return record

    def count_between(self, user_id: str, start: datetime, end: datetime) -> int:
        return (
            self.db.query(func.count(AlertRecord.id))
            .filter(
                AlertRecord.user_id == user_id,
                AlertRecord.triggered_at >= start,
                AlertRecord.triggered_at <= end,
            )
            .scalar()
        )

    def list_for_user(self, user_id: str) -> List[AlertRecord]:
        return (
            self.db.query(AlertRecord)
            .filter(AlertRecord.user_id == user_id)
            .order_by(AlertRecord.triggered_at.desc())
            .all()
        )


class ForecastRepository:
    """Repository for append-only forecast snapshots"""

    def __init__(self, db: Session):
        self.db = db

    def create(self, user_id: str, forecast: ForecastResult, created_at: datetime) -> ForecastSnapshotRecord:
        record = ForecastSnapshotRecord(
            user_id=user_id,
            balance=forecast.balance,
            burn_rate=forecast.burn_rate,
            estimated_days_left=persisted_days(forecast.days_left),
            risk_level=forecast.risk_level.value,
            created_at=created_at,
        )
        self.db.add(record)
        self.db.flush()
        return record

    def latest(self, user_id: str) -> Optional[ForecastSnapshotRecord]:
        return (
            self.db.query(ForecastSnapshotRecord)
            .filter(ForecastSnapshotRecord.user_id == user_id)
            .order_by(ForecastSnapshotRecord.created_at.desc())
            .first()
        )

    def history(self, user_id: str, limit: int = 30) -> List[ForecastSnapshotRecord]:
        """Most recent snapshots first"""
        return (
            self.db.query(ForecastSnapshotRecord)
            .filter(ForecastSnapshotRecord.user_id == user_id)
            .order_by(ForecastSnapshotRecord.created_at.desc())
            .limit(limit)
            .all()
        )


class RecommendationRepository:
    """Repository for the per-user recommendation set"""

    def __init__(self, db: Session):
        self.db = db

    def replace_for_user(
        self,
        user_id: str,
        rules: Sequence[RecommendationRule],
        generated_at: datetime,
    ) -> List[RecommendationRecord]:
        """
        Delete every recommendation of the user and insert one row per rule.

        Runs inside the caller's transaction; nothing is visible to other
        sessions until the caller commits.
        """
        self.db.query(RecommendationRecord).filter(
            RecommendationRecord.user_id == user_id
        ).delete(synchronize_session=False)

        records = [
            RecommendationRecord(
                user_id=user_id,
                tip=rule.tip,
                category=rule.category,
                position=position,
                generated_at=generated_at,
            )
            for position, rule in enumerate(rules)
        ]
        self.db.add_all(records)
        self.db.flush()
        return records

    def list_for_user(self, user_id: str) -> List[RecommendationRecord]:
        return (
            self.db.query(RecommendationRecord)
            .filter(RecommendationRecord.user_id == user_id)
            .order_by(RecommendationRecord.position)
            .all()
        )


class NotificationRepository:
    def __init__(self, db: Session):
        self.db = db

    def create(self, user_id: str, digest: Digest, created_at: datetime) -> NotificationRecord:
        record = NotificationRecord(
            user_id=user_id,
            title=digest.title,
            body=digest.body,
            is_read=False,
            created_at=created_at,
        )
        self.db.add(record)
        self.db.flush()
        return record

    def list_for_user(self, user_id: str) -> List[NotificationRecord]:
        return (
            self.db.query(NotificationRecord)
            .filter(NotificationRecord.user_id == user_id)
            .order_by(NotificationRecord.created_at.desc())
            .all()
        )


class UserRepository:
    def __init__(self, db: Session):
        self.db = db

    def add(self, user_id: str, email: str, name: Optional[str] = None) -> UserRecord:
        record = UserRecord(id=user_id, email=email, name=name)
        self.db.add(record)
        self.db.flush()
        return record

    def list_ids(self) -> List[str]:
        return [row[0] for row in self.db.query(UserRecord.id).order_by(UserRecord.id).all()]
