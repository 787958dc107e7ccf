"""SQLAlchemy ORM models for events, budgets and engine outputs"""

import uuid
from sqlalchemy import Column, String, Boolean, DateTime, Integer, Numeric, Text, Uuid, UniqueConstraint
from sqlalchemy.orm import declarative_base

Base = declarative_base()

Money = Numeric(12, 2)


class UserRecord(Base):
    """User profile (only enumerated by the digest job)"""

    __tablename__ = "app_user"

    id = Column(Text, primary_key=True)
    email = Column(Text, nullable=False, unique=True)
    name = Column(Text, nullable=True)


class ExpenseRecord(Base):
    """Expense event; the engine only ever flips is_impulse"""

    __tablename__ = "expense"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, index=True)
    amount = Column(Money, nullable=False)
    category = Column(String(32), nullable=False)
    occurred_at = Column(DateTime, nullable=False, index=True)
    recorded_at = Column(DateTime, nullable=False, index=True)
    is_impulse = Column(Boolean, nullable=False, default=False)
    notes = Column(Text, nullable=True)


class IncomeRecord(Base):
    __tablename__ = "income"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, index=True)
    amount = Column(Money, nullable=False)
    source = Column(Text, nullable=False)
    occurred_at = Column(DateTime, nullable=False, index=True)
    recorded_at = Column(DateTime, nullable=False)


class BudgetRecord(Base):
    """At most one budget per (user, category, period)"""

    __tablename__ = "budget"
    __table_args__ = (UniqueConstraint("user_id", "category", "period", name="uq_budget_user_category_period"),)

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, index=True)
    category = Column(String(32), nullable=False)
    limit = Column(Money, nullable=False)
    period = Column(String(16), nullable=False)


class AlertRecord(Base):
    """Engine-emitted alert; only is_read may change afterwards"""

    __tablename__ = "alert"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, index=True)
    type = Column(String(16), nullable=False)
    message = Column(Text, nullable=False)
    is_read = Column(Boolean, nullable=False, default=False)
    triggered_at = Column(DateTime, nullable=False, index=True)


class ForecastSnapshotRecord(Base):
    """Append-only forecast history"""

    __tablename__ = "forecast_snapshot"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, index=True)
    balance = Column(Money, nullable=False)
    burn_rate = Column(Money, nullable=False)
    estimated_days_left = Column(Integer, nullable=False)
    risk_level = Column(String(16), nullable=False)
    created_at = Column(DateTime, nullable=False, index=True)


class RecommendationRecord(Base):
    """Derived cache, replaced wholesale on every generation"""

    __tablename__ = "recommendation"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, index=True)
    tip = Column(Text, nullable=False)
    category = Column(String(32), nullable=True)
    position = Column(Integer, nullable=False, default=0)
    generated_at = Column(DateTime, nullable=False)


class NotificationRecord(Base):
    __tablename__ = "notification"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, index=True)
    title = Column(Text, nullable=False)
    body = Column(Text, nullable=False)
    is_read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False)
