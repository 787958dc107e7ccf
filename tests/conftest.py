"""Pytest fixtures for testing"""

import pytest
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Generator
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from spendguard.domain.models import Expense, Income
from spendguard.infrastructure.database.models import Base
from spendguard.services.engine import BehaviorEngine
from spendguard.utils.date_utils import FixedClock


# Test database: one shared in-memory connection so every session sees the same data
TEST_DATABASE_URL = "sqlite://"
engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Wednesday, mid-month, mid-day
NOW = datetime(2024, 5, 15, 12, 0, 0)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def session_factory(db: Session):
    """Session factory bound to the same test database as `db`"""
    return TestingSessionLocal


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(NOW)


@pytest.fixture
def behavior_engine(db: Session, clock: FixedClock) -> BehaviorEngine:
    return BehaviorEngine(db, clock)


def make_expense(
    amount="10.00",
    category="FOOD",
    occurred_at: datetime = NOW,
    recorded_at: datetime = None,
    user_id: str = "user_1",
    id=None,
    is_impulse: bool = False,
) -> Expense:
    """Expense with recorded_at defaulting to occurred_at"""
    return Expense(
        id=id,
        user_id=user_id,
        amount=Decimal(amount),
        category=category,
        occurred_at=occurred_at,
        recorded_at=recorded_at or occurred_at,
        is_impulse=is_impulse,
    )


def make_income(
    amount="1000.00",
    source="Salary",
    occurred_at: datetime = NOW,
    user_id: str = "user_1",
) -> Income:
    return Income(
        user_id=user_id,
        amount=Decimal(amount),
        source=source,
        occurred_at=occurred_at,
        recorded_at=occurred_at,
    )


def minutes(n: int) -> timedelta:
    return timedelta(minutes=n)
