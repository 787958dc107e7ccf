"""Engine factory and scheduled job entry points"""

from typing import Optional

from sqlalchemy.orm import Session

from spendguard.config import settings
from spendguard.infrastructure.database.models import Base
from spendguard.infrastructure.database.session import SessionLocal, engine
from spendguard.infrastructure.observability.logging import setup_logging
from spendguard.services.digest_job import DigestRunReport, run_weekly_digest
from spendguard.services.engine import BehaviorEngine
from spendguard.utils.date_utils import Clock

# Setup structured logging
setup_logging(settings.log_level)


def init_db() -> None:
    """Create all tables on the configured database"""
    Base.metadata.create_all(bind=engine)


def create_behavior_engine(db: Optional[Session] = None, clock: Optional[Clock] = None) -> BehaviorEngine:
    """Build an engine bound to the given session (a new one by default)"""
    return BehaviorEngine(db or SessionLocal(), clock)


def weekly_digest_job(clock: Optional[Clock] = None) -> DigestRunReport:
    """Callable for the scheduler: digest every user"""
    return run_weekly_digest(SessionLocal, clock)
