"""Weekly digest batch driver with per-user failure isolation"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from sqlalchemy.orm import Session

from spendguard.infrastructure.database.repositories import UserRepository
from spendguard.infrastructure.observability.logging import log_digest_failure
from spendguard.infrastructure.observability.metrics import record_digest
from spendguard.services.engine import BehaviorEngine
from spendguard.utils.date_utils import Clock

logger = logging.getLogger(__name__)


@dataclass
class DigestRunReport:
    succeeded: List[str] = field(default_factory=list)
    failed: Dict[str, str] = field(default_factory=dict)  # user_id -> error message


def run_weekly_digest(
    session_factory: Callable[[], Session],
    clock: Optional[Clock] = None,
    user_ids: Optional[List[str]] = None,
) -> DigestRunReport:
    """
    Generate a digest notification for every user.

    Each user gets a fresh session; a failure for one user is logged and
    recorded in the report, and the run continues with the next user.

    Args:
        session_factory: Callable returning a new Session (e.g. SessionLocal)
        clock: Time source shared by all users in the run
        user_ids: Restrict the run to these users (default: all users)
    """
    if user_ids is None:
        db = session_factory()
        try:
            user_ids = UserRepository(db).list_ids()
        finally:
            db.close()

    logger.info(f"Generating weekly digest for {len(user_ids)} user(s)", extra={"step": "weekly_digest"})
    report = DigestRunReport()

    for user_id in user_ids:
        db = session_factory()
        try:
            BehaviorEngine(db, clock).run_weekly_digest_for_user(user_id)
            report.succeeded.append(user_id)
            record_digest(success=True)
        except Exception as e:
            report.failed[user_id] = str(e)
            record_digest(success=False)
            log_digest_failure(user_id, e)
        finally:
            db.close()

    logger.info(
        "Weekly digest run completed",
        extra={
            "step": "weekly_digest",
            "succeeded": len(report.succeeded),
            "failed": len(report.failed),
        },
    )
    return report
