"""Weekly digest text composition"""

from decimal import Decimal
from typing import Optional

from spendguard.domain.features import format_money
from spendguard.domain.models import CATEGORY_DISPLAY_NAMES, Digest, RiskLevel

NEAR_EXHAUSTION_RATIO = Decimal("0.9")

CRITICAL_FUNDS_TIP = (
    "Your funds are critically low. Consider pausing non-essential spending "
    "and reviewing upcoming bills."
)
SPENDING_CAP_TIP = (
    "Your spending is elevated. Try setting a daily spending cap to stay on track this week."
)
NEAR_EXHAUSTION_TIP = (
    "You spent nearly all of last week's income. Building a buffer of at least 10% "
    "can help avoid shortfalls."
)
POSITIVE_TIP = (
    "Great job keeping spending in check! Consider putting any surplus toward "
    "savings or an emergency fund."
)


def select_tip(
    total_spent: Decimal,
    total_income: Decimal,
    top_category: Optional[str],
    risk_level: RiskLevel,
) -> str:
    """
    Pick one tip; the first matching condition wins:
    DANGER, WARNING, spent >= 90% of income, top category, otherwise praise.
    """
    if risk_level is RiskLevel.DANGER:
        return CRITICAL_FUNDS_TIP
    if risk_level is RiskLevel.WARNING:
        return SPENDING_CAP_TIP
    if total_income > 0 and total_spent >= total_income * NEAR_EXHAUSTION_RATIO:
        return NEAR_EXHAUSTION_TIP
    if top_category:
        name = CATEGORY_DISPLAY_NAMES.get(top_category, top_category)
        return (
            f"Your top spending category was {name}. "
            f"Look for small savings there to make a big difference over time."
        )
    return POSITIVE_TIP


def compose_digest(
    title: str,
    total_spent: Decimal,
    total_income: Decimal,
    top_category: Optional[str],
    alert_count: int,
    risk_level: RiskLevel,
) -> Digest:
    tip = select_tip(total_spent, total_income, top_category, risk_level)
    lines = [
        f"Total spent last week: {format_money(total_spent)}",
        f"Top spending category: {top_category or 'none'}",
        f"Alerts triggered: {alert_count}",
        f"Current risk level: {risk_level.value}",
        "",
        f"Tip: {tip}",
    ]
    return Digest(title=title, body="\n".join(lines), tip=tip, lines=lines)
