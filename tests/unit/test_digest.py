"""Unit tests for weekly digest composition"""

from decimal import Decimal

from spendguard.domain.digest import (
    CRITICAL_FUNDS_TIP,
    NEAR_EXHAUSTION_TIP,
    POSITIVE_TIP,
    SPENDING_CAP_TIP,
    compose_digest,
    select_tip,
)
from spendguard.domain.models import RiskLevel


def test_danger_tip_wins_over_everything():
    tip = select_tip(Decimal("950"), Decimal("1000"), "FOOD", RiskLevel.DANGER)
    assert tip == CRITICAL_FUNDS_TIP


def test_warning_tip_before_income_check():
    tip = select_tip(Decimal("950"), Decimal("1000"), "FOOD", RiskLevel.WARNING)
    assert tip == SPENDING_CAP_TIP


def test_near_exhaustion_at_ninety_percent():
    """Spending exactly 90% of income counts as near exhaustion"""
    tip = select_tip(Decimal("900"), Decimal("1000"), "FOOD", RiskLevel.SAFE)
    assert tip == NEAR_EXHAUSTION_TIP


def test_top_category_tip_uses_display_name():
    tip = select_tip(Decimal("899.99"), Decimal("1000"), "FOOD", RiskLevel.SAFE)
    assert "Food & Dining" in tip


def test_no_income_skips_exhaustion_check():
    tip = select_tip(Decimal("300"), Decimal("0"), "SHOPPING", RiskLevel.SAFE)
    assert "Shopping" in tip


def test_positive_tip_when_nothing_spent():
    assert select_tip(Decimal("0"), Decimal("0"), None, RiskLevel.SAFE) == POSITIVE_TIP


def test_compose_digest_body():
    digest = compose_digest(
        title="Weekly Financial Digest",
        total_spent=Decimal("1234.5"),
        total_income=Decimal("0"),
        top_category="TRANSPORT",
        alert_count=3,
        risk_level=RiskLevel.WARNING,
    )

    assert digest.title == "Weekly Financial Digest"
    assert digest.body.splitlines() == [
        "Total spent last week: $1234.50",
        "Top spending category: TRANSPORT",
        "Alerts triggered: 3",
        "Current risk level: WARNING",
        "",
        f"Tip: {SPENDING_CAP_TIP}",
    ]


def test_compose_digest_empty_week():
    digest = compose_digest("Digest", Decimal("0"), Decimal("0"), None, 0, RiskLevel.SAFE)

    assert "Top spending category: none" in digest.body
    assert "Total spent last week: $0.00" in digest.body
    assert digest.tip == POSITIVE_TIP
