"""Recommendation rule engine - declarative rule table and its interpreter"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from spendguard.domain.models import FeatureVector


class Comparison(Enum):
    """How a feature value is tested against a rule threshold"""

    GREATER_THAN = "gt"
    LESS_THAN = "lt"
    IS_TRUE = "is_true"


@dataclass(frozen=True)
class RecommendationRule:
    """One predicate -> tip mapping, evaluated against a named feature"""

    feature: str
    comparison: Comparison
    threshold: Optional[Decimal]
    tip: str
    category: Optional[str] = None

    def matches(self, features: FeatureVector) -> bool:
        value = getattr(features, self.feature)
        if self.comparison is Comparison.IS_TRUE:
            return bool(value)
        if self.comparison is Comparison.GREATER_THAN:
            return value > self.threshold
        if self.comparison is Comparison.LESS_THAN:
            return value < self.threshold
        raise ValueError(f"Unknown comparison: {self.comparison}")


# Order is display/storage order only; every rule is evaluated
RECOMMENDATION_RULES: Tuple[RecommendationRule, ...] = (
    RecommendationRule(
        feature="food_percent",
        comparison=Comparison.GREATER_THAN,
        threshold=Decimal("40"),
        tip="Consider meal prepping to cut food costs by up to 30%.",
        category="FOOD",
    ),
    RecommendationRule(
        feature="impulse_score",
        comparison=Comparison.GREATER_THAN,
        threshold=Decimal("5"),
        tip="You're at high impulse risk. Try a 24-hour purchase delay rule.",
    ),
    RecommendationRule(
        feature="savings_rate",
        comparison=Comparison.LESS_THAN,
        threshold=Decimal("10"),
        tip="Aim to save at least 10% of your allowance each cycle.",
    ),
    RecommendationRule(
        feature="transport_total",  # absolute currency units, not percent
        comparison=Comparison.GREATER_THAN,
        threshold=Decimal("5000"),
        tip="A weekly transport pass could reduce your commute costs.",
        category="TRANSPORT",
    ),
    RecommendationRule(
        feature="entertainment_percent",
        comparison=Comparison.GREATER_THAN,
        threshold=Decimal("25"),
        tip="Look for free campus events to cut entertainment spending.",
        category="ENTERTAINMENT",
    ),
    RecommendationRule(
        feature="late_night_count",
        comparison=Comparison.GREATER_THAN,
        threshold=Decimal("3"),
        tip="Late-night purchases tend to be impulsive. Set a spending curfew.",
    ),
    RecommendationRule(
        feature="shopping_percent",
        comparison=Comparison.GREATER_THAN,
        threshold=Decimal("20"),
        tip="Try a no-spend challenge for shopping this week.",
        category="SHOPPING",
    ),
    RecommendationRule(
        feature="weekly_spike",
        comparison=Comparison.IS_TRUE,
        threshold=None,
        tip="Your spending spiked this week. Review your recent transactions.",
    ),
)


def evaluate_rules(
    features: FeatureVector,
    rules: Sequence[RecommendationRule] = RECOMMENDATION_RULES,
) -> List[RecommendationRule]:
    """Return every rule whose predicate holds, in table order"""
    return [rule for rule in rules if rule.matches(features)]
