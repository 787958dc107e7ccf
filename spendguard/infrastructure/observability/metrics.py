"""Prometheus metrics for alert volume, forecast risk and digest runs"""

from prometheus_client import Counter

alerts_counter = Counter(
    "spendguard_alerts_total",
    "Alerts emitted by the behavior engine",
    ["type"],  # OVERSPENDING | SPIKE | IMPULSE | LATE_NIGHT | POST_INCOME
)

forecast_counter = Counter(
    "spendguard_forecast_total",
    "Forecast snapshots generated",
    ["risk_level"],  # SAFE | WARNING | DANGER
)

recommendations_counter = Counter(
    "spendguard_recommendations_total",
    "Recommendations written by the rule engine",
)

alert_check_failures_counter = Counter(
    "spendguard_alert_check_failures_total",
    "Alert checks that failed after the expense itself was saved",
)

digest_counter = Counter(
    "spendguard_digest_total",
    "Weekly digest attempts per user",
    ["outcome"],  # success | failure
)


def record_alerts(alert_types) -> None:
    for alert_type in alert_types:
        alerts_counter.labels(type=alert_type).inc()


def record_forecast(risk_level: str) -> None:
    forecast_counter.labels(risk_level=risk_level).inc()


def record_digest(success: bool) -> None:
    digest_counter.labels(outcome="success" if success else "failure").inc()
