from prometheus_client import Counter, Histogram

ABAC_DECISIONS = Counter(
    "orghub_abac_decisions_total",
    "Total ABAC authorization decisions by effect.",
    labelnames=("decision", "bypassed"),
)

ABAC_DECISION_SECONDS = Histogram(
    "orghub_abac_decision_seconds",
    "ABAC decision evaluation duration in seconds.",
)


def record_decision(decision: str, bypassed: bool, seconds: float | None = None) -> None:
    ABAC_DECISIONS.labels(decision=decision, bypassed=str(bypassed).lower()).inc()
    if seconds is not None:
        ABAC_DECISION_SECONDS.observe(seconds)
