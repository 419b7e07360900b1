"""
Prometheus metrics for the API and the ledger
"""

from prometheus_client import Counter, Histogram

REQUEST_COUNT = Counter(
    "app_requests_total",
    "Total requests",
    ["method", "endpoint", "status"]
)

REQUEST_DURATION = Histogram(
    "app_request_duration_seconds",
    "Request duration",
    ["method", "endpoint"]
)

LEDGER_TRANSITIONS = Counter(
    "ledger_transitions_total",
    "Ledger mutations by operation and outcome",
    ["operation", "outcome"]
)

REFUND_REQUEST_REVIEWS = Counter(
    "refund_request_reviews_total",
    "Refund request review decisions",
    ["decision"]
)


def record_transition(operation: str, outcome: str = "success"):
    LEDGER_TRANSITIONS.labels(operation=operation, outcome=outcome).inc()


def record_review(decision: str):
    REFUND_REQUEST_REVIEWS.labels(decision=decision).inc()
