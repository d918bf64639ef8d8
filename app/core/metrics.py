"""
Domain metrics exposed alongside the HTTP metrics on /metrics.
"""
from prometheus_client import Counter

RECOMMENDATION_STAGE_ITEMS = Counter(
    "recommendation_stage_items_total",
    "Items contributed to recommendation results, by stage",
    ["stage"],
)

RECOMMENDATION_STAGE_FAILURES = Counter(
    "recommendation_stage_failures_total",
    "Recommendation stages that degraded to empty after a store failure",
    ["stage"],
)

RATE_LIMIT_DECISIONS = Counter(
    "rate_limit_decisions_total",
    "Rate limiter admission decisions",
    ["limiter", "outcome"],
)
