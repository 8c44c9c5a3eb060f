"""
Prometheus metrics for the live-game core.

HTTP request metrics come from prometheus-fastapi-instrumentator (see
main.py); this module only holds the domain counters.
"""
from prometheus_client import Counter

stat_actions_recorded_total = Counter(
    "stat_actions_recorded_total",
    "Total stat actions recorded",
    ["action_type"]
)

stat_actions_undone_total = Counter(
    "stat_actions_undone_total",
    "Total stat actions removed by undo",
    ["action_type"]
)

substitutions_total = Counter(
    "substitutions_total",
    "Total accepted substitutions"
)

game_transitions_total = Counter(
    "game_transitions_total",
    "Accepted game state transitions",
    ["transition"]
)

game_rule_violations_total = Counter(
    "game_rule_violations_total",
    "Rejected operations by error kind",
    ["kind"]
)


def record_violation(kind: str) -> None:
    """Count a rejected operation."""
    game_rule_violations_total.labels(kind=kind).inc()
