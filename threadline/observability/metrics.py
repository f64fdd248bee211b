"""Prometheus metrics for Threadline.

Provides metrics for turn outcomes, run polling, history replay and
failures of the two external collaborators.
"""

from prometheus_client import Counter, Histogram

# Turn metrics
TURN_COUNT = Counter(
    "threadline_turns_total",
    "Total number of chat turns handled",
    labelnames=["outcome"],
)

TURN_LATENCY = Histogram(
    "threadline_turn_latency_seconds",
    "End-to-end turn latency in seconds",
    labelnames=["outcome"],
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0),
)

# Run metrics
RUN_POLLS = Histogram(
    "threadline_run_polls",
    "Number of status polls per run",
    buckets=(0, 1, 2, 3, 5, 10, 20, 30, 50),
)

RUN_OUTCOMES = Counter(
    "threadline_run_outcomes_total",
    "Terminal run classifications",
    labelnames=["status"],
)

# Replay metrics
REPLAY_MESSAGES = Counter(
    "threadline_replay_messages_total",
    "Historical messages replayed into new threads",
    labelnames=["result"],
)

# Collaborator error metrics
PROVIDER_ERRORS = Counter(
    "threadline_provider_errors_total",
    "Errors returned by the remote assistant provider",
    labelnames=["operation", "error_type"],
)

STORE_ERRORS = Counter(
    "threadline_store_errors_total",
    "Errors returned by the conversation store",
    labelnames=["operation", "error_type"],
)
