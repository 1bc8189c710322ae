"""Prometheus metrics for analysis volume, score distribution and upstream failures"""

from prometheus_client import Counter, Histogram

analysis_counter = Counter(
    "discipline_analysis_total",
    "Wallet analyses created",
    ["frequency"],  # daily | weekly | bi-weekly | monthly | irregular | insufficient-data
)

results_counter = Counter(
    "discipline_results_total",
    "Cost/score results computed",
    ["cost_type"],  # saved | lost
)

discipline_score_histogram = Histogram(
    "discipline_score",
    "Distribution of overall discipline scores",
    buckets=[10, 20, 30, 40, 50, 60, 70, 80, 90, 100],
)

transfer_fetch_failures_counter = Counter(
    "transfer_fetch_failures_total",
    "Failed transfer source calls",
)

rate_oracle_failures_counter = Counter(
    "rate_oracle_failures_total",
    "Failed exchange rate oracle calls",
)

request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_analysis(frequency: str) -> None:
    analysis_counter.labels(frequency=frequency).inc()


def record_results(score: int, cost_type: str) -> None:
    """Record score distribution and saved/lost outcome"""
    results_counter.labels(cost_type=cost_type).inc()
    discipline_score_histogram.observe(score)
