"""Prometheus metrics for plan generation, projection accuracy and data source health"""

from prometheus_client import Counter, Histogram

# Plan metrics
plan_generated_counter = Counter(
    "cashflow_plans_generated_total",
    "Projection plans generated",
    ["country", "baseline"],  # baseline: seasonal | trend
)

plan_cache_counter = Counter(
    "cashflow_plan_cache_total",
    "Stored plan lookups",
    ["result"],  # hit | missing | expired
)

# Comparison metrics
comparison_counter = Counter(
    "cashflow_comparisons_total",
    "Plan-vs-actual comparisons",
    ["country"],
)

accuracy_histogram = Histogram(
    "cashflow_projection_accuracy_percent",
    "Projection accuracy reported by plan-vs-actual comparisons",
    buckets=[10, 25, 50, 75, 90, 95, 100],
)

# Data source metrics
sheets_fetch_failures_counter = Counter(
    "sheets_fetch_failures_total",
    "Failed spreadsheet API calls",
)

weekly_model_unavailable_counter = Counter(
    "weekly_model_unavailable_total",
    "Weekly financial model fetches that returned no data",
)

coerced_amounts_counter = Counter(
    "cashflow_coerced_amounts_total",
    "Record amounts that were not numeric and were treated as zero",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_plan_lookup(found: bool, expired: bool) -> None:
    """Record whether a stored plan was served or had to be regenerated"""
    if not found:
        result = "missing"
    elif expired:
        result = "expired"
    else:
        result = "hit"
    plan_cache_counter.labels(result=result).inc()


def record_comparison(country: str, accuracy: float) -> None:
    """Record a comparison and its accuracy for monitoring projection quality"""
    comparison_counter.labels(country=country).inc()
    accuracy_histogram.observe(accuracy)
