"""
Prometheus metrics for member search.

Database statement timing plus the outcome of every pagination count
decision (executed vs. elided).
"""

from member_search.utils.metrics._helpers import (
    _get_or_create_counter,
    _get_or_create_histogram,
)

db_query_duration_seconds = _get_or_create_histogram(
    "member_search_db_query_duration_seconds",
    "Database query duration in seconds",
    ["operation"],  # select, insert, update, delete
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
)

db_slow_queries_total = _get_or_create_counter(
    "member_search_db_slow_queries_total",
    "Total number of slow database queries (exceeding threshold)",
    ["operation"],
)

db_query_errors_total = _get_or_create_counter(
    "member_search_db_query_errors_total",
    "Total database query errors",
    ["operation", "error_type"],
)

pagination_count_queries_total = _get_or_create_counter(
    "member_search_pagination_count_queries_total",
    "Pagination count decisions",
    ["outcome"],  # executed, elided
)

__all__ = [
    "db_query_duration_seconds",
    "db_slow_queries_total",
    "db_query_errors_total",
    "pagination_count_queries_total",
]
