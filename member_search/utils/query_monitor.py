"""
Statement timing for the search engine.

Every statement sent through an engine with monitoring enabled is timed.
Durations feed `member_search_db_query_duration_seconds`; statements
slower than SLOW_QUERY_THRESHOLD_MS are also counted and logged with a
truncated copy of the SQL. Content and count statements of a page are
labelled `select`, so the elided-count savings show up directly in the
select rate.
"""

import time

from sqlalchemy import event
from sqlalchemy.engine import Engine

from member_search.constants import LOG_STATEMENT_PREVIEW_CHARS
from member_search.logging import logger
from member_search.settings import app_settings
from member_search.utils.metrics import (
    db_query_duration_seconds,
    db_slow_queries_total,
)

_OPERATIONS = ("select", "insert", "update", "delete")


def _get_query_operation(statement: str) -> str:
    """Metric label for a statement: its leading DML keyword, or "other"."""
    keyword = statement.lstrip()[:6].lower()
    return keyword if keyword in _OPERATIONS else "other"


def _preview(statement: str) -> str:
    if len(statement) <= LOG_STATEMENT_PREVIEW_CHARS:
        return statement
    return statement[:LOG_STATEMENT_PREVIEW_CHARS] + "..."


def before_cursor_execute(  # type: ignore[no-untyped-def]
    conn, cursor, statement, parameters, context, executemany
):
    context._query_start_time = time.perf_counter()


def after_cursor_execute(  # type: ignore[no-untyped-def]
    conn, cursor, statement, parameters, context, executemany
):
    """
    Record the duration of a finished statement.

    Statements that were not seen by before_cursor_execute() (listener
    attached mid-flight) are ignored.
    """
    started = getattr(context, "_query_start_time", None)
    if started is None:
        return

    elapsed = time.perf_counter() - started
    operation = _get_query_operation(statement)
    db_query_duration_seconds.labels(operation=operation).observe(elapsed)

    if elapsed * 1000 <= app_settings.SLOW_QUERY_THRESHOLD_MS:
        return

    db_slow_queries_total.labels(operation=operation).inc()
    logger.warning(
        f"Slow {operation} took {elapsed:.3f}s "
        f"(threshold {app_settings.SLOW_QUERY_THRESHOLD_MS}ms): {_preview(statement)}"
    )


def enable_query_monitoring(engine: Engine) -> None:
    """
    Attach the timing listeners to one engine.

    Pass `async_engine.sync_engine` for async engines. Calling this again
    for the same engine is a no-op.

    Args:
        engine: Engine to monitor.
    """
    if event.contains(engine, "before_cursor_execute", before_cursor_execute):
        return

    event.listen(engine, "before_cursor_execute", before_cursor_execute)
    event.listen(engine, "after_cursor_execute", after_cursor_execute)
    logger.debug(f"Query monitoring enabled for {engine.url.render_as_string()}")
