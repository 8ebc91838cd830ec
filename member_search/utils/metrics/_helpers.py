"""
Idempotent Prometheus metric registration.

Package modules can be imported more than once in one process (test
collection, module reloads). Registering the same metric name twice makes
prometheus_client raise, so every metric is created through these helpers,
which hand back the collector already in the registry instead.
"""

from typing import Any, TypeVar

from prometheus_client import REGISTRY, Counter, Histogram

M = TypeVar("M", Counter, Histogram)


def _register_once(metric_cls: type[M], name: str, **kwargs: Any) -> M:
    try:
        return metric_cls(name, **kwargs)
    except ValueError:
        # Duplicated timeseries: reuse the registered collector
        return REGISTRY._names_to_collectors[name]  # type: ignore[return-value]


def _get_or_create_counter(
    name: str, doc: str, labels: list[str] | None = None
) -> Counter:
    """
    Get the registered counter called `name`, creating it on first use.

    Args:
        name: Metric name, including the `_total` suffix.
        doc: Metric documentation.
        labels: Optional list of label names.

    Returns:
        Counter instance.
    """
    return _register_once(
        Counter, name, documentation=doc, labelnames=labels or []
    )


def _get_or_create_histogram(
    name: str,
    doc: str,
    labels: list[str] | None = None,
    buckets: tuple[float, ...] | None = None,
) -> Histogram:
    """
    Get the registered histogram called `name`, creating it on first use.

    Args:
        name: Metric name.
        doc: Metric documentation.
        labels: Optional list of label names.
        buckets: Bucket upper bounds; prometheus_client defaults when None.

    Returns:
        Histogram instance.
    """
    kwargs: dict[str, Any] = {"documentation": doc, "labelnames": labels or []}
    if buckets:
        kwargs["buckets"] = buckets
    return _register_once(Histogram, name, **kwargs)
