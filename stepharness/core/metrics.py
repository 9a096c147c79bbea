"""
Helpers for VerifiedMetrics callbacks.

The router exposes Prometheus text format on /metrics; these helpers parse it
with prometheus_client so callbacks can assert on individual samples instead
of grepping raw text.
"""

from __future__ import annotations

from typing import Mapping, Optional

from prometheus_client.metrics_core import Metric
from prometheus_client.parser import text_string_to_metric_families


def parse_metrics(text: str) -> dict[str, Metric]:
    """
    Parse Prometheus exposition text into ``{family name: Metric}``.

    Counter families are keyed without their ``_total`` suffix
    (``# TYPE catalog_op_count_total counter`` is keyed ``catalog_op_count``),
    while their samples keep the ``_total`` name used by ``sample_value``.
    """
    return {family.name: family for family in text_string_to_metric_families(text)}


def sample_value(
    text: str,
    name: str,
    labels: Optional[Mapping[str, str]] = None,
) -> Optional[float]:
    """
    Value of the first sample called ``name`` whose labels include ``labels``.

    ``name`` is the sample name as it appears in the text (e.g.
    ``http_requests_total``), not the family name.

    Returns None when no sample matches.
    """
    wanted = dict(labels or {})
    for family in text_string_to_metric_families(text):
        for sample in family.samples:
            if sample.name != name:
                continue
            if all(sample.labels.get(k) == v for k, v in wanted.items()):
                return sample.value
    return None


def sum_samples(
    text: str,
    name: str,
    labels: Optional[Mapping[str, str]] = None,
) -> float:
    """Sum of every sample called ``name`` whose labels include ``labels``."""
    wanted = dict(labels or {})
    total = 0.0
    for family in text_string_to_metric_families(text):
        for sample in family.samples:
            if sample.name == name and all(
                sample.labels.get(k) == v for k, v in wanted.items()
            ):
                total += sample.value
    return total
