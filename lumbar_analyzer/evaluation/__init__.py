"""Metric classification for display and progress tracking."""

from .status import MetricStatus
from .metrics import (
    Metric,
    MetricChange,
    overall_score_metric,
    waiting_metrics,
    compare_metrics,
)
