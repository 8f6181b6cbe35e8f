"""Display status shared by metrics and recorded series."""

from enum import Enum


class MetricStatus(Enum):
    """Clinical display band for a metric value."""
    NORMAL = "normal"
    CAUTION = "caution"
    ABNORMAL = "abnormal"
