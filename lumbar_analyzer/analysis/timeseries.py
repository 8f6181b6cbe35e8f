"""Excessive-movement time series recorded during an assessment."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from ..config.analysis_config import DEFAULT_CONFIG, RecorderConfig
from ..evaluation.status import MetricStatus


@dataclass(frozen=True)
class SeriesPoint:
    timestamp_ms: float
    time_s: float          # seconds since recording start
    value: float           # excessive lumbar movement (degrees)
    status: MetricStatus


@dataclass(frozen=True)
class SeriesStatistics:
    mean: float = 0.0
    max: float = 0.0
    min: float = 0.0
    range: float = 0.0
    normal_percentage: float = 0.0
    caution_percentage: float = 0.0
    abnormal_percentage: float = 0.0


class ExcessiveMovementRecorder:
    """Bounded time series of excessive lumbar movement with summary statistics."""

    def __init__(self, cfg: RecorderConfig = DEFAULT_CONFIG.recorder):
        self.cfg = cfg
        self.points: deque = deque(maxlen=cfg.max_points)
        self.start_ms: Optional[float] = None
        self.is_recording = False
        self.duration_s = 0.0

    def start(self, timestamp_ms: float):
        """Start a new recording; previous points are discarded."""
        self.points.clear()
        self.start_ms = float(timestamp_ms)
        self.is_recording = True
        self.duration_s = 0.0

    def stop(self):
        self.is_recording = False

    def clear(self):
        self.points.clear()
        self.start_ms = None
        self.is_recording = False
        self.duration_s = 0.0

    def classify(self, value: float) -> MetricStatus:
        if value >= self.cfg.abnormal_threshold_deg:
            return MetricStatus.ABNORMAL
        if value >= self.cfg.caution_threshold_deg:
            return MetricStatus.CAUTION
        return MetricStatus.NORMAL

    def add(self, value: float, timestamp_ms: float) -> Optional[SeriesPoint]:
        """Append a sample while recording. Returns the stored point, or None."""
        if not self.is_recording or self.start_ms is None:
            return None

        elapsed = (float(timestamp_ms) - self.start_ms) / 1000.0
        point = SeriesPoint(float(timestamp_ms), elapsed, float(value), self.classify(value))
        self.points.append(point)
        self.duration_s = elapsed
        return point

    def values(self) -> List[float]:
        return [p.value for p in self.points]

    def statistics(self) -> SeriesStatistics:
        """Summary over the recorded points, rounded to 0.1."""
        if not self.points:
            return SeriesStatistics()

        values = np.asarray(self.values(), dtype=np.float64)
        n = len(self.points)

        def pct(status: MetricStatus) -> float:
            count = sum(1 for p in self.points if p.status is status)
            return round(count / n * 100.0, 1)

        return SeriesStatistics(
            mean=round(float(values.mean()), 1),
            max=round(float(values.max()), 1),
            min=round(float(values.min()), 1),
            range=round(float(values.max() - values.min()), 1),
            normal_percentage=pct(MetricStatus.NORMAL),
            caution_percentage=pct(MetricStatus.CAUTION),
            abnormal_percentage=pct(MetricStatus.ABNORMAL),
        )
