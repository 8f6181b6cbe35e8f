"""Dynamic lumbar stability: hip-vs-lumbar movement decomposition.

The analyzer keeps a rolling window of (lumbar angle, hip angle, timestamp)
samples. On each ``analyze()`` call it segments the hip-angle history into
movement phases (contiguous spans where the hip angle changes faster than a
threshold) and measures how much lumbar motion accompanies the hip motion
inside those phases.

    ratio      = Σ lumbar range / Σ hip range
    score      = max(0, 100 - 100 * ratio)
    excessive  = max(0, Σ lumbar range - coupling * Σ hip range)

A score of 100 means the lumbar spine stayed still while the hip moved; 0
means the lumbar spine moved as much as the hip.

All computations degrade to neutral values on empty or degenerate input;
nothing here raises.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List

import numpy as np

from ..config.analysis_config import DEFAULT_CONFIG, StabilityConfig

logger = logging.getLogger(__name__)


class StabilityGrade(Enum):
    """Qualitative grade of the stability score."""
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"


@dataclass
class MovementPhase:
    """A contiguous span of the hip-angle history with sustained motion."""
    start_index: int
    end_index: int          # inclusive
    hip_range: float
    lumbar_range: float = 0.0

    @property
    def frame_count(self) -> int:
        return self.end_index - self.start_index + 1


@dataclass
class StabilityResult:
    """Snapshot returned by :meth:`StabilityAnalyzer.analyze`."""
    hip_movement_phases: List[MovementPhase] = field(default_factory=list)
    lumbar_stability_score: float = 0.0
    lumbar_excessive_movement: float = 0.0
    hip_lumbar_ratio: float = 0.0
    stability_grade: StabilityGrade = StabilityGrade.FAIR

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hip_movement_phases": [
                {
                    "start_index": p.start_index,
                    "end_index": p.end_index,
                    "hip_range": p.hip_range,
                    "lumbar_range": p.lumbar_range,
                }
                for p in self.hip_movement_phases
            ],
            "lumbar_stability_score": self.lumbar_stability_score,
            "lumbar_excessive_movement": self.lumbar_excessive_movement,
            "hip_lumbar_ratio": self.hip_lumbar_ratio,
            "stability_grade": self.stability_grade.value,
        }


def grade_from_score(score: float, cfg: StabilityConfig = DEFAULT_CONFIG.stability) -> StabilityGrade:
    if score >= cfg.grade_excellent:
        return StabilityGrade.EXCELLENT
    if score >= cfg.grade_good:
        return StabilityGrade.GOOD
    if score >= cfg.grade_fair:
        return StabilityGrade.FAIR
    return StabilityGrade.POOR


def detect_movement_phases(
    hip_angles: List[float],
    movement_threshold: float,
    min_phase_frames: int,
) -> List[MovementPhase]:
    """Segment a hip-angle series into movement phases.

    A phase opens when the frame-to-frame change exceeds *movement_threshold*
    and closes when it drops below half of it. Phases shorter than
    *min_phase_frames* samples are dropped. A phase still open at the end of
    the series is kept if it is long enough.
    """
    phases: List[MovementPhase] = []
    n = len(hip_angles)
    if n < 2:
        return phases

    values = np.asarray(hip_angles, dtype=np.float64)
    changes = np.abs(np.diff(values))
    release = movement_threshold / 2.0

    start = None
    for i in range(1, n):
        change = changes[i - 1]
        if start is None:
            if change > movement_threshold:
                start = i - 1
        elif change < release:
            _append_phase(phases, values, start, i - 1, min_phase_frames)
            start = None

    if start is not None:
        _append_phase(phases, values, start, n - 1, min_phase_frames)

    return phases


def _append_phase(
    phases: List[MovementPhase],
    hip: np.ndarray,
    start: int,
    end: int,
    min_phase_frames: int,
):
    if end - start + 1 < min_phase_frames:
        return
    span = hip[start:end + 1]
    phases.append(MovementPhase(start, end, float(span.max() - span.min())))


class StabilityAnalyzer:
    """Rolling-window hip/lumbar stability analysis for one test session."""

    def __init__(self, cfg: StabilityConfig = DEFAULT_CONFIG.stability):
        """
        Initialize stability analyzer.

        Args:
            cfg: Window size, phase thresholds and grade bands
        """
        self.cfg = cfg
        self.lumbar_history: deque = deque(maxlen=cfg.window_size)
        self.hip_history: deque = deque(maxlen=cfg.window_size)
        self.timestamps: deque = deque(maxlen=cfg.window_size)

    def __len__(self) -> int:
        return len(self.hip_history)

    def add_data_point(self, lumbar_angle: float, hip_angle: float, timestamp_ms: float):
        """Record one frame. The oldest sample is evicted once the window is full.

        The hip angle is unwrapped against the previous sample, so a crossing
        of the ±180° seam is stored as a small step rather than a 360° jump.
        """
        hip = float(hip_angle)
        if self.hip_history:
            prev = self.hip_history[-1]
            hip = prev + ((hip - prev + 180.0) % 360.0 - 180.0)
        self.lumbar_history.append(float(lumbar_angle))
        self.hip_history.append(hip)
        self.timestamps.append(float(timestamp_ms))

    def detect_phases(self) -> List[MovementPhase]:
        """Hip movement phases in the current window, with lumbar ranges filled in."""
        phases = detect_movement_phases(
            list(self.hip_history),
            self.cfg.movement_threshold_deg,
            self.cfg.min_phase_frames,
        )
        lumbar = np.asarray(self.lumbar_history, dtype=np.float64)
        for phase in phases:
            span = lumbar[phase.start_index:phase.end_index + 1]
            phase.lumbar_range = float(span.max() - span.min())
        return phases

    def analyze(self) -> StabilityResult:
        """Score the current window."""
        if len(self) < self.cfg.min_samples:
            return self._preliminary_result()

        phases = self.detect_phases()
        total_hip = float(sum(p.hip_range for p in phases))
        total_lumbar = float(sum(p.lumbar_range for p in phases))

        result = self._score(total_lumbar, total_hip)
        result.hip_movement_phases = phases

        logger.debug(
            "Stability: %d phase(s), hip=%.1f°, lumbar=%.1f°, score=%.1f (%s)",
            len(phases), total_hip, total_lumbar,
            result.lumbar_stability_score, result.stability_grade.value,
        )
        return result

    def _score(self, lumbar_range: float, hip_range: float) -> StabilityResult:
        ratio = lumbar_range / hip_range if hip_range > 0 else 0.0
        score = max(0.0, 100.0 - ratio * 100.0)
        excessive = max(0.0, lumbar_range - self.cfg.coupling_ratio * hip_range)
        return StabilityResult(
            lumbar_stability_score=score,
            lumbar_excessive_movement=excessive,
            hip_lumbar_ratio=ratio,
            stability_grade=grade_from_score(score, self.cfg),
        )

    def _preliminary_result(self) -> StabilityResult:
        """First/last delta estimate used until the window has enough samples."""
        if len(self) == 0:
            return StabilityResult(lumbar_stability_score=self.cfg.neutral_score)

        lumbar_delta = abs(self.lumbar_history[-1] - self.lumbar_history[0])
        hip_delta = abs(self.hip_history[-1] - self.hip_history[0])

        if hip_delta < self.cfg.min_hip_motion_deg:
            # No usable hip motion yet
            return StabilityResult(
                lumbar_stability_score=self.cfg.neutral_score,
                lumbar_excessive_movement=lumbar_delta,
                hip_lumbar_ratio=0.0,
                stability_grade=StabilityGrade.FAIR,
            )

        return self._score(lumbar_delta, hip_delta)

    def reset(self):
        """Reset analyzer state."""
        if self.hip_history:
            logger.debug("Stability history reset (%d samples dropped)", len(self.hip_history))
        self.lumbar_history.clear()
        self.hip_history.clear()
        self.timestamps.clear()
