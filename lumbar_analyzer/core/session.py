"""Per-session frame processing for a lumbar motor-control test.

One ``AssessmentSession`` owns exactly one angle filter, one stability
analyzer and one excessive-movement recorder. Frames must be delivered
sequentially; a multi-camera caller creates one session per stream.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence

from ..analysis.geometry import midpoint
from ..analysis.lumbar import hip_angle, lumbar_direction, lumbar_flexion_extension
from ..analysis.stability import StabilityAnalyzer, StabilityResult
from ..analysis.timeseries import ExcessiveMovementRecorder
from ..config.analysis_config import DEFAULT_CONFIG, AnalysisConfig
from ..config.landmarks import (
    ANKLE_PAIR,
    HIP_PAIR,
    KNEE_PAIR,
    SHOULDER_PAIR,
    TEST_REQUIRED_PAIRS,
    TEST_ROCK_BACK,
    TEST_SEATED_KNEE_EXT,
    TEST_STANDING_HIP_FLEX,
    validate_test_type,
)
from ..evaluation import metrics as m
from .landmarks import Landmark, is_empty_frame, pairs_visible, parse_landmarks
from .smoother import AngleFilter

logger = logging.getLogger(__name__)


@dataclass
class FrameResult:
    """Everything computed for one frame."""
    timestamp_ms: float
    raw_lumbar_angle: Optional[float] = None
    lumbar_angle: Optional[float] = None
    hip_angle: Optional[float] = None
    stability: Optional[StabilityResult] = None
    metrics: List[m.Metric] = field(default_factory=list)

    @property
    def has_pose(self) -> bool:
        return self.lumbar_angle is not None


class AssessmentSession:
    """Runs the lumbar analysis pipeline over a sequence of frames."""

    def __init__(self, test_type: str = TEST_STANDING_HIP_FLEX, config: AnalysisConfig = DEFAULT_CONFIG):
        """
        Initialize assessment session.

        Args:
            test_type: One of standingHipFlex, rockBack, seatedKneeExt
            config: Analysis configuration
        """
        self.test_type = validate_test_type(test_type)
        self.config = config
        self.angle_filter = AngleFilter(config.smoothing.capacity)
        self.stability = StabilityAnalyzer(config.stability)
        self.recorder = ExcessiveMovementRecorder(config.recorder)
        self.last_result: Optional[FrameResult] = None

    def set_test_type(self, test_type: str):
        """Switch test type. Filter and stability history are reset on change."""
        validate_test_type(test_type)
        if test_type != self.test_type:
            logger.info("Test type changed: %s -> %s", self.test_type, test_type)
            self.test_type = test_type
            self.angle_filter.reset()
            self.stability.reset()

    def reset(self):
        """Reset all state (new recording or new video)."""
        logger.info("Session reset (%s)", self.test_type)
        self.angle_filter.reset()
        self.stability.reset()
        self.recorder.clear()
        self.last_result = None

    def start_recording(self, timestamp_ms: float):
        self.recorder.start(timestamp_ms)

    def stop_recording(self):
        self.recorder.stop()

    def process_frame(self, landmarks: Optional[Sequence[Any]], timestamp_ms: float) -> FrameResult:
        """
        Process one frame of pose landmarks.

        Args:
            landmarks: 33 BlazePose landmarks of the tracked person, or None
                when no person was detected
            timestamp_ms: Monotonically increasing frame timestamp

        Returns:
            FrameResult with angles, stability snapshot and metrics
        """
        result = FrameResult(timestamp_ms=float(timestamp_ms))

        if landmarks is None or is_empty_frame(landmarks):
            result.metrics = m.waiting_metrics(self.test_type)
            self.last_result = result
            return result

        points = parse_landmarks(landmarks)
        cls_cfg = self.config.classification
        min_vis = cls_cfg.min_visibility

        if not pairs_visible(points, (SHOULDER_PAIR, HIP_PAIR), min_vis):
            self.last_result = result
            return result

        shoulder_mid = self._mid(points, SHOULDER_PAIR)
        hip_mid = self._mid(points, HIP_PAIR)

        raw = lumbar_flexion_extension(shoulder_mid, hip_mid, self.config.lumbar)
        filtered = self.angle_filter.filter(raw)
        result.raw_lumbar_angle = raw
        result.lumbar_angle = filtered

        logger.debug(
            "t=%.0fms lumbar raw=%.1f° filtered=%.1f° (%s)",
            timestamp_ms, raw, filtered, lumbar_direction(filtered, self.config.lumbar),
        )

        knees_visible = pairs_visible(points, (KNEE_PAIR,), min_vis)
        if knees_visible:
            knee_mid = self._mid(points, KNEE_PAIR)
            result.hip_angle = hip_angle(shoulder_mid, hip_mid, knee_mid, self.config.lumbar)
            self.stability.add_data_point(filtered, result.hip_angle, timestamp_ms)

        stability = self.stability.analyze()
        result.stability = stability
        # Only frames that contributed a stability sample go into the series
        if knees_visible:
            self.recorder.add(stability.lumbar_excessive_movement, timestamp_ms)

        metrics = [
            m.stability_score_metric(stability, cls_cfg),
            m.excessive_movement_metric(stability, cls_cfg),
        ]
        if self.test_type != TEST_SEATED_KNEE_EXT:
            metrics.append(m.lumbar_angle_metric(filtered, cls_cfg))

        if pairs_visible(points, TEST_REQUIRED_PAIRS[self.test_type], min_vis):
            metrics.append(self._test_metric(points, shoulder_mid, hip_mid))

        metrics.append(m.overall_score_metric(metrics, cls_cfg))
        result.metrics = metrics
        self.last_result = result
        return result

    def _test_metric(self, points: List[Landmark], shoulder_mid: Landmark, hip_mid: Landmark) -> m.Metric:
        cls_cfg = self.config.classification
        knee_mid = self._mid(points, KNEE_PAIR)
        if self.test_type == TEST_STANDING_HIP_FLEX:
            return m.hip_flexion_metric(hip_mid, knee_mid, cls_cfg)
        if self.test_type == TEST_ROCK_BACK:
            ankle_mid = self._mid(points, ANKLE_PAIR)
            return m.hip_knee_angle_metric(hip_mid, knee_mid, ankle_mid, cls_cfg)
        return m.lumbar_alignment_metric(shoulder_mid, hip_mid, cls_cfg)

    @staticmethod
    def _mid(points: Sequence[Landmark], pair) -> Landmark:
        left, right = pair
        return midpoint(points[left], points[right])
