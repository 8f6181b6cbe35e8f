"""Lumbar motor-control analysis configuration.

All angle conventions, noise thresholds, scaling factors and grading bands are
centralised here so that tuning never requires touching analysis code.

The lumbar scaling and sign constants were tuned empirically against
MediaPipe BlazePose world landmarks and have no clinical validation. Treat
them as defaults, not as ground truth.

Reference range (Japanese Orthopaedic Association): thoracolumbar flexion
45°, extension 30°.
"""

from __future__ import annotations
from dataclasses import dataclass, field


# =====================================================================
# Lumbar flexion / extension estimate
# =====================================================================

@dataclass(frozen=True)
class LumbarAngleConfig:
    """Conversion of shoulder/hip midpoints into a signed trunk angle."""

    # MediaPipe z grows away from the camera. Forward flexion brings the
    # shoulders closer to the camera than the hips (negative z difference),
    # so the depth difference is negated to make flexion positive.
    depth_sign: float = -1.0

    # Magnitudes below this are detector jitter and are reported as 0.
    deadband_deg: float = 3.0

    # Shoulder-hip tracking over-estimates forward lean relative to true
    # lumbar motion, so flexion is scaled down.
    flexion_scale: float = 0.8
    extension_scale: float = 1.0

    # Physiological envelope (degrees, extension negative)
    min_angle_deg: float = -40.0
    max_angle_deg: float = 60.0

    # Label threshold for flexion / extension / neutral
    direction_threshold_deg: float = 5.0


# =====================================================================
# Temporal smoothing
# =====================================================================

@dataclass(frozen=True)
class SmoothingConfig:
    """Recency-weighted angle filter."""

    capacity: int = 3


# =====================================================================
# Dynamic stability (hip vs lumbar decomposition)
# =====================================================================

@dataclass(frozen=True)
class StabilityConfig:
    """Rolling-window phase detection and stability scoring."""

    # ~5 s at 30 fps
    window_size: int = 150
    # Below this many samples a first/last delta estimate is used.
    min_samples: int = 10
    # Degrees per frame. A phase opens above this and closes below half of it.
    # Hip flexion at a normal pace moves 2-3°/frame at 30 fps.
    movement_threshold_deg: float = 2.0
    # ~0.5 s at 30 fps; shorter bursts are treated as jitter.
    min_phase_frames: int = 15
    # Lumbar motion allowed to accompany hip motion (fraction of hip range).
    coupling_ratio: float = 0.3
    # Whole-window hip delta required for a preliminary ratio estimate.
    min_hip_motion_deg: float = 1.0
    # Score reported while there is no usable motion yet.
    neutral_score: float = 50.0

    # Grade bands on the 0-100 stability score
    grade_excellent: float = 80.0
    grade_good: float = 60.0
    grade_fair: float = 40.0


# =====================================================================
# Metric classification (normal / caution / abnormal)
# =====================================================================

@dataclass(frozen=True)
class ClassificationConfig:
    """Bands used to classify per-frame metrics for display."""

    # Landmark visibility gate
    min_visibility: float = 0.3

    # Stability score (points)
    stability_normal_min: float = 80.0
    stability_caution_min: float = 60.0

    # Excessive lumbar movement (degrees)
    excessive_normal_max: float = 5.0
    excessive_caution_max: float = 10.0

    # Lumbar flexion / extension magnitude (degrees)
    lumbar_angle_caution: float = 15.0
    lumbar_angle_abnormal: float = 30.0

    # Standing hip flexion: thigh vs vertical (degrees)
    hip_flexion_caution: float = 90.0
    hip_flexion_abnormal: float = 120.0

    # Rock-back: ankle-knee-hip angle (degrees)
    hip_knee_normal_min: float = 110.0
    hip_knee_normal_max: float = 140.0
    hip_knee_abnormal_below: float = 90.0

    # Seated knee extension: trunk vs vertical (degrees)
    alignment_caution: float = 15.0
    alignment_abnormal: float = 30.0

    # Overall score (points)
    overall_normal_min: float = 80.0
    overall_caution_min: float = 60.0


# =====================================================================
# Time-series recording
# =====================================================================

@dataclass(frozen=True)
class RecorderConfig:
    """Excessive-movement time series kept during a recording."""

    max_points: int = 300
    caution_threshold_deg: float = 8.0
    abnormal_threshold_deg: float = 15.0


# =====================================================================
# Master Configuration
# =====================================================================

@dataclass(frozen=True)
class AnalysisConfig:
    """Top-level configuration aggregating all sub-configs."""

    lumbar: LumbarAngleConfig = field(default_factory=LumbarAngleConfig)
    smoothing: SmoothingConfig = field(default_factory=SmoothingConfig)
    stability: StabilityConfig = field(default_factory=StabilityConfig)
    classification: ClassificationConfig = field(default_factory=ClassificationConfig)
    recorder: RecorderConfig = field(default_factory=RecorderConfig)


# Default configuration instance
DEFAULT_CONFIG = AnalysisConfig()
