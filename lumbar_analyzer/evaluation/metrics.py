"""Metric classification for the lumbar motor-control tests.

Turns the engine's numeric outputs (smoothed lumbar angle, stability result,
joint midpoints) into display metrics, each with a normal / caution / abnormal
status and a short description. Metrics per test:

    standingHipFlex – stability score, excessive movement, lumbar angle, hip flexion
    rockBack        – stability score, excessive movement, lumbar angle, hip-knee angle
    seatedKneeExt   – stability score, excessive movement, lumbar alignment

``overall_score_metric`` normalises every metric to 0-100 and averages them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np

from ..analysis.geometry import angle_2d, angle_between_vectors, rad_to_deg, vector
from ..analysis.stability import StabilityResult
from ..config.analysis_config import DEFAULT_CONFIG, ClassificationConfig
from ..config.landmarks import (
    TEST_ROCK_BACK,
    TEST_SEATED_KNEE_EXT,
    TEST_STANDING_HIP_FLEX,
    validate_test_type,
)
from ..core.landmarks import Landmark
from .status import MetricStatus

# Metric keys
STABILITY_SCORE = "lumbar_stability_score"
EXCESSIVE_MOVEMENT = "lumbar_excessive_movement"
LUMBAR_ANGLE = "lumbar_flexion_extension"
HIP_FLEXION = "hip_flexion_angle"
HIP_KNEE_ANGLE = "hip_knee_angle"
LUMBAR_ALIGNMENT = "lumbar_alignment"
OVERALL_SCORE = "overall_score"

# Direction of improvement between two measurements
HIGHER_IS_BETTER = {STABILITY_SCORE, HIP_FLEXION, OVERALL_SCORE}
LOWER_IS_BETTER = {EXCESSIVE_MOVEMENT, LUMBAR_ALIGNMENT}

WAITING_DESCRIPTION = "Acquiring pose data..."

_UPWARD = np.array([0.0, -1.0, 0.0])
_DOWNWARD = np.array([0.0, 1.0, 0.0])


# ── Result container ─────────────────────────────────────────────────

@dataclass
class Metric:
    """A single classified display metric."""
    key: str
    label: str
    value: float
    unit: str
    status: MetricStatus
    description: str
    normal_range: str


@dataclass
class MetricChange:
    """Change of a metric relative to a previous measurement."""
    key: str
    label: str
    value: float
    previous_value: Optional[float]
    change: Optional[float]
    is_improvement: Optional[bool]   # None when there is nothing to compare or no direction


def _round1(value: float) -> float:
    return round(float(value), 1)


# ── Lumbar metrics (all tests) ───────────────────────────────────────

def stability_score_metric(
    result: StabilityResult, cfg: ClassificationConfig = DEFAULT_CONFIG.classification
) -> Metric:
    score = result.lumbar_stability_score
    if score >= cfg.stability_normal_min:
        status, desc = MetricStatus.NORMAL, "Excellent lumbar control"
    elif score >= cfg.stability_caution_min:
        status, desc = MetricStatus.CAUTION, "Mild lumbar instability"
    else:
        status, desc = MetricStatus.ABNORMAL, "Poor lumbar control"
    return Metric(
        STABILITY_SCORE, "Lumbar stability score", _round1(score), "pts", status, desc,
        "80-100 pts (excellent control)",
    )


def excessive_movement_metric(
    result: StabilityResult, cfg: ClassificationConfig = DEFAULT_CONFIG.classification
) -> Metric:
    value = result.lumbar_excessive_movement
    if value < cfg.excessive_normal_max:
        status, desc = MetricStatus.NORMAL, "Minimal excessive movement"
    elif value < cfg.excessive_caution_max:
        status, desc = MetricStatus.CAUTION, "Mild excessive movement"
    else:
        status, desc = MetricStatus.ABNORMAL, "Marked excessive movement"
    return Metric(
        EXCESSIVE_MOVEMENT, "Lumbar excessive movement", _round1(value), "°", status, desc,
        "0-5° (good control)",
    )


def lumbar_angle_metric(
    angle: float, cfg: ClassificationConfig = DEFAULT_CONFIG.classification
) -> Metric:
    magnitude = abs(angle)
    if magnitude > cfg.lumbar_angle_abnormal:
        status = MetricStatus.ABNORMAL
        desc = "Excessive lumbar flexion" if angle > 0 else "Excessive lumbar extension"
    elif magnitude > cfg.lumbar_angle_caution:
        status = MetricStatus.CAUTION
        desc = "Mild lumbar flexion" if angle > 0 else "Mild lumbar extension"
    else:
        status, desc = MetricStatus.NORMAL, "Good lumbar alignment"
    return Metric(
        LUMBAR_ANGLE, "Lumbar flexion/extension angle", _round1(angle), "°", status, desc,
        "-15° to +15° (neutral)",
    )


# ── Test-specific metrics ────────────────────────────────────────────

def hip_flexion_metric(
    hip_mid: Landmark,
    knee_mid: Landmark,
    cfg: ClassificationConfig = DEFAULT_CONFIG.classification,
) -> Metric:
    """Standing hip flexion: angle between the thigh and the downward vertical."""
    angle = rad_to_deg(angle_between_vectors(vector(hip_mid, knee_mid), _DOWNWARD))
    if angle > cfg.hip_flexion_abnormal:
        status = MetricStatus.ABNORMAL
    elif angle > cfg.hip_flexion_caution:
        status = MetricStatus.CAUTION
    else:
        status = MetricStatus.NORMAL
    return Metric(
        HIP_FLEXION, "Hip flexion angle", _round1(angle), "°", status,
        "Hip joint flexion angle", "0-90°",
    )


def hip_knee_angle_metric(
    hip_mid: Landmark,
    knee_mid: Landmark,
    ankle_mid: Landmark,
    cfg: ClassificationConfig = DEFAULT_CONFIG.classification,
) -> Metric:
    """Rock-back: ankle-knee-hip angle in the image plane."""
    angle = rad_to_deg(angle_2d(ankle_mid, knee_mid, hip_mid))
    if angle < cfg.hip_knee_abnormal_below:
        status = MetricStatus.ABNORMAL
    elif angle < cfg.hip_knee_normal_min:
        status = MetricStatus.CAUTION
    else:
        status = MetricStatus.NORMAL
    return Metric(
        HIP_KNEE_ANGLE, "Hip-knee angle", _round1(angle), "°", status,
        "Lower-limb angle during the backward weight shift", "110-140°",
    )


def lumbar_alignment_metric(
    shoulder_mid: Landmark,
    hip_mid: Landmark,
    cfg: ClassificationConfig = DEFAULT_CONFIG.classification,
) -> Metric:
    """Seated knee extension: trunk deviation from the upward vertical."""
    angle = rad_to_deg(angle_between_vectors(vector(hip_mid, shoulder_mid), _UPWARD))
    if angle > cfg.alignment_abnormal:
        status = MetricStatus.ABNORMAL
    elif angle > cfg.alignment_caution:
        status = MetricStatus.CAUTION
    else:
        status = MetricStatus.NORMAL
    return Metric(
        LUMBAR_ALIGNMENT, "Lumbar alignment", _round1(angle), "°", status,
        "Lumbar lordosis kept during knee extension", "0-15°",
    )


# ── Overall score ────────────────────────────────────────────────────

def normalized_score(metric: Metric) -> Optional[float]:
    """Map a metric value onto 0-100, or None for metrics that are not scored."""
    v = metric.value
    if metric.key == STABILITY_SCORE:
        return v
    if metric.key == EXCESSIVE_MOVEMENT:
        return max(0.0, 100.0 - v * 20.0)
    if metric.key == LUMBAR_ANGLE:
        return max(0.0, 100.0 - max(0.0, abs(v) - 15.0) * 5.0)
    if metric.key == HIP_FLEXION:
        if v <= 90.0:
            return 100.0
        if v <= 120.0:
            return 100.0 - (v - 90.0) * 2.0
        return max(0.0, 40.0 - (v - 120.0) * 2.0)
    if metric.key == HIP_KNEE_ANGLE:
        if 110.0 <= v <= 140.0:
            return 100.0
        if v >= 90.0:
            return max(0.0, 100.0 - abs(v - 125.0) * 2.0)
        return max(0.0, 40.0 - (90.0 - v) * 2.0)
    if metric.key == LUMBAR_ALIGNMENT:
        if v <= 15.0:
            return 100.0 - v * 2.0
        if v <= 30.0:
            return max(0.0, 70.0 - (v - 15.0) * 3.0)
        return max(0.0, 25.0 - (v - 30.0))
    return None


def overall_score_metric(
    metrics: Sequence[Metric], cfg: ClassificationConfig = DEFAULT_CONFIG.classification
) -> Metric:
    scores = [s for s in (normalized_score(m) for m in metrics) if s is not None]
    if not scores:
        return Metric(
            OVERALL_SCORE, "Overall score", 0.0, "pts", MetricStatus.CAUTION,
            "Not enough data to evaluate", "80-100 pts (excellent)",
        )

    average = float(np.mean(scores))
    if average >= cfg.overall_normal_min:
        status, desc = MetricStatus.NORMAL, "Excellent motor control"
    elif average >= cfg.overall_caution_min:
        status, desc = MetricStatus.CAUTION, "Good motor control with room for improvement"
    else:
        status, desc = MetricStatus.ABNORMAL, "Motor control needs work"
    return Metric(
        OVERALL_SCORE, "Overall score", _round1(average), "pts", status, desc,
        "80-100 pts (excellent)",
    )


# ── Placeholders and progress ────────────────────────────────────────

def waiting_metrics(test_type: str) -> List[Metric]:
    """Placeholder metrics shown before any pose data has arrived."""
    validate_test_type(test_type)

    def waiting(key: str, label: str, unit: str, normal_range: str) -> Metric:
        return Metric(key, label, 0.0, unit, MetricStatus.CAUTION, WAITING_DESCRIPTION, normal_range)

    metrics = [
        waiting(STABILITY_SCORE, "Lumbar stability score", "pts", "80-100 pts (excellent control)"),
        waiting(EXCESSIVE_MOVEMENT, "Lumbar excessive movement", "°", "0-5° (good control)"),
    ]
    if test_type != TEST_SEATED_KNEE_EXT:
        metrics.append(waiting(LUMBAR_ANGLE, "Lumbar flexion/extension angle", "°", "-15° to +15° (neutral)"))

    if test_type == TEST_STANDING_HIP_FLEX:
        metrics.append(waiting(HIP_FLEXION, "Hip flexion angle", "°", "0-90°"))
    elif test_type == TEST_ROCK_BACK:
        metrics.append(waiting(HIP_KNEE_ANGLE, "Hip-knee angle", "°", "110-140°"))
    else:
        metrics.append(waiting(LUMBAR_ALIGNMENT, "Lumbar alignment", "°", "0-15°"))
    return metrics


def _is_improvement(key: str, current: float, previous: float) -> Optional[bool]:
    if key in HIGHER_IS_BETTER:
        return current > previous
    if key in LOWER_IS_BETTER:
        return current < previous
    if key == LUMBAR_ANGLE:
        return abs(current) < abs(previous)
    return None


def compare_metrics(current: Sequence[Metric], previous: Sequence[Metric]) -> List[MetricChange]:
    """Compare a measurement with the previous one, metric by metric."""
    previous_by_key = {m.key: m for m in previous}
    changes = []
    for metric in current:
        prev = previous_by_key.get(metric.key)
        if prev is None:
            changes.append(MetricChange(metric.key, metric.label, metric.value, None, None, None))
            continue
        changes.append(MetricChange(
            metric.key,
            metric.label,
            metric.value,
            prev.value,
            _round1(metric.value - prev.value),
            _is_improvement(metric.key, metric.value, prev.value),
        ))
    return changes
