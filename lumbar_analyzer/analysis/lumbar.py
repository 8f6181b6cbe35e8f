"""Lumbar flexion/extension and hip angle estimation.

Both angles are measured in the sagittal (y/z) plane of MediaPipe world
landmarks, where y grows downward and z grows away from the camera. Using
``atan2`` on the projected segment gives sign and magnitude in one step and
avoids the ±90° ambiguity of ``acos`` based formulas.

The estimate is thoracolumbar: trunk motion is tracked from shoulder and hip
midpoints only, so it is not pure lumbar motion, and an anteriorly tilted
pelvis tends to read as lumbar extension.
"""

from __future__ import annotations

import math

from ..config.analysis_config import DEFAULT_CONFIG, LumbarAngleConfig
from ..core.landmarks import Landmark
from .geometry import EPS, rad_to_deg

FLEXION = "flexion"
EXTENSION = "extension"
NEUTRAL = "neutral"


def _wrap_deg(angle: float) -> float:
    """Wrap an angle in degrees into (-180, 180]."""
    wrapped = (angle + 180.0) % 360.0 - 180.0
    return 180.0 if wrapped == -180.0 else wrapped


def trunk_inclination(
    shoulder_mid: Landmark,
    hip_mid: Landmark,
    cfg: LumbarAngleConfig = DEFAULT_CONFIG.lumbar,
) -> float:
    """Signed forward inclination of hip→shoulder from the upward vertical (degrees).

    Returns 0 when the segment has no extent in the y/z plane.
    """
    dy = shoulder_mid.y - hip_mid.y
    dz = shoulder_mid.z - hip_mid.z
    if math.hypot(dy, dz) < EPS:
        return 0.0
    return rad_to_deg(math.atan2(cfg.depth_sign * dz, -dy))


def femur_inclination(
    hip_mid: Landmark,
    knee_mid: Landmark,
    cfg: LumbarAngleConfig = DEFAULT_CONFIG.lumbar,
) -> float:
    """Signed forward inclination of hip→knee from the downward vertical (degrees)."""
    dy = knee_mid.y - hip_mid.y
    dz = knee_mid.z - hip_mid.z
    if math.hypot(dy, dz) < EPS:
        return 0.0
    return rad_to_deg(math.atan2(cfg.depth_sign * dz, dy))


def lumbar_flexion_extension(
    shoulder_mid: Landmark,
    hip_mid: Landmark,
    cfg: LumbarAngleConfig = DEFAULT_CONFIG.lumbar,
) -> float:
    """Signed lumbar angle in degrees: positive = flexion, negative = extension.

    Args:
        shoulder_mid: Midpoint of the left/right shoulders
        hip_mid: Midpoint of the left/right hips
        cfg: Sign convention, deadband, scaling and clamping constants

    Returns:
        Angle clamped to ``[cfg.min_angle_deg, cfg.max_angle_deg]``
    """
    angle = trunk_inclination(shoulder_mid, hip_mid, cfg)

    # Detector jitter
    if abs(angle) < cfg.deadband_deg:
        return 0.0

    if angle > 0:
        angle *= cfg.flexion_scale
    else:
        angle *= cfg.extension_scale

    return max(cfg.min_angle_deg, min(cfg.max_angle_deg, angle))


def hip_angle(
    shoulder_mid: Landmark,
    hip_mid: Landmark,
    knee_mid: Landmark,
    cfg: LumbarAngleConfig = DEFAULT_CONFIG.lumbar,
) -> float:
    """Signed hip flexion angle between trunk and femur (degrees).

    0° when standing upright with the thigh vertical; +90° when the thigh is
    raised to horizontal or the trunk is bent forward to horizontal. Used as
    the driving motion signal for the stability analysis.

    Wrapped to (-180, 180]; combined flexion past 180° comes back negative.
    ``StabilityAnalyzer.add_data_point`` unwraps consecutive samples.
    """
    trunk = trunk_inclination(shoulder_mid, hip_mid, cfg)
    femur = femur_inclination(hip_mid, knee_mid, cfg)
    return _wrap_deg(trunk + femur)


def lumbar_direction(angle: float, cfg: LumbarAngleConfig = DEFAULT_CONFIG.lumbar) -> str:
    """Label an angle as flexion, extension or neutral."""
    if angle > cfg.direction_threshold_deg:
        return FLEXION
    if angle < -cfg.direction_threshold_deg:
        return EXTENSION
    return NEUTRAL
