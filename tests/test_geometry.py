"""Unit tests for vector/angle primitives and lumbar/hip angle estimation."""

import math

import numpy as np
import pytest

from lumbar_analyzer.analysis.geometry import (
    angle_2d,
    angle_between_vectors,
    magnitude,
    midpoint,
    rad_to_deg,
    vector,
)
from lumbar_analyzer.analysis.lumbar import (
    EXTENSION,
    FLEXION,
    NEUTRAL,
    hip_angle,
    lumbar_direction,
    lumbar_flexion_extension,
)
from lumbar_analyzer.config.analysis_config import LumbarAngleConfig
from lumbar_analyzer.core.landmarks import Landmark


def _trunk(lean_deg: float, length: float = 0.5):
    """(shoulder_mid, hip_mid) with the trunk leaning *lean_deg* forward."""
    hip = Landmark(0.5, 0.6, 0.0)
    lean = math.radians(lean_deg)
    shoulder = Landmark(0.5, 0.6 - length * math.cos(lean), -length * math.sin(lean))
    return shoulder, hip


def _knee(hip: Landmark, thigh_deg: float, length: float = 0.4) -> Landmark:
    thigh = math.radians(thigh_deg)
    return Landmark(hip.x, hip.y + length * math.cos(thigh), hip.z - length * math.sin(thigh))


# =====================================================================
# Primitives
# =====================================================================

class TestPrimitives:
    def test_vector(self):
        v = vector(Landmark(1.0, 2.0, 3.0), Landmark(4.0, 6.0, 3.5))
        assert np.allclose(v, [3.0, 4.0, 0.5])

    def test_magnitude_symmetric(self):
        a = Landmark(0.1, 0.7, -0.2)
        b = Landmark(0.4, 0.2, 0.3)
        assert magnitude(vector(a, b)) == pytest.approx(magnitude(vector(b, a)))

    def test_magnitude_zero_vector(self):
        assert magnitude(np.zeros(3)) == 0.0

    def test_self_angle_is_zero(self):
        v = np.array([3.0, 4.0, 0.0])
        assert angle_between_vectors(v, v) == pytest.approx(0.0, abs=1e-2)

    def test_opposite_angle_is_pi(self):
        v = np.array([1.0, -2.0, 2.0])
        assert angle_between_vectors(v, -v) == pytest.approx(math.pi, abs=1e-2)

    def test_right_angle(self):
        assert angle_between_vectors(np.array([1.0, 0, 0]), np.array([0, 5.0, 0])) == pytest.approx(
            math.pi / 2, abs=1e-6
        )

    def test_zero_vector_does_not_raise(self):
        angle = angle_between_vectors(np.zeros(3), np.array([1.0, 0.0, 0.0]))
        assert math.isfinite(angle)
        assert 0.0 <= angle <= math.pi

    def test_angle_2d_ignores_depth(self):
        p1 = Landmark(1.0, 0.0, 5.0)
        vertex = Landmark(0.0, 0.0, -3.0)
        p2 = Landmark(0.0, 1.0, 9.0)
        assert rad_to_deg(angle_2d(p1, vertex, p2)) == pytest.approx(90.0, abs=1e-3)

    def test_angle_2d_straight_line(self):
        angle = angle_2d(Landmark(0.0, 0.0, 0.0), Landmark(0.0, 1.0, 0.0), Landmark(0.0, 2.0, 0.0))
        assert rad_to_deg(angle) == pytest.approx(180.0, abs=0.5)

    def test_rad_to_deg(self):
        assert rad_to_deg(math.pi) == pytest.approx(180.0)

    def test_midpoint(self):
        mid = midpoint(Landmark(0.0, 0.2, -0.4, 0.9), Landmark(1.0, 0.4, 0.0, 0.6))
        assert (mid.x, mid.y, mid.z) == pytest.approx((0.5, 0.3, -0.2))
        assert mid.visibility == 0.6

    def test_midpoint_unknown_visibility(self):
        mid = midpoint(Landmark(0.0, 0.0, 0.0, 0.9), Landmark(1.0, 1.0, 1.0))
        assert mid.visibility is None


# =====================================================================
# Lumbar flexion / extension
# =====================================================================

class TestLumbarAngle:
    def test_upright_is_zero(self):
        assert lumbar_flexion_extension(*_trunk(0.0)) == 0.0

    def test_forward_lean_is_positive_and_scaled(self):
        assert lumbar_flexion_extension(*_trunk(20.0)) == pytest.approx(16.0, abs=1e-6)

    def test_backward_lean_is_negative(self):
        assert lumbar_flexion_extension(*_trunk(-20.0)) == pytest.approx(-20.0, abs=1e-6)

    def test_mirror_asymmetry_follows_scale_factors(self):
        cfg = LumbarAngleConfig()
        forward = lumbar_flexion_extension(*_trunk(25.0))
        backward = lumbar_flexion_extension(*_trunk(-25.0))
        assert forward > 0 > backward
        assert forward / cfg.flexion_scale == pytest.approx(-backward / cfg.extension_scale)

    def test_deadband(self):
        assert lumbar_flexion_extension(*_trunk(2.0)) == 0.0
        assert lumbar_flexion_extension(*_trunk(-2.5)) == 0.0

    def test_clamped_to_envelope(self):
        assert lumbar_flexion_extension(*_trunk(85.0)) == 60.0
        assert lumbar_flexion_extension(*_trunk(-70.0)) == -40.0

    def test_coincident_points_do_not_produce_nan(self):
        p = Landmark(0.5, 0.5, 0.1)
        angle = lumbar_flexion_extension(p, p)
        assert angle == 0.0

    def test_lateral_offset_does_not_change_angle(self):
        shoulder, hip = _trunk(30.0)
        shifted = Landmark(shoulder.x + 0.2, shoulder.y, shoulder.z)
        assert lumbar_flexion_extension(shifted, hip) == pytest.approx(
            lumbar_flexion_extension(shoulder, hip)
        )

    def test_depth_sign_is_configurable(self):
        flipped = LumbarAngleConfig(depth_sign=1.0)
        assert lumbar_flexion_extension(*_trunk(20.0), cfg=flipped) == pytest.approx(-20.0, abs=1e-6)

    def test_deterministic(self):
        shoulder, hip = _trunk(33.0)
        assert lumbar_flexion_extension(shoulder, hip) == lumbar_flexion_extension(shoulder, hip)

    def test_direction_labels(self):
        assert lumbar_direction(12.0) == FLEXION
        assert lumbar_direction(-8.0) == EXTENSION
        assert lumbar_direction(4.0) == NEUTRAL


# =====================================================================
# Hip angle
# =====================================================================

class TestHipAngle:
    def test_standing_is_zero(self):
        shoulder, hip = _trunk(0.0)
        assert hip_angle(shoulder, hip, _knee(hip, 0.0)) == pytest.approx(0.0, abs=1e-6)

    def test_thigh_raised_to_horizontal(self):
        shoulder, hip = _trunk(0.0)
        assert hip_angle(shoulder, hip, _knee(hip, 90.0)) == pytest.approx(90.0, abs=1e-6)

    def test_trunk_flexion_adds_to_hip_flexion(self):
        shoulder, hip = _trunk(30.0)
        assert hip_angle(shoulder, hip, _knee(hip, 20.0)) == pytest.approx(50.0, abs=1e-6)

    def test_hip_extension_is_negative(self):
        shoulder, hip = _trunk(0.0)
        assert hip_angle(shoulder, hip, _knee(hip, -15.0)) == pytest.approx(-15.0, abs=1e-6)

    def test_degenerate_femur(self):
        shoulder, hip = _trunk(10.0)
        assert hip_angle(shoulder, hip, hip) == pytest.approx(10.0, abs=1e-6)
