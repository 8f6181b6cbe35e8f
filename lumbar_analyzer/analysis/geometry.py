"""Vector and angle primitives on 3D landmarks.

All functions are pure and total: degenerate (near-zero) vectors never raise
because of the ``EPS`` term in the cosine denominator.
"""

from __future__ import annotations

import math
from typing import Optional

import numpy as np

from ..core.landmarks import Landmark

EPS = 1e-6


def rad_to_deg(rad: float) -> float:
    return rad * 180.0 / math.pi


def vector(a: Landmark, b: Landmark) -> np.ndarray:
    """Vector from *a* to *b* (``b - a``)."""
    return b.as_array() - a.as_array()


def magnitude(v: np.ndarray) -> float:
    """Euclidean norm."""
    return float(np.linalg.norm(v))


def angle_between_vectors(v1: np.ndarray, v2: np.ndarray) -> float:
    """Unsigned angle between two vectors in radians, in ``[0, π]``."""
    v1 = np.asarray(v1, dtype=np.float64)
    v2 = np.asarray(v2, dtype=np.float64)
    cos_angle = float(np.dot(v1, v2)) / (magnitude(v1) * magnitude(v2) + EPS)
    cos_angle = float(np.clip(cos_angle, -1.0, 1.0))
    return math.acos(cos_angle)


def angle_2d(p1: Landmark, vertex: Landmark, p2: Landmark) -> float:
    """Angle at *vertex* formed by p1-vertex-p2, in the image (x, y) plane. Radians."""
    v1 = np.array([p1.x - vertex.x, p1.y - vertex.y], dtype=np.float64)
    v2 = np.array([p2.x - vertex.x, p2.y - vertex.y], dtype=np.float64)
    return angle_between_vectors(v1, v2)


def _min_visibility(a: Optional[float], b: Optional[float]) -> Optional[float]:
    if a is None or b is None:
        return None
    return min(a, b)


def midpoint(a: Landmark, b: Landmark) -> Landmark:
    """Midpoint of two landmarks (e.g. left/right shoulder)."""
    return Landmark(
        (a.x + b.x) / 2.0,
        (a.y + b.y) / 2.0,
        (a.z + b.z) / 2.0,
        _min_visibility(a.visibility, b.visibility),
    )
