import sys
from pathlib import Path

import numpy as np
import pytest


# Ensure the repo root is importable when tests are run without installing the package.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


def make_pose(
    lean_deg: float = 0.0,
    thigh_deg: float = 0.0,
    knee_bend_deg: float = 0.0,
    visibility: float = 0.99,
) -> np.ndarray:
    """Synthetic (33, 4) BlazePose frame seen from the side.

    Coordinates follow MediaPipe conventions: y grows downward, z grows away
    from the camera. *lean_deg* tilts the trunk forward (toward the camera),
    *thigh_deg* raises the thigh forward, *knee_bend_deg* swings the shank
    back from the thigh line.
    """
    pose = np.zeros((33, 4), dtype=np.float64)
    pose[:, 3] = visibility

    hip = np.array([0.5, 0.6, 0.0])
    trunk_len, thigh_len, shank_len = 0.5, 0.4, 0.4

    lean = np.radians(lean_deg)
    shoulder = hip + trunk_len * np.array([0.0, -np.cos(lean), -np.sin(lean)])

    thigh = np.radians(thigh_deg)
    knee = hip + thigh_len * np.array([0.0, np.cos(thigh), -np.sin(thigh)])

    shank = np.radians(thigh_deg - knee_bend_deg)
    ankle = knee + shank_len * np.array([0.0, np.cos(shank), -np.sin(shank)])

    offset = np.array([0.1, 0.0, 0.0])
    for (left, right), center in (
        ((11, 12), shoulder),
        ((23, 24), hip),
        ((25, 26), knee),
        ((27, 28), ankle),
    ):
        pose[left, :3] = center - offset
        pose[right, :3] = center + offset

    return pose


@pytest.fixture
def pose_factory():
    return make_pose
