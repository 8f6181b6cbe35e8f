"""Landmark record and conversion at the pose-detector boundary.

The pose detector (MediaPipe BlazePose) hands over 33 landmarks per person
with normalized ``x, y, z`` and an optional ``visibility``. Everything past
this module works on :class:`Landmark` only, so malformed input is rejected
here with ``ValueError`` and the numeric core never has to guard against it.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Sequence

import numpy as np

from ..config.landmarks import NUM_LANDMARKS


@dataclass(frozen=True)
class Landmark:
    """A single body landmark in normalized body-space coordinates."""

    x: float
    y: float
    z: float
    visibility: Optional[float] = None

    def as_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=np.float64)

    @classmethod
    def from_any(cls, obj: Any) -> "Landmark":
        """Build a landmark from a mapping, an attribute object or a sequence.

        Accepts ``{"x", "y", "z", "visibility"?}`` dicts, MediaPipe
        ``NormalizedLandmark`` objects, and ``(x, y, z[, visibility])``
        sequences.
        """
        if isinstance(obj, Landmark):
            return obj

        if isinstance(obj, Mapping):
            try:
                x, y, z = obj["x"], obj["y"], obj["z"]
            except KeyError as e:
                raise ValueError(f"Landmark mapping is missing coordinate {e}") from None
            visibility = obj.get("visibility")
        elif all(hasattr(obj, attr) for attr in ("x", "y", "z")):
            x, y, z = obj.x, obj.y, obj.z
            visibility = getattr(obj, "visibility", None)
        elif isinstance(obj, (Sequence, np.ndarray)) and not isinstance(obj, (str, bytes)):
            if len(obj) not in (3, 4):
                raise ValueError(f"Landmark sequence must have 3 or 4 values, got {len(obj)}")
            x, y, z = obj[0], obj[1], obj[2]
            visibility = obj[3] if len(obj) == 4 else None
        else:
            raise ValueError(f"Cannot interpret {type(obj).__name__} as a landmark")

        coords = tuple(_to_finite(v, name) for v, name in ((x, "x"), (y, "y"), (z, "z")))
        vis = None if visibility is None else _to_finite(visibility, "visibility")
        return cls(coords[0], coords[1], coords[2], vis)


def _to_finite(value: Any, name: str) -> float:
    try:
        f = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"Landmark {name} is not a number: {value!r}") from None
    if not math.isfinite(f):
        raise ValueError(f"Landmark {name} is not finite: {f}")
    return f


def is_empty_frame(raw: Any) -> bool:
    """True if *raw* is a landmark container without any points.

    Raises ValueError for values that are not containers at all.
    """
    try:
        return len(raw) == 0
    except TypeError:
        raise ValueError(f"Landmarks must be a sequence, got {type(raw).__name__}") from None


def parse_landmarks(raw: Sequence[Any]) -> List[Landmark]:
    """Convert one detected person's landmarks into :class:`Landmark` records."""
    if raw is None:
        raise ValueError("No landmarks given")
    try:
        points = list(raw)
    except TypeError:
        raise ValueError(f"Landmarks must be a sequence, got {type(raw).__name__}") from None
    if len(points) < NUM_LANDMARKS:
        raise ValueError(f"Expected {NUM_LANDMARKS} landmarks, got {len(points)}")
    return [Landmark.from_any(p) for p in points]


def landmarks_from_array(arr: np.ndarray) -> List[Landmark]:
    """Convert an ``(N, 3)`` or ``(N, 4)`` array into landmarks."""
    arr = np.asarray(arr, dtype=np.float64)
    if arr.ndim != 2 or arr.shape[1] not in (3, 4):
        raise ValueError(f"Expected an (N, 3) or (N, 4) array, got shape {arr.shape}")
    return parse_landmarks([row for row in arr])


def is_visible(landmarks: Sequence[Landmark], index: int, threshold: float = 0.3) -> bool:
    """True if landmark *index* exists and its visibility exceeds *threshold*.

    A landmark without a visibility score counts as visible.
    """
    if index < 0 or index >= len(landmarks):
        return False
    vis = landmarks[index].visibility
    return vis is None or vis > threshold


def pairs_visible(landmarks: Sequence[Landmark], pairs, threshold: float = 0.3) -> bool:
    """True if every landmark of every (left, right) pair is visible."""
    return all(
        is_visible(landmarks, idx, threshold)
        for pair in pairs
        for idx in pair
    )
