"""Temporal smoothing for per-frame angle samples."""

import logging
from collections import deque
from typing import Dict, Tuple

import numpy as np

logger = logging.getLogger(__name__)


class AngleFilter:
    """
    Recency-weighted average over the last few raw angle samples.

    Damps single-frame detector noise while staying responsive to real
    movement: the most recent sample always carries the largest weight.
    Not thread-safe; one filter belongs to one test session.
    """

    # Weights keyed by buffer length, oldest sample first
    WEIGHTS: Dict[int, Tuple[float, ...]] = {
        1: (1.0,),
        2: (0.3, 0.7),
        3: (0.2, 0.3, 0.5),
    }

    def __init__(self, capacity: int = 3):
        """
        Initialize angle filter.

        Args:
            capacity: Number of recent samples to keep (>= 1).
        """
        if capacity < 1:
            raise ValueError(f"AngleFilter capacity must be >= 1, got {capacity}")
        self.capacity = int(capacity)
        self.history: deque = deque(maxlen=self.capacity)

    def _weights(self, n: int) -> np.ndarray:
        if n in self.WEIGHTS:
            return np.asarray(self.WEIGHTS[n], dtype=np.float64)
        # Longer buffers: linear ramp, most recent highest
        weights = np.linspace(1.0, float(n), n)
        return weights / weights.sum()

    def filter(self, angle: float) -> float:
        """
        Add a raw sample and return the smoothed angle.

        Args:
            angle: Raw angle in degrees

        Returns:
            Weighted average of the buffered samples
        """
        self.history.append(float(angle))

        if len(self.history) == 1:
            return self.history[0]

        weights = self._weights(len(self.history))
        return float(np.dot(weights, np.asarray(self.history, dtype=np.float64)))

    def reset(self):
        """Reset filter state."""
        if self.history:
            logger.debug("Angle filter reset (%d buffered samples dropped)", len(self.history))
        self.history.clear()

    def __len__(self) -> int:
        return len(self.history)
