"""Analysis module for lumbar angle and stability calculations."""

from .geometry import (
    vector,
    magnitude,
    angle_between_vectors,
    angle_2d,
    rad_to_deg,
    midpoint,
)
from .lumbar import lumbar_flexion_extension, hip_angle, lumbar_direction
from .stability import (
    StabilityAnalyzer,
    StabilityResult,
    StabilityGrade,
    MovementPhase,
    detect_movement_phases,
)
from .timeseries import ExcessiveMovementRecorder, SeriesStatistics
