"""Configuration module for the lumbar motor-control analyzer."""

from .analysis_config import (
    AnalysisConfig,
    DEFAULT_CONFIG,
)
from .landmarks import (
    POSE_LANDMARKS,
    LANDMARK_NAMES,
    NUM_LANDMARKS,
    TEST_TYPES,
)
