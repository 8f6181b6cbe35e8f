"""Lumbar motor-control analysis from 3D pose landmarks."""

__version__ = "0.1.0"

from .core.session import AssessmentSession, FrameResult
