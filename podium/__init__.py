"""Podium mock interview session package initialization."""

from .config import Config, setup_logging
from .capture import MediaCapture, MediaCaptureProvider
from .session import InterviewSessionController
from .submission import SubmissionCoordinator

__all__ = [
    "Config",
    "setup_logging",
    "MediaCapture",
    "MediaCaptureProvider",
    "InterviewSessionController",
    "SubmissionCoordinator"
]
