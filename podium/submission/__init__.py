"""Submission package initialization."""

from .coordinator import (
    SubmissionCoordinator,
    GENERIC_SUMMARY,
    GENERIC_TIPS,
    NO_RESPONSE_REASON,
    UNAVAILABLE_SUMMARY
)

__all__ = [
    "SubmissionCoordinator",
    "GENERIC_SUMMARY",
    "GENERIC_TIPS",
    "NO_RESPONSE_REASON",
    "UNAVAILABLE_SUMMARY"
]
