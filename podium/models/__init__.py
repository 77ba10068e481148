"""Models package initialization."""

from .session import (
    PreviewHandle,
    ResponseArtifact,
    SetupMetadata,
    SubmissionResult,
    InterviewReport,
    SessionSnapshot,
    clamp_question_count
)

__all__ = [
    "PreviewHandle",
    "ResponseArtifact",
    "SetupMetadata",
    "SubmissionResult",
    "InterviewReport",
    "SessionSnapshot",
    "clamp_question_count"
]
