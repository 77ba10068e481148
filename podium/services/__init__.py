"""Services package initialization."""

from .base import (
    QuestionService,
    ReviewService,
    SummaryService,
    InterviewBackend
)

from .parsing import (
    ReviewFeedback,
    SummaryFeedback,
    clamp_score,
    round_half_up,
    extract_json,
    normalize_questions,
    parse_review_body,
    parse_summary_body
)

from .http_backend import HttpInterviewBackend
from .repository import ReviewRepository

__all__ = [
    "QuestionService",
    "ReviewService",
    "SummaryService",
    "InterviewBackend",
    "ReviewFeedback",
    "SummaryFeedback",
    "clamp_score",
    "round_half_up",
    "extract_json",
    "normalize_questions",
    "parse_review_body",
    "parse_summary_body",
    "HttpInterviewBackend",
    "ReviewRepository",
    "create_backend"
]


def create_backend(name: str = None) -> InterviewBackend:
    """Build the backend selected by ``PODIUM_BACKEND``."""
    from ..config import Config

    name = (name or Config.BACKEND).lower()
    if name == "gemini":
        from .gemini_backend import GeminiInterviewBackend
        return GeminiInterviewBackend()
    if name == "http":
        return HttpInterviewBackend()
    raise ValueError(f"Unknown backend: {name}")
