"""Interfaces of the AI services the session core depends on."""

import abc
from typing import List

from ..models import ResponseArtifact, SetupMetadata
from .parsing import ReviewFeedback, SummaryFeedback


class QuestionService(abc.ABC):

    @abc.abstractmethod
    async def generate_questions(self, setup: SetupMetadata) -> List[str]:
        """Return ``setup.question_count`` questions (best effort)."""


class ReviewService(abc.ABC):

    @abc.abstractmethod
    async def review_answer(
        self, question: str, setup: SetupMetadata, artifact: ResponseArtifact
    ) -> ReviewFeedback:
        """Score one video answer. Raises ReviewServiceError or ReviewParseError."""


class SummaryService(abc.ABC):

    @abc.abstractmethod
    async def summarize(self, feedbacks: List[str]) -> SummaryFeedback:
        """Condense per-question feedback into a summary, tips and a score."""


class InterviewBackend(QuestionService, ReviewService, SummaryService):
    """A backend that provides all three services."""
