"""Client for the Podium HTTP API (question generation, review, summary)."""

import asyncio
import logging
from typing import Any, Dict, List, Optional

import requests

from ..config import Config
from ..errors import QuestionGenerationError, ReviewParseError, ReviewServiceError
from ..models import ResponseArtifact, SetupMetadata
from .base import InterviewBackend
from .parsing import (
    ReviewFeedback,
    SummaryFeedback,
    normalize_questions,
    parse_review_body,
    parse_summary_body,
)

logger = logging.getLogger(__name__)


class HttpInterviewBackend(InterviewBackend):
    """Talks to the backend routes that proxy to the AI provider.

    ``requests`` is blocking, so every call runs in a worker thread to keep
    the event loop free while uploads are in flight.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        position_field: Optional[str] = None,
    ):
        self.base_url = (base_url or Config.API_BASE_URL).rstrip('/')
        self.timeout = timeout or Config.REQUEST_TIMEOUT
        self.position_field = position_field or Config.position_field()

    def _setup_fields(self, setup: SetupMetadata) -> Dict[str, Any]:
        return {
            "company": setup.company,
            self.position_field: setup.position,
            "experience": setup.experience,
        }

    def _post(self, path: str, **kwargs) -> requests.Response:
        url = f"{self.base_url}/{path.lstrip('/')}"
        return requests.post(url, timeout=self.timeout, **kwargs)

    async def generate_questions(self, setup: SetupMetadata) -> List[str]:
        payload = {**self._setup_fields(setup), "count": setup.question_count}
        try:
            response = await asyncio.to_thread(self._post, "generate-questions", json=payload)
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Error generating questions: {e}")
            raise QuestionGenerationError(f"Error starting mock interview: {e}") from e

        questions = normalize_questions(data, setup.question_count)
        logger.info(f"Generated {len(questions)} questions for {setup.position} at {setup.company}")
        return questions

    async def review_answer(
        self, question: str, setup: SetupMetadata, artifact: ResponseArtifact
    ) -> ReviewFeedback:
        data = {"question": question, **self._setup_fields(setup)}
        files = {"video": (artifact.filename, artifact.payload, artifact.mime_type)}
        try:
            response = await asyncio.to_thread(self._post, "review", data=data, files=files)
        except requests.RequestException as e:
            raise ReviewServiceError(f"Review request failed: {e}") from e

        try:
            body = response.json()
        except ValueError as e:
            if not response.ok:
                raise ReviewServiceError(f"Review service returned HTTP {response.status_code}") from e
            raise ReviewParseError("Review service returned a non-JSON body") from e

        if not response.ok:
            message = body.get("error") if isinstance(body, dict) else None
            raise ReviewServiceError(
                f"Review service returned HTTP {response.status_code}: {message or 'unknown error'}"
            )
        return parse_review_body(body)

    async def summarize(self, feedbacks: List[str]) -> SummaryFeedback:
        try:
            response = await asyncio.to_thread(self._post, "summarize", json={"feedbacks": feedbacks})
            response.raise_for_status()
            body = response.json()
        except ValueError as e:
            # requests' JSONDecodeError is a ValueError as well as a RequestException
            raise ReviewParseError("Summary service returned a non-JSON body") from e
        except requests.RequestException as e:
            raise ReviewServiceError(f"Summary request failed: {e}") from e
        return parse_summary_body(body)
