"""Backend that calls Gemini directly instead of going through the HTTP API."""

import asyncio
import json
import logging
from typing import List, Optional

from google import genai
from google.genai import types

from ..config import Config
from ..errors import QuestionGenerationError, ReviewServiceError
from ..models import ResponseArtifact, SetupMetadata
from ..utils import base_mime_type
from .base import InterviewBackend
from .parsing import (
    ReviewFeedback,
    SummaryFeedback,
    normalize_questions,
    parse_review_body,
    parse_summary_body,
)

logger = logging.getLogger(__name__)

generate_content_config = types.GenerateContentConfig(
    temperature=0.3,
    max_output_tokens=2000,
    top_p=0.95,
    response_mime_type="application/json",
)

QUESTIONS_PROMPT = """
You are interviewing a candidate for the position of {position} at {company}.
Experience level: {experience}.
Write exactly {count} interview questions. Respond with a JSON array of strings only.
"""

REVIEW_PROMPT = """
You are an interview coach reviewing a candidate's recorded video answer.
Company: {company}
Position: {position}
Experience level: {experience}
Question: {question}

Watch the video and respond with a single JSON object:
{{"score": integer {score_min}-{score_max}, "strengths": [string], "weaknesses": [string], "overall_feedback": string}}
"""

SUMMARY_PROMPT = """
Below is feedback on each answer a candidate gave in a mock interview.
{feedbacks}

Respond with a single JSON object:
{{"summary": string, "tips": [string], "score": integer {score_min}-{score_max}}}
"""


class GeminiInterviewBackend(InterviewBackend):
    """Question generation, review and summary through the Gemini API."""

    def __init__(self, client: Optional[genai.Client] = None, model: Optional[str] = None):
        self.client = client or genai.Client(api_key=Config.validate_api_keys())
        self.model = model or Config.GEMINI_MODEL

    async def _generate(self, parts: List[types.Part]) -> str:
        content = types.Content(role='user', parts=parts)
        response = await asyncio.to_thread(
            self.client.models.generate_content,
            model=self.model,
            contents=[content],
            config=generate_content_config,
        )
        return response.text or ""

    async def generate_questions(self, setup: SetupMetadata) -> List[str]:
        prompt = QUESTIONS_PROMPT.format(
            position=setup.position,
            company=setup.company,
            experience=setup.experience,
            count=setup.question_count,
        )
        try:
            raw = await self._generate([types.Part(text=prompt)])
        except Exception as e:
            logger.error(f"Gemini question generation failed: {e}")
            raise QuestionGenerationError(f"Error starting mock interview: {e}") from e

        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            data = raw
        return normalize_questions(data, setup.question_count)

    async def review_answer(
        self, question: str, setup: SetupMetadata, artifact: ResponseArtifact
    ) -> ReviewFeedback:
        prompt = REVIEW_PROMPT.format(
            company=setup.company,
            position=setup.position,
            experience=setup.experience,
            question=question,
            score_min=Config.SCORE_MIN,
            score_max=Config.SCORE_MAX,
        )
        video_blob = types.Blob(mime_type=base_mime_type(artifact.mime_type), data=artifact.payload)
        try:
            raw = await self._generate([types.Part(text=prompt), types.Part(inline_data=video_blob)])
        except Exception as e:
            raise ReviewServiceError(f"Gemini review failed: {e}") from e

        logger.debug(f"Gemini review response: {raw[:200]}")
        return parse_review_body(raw)

    async def summarize(self, feedbacks: List[str]) -> SummaryFeedback:
        prompt = SUMMARY_PROMPT.format(
            feedbacks="\n".join(f"- {item}" for item in feedbacks),
            score_min=Config.SCORE_MIN,
            score_max=Config.SCORE_MAX,
        )
        try:
            raw = await self._generate([types.Part(text=prompt)])
        except Exception as e:
            raise ReviewServiceError(f"Gemini summary failed: {e}") from e
        return parse_summary_body(raw)
