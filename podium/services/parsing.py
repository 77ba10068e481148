"""Tolerant parsing of question, review and summary responses.

The AI endpoints have changed shape between releases, so everything here
accepts a range of layouts and normalises them.
"""

import json
import logging
import math
from typing import Any, List, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from ..config import Config
from ..errors import QuestionGenerationError, ReviewParseError, ReviewServiceError

logger = logging.getLogger(__name__)


def extract_json(text: str) -> str:
    text = text.strip()
    if text.startswith("```"):
        # remove leading and trailing code fences
        text = text.strip('`')
    try:
        start = text.index('{')
        end = text.rindex('}') + 1
        return text[start:end]
    except ValueError:
        return text


def _load_json_object(body: Any, error_cls) -> dict:
    if isinstance(body, bytes):
        body = body.decode("utf-8", errors="replace")
    if isinstance(body, str):
        try:
            body = json.loads(extract_json(body))
        except json.JSONDecodeError as e:
            raise error_cls(f"Response is not valid JSON: {e}") from e
    if not isinstance(body, dict):
        raise error_cls(f"Expected a JSON object, got {type(body).__name__}")
    return body


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def clamp_score(value: Any) -> int:
    """Coerce a score into [SCORE_MIN, SCORE_MAX]. Raises ValueError if it is not numeric."""
    if value is None or isinstance(value, bool):
        raise ValueError("score is missing")
    try:
        number = float(value)
    except TypeError as e:
        raise ValueError(f"score is not a number: {value!r}") from e
    if math.isnan(number) or math.isinf(number):
        raise ValueError("score is not a number")
    return max(Config.SCORE_MIN, min(Config.SCORE_MAX, round_half_up(number)))


def _as_text_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value.strip()] if value.strip() else []
    if isinstance(value, (list, tuple)):
        return [str(item).strip() for item in value if item is not None and str(item).strip()]
    return [str(value)]


class ReviewFeedback(BaseModel):
    """Feedback for a single answer."""
    score: int = Field(..., description="Score clamped into the configured range.")
    strengths: List[str] = Field(default_factory=list)
    weaknesses: List[str] = Field(default_factory=list)
    overall_feedback: str = ""
    summary: Optional[str] = None
    tips: List[str] = Field(default_factory=list)

    @field_validator("score", mode="before")
    @classmethod
    def _clamp(cls, value):
        return clamp_score(value)

    @field_validator("strengths", "weaknesses", "tips", mode="before")
    @classmethod
    def _lists(cls, value):
        return _as_text_list(value)

    @field_validator("overall_feedback", mode="before")
    @classmethod
    def _text(cls, value):
        return "" if value is None else str(value)

    @field_validator("summary", mode="before")
    @classmethod
    def _optional_text(cls, value):
        if value is None or not str(value).strip():
            return None
        return str(value)


class SummaryFeedback(BaseModel):
    """Session-level summary returned by the optional summary service."""
    summary: str = ""
    tips: List[str] = Field(default_factory=list)
    score: Optional[int] = None

    @field_validator("summary", mode="before")
    @classmethod
    def _text(cls, value):
        return "" if value is None else str(value)

    @field_validator("tips", mode="before")
    @classmethod
    def _lists(cls, value):
        return _as_text_list(value)

    @field_validator("score", mode="before")
    @classmethod
    def _clamp(cls, value):
        try:
            return clamp_score(value)
        except ValueError:
            return None


def parse_review_body(body: Any) -> ReviewFeedback:
    """Turn a raw review response into ReviewFeedback.

    Raises ReviewServiceError for explicit error bodies and ReviewParseError
    for anything else that cannot be used.
    """
    data = _load_json_object(body, ReviewParseError)

    if "score" not in data and data.get("error"):
        raise ReviewServiceError(str(data["error"]))

    if "overall_feedback" not in data and "overallFeedback" in data:
        data = {**data, "overall_feedback": data["overallFeedback"]}

    try:
        return ReviewFeedback.model_validate(data)
    except ValidationError as e:
        raise ReviewParseError(f"Review response is malformed: {e.errors()[0].get('msg')}") from e


def parse_summary_body(body: Any) -> SummaryFeedback:
    data = _load_json_object(body, ReviewParseError)
    if data.get("error") and not data.get("summary"):
        raise ReviewServiceError(str(data["error"]))
    try:
        return SummaryFeedback.model_validate(data)
    except ValidationError as e:
        raise ReviewParseError(f"Summary response is malformed: {e}") from e


def normalize_questions(data: Any, count: Optional[int] = None) -> List[str]:
    """Pull an ordered list of question strings out of a question-service response.

    Accepts a plain list, ``{"questions": [...]}``, a numeric-keyed object
    (``{"1": "...", "2": "..."}``) or, as a last resort, any object whose string
    values are long enough to be questions.
    """
    if isinstance(data, (str, bytes)):
        data = _load_json_object(data, QuestionGenerationError)

    questions: List[str] = []
    if isinstance(data, list):
        questions = [str(item) for item in data]
    elif isinstance(data, dict):
        if isinstance(data.get("questions"), list):
            questions = [str(item) for item in data["questions"]]
        else:
            numeric_keys = sorted(
                (key for key in data if str(key).strip().lstrip("-").isdigit()),
                key=lambda key: int(key),
            )
            questions = [str(data[key]) for key in numeric_keys]
            if not questions:
                questions = [
                    value for value in data.values()
                    if isinstance(value, str) and len(value) > 10
                ]

    questions = [question.strip() for question in questions if question and question.strip()]
    if count is not None and len(questions) > count:
        questions = questions[:count]
    elif count is not None and len(questions) < count:
        logger.warning(f"Question service returned {len(questions)} of {count} requested questions")

    if not questions:
        raise QuestionGenerationError("Failed to create mock interview session: no questions returned")
    return questions
