"""Data models for the interview session."""

from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Dict, Any, List, Optional, Tuple

from ..config import Config


@dataclass
class PreviewHandle:
    """Revocable reference that lets a view play an artifact without copying it."""
    uri: str
    _revoke: Any = field(default=None, repr=False, compare=False)
    revoked: bool = False

    def release(self) -> None:
        """Revoke the handle. Calling it again is a no-op."""
        if self.revoked:
            return
        self.revoked = True
        if self._revoke is not None:
            self._revoke(self.uri)


@dataclass(eq=False)
class ResponseArtifact:
    """A captured or uploaded video answer bound to one question."""
    payload: bytes
    mime_type: str
    preview: PreviewHandle
    source: str = "upload"  # "recording" | "upload"
    filename: str = "response.webm"
    created_at: str = field(default_factory=lambda: datetime.now().isoformat())

    @property
    def size(self) -> int:
        return len(self.payload)

    @property
    def preview_uri(self) -> Optional[str]:
        return None if self.preview.revoked else self.preview.uri

    def release_preview(self) -> None:
        self.preview.release()


@dataclass
class SetupMetadata:
    """What the candidate chose on the setup form."""
    company: str
    position: str
    experience: str
    question_count: int = 5

    def __post_init__(self):
        self.question_count = clamp_question_count(self.question_count)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "company": self.company,
            "position": self.position,
            "experience": self.experience,
            "questionsCount": self.question_count,
        }


def clamp_question_count(value) -> int:
    """Coerce a custom question count into the range the setup form allows."""
    try:
        count = int(value)
    except (TypeError, ValueError):
        return Config.MIN_QUESTION_COUNT
    if count < Config.MIN_QUESTION_COUNT:
        return Config.MIN_QUESTION_COUNT
    if count > Config.MAX_QUESTION_COUNT:
        return Config.MAX_QUESTION_COUNT
    return count


@dataclass(frozen=True)
class SubmissionResult:
    """Outcome of reviewing one question's answer."""
    question_index: int
    question: str
    success: bool
    score: Optional[int] = None
    strengths: Tuple[str, ...] = ()
    weaknesses: Tuple[str, ...] = ()
    overall_feedback: str = ""
    summary: Optional[str] = None
    tips: Tuple[str, ...] = ()
    error: Optional[str] = None

    @classmethod
    def succeeded(
        cls,
        question_index: int,
        question: str,
        score: int,
        strengths: List[str] = None,
        weaknesses: List[str] = None,
        overall_feedback: str = "",
        summary: Optional[str] = None,
        tips: List[str] = None,
    ) -> "SubmissionResult":
        return cls(
            question_index=question_index,
            question=question,
            success=True,
            score=score,
            strengths=tuple(strengths or ()),
            weaknesses=tuple(weaknesses or ()),
            overall_feedback=overall_feedback or "",
            summary=summary,
            tips=tuple(tips or ()),
        )

    @classmethod
    def failed(cls, question_index: int, question: str, reason: str) -> "SubmissionResult":
        return cls(question_index=question_index, question=question, success=False, error=reason)

    def to_dict(self) -> Dict[str, Any]:
        if not self.success:
            return {"question": self.question, "error": self.error}
        return {
            "question": self.question,
            "score": self.score,
            "strengths": list(self.strengths),
            "weaknesses": list(self.weaknesses),
            "overall_feedback": self.overall_feedback,
        }


@dataclass(frozen=True)
class InterviewReport:
    """Aggregated feedback produced once, at interview completion."""
    feedbacks: Tuple[SubmissionResult, ...]
    score: int
    summary: str
    tips: Tuple[str, ...]
    interview_details: Dict[str, Any] = field(default_factory=dict)
    degraded: bool = False
    created_at: str = field(default_factory=lambda: datetime.now().isoformat())

    @property
    def failures(self) -> List[SubmissionResult]:
        return [result for result in self.feedbacks if not result.success]

    @property
    def successes(self) -> List[SubmissionResult]:
        return [result for result in self.feedbacks if result.success]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "feedbacks": [result.to_dict() for result in self.feedbacks],
            "summary": self.summary,
            "tips": list(self.tips),
            "score": self.score,
            "interviewDetails": dict(self.interview_details),
            "degraded": self.degraded,
            "createdAt": self.created_at,
        }


@dataclass(frozen=True)
class SessionSnapshot:
    """Read-only view of the session handed to UI subscribers."""
    stage: str  # not_started | in_progress | submitting | completed | exited
    questions: Tuple[str, ...] = ()
    current_index: int = 0
    max_unlocked_index: int = 0
    answered: Tuple[int, ...] = ()
    previews: Dict[int, str] = field(default_factory=dict)
    is_recording: bool = False
    has_camera: bool = False
    can_complete: bool = False
    last_error: Optional[str] = None

    @property
    def current_question(self) -> Optional[str]:
        if not self.questions:
            return None
        return self.questions[self.current_index]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
