"""Completion-time fan-out of answer reviews and report assembly."""

import asyncio
import logging
from statistics import mean
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from ..config import Config
from ..errors import ReviewParseError
from ..models import InterviewReport, ResponseArtifact, SetupMetadata, SubmissionResult
from ..services import ReviewRepository, ReviewService, SummaryService, round_half_up

logger = logging.getLogger(__name__)

NO_RESPONSE_REASON = "no response provided"

GENERIC_SUMMARY = (
    "Thanks for completing the mock interview. Review the feedback for each "
    "question to see where your answers landed and where they can improve."
)

UNAVAILABLE_SUMMARY = (
    "We could not analyse your interview responses right now. "
    "Please try again later."
)

GENERIC_TIPS = (
    "Structure behavioural answers with the STAR method: situation, task, action, result.",
    "Keep each answer focused and aim for two to three minutes.",
    "Back up claims with concrete examples and measurable outcomes.",
    "Research the company and relate your answers to its products and values.",
    "Practise out loud and record yourself to work on pacing and filler words.",
)


class SubmissionCoordinator:
    """Reviews every answer concurrently and assembles the interview report.

    ``submit`` never raises. Individual review failures become failure
    results; a failure of the orchestration itself yields a fully degraded
    report so the caller always has something to show.
    """

    def __init__(
        self,
        review_service: ReviewService,
        summary_service: Optional[SummaryService] = None,
        repository: Optional[ReviewRepository] = None,
    ):
        self.review_service = review_service
        self.summary_service = summary_service
        self.repository = repository

    async def submit(
        self,
        questions: Sequence[str],
        artifacts: Dict[int, ResponseArtifact],
        setup: SetupMetadata,
        user_id: Optional[str] = None,
        is_current: Optional[Callable[[], bool]] = None,
    ) -> InterviewReport:
        """Review all answers and build the report.

        ``is_current`` lets the caller veto persistence when the session it
        belongs to was torn down while reviews were in flight.
        """
        is_current = is_current or (lambda: True)
        try:
            return await self._submit(questions, artifacts, setup, user_id, is_current)
        except Exception as e:
            logger.error(f"Interview submission failed: {e}")
            return self.degraded_report(questions, setup, f"Analysis unavailable: {e}")

    async def _submit(self, questions, artifacts, setup, user_id, is_current) -> InterviewReport:
        logger.info(f"Submitting {len(artifacts)} of {len(questions)} answers for review")

        outcomes = await asyncio.gather(
            *(
                self._review_one(index, question, artifacts.get(index), setup)
                for index, question in enumerate(questions)
            ),
            return_exceptions=True,
        )

        results: List[SubmissionResult] = []
        for index, outcome in enumerate(outcomes):
            if isinstance(outcome, BaseException):
                logger.error(f"Review task for question {index} crashed: {outcome!r}")
                outcome = SubmissionResult.failed(index, questions[index], f"Analysis failed: {outcome}")
            results.append(outcome)

        successes = [result for result in results if result.success]
        logger.info(f"Reviews finished: {len(successes)} succeeded, {len(results) - len(successes)} failed")

        summary, tips = await self._summarize(successes)
        report = InterviewReport(
            feedbacks=tuple(results),
            score=self.aggregate_score(results),
            summary=summary,
            tips=tuple(tips),
            interview_details=self._details(questions, setup),
            degraded=not successes,
        )

        if user_id and is_current():
            await asyncio.to_thread(self._persist, user_id, report)
        elif user_id:
            logger.info("Session closed during submission; results not persisted")
        return report

    async def _review_one(
        self,
        index: int,
        question: str,
        artifact: Optional[ResponseArtifact],
        setup: SetupMetadata,
    ) -> SubmissionResult:
        if artifact is None:
            return SubmissionResult.failed(index, question, NO_RESPONSE_REASON)

        try:
            feedback = await self.review_service.review_answer(question, setup, artifact)
        except ReviewParseError as e:
            logger.warning(f"Could not parse review for question {index}: {e}")
            return SubmissionResult.failed(
                index, question, f"The analysis response could not be read: {e}"
            )
        except Exception as e:
            logger.error(f"Review for question {index} failed: {e}")
            return SubmissionResult.failed(index, question, f"Analysis failed: {e}")

        return SubmissionResult.succeeded(
            index,
            question,
            score=feedback.score,
            strengths=feedback.strengths,
            weaknesses=feedback.weaknesses,
            overall_feedback=feedback.overall_feedback,
            summary=feedback.summary,
            tips=feedback.tips,
        )

    @staticmethod
    def aggregate_score(results: Sequence[SubmissionResult]) -> int:
        scores = [result.score for result in results if result.success]
        if not scores:
            return Config.DEFAULT_SCORE
        return round_half_up(mean(scores))

    async def _summarize(self, successes: List[SubmissionResult]) -> Tuple[str, List[str]]:
        if not successes:
            return UNAVAILABLE_SUMMARY, list(GENERIC_TIPS)

        if self.summary_service is not None:
            try:
                summary = await self.summary_service.summarize(
                    [self._feedback_text(result) for result in successes]
                )
                if summary.summary or summary.tips:
                    return summary.summary or GENERIC_SUMMARY, summary.tips or list(GENERIC_TIPS)
            except Exception as e:
                logger.warning(f"Summary service failed, falling back: {e}")

        first = successes[0]
        if first.summary or first.tips:
            return first.summary or GENERIC_SUMMARY, list(first.tips) or list(GENERIC_TIPS)

        return GENERIC_SUMMARY, list(GENERIC_TIPS)

    @staticmethod
    def _feedback_text(result: SubmissionResult) -> str:
        parts = [f"Question: {result.question}", f"Score: {result.score}"]
        if result.strengths:
            parts.append("Strengths: " + "; ".join(result.strengths))
        if result.weaknesses:
            parts.append("Weaknesses: " + "; ".join(result.weaknesses))
        if result.overall_feedback:
            parts.append("Feedback: " + result.overall_feedback)
        return " | ".join(parts)

    @staticmethod
    def _details(questions: Sequence[str], setup: SetupMetadata) -> Dict[str, object]:
        details = setup.to_dict()
        details["questionsCount"] = len(questions)
        return details

    def _persist(self, user_id: str, report: InterviewReport) -> None:
        if self.repository is None:
            return
        try:
            for result in report.feedbacks:
                self.repository.save_review(user_id, result)
            self.repository.save_summary(user_id, report)
        except Exception as e:
            logger.error(f"Failed to persist interview results for {user_id}: {e}")

    def degraded_report(
        self, questions: Sequence[str], setup: SetupMetadata, reason: str
    ) -> InterviewReport:
        """Report used when the submission phase itself fails."""
        return InterviewReport(
            feedbacks=tuple(
                SubmissionResult.failed(index, question, reason)
                for index, question in enumerate(questions)
            ),
            score=Config.DEFAULT_SCORE,
            summary=UNAVAILABLE_SUMMARY,
            tips=GENERIC_TIPS,
            interview_details=self._details(questions, setup),
            degraded=True,
        )
