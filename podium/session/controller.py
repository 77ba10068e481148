"""Interview session controller.

Owns the whole session state (questions, answers, navigation, live capture)
and is the only component that mutates the response store. Views subscribe
to ``SessionSnapshot`` updates instead of keeping state of their own.
"""

import logging
from typing import Callable, List, Optional, Sequence

from ..capture import CaptureSession, DeviceHandle, MediaCapture
from ..errors import (
    CompletionNotAvailableError,
    DeviceError,
    InvalidUploadError,
    NavigationLockedError,
    NoDataCapturedError,
    PodiumError,
    SessionClosedError,
    SessionNotActiveError,
)
from ..models import InterviewReport, ResponseArtifact, SessionSnapshot, SetupMetadata
from ..services import QuestionService
from ..submission import SubmissionCoordinator
from ..utils import PreviewRegistry
from .navigator import SessionNavigator
from .response_store import ResponseStore

logger = logging.getLogger(__name__)

Listener = Callable[[SessionSnapshot], None]


class InterviewSessionController:
    """Drives one interview at a time: start, answer loop, complete or exit."""

    def __init__(
        self,
        coordinator: SubmissionCoordinator,
        capture: Optional[MediaCapture] = None,
        question_service: Optional[QuestionService] = None,
        previews: Optional[PreviewRegistry] = None,
        user_id: Optional[str] = None,
    ):
        self.coordinator = coordinator
        self.previews = previews or (capture.previews if capture else PreviewRegistry())
        self.capture = capture or MediaCapture(None, self.previews)
        self.question_service = question_service
        self.user_id = user_id

        self.stage = "not_started"  # not_started | in_progress | submitting | completed | exited
        self.questions: tuple = ()
        self.setup: Optional[SetupMetadata] = None
        self.store: Optional[ResponseStore] = None
        self.navigator: Optional[SessionNavigator] = None
        self.last_error: Optional[str] = None
        self.last_report: Optional[InterviewReport] = None

        self._device: Optional[DeviceHandle] = None
        self._recording: Optional[CaptureSession] = None
        self._recording_index: Optional[int] = None
        self._epoch = 0
        self._listeners: List[Listener] = []

    # --- subscriptions -------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a snapshot listener; returns a function that removes it."""
        self._listeners.append(listener)
        listener(self.snapshot())

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)
        return unsubscribe

    def snapshot(self) -> SessionSnapshot:
        if self.store is None or self.navigator is None:
            return SessionSnapshot(stage=self.stage, last_error=self.last_error)

        return SessionSnapshot(
            stage=self.stage,
            questions=self.questions,
            current_index=self.navigator.current_index,
            max_unlocked_index=self.navigator.max_unlocked_index,
            answered=self.store.answered_indices(),
            previews={
                index: artifact.preview_uri
                for index, artifact in self.store.snapshot().items()
                if artifact.preview_uri
            },
            is_recording=self.is_recording,
            has_camera=self._device is not None and not self._device.released,
            can_complete=self.can_complete,
            last_error=self.last_error,
        )

    def _emit(self) -> None:
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception as e:
                logger.error(f"Session listener failed: {e}")

    def _record_error(self, error: Exception) -> None:
        self.last_error = str(error)
        logger.warning(f"Session error: {error}")
        self._emit()

    # --- state queries ---------------------------------------------------

    @property
    def is_active(self) -> bool:
        return self.stage == "in_progress"

    @property
    def is_recording(self) -> bool:
        return self._recording is not None and self._recording.is_recording

    @property
    def can_complete(self) -> bool:
        return self.is_active and self.navigator is not None and self.navigator.is_terminal

    @property
    def has_unsaved_work(self) -> bool:
        return (
            (self.store is not None and len(self.store) > 0)
            or self._recording is not None
            or self.stage == "submitting"
        )

    def _require_active(self) -> None:
        if not self.is_active:
            raise SessionNotActiveError(f"No interview in progress (stage: {self.stage})")

    # --- lifecycle -------------------------------------------------------

    async def start(self, questions: Sequence[str], setup: SetupMetadata) -> SessionSnapshot:
        questions = tuple(str(question) for question in questions)
        if not questions:
            raise ValueError("An interview needs at least one question")

        if self.stage in ("in_progress", "submitting"):
            logger.info("Starting a new interview; discarding the current one")
            await self._teardown()

        self._epoch += 1
        self.questions = questions
        self.setup = setup
        self.store = ResponseStore(len(questions), epoch=self._epoch)
        self.navigator = SessionNavigator(self.store)
        self.last_error = None
        self.last_report = None
        self.stage = "in_progress"

        logger.info(
            f"Interview started: {setup.position} at {setup.company} "
            f"({setup.experience}), {len(questions)} questions"
        )
        self._emit()
        return self.snapshot()

    async def start_from_setup(self, setup: SetupMetadata) -> SessionSnapshot:
        """Generate questions for ``setup`` and start the interview."""
        if self.question_service is None:
            raise PodiumError("No question service configured")
        questions = await self.question_service.generate_questions(setup)
        return await self.start(questions, setup)

    async def complete(self) -> InterviewReport:
        """Submit every answer for review and end the session.

        Only available once the last question has an answer.
        """
        self._require_active()
        if not self.can_complete:
            raise CompletionNotAvailableError("Answer the last question before submitting")

        epoch = self._epoch
        self.stage = "submitting"
        await self._release_capture()
        self._emit()

        report = await self.coordinator.submit(
            self.questions,
            self.store.snapshot(),
            self.setup,
            user_id=self.user_id,
            is_current=lambda: self._epoch == epoch,
        )

        if self._epoch != epoch:
            logger.info("Interview was exited during submission; dropping the report")
            raise SessionClosedError("Interview was exited before the report was ready")

        self._epoch += 1
        self.store.clear_all()
        self._discard_state()
        self.stage = "completed"
        self.last_report = report
        logger.info(f"Interview completed with overall score {report.score}")
        self._emit()
        return report

    async def exit(self, confirm: Optional[Callable[[], bool]] = None) -> bool:
        """Abandon the interview.

        In-progress work is only discarded if ``confirm()`` returns True.
        Returns whether the session was torn down.
        """
        if self.stage not in ("in_progress", "submitting"):
            return True

        if self.has_unsaved_work and (confirm is None or not confirm()):
            logger.info("Exit cancelled by user")
            return False

        await self._teardown()
        self.stage = "exited"
        logger.info("Interview exited")
        self._emit()
        return True

    async def _teardown(self) -> None:
        self._epoch += 1
        await self._release_capture()
        if self.store is not None:
            self.store.clear_all()
        self._discard_state()

    def _discard_state(self) -> None:
        self.questions = ()
        self.store = None
        self.navigator = None

    async def _release_capture(self) -> None:
        recording, self._recording = self._recording, None
        self._recording_index = None
        if recording is not None:
            await self.capture.abandon(recording)
        device, self._device = self._device, None
        if device is not None:
            device.release()

    # --- answers ---------------------------------------------------------

    def answer_current(self, artifact: ResponseArtifact) -> SessionSnapshot:
        self._require_active()
        return self._store_answer(self.navigator.current_index, artifact)

    def _store_answer(self, index: int, artifact: ResponseArtifact) -> SessionSnapshot:
        if index > self.navigator.max_unlocked_index:
            # the question was relocked while its recording was running
            artifact.release_preview()
            error = NavigationLockedError(index, self.navigator.max_unlocked_index)
            self._record_error(error)
            raise error

        self.store.set(index, artifact)
        self.navigator.recompute_unlock()
        self.last_error = None
        logger.info(f"Answer recorded for question {index + 1}/{len(self.questions)}")
        self._emit()
        return self.snapshot()

    def reset_current(self) -> SessionSnapshot:
        self._require_active()
        index = self.navigator.current_index
        self.store.clear(index)
        self.navigator.recompute_unlock()
        logger.info(f"Answer deleted for question {index + 1}")
        self._emit()
        return self.snapshot()

    def upload_file(self, video_path: str) -> SessionSnapshot:
        """Use a video file as the answer to the current question."""
        self._require_active()
        try:
            artifact = self.capture.artifact_from_file(video_path)
        except (InvalidUploadError, NoDataCapturedError) as e:
            self._record_error(e)
            raise
        return self.answer_current(artifact)

    # --- navigation ------------------------------------------------------

    def advance(self) -> bool:
        self._require_active()
        moved = self.navigator.next()
        if moved:
            self._emit()
        return moved

    def retreat(self) -> bool:
        self._require_active()
        moved = self.navigator.previous()
        if moved:
            self._emit()
        return moved

    def jump_to(self, index: int) -> SessionSnapshot:
        self._require_active()
        self.navigator.go_to(index)
        self._emit()
        return self.snapshot()

    # --- live capture ----------------------------------------------------

    async def request_camera(self) -> DeviceHandle:
        self._require_active()
        if self._device is not None and not self._device.released:
            return self._device

        epoch = self._epoch
        try:
            device = await self.capture.request_device()
        except DeviceError as e:
            self._record_error(e)
            raise

        if self._epoch != epoch or not self.is_active:
            device.release()
            raise SessionClosedError("Interview ended while waiting for camera permission")

        self._device = device
        self.last_error = None
        self._emit()
        return device

    async def start_recording(self) -> CaptureSession:
        self._require_active()
        if self._recording is not None:
            return self._recording

        epoch = self._epoch
        device = await self.request_camera()
        try:
            recording = await self.capture.start_recording(device)
        except DeviceError as e:
            device.release()
            if self._device is device:
                self._device = None
            self._record_error(e)
            raise

        if self._epoch != epoch or not self.is_active:
            await self.capture.abandon(recording)
            raise SessionClosedError("Interview ended while the recording was starting")

        self._recording = recording
        self._recording_index = self.navigator.current_index
        self._emit()
        return recording

    async def stop_recording(self) -> ResponseArtifact:
        """Finish the live recording and store it as the answer it was started for."""
        self._require_active()
        if self._recording is None:
            raise NoDataCapturedError("No recording in progress")

        epoch = self._epoch
        recording, self._recording = self._recording, None
        index, self._recording_index = self._recording_index, None
        self._device = None

        try:
            artifact = await self.capture.stop_recording(recording)
        except NoDataCapturedError as e:
            self._record_error(e)
            raise

        if self._epoch != epoch or not self.is_active:
            artifact.release_preview()
            raise SessionClosedError("Interview ended while the recording was being saved")

        self._store_answer(index, artifact)
        return artifact
