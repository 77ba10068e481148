import asyncio
from collections import Counter

import pytest

from podium.capture import MediaCapture, MediaCaptureProvider
from podium.errors import PermissionDeniedError, ReviewServiceError
from podium.models import ResponseArtifact, SetupMetadata
from podium.services import ReviewFeedback, ReviewService, SummaryFeedback, SummaryService
from podium.submission import SubmissionCoordinator
from podium.utils import PreviewRegistry


class CountingPreviewRegistry(PreviewRegistry):
    """PreviewRegistry that remembers every revoke call."""

    def __init__(self):
        super().__init__()
        self.created = []
        self.revocations = Counter()

    def create(self, payload):
        handle = super().create(payload)
        self.created.append(handle.uri)
        return handle

    def revoke(self, uri):
        self.revocations[uri] += 1
        super().revoke(uri)


class FakeRecorder:
    def __init__(self, on_data, on_stop):
        self.on_data = on_data
        self.on_stop = on_stop


class FakeCaptureProvider(MediaCaptureProvider):
    """Scripted camera: delivers ``chunks`` after start and ``final_chunk`` after stop."""

    def __init__(
        self,
        supported=("video/webm",),
        chunks=(b"slice-1", b"slice-2"),
        final_chunk=b"slice-final",
        deny=False,
        ack_stop=True,
    ):
        self.supported = set(supported)
        self.chunks = tuple(chunks)
        self.final_chunk = final_chunk
        self.deny = deny
        self.ack_stop = ack_stop
        self.acquire_calls = 0
        self.stop_calls = 0
        self.release_calls = 0
        self.type_queries = []
        self.started_with = None

    async def acquire(self):
        self.acquire_calls += 1
        if self.deny:
            raise PermissionDeniedError("Permission denied by user")
        return {"stream": self.acquire_calls}

    def is_type_supported(self, mime_type):
        self.type_queries.append(mime_type)
        return mime_type in self.supported

    async def start(self, stream, mime_type, timeslice_ms, on_data, on_stop):
        self.started_with = (mime_type, timeslice_ms)
        loop = asyncio.get_running_loop()
        for chunk in self.chunks:
            loop.call_soon(on_data, chunk)
        return FakeRecorder(on_data, on_stop)

    async def stop(self, recorder):
        self.stop_calls += 1
        loop = asyncio.get_running_loop()
        if self.final_chunk is not None:
            loop.call_soon(recorder.on_data, self.final_chunk)
        if self.ack_stop:
            loop.call_soon(recorder.on_stop)

    def release(self, stream):
        self.release_calls += 1


class FakeReviewService(ReviewService):
    """Scores answers from a table keyed by question text; listed questions fail."""

    def __init__(self, scores=None, failures=(), feedback_extra=None):
        self.scores = scores or {}
        self.failures = set(failures)
        self.feedback_extra = feedback_extra or {}
        self.calls = []
        self.in_flight = 0
        self.max_in_flight = 0
        self.gate = None

    async def review_answer(self, question, setup, artifact):
        self.calls.append((question, artifact.payload))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(0)
            if self.gate is not None:
                await self.gate.wait()
            if question in self.failures:
                raise ReviewServiceError("Review service returned HTTP 500: upstream timeout")
            return ReviewFeedback(
                score=self.scores.get(question, 5),
                strengths=["Clear structure"],
                weaknesses=["Few concrete examples"],
                overall_feedback=f"Feedback for: {question}",
                **self.feedback_extra.get(question, {}),
            )
        finally:
            self.in_flight -= 1


class FakeSummaryService(SummaryService):

    def __init__(self, summary="Solid interview overall.", tips=("Slow down",), fail=False):
        self.summary = summary
        self.tips = list(tips)
        self.fail = fail
        self.received = None

    async def summarize(self, feedbacks):
        self.received = list(feedbacks)
        if self.fail:
            raise ReviewServiceError("summary backend down")
        return SummaryFeedback(summary=self.summary, tips=self.tips, score=7)


@pytest.fixture
def registry():
    return CountingPreviewRegistry()


@pytest.fixture
def provider():
    return FakeCaptureProvider()


@pytest.fixture
def capture(provider, registry):
    return MediaCapture(provider, registry, final_slice_timeout=0.05)


@pytest.fixture
def setup_metadata():
    return SetupMetadata("Google", "Software Engineer", "Mid Level", 3)


@pytest.fixture
def review_service():
    return FakeReviewService()


@pytest.fixture
def coordinator(review_service):
    return SubmissionCoordinator(review_service)


@pytest.fixture
def make_artifact(registry):
    def _make(payload=b"video-bytes", mime_type="video/webm", source="upload"):
        return ResponseArtifact(
            payload=payload,
            mime_type=mime_type,
            preview=registry.create(payload),
            source=source,
        )
    return _make
