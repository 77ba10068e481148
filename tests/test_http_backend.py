import pytest
import requests

from podium.errors import QuestionGenerationError, ReviewParseError, ReviewServiceError
from podium.models import SetupMetadata
from podium.services import HttpInterviewBackend


class FakeResponse:
    def __init__(self, status_code=200, body=None, text=None):
        self.status_code = status_code
        self._body = body
        self._text = text

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if self._text is not None:
            raise requests.exceptions.JSONDecodeError("Expecting value", self._text, 0)
        return self._body

    def raise_for_status(self):
        if not self.ok:
            raise requests.HTTPError(f"{self.status_code} Error")


@pytest.fixture
def post(monkeypatch):
    calls = []
    responses = []

    def fake_post(url, **kwargs):
        calls.append((url, kwargs))
        response = responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    monkeypatch.setattr(requests, "post", fake_post)
    fake_post.calls = calls
    fake_post.responses = responses
    return fake_post


@pytest.fixture
def backend():
    return HttpInterviewBackend(base_url="http://api.test/api/app/", timeout=5, position_field="positionTitle")


@pytest.fixture
def acme_setup():
    return SetupMetadata("Acme", "Data Engineer", "Senior", 2)


async def test_generate_questions_request_and_ordering(post, backend, acme_setup):
    post.responses.append(FakeResponse(body={"2": "Second question?", "1": "First question?", "3": "Extra?"}))

    questions = await backend.generate_questions(acme_setup)

    assert questions == ["First question?", "Second question?"]
    url, kwargs = post.calls[0]
    assert url == "http://api.test/api/app/generate-questions"
    assert kwargs["json"] == {
        "company": "Acme",
        "positionTitle": "Data Engineer",
        "experience": "Senior",
        "count": 2,
    }
    assert kwargs["timeout"] == 5


async def test_generate_questions_uses_versioned_position_field(post, acme_setup):
    post.responses.append(FakeResponse(body=["Only question?"]))
    backend = HttpInterviewBackend(base_url="http://api.test", position_field="position")

    await backend.generate_questions(acme_setup)

    assert post.calls[0][1]["json"]["position"] == "Data Engineer"


async def test_generate_questions_http_error(post, backend, acme_setup):
    post.responses.append(FakeResponse(status_code=502, body={"error": "bad gateway"}))
    with pytest.raises(QuestionGenerationError):
        await backend.generate_questions(acme_setup)


async def test_review_uploads_video_as_multipart(post, backend, acme_setup, make_artifact):
    post.responses.append(FakeResponse(body={
        "score": 14,
        "strengths": ["Concise"],
        "weaknesses": ["No metrics"],
        "overall_feedback": "Good answer.",
    }))
    artifact = make_artifact(b"webm-bytes")

    feedback = await backend.review_answer("What is a data lake?", acme_setup, artifact)

    assert feedback.score == 10
    url, kwargs = post.calls[0]
    assert url == "http://api.test/api/app/review"
    assert kwargs["data"] == {
        "question": "What is a data lake?",
        "company": "Acme",
        "positionTitle": "Data Engineer",
        "experience": "Senior",
    }
    assert kwargs["files"] == {"video": ("response.webm", b"webm-bytes", "video/webm")}


async def test_review_non_json_body_is_parse_error(post, backend, acme_setup, make_artifact):
    post.responses.append(FakeResponse(text="<html>oops</html>"))
    with pytest.raises(ReviewParseError):
        await backend.review_answer("Q?", acme_setup, make_artifact())


async def test_review_server_error_is_service_error(post, backend, acme_setup, make_artifact):
    post.responses.append(FakeResponse(status_code=500, body={"error": "model overloaded"}))
    with pytest.raises(ReviewServiceError, match="model overloaded"):
        await backend.review_answer("Q?", acme_setup, make_artifact())


async def test_review_network_failure_is_service_error(post, backend, acme_setup, make_artifact):
    post.responses.append(requests.ConnectionError("connection refused"))
    with pytest.raises(ReviewServiceError, match="connection refused"):
        await backend.review_answer("Q?", acme_setup, make_artifact())


async def test_summarize(post, backend):
    post.responses.append(FakeResponse(body={"summary": "Strong candidate.", "tips": ["Use STAR"]}))

    summary = await backend.summarize(["Question: Q | Score: 8"])

    assert summary.summary == "Strong candidate."
    assert post.calls[0][1]["json"] == {"feedbacks": ["Question: Q | Score: 8"]}


async def test_summarize_non_json_body(post, backend):
    post.responses.append(FakeResponse(text="gateway timeout page"))
    with pytest.raises(ReviewParseError):
        await backend.summarize([])
