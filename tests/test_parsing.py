import pytest

from podium.errors import QuestionGenerationError, ReviewParseError, ReviewServiceError
from podium.services import (
    clamp_score,
    extract_json,
    normalize_questions,
    parse_review_body,
    parse_summary_body,
    round_half_up,
)


@pytest.mark.parametrize("value,expected", [
    (7, 7),
    ("8", 8),
    (7.5, 8),
    (6.49, 6),
    (0, 1),
    (-3, 1),
    (14, 10),
    (10.4, 10),
])
def test_clamp_score(value, expected):
    assert clamp_score(value) == expected


@pytest.mark.parametrize("value", [None, True, "great", float("nan"), float("inf"), [7]])
def test_clamp_score_rejects_non_numbers(value):
    with pytest.raises(ValueError):
        clamp_score(value)


def test_round_half_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(3.5) == 4
    assert round_half_up(3.4999) == 3


def test_extract_json_from_fenced_text():
    text = '```json\n{"score": 6, "strengths": []}\n```'
    assert extract_json(text) == '{"score": 6, "strengths": []}'


def test_review_body_with_camel_case_feedback():
    feedback = parse_review_body({
        "score": 12,
        "strengths": "Clear answer",
        "weaknesses": None,
        "overallFeedback": "Well structured.",
    })
    assert feedback.score == 10
    assert feedback.strengths == ["Clear answer"]
    assert feedback.weaknesses == []
    assert feedback.overall_feedback == "Well structured."
    assert feedback.summary is None


def test_review_body_from_json_text():
    feedback = parse_review_body('Here you go: {"score": "4", "tips": ["Smile"]}')
    assert feedback.score == 4
    assert feedback.tips == ["Smile"]


@pytest.mark.parametrize("body", [
    {"strengths": ["ok"]},
    {"score": "excellent"},
    {"score": None},
    "not json at all",
    "[1, 2, 3]",
])
def test_unusable_review_body(body):
    with pytest.raises(ReviewParseError):
        parse_review_body(body)


def test_error_body_is_a_service_error():
    with pytest.raises(ReviewServiceError, match="quota exceeded"):
        parse_review_body({"error": "quota exceeded"})


def test_summary_body():
    summary = parse_summary_body(b'{"summary": "Good", "tips": ["a", "", "b"], "score": "n/a"}')
    assert summary.summary == "Good"
    assert summary.tips == ["a", "b"]
    assert summary.score is None


def test_questions_from_list_truncated_to_count():
    assert normalize_questions(["q one?", "q two?", "q three?"], 2) == ["q one?", "q two?"]


def test_questions_from_wrapped_list():
    assert normalize_questions({"questions": [" First? ", ""]}) == ["First?"]


def test_questions_from_numeric_keys_are_ordered():
    data = {"10": "Tenth question?", "2": "Second question?", "1": "First question?"}
    assert normalize_questions(data) == ["First question?", "Second question?", "Tenth question?"]


def test_questions_from_arbitrary_object_keep_long_strings():
    data = {"intro": "Tell me about yourself please.", "id": "abc", "n": 3}
    assert normalize_questions(data) == ["Tell me about yourself please."]


def test_questions_from_json_text():
    assert normalize_questions('{"1": "What motivates you?"}') == ["What motivates you?"]


def test_no_questions_is_an_error():
    with pytest.raises(QuestionGenerationError):
        normalize_questions({"questions": []})
