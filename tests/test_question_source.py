"""
Tests for the Open Trivia DB question source.
"""
import random
from unittest.mock import Mock

import pytest
import requests

from learnquest.constants.network_constants import MATHEMATICS_CATEGORY_ID, SCIENCE_CATEGORY_ID
from learnquest.core.errors import NoQuestionsAvailable, SourceUnavailable
from learnquest.core.services.question_source import QuestionSource, category_for_topic

from conftest import make_response, make_trivia_payload


def test_fetch_returns_normalized_questions(question_source, http_session):
    questions = question_source.fetch_questions("physics", "easy", 10)

    assert len(questions) == 10
    assert [q.id for q in questions] == list(range(1, 11))
    first = questions[0]
    assert first.prompt == "Question 1 about Newton's laws?"
    assert first.category == "Science & Nature"
    assert first.difficulty == "easy"
    assert len(first.options) == 4
    assert first.options[first.correct_option_index] == "Right 1"

    _, kwargs = http_session.get.call_args
    assert kwargs["params"] == {
        "amount": 10,
        "category": SCIENCE_CATEGORY_ID,
        "type": "multiple",
        "difficulty": "easy",
    }


def test_unset_difficulty_is_not_sent_upstream(question_source, http_session):
    question_source.fetch_questions("general")
    _, kwargs = http_session.get.call_args
    assert "difficulty" not in kwargs["params"]
    assert kwargs["params"]["amount"] == 10


@pytest.mark.parametrize(
    "topic, category",
    [
        ("physics", SCIENCE_CATEGORY_ID),
        ("Chemistry", SCIENCE_CATEGORY_ID),
        ("algebra", MATHEMATICS_CATEGORY_ID),
        (" Statistics ", MATHEMATICS_CATEGORY_ID),
        ("underwater basket weaving", SCIENCE_CATEGORY_ID),
    ],
)
def test_topic_category_mapping(topic, category):
    assert category_for_topic(topic) == category


@pytest.mark.parametrize(
    "topic, subject, category",
    [
        ("general", "math", MATHEMATICS_CATEGORY_ID),
        ("general", "science", SCIENCE_CATEGORY_ID),
        ("general", None, SCIENCE_CATEGORY_ID),
        ("algebra", "unknown", MATHEMATICS_CATEGORY_ID),
    ],
)
def test_subject_disambiguates_topic(topic, subject, category):
    assert category_for_topic(topic, subject) == category


def test_fetch_sends_subject_category(question_source, http_session):
    question_source.fetch_questions("general", "easy", subject="math")
    _, kwargs = http_session.get.call_args
    assert kwargs["params"]["category"] == MATHEMATICS_CATEGORY_ID


def test_http_error_raises_source_unavailable(http_session, question_source):
    http_session.get.return_value = make_response(status_code=503)
    with pytest.raises(SourceUnavailable) as exc_info:
        question_source.fetch_questions("physics", "easy")
    assert exc_info.value.status_code == 503


def test_transport_error_raises_source_unavailable(http_session, question_source):
    http_session.get.side_effect = requests.ConnectionError("down")
    with pytest.raises(SourceUnavailable):
        question_source.fetch_questions("physics", "easy")


def test_unreadable_body_raises_source_unavailable(http_session, question_source):
    response = make_response()
    response.json.side_effect = ValueError("not json")
    http_session.get.return_value = response
    with pytest.raises(SourceUnavailable):
        question_source.fetch_questions("physics", "easy")


def test_empty_result_raises_no_questions_available(http_session, question_source):
    http_session.get.return_value = make_response({"response_code": 1, "results": []})
    with pytest.raises(NoQuestionsAvailable) as exc_info:
        question_source.fetch_questions("biology", "hard")
    assert exc_info.value.response_code == 1


def test_short_batch_raises_no_questions_available(http_session, question_source):
    http_session.get.return_value = make_response(make_trivia_payload(amount=3))
    with pytest.raises(NoQuestionsAvailable):
        question_source.fetch_questions("biology", "hard", 5)


@pytest.mark.parametrize("amount", [0, -1, 51])
def test_invalid_amount_is_rejected(question_source, amount):
    with pytest.raises(ValueError):
        question_source.fetch_questions("physics", "easy", amount)


def test_invalid_difficulty_is_rejected(question_source):
    with pytest.raises(ValueError):
        question_source.fetch_questions("physics", "impossible")


def test_seeded_sources_shuffle_identically():
    def fetch(seed):
        session = Mock()
        session.get.return_value = make_response(make_trivia_payload())
        source = QuestionSource(session=session, rng=random.Random(seed))
        return [q.options for q in source.fetch_questions("physics", "easy")]

    assert fetch(42) == fetch(42)
