"""
Pytest configuration and fixtures for LearnQuest tests.
"""
import random
from unittest.mock import Mock

import pytest

from learnquest.core.models import QuizQuestion
from learnquest.core.quiz_manager import QuizManager
from learnquest.core.services.progress_store import ProgressStore
from learnquest.core.services.question_source import QuestionSource
from learnquest.core.settings import QuizSettings


def make_trivia_result(index, difficulty="easy"):
    """Build one raw Open Trivia DB result."""
    return {
        "type": "multiple",
        "difficulty": difficulty,
        "category": "Science &amp; Nature",
        "question": f"Question {index} about Newton&#039;s laws?",
        "correct_answer": f"Right {index}",
        "incorrect_answers": [f"Wrong {index}a", f"Wrong {index}b", f"Wrong {index}c"],
    }


def make_trivia_payload(amount=10, difficulty="easy", response_code=0):
    return {
        "response_code": response_code,
        "results": [make_trivia_result(i, difficulty) for i in range(1, amount + 1)],
    }


def make_response(payload=None, status_code=200):
    response = Mock()
    response.ok = 200 <= status_code < 300
    response.status_code = status_code
    response.text = "upstream body"
    response.json.return_value = payload
    return response


def make_questions(count=10, difficulty="easy"):
    """Questions whose correct answer is always option 0."""
    return [
        QuizQuestion(
            id=i,
            prompt=f"Question {i}",
            options=[f"Right {i}", f"Wrong {i}a", f"Wrong {i}b", f"Wrong {i}c"],
            correct_option_index=0,
            difficulty=difficulty,
            category="Science & Nature",
        )
        for i in range(1, count + 1)
    ]


@pytest.fixture
def http_session():
    """Mock requests session answering with ten easy questions."""
    session = Mock()
    session.get.return_value = make_response(make_trivia_payload())
    return session


@pytest.fixture
def question_source(http_session):
    return QuestionSource(session=http_session, rng=random.Random(1234))


@pytest.fixture
def store():
    return ProgressStore()


@pytest.fixture
def settings():
    return QuizSettings(time_limit_seconds=300, question_count=10, shuffle_seed=1234, run_countdown=False)


@pytest.fixture
def manager(settings, question_source, store):
    return QuizManager(settings=settings, question_source=question_source, store=store)
