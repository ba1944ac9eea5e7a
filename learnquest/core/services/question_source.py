"""Adapter that fetches multiple-choice questions from the Open Trivia DB."""

from __future__ import annotations

import logging
import random

import requests

from learnquest.constants.network_constants import (
    MATH_TOPICS,
    MATHEMATICS_CATEGORY_ID,
    OPEN_TRIVIA_TIMEOUT_SECONDS,
    OPEN_TRIVIA_URL,
    SCIENCE_CATEGORY_ID,
    SCIENCE_TOPICS,
)
from learnquest.constants.quiz_constants import (
    DEFAULT_QUESTION_COUNT,
    DIFFICULTIES,
    MAX_QUESTION_COUNT,
)
from learnquest.core.errors import NoQuestionsAvailable, SourceUnavailable
from learnquest.core.models import QuizQuestion
from learnquest.core.services.answer_shuffler import shuffle_answers
from learnquest.core.text_cleaning import decode_html_entities

logger = logging.getLogger(__name__)


def category_for_topic(topic: str, subject: str | None = None) -> int:
    """Map a topic to its upstream category; unknown topics count as science.

    A known ``subject`` wins over the topic, so ``("math", "general")`` maps to
    mathematics while a bare ``"general"`` stays in science.
    """
    if subject is not None:
        normalized_subject = subject.strip().lower()
        if normalized_subject in MATH_TOPICS:
            return MATHEMATICS_CATEGORY_ID
        if normalized_subject in SCIENCE_TOPICS:
            return SCIENCE_CATEGORY_ID
    normalized = topic.strip().lower()
    if normalized in MATH_TOPICS:
        return MATHEMATICS_CATEGORY_ID
    return SCIENCE_CATEGORY_ID


class QuestionSource:
    """Fetches, decodes and shuffles questions from the Open Trivia DB."""

    def __init__(
        self,
        session: requests.Session | None = None,
        base_url: str = OPEN_TRIVIA_URL,
        timeout_seconds: float = OPEN_TRIVIA_TIMEOUT_SECONDS,
        rng: random.Random | None = None,
    ) -> None:
        self._session = session or requests.Session()
        self._base_url = base_url
        self._timeout_seconds = timeout_seconds
        self._rng = rng or random.Random()

    def fetch_questions(
        self,
        topic: str,
        difficulty: str | None = None,
        amount: int = DEFAULT_QUESTION_COUNT,
        subject: str | None = None,
    ) -> list[QuizQuestion]:
        """Return exactly ``amount`` questions for the topic and difficulty.

        Raises:
            ValueError: invalid difficulty or amount.
            SourceUnavailable: the upstream request failed or returned an error status.
            NoQuestionsAvailable: the upstream has no (or too few) questions for this combination.
        """
        if difficulty is not None and difficulty not in DIFFICULTIES:
            raise ValueError(f"Difficulty must be one of {', '.join(DIFFICULTIES)}.")
        if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
            raise ValueError("Question amount must be a positive integer.")
        if amount > MAX_QUESTION_COUNT:
            raise ValueError(f"Question amount cannot exceed {MAX_QUESTION_COUNT}.")

        params: dict[str, object] = {
            "amount": amount,
            "category": category_for_topic(topic, subject),
            "type": "multiple",
        }
        if difficulty is not None:
            params["difficulty"] = difficulty

        payload = self._request(params)

        response_code = payload.get("response_code")
        if response_code != 0:
            logger.warning("Open Trivia DB response code %s for topic=%s difficulty=%s", response_code, topic, difficulty)
            raise NoQuestionsAvailable(
                "No questions available for this topic/difficulty.",
                response_code=response_code if isinstance(response_code, int) else None,
            )

        results = payload.get("results") or []
        if len(results) < amount:
            raise NoQuestionsAvailable(
                f"Only {len(results)} of {amount} questions are available for this topic/difficulty.",
                response_code=response_code,
            )

        return [self._normalize(raw, position) for position, raw in enumerate(results[:amount], start=1)]

    def _request(self, params: dict[str, object]) -> dict[str, object]:
        logger.info("Fetching quiz questions from %s with %s", self._base_url, params)
        try:
            response = self._session.get(self._base_url, params=params, timeout=self._timeout_seconds)
        except requests.RequestException as exc:
            logger.error("Question source unreachable: %s", exc)
            raise SourceUnavailable("Failed to reach the question source.") from exc

        if not response.ok:
            logger.error("Question source error: %s %s", response.status_code, response.text)
            raise SourceUnavailable("Failed to fetch quiz questions.", status_code=response.status_code)

        try:
            payload = response.json()
        except ValueError as exc:
            raise SourceUnavailable("Question source returned an unreadable response.") from exc
        if not isinstance(payload, dict):
            raise SourceUnavailable("Question source returned an unexpected response.")
        return payload

    def _normalize(self, raw: dict[str, object], position: int) -> QuizQuestion:
        try:
            correct = decode_html_entities(str(raw["correct_answer"]))
            incorrect = [decode_html_entities(str(answer)) for answer in raw["incorrect_answers"]]
            prompt = decode_html_entities(str(raw["question"]))
        except (KeyError, TypeError) as exc:
            raise SourceUnavailable("Question source returned a malformed question.") from exc

        shuffled = shuffle_answers(correct, incorrect, rng=self._rng)
        category = raw.get("category")
        return QuizQuestion(
            id=position,
            prompt=prompt,
            options=shuffled.options,
            correct_option_index=shuffled.correct_index,
            difficulty=raw.get("difficulty"),
            category=decode_html_entities(category) if isinstance(category, str) else None,
        )
