"""Quiz scoring, XP rewards and result persistence."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging

from learnquest.constants.quiz_constants import XP_PER_CORRECT_ANSWER
from learnquest.core.errors import PersistenceFailure
from learnquest.core.models import QuestionReview, QuizQuestion, QuizResult, utc_now
from learnquest.core.services.progress_store import ProgressStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class QuizScore:
    """Scores computed from a completed session."""

    correct_count: int
    total_questions: int
    score_percent: int
    xp_earned: int
    review: list[QuestionReview]


@dataclass(slots=True)
class QuizOutcome:
    """What the learner sees after finishing: the score plus any save warnings."""

    score: QuizScore
    topic: str
    difficulty: str
    result: QuizResult | None = None
    warnings: list[str] = field(default_factory=list)

    @property
    def saved(self) -> bool:
        return self.result is not None and not self.warnings


def score_percent(correct_count: int, total_questions: int) -> int:
    """Percentage of correct answers, rounded half up and clamped to 0..100."""
    if total_questions <= 0:
        raise ValueError("Total questions must be positive.")
    # (200c + t) // 2t == floor(100c/t + 0.5) without float rounding surprises.
    percent = (200 * correct_count + total_questions) // (2 * total_questions)
    return max(0, min(100, percent))


def xp_for(correct_count: int, difficulty: str) -> int:
    """XP reward: a flat amount per correct answer for the difficulty tier."""
    try:
        per_question = XP_PER_CORRECT_ANSWER[difficulty]
    except KeyError as exc:
        raise ValueError(f"Unknown difficulty '{difficulty}'.") from exc
    return correct_count * per_question


def score_session(
    questions: list[QuizQuestion],
    selected_answers: list[int | None],
    difficulty: str,
) -> QuizScore:
    if not questions:
        raise ValueError("Cannot score a quiz without questions.")
    if len(selected_answers) != len(questions):
        raise ValueError("Selected answers must have one slot per question.")

    review: list[QuestionReview] = []
    for question, selected in zip(questions, selected_answers):
        review.append(
            QuestionReview(
                question_id=question.id,
                prompt=question.prompt,
                options=list(question.options),
                selected_option_index=selected,
                correct_option_index=question.correct_option_index,
                is_correct=selected is not None and selected == question.correct_option_index,
            )
        )

    correct_count = sum(1 for item in review if item.is_correct)
    return QuizScore(
        correct_count=correct_count,
        total_questions=len(questions),
        score_percent=score_percent(correct_count, len(questions)),
        xp_earned=xp_for(correct_count, difficulty),
        review=review,
    )


class ScoringEngine:
    """Scores completed quizzes and records them in the progress store."""

    def __init__(self, store: ProgressStore) -> None:
        self._store = store

    def complete(
        self,
        user_id: str,
        display_name: str,
        topic: str,
        difficulty: str,
        questions: list[QuizQuestion],
        selected_answers: list[int | None],
    ) -> QuizOutcome:
        """Score the quiz, save the result and credit the XP."""
        outcome = self.score(topic, difficulty, questions, selected_answers)
        return self.record(outcome, user_id, display_name)

    def score(
        self,
        topic: str,
        difficulty: str,
        questions: list[QuizQuestion],
        selected_answers: list[int | None],
    ) -> QuizOutcome:
        score = score_session(questions, selected_answers, difficulty)
        return QuizOutcome(score=score, topic=topic, difficulty=difficulty)

    def record(self, outcome: QuizOutcome, user_id: str, display_name: str) -> QuizOutcome:
        """Save an already computed outcome and credit its XP.

        Persistence failures are reported as warnings on the outcome, which is
        returned either way.
        """
        score = outcome.score
        topic = outcome.topic
        difficulty = outcome.difficulty
        result = QuizResult(
            user_id=user_id,
            topic=topic,
            difficulty=difficulty,
            score_percent=score.score_percent,
            total_questions=score.total_questions,
            xp_earned=score.xp_earned,
            created_at=utc_now(),
        )
        try:
            self._store.append_result(result)
        except PersistenceFailure:
            logger.warning("Failed to save quiz result for %s", user_id, exc_info=True)
            outcome.warnings.append("Failed to save quiz result.")
            return outcome
        outcome.result = result

        try:
            self._store.add_xp(user_id, display_name, score.xp_earned, updated_at=result.created_at)
        except PersistenceFailure:
            logger.warning("Failed to update leaderboard for %s", user_id, exc_info=True)
            outcome.warnings.append("Quiz saved, but the leaderboard could not be updated.")

        logger.info(
            "Quiz completed by %s: %s/%s correct, %s%%, %s XP",
            user_id,
            score.correct_count,
            score.total_questions,
            score.score_percent,
            score.xp_earned,
        )
        return outcome
