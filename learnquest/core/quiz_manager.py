"""Business logic tying quiz sessions, scoring and the leaderboard together."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
import logging
import random
from threading import Lock
from typing import Callable

from learnquest.constants.quiz_constants import DEFAULT_LEADERBOARD_LIMIT
from learnquest.core.errors import (
    InvalidTransition,
    NoQuestionsAvailable,
    PersistenceFailure,
    SourceUnavailable,
)
from learnquest.core.models import ActivityRecord, QuizQuestion, RankedEntry, utc_now
from learnquest.core.services.countdown import Countdown
from learnquest.core.services.leaderboard import rank_entries, rank_for_user
from learnquest.core.services.learner_stats import LearnerStats, summarize_results
from learnquest.core.services.progress_store import ProgressStore
from learnquest.core.services.question_source import QuestionSource
from learnquest.core.services.quiz_session import QuizSession, SessionState
from learnquest.core.services.scoring import QuizOutcome, ScoringEngine
from learnquest.core.settings import QuizSettings

logger = logging.getLogger(__name__)

CountdownFactory = Callable[[Callable[[], bool]], Countdown]


@dataclass(frozen=True, slots=True)
class QuizView:
    """Snapshot of a learner's quiz for the presentation layer."""

    state: SessionState
    topic: str | None
    difficulty: str | None
    question: QuizQuestion | None
    question_number: int
    total_questions: int
    selected_option_index: int | None
    remaining_seconds: int
    remaining_display: str
    progress: float
    answered_count: int
    last_error: str | None


@dataclass(slots=True)
class _LearnerQuiz:
    display_name: str
    session: QuizSession = field(default_factory=QuizSession)
    countdown: Countdown | None = None
    outcome: QuizOutcome | None = None


class QuizManager:
    """Facade over quiz sessions, the scoring engine and the progress store.

    Each learner owns at most one session. All session transitions happen
    under one lock; the upstream question fetch runs outside it.
    """

    def __init__(
        self,
        settings: QuizSettings | None = None,
        question_source: QuestionSource | None = None,
        store: ProgressStore | None = None,
        countdown_factory: CountdownFactory | None = None,
    ) -> None:
        self._lock = Lock()
        self._settings = settings or QuizSettings()
        self._source = question_source or QuestionSource(rng=random.Random(self._settings.shuffle_seed))
        self._store = store or ProgressStore()
        self._scoring = ScoringEngine(self._store)
        self._countdown_factory = countdown_factory or Countdown
        self._learners: dict[str, _LearnerQuiz] = {}

    @property
    def settings(self) -> QuizSettings:
        return self._settings

    # --- Quiz lifecycle ---

    def generate_quiz(
        self,
        user_id: str,
        display_name: str,
        topic: str,
        difficulty: str,
        amount: int | None = None,
        subject: str | None = None,
    ) -> QuizView:
        """Fetch questions and start a timed quiz, replacing any earlier one.

        ``subject`` disambiguates shared topic names such as "general".
        Source errors send the session back to selection and are re-raised.
        """
        amount = amount if amount is not None else self._settings.question_count
        with self._lock:
            previous = self._learners.get(user_id)
            if previous is not None:
                self._discard(previous)
            learner = _LearnerQuiz(display_name=display_name)
            learner.session.add_completion_listener(lambda _session: self._on_complete(user_id, learner))
            self._learners[user_id] = learner
            session = learner.session
            session.choose_topic(topic)
            session.choose_difficulty(difficulty)
            session.begin_generation()

        try:
            questions = self._source.fetch_questions(topic, difficulty, amount, subject=subject)
        except (SourceUnavailable, NoQuestionsAvailable, ValueError) as exc:
            with self._lock:
                if session.state is SessionState.GENERATING:
                    session.generation_failed(str(exc))
            raise

        with self._lock:
            if self._learners.get(user_id) is not learner or session.state is not SessionState.GENERATING:
                raise InvalidTransition("start a quiz that was abandoned", session.state)
            session.start(questions, self._settings.time_limit_seconds)
            self._log_generation(user_id, topic, difficulty, len(questions), subject)
            if self._settings.run_countdown:
                learner.countdown = self._countdown_factory(lambda: self._tick_from_timer(user_id, learner))
                learner.countdown.start()
            logger.info("Started %s quiz on %s for %s", difficulty, topic, user_id)
            return self._view(learner)

    def select_answer(self, user_id: str, option_index: int) -> QuizView:
        with self._lock:
            learner = self._require_learner(user_id)
            learner.session.select_answer(option_index)
            return self._view(learner)

    def next_question(self, user_id: str) -> QuizView:
        with self._lock:
            learner = self._require_learner(user_id)
            learner.session.next_question()
            return self._view(learner)

    def previous_question(self, user_id: str) -> QuizView:
        with self._lock:
            learner = self._require_learner(user_id)
            learner.session.previous_question()
            return self._view(learner)

    def go_to_question(self, user_id: str, index: int) -> QuizView:
        with self._lock:
            learner = self._require_learner(user_id)
            learner.session.go_to(index)
            return self._view(learner)

    def tick(self, user_id: str, seconds: int = 1) -> QuizView:
        """Advance the learner's countdown by hand (used when no timer thread runs)."""
        with self._lock:
            learner = self._require_learner(user_id)
            learner.session.tick(seconds)
            return self._view(learner)

    def finish_quiz(self, user_id: str) -> QuizOutcome:
        with self._lock:
            learner = self._require_learner(user_id)
            learner.session.finish()
            if learner.outcome is None:
                raise RuntimeError("Quiz finished without an outcome.")
            return learner.outcome

    def abandon_quiz(self, user_id: str) -> None:
        with self._lock:
            learner = self._learners.pop(user_id, None)
            if learner is not None:
                self._discard(learner)

    def get_quiz_view(self, user_id: str) -> QuizView:
        with self._lock:
            learner = self._learners.get(user_id)
            if learner is None:
                return self._view(_LearnerQuiz(display_name=""))
            return self._view(learner)

    def get_outcome(self, user_id: str) -> QuizOutcome | None:
        with self._lock:
            learner = self._learners.get(user_id)
            return learner.outcome if learner is not None else None

    # --- Leaderboard & stats ---

    def get_leaderboard(self, metric: str = "total", limit: int | None = DEFAULT_LEADERBOARD_LIMIT) -> list[RankedEntry]:
        return rank_entries(self._store.get_leaderboard(), metric, limit=limit)

    def get_learner_rank(self, user_id: str, metric: str = "total") -> int | None:
        return rank_for_user(rank_entries(self._store.get_leaderboard(), metric), user_id)

    def get_learner_stats(self, user_id: str, today: date | None = None) -> LearnerStats:
        return summarize_results(self._store.get_results_for_user(user_id), today)

    # --- Internals ---

    def _on_complete(self, user_id: str, learner: _LearnerQuiz) -> None:
        # Runs under self._lock, from whichever transition ended the quiz.
        if learner.countdown is not None:
            learner.countdown.cancel()
            learner.countdown = None
        session = learner.session
        outcome = self._scoring.score(
            topic=session.topic or "",
            difficulty=session.difficulty or "",
            questions=session.questions,
            selected_answers=session.selected_answers,
        )
        # The score is kept even if the store blows up below.
        learner.outcome = outcome
        try:
            self._scoring.record(outcome, user_id, learner.display_name)
        except Exception:
            logger.exception("Unexpected error while saving the quiz for %s", user_id)
            outcome.warnings.append("Quiz finished, but the result could not be saved.")

    def _tick_from_timer(self, user_id: str, learner: _LearnerQuiz) -> bool:
        with self._lock:
            if self._learners.get(user_id) is not learner:
                return False
            learner.session.tick(1)
            return learner.session.state is SessionState.IN_PROGRESS

    def _log_generation(
        self, user_id: str, topic: str, difficulty: str, count: int, subject: str | None = None
    ) -> None:
        metadata: dict[str, object] = {
            "topic": topic,
            "difficulty": difficulty,
            "questions_count": count,
            "generated_at": utc_now().isoformat(),
        }
        if subject is not None:
            metadata["subject"] = subject
        activity = ActivityRecord(user_id=user_id, activity_type="quiz", metadata=metadata)
        try:
            self._store.log_activity(activity)
        except PersistenceFailure:
            logger.warning("Error logging quiz activity for %s", user_id, exc_info=True)

    def _require_learner(self, user_id: str) -> _LearnerQuiz:
        learner = self._learners.get(user_id)
        if learner is None:
            raise InvalidTransition("answer questions before generating a quiz", SessionState.SELECTING)
        return learner

    @staticmethod
    def _discard(learner: _LearnerQuiz) -> None:
        if learner.countdown is not None:
            learner.countdown.cancel()
            learner.countdown = None
        learner.session.abandon()

    @staticmethod
    def _view(learner: _LearnerQuiz) -> QuizView:
        session = learner.session
        questions = session.questions
        return QuizView(
            state=session.state,
            topic=session.topic,
            difficulty=session.difficulty,
            question=session.current_question,
            question_number=session.current_index + 1 if questions else 0,
            total_questions=len(questions),
            selected_option_index=session.current_selection,
            remaining_seconds=session.remaining_seconds,
            remaining_display=session.format_remaining(),
            progress=session.progress,
            answered_count=session.answered_count,
            last_error=session.last_error,
        )
