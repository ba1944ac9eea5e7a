"""State machine for one learner's quiz, from topic selection to results."""

from __future__ import annotations

from enum import Enum
from typing import Callable

from learnquest.constants.quiz_constants import DEFAULT_TIME_LIMIT_SECONDS, DIFFICULTIES
from learnquest.core.errors import InvalidTransition
from learnquest.core.models import QuizQuestion


class SessionState(Enum):
    """Lifecycle stage of a quiz session."""

    SELECTING = "selecting"
    GENERATING = "generating"
    IN_PROGRESS = "in_progress"
    RESULTS = "results"

    def __str__(self) -> str:
        return self.value.replace("_", " ")


CompletionListener = Callable[["QuizSession"], None]


class QuizSession:
    """Holds the in-progress quiz and drives its state transitions.

    ``selected_answers`` always has one slot per question once questions are
    loaded; ``None`` marks a question that has not been answered.
    """

    def __init__(self) -> None:
        self._state = SessionState.SELECTING
        self._topic: str | None = None
        self._difficulty: str | None = None
        self._questions: list[QuizQuestion] = []
        self._selected_answers: list[int | None] = []
        self._current_index: int = 0
        self._furthest_index: int = 0
        self._remaining_seconds: int = 0
        self._last_error: str | None = None
        self._listeners: list[CompletionListener] = []

    # --- Read accessors ---

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def topic(self) -> str | None:
        return self._topic

    @property
    def difficulty(self) -> str | None:
        return self._difficulty

    @property
    def questions(self) -> list[QuizQuestion]:
        return list(self._questions)

    @property
    def selected_answers(self) -> list[int | None]:
        return list(self._selected_answers)

    @property
    def current_index(self) -> int:
        return self._current_index

    @property
    def remaining_seconds(self) -> int:
        return self._remaining_seconds

    @property
    def last_error(self) -> str | None:
        return self._last_error

    @property
    def current_question(self) -> QuizQuestion | None:
        if self._state is not SessionState.IN_PROGRESS or not self._questions:
            return None
        return self._questions[self._current_index]

    @property
    def current_selection(self) -> int | None:
        if not self._selected_answers:
            return None
        return self._selected_answers[self._current_index]

    @property
    def progress(self) -> float:
        """Fraction of the quiz reached, counting the visible question."""
        if not self._questions:
            return 0.0
        return (self._current_index + 1) / len(self._questions)

    @property
    def answered_count(self) -> int:
        return sum(1 for answer in self._selected_answers if answer is not None)

    def format_remaining(self) -> str:
        minutes, seconds = divmod(self._remaining_seconds, 60)
        return f"{minutes}:{seconds:02d}"

    def add_completion_listener(self, listener: CompletionListener) -> None:
        """Register a callback invoked once when the session reaches results."""
        self._listeners.append(listener)

    # --- Selecting ---

    def choose_topic(self, topic: str) -> None:
        self._require(SessionState.SELECTING, "choose a topic")
        cleaned = topic.strip()
        if not cleaned:
            raise ValueError("Topic must not be empty.")
        self._topic = cleaned

    def choose_difficulty(self, difficulty: str) -> None:
        self._require(SessionState.SELECTING, "choose a difficulty")
        if difficulty not in DIFFICULTIES:
            raise ValueError(f"Difficulty must be one of {', '.join(DIFFICULTIES)}.")
        self._difficulty = difficulty

    def begin_generation(self) -> None:
        self._require(SessionState.SELECTING, "generate a quiz")
        if self._topic is None or self._difficulty is None:
            raise InvalidTransition("generate a quiz without a topic and difficulty", self._state)
        self._last_error = None
        self._state = SessionState.GENERATING

    # --- Generating ---

    def generation_failed(self, message: str) -> None:
        self._require(SessionState.GENERATING, "report a generation failure")
        self._last_error = message
        self._state = SessionState.SELECTING

    def start(
        self,
        questions: list[QuizQuestion],
        time_limit_seconds: int = DEFAULT_TIME_LIMIT_SECONDS,
    ) -> None:
        self._require(SessionState.GENERATING, "start the quiz")
        if not questions:
            raise ValueError("A quiz must contain at least one question.")
        if time_limit_seconds <= 0:
            raise ValueError("Time limit must be a positive integer.")
        self._questions = list(questions)
        self._selected_answers = [None] * len(self._questions)
        self._current_index = 0
        self._furthest_index = 0
        self._remaining_seconds = time_limit_seconds
        self._state = SessionState.IN_PROGRESS

    # --- In progress ---

    def select_answer(self, option_index: int) -> None:
        """Record the answer for the visible question, replacing any earlier choice."""
        self._require(SessionState.IN_PROGRESS, "select an answer")
        option_count = len(self._questions[self._current_index].options)
        if not 0 <= option_index < option_count:
            raise ValueError(f"Option index must be between 0 and {option_count - 1}.")
        self._selected_answers[self._current_index] = option_index

    def next_question(self) -> None:
        """Advance one question; moving past the last one ends the quiz."""
        self._require(SessionState.IN_PROGRESS, "move to the next question")
        if self._current_index >= len(self._questions) - 1:
            self._complete()
            return
        self._current_index += 1
        self._furthest_index = max(self._furthest_index, self._current_index)

    def previous_question(self) -> None:
        self._require(SessionState.IN_PROGRESS, "move to the previous question")
        if self._current_index > 0:
            self._current_index -= 1

    def go_to(self, index: int) -> None:
        """Jump to a question that has already been reached."""
        self._require(SessionState.IN_PROGRESS, "change question")
        if not 0 <= index <= self._furthest_index:
            raise ValueError(f"Question {index} has not been reached yet.")
        self._current_index = index

    def tick(self, seconds: int = 1) -> None:
        """Advance the countdown; reaching zero ends the quiz."""
        if self._state is not SessionState.IN_PROGRESS:
            return
        self._remaining_seconds = max(0, self._remaining_seconds - seconds)
        if self._remaining_seconds == 0:
            self._complete()

    def finish(self) -> None:
        """End the quiz early; unanswered questions count as incorrect."""
        self._require(SessionState.IN_PROGRESS, "finish the quiz")
        self._complete()

    # --- Any state ---

    def abandon(self) -> None:
        """Discard the session and return to topic selection."""
        self._state = SessionState.SELECTING
        self._topic = None
        self._difficulty = None
        self._questions = []
        self._selected_answers = []
        self._current_index = 0
        self._furthest_index = 0
        self._remaining_seconds = 0
        self._last_error = None

    def _complete(self) -> None:
        self._state = SessionState.RESULTS
        for listener in list(self._listeners):
            listener(self)

    def _require(self, expected: SessionState, operation: str) -> None:
        if self._state is not expected:
            raise InvalidTransition(operation, self._state)
