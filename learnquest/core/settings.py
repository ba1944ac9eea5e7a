"""Runtime settings for the quiz manager."""

from __future__ import annotations

from dataclasses import dataclass
import os

from learnquest.constants.quiz_constants import DEFAULT_QUESTION_COUNT, DEFAULT_TIME_LIMIT_SECONDS


@dataclass(slots=True)
class QuizSettings:
    """Per-deployment quiz settings.

    ``shuffle_seed`` makes option order reproducible; ``None`` leaves it random.
    ``run_countdown`` can be switched off when the caller ticks sessions itself.
    """

    time_limit_seconds: int = DEFAULT_TIME_LIMIT_SECONDS
    question_count: int = DEFAULT_QUESTION_COUNT
    shuffle_seed: int | None = None
    run_countdown: bool = True

    def __post_init__(self) -> None:
        if self.time_limit_seconds <= 0:
            raise ValueError("Time limit must be a positive integer.")
        if self.question_count <= 0:
            raise ValueError("Question count must be a positive integer.")

    @classmethod
    def from_env(cls) -> "QuizSettings":
        """Build settings from ``LEARNQUEST_*`` environment variables."""
        seed = os.getenv("LEARNQUEST_SHUFFLE_SEED")
        return cls(
            time_limit_seconds=_int_env("LEARNQUEST_TIME_LIMIT_SECONDS", DEFAULT_TIME_LIMIT_SECONDS),
            question_count=_int_env("LEARNQUEST_QUESTION_COUNT", DEFAULT_QUESTION_COUNT),
            shuffle_seed=int(seed) if seed else None,
            run_countdown=os.getenv("LEARNQUEST_RUN_COUNTDOWN", "1").lower() not in ("0", "false", "no"),
        )


def _int_env(name: str, default: int) -> int:
    raw_value = os.getenv(name)
    if not raw_value:
        return default
    try:
        return int(raw_value)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got '{raw_value}'.") from exc
