"""Domain models for LearnQuest."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True)
class QuizQuestion:
    """Multiple-choice question with its options already shuffled."""

    id: int  # 1-based position inside the session, not a durable identifier
    prompt: str
    options: list[str]
    correct_option_index: int
    difficulty: str | None = None
    category: str | None = None


@dataclass(slots=True)
class QuestionReview:
    """Per-question outcome shown on the results screen."""

    question_id: int
    prompt: str
    options: list[str]
    selected_option_index: int | None
    correct_option_index: int
    is_correct: bool


@dataclass(frozen=True, slots=True)
class QuizResult:
    """Persisted, immutable record of a completed quiz."""

    user_id: str
    topic: str
    difficulty: str
    score_percent: int
    total_questions: int
    xp_earned: int
    created_at: datetime = field(default_factory=utc_now)


@dataclass(slots=True)
class LeaderboardEntry:
    """Cumulative XP totals for one learner."""

    user_id: str
    display_name: str
    total_xp: int = 0
    weekly_xp: int = 0
    monthly_xp: int = 0
    last_updated: datetime = field(default_factory=utc_now)

    def metric_value(self, metric: str) -> int:
        if metric == "total":
            return self.total_xp
        if metric == "weekly":
            return self.weekly_xp
        if metric == "monthly":
            return self.monthly_xp
        raise ValueError(f"Unknown leaderboard metric '{metric}'.")


@dataclass(frozen=True, slots=True)
class RankedEntry:
    """Leaderboard entry with a rank computed for one metric."""

    rank: int
    user_id: str
    display_name: str
    value: int
    total_xp: int
    weekly_xp: int
    monthly_xp: int


@dataclass(frozen=True, slots=True)
class ActivityRecord:
    """Learner activity such as generating a quiz."""

    user_id: str
    activity_type: str
    metadata: dict[str, object]
    created_at: datetime = field(default_factory=utc_now)
