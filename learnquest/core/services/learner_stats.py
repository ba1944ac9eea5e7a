"""Summary statistics over a learner's quiz history."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone

from learnquest.core.models import QuizResult


@dataclass(frozen=True, slots=True)
class LearnerStats:
    """Figures shown next to the learner's leaderboard position."""

    total_quizzes: int = 0
    average_score: int = 0
    favorite_topic: str | None = None
    current_streak: int = 0


def summarize_results(results: list[QuizResult], today: date | None = None) -> LearnerStats:
    if not results:
        return LearnerStats()

    total = len(results)
    score_sum = sum(result.score_percent for result in results)
    # Round half up, matching the quiz score rounding.
    average = (2 * score_sum + total) // (2 * total)

    # Ties go to the topic seen first in the (newest first) history.
    topic_counts = Counter(result.topic for result in results)
    favorite = max(topic_counts, key=lambda topic: topic_counts[topic])

    return LearnerStats(
        total_quizzes=total,
        average_score=average,
        favorite_topic=favorite,
        current_streak=current_streak([result.created_at for result in results], today),
    )


def current_streak(timestamps: list[datetime], today: date | None = None) -> int:
    """Count consecutive days with at least one quiz, ending today."""
    today = today or datetime.now(timezone.utc).date()
    active_days = {timestamp.date() for timestamp in timestamps}
    streak = 0
    day = today
    while day in active_days:
        streak += 1
        day -= timedelta(days=1)
    return streak
