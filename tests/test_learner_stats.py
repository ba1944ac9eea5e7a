"""
Tests for learner statistics.
"""
from datetime import date, datetime, timezone

from learnquest.core.models import QuizResult
from learnquest.core.services.learner_stats import LearnerStats, current_streak, summarize_results


def result(topic, score, day):
    return QuizResult(
        user_id="u1",
        topic=topic,
        difficulty="easy",
        score_percent=score,
        total_questions=10,
        xp_earned=score // 10 * 10,
        created_at=datetime(2026, 10, day, 12, 0, tzinfo=timezone.utc),
    )


def test_empty_history():
    assert summarize_results([]) == LearnerStats()


def test_summary_figures():
    results = [
        result("physics", 70, 19),
        result("chemistry", 85, 18),
        result("physics", 50, 17),
        result("biology", 100, 14),
    ]
    stats = summarize_results(results, today=date(2026, 10, 19))
    assert stats.total_quizzes == 4
    assert stats.average_score == 76  # 76.25
    assert stats.favorite_topic == "physics"
    assert stats.current_streak == 3


def test_average_rounds_half_up():
    stats = summarize_results([result("physics", 70, 19), result("physics", 75, 19)], today=date(2026, 10, 19))
    assert stats.average_score == 73  # 72.5


def test_streak_requires_activity_today():
    timestamps = [datetime(2026, 10, 17, tzinfo=timezone.utc), datetime(2026, 10, 18, tzinfo=timezone.utc)]
    assert current_streak(timestamps, today=date(2026, 10, 19)) == 0
    assert current_streak(timestamps, today=date(2026, 10, 18)) == 2
