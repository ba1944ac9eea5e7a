"""
Tests for quiz scoring and the XP engine.
"""
from unittest.mock import Mock

import pytest

from learnquest.core.errors import PersistenceFailure
from learnquest.core.services.progress_store import ProgressStore
from learnquest.core.services.scoring import ScoringEngine, score_percent, score_session, xp_for

from conftest import make_questions


def test_physics_easy_seven_of_ten():
    questions = make_questions(10, "easy")
    answers = [0] * 7 + [1, 2, None]
    score = score_session(questions, answers, "easy")
    assert score.correct_count == 7
    assert score.score_percent == 70
    assert score.xp_earned == 70
    assert [item.is_correct for item in score.review] == [True] * 7 + [False] * 3
    assert score.review[9].selected_option_index is None


def test_hard_quiz_with_no_answers_scores_zero():
    score = score_session(make_questions(10, "hard"), [None] * 10, "hard")
    assert score.correct_count == 0
    assert score.score_percent == 0
    assert score.xp_earned == 0


@pytest.mark.parametrize("total", [1, 3, 7, 10, 12])
def test_score_percent_matches_rounded_ratio(total):
    for correct in range(total + 1):
        expected = int(100 * correct / total + 0.5)
        assert score_percent(correct, total) == expected
        assert 0 <= score_percent(correct, total) <= 100


def test_score_percent_rounds_half_up():
    assert score_percent(1, 8) == 13  # 12.5
    assert score_percent(1, 3) == 33
    assert score_percent(2, 3) == 67


@pytest.mark.parametrize("difficulty, per_question", [("easy", 10), ("medium", 15), ("hard", 20)])
def test_xp_is_flat_per_correct_answer(difficulty, per_question):
    assert xp_for(4, difficulty) == 4 * per_question


def test_unknown_difficulty_is_rejected():
    with pytest.raises(ValueError):
        xp_for(1, "legendary")


def test_mismatched_answer_slots_are_rejected():
    with pytest.raises(ValueError):
        score_session(make_questions(3), [0, 0], "easy")


def test_complete_persists_result_and_increments_leaderboard():
    store = ProgressStore()
    engine = ScoringEngine(store)

    outcome = engine.complete("u1", "Ada", "physics", "medium", make_questions(10), [0] * 6 + [None] * 4)

    assert outcome.saved
    assert outcome.result.score_percent == 60
    assert outcome.result.xp_earned == 90
    assert store.get_results_for_user("u1") == [outcome.result]
    entry = store.get_entry("u1")
    assert (entry.total_xp, entry.weekly_xp, entry.monthly_xp) == (90, 90, 90)

    engine.complete("u1", "Ada", "physics", "easy", make_questions(10), [0] * 10)
    entry = store.get_entry("u1")
    assert (entry.total_xp, entry.weekly_xp, entry.monthly_xp) == (190, 190, 190)


def test_leaderboard_failure_keeps_result_and_warns():
    store = ProgressStore()
    store.add_xp = Mock(side_effect=PersistenceFailure("leaderboard offline"))
    engine = ScoringEngine(store)

    outcome = engine.complete("u1", "Ada", "physics", "easy", make_questions(10), [0] * 7 + [None] * 3)

    assert outcome.score.score_percent == 70
    assert outcome.result is not None
    assert len(store.get_results_for_user("u1")) == 1
    assert outcome.warnings
    assert not outcome.saved


def test_result_failure_skips_leaderboard_but_keeps_score():
    store = ProgressStore()
    store.append_result = Mock(side_effect=PersistenceFailure("db offline"))
    store.add_xp = Mock()
    engine = ScoringEngine(store)

    outcome = engine.complete("u1", "Ada", "physics", "hard", make_questions(10), [0] * 10)

    assert outcome.score.xp_earned == 200
    assert outcome.result is None
    assert outcome.warnings == ["Failed to save quiz result."]
    store.add_xp.assert_not_called()
