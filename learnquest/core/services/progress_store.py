"""In-memory store for quiz results, leaderboard totals and learner activity."""

from __future__ import annotations

from datetime import datetime
from threading import Lock

from learnquest.core.models import ActivityRecord, LeaderboardEntry, QuizResult, utc_now


class ProgressStore:
    """Append-only quiz results plus additive leaderboard totals.

    Every method runs under a single lock, so each write is atomic and
    concurrent increments for the same learner both apply.
    """

    def __init__(self) -> None:
        self._lock = Lock()
        self._results: list[QuizResult] = []
        self._leaderboard: dict[str, LeaderboardEntry] = {}
        self._activities: list[ActivityRecord] = []

    # --- Quiz results ---

    def append_result(self, result: QuizResult) -> None:
        with self._lock:
            self._results.append(result)

    def get_results_for_user(self, user_id: str) -> list[QuizResult]:
        """Return the learner's results, newest first."""
        with self._lock:
            results = [r for r in self._results if r.user_id == user_id]
        return sorted(results, key=lambda r: r.created_at, reverse=True)

    # --- Leaderboard ---

    def add_xp(self, user_id: str, display_name: str, xp: int, updated_at: datetime | None = None) -> LeaderboardEntry:
        """Add ``xp`` to the learner's total, weekly and monthly XP."""
        if xp < 0:
            raise ValueError("XP increments cannot be negative.")
        with self._lock:
            entry = self._leaderboard.get(user_id)
            if entry is None:
                entry = LeaderboardEntry(user_id=user_id, display_name=display_name)
                self._leaderboard[user_id] = entry
            entry.total_xp += xp
            entry.weekly_xp += xp
            entry.monthly_xp += xp
            entry.last_updated = updated_at or utc_now()
            return _copy_entry(entry)

    def get_entry(self, user_id: str) -> LeaderboardEntry | None:
        with self._lock:
            entry = self._leaderboard.get(user_id)
            return _copy_entry(entry) if entry is not None else None

    def get_leaderboard(self) -> list[LeaderboardEntry]:
        with self._lock:
            return [_copy_entry(entry) for entry in self._leaderboard.values()]

    # --- Activity ---

    def log_activity(self, activity: ActivityRecord) -> None:
        with self._lock:
            self._activities.append(activity)

    def get_activities_for_user(self, user_id: str) -> list[ActivityRecord]:
        with self._lock:
            return [a for a in self._activities if a.user_id == user_id]


def _copy_entry(entry: LeaderboardEntry) -> LeaderboardEntry:
    return LeaderboardEntry(
        user_id=entry.user_id,
        display_name=entry.display_name,
        total_xp=entry.total_xp,
        weekly_xp=entry.weekly_xp,
        monthly_xp=entry.monthly_xp,
        last_updated=entry.last_updated,
    )
