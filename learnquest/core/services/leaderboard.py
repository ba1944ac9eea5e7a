"""Leaderboard ranking, recomputed from the stored totals on every read."""

from __future__ import annotations

from enum import Enum

from learnquest.constants.quiz_constants import LEADERBOARD_METRICS
from learnquest.core.models import LeaderboardEntry, RankedEntry


class RankingMethod(Enum):
    """How ranks continue after a tie."""

    STANDARD = "standard"  # 1, 1, 3
    DENSE = "dense"  # 1, 1, 2


def rank_entries(
    entries: list[LeaderboardEntry],
    metric: str = "total",
    limit: int | None = None,
    method: RankingMethod = RankingMethod.STANDARD,
) -> list[RankedEntry]:
    """Rank entries by ``metric`` descending, earlier updates first on ties.

    Entries with equal values share a rank. With the standard method the next
    smaller value takes its 1-based position, so ``[100, 100, 80]`` ranks as
    ``[1, 1, 3]``; the dense method yields ``[1, 1, 2]``.
    """
    if metric not in LEADERBOARD_METRICS:
        raise ValueError(f"Metric must be one of {', '.join(LEADERBOARD_METRICS)}.")
    if limit is not None and limit <= 0:
        raise ValueError("Limit must be a positive integer.")

    ordered = sorted(entries, key=lambda e: (-e.metric_value(metric), e.last_updated))

    ranked: list[RankedEntry] = []
    previous_value: int | None = None
    rank = 0
    for position, entry in enumerate(ordered, start=1):
        value = entry.metric_value(metric)
        if value != previous_value:
            rank = position if method is RankingMethod.STANDARD else rank + 1
            previous_value = value
        ranked.append(
            RankedEntry(
                rank=rank,
                user_id=entry.user_id,
                display_name=entry.display_name,
                value=value,
                total_xp=entry.total_xp,
                weekly_xp=entry.weekly_xp,
                monthly_xp=entry.monthly_xp,
            )
        )

    if limit is not None:
        return ranked[:limit]
    return ranked


def rank_for_user(ranked: list[RankedEntry], user_id: str) -> int | None:
    return next((entry.rank for entry in ranked if entry.user_id == user_id), None)
