"""Quiz-related constants shared across the core and API layers."""

DEFAULT_QUESTION_COUNT: int = 10
MAX_QUESTION_COUNT: int = 50
DEFAULT_TIME_LIMIT_SECONDS: int = 300
TIMER_TICK_SECONDS: float = 1.0

DIFFICULTIES: tuple[str, ...] = ("easy", "medium", "hard")
DEFAULT_DIFFICULTY: str = "medium"

# XP awarded per correct answer, not scaled by the score percentage.
XP_PER_CORRECT_ANSWER: dict[str, int] = {
    "easy": 10,
    "medium": 15,
    "hard": 20,
}

SUBJECT_TOPICS: dict[str, tuple[str, ...]] = {
    "science": ("general", "physics", "chemistry", "biology"),
    "math": ("general", "algebra", "geometry", "statistics"),
}

LEADERBOARD_METRICS: tuple[str, ...] = ("total", "weekly", "monthly")
DEFAULT_LEADERBOARD_LIMIT: int = 50
