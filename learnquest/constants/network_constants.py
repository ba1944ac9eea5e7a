"""Network configuration constants for LearnQuest."""

DEFAULT_HOST: str = "0.0.0.0"
DEFAULT_PORT: int = 8000

OPEN_TRIVIA_URL: str = "https://opentdb.com/api.php"
OPEN_TRIVIA_TIMEOUT_SECONDS: float = 10.0

# Open Trivia DB category ids.
SCIENCE_CATEGORY_ID: int = 17
MATHEMATICS_CATEGORY_ID: int = 19

SCIENCE_TOPICS: frozenset[str] = frozenset(
    {"general", "science", "physics", "chemistry", "biology", "nature"}
)
MATH_TOPICS: frozenset[str] = frozenset(
    {"math", "maths", "mathematics", "algebra", "geometry", "statistics", "calculus"}
)
