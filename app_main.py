"""Application entry point for the LearnQuest quiz service."""

from __future__ import annotations

from learnquest.constants.network_constants import DEFAULT_HOST, DEFAULT_PORT
from learnquest.core.quiz_manager import QuizManager
from learnquest.core.settings import QuizSettings
from learnquest.server.api_server import run_api_server
from learnquest.utils.logging_config import configure_logging


def main() -> None:
    """Initialize logging, build the quiz manager and serve the API."""
    logger = configure_logging()
    settings = QuizSettings.from_env()
    logger.info(
        "Starting LearnQuest (%s questions, %ss timer) on %s:%s",
        settings.question_count,
        settings.time_limit_seconds,
        DEFAULT_HOST,
        DEFAULT_PORT,
    )

    quiz_manager = QuizManager(settings=settings)
    run_api_server(quiz_manager=quiz_manager, host=DEFAULT_HOST, port=DEFAULT_PORT)


if __name__ == "__main__":
    main()
