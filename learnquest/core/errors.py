"""Exception types raised by the LearnQuest core."""

from __future__ import annotations


class LearnQuestError(Exception):
    """Base exception for all LearnQuest errors."""


class SourceUnavailable(LearnQuestError):
    """Raised when the question source errored or could not be reached."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class NoQuestionsAvailable(LearnQuestError):
    """Raised when the source has no questions for the requested topic/difficulty."""

    def __init__(self, message: str, response_code: int | None = None) -> None:
        self.response_code = response_code
        super().__init__(message)


class PersistenceFailure(LearnQuestError):
    """Raised when a quiz result, leaderboard update or activity cannot be written."""


class InvalidTransition(RuntimeError):
    """Raised when a quiz session operation is not allowed in its current state."""

    def __init__(self, operation: str, state: object) -> None:
        self.operation = operation
        self.state = state
        super().__init__(f"Cannot {operation} while the quiz is {state}.")
