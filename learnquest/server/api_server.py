"""FastAPI server exposing the quiz, leaderboard and stats endpoints."""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import quote, unquote
from uuid import uuid4

from fastapi import Depends, FastAPI, HTTPException, Query, Request, Response
from pydantic import BaseModel, Field
import uvicorn

from learnquest.constants.about import APP_ABOUT_TEXT, APP_LICENSE, APP_NAME, APP_VERSION
from learnquest.constants.network_constants import DEFAULT_HOST, DEFAULT_PORT
from learnquest.constants.quiz_constants import (
    DEFAULT_DIFFICULTY,
    DEFAULT_LEADERBOARD_LIMIT,
    DIFFICULTIES,
    LEADERBOARD_METRICS,
    MAX_QUESTION_COUNT,
    SUBJECT_TOPICS,
    XP_PER_CORRECT_ANSWER,
)
from learnquest.core.errors import InvalidTransition, NoQuestionsAvailable, SourceUnavailable
from learnquest.core.markdown_renderer import renderer
from learnquest.core.name_assigner import NameAssigner
from learnquest.core.quiz_manager import QuizManager, QuizView
from learnquest.core.services.scoring import QuizOutcome

_IDENTITY_COOKIE = "learnquest_learner"
_USER_ID_HEADER = "x-user-id"
_DISPLAY_NAME_HEADER = "x-display-name"


@dataclass(frozen=True, slots=True)
class Learner:
    """Identity of the caller, from auth headers or the anonymous cookie."""

    user_id: str
    display_name: str


def _encode_identity_cookie(learner: Learner) -> str:
    return f"{learner.user_id}|{quote(learner.display_name)}"


def _decode_identity_cookie(value: str | None) -> Learner | None:
    if not value or "|" not in value:
        return None
    user_id, display_name = value.split("|", 1)
    if not user_id or not display_name:
        return None
    return Learner(user_id=user_id, display_name=unquote(display_name))


def _ensure_learner(request: Request, response: Response, assigner: NameAssigner) -> Learner:
    user_id = request.headers.get(_USER_ID_HEADER)
    if user_id:
        return Learner(user_id=user_id, display_name=request.headers.get(_DISPLAY_NAME_HEADER) or user_id)

    learner = _decode_identity_cookie(request.cookies.get(_IDENTITY_COOKIE))
    if learner is not None:
        return learner
    learner = Learner(user_id=uuid4().hex, display_name=assigner.next_name())
    response.set_cookie(
        key=_IDENTITY_COOKIE,
        value=_encode_identity_cookie(learner),
        max_age=60 * 60 * 24 * 30,
        samesite="lax",
        httponly=True,
    )
    return learner


class GeneratePayload(BaseModel):
    """Payload schema for starting a quiz."""

    topic: str = Field(min_length=1)
    difficulty: str = DEFAULT_DIFFICULTY
    amount: int | None = Field(default=None, ge=1, le=MAX_QUESTION_COUNT)
    subject: str | None = None


class AnswerPayload(BaseModel):
    """Payload schema for submitted answers."""

    selected_option_index: int


class GoToPayload(BaseModel):
    """Payload schema for jumping to a reached question."""

    index: int


def _serialize_view(view: QuizView) -> dict[str, object]:
    question = view.question
    return {
        "state": view.state.value,
        "topic": view.topic,
        "difficulty": view.difficulty,
        "question_id": question.id if question else None,
        "question_html": renderer.render_fragment(question.prompt) if question else None,
        "question_text": question.prompt if question else None,
        "options": list(question.options) if question else [],
        "category": question.category if question else None,
        "selected_option_index": view.selected_option_index,
        "question_number": view.question_number,
        "total_questions": view.total_questions,
        "answered_count": view.answered_count,
        "remaining_seconds": view.remaining_seconds,
        "remaining_display": view.remaining_display,
        "progress": view.progress,
        "error": view.last_error,
    }


def _serialize_outcome(outcome: QuizOutcome) -> dict[str, object]:
    score = outcome.score
    return {
        "topic": outcome.topic,
        "difficulty": outcome.difficulty,
        "correct_count": score.correct_count,
        "total_questions": score.total_questions,
        "score_percent": score.score_percent,
        "xp_earned": score.xp_earned,
        "saved": outcome.saved,
        "warnings": list(outcome.warnings),
        "review": [
            {
                "question_id": item.question_id,
                "question_text": item.prompt,
                "options": item.options,
                "selected_option_index": item.selected_option_index,
                "correct_option_index": item.correct_option_index,
                "is_correct": item.is_correct,
            }
            for item in score.review
        ],
    }


def _get_quiz_manager_dependency(quiz_manager: QuizManager):
    def dependency() -> QuizManager:
        return quiz_manager

    return dependency


def create_api_app(quiz_manager: QuizManager, name_assigner: NameAssigner | None = None) -> FastAPI:
    """Create a FastAPI application wired to the provided quiz manager."""
    app = FastAPI(
        title=f"{APP_NAME} API",
        description=APP_ABOUT_TEXT,
        version=APP_VERSION,
        license_info={"name": APP_LICENSE},
    )
    quiz_manager_dep = _get_quiz_manager_dependency(quiz_manager)
    assigner = name_assigner or NameAssigner()

    def learner_dep(request: Request, response: Response) -> Learner:
        return _ensure_learner(request, response, assigner)

    @app.get("/topics")
    def get_topics() -> dict[str, object]:
        return {
            "subjects": {subject: list(topics) for subject, topics in SUBJECT_TOPICS.items()},
            "difficulties": [
                {"id": difficulty, "xp_per_correct_answer": XP_PER_CORRECT_ANSWER[difficulty]}
                for difficulty in DIFFICULTIES
            ],
        }

    @app.get("/identity")
    def get_identity(learner: Learner = Depends(learner_dep)) -> dict[str, object]:
        return {"user_id": learner.user_id, "display_name": learner.display_name}

    @app.post("/quiz/generate", status_code=201)
    def generate_quiz(
        payload: GeneratePayload,
        learner: Learner = Depends(learner_dep),
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        try:
            view = manager.generate_quiz(
                learner.user_id,
                learner.display_name,
                payload.topic,
                payload.difficulty,
                payload.amount,
                subject=payload.subject,
            )
        except SourceUnavailable as exc:
            raise HTTPException(status_code=502, detail="Failed to generate quiz. Please try again.") from exc
        except NoQuestionsAvailable as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        except ValueError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        except InvalidTransition as exc:
            raise HTTPException(status_code=409, detail=str(exc)) from exc
        return _serialize_view(view)

    @app.get("/quiz")
    def get_quiz(
        learner: Learner = Depends(learner_dep),
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        return _serialize_view(manager.get_quiz_view(learner.user_id))

    @app.post("/answer")
    def submit_answer(
        payload: AnswerPayload,
        learner: Learner = Depends(learner_dep),
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        try:
            view = manager.select_answer(learner.user_id, payload.selected_option_index)
        except ValueError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        except InvalidTransition as exc:
            raise HTTPException(status_code=409, detail=str(exc)) from exc
        return _serialize_view(view)

    @app.post("/quiz/next")
    def next_question(
        learner: Learner = Depends(learner_dep),
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        try:
            view = manager.next_question(learner.user_id)
        except InvalidTransition as exc:
            raise HTTPException(status_code=409, detail=str(exc)) from exc
        return _serialize_view(view)

    @app.post("/quiz/previous")
    def previous_question(
        learner: Learner = Depends(learner_dep),
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        try:
            view = manager.previous_question(learner.user_id)
        except InvalidTransition as exc:
            raise HTTPException(status_code=409, detail=str(exc)) from exc
        return _serialize_view(view)

    @app.post("/quiz/goto")
    def go_to_question(
        payload: GoToPayload,
        learner: Learner = Depends(learner_dep),
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        try:
            view = manager.go_to_question(learner.user_id, payload.index)
        except ValueError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        except InvalidTransition as exc:
            raise HTTPException(status_code=409, detail=str(exc)) from exc
        return _serialize_view(view)

    @app.post("/quiz/finish")
    def finish_quiz(
        learner: Learner = Depends(learner_dep),
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        try:
            outcome = manager.finish_quiz(learner.user_id)
        except InvalidTransition as exc:
            raise HTTPException(status_code=409, detail=str(exc)) from exc
        return _serialize_outcome(outcome)

    @app.post("/quiz/abandon", status_code=204)
    def abandon_quiz(
        learner: Learner = Depends(learner_dep),
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> None:
        manager.abandon_quiz(learner.user_id)

    @app.get("/quiz/results")
    def get_results(
        learner: Learner = Depends(learner_dep),
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        outcome = manager.get_outcome(learner.user_id)
        if outcome is None:
            raise HTTPException(status_code=404, detail="No completed quiz to show.")
        return _serialize_outcome(outcome)

    @app.get("/leaderboard")
    def get_leaderboard(
        metric: str = Query("total"),
        limit: int = Query(DEFAULT_LEADERBOARD_LIMIT, ge=1, le=500),
        learner: Learner = Depends(learner_dep),
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        if metric not in LEADERBOARD_METRICS:
            raise HTTPException(status_code=422, detail=f"Metric must be one of {', '.join(LEADERBOARD_METRICS)}.")
        entries = manager.get_leaderboard(metric, limit=limit)
        return {
            "metric": metric,
            "current_user_rank": manager.get_learner_rank(learner.user_id, metric),
            "entries": [
                {
                    "rank": entry.rank,
                    "user_id": entry.user_id,
                    "display_name": entry.display_name,
                    "value": entry.value,
                    "total_xp": entry.total_xp,
                    "weekly_xp": entry.weekly_xp,
                    "monthly_xp": entry.monthly_xp,
                }
                for entry in entries
            ],
        }

    @app.get("/stats")
    def get_stats(
        learner: Learner = Depends(learner_dep),
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        stats = manager.get_learner_stats(learner.user_id)
        return {
            "total_quizzes": stats.total_quizzes,
            "average_score": stats.average_score,
            "favorite_topic": stats.favorite_topic,
            "current_streak": stats.current_streak,
        }

    return app


def run_api_server(
    quiz_manager: QuizManager,
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
) -> None:
    """Serve the API with uvicorn until interrupted."""
    app = create_api_app(quiz_manager)
    config = uvicorn.Config(app=app, host=host, port=port, log_level="info")
    uvicorn.Server(config).run()
