"""Module quizzes and quiz attempt recording.

Questions are served with their correct answers: scoring happens
client-side, and the server stores the attempt it is told about.  The
achievement rules count passed and perfect (score == 100) attempts.
"""

from __future__ import annotations

import json
import logging
import time
from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from learning_curve.api.dependencies import Repos, get_repos, require_user
from learning_curve.models.catalog import Quiz, QuizQuestion
from learning_curve.models.principal import Principal
from learning_curve.models.progress import QuizAttempt

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/quizzes", tags=["quizzes"])
module_router = APIRouter(prefix="/v1/modules", tags=["quizzes"])


class QuizOut(BaseModel):
    id: int
    moduleId: int
    title: str
    description: str
    passingScore: int


class QuestionOut(BaseModel):
    id: int
    quizId: int
    question: str
    questionType: str
    options: list[str]
    correctAnswer: str
    explanation: str
    position: int


class AttemptIn(BaseModel):
    score: int = Field(ge=0, le=100)
    passed: bool
    answers: list[Any] = Field(default_factory=list)


class AttemptOut(BaseModel):
    id: int
    quizId: int
    score: int
    passed: bool
    completedAt: int


def _quiz_out(q: Quiz) -> QuizOut:
    return QuizOut(
        id=q.id,
        moduleId=q.module_id,
        title=q.title,
        description=q.description,
        passingScore=q.passing_score,
    )


def _question_out(q: QuizQuestion) -> QuestionOut:
    return QuestionOut(
        id=q.id,
        quizId=q.quiz_id,
        question=q.question,
        questionType=q.question_type,
        options=list(q.options),
        correctAnswer=q.correct_answer,
        explanation=q.explanation,
        position=q.position,
    )


def _attempt_out(a: QuizAttempt) -> AttemptOut:
    return AttemptOut(
        id=a.id, quizId=a.quiz_id, score=a.score, passed=a.passed, completedAt=a.completed_at
    )


async def _require_quiz(repos: Repos, quiz_id: int) -> Quiz:
    quiz = await repos.catalog.get_quiz(quiz_id)
    if quiz is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"message": "Quiz not found"},
        )
    return quiz


# --- GET /v1/modules/{module_id}/quiz ----------------------------------------


@module_router.get("/{module_id}/quiz", response_model=QuizOut)
async def get_module_quiz(
    module_id: int, repos: Annotated[Repos, Depends(get_repos)]
) -> QuizOut:
    quiz = await repos.catalog.get_quiz_for_module(module_id)
    if quiz is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"message": "No quiz for this module"},
        )
    return _quiz_out(quiz)


# --- GET /v1/quizzes/{quiz_id}/questions ------------------------------------


@router.get("/{quiz_id}/questions", response_model=list[QuestionOut])
async def list_questions(
    quiz_id: int, repos: Annotated[Repos, Depends(get_repos)]
) -> list[QuestionOut]:
    await _require_quiz(repos, quiz_id)
    return [_question_out(q) for q in await repos.catalog.list_quiz_questions(quiz_id)]


# --- Attempts -----------------------------------------------------------------


@router.post(
    "/{quiz_id}/attempts",
    response_model=AttemptOut,
    status_code=status.HTTP_201_CREATED,
)
async def submit_attempt(
    quiz_id: int,
    payload: AttemptIn,
    principal: Annotated[Principal, Depends(require_user)],
    repos: Annotated[Repos, Depends(get_repos)],
) -> AttemptOut:
    await _require_quiz(repos, quiz_id)
    attempt = await repos.progress.add_quiz_attempt(
        user_id=principal.user_id,
        quiz_id=quiz_id,
        score=payload.score,
        passed=payload.passed,
        answers_json=json.dumps(payload.answers),
        completed_at=int(time.time()),
    )
    logger.info(
        "Quiz attempt user_id=%d quiz_id=%d score=%d passed=%s",
        principal.user_id,
        quiz_id,
        payload.score,
        payload.passed,
    )
    return _attempt_out(attempt)


@router.get("/{quiz_id}/attempts", response_model=list[AttemptOut])
async def list_attempts(
    quiz_id: int,
    principal: Annotated[Principal, Depends(require_user)],
    repos: Annotated[Repos, Depends(get_repos)],
) -> list[AttemptOut]:
    await _require_quiz(repos, quiz_id)
    attempts = await repos.progress.list_quiz_attempts(principal.user_id, quiz_id)
    return [_attempt_out(a) for a in attempts]
