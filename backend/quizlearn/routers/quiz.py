from __future__ import annotations

import logging
from typing import List, Mapping, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field, StrictInt
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..db import get_db
from ..errors import InvalidDifficulty, UnknownTopic
from ..generation import generate_quiz
from ..llm_client import CompletionClient, get_completion_client
from ..schemas import PublicUser, Question
from ..scoring import score_quiz
from ..stats import record_submission
from ..topics import Topic, get_catalog
from .auth import get_current_user


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/quiz", tags=["quiz"])


class GenerateRequest(BaseModel):
    topic: str
    difficulty: str = "intermediate"
    questionCount: int = 5


class SubmitRequest(BaseModel):
    quizId: Optional[str] = None
    topic: str
    difficulty: str
    questions: List[Question]
    userAnswers: List[Optional[StrictInt]]
    timeSpent: int = Field(default=0, ge=0)


@router.post("/generate")
async def generate(
    req: GenerateRequest,
    user: PublicUser = Depends(get_current_user),
    client: CompletionClient = Depends(get_completion_client),
    catalog: Mapping[str, Topic] = Depends(get_catalog),
):
    logger.info(
        "Generating quiz: %s (%s) - %s questions for user %s",
        req.topic, req.difficulty, req.questionCount, user.id,
    )
    quiz = await generate_quiz(client, req.topic, req.difficulty, req.questionCount, catalog=catalog)
    logger.info("Generated %s questions for %s", quiz.question_count, quiz.topic)
    return {"success": True, "quiz": quiz.model_dump(by_alias=True)}


@router.post("/submit")
async def submit(
    req: SubmitRequest,
    user: PublicUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    catalog: Mapping[str, Topic] = Depends(get_catalog),
):
    topic_config = catalog.get(req.topic)
    if topic_config is None:
        raise UnknownTopic(req.topic)
    if req.difficulty not in topic_config.difficulty:
        raise InvalidDifficulty(req.difficulty, list(topic_config.difficulty))

    report = score_quiz(req.questions, req.userAnswers)
    try:
        record, stats = record_submission(
            db,
            user.id,
            topic=req.topic,
            difficulty=req.difficulty,
            report=report,
            time_spent=req.timeSpent,
        )
    except SQLAlchemyError:
        logger.exception("Quiz submission failed for user %s", user.id)
        raise HTTPException(status_code=500, detail="Failed to submit quiz results")

    logger.info("Quiz completed: user %s - %s - %s%%", user.id, req.topic, report.score)
    detailed = [r.model_dump(by_alias=True) for r in report.detailed_results]
    return {
        "success": True,
        "result": {
            "id": record.id,
            "quizId": req.quizId,
            "score": report.score,
            "correctAnswers": report.correct_answers,
            "totalQuestions": report.total_questions,
            "percentage": report.score,
            "timeSpent": req.timeSpent,
            "detailedResults": detailed,
        },
        "progress": stats.model_dump(by_alias=True),
    }
