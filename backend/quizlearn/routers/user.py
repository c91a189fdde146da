from __future__ import annotations

from typing import Mapping

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..db import get_db
from ..schemas import PublicUser
from ..stats import get_user_stats, recent_results
from ..topics import Topic, get_catalog
from .auth import get_current_user


router = APIRouter(prefix="/api/user", tags=["user"])

RECENT_ACTIVITY_LIMIT = 10


@router.get("/dashboard")
async def dashboard(
    user: PublicUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    catalog: Mapping[str, Topic] = Depends(get_catalog),
):
    stats = get_user_stats(db, user.id)
    recent = [
        {
            "topic": r.topic,
            "difficulty": r.difficulty,
            "score": r.score,
            "timestamp": r.created_at.isoformat(),
            "totalQuestions": r.total_questions,
            "correctAnswers": r.correct_answers,
        }
        for r in recent_results(db, user.id, RECENT_ACTIVITY_LIMIT)
    ]
    return {
        "success": True,
        "dashboard": {
            "user": {
                "name": user.full_name,
                "email": user.email,
                "joinDate": user.created_at.isoformat(),
            },
            "stats": stats.model_dump(by_alias=True),
            "recentActivity": recent,
            "availableTopics": [t.as_dict() for t in catalog.values()],
        },
    }
