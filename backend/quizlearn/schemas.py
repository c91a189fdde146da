from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictInt
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    # Wire format is camelCase; Python attributes stay snake_case
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Question(CamelModel):
    question: str
    options: List[str]
    correct_answer: StrictInt = Field(ge=0)
    explanation: str = ""
    difficulty: str = ""
    category: str = ""


class Quiz(CamelModel):
    id: str
    topic: str
    difficulty: str
    question_count: int
    questions: List[Question]
    created_at: str
    time_limit: int


class QuestionResult(CamelModel):
    question: str
    options: List[str]
    user_answer: Optional[StrictInt] = None
    correct_answer: StrictInt
    is_correct: bool
    explanation: str = ""


class ScoreReport(CamelModel):
    score: int
    correct_answers: int
    total_questions: int
    detailed_results: List[QuestionResult]


class QuizOutcome(CamelModel):
    topic: str
    total_questions: int
    correct_answers: int
    score: int


class TopicStats(CamelModel):
    attempts: int = 0
    total_score: int = 0
    best_score: int = 0
    average_score: int = 0


class UserStats(CamelModel):
    total_quizzes: int = 0
    total_questions: int = 0
    correct_answers: int = 0
    average_score: int = 0
    streak_count: int = 0
    best_streak: int = 0
    topic_stats: Dict[str, TopicStats] = Field(default_factory=dict)


class PublicUser(CamelModel):
    id: int
    full_name: str
    email: str
    created_at: datetime
