from __future__ import annotations

import math
from typing import List, Optional, Sequence

from .errors import AnswerCountMismatch
from .schemas import Question, QuestionResult, ScoreReport


def round_half_up(value: float) -> int:
    # Python's round() is banker's rounding; scores follow Math.round semantics
    return int(math.floor(value + 0.5))


def percentage(part: int, whole: int) -> int:
    if whole <= 0:
        return 0
    return round_half_up(part / whole * 100)


def score_quiz(questions: Sequence[Question], user_answers: Sequence[Optional[int]]) -> ScoreReport:
    """Grade position-aligned answers; ``None`` marks an unanswered question."""
    if len(questions) != len(user_answers) or not questions:
        raise AnswerCountMismatch(len(questions), len(user_answers))

    correct = 0
    details: List[QuestionResult] = []
    for question, answer in zip(questions, user_answers):
        is_correct = answer is not None and answer == question.correct_answer
        if is_correct:
            correct += 1
        details.append(
            QuestionResult(
                question=question.question,
                options=list(question.options),
                user_answer=answer,
                correct_answer=question.correct_answer,
                is_correct=is_correct,
                explanation=question.explanation,
            )
        )

    return ScoreReport(
        score=percentage(correct, len(questions)),
        correct_answers=correct,
        total_questions=len(questions),
        detailed_results=details,
    )
