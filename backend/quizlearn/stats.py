"""Per-user progress statistics.

``apply_outcome`` is the pure aggregation step. ``record_submission`` persists
a quiz result and the aggregated stats in one transaction, serialized per user.
"""

from __future__ import annotations

import threading
import weakref
from contextlib import contextmanager
from typing import Iterator, List, Tuple

from sqlalchemy import select
from sqlalchemy.orm import Session

from .errors import UserNotFound
from .models import QuizResultRecord, TopicStat, UserAccount
from .schemas import QuizOutcome, ScoreReport, TopicStats, UserStats
from .scoring import percentage, round_half_up


PASS_THRESHOLD = 70


def apply_outcome(stats: UserStats, outcome: QuizOutcome) -> UserStats:
    updated = stats.model_copy(deep=True)

    updated.total_quizzes += 1
    updated.total_questions += outcome.total_questions
    updated.correct_answers += outcome.correct_answers
    # Recomputed from running totals, never an average of averages
    updated.average_score = percentage(updated.correct_answers, updated.total_questions)

    if outcome.score >= PASS_THRESHOLD:
        updated.streak_count += 1
        updated.best_streak = max(updated.best_streak, updated.streak_count)
    else:
        updated.streak_count = 0

    topic = updated.topic_stats.setdefault(outcome.topic, TopicStats())
    topic.attempts += 1
    topic.total_score += outcome.score
    topic.average_score = round_half_up(topic.total_score / topic.attempts)
    topic.best_score = max(topic.best_score, outcome.score)

    return updated


def stats_from_row(user: UserAccount) -> UserStats:
    return UserStats(
        total_quizzes=user.total_quizzes,
        total_questions=user.total_questions,
        correct_answers=user.correct_answers,
        average_score=user.average_score,
        streak_count=user.streak_count,
        best_streak=user.best_streak,
        topic_stats={
            ts.topic: TopicStats(
                attempts=ts.attempts,
                total_score=ts.total_score,
                best_score=ts.best_score,
                average_score=ts.average_score,
            )
            for ts in user.topic_stats
        },
    )


def _write_stats(db: Session, user: UserAccount, stats: UserStats) -> None:
    user.total_quizzes = stats.total_quizzes
    user.total_questions = stats.total_questions
    user.correct_answers = stats.correct_answers
    user.average_score = stats.average_score
    user.streak_count = stats.streak_count
    user.best_streak = stats.best_streak

    rows = {ts.topic: ts for ts in user.topic_stats}
    for topic, values in stats.topic_stats.items():
        row = rows.get(topic)
        if row is None:
            row = TopicStat(user_id=user.id, topic=topic)
            user.topic_stats.append(row)
        row.attempts = values.attempts
        row.total_score = values.total_score
        row.best_score = values.best_score
        row.average_score = values.average_score
    db.add(user)


# Entries disappear once no submission for that user holds the lock
_locks: "weakref.WeakValueDictionary[int, threading.Lock]" = weakref.WeakValueDictionary()
_locks_guard = threading.Lock()


@contextmanager
def user_lock(user_id: int) -> Iterator[None]:
    with _locks_guard:
        lock = _locks.get(user_id)
        if lock is None:
            lock = threading.Lock()
            _locks[user_id] = lock
    with lock:
        yield


def record_submission(
    db: Session,
    user_id: int,
    *,
    topic: str,
    difficulty: str,
    report: ScoreReport,
    time_spent: int,
) -> Tuple[QuizResultRecord, UserStats]:
    """Persist one quiz result and fold it into the owner's stats.

    Both writes commit together; on any failure nothing is persisted.
    """
    with user_lock(user_id):
        try:
            user = db.execute(
                select(UserAccount).where(UserAccount.id == user_id).with_for_update()
                .execution_options(populate_existing=True)
            ).scalar_one_or_none()
            if user is None:
                raise UserNotFound(user_id)

            record = QuizResultRecord(
                user_id=user.id,
                topic=topic,
                difficulty=difficulty,
                total_questions=report.total_questions,
                correct_answers=report.correct_answers,
                score=report.score,
                time_spent=time_spent,
                questions=[r.model_dump(by_alias=True) for r in report.detailed_results],
            )
            db.add(record)

            updated = apply_outcome(
                stats_from_row(user),
                QuizOutcome(
                    topic=topic,
                    total_questions=report.total_questions,
                    correct_answers=report.correct_answers,
                    score=report.score,
                ),
            )
            _write_stats(db, user, updated)
            db.commit()
        except Exception:
            db.rollback()
            raise
        db.refresh(record)
    return record, updated


def recent_results(db: Session, user_id: int, limit: int = 10) -> List[QuizResultRecord]:
    return list(
        db.execute(
            select(QuizResultRecord)
            .where(QuizResultRecord.user_id == user_id)
            .order_by(QuizResultRecord.created_at.desc(), QuizResultRecord.id.desc())
            .limit(limit)
        ).scalars()
    )


def get_user_stats(db: Session, user_id: int) -> UserStats:
    user = db.get(UserAccount, user_id)
    if user is None:
        raise UserNotFound(user_id)
    return stats_from_row(user)
