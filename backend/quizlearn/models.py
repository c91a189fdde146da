from __future__ import annotations
from datetime import datetime
from sqlalchemy import Boolean, Column, String, DateTime, ForeignKey, Integer, JSON
from sqlalchemy.orm import relationship
from .db import Base


class UserAccount(Base):
	__tablename__ = "users"
	id = Column(Integer, primary_key=True, autoincrement=True)
	full_name = Column(String(50), nullable=False)
	email = Column(String(256), unique=True, index=True, nullable=False)
	password_hash = Column(String(256), nullable=False)
	is_active = Column(Boolean, default=True, nullable=False)
	# Aggregated statistics, mutated only by stats.record_submission
	total_quizzes = Column(Integer, default=0, nullable=False)
	total_questions = Column(Integer, default=0, nullable=False)
	correct_answers = Column(Integer, default=0, nullable=False)
	average_score = Column(Integer, default=0, nullable=False)
	streak_count = Column(Integer, default=0, nullable=False)
	best_streak = Column(Integer, default=0, nullable=False)
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
	updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

	topic_stats = relationship("TopicStat", back_populates="user", lazy="selectin")


class TopicStat(Base):
	__tablename__ = "topic_stats"
	user_id = Column(Integer, ForeignKey("users.id"), primary_key=True)
	topic = Column(String(64), primary_key=True)
	attempts = Column(Integer, default=0, nullable=False)
	# Sum of per-quiz percentage scores, not a question count
	total_score = Column(Integer, default=0, nullable=False)
	best_score = Column(Integer, default=0, nullable=False)
	average_score = Column(Integer, default=0, nullable=False)

	user = relationship("UserAccount", back_populates="topic_stats")


class QuizResultRecord(Base):
	__tablename__ = "quiz_results"
	id = Column(Integer, primary_key=True, autoincrement=True)
	user_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
	topic = Column(String(64), nullable=False)
	difficulty = Column(String(16), nullable=False)
	total_questions = Column(Integer, nullable=False)
	correct_answers = Column(Integer, nullable=False)
	score = Column(Integer, nullable=False)
	time_spent = Column(Integer, default=0, nullable=False)
	questions = Column(JSON, nullable=False)  # per-question outcome records
	created_at = Column(DateTime, default=datetime.utcnow, index=True, nullable=False)
