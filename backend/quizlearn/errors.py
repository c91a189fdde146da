"""Domain errors raised by the quiz pipeline, scoring and stats layers.

Each error carries the HTTP status it maps to and a message that is safe to
show to the client. Upstream failures keep their diagnostic detail in
``str(exc)`` for logging, while ``public_message`` stays generic.
"""

from __future__ import annotations

from typing import Optional


class QuizLearnError(Exception):
    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None, *, public_message: Optional[str] = None) -> None:
        super().__init__(message or self.default_message)
        self.public_message = public_message or message or self.default_message


# ---- validation (400) ----

class ValidationFailure(QuizLearnError):
    status_code = 400


class UnknownTopic(ValidationFailure):
    def __init__(self, topic: object) -> None:
        super().__init__(f"Unknown topic '{topic}'. Valid topic is required")
        self.topic = topic


class InvalidDifficulty(ValidationFailure):
    def __init__(self, difficulty: object, valid: list[str]) -> None:
        super().__init__(f"Invalid difficulty '{difficulty}'. Valid options: {', '.join(valid)}")
        self.difficulty = difficulty
        self.valid = valid


class InvalidQuestionCount(ValidationFailure):
    def __init__(self, count: object, minimum: int, maximum: int) -> None:
        super().__init__(f"Question count must be between {minimum} and {maximum}")
        self.count = count


class AnswerCountMismatch(ValidationFailure):
    def __init__(self, questions: int, answers: int) -> None:
        super().__init__(
            f"Invalid quiz submission data: {questions} questions but {answers} answers"
        )
        self.questions = questions
        self.answers = answers


# ---- upstream generation service (502) ----

class UpstreamFailure(QuizLearnError):
    status_code = 502


class GenerationServiceError(UpstreamFailure):
    default_message = "Failed to generate quiz questions"

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message, public_message=self.default_message)


class MalformedQuestionData(UpstreamFailure):
    default_message = "Failed to parse quiz questions from AI response"

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message, public_message=self.default_message)


class InvalidQuestionFormat(MalformedQuestionData):
    def __init__(self, index: int) -> None:
        super().__init__(f"Invalid question format at index {index}")
        self.index = index


# ---- persistence ----

class UserNotFound(QuizLearnError):
    status_code = 404

    def __init__(self, user_id: object) -> None:
        super().__init__(f"User {user_id} not found", public_message="User not found")
        self.user_id = user_id
