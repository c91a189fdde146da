from __future__ import annotations

import json
import logging
import random
import time
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

from .errors import InvalidQuestionFormat, MalformedQuestionData
from .llm_client import CompletionClient
from .prompts import SYSTEM_INSTRUCTION, build_question_prompt, validate_request
from .schemas import Question, Quiz
from .shuffle import shuffle_options
from .topics import Topic

logger = logging.getLogger(__name__)

SECONDS_PER_QUESTION = 60
OPTIONS_PER_QUESTION = 4

_decoder = json.JSONDecoder()


def extract_json_array(text: str) -> List[Dict[str, Any]]:
    """Return the first well-formed JSON array of objects embedded in ``text``.

    Surrounding prose and markdown code fences are skipped. Arrays that do not
    hold objects (e.g. ``[1]`` in a sentence) are passed over.
    """
    start = text.find("[")
    while start != -1:
        try:
            value, _ = _decoder.raw_decode(text, start)
        except json.JSONDecodeError:
            value = None
        if isinstance(value, list) and value and all(isinstance(item, dict) for item in value):
            return value
        start = text.find("[", start + 1)
    raise MalformedQuestionData("No JSON array of questions found in completion")


def validate_question(raw: Dict[str, Any], index: int, *, difficulty: str, topic: str) -> Question:
    question_text = raw.get("question")
    options = raw.get("options")
    correct_answer = raw.get("correctAnswer")
    if not isinstance(question_text, str) or not question_text.strip():
        raise InvalidQuestionFormat(index)
    if not isinstance(options, list) or len(options) != OPTIONS_PER_QUESTION:
        raise InvalidQuestionFormat(index)
    if isinstance(correct_answer, bool) or not isinstance(correct_answer, int):
        raise InvalidQuestionFormat(index)
    if not (0 <= correct_answer < OPTIONS_PER_QUESTION):
        raise InvalidQuestionFormat(index)
    explanation = raw.get("explanation")
    return Question(
        question=question_text.strip(),
        options=[str(o).strip() for o in options],
        correct_answer=correct_answer,
        explanation=explanation.strip() if isinstance(explanation, str) else "",
        difficulty=str(raw.get("difficulty") or difficulty),
        category=str(raw.get("category") or topic),
    )


def parse_questions(content: str, question_count: int, *, difficulty: str, topic: str) -> List[Question]:
    items = extract_json_array(content)
    if len(items) < question_count:
        raise MalformedQuestionData(f"Expected {question_count} questions, got {len(items)}")
    return [
        validate_question(item, i, difficulty=difficulty, topic=topic)
        for i, item in enumerate(items[:question_count])
    ]


def new_quiz_id() -> str:
    return f"quiz_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"


async def generate_quiz(
    client: CompletionClient,
    topic: str,
    difficulty: str = "intermediate",
    question_count: int = 5,
    *,
    catalog: Optional[Mapping[str, Topic]] = None,
    rng: Optional[random.Random] = None,
) -> Quiz:
    # Reject bad input before spending a completion call
    validate_request(topic, difficulty, question_count, catalog)
    prompt = build_question_prompt(topic, difficulty, question_count, catalog)

    content = await client.complete(
        [
            {"role": "system", "content": SYSTEM_INSTRUCTION},
            {"role": "user", "content": prompt},
        ],
        temperature=0.9 if difficulty == "advanced" else 0.8,
    )

    try:
        questions = parse_questions(content, question_count, difficulty=difficulty, topic=topic)
    except MalformedQuestionData as err:
        logger.error("Quiz parse error: %s", err)
        logger.error("AI response: %s", content)
        raise

    shuffled = [shuffle_options(q, rng) for q in questions]
    return Quiz(
        id=new_quiz_id(),
        topic=topic,
        difficulty=difficulty,
        question_count=len(shuffled),
        questions=shuffled,
        created_at=datetime.now(timezone.utc).isoformat(),
        time_limit=len(shuffled) * SECONDS_PER_QUESTION,
    )
