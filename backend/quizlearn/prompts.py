from __future__ import annotations

from typing import Mapping, Optional

from .errors import InvalidDifficulty, InvalidQuestionCount, UnknownTopic
from .topics import TOPICS, Topic


MIN_QUESTIONS = 3
MAX_QUESTIONS = 20

# Topics whose questions should lean on time/space complexity reasoning
COMPLEXITY_TOPICS = frozenset({"algorithms", "datastructures"})

SYSTEM_INSTRUCTION = "You are an expert educator creating high-quality quiz questions. Always return valid JSON only."


def validate_request(
    topic: str,
    difficulty: str,
    question_count: int,
    catalog: Optional[Mapping[str, Topic]] = None,
) -> Topic:
    catalog = TOPICS if catalog is None else catalog
    topic_config = catalog.get(topic) if isinstance(topic, str) else None
    if topic_config is None:
        raise UnknownTopic(topic)
    if difficulty not in topic_config.difficulty:
        raise InvalidDifficulty(difficulty, list(topic_config.difficulty))
    if (
        isinstance(question_count, bool)
        or not isinstance(question_count, int)
        or not (MIN_QUESTIONS <= question_count <= MAX_QUESTIONS)
    ):
        raise InvalidQuestionCount(question_count, MIN_QUESTIONS, MAX_QUESTIONS)
    return topic_config


def build_question_prompt(
    topic: str,
    difficulty: str,
    question_count: int,
    catalog: Optional[Mapping[str, Topic]] = None,
) -> str:
    topic_config = validate_request(topic, difficulty, question_count, catalog)

    complexity_clause = ""
    if topic_config.id in COMPLEXITY_TOPICS:
        complexity_clause = (
            f"\nSpecial focus for {topic_config.id}:\n"
            "- Include time/space complexity analysis\n"
            "- Present real coding scenarios\n"
            "- Test understanding of when to use specific approaches\n"
            "- Include trade-offs between different solutions\n"
        )

    return f"""
Create {question_count} multiple choice questions about {topic_config.name} at {difficulty} difficulty level.

Topic Focus: {topic_config.description}

Difficulty Guidelines:
- beginner: Basic concepts, fundamental syntax, simple applications
- intermediate: Practical problem-solving, integration of concepts, real-world scenarios
- advanced: Complex optimization, edge cases, architectural decisions, performance considerations

Requirements:
1. Each question must have exactly 4 answer choices
2. Randomize the position of correct answers (don't always put correct answer first)
3. Include practical, scenario-based questions when possible
4. Provide clear, educational explanations
5. Focus on understanding rather than memorization
{complexity_clause}
Return response as valid JSON array only:
[
  {{
    "question": "Question text here?",
    "options": ["Choice A", "Choice B", "Choice C", "Choice D"],
    "correctAnswer": 2,
    "explanation": "Clear explanation of why this answer is correct and others are wrong.",
    "difficulty": "{difficulty}",
    "category": "{topic_config.id}"
  }}
]

No markdown formatting, no extra text, just the JSON array.
""".strip()
