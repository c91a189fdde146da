from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, Mapping, Tuple


DIFFICULTY_LEVELS: Tuple[str, ...] = ("beginner", "intermediate", "advanced")


@dataclass(frozen=True)
class Topic:
    id: str
    name: str
    description: str
    icon: str
    difficulty: Tuple[str, ...]
    subcategories: Tuple[str, ...]

    def as_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "icon": self.icon,
            "difficulty": list(self.difficulty),
            "subcategories": list(self.subcategories),
        }


def _catalog(*topics: Topic) -> Mapping[str, Topic]:
    return MappingProxyType({t.id: t for t in topics})


TOPICS: Mapping[str, Topic] = _catalog(
    Topic(
        id="javascript",
        name="JavaScript Mastery",
        description="Modern JavaScript programming and web development",
        icon="🟨",
        difficulty=DIFFICULTY_LEVELS,
        subcategories=("fundamentals", "es6+", "async", "dom-manipulation"),
    ),
    Topic(
        id="python",
        name="Python Programming",
        description="Learn Python for data science and web development",
        icon="🐍",
        difficulty=DIFFICULTY_LEVELS,
        subcategories=("basics", "oop", "libraries", "data-science"),
    ),
    Topic(
        id="algorithms",
        name="Algorithms & Problem Solving",
        description="Master algorithmic thinking and problem-solving techniques",
        icon="🧠",
        difficulty=DIFFICULTY_LEVELS,
        subcategories=("sorting", "searching", "graph-algorithms", "dynamic-programming"),
    ),
    Topic(
        id="datastructures",
        name="Data Structures",
        description="Learn essential data structures for efficient programming",
        icon="📊",
        difficulty=DIFFICULTY_LEVELS,
        subcategories=("arrays", "linked-lists", "trees", "hash-tables", "heaps"),
    ),
    Topic(
        id="webdevelopment",
        name="Web Development",
        description="Full-stack web development with modern frameworks",
        icon="🌐",
        difficulty=DIFFICULTY_LEVELS,
        subcategories=("html-css", "react", "nodejs", "databases"),
    ),
    Topic(
        id="machinelearning",
        name="Machine Learning",
        description="AI and machine learning concepts and applications",
        icon="🤖",
        difficulty=("intermediate", "advanced"),
        subcategories=("supervised", "unsupervised", "neural-networks", "deep-learning"),
    ),
)


def get_catalog() -> Mapping[str, Topic]:
    # FastAPI dependency; tests can override it with a smaller catalog
    return TOPICS
