from __future__ import annotations

import random
from typing import List, Optional

from .schemas import Question


def shuffle_options(question: Question, rng: Optional[random.Random] = None) -> Question:
    """Return a copy of ``question`` with its options in a random order.

    Uses a Fisher-Yates pass over the option indices; the correct answer index
    follows its option to the new position.
    """
    rng = rng or random
    indices: List[int] = list(range(len(question.options)))
    for i in range(len(indices) - 1, 0, -1):
        j = rng.randint(0, i)
        indices[i], indices[j] = indices[j], indices[i]

    return question.model_copy(
        update={
            "options": [question.options[idx] for idx in indices],
            "correct_answer": indices.index(question.correct_answer),
        }
    )
