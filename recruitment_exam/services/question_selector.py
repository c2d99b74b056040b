"""
services/question_selector.py

Branch-aware question selection.
Public API:
  - classify_branch(branch) -> BranchGroup
  - select_questions(branch, count, bank, rng) -> List[Question]

Each branch group draws a fixed quota from every category pool (truncating
slice, never an error when a pool is short), the draw is shuffled uniformly
and cut down to the requested count.
"""

import random
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

from config import DEFAULT_QUESTION_COUNT
from recruitment_exam.models.question_model import Category, Question
from recruitment_exam.services.question_bank import QUESTION_BANK, questions_by_category


class BranchGroup(str, Enum):
    COMPUTER = "computer"
    ELECTRONICS = "electronics"
    OTHER = "other"


_BRANCH_KEYWORDS: Tuple[Tuple[BranchGroup, Tuple[str, ...]], ...] = (
    (BranchGroup.COMPUTER, ("computer", "information")),
    (BranchGroup.ELECTRONICS, ("electronics", "electrical")),
)

# Concatenation order matters only before the shuffle.
QUOTAS: Dict[BranchGroup, Tuple[Tuple[Category, int], ...]] = {
    BranchGroup.COMPUTER: (
        (Category.TECHNICAL, 15),
        (Category.GENERAL, 5),
    ),
    BranchGroup.ELECTRONICS: (
        (Category.TECHNICAL, 8),
        (Category.ELECTRONICS, 7),
        (Category.GENERAL, 5),
    ),
    BranchGroup.OTHER: (
        (Category.TECHNICAL, 10),
        (Category.GENERAL, 10),
    ),
}


def classify_branch(branch: str) -> BranchGroup:
    lowered = (branch or "").lower()
    for group, keywords in _BRANCH_KEYWORDS:
        if any(k in lowered for k in keywords):
            return group
    return BranchGroup.OTHER


def select_questions(
    branch: str,
    count: int = DEFAULT_QUESTION_COUNT,
    bank: Optional[Sequence[Question]] = None,
    rng: Optional[random.Random] = None,
) -> List[Question]:
    """
    Build the question list for one candidate.

    Args:
        branch: Candidate's branch, matched case-insensitively by substring.
        count:  Upper bound on the number of questions returned.
        bank:   Question catalog (defaults to the built-in bank).
        rng:    Random source; pass a seeded ``random.Random`` for repeatable draws.

    Returns:
        min(count, quota total) questions in random order, no duplicates.
    """
    source = list(QUESTION_BANK if bank is None else bank)
    group = classify_branch(branch)

    drawn: List[Question] = []
    for category, quota in QUOTAS[group]:
        drawn.extend(questions_by_category(category, source)[:quota])

    (rng or random).shuffle(drawn)
    return drawn[:max(0, count)]
