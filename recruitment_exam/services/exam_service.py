"""
services/exam_service.py

Grading and result analysis.
Pure Python functions: no I/O, no global state changes.
"""

from collections import defaultdict
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from recruitment_exam.models.question_model import Answer, Question
from recruitment_exam.models.result_model import Grade, ScoreSummary

# (lower bound inclusive, grade, message), highest band first.
GRADE_BANDS: Tuple[Tuple[int, str, str], ...] = (
    (90, "A+", "Outstanding Performance!"),
    (80, "A", "Excellent Work!"),
    (70, "B+", "Good Performance!"),
    (60, "B", "Satisfactory!"),
    (50, "C", "Needs Improvement!"),
    (0, "F", "Better Luck Next Time!"),
)


def _percent(part: int, whole: int) -> int:
    # Half-up, so 12.5 -> 13 as candidates expect.
    value = Decimal(100 * part) / Decimal(whole)
    return int(value.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def grade_answer(question: Question, selected: Optional[int]) -> Answer:
    """Build the Answer for one question. ``selected`` None means skipped."""
    return Answer(
        question_id=question.id,
        selected_option=selected,
        is_correct=selected is not None and selected == question.correct_option,
    )


def grade_answers(
    questions: Sequence[Question],
    selections: Mapping[str, Optional[int]],
) -> List[Answer]:
    """
    Build the full answer sheet, one Answer per question in ``questions`` order.

    Args:
        questions:  Questions served to the candidate.
        selections: {question.id: chosen option index}. Missing ids are
                    recorded as skipped (incorrect). Ids outside
                    ``questions`` are ignored.
    """
    return [grade_answer(q, selections.get(q.id)) for q in questions]


def calculate_score(answers: Sequence[Answer]) -> ScoreSummary:
    """
    Count correct answers and convert to a whole percentage.

    ``answers`` must not be empty: scoring an empty sheet raises
    ZeroDivisionError.
    """
    score = sum(1 for a in answers if a.is_correct)
    total = len(answers)
    if total == 0:
        raise ZeroDivisionError("cannot score an empty answer sheet")
    return ScoreSummary(score=score, percentage=_percent(score, total))


def grade_of(percentage: int) -> Grade:
    """Step function over GRADE_BANDS; each band includes its lower edge."""
    for lower, grade, message in GRADE_BANDS:
        if percentage >= lower:
            return Grade(grade=grade, message=message)
    return Grade(grade=GRADE_BANDS[-1][1], message=GRADE_BANDS[-1][2])


def calculate_category_scores(
    questions: Sequence[Question],
    answers: Sequence[Answer],
) -> List[Dict[str, object]]:
    """
    Per-category breakdown for the result screen.

    Returns:
        [{"category": str, "total": int, "correct": int,
          "incorrect": int, "unanswered": int, "percentage": int}, ...]
        sorted by category name.
    """
    by_id = {a.question_id: a for a in answers}
    buckets: Dict[str, Dict[str, int]] = defaultdict(
        lambda: {"total": 0, "correct": 0, "incorrect": 0, "unanswered": 0}
    )

    for q in questions:
        b = buckets[q.category.value]
        b["total"] += 1
        answer = by_id.get(q.id)
        if answer is None or answer.selected_option is None:
            b["unanswered"] += 1
        elif answer.is_correct:
            b["correct"] += 1
        else:
            b["incorrect"] += 1

    result = []
    for name in sorted(buckets):
        b = buckets[name]
        result.append({"category": name, **b, "percentage": _percent(b["correct"], b["total"])})
    return result
