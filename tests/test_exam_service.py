import pytest

from recruitment_exam.models.question_model import Answer, Category, Question
from recruitment_exam.services.exam_service import (
    calculate_category_scores, calculate_score, grade_answer, grade_answers, grade_of,
)


def _q(qid, category=Category.GENERAL, correct=1):
    return Question(id=qid, text=f"Q{qid}", options=["a", "b", "c", "d"],
                    correct_option=correct, category=category)


def _answers(correct, wrong):
    return (
        [Answer(question_id=str(i), selected_option=0, is_correct=True) for i in range(correct)]
        + [Answer(question_id=f"w{i}", selected_option=1, is_correct=False) for i in range(wrong)]
    )


@pytest.mark.parametrize("correct, wrong, percentage", [
    (20, 0, 100),
    (0, 20, 0),
    (15, 5, 75),
    (1, 2, 33),
    (2, 1, 67),
    (1, 7, 13),   # 12.5 rounds half-up
    (1, 0, 100),
])
def test_calculate_score(correct, wrong, percentage):
    summary = calculate_score(_answers(correct, wrong))
    assert summary.score == correct
    assert summary.percentage == percentage
    assert 0 <= summary.percentage <= 100


def test_empty_answer_sheet_is_a_precondition_violation():
    with pytest.raises(ZeroDivisionError):
        calculate_score([])


@pytest.mark.parametrize("percentage, grade, message", [
    (100, "A+", "Outstanding Performance!"),
    (95, "A+", "Outstanding Performance!"),
    (90, "A+", "Outstanding Performance!"),
    (89, "A", "Excellent Work!"),
    (80, "A", "Excellent Work!"),
    (79, "B+", "Good Performance!"),
    (70, "B+", "Good Performance!"),
    (60, "B", "Satisfactory!"),
    (59, "C", "Needs Improvement!"),
    (50, "C", "Needs Improvement!"),
    (49, "F", "Better Luck Next Time!"),
    (0, "F", "Better Luck Next Time!"),
])
def test_grade_of(percentage, grade, message):
    result = grade_of(percentage)
    assert result.grade == grade
    assert result.message == message


def test_grade_answer():
    q = _q("1", correct=2)
    assert grade_answer(q, 2).is_correct
    assert not grade_answer(q, 1).is_correct
    skipped = grade_answer(q, None)
    assert skipped.selected_option is None
    assert not skipped.is_correct


def test_grade_answers_keeps_question_order_and_ignores_unknown_ids():
    questions = [_q("1"), _q("2"), _q("3")]
    sheet = grade_answers(questions, {"3": 1, "1": 0, "999": 1})
    assert [a.question_id for a in sheet] == ["1", "2", "3"]
    assert [a.is_correct for a in sheet] == [False, False, True]
    assert sheet[1].selected_option is None


def test_category_scores():
    questions = [
        _q("1", Category.TECHNICAL),
        _q("2", Category.TECHNICAL),
        _q("3", Category.GENERAL),
        _q("4", Category.ELECTRONICS),
    ]
    sheet = grade_answers(questions, {"1": 1, "2": 0, "3": 1})
    rows = {r["category"]: r for r in calculate_category_scores(questions, sheet)}

    assert list(rows) == ["Electronics", "General", "Technical"]
    assert rows["Technical"] == {
        "category": "Technical", "total": 2, "correct": 1,
        "incorrect": 1, "unanswered": 0, "percentage": 50,
    }
    assert rows["General"]["percentage"] == 100
    assert rows["Electronics"]["unanswered"] == 1
    assert rows["Electronics"]["percentage"] == 0


def test_answer_wire_names():
    doc = Answer(question_id="5", selected_option=2, is_correct=True).model_dump(by_alias=True)
    assert doc == {"questionId": "5", "selectedAnswer": 2, "isCorrect": True}
