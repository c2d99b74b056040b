import random

import pytest

from recruitment_exam.models.question_model import Category, Question
from recruitment_exam.services.question_bank import QUESTION_BANK, get_question
from recruitment_exam.services.question_selector import (
    BranchGroup, classify_branch, select_questions,
)

BRANCHES = [
    "Computer Science Engineering",
    "Information Technology",
    "Electronics & Communication",
    "Electrical Engineering",
    "Mechanical Engineering",
    "Civil Engineering",
    "",
    "???",
]


@pytest.mark.parametrize("branch, group", [
    ("Computer Science Engineering", BranchGroup.COMPUTER),
    ("INFORMATION TECHNOLOGY", BranchGroup.COMPUTER),
    ("Electronics & Communication", BranchGroup.ELECTRONICS),
    ("electrical engineering", BranchGroup.ELECTRONICS),
    ("Mechanical Engineering", BranchGroup.OTHER),
    ("", BranchGroup.OTHER),
])
def test_classify_branch(branch, group):
    assert classify_branch(branch) == group


def _counts(questions):
    counts = {c: 0 for c in Category}
    for q in questions:
        counts[q.category] += 1
    return counts


@pytest.mark.parametrize("branch", BRANCHES)
def test_selection_is_from_bank_without_duplicates(branch):
    picked = select_questions(branch, 20, rng=random.Random(1))
    ids = [q.id for q in picked]
    assert len(ids) == len(set(ids))
    assert all(get_question(i) is not None for i in ids)
    assert len(picked) <= 20


@pytest.mark.parametrize("branch", BRANCHES)
@pytest.mark.parametrize("n", [0, 1, 5, 12])
def test_returns_exactly_n_when_pool_is_large_enough(branch, n):
    assert len(select_questions(branch, n, rng=random.Random(n))) == n


def test_computer_quota():
    picked = select_questions("Computer Science Engineering", 20, rng=random.Random(3))
    counts = _counts(picked)
    # 13 technical questions exist in the bank, so the quota of 15 is capped
    assert counts[Category.TECHNICAL] == 13
    assert counts[Category.GENERAL] == 5
    assert counts[Category.ELECTRONICS] == 0


def test_electronics_quota():
    counts = _counts(select_questions("Electronics & Communication", 20, rng=random.Random(3)))
    assert counts[Category.TECHNICAL] == 8
    assert counts[Category.ELECTRONICS] == 4
    assert counts[Category.GENERAL] == 5


def test_other_quota():
    counts = _counts(select_questions("Civil Engineering", 20, rng=random.Random(3)))
    assert counts[Category.TECHNICAL] == 10
    assert counts[Category.GENERAL] == 10


def test_quota_draws_the_first_questions_of_each_pool():
    technical = [q.id for q in QUESTION_BANK if q.category == Category.TECHNICAL][:10]
    picked = {q.id for q in select_questions("Civil", 20, rng=random.Random(5))
              if q.category == Category.TECHNICAL}
    assert picked == set(technical)


def test_truncation_keeps_quota_bounds():
    picked = select_questions("Computer Science", 6, rng=random.Random(11))
    counts = _counts(picked)
    assert len(picked) == 6
    assert counts[Category.TECHNICAL] <= 15
    assert counts[Category.GENERAL] <= 5


def test_small_bank_never_errors():
    bank = [
        Question(id="a", text="q", options=["1", "2", "3", "4"], correct_option=0,
                 category=Category.GENERAL),
    ]
    assert [q.id for q in select_questions("computer", 20, bank=bank)] == ["a"]


def test_seeded_rng_is_repeatable():
    first = [q.id for q in select_questions("Mechanical", 20, rng=random.Random(42))]
    second = [q.id for q in select_questions("Mechanical", 20, rng=random.Random(42))]
    assert first == second


def test_order_is_shuffled():
    orders = {
        tuple(q.id for q in select_questions("Mechanical", 20, rng=random.Random(seed)))
        for seed in range(10)
    }
    assert len(orders) > 1
