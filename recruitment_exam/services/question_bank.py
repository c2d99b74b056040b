"""
services/question_bank.py

Static question catalog. Built once at import time; Question is frozen.
"""

from typing import Dict, List, Optional

from recruitment_exam.models.question_model import Category, Question

_G = Category.GENERAL
_T = Category.TECHNICAL
_E = Category.ELECTRONICS


def _q(qid: str, category: Category, text: str, options: List[str], correct: int) -> Question:
    return Question(id=qid, category=category, text=text, options=options, correct_option=correct)


QUESTION_BANK: List[Question] = [
    _q("1", _G,
       "In rectangle ABCD, the diagonals AC and BD intersect at point E. If the area of the "
       "rectangle is 120 square units, what is the area of triangle EBC (the triangle with "
       "vertices E, B, C)?",
       ["30", "40", "60", "20"], 0),
    _q("2", _T,
       "What will the following code print in most C-like languages?  "
       "int a = 5, b = 2; print(a / b);",
       ["2", "2.5", "3", "Error"], 0),
    _q("3", _T,
       "In an ordered array, a search algorithm repeatedly divides the search interval in half "
       "until the target element is found or the interval becomes empty. What is the time "
       "complexity of this algorithm?",
       ["O(1)", "O(n)", "O(log n)", "O(n log n)"], 2),
    _q("4", _T,
       "What is the output of: print(2 ** 3 ** 2)",
       ["64", "512", "256", "8"], 1),
    _q("5", _T,
       "Which of the following represents a semantic HTML element?",
       ["<div>", "<section>", "<span>", "<b>"], 1),
    _q("6", _T,
       "Which CSS property is used to create rounded corners?",
       ["border-width", "border style", "border-radius", "border-round"], 2),
    _q("7", _T,
       "In the context of web communication, when a client requests a resource that does not "
       "exist on the server, the server responds with which HTTP status code?",
       ["200", "301", "404", "500"], 2),
    _q("8", _T,
       "In JavaScript, == and === differ because:",
       ["== checks value only, === checks value + type",
        "== checks type only, === checks value only",
        "Both are identical",
        "=== is only used in TypeScript"], 0),
    _q("9", _T,
       "Which of the following is a non-volatile memory?",
       ["RAM", "ROM", "Cache", "Register"], 1),
    _q("10", _T,
       "What does the following loop print?  for (i = 0; i < 3; i++) print(i);",
       ["012", "0123", "123", "0"], 0),
    _q("12", _T,
       "In binary, what is the result of 1011 + 110?",
       ["10001", "11001", "10000", "11101"], 0),
    _q("13", _G,
       "If in a certain code “CAT” is written as “DBU”, then “DOG” "
       "will be coded as:",
       ["EPH", "DPH", "EOH", "ENH"], 0),
    _q("14", _G,
       "Which is greater: log₂(16) or log₃(27)?",
       ["log₂(16)", "log₃(27)", "Both equal", "Cannot be compared"], 2),
    _q("15", _G,
       "A person faces North, turns 90° clockwise, then 180° clockwise, and again "
       "90° clockwise. Which direction is he facing now?",
       ["North", "East", "South", "West"], 0),
    _q("16", _G,
       "If 15 men can build a wall in 12 days, how many days will 10 men take?",
       ["12", "15", "18", "20"], 2),
    _q("17", _G,
       "The mean of five numbers is 20. If one number is excluded, the mean becomes 18. "
       "Find the excluded number.",
       ["30", "32", "28", "26"], 2),
    _q("18", _G,
       "If in a certain code, TABLE is written as YFQJK, how is CHAIR written in that code?",
       ["HMQWX", "HMPWX", "HMPWY", "GMPWY"], 1),
    _q("19", _G,
       "What is the sum of the squares of the roots of the equation x² − 6x + 8 = 0?",
       ["20", "34", "28", "16"], 0),
    _q("20", _G,
       "Five people (A, B, C, D, E) are sitting in a row. A is to the left of B and right of C. "
       "D is to the right of E and left of A. Who is sitting in the middle?",
       ["A", "B", "C", "D"], 3),
    _q("21", _E,
       "What is the primary function of a capacitor in an electronic circuit?",
       ["To amplify signals", "To store electrical energy",
        "To convert AC to DC", "To regulate voltage"], 1),
    _q("22", _E,
       "In digital electronics, what does NOT gate do?",
       ["Inverts the input signal", "Amplifies the input signal",
        "Stores the input signal", "Delays the input signal"], 0),
    _q("23", _E,
       "What is the unit of electrical resistance?",
       ["Volt", "Ampere", "Ohm", "Watt"], 2),
    _q("24", _T,
       "Which programming paradigm does Python primarily support?",
       ["Only procedural", "Only object-oriented", "Multi-paradigm", "Only functional"], 2),
    _q("25", _T,
       "What does API stand for?",
       ["Application Programming Interface", "Advanced Programming Integration",
        "Automated Program Instruction", "Application Process Integration"], 0),
    _q("26", _T,
       "In a database, what is a primary key?",
       ["The first column in a table", "A unique identifier for each record",
        "The most important data field", "A password for database access"], 1),
    _q("27", _G,
       "What is the result of 3! + 4! (factorial)?",
       ["30", "24", "18", "12"], 0),
    _q("28", _G,
       "If A = 1, B = 2, C = 3... what is the sum of letters in \"CODE\"?",
       ["31", "32", "33", "34"], 2),
    _q("29", _G,
       "What is the next number in the sequence: 2, 6, 12, 20, 30, ?",
       ["40", "42", "44", "46"], 1),
    _q("30", _E,
       "In electronics, what does LED stand for?",
       ["Light Emitting Diode", "Low Energy Device",
        "Linear Electronic Display", "Laser Emission Detector"], 0),
]

_BY_ID: Dict[str, Question] = {q.id: q for q in QUESTION_BANK}


def all_questions() -> List[Question]:
    return list(QUESTION_BANK)


def get_question(question_id: str) -> Optional[Question]:
    return _BY_ID.get(question_id)


def questions_by_category(category: Category, bank: Optional[List[Question]] = None) -> List[Question]:
    """Catalog order is preserved."""
    source = QUESTION_BANK if bank is None else bank
    return [q for q in source if q.category == category]
