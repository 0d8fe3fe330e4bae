"""Deterministic question generation for the addition/subtraction quiz.

Every question is one of six shapes: an operator (``+`` or ``-``) combined
with the term that is hidden behind a ``?`` (the result, the first operand or
the second operand).  All visible and hidden numbers stay in [1, 99] and no
subtraction ever goes negative.

Randomness comes from an injected ``RandomSource`` so that tests can pin the
exact stream.  ``SeededRng`` is the production implementation.
"""

from __future__ import annotations

import random
from collections.abc import Sequence
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Protocol, TypeVar

MIN_VALUE = 1
MAX_VALUE = 99
MAX_SINGLE_DIGIT = 9

T = TypeVar("T")


class RandomSource(Protocol):
    """Uniform integer source (inclusive bounds)."""

    def randint(self, a: int, b: int) -> int: ...

    def choice(self, seq: Sequence[T]) -> T: ...


class Operator(str, Enum):
    ADD = "add"
    SUBTRACT = "subtract"

    @property
    def symbol(self) -> str:
        return "+" if self is Operator.ADD else "-"


class BlankPosition(str, Enum):
    RESULT = "result"
    FIRST_OPERAND = "first_operand"
    SECOND_OPERAND = "second_operand"


@dataclass(frozen=True, slots=True)
class Question:
    id: int
    operand_a: int
    operand_b: int
    operator: Operator
    blank_position: BlankPosition
    correct_answer: int
    display_text: str
    user_answer: str = ""

    @property
    def result(self) -> int:
        """Value on the right-hand side of ``=``."""
        if self.operator is Operator.ADD:
            return self.operand_a + self.operand_b
        return self.operand_a - self.operand_b

    @property
    def answered(self) -> bool:
        return self.user_answer != ""

    @property
    def is_correct(self) -> bool:
        return self.answered and parse_integer(self.user_answer) == self.correct_answer

    def with_answer(self, raw: str) -> "Question":
        return replace(self, user_answer=str(raw))

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": int(self.id),
            "operand_a": int(self.operand_a),
            "operand_b": int(self.operand_b),
            "operator": self.operator.value,
            "blank_position": self.blank_position.value,
            "correct_answer": int(self.correct_answer),
            "display_text": str(self.display_text),
            "user_answer": str(self.user_answer),
        }

    @classmethod
    def from_dict(cls, data: object) -> "Question":
        if not isinstance(data, dict):
            raise ValueError("question record must be a mapping")
        try:
            question = cls(
                id=int(data["id"]),
                operand_a=int(data["operand_a"]),
                operand_b=int(data["operand_b"]),
                operator=Operator(data["operator"]),
                blank_position=BlankPosition(data["blank_position"]),
                correct_answer=int(data["correct_answer"]),
                display_text=str(data["display_text"]),
                user_answer=str(data.get("user_answer", "")),
            )
        except (KeyError, TypeError) as exc:
            raise ValueError(f"malformed question record: {exc}") from exc

        for name in ("operand_a", "operand_b", "correct_answer"):
            value = getattr(question, name)
            if not (MIN_VALUE <= value <= MAX_VALUE):
                raise ValueError(f"question {question.id}: {name}={value} out of range")
        if question.operator is Operator.SUBTRACT and question.operand_a < question.operand_b:
            raise ValueError(f"question {question.id}: negative difference")
        if question.display_text.count("?") != 1:
            raise ValueError(f"question {question.id}: display text must hide exactly one term")
        return question


def parse_integer(text: str) -> int | None:
    """Parse a typed answer; ``None`` when it is blank or not an integer.

    Surrounding whitespace is ignored.  Anything else that is not a plain
    base-10 integer, including trailing text (``"12abc"``) and digit-group
    underscores (``"2_8"``), is not a number and scores as wrong.
    """

    s = str(text).strip()
    if not s or "_" in s:
        return None
    try:
        return int(s)
    except ValueError:
        return None


class SeededRng:
    """Seeded RNG wrapper to keep deterministic streams explicit."""

    def __init__(self, seed: int | None = None) -> None:
        self._rng = random.Random(seed)

    def randint(self, a: int, b: int) -> int:
        return self._rng.randint(a, b)

    def choice(self, seq: Sequence[T]) -> T:
        return self._rng.choice(seq)


_OPERATORS = (Operator.ADD, Operator.SUBTRACT)
_BLANKS = (BlankPosition.RESULT, BlankPosition.FIRST_OPERAND, BlankPosition.SECOND_OPERAND)


def render_equation(
    operand_a: int,
    operator: Operator,
    operand_b: int,
    result: int,
    blank_position: BlankPosition,
) -> str:
    """Format ``a op b = r`` with the blank slot replaced by ``?``."""

    slots = {
        BlankPosition.FIRST_OPERAND: str(operand_a),
        BlankPosition.SECOND_OPERAND: str(operand_b),
        BlankPosition.RESULT: str(result),
    }
    slots[blank_position] = "?"
    return (
        f"{slots[BlankPosition.FIRST_OPERAND]} {operator.symbol} "
        f"{slots[BlankPosition.SECOND_OPERAND]} = {slots[BlankPosition.RESULT]}"
    )


def generate_question(id: int, *, rng: RandomSource) -> Question:
    """Build one question with a random operator and blank position."""

    operator = rng.choice(_OPERATORS)
    blank = rng.choice(_BLANKS)

    if operator is Operator.ADD:
        a, b, answer = _addition(rng, blank)
        result = a + b
    else:
        a, b, answer = _subtraction(rng, blank)
        result = a - b

    return Question(
        id=int(id),
        operand_a=a,
        operand_b=b,
        operator=operator,
        blank_position=blank,
        correct_answer=answer,
        display_text=render_equation(a, operator, b, result, blank),
    )


def _addition(rng: RandomSource, blank: BlankPosition) -> tuple[int, int, int]:
    if blank is BlankPosition.RESULT:
        # 34 + 9 = ?
        b = rng.randint(MIN_VALUE, MAX_SINGLE_DIGIT)
        a = rng.randint(MIN_VALUE, MAX_VALUE - b)
        return a, b, a + b

    # ? + 15 = 20 / 15 + ? = 20: the hidden operand is single-digit.
    x = rng.randint(MIN_VALUE, MAX_SINGLE_DIGIT)
    total = rng.randint(x + 1, MAX_VALUE)
    other = total - x
    if blank is BlankPosition.FIRST_OPERAND:
        return x, other, x
    return other, x, x


def _subtraction(rng: RandomSource, blank: BlankPosition) -> tuple[int, int, int]:
    if blank is BlankPosition.RESULT:
        # 34 - 9 = ?
        b = rng.randint(MIN_VALUE, MAX_SINGLE_DIGIT)
        a = rng.randint(b + 1, MAX_VALUE)
        return a, b, a - b

    # Single-digit subtrahend; minuend = difference + subtrahend <= 99.
    b = rng.randint(MIN_VALUE, MAX_SINGLE_DIGIT)
    diff = rng.randint(MIN_VALUE, MAX_VALUE - b)
    a = diff + b
    if blank is BlankPosition.FIRST_OPERAND:
        # ? - 5 = 10
        return a, b, a
    # 30 - ? = 23
    return a, b, b


def generate_questions(count: int, *, rng: RandomSource) -> tuple[Question, ...]:
    """Generate ``count`` questions with ids 1..count."""

    return tuple(generate_question(i, rng=rng) for i in range(1, int(count) + 1))


class QuestionGenerator:
    """Owns a seeded stream of questions.

    Used for sessions and for printable worksheets, which share the shape
    but never become a session.
    """

    def __init__(self, *, seed: int | None = None, rng: RandomSource | None = None) -> None:
        self._rng: RandomSource = rng if rng is not None else SeededRng(seed)

    @property
    def rng(self) -> RandomSource:
        return self._rng

    def next_question(self, id: int) -> Question:
        return generate_question(id, rng=self._rng)

    def question_set(self, count: int) -> tuple[Question, ...]:
        if int(count) < 1:
            raise ValueError("count must be >= 1")
        return generate_questions(count, rng=self._rng)
