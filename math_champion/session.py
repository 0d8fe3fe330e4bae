"""Test session state machine.

    NOT_STARTED -> ACTIVE -> COMPLETE

A ``Session`` is an immutable value.  The module-level functions are pure
transitions that return a new ``Session``; ``TestSessionController`` keeps the
current value for a UI and reports every change through an optional hook so
that callers can persist it.  Nothing here touches storage or time.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any

from .questions import (
    Question,
    QuestionGenerator,
    RandomSource,
    SeededRng,
    generate_questions,
    parse_integer,
)

logger = logging.getLogger(__name__)

__all__ = [
    "InvalidInput",
    "Phase",
    "Score",
    "Session",
    "SessionStateError",
    "TestSessionController",
    "Tier",
    "compute_score",
    "motivational_tier",
    "parse_integer",
    "reset_session",
    "start_session",
    "stop_early",
    "submit_answer",
]


class InvalidInput(ValueError):
    """Raised when a test cannot be started with the given name or count."""


class SessionStateError(RuntimeError):
    """Raised when a transition is requested in a phase that does not allow it."""


class Phase(str, Enum):
    NOT_STARTED = "not_started"
    ACTIVE = "active"
    COMPLETE = "complete"


class Tier(str, Enum):
    CHAMPION = "champion"
    GREAT = "great"
    TRY_AGAIN = "tryAgain"


@dataclass(frozen=True, slots=True)
class Score:
    correct: int
    answered: int
    percentage: float


@dataclass(frozen=True, slots=True)
class Session:
    candidate_name: str = ""
    questions: tuple[Question, ...] = ()
    current_index: int = 0
    phase: Phase = Phase.NOT_STARTED

    @property
    def total(self) -> int:
        return len(self.questions)

    @property
    def current_question(self) -> Question | None:
        if self.phase is not Phase.ACTIVE:
            return None
        if 0 <= self.current_index < len(self.questions):
            return self.questions[self.current_index]
        return None

    @property
    def progress(self) -> float:
        """Fraction of questions already passed, in [0.0, 1.0]."""
        if not self.questions:
            return 0.0
        return self.current_index / len(self.questions)

    def to_dict(self) -> dict[str, Any]:
        return {
            "candidate_name": self.candidate_name,
            "questions": [q.to_dict() for q in self.questions],
            "current_index": int(self.current_index),
            "phase": self.phase.value,
        }

    @classmethod
    def from_dict(cls, data: object) -> "Session":
        if not isinstance(data, dict):
            raise ValueError("session record must be a mapping")
        raw_questions = data.get("questions")
        if not isinstance(raw_questions, list):
            raise ValueError("session questions must be a list")
        questions = tuple(Question.from_dict(item) for item in raw_questions)
        try:
            phase = Phase(data.get("phase", Phase.NOT_STARTED.value))
            current_index = int(data.get("current_index", 0))
        except (TypeError, ValueError) as exc:
            raise ValueError(f"malformed session record: {exc}") from exc
        if not (0 <= current_index <= len(questions)):
            raise ValueError("current_index out of range")
        if phase is not Phase.NOT_STARTED and not questions:
            raise ValueError("started session has no questions")
        # submit_answer completes the test when the index reaches the end.
        if phase is Phase.ACTIVE and current_index >= len(questions):
            raise ValueError("active session has no current question")
        candidate_name = str(data.get("candidate_name", ""))
        if phase is not Phase.NOT_STARTED and not candidate_name.strip():
            raise ValueError("started session has no candidate name")
        return cls(
            candidate_name=candidate_name,
            questions=questions,
            current_index=current_index,
            phase=phase,
        )


def start_session(name: str, count: int, *, rng: RandomSource | None = None) -> Session:
    """Create an active session with ``count`` fresh questions."""

    candidate = str(name).strip()
    if candidate == "":
        raise InvalidInput("Please enter your name!")
    if isinstance(count, bool) or not isinstance(count, int) or count < 1:
        raise InvalidInput("Please enter a valid number of questions (minimum 1)!")

    questions = generate_questions(count, rng=rng if rng is not None else SeededRng())
    logger.info("Starting test for %r with %d questions", candidate, count)
    return Session(
        candidate_name=candidate,
        questions=questions,
        current_index=0,
        phase=Phase.ACTIVE,
    )


def submit_answer(session: Session, raw_answer: str) -> Session:
    """Record ``raw_answer`` verbatim on the current question and advance."""

    _require_active(session, "submit an answer")
    idx = session.current_index
    questions = list(session.questions)
    questions[idx] = questions[idx].with_answer(raw_answer)

    next_index = idx + 1
    phase = Phase.COMPLETE if next_index >= len(questions) else Phase.ACTIVE
    logger.debug("Question %d answered with %r", questions[idx].id, raw_answer)
    if phase is Phase.COMPLETE:
        logger.info("Test for %r complete", session.candidate_name)
    return replace(session, questions=tuple(questions), current_index=next_index, phase=phase)


def stop_early(session: Session, pending_raw_answer: str = "") -> Session:
    """End the test now; unanswered questions keep an empty answer."""

    _require_active(session, "stop the test")
    questions = session.questions
    idx = session.current_index
    if pending_raw_answer and idx < len(questions):
        updated = list(questions)
        updated[idx] = updated[idx].with_answer(pending_raw_answer)
        questions = tuple(updated)
    logger.info(
        "Test for %r stopped early at question %d of %d",
        session.candidate_name,
        idx + 1,
        len(questions),
    )
    return replace(session, questions=questions, phase=Phase.COMPLETE)


def reset_session() -> Session:
    return Session()


def compute_score(session: Session) -> Score:
    """Score answered questions only; blanks count neither for nor against."""

    answered = [q for q in session.questions if q.answered]
    correct = sum(1 for q in answered if parse_integer(q.user_answer) == q.correct_answer)
    percentage = (correct / len(answered)) * 100.0 if answered else 0.0
    return Score(correct=correct, answered=len(answered), percentage=percentage)


def motivational_tier(percentage: float) -> Tier:
    if percentage >= 100.0:
        return Tier.CHAMPION
    if percentage >= 75.0:
        return Tier.GREAT
    return Tier.TRY_AGAIN


def _require_active(session: Session, action: str) -> None:
    if session.phase is not Phase.ACTIVE:
        raise SessionStateError(f"cannot {action} while the test is {session.phase.value}")


class TestSessionController:
    """Holds the current session for a UI and notifies on every change.

    ``on_change`` receives the new ``Session`` after each transition.  It is
    the place to hook persistence; the controller never saves anything
    itself.
    """

    # Not a pytest test class despite the name.
    __test__ = False

    def __init__(
        self,
        *,
        generator: QuestionGenerator | None = None,
        on_change: Callable[[Session], None] | None = None,
    ) -> None:
        self._generator = generator if generator is not None else QuestionGenerator()
        self._on_change = on_change
        self._session = Session()

    @property
    def session(self) -> Session:
        return self._session

    @property
    def phase(self) -> Phase:
        return self._session.phase

    @property
    def current_question(self) -> Question | None:
        return self._session.current_question

    @property
    def progress(self) -> float:
        return self._session.progress

    def start(self, name: str, count: int) -> Session:
        session = start_session(name, count, rng=self._generator.rng)
        return self._commit(session)

    def submit_answer(self, raw_answer: str) -> Session:
        return self._commit(submit_answer(self._session, raw_answer))

    def stop_early(self, pending_raw_answer: str = "") -> Session:
        return self._commit(stop_early(self._session, pending_raw_answer))

    def reset(self) -> Session:
        return self._commit(reset_session())

    def restore(self, session: Session) -> None:
        """Adopt a previously saved session without notifying."""
        self._session = session

    def score(self) -> Score:
        return compute_score(self._session)

    def tier(self) -> Tier:
        return motivational_tier(self.score().percentage)

    def _commit(self, session: Session) -> Session:
        self._session = session
        if self._on_change is not None:
            try:
                self._on_change(session)
            except Exception:
                logger.exception("on_change hook failed for phase %s", session.phase.value)
        return session
