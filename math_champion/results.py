from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .session import Phase, Score, Session, Tier, compute_score, motivational_tier

TIER_MESSAGES: dict[Tier, str] = {
    Tier.CHAMPION: "You are a Math Champion!",
    Tier.GREAT: "Great job!",
    Tier.TRY_AGAIN: "Nice Try!",
}


class OutcomeStatus(str, Enum):
    CORRECT = "correct"
    INCORRECT = "incorrect"
    UNANSWERED = "unanswered"


@dataclass(frozen=True, slots=True)
class QuestionOutcome:
    number: int
    display_text: str
    user_answer: str
    correct_answer: int
    status: OutcomeStatus


@dataclass(frozen=True, slots=True)
class ResultReport:
    """Presentable summary of a finished session.

    Shared by the results screen and the HTML export so both show the same
    score line, message and per-question breakdown.
    """

    candidate_name: str
    score: Score
    tier: Tier
    outcomes: tuple[QuestionOutcome, ...]

    @property
    def message(self) -> str:
        return TIER_MESSAGES[self.tier]

    @property
    def score_line(self) -> str:
        s = self.score
        return f"{s.correct}/{s.answered} ({s.percentage:.1f}%)"


def build_report(session: Session) -> ResultReport:
    """Build a ResultReport from a completed session."""

    if session.phase is not Phase.COMPLETE:
        raise ValueError("results are only available for a completed test")

    score = compute_score(session)
    outcomes = []
    for number, q in enumerate(session.questions, start=1):
        if not q.answered:
            status = OutcomeStatus.UNANSWERED
        elif q.is_correct:
            status = OutcomeStatus.CORRECT
        else:
            status = OutcomeStatus.INCORRECT
        outcomes.append(
            QuestionOutcome(
                number=number,
                display_text=q.display_text,
                user_answer=q.user_answer,
                correct_answer=q.correct_answer,
                status=status,
            )
        )

    return ResultReport(
        candidate_name=session.candidate_name,
        score=score,
        tier=motivational_tier(score.percentage),
        outcomes=tuple(outcomes),
    )
