from __future__ import annotations

import logging

import pytest

from math_champion.questions import BlankPosition, Operator, Question, SeededRng
from math_champion.session import (
    InvalidInput,
    Phase,
    Session,
    SessionStateError,
    TestSessionController,
    Tier,
    compute_score,
    motivational_tier,
    reset_session,
    start_session,
    stop_early,
    submit_answer,
)


def _forty_minus_blank_session() -> Session:
    q = Question(
        id=1,
        operand_a=40,
        operand_b=28,
        operator=Operator.SUBTRACT,
        blank_position=BlankPosition.SECOND_OPERAND,
        correct_answer=28,
        display_text="40 - ? = 12",
    )
    return Session(candidate_name="Ann", questions=(q,), current_index=0, phase=Phase.ACTIVE)


@pytest.mark.parametrize(
    ("name", "count"),
    [("", 5), ("   ", 5), ("Ann", 0), ("Ann", -1), ("Ann", True), ("Ann", "5")],
)
def test_start_rejects_blank_name_or_bad_count(name: str, count: object) -> None:
    with pytest.raises(InvalidInput):
        start_session(name, count, rng=SeededRng(1))  # type: ignore[arg-type]


def test_start_creates_active_session() -> None:
    s = start_session("  Ann ", 5, rng=SeededRng(1))

    assert s.candidate_name == "Ann"
    assert s.phase is Phase.ACTIVE
    assert s.current_index == 0
    assert [q.id for q in s.questions] == [1, 2, 3, 4, 5]
    assert all(q.user_answer == "" for q in s.questions)
    assert s.current_question == s.questions[0]


def test_complete_exactly_after_last_submission() -> None:
    s = start_session("Ann", 4, rng=SeededRng(9))
    for i in range(4):
        assert s.phase is Phase.ACTIVE
        s = submit_answer(s, str(s.questions[i].correct_answer))
        assert s.current_index == i + 1

    assert s.phase is Phase.COMPLETE
    assert s.current_question is None
    assert compute_score(s).correct == 4


def test_submit_records_raw_text_and_leaves_previous_value_untouched() -> None:
    s0 = start_session("Ann", 2, rng=SeededRng(3))
    s1 = submit_answer(s0, " 12abc ")

    assert s1.questions[0].user_answer == " 12abc "
    assert s0.questions[0].user_answer == ""
    assert s0.current_index == 0


def test_stop_early_after_three_of_ten() -> None:
    s = start_session("Ann", 10, rng=SeededRng(11))
    for i in range(3):
        s = submit_answer(s, str(s.questions[i].correct_answer))

    s = stop_early(s)

    assert s.phase is Phase.COMPLETE
    score = compute_score(s)
    assert score.answered == 3
    assert score.correct == 3
    assert all(q.user_answer == "" for q in s.questions[3:])


def test_stop_early_records_pending_answer() -> None:
    s = start_session("Ann", 5, rng=SeededRng(4))
    s = submit_answer(s, "1")
    s = stop_early(s, "42")

    assert s.questions[1].user_answer == "42"
    assert s.current_index == 1
    assert compute_score(s).answered == 2


def test_score_with_nothing_answered_is_zero() -> None:
    s = stop_early(start_session("Ann", 3, rng=SeededRng(5)))
    score = compute_score(s)

    assert score.answered == 0
    assert score.correct == 0
    assert score.percentage == 0.0


def test_forty_minus_blank_correct_answer() -> None:
    s = submit_answer(_forty_minus_blank_session(), "28")
    score = compute_score(s)
    assert (score.correct, score.answered, score.percentage) == (1, 1, 100.0)


def test_forty_minus_blank_wrong_answer_still_counts_as_answered() -> None:
    s = submit_answer(_forty_minus_blank_session(), "29")
    score = compute_score(s)
    assert (score.correct, score.answered, score.percentage) == (0, 1, 0.0)


def test_forty_minus_blank_left_unanswered_is_excluded() -> None:
    s = stop_early(_forty_minus_blank_session(), "")
    score = compute_score(s)
    assert s.questions[0].user_answer == ""
    assert score.answered == 0


def test_non_numeric_answer_is_incorrect_but_answered() -> None:
    s = start_session("Ann", 2, rng=SeededRng(8))
    s = submit_answer(s, "abc")
    s = submit_answer(s, str(s.questions[1].correct_answer))

    score = compute_score(s)
    assert score.answered == 2
    assert score.correct == 1
    assert score.percentage == 50.0


@pytest.mark.parametrize(
    ("percentage", "tier"),
    [
        (100, Tier.CHAMPION),
        (100.0, Tier.CHAMPION),
        (99.9, Tier.GREAT),
        (75, Tier.GREAT),
        (74.9, Tier.TRY_AGAIN),
        (0, Tier.TRY_AGAIN),
    ],
)
def test_motivational_tier_boundaries(percentage: float, tier: Tier) -> None:
    assert motivational_tier(percentage) is tier


def test_try_again_tier_value() -> None:
    assert Tier.TRY_AGAIN.value == "tryAgain"


def test_transitions_outside_active_phase_raise() -> None:
    done = stop_early(start_session("Ann", 1, rng=SeededRng(2)))
    with pytest.raises(SessionStateError):
        submit_answer(done, "1")
    with pytest.raises(SessionStateError):
        stop_early(done)
    with pytest.raises(SessionStateError):
        submit_answer(reset_session(), "1")


def test_reset_returns_not_started() -> None:
    s = reset_session()
    assert s.phase is Phase.NOT_STARTED
    assert s.questions == ()
    assert s.current_index == 0


def test_controller_notifies_on_every_change() -> None:
    seen: list[Phase] = []
    controller = TestSessionController(on_change=lambda s: seen.append(s.phase))

    controller.start("Ann", 2)
    controller.submit_answer("1")
    controller.submit_answer("2")
    controller.reset()

    assert seen == [Phase.ACTIVE, Phase.ACTIVE, Phase.COMPLETE, Phase.NOT_STARTED]


def test_controller_invalid_start_keeps_previous_state() -> None:
    seen: list[Session] = []
    controller = TestSessionController(on_change=seen.append)

    with pytest.raises(InvalidInput):
        controller.start("", 3)

    assert controller.phase is Phase.NOT_STARTED
    assert seen == []


def test_controller_restore_does_not_notify() -> None:
    seen: list[Session] = []
    controller = TestSessionController(on_change=seen.append)
    saved = _forty_minus_blank_session()

    controller.restore(saved)

    assert controller.session == saved
    assert controller.current_question == saved.questions[0]
    assert seen == []


def test_controller_hook_failure_is_logged_not_raised(caplog: pytest.LogCaptureFixture) -> None:
    def broken(_: Session) -> None:
        raise OSError("disk full")

    controller = TestSessionController(on_change=broken)
    with caplog.at_level(logging.ERROR, logger="math_champion.session"):
        controller.start("Ann", 1)

    assert controller.phase is Phase.ACTIVE
    assert "on_change hook failed" in caplog.text


def test_controller_score_and_tier() -> None:
    controller = TestSessionController()
    controller.restore(_forty_minus_blank_session())
    controller.submit_answer("28")

    assert controller.score().percentage == 100.0
    assert controller.tier() is Tier.CHAMPION
    assert controller.progress == 1.0
