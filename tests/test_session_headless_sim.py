from __future__ import annotations

from math_champion.questions import QuestionGenerator, SeededRng, generate_questions
from math_champion.results import OutcomeStatus, build_report
from math_champion.session import Phase, Tier, TestSessionController


def test_headless_scripted_run_produces_expected_report() -> None:
    seed = 555
    saved: list[Phase] = []
    controller = TestSessionController(
        generator=QuestionGenerator(seed=seed),
        on_change=lambda s: saved.append(s.phase),
    )

    controller.start("Ann", 6)
    assert controller.phase is Phase.ACTIVE

    # Mirror the generator stream to know the correct answers.
    expected = generate_questions(6, rng=SeededRng(seed))
    assert controller.session.questions == expected

    controller.submit_answer(str(expected[0].correct_answer))
    controller.submit_answer(str(expected[1].correct_answer))
    controller.submit_answer(str(expected[2].correct_answer + 1))
    controller.stop_early(str(expected[3].correct_answer))

    assert controller.phase is Phase.COMPLETE
    assert saved == [Phase.ACTIVE] * 4 + [Phase.COMPLETE]

    report = build_report(controller.session)
    assert [o.status for o in report.outcomes] == [
        OutcomeStatus.CORRECT,
        OutcomeStatus.CORRECT,
        OutcomeStatus.INCORRECT,
        OutcomeStatus.CORRECT,
        OutcomeStatus.UNANSWERED,
        OutcomeStatus.UNANSWERED,
    ]
    assert report.score.correct == 3
    assert report.score.answered == 4
    assert report.score.percentage == 75.0
    assert report.tier is Tier.GREAT
    assert report.message == "Great job!"
