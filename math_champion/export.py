"""HTML documents for results and printable worksheets.

Both outputs are standalone HTML files; a browser's "Print to PDF" turns
them into PDFs.
"""

from __future__ import annotations

import datetime as dt
import html
import logging
from collections.abc import Sequence
from pathlib import Path

from .questions import Question
from .results import OutcomeStatus, ResultReport

logger = logging.getLogger(__name__)

APP_TITLE = "Little Math Champion"

_STATUS_STYLE: dict[OutcomeStatus, tuple[str, str, str]] = {
    # background, border, symbol
    OutcomeStatus.CORRECT: ("#d1fae5", "#10b981", "&#10003;"),
    OutcomeStatus.INCORRECT: ("#fee2e2", "#ef4444", "&#10007;"),
    OutcomeStatus.UNANSWERED: ("#f3f4f6", "#d1d5db", "&#8856;"),
}

_PAGE = """<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<title>{title}</title>
<style>
body {{ font-family: Arial, sans-serif; padding: 40px; max-width: 800px; margin: 0 auto; }}
.header {{ text-align: center; margin-bottom: 30px; border-bottom: 3px solid #4F46E5; padding-bottom: 20px; }}
.score-box {{ background: #f0f4f8; padding: 20px; border-radius: 10px; margin-bottom: 30px; text-align: center; }}
.message {{ font-size: 20px; color: #667eea; font-weight: bold; margin: 0; }}
.question-card {{ border: 2px solid; border-radius: 8px; padding: 15px; margin-bottom: 15px; }}
.status {{ float: right; font-size: 30px; }}
.worksheet-row {{ display: flex; align-items: center; gap: 16px; margin-bottom: 24px; font-size: 20px; }}
.answer-line {{ border-bottom: 2px solid #9ca3af; width: 96px; height: 28px; }}
</style>
</head>
<body>
{body}
</body>
</html>
"""


def _e(value: object) -> str:
    return html.escape(str(value), quote=True)


def render_results_html(report: ResultReport, *, date: dt.date) -> str:
    """Render the downloadable results document for a finished test."""

    cards = []
    for o in report.outcomes:
        bg, border, symbol = _STATUS_STYLE[o.status]
        answer = _e(o.user_answer) if o.status is not OutcomeStatus.UNANSWERED else "Not answered"
        cards.append(
            f'<div class="question-card" style="background: {bg}; border-color: {border};">'
            f'<span class="status">{symbol}</span>'
            f"<p><strong>Question {o.number}: {_e(o.display_text)}</strong></p>"
            f"<p><strong>Your Answer:</strong> {answer}</p>"
            f"<p><strong>Correct Answer:</strong> {o.correct_answer}</p>"
            "</div>"
        )

    body = "\n".join(
        [
            '<div class="header">',
            f"<h1>{APP_TITLE} - Test Results</h1>",
            f"<h2>Candidate: {_e(report.candidate_name)}</h2>",
            f"<p>Date: {date.isoformat()}</p>",
            "</div>",
            '<div class="score-box">',
            f"<h3>Score: {_e(report.score_line)}</h3>",
            f'<p class="message">{_e(report.message)}</p>',
            "</div>",
            "<h3>Detailed Results:</h3>",
            *cards,
        ]
    )
    title = f"Math Test Results - {_e(report.candidate_name)}"
    return _PAGE.format(title=title, body=body)


def render_worksheet_html(questions: Sequence[Question]) -> str:
    """Render a printable practice test with blank answer lines."""

    rows = [
        f'<div class="worksheet-row"><strong>{number}.</strong>'
        f"<span>{_e(q.display_text)}</span>"
        '<div class="answer-line"></div></div>'
        for number, q in enumerate(questions, start=1)
    ]
    body = "\n".join(
        [
            '<div class="header">',
            f"<h1>{APP_TITLE} - Practice Test</h1>",
            f"<p>Total Questions: {len(questions)}</p>",
            "<p>Name: ______________________________ Date: ______________________</p>",
            "</div>",
            *rows,
        ]
    )
    return _PAGE.format(title=f"{APP_TITLE} - Practice Test", body=body)


def results_filename(candidate_name: str) -> str:
    safe = "".join(ch if ch.isalnum() or ch in "-_ " else "_" for ch in candidate_name).strip()
    if safe == "":
        safe = "candidate"
    return f"{safe}-math-test-results.html"


def write_results_html(report: ResultReport, directory: Path, *, date: dt.date | None = None) -> Path:
    path = Path(directory) / results_filename(report.candidate_name)
    doc = render_results_html(report, date=date or dt.date.today())
    _write(path, doc)
    logger.info("Exported results for %r to %s", report.candidate_name, path)
    return path


def write_worksheet_html(
    questions: Sequence[Question],
    directory: Path,
    *,
    filename: str = "math-practice-test.html",
) -> Path:
    path = Path(directory) / filename
    _write(path, render_worksheet_html(questions))
    logger.info("Wrote %d-question worksheet to %s", len(questions), path)
    return path


def _write(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
