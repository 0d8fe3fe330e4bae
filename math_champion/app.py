"""Pygame UI shell for Little Math Champion.

Screens:
- Main menu (start a test, print a worksheet, quit)
- Setup (candidate name and number of questions)
- Question (one question at a time, typed answer, stop early)
- Results (score, message, per-question breakdown, HTML export)

All question generation, scoring and state transitions live in
math_champion.questions / math_champion.session; this module only renders and
captures input.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

import pygame

from .config import AppConfig, load_config
from .export import write_results_html, write_worksheet_html
from .questions import QuestionGenerator, parse_integer
from .results import OutcomeStatus, ResultReport, build_report
from .session import InvalidInput, Phase, TestSessionController
from .storage import SessionStore

logger = logging.getLogger(__name__)

WINDOW_SIZE = (960, 540)
TARGET_FPS = 60
MAX_ANSWER_CHARS = 6
MAX_NAME_CHARS = 32

BG = (3, 9, 78)
PANEL_BG = (8, 18, 104)
BORDER = (226, 236, 255)
TEXT_MAIN = (238, 245, 255)
TEXT_MUTED = (186, 200, 224)
TEXT_ERROR = (255, 170, 170)
ACTIVE_BG = (244, 248, 255)
ACTIVE_TEXT = (14, 26, 74)

_STATUS_COLOURS = {
    OutcomeStatus.CORRECT: (120, 220, 150),
    OutcomeStatus.INCORRECT: (240, 120, 120),
    OutcomeStatus.UNANSWERED: (170, 170, 185),
}
_STATUS_MARKS = {
    OutcomeStatus.CORRECT: "OK",
    OutcomeStatus.INCORRECT: "X",
    OutcomeStatus.UNANSWERED: "-",
}


class Screen(Protocol):
    def handle_event(self, event: pygame.event.Event) -> None: ...
    def render(self, surface: pygame.Surface) -> None: ...


@dataclass(frozen=True, slots=True)
class MenuItem:
    label: str
    action: Callable[[], None]


class App:
    """Stack of screens driven by ``run``; only the top screen gets input."""

    def __init__(self, surface: pygame.Surface) -> None:
        self._surface = surface
        self._stack: list[Screen] = []
        self._running = True

    @property
    def running(self) -> bool:
        return self._running

    @property
    def top(self) -> Screen | None:
        return self._stack[-1] if self._stack else None

    def push(self, screen: Screen) -> None:
        logger.debug("Showing %s", type(screen).__name__)
        self._stack.append(screen)

    def pop(self) -> None:
        # The main menu stays at the bottom.
        if len(self._stack) > 1:
            self._stack.pop()

    def replace(self, screen: Screen) -> None:
        self.pop()
        self.push(screen)

    def back_to_root(self) -> None:
        del self._stack[1:]

    def quit(self) -> None:
        self._running = False

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.QUIT:
            self.quit()
        elif self.top is not None:
            self.top.handle_event(event)

    def render(self) -> None:
        if self.top is not None:
            self.top.render(self._surface)


def _draw_frame(surface: pygame.Surface, title: str, font: pygame.font.Font) -> pygame.Rect:
    """Fill the background, draw the panel and title; return the content rect."""

    w, h = surface.get_size()
    surface.fill(BG)
    margin = max(10, min(26, w // 34))
    frame = pygame.Rect(margin, margin, max(260, w - margin * 2), max(220, h - margin * 2))
    pygame.draw.rect(surface, PANEL_BG, frame)
    pygame.draw.rect(surface, BORDER, frame, 2)

    header = pygame.Rect(frame.x + 2, frame.y + 2, frame.w - 4, max(34, min(52, h // 8)))
    pygame.draw.line(surface, BORDER, (header.x, header.bottom), (header.right, header.bottom), 1)
    text = font.render(title, True, TEXT_MAIN)
    surface.blit(text, text.get_rect(center=header.center))
    return pygame.Rect(frame.x + 20, header.bottom + 16, frame.w - 40, frame.bottom - header.bottom - 32)


def _draw_footer(surface: pygame.Surface, text: str, font: pygame.font.Font) -> None:
    w, h = surface.get_size()
    foot = font.render(text, True, TEXT_MUTED)
    surface.blit(foot, foot.get_rect(midbottom=(w // 2, h - 34)))


class MenuScreen:
    def __init__(self, app: App, title: str, items: list[MenuItem], *, is_root: bool = False) -> None:
        self._app = app
        self._title = title
        self._items = items
        self._selected = 0
        self._is_root = is_root
        self._title_font = pygame.font.Font(None, 42)
        self._item_font = pygame.font.Font(None, 32)
        self._hint_font = pygame.font.Font(None, 22)

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type != pygame.KEYDOWN:
            return
        key = event.key
        if key in (pygame.K_UP, pygame.K_w):
            self._move(-1)
        elif key in (pygame.K_DOWN, pygame.K_s):
            self._move(1)
        elif key in (pygame.K_RETURN, pygame.K_KP_ENTER, pygame.K_SPACE):
            if self._items:
                self._items[self._selected].action()
        elif key in (pygame.K_ESCAPE, pygame.K_BACKSPACE):
            if self._is_root:
                self._app.quit()
            else:
                self._app.pop()

    def _move(self, delta: int) -> None:
        if not self._items:
            return
        self._selected = (self._selected + delta) % len(self._items)

    def render(self, surface: pygame.Surface) -> None:
        content = _draw_frame(surface, self._title, self._title_font)
        row_h = 44
        y = content.y + max(8, (content.h - row_h * len(self._items)) // 2)
        for idx, item in enumerate(self._items):
            row = pygame.Rect(content.x + 40, y, content.w - 80, row_h - 8)
            selected = idx == self._selected
            if selected:
                pygame.draw.rect(surface, ACTIVE_BG, row)
            else:
                pygame.draw.rect(surface, (62, 84, 152), row, 1)
            text = self._item_font.render(item.label, True, ACTIVE_TEXT if selected else TEXT_MAIN)
            surface.blit(text, (row.x + 10, row.y + (row.h - text.get_height()) // 2))
            y += row_h
        _draw_footer(surface, "Up/Down: Move  |  Enter: Select  |  Esc: Back", self._hint_font)


class SetupScreen:
    """Collects the candidate name and question count.

    In worksheet mode only the count is asked for and Enter writes a
    printable practice test instead of starting a session.
    """

    def __init__(
        self,
        app: App,
        *,
        config: AppConfig,
        on_start: Callable[[str, int], None] | None = None,
        on_worksheet: Callable[[int], str] | None = None,
    ) -> None:
        self._app = app
        self._on_start = on_start
        self._on_worksheet = on_worksheet
        self._worksheet = on_start is None
        self._name = ""
        self._count = str(config.default_questions)
        self._field = 1 if self._worksheet else 0
        self._message: str | None = None
        self._is_error = False
        self._font = pygame.font.Font(None, 32)
        self._hint_font = pygame.font.Font(None, 22)

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type != pygame.KEYDOWN:
            return
        if event.key == pygame.K_ESCAPE:
            self._app.pop()
        elif event.key in (pygame.K_TAB, pygame.K_UP, pygame.K_DOWN):
            if not self._worksheet:
                self._field = 1 - self._field
        elif event.key in (pygame.K_RETURN, pygame.K_KP_ENTER):
            self._submit()
        elif event.key == pygame.K_BACKSPACE:
            if self._field == 0:
                self._name = self._name[:-1]
            else:
                self._count = self._count[:-1]
        else:
            ch = getattr(event, "unicode", "")
            if not ch or not ch.isprintable():
                return
            if self._field == 0 and len(self._name) < MAX_NAME_CHARS:
                self._name += ch
            elif self._field == 1 and ch.isdigit() and len(self._count) < 4:
                self._count += ch

    def _submit(self) -> None:
        count = parse_integer(self._count)
        if self._worksheet:
            if count is None or count < 1:
                self._show("Please enter a valid number of questions!", error=True)
                return
            assert self._on_worksheet is not None
            try:
                self._show(f"Worksheet saved: {self._on_worksheet(count)}", error=False)
            except OSError as exc:
                logger.warning("Worksheet export failed: %s", exc)
                self._show(f"Could not save worksheet: {exc}", error=True)
            return

        assert self._on_start is not None
        try:
            # InvalidInput covers both the blank name and a bad count.
            self._on_start(self._name, -1 if count is None else count)
        except InvalidInput as exc:
            self._show(str(exc), error=True)

    def _show(self, message: str, *, error: bool) -> None:
        self._message = message
        self._is_error = error

    def render(self, surface: pygame.Surface) -> None:
        title = "Generate & Print Test" if self._worksheet else "Little Math Champion"
        content = _draw_frame(surface, title, self._font)
        y = content.y + 10
        sub = self._hint_font.render("Practice Addition & Subtraction (1-99)", True, TEXT_MUTED)
        surface.blit(sub, (content.x, y))
        y += 40

        fields = [("Your Name", self._name), ("Number of Questions", self._count)]
        for idx, (label, value) in enumerate(fields):
            if self._worksheet and idx == 0:
                continue
            active = idx == self._field
            surface.blit(self._font.render(label, True, TEXT_MUTED), (content.x, y))
            box = pygame.Rect(content.x + 260, y - 6, min(360, content.w - 280), 36)
            pygame.draw.rect(surface, ACTIVE_BG if active else PANEL_BG, box)
            pygame.draw.rect(surface, BORDER, box, 1)
            shown = value + ("_" if active else "")
            text = self._font.render(shown, True, ACTIVE_TEXT if active else TEXT_MAIN)
            surface.blit(text, (box.x + 8, box.y + 6))
            y += 56

        if self._message:
            colour = TEXT_ERROR if self._is_error else TEXT_MAIN
            surface.blit(self._hint_font.render(self._message, True, colour), (content.x, y + 10))

        hint = "Enter: Generate  |  Esc: Back" if self._worksheet else "Tab: Switch field  |  Enter: Start  |  Esc: Back"
        _draw_footer(surface, hint, self._hint_font)


class QuestionScreen:
    def __init__(
        self,
        app: App,
        *,
        controller: TestSessionController,
        on_complete: Callable[[], None],
        initial_input: str = "",
    ) -> None:
        self._app = app
        self._controller = controller
        self._on_complete = on_complete
        self._input = initial_input
        self._font = pygame.font.Font(None, 32)
        self._big_font = pygame.font.Font(None, 96)
        self._hint_font = pygame.font.Font(None, 22)

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type != pygame.KEYDOWN:
            return
        if self._controller.phase is not Phase.ACTIVE:
            return
        if event.key in (pygame.K_RETURN, pygame.K_KP_ENTER):
            # Empty input cannot be submitted.
            if self._input:
                self._controller.submit_answer(self._input)
                self._input = ""
        elif event.key == pygame.K_F2:
            self._controller.stop_early(self._input)
            self._input = ""
        elif event.key in (pygame.K_BACKSPACE, pygame.K_DELETE):
            self._input = self._input[:-1]
        elif event.key in (pygame.K_MINUS, pygame.K_KP_MINUS):
            if not self._input:
                self._input = "-"
        else:
            ch = getattr(event, "unicode", "")
            if ch and ch.isdigit() and len(self._input) < MAX_ANSWER_CHARS:
                self._input += ch

        if self._controller.phase is Phase.COMPLETE:
            self._on_complete()

    def render(self, surface: pygame.Surface) -> None:
        session = self._controller.session
        question = session.current_question
        content = _draw_frame(surface, session.candidate_name, self._font)
        if question is None:
            return

        counter = f"Question {session.current_index + 1} of {session.total}"
        surface.blit(self._font.render(counter, True, TEXT_MUTED), (content.x, content.y))

        bar = pygame.Rect(content.x, content.y + 36, content.w, 12)
        pygame.draw.rect(surface, (62, 84, 152), bar)
        filled = bar.copy()
        filled.w = int(round(bar.w * session.progress))
        pygame.draw.rect(surface, ACTIVE_BG, filled)

        prompt = self._big_font.render(question.display_text, True, TEXT_MAIN)
        surface.blit(prompt, prompt.get_rect(center=(content.centerx, content.y + 150)))

        box = pygame.Rect(0, 0, 220, 56)
        box.center = (content.centerx, content.y + 250)
        pygame.draw.rect(surface, ACTIVE_BG, box)
        answer = self._big_font.render(self._input, True, ACTIVE_TEXT)
        surface.blit(answer, answer.get_rect(center=box.center))

        last = session.current_index == session.total - 1
        action = "Finish Test" if last else "Next Question"
        _draw_footer(surface, f"Enter: {action}  |  F2: Stop Test", self._hint_font)


class ResultsScreen:
    def __init__(
        self,
        app: App,
        *,
        report: ResultReport,
        on_export: Callable[[ResultReport], str],
        on_new_test: Callable[[], None],
    ) -> None:
        self._app = app
        self._report = report
        self._on_export = on_export
        self._on_new_test = on_new_test
        self._status: str | None = None
        self._scroll = 0
        self._font = pygame.font.Font(None, 32)
        self._big_font = pygame.font.Font(None, 64)
        self._small_font = pygame.font.Font(None, 24)
        self._hint_font = pygame.font.Font(None, 22)

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type != pygame.KEYDOWN:
            return
        if event.key == pygame.K_e:
            try:
                self._status = f"Results saved: {self._on_export(self._report)}"
            except OSError as exc:
                logger.warning("Export failed: %s", exc)
                self._status = f"Could not save results: {exc}"
        elif event.key in (pygame.K_n, pygame.K_ESCAPE):
            self._on_new_test()
        elif event.key == pygame.K_DOWN:
            self._scroll = min(self._scroll + 1, max(0, len(self._report.outcomes) - 1))
        elif event.key == pygame.K_UP:
            self._scroll = max(0, self._scroll - 1)

    def render(self, surface: pygame.Surface) -> None:
        report = self._report
        content = _draw_frame(surface, f"Test Complete! {report.candidate_name}", self._font)

        score = self._big_font.render(report.score_line, True, TEXT_MAIN)
        surface.blit(score, score.get_rect(midtop=(content.centerx, content.y)))
        msg = self._font.render(report.message, True, TEXT_MAIN)
        surface.blit(msg, msg.get_rect(midtop=(content.centerx, content.y + 60)))

        y = content.y + 100
        row_h = 24
        visible = max(1, (content.bottom - 40 - y) // row_h)
        for o in report.outcomes[self._scroll : self._scroll + visible]:
            answer = o.user_answer if o.status is not OutcomeStatus.UNANSWERED else "Not answered"
            line = (
                f"{_STATUS_MARKS[o.status]:>2}  Question {o.number}: {o.display_text}"
                f"    Your answer: {answer}    Correct: {o.correct_answer}"
            )
            surface.blit(self._small_font.render(line, True, _STATUS_COLOURS[o.status]), (content.x, y))
            y += row_h

        if self._status:
            surface.blit(self._hint_font.render(self._status, True, TEXT_MUTED), (content.x, content.bottom - 28))
        _draw_footer(surface, "E: Export Results (HTML)  |  N: Start New Test  |  Up/Down: Scroll", self._hint_font)


def run(
    *,
    max_frames: int | None = None,
    event_injector: Callable[[int], None] | None = None,
    config: AppConfig | None = None,
) -> int:
    cfg = config or load_config()

    pygame.init()
    pygame.display.set_caption("Little Math Champion")
    surface = pygame.display.set_mode(WINDOW_SIZE, pygame.RESIZABLE)

    clock = pygame.time.Clock()
    app = App(surface)

    store = SessionStore(cfg.state_path)
    controller = TestSessionController(generator=QuestionGenerator(), on_change=store.save)

    def results_screen() -> ResultsScreen:
        return ResultsScreen(
            app,
            report=build_report(controller.session),
            on_export=export_results,
            on_new_test=new_test,
        )

    def show_results() -> None:
        app.replace(results_screen())

    def export_results(report: ResultReport) -> str:
        return str(write_results_html(report, cfg.export_dir))

    def new_test() -> None:
        controller.reset()
        app.back_to_root()

    def start_test(name: str, count: int) -> None:
        controller.start(name, count)
        app.replace(QuestionScreen(app, controller=controller, on_complete=show_results))

    def print_worksheet(count: int) -> str:
        questions = QuestionGenerator().question_set(count)
        return str(write_worksheet_html(questions, cfg.export_dir))

    main_items = [
        MenuItem("Start Test", lambda: app.push(SetupScreen(app, config=cfg, on_start=start_test))),
        MenuItem("Generate & Print Test", lambda: app.push(SetupScreen(app, config=cfg, on_worksheet=print_worksheet))),
        MenuItem("Quit", app.quit),
    ]
    app.push(MenuScreen(app, "Main Menu", main_items, is_root=True))

    saved = store.load()
    if saved is not None:
        controller.restore(saved)
        logger.info("Resuming saved %s test for %r", saved.phase.value, saved.candidate_name)
        if saved.phase is Phase.ACTIVE:
            current = saved.current_question
            app.push(
                QuestionScreen(
                    app,
                    controller=controller,
                    on_complete=show_results,
                    initial_input="" if current is None else current.user_answer,
                )
            )
        else:
            app.push(results_screen())

    frame = 0
    try:
        while app.running:
            if event_injector is not None:
                event_injector(frame)

            for event in pygame.event.get():
                app.handle_event(event)

            app.render()

            pygame.display.flip()

            frame += 1
            if max_frames is not None and frame >= max_frames:
                break

            clock.tick(TARGET_FPS)
    finally:
        pygame.quit()

    return 0
