from __future__ import annotations

import os

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")

import pygame

from math_champion.app import App


class RecordingScreen:
    def __init__(self, name: str) -> None:
        self.name = name
        self.events: list[int] = []
        self.renders = 0

    def handle_event(self, event: pygame.event.Event) -> None:
        self.events.append(event.type)

    def render(self, surface: pygame.Surface) -> None:
        self.renders += 1


def _key() -> pygame.event.Event:
    return pygame.event.Event(pygame.KEYDOWN, {"key": pygame.K_RETURN, "unicode": ""})


def test_only_top_screen_receives_input() -> None:
    app = App(pygame.Surface((10, 10)))
    menu, setup = RecordingScreen("menu"), RecordingScreen("setup")
    app.push(menu)
    app.push(setup)

    app.handle_event(_key())
    app.render()

    assert setup.events == [pygame.KEYDOWN]
    assert setup.renders == 1
    assert menu.events == []
    assert menu.renders == 0


def test_root_screen_is_never_popped() -> None:
    app = App(pygame.Surface((10, 10)))
    menu = RecordingScreen("menu")
    app.push(menu)

    app.pop()
    app.replace(RecordingScreen("results"))
    app.replace(RecordingScreen("results again"))

    assert app.top is not None
    assert app.top.name == "results again"  # type: ignore[attr-defined]
    app.pop()
    app.pop()
    assert app.top is menu


def test_back_to_root_and_quit() -> None:
    app = App(pygame.Surface((10, 10)))
    menu = RecordingScreen("menu")
    app.push(menu)
    app.push(RecordingScreen("setup"))
    app.push(RecordingScreen("question"))

    app.back_to_root()
    assert app.top is menu

    app.handle_event(pygame.event.Event(pygame.QUIT))
    assert not app.running
    assert menu.events == []
