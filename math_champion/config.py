from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

STATE_PATH_ENV = "MATH_CHAMPION_STATE_PATH"
EXPORT_DIR_ENV = "MATH_CHAMPION_EXPORT_DIR"
DEFAULT_QUESTIONS_ENV = "MATH_CHAMPION_DEFAULT_QUESTIONS"
LOG_LEVEL_ENV = "MATH_CHAMPION_LOG_LEVEL"

DEFAULT_QUESTION_COUNT = 10


@dataclass(frozen=True, slots=True)
class AppConfig:
    state_path: Path
    export_dir: Path
    default_questions: int = DEFAULT_QUESTION_COUNT
    log_level: int = logging.WARNING


def load_config(environ: Mapping[str, str] | None = None) -> AppConfig:
    env = os.environ if environ is None else environ

    explicit_state = env.get(STATE_PATH_ENV, "").strip()
    state_path = (
        Path(explicit_state).expanduser()
        if explicit_state
        else Path.home() / ".little_math_champion_state.json"
    )

    explicit_export = env.get(EXPORT_DIR_ENV, "").strip()
    export_dir = Path(explicit_export).expanduser() if explicit_export else Path.cwd()

    return AppConfig(
        state_path=state_path,
        export_dir=export_dir,
        default_questions=_positive_int(env.get(DEFAULT_QUESTIONS_ENV), DEFAULT_QUESTION_COUNT),
        log_level=_log_level(env.get(LOG_LEVEL_ENV)),
    )


def _positive_int(value: str | None, fallback: int) -> int:
    try:
        n = int(str(value).strip())
    except (TypeError, ValueError):
        return fallback
    return n if n >= 1 else fallback


def _log_level(value: str | None) -> int:
    if not value:
        return logging.WARNING
    level = logging.getLevelName(value.strip().upper())
    return level if isinstance(level, int) else logging.WARNING
