from __future__ import annotations

import logging
from pathlib import Path

from math_champion.config import DEFAULT_QUESTION_COUNT, load_config


def test_defaults_without_environment() -> None:
    cfg = load_config({})

    assert cfg.state_path == Path.home() / ".little_math_champion_state.json"
    assert cfg.export_dir == Path.cwd()
    assert cfg.default_questions == DEFAULT_QUESTION_COUNT
    assert cfg.log_level == logging.WARNING


def test_environment_overrides(tmp_path: Path) -> None:
    cfg = load_config(
        {
            "MATH_CHAMPION_STATE_PATH": str(tmp_path / "s.json"),
            "MATH_CHAMPION_EXPORT_DIR": str(tmp_path / "out"),
            "MATH_CHAMPION_DEFAULT_QUESTIONS": "25",
            "MATH_CHAMPION_LOG_LEVEL": "debug",
        }
    )

    assert cfg.state_path == tmp_path / "s.json"
    assert cfg.export_dir == tmp_path / "out"
    assert cfg.default_questions == 25
    assert cfg.log_level == logging.DEBUG


def test_invalid_values_fall_back() -> None:
    cfg = load_config({"MATH_CHAMPION_DEFAULT_QUESTIONS": "0", "MATH_CHAMPION_LOG_LEVEL": "LOUD"})
    assert cfg.default_questions == DEFAULT_QUESTION_COUNT
    assert cfg.log_level == logging.WARNING

    cfg = load_config({"MATH_CHAMPION_DEFAULT_QUESTIONS": "ten"})
    assert cfg.default_questions == DEFAULT_QUESTION_COUNT
