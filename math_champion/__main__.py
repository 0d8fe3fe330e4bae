"""``python -m math_champion`` and the ``little-math-champion`` script."""

from __future__ import annotations

import logging

from .app import run
from .config import AppConfig, load_config

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(config: AppConfig) -> None:
    logging.basicConfig(level=config.log_level, format=LOG_FORMAT)
    logging.getLogger(__name__).debug(
        "State file %s, exports to %s", config.state_path, config.export_dir
    )


def main() -> int:
    config = load_config()
    configure_logging(config)
    return run(config=config)


if __name__ == "__main__":
    raise SystemExit(main())
