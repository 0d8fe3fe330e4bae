from __future__ import annotations

import json
import logging
from pathlib import Path

from .session import Phase, Session

logger = logging.getLogger(__name__)


class SessionStore:
    """Best-effort JSON cache of the in-progress or finished session.

    A missing, unreadable or malformed file reads as "no saved session";
    write failures are logged and otherwise ignored.
    """

    _version = 1

    def __init__(self, path: Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> Session | None:
        if not self._path.exists():
            return None
        try:
            payload = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable saved session %s: %s", self._path, exc)
            return None
        if not isinstance(payload, dict) or payload.get("version") != self._version:
            logger.warning("Ignoring saved session %s with unexpected format", self._path)
            return None
        try:
            session = Session.from_dict(payload.get("session"))
        except ValueError as exc:
            logger.warning("Ignoring malformed saved session %s: %s", self._path, exc)
            return None
        if session.phase is Phase.NOT_STARTED:
            return None
        return session

    def save(self, session: Session) -> None:
        if session.phase is Phase.NOT_STARTED:
            self.clear()
            return
        payload = {
            "version": self._version,
            "session": session.to_dict(),
        }
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self._path.with_suffix(f"{self._path.suffix}.tmp")
            tmp_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
            tmp_path.replace(self._path)
        except OSError as exc:
            logger.warning("Could not save session to %s: %s", self._path, exc)

    def clear(self) -> None:
        try:
            self._path.unlink(missing_ok=True)
        except OSError as exc:
            logger.warning("Could not remove saved session %s: %s", self._path, exc)
