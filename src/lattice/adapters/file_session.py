"""File-based session state adapter."""

import json
import logging
from pathlib import Path

from lattice.core.session import SessionState

logger = logging.getLogger(__name__)


class JsonSessionStore:
    """
    Keeps the scheduler's session state in a JSON file between runs.

    Implements SessionStore protocol.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path).expanduser()

    def load(self) -> SessionState:
        if not self.path.exists():
            return SessionState()
        try:
            return SessionState.from_dict(json.loads(self.path.read_text()))
        except (json.JSONDecodeError, AttributeError, KeyError, TypeError, ValueError) as e:
            logger.warning(f"Discarding unreadable session file {self.path}: {e}")
            return SessionState()

    def save(self, state: SessionState) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(state.to_dict(), indent=2))

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)
