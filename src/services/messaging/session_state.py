import json
import logging
from pathlib import Path

logger = logging.getLogger("ticket_agent.messaging")


class SessionStateStore:
    """Serialized messaging login state kept at a fixed path.

    Concurrent runs overwrite the same file; the last writer wins. A file that
    is too small or not valid JSON is deleted so the next login starts clean.
    """

    def __init__(self, path: str | Path, min_bytes: int = 100):
        self._path = Path(path)
        self._min_bytes = min_bytes

    @property
    def path(self) -> Path:
        return self._path

    def exists(self) -> bool:
        return self._path.is_file()

    def discard_if_corrupt(self) -> bool:
        """Delete the state file if unusable. Returns True when it was deleted."""
        if not self.exists():
            return False

        size = self._path.stat().st_size
        if size < self._min_bytes:
            logger.warning(f"Session state {self._path} is only {size} bytes, deleting")
            self._path.unlink(missing_ok=True)
            return True

        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Session state {self._path} unreadable ({e}), deleting")
            self._path.unlink(missing_ok=True)
            return True

        if not isinstance(data, dict):
            logger.warning(f"Session state {self._path} is not an object, deleting")
            self._path.unlink(missing_ok=True)
            return True
        return False

    def current(self) -> Path | None:
        return self._path if self.exists() else None
