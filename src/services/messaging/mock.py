import json
from pathlib import Path

from src.core.errors import FieldResolutionError
from src.services.messaging.base import MessageSender

MOCK_SESSION_STATE = {
    "cookies": [],
    "origins": [
        {
            "origin": "https://web.whatsapp.com",
            "localStorage": [{"name": "mock-session", "value": "authenticated"}],
        }
    ],
}


class MockMessenger(MessageSender):
    """Inspectable messaging client. Captures every call and the messages sent.

    `auth_results` feeds successive `wait_until_authenticated` answers; the last
    value repeats. `failing_chats` makes `open_chat` raise for those queries.
    """

    def __init__(
        self,
        auth_results: list[bool] | None = None,
        failing_chats: set[str] | None = None,
        open_error: Exception | None = None,
    ):
        self._auth_results = list(auth_results or [True])
        self._failing_chats = failing_chats or set()
        self._open_error = open_error
        self._calls: list[dict] = []
        self._chat: str | None = None
        self._draft: list[str] = []
        self._messages: list[dict] = []
        self.closed = False

    def open(self, storage_state: Path | None = None) -> None:
        self._calls.append({"action": "open", "storage_state": storage_state})
        if self._open_error:
            raise self._open_error

    def wait_until_authenticated(self, timeout_ms: int) -> bool:
        self._calls.append({"action": "wait_until_authenticated", "timeout_ms": timeout_ms})
        if len(self._auth_results) > 1:
            return self._auth_results.pop(0)
        return self._auth_results[0]

    def save_session(self, path: Path) -> None:
        self._calls.append({"action": "save_session", "path": path})
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(MOCK_SESSION_STATE, indent=2), encoding="utf-8")

    def open_chat(self, query: str) -> None:
        self._calls.append({"action": "open_chat", "query": query})
        if query in self._failing_chats:
            raise FieldResolutionError(f"No chat found for {query!r}")
        self._chat = query
        self._draft = []

    def type_text(self, text: str) -> None:
        self._calls.append({"action": "type_text", "text": text})
        self._draft.append(text)

    def line_break(self) -> None:
        self._calls.append({"action": "line_break"})
        self._draft.append("\n")

    def send(self) -> None:
        self._calls.append({"action": "send"})
        self._messages.append({"chat": self._chat, "text": "".join(self._draft)})
        self._draft = []

    def close(self) -> None:
        self.closed = True

    # --- Inspection API for tests ---

    @property
    def messages_sent(self) -> list[dict]:
        return list(self._messages)

    @property
    def actions(self) -> list[str]:
        return [c["action"] for c in self._calls]

    @property
    def all_calls(self) -> list[dict]:
        return list(self._calls)
