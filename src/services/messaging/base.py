from abc import ABC, abstractmethod
from pathlib import Path


class MessageSender(ABC):
    """A logged-in messaging web client session."""

    @abstractmethod
    def open(self, storage_state: Path | None = None) -> None:
        """Launch the browser (seeded with `storage_state` if given) and load the client."""
        ...

    @abstractmethod
    def wait_until_authenticated(self, timeout_ms: int) -> bool:
        """True once the logged-in marker is visible, False on timeout."""
        ...

    @abstractmethod
    def save_session(self, path: Path) -> None:
        ...

    @abstractmethod
    def open_chat(self, query: str) -> None:
        """Find a chat through the client's search box and open it."""
        ...

    @abstractmethod
    def type_text(self, text: str) -> None:
        ...

    @abstractmethod
    def line_break(self) -> None:
        ...

    @abstractmethod
    def send(self) -> None:
        ...

    @abstractmethod
    def close(self) -> None:
        ...
