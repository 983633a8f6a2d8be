from abc import ABC, abstractmethod

from src.services.messaging.base import MessageSender
from src.services.portal.base import PortalSession


class BrowserRuntime(ABC):
    """Browser resources owned by one run attempt.

    Used as a context manager; everything opened through it is released on exit.
    """

    def __enter__(self) -> "BrowserRuntime":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.close()
        return False

    def start(self) -> None:
        pass

    @abstractmethod
    def open_portal(self) -> PortalSession:
        ...

    @abstractmethod
    def open_messenger(self) -> MessageSender:
        ...

    @abstractmethod
    def close(self) -> None:
        ...
