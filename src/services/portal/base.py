from abc import ABC, abstractmethod
from enum import Enum

from src.core.listing import DropdownCandidate, ListingRow


class FormField(str, Enum):
    """Logical creation-form fields. Implementations map them to selectors."""

    TAX_ID = "tax_id"
    COMPANY = "company"
    CONTACT_LINE = "contact_line"
    FIRST_NAME = "first_name"
    LAST_NAME = "last_name"
    PHONE = "phone"
    EMAIL = "email"
    DESCRIPTION = "description"
    CITY = "city"
    CLIENT_TYPE = "client_type"
    CONTACT_CHANNEL = "contact_channel"
    ASSIGNED_AGENT = "assigned_agent"
    SALES_LINE = "sales_line"


class ControlKind(str, Enum):
    TEXT = "text"
    SELECT = "select"
    MISSING = "missing"


class Authenticator(ABC):
    @abstractmethod
    def login(self, username: str, password: str) -> None:
        """Submit portal credentials. Raises PortalNavigationError if the login form is unreachable."""
        ...


class FormFiller(ABC):
    @abstractmethod
    def open_form(self) -> None:
        ...

    @abstractmethod
    def wait_until_ready(self, timeout_ms: int) -> None:
        """Wait for the required fields to be interactable. Raises FieldResolutionError."""
        ...

    @abstractmethod
    def fill(self, field: FormField, value: str) -> None:
        ...

    @abstractmethod
    def control_kind(self, field: FormField) -> ControlKind:
        ...

    @abstractmethod
    def read_options(self, field: FormField) -> list[DropdownCandidate]:
        """Live (label, value) pairs of a select, placeholder options excluded."""
        ...

    @abstractmethod
    def select(self, field: FormField, value: str) -> None:
        ...

    @abstractmethod
    def submit(self) -> None:
        ...


class ListingReader(ABC):
    @abstractmethod
    def open_listing(self) -> None:
        ...

    @abstractmethod
    def wait_for_rows(self, timeout_ms: int) -> int:
        """Return the attached row count, 0 if none appeared within the timeout."""
        ...

    @abstractmethod
    def reload(self) -> None:
        ...

    @abstractmethod
    def read_rows(self) -> list[ListingRow]:
        ...

    @abstractmethod
    def has_search(self) -> bool:
        ...

    @abstractmethod
    def search(self, query: str) -> None:
        ...


class Diagnostics(ABC):
    @abstractmethod
    def capture(self) -> tuple[bytes | None, str | None]:
        """Best-effort (full-page screenshot, DOM dump) of the current page."""
        ...


class PortalSession(Authenticator, FormFiller, ListingReader, Diagnostics):
    """Everything a run needs from one portal browser session."""

    @abstractmethod
    def close(self) -> None:
        ...
