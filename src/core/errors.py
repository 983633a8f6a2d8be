"""Failure taxonomy for a portal automation run."""

SESSION_CLOSED_MARKERS = (
    "target closed",
    "target page, context or browser has been closed",
    "browser has been closed",
    "context has been closed",
    "page has been closed",
)


class AutomationError(Exception):
    """Base class for run failures. `kind` ends up in the workflow state."""

    kind = "automation"


class PortalNavigationError(AutomationError):
    """Portal or messaging surface unreachable, or its login control missing."""

    kind = "navigation"


class FieldResolutionError(AutomationError):
    """A required form control was not found or interactable in time."""

    kind = "field_resolution"


class ListingVerificationError(AutomationError):
    kind = "verification"


class NoListingRowsError(ListingVerificationError):
    def __init__(self, message: str = "Listing has no rows after reload"):
        super().__init__(message)


class SessionClosedError(AutomationError):
    """The browser, context or tab went away mid-run."""

    kind = "session_closed"


class MessagingAuthError(AutomationError):
    kind = "messaging_auth"


def is_session_closed(exc: BaseException) -> bool:
    if isinstance(exc, SessionClosedError):
        return True
    message = str(exc).lower()
    return any(marker in message for marker in SESSION_CLOSED_MARKERS)


def error_kind(exc: BaseException) -> str:
    if is_session_closed(exc):
        return SessionClosedError.kind
    if isinstance(exc, AutomationError):
        return exc.kind
    return "unexpected"
