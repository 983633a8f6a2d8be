from src.core.listing import DropdownCandidate, ListingRow
from src.services.portal.base import ControlKind, FormField, PortalSession

DROPDOWN_FIELDS = (
    FormField.CITY,
    FormField.CLIENT_TYPE,
    FormField.CONTACT_CHANNEL,
    FormField.ASSIGNED_AGENT,
    FormField.SALES_LINE,
)


class MockPortal(PortalSession):
    """Inspectable in-memory portal. Captures all calls for assertion.

    `errors` maps a method name (e.g. "login", "submit") to the exception it raises.
    Listing rows switch to `rows_after_reload` on reload and to `filtered_rows`
    on search, mimicking the real page.
    """

    def __init__(
        self,
        options: dict[FormField, list[tuple[str, str]]] | None = None,
        control_kinds: dict[FormField, ControlKind] | None = None,
        listing_rows: list[ListingRow] | None = None,
        rows_after_reload: list[ListingRow] | None = None,
        filtered_rows: list[ListingRow] | None = None,
        searchable: bool = False,
        errors: dict[str, Exception] | None = None,
        screenshot: bytes | None = b"\x89PNG mock",
        html: str | None = "<html><body>mock</body></html>",
    ):
        self._options = options or {}
        self._control_kinds = control_kinds or {}
        self._rows = list(listing_rows or [])
        self._rows_after_reload = rows_after_reload
        self._filtered_rows = filtered_rows
        self._searchable = searchable
        self._errors = errors or {}
        self._screenshot = screenshot
        self._html = html
        self._calls: list[dict] = []
        self.closed = False

    def _record(self, action: str, **kwargs) -> None:
        self._calls.append({"action": action, **kwargs})
        if action in self._errors:
            raise self._errors[action]

    def login(self, username: str, password: str) -> None:
        self._record("login", username=username, password=password)

    def open_form(self) -> None:
        self._record("open_form")

    def wait_until_ready(self, timeout_ms: int) -> None:
        self._record("wait_until_ready", timeout_ms=timeout_ms)

    def fill(self, field: FormField, value: str) -> None:
        self._record("fill", field=field, value=value)

    def control_kind(self, field: FormField) -> ControlKind:
        self._record("control_kind", field=field)
        if field in self._control_kinds:
            return self._control_kinds[field]
        return ControlKind.SELECT if field in DROPDOWN_FIELDS else ControlKind.TEXT

    def read_options(self, field: FormField) -> list[DropdownCandidate]:
        self._record("read_options", field=field)
        return [DropdownCandidate(label=label, value=value) for label, value in self._options.get(field, [])]

    def select(self, field: FormField, value: str) -> None:
        self._record("select", field=field, value=value)

    def submit(self) -> None:
        self._record("submit")

    def open_listing(self) -> None:
        self._record("open_listing")

    def wait_for_rows(self, timeout_ms: int) -> int:
        self._record("wait_for_rows", timeout_ms=timeout_ms)
        return len(self._rows)

    def reload(self) -> None:
        self._record("reload")
        if self._rows_after_reload is not None:
            self._rows = list(self._rows_after_reload)

    def read_rows(self) -> list[ListingRow]:
        self._record("read_rows")
        return list(self._rows)

    def has_search(self) -> bool:
        return self._searchable

    def search(self, query: str) -> None:
        self._record("search", query=query)
        if self._filtered_rows is not None:
            self._rows = list(self._filtered_rows)

    def capture(self) -> tuple[bytes | None, str | None]:
        self._record("capture")
        return self._screenshot, self._html

    def close(self) -> None:
        self.closed = True

    # --- Inspection API for tests ---

    @property
    def filled(self) -> dict[FormField, str]:
        return {c["field"]: c["value"] for c in self._calls if c["action"] == "fill"}

    @property
    def selected(self) -> dict[FormField, str]:
        return {c["field"]: c["value"] for c in self._calls if c["action"] == "select"}

    @property
    def searches(self) -> list[str]:
        return [c["query"] for c in self._calls if c["action"] == "search"]

    @property
    def actions(self) -> list[str]:
        return [c["action"] for c in self._calls]

    @property
    def all_calls(self) -> list[dict]:
        return list(self._calls)

    def reset(self):
        self._calls.clear()
