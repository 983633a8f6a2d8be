import logging
from contextlib import contextmanager

import opik
from playwright.sync_api import Browser, Error as PlaywrightError, TimeoutError as PlaywrightTimeoutError

from src.core.errors import FieldResolutionError, PortalNavigationError, SessionClosedError, is_session_closed
from src.core.listing import DropdownCandidate, ListingRow, parse_listing_html
from src.services.portal.base import ControlKind, FormField, PortalSession

logger = logging.getLogger("ticket_agent.portal")

FIELD_SELECTORS = {
    FormField.TAX_ID: "#nit",
    FormField.COMPANY: "#empresa",
    FormField.CONTACT_LINE: "#linea_contacto",
    FormField.FIRST_NAME: "#contacto",
    FormField.LAST_NAME: "#apellido_contacto",
    FormField.PHONE: "#celular",
    FormField.EMAIL: "#correo",
    FormField.DESCRIPTION: "#concepto",
    FormField.CITY: "#ciudad",
    FormField.CLIENT_TYPE: "#id_tipo_cliente",
    FormField.CONTACT_CHANNEL: "#medio_contacto",
    FormField.ASSIGNED_AGENT: "#asignado_a",
    FormField.SALES_LINE: "#linea_venta",
}
REQUIRED_FIELDS = (FormField.TAX_ID, FormField.COMPANY)

LOGIN_ENTRY = "text=Portal Colaboradores"
LOGIN_USER = "#name"
LOGIN_PASSWORD = "#password"
LOGIN_SUBMIT = "#ingresar"
SUBMIT_SELECTOR = "#guardar, button[type='submit']"
LISTING_ROW_SELECTOR = "table tbody tr"
SEARCH_SELECTORS = (
    "input[type='search']",
    "#buscar",
    "input[name='search']",
)

READ_OPTIONS_JS = """(options) => options
    .filter(o => o.value !== '')
    .map(o => ({label: (o.text || '').trim(), value: o.value}))"""


@contextmanager
def _translated(error_cls: type, what: str):
    """Re-raise Playwright errors as the run's taxonomy."""
    try:
        yield
    except PlaywrightError as e:
        if is_session_closed(e):
            raise SessionClosedError(f"{what}: {e}") from e
        raise error_cls(f"{what}: {e}") from e


class PlaywrightPortal(PortalSession):
    """Case-management portal driven through a dedicated Chromium browser."""

    def __init__(
        self,
        browser: Browser,
        base_url: str,
        default_timeout_ms: int = 30000,
        settle_delay_ms: int = 1500,
    ):
        self._browser = browser
        self._base_url = base_url.rstrip("/")
        self._settle_delay_ms = settle_delay_ms
        self._context = browser.new_context()
        self._page = self._context.new_page()
        self._page.set_default_timeout(default_timeout_ms)

    # --- Authenticator ---

    @opik.track(name="portal_login")
    def login(self, username: str, password: str) -> None:
        logger.info("Logging in to portal")
        with _translated(PortalNavigationError, "Portal login failed"):
            self._page.goto(f"{self._base_url}/index")
            self._page.click(LOGIN_ENTRY)
            self._page.fill(LOGIN_USER, username)
            self._page.fill(LOGIN_PASSWORD, password)
            self._page.click(LOGIN_SUBMIT)
            self._page.wait_for_load_state("load")

    # --- FormFiller ---

    def open_form(self) -> None:
        with _translated(PortalNavigationError, "Could not open creation form"):
            self._page.goto(f"{self._base_url}/SolicitudGestor/create")

    def wait_until_ready(self, timeout_ms: int) -> None:
        for field in REQUIRED_FIELDS:
            selector = FIELD_SELECTORS[field]
            with _translated(FieldResolutionError, f"Field {selector} not ready"):
                locator = self._page.locator(selector)
                locator.wait_for(state="visible", timeout=timeout_ms)
                if not locator.is_enabled():
                    raise FieldResolutionError(f"Field {selector} is disabled")

    def fill(self, field: FormField, value: str) -> None:
        selector = FIELD_SELECTORS[field]
        with _translated(FieldResolutionError, f"Could not fill {selector}"):
            self._page.fill(selector, value)

    def control_kind(self, field: FormField) -> ControlKind:
        selector = FIELD_SELECTORS[field]
        with _translated(FieldResolutionError, f"Could not inspect {selector}"):
            locator = self._page.locator(selector)
            if locator.count() == 0:
                return ControlKind.MISSING
            tag = locator.first.evaluate("el => el.tagName.toLowerCase()")
        return ControlKind.SELECT if tag == "select" else ControlKind.TEXT

    def read_options(self, field: FormField) -> list[DropdownCandidate]:
        selector = FIELD_SELECTORS[field]
        with _translated(FieldResolutionError, f"Could not read options of {selector}"):
            raw = self._page.eval_on_selector_all(f"{selector} option", READ_OPTIONS_JS)
        return [DropdownCandidate(**option) for option in raw]

    def select(self, field: FormField, value: str) -> None:
        selector = FIELD_SELECTORS[field]
        with _translated(FieldResolutionError, f"Could not select {value!r} in {selector}"):
            self._page.select_option(selector, value=value)

    @opik.track(name="portal_submit")
    def submit(self) -> None:
        with _translated(FieldResolutionError, "Could not submit form"):
            self._page.click(SUBMIT_SELECTOR)
            self._page.wait_for_load_state("load")
            self._page.wait_for_timeout(self._settle_delay_ms)

    # --- ListingReader ---

    def open_listing(self) -> None:
        with _translated(PortalNavigationError, "Could not open listing"):
            self._page.goto(f"{self._base_url}/SolicitudGestor")

    def wait_for_rows(self, timeout_ms: int) -> int:
        with _translated(PortalNavigationError, "Listing wait failed"):
            try:
                self._page.wait_for_selector(LISTING_ROW_SELECTOR, state="attached", timeout=timeout_ms)
            except PlaywrightTimeoutError:
                return 0
            return self._page.locator(LISTING_ROW_SELECTOR).count()

    def reload(self) -> None:
        with _translated(PortalNavigationError, "Listing reload failed"):
            self._page.reload(wait_until="load")

    @opik.track(name="portal_read_rows")
    def read_rows(self) -> list[ListingRow]:
        with _translated(PortalNavigationError, "Could not read listing"):
            html = self._page.content()
        return parse_listing_html(html)

    def has_search(self) -> bool:
        return self._search_selector() is not None

    def search(self, query: str) -> None:
        selector = self._search_selector()
        if selector is None:
            raise FieldResolutionError("Listing has no search control")
        with _translated(FieldResolutionError, "Listing search failed"):
            self._page.fill(selector, query)
            self._page.press(selector, "Enter")
            self._page.wait_for_load_state("load")
            self._page.wait_for_timeout(self._settle_delay_ms)

    def _search_selector(self) -> str | None:
        with _translated(PortalNavigationError, "Could not inspect listing"):
            for selector in SEARCH_SELECTORS:
                if self._page.locator(selector).count() > 0:
                    return selector
        return None

    # --- Diagnostics ---

    def capture(self) -> tuple[bytes | None, str | None]:
        screenshot, html = None, None
        try:
            screenshot = self._page.screenshot(full_page=True)
        except PlaywrightError as e:
            logger.warning(f"Screenshot capture failed: {e}")
        try:
            html = self._page.content()
        except PlaywrightError as e:
            logger.warning(f"DOM capture failed: {e}")
        return screenshot, html

    def close(self) -> None:
        try:
            self._context.close()
        finally:
            self._browser.close()
