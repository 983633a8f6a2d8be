import json
import logging
from contextlib import contextmanager
from pathlib import Path

import opik
from playwright.sync_api import (
    Browser,
    BrowserContext,
    BrowserType,
    Error as PlaywrightError,
    Locator,
    TimeoutError as PlaywrightTimeoutError,
)

from src.core.errors import FieldResolutionError, PortalNavigationError, SessionClosedError, is_session_closed
from src.services.messaging.base import MessageSender

logger = logging.getLogger("ticket_agent.messaging")

# The chat-list search box only renders once the session is logged in.
LOGGED_IN_SELECTOR = "div[contenteditable='true'][data-tab='3']"
SEARCH_BOX_SELECTOR = LOGGED_IN_SELECTOR
CHAT_LIST_SELECTOR = "#pane-side"
CHAT_RESULT_SELECTOR = "#pane-side span[title]"
COMPOSER_SELECTORS = (
    "footer div[contenteditable='true'][role='textbox']",
    "footer div[contenteditable='true']",
    "div[contenteditable='true'][data-tab='10']",
    "div[contenteditable='true'][role='textbox']",
    "[role='textbox']",
)
SEND_BUTTON_SELECTOR = "button[aria-label*='Send' i], button[aria-label*='Enviar' i], span[data-icon='send']"

NAVIGATION_TIMEOUT_MS = 60000
KEY_DELAY_MS = 20
LINE_BREAK_DELAY_MS = 150


@contextmanager
def _translated(error_cls: type, what: str):
    try:
        yield
    except PlaywrightError as e:
        if is_session_closed(e):
            raise SessionClosedError(f"{what}: {e}") from e
        raise error_cls(f"{what}: {e}") from e


class PlaywrightMessenger(MessageSender):
    """Messaging web client driven through Chromium.

    With `profile_dir` set the browser runs on a persistent profile and the
    saved storage state only seeds its cookies; otherwise a fresh context is
    created from the storage state file.
    """

    def __init__(
        self,
        chromium: BrowserType,
        base_url: str,
        profile_dir: str | None = None,
        headless: bool = False,
        slow_mo_ms: int = 0,
        settle_delay_ms: int = 1500,
    ):
        self._chromium = chromium
        self._base_url = base_url
        self._profile_dir = profile_dir
        self._headless = headless
        self._slow_mo_ms = slow_mo_ms
        self._settle_delay_ms = settle_delay_ms
        self._browser: Browser | None = None
        self._context: BrowserContext | None = None
        self._page = None
        self._composer: Locator | None = None

    @opik.track(name="messaging_open")
    def open(self, storage_state: Path | None = None) -> None:
        with _translated(PortalNavigationError, "Could not launch messaging client"):
            if self._profile_dir:
                profile = Path(self._profile_dir)
                profile.mkdir(parents=True, exist_ok=True)
                self._context = self._chromium.launch_persistent_context(
                    str(profile),
                    headless=self._headless,
                    slow_mo=self._slow_mo_ms,
                )
                if storage_state is not None:
                    self._seed_cookies(storage_state)
            else:
                self._browser = self._chromium.launch(headless=self._headless, slow_mo=self._slow_mo_ms)
                self._context = self._browser.new_context(
                    storage_state=str(storage_state) if storage_state is not None else None,
                )
            self._page = self._context.pages[0] if self._context.pages else self._context.new_page()
            self._page.goto(self._base_url, wait_until="domcontentloaded", timeout=NAVIGATION_TIMEOUT_MS)

    def _seed_cookies(self, storage_state: Path) -> None:
        try:
            state = json.loads(storage_state.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable session state {storage_state}: {e}")
            return
        cookies = state.get("cookies") or []
        if cookies:
            self._context.add_cookies(cookies)

    def wait_until_authenticated(self, timeout_ms: int) -> bool:
        with _translated(PortalNavigationError, "Authentication check failed"):
            try:
                self._page.locator(LOGGED_IN_SELECTOR).first.wait_for(state="visible", timeout=timeout_ms)
            except PlaywrightTimeoutError:
                return False
        return True

    def save_session(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        with _translated(PortalNavigationError, "Could not save session state"):
            self._context.storage_state(path=str(path))

    @opik.track(name="messaging_open_chat")
    def open_chat(self, query: str) -> None:
        self._composer = None
        with _translated(FieldResolutionError, f"Could not open chat {query!r}"):
            box = self._page.locator(SEARCH_BOX_SELECTOR).first
            box.click()
            box.fill(query)
            self._page.wait_for_timeout(self._settle_delay_ms)

            exact = self._page.locator(CHAT_LIST_SELECTOR).get_by_title(query, exact=True)
            results = self._page.locator(CHAT_RESULT_SELECTOR)
            if exact.count() > 0:
                exact.first.click()
            elif results.count() > 0:
                logger.info(f"No exact chat title for {query!r}, opening first result")
                results.first.click()
            else:
                raise FieldResolutionError(f"No chat found for {query!r}")
            self._page.wait_for_timeout(self._settle_delay_ms)

    def type_text(self, text: str) -> None:
        composer = self._find_composer()
        with _translated(FieldResolutionError, "Typing into composer failed"):
            composer.press_sequentially(text, delay=KEY_DELAY_MS)

    def line_break(self) -> None:
        composer = self._find_composer()
        with _translated(FieldResolutionError, "Line break failed"):
            composer.press("Shift+Enter")
            self._page.wait_for_timeout(LINE_BREAK_DELAY_MS)

    @opik.track(name="messaging_send")
    def send(self) -> None:
        composer = self._find_composer()
        try:
            composer.press("Enter")
        except PlaywrightError as e:
            if is_session_closed(e):
                raise SessionClosedError(f"Send failed: {e}") from e
            logger.warning(f"Enter did not send, trying send button: {e}")
            with _translated(FieldResolutionError, "Send button click failed"):
                button = self._page.locator(SEND_BUTTON_SELECTOR)
                if button.count() == 0:
                    raise FieldResolutionError("Send button not found") from e
                button.first.click()
        with _translated(FieldResolutionError, "Post-send wait failed"):
            self._page.wait_for_timeout(self._settle_delay_ms)

    def _find_composer(self) -> Locator:
        if self._composer is not None:
            return self._composer
        with _translated(FieldResolutionError, "Composer lookup failed"):
            for selector in COMPOSER_SELECTORS:
                locator = self._page.locator(selector)
                if locator.count() > 0:
                    logger.debug(f"Composer found with {selector}")
                    self._composer = locator.last
                    self._composer.click()
                    return self._composer
        raise FieldResolutionError("Message composer not found")

    def close(self) -> None:
        try:
            if self._context is not None:
                self._context.close()
        finally:
            if self._browser is not None:
                self._browser.close()
