import logging

from playwright.sync_api import Playwright, sync_playwright

from src.config import AppConfig
from src.services.messaging.base import MessageSender
from src.services.messaging.playwright import PlaywrightMessenger
from src.services.portal.base import PortalSession
from src.services.portal.playwright import PlaywrightPortal
from src.services.runtime.base import BrowserRuntime

logger = logging.getLogger("ticket_agent.runtime")


class PlaywrightRuntime(BrowserRuntime):
    """One Playwright driver per run; portal and messaging get separate browsers.

    The sync API allows a single driver per thread, so both surfaces share it.
    """

    def __init__(self, config: AppConfig):
        self._config = config
        self._playwright: Playwright | None = None
        self._opened: list = []

    def start(self) -> None:
        self._playwright = sync_playwright().start()

    def open_portal(self) -> PortalSession:
        browser = self._chromium().launch(
            headless=self._config.headless,
            slow_mo=self._config.slow_mo_ms,
        )
        portal = PlaywrightPortal(
            browser,
            base_url=self._config.portal_base_url,
            default_timeout_ms=self._config.field_wait_timeout_ms,
            settle_delay_ms=self._config.settle_delay_ms,
        )
        self._opened.append(portal)
        return portal

    def open_messenger(self) -> MessageSender:
        messenger = PlaywrightMessenger(
            self._chromium(),
            base_url=self._config.messaging_base_url,
            profile_dir=self._config.messaging_profile_dir,
            headless=self._config.headless,
            slow_mo_ms=self._config.slow_mo_ms,
            settle_delay_ms=self._config.settle_delay_ms,
        )
        self._opened.append(messenger)
        return messenger

    def _chromium(self):
        if self._playwright is None:
            raise RuntimeError("PlaywrightRuntime used outside its context")
        return self._playwright.chromium

    def close(self) -> None:
        for resource in reversed(self._opened):
            try:
                resource.close()
            except Exception as e:
                logger.warning(f"Error while closing {type(resource).__name__}: {e}")
        self._opened.clear()
        if self._playwright is not None:
            try:
                self._playwright.stop()
            except Exception as e:
                logger.warning(f"Error while stopping Playwright: {e}")
            self._playwright = None
