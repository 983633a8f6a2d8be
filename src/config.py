from pathlib import Path

import yaml
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppConfig(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Browser
    browser_backend: str = "playwright"  # "playwright" | "mock"
    headless: bool = False
    slow_mo_ms: int = 0

    # Portal
    portal_base_url: str = ""
    portal_user: str = ""
    portal_password: str = ""
    portal_contact_line: str = "WEB"

    # Messaging
    messaging_base_url: str = "https://web.whatsapp.com"
    notify_target: str = ""
    session_state_path: str = "state/messaging_state.json"
    messaging_profile_dir: str | None = None
    session_min_bytes: int = 100
    default_country_code: str = "57"

    # Timeouts (ms)
    auth_wait_timeout_ms: int = 15000
    qr_wait_timeout_ms: int = 90000
    field_wait_timeout_ms: int = 30000
    listing_wait_timeout_ms: int = 20000
    settle_delay_ms: int = 1500

    # Orchestration
    max_attempts: int = 2
    artifacts_dir: str = "artifacts"

    # Message templates
    template_store: str = "local"
    templates_dir: str = "templates"
    template_language: str = "es"
    template_fallback_language: str = "es"

    # Mapping data
    client_type_codes: dict[str, str] = {
        "Nuevo": "1",
        "Antiguo": "2",
        "Fidelizado": "3",
        "Recuperado": "4",
    }
    default_client_type_code: str = "1"
    agent_codes: dict[str, str] = {}
    honorifics: dict[str, list[str]] = {"male": [], "female": []}

    # Observability
    opik_workspace: str | None = None
    opik_project: str = "portal-ticket-agent"

    @classmethod
    def from_yaml(cls, path: str | Path) -> "AppConfig":
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
        return cls(**data)

    @classmethod
    def for_test(cls) -> "AppConfig":
        """Pre-configured for tests: mock browsers, no real waits."""
        return cls(
            browser_backend="mock",
            portal_base_url="https://portal.test",
            portal_user="bot",
            portal_password="secret",
            notify_target="Asignaciones",
            settle_delay_ms=0,
        )
