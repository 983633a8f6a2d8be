"""Messaging-only smoke test: log in (QR if needed) and send one message.

Usage:
    python scripts/test_messaging_only.py --to 573001234567 --message "Prueba"
    python scripts/test_messaging_only.py --to "Asignaciones Comerciales"

Uses the same session state file and profile as the real runs, so a
successful QR scan here is reused by the automation afterwards.
"""
# ruff: noqa: E402
import argparse
import logging
import sys
from pathlib import Path

project_root = str(Path(__file__).parent.parent)
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from dotenv import load_dotenv
load_dotenv(Path(project_root) / ".env")

from src.config import AppConfig
from src.services.messaging.session_state import SessionStateStore
from src.services.runtime.playwright import PlaywrightRuntime

DEFAULT_MESSAGE = "Mensaje de prueba\nenviado por el agente de tickets"


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--config", type=str, default=str(Path(project_root) / "config.yaml"))
    parser.add_argument("--to", type=str, required=True, help="Chat title or phone number")
    parser.add_argument("--message", type=str, default=DEFAULT_MESSAGE)
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s %(message)s")
    config = AppConfig.from_yaml(args.config)
    store = SessionStateStore(config.session_state_path, config.session_min_bytes)

    if store.discard_if_corrupt():
        print("Corrupt session state removed, a QR scan will be required.")

    with PlaywrightRuntime(config) as runtime:
        sender = runtime.open_messenger()
        sender.open(store.current())
        if not sender.wait_until_authenticated(config.auth_wait_timeout_ms):
            print(f"Not logged in. Scan the QR code within {config.qr_wait_timeout_ms // 1000}s...")
            if not sender.wait_until_authenticated(config.qr_wait_timeout_ms):
                print("QR scan timed out.")
                return
        sender.save_session(store.path)
        print(f"Session saved: {store.path}")

        sender.open_chat(args.to)
        lines = args.message.replace("\\n", "\n").split("\n")
        for i, line in enumerate(lines):
            if line:
                sender.type_text(line)
            if i < len(lines) - 1:
                sender.line_break()
        sender.send()
        sender.save_session(store.path)
        print(f"Message sent to {args.to}")


if __name__ == "__main__":
    main()
