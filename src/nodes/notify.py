import logging
from typing import Callable

import opik

from src.nodes.base import BaseNode
from src.core.errors import MessagingAuthError
from src.core.field_mapping import greeting_for, phone_digits
from src.core.work_item import WorkItem
from src.core.workflow_state import RunWorkflowState
from src.services.messaging.base import MessageSender
from src.services.messaging.session_state import SessionStateStore
from src.services.templates.base import TemplateStore

logger = logging.getLogger("ticket_agent.notify")


class NotifyNode(BaseNode):
    """Sends the operator group notification and the requester acknowledgment.

    Runs in its own messaging session. Neither send can fail the run or stop
    the other one; failures end up in `notification_errors`.
    """

    name = "notify"

    def __init__(
        self,
        open_messenger: Callable[[], MessageSender],
        session_store: SessionStateStore,
        templates: TemplateStore,
        notify_target: str,
        honorifics: dict[str, list[str]],
        auth_timeout_ms: int,
        qr_timeout_ms: int,
        country_code: str = "",
    ):
        self.open_messenger = open_messenger
        self.session_store = session_store
        self.templates = templates
        self.notify_target = notify_target
        self.honorifics = honorifics
        self.auth_timeout_ms = auth_timeout_ms
        self.qr_timeout_ms = qr_timeout_ms
        self.country_code = country_code

    @opik.track(name="notify_node")
    def __call__(self, state: RunWorkflowState) -> dict:
        if state.get("final_status") == "error":
            return {"trajectory": self._trajectory(state)}

        item = state["work_item"]
        ticket = state.get("ticket", "")
        errors = list(state.get("notification_errors", []))

        try:
            sender = self._start_session()
        except Exception as e:
            logger.error(f"Messaging session unavailable, no notifications for work item {item.id}: {e}")
            return {
                "group_notified": False,
                "requester_notified": False,
                "notification_errors": errors + [f"session: {e}"],
                "trajectory": self._trajectory(state),
            }

        group_notified = self._send(
            sender, "group", self.notify_target,
            lambda: self._group_message(item, ticket), errors,
        )
        requester_notified = self._send(
            sender, "requester", phone_digits(item.phone, self.country_code),
            lambda: self._requester_message(item, ticket), errors,
        )

        return {
            "group_notified": group_notified,
            "requester_notified": requester_notified,
            "notification_errors": errors,
            "trajectory": self._trajectory(state),
        }

    def _start_session(self) -> MessageSender:
        self.session_store.discard_if_corrupt()
        sender = self.open_messenger()
        sender.open(self.session_store.current())

        if not sender.wait_until_authenticated(self.auth_timeout_ms):
            logger.warning(f"Messaging client not logged in, scan the QR code within {self.qr_timeout_ms // 1000}s")
            if not sender.wait_until_authenticated(self.qr_timeout_ms):
                raise MessagingAuthError("Messaging login (QR scan) timed out")
            logger.info("QR login completed")

        sender.save_session(self.session_store.path)
        return sender

    def _send(
        self,
        sender: MessageSender,
        label: str,
        target: str,
        render: Callable[[], str],
        errors: list[str],
    ) -> bool:
        if not target:
            logger.warning(f"No {label} target configured, skipping")
            errors.append(f"{label}: no target")
            return False
        try:
            message = render()
            sender.open_chat(target)
            self._type_message(sender, message)
            sender.send()
            logger.info(f"{label.capitalize()} notification sent to {target}")
            return True
        except Exception as e:
            logger.error(f"{label.capitalize()} notification to {target} failed: {e}")
            errors.append(f"{label}: {e}")
            return False
        finally:
            # Captures any session refresh the client did, even after a failed send.
            try:
                sender.save_session(self.session_store.path)
            except Exception as e:
                logger.warning(f"Could not persist session state after {label} send: {e}")

    @staticmethod
    def _type_message(sender: MessageSender, message: str) -> None:
        lines = message.split("\n")
        for i, line in enumerate(lines):
            if line:
                sender.type_text(line)
            if i < len(lines) - 1:
                sender.line_break()

    def _group_message(self, item: WorkItem, ticket: str) -> str:
        return self.templates.get_and_render("notify", "group", {
            "ticket": ticket,
            "tax_id": item.tax_id,
            "company": item.company,
            "contact_name": item.contact_name,
            "phone": item.phone,
            "city": item.city,
            "description": item.description,
        })

    def _requester_message(self, item: WorkItem, ticket: str) -> str:
        return self.templates.get_and_render("notify", "requester", {
            "greeting": greeting_for(item.contact_name, self.honorifics),
            "company": item.company,
            "ticket": ticket,
        })
