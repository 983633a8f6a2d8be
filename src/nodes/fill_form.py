import logging

import opik

from src.nodes.base import BaseNode
from src.core.field_mapping import (
    classify_sales_line,
    contact_channel_variants,
    resolve_agent_code,
    resolve_client_type,
    split_name,
)
from src.core.matching import best_match
from src.core.work_item import WorkItem
from src.core.workflow_state import RunWorkflowState
from src.services.portal.base import Authenticator, ControlKind, FormField, FormFiller

logger = logging.getLogger("ticket_agent.form")


class FillFormNode(BaseNode):
    """Logs in, fills the creation form and submits it.

    Any fill, wait or select failure aborts the run. A dropdown that cannot be
    resolved is left unset and reported in `skipped_fields`.
    """

    name = "fill_form"

    def __init__(
        self,
        auth: Authenticator,
        form: FormFiller,
        username: str,
        password: str,
        contact_line: str,
        ready_timeout_ms: int,
        client_type_codes: dict[str, str],
        default_client_type_code: str,
        agent_codes: dict[str, str],
    ):
        self.auth = auth
        self.form = form
        self.username = username
        self.password = password
        self.contact_line = contact_line
        self.ready_timeout_ms = ready_timeout_ms
        self.client_type_codes = client_type_codes
        self.default_client_type_code = default_client_type_code
        self.agent_codes = agent_codes

    @opik.track(name="fill_form_node")
    def __call__(self, state: RunWorkflowState) -> dict:
        if state.get("final_status") == "error":
            return {"trajectory": self._trajectory(state)}

        item = state["work_item"]
        try:
            self.auth.login(self.username, self.password)
            self.form.open_form()
            self.form.wait_until_ready(self.ready_timeout_ms)
            self._fill_text_fields(item)
            skipped = self._fill_dropdowns(item)
            self.form.submit()
        except Exception as e:
            logger.error(f"Form fill failed for work item {item.id}: {e}")
            return self._failed(state, e)

        logger.info(f"Form submitted for work item {item.id}")
        return {
            "form_submitted": True,
            "skipped_fields": skipped,
            "trajectory": self._trajectory(state),
        }

    def _fill_text_fields(self, item: WorkItem) -> None:
        first_name, last_name = split_name(item.contact_name)
        values = [
            (FormField.TAX_ID, item.tax_id),
            (FormField.COMPANY, item.company),
            (FormField.CONTACT_LINE, self.contact_line),
            (FormField.FIRST_NAME, first_name),
            (FormField.LAST_NAME, last_name),
            (FormField.PHONE, item.phone),
            (FormField.EMAIL, item.email),
            (FormField.DESCRIPTION, item.description),
        ]
        for field, value in values:
            self.form.fill(field, value)

    def _fill_dropdowns(self, item: WorkItem) -> list[str]:
        resolvers = [
            (FormField.CITY, self._select_city),
            (FormField.CLIENT_TYPE, self._select_client_type),
            (FormField.CONTACT_CHANNEL, self._select_contact_channel),
            (FormField.ASSIGNED_AGENT, self._select_agent),
            (FormField.SALES_LINE, self._select_sales_line),
        ]
        skipped = []
        for field, resolve in resolvers:
            if not resolve(item):
                logger.warning(f"No value resolved for {field.value} on work item {item.id}, leaving it unset")
                skipped.append(field.value)
        return skipped

    def _select_city(self, item: WorkItem) -> bool:
        if not item.city:
            return False
        # Top score wins even at 0: the portal always needs some city.
        option = best_match(item.city, self.form.read_options(FormField.CITY), key=lambda o: o.label)
        if option is None:
            return False
        self.form.select(FormField.CITY, option.value)
        logger.info(f"City {item.city!r} -> {option.label!r} ({option.value})")
        return True

    def _select_client_type(self, item: WorkItem) -> bool:
        code = resolve_client_type(item.client_type, self.client_type_codes, self.default_client_type_code)
        return self._select_offered(FormField.CLIENT_TYPE, code)

    def _select_contact_channel(self, item: WorkItem) -> bool:
        raw = item.contact_channel
        if not raw:
            return False

        kind = self.form.control_kind(FormField.CONTACT_CHANNEL)
        if kind is ControlKind.MISSING:
            return False
        if kind is ControlKind.TEXT:
            self.form.fill(FormField.CONTACT_CHANNEL, raw)
            return True

        options = self.form.read_options(FormField.CONTACT_CHANNEL)
        values = {o.value for o in options}
        for candidate in contact_channel_variants(raw):
            if candidate in values:
                self.form.select(FormField.CONTACT_CHANNEL, candidate)
                return True

        option = best_match(raw, options, key=lambda o: o.label, require_positive=True)
        if option is None:
            return False
        self.form.select(FormField.CONTACT_CHANNEL, option.value)
        return True

    def _select_agent(self, item: WorkItem) -> bool:
        code = resolve_agent_code(item.assigned_agent, self.agent_codes)
        if code is None:
            return False
        return self._select_offered(FormField.ASSIGNED_AGENT, code)

    def _select_sales_line(self, item: WorkItem) -> bool:
        return self._select_offered(FormField.SALES_LINE, classify_sales_line(item.sales_line))

    def _select_offered(self, field: FormField, code: str) -> bool:
        """Select a configured code only if the live control offers it."""
        values = {o.value for o in self.form.read_options(field)}
        if code not in values:
            logger.warning(f"Portal offers no option {code!r} for {field.value}")
            return False
        self.form.select(field, code)
        return True
