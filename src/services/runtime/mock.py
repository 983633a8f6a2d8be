from src.core.listing import ListingRow
from src.core.field_mapping import SALES_LINE_FORKLIFT, SALES_LINE_SERVICE, SALES_LINE_SOLUTIONS
from src.services.messaging.base import MessageSender
from src.services.messaging.mock import MockMessenger
from src.services.portal.base import FormField, PortalSession
from src.services.portal.mock import MockPortal
from src.services.runtime.base import BrowserRuntime


MOCK_OPTIONS = {
    FormField.CITY: [("Bogotá D.C.", "11"), ("Medellín", "05"), ("Cali", "76")],
    FormField.CLIENT_TYPE: [("Nuevo", "1"), ("Antiguo", "2"), ("Fidelizado", "3"), ("Recuperado", "4")],
    FormField.CONTACT_CHANNEL: [("WhatsApp", "WHATSAPP"), ("Correo", "EMAIL"), ("Web", "WEB")],
    FormField.ASSIGNED_AGENT: [("Carolina Martinez", "CMARTINEZ"), ("Jorge Ramirez", "JRAMIREZ")],
    FormField.SALES_LINE: [
        ("Montacargas", SALES_LINE_FORKLIFT),
        ("Servicio", SALES_LINE_SERVICE),
        ("Soluciones", SALES_LINE_SOLUTIONS),
    ],
}


def default_mock_portal() -> MockPortal:
    return MockPortal(options=MOCK_OPTIONS, listing_rows=[ListingRow(ticket="MOCK-0001")])


class MockRuntime(BrowserRuntime):
    """Hands out pre-built mock sessions, one portal per attempt.

    Pass several portals to script a retry: attempt N gets `portals[N-1]`.
    """

    def __init__(
        self,
        portals: list[MockPortal] | None = None,
        messenger: MockMessenger | None = None,
    ):
        self._portals = list(portals) if portals else [default_mock_portal()]
        self._messenger = messenger or MockMessenger()
        self.portals_opened = 0
        self.messengers_opened = 0
        self.closed_count = 0

    def open_portal(self) -> PortalSession:
        index = min(self.portals_opened, len(self._portals) - 1)
        self.portals_opened += 1
        return self._portals[index]

    def open_messenger(self) -> MessageSender:
        self.messengers_opened += 1
        return self._messenger

    @property
    def messenger(self) -> MockMessenger:
        return self._messenger

    def close(self) -> None:
        self.closed_count += 1
