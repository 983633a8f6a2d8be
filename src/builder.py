"""WorkflowBuilder: wires services and nodes based on AppConfig."""
from typing import Callable

from src.config import AppConfig
from src.services.artifacts import ArtifactStore
from src.services.messaging.session_state import SessionStateStore
from src.services.repository.base import WorkItemRepository
from src.services.repository.memory import InMemoryWorkItemRepository
from src.services.runtime.base import BrowserRuntime
from src.services.runtime.mock import MockRuntime
from src.services.runtime.playwright import PlaywrightRuntime
from src.services.status import StatusTracker
from src.services.templates.base import TemplateStore
from src.services.templates.local import LocalTemplateStore
from src.nodes.fill_form import FillFormNode
from src.nodes.verify_listing import VerifyListingNode
from src.nodes.persist_ticket import PersistTicketNode
from src.nodes.notify import NotifyNode
from src.nodes.report import ReportNode
from src.workflow import WorkflowOrchestrator, build_graph


class WorkflowBuilder:
    """Builds the run orchestrator by wiring services and nodes from config."""

    def __init__(
        self,
        config: AppConfig,
        repository: WorkItemRepository | None = None,
        runtime_factory: Callable[[], BrowserRuntime] | None = None,
    ):
        self.config = config

        # Instantiate services
        self._repository = repository or InMemoryWorkItemRepository()
        self._tracker = StatusTracker(self._repository)
        self._templates = self._build_template_store()
        self._session_store = SessionStateStore(config.session_state_path, config.session_min_bytes)
        self._artifacts = ArtifactStore(config.artifacts_dir)
        self._runtime_factory = runtime_factory or self._build_runtime_factory()

    @property
    def repository(self) -> WorkItemRepository:
        return self._repository

    @property
    def tracker(self) -> StatusTracker:
        return self._tracker

    @property
    def templates(self) -> TemplateStore:
        return self._templates

    def build(self) -> WorkflowOrchestrator:
        """Build the orchestrator; each run attempt gets a fresh graph and runtime."""
        return WorkflowOrchestrator(
            runtime_factory=self._runtime_factory,
            graph_factory=self.build_graph,
            tracker=self._tracker,
            max_attempts=self.config.max_attempts,
        )

    def build_graph(self, runtime: BrowserRuntime):
        """Compile a graph whose nodes are bound to this runtime's sessions."""
        config = self.config
        portal = runtime.open_portal()
        nodes = {
            "fill_form_node": FillFormNode(
                auth=portal,
                form=portal,
                username=config.portal_user,
                password=config.portal_password,
                contact_line=config.portal_contact_line,
                ready_timeout_ms=config.field_wait_timeout_ms,
                client_type_codes=config.client_type_codes,
                default_client_type_code=config.default_client_type_code,
                agent_codes=config.agent_codes,
            ),
            "verify_listing_node": VerifyListingNode(portal, config.listing_wait_timeout_ms),
            "persist_ticket_node": PersistTicketNode(self._tracker),
            "notify_node": NotifyNode(
                open_messenger=runtime.open_messenger,
                session_store=self._session_store,
                templates=self._templates,
                notify_target=config.notify_target,
                honorifics=config.honorifics,
                auth_timeout_ms=config.auth_wait_timeout_ms,
                qr_timeout_ms=config.qr_wait_timeout_ms,
                country_code=config.default_country_code,
            ),
            "report_node": ReportNode(self._tracker, diagnostics=portal, artifacts=self._artifacts),
        }
        return build_graph(**nodes)

    def _build_runtime_factory(self) -> Callable[[], BrowserRuntime]:
        if self.config.browser_backend == "playwright":
            return lambda: PlaywrightRuntime(self.config)
        if self.config.browser_backend == "mock":
            return MockRuntime
        raise ValueError(f"Unknown browser backend: {self.config.browser_backend}")

    def _build_template_store(self) -> TemplateStore:
        if self.config.template_store == "local":
            return LocalTemplateStore(
                templates_dir=self.config.templates_dir,
                language=self.config.template_language,
                fallback_language=self.config.template_fallback_language,
            )
        raise ValueError(f"Unknown template store: {self.config.template_store}")
