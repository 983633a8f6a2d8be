"""Unit tests for the run graph routing and the WorkflowOrchestrator."""
import pytest

from src.config import AppConfig
from src.builder import WorkflowBuilder
from src.core.errors import FieldResolutionError, SessionClosedError
from src.core.listing import ListingRow
from src.core.work_item import RunStatus
from src.services.messaging.mock import MockMessenger
from src.services.portal.mock import MockPortal
from src.services.runtime.mock import MockRuntime
from src.services.repository.memory import InMemoryWorkItemRepository
from src.workflow import should_continue_after_fill, should_continue_after_verify
from tests.mocks import stored_item

ROWS = [
    ListingRow(ticket="T2", tax_id="800", company="OTRA SAS"),
    ListingRow(ticket="T1", tax_id="900123456", company="ACME LOGISTICA SAS"),
]


class RecordingRepository(InMemoryWorkItemRepository):
    """Keeps every status write in order. Ticket writes are not status writes."""

    def __init__(self):
        super().__init__()
        self.status_history = []

    def save(self, item):
        previous = self.get(item.id)
        super().save(item)
        if previous.ticket == item.ticket:
            self.status_history.append(item.status)


@pytest.fixture
def config(tmp_path):
    return AppConfig.for_test().model_copy(update={
        "artifacts_dir": str(tmp_path / "artifacts"),
        "session_state_path": str(tmp_path / "state" / "messaging_state.json"),
    })


def _builder(config, *portals, messenger=None):
    runtime = MockRuntime(portals=list(portals), messenger=messenger)
    return WorkflowBuilder(config, runtime_factory=lambda: runtime), runtime


class TestRouting:
    def test_after_fill(self):
        assert should_continue_after_fill({}) == "verify_listing"
        assert should_continue_after_fill({"final_status": "error"}) == "report"

    def test_after_verify(self):
        assert should_continue_after_verify({}) == "persist_ticket"
        assert should_continue_after_verify({"final_status": "error"}) == "report"


class TestOrchestratorSuccess:
    def test_completed_run(self, config):
        builder, runtime = _builder(config, MockPortal(listing_rows=ROWS))
        item = stored_item(builder.repository, ticket="")

        result = builder.build().run(item)

        assert result["final_status"] == "completed"
        assert result["ticket"] == "T1"
        assert result["trajectory"] == ["fill_form", "verify_listing", "persist_ticket", "notify", "report"]
        stored = builder.repository.get(item.id)
        assert stored.status is RunStatus.COMPLETED
        assert stored.ticket == "T1"
        assert stored.last_error is None
        assert len(runtime.messenger.messages_sent) == 2
        assert runtime.closed_count == 1

    def test_failed_notifications_still_complete(self, config):
        messenger = MockMessenger(auth_results=[False])
        builder, _ = _builder(config, MockPortal(listing_rows=ROWS), messenger=messenger)
        item = stored_item(builder.repository)

        result = builder.build().run(item)

        assert result["final_status"] == "completed"
        assert result["group_notified"] is False
        assert builder.repository.get(item.id).ticket == "T1"


class TestOrchestratorFailure:
    def test_fill_error_is_terminal(self, config, tmp_path):
        portal = MockPortal(errors={"submit": FieldResolutionError("submit button missing")})
        builder, runtime = _builder(config, portal)
        item = stored_item(builder.repository, ticket="")

        result = builder.build().run(item)

        assert result["final_status"] == "error"
        assert result["trajectory"] == ["fill_form", "report"]
        stored = builder.repository.get(item.id)
        assert stored.status is RunStatus.ERROR
        assert "submit button missing" in stored.last_error
        assert stored.ticket == ""
        assert runtime.messenger.messages_sent == []
        artifacts = sorted(p.suffix for p in (tmp_path / "artifacts").iterdir())
        assert artifacts == [".html", ".png"]

    def test_session_closed_is_retried_once(self, config):
        broken = MockPortal(errors={"open_listing": SessionClosedError("Target closed")})
        healthy = MockPortal(listing_rows=ROWS)
        builder, runtime = _builder(config, broken, healthy)
        item = stored_item(builder.repository)

        result = builder.build().run(item)

        assert result["final_status"] == "completed"
        assert result["attempt"] == 2
        assert runtime.portals_opened == 2
        assert builder.repository.get(item.id).ticket == "T1"

    def test_second_session_loss_is_terminal(self, config):
        broken = MockPortal(errors={"login": SessionClosedError("Target closed")})
        builder, runtime = _builder(config, broken)
        item = stored_item(builder.repository)

        result = builder.build().run(item)

        assert result["final_status"] == "error"
        assert runtime.portals_opened == 2
        stored = builder.repository.get(item.id)
        assert stored.status is RunStatus.ERROR
        assert "Target closed" in stored.last_error

    def test_runtime_failure_outside_graph(self, config):
        class ExplodingRuntime(MockRuntime):
            def open_portal(self):
                raise RuntimeError("chromium not installed")

        builder = WorkflowBuilder(config, runtime_factory=ExplodingRuntime)
        item = stored_item(builder.repository)

        result = builder.build().run(item)

        assert result["final_status"] == "error"
        assert result["error_message"] == "Run failed: chromium not installed"
        assert builder.repository.get(item.id).status is RunStatus.ERROR

    def test_every_attempt_records_in_progress_first(self, config):
        class ExplodingRuntime(MockRuntime):
            def open_portal(self):
                raise RuntimeError("chromium not installed")

        repository = RecordingRepository()
        builder = WorkflowBuilder(config, repository=repository, runtime_factory=ExplodingRuntime)
        item = stored_item(repository)

        builder.build().run(item)

        assert repository.status_history == [RunStatus.IN_PROGRESS, RunStatus.ERROR]

    def test_retry_marks_in_progress_again(self, config):
        broken = MockPortal(errors={"open_listing": SessionClosedError("Target closed")})
        repository = RecordingRepository()
        runtime = MockRuntime(portals=[broken, MockPortal(listing_rows=ROWS)])
        builder = WorkflowBuilder(config, repository=repository, runtime_factory=lambda: runtime)
        item = stored_item(repository)

        builder.build().run(item)

        assert repository.status_history == [RunStatus.IN_PROGRESS, RunStatus.IN_PROGRESS, RunStatus.COMPLETED]
