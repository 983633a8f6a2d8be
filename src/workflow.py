"""LangGraph workflow definition and the per-work-item orchestrator.

Graph structure:
    fill_form → (error?) → verify_listing → (error?) → persist_ticket → notify → report
              ↘ report                  ↘ report

The orchestrator runs one graph per attempt inside a fresh browser runtime and
owns the single retry: a first attempt that lost its browser session is rerun
from the top once.
"""
import logging
from typing import Callable

import opik
from langgraph.graph import StateGraph, END

from src.core.errors import error_kind, is_session_closed
from src.core.work_item import RunStatus, WorkItem
from src.core.workflow_state import RunWorkflowState
from src.nodes.fill_form import FillFormNode
from src.nodes.verify_listing import VerifyListingNode
from src.nodes.persist_ticket import PersistTicketNode
from src.nodes.notify import NotifyNode
from src.nodes.report import ReportNode
from src.services.runtime.base import BrowserRuntime
from src.services.status import StatusTracker

logger = logging.getLogger("ticket_agent.workflow")


def should_continue_after_fill(state: RunWorkflowState) -> str:
    """Route after form fill: verify the listing or stop."""
    if state.get("final_status") == "error":
        return "report"
    return "verify_listing"


def should_continue_after_verify(state: RunWorkflowState) -> str:
    """Route after verification: persist the ticket or stop."""
    if state.get("final_status") == "error":
        return "report"
    return "persist_ticket"


def build_graph(
    fill_form_node: FillFormNode,
    verify_listing_node: VerifyListingNode,
    persist_ticket_node: PersistTicketNode,
    notify_node: NotifyNode,
    report_node: ReportNode,
):
    """Build and compile the run graph.

    Returns a compiled LangGraph that can be invoked with a RunWorkflowState.
    """
    graph = StateGraph(RunWorkflowState)

    graph.add_node("fill_form", fill_form_node)
    graph.add_node("verify_listing", verify_listing_node)
    graph.add_node("persist_ticket", persist_ticket_node)
    graph.add_node("notify", notify_node)
    graph.add_node("report", report_node)

    graph.set_entry_point("fill_form")

    graph.add_conditional_edges(
        "fill_form",
        should_continue_after_fill,
        {"verify_listing": "verify_listing", "report": "report"},
    )
    graph.add_conditional_edges(
        "verify_listing",
        should_continue_after_verify,
        {"persist_ticket": "persist_ticket", "report": "report"},
    )

    # Linear: persist_ticket → notify → report → END
    graph.add_edge("persist_ticket", "notify")
    graph.add_edge("notify", "report")
    graph.add_edge("report", END)

    return graph.compile()


class WorkflowOrchestrator:
    """Entry point invoked once per work item."""

    def __init__(
        self,
        runtime_factory: Callable[[], BrowserRuntime],
        graph_factory: Callable[[BrowserRuntime], object],
        tracker: StatusTracker,
        max_attempts: int = 2,
    ):
        self._runtime_factory = runtime_factory
        self._graph_factory = graph_factory
        self._tracker = tracker
        self.max_attempts = max(1, max_attempts)

    @opik.track(name="ticket_run")
    def run(self, work_item: WorkItem) -> RunWorkflowState:
        result: RunWorkflowState = {}
        for attempt in range(1, self.max_attempts + 1):
            logger.info(f"Work item {work_item.id}: attempt {attempt}/{self.max_attempts}")
            result = self._run_attempt(work_item, attempt)
            if result.get("final_status") != "retry":
                break

        logger.info(
            f"Work item {work_item.id} finished: status={result.get('final_status')}, "
            f"ticket={result.get('ticket', '')}, strategy={result.get('match_strategy', '')}"
        )
        return result

    def _run_attempt(self, work_item: WorkItem, attempt: int) -> RunWorkflowState:
        input_state: RunWorkflowState = {
            "work_item": work_item,
            "attempt": attempt,
            "max_attempts": self.max_attempts,
            "skipped_fields": [],
            "notification_errors": [],
            "trajectory": [],
        }
        self._tracker.mark_running(work_item.id)
        try:
            with self._runtime_factory() as runtime:
                graph = self._graph_factory(runtime)
                return graph.invoke(input_state)
        except Exception as e:
            # Failures outside the nodes, e.g. the browser could not be launched.
            if is_session_closed(e) and attempt < self.max_attempts:
                logger.warning(f"Browser session closed on attempt {attempt} for work item {work_item.id}, will retry")
                return {**input_state, "final_status": "retry", "error_kind": error_kind(e)}
            message = f"Run failed: {e}"
            logger.error(f"Work item {work_item.id}: {message}")
            self._tracker.mark_terminal(work_item.id, RunStatus.ERROR, message)
            return {
                **input_state,
                "final_status": "error",
                "error_message": message,
                "error_kind": error_kind(e),
            }
