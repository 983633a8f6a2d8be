import logging

import opik

from src.nodes.base import BaseNode
from src.core.errors import SessionClosedError
from src.core.work_item import RunStatus
from src.core.workflow_state import RunWorkflowState
from src.services.artifacts import ArtifactStore
from src.services.portal.base import Diagnostics
from src.services.status import StatusTracker

logger = logging.getLogger("ticket_agent.report")


class ReportNode(BaseNode):
    name = "report"

    def __init__(self, tracker: StatusTracker, diagnostics: Diagnostics, artifacts: ArtifactStore):
        self.tracker = tracker
        self.diagnostics = diagnostics
        self.artifacts = artifacts

    @opik.track(name="report_node")
    def __call__(self, state: RunWorkflowState) -> dict:
        item = state["work_item"]

        if not state.get("error_message"):
            self.tracker.mark_terminal(item.id, RunStatus.COMPLETED)
            return {
                "final_status": "completed",
                "trajectory": self._trajectory(state),
            }

        saved = [str(p) for p in self._capture(item.id)]

        attempt = state.get("attempt", 1)
        max_attempts = state.get("max_attempts", 1)
        if state.get("error_kind") == SessionClosedError.kind and attempt < max_attempts:
            logger.warning(f"Browser session closed on attempt {attempt} for work item {item.id}, will retry")
            return {
                "final_status": "retry",
                "artifacts": saved,
                "trajectory": self._trajectory(state),
            }

        self.tracker.mark_terminal(item.id, RunStatus.ERROR, state["error_message"])
        return {
            "final_status": "error",
            "artifacts": saved,
            "trajectory": self._trajectory(state),
        }

    def _capture(self, item_id):
        try:
            screenshot, html = self.diagnostics.capture()
        except Exception as e:
            logger.warning(f"Diagnostics capture failed for work item {item_id}: {e}")
            return []
        return self.artifacts.save(item_id, screenshot, html)
