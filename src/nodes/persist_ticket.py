from src.nodes.base import BaseNode
from src.services.status import StatusTracker
from src.core.workflow_state import RunWorkflowState


class PersistTicketNode(BaseNode):
    name = "persist_ticket"

    def __init__(self, tracker: StatusTracker):
        self.tracker = tracker

    def __call__(self, state: RunWorkflowState) -> dict:
        if state.get("final_status") == "error":
            return {"trajectory": self._trajectory(state)}

        persisted = self.tracker.persist_ticket(state["work_item"].id, state.get("ticket", ""))
        return {
            "ticket_persisted": persisted,
            "trajectory": self._trajectory(state),
        }
