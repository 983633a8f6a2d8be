import logging

from src.core.work_item import RunStatus, utcnow
from src.services.repository.base import WorkItemRepository

logger = logging.getLogger("ticket_agent.status")


class StatusTracker:
    """Writes run state back to the work item.

    Every write is best effort: a failing repository is logged and never
    breaks the automation run.
    """

    def __init__(self, repository: WorkItemRepository):
        self._repository = repository

    def mark_running(self, item_id: int | str) -> bool:
        return self._update(item_id, status=RunStatus.IN_PROGRESS, last_error=None)

    def mark_terminal(self, item_id: int | str, status: RunStatus, error: str | None = None) -> bool:
        if not status.is_terminal:
            raise ValueError(f"{status.value} is not a terminal status")
        if status is RunStatus.COMPLETED:
            error = None
        else:
            error = error or "Unknown error"
        return self._update(item_id, status=status, last_error=error)

    def persist_ticket(self, item_id: int | str, ticket: str) -> bool:
        if not ticket or item_id in (None, ""):
            return False
        try:
            item = self._repository.get(item_id)
            if item is None:
                logger.warning(f"Cannot persist ticket {ticket}: work item {item_id} not found")
                return False
            if item.ticket:
                logger.warning(f"Work item {item_id} already has ticket {item.ticket}, keeping it")
                return False
            self._repository.save(item.model_copy(update={"ticket": ticket}))
            logger.info(f"Ticket {ticket} stored for work item {item_id}")
            return True
        except Exception as e:
            logger.error(f"Failed to persist ticket for work item {item_id}: {e}")
            return False

    def _update(self, item_id: int | str, **changes) -> bool:
        try:
            item = self._repository.get(item_id)
            if item is None:
                logger.warning(f"Cannot update status: work item {item_id} not found")
                return False
            self._repository.save(item.model_copy(update={**changes, "updated_at": utcnow()}))
            logger.info(f"Work item {item_id} -> {changes['status'].value}")
            return True
        except Exception as e:
            logger.error(f"Failed to update status for work item {item_id}: {e}")
            return False
