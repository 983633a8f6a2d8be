import itertools
import threading

from src.core.work_item import WorkItem
from src.services.repository.base import WorkItemRepository


class InMemoryWorkItemRepository(WorkItemRepository):
    """Process-local store. Copies in and out so callers never share instances."""

    def __init__(self):
        self._items: dict[str, WorkItem] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def add(self, item: WorkItem) -> WorkItem:
        with self._lock:
            if item.id in (None, "", 0):
                item = item.model_copy(update={"id": next(self._ids)})
            self._items[str(item.id)] = item.model_copy()
        return item

    def get(self, item_id: int | str) -> WorkItem | None:
        with self._lock:
            item = self._items.get(str(item_id))
            return item.model_copy() if item else None

    def save(self, item: WorkItem) -> None:
        with self._lock:
            key = str(item.id)
            if key not in self._items:
                raise KeyError(f"Unknown work item {item.id}")
            self._items[key] = item.model_copy()
