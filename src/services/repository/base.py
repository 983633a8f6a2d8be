from abc import ABC, abstractmethod

from src.core.work_item import WorkItem


class WorkItemRepository(ABC):
    @abstractmethod
    def add(self, item: WorkItem) -> WorkItem:
        """Store a new work item. Assigns an id when the item has none."""
        ...

    @abstractmethod
    def get(self, item_id: int | str) -> WorkItem | None:
        ...

    @abstractmethod
    def save(self, item: WorkItem) -> None:
        """Persist changes to an existing work item. Raises KeyError if unknown."""
        ...
