from abc import ABC, abstractmethod
from src.core.errors import error_kind
from src.core.workflow_state import RunWorkflowState


class BaseNode(ABC):
    """Base class for all workflow nodes.

    Subclasses must set `name` as a class variable (str) and implement `__call__`.
    """

    name: str  # Class variable, set by each subclass (e.g. name = "fill_form")

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        if not getattr(cls, 'name', None) and 'Abstract' not in cls.__name__:
            raise TypeError(f"{cls.__name__} must define a 'name' class variable")

    @abstractmethod
    def __call__(self, state: RunWorkflowState) -> dict:
        """Execute node logic. Returns a dict that updates the state."""
        ...

    def _trajectory(self, state: RunWorkflowState) -> list[str]:
        return state.get("trajectory", []) + [self.name]

    def _failed(self, state: RunWorkflowState, exc: Exception) -> dict:
        return {
            "final_status": "error",
            "error_message": f"{type(self).__name__} failed: {exc}",
            "error_kind": error_kind(exc),
            "trajectory": self._trajectory(state),
        }
