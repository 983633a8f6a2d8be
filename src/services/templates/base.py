from abc import ABC, abstractmethod
from typing import Any, Optional
from pydantic import BaseModel, Field


class MessageTemplate(BaseModel):
    """A single outbound message template with its metadata."""
    name: str
    template: str
    description: str = ""
    params: list[str] = Field(default_factory=list)


class TemplateStore(ABC):
    """Abstract interface for notification message templates.

    Templates are organized by category (derived from filename) and template name.
    A file `notify.yaml` with a `group` template is accessed as `get("notify", "group")`.

    Multi-language support:
    - Templates live in per-language subfolders (e.g., templates/es/, templates/en/)
    - When a template is missing in the current language, the fallback language is used
    """

    @property
    @abstractmethod
    def language(self) -> str:
        """Current language code (ISO 639-1, e.g., 'es', 'en')."""
        ...

    @property
    @abstractmethod
    def fallback_language(self) -> str:
        ...

    @abstractmethod
    def get(self, category: str, name: str) -> Optional[MessageTemplate]:
        """Get a template by category and name, None if not found."""
        ...

    @abstractmethod
    def list_templates(self, category: str) -> list[str]:
        ...

    @staticmethod
    def render(template: MessageTemplate, params: dict[str, Any]) -> str:
        """Render a template with the given parameters.

        Raises:
            ValueError: If required parameters are missing
        """
        missing = [p for p in template.params if p not in params]
        if missing:
            raise ValueError(
                f"Missing required parameters for template '{template.name}': {missing}"
            )
        return template.template.format(**params)

    def get_and_render(
        self, category: str, name: str, params: Optional[dict[str, Any]] = None
    ) -> str:
        """Get a template and render it in one call.

        Raises:
            ValueError: If template not found or required parameters missing
        """
        template = self.get(category, name)
        if template is None:
            raise ValueError(f"Message template '{category}/{name}' not found")
        return self.render(template, params or {})
