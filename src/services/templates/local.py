import logging
from pathlib import Path
from typing import Iterator, Optional

import yaml

from src.services.templates.base import MessageTemplate, TemplateStore

logger = logging.getLogger("ticket_agent.templates")


class LocalTemplateStore(TemplateStore):
    """Message templates read from `<templates_dir>/<lang>/<category>.yaml`.

    Each top-level key of a file is one template:

        group:
          template: |-
            Buen día, asignación de
            TICKET N° {ticket}
          params: [ticket]

    A template missing in `language` is looked up in `fallback_language`.
    """

    def __init__(self, templates_dir: str | Path, language: str = "es", fallback_language: str = "es"):
        self._root = Path(templates_dir)
        if not self._root.is_dir():
            raise FileNotFoundError(f"Templates directory not found: {self._root}")
        self._language = language
        self._fallback_language = fallback_language
        self._files: dict[tuple[str, str], dict] = {}

    @property
    def language(self) -> str:
        return self._language

    @property
    def fallback_language(self) -> str:
        return self._fallback_language

    def get(self, category: str, name: str) -> Optional[MessageTemplate]:
        for lang, entries in self._entries(category):
            if name not in entries:
                continue
            if lang != self._language:
                logger.debug(f"Template {category}/{name} missing in {self._language}, using {lang}")
            entry = entries[name]
            return MessageTemplate(
                name=f"{category}.{name}",
                template=entry["template"],
                description=entry.get("description", ""),
                params=entry.get("params", []),
            )
        return None

    def list_templates(self, category: str) -> list[str]:
        for _, entries in self._entries(category):
            return list(entries)
        return []

    def _entries(self, category: str) -> Iterator[tuple[str, dict]]:
        """Yield (language, templates) for each language that has the category file."""
        for lang in dict.fromkeys([self._language, self._fallback_language]):
            key = (lang, category)
            if key not in self._files:
                path = self._root / lang / f"{category}.yaml"
                if not path.is_file():
                    continue
                self._files[key] = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
            yield lang, self._files[key]
