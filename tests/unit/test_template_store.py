"""Unit tests for the message template store."""
from pathlib import Path

import pytest

from src.services.templates.base import MessageTemplate, TemplateStore
from src.services.templates.local import LocalTemplateStore

TEMPLATES_DIR = Path(__file__).parent.parent.parent / "templates"


class TestLocalTemplateStore:
    def test_loads_group_template(self):
        store = LocalTemplateStore(TEMPLATES_DIR)
        template = store.get("notify", "group")
        assert template.name == "notify.group"
        assert "ticket" in template.params
        assert template.template.startswith("Buen día, asignación de\n")

    def test_lists_templates(self):
        store = LocalTemplateStore(TEMPLATES_DIR)
        assert set(store.list_templates("notify")) == {"group", "requester"}

    def test_unknown_template_returns_none(self):
        store = LocalTemplateStore(TEMPLATES_DIR)
        assert store.get("notify", "missing") is None
        assert store.get("unknown", "group") is None
        assert store.list_templates("unknown") == []

    def test_falls_back_to_default_language(self):
        store = LocalTemplateStore(TEMPLATES_DIR, language="en", fallback_language="es")
        assert store.get("notify", "requester").template.startswith("Good morning")
        assert store.get("notify", "group").template.startswith("Buen día")

    def test_missing_directory_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            LocalTemplateStore(tmp_path / "nope")

    def test_custom_directory(self, tmp_path):
        (tmp_path / "es").mkdir()
        (tmp_path / "es" / "notify.yaml").write_text(
            "group:\n  template: 'Ticket {ticket}'\n  params: [ticket]\n", encoding="utf-8"
        )
        store = LocalTemplateStore(tmp_path)
        assert store.get_and_render("notify", "group", {"ticket": "T9"}) == "Ticket T9"


class TestRender:
    def test_missing_params_raise(self):
        template = MessageTemplate(name="t", template="{a} {b}", params=["a", "b"])
        with pytest.raises(ValueError, match="Missing required parameters"):
            TemplateStore.render(template, {"a": 1})

    def test_get_and_render_unknown_raises(self):
        store = LocalTemplateStore(TEMPLATES_DIR)
        with pytest.raises(ValueError, match="not found"):
            store.get_and_render("notify", "missing")
