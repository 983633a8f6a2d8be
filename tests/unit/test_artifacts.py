"""Unit tests for ArtifactStore."""
import re

from src.services.artifacts import ArtifactStore


class TestArtifactStore:
    def test_writes_screenshot_and_html(self, tmp_path):
        store = ArtifactStore(tmp_path / "artifacts")
        saved = store.save(42, b"\x89PNG data", "<html></html>")
        assert [p.suffix for p in saved] == [".png", ".html"]
        assert saved[0].read_bytes() == b"\x89PNG data"
        assert saved[1].read_text(encoding="utf-8") == "<html></html>"
        assert re.fullmatch(r"\d{8}_\d{6}_42\.png", saved[0].name)

    def test_skips_missing_parts(self, tmp_path):
        store = ArtifactStore(tmp_path)
        assert store.save(1, None, None) == []
        assert [p.suffix for p in store.save(1, None, "<html/>")] == [".html"]

    def test_write_failure_is_logged_not_raised(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("x")
        store = ArtifactStore(blocker / "sub")
        assert store.save(1, b"png", "<html/>") == []
