import logging
import time
from pathlib import Path

logger = logging.getLogger("ticket_agent.artifacts")


class ArtifactStore:
    """Writes failure diagnostics as `<timestamp>_<id>.png` / `.html`."""

    def __init__(self, artifacts_dir: str | Path):
        self._dir = Path(artifacts_dir)

    def save(self, item_id: int | str, screenshot: bytes | None, html: str | None) -> list[Path]:
        base_name = f"{time.strftime('%Y%m%d_%H%M%S')}_{item_id}"
        saved: list[Path] = []
        try:
            self._dir.mkdir(parents=True, exist_ok=True)
            if screenshot:
                path = self._dir / f"{base_name}.png"
                path.write_bytes(screenshot)
                saved.append(path)
            if html:
                path = self._dir / f"{base_name}.html"
                path.write_text(html, encoding="utf-8")
                saved.append(path)
        except OSError as e:
            logger.warning(f"Failed to save diagnostics for {item_id}: {e}")
        if saved:
            logger.info(f"Saved diagnostics: {', '.join(p.name for p in saved)}")
        return saved
