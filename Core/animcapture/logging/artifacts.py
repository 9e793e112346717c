from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path


class ArtifactManager:
    """Creates the per-session capture directories."""

    def __init__(self, root: str | Path = "captures") -> None:
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def timestamp() -> str:
        return datetime.now(UTC).strftime("%Y%m%dT%H%M%SZ")

    def session_dir(self, session_id: str) -> Path:
        path = self.root / session_id
        path.mkdir(parents=True, exist_ok=True)
        return path

    def write_dom_snapshot(self, session_id: str, label: str, page_source: str, timestamp: str | None = None) -> Path:
        stamp = timestamp or self.timestamp()
        directory = self.session_dir(session_id) / "dom_snapshots"
        directory.mkdir(exist_ok=True)
        path = directory / f"{stamp}_{label}.html"
        path.write_text(page_source, encoding="utf-8")
        return path
