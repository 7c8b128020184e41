"""Merged snapshot and daily run summary persistence."""

from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from loguru import logger

from sadaksathi.modules.feeds.domain.entities import MergedSnapshot, RunSummary
from sadaksathi.modules.feeds.infrastructure.json_files import read_json, write_json


class SnapshotStore:
    """Reads and writes merged.json and summary-YYYY-MM-DD.json files."""

    def __init__(self, merged_path: Path, logs_dir: Path):
        self.merged_path = Path(merged_path)
        self.logs_dir = Path(logs_dir)

    def load_merged(self) -> MergedSnapshot:
        """Return the last merged snapshot, or {} if absent or unreadable."""
        if not self.merged_path.exists():
            return {}
        try:
            payload = read_json(self.merged_path)
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable merged snapshot: {e}")
            return {}
        if not isinstance(payload, dict):
            logger.warning("Ignoring merged snapshot that is not a JSON object")
            return {}
        return payload

    def save_merged(self, snapshot: MergedSnapshot) -> None:
        write_json(self.merged_path, snapshot)
        logger.info(f"Merged data saved to {self.merged_path}")

    def summary_path(self, day: datetime | None = None) -> Path:
        day = day or datetime.now(UTC)
        return self.logs_dir / f"summary-{day.strftime('%Y-%m-%d')}.json"

    def save_summary(self, summary: RunSummary) -> Path:
        """Write the run summary for the summary's day, replacing earlier runs."""
        path = self.summary_path(summary.timestamp)
        write_json(path, summary.to_payload())
        return path

    def load_latest_summary(self) -> dict[str, Any] | None:
        if not self.logs_dir.is_dir():
            return None
        candidates = sorted(self.logs_dir.glob("summary-*.json"), reverse=True)
        for path in candidates:
            try:
                payload = read_json(path)
            except (OSError, ValueError):
                continue
            if isinstance(payload, dict):
                return payload
        return None

    def merged_modified_at(self) -> datetime | None:
        try:
            mtime = self.merged_path.stat().st_mtime
        except OSError:
            return None
        return datetime.fromtimestamp(mtime, tz=UTC)
