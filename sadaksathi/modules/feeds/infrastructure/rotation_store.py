"""Persisted rotation state: source name -> last used mirror index."""

from pathlib import Path

from loguru import logger

from sadaksathi.modules.feeds.infrastructure.json_files import read_json, write_json


class RotationStateStore:
    """JSON file holding the rotation index per source."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> dict[str, int]:
        """Load the state; a missing or corrupt file yields an empty state."""
        if not self.path.exists():
            return {}
        try:
            payload = read_json(self.path)
        except (OSError, ValueError) as e:
            logger.warning(f"Resetting unreadable rotation state {self.path}: {e}")
            return {}
        if not isinstance(payload, dict):
            return {}
        return {
            str(name): index
            for name, index in payload.items()
            if isinstance(index, int) and not isinstance(index, bool)
        }

    def save(self, state: dict[str, int]) -> None:
        write_json(self.path, state)
