"""Persisted per-source failure streaks used for operator alerts."""

from pathlib import Path
from typing import Any

from loguru import logger

from sadaksathi.modules.feeds.infrastructure.json_files import read_json, write_json


class FailureStreakStore:
    """JSON file: {source: {"streak": int, "alerted": bool}}."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> dict[str, dict[str, Any]]:
        if not self.path.exists():
            return {}
        try:
            payload = read_json(self.path)
        except (OSError, ValueError) as e:
            logger.warning(f"Resetting unreadable failure streaks {self.path}: {e}")
            return {}
        if not isinstance(payload, dict):
            return {}

        state: dict[str, dict[str, Any]] = {}
        for name, entry in payload.items():
            if not isinstance(entry, dict):
                continue
            streak = entry.get("streak")
            state[str(name)] = {
                "streak": streak if isinstance(streak, int) else 0,
                "alerted": entry.get("alerted") is True,
            }
        return state

    def save(self, state: dict[str, dict[str, Any]]) -> None:
        write_json(self.path, state)
