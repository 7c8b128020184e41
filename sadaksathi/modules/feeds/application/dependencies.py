"""Feed module application dependencies."""

from typing import NoReturn

from sadaksathi.modules.feeds.application.snapshot_service import SnapshotQueryService


def _missing_dependency(name: str) -> NoReturn:
    raise RuntimeError(f"Missing dependency override for {name}")


async def get_snapshot_service() -> SnapshotQueryService:
    _missing_dependency("SnapshotQueryService")
