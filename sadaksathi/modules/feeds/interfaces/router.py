"""Snapshot API routes."""

from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from sadaksathi.modules.feeds.application.dependencies import get_snapshot_service
from sadaksathi.modules.feeds.application.snapshot_service import SnapshotQueryService

router = APIRouter(tags=["data"])


@router.get("/api/data")
async def get_merged_data(
    service: SnapshotQueryService = Depends(get_snapshot_service),
) -> JSONResponse:
    """Latest merged snapshot.

    Always answers 200; upstream outages only make some fields stale.
    """
    return JSONResponse(content=await service.get_snapshot())


@router.get("/health", tags=["health"])
async def health_check(
    service: SnapshotQueryService = Depends(get_snapshot_service),
) -> dict[str, Any]:
    """Snapshot freshness and the latest run summary."""
    return await service.get_health()
