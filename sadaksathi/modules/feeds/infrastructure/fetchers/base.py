"""Fetch result types shared by the fetchers."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from sadaksathi.modules.feeds.domain.entities import Document


class FetchStatus(str, Enum):
    """Fetch status enum."""

    SUCCESS = "success"
    FAILED = "failed"


@dataclass
class FetchResult:
    """Result of fetching one URL, after retries."""

    status: FetchStatus
    url: str
    document: Document = None
    error_message: str | None = None
    attempts: int = 0
    duration_ms: int = 0
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def is_success(self) -> bool:
        return self.status == FetchStatus.SUCCESS

    @classmethod
    def success(
        cls,
        url: str,
        document: Document,
        attempts: int = 1,
        duration_ms: int = 0,
        metadata: dict[str, Any] | None = None,
    ) -> "FetchResult":
        return cls(
            status=FetchStatus.SUCCESS,
            url=url,
            document=document,
            attempts=attempts,
            duration_ms=duration_ms,
            metadata=metadata or {},
        )

    @classmethod
    def failed(
        cls,
        url: str,
        error_message: str,
        attempts: int = 0,
        duration_ms: int = 0,
        metadata: dict[str, Any] | None = None,
    ) -> "FetchResult":
        return cls(
            status=FetchStatus.FAILED,
            url=url,
            error_message=error_message,
            attempts=attempts,
            duration_ms=duration_ms,
            metadata=metadata or {},
        )
