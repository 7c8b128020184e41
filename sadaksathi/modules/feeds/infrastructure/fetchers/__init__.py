"""Upstream feed fetchers."""

from sadaksathi.modules.feeds.infrastructure.fetchers.base import (
    FetchResult,
    FetchStatus,
)
from sadaksathi.modules.feeds.infrastructure.fetchers.source_fetcher import (
    RETRYABLE_ERRORS,
    SourceFetcher,
)
from sadaksathi.modules.feeds.infrastructure.fetchers.xml_document import (
    parse_xml_document,
)

__all__ = [
    "FetchResult",
    "FetchStatus",
    "RETRYABLE_ERRORS",
    "SourceFetcher",
    "parse_xml_document",
]
