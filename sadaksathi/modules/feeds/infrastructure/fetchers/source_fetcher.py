"""Bounded-retry fetcher for one upstream URL.

Supports JSON bodies and XML bodies (converted with parse_xml_document).
"""

import time
import xml.etree.ElementTree as ET
from typing import Any

import httpx
from loguru import logger
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from sadaksathi.core.config import settings
from sadaksathi.modules.feeds.domain.entities import (
    Document,
    PayloadSchema,
    SourceFormat,
)
from sadaksathi.modules.feeds.domain.exceptions import UpstreamStatusError
from sadaksathi.modules.feeds.domain.payloads import validate_document
from sadaksathi.modules.feeds.infrastructure.fetchers.base import FetchResult
from sadaksathi.modules.feeds.infrastructure.fetchers.xml_document import (
    parse_xml_document,
)

# Network failures, non-2xx answers and unparsable bodies are all retried.
# pydantic.ValidationError and json.JSONDecodeError are ValueErrors.
RETRYABLE_ERRORS: tuple[type[BaseException], ...] = (
    httpx.HTTPError,
    UpstreamStatusError,
    ValueError,
    ET.ParseError,
)


class SourceFetcher:
    """Fetch and parse one URL with a fixed number of attempts.

    fetch() never raises: after the last attempt it returns a failed
    FetchResult.
    """

    def __init__(
        self,
        *,
        max_attempts: int | None = None,
        retry_delay_sec: float | None = None,
        timeout_sec: float | None = None,
        user_agent: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.max_attempts = max_attempts or settings.FETCH_MAX_ATTEMPTS
        self.retry_delay_sec = (
            settings.FETCH_RETRY_DELAY_SEC
            if retry_delay_sec is None
            else retry_delay_sec
        )
        self.timeout_sec = timeout_sec or settings.FETCHER_TIMEOUT_SEC
        self.user_agent = user_agent or settings.FETCHER_USER_AGENT
        self.transport = transport

    async def fetch(
        self,
        url: str,
        fmt: SourceFormat = SourceFormat.JSON,
        *,
        source: str | None = None,
        params: dict[str, str] | None = None,
        schema: PayloadSchema = PayloadSchema.OPAQUE,
    ) -> FetchResult:
        """Fetch url, retrying the same URL up to max_attempts times."""
        start_time = time.time()
        label = source or url
        attempts = 0
        document: Document = None

        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_fixed(self.retry_delay_sec),
            retry=retry_if_exception_type(RETRYABLE_ERRORS),
            reraise=True,
        )

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_sec,
                follow_redirects=True,
                transport=self.transport,
            ) as client:
                async for attempt in retrying:
                    with attempt:
                        attempts = attempt.retry_state.attempt_number
                        try:
                            document = await self._fetch_once(
                                client, url, fmt, params, schema
                            )
                        except RETRYABLE_ERRORS as exc:
                            logger.warning(
                                f"Attempt {attempts}/{self.max_attempts} failed "
                                f"for {label}: {_describe(exc)}"
                            )
                            raise
        except RETRYABLE_ERRORS as exc:
            return FetchResult.failed(
                url,
                _describe(exc),
                attempts=attempts,
                duration_ms=_elapsed_ms(start_time),
            )
        except Exception as exc:
            logger.exception(f"Unexpected fetch error for {label}: {exc}")
            return FetchResult.failed(
                url,
                f"Error: {exc}",
                attempts=attempts,
                duration_ms=_elapsed_ms(start_time),
            )

        logger.info(f"Fetched {fmt.value.upper()} for {label} (attempt {attempts})")
        return FetchResult.success(
            url,
            document,
            attempts=attempts,
            duration_ms=_elapsed_ms(start_time),
            metadata={"format": fmt.value},
        )

    async def _fetch_once(
        self,
        client: httpx.AsyncClient,
        url: str,
        fmt: SourceFormat,
        params: dict[str, str] | None,
        schema: PayloadSchema,
    ) -> Document:
        response = await client.get(
            url,
            params=params or None,
            headers={
                "User-Agent": self.user_agent,
                "Accept": _accept_header(fmt),
            },
        )
        if not response.is_success:
            raise UpstreamStatusError(response.status_code, response.reason_phrase)

        if fmt == SourceFormat.XML:
            document: Any = parse_xml_document(response.content)
        else:
            document = response.json()
        return validate_document(schema, document)


def _accept_header(fmt: SourceFormat) -> str:
    if fmt == SourceFormat.XML:
        return "application/xml, text/xml, application/rss+xml, */*"
    return "application/json, */*"


def _describe(exc: BaseException) -> str:
    if isinstance(exc, httpx.TimeoutException):
        return f"Timeout: {exc}"
    if isinstance(exc, UpstreamStatusError):
        return exc.message
    return f"{type(exc).__name__}: {exc}"


def _elapsed_ms(start_time: float) -> int:
    return int((time.time() - start_time) * 1000)
