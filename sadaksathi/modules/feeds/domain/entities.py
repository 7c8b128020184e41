"""Feed domain entities."""

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any, Self
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# Parsed upstream payload: whatever JSON value the source returned, or the
# object tree produced from an XML body.
Document = Any

MergedSnapshot = dict[str, Any]


class SourceFormat(StrEnum):
    """Upstream body format."""

    JSON = "json"
    XML = "xml"


class PayloadSchema(StrEnum):
    """Expected payload shape of a source."""

    OPAQUE = "opaque"
    WAZE = "waze"
    TOMTOM_TRAFFIC = "tomtom_traffic"
    OVERPASS = "overpass"


class FetchOutcome(StrEnum):
    """Per-source result of one merge run."""

    SUCCESS = "success"
    CACHED = "cached"
    FAILED = "failed"


class SourceDescriptor(BaseModel):
    """One upstream feed and its mirrors."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = Field(..., min_length=1, description="Unique source key")
    urls: list[str] = Field(..., min_length=1, description="Ordered mirror URLs")
    format: SourceFormat = Field(default=SourceFormat.JSON)
    payload_schema: PayloadSchema = Field(default=PayloadSchema.OPAQUE, alias="schema")
    params: dict[str, str] = Field(
        default_factory=dict, description="Query parameters sent to every mirror"
    )
    live_overlay: bool = Field(
        default=False, description="Re-fetched live by the snapshot server"
    )

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("source name must not be blank")
        return value

    @field_validator("urls")
    @classmethod
    def _check_urls(cls, urls: list[str]) -> list[str]:
        cleaned: list[str] = []
        for url in urls:
            url = url.strip()
            parsed = urlparse(url)
            if parsed.scheme not in ("http", "https") or not parsed.netloc:
                raise ValueError(f"mirror must be an HTTP(S) URL: {url!r}")
            cleaned.append(url)
        return cleaned


class NotifyConfig(BaseModel):
    """Operator notification settings from the static config file."""

    recipients: list[str] = Field(default_factory=list)
    smtp_user: str | None = None
    smtp_password: str | None = None

    @field_validator("recipients")
    @classmethod
    def _drop_blank(cls, recipients: list[str]) -> list[str]:
        return [r.strip() for r in recipients if r and r.strip()]


class PipelineConfig(BaseModel):
    """Static pipeline configuration, read once at startup."""

    sources: list[SourceDescriptor] = Field(default_factory=list)
    notify: NotifyConfig = Field(default_factory=NotifyConfig)

    @model_validator(mode="after")
    def _unique_names(self) -> Self:
        seen: set[str] = set()
        for source in self.sources:
            if source.name in seen:
                raise ValueError(f"duplicate source name: {source.name}")
            seen.add(source.name)
        return self

    @property
    def overlay_sources(self) -> list[SourceDescriptor]:
        return [source for source in self.sources if source.live_overlay]


@dataclass
class SourceResult:
    """Resolved value of one source in one run."""

    name: str
    outcome: FetchOutcome
    document: Document
    mirror: str | None = None
    attempts: int = 0
    error: str | None = None
    fallback: str | None = None  # "cache" or "previous"

    def to_detail(self) -> dict[str, Any]:
        detail: dict[str, Any] = {"attempts": self.attempts}
        if self.mirror:
            detail["mirror"] = self.mirror
        if self.fallback:
            detail["fallback"] = self.fallback
        if self.error:
            detail["error"] = self.error
        return detail


class RunSummary(BaseModel):
    """Per-run observability record."""

    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    sources: dict[str, FetchOutcome] = Field(default_factory=dict)
    details: dict[str, dict[str, Any]] = Field(default_factory=dict)

    @classmethod
    def from_results(cls, results: list[SourceResult]) -> "RunSummary":
        return cls(
            sources={result.name: result.outcome for result in results},
            details={result.name: result.to_detail() for result in results},
        )

    def outcome_of(self, name: str) -> FetchOutcome | None:
        return self.sources.get(name)

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json")
