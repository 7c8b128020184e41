"""Payload schemas for known upstream feeds.

Schemas only validate. The document that gets cached and merged is the
upstream value as received, so fields the models do not name survive.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from sadaksathi.modules.feeds.domain.entities import Document, PayloadSchema


class _FeedPayload(BaseModel):
    model_config = ConfigDict(extra="allow")


class WazeFeedPayload(_FeedPayload):
    """Waze partner feed (georss JSON variant)."""

    alerts: list[dict[str, Any]] = Field(default_factory=list)
    jams: list[dict[str, Any]] = Field(default_factory=list)
    irregularities: list[dict[str, Any]] = Field(default_factory=list)


class TomTomTrafficPayload(_FeedPayload):
    """TomTom Traffic incident details response."""

    incidents: list[dict[str, Any]]


class OverpassPayload(_FeedPayload):
    """Overpass API JSON output."""

    version: float | None = None
    generator: str | None = None
    elements: list[dict[str, Any]]


PAYLOAD_MODELS: dict[PayloadSchema, type[BaseModel]] = {
    PayloadSchema.WAZE: WazeFeedPayload,
    PayloadSchema.TOMTOM_TRAFFIC: TomTomTrafficPayload,
    PayloadSchema.OVERPASS: OverpassPayload,
}


def validate_document(schema: PayloadSchema, document: Document) -> Document:
    """Check a parsed document against its declared schema.

    Raises:
        pydantic.ValidationError: the document does not match the schema
    """
    model = PAYLOAD_MODELS.get(schema)
    if model is None:
        return document
    model.model_validate(document)
    return document
