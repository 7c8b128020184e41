"""Static pipeline configuration loader.

Two layouts are accepted and may be combined:

Explicit:
    {
        "sources": [
            {"name": "wazeJSON", "urls": ["https://a", "https://b"],
             "format": "json", "schema": "waze", "live_overlay": true}
        ],
        "notify": {"recipients": ["ops@example.com"]}
    }

Flat keys (script-properties.json); each URL key holds one URL or a list
of mirrors:
    GAS_URL, POIS_URL, WAZE_JSON, WAZE_XML, TRAFFIC_API + TOMTOM_API_KEY,
    OVERPASS_API, EMAIL_USERNAME, EMAIL_PASSWORD, SUPERADMINS
"""

from pathlib import Path
from typing import Any

import pydantic
from loguru import logger

from sadaksathi.modules.feeds.domain.entities import (
    NotifyConfig,
    PayloadSchema,
    PipelineConfig,
    SourceFormat,
)
from sadaksathi.modules.feeds.domain.exceptions import (
    InvalidSourceConfigError,
    PipelineConfigError,
)
from sadaksathi.modules.feeds.infrastructure.json_files import read_json

# flat key -> (source name, format, schema, live overlay)
FLAT_SOURCE_KEYS: dict[str, tuple[str, SourceFormat, PayloadSchema, bool]] = {
    "GAS_URL": ("sheets", SourceFormat.JSON, PayloadSchema.OPAQUE, False),
    "POIS_URL": ("pois", SourceFormat.JSON, PayloadSchema.OPAQUE, False),
    "WAZE_JSON": ("wazeJSON", SourceFormat.JSON, PayloadSchema.WAZE, True),
    "WAZE_XML": ("wazeXML", SourceFormat.XML, PayloadSchema.OPAQUE, True),
    "TRAFFIC_API": (
        "tomtomTraffic",
        SourceFormat.JSON,
        PayloadSchema.OPAQUE,
        True,
    ),
    "OVERPASS_API": ("overpassPOIs", SourceFormat.JSON, PayloadSchema.OVERPASS, True),
}


def load_pipeline_config(path: Path) -> PipelineConfig:
    """Read and validate the static configuration file.

    Raises:
        PipelineConfigError: the file is missing, unreadable or invalid
    """
    path = Path(path)
    try:
        payload = read_json(path)
    except FileNotFoundError:
        raise PipelineConfigError(str(path), "file not found") from None
    except (OSError, ValueError) as e:
        raise PipelineConfigError(str(path), str(e)) from e

    try:
        config = parse_pipeline_config(payload)
    except (InvalidSourceConfigError, pydantic.ValidationError) as e:
        raise PipelineConfigError(str(path), str(e)) from e

    if not config.sources:
        raise PipelineConfigError(str(path), "no sources configured")

    logger.info(
        f"Loaded {len(config.sources)} source(s) from {path}: "
        f"{', '.join(source.name for source in config.sources)}"
    )
    return config


def parse_pipeline_config(payload: Any) -> PipelineConfig:
    """Build a PipelineConfig from a decoded JSON document."""
    if not isinstance(payload, dict):
        raise InvalidSourceConfigError("configuration must be a JSON object")

    sources: list[dict[str, Any]] = []
    explicit = payload.get("sources", [])
    if not isinstance(explicit, list):
        raise InvalidSourceConfigError("'sources' must be a list")
    sources.extend(explicit)

    explicit_names = {
        entry.get("name") for entry in explicit if isinstance(entry, dict)
    }
    for entry in _flat_sources(payload):
        if entry["name"] not in explicit_names:
            sources.append(entry)

    raw_notify = payload.get("notify") or {}
    if not isinstance(raw_notify, dict):
        raise InvalidSourceConfigError("'notify' must be an object")
    notify = dict(raw_notify)
    notify.setdefault("recipients", _split_recipients(payload.get("SUPERADMINS")))
    if payload.get("EMAIL_USERNAME"):
        notify.setdefault("smtp_user", payload["EMAIL_USERNAME"])
    if payload.get("EMAIL_PASSWORD"):
        notify.setdefault("smtp_password", payload["EMAIL_PASSWORD"])

    return PipelineConfig(sources=sources, notify=NotifyConfig(**notify))


def _flat_sources(payload: dict[str, Any]) -> list[dict[str, Any]]:
    entries: list[dict[str, Any]] = []
    for key, (name, fmt, schema, live_overlay) in FLAT_SOURCE_KEYS.items():
        urls = _as_url_list(key, payload.get(key))
        if not urls:
            continue
        entry: dict[str, Any] = {
            "name": name,
            "urls": urls,
            "format": fmt,
            "schema": schema,
            "live_overlay": live_overlay,
        }
        if key == "TRAFFIC_API" and payload.get("TOMTOM_API_KEY"):
            entry["params"] = {"key": str(payload["TOMTOM_API_KEY"])}
        entries.append(entry)
    return entries


def _as_url_list(key: str, value: Any) -> list[str]:
    if value is None or value == "":
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, list) and all(isinstance(item, str) for item in value):
        return [item for item in value if item]
    raise InvalidSourceConfigError(f"{key} must be a URL or a list of URLs")


def _split_recipients(value: Any) -> list[str]:
    if isinstance(value, list):
        return [str(item) for item in value]
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    return []
