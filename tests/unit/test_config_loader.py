"""Static configuration loader tests."""

import json
from pathlib import Path

import pytest

from sadaksathi.modules.feeds.domain.entities import PayloadSchema, SourceFormat
from sadaksathi.modules.feeds.domain.exceptions import (
    InvalidSourceConfigError,
    PipelineConfigError,
)
from sadaksathi.modules.feeds.infrastructure.config_loader import (
    load_pipeline_config,
    parse_pipeline_config,
)


def _write_config(path: Path, payload) -> Path:
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


class TestFlatKeys:
    """script-properties.json style keys."""

    def test_known_keys_become_sources(self):
        config = parse_pipeline_config(
            {
                "GAS_URL": "https://script.google.com/macros/s/abc/exec",
                "WAZE_JSON": ["https://waze-a.example.com", "https://waze-b.example.com"],
                "WAZE_XML": "https://waze.example.com/rss",
                "TRAFFIC_API": "https://api.tomtom.com/traffic",
                "TOMTOM_API_KEY": "secret",
                "OVERPASS_API": "https://overpass.example.com/api",
            }
        )

        by_name = {source.name: source for source in config.sources}
        assert set(by_name) == {
            "sheets",
            "wazeJSON",
            "wazeXML",
            "tomtomTraffic",
            "overpassPOIs",
        }
        assert by_name["wazeJSON"].urls == [
            "https://waze-a.example.com",
            "https://waze-b.example.com",
        ]
        assert by_name["wazeJSON"].payload_schema == PayloadSchema.WAZE
        assert by_name["wazeXML"].format == SourceFormat.XML
        assert by_name["tomtomTraffic"].params == {"key": "secret"}
        assert by_name["sheets"].live_overlay is False
        assert [s.name for s in config.overlay_sources] == [
            "wazeJSON",
            "wazeXML",
            "tomtomTraffic",
            "overpassPOIs",
        ]

    def test_blank_keys_are_skipped(self):
        config = parse_pipeline_config(
            {"GAS_URL": "", "POIS_URL": "https://pois.example.com"}
        )
        assert [source.name for source in config.sources] == ["pois"]

    def test_notify_from_flat_keys(self):
        config = parse_pipeline_config(
            {
                "POIS_URL": "https://pois.example.com",
                "SUPERADMINS": "ops@example.com, lead@example.com ,",
                "EMAIL_USERNAME": "bot@example.com",
                "EMAIL_PASSWORD": "app-password",
            }
        )
        assert config.notify.recipients == ["ops@example.com", "lead@example.com"]
        assert config.notify.smtp_user == "bot@example.com"
        assert config.notify.smtp_password == "app-password"

    def test_url_key_with_wrong_type(self):
        with pytest.raises(InvalidSourceConfigError, match="WAZE_JSON"):
            parse_pipeline_config({"WAZE_JSON": 42})


class TestExplicitSources:
    """The "sources" list."""

    def test_explicit_entry_overrides_flat_key(self):
        config = parse_pipeline_config(
            {
                "POIS_URL": "https://old.example.com",
                "sources": [
                    {"name": "pois", "urls": ["https://new.example.com"]},
                ],
            }
        )
        assert len(config.sources) == 1
        assert config.sources[0].urls == ["https://new.example.com"]

    def test_schema_alias(self):
        config = parse_pipeline_config(
            {
                "sources": [
                    {
                        "name": "incidents",
                        "urls": ["https://api.example.com/incidents"],
                        "schema": "tomtom_traffic",
                        "live_overlay": True,
                    }
                ]
            }
        )
        assert config.sources[0].payload_schema == PayloadSchema.TOMTOM_TRAFFIC
        assert config.sources[0].live_overlay is True

    def test_duplicate_names_rejected(self):
        with pytest.raises(ValueError, match="duplicate source name"):
            parse_pipeline_config(
                {
                    "sources": [
                        {"name": "a", "urls": ["https://a.example.com"]},
                        {"name": "a", "urls": ["https://b.example.com"]},
                    ]
                }
            )

    def test_non_http_mirror_rejected(self):
        with pytest.raises(ValueError, match="HTTP"):
            parse_pipeline_config(
                {"sources": [{"name": "a", "urls": ["ftp://a.example.com"]}]}
            )

    def test_sources_must_be_list(self):
        with pytest.raises(InvalidSourceConfigError):
            parse_pipeline_config({"sources": {"name": "a"}})


class TestLoadPipelineConfig:
    """load_pipeline_config() errors."""

    def test_missing_file(self, tmp_path):
        with pytest.raises(PipelineConfigError) as exc_info:
            load_pipeline_config(tmp_path / "missing.json")
        assert exc_info.value.reason == "file not found"

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("{broken", encoding="utf-8")
        with pytest.raises(PipelineConfigError):
            load_pipeline_config(path)

    def test_non_utf8_file(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_bytes(b"\xff\xfe{")
        with pytest.raises(PipelineConfigError):
            load_pipeline_config(path)

    def test_no_sources(self, tmp_path):
        path = _write_config(tmp_path / "config.json", {"SUPERADMINS": "a@b.c"})
        with pytest.raises(PipelineConfigError, match="no sources configured"):
            load_pipeline_config(path)

    def test_invalid_source_is_config_error(self, tmp_path):
        path = _write_config(tmp_path / "config.json", {"sources": [{"name": "x"}]})
        with pytest.raises(PipelineConfigError):
            load_pipeline_config(path)

    def test_valid_file(self, tmp_path):
        path = _write_config(
            tmp_path / "config.json", {"POIS_URL": "https://pois.example.com"}
        )
        config = load_pipeline_config(path)
        assert [source.name for source in config.sources] == ["pois"]
