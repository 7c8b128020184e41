"""Per-source cache of the last successfully fetched document."""

import re
from pathlib import Path

from loguru import logger

from sadaksathi.modules.feeds.domain.entities import Document
from sadaksathi.modules.feeds.infrastructure.json_files import read_json, write_json

_WHITESPACE = re.compile(r"\s+")


def cache_key(source_name: str) -> str:
    """File stem for a source: lower-cased, whitespace runs replaced by "_"."""
    return _WHITESPACE.sub("_", source_name.strip().lower())


class SourceCacheStore:
    """One JSON file per source; written only after a live success."""

    def __init__(self, cache_dir: Path):
        self.cache_dir = Path(cache_dir)

    def path_for(self, source_name: str) -> Path:
        return self.cache_dir / f"{cache_key(source_name)}.json"

    def read(self, source_name: str) -> Document | None:
        """Return the cached document, or None if missing or unreadable."""
        path = self.path_for(source_name)
        if not path.exists():
            return None
        try:
            return read_json(path)
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable cache for {source_name}: {e}")
            return None

    def write(self, source_name: str, document: Document) -> None:
        """Replace the cached document for source_name."""
        write_json(self.path_for(source_name), document)
