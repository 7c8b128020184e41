#!/usr/bin/env python3
"""Fetch and merge Sadak Sathi sources into public/data/merged.json.

Usage:
    # continuous (every MERGE_INTERVAL_SEC seconds)
    python scripts/update_merged.py

    # single run (tests / CI)
    python scripts/update_merged.py --once
"""

import sys
from pathlib import Path

# Add project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from sadaksathi.modules.feeds.interfaces.cli import main  # noqa: E402

if __name__ == "__main__":
    sys.exit(main())
