"""
Shared storage path utilities.

This module defines canonical filesystem locations for the match archive,
the roster file, the inbound message log and the locale catalogs.

Design goals:
- Single source of truth for storage paths
- OS-safe, repo-relative resolution
- No side effects on import (directories are created on demand)
"""

from __future__ import annotations

import os
from pathlib import Path

# ----------------------------------------------------------------------
# BASE DIRECTORIES
# ----------------------------------------------------------------------

# Repo root is assumed to be the current working directory
# when MatchDay is launched (consistent with core.discord_app)
BASE_DIR = Path.cwd()

DATA_DIR = Path(os.getenv("MATCHDAY_DATA_DIR", str(BASE_DIR / "data")))

# Catalogs shipped with the package
PACKAGED_LOCALES_DIR = Path(__file__).resolve().parents[1] / "localization" / "locales"

ROSTER_FILE = "teams.json"
ARCHIVE_FILE = "matches.json"
MESSAGE_LOG_FILE = "log.txt"


# ----------------------------------------------------------------------
# DATA PATH HELPERS
# ----------------------------------------------------------------------

def get_data_path(name: str, *, base_dir: Path | str | None = None) -> Path:
    """
    Return a path inside the data directory.

    Example:
        get_data_path("matches.json")

    This function DOES NOT write files.
    It only guarantees that the parent directory exists.
    """

    root = Path(base_dir) if base_dir else DATA_DIR
    path = root / name
    path.parent.mkdir(parents=True, exist_ok=True)
    return path
