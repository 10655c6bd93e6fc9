"""
======================================================================
 MatchDay Runtime — Version v0.1.0 (Build 2026.10)
 Match registration bot for amateur sports leagues
======================================================================
"""

"""
Configuration validation script.

Validates shared/config/bot.json and the team roster against their JSON
schemas and reports every problem found.

Design rules:
- No side effects on import
- No runtime startup
- Validation only (no mutation)
- Forward-compatible: unknown fields are ignored

Usage:
    python -m scripts.validate_config [--config PATH] [--roster PATH]
"""


import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from jsonschema import Draft7Validator

from core.roster import TEAM_ENTRY_SCHEMA
from shared.config.bot import BOT_CONFIG_SCHEMA, CONFIG_PATH, load_bot_settings, load_config_file

ROSTER_SCHEMA: Dict[str, Any] = {
    "type": "array",
    "items": TEAM_ENTRY_SCHEMA,
}


# ------------------------------------------------------------
# Helpers
# ------------------------------------------------------------

def _load_json(path: Path) -> Any:
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)


def _error(msg: str):
    print(f"[CONFIG ERROR] {msg}", file=sys.stderr)


def schema_errors(payload: Any, schema: Dict[str, Any], name: str) -> List[str]:
    validator = Draft7Validator(schema)
    errors = sorted(validator.iter_errors(payload), key=lambda e: list(e.path))
    messages = []
    for err in errors:
        loc = "/".join(str(p) for p in err.path) or "<root>"
        messages.append(f"{name}: '{loc}': {err.message}")
    return messages


# ------------------------------------------------------------
# Validators
# ------------------------------------------------------------

def validate_bot_config(path: Path) -> bool:
    """
    Validate bot.json. A missing file is allowed (defaults apply).
    """

    if not path.exists():
        return True

    try:
        data = _load_json(path)
    except (OSError, json.JSONDecodeError) as e:
        _error(f"{path.name}: invalid JSON ({e})")
        return False

    messages = schema_errors(data, BOT_CONFIG_SCHEMA, path.name)
    for message in messages:
        _error(message)
    return not messages


def validate_roster(path: Path) -> bool:
    """
    Validate the team roster. Duplicate team names are reported too,
    since the runtime silently keeps only the first one.
    """

    if not path.exists():
        _error(f"Roster file not found at {path}")
        return False

    try:
        data = _load_json(path)
    except (OSError, json.JSONDecodeError) as e:
        _error(f"{path.name}: invalid JSON ({e})")
        return False

    messages = schema_errors(data, ROSTER_SCHEMA, path.name)

    if isinstance(data, list):
        seen = set()
        for index, entry in enumerate(data):
            name = entry.get("name") if isinstance(entry, dict) else None
            if not isinstance(name, str):
                continue
            if name in seen:
                messages.append(f"{path.name}: '{index}': duplicate team name '{name}'")
            seen.add(name)

    for message in messages:
        _error(message)
    return not messages


# ------------------------------------------------------------
# Entry point
# ------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Validate MatchDay configuration files")
    parser.add_argument("--config", type=Path, default=CONFIG_PATH)
    parser.add_argument("--roster", type=Path, default=None)
    args = parser.parse_args(argv)

    roster_path = args.roster or load_bot_settings(load_config_file(args.config)).roster_path

    ok = True

    if not validate_bot_config(args.config):
        ok = False

    if not validate_roster(roster_path):
        ok = False

    if not ok:
        print("Configuration validation failed.", file=sys.stderr)
        return 1

    print("Configuration validation passed.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
