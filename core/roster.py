"""
Roster service.

Read-only directory of sports, teams and players loaded from a JSON list:

    [
      {"name": "Reds", "sport": "Soccer", "players": ["A", "B"], "enableScorers": true},
      ...
    ]

Loading is forgiving: entries failing the schema are skipped, duplicate team
names keep their first occurrence, and an unreadable file yields an empty
roster. Each problem is logged, none is fatal.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from jsonschema import Draft7Validator

from core.match.models import Team
from shared.logging.logger import get_logger

log = get_logger("core.roster")

TEAM_ENTRY_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "required": ["name", "sport"],
    "properties": {
        "name": {"type": "string", "pattern": r"\S"},
        "sport": {"type": "string", "pattern": r"\S"},
        "players": {"type": ["array", "null"], "items": {"type": "string"}},
        "enableScorers": {"type": "boolean"},
    },
}

_ENTRY_VALIDATOR = Draft7Validator(TEAM_ENTRY_SCHEMA)


def _same_sport(a: str, b: str) -> bool:
    return a.casefold() == b.casefold()


class RosterService:
    """
    In-memory roster built once from raw entries.

    Sport keys are reported lower-cased, in first-seen order.
    """

    def __init__(self, entries: Optional[Iterable[Any]] = None):
        self._teams: Dict[str, Team] = {}
        if entries is not None:
            self._ingest(entries)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    @classmethod
    def from_file(cls, path: Path | str) -> "RosterService":
        path = Path(path)
        log.info(f"Loading roster from {path}")

        if not path.exists():
            log.warning(f"Roster file {path} not found; starting with an empty roster")
            return cls([])

        try:
            content = path.read_text(encoding="utf-8")
        except OSError as e:
            log.error(f"Failed to read roster file {path}: {e}")
            return cls([])

        if not content.strip():
            log.info(f"Roster file {path} is empty")
            return cls([])

        try:
            entries = json.loads(content)
        except json.JSONDecodeError as e:
            log.error(f"Failed to parse roster file {path}: {e}")
            return cls([])

        if not isinstance(entries, list):
            log.error(f"Roster file {path} must contain a JSON list of teams")
            return cls([])

        return cls(entries)

    def _ingest(self, entries: Iterable[Any]) -> None:
        processed = 0
        for entry in entries:
            processed += 1
            errors = list(_ENTRY_VALIDATOR.iter_errors(entry))
            if errors:
                log.warning(
                    f"Skipping malformed roster entry {entry!r}: {errors[0].message}"
                )
                continue

            name = entry["name"].strip()
            if name in self._teams:
                log.warning(f"Duplicate team name '{name}' in roster; skipping duplicate entry")
                continue

            self._teams[name] = Team(
                name=name,
                sport=entry["sport"].strip(),
                players=tuple(entry.get("players") or ()),
                scorers_enabled=bool(entry.get("enableScorers", False)),
            )

        log.info(f"Processed {processed} roster entries; loaded {len(self._teams)} unique teams")

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def sports(self) -> List[str]:
        seen: List[str] = []
        for team in self._teams.values():
            key = team.sport.lower()
            if key not in seen:
                seen.append(key)
        return seen

    def teams_by_sport(self, sport: str) -> List[Team]:
        if not sport or not sport.strip():
            raise ValueError("Sport name cannot be empty")
        return [t for t in self._teams.values() if _same_sport(t.sport, sport)]

    def get_team(self, name: str) -> Optional[Team]:
        return self._teams.get(name)

    def players_of(self, team_name: str) -> List[str]:
        team = self._teams.get(team_name)
        if team is None:
            log.warning(f"Players not found for team '{team_name}'; returning empty list")
            return []
        return list(team.players)

    def scorers_enabled(self, team_name: str) -> bool:
        team = self._teams.get(team_name)
        if team is None:
            log.warning(f"Team '{team_name}' not found; scorers treated as disabled")
            return False
        return team.scorers_enabled

    def sport_of(self, team_name: str) -> Optional[str]:
        team = self._teams.get(team_name)
        return team.sport if team else None

    def __len__(self) -> int:
        return len(self._teams)
