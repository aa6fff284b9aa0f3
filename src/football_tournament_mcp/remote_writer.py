"""Create migrated records in the Neo4j store."""

import logging
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from neo4j.exceptions import DriverError, Neo4jError

from .database import Neo4jDatabase
from .errors import WriteError

log = logging.getLogger(__name__)


LABELS = {
    "teams": "Team",
    "players": "Player",
    "matches": "Match",
    "matchEvents": "MatchEvent",
    "events": "Event",
    "media": "Media",
}

# Outgoing relationships per collection kind: reference name -> relationship type
RELATIONSHIPS = {
    "teams": {},
    "players": {"team": "PLAYS_FOR"},
    "matches": {"home_team": "HOME_TEAM", "away_team": "AWAY_TEAM"},
    "matchEvents": {
        "match": "IN_MATCH",
        "team": "FOR_TEAM",
        "player": "BY_PLAYER",
        "assist_player": "ASSISTED_BY",
    },
    "events": {},
    "media": {"match": "FROM_MATCH"},
}


def build_create_query(kind: str, references: Mapping[str, Optional[str]]) -> str:
    """Build the statement creating one node of ``kind`` and its relationships.

    Only references with a value take part; each one is matched by element id
    first so a missing target makes the statement return no rows.
    """
    label = LABELS[kind]
    allowed = RELATIONSHIPS[kind]
    present = [name for name, remote_id in references.items() if remote_id is not None]
    for name in present:
        if name not in allowed:
            raise ValueError(f"{label} has no reference named '{name}'")

    lines = [f"MATCH ({name}) WHERE elementId({name}) = ${name}" for name in present]
    lines.append(f"CREATE (n:{label})")
    lines.append("SET n = $props")
    lines.extend(f"CREATE (n)-[:{allowed[name]}]->({name})" for name in present)
    lines.append("RETURN elementId(n) AS id")
    return "\n".join(lines)


class RemoteWriter:
    """Single-attempt record creation against the remote store."""

    def __init__(self, db: Neo4jDatabase):
        self.db = db

    def create(
        self,
        kind: str,
        properties: Mapping[str, Any],
        references: Optional[Mapping[str, Optional[str]]] = None,
    ) -> str:
        """Create a record and return the identifier the store assigned to it."""
        references = dict(references or {})
        query = build_create_query(kind, references)

        now = datetime.now(timezone.utc).isoformat()
        props = {key: value for key, value in properties.items() if value is not None}
        props["created_at"] = now
        props["updated_at"] = now

        params: dict[str, Any] = {name: rid for name, rid in references.items() if rid is not None}
        params["props"] = props

        local_id = props.get("local_id")
        try:
            rows = self.db.execute_write(query, params)
        except (Neo4jError, DriverError) as e:
            raise WriteError(f"{LABELS[kind]} '{local_id}' was not stored: {e}") from e

        if not rows:
            raise WriteError(
                f"{LABELS[kind]} '{local_id}' was not stored: a referenced node does not exist"
            )
        remote_id = rows[0]["id"]
        log.debug(f"Created {LABELS[kind]} {local_id} -> {remote_id}")
        return remote_id

    def count(self, kind: str) -> int:
        rows = self.db.execute_query(f"MATCH (n:{LABELS[kind]}) RETURN count(n) AS count")
        return rows[0]["count"] if rows else 0
