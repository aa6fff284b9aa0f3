"""Pytest configuration and fixtures for the tournament migration tests."""

import copy
import os
import re
import pytest

from neo4j.exceptions import ServiceUnavailable

# Set up test environment
os.environ.setdefault("NEO4J_URI", "bolt://localhost:7687")
os.environ.setdefault("NEO4J_USER", "neo4j")
os.environ.setdefault("NEO4J_PASSWORD", "password")


SAMPLE_TOURNAMENT = {
    "teams": [
        {
            "id": "team-1",
            "name": "Skull Crushers",
            "logo": "/images/skull-crushers.png",
            "group": "A",
            "players": ["player-1", "player-2"],
            "stats": {
                "played": 2, "won": 1, "drawn": 1, "lost": 0,
                "goalsFor": 3, "goalsAgainst": 2, "points": 4,
            },
        },
        {
            "id": "team-2",
            "name": "Black Demons",
            "logo": "/images/black-demons.png",
            "group": "A",
            "players": ["player-3", "player-4"],
            "stats": {
                "played": 2, "won": 0, "drawn": 1, "lost": 1,
                "goalsFor": 2, "goalsAgainst": 3, "points": 1,
            },
        },
    ],
    "players": [
        {"id": "player-1", "name": "Carlos Mendoza", "number": 10, "position": "Forward", "teamId": "team-1"},
        {
            "id": "player-2", "firstName": "Luis", "lastName": "Ortega", "number": 4,
            "position": "Defender", "teamId": "team-1", "isStarter": True,
            "stats": {"goals": 0, "assists": 1, "yellowCards": 0, "redCards": 0},
        },
        {"id": "player-3", "name": "Diego Ramírez", "number": 9, "position": "Forward", "teamId": "team-2"},
        {"id": "player-4", "name": "Andrés Villa", "number": 1, "position": "Goalkeeper", "teamId": "team-2"},
    ],
    "matches": [
        {
            "id": "match-1",
            "homeTeamId": "team-1",
            "awayTeamId": "team-2",
            "date": "12/3/2025",
            "time": "18:00",
            "venue": "Estadio Principal",
            "phase": "group",
            "group": "A",
            "status": "completed",
            "score": {"home": 2, "away": 1},
            "events": [],
        },
        {
            "id": "match-2",
            "homeTeamId": "team-2",
            "awayTeamId": "team-1",
            "date": "20/3/2025",
            "time": "20:00",
            "venue": "Campo Norte",
            "phase": "semifinal",
            "status": "upcoming",
            "events": [],
        },
    ],
    "matchEvents": [
        {
            "id": "ev-1", "matchId": "match-1", "type": "goal", "minute": 23,
            "teamId": "team-1", "playerId": "player-1", "assistPlayerId": "player-2",
        },
        {"id": "ev-2", "matchId": "match-1", "type": "yellowCard", "minute": 40, "teamId": "team-2", "playerId": "player-3"},
        {"id": "ev-3", "matchId": "match-1", "type": "goal", "minute": 77, "teamId": "team-2", "playerId": "player-3"},
    ],
    "events": [
        {
            "id": "event-1", "title": "Opening Ceremony", "date": "1/3/2025", "time": "17:00",
            "location": "Estadio Principal", "address": "Av. Central 100", "type": "ceremony",
            "description": "Parade of all teams",
        },
        {
            "id": "event-2", "title": "Fan Zone", "date": "12/3/2025", "time": "15:00",
            "location": "Plaza Mayor", "address": "Calle 5", "type": "fan",
            "description": "Screens and food trucks",
        },
    ],
    "media": [
        {
            "id": "media-1", "type": "image", "url": "https://cdn.example.org/m1.jpg",
            "title": "Opening goal", "date": "12/3/2025", "matchId": "match-1", "matchday": "Jornada 1",
        },
        {
            "id": "media-2", "type": "video", "url": "https://cdn.example.org/m2.mp4",
            "thumbnail": "https://cdn.example.org/m2.jpg", "title": "Ceremony highlights", "date": "1/3/2025",
        },
    ],
}

SAMPLE_COUNTS = {kind: len(records) for kind, records in SAMPLE_TOURNAMENT.items()}


def sample_tournament() -> dict:
    """A fresh copy of the sample tournament, safe to modify."""
    return copy.deepcopy(SAMPLE_TOURNAMENT)


class MockNeo4jDatabase:
    """In-memory graph standing in for Neo4j.

    Understands the statements the migration issues: node creation with
    relationships to nodes matched by element id, label counts and clearing.
    """

    def __init__(self):
        self.nodes = {}
        self.relationships = []
        self.statements = []
        self.unavailable = False
        self.rejected_local_ids = set()
        self._next_id = 0
        self._connected = False

    def connect(self):
        self._connected = True

    def close(self):
        self._connected = False

    def execute_query(self, query: str, parameters: dict = None) -> list:
        """Answer label counts against the in-memory graph."""
        if self.unavailable:
            raise ServiceUnavailable("Unable to connect to localhost:7687")

        count = re.search(r"MATCH \(n:(\w+)\) RETURN count\(n\) AS count", query)
        if count:
            return [{"count": len(self.nodes_with_label(count.group(1)))}]

        # Default empty result
        return []

    def execute_write(self, query: str, parameters: dict = None) -> list:
        params = parameters or {}
        self.statements.append(query)
        if self.unavailable:
            raise ServiceUnavailable("Unable to connect to localhost:7687")

        if "DETACH DELETE" in query:
            self.clear_database()
            return []

        create = re.search(r"CREATE \(n:(\w+)\)", query)
        if not create:
            return []

        props = params["props"]
        if props.get("local_id") in self.rejected_local_ids:
            raise ServiceUnavailable(f"Connection lost while writing {props['local_id']}")

        targets = {}
        for var, param in re.findall(r"MATCH \((\w+)\) WHERE elementId\(\1\) = \$(\w+)", query):
            if params[param] not in self.nodes:
                return []
            targets[var] = params[param]

        node_id = f"4:mock:{self._next_id}"
        self._next_id += 1
        self.nodes[node_id] = {"label": create.group(1), "props": dict(props)}
        for rel_type, var in re.findall(r"CREATE \(n\)-\[:(\w+)\]->\((\w+)\)", query):
            self.relationships.append((node_id, rel_type, targets[var]))
        return [{"id": node_id}]

    def clear_database(self) -> None:
        self.nodes.clear()
        self.relationships.clear()

    def create_indexes(self) -> None:
        if self.unavailable:
            raise ServiceUnavailable("Unable to connect to localhost:7687")

    def nodes_with_label(self, label: str) -> list:
        return [(node_id, node["props"]) for node_id, node in self.nodes.items() if node["label"] == label]

    def node_by_local_id(self, label: str, local_id: str):
        for node_id, props in self.nodes_with_label(label):
            if props.get("local_id") == local_id:
                return node_id
        return None

    def related(self, node_id: str, rel_type: str):
        """Target of the node's outgoing relationship of the given type, if any."""
        for start, rel, end in self.relationships:
            if start == node_id and rel == rel_type:
                return end
        return None

    def creation_order(self, node_id: str) -> int:
        return int(node_id.rsplit(":", 1)[1])


@pytest.fixture
def mock_db():
    """Provide a mock database for testing."""
    db = MockNeo4jDatabase()
    db.connect()
    return db


@pytest.fixture
def tournament():
    """Provide a modifiable copy of the sample tournament."""
    return sample_tournament()
