"""Neo4j database connection and operations for the tournament store."""

import logging
import os
from contextlib import contextmanager
from typing import Any, Generator, Optional

from neo4j import GraphDatabase, Driver, Session
from neo4j.exceptions import ClientError

log = logging.getLogger(__name__)

NODE_LABELS = ("Team", "Player", "Match", "MatchEvent", "Event", "Media")


class Neo4jDatabase:
    """Neo4j database connection manager."""

    def __init__(
        self,
        uri: Optional[str] = None,
        user: Optional[str] = None,
        password: Optional[str] = None,
    ):
        self.uri = uri or os.getenv("NEO4J_URI", "bolt://localhost:7687")
        self.user = user or os.getenv("NEO4J_USER", "neo4j")
        self.password = password or os.getenv("NEO4J_PASSWORD", "password")
        self._driver: Optional[Driver] = None

    def connect(self) -> None:
        """Establish connection to Neo4j database."""
        if self._driver is None:
            self._driver = GraphDatabase.driver(
                self.uri,
                auth=(self.user, self.password),
            )

    def close(self) -> None:
        """Close database connection."""
        if self._driver:
            self._driver.close()
            self._driver = None

    @property
    def driver(self) -> Driver:
        """Get the database driver, connecting if necessary."""
        if self._driver is None:
            self.connect()
        return self._driver  # type: ignore

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """Create a database session context manager."""
        session = self.driver.session()
        try:
            yield session
        finally:
            session.close()

    def execute_query(
        self, query: str, parameters: Optional[dict[str, Any]] = None
    ) -> list[dict[str, Any]]:
        """Execute a Cypher query and return results."""
        with self.session() as session:
            result = session.run(query, parameters or {})
            return [dict(record) for record in result]

    def execute_write(
        self, query: str, parameters: Optional[dict[str, Any]] = None
    ) -> list[dict[str, Any]]:
        """Execute a write query in its own transaction and return its records."""
        def work(tx):
            return [dict(record) for record in tx.run(query, parameters or {})]

        with self.session() as session:
            return session.execute_write(work)

    def clear_database(self) -> None:
        """Clear all data from the database."""
        self.execute_write("MATCH (n) DETACH DELETE n")

    def create_indexes(self) -> None:
        """Index the local id kept on every migrated node."""
        for label in NODE_LABELS:
            query = (
                f"CREATE INDEX {label.lower()}_local_id IF NOT EXISTS "
                f"FOR (n:{label}) ON (n.local_id)"
            )
            try:
                self.execute_write(query)
            except ClientError as e:
                log.debug(f"Index on {label}.local_id not created: {e}")
