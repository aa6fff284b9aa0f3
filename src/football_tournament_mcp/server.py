"""MCP Server exposing the tournament data migration."""

import asyncio
import logging
import os
from typing import Optional
from mcp.server.fastmcp import FastMCP
from mcp.types import TextContent

from .database import Neo4jDatabase
from .local_store import LocalStoreReader, open_local_store
from .migration import migrate_local_data
from .remote_writer import LABELS, RemoteWriter

log = logging.getLogger(__name__)


# Initialize the server
server = FastMCP("football-tournament-migration")

# Database connection (lazy initialization)
_db: Optional[Neo4jDatabase] = None

# Only one migration may run at a time
_migration_lock = asyncio.Lock()


def get_db() -> Neo4jDatabase:
    """Get or create database connection."""
    global _db
    if _db is None:
        _db = Neo4jDatabase()
        _db.connect()
    return _db


def get_local_store() -> LocalStoreReader:
    """Open the local store configured by LOCAL_STORE_PATH."""
    return open_local_store(os.getenv("LOCAL_STORE_PATH", "data"))


# ============================================================================
# Migration Tools
# ============================================================================


@server.tool(name="migrate_local_data")
async def migrate_local_data_tool(strict: bool = True) -> list[TextContent]:
    """Copy all locally stored tournament data into the remote database.

    Running it twice without clearing the remote database duplicates every record.

    Args:
        strict: When true, any record that fails makes the migration unsuccessful
    """
    if _migration_lock.locked():
        return [TextContent(type="text", text="A migration is already running")]

    async with _migration_lock:
        report = await asyncio.to_thread(
            migrate_local_data, get_local_store(), get_db(), strict
        )

    return [TextContent(type="text", text=report.summary())]


@server.tool()
async def preview_local_data() -> list[TextContent]:
    """Count the records in each local collection without migrating anything."""
    counts = get_local_store().counts()

    output = "**Local data**\n\n"
    for kind, count in counts.items():
        output += f"- {kind}: {count}\n"
    output += f"\nTotal: {sum(counts.values())} record(s)"

    return [TextContent(type="text", text=output)]


@server.tool()
async def count_remote_records() -> list[TextContent]:
    """Count the migrated records in the remote database by collection."""
    writer = RemoteWriter(get_db())

    output = "**Remote data**\n\n"
    for kind, label in LABELS.items():
        output += f"- {kind} ({label}): {writer.count(kind)}\n"

    return [TextContent(type="text", text=output)]


@server.tool()
async def clear_remote_store() -> list[TextContent]:
    """Delete every node in the remote database, e.g. before migrating again."""
    if _migration_lock.locked():
        return [TextContent(type="text", text="A migration is running, try again later")]

    get_db().clear_database()
    log.info("Remote store cleared")
    return [TextContent(type="text", text="Remote database cleared")]


async def main():
    """Run the MCP server."""
    # Logs go to stderr, stdout carries the MCP protocol
    logging.basicConfig(level=logging.INFO)
    await server.run_stdio_async()


if __name__ == "__main__":
    asyncio.run(main())
