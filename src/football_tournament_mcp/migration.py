"""Migration of locally cached tournament data into the Neo4j store.

Collections are migrated one record at a time in dependency order:

    teams -> players -> matches -> matchEvents -> events -> media

Every foreign key is rewritten from the local id space to the ids the store
assigned earlier in the same run. A record that fails validation, references
something that was not migrated, or is rejected by the store is reported and
skipped; the run always goes through every record.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from .database import Neo4jDatabase
from .errors import (
    InvalidRecordError,
    MigrationError,
    UnresolvedReferenceError,
    UnsupportedRecordError,
    WriteError,
)
from .identity import IdentityMapper
from .local_store import COLLECTION_KINDS, LocalStoreReader
from .models import Event, Match, MatchEvent, Media, Player, Team
from .remote_writer import RemoteWriter

log = logging.getLogger(__name__)


def record_key(kind: str, record: Any) -> Optional[str]:
    """Local id a record is reported under, or None when it has none.

    Match event ids are only unique within their match, so they are keyed
    as ``matchId/id``.
    """
    if not isinstance(record, dict):
        return None
    local_id = record.get("id", record.get("_id"))
    if local_id is None:
        return None
    match_id = record.get("matchId", record.get("match_id"))
    if kind == "matchEvents" and match_id is not None:
        return f"{match_id}/{local_id}"
    return str(local_id)


@dataclass
class RecordFailure:
    kind: str
    local_id: Optional[str]
    error: MigrationError

    def __str__(self) -> str:
        return f"{self.kind} '{self.local_id}': {self.error}"


@dataclass
class MigrationReport:
    success: bool
    message: str
    created: dict[str, int] = field(default_factory=dict)
    failures: list[RecordFailure] = field(default_factory=list)
    skipped: int = 0

    @property
    def total_created(self) -> int:
        return sum(self.created.values())

    def summary(self) -> str:
        """Human-readable report, one line per collection and per failure."""
        status = "succeeded" if self.success else "failed"
        output = f"**Migration {status}**: {self.message}\n\n"
        for kind in COLLECTION_KINDS:
            if kind in self.created:
                output += f"- {kind}: {self.created[kind]} created\n"
        if self.skipped:
            output += f"- skipped: {self.skipped} record(s) outside the data model\n"
        if self.failures:
            output += f"\n{len(self.failures)} failure(s):\n"
            for failure in self.failures:
                output += f"  - {failure}\n"
        return output


class MigrationOrchestrator:
    """Runs one migration from a local store reader to a remote writer.

    With ``strict`` (the default) any record failure makes the run
    unsuccessful; otherwise a run that completes counts as a success and the
    failures are only listed in the report.
    """

    def __init__(self, reader: LocalStoreReader, writer: RemoteWriter, strict: bool = True):
        self.reader = reader
        self.writer = writer
        self.strict = strict

    def run(self) -> MigrationReport:
        self.mapper = IdentityMapper()
        self._created = {kind: 0 for kind in COLLECTION_KINDS}
        self._failures: list[RecordFailure] = []
        self._skipped = 0
        self._player_teams: dict[str, str] = {}
        self._shirt_numbers: set[tuple[str, int]] = set()
        self._match_teams: dict[str, tuple[str, str]] = {}
        self._embedded_events: list[dict[str, Any]] = []

        self._migrate("teams", self.reader.read_collection("teams"), self._migrate_team)
        self._migrate("players", self.reader.read_collection("players"), self._migrate_player)
        self._migrate("matches", self.reader.read_collection("matches"), self._migrate_match)
        self._migrate("matchEvents", self._match_event_records(), self._migrate_match_event)
        self._migrate("events", self.reader.read_collection("events"), self._migrate_event)
        self._migrate("media", self.reader.read_collection("media"), self._migrate_media)

        return self._report()

    def _migrate(self, kind: str, records: list[Any], handler: Callable[[dict[str, Any]], None]) -> None:
        log.info(f"[MIGRATION] Migrating {len(records)} {kind}")
        for record in records:
            local_id = record_key(kind, record)
            try:
                handler(record)
            except UnsupportedRecordError as e:
                self._skipped += 1
                log.info(f"[MIGRATION] Skipped {kind} '{local_id}': {e}")
            except (InvalidRecordError, UnresolvedReferenceError, WriteError) as e:
                failure = RecordFailure(kind, local_id, e)
                self._failures.append(failure)
                log.warning(f"[MIGRATION] Failed {failure}")
            else:
                self._created[kind] += 1

    def _check_new(self, kind: str, key: str) -> None:
        if self.mapper.is_registered(kind, key):
            raise InvalidRecordError(f"duplicate {kind} id '{key}'")

    def _migrate_team(self, record: dict[str, Any]) -> None:
        team = Team.from_local(record)
        self._check_new("teams", team.local_id)
        remote_id = self.writer.create("teams", team.properties())
        self.mapper.register("teams", team.local_id, remote_id)

    def _migrate_player(self, record: dict[str, Any]) -> None:
        player = Player.from_local(record)
        self._check_new("players", player.local_id)
        team_ref = self.mapper.remap("teams", player.team_id)
        shirt = (player.team_id, player.number)
        if shirt in self._shirt_numbers:
            raise InvalidRecordError(
                f"shirt number {player.number} is already taken in team '{player.team_id}'"
            )

        remote_id = self.writer.create("players", player.properties(), {"team": team_ref})
        self.mapper.register("players", player.local_id, remote_id)
        self._player_teams[player.local_id] = player.team_id
        self._shirt_numbers.add(shirt)

    def _migrate_match(self, record: dict[str, Any]) -> None:
        match = Match.from_local(record)
        self._check_new("matches", match.local_id)
        # Embedded events are queued even if the match itself fails, so they get reported
        for event in match.events:
            if isinstance(event, dict):
                self._embedded_events.append({"matchId": match.local_id, **event})

        references = {
            "home_team": self.mapper.remap("teams", match.home_team_id),
            "away_team": self.mapper.remap("teams", match.away_team_id),
        }
        remote_id = self.writer.create("matches", match.properties(), references)
        self.mapper.register("matches", match.local_id, remote_id)
        self._match_teams[match.local_id] = match.team_ids

    def _match_event_records(self) -> list[Any]:
        """Stored match events followed by embedded ones not already stored."""
        records = self.reader.read_collection("matchEvents")
        seen = {record_key("matchEvents", r) for r in records}
        for event in self._embedded_events:
            key = record_key("matchEvents", event)
            if key is None or key not in seen:
                records.append(event)
        return records

    def _migrate_match_event(self, record: dict[str, Any]) -> None:
        event = MatchEvent.from_local(record)
        # Embedded event ids are only unique within their match
        key = f"{event.match_id}/{event.local_id}"
        self._check_new("matchEvents", key)

        match_ref = self.mapper.remap("matches", event.match_id)
        if event.team_id not in self._match_teams[event.match_id]:
            raise InvalidRecordError(
                f"team '{event.team_id}' did not play match '{event.match_id}'"
            )
        team_ref = self.mapper.remap("teams", event.team_id)
        player_ref = self.mapper.remap("players", event.player_id)
        if self._player_teams[event.player_id] != event.team_id:
            raise InvalidRecordError(
                f"player '{event.player_id}' does not belong to team '{event.team_id}'"
            )
        assist_ref = self.mapper.remap_optional("players", event.assist_player_id)
        if assist_ref is not None and self._player_teams[event.assist_player_id] != event.team_id:
            raise InvalidRecordError(
                f"assisting player '{event.assist_player_id}' does not belong to team '{event.team_id}'"
            )

        references = {
            "match": match_ref,
            "team": team_ref,
            "player": player_ref,
            "assist_player": assist_ref,
        }
        remote_id = self.writer.create("matchEvents", event.properties(), references)
        self.mapper.register("matchEvents", key, remote_id)

    def _migrate_event(self, record: dict[str, Any]) -> None:
        event = Event.from_local(record)
        self._check_new("events", event.local_id)
        remote_id = self.writer.create("events", event.properties())
        self.mapper.register("events", event.local_id, remote_id)

    def _migrate_media(self, record: dict[str, Any]) -> None:
        media = Media.from_local(record)
        self._check_new("media", media.local_id)
        match_ref = self.mapper.remap_optional("matches", media.match_id)
        remote_id = self.writer.create("media", media.properties(), {"match": match_ref})
        self.mapper.register("media", media.local_id, remote_id)

    def _report(self) -> MigrationReport:
        total = sum(self._created.values())
        if self._failures:
            message = f"Migrated {total} records with {len(self._failures)} failures"
        else:
            message = f"Migrated {total} records"
        if self._skipped:
            message += f" ({self._skipped} skipped)"

        success = not self._failures or not self.strict
        log.info(f"[MIGRATION] {message}")
        return MigrationReport(
            success=success,
            message=message,
            created=dict(self._created),
            failures=list(self._failures),
            skipped=self._skipped,
        )


def migrate_local_data(
    reader: LocalStoreReader, db: Neo4jDatabase, strict: bool = True
) -> MigrationReport:
    """Migrate everything the reader holds into ``db``.

    Never raises: a run that cannot go on is logged and reported as a failed
    migration. Running it twice against a store that was not cleared creates
    every record twice.
    """
    try:
        db.create_indexes()
        return MigrationOrchestrator(reader, RemoteWriter(db), strict=strict).run()
    except Exception as e:
        log.exception("[MIGRATION] Migration aborted")
        return MigrationReport(success=False, message=f"Migration aborted: {e}")
