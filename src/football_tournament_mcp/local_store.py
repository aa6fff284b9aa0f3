"""Readers for the locally cached tournament collections."""

import json
import logging
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from .errors import ReadError, StorageUnavailableError

log = logging.getLogger(__name__)


COLLECTION_KINDS = ("teams", "players", "matches", "matchEvents", "events", "media")

# Keys used by the web application in browser localStorage
STORAGE_KEYS = {
    "teams": "football_teams",
    "players": "football_players",
    "matches": "football_matches",
    "matchEvents": "football_match_events",
    "events": "football_events",
    "media": "football_media",
}

FILE_NAMES = {
    "teams": "teams.json",
    "players": "players.json",
    "matches": "matches.json",
    "matchEvents": "match_events.json",
    "events": "events.json",
    "media": "media.json",
}


def _check_kind(name: str) -> None:
    if name not in COLLECTION_KINDS:
        raise ValueError(f"Unknown collection '{name}', expected one of {', '.join(COLLECTION_KINDS)}")


def _as_records(name: str, value: Any) -> list[dict[str, Any]]:
    """Validate a decoded collection and return it as a list of records."""
    if not isinstance(value, list):
        raise ReadError(name, f"expected a JSON array, got {type(value).__name__}")
    for item in value:
        if not isinstance(item, dict):
            raise ReadError(name, f"expected objects, got {type(item).__name__}")
    return value


class LocalStoreReader:
    """Read-only access to the six local collections.

    Subclasses implement ``_load`` and may raise ``ReadError`` for a
    malformed entry; it is logged and the collection reads as empty.
    """

    def read_collection(self, name: str) -> list[dict[str, Any]]:
        _check_kind(name)
        try:
            records = self._load(name)
        except ReadError as e:
            log.warning(f"[LOCAL-STORE] {e}; treating collection as empty")
            return []
        return list(records or [])

    def _load(self, name: str) -> Optional[list[dict[str, Any]]]:
        raise NotImplementedError

    def counts(self) -> dict[str, int]:
        """Number of records per collection."""
        return {kind: len(self.read_collection(kind)) for kind in COLLECTION_KINDS}


class InMemoryStore(LocalStoreReader):
    """Collections held in memory, keyed by collection kind."""

    def __init__(self, collections: Optional[Mapping[str, list[dict[str, Any]]]] = None):
        self.collections = dict(collections or {})

    def _load(self, name: str) -> Optional[list[dict[str, Any]]]:
        value = self.collections.get(name)
        if value is None:
            return None
        return _as_records(name, value)


class LocalStorageDump(LocalStoreReader):
    """A JSON export of browser localStorage.

    Every localStorage value is a string, so each collection is a JSON array
    serialized a second time inside the export.
    """

    def __init__(self, source: Union[str, Path, Mapping[str, Any]]):
        if isinstance(source, Mapping):
            self.path = None
            self._entries: Optional[dict[str, Any]] = dict(source)
        else:
            self.path = Path(source)
            self._entries = None

    @property
    def entries(self) -> dict[str, Any]:
        if self._entries is None:
            self._entries = self._read_export()
        return self._entries

    def _read_export(self) -> dict[str, Any]:
        try:
            text = self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise StorageUnavailableError(f"Cannot open localStorage export {self.path}: {e}") from e
        try:
            entries = json.loads(text)
        except json.JSONDecodeError as e:
            raise StorageUnavailableError(f"localStorage export {self.path} is not JSON: {e}") from e
        if not isinstance(entries, dict):
            raise StorageUnavailableError(f"localStorage export {self.path} is not a key-value object")
        return entries

    def _load(self, name: str) -> Optional[list[dict[str, Any]]]:
        raw = self.entries.get(STORAGE_KEYS[name])
        if raw is None:
            return None
        if isinstance(raw, str):
            if not raw.strip():
                return None
            try:
                raw = json.loads(raw)
            except json.JSONDecodeError as e:
                raise ReadError(name, f"invalid JSON ({e})") from e
        return _as_records(name, raw)


class JsonDirectoryStore(LocalStoreReader):
    """One JSON array file per collection inside a directory."""

    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory)

    def _load(self, name: str) -> Optional[list[dict[str, Any]]]:
        if not self.directory.is_dir():
            raise StorageUnavailableError(f"Local data directory {self.directory} does not exist")
        path = self.directory / FILE_NAMES[name]
        if not path.exists():
            return None
        try:
            records = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise ReadError(name, f"{path.name}: {e}") from e
        log.debug(f"[LOCAL-STORE] Read {path}")
        return _as_records(name, records)


def open_local_store(path: Union[str, Path]) -> LocalStoreReader:
    """Pick a reader for a path: a directory of JSON files or a localStorage export."""
    path = Path(path)
    if path.is_dir():
        return JsonDirectoryStore(path)
    return LocalStorageDump(path)
