"""Local-to-remote identifier mapping for a single migration run."""

from typing import Optional

from .errors import UnresolvedReferenceError


class IdentityMapper:
    """Maps (collection kind, local id) to the id assigned by the remote store."""

    def __init__(self):
        self._ids: dict[str, dict[str, str]] = {}

    def register(self, kind: str, local_id: str, remote_id: str) -> None:
        self._ids.setdefault(kind, {})[local_id] = remote_id

    def remap(self, kind: str, local_id: str) -> str:
        try:
            return self._ids[kind][local_id]
        except KeyError:
            raise UnresolvedReferenceError(kind, local_id) from None

    def remap_optional(self, kind: str, local_id: Optional[str]) -> Optional[str]:
        """Like ``remap`` but an absent reference stays absent."""
        if local_id is None:
            return None
        return self.remap(kind, local_id)

    def is_registered(self, kind: str, local_id: str) -> bool:
        return local_id in self._ids.get(kind, {})

    def count(self, kind: str) -> int:
        return len(self._ids.get(kind, {}))
