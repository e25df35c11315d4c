# crab/core/database.py
import dataclasses
from dataclasses import dataclass, field
from typing import Callable, Iterator, List, Optional

from crab.constants import DATABASE_VERSION
from crab.core.entry import CredentialEntry
from crab.errors import CredentialExistsError, CredentialNotFoundError, DeserializationError


@dataclass
class CredentialDatabase:
    """Ordered collection of credentials, at most one per service.

    Entries keep insertion order. Service names are matched exactly and
    case-sensitively. Uniqueness is enforced by ``add_entry``,
    ``upsert_entry`` and ``update_entry``; a file written by another tool
    may still contain duplicates, in which case lookups return the first
    match and ``remove_entry`` drops all of them.
    """
    entries: List[CredentialEntry] = field(default_factory=list)
    version: str = DATABASE_VERSION

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[CredentialEntry]:
        return iter(self.entries)

    def __contains__(self, service: str) -> bool:
        return self._index_of(service) is not None

    def _index_of(self, service: str) -> Optional[int]:
        for index, entry in enumerate(self.entries):
            if entry.service == service:
                return index
        return None

    def add_entry(self, entry: CredentialEntry) -> None:
        if entry.service in self:
            raise CredentialExistsError(entry.service)
        self.entries.append(entry)

    def upsert_entry(self, entry: CredentialEntry) -> bool:
        """Replace the entry for the same service in place, or append it.

        Returns True if an existing entry was replaced.
        """
        index = self._index_of(entry.service)
        if index is None:
            self.entries.append(entry)
            return False
        self.entries[index] = entry
        return True

    def find_entry(self, service: str) -> Optional[CredentialEntry]:
        index = self._index_of(service)
        return self.entries[index] if index is not None else None

    def get_entry(self, service: str) -> CredentialEntry:
        entry = self.find_entry(service)
        if entry is None:
            raise CredentialNotFoundError(service)
        return entry

    def edit_entry(self, service: str) -> Optional[CredentialEntry]:
        """Return the stored entry itself so callers can update it in place."""
        return self.find_entry(service)

    def update_entry(self, service: str,
                     mutator: Callable[[CredentialEntry], Optional[CredentialEntry]]) -> CredentialEntry:
        """Apply ``mutator`` to a copy of the entry and store the result.

        The mutator may modify the copy it receives and return nothing, or
        return a replacement entry. If it raises, or renames the entry onto
        a service that is already taken, the stored entry is unchanged.
        """
        index = self._index_of(service)
        if index is None:
            raise CredentialNotFoundError(service)
        working = dataclasses.replace(self.entries[index])
        result = mutator(working)
        updated = result if result is not None else working
        if updated.service != service:
            other = self._index_of(updated.service)
            if other is not None and other != index:
                raise CredentialExistsError(updated.service)
        self.entries[index] = updated
        return updated

    def remove_entry(self, service: str) -> bool:
        initial_len = len(self.entries)
        self.entries = [entry for entry in self.entries if entry.service != service]
        return len(self.entries) < initial_len

    def list_services(self) -> List[str]:
        return [entry.service for entry in self.entries]

    def to_dict(self) -> dict:
        return {
            "entries": [entry.to_dict() for entry in self.entries],
            "version": self.version,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'CredentialDatabase':
        if not isinstance(data, dict):
            raise DeserializationError(f"database must be an object, got {type(data).__name__}")
        for key in ("entries", "version"):
            if key not in data:
                raise DeserializationError(f"database is missing field '{key}'")
        if not isinstance(data["entries"], list):
            raise DeserializationError("database field 'entries' must be a list")
        if not isinstance(data["version"], str):
            raise DeserializationError("database field 'version' must be a string")
        entries = [CredentialEntry.from_dict(item) for item in data["entries"]]
        return cls(entries=entries, version=data["version"])
