# crab/core/entry.py
from dataclasses import dataclass

from crab.errors import DeserializationError
from crab.utils import now_timestamp

ENTRY_FIELDS = {
    "service": str,
    "account": str,
    "secret": str,
    "created_at": int,
    "updated_at": int,
}


@dataclass
class CredentialEntry:
    """Represents one stored credential."""
    service: str
    account: str
    secret: str
    created_at: int
    updated_at: int

    @classmethod
    def create(cls, service: str, account: str, secret: str) -> 'CredentialEntry':
        """Create a new credential with both timestamps set to now."""
        now = now_timestamp()
        return cls(
            service=service,
            account=account,
            secret=secret,
            created_at=now,
            updated_at=now,
        )

    # Each update refreshes updated_at, even if the value is unchanged.
    # Callers that want no-op detection compare before calling.
    def update_service(self, new_service: str) -> None:
        self.service = new_service
        self._touch()

    def update_account(self, new_account: str) -> None:
        self.account = new_account
        self._touch()

    def update_secret(self, new_secret: str) -> None:
        self.secret = new_secret
        self._touch()

    def _touch(self) -> None:
        # updated_at never goes below created_at, even if the clock steps back
        self.updated_at = max(now_timestamp(), self.created_at, self.updated_at)

    def to_dict(self) -> dict:
        return {
            "service": self.service,
            "account": self.account,
            "secret": self.secret,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'CredentialEntry':
        if not isinstance(data, dict):
            raise DeserializationError(f"entry must be an object, got {type(data).__name__}")
        values = {}
        for name, expected in ENTRY_FIELDS.items():
            if name not in data:
                raise DeserializationError(f"entry is missing field '{name}'")
            value = data[name]
            # bool is a subclass of int but never a valid timestamp
            if not isinstance(value, expected) or isinstance(value, bool):
                raise DeserializationError(
                    f"entry field '{name}' must be {expected.__name__}, got {type(value).__name__}"
                )
            values[name] = value
        if values["updated_at"] < values["created_at"]:
            raise DeserializationError(
                f"entry '{values['service']}' was updated before it was created"
            )
        return cls(**values)
