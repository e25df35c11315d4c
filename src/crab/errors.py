# crab/errors.py
from typing import Optional


class CredentialError(Exception):
    """Base class for every error the credential manager reports.

    Each subclass carries the process exit code the CLI uses for it, so
    scripts can branch on the outcome.
    """

    exit_code = 1
    default_message = "Credential manager error"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class DatabaseNotFoundError(CredentialError):
    """Backup, delete or info requested against a database that does not exist."""

    exit_code = 1
    default_message = "Database file not found. Use 'add' command to create your first entry."


class CredentialNotFoundError(CredentialError):
    exit_code = 2

    def __init__(self, service: str):
        self.service = service
        super().__init__(f"No credential found for '{service}'")


class CredentialsNotStoredError(CredentialError):
    exit_code = 3
    default_message = "No credentials stored yet."


class StorageIOError(CredentialError):
    """A read, write, copy or remove on the database file failed.

    The originating OSError is chained as ``__cause__``.
    """

    exit_code = 4

    def __init__(self, message: str):
        super().__init__(f"File operation failed: {message}")


class SerializationError(CredentialError):
    exit_code = 5

    def __init__(self, message: str):
        super().__init__(f"Data serialization failed: {message}")


class DeserializationError(CredentialError):
    """The database file exists but does not hold a valid credential database."""

    exit_code = 6

    def __init__(self, message: str):
        super().__init__(f"Database file is corrupt: {message}")


class PathResolutionError(CredentialError):
    exit_code = 7
    default_message = "Home directory not found"


class CredentialExistsError(CredentialError):
    exit_code = 8

    def __init__(self, service: str):
        self.service = service
        super().__init__(f"A credential for '{service}' already exists")


class UserCancelledError(CredentialError):
    # Separate band from the data errors above
    exit_code = 100
    default_message = "Operation cancelled by user"
