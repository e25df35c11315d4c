# crab/core/storage.py
import json
import logging
import os
import shutil
import tempfile
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional

from crab.constants import BACKUP_SUFFIX, DATA_DIR_NAME, DATABASE_FILE_MODE, DATABASE_FILENAME
from crab.core.database import CredentialDatabase
from crab.errors import (
    DatabaseNotFoundError,
    DeserializationError,
    PathResolutionError,
    SerializationError,
    StorageIOError,
)
from crab.utils import now_timestamp


def resolve_path() -> Path:
    """Return the default database location, ``~/.crab/credentials.json``."""
    try:
        home = Path.home()
    except (RuntimeError, KeyError) as e:
        raise PathResolutionError() from e
    return home / DATA_DIR_NAME / DATABASE_FILENAME


def _discard(tmp_path: Optional[Path]) -> None:
    if tmp_path is None:
        return
    try:
        tmp_path.unlink()
    except FileNotFoundError:
        pass


@dataclass
class DatabaseInfo:
    size: int
    last_modified: datetime


class CredentialStorage:
    """Maps a CredentialDatabase to and from a JSON file on disk.

    The file is always read and written whole. Saves go through a
    temporary file in the same directory that is renamed over the target,
    so a crash mid-write leaves the previous file intact. There is no
    locking: two processes saving at once means the last writer wins.
    """

    def __init__(self, path: Optional[Path] = None):
        self._path = Path(path) if path is not None else None

    @property
    def path(self) -> Path:
        if self._path is None:
            self._path = resolve_path()
        return self._path

    def exists(self) -> bool:
        try:
            return self.path.is_file()
        except PathResolutionError:
            return False

    def load(self) -> CredentialDatabase:
        path = self.path
        if not path.exists():
            logging.debug(f"No database at {path}, starting empty")
            return CredentialDatabase()
        if not path.is_file():
            raise StorageIOError(f"{path} is not a regular file")
        try:
            with open(path, 'r', encoding='utf-8') as f:
                raw = f.read()
        except OSError as e:
            raise StorageIOError(f"cannot read {path}: {e}") from e
        except UnicodeDecodeError as e:
            raise DeserializationError(f"{path} is not valid UTF-8 text") from e
        try:
            data = json.loads(raw)
        except ValueError as e:
            raise DeserializationError(f"{path} is not valid JSON: {e}") from e
        except RecursionError as e:
            raise DeserializationError(f"{path} is nested too deeply") from e
        database = CredentialDatabase.from_dict(data)
        logging.debug(f"Loaded {len(database)} entries from {path}")
        return database

    def save(self, database: CredentialDatabase) -> None:
        path = self.path
        # Lone surrogates (undecodable argv bytes) fail here, before any file is opened
        try:
            payload = json.dumps(database.to_dict(), indent=2, ensure_ascii=False).encode('utf-8') + b"\n"
        except (TypeError, ValueError) as e:
            raise SerializationError(str(e)) from e

        tmp_path = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
            tmp_path = Path(tmp_name)
            with os.fdopen(fd, 'wb') as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.chmod(tmp_path, DATABASE_FILE_MODE)
            os.replace(tmp_path, path)
        except OSError as e:
            _discard(tmp_path)
            raise StorageIOError(f"cannot write {path}: {e}") from e
        except BaseException:
            _discard(tmp_path)
            raise
        logging.debug(f"Saved {len(database)} entries to {path}")

    def backup(self) -> Path:
        """Copy the database to a timestamped sibling and return its path.

        Existing backups are never overwritten; a second backup within the
        same second gets a numeric suffix.
        """
        path = self.path
        if not path.is_file():
            raise DatabaseNotFoundError()
        stem = f"{path.stem}_{now_timestamp()}"
        counter = 0
        try:
            while True:
                name = stem if counter == 0 else f"{stem}_{counter}"
                backup_path = path.with_name(f"{name}{path.suffix}{BACKUP_SUFFIX}")
                try:
                    target = open(backup_path, 'xb')
                except FileExistsError:
                    counter += 1
                    continue
                try:
                    with target, open(path, 'rb') as source:
                        shutil.copyfileobj(source, target)
                except OSError:
                    backup_path.unlink()
                    raise
                break
            os.chmod(backup_path, DATABASE_FILE_MODE)
        except OSError as e:
            raise StorageIOError(f"cannot back up {path}: {e}") from e
        logging.info(f"Database backup created at {backup_path}")
        return backup_path

    def delete(self) -> None:
        path = self.path
        if not path.is_file():
            raise DatabaseNotFoundError()
        try:
            path.unlink()
        except FileNotFoundError as e:
            raise DatabaseNotFoundError() from e
        except OSError as e:
            raise StorageIOError(f"cannot delete {path}: {e}") from e
        logging.info(f"Database file deleted: {path}")

    def metadata(self) -> DatabaseInfo:
        path = self.path
        try:
            stat = path.stat()
        except FileNotFoundError as e:
            raise DatabaseNotFoundError() from e
        except OSError as e:
            raise StorageIOError(f"cannot stat {path}: {e}") from e
        return DatabaseInfo(size=stat.st_size, last_modified=datetime.fromtimestamp(stat.st_mtime))
