"""
JSON file persistence adapter.

Each collection lives in a single JSON document (an array of records). Writes
go to a sibling ``.tmp`` file which is then renamed over the target, so the
visible file is either the old or the new content and never a truncated one.
"""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator
import copy
import json
import logging
import os
import threading

logger = logging.getLogger(__name__)

TEMP_SUFFIX = ".tmp"


class StorageError(Exception):
    """Base class for persistence failures."""

    def __init__(self, message: str, path: Path | None = None):
        super().__init__(message)
        self.message = message
        self.path = path


class StorageIOError(StorageError):
    """Raised when creating, reading, writing or renaming a document fails."""


class StorageParseError(StorageError):
    """Raised when a document holds malformed JSON or the wrong top-level type."""


def _dumps(data: Any) -> str:
    return json.dumps(data, ensure_ascii=False, indent=2)


def ensure_exists(path: str | os.PathLike, default: Any = None) -> None:
    """Create the parent directory and seed the file with ``default`` if missing."""
    target = Path(path)
    seed = [] if default is None else default
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        if not target.exists():
            write(target, seed)
            logger.info("Created %s", target)
    except StorageError:
        raise
    except OSError as exc:
        logger.error("Error ensuring file exists at %s: %s", target, exc)
        raise StorageIOError(f"Could not create {target}: {exc}", target) from exc


def load_document(path: str | os.PathLike, default: Any) -> Any:
    """Parse the whole document; a missing file yields a copy of ``default``."""
    target = Path(path)
    try:
        raw = target.read_bytes()
    except FileNotFoundError:
        return copy.deepcopy(default)
    except OSError as exc:
        logger.error("Error reading JSON file %s: %s", target, exc)
        raise StorageIOError(f"Could not read {target}: {exc}", target) from exc
    try:
        return json.loads(raw.decode("utf-8"))
    except ValueError as exc:
        logger.error("Error parsing JSON file %s: %s", target, exc)
        raise StorageParseError(f"Invalid JSON in {target}: {exc}", target) from exc


def read(path: str | os.PathLike) -> list:
    """Return the collection stored at ``path`` (empty when the file is missing)."""
    data = load_document(path, [])
    if not isinstance(data, list):
        raise StorageParseError(f"Expected a JSON array in {path}", Path(path))
    return data


def write(path: str | os.PathLike, data: Any) -> None:
    """Serialize ``data`` and atomically replace the document at ``path``."""
    target = Path(path)
    temp = target.with_name(target.name + TEMP_SUFFIX)
    try:
        payload = _dumps(data)
    except (TypeError, ValueError) as exc:
        raise StorageIOError(f"Could not serialize data for {target}: {exc}", target) from exc
    try:
        with temp.open("w", encoding="utf-8") as f:
            f.write(payload)
            f.flush()
            os.fsync(f.fileno())
        os.replace(temp, target)
    except OSError as exc:
        logger.error("Error writing JSON file %s: %s", target, exc)
        try:
            temp.unlink()
        except OSError:
            pass
        raise StorageIOError(f"Could not write {target}: {exc}", target) from exc


class JsonCollection:
    """One collection document plus the lock that serializes its writers."""

    def __init__(self, path: str | os.PathLike) -> None:
        self.path = Path(path)
        self._lock = threading.RLock()

    def ensure_exists(self) -> None:
        with self._lock:
            ensure_exists(self.path, [])

    def read(self) -> list:
        with self._lock:
            return read(self.path)

    def write(self, records: list) -> None:
        with self._lock:
            write(self.path, records)

    @contextmanager
    def transaction(self) -> Iterator[list]:
        """
        Hold the lock across a read-modify-write cycle.

        The yielded list is written back only when the block exits without
        raising; callers mutate it in place.
        """
        with self._lock:
            records = read(self.path)
            yield records
            write(self.path, records)
