"""Shared file handling for the JSON-backed repositories.

Every repository keeps one JSON list in one file.  Reads and
read-modify-write cycles run under a per-file lock so a check and the
write that depends on it cannot interleave with another writer in this
process.  Waiting for the lock is bounded; running out of time is a
NetworkError, the same failure a remote store would report.
"""

from __future__ import annotations

import json
import os
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from storefront.domain.exceptions import NetworkError, PersistenceError

DEFAULT_TIMEOUT = 5.0

_locks: dict[Path, threading.RLock] = {}
_locks_guard = threading.Lock()


def _lock_for(path: Path) -> threading.RLock:
    with _locks_guard:
        return _locks.setdefault(path, threading.RLock())


class JsonFile:

    def __init__(self, file_path: Path, timeout: float = DEFAULT_TIMEOUT) -> None:
        self.path = Path(file_path).resolve()
        self._timeout = timeout
        self._lock = _lock_for(self.path)
        self._ensure_file()

    @contextmanager
    def locked(self) -> Iterator[None]:
        if not self._lock.acquire(timeout=self._timeout):
            raise NetworkError(
                f"Timed out after {self._timeout}s waiting for {self.path.name}"
            )
        try:
            yield
        finally:
            self._lock.release()

    def load(self) -> list[dict]:
        with self.locked():
            try:
                data = json.loads(self.path.read_text(encoding="utf-8"))
            except (OSError, json.JSONDecodeError) as exc:
                raise PersistenceError(f"Cannot read {self.path.name}: {exc}") from exc
        if not isinstance(data, list):
            raise PersistenceError(f"{self.path.name} must hold a JSON list")
        return data

    def persist(self, records: list[dict]) -> None:
        """Write all records, replacing the file in one step."""
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        with self.locked():
            try:
                tmp.write_text(json.dumps(records, indent=2) + "\n", encoding="utf-8")
                os.replace(tmp, self.path)
            except OSError as exc:
                raise PersistenceError(f"Cannot write {self.path.name}: {exc}") from exc

    def _ensure_file(self) -> None:
        if not self.path.exists():
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                self.path.write_text("[]", encoding="utf-8")
            except OSError as exc:
                raise PersistenceError(f"Cannot create {self.path.name}: {exc}") from exc
