"""
Flat-file JSON store.

A single JSON file holding an array of records, used as a small table
(``data/cahier-des-charges.json``, ``data/updates.json``).

Every read-modify-write runs under a lock shared by all stores that point
at the same file, and the new array is written to a temporary file in the
same directory and renamed over the original. Two concurrent creates
therefore both survive, and a crash mid-write leaves the previous file
intact.

Read semantics: a missing file is created as ``[]``; an unreadable file,
invalid JSON or a non-array payload is logged and treated as ``[]`` (the
next successful write replaces it).

Threading: locks are in-process (threading.Lock). Run one worker process
per data directory.
"""

import json
import logging
import os
import tempfile
import threading
import uuid

from portal.core.exceptions import NotFoundError
from portal.utils.helpers import utc_iso_now

logger = logging.getLogger(__name__)

_registry_lock = threading.Lock()
_file_locks: dict[str, threading.Lock] = {}


def lock_for(path: str) -> threading.Lock:
    """Return the process-wide lock guarding ``path``."""
    key = os.path.abspath(path)
    with _registry_lock:
        lock = _file_locks.get(key)
        if lock is None:
            lock = threading.Lock()
            _file_locks[key] = lock
        return lock


class FlatFileStore:
    """CRUD over one JSON-array file.

    Args:
        path: File location. Parent directories are created on first use.
        resource: Entity name used in NotFoundError / logs ("Specification").
        created_key / updated_key: Timestamp field names written on records.
    """

    def __init__(
        self,
        path: str,
        *,
        resource: str,
        created_key: str = "created_at",
        updated_key: str = "updated_at",
    ) -> None:
        self.path = path
        self.resource = resource
        self.created_key = created_key
        self.updated_key = updated_key
        self._lock = lock_for(path)

    # ── File I/O (callers hold the lock) ─────────────────────────────────────

    def _load(self) -> list[dict]:
        if not os.path.exists(self.path):
            self._save([])
            return []
        try:
            with open(self.path, encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, ValueError) as exc:
            logger.warning("Unreadable %s store, treating as empty: %s", self.resource, exc,
                           extra={"resource": self.resource, "file_path": self.path})
            return []
        if not isinstance(data, list):
            logger.warning("%s store does not hold an array, treating as empty", self.resource,
                           extra={"resource": self.resource, "file_path": self.path})
            return []
        records = [r for r in data if isinstance(r, dict)]
        if len(records) != len(data):
            logger.warning("Skipping %d non-object entries in %s store", len(data) - len(records),
                           self.resource, extra={"resource": self.resource, "file_path": self.path})
        return records

    def _save(self, records: list[dict]) -> None:
        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".tmp-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(records, fh, ensure_ascii=False, indent=2)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    @staticmethod
    def _index_of(records: list[dict], record_id: str) -> int:
        for i, record in enumerate(records):
            if isinstance(record, dict) and record.get("id") == record_id:
                return i
        return -1

    # ── Operations ───────────────────────────────────────────────────────────

    def read_all(self) -> list[dict]:
        """The whole array, in file order."""
        with self._lock:
            return self._load()

    def get(self, record_id: str) -> dict:
        """Return one record. Raises NotFoundError."""
        with self._lock:
            records = self._load()
        idx = self._index_of(records, record_id)
        if idx < 0:
            raise NotFoundError(self.resource, record_id)
        return records[idx]

    def create(self, fields: dict) -> dict:
        """Append ``fields`` plus a fresh UUID and both timestamps."""
        now = utc_iso_now()
        record = dict(fields)
        record["id"] = str(uuid.uuid4())
        record[self.created_key] = now
        record[self.updated_key] = now
        with self._lock:
            records = self._load()
            records.append(record)
            self._save(records)
        logger.info("%s created", self.resource,
                    extra={"resource": self.resource, "record_id": record["id"]})
        return record

    def update(self, record_id: str, fields: dict) -> dict:
        """Merge ``fields`` into the record and refresh its update timestamp.

        Raises NotFoundError without touching the file when the id is absent.
        """
        with self._lock:
            records = self._load()
            idx = self._index_of(records, record_id)
            if idx < 0:
                raise NotFoundError(self.resource, record_id)
            merged = {**records[idx], **fields}
            merged["id"] = record_id
            merged[self.updated_key] = utc_iso_now()
            records[idx] = merged
            self._save(records)
        logger.info("%s updated", self.resource,
                    extra={"resource": self.resource, "record_id": record_id})
        return merged

    def delete(self, record_id: str) -> None:
        """Remove the record. Raises NotFoundError when the id is absent."""
        with self._lock:
            records = self._load()
            idx = self._index_of(records, record_id)
            if idx < 0:
                raise NotFoundError(self.resource, record_id)
            del records[idx]
            self._save(records)
        logger.info("%s deleted", self.resource,
                    extra={"resource": self.resource, "record_id": record_id})
