"""
ResourceState: one entity collection held in memory.

Wraps the list/create/update/delete functions of an entity service and
keeps ``items`` consistent with what the server stored:

    - fetch():   merges ``initial_filters`` with per-call filters, replaces items
    - create():  prepends the row the service returned
    - update():  replaces the matching element with the returned row
    - delete():  drops the matching element

Local items are only touched after the service call succeeds, so a failed
call leaves them as they were. All operations on one instance run under a
single lock; two concurrent updates therefore apply in turn, each against
the list the previous one left behind.

Usage:
    leads = ResourceState(
        "leads",
        ResourceOps(list=contact_service.list_leads, create=contact_service.create_lead,
                    update=contact_service.update_lead, delete=contact_service.delete_lead),
        reducer=lead_statistics,
        initial_filters={"status": "new"},
    )
    leads.fetch()
    leads.create({"first_name": "Ada", "last_name": "Lovelace"})
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Callable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResourceOps:
    """Service callables backing one collection.

    ``list`` takes a filter dict; ``create`` takes the payload; ``update``
    takes (id, payload); ``delete`` takes the id. create/update return the
    stored row as a dict.
    """

    list: Callable[[dict], list]
    create: Callable[[dict], dict] | None = None
    update: Callable[[str, dict], dict] | None = None
    delete: Callable[[str], object] | None = None


class ResourceState:
    """Items, loading flags and the last error for one entity collection."""

    def __init__(
        self,
        name: str,
        ops: ResourceOps,
        *,
        reducer: Callable[[list], dict] | None = None,
        initial_filters: dict | None = None,
        auto_fetch: bool = False,
    ) -> None:
        self.name = name
        self.ops = ops
        self.reducer = reducer
        self.initial_filters = dict(initial_filters or {})
        self.auto_fetch = auto_fetch

        self.items: list[dict] = []
        self.is_loading = False
        self.is_operating = False
        self.error: str | None = None
        self._lock = threading.RLock()

        if auto_fetch:
            self.fetch()

    def __repr__(self) -> str:
        return f"<ResourceState {self.name} items={len(self.items)} error={self.error!r}>"

    def __len__(self) -> int:
        return len(self.items)

    # ── Reads ────────────────────────────────────────────────────────────────

    def fetch(self, filters: dict | None = None) -> list[dict]:
        """Reload items. On failure the error is recorded and items are kept."""
        merged = {**self.initial_filters, **(filters or {})}
        with self._lock:
            self.is_loading = True
            try:
                rows = self.ops.list(merged)
            except Exception as exc:
                self._record_failure("fetch", exc)
                return self.items
            finally:
                self.is_loading = False
            self.items = list(rows)
            self.error = None
            return self.items

    def get(self, record_id: str) -> dict | None:
        return next((item for item in self.items if item.get("id") == record_id), None)

    def statistics(self) -> dict:
        if self.reducer is None:
            raise NotImplementedError(f"{self.name} has no statistics reducer")
        return self.reducer(list(self.items))

    # ── Mutations ────────────────────────────────────────────────────────────

    def create(self, data: dict) -> dict:
        with self._lock:
            row = self._run("create", self._require(self.ops.create, "create"), data)
            self.items = [row, *self.items]
        return row

    def update(self, record_id: str, data: dict) -> dict:
        with self._lock:
            row = self._run("update", self._require(self.ops.update, "update"), record_id, data)
            self.items = [row if item.get("id") == record_id else item for item in self.items]
        return row

    def delete(self, record_id: str) -> None:
        with self._lock:
            self._run("delete", self._require(self.ops.delete, "delete"), record_id)
            self.items = [item for item in self.items if item.get("id") != record_id]

    # ── Internals ────────────────────────────────────────────────────────────

    def _require(self, fn, operation: str):
        if fn is None:
            raise NotImplementedError(f"{self.name} does not support {operation}")
        return fn

    def _run(self, operation: str, fn, *args):
        """Call ``fn`` under the lock, recording and re-raising failures."""
        with self._lock:
            self.is_operating = True
            try:
                result = fn(*args)
            except Exception as exc:
                self._record_failure(operation, exc)
                raise
            finally:
                self.is_operating = False
            self.error = None
            return result

    def _record_failure(self, operation: str, exc: Exception) -> None:
        self.error = str(exc) or exc.__class__.__name__
        logger.warning(
            "%s %s failed: %s", self.name, operation, exc,
            extra={"resource": self.name, "operation": operation},
        )
