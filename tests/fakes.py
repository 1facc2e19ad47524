from __future__ import annotations

import asyncio
import uuid
from typing import Any

from time_tracker.ports import SnapshotListener, TaskDocumentData


class CollectionWriteError(RuntimeError):
    pass


class FakeCollection:
    """
    In-process DocumentCollection used by store and startup tests.

    - writes are applied to a dict and recorded for assertions
    - snapshots are delivered on the next event loop iteration, never inline,
      so tests can observe the gap between a write and its delivery
    - fail_writes makes every write raise, like an unreachable backend
    """

    def __init__(self, docs: list[TaskDocumentData] | None = None, fail_writes: bool = False) -> None:
        self.docs: dict[str, TaskDocumentData] = {}
        for doc in docs or []:
            data = dict(doc)
            doc_id = str(data.pop("id", None) or uuid.uuid4().hex)
            self.docs[doc_id] = data
        self.fail_writes = fail_writes
        self.writes: list[tuple[str, str | None, TaskDocumentData | None]] = []
        self.listeners: list[SnapshotListener] = []

    def snapshot(self) -> list[TaskDocumentData]:
        items = [{"id": doc_id, **data} for doc_id, data in self.docs.items()]
        items.sort(key=lambda d: str(d.get("createdAt") or ""), reverse=True)
        return items

    def _deliver(self) -> None:
        snap = self.snapshot()
        for listener in list(self.listeners):
            listener(snap)

    def _schedule_delivery(self) -> None:
        asyncio.get_running_loop().call_soon(self._deliver)

    def _check(self) -> None:
        if self.fail_writes:
            raise CollectionWriteError("backend unavailable")

    async def add(self, data: TaskDocumentData) -> str:
        self._check()
        doc_id = uuid.uuid4().hex
        self.docs[doc_id] = dict(data)
        self.writes.append(("add", doc_id, dict(data)))
        self._schedule_delivery()
        return doc_id

    async def update(self, doc_id: str, fields: TaskDocumentData) -> None:
        self._check()
        if doc_id not in self.docs:
            raise CollectionWriteError(f"no document {doc_id}")
        self.docs[doc_id].update(fields)
        self.writes.append(("update", doc_id, dict(fields)))
        self._schedule_delivery()

    async def delete(self, doc_id: str) -> None:
        self._check()
        self.docs.pop(doc_id, None)
        self.writes.append(("delete", doc_id, None))
        self._schedule_delivery()

    def on_snapshot(self, listener: SnapshotListener):
        self.listeners.append(listener)
        # Initial state is delivered right away, as real change feeds do on subscribe.
        listener(self.snapshot())

        def unsubscribe() -> None:
            if listener in self.listeners:
                self.listeners.remove(listener)

        return unsubscribe


def make_doc(text: str, created_at: str, **extra: Any) -> TaskDocumentData:
    doc: TaskDocumentData = {
        "text": text,
        "plannedTime": 15,
        "actualTime": 0,
        "completed": False,
        "createdAt": created_at,
    }
    doc.update(extra)
    return doc
