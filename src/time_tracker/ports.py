"""
Ports (interfaces) used by the stores.

The stores depend on Protocols instead of concrete implementations, so the
durable blob storage and the external document collection stay swappable and
easy to fake in tests.
"""
from __future__ import annotations

from typing import Any, Awaitable, Callable, Optional, Protocol

TaskDocumentData = dict[str, Any]
# Wire form of a task: camelCase keys, "id" set on documents read from a collection.

SnapshotListener = Callable[[list[TaskDocumentData]], None]
Unsubscribe = Callable[[], None]


class BlobStorage(Protocol):
    """Durable key-value storage of text blobs (the browser's localStorage equivalent)."""

    def get_item(self, key: str) -> Optional[str]: ...
    def set_item(self, key: str, value: str) -> None: ...


class DocumentCollection(Protocol):
    """
    External document collection with a push-based change feed.

    Writes are field-level and asynchronous. Reads only arrive through
    on_snapshot: every delivery is the full collection, ordered by createdAt
    descending, each document carrying its "id".
    """

    def add(self, data: TaskDocumentData) -> Awaitable[str]: ...
    def update(self, doc_id: str, fields: TaskDocumentData) -> Awaitable[None]: ...
    def delete(self, doc_id: str) -> Awaitable[None]: ...
    def on_snapshot(self, listener: SnapshotListener) -> Unsubscribe: ...


CollectionFactory = Callable[[Any], Awaitable[DocumentCollection]]
# Receives Settings, returns a connected collection or raises.
