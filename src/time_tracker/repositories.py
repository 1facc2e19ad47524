from __future__ import annotations

import json
import logging
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError

from .db import InMemoryBlobStorage, SQLiteBlobStorage
from .models import TaskEntity
from .ports import BlobStorage, CollectionFactory, DocumentCollection, TaskDocumentData
from .profiles import DAILY, TrackerProfile, get_profile
from .schemas import TaskDocument
from .settings import Settings, get_settings
from .utils import parse_day, parse_number, today

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "time-tracker-tasks"

_STEP_SIGN = {"up": 1, "down": -1}

# Upper bound for any stored time, in the profile unit.
MAX_TIME = 1_000_000.0


@dataclass(frozen=True)
class Mutation:
    """
    Outcome of a store operation.

    accepted is False when the request was silently ignored (blank text,
    unknown id, unreadable amount). task is the resulting record when the
    store knows it immediately; feed-backed stores never do.
    """
    accepted: bool
    task: Optional[TaskEntity] = None


REJECTED = Mutation(accepted=False)


# PUBLIC_INTERFACE
def initial_planned_time(profile: TrackerProfile, raw: Any) -> float:
    """Planned time for a new task: unreadable or zero input uses the profile default."""
    value = parse_number(raw)
    if not value:
        value = profile.planned_default
    return bound_planned_time(profile, value)


# PUBLIC_INTERFACE
def clamp_planned_time(profile: TrackerProfile, raw: Any) -> float:
    """max(floor, parsed value), with unreadable input treated as the floor."""
    value = parse_number(raw)
    if value is None:
        value = profile.planned_floor
    return bound_planned_time(profile, value)


# PUBLIC_INTERFACE
def clamp_actual_time(raw: Any) -> float:
    """max(0, parsed value), with unreadable input treated as 0."""
    return bound_actual_time(parse_number(raw) or 0.0)


def bound_planned_time(profile: TrackerProfile, value: float) -> float:
    return float(min(MAX_TIME, max(profile.planned_floor, value)))


def bound_actual_time(value: float) -> float:
    return float(min(MAX_TIME, max(0.0, value)))


# PUBLIC_INTERFACE
class TaskStore(ABC):
    """
    Task snapshot plus one persistence strategy.

    The public operations validate and normalize input against the profile,
    then hand the resulting field changes to the backend hooks. Unknown ids
    and blank text are no-ops, never errors.
    """

    backend: str = "abstract"

    def __init__(self, profile: TrackerProfile = DAILY) -> None:
        self.profile = profile

    @property
    @abstractmethod
    def tasks(self) -> List[TaskEntity]:
        """Current snapshot, newest first."""

    @abstractmethod
    async def _insert(self, fields: Dict[str, Any]) -> Mutation:
        """Create a record from normalized fields."""

    @abstractmethod
    async def _update(self, task_id: str, fields: Dict[str, Any]) -> Mutation:
        """Apply normalized field changes to an existing record."""

    @abstractmethod
    async def _remove(self, task_id: str) -> Mutation:
        """Delete an existing record."""

    def close(self) -> None:
        """Release backend resources; safe to call more than once."""
        return

    def _from_document(self, doc: TaskDocument, task_id: str) -> TaskEntity:
        """Record for a loaded or delivered document, times clamped to the profile bounds."""
        entity = doc.to_entity(task_id)
        entity["planned_time"] = bound_planned_time(self.profile, entity["planned_time"])
        entity["actual_time"] = bound_actual_time(entity["actual_time"])
        return entity

    def get(self, task_id: str) -> Optional[TaskEntity]:
        """Return a copy of the record with task_id, or None."""
        for task in self.tasks:
            if task["id"] == task_id:
                return task
        return None

    # ---- operations ----

    async def add(
        self,
        text: str,
        planned_time: Any = None,
        date: Optional[Union[str, date]] = None,
    ) -> Mutation:
        label = (text or "").strip()
        if not label:
            logger.debug("Ignoring new task with blank text")
            return REJECTED

        day = None
        if self.profile.date_aware:
            day = parse_day(date) or today()

        return await self._insert(
            {
                "text": label,
                "planned_time": initial_planned_time(self.profile, planned_time),
                "actual_time": 0.0,
                "completed": False,
                "date": day,
            }
        )

    async def delete(self, task_id: str) -> Mutation:
        if self.get(task_id) is None:
            return REJECTED
        return await self._remove(task_id)

    async def toggle_complete(self, task_id: str) -> Mutation:
        task = self.get(task_id)
        if task is None:
            return REJECTED
        return await self._update(task_id, {"completed": not task["completed"]})

    async def set_actual_time(self, task_id: str, raw_value: Any) -> Mutation:
        if self.get(task_id) is None:
            return REJECTED
        return await self._update(task_id, {"actual_time": clamp_actual_time(raw_value)})

    async def set_planned_time(self, task_id: str, raw_value: Any) -> Mutation:
        if self.get(task_id) is None:
            return REJECTED
        return await self._update(task_id, {"planned_time": clamp_planned_time(self.profile, raw_value)})

    async def add_session_time(self, task_id: str, amount: Any) -> Mutation:
        """Add a positive amount of logged time; anything else is ignored."""
        task = self.get(task_id)
        value = parse_number(amount)
        if task is None or value is None or value <= 0:
            return REJECTED
        return await self._update(task_id, {"actual_time": bound_actual_time(task["actual_time"] + value)})

    async def step_planned_time(self, task_id: str, direction: str) -> Mutation:
        task = self.get(task_id)
        sign = _STEP_SIGN.get(direction)
        if task is None or sign is None:
            return REJECTED
        value = bound_planned_time(self.profile, task["planned_time"] + sign * self.profile.step)
        return await self._update(task_id, {"planned_time": value})

    async def step_actual_time(self, task_id: str, direction: str) -> Mutation:
        task = self.get(task_id)
        sign = _STEP_SIGN.get(direction)
        if task is None or sign is None:
            return REJECTED
        value = bound_actual_time(task["actual_time"] + sign * self.profile.step)
        return await self._update(task_id, {"actual_time": value})

    async def reschedule(self, task_id: str) -> Mutation:
        """Move a task to today (date-aware profiles only)."""
        if not self.profile.date_aware:
            logger.debug("Reschedule ignored: profile %s has no dates", self.profile.name)
            return REJECTED
        if self.get(task_id) is None:
            return REJECTED
        return await self._update(task_id, {"date": today()})

    async def rename(self, task_id: str, new_text: str) -> Mutation:
        label = (new_text or "").strip()
        if not label or self.get(task_id) is None:
            return REJECTED
        return await self._update(task_id, {"text": label})


class LocalTaskStore(TaskStore):
    """
    Store persisted as one JSON blob in local durable storage.

    Every mutation updates the snapshot in place and rewrites the whole blob
    before returning.
    """

    backend = "local"

    def __init__(
        self,
        storage: BlobStorage,
        profile: TrackerProfile = DAILY,
        key: str = DEFAULT_STORAGE_KEY,
    ) -> None:
        super().__init__(profile)
        self._storage = storage
        self._key = key
        self._tasks: List[TaskEntity] = self._load()
        logger.info("LocalTaskStore ready key=%s total=%s", key, len(self._tasks))

    @property
    def tasks(self) -> List[TaskEntity]:
        return [t.copy() for t in self._tasks]

    def _load(self) -> List[TaskEntity]:
        raw = self._storage.get_item(self._key)
        if not raw:
            return []
        try:
            items = json.loads(raw)
        except ValueError:
            logger.error("Stored tasks under %s are not valid JSON; starting empty", self._key)
            return []
        if not isinstance(items, list):
            logger.error("Stored tasks under %s are not a list; starting empty", self._key)
            return []

        loaded: List[TaskEntity] = []
        seen: set[str] = set()
        for item in items:
            try:
                doc = TaskDocument.model_validate(item)
            except ValidationError as e:
                logger.warning("Skipping unreadable stored task: %s", e.errors())
                continue
            task_id = doc.id
            if not task_id or task_id in seen:
                task_id = uuid.uuid4().hex
                logger.warning("Stored task had a missing or duplicate id; assigned %s", task_id)
            seen.add(task_id)
            loaded.append(self._from_document(doc, task_id))
        return loaded

    def _persist(self) -> None:
        # Blocking write: the blob is durable before a mutation returns.
        payload = [TaskDocument.from_entity(t).to_wire() for t in self._tasks]
        self._storage.set_item(self._key, json.dumps(payload, ensure_ascii=False))

    def _index(self, task_id: str) -> Optional[int]:
        for i, task in enumerate(self._tasks):
            if task["id"] == task_id:
                return i
        return None

    async def _insert(self, fields: Dict[str, Any]) -> Mutation:
        entity: TaskEntity = {
            "id": uuid.uuid4().hex,
            "text": fields["text"],
            "planned_time": fields["planned_time"],
            "actual_time": fields["actual_time"],
            "completed": fields["completed"],
            "date": fields["date"],
            "created_at": datetime.now(timezone.utc),
        }
        self._tasks.insert(0, entity)
        self._persist()
        logger.debug("Task added id=%s date=%s planned=%s", entity["id"], entity["date"], entity["planned_time"])
        return Mutation(accepted=True, task=entity.copy())

    async def _update(self, task_id: str, fields: Dict[str, Any]) -> Mutation:
        idx = self._index(task_id)
        if idx is None:
            return REJECTED
        task = self._tasks[idx]
        task.update(fields)  # type: ignore[typeddict-item]
        self._persist()
        logger.debug("Task updated id=%s fields=%s", task_id, sorted(fields))
        return Mutation(accepted=True, task=task.copy())

    async def _remove(self, task_id: str) -> Mutation:
        before = len(self._tasks)
        self._tasks = [t for t in self._tasks if t["id"] != task_id]
        if len(self._tasks) == before:
            return REJECTED
        self._persist()
        logger.debug("Task deleted id=%s", task_id)
        return Mutation(accepted=True)


def _fields_to_wire(fields: Dict[str, Any]) -> TaskDocumentData:
    """Translate normalized field changes into camelCase document fields."""
    out: TaskDocumentData = {}
    for name, value in fields.items():
        info = TaskDocument.model_fields[name]
        if isinstance(value, date):
            value = value.isoformat()
        out[info.alias or name] = value
    return out


class RemoteTaskStore(TaskStore):
    """
    Store backed by an external document collection.

    Mutations only issue writes. The snapshot changes exclusively when the
    collection's change feed delivers a new full snapshot, so the effect of a
    write shows up later, or never if the write failed. Failed writes are
    logged and dropped.
    """

    backend = "remote"

    def __init__(self, collection: DocumentCollection, profile: TrackerProfile = DAILY) -> None:
        super().__init__(profile)
        self._collection = collection
        self._tasks: List[TaskEntity] = []
        self._unsubscribe = collection.on_snapshot(self._on_snapshot)

    @property
    def tasks(self) -> List[TaskEntity]:
        return [t.copy() for t in self._tasks]

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _on_snapshot(self, docs: List[TaskDocumentData]) -> None:
        tasks: List[TaskEntity] = []
        for raw in docs:
            try:
                doc = TaskDocument.model_validate(raw)
            except ValidationError as e:
                logger.warning("Skipping unreadable task document: %s", e.errors())
                continue
            if not doc.id:
                logger.warning("Skipping task document without id")
                continue
            tasks.append(self._from_document(doc, doc.id))
        self._tasks = tasks
        logger.debug("Snapshot delivered total=%s", len(tasks))

    async def _insert(self, fields: Dict[str, Any]) -> Mutation:
        doc = TaskDocument(created_at=datetime.now(timezone.utc), **fields)
        try:
            doc_id = await self._collection.add(doc.to_wire(include_id=False))
            logger.debug("Task add issued id=%s", doc_id)
        except Exception:
            logger.exception("Error adding task")
        return Mutation(accepted=True)

    async def _update(self, task_id: str, fields: Dict[str, Any]) -> Mutation:
        try:
            await self._collection.update(task_id, _fields_to_wire(fields))
        except Exception:
            logger.exception("Error updating task id=%s", task_id)
        return Mutation(accepted=True)

    async def _remove(self, task_id: str) -> Mutation:
        try:
            await self._collection.delete(task_id)
        except Exception:
            logger.exception("Error deleting task id=%s", task_id)
        return Mutation(accepted=True)


# PUBLIC_INTERFACE
def get_blob_storage(settings: Optional[Settings] = None) -> BlobStorage:
    """
    Factory to return the configured local blob storage.
    - memory: InMemoryBlobStorage
    - sqlite: SQLiteBlobStorage at settings.db_path
    """
    settings = settings or get_settings()
    if settings.storage_backend == "sqlite":
        try:
            return SQLiteBlobStorage(settings.db_path)
        except Exception:
            logger.warning("SQLite storage unavailable at %s, using memory", settings.db_path, exc_info=True)
            return InMemoryBlobStorage()
    return InMemoryBlobStorage()


# PUBLIC_INTERFACE
async def open_task_store(
    settings: Optional[Settings] = None,
    collection_factory: Optional[CollectionFactory] = None,
    storage: Optional[BlobStorage] = None,
) -> TaskStore:
    """
    Open the task store for this session.

    Uses the external collection when credentials are configured and a
    collection factory is available; any failure while connecting falls back
    to local storage for the rest of the session.
    """
    settings = settings or get_settings()
    profile = get_profile(settings.profile)

    if not settings.remote_configured:
        logger.info("No external store credentials found, using local storage")
    elif collection_factory is None:
        logger.info("No external store client available, using local storage")
    else:
        try:
            collection = await collection_factory(settings)
            store = RemoteTaskStore(collection, profile)
            logger.info("External store connected collection=%s", settings.remote_collection)
            return store
        except Exception:
            logger.warning("External store init failed, using local storage", exc_info=True)

    return LocalTaskStore(storage or get_blob_storage(settings), profile, key=settings.storage_key)
