"""
Persistence backends for the project collection.

A backend stores project documents (the JSON form of ProjectRecord). The
RecordStore talks to backends only through ProjectBackend, so the JSON file,
the in-memory list and the shared document collection are interchangeable.

Backends report failures by raising StorageUnavailable or OSError; the store
decides how to surface them.
"""

from __future__ import annotations

import copy
import json
import logging
import threading
import uuid
from abc import ABC, abstractmethod
from collections.abc import Callable
from pathlib import Path
from typing import Any

from folio.core.backup import DEFAULT_KEEP_COUNT, DEFAULT_KEEP_DAYS, safe_write_json
from folio.core.errors import StorageUnavailable
from folio.core.events import Listeners, Subscription
from folio.projects.records import RecordId

logger = logging.getLogger(__name__)

Document = dict[str, Any]
ChangeCallback = Callable[[list[Document]], None]


class ProjectBackend(ABC):
    """Load/save/subscribe contract for project documents.

    Backends with ``assigns_ids = False`` receive documents that already
    carry their ``id`` and persist the whole collection with write_all().
    Backends with ``assigns_ids = True`` hand out ids from insert() and
    accept per-document put()/remove().
    """

    assigns_ids = False

    @abstractmethod
    def read_all(self) -> list[Document]:
        """Return every stored document in insertion order."""

    @abstractmethod
    def write_all(self, docs: list[Document]) -> None:
        """Replace the stored collection with *docs*."""

    def insert(self, doc: Document) -> RecordId:
        raise NotImplementedError(f"{type(self).__name__} does not assign ids")

    def put(self, doc: Document) -> None:
        raise NotImplementedError(f"{type(self).__name__} has no per-document writes")

    def remove(self, record_id: RecordId) -> None:
        raise NotImplementedError(f"{type(self).__name__} has no per-document writes")

    def subscribe(self, callback: ChangeCallback) -> Subscription | None:
        """Register for pushed changes. Returns None when pushes are unsupported."""
        return None


class JsonFileBackend(ProjectBackend):
    """Stores the collection in projects_db.json with rotating backups."""

    SCHEMA_VERSION = "1.0"
    COMMENT = "Portfolio projects. Managed by folio; edit with 'folio projects'."

    def __init__(
        self,
        db_path: Path,
        backup_dir: Path | None = None,
        keep_backups: int = DEFAULT_KEEP_COUNT,
        keep_days: int | None = DEFAULT_KEEP_DAYS,
    ):
        self.db_path = Path(db_path)
        self.backup_dir = backup_dir
        self.keep_backups = keep_backups
        self.keep_days = keep_days

    def read_all(self) -> list[Document]:
        if not self.db_path.exists():
            return []

        try:
            with open(self.db_path, encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise StorageUnavailable(f"Invalid JSON in {self.db_path}: {e}") from e
        except OSError as e:
            raise StorageUnavailable(f"Cannot read {self.db_path}: {e}") from e

        # A bare list is what the site's projects.json export looks like
        if isinstance(data, list):
            return data
        if isinstance(data, dict) and isinstance(data.get("projects"), list):
            return list(data["projects"])
        raise StorageUnavailable(f"Unrecognized database layout in {self.db_path}")

    def write_all(self, docs: list[Document]) -> None:
        payload = {
            "_comment": self.COMMENT,
            "_schema_version": self.SCHEMA_VERSION,
            "projects": docs,
        }
        safe_write_json(
            self.db_path,
            payload,
            backup_dir=self.backup_dir,
            keep_backups=self.keep_backups,
            keep_days=self.keep_days,
        )
        logger.debug("Wrote %d projects to %s", len(docs), self.db_path)


class MemoryBackend(ProjectBackend):
    """Keeps documents in a list. Nothing survives the process."""

    def __init__(self, docs: list[Document] | None = None):
        self._docs = copy.deepcopy(docs) if docs else []
        self.writes = 0

    def read_all(self) -> list[Document]:
        return copy.deepcopy(self._docs)

    def write_all(self, docs: list[Document]) -> None:
        self._docs = copy.deepcopy(docs)
        self.writes += 1


class DocumentCollection:
    """A shared, keyed document collection with change notifications.

    Several sessions (one CollectionBackend each) can share a collection; every
    change made through any of them is pushed to all subscribers. Keys are
    opaque strings generated on insert.

    A change and its notification happen under one publish lock, so
    subscribers receive snapshots in the order the changes were made.
    """

    def __init__(self) -> None:
        self._docs: dict[str, Document] = {}
        self._lock = threading.Lock()
        # Reentrant so a listener may write to the collection it is told about
        self._publish_lock = threading.RLock()
        self._listeners = Listeners()

    def snapshot(self) -> list[Document]:
        with self._lock:
            return [dict(copy.deepcopy(doc), id=key) for key, doc in self._docs.items()]

    def add(self, doc: Document) -> str:
        body = copy.deepcopy(doc)
        body.pop("id", None)
        with self._publish_lock:
            with self._lock:
                key = self._fresh_key()
                self._docs[key] = body
            self._publish()
        return key

    def set(self, key: str, doc: Document) -> None:
        body = copy.deepcopy(doc)
        body.pop("id", None)
        with self._publish_lock:
            with self._lock:
                self._docs[key] = body
            self._publish()

    def delete(self, key: str) -> None:
        with self._publish_lock:
            with self._lock:
                removed = self._docs.pop(key, None)
            if removed is not None:
                self._publish()

    def replace_all(self, docs: list[Document]) -> None:
        """Replace every document. Ids become keys; a missing or repeated one gets a fresh key."""
        with self._publish_lock:
            with self._lock:
                self._docs = {}
                for doc in docs:
                    body = copy.deepcopy(doc)
                    rid = body.pop("id", None)
                    key = "" if rid is None else str(rid)
                    if not key or key in self._docs:
                        key = self._fresh_key()
                    self._docs[key] = body
            self._publish()

    def listen(self, callback: ChangeCallback) -> Subscription:
        return self._listeners.subscribe(callback)

    def _fresh_key(self) -> str:
        key = uuid.uuid4().hex[:20]
        while key in self._docs:
            key = uuid.uuid4().hex[:20]
        return key

    def _publish(self) -> None:
        # Called with _publish_lock held and _lock released, so listeners may read
        self._listeners.emit(self.snapshot())


class CollectionBackend(ProjectBackend):
    """One session's view of a DocumentCollection."""

    assigns_ids = True

    def __init__(self, collection: DocumentCollection):
        self.collection = collection

    def read_all(self) -> list[Document]:
        return self.collection.snapshot()

    def write_all(self, docs: list[Document]) -> None:
        self.collection.replace_all(docs)

    def insert(self, doc: Document) -> RecordId:
        return self.collection.add(doc)

    def put(self, doc: Document) -> None:
        self.collection.set(str(doc["id"]), doc)

    def remove(self, record_id: RecordId) -> None:
        self.collection.delete(str(record_id))

    def subscribe(self, callback: ChangeCallback) -> Subscription | None:
        return self.collection.listen(callback)


BACKENDS = ("file", "memory")


def open_backend(kind: str, paths: Any, keep_backups: int = DEFAULT_KEEP_COUNT, keep_days: int | None = DEFAULT_KEEP_DAYS) -> ProjectBackend:
    """Build the backend named by the ``projects.backend`` setting."""
    if kind == "file":
        return JsonFileBackend(
            paths.projects_db,
            backup_dir=paths.projects_backups,
            keep_backups=keep_backups,
            keep_days=keep_days,
        )
    if kind == "memory":
        return MemoryBackend()
    raise ValueError(f"Unknown backend: {kind!r}. Options: {', '.join(BACKENDS)}")
