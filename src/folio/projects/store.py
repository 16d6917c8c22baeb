"""
RecordStore: the single source of truth for the project collection.

The in-memory collection is only replaced after the backend accepted the
write, so a failed write leaves the store exactly as it was before the call.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Callable, Iterator
from typing import Any

from folio.core.errors import BootstrapUnavailable, Outcome, StorageUnavailable
from folio.core.events import Listeners, Subscription
from folio.projects.backends import Document, ProjectBackend
from folio.projects.bootstrap import BootstrapSource
from folio.projects.records import ProjectRecord, RecordId

logger = logging.getLogger(__name__)

Records = tuple[ProjectRecord, ...]


def _to_docs(records: Records) -> list[Document]:
    return [r.to_dict() for r in records]


def _blank_doc(data: dict[str, Any]) -> Document:
    """Normalize *data* to a full document without an id."""
    doc = ProjectRecord(id=0).merged(data).to_dict()
    del doc["id"]
    return doc


class RecordStore:
    """Ordered project collection over a pluggable backend."""

    def __init__(self, backend: ProjectBackend, bootstrap: BootstrapSource | None = None):
        self.backend = backend
        self.bootstrap = bootstrap
        self._records: Records = ()
        self._listeners = Listeners()
        self._backend_subscription: Subscription | None = None

    # -- reading ---------------------------------------------------------

    def list(self) -> Records:
        return self._records

    def __iter__(self) -> Iterator[ProjectRecord]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, record_id: RecordId) -> bool:
        return self.get_by_id(record_id) is not None

    def get_by_id(self, record_id: RecordId) -> ProjectRecord | None:
        for record in self._records:
            if record.id == record_id:
                return record
        return None

    def list_categories(self) -> list[str]:
        """Sorted unique category tags across the collection."""
        tags: set[str] = set()
        for record in self._records:
            tags.update(record.category)
        return sorted(tags)

    def stats(self) -> dict[str, Any]:
        per_category = Counter(tag for record in self._records for tag in record.category)
        return {
            "total": len(self._records),
            "categories": dict(sorted(per_category.items())),
            "category_count": len(per_category),
            "uncategorized": sum(1 for r in self._records if not r.category),
        }

    # -- loading ---------------------------------------------------------

    def load(self) -> Outcome:
        """Populate the collection from the backend, seeding it when empty.

        Never raises. A failure leaves an empty collection and is returned as
        a failed Outcome (storage_unavailable or bootstrap_unavailable).
        """
        self._listen_to_backend()

        try:
            docs = self.backend.read_all()
        except (StorageUnavailable, OSError) as e:
            logger.warning("Could not read project store: %s", e)
            self._replace(())
            return Outcome.failure(e if isinstance(e, StorageUnavailable) else StorageUnavailable(str(e)))

        if docs:
            try:
                records = self._from_docs(docs)
            except ValueError as e:
                logger.warning("Project store holds malformed data: %s", e)
                self._replace(())
                return Outcome.failure(StorageUnavailable(f"Malformed project data: {e}"))
            self._replace(records)
            return Outcome.success(self._records)

        if self.bootstrap is None:
            self._replace(())
            return Outcome.success(self._records, message="Project store is empty")

        try:
            seed = self.bootstrap.fetch()
        except BootstrapUnavailable as e:
            logger.warning("Seed data unavailable: %s", e)
            self._replace(())
            return Outcome.failure(e)

        try:
            seed_records = self._from_docs(seed)
        except ValueError as e:
            logger.warning("Seed data is malformed: %s", e)
            self._replace(())
            return Outcome.failure(BootstrapUnavailable(f"Malformed seed data: {e}"))

        try:
            self.backend.write_all(_to_docs(seed_records))
            if self.backend.assigns_ids:
                records = self._from_docs(self.backend.read_all())
            else:
                records = seed_records
        except (StorageUnavailable, OSError, ValueError) as e:
            # Keep the seed in memory; it will be written with the next change
            logger.warning("Could not persist seed data: %s", e)
            self._replace(seed_records)
            return Outcome.failure(StorageUnavailable(str(e)))

        logger.info("Seeded project store with %d projects", len(records))
        self._replace(records)
        return Outcome.success(self._records, message=f"Seeded {len(records)} projects")

    def _from_docs(self, docs: list[Document]) -> Records:
        """Build records, giving fresh ids to documents without a unique one.

        Raises:
            ValueError: A document does not have the shape of a project.
        """
        records: list[ProjectRecord] = []
        seen: set[RecordId] = set()
        pending: list[Document] = []
        for doc in docs:
            if not isinstance(doc, dict):
                raise ValueError(f"Project document must be an object, got {type(doc).__name__}")
            rid = doc.get("id")
            if rid is None or rid in seen:
                pending.append(doc)
                continue
            seen.add(rid)
            records.append(ProjectRecord.from_dict(doc))
        for doc in pending:
            rid = self._next_id(records)
            logger.warning("Project %r had no unique id; assigned %s", doc.get("title", ""), rid)
            records.append(ProjectRecord.from_dict(doc, record_id=rid))
        return tuple(records)

    # -- writing ---------------------------------------------------------

    @staticmethod
    def _next_id(records: Any) -> int:
        ids = [r.id for r in records if isinstance(r.id, int) and not isinstance(r.id, bool)]
        return max(ids) + 1 if ids else 1

    def _persist(self, write: Callable[..., Any], *args: Any) -> Any:
        try:
            return write(*args)
        except (StorageUnavailable, OSError, ValueError) as e:
            logger.error("Project store write failed: %s", e)
            if isinstance(e, StorageUnavailable):
                raise
            raise StorageUnavailable(str(e)) from e

    def create(self, data: dict[str, Any]) -> ProjectRecord:
        """Add a project and return it with its assigned id.

        Raises:
            StorageUnavailable: The write failed; the collection is unchanged.
        """
        doc = _blank_doc(data)
        if self.backend.assigns_ids:
            rid = self._persist(self.backend.insert, doc)
            record = ProjectRecord.from_dict(doc, record_id=rid)
            # A push from the backend may already have delivered it
            if self.get_by_id(rid) is None:
                self._replace((*self._records, record))
            return record

        record = ProjectRecord.from_dict(doc, record_id=self._next_id(self._records))
        records = (*self._records, record)
        self._persist(self.backend.write_all, _to_docs(records))
        self._replace(records)
        return record

    def update(self, record_id: RecordId, patch: dict[str, Any]) -> ProjectRecord | None:
        """Replace the fields in *patch* on an existing project.

        Returns the updated record, or None (and writes nothing) when the id
        does not exist.

        Raises:
            StorageUnavailable: The write failed; the collection is unchanged.
        """
        current = self.get_by_id(record_id)
        if current is None:
            logger.debug("update: no project with id %r", record_id)
            return None

        updated = current.merged(patch)
        records = tuple(updated if r.id == record_id else r for r in self._records)
        if self.backend.assigns_ids:
            self._persist(self.backend.put, updated.to_dict())
        else:
            self._persist(self.backend.write_all, _to_docs(records))
        self._replace(tuple(updated if r.id == record_id else r for r in self._records))
        return updated

    def delete(self, record_id: RecordId) -> bool:
        """Remove a project. Returns False (and writes nothing) if absent.

        Raises:
            StorageUnavailable: The write failed; the collection is unchanged.
        """
        if self.get_by_id(record_id) is None:
            logger.debug("delete: no project with id %r", record_id)
            return False

        records = tuple(r for r in self._records if r.id != record_id)
        if self.backend.assigns_ids:
            self._persist(self.backend.remove, record_id)
        else:
            self._persist(self.backend.write_all, _to_docs(records))
        self._replace(tuple(r for r in self._records if r.id != record_id))
        return True

    def clear_all(self) -> None:
        """Remove every project.

        Raises:
            StorageUnavailable: The write failed; the collection is unchanged.
        """
        self._persist(self.backend.write_all, [])
        self._replace(())

    # -- notifications ---------------------------------------------------

    def subscribe(self, callback: Callable[[Records], None]) -> Subscription:
        """Call *callback* with the full collection after every change."""
        return self._listeners.subscribe(callback)

    def close(self) -> None:
        if self._backend_subscription is not None:
            self._backend_subscription.cancel()
            self._backend_subscription = None

    def _listen_to_backend(self) -> None:
        if self._backend_subscription is None:
            self._backend_subscription = self.backend.subscribe(self._on_backend_change)

    def _on_backend_change(self, docs: list[Document]) -> None:
        try:
            records = tuple(ProjectRecord.from_dict(doc) for doc in docs)
        except ValueError as e:
            logger.warning("Ignoring malformed pushed change: %s", e)
            return
        self._replace(records)

    def _replace(self, records: Records) -> None:
        if records == self._records:
            return
        self._records = records
        self._listeners.emit(records)
