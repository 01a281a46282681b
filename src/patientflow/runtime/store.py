"""
In-memory entity store.

One ``EntityStore`` holds the records of a single entity type (patients,
documents, physician groups, ...) keyed by ``id`` in insertion order. It
stands in for a remote persistence API: CRUD, predicate queries, sorting,
counting and pagination.

``AsyncEntityStore`` exposes the same operations as coroutines for callers
written against an async API. They never suspend, so calls complete in the
order they are issued.

Not-found is never an error: ``find_by_id`` and ``update`` return ``None``,
``delete`` returns ``False``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator, Mapping
from datetime import datetime, timezone
from typing import Any

from patientflow.core.errors import DuplicateRecordError, SeedDataError
from patientflow.runtime.logging import get_store_logger, log_event
from patientflow.runtime.query import (
    Page,
    Record,
    SortField,
    filter_records,
    paginate,
    sort_records,
)

logger = get_store_logger()

DEFAULT_ID_COUNTER_START = 1000
DEFAULT_PAGE_SIZE = 10

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(moment: datetime) -> str:
    """Render a datetime as ``YYYY-MM-DDTHH:MM:SS.mmmZ`` in UTC."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return (
        moment.astimezone(timezone.utc)
        .isoformat(timespec="milliseconds")
        .replace("+00:00", "Z")
    )


class EntityStore:
    """
    Keyed, ordered collection of records for one entity type.

    Records are plain dicts. Every record carries ``id``, ``created_date``
    and ``updated_date`` once it has gone through ``create``; seed records
    are stored as given. Records returned to callers are shallow copies.
    """

    def __init__(
        self,
        name: str,
        initial: Iterable[Mapping[str, Any]] = (),
        *,
        id_counter_start: int = DEFAULT_ID_COUNTER_START,
        default_page_size: int = DEFAULT_PAGE_SIZE,
        clock: Clock | None = None,
    ):
        """
        Initialize the store and load its seed records.

        Args:
            name: Entity name; its lowercased form prefixes generated ids
            initial: Seed records, each with an ``id``
            id_counter_start: First number used for generated ids
            default_page_size: Page size when ``find_with_pagination`` gets no limit
            clock: Source of the current time for timestamps

        Raises:
            SeedDataError: If a seed record has no id
        """
        self.name = name
        self.default_page_size = default_page_size
        self._records: dict[str, Record] = {}
        self._next_id = id_counter_start
        self._clock = clock or utc_now

        for index, item in enumerate(initial):
            record_id = item.get("id")
            if not record_id:
                raise SeedDataError(f"{name} seed record {index} has no id")
            self._records[record_id] = dict(item)

        if self._records:
            log_event(
                logger,
                logging.DEBUG,
                f"Seeded {name} store",
                entity=name,
                operation="seed",
                count=len(self._records),
            )

    def __repr__(self) -> str:
        return f"EntityStore(name={self.name!r}, records={len(self._records)})"

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, record_id: object) -> bool:
        return record_id in self._records

    def __iter__(self) -> Iterator[Record]:
        return iter(self.find_all())

    @property
    def next_id(self) -> int:
        """The counter value the next generated id will use."""
        return self._next_id

    def _now(self) -> str:
        return format_timestamp(self._clock())

    def _generate_id(self) -> str:
        record_id = f"{self.name.lower()}-{self._next_id}"
        self._next_id += 1
        return record_id

    def _resolve_id(self, data: Mapping[str, Any]) -> str:
        return data.get("id") or self._generate_id()

    def _materialize(self, record_id: str, data: Mapping[str, Any]) -> Record:
        now = self._now()
        record: Record = {"id": record_id, **data}
        record["id"] = record_id
        record["created_date"] = data.get("created_date") or now
        record["updated_date"] = data.get("updated_date") or now
        return record

    def _put(self, record: Record) -> Record:
        record_id = record["id"]
        operation = "overwrite" if record_id in self._records else "create"
        verb = "Overwrote" if operation == "overwrite" else "Created"
        self._records[record_id] = record
        log_event(
            logger,
            logging.DEBUG,
            f"{verb} {self.name} record",
            entity=self.name,
            operation=operation,
            record_id=record_id,
        )
        return dict(record)

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def create(self, data: Mapping[str, Any]) -> Record:
        """
        Create a record, overwriting any existing record with the same id.

        A missing or empty ``id`` is replaced by ``<name>-<counter>``.
        Caller-supplied ``created_date``/``updated_date`` are kept; otherwise
        both are set to the current time.

        Args:
            data: Record fields

        Returns:
            The stored record
        """
        return self._put(self._materialize(self._resolve_id(data), data))

    def upsert(self, data: Mapping[str, Any]) -> Record:
        """Create or replace a record. Same semantics as ``create``."""
        return self.create(data)

    def insert(self, data: Mapping[str, Any]) -> Record:
        """
        Create a record, refusing to replace an existing one.

        The id is resolved first, so a generated id that collides with an
        existing record is refused too. A refused insert leaves the records
        untouched, but a generated id stays consumed and the next call
        gets a fresh one.

        Raises:
            DuplicateRecordError: If a record with the resolved id exists
        """
        record_id = self._resolve_id(data)
        if record_id in self._records:
            raise DuplicateRecordError(self.name, record_id)
        return self._put(self._materialize(record_id, data))

    def update(self, record_id: str, updates: Mapping[str, Any]) -> Record | None:
        """
        Merge ``updates`` into an existing record.

        Fields not mentioned are kept and every field in ``updates`` wins,
        ``id`` included. The record stays stored under ``record_id``.
        ``updated_date`` is always refreshed.

        Args:
            record_id: Record ID
            updates: Fields to overwrite

        Returns:
            Updated record, or None if not found
        """
        existing = self._records.get(record_id)
        if existing is None:
            return None

        updated: Record = {**existing, **updates, "updated_date": self._now()}
        self._records[record_id] = updated
        log_event(
            logger,
            logging.DEBUG,
            f"Updated {self.name} record",
            entity=self.name,
            operation="update",
            record_id=record_id,
            fields=sorted(updates),
        )
        return dict(updated)

    def delete(self, record_id: str) -> bool:
        """
        Delete a record by ID.

        Returns:
            True if deleted, False if not found
        """
        if record_id not in self._records:
            return False
        del self._records[record_id]
        log_event(
            logger,
            logging.DEBUG,
            f"Deleted {self.name} record",
            entity=self.name,
            operation="delete",
            record_id=record_id,
        )
        return True

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def find_by_id(self, record_id: str) -> Record | None:
        """Return the record with this id, or None."""
        record = self._records.get(record_id)
        return dict(record) if record is not None else None

    def exists(self, record_id: str) -> bool:
        """Check if a record exists."""
        return record_id in self._records

    def find_all(self, query: Mapping[str, Any] | None = None) -> list[Record]:
        """
        Return the records matching ``query`` in insertion order.

        Args:
            query: Field name to expected value; strings match by
                case-insensitive containment, other values by strict equality.
                Empty or None returns everything.
        """
        return filter_records(self._records.values(), query)

    def count(self, query: Mapping[str, Any] | None = None) -> int:
        """Number of records ``find_all(query)`` would return."""
        return len(self.find_all(query))

    def list(self, sort: str | SortField | None = None) -> list[Record]:
        """
        Return every record, optionally sorted.

        Args:
            sort: Field name, prefixed with ``-`` for descending order
        """
        return sort_records(self.find_all(), sort)

    def find_with_pagination(
        self,
        query: Mapping[str, Any] | None = None,
        page: int = 1,
        limit: int | None = None,
        sort: str | SortField | None = None,
    ) -> Page:
        """
        Return one page of ``find_all(query)``, optionally sorted first.

        Args:
            query: Predicate, as for ``find_all``
            page: Page number (1-indexed)
            limit: Records per page (defaults to the store's page size)
            sort: Field name, prefixed with ``-`` for descending order

        Returns:
            Page with ``data`` and ``pagination`` (page, limit, total, total_pages)

        Raises:
            InvalidQueryError: If page or limit is below 1
        """
        return paginate(
            sort_records(self.find_all(query), sort),
            page,
            self.default_page_size if limit is None else limit,
        )


class AsyncEntityStore:
    """
    Coroutine facade over an ``EntityStore``.

    Each method runs the synchronous operation to completion without
    awaiting anything.
    """

    def __init__(self, store: EntityStore):
        self.store = store

    @classmethod
    def create_store(
        cls,
        name: str,
        initial: Iterable[Mapping[str, Any]] = (),
        **kwargs: Any,
    ) -> AsyncEntityStore:
        """Build a new store and wrap it."""
        return cls(EntityStore(name, initial, **kwargs))

    @property
    def name(self) -> str:
        return self.store.name

    def __repr__(self) -> str:
        return f"AsyncEntityStore(name={self.name!r}, records={len(self.store)})"

    def __len__(self) -> int:
        return len(self.store)

    async def create(self, data: Mapping[str, Any]) -> Record:
        return self.store.create(data)

    async def upsert(self, data: Mapping[str, Any]) -> Record:
        return self.store.upsert(data)

    async def insert(self, data: Mapping[str, Any]) -> Record:
        return self.store.insert(data)

    async def find_by_id(self, record_id: str) -> Record | None:
        return self.store.find_by_id(record_id)

    async def exists(self, record_id: str) -> bool:
        return self.store.exists(record_id)

    async def find_all(self, query: Mapping[str, Any] | None = None) -> list[Record]:
        return self.store.find_all(query)

    async def update(self, record_id: str, updates: Mapping[str, Any]) -> Record | None:
        return self.store.update(record_id, updates)

    async def delete(self, record_id: str) -> bool:
        return self.store.delete(record_id)

    async def count(self, query: Mapping[str, Any] | None = None) -> int:
        return self.store.count(query)

    async def list(self, sort: str | SortField | None = None) -> list[Record]:
        return self.store.list(sort)

    async def find_with_pagination(
        self,
        query: Mapping[str, Any] | None = None,
        page: int = 1,
        limit: int | None = None,
        sort: str | SortField | None = None,
    ) -> Page:
        return self.store.find_with_pagination(query, page, limit, sort)
