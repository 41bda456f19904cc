"""In-process document store used for local development and tests."""

import asyncio
import copy
from collections import defaultdict
from typing import Any
from uuid import uuid4

from structlog import get_logger

from healthsync.core.exceptions import NotFoundException
from healthsync.store.base import (
    Document,
    DocumentStore,
    ErrorCallback,
    Mutator,
    SnapshotCallback,
    Unsubscribe,
    split_path,
)

logger = get_logger(__name__)


class InMemoryDocumentStore(DocumentStore):
    """Dict-backed store; transactions are serialised with an asyncio lock."""

    def __init__(self) -> None:
        self._collections: dict[str, dict[str, Document]] = defaultdict(dict)
        self._lock = asyncio.Lock()
        self._listeners: dict[str, list[tuple[SnapshotCallback, ErrorCallback | None]]] = (
            defaultdict(list)
        )
        # Number of committed writes, handy for asserting no-op paths
        self.write_count = 0

    def _snapshot(self, collection: str, doc_id: str) -> Document:
        data = copy.deepcopy(self._collections[collection][doc_id])
        data["id"] = doc_id
        return data

    def _notify(self, collection: str, doc_id: str) -> None:
        targets = (collection, f"{collection}/{doc_id}")
        for path in targets:
            for on_snapshot, on_error in list(self._listeners.get(path, [])):
                self._deliver(path, on_snapshot, on_error)

    def _deliver(
        self, path: str, on_snapshot: SnapshotCallback, on_error: ErrorCallback | None
    ) -> None:
        collection, doc_id = split_path(path)
        if doc_id is None:
            docs = [self._snapshot(collection, key) for key in self._collections[collection]]
        elif doc_id in self._collections[collection]:
            docs = [self._snapshot(collection, doc_id)]
        else:
            docs = []

        try:
            on_snapshot(docs)
        except Exception as e:
            if on_error is None:
                raise
            on_error(e)

    def _write(self, collection: str, doc_id: str, data: Document) -> None:
        stored = copy.deepcopy(data)
        stored.pop("id", None)
        self._collections[collection][doc_id] = stored
        self.write_count += 1
        self._notify(collection, doc_id)

    async def get_document(self, collection: str, doc_id: str) -> Document | None:
        if doc_id not in self._collections[collection]:
            return None
        return self._snapshot(collection, doc_id)

    async def set_document(
        self, collection: str, doc_id: str, data: Document, merge: bool = False
    ) -> None:
        async with self._lock:
            current = self._collections[collection].get(doc_id, {}) if merge else {}
            self._write(collection, doc_id, {**current, **data})

    async def update_fields(self, collection: str, doc_id: str, fields: Document) -> None:
        async with self._lock:
            current = self._collections[collection].get(doc_id)
            if current is None:
                raise NotFoundException(f"Document {collection}/{doc_id} not found")
            self._write(collection, doc_id, {**current, **fields})

    async def add_document(self, collection: str, data: Document) -> str:
        doc_id = uuid4().hex
        async with self._lock:
            self._write(collection, doc_id, data)
        return doc_id

    async def delete_document(self, collection: str, doc_id: str) -> None:
        async with self._lock:
            if self._collections[collection].pop(doc_id, None) is not None:
                self.write_count += 1
                self._notify(collection, doc_id)

    async def query_by_field(
        self,
        collection: str,
        field_name: str,
        value: Any,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
        min_value: Any = None,
    ) -> list[Document]:
        matches = [
            self._snapshot(collection, doc_id)
            for doc_id, data in self._collections[collection].items()
            if data.get(field_name) == value
        ]

        if order_by is not None:
            # Firestore drops documents that lack the ordering field
            matches = [doc for doc in matches if doc.get(order_by) is not None]
            if min_value is not None:
                matches = [doc for doc in matches if doc[order_by] >= min_value]
            matches.sort(key=lambda doc: doc[order_by], reverse=descending)

        if limit is not None:
            matches = matches[:limit]
        return matches

    async def transact(self, collection: str, doc_id: str, mutator: Mutator) -> Any:
        async with self._lock:
            current = await self.get_document(collection, doc_id)
            mutation = mutator(current)
            if mutation.is_empty:
                return mutation.result

            if mutation.updates:
                if current is None:
                    raise NotFoundException(f"Document {collection}/{doc_id} not found")
                merged = {**self._collections[collection][doc_id], **mutation.updates}
                self._write(collection, doc_id, merged)

            for target, data in mutation.appends:
                self._write(target, uuid4().hex, data)

            return mutation.result

    def subscribe(
        self,
        path: str,
        on_snapshot: SnapshotCallback,
        on_error: ErrorCallback | None = None,
    ) -> Unsubscribe:
        split_path(path)
        listener = (on_snapshot, on_error)
        self._listeners[path].append(listener)
        logger.debug("store_subscribed", path=path)

        # Firestore delivers the current state right away
        self._deliver(path, on_snapshot, on_error)

        def unsubscribe() -> None:
            if listener in self._listeners[path]:
                self._listeners[path].remove(listener)

        return unsubscribe

    async def ping(self) -> bool:
        return True
