"""Cloud Firestore backend reached through the Firebase Admin SDK."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import firebase_admin
from firebase_admin import firestore, firestore_async
from google.api_core import exceptions as google_exceptions
from google.cloud.firestore import Query, async_transactional
from google.cloud.firestore_v1.base_query import FieldFilter
from structlog import get_logger

from healthsync.core.exceptions import NotFoundException, PersistenceException
from healthsync.store.base import (
    USERS,
    Document,
    DocumentStore,
    ErrorCallback,
    Mutator,
    SnapshotCallback,
    Unsubscribe,
    split_path,
)

logger = get_logger(__name__)


@asynccontextmanager
async def _translate_errors(operation: str, path: str) -> AsyncIterator[None]:
    """Map Google API failures onto application exceptions."""
    try:
        yield
    except google_exceptions.NotFound as e:
        raise NotFoundException(f"Document {path} not found") from e
    except google_exceptions.GoogleAPICallError as e:
        logger.error("firestore_operation_failed", operation=operation, path=path, error=str(e))
        raise PersistenceException(f"Firestore {operation} failed for {path}") from e


def _to_document(snapshot: Any) -> Document:
    data = snapshot.to_dict() or {}
    data["id"] = snapshot.id
    return data


class FirestoreDocumentStore(DocumentStore):
    """
    Firestore implementation of the document store contract.

    Reads and writes go through the async client. Snapshot listeners are only
    offered by the synchronous client, so a second client is kept for
    ``subscribe``.
    """

    def __init__(self, app: firebase_admin.App):
        """Create clients bound to an initialised Firebase app."""
        self._db = firestore_async.client(app)
        self._sync_db = firestore.client(app)

    async def get_document(self, collection: str, doc_id: str) -> Document | None:
        async with _translate_errors("get", f"{collection}/{doc_id}"):
            snapshot = await self._db.collection(collection).document(doc_id).get()
        if not snapshot.exists:
            return None
        return _to_document(snapshot)

    async def set_document(
        self, collection: str, doc_id: str, data: Document, merge: bool = False
    ) -> None:
        payload = {key: value for key, value in data.items() if key != "id"}
        async with _translate_errors("set", f"{collection}/{doc_id}"):
            await self._db.collection(collection).document(doc_id).set(payload, merge=merge)

    async def update_fields(self, collection: str, doc_id: str, fields: Document) -> None:
        async with _translate_errors("update", f"{collection}/{doc_id}"):
            await self._db.collection(collection).document(doc_id).update(fields)

    async def add_document(self, collection: str, data: Document) -> str:
        async with _translate_errors("add", collection):
            _, ref = await self._db.collection(collection).add(data)
        return ref.id

    async def delete_document(self, collection: str, doc_id: str) -> None:
        async with _translate_errors("delete", f"{collection}/{doc_id}"):
            await self._db.collection(collection).document(doc_id).delete()

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
        query = self._db.collection(collection).where(filter=FieldFilter(field_name, "==", value))
        if order_by is not None:
            direction = Query.DESCENDING if descending else Query.ASCENDING
            if min_value is not None:
                query = query.where(filter=FieldFilter(order_by, ">=", min_value))
            query = query.order_by(order_by, direction=direction)
        if limit is not None:
            query = query.limit(limit)

        async with _translate_errors("query", collection):
            return [_to_document(snapshot) async for snapshot in query.stream()]

    async def transact(self, collection: str, doc_id: str, mutator: Mutator) -> Any:
        ref = self._db.collection(collection).document(doc_id)

        @async_transactional
        async def run(transaction: Any) -> Any:
            snapshot = await ref.get(transaction=transaction)
            current = _to_document(snapshot) if snapshot.exists else None
            mutation = mutator(current)

            if mutation.updates:
                transaction.update(ref, mutation.updates)
            for target, data in mutation.appends:
                transaction.set(self._db.collection(target).document(), data)
            return mutation.result

        async with _translate_errors("transaction", f"{collection}/{doc_id}"):
            return await run(self._db.transaction())

    def subscribe(
        self,
        path: str,
        on_snapshot: SnapshotCallback,
        on_error: ErrorCallback | None = None,
    ) -> Unsubscribe:
        collection, doc_id = split_path(path)
        target = self._sync_db.collection(collection)
        if doc_id is not None:
            target = target.document(doc_id)

        def handle(snapshots: list[Any], changes: Any, read_time: Any) -> None:
            try:
                on_snapshot([_to_document(s) for s in snapshots if s.exists])
            except Exception as e:
                logger.error("firestore_snapshot_handler_failed", path=path, error=str(e))
                if on_error is not None:
                    on_error(e)

        watch = target.on_snapshot(handle)
        logger.info("firestore_subscribed", path=path)
        return watch.unsubscribe

    async def ping(self) -> bool:
        try:
            await self._db.collection(USERS).limit(1).get()
            return True
        except Exception:
            return False
