"""Document store contract shared by the Firestore and in-memory backends."""

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

Document = dict[str, Any]
SnapshotCallback = Callable[[list[Document]], None]
ErrorCallback = Callable[[Exception], None]
Unsubscribe = Callable[[], None]

# Collections
USERS = "users"
MEDICATIONS = "medications"
SYMPTOMS = "symptoms"
XP_HISTORY = "xp_history"


@dataclass
class Mutation:
    """
    Outcome of a transactional read-modify-write.

    ``updates`` is merged into the target document, each ``appends`` entry
    ``(collection, data)`` becomes a new document, and ``result`` is handed
    back to the caller. An empty mutation writes nothing.
    """

    result: Any = None
    updates: Document = field(default_factory=dict)
    appends: list[tuple[str, Document]] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.updates and not self.appends


Mutator = Callable[[Document | None], Mutation]


class DocumentStore(ABC):
    """
    Narrow read/write contract over a document database.

    Returned documents always carry their id under the ``"id"`` key.
    Backends translate their own failures into ``PersistenceException`` and
    missing targets of ``update_fields`` into ``NotFoundException``.
    """

    @abstractmethod
    async def get_document(self, collection: str, doc_id: str) -> Document | None:
        """Fetch one document, None when it does not exist."""

    @abstractmethod
    async def set_document(
        self, collection: str, doc_id: str, data: Document, merge: bool = False
    ) -> None:
        """Create or overwrite a document (merge keeps unspecified fields)."""

    @abstractmethod
    async def update_fields(self, collection: str, doc_id: str, fields: Document) -> None:
        """Update fields of an existing document."""

    @abstractmethod
    async def add_document(self, collection: str, data: Document) -> str:
        """Insert a document under a generated id and return the id."""

    @abstractmethod
    async def delete_document(self, collection: str, doc_id: str) -> None:
        """Delete a document; deleting a missing document is not an error."""

    @abstractmethod
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
        """
        Documents whose ``field_name`` equals ``value``.

        ``min_value`` keeps only documents whose ``order_by`` field is at least
        that value, and requires ``order_by``.
        """

    @abstractmethod
    async def transact(self, collection: str, doc_id: str, mutator: Mutator) -> Any:
        """
        Atomically read a document, apply ``mutator`` and write its mutation.

        The mutator may run more than once when the backend retries a
        contended transaction, so it must be free of side effects. Exceptions
        raised by the mutator abort the transaction and propagate.

        Returns:
            The mutation's ``result``
        """

    @abstractmethod
    def subscribe(
        self,
        path: str,
        on_snapshot: SnapshotCallback,
        on_error: ErrorCallback | None = None,
    ) -> Unsubscribe:
        """
        Listen for changes to ``"collection"`` or ``"collection/doc_id"``.

        Every callback receives the full current state, not a delta.
        """

    @abstractmethod
    async def ping(self) -> bool:
        """Whether the backend is reachable."""


def split_path(path: str) -> tuple[str, str | None]:
    """Split ``"collection"`` or ``"collection/doc_id"`` into its parts."""
    parts = path.strip("/").split("/")
    if len(parts) == 1 and parts[0]:
        return parts[0], None
    if len(parts) == 2 and all(parts):
        return parts[0], parts[1]
    raise ValueError(f"Unsupported document path: {path!r}")
