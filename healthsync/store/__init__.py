"""Document store backends."""

from healthsync.store.base import (
    MEDICATIONS,
    SYMPTOMS,
    USERS,
    XP_HISTORY,
    Document,
    DocumentStore,
    Mutation,
)
from healthsync.store.memory import InMemoryDocumentStore

__all__ = [
    "MEDICATIONS",
    "SYMPTOMS",
    "USERS",
    "XP_HISTORY",
    "Document",
    "DocumentStore",
    "InMemoryDocumentStore",
    "Mutation",
]
