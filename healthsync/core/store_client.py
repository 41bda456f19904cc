"""Process-wide document store selection."""

from structlog import get_logger

from healthsync.config import settings
from healthsync.core.firebase import initialize_firebase
from healthsync.store.base import DocumentStore
from healthsync.store.memory import InMemoryDocumentStore

logger = get_logger(__name__)

# Global store instance
_store: DocumentStore | None = None


def get_document_store() -> DocumentStore:
    """
    Get or create the configured document store.

    ``STORE_BACKEND=memory`` keeps everything in process, anything else
    talks to Firestore through the Firebase Admin SDK.
    """
    global _store

    if _store is None:
        if settings.store_backend == "memory":
            _store = InMemoryDocumentStore()
        else:
            from healthsync.store.firestore import FirestoreDocumentStore

            app = initialize_firebase(
                settings.firebase_credentials_path, settings.firebase_config_json
            )
            _store = FirestoreDocumentStore(app)
        logger.info("document_store_ready", backend=settings.store_backend)

    return _store


async def check_store_connection() -> bool:
    """Check if the document store answers."""
    try:
        return await get_document_store().ping()
    except Exception:
        return False


def close_document_store() -> None:
    """Drop the store instance."""
    global _store
    _store = None
