"""Symptom log service."""

from structlog import get_logger

from healthsync.core.exceptions import NotFoundException
from healthsync.schemas.symptoms import Symptom, SymptomCreate
from healthsync.store.base import SYMPTOMS, DocumentStore
from healthsync.utils.dates import Clock, utc_now

logger = get_logger(__name__)


class SymptomService:
    """Service for a user's symptom log."""

    DEFAULT_LIST_LIMIT = 50

    def __init__(self, store: DocumentStore, clock: Clock = utc_now):
        """Initialize service with its store and clock."""
        self.store = store
        self.clock = clock

    async def list_symptoms(self, user_id: str, limit: int = DEFAULT_LIST_LIMIT) -> list[Symptom]:
        """The user's symptom entries, most recent first."""
        documents = await self.store.query_by_field(
            SYMPTOMS,
            "userId",
            user_id,
            order_by="date",
            descending=True,
            limit=limit,
        )
        return [Symptom.model_validate(doc) for doc in documents]

    async def log_symptom(self, user_id: str, symptom_data: SymptomCreate) -> Symptom:
        """Record a symptom; entries without a date are logged now."""
        document = {
            **symptom_data.to_document(),
            "userId": user_id,
            "date": symptom_data.date or self.clock(),
        }
        symptom_id = await self.store.add_document(SYMPTOMS, document)
        logger.info(
            "symptom_logged",
            user_id=user_id,
            symptom_id=symptom_id,
            severity=symptom_data.severity,
        )

        return Symptom.model_validate({**document, "id": symptom_id})

    async def delete_symptom(self, user_id: str, symptom_id: str) -> None:
        """
        Delete a symptom entry.

        Raises:
            NotFoundException: If the entry does not exist or belongs to another user
        """
        document = await self.store.get_document(SYMPTOMS, symptom_id)
        if document is None or document.get("userId") != user_id:
            raise NotFoundException(f"Symptom {symptom_id} not found")

        await self.store.delete_document(SYMPTOMS, symptom_id)
        logger.info("symptom_deleted", user_id=user_id, symptom_id=symptom_id)
