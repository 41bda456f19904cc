"""Medication service for business logic."""

from structlog import get_logger

from healthsync.core.exceptions import NotFoundException
from healthsync.schemas.medications import Medication, MedicationCreate, MedicationUpdate
from healthsync.store.base import MEDICATIONS, Document, DocumentStore
from healthsync.utils.dates import Clock, utc_now

logger = get_logger(__name__)


class MedicationService:
    """Service for a user's medication list."""

    DEFAULT_LIST_LIMIT = 50

    def __init__(self, store: DocumentStore, clock: Clock = utc_now):
        """Initialize service with its store and clock."""
        self.store = store
        self.clock = clock

    async def _get_owned(self, user_id: str, medication_id: str) -> Document:
        """Medication document owned by ``user_id``; other users' records count as missing."""
        document = await self.store.get_document(MEDICATIONS, medication_id)
        if document is None or document.get("userId") != user_id:
            raise NotFoundException(f"Medication {medication_id} not found")
        return document

    async def list_medications(
        self, user_id: str, limit: int = DEFAULT_LIST_LIMIT
    ) -> list[Medication]:
        """The user's medications, newest first."""
        documents = await self.store.query_by_field(
            MEDICATIONS,
            "userId",
            user_id,
            order_by="createdAt",
            descending=True,
            limit=limit,
        )
        return [Medication.model_validate(doc) for doc in documents]

    async def get_medication(self, user_id: str, medication_id: str) -> Medication:
        return Medication.model_validate(await self._get_owned(user_id, medication_id))

    async def create_medication(self, user_id: str, medication_data: MedicationCreate) -> Medication:
        """Add a medication; new medications start untaken."""
        now = self.clock()
        document = {
            **medication_data.to_document(),
            "userId": user_id,
            "taken": False,
            "lastTaken": None,
            "createdAt": now,
            "updatedAt": now,
        }
        medication_id = await self.store.add_document(MEDICATIONS, document)
        logger.info("medication_created", user_id=user_id, medication_id=medication_id)

        return Medication.model_validate({**document, "id": medication_id})

    async def update_medication(
        self, user_id: str, medication_id: str, medication_data: MedicationUpdate
    ) -> Medication:
        """
        Update the sent fields of a medication.

        Raises:
            NotFoundException: If the medication does not exist or belongs to another user
        """
        document = await self._get_owned(user_id, medication_id)

        update_data = medication_data.to_document(exclude_unset=True)
        if not update_data:
            return Medication.model_validate(document)

        update_data["updatedAt"] = self.clock()
        await self.store.update_fields(MEDICATIONS, medication_id, update_data)
        logger.info(
            "medication_updated",
            user_id=user_id,
            medication_id=medication_id,
            fields=sorted(update_data),
        )

        return Medication.model_validate({**document, **update_data})

    async def delete_medication(self, user_id: str, medication_id: str) -> None:
        """
        Delete a medication.

        Raises:
            NotFoundException: If the medication does not exist or belongs to another user
        """
        await self._get_owned(user_id, medication_id)
        await self.store.delete_document(MEDICATIONS, medication_id)
        logger.info("medication_deleted", user_id=user_id, medication_id=medication_id)

    async def mark_taken(self, user_id: str, medication_id: str) -> Medication:
        """
        Record that today's dose was taken.

        Raises:
            NotFoundException: If the medication does not exist or belongs to another user
        """
        document = await self._get_owned(user_id, medication_id)

        now = self.clock()
        update_data = {"taken": True, "lastTaken": now, "updatedAt": now}
        await self.store.update_fields(MEDICATIONS, medication_id, update_data)
        logger.info("medication_taken", user_id=user_id, medication_id=medication_id)

        return Medication.model_validate({**document, **update_data})
