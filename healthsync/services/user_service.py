"""User service for business logic."""

from structlog import get_logger

from healthsync.config import settings
from healthsync.core.exceptions import NotFoundException
from healthsync.core.redis_client import CacheManager
from healthsync.schemas.users import UserAccount, UserCreate, UserProfileUpdate
from healthsync.store.base import USERS, DocumentStore
from healthsync.utils.dates import Clock, utc_now

logger = get_logger(__name__)


class UserService:
    """Service for user operations."""

    # Cache TTL in seconds (30 minutes for user profiles)
    USER_CACHE_TTL = settings.user_cache_ttl

    def __init__(
        self,
        store: DocumentStore,
        cache_manager: CacheManager | None = None,
        clock: Clock = utc_now,
    ):
        """Initialize service with store and optional cache manager."""
        self.store = store
        self.cache = cache_manager
        self.clock = clock

    @staticmethod
    def _get_user_cache_key(user_id: str) -> str:
        """Generate cache key for user."""
        return f"user:{user_id}"

    def invalidate_user_cache(self, user_id: str) -> None:
        """Drop the cached account; call after XP or streak changes."""
        if self.cache:
            self.cache.delete(self._get_user_cache_key(user_id))

    async def create_or_update_user(
        self, user_id: str, user_data: UserCreate
    ) -> tuple[UserAccount, bool]:
        """
        Upsert the profile of a signed-in user.

        New accounts start with zero XP and no streak; existing accounts only
        have the submitted profile fields replaced.

        Returns:
            The stored account and whether it was created
        """
        now = self.clock()
        existing = await self.store.get_document(USERS, user_id)
        profile = user_data.to_document(exclude_unset=True)

        if existing is None:
            document = {
                "uid": user_id,
                "role": user_data.role,
                **profile,
                "xp": 0,
                "streak": 0,
                "bestStreak": 0,
                "lastActive": None,
                "healthScore": 0,
                "createdAt": now,
                "updatedAt": now,
            }
            await self.store.set_document(USERS, user_id, document)
            logger.info("user_created", user_id=user_id, role=document["role"])
        else:
            await self.store.set_document(
                USERS, user_id, {**profile, "updatedAt": now}, merge=True
            )
            logger.info("user_updated", user_id=user_id, fields=sorted(profile))

        self.invalidate_user_cache(user_id)
        user = await self.get_user(user_id)
        return user, existing is None

    async def get_user(self, user_id: str) -> UserAccount:
        """
        Get user by uid with caching.

        Raises:
            NotFoundException: If the user does not exist
        """
        # Try cache first
        if self.cache:
            cached_user = self.cache.get_json(self._get_user_cache_key(user_id))
            if cached_user:
                return UserAccount.model_validate(cached_user)

        document = await self.store.get_document(USERS, user_id)
        if document is None:
            raise NotFoundException(f"User {user_id} not found")

        user = UserAccount.model_validate({**document, "uid": user_id})

        # Cache the result
        if self.cache:
            self.cache.set_json(
                self._get_user_cache_key(user_id),
                user.model_dump(mode="json", by_alias=True),
                ttl=self.USER_CACHE_TTL,
            )

        return user

    async def update_user(self, user_id: str, user_data: UserProfileUpdate) -> UserAccount:
        """
        Update user profile.

        Raises:
            NotFoundException: If the user does not exist
        """
        update_data = user_data.to_document(exclude_unset=True)
        if not update_data:
            return await self.get_user(user_id)

        update_data["updatedAt"] = self.clock()
        await self.store.update_fields(USERS, user_id, update_data)

        # Invalidate cache
        self.invalidate_user_cache(user_id)
        logger.info("user_updated", user_id=user_id, fields=sorted(update_data))

        return await self.get_user(user_id)

    async def list_users_by_role(self, role: str) -> list[UserAccount]:
        """All users holding ``role``."""
        documents = await self.store.query_by_field(USERS, "role", role)
        return [UserAccount.model_validate({"uid": doc["id"], **doc}) for doc in documents]
