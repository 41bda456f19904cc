"""FastAPI dependencies."""

from datetime import tzinfo
from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from healthsync.config import settings
from healthsync.core.exceptions import (
    ForbiddenException,
    NotFoundException,
    UnauthorizedException,
)
from healthsync.core.firebase import verify_firebase_token
from healthsync.core.gamification import DEFAULT_RULES, GamificationRules
from healthsync.core.redis_client import CacheManager, get_redis_client
from healthsync.core.store_client import get_document_store
from healthsync.schemas.users import UserAccount
from healthsync.services.activity_service import ActivityService
from healthsync.services.adherence_service import AdherenceService
from healthsync.services.analytics_service import AnalyticsService
from healthsync.services.medication_service import MedicationService
from healthsync.services.streak_service import StreakService
from healthsync.services.symptom_service import SymptomService
from healthsync.services.user_service import UserService
from healthsync.services.xp_service import XPService
from healthsync.store.base import DocumentStore
from healthsync.utils.dates import Clock, utc_now

# Security
security = HTTPBearer(auto_error=False)


def get_store() -> DocumentStore:
    return get_document_store()


def get_cache_manager() -> CacheManager:
    return CacheManager(get_redis_client())


def get_clock() -> Clock:
    return utc_now


def get_rules() -> GamificationRules:
    return DEFAULT_RULES


def get_timezone() -> tzinfo:
    return settings.tzinfo


StoreDep = Annotated[DocumentStore, Depends(get_store)]
CacheManagerDep = Annotated[CacheManager, Depends(get_cache_manager)]
ClockDep = Annotated[Clock, Depends(get_clock)]
RulesDep = Annotated[GamificationRules, Depends(get_rules)]
TimezoneDep = Annotated[tzinfo, Depends(get_timezone)]


async def get_current_user_claims(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> dict:
    """
    Verify the Firebase ID token sent as a bearer token.

    Returns:
        Token claims with ``uid``, ``email`` and ``role``

    Raises:
        UnauthorizedException: If the header is missing or the token is invalid
    """
    if credentials is None:
        raise UnauthorizedException("Missing Authorization header")

    try:
        return await verify_firebase_token(credentials.credentials)
    except ValueError:
        raise UnauthorizedException("Invalid or expired token")


CurrentClaims = Annotated[dict, Depends(get_current_user_claims)]


def get_user_service(
    store: StoreDep, cache_manager: CacheManagerDep, clock: ClockDep
) -> UserService:
    return UserService(store, cache_manager, clock=clock)


def get_medication_service(store: StoreDep, clock: ClockDep) -> MedicationService:
    return MedicationService(store, clock=clock)


def get_symptom_service(store: StoreDep, clock: ClockDep) -> SymptomService:
    return SymptomService(store, clock=clock)


def get_streak_service(
    store: StoreDep, rules: RulesDep, clock: ClockDep, tz: TimezoneDep
) -> StreakService:
    return StreakService(store, rules=rules, clock=clock, tz=tz)


def get_adherence_service(store: StoreDep, clock: ClockDep, tz: TimezoneDep) -> AdherenceService:
    return AdherenceService(store, clock=clock, tz=tz)


def get_xp_service(store: StoreDep, rules: RulesDep, clock: ClockDep, tz: TimezoneDep) -> XPService:
    return XPService(store, rules=rules, clock=clock, tz=tz)


def get_activity_service(
    store: StoreDep, rules: RulesDep, clock: ClockDep, tz: TimezoneDep
) -> ActivityService:
    return ActivityService(store, rules=rules, clock=clock, tz=tz)


def get_analytics_service(
    store: StoreDep,
    cache_manager: CacheManagerDep,
    rules: RulesDep,
    clock: ClockDep,
    tz: TimezoneDep,
) -> AnalyticsService:
    return AnalyticsService(store, cache_manager, rules=rules, clock=clock, tz=tz)


UserServiceDep = Annotated[UserService, Depends(get_user_service)]
MedicationServiceDep = Annotated[MedicationService, Depends(get_medication_service)]
SymptomServiceDep = Annotated[SymptomService, Depends(get_symptom_service)]
StreakServiceDep = Annotated[StreakService, Depends(get_streak_service)]
AdherenceServiceDep = Annotated[AdherenceService, Depends(get_adherence_service)]
XPServiceDep = Annotated[XPService, Depends(get_xp_service)]
ActivityServiceDep = Annotated[ActivityService, Depends(get_activity_service)]
AnalyticsServiceDep = Annotated[AnalyticsService, Depends(get_analytics_service)]


async def get_current_user(claims: CurrentClaims, user_service: UserServiceDep) -> UserAccount:
    """
    Account of the authenticated user.

    Raises:
        UnauthorizedException: If the token is valid but no account exists yet
    """
    try:
        return await user_service.get_user(claims["uid"])
    except NotFoundException:
        raise UnauthorizedException("User not found")


CurrentUser = Annotated[UserAccount, Depends(get_current_user)]


async def require_doctor(current_user: CurrentUser) -> UserAccount:
    """
    Dependency to ensure current user has the doctor role.

    Raises:
        ForbiddenException: If user is not a doctor
    """
    if current_user.role != "doctor":
        raise ForbiddenException("Doctor access required")
    return current_user


CurrentDoctor = Annotated[UserAccount, Depends(require_doctor)]
