"""Dashboard analytics built from the stored user, medication and symptom records."""

from datetime import UTC, datetime, timedelta, tzinfo

from structlog import get_logger

from healthsync.config import settings
from healthsync.core.exceptions import NotFoundException
from healthsync.core.gamification import DEFAULT_RULES, GamificationRules
from healthsync.core.redis_client import CacheManager
from healthsync.schemas.analytics import DoctorOverview, PatientSummary
from healthsync.services.adherence_service import AdherenceService
from healthsync.services.xp_service import get_xp_for_next_level
from healthsync.store.base import MEDICATIONS, SYMPTOMS, USERS, DocumentStore, Unsubscribe
from healthsync.utils.dates import Clock, local_date, utc_now

logger = get_logger(__name__)

OVERVIEW_CACHE_KEY = "analytics:overview"
SEVERITY_TREND_LENGTH = 5


def _average(values: list[int]) -> float:
    return round(sum(values) / len(values), 1) if values else 0.0


class AnalyticsService:
    """Service for patient summaries and the doctor overview."""

    def __init__(
        self,
        store: DocumentStore,
        cache_manager: CacheManager | None = None,
        rules: GamificationRules = DEFAULT_RULES,
        clock: Clock = utc_now,
        tz: tzinfo = UTC,
    ):
        """Initialize service with store, optional cache manager, rules, clock and timezone."""
        self.store = store
        self.cache = cache_manager
        self.rules = rules
        self.clock = clock
        self.tz = tz
        self.adherence = AdherenceService(store, clock=clock, tz=tz)

    def _has_active_streak(self, account: dict) -> bool:
        """A streak is active while its last day is today or yesterday."""
        last_active = account.get("lastActive")
        if not account.get("streak") or not isinstance(last_active, datetime):
            return False
        today = local_date(self.clock(), self.tz)
        return local_date(last_active, self.tz) >= today - timedelta(days=1)

    async def patient_summary(self, user_id: str) -> PatientSummary:
        """
        Progress summary shown on a patient's dashboard.

        Raises:
            NotFoundException: If the user does not exist
        """
        account = await self.store.get_document(USERS, user_id)
        if account is None:
            raise NotFoundException(f"User {user_id} not found")

        xp = account.get("xp") or 0
        symptoms = await self.store.query_by_field(
            SYMPTOMS, "userId", user_id, order_by="date", descending=True
        )
        trend = [
            entry["severity"]
            for entry in symptoms
            if isinstance(entry.get("severity"), int)
        ][:SEVERITY_TREND_LENGTH]

        return PatientSummary(
            user_id=user_id,
            xp=xp,
            level=get_xp_for_next_level(xp, self.rules),
            streak=account.get("streak") or 0,
            best_streak=account.get("bestStreak") or 0,
            adherence=await self.adherence.compute_today_adherence(user_id),
            symptom_count=len(symptoms),
            severity_trend=trend,
        )

    async def doctor_overview(self) -> tuple[DoctorOverview, bool]:
        """
        Aggregate figures across all patients.

        Returns:
            The overview and whether it was served from the cache
        """
        if self.cache:
            cached = self.cache.get_json(OVERVIEW_CACHE_KEY)
            if cached:
                return DoctorOverview.model_validate(cached), True

        patients = await self.store.query_by_field(USERS, "role", "patient")
        adherence_rates = [
            (await self.adherence.compute_today_adherence(patient["id"])).adherence_rate
            for patient in patients
        ]

        overview = DoctorOverview(
            patient_count=len(patients),
            average_xp=_average([patient.get("xp") or 0 for patient in patients]),
            average_streak=_average([patient.get("streak") or 0 for patient in patients]),
            active_streaks=sum(1 for patient in patients if self._has_active_streak(patient)),
            average_adherence=_average(adherence_rates),
        )

        if self.cache:
            self.cache.set_json(
                OVERVIEW_CACHE_KEY,
                overview.model_dump(by_alias=True),
                ttl=settings.analytics_cache_ttl,
            )
        logger.info("doctor_overview_computed", patient_count=overview.patient_count)

        return overview, False


class AnalyticsCacheWatcher:
    """
    Drops the cached doctor overview whenever users or medications change.

    Subscriptions are opened by ``start`` and closed by ``stop``; both are
    called from the application lifespan.
    """

    WATCHED_COLLECTIONS = (USERS, MEDICATIONS)

    def __init__(self, store: DocumentStore, cache_manager: CacheManager):
        self.store = store
        self.cache = cache_manager
        self._unsubscribers: list[Unsubscribe] = []

    @property
    def running(self) -> bool:
        return bool(self._unsubscribers)

    def _invalidate(self, _documents: list[dict]) -> None:
        self.cache.delete(OVERVIEW_CACHE_KEY)

    def _on_error(self, error: Exception) -> None:
        logger.warning("analytics_watch_failed", error=str(error))

    def start(self) -> None:
        if self.running:
            return
        for collection in self.WATCHED_COLLECTIONS:
            self._unsubscribers.append(
                self.store.subscribe(collection, self._invalidate, self._on_error)
            )
        logger.info("analytics_watch_started", collections=list(self.WATCHED_COLLECTIONS))

    def stop(self) -> None:
        while self._unsubscribers:
            self._unsubscribers.pop()()
        logger.info("analytics_watch_stopped")
