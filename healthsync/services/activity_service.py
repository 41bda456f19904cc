"""
Patient activity that earns XP.

Each entry point performs the record change first and then settles the
rewards. Taking a medication is the only activity that counts towards the
daily streak.
"""

from datetime import UTC, tzinfo

from structlog import get_logger

from healthsync.core.gamification import DEFAULT_RULES, GamificationRules, XPReward
from healthsync.schemas.activity import (
    MedicationCreatedResponse,
    MedicationTakenResponse,
    RewardSummary,
    SymptomLoggedResponse,
    XPGrant,
)
from healthsync.schemas.gamification import XPAwardResult
from healthsync.schemas.medications import MedicationCreate
from healthsync.schemas.symptoms import SymptomCreate
from healthsync.services.adherence_service import AdherenceService
from healthsync.services.medication_service import MedicationService
from healthsync.services.streak_service import StreakService, get_streak_milestone
from healthsync.services.symptom_service import SymptomService
from healthsync.services.xp_service import XPService
from healthsync.store.base import DocumentStore
from healthsync.utils.dates import Clock, is_today, utc_now

logger = get_logger(__name__)


class ActivityService:
    """Records patient activity and grants the matching rewards."""

    def __init__(
        self,
        store: DocumentStore,
        rules: GamificationRules = DEFAULT_RULES,
        clock: Clock = utc_now,
        tz: tzinfo = UTC,
    ):
        self.rules = rules
        self.clock = clock
        self.tz = tz
        self.medications = MedicationService(store, clock=clock)
        self.symptoms = SymptomService(store, clock=clock)
        self.streaks = StreakService(store, rules=rules, clock=clock, tz=tz)
        self.adherence = AdherenceService(store, clock=clock, tz=tz)
        self.xp = XPService(store, rules=rules, clock=clock, tz=tz)

    @staticmethod
    def _track(summary: RewardSummary, reason: str, points: int, award: XPAwardResult) -> None:
        summary.grants.append(XPGrant(reason=reason, points=points))
        summary.xp = award.new_xp
        summary.level = award.new_level
        summary.leveled_up = summary.leveled_up or award.leveled_up

    async def _grant(self, summary: RewardSummary, user_id: str, reason: str, points: int) -> None:
        award = await self.xp.award_xp(user_id, int(points), reason)
        self._track(summary, reason, points, award)

    async def record_medication_taken(
        self, user_id: str, medication_id: str
    ) -> MedicationTakenResponse:
        """
        Mark a dose as taken and settle streak, XP and achievements.

        A second dose of the same medication on the same day is recorded
        but earns nothing.

        Raises:
            NotFoundException: If the medication or the user does not exist
        """
        current = await self.medications.get_medication(user_id, medication_id)
        if current.last_taken and is_today(current.last_taken, self.clock(), self.tz):
            medication = await self.medications.mark_taken(user_id, medication_id)
            return MedicationTakenResponse(
                medication=medication, already_taken=True, rewards=RewardSummary()
            )

        before = await self.adherence.compute_today_adherence(user_id)
        medication = await self.medications.mark_taken(user_id, medication_id)
        streak = await self.streaks.update_streak(user_id)
        after = await self.adherence.compute_today_adherence(user_id)

        summary = RewardSummary()
        reason = "Medication taken"
        award = await self.xp.award_xp_with_multiplier(
            user_id, int(XPReward.MEDICATION_TAKEN), reason, streak.current_streak
        )
        self._track(summary, reason, award.total_xp, award)

        if streak.streak_continued:
            await self._grant(summary, user_id, "Daily streak", XPReward.DAILY_STREAK)

        milestone = get_streak_milestone(streak.current_streak, self.rules)
        if streak.streak_continued and milestone.is_milestone:
            await self._grant(
                summary,
                user_id,
                f"Achievement unlocked: {milestone.achievement_name}",
                XPReward.ACHIEVEMENT_UNLOCKED,
            )
            logger.info(
                "achievement_unlocked",
                user_id=user_id,
                streak=streak.current_streak,
                achievement=milestone.achievement_name,
            )

        if after.all_medications_taken and not before.all_medications_taken:
            await self._grant(summary, user_id, "Perfect day", XPReward.PERFECT_DAY)

        logger.info(
            "medication_taken_rewarded",
            user_id=user_id,
            medication_id=medication_id,
            points=summary.total_points,
        )
        return MedicationTakenResponse(
            medication=medication,
            streak=streak,
            milestone=milestone,
            adherence=after,
            rewards=summary,
        )

    async def record_medication_added(
        self, user_id: str, medication_data: MedicationCreate
    ) -> MedicationCreatedResponse:
        """Create a medication and grant the setup reward."""
        medication = await self.medications.create_medication(user_id, medication_data)
        summary = RewardSummary()
        await self._grant(summary, user_id, "Medication added", XPReward.MEDICATION_ADDED)
        return MedicationCreatedResponse(medication=medication, rewards=summary)

    async def record_symptom_logged(
        self, user_id: str, symptom_data: SymptomCreate
    ) -> SymptomLoggedResponse:
        """Log a symptom and grant the logging reward."""
        symptom = await self.symptoms.log_symptom(user_id, symptom_data)
        summary = RewardSummary()
        await self._grant(summary, user_id, "Symptom logged", XPReward.SYMPTOM_LOGGED)
        return SymptomLoggedResponse(symptom=symptom, rewards=summary)
