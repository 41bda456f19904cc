"""
XP and leveling.

Levels come from the threshold table in ``GamificationRules``. Awards are
applied to ``users/{uid}.xp`` and recorded in the append-only
``xp_history`` ledger inside one store transaction, so concurrent awards
cannot overwrite each other and the ledger never disagrees with the account.

Negative awards are allowed and act as penalties.
"""

from datetime import UTC, datetime, time, tzinfo

from structlog import get_logger

from healthsync.core.exceptions import NotFoundException, ValidationException
from healthsync.core.gamification import DEFAULT_RULES, GamificationRules
from healthsync.schemas.gamification import (
    DailyXPEntry,
    LevelProgress,
    MultipliedXPAwardResult,
    XPAwardResult,
)
from healthsync.store.base import USERS, XP_HISTORY, Document, DocumentStore, Mutation
from healthsync.utils.dates import Clock, get_last_n_days, local_date, utc_now
from healthsync.utils.rounding import round_half_up

logger = get_logger(__name__)


def calculate_level(xp: int, rules: GamificationRules = DEFAULT_RULES) -> int:
    """Level of the highest threshold not above ``xp``; level 1 below every threshold."""
    for threshold in reversed(rules.level_thresholds):
        if xp >= threshold.xp_required:
            return threshold.level
    return 1


def get_xp_for_next_level(current_xp: int, rules: GamificationRules = DEFAULT_RULES) -> LevelProgress:
    """
    Progress from the current level's threshold towards the next one.

    At the top of the table progress is reported as 100% with nothing left to earn.
    """
    current_level = calculate_level(current_xp, rules)
    next_threshold = rules.threshold_for(current_level + 1)

    if next_threshold is None:
        return LevelProgress(
            current_level=current_level,
            next_level=current_level,
            xp_needed=0,
            xp_progress=0,
            progress_percentage=100,
        )

    # the table is contiguous from level 1, so every computed level has a row
    current_threshold = rules.level_thresholds[current_level - 1]

    xp_progress = current_xp - current_threshold.xp_required
    level_span = next_threshold.xp_required - current_threshold.xp_required
    percentage = round_half_up(xp_progress / level_span * 100)

    return LevelProgress(
        current_level=current_level,
        next_level=next_threshold.level,
        xp_needed=next_threshold.xp_required - current_xp,
        xp_progress=xp_progress,
        # penalties can push XP below the level 1 threshold
        progress_percentage=max(percentage, 0),
    )


def get_streak_multiplier(streak_days: int, rules: GamificationRules = DEFAULT_RULES) -> float:
    """Multiplier of the highest tier whose lower bound ``streak_days`` reaches."""
    for min_days, multiplier in rules.multiplier_tiers:
        if streak_days >= min_days:
            return multiplier
    return 1.0


class XPService:
    """Service for XP awards and history."""

    def __init__(
        self,
        store: DocumentStore,
        rules: GamificationRules = DEFAULT_RULES,
        clock: Clock = utc_now,
        tz: tzinfo = UTC,
    ):
        """Initialize service with its store, rule set, clock and day timezone."""
        self.store = store
        self.rules = rules
        self.clock = clock
        self.tz = tz

    async def award_xp(self, user_id: str, points: int, reason: str) -> XPAwardResult:
        """
        Add ``points`` to a user's XP and append the ledger entry.

        Raises:
            NotFoundException: If the user does not exist
        """
        now = self.clock()

        def apply(account: Document | None) -> Mutation:
            if account is None:
                raise NotFoundException(f"User {user_id} not found")

            previous_xp = account.get("xp") or 0
            new_xp = previous_xp + points
            previous_level = calculate_level(previous_xp, self.rules)
            new_level = calculate_level(new_xp, self.rules)

            transaction = {
                "userId": user_id,
                "points": points,
                "reason": reason,
                "previousXP": previous_xp,
                "newXP": new_xp,
                "previousLevel": previous_level,
                "newLevel": new_level,
                "timestamp": now,
            }
            result = XPAwardResult(
                new_xp=new_xp,
                new_level=new_level,
                leveled_up=new_level > previous_level,
                previous_level=previous_level,
            )
            return Mutation(
                result=result,
                updates={"xp": new_xp, "updatedAt": now},
                appends=[(XP_HISTORY, transaction)],
            )

        result: XPAwardResult = await self.store.transact(USERS, user_id, apply)

        logger.info(
            "xp_awarded",
            user_id=user_id,
            points=points,
            reason=reason,
            new_xp=result.new_xp,
        )
        if result.leveled_up:
            logger.info(
                "level_up",
                user_id=user_id,
                previous_level=result.previous_level,
                new_level=result.new_level,
            )

        return result

    async def award_xp_with_multiplier(
        self, user_id: str, base_points: int, reason: str, streak_days: int
    ) -> MultipliedXPAwardResult:
        """Award ``base_points`` scaled by the streak multiplier, rounded to whole XP."""
        multiplier = get_streak_multiplier(streak_days, self.rules)
        total_xp = round_half_up(base_points * multiplier)
        result = await self.award_xp(user_id, total_xp, reason)

        return MultipliedXPAwardResult(
            **result.model_dump(),
            base_xp=base_points,
            multiplier=multiplier,
            total_xp=total_xp,
        )

    async def get_xp_breakdown(self, user_id: str, days: int = 7) -> list[DailyXPEntry]:
        """
        XP earned per calendar day over the trailing ``days`` days, today included.

        Every day of the window is present, oldest first; days without
        transactions have zero values.

        Raises:
            ValidationException: If ``days`` is less than 1
        """
        if days < 1:
            raise ValidationException("days must be at least 1")

        window = get_last_n_days(days, local_date(self.clock(), self.tz))
        window_start = datetime.combine(window[0], time.min, tzinfo=self.tz)
        totals = {day: [0, 0] for day in window}

        entries = await self.store.query_by_field(
            XP_HISTORY, "userId", user_id, order_by="timestamp", min_value=window_start
        )
        for entry in entries:
            bucket = totals.get(local_date(entry["timestamp"], self.tz))
            if bucket is None:
                continue
            bucket[0] += entry.get("points") or 0
            bucket[1] += 1

        return [
            DailyXPEntry(date=day, xp=xp, transactions=count)
            for day, (xp, count) in totals.items()
        ]
