"""Daily adherence streaks stored on the user document."""

from datetime import UTC, datetime, timedelta, tzinfo

from structlog import get_logger

from healthsync.core.exceptions import NotFoundException
from healthsync.core.gamification import DEFAULT_RULES, GamificationRules
from healthsync.schemas.gamification import MilestoneInfo, StreakResult
from healthsync.store.base import USERS, Document, DocumentStore, Mutation
from healthsync.utils.dates import Clock, local_date, utc_now

logger = get_logger(__name__)


def compute_streak_update(
    streak: int,
    best_streak: int,
    last_active: datetime | None,
    now: datetime,
    tz: tzinfo = UTC,
) -> tuple[StreakResult, bool]:
    """
    Apply one day of activity to a streak.

    Returns:
        The new streak values and whether they must be persisted. Activity
        on a day that already counted changes nothing.
    """
    if last_active is None:
        current = 1
        return StreakResult(current_streak=current, best_streak=max(best_streak, current)), True

    today = local_date(now, tz)
    last_day = local_date(last_active, tz)

    if last_day == today:
        return StreakResult(current_streak=streak, best_streak=best_streak), False

    if last_day == today - timedelta(days=1):
        current = streak + 1
        return (
            StreakResult(
                current_streak=current,
                best_streak=max(best_streak, current),
                streak_continued=True,
            ),
            True,
        )

    return StreakResult(current_streak=1, best_streak=best_streak, streak_broken=True), True


def get_streak_milestone(streak: int, rules: GamificationRules = DEFAULT_RULES) -> MilestoneInfo:
    """
    Milestone standing of a streak length.

    Raises:
        ValueError: If ``streak`` is negative
    """
    if streak < 0:
        raise ValueError("Streak cannot be negative")

    milestones = rules.milestones
    is_milestone = streak in rules.milestone_names

    return MilestoneInfo(
        milestone=max((m for m in milestones if m <= streak), default=0),
        next_milestone=next((m for m in milestones if m > streak), rules.no_next_milestone),
        is_milestone=is_milestone,
        achievement_name=rules.milestone_names[streak] if is_milestone else None,
    )


class StreakService:
    """Service for streak bookkeeping."""

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

    async def update_streak(self, user_id: str) -> StreakResult:
        """
        Count today as an active day for the user.

        Repeated calls on the same day return the stored values and write
        nothing.

        Raises:
            NotFoundException: If the user does not exist
        """
        now = self.clock()

        def apply(account: Document | None) -> Mutation:
            if account is None:
                raise NotFoundException(f"User {user_id} not found")

            result, changed = compute_streak_update(
                streak=account.get("streak") or 0,
                best_streak=account.get("bestStreak") or 0,
                last_active=account.get("lastActive"),
                now=now,
                tz=self.tz,
            )
            if not changed:
                return Mutation(result=result)

            return Mutation(
                result=result,
                updates={
                    "streak": result.current_streak,
                    "bestStreak": result.best_streak,
                    "lastActive": now,
                    "updatedAt": now,
                },
            )

        result: StreakResult = await self.store.transact(USERS, user_id, apply)
        logger.info(
            "streak_updated",
            user_id=user_id,
            current_streak=result.current_streak,
            continued=result.streak_continued,
            broken=result.streak_broken,
        )
        return result

    async def reset_streak(self, user_id: str) -> None:
        """
        Zero the streak and forget the last active day; the best streak is kept.

        Raises:
            NotFoundException: If the user does not exist
        """
        now = self.clock()
        await self.store.update_fields(
            USERS,
            user_id,
            {"streak": 0, "lastActive": None, "updatedAt": now},
        )
        logger.info("streak_reset", user_id=user_id)

    def milestone(self, streak: int) -> MilestoneInfo:
        return get_streak_milestone(streak, self.rules)
