"""Today's medication adherence."""

from datetime import UTC, datetime, tzinfo

from healthsync.schemas.gamification import AdherenceResult
from healthsync.store.base import MEDICATIONS, DocumentStore
from healthsync.utils.dates import Clock, day_bounds, ensure_aware, utc_now
from healthsync.utils.rounding import round_half_up

# Weekly medications are not due every day
DAILY_FREQUENCIES = ("daily", "asNeeded")


def summarize_adherence(taken: int, total: int) -> AdherenceResult:
    """
    Build the adherence summary.

    With nothing due the rate is 100, yet the day never counts as "all taken".
    """
    rate = round_half_up(taken / total * 100) if total else 100
    return AdherenceResult(
        all_medications_taken=taken == total and total > 0,
        total_medications=total,
        taken_medications=taken,
        adherence_rate=rate,
    )


class AdherenceService:
    """Read-only adherence calculations over medication documents."""

    def __init__(self, store: DocumentStore, clock: Clock = utc_now, tz: tzinfo = UTC):
        """Initialize service with its store, clock and day timezone."""
        self.store = store
        self.clock = clock
        self.tz = tz

    async def compute_today_adherence(self, user_id: str) -> AdherenceResult:
        """Share of the user's daily and as-needed medications taken today."""
        medications = await self.store.query_by_field(MEDICATIONS, "userId", user_id)
        due = [med for med in medications if med.get("frequency") in DAILY_FREQUENCIES]

        start, end = day_bounds(self.clock(), self.tz)
        taken = 0
        for med in due:
            last_taken = med.get("lastTaken")
            if isinstance(last_taken, datetime) and start <= ensure_aware(last_taken) < end:
                taken += 1

        return summarize_adherence(taken, len(due))
