"""Tests for daily streak tracking and milestones."""

from datetime import UTC, datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from conftest import FROZEN_NOW, PATIENT_UID, FrozenClock, seed_user
from healthsync.core.exceptions import NotFoundException
from healthsync.core.gamification import GamificationRules
from healthsync.services.streak_service import (
    StreakService,
    compute_streak_update,
    get_streak_milestone,
)
from healthsync.store import USERS

YESTERDAY = FROZEN_NOW - timedelta(days=1)


def test_first_activity_starts_streak():
    """Test first activity starts streak."""
    result, changed = compute_streak_update(0, 0, None, FROZEN_NOW)

    assert changed is True
    assert result.current_streak == 1
    assert result.best_streak == 1
    assert result.streak_continued is False
    assert result.streak_broken is False


def test_first_activity_keeps_higher_best_streak():
    """Test first activity keeps higher best streak."""
    result, _ = compute_streak_update(0, 12, None, FROZEN_NOW)

    assert result.current_streak == 1
    assert result.best_streak == 12


def test_same_day_activity_changes_nothing():
    """Test same day activity changes nothing."""
    earlier_today = FROZEN_NOW.replace(hour=0, minute=5)
    result, changed = compute_streak_update(4, 6, earlier_today, FROZEN_NOW)

    assert changed is False
    assert result.current_streak == 4
    assert result.best_streak == 6
    assert result.streak_continued is False
    assert result.streak_broken is False


def test_activity_after_yesterday_continues_streak():
    """Test activity after yesterday continues streak."""
    result, changed = compute_streak_update(3, 5, YESTERDAY, FROZEN_NOW)

    assert changed is True
    assert result.current_streak == 4
    assert result.best_streak == 5
    assert result.streak_continued is True
    assert result.streak_broken is False


def test_continued_streak_raises_best_streak():
    """Test continued streak raises best streak."""
    result, _ = compute_streak_update(5, 5, YESTERDAY, FROZEN_NOW)

    assert result.current_streak == 6
    assert result.best_streak == 6


def test_gap_breaks_streak():
    """Test gap breaks streak."""
    three_days_ago = FROZEN_NOW - timedelta(days=3)
    result, changed = compute_streak_update(10, 10, three_days_ago, FROZEN_NOW)

    assert changed is True
    assert result.current_streak == 1
    assert result.best_streak == 10
    assert result.streak_broken is True
    assert result.streak_continued is False


def test_yesterday_late_evening_counts_as_yesterday():
    """Test yesterday late evening counts as yesterday."""
    late_yesterday = datetime(2026, 3, 9, 23, 59, tzinfo=UTC)
    just_after_midnight = datetime(2026, 3, 10, 0, 1, tzinfo=UTC)

    result, _ = compute_streak_update(2, 2, late_yesterday, just_after_midnight)

    assert result.current_streak == 3
    assert result.streak_continued is True


def test_day_boundaries_follow_timezone():
    """Test day boundaries follow timezone."""
    # 23:30 UTC on the 9th is already the 10th in Berlin
    tz = ZoneInfo("Europe/Berlin")
    last_active = datetime(2026, 3, 9, 23, 30, tzinfo=UTC)
    now = datetime(2026, 3, 10, 8, 0, tzinfo=UTC)

    _, changed_utc = compute_streak_update(2, 2, last_active, now, UTC)
    _, changed_berlin = compute_streak_update(2, 2, last_active, now, tz)

    assert changed_utc is True
    assert changed_berlin is False


def test_naive_timestamps_are_treated_as_utc():
    """Test naive timestamps are treated as UTC."""
    naive_yesterday = datetime(2026, 3, 9, 12, 0)
    result, _ = compute_streak_update(1, 1, naive_yesterday, FROZEN_NOW)

    assert result.current_streak == 2


@pytest.mark.asyncio
async def test_update_streak_persists_new_values(store, clock):
    """Test update streak persists new values."""
    await seed_user(store, PATIENT_UID, streak=3, bestStreak=5, lastActive=YESTERDAY)
    service = StreakService(store, clock=clock)

    result = await service.update_streak(PATIENT_UID)

    assert result.current_streak == 4
    account = await store.get_document(USERS, PATIENT_UID)
    assert account["streak"] == 4
    assert account["bestStreak"] == 5
    assert account["lastActive"] == FROZEN_NOW
    assert account["updatedAt"] == FROZEN_NOW


@pytest.mark.asyncio
async def test_update_streak_twice_same_day_writes_once(store, clock):
    """Test update streak twice same day writes once."""
    await seed_user(store, PATIENT_UID, streak=3, bestStreak=5, lastActive=YESTERDAY)
    service = StreakService(store, clock=clock)

    first = await service.update_streak(PATIENT_UID)
    writes_after_first = store.write_count

    clock.advance(hours=2)
    second = await service.update_streak(PATIENT_UID)

    assert store.write_count == writes_after_first
    assert second.current_streak == first.current_streak == 4
    assert second.best_streak == first.best_streak
    assert second.streak_continued is False
    account = await store.get_document(USERS, PATIENT_UID)
    assert account["lastActive"] == FROZEN_NOW


@pytest.mark.asyncio
async def test_best_streak_never_decreases(store, clock):
    """Test best streak never decreases."""
    await seed_user(store, PATIENT_UID)
    service = StreakService(store, clock=clock)

    best_seen = 0
    # three days on, one day off, two days on
    for day_offset in (0, 1, 2, 4, 5):
        clock.now = FROZEN_NOW + timedelta(days=day_offset)
        result = await service.update_streak(PATIENT_UID)
        assert result.best_streak >= best_seen
        best_seen = result.best_streak

    account = await store.get_document(USERS, PATIENT_UID)
    assert account["streak"] == 2
    assert account["bestStreak"] == 3


@pytest.mark.asyncio
async def test_reset_then_update_restarts_at_one(store, clock):
    """Test reset then update restarts at one."""
    await seed_user(store, PATIENT_UID, streak=9, bestStreak=9, lastActive=YESTERDAY)
    service = StreakService(store, clock=clock)

    await service.reset_streak(PATIENT_UID)
    account = await store.get_document(USERS, PATIENT_UID)
    assert account["streak"] == 0
    assert account["lastActive"] is None
    assert account["bestStreak"] == 9

    result = await service.update_streak(PATIENT_UID)
    assert result.current_streak == 1
    assert result.best_streak == 9


@pytest.mark.asyncio
async def test_update_streak_unknown_user(store, clock):
    """Test update streak unknown user."""
    service = StreakService(store, clock=clock)

    with pytest.raises(NotFoundException):
        await service.update_streak("nobody")


@pytest.mark.asyncio
async def test_reset_streak_unknown_user(store, clock):
    """Test reset streak unknown user."""
    service = StreakService(store, clock=clock)

    with pytest.raises(NotFoundException):
        await service.reset_streak("nobody")


def test_milestone_reached():
    """Test milestone reached."""
    info = get_streak_milestone(14)

    assert info.milestone == 14
    assert info.next_milestone == 21
    assert info.is_milestone is True
    assert info.achievement_name == "Two Week Champion"


def test_milestone_between_tiers():
    """Test milestone between tiers."""
    info = get_streak_milestone(25)

    assert info.milestone == 21
    assert info.next_milestone == 30
    assert info.is_milestone is False
    assert info.achievement_name is None


def test_milestone_before_first_tier():
    """Test milestone before first tier."""
    info = get_streak_milestone(0)

    assert info.milestone == 0
    assert info.next_milestone == 7
    assert info.is_milestone is False


def test_milestone_past_last_tier():
    """Test milestone past last tier."""
    info = get_streak_milestone(400)

    assert info.milestone == 365
    assert info.next_milestone == 999
    assert info.is_milestone is False


def test_milestone_rejects_negative_streak():
    """Test milestone rejects negative streak."""
    with pytest.raises(ValueError):
        get_streak_milestone(-1)


def test_milestone_uses_custom_rules():
    """Test milestone uses custom rules."""
    rules = GamificationRules(milestone_names={3: "Hat Trick"})

    info = get_streak_milestone(3, rules)

    assert info.is_milestone is True
    assert info.achievement_name == "Hat Trick"
    assert info.next_milestone == rules.no_next_milestone


def test_service_milestone_uses_its_rules(store):
    """Test service milestone uses its rules."""
    rules = GamificationRules(milestone_names={2: "Double"})
    service = StreakService(store, rules=rules, clock=FrozenClock())

    assert service.milestone(2).achievement_name == "Double"
