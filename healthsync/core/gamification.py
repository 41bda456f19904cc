"""Gamification rule tables: level thresholds, streak milestones, multipliers, rewards."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import IntEnum
from types import MappingProxyType


class XPReward(IntEnum):
    """XP granted for each kind of tracked action."""

    MEDICATION_TAKEN = 10
    MEDICATION_ADDED = 15
    SYMPTOM_LOGGED = 5
    PRESCRIPTION_UPLOADED = 15
    PROFILE_COMPLETED = 50
    DAILY_STREAK = 25
    WEEKLY_STREAK = 100
    MONTHLY_STREAK = 500
    ACHIEVEMENT_UNLOCKED = 50
    REPORT_VIEWED = 5
    PERFECT_DAY = 50
    PERFECT_WEEK = 200


@dataclass(frozen=True)
class LevelThreshold:
    """Minimum cumulative XP needed to reach a level."""

    level: int
    xp_required: int


DEFAULT_LEVEL_THRESHOLDS: tuple[LevelThreshold, ...] = tuple(
    LevelThreshold(level, xp)
    for level, xp in (
        (1, 0),
        (2, 100),
        (3, 250),
        (4, 500),
        (5, 1000),
        (6, 1750),
        (7, 2500),
        (8, 3500),
        (9, 5000),
        (10, 7000),
        (11, 10000),
        (12, 15000),
        (13, 20000),
        (14, 30000),
        (15, 50000),
    )
)

DEFAULT_MILESTONE_NAMES: Mapping[int, str] = MappingProxyType(
    {
        7: "Week Warrior",
        14: "Two Week Champion",
        21: "Three Week Hero",
        30: "Monthly Master",
        50: "Dedication Medal",
        100: "Century Champion",
        365: "Year-Long Legend",
    }
)

# (minimum streak days, multiplier), highest tier first
DEFAULT_MULTIPLIER_TIERS: tuple[tuple[int, float], ...] = (
    (30, 2.0),
    (21, 1.75),
    (14, 1.5),
    (7, 1.25),
)

NO_NEXT_MILESTONE = 999


@dataclass(frozen=True)
class GamificationRules:
    """
    Immutable rule set consumed by the streak and XP engines.

    Raises:
        ValueError: If the level table, milestones or multiplier tiers are inconsistent
    """

    level_thresholds: tuple[LevelThreshold, ...] = DEFAULT_LEVEL_THRESHOLDS
    milestone_names: Mapping[int, str] = field(default_factory=lambda: DEFAULT_MILESTONE_NAMES)
    multiplier_tiers: tuple[tuple[int, float], ...] = DEFAULT_MULTIPLIER_TIERS
    no_next_milestone: int = NO_NEXT_MILESTONE

    def __post_init__(self) -> None:
        thresholds = self.level_thresholds
        if not thresholds:
            raise ValueError("Level threshold table must not be empty")
        if thresholds[0].level != 1 or thresholds[0].xp_required != 0:
            raise ValueError("Level threshold table must start at level 1 with 0 XP")

        for previous, current in zip(thresholds, thresholds[1:]):
            if current.level != previous.level + 1:
                raise ValueError(f"Level {current.level} does not follow level {previous.level}")
            if current.xp_required <= previous.xp_required:
                raise ValueError(f"XP required for level {current.level} must increase")

        if any(value <= 0 for value in self.milestone_names):
            raise ValueError("Milestones must be positive streak lengths")

        tiers = [days for days, _ in self.multiplier_tiers]
        if tiers != sorted(tiers, reverse=True):
            raise ValueError("Multiplier tiers must be ordered from highest to lowest")

    @property
    def milestones(self) -> tuple[int, ...]:
        """Milestone streak lengths in ascending order."""
        return tuple(sorted(self.milestone_names))

    @property
    def max_level(self) -> int:
        return self.level_thresholds[-1].level

    def threshold_for(self, level: int) -> LevelThreshold | None:
        """Threshold row for a level, None past the top of the table."""
        if 1 <= level <= self.max_level:
            return self.level_thresholds[level - 1]
        return None


DEFAULT_RULES = GamificationRules()
