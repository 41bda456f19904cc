"""Streak, adherence and XP result schemas."""

import datetime as dt

from pydantic import Field

from healthsync.schemas.base import ApiResponse, CamelModel


class StreakResult(CamelModel):
    current_streak: int
    best_streak: int
    streak_continued: bool = False
    streak_broken: bool = False


class MilestoneInfo(CamelModel):
    milestone: int
    next_milestone: int
    is_milestone: bool
    achievement_name: str | None = None


class AdherenceResult(CamelModel):
    all_medications_taken: bool
    total_medications: int
    taken_medications: int
    adherence_rate: int


class XPAwardResult(CamelModel):
    new_xp: int = Field(..., alias="newXP")
    new_level: int
    leveled_up: bool
    previous_level: int


class MultipliedXPAwardResult(XPAwardResult):
    base_xp: int = Field(..., alias="baseXP")
    multiplier: float
    total_xp: int = Field(..., alias="totalXP")


class LevelProgress(CamelModel):
    current_level: int
    next_level: int
    xp_needed: int = Field(..., alias="xpNeeded")
    xp_progress: int = Field(..., alias="xpProgress")
    progress_percentage: int


class DailyXPEntry(CamelModel):
    date: dt.date
    xp: int
    transactions: int


class XPAwardRequest(CamelModel):
    """Manual award (or penalty, when negative) granted by a doctor."""

    points: int
    reason: str = Field(..., min_length=1, max_length=200)
    apply_streak_multiplier: bool = False


class StreakResponse(ApiResponse, StreakResult):
    pass


class MilestoneResponse(ApiResponse, MilestoneInfo):
    pass


class AdherenceResponse(ApiResponse, AdherenceResult):
    pass


class LevelProgressResponse(ApiResponse, LevelProgress):
    xp: int


class XPAwardResponse(ApiResponse, MultipliedXPAwardResult):
    pass


class XPBreakdownResponse(ApiResponse):
    days: int
    breakdown: list[DailyXPEntry]
