"""Streak, adherence and XP endpoints."""

from fastapi import APIRouter, Query
from structlog import get_logger

from healthsync.dependencies import (
    AdherenceServiceDep,
    CurrentDoctor,
    CurrentUser,
    StreakServiceDep,
    UserServiceDep,
    XPServiceDep,
)
from healthsync.schemas.base import ApiResponse
from healthsync.schemas.gamification import (
    AdherenceResponse,
    LevelProgressResponse,
    MilestoneResponse,
    StreakResponse,
    XPAwardRequest,
    XPAwardResponse,
    XPBreakdownResponse,
)
from healthsync.services.xp_service import get_xp_for_next_level

logger = get_logger(__name__)

router = APIRouter(prefix="/gamification", tags=["Gamification"])


@router.post("/streak", response_model=StreakResponse)
async def update_streak(
    current_user: CurrentUser,
    streak_service: StreakServiceDep,
    user_service: UserServiceDep,
) -> StreakResponse:
    """Count today as an active day for the current user."""
    result = await streak_service.update_streak(current_user.uid)
    user_service.invalidate_user_cache(current_user.uid)
    return StreakResponse(**result.model_dump())


@router.delete("/streak", response_model=ApiResponse)
async def reset_streak(
    current_user: CurrentUser,
    streak_service: StreakServiceDep,
    user_service: UserServiceDep,
) -> ApiResponse:
    """Reset the current user's streak; the best streak is kept."""
    await streak_service.reset_streak(current_user.uid)
    user_service.invalidate_user_cache(current_user.uid)
    return ApiResponse()


@router.get("/streak/milestone", response_model=MilestoneResponse)
async def get_streak_milestone(
    current_user: CurrentUser,
    streak_service: StreakServiceDep,
    streak: int | None = Query(None, ge=0, description="Streak length; defaults to your own"),
) -> MilestoneResponse:
    """Milestone standing of a streak length."""
    info = streak_service.milestone(current_user.streak if streak is None else streak)
    return MilestoneResponse(**info.model_dump())


@router.get("/adherence", response_model=AdherenceResponse)
async def get_today_adherence(
    current_user: CurrentUser,
    adherence_service: AdherenceServiceDep,
) -> AdherenceResponse:
    """Share of today's medications already taken."""
    result = await adherence_service.compute_today_adherence(current_user.uid)
    return AdherenceResponse(**result.model_dump())


@router.get("/level", response_model=LevelProgressResponse)
async def get_level_progress(
    current_user: CurrentUser,
    xp_service: XPServiceDep,
) -> LevelProgressResponse:
    """Current level and progress towards the next one."""
    progress = get_xp_for_next_level(current_user.xp, xp_service.rules)
    return LevelProgressResponse(xp=current_user.xp, **progress.model_dump())


@router.get("/xp/breakdown", response_model=XPBreakdownResponse)
async def get_xp_breakdown(
    current_user: CurrentUser,
    xp_service: XPServiceDep,
    days: int = Query(7, le=365, description="Number of trailing days, today included"),
) -> XPBreakdownResponse:
    """XP earned per day over the trailing window."""
    breakdown = await xp_service.get_xp_breakdown(current_user.uid, days)
    return XPBreakdownResponse(days=days, breakdown=breakdown)


@router.post("/users/{uid}/xp", response_model=XPAwardResponse)
async def award_xp(
    uid: str,
    award: XPAwardRequest,
    doctor: CurrentDoctor,
    xp_service: XPServiceDep,
    user_service: UserServiceDep,
) -> XPAwardResponse:
    """
    Grant (or, with negative points, deduct) XP for a patient (doctor only).

    With ``applyStreakMultiplier`` the points are scaled by the patient's
    current streak tier.
    """
    patient = await user_service.get_user(uid)
    streak_days = patient.streak if award.apply_streak_multiplier else 0

    result = await xp_service.award_xp_with_multiplier(uid, award.points, award.reason, streak_days)
    user_service.invalidate_user_cache(uid)
    logger.info("manual_xp_awarded", doctor_id=doctor.uid, user_id=uid, points=result.total_xp)

    return XPAwardResponse(**result.model_dump())
