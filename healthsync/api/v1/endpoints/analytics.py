"""Dashboard analytics endpoints."""

from fastapi import APIRouter

from healthsync.dependencies import AnalyticsServiceDep, CurrentDoctor, CurrentUser
from healthsync.schemas.analytics import DoctorOverviewResponse, PatientSummaryResponse

router = APIRouter(prefix="/analytics", tags=["Analytics"])


@router.get("/me", response_model=PatientSummaryResponse)
async def get_my_summary(
    current_user: CurrentUser,
    analytics_service: AnalyticsServiceDep,
) -> PatientSummaryResponse:
    """Progress summary for the current user's dashboard."""
    summary = await analytics_service.patient_summary(current_user.uid)
    return PatientSummaryResponse(summary=summary)


@router.get("/overview", response_model=DoctorOverviewResponse)
async def get_overview(
    doctor: CurrentDoctor,
    analytics_service: AnalyticsServiceDep,
) -> DoctorOverviewResponse:
    """Aggregate figures across all patients (doctor only)."""
    overview, cached = await analytics_service.doctor_overview()
    return DoctorOverviewResponse(overview=overview, cached=cached)
