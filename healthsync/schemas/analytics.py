"""Analytics schemas for the patient and doctor dashboards."""

from healthsync.schemas.base import ApiResponse, CamelModel
from healthsync.schemas.gamification import AdherenceResult, LevelProgress


class PatientSummary(CamelModel):
    user_id: str
    xp: int
    level: LevelProgress
    streak: int
    best_streak: int
    adherence: AdherenceResult
    symptom_count: int
    # Severities of the most recent symptom entries, newest first
    severity_trend: list[int]


class DoctorOverview(CamelModel):
    patient_count: int
    average_xp: float
    average_streak: float
    active_streaks: int
    average_adherence: float


class PatientSummaryResponse(ApiResponse):
    summary: PatientSummary


class DoctorOverviewResponse(ApiResponse):
    overview: DoctorOverview
    cached: bool = False
