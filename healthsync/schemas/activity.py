"""Outcome schemas for patient activity that earns XP."""

from healthsync.schemas.base import ApiResponse, CamelModel
from healthsync.schemas.gamification import AdherenceResult, MilestoneInfo, StreakResult
from healthsync.schemas.medications import Medication
from healthsync.schemas.symptoms import Symptom


class XPGrant(CamelModel):
    reason: str
    points: int


class RewardSummary(CamelModel):
    """XP granted for one activity, in the order it was awarded."""

    grants: list[XPGrant] = []
    xp: int | None = None
    level: int | None = None
    leveled_up: bool = False

    @property
    def total_points(self) -> int:
        return sum(grant.points for grant in self.grants)


class MedicationTakenResponse(ApiResponse):
    medication: Medication
    already_taken: bool = False
    streak: StreakResult | None = None
    milestone: MilestoneInfo | None = None
    adherence: AdherenceResult | None = None
    rewards: RewardSummary


class MedicationCreatedResponse(ApiResponse):
    medication: Medication
    rewards: RewardSummary


class SymptomLoggedResponse(ApiResponse):
    symptom: Symptom
    rewards: RewardSummary
