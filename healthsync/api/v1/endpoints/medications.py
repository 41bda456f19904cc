"""Medication endpoints."""

from fastapi import APIRouter, Query, status

from healthsync.dependencies import (
    ActivityServiceDep,
    CurrentUser,
    MedicationServiceDep,
    UserServiceDep,
)
from healthsync.schemas.activity import MedicationCreatedResponse, MedicationTakenResponse
from healthsync.schemas.base import ApiResponse
from healthsync.schemas.medications import (
    MedicationCreate,
    MedicationListResponse,
    MedicationResponse,
    MedicationUpdate,
)

router = APIRouter(prefix="/medications", tags=["Medications"])


@router.get("", response_model=MedicationListResponse)
async def list_medications(
    current_user: CurrentUser,
    medication_service: MedicationServiceDep,
    limit: int = Query(50, ge=1, le=100),
) -> MedicationListResponse:
    """List the current user's medications, newest first."""
    meds = await medication_service.list_medications(current_user.uid, limit=limit)
    return MedicationListResponse(meds=meds)


@router.post(
    "",
    response_model=MedicationCreatedResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_medication(
    current_user: CurrentUser,
    activity_service: ActivityServiceDep,
    user_service: UserServiceDep,
    medication_data: MedicationCreate,
) -> MedicationCreatedResponse:
    """Add a medication to the current user's list."""
    response = await activity_service.record_medication_added(current_user.uid, medication_data)
    user_service.invalidate_user_cache(current_user.uid)
    return response


@router.patch("/{medication_id}", response_model=MedicationResponse)
async def update_medication(
    medication_id: str,
    medication_data: MedicationUpdate,
    current_user: CurrentUser,
    medication_service: MedicationServiceDep,
) -> MedicationResponse:
    """Update a medication owned by the current user."""
    medication = await medication_service.update_medication(
        current_user.uid, medication_id, medication_data
    )
    return MedicationResponse(medication=medication)


@router.delete("/{medication_id}", response_model=ApiResponse)
async def delete_medication(
    medication_id: str,
    current_user: CurrentUser,
    medication_service: MedicationServiceDep,
) -> ApiResponse:
    """Delete a medication owned by the current user."""
    await medication_service.delete_medication(current_user.uid, medication_id)
    return ApiResponse()


@router.post("/{medication_id}/take", response_model=MedicationTakenResponse)
async def take_medication(
    medication_id: str,
    current_user: CurrentUser,
    activity_service: ActivityServiceDep,
    user_service: UserServiceDep,
) -> MedicationTakenResponse:
    """Record today's dose and collect streak and XP rewards."""
    response = await activity_service.record_medication_taken(current_user.uid, medication_id)
    user_service.invalidate_user_cache(current_user.uid)
    return response
