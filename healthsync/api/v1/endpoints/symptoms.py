"""Symptom endpoints."""

from fastapi import APIRouter, Query, status

from healthsync.dependencies import (
    ActivityServiceDep,
    CurrentUser,
    SymptomServiceDep,
    UserServiceDep,
)
from healthsync.schemas.activity import SymptomLoggedResponse
from healthsync.schemas.base import ApiResponse
from healthsync.schemas.symptoms import SymptomCreate, SymptomListResponse

router = APIRouter(prefix="/symptoms", tags=["Symptoms"])


@router.get("", response_model=SymptomListResponse)
async def list_symptoms(
    current_user: CurrentUser,
    symptom_service: SymptomServiceDep,
    limit: int = Query(50, ge=1, le=100),
) -> SymptomListResponse:
    """List the current user's symptom log, most recent first."""
    symptoms = await symptom_service.list_symptoms(current_user.uid, limit=limit)
    return SymptomListResponse(symptoms=symptoms)


@router.post("", response_model=SymptomLoggedResponse, status_code=status.HTTP_201_CREATED)
async def log_symptom(
    current_user: CurrentUser,
    activity_service: ActivityServiceDep,
    user_service: UserServiceDep,
    symptom_data: SymptomCreate,
) -> SymptomLoggedResponse:
    """Log a symptom for the current user."""
    response = await activity_service.record_symptom_logged(current_user.uid, symptom_data)
    user_service.invalidate_user_cache(current_user.uid)
    return response


@router.delete("/{symptom_id}", response_model=ApiResponse)
async def delete_symptom(
    symptom_id: str,
    current_user: CurrentUser,
    symptom_service: SymptomServiceDep,
) -> ApiResponse:
    await symptom_service.delete_symptom(current_user.uid, symptom_id)
    return ApiResponse()
