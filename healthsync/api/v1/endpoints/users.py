"""User endpoints."""

from fastapi import APIRouter, Query, status

from healthsync.dependencies import (
    CurrentClaims,
    CurrentDoctor,
    CurrentUser,
    UserServiceDep,
)
from healthsync.schemas.users import (
    UserCreate,
    UserListResponse,
    UserProfileUpdate,
    UserResponse,
    UserRole,
    UserUpsertResponse,
)

router = APIRouter(prefix="/users", tags=["Users"])


@router.post("", response_model=UserUpsertResponse, status_code=status.HTTP_200_OK)
async def create_or_update_user(
    user_data: UserCreate,
    claims: CurrentClaims,
    user_service: UserServiceDep,
) -> UserUpsertResponse:
    """
    Create the account of the signed-in user, or refresh its profile.

    The account id is always the uid of the verified token.
    """
    if user_data.email is None and claims.get("email"):
        user_data.email = claims["email"]

    user, created = await user_service.create_or_update_user(claims["uid"], user_data)
    return UserUpsertResponse(id=user.uid, created=created)


@router.get("/me", response_model=UserResponse)
async def get_current_user_profile(current_user: CurrentUser) -> UserResponse:
    """Get current user's account, including XP and streak."""
    return UserResponse(user=current_user)


@router.patch("/me", response_model=UserResponse)
async def update_current_user_profile(
    current_user: CurrentUser,
    user_service: UserServiceDep,
    user_data: UserProfileUpdate,
) -> UserResponse:
    """Update current user's profile fields; omitted fields are kept."""
    user = await user_service.update_user(current_user.uid, user_data)
    return UserResponse(user=user)


@router.get("", response_model=UserListResponse)
async def list_users(
    doctor: CurrentDoctor,
    user_service: UserServiceDep,
    role: UserRole = Query("patient", description="Role to list"),
) -> UserListResponse:
    """List users by role (doctor only)."""
    users = await user_service.list_users_by_role(role)
    return UserListResponse(users=users, total=len(users))


@router.get("/{uid}", response_model=UserResponse)
async def get_user(uid: str, doctor: CurrentDoctor, user_service: UserServiceDep) -> UserResponse:
    """Get any user's account (doctor only)."""
    return UserResponse(user=await user_service.get_user(uid))
