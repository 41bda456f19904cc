"""API v1 router configuration."""

from fastapi import APIRouter

from healthsync.api.v1.endpoints import (
    analytics,
    gamification,
    health,
    medications,
    symptoms,
    users,
)

api_router = APIRouter()

# Include routers
api_router.include_router(health.router, tags=["Health"])
api_router.include_router(users.router)
api_router.include_router(medications.router)
api_router.include_router(symptoms.router)
api_router.include_router(gamification.router)
api_router.include_router(analytics.router)
