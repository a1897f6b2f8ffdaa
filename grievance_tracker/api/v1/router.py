"""
API v1 Router - Main Entry Point
Aggregates all v1 API endpoints.
"""

from fastapi import APIRouter

from grievance_tracker.api.v1 import admin, complaints, notifications

router = APIRouter(
    responses={
        400: {"description": "Bad Request"},
        401: {"description": "Unauthorized"},
        403: {"description": "Forbidden"},
        404: {"description": "Not Found"},
        409: {"description": "Conflict"},
        422: {"description": "Validation Error"},
        500: {"description": "Internal Server Error"},
    }
)

router.include_router(complaints.router)
router.include_router(admin.router)
router.include_router(notifications.router)
