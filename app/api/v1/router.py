"""
API v1 router setup
All routes require a JWT bearer token issued by the identity service
"""
from fastapi import APIRouter

from app.api.v1.dashboard import appointments, availability

api_v1_router = APIRouter()

# ============================================================================
# SCHEDULING ROUTES (JWT authentication required)
# ============================================================================
api_v1_router.include_router(
    availability.router,
    tags=["Availability"]
)

api_v1_router.include_router(
    appointments.router,
    tags=["Appointments"]
)


# ============================================================================
# ROOT ENDPOINT - API Info
# ============================================================================
@api_v1_router.get("/", tags=["Info"])
async def api_info():
    """API information and available route groups."""
    return {
        "version": "1.0",
        "groups": {
            "availability": "/api/v1/availability",
            "appointments": "/api/v1/appointments"
        },
        "authentication": "JWT Bearer token required"
    }
