"""
API v1 router setup
"""
from fastapi import APIRouter

from booking_engine.api.v1 import availability, bookings, businesses

api_v1_router = APIRouter()

# ============================================================================
# AVAILABILITY
# ============================================================================
api_v1_router.include_router(availability.router)

# ============================================================================
# BOOKINGS
# ============================================================================
api_v1_router.include_router(bookings.router)
api_v1_router.include_router(businesses.router)


# ============================================================================
# ROOT ENDPOINT - API Info
# ============================================================================
@api_v1_router.get("/", tags=["Info"])
async def api_info():
    """API information and available endpoints."""
    return {
        "version": "1.0",
        "endpoints": {
            "availability": "GET /businesses/{business_id}/availability",
            "create_booking": "POST /bookings",
            "update_booking": "PATCH /bookings/{booking_id}",
            "get_booking": "GET /bookings/{booking_id}",
            "list_bookings": "GET /businesses/{business_id}/bookings",
            "setup": "GET /businesses/{business_id}/setup"
        }
    }
