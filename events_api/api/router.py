"""Main API router"""

from fastapi import APIRouter

from .routes import admin_events, admin_users, auth, bookings, events, health

# Main API router
api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(events.router, prefix="/events", tags=["events"])
api_router.include_router(bookings.router, prefix="/bookings", tags=["bookings"])
api_router.include_router(admin_events.router, prefix="/admin/events", tags=["admin"])
api_router.include_router(admin_users.router, prefix="/admin/users", tags=["admin"])
api_router.include_router(health.router, prefix="/health", tags=["health"])
