"""API routers."""

from app.routers.admin import router as admin_router
from app.routers.health import router as health_router
from app.routers.notifications import router as notifications_router
from app.routers.reports import router as reports_router
from app.routers.staff import router as staff_router
from app.routers.users import router as users_router

__all__ = [
    "admin_router",
    "health_router",
    "notifications_router",
    "reports_router",
    "staff_router",
    "users_router",
]
