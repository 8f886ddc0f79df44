"""Services for routing, notifications and report lifecycle logic."""

from app.services.directory import DepartmentDirectory
from app.services.load_balancer import StaffLoadBalancer
from app.services.notifications import NotificationDispatcher
from app.services.reports import ReportService
from app.services.routing import RoutingEngine

__all__ = [
    "DepartmentDirectory",
    "NotificationDispatcher",
    "ReportService",
    "RoutingEngine",
    "StaffLoadBalancer",
]
