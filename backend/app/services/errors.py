"""Domain exceptions raised by the service layer."""


class ServiceError(Exception):
    """Base exception for service-layer errors."""

    pass


class ReportValidationError(ServiceError):
    """Submitted report is missing required fields or has malformed coordinates."""

    pass


class ReportNotFound(ServiceError):
    pass


class DepartmentNotFound(ServiceError):
    pass


class InvalidStatusTransition(ServiceError):
    """Requested status change is not allowed by the report workflow."""

    def __init__(self, current: str, target: str):
        self.current = current
        self.target = target
        super().__init__(f"Cannot move report from '{current}' to '{target}'")


class AnalysisServiceError(ServiceError):
    """The external analysis service failed or returned an unusable payload."""

    pass


class RoutingBudgetExceeded(ServiceError):
    """Too many service areas to evaluate for a single routing attempt."""

    pass


class NotPermitted(ServiceError):
    """The acting user may not perform this action on the report."""

    pass
