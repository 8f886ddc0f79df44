"""Translate service-layer exceptions into HTTP errors."""

from contextlib import contextmanager

from fastapi import HTTPException

from app.services.errors import (
    DepartmentNotFound,
    InvalidStatusTransition,
    NotPermitted,
    ReportNotFound,
    ReportValidationError,
)


@contextmanager
def service_errors():
    try:
        yield
    except (ReportNotFound, DepartmentNotFound) as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except ReportValidationError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except InvalidStatusTransition as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    except NotPermitted as e:
        raise HTTPException(status_code=403, detail=str(e)) from e
