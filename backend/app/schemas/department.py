"""Pydantic schemas for departments and service areas."""

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ServiceAreaIn(BaseModel):
    """Circle: center [lng, lat] and radius in meters."""

    center: list[float]
    radius_meters: float = Field(0, ge=0)

    @field_validator("center")
    @classmethod
    def validate_center(cls, value: list[float]) -> list[float]:
        if len(value) != 2:
            raise ValueError("center must be [lng, lat]")
        lng, lat = value
        if not -180 <= lng <= 180 or not -90 <= lat <= 90:
            raise ValueError("center is outside valid coordinate bounds")
        return value


class ServiceAreaOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    center_longitude: float
    center_latitude: float
    radius_meters: float


class DepartmentCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    categories: list[str] = Field(default_factory=list)
    service_areas: list[ServiceAreaIn] = Field(default_factory=list)


class DepartmentUpdate(BaseModel):
    """Partial update. ``service_areas`` replaces the whole ordered list."""

    name: str | None = Field(None, min_length=1, max_length=255)
    categories: list[str] | None = None
    service_areas: list[ServiceAreaIn] | None = None


class DepartmentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    categories: list[str]
    service_areas: list[ServiceAreaOut]
