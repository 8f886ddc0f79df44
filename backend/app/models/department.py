"""Department and service-area models used by the routing engine."""

from datetime import datetime

from sqlalchemy import JSON, DateTime, Float, ForeignKey, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base
from app.models._time import utcnow


class Department(Base):
    """
    Administrative unit responsible for one or more report categories.

    Departments enumerate in id (insertion) order. That order breaks ties
    during routing, so it must never be replaced by name or distance order.
    A department without service areas has city-wide jurisdiction.
    """

    __tablename__ = "departments"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    categories: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)

    service_areas: Mapped[list["ServiceArea"]] = relationship(
        back_populates="department",
        order_by="ServiceArea.position",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False
    )

    def accepts(self, category: str | None) -> bool:
        return category is not None and category in (self.categories or [])

    def __repr__(self) -> str:
        return f"<Department {self.id}: {self.name}>"


class ServiceArea(Base):
    """Circular jurisdiction: center (lng, lat) plus radius in meters."""

    __tablename__ = "service_areas"

    id: Mapped[int] = mapped_column(primary_key=True)
    department_id: Mapped[int] = mapped_column(
        ForeignKey("departments.id", ondelete="CASCADE"), nullable=False, index=True
    )
    # Stored order within the department
    position: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    center_longitude: Mapped[float] = mapped_column(Float, nullable=False)
    center_latitude: Mapped[float] = mapped_column(Float, nullable=False)
    radius_meters: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)

    department: Mapped[Department] = relationship(back_populates="service_areas")

    @property
    def center(self) -> tuple[float, float]:
        return (self.center_longitude, self.center_latitude)

    def __repr__(self) -> str:
        return f"<ServiceArea {self.center} r={self.radius_meters}m>"
