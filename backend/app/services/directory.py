"""Department directory: the queryable store of departments and service areas."""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import Department, ServiceArea
from app.schemas.department import DepartmentCreate, DepartmentUpdate, ServiceAreaIn
from app.services.errors import DepartmentNotFound

logger = logging.getLogger(__name__)


def _build_areas(areas: list[ServiceAreaIn]) -> list[ServiceArea]:
    return [
        ServiceArea(
            position=position,
            center_longitude=area.center[0],
            center_latitude=area.center[1],
            radius_meters=area.radius_meters,
        )
        for position, area in enumerate(areas)
    ]


class DepartmentDirectory:
    """
    Read side used by the routing engine, write side used by administrators.

    Departments are always enumerated in id order, which is their insertion
    order. Routing tie-breaks depend on this.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_departments(self) -> list[Department]:
        result = await self.db.execute(select(Department).order_by(Department.id))
        return list(result.scalars().all())

    async def departments_for_category(self, category: str) -> list[Department]:
        """All departments accepting ``category``, in directory order."""
        # Category sets are tiny JSON arrays; membership is checked here so the
        # query stays portable across PostgreSQL and SQLite.
        departments = await self.list_departments()
        return [dept for dept in departments if dept.accepts(category)]

    async def get(self, department_id: int) -> Department:
        department = await self.db.get(Department, department_id)
        if department is None:
            raise DepartmentNotFound(f"Department {department_id} not found")
        return department

    async def create(self, data: DepartmentCreate) -> Department:
        department = Department(
            name=data.name,
            categories=list(data.categories),
            service_areas=_build_areas(data.service_areas),
        )
        self.db.add(department)
        await self.db.commit()
        await self.db.refresh(department, attribute_names=["service_areas"])
        logger.info(f"Created department {department.id}: {department.name}")
        return department

    async def update(self, department_id: int, data: DepartmentUpdate) -> Department:
        department = await self.get(department_id)
        if data.name is not None:
            department.name = data.name
        if data.categories is not None:
            department.categories = list(data.categories)
        if data.service_areas is not None:
            department.service_areas = _build_areas(data.service_areas)
        await self.db.commit()
        await self.db.refresh(department, attribute_names=["service_areas"])
        logger.info(f"Updated department {department.id}: {department.name}")
        return department
