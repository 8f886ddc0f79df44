"""Pytest fixtures for civic reports backend tests."""

from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

import app.models  # noqa: F401  (registers tables on Base.metadata)
from app.config import Settings
from app.database import Base, get_db
from app.dependencies import get_session_factory
from app.main import app
from app.models import Department, Report, ReportStatus, ServiceArea, User, UserRole
from app.services.notifications import NotificationDispatcher
from app.websocket.manager import ConnectionManager

# Greater Noida fixtures, [lng, lat]
PWD_CENTER = (77.51, 28.46)
SANITATION_CENTER = (77.50, 28.47)
WATER_CENTER = (77.49, 28.48)


@pytest.fixture
def test_database_url(tmp_path) -> str:
    """File-backed SQLite so separate sessions see each other's commits."""
    return f"sqlite+aiosqlite:///{tmp_path / 'test.db'}"


@pytest.fixture
def test_settings(test_database_url) -> Settings:
    """Test settings with safe defaults."""
    return Settings(
        database_url=test_database_url,
        ai_analysis_url=None,
        escalation_webhook_url=None,
        debug=True,
    )


@pytest_asyncio.fixture
async def async_engine(test_database_url):
    """Create async engine with the full schema."""
    engine = create_async_engine(test_database_url, echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(async_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create test database session."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def connections() -> ConnectionManager:
    """Isolated connection manager (not the global singleton)."""
    return ConnectionManager()


@pytest.fixture
def notifier(session_factory, connections) -> NotificationDispatcher:
    return NotificationDispatcher(session_factory=session_factory, connections=connections)


@pytest_asyncio.fixture
async def client(db_session: AsyncSession, session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Create test HTTP client with database override."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def departments(db_session: AsyncSession) -> dict[str, Department]:
    """Seeded directory, inserted in a fixed (directory) order."""
    pwd = Department(
        name="Public Works Department (PWD)",
        categories=["pothole", "streetlight"],
        service_areas=[
            ServiceArea(
                position=0,
                center_longitude=PWD_CENTER[0],
                center_latitude=PWD_CENTER[1],
                radius_meters=5000,
            )
        ],
    )
    sanitation = Department(
        name="Health & Sanitation Department",
        categories=["garbage"],
        service_areas=[
            ServiceArea(
                position=0,
                center_longitude=SANITATION_CENTER[0],
                center_latitude=SANITATION_CENTER[1],
                radius_meters=3500,
            )
        ],
    )
    horticulture = Department(name="Horticulture Department", categories=["tree"], service_areas=[])
    water = Department(
        name="Water Department (Jal Vibhag)",
        categories=["water"],
        service_areas=[
            ServiceArea(
                position=0,
                center_longitude=WATER_CENTER[0],
                center_latitude=WATER_CENTER[1],
                radius_meters=4500,
            )
        ],
    )
    for dept in (pwd, sanitation, horticulture, water):
        db_session.add(dept)
        await db_session.flush()
    await db_session.commit()
    return {"pwd": pwd, "sanitation": sanitation, "horticulture": horticulture, "water": water}


@pytest_asyncio.fixture
async def citizen(db_session: AsyncSession) -> User:
    user = User(name="Asha Verma", email="asha@example.com", role=UserRole.CITIZEN)
    db_session.add(user)
    await db_session.commit()
    return user


@pytest_asyncio.fixture
async def other_citizen(db_session: AsyncSession) -> User:
    user = User(name="Ravi Kumar", email="ravi@example.com", role=UserRole.CITIZEN)
    db_session.add(user)
    await db_session.commit()
    return user


@pytest_asyncio.fixture
async def admin(db_session: AsyncSession) -> User:
    user = User(name="City Admin", email="admin@example.com", role=UserRole.ADMIN)
    db_session.add(user)
    await db_session.commit()
    return user


@pytest.fixture
def make_report(db_session: AsyncSession):
    """Factory persisting a report with sensible defaults."""

    async def _make(
        category: str | None = "pothole",
        coordinates: tuple[float, float] = (77.50, 28.46),
        status: str = ReportStatus.NEW,
        reporter: User | None = None,
        **kwargs,
    ) -> Report:
        report = Report(
            title=kwargs.pop("title", "Deep pothole near market"),
            category=category,
            longitude=coordinates[0],
            latitude=coordinates[1],
            status=status,
            reporter_id=reporter.id if reporter else None,
            **kwargs,
        )
        db_session.add(report)
        await db_session.commit()
        return report

    return _make
