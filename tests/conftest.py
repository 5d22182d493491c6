"""
Test configuration and fixtures for the house rental API.
Provides database fixtures, test data factories, a stubbed geolocation
provider and an HTTP client bound to the application.
"""

import os
import tempfile

# Configure the application before it is imported
os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("AUTO_CREATE_TABLES", "false")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="house_rental_uploads_"))

import uuid
from decimal import Decimal
from typing import Any, AsyncGenerator, Callable, Dict, Optional, Tuple

import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from house_rental.config import Settings, get_settings
from house_rental.database import create_tables, get_db
from house_rental.main import app
from house_rental.models.listing import Listing
from house_rental.models.user import User, UserRole
from house_rental.repositories.image import ImageRepository
from house_rental.repositories.listing import ListingRepository
from house_rental.repositories.property_request import PropertyRequestRepository
from house_rental.repositories.user import UserRepository
from house_rental.services.auth import AuthService
from house_rental.services.geolocation import GeolocationService
from house_rental.services.image import ImageService
from house_rental.services.listing import ListingService
from house_rental.services.property_request import PropertyRequestService
from house_rental.utils.auth import create_access_token
from house_rental.utils.dependencies import get_geolocation_service

DEFAULT_PASSWORD = "testpassword123"

# Chennai Central and nearby points, roughly 1 km and 9 km away
CHENNAI = (13.0827, 80.2707)
EGMORE = (13.0732, 80.2609)
ADYAR = (13.0067, 80.2570)


@pytest.fixture
async def db_engine():
    """Fresh in-memory database per test."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False}
    )
    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    session_factory = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    """Settings with an isolated upload directory and provider keys for stubbed calls."""
    return Settings(
        upload_dir=str(tmp_path / "uploads"),
        google_maps_api_key="test-google-key",
        mapbox_api_key="test-mapbox-key",
    )


# Repository fixtures
@pytest.fixture
def user_repository(db_session: AsyncSession) -> UserRepository:
    return UserRepository(db_session)


@pytest.fixture
def listing_repository(db_session: AsyncSession) -> ListingRepository:
    return ListingRepository(db_session)


@pytest.fixture
def request_repository(db_session: AsyncSession) -> PropertyRequestRepository:
    return PropertyRequestRepository(db_session)


@pytest.fixture
def image_repository(db_session: AsyncSession) -> ImageRepository:
    return ImageRepository(db_session)


# Service fixtures
@pytest.fixture
def auth_service(db_session: AsyncSession) -> AuthService:
    return AuthService(db_session)


@pytest.fixture
def listing_service(db_session: AsyncSession, test_settings: Settings) -> ListingService:
    return ListingService(db_session, test_settings)


@pytest.fixture
def request_service(db_session: AsyncSession, test_settings: Settings) -> PropertyRequestService:
    return PropertyRequestService(db_session, test_settings)


@pytest.fixture
def image_service(db_session: AsyncSession, test_settings: Settings) -> ImageService:
    return ImageService(db_session, test_settings)


# Outbound provider stub
class ProviderStub:
    """
    Canned responses for outbound provider calls, keyed by (host, path).
    Unknown routes answer 404 so an unexpected call fails loudly.
    """

    def __init__(self):
        self.routes: Dict[Tuple[str, str], Callable[[httpx.Request], httpx.Response]] = {}
        self.requests = []

    def add(self, host: str, path: str, json: Any = None, status_code: int = 200) -> None:
        self.routes[(host, path)] = lambda request: httpx.Response(status_code, json=json)

    def add_error(self, host: str, path: str, exc: Exception) -> None:
        def raise_error(request: httpx.Request) -> httpx.Response:
            raise exc
        self.routes[(host, path)] = raise_error

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.url.host, request.url.path))
        if route is None:
            return httpx.Response(404, json={"error": "not stubbed"})
        return route(request)

    def hosts_called(self):
        return [request.url.host for request in self.requests]


@pytest.fixture
def provider_stub() -> ProviderStub:
    return ProviderStub()


@pytest.fixture
async def geolocation_service(provider_stub: ProviderStub, test_settings: Settings) -> AsyncGenerator[GeolocationService, None]:
    client = httpx.AsyncClient(transport=httpx.MockTransport(provider_stub.handler))
    service = GeolocationService(test_settings, client=client)
    yield service
    await client.aclose()


@pytest.fixture
async def client(
    db_session: AsyncSession,
    test_settings: Settings,
    geolocation_service: GeolocationService
) -> AsyncGenerator[httpx.AsyncClient, None]:
    """HTTP client bound to the app with the test database and stubbed providers."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_settings] = lambda: test_settings
    app.dependency_overrides[get_geolocation_service] = lambda: geolocation_service

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client

    app.dependency_overrides.clear()


# Test data factories
class UserFactory:
    """Factory for creating test users."""

    @staticmethod
    def create_user_data(
        email: Optional[str] = None,
        password: str = DEFAULT_PASSWORD,
        name: str = "Test User",
        role: UserRole = UserRole.USER,
        is_active: bool = True
    ) -> dict:
        return {
            "email": email or f"user{uuid.uuid4().hex[:8]}@example.com",
            "password": password,
            "name": name,
            "role": role,
            "is_active": is_active
        }

    @staticmethod
    async def create_user(user_repo: UserRepository, **kwargs) -> User:
        return await user_repo.create_user(UserFactory.create_user_data(**kwargs))


class ListingFactory:
    """Factory for creating test listings directly through the repository."""

    @staticmethod
    def create_listing_data(
        owner: Optional[User] = None,
        owner_email: Optional[str] = None,
        title: str = "Test Listing",
        price: Decimal = Decimal("20000"),
        latitude: float = CHENNAI[0],
        longitude: float = CHENNAI[1],
        **extra
    ) -> dict:
        data = {
            "title": title,
            "description": "A test listing",
            "price": price,
            "location_text": "Chennai",
            "latitude": latitude,
            "longitude": longitude,
            "property_type": "Apartment",
            "bedrooms": 2,
            "bathrooms": 1,
            "furnishing": "Unfurnished",
            "owner_id": owner.id if owner else None,
            "owner_email": owner.email if owner else (owner_email or "someone@example.com"),
        }
        data.update(extra)
        return data

    @staticmethod
    async def create_listing(listing_repo: ListingRepository, **kwargs) -> Listing:
        return await listing_repo.create(ListingFactory.create_listing_data(**kwargs))


def auth_headers(user: User) -> Dict[str, str]:
    """Authorization header carrying a fresh access token for ``user``."""
    token = create_access_token(user_id=user.id, email=user.email, role=user.role, name=user.name)
    return {"Authorization": f"Bearer {token}"}


# Common test fixtures
@pytest.fixture
async def test_user(user_repository: UserRepository) -> User:
    return await UserFactory.create_user(user_repository, email="tenant@example.com", name="Tenant")


@pytest.fixture
async def other_user(user_repository: UserRepository) -> User:
    return await UserFactory.create_user(user_repository, email="other@example.com", name="Other Tenant")


@pytest.fixture
async def test_owner(user_repository: UserRepository) -> User:
    return await UserFactory.create_user(
        user_repository,
        email="owner@example.com",
        name="Owner",
        role=UserRole.OWNER
    )


@pytest.fixture
async def test_admin(user_repository: UserRepository) -> User:
    return await UserFactory.create_user(
        user_repository,
        email="admin@example.com",
        name="Admin",
        role=UserRole.ADMIN
    )


@pytest.fixture
async def test_inactive_user(user_repository: UserRepository) -> User:
    return await UserFactory.create_user(
        user_repository,
        email="inactive@example.com",
        name="Inactive",
        is_active=False
    )


@pytest.fixture
async def test_listing(listing_repository: ListingRepository, test_owner: User) -> Listing:
    return await ListingFactory.create_listing(listing_repository, owner=test_owner, title="Central 2BHK")
