"""
ASGI application for the House Rental API.

Run with ``uvicorn house_rental.main:app`` or execute this module directly.
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager
from sqlalchemy.exc import SQLAlchemyError
from pydantic import ValidationError as PydanticValidationError
import logging

from house_rental.config import settings
from house_rental.database import create_tables, test_database_connection, close_db_connection
from house_rental.routers import (
    auth_router,
    listings_router,
    property_requests_router,
    geolocation_router,
    images_router,
    admin_router
)
from house_rental.services.error_handler import ErrorHandlerService
from house_rental.services.geolocation import GeolocationService
from house_rental.middleware.request import RequestContextMiddleware
from house_rental.utils.exceptions import APIException

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)

API_DESCRIPTION = """
Backend for a house-rental marketplace.

* **Listings**: publishing, text search, radius queries and owner dashboards
* **Property Requests**: tenants ask about a listing and owners decide
* **Geolocation**: geocoding, nearby places, directions and distances
* **Images**: uploads and per-listing galleries
* **Admin**: user and listing overviews with statistics

Register or log in under `/api/auth` and send the returned token as
`Authorization: Bearer <token>`.
"""

OPENAPI_TAGS = [
    {"name": "Authentication", "description": "Registration, login and the current user"},
    {"name": "Listings", "description": "Rental listings, radius queries and search"},
    {"name": "Property Requests", "description": "Tenant requests and owner decisions"},
    {"name": "Geolocation", "description": "Geocoding, places, directions and distances"},
    {"name": "Images", "description": "Image uploads and listing galleries"},
    {"name": "Admin", "description": "Administration and statistics"},
    {"name": "Health", "description": "Liveness and readiness probes"},
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Prepares the schema when configured and owns the shared geolocation client."""
    logger.info(f"{settings.app_name} {settings.app_version} starting ({settings.environment})")

    if settings.auto_create_tables:
        await create_tables()

    if not await test_database_connection():
        logger.error("Database unreachable at startup; requests touching it will fail")

    app.state.geolocation_service = GeolocationService(settings)
    try:
        yield
    finally:
        logger.info(f"{settings.app_name} stopping")
        await app.state.geolocation_service.aclose()
        await close_db_connection()


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description=API_DESCRIPTION,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_tags=OPENAPI_TAGS,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"],
)

# One full upload batch plus 1 MB of multipart framing
app.add_middleware(
    RequestContextMiddleware,
    max_request_size=settings.max_file_size * settings.max_upload_files + 1024 * 1024,
    enable_request_logging=settings.debug
)

for router in (
    auth_router,
    listings_router,
    property_requests_router,
    geolocation_router,
    images_router,
    admin_router,
):
    app.include_router(router, prefix=settings.api_prefix)

app.mount("/uploads", StaticFiles(directory=settings.upload_dir, check_dir=False), name="uploads")


@app.exception_handler(APIException)
async def api_exception_handler(request: Request, exc: APIException):
    return ErrorHandlerService.handle_api_exception(exc, request)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return ErrorHandlerService.handle_validation_error(exc, request)


@app.exception_handler(PydanticValidationError)
async def pydantic_validation_exception_handler(request: Request, exc: PydanticValidationError):
    """Model validation failing inside a service, after the request itself parsed."""
    return ErrorHandlerService.handle_validation_error(exc, request)


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(request: Request, exc: SQLAlchemyError):
    return ErrorHandlerService.handle_database_error(exc, request)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Unmatched routes and wrong methods; APIException is a subclass and keeps its own codes."""
    if isinstance(exc, APIException):
        return ErrorHandlerService.handle_api_exception(exc, request)
    return ErrorHandlerService.handle_http_exception(exc, request)


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    return ErrorHandlerService.handle_unexpected_error(exc, request)


@app.get("/", tags=["Health"])
async def root():
    """Service banner with documentation links."""
    return {
        "message": f"Welcome to {settings.app_name}",
        "version": settings.app_version,
        "environment": settings.environment,
        "status": "healthy",
        "documentation": {
            "swagger_ui": "/docs",
            "redoc": "/redoc",
            "openapi_json": "/openapi.json"
        },
        "api_prefix": settings.api_prefix
    }


@app.get("/health", tags=["Health"])
async def health_check():
    """Readiness probe; answers 503 while the database is unreachable."""
    if not await test_database_connection():
        raise StarletteHTTPException(status_code=503, detail="Database connection failed")

    return {
        "status": "healthy",
        "service": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment,
        "database": "connected"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "house_rental.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )
