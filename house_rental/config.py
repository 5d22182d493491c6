"""
Runtime settings read from environment variables and an optional .env file.
Variable names are the upper-cased field names, e.g. DATABASE_URL or MAPBOX_API_KEY.
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings
from typing import Optional, List
from functools import lru_cache
import os

ENVIRONMENTS = ("development", "testing", "staging", "production")


class Settings(BaseSettings):
    """Every field can be overridden by an environment variable of the same name."""

    app_name: str = "House Rental API"
    app_version: str = "1.0.0"
    environment: str = "development"
    debug: bool = False
    testing: bool = False

    # Storage
    database_url: str = "sqlite+aiosqlite:///./house_rental.db"
    auto_create_tables: bool = True

    # Tokens
    jwt_secret_key: str = "dev-secret-change-me"
    jwt_algorithm: str = "HS256"
    access_token_expire_days: int = 7

    # Uploads
    upload_dir: str = "./uploads"
    max_file_size: int = 10 * 1024 * 1024  # 10MB
    max_upload_files: int = 12
    allowed_file_types: List[str] = ["image/jpeg", "image/png", "image/webp"]

    api_prefix: str = "/api"
    cors_origins: List[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    # Paging
    default_page_size: int = 20
    max_page_size: int = 100

    # Listing radius queries
    listing_default_radius_m: int = 5000
    listing_query_limit: int = 200

    # Geolocation providers
    google_maps_api_key: Optional[str] = None
    mapbox_api_key: Optional[str] = None
    nominatim_base_url: str = "https://nominatim.openstreetmap.org"
    geocoding_user_agent: str = "HomeRentalApp/1.0"
    geocoding_country_code: str = "in"
    http_timeout_seconds: float = 10.0

    # Property request review superuser, off unless explicitly enabled
    request_review_bypass_enabled: bool = False
    request_review_bypass_email: Optional[str] = None

    # uvicorn
    host: str = "0.0.0.0"
    port: int = 5001

    @field_validator("database_url", mode="before")
    @classmethod
    def validate_database_url(cls, v):
        """Plain postgresql and sqlite URLs are rewritten to their async drivers."""
        if v and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        if v and v.startswith("sqlite://") and not v.startswith("sqlite+aiosqlite://"):
            return v.replace("sqlite://", "sqlite+aiosqlite://", 1)
        return v

    @field_validator("jwt_secret_key", mode="before")
    @classmethod
    def validate_jwt_secret_key(cls, v):
        if not v:
            raise ValueError("JWT_SECRET_KEY is required")
        return v

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v):
        if v not in ENVIRONMENTS:
            raise ValueError(f"Environment must be one of: {', '.join(ENVIRONMENTS)}")
        return v

    @field_validator("upload_dir", mode="before")
    @classmethod
    def create_upload_directory(cls, v):
        if v:
            os.makedirs(v, exist_ok=True)
        return v

    @field_validator("request_review_bypass_email", mode="before")
    @classmethod
    def normalize_bypass_email(cls, v):
        if v:
            return v.strip().lower()
        return None

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def is_testing(self) -> bool:
        return self.environment == "testing" or self.testing

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }


@lru_cache()
def get_settings() -> Settings:
    """Settings are read once per process."""
    return Settings()


settings = get_settings()
