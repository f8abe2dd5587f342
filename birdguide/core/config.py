# Fichier: birdguide/core/config.py
from pydantic_settings import BaseSettings
from typing import Optional, List
from pydantic import ValidationError, field_validator
import sys

PSYCOPG2_SCHEME = "postgresql+psycopg2://"
_POSTGRES_PREFIXES = ("postgres://", "postgresql://", "postgresql+psycopg://")


def normalize_database_url(url: str) -> str:
    for prefix in _POSTGRES_PREFIXES:
        if url.startswith(prefix):
            return PSYCOPG2_SCHEME + url[len(prefix):]
    return url


class Settings(BaseSettings):
    DATABASE_URL: str
    SECRET_KEY: str

    ENVIRONMENT: str = "development"
    BACKEND_CORS_ORIGINS: List[str] = [
        "http://localhost:4200",
        "http://localhost:4201",
        "http://localhost:3000",
    ]

    # --- Logging ---
    LOG_LEVEL: str = "INFO"
    LOG_FILE_PATH: Optional[str] = None

    # --- Auth configuration ---
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # Performance instrumentation
    SQLALCHEMY_SLOW_QUERY_THRESHOLD_MS: int = 300

    # --- Contenu ---
    DEFAULT_LOCALE: str = "es-AR"
    FLASHCARD_SESSION_SIZE: int = 10

    # --- Auth0 (identity provider) ---
    AUTH0_DOMAIN: Optional[str] = None
    AUTH0_CLIENT_ID: Optional[str] = None
    AUTH0_CLIENT_SECRET: Optional[str] = None
    AUTH0_AUDIENCE: Optional[str] = None
    AUTH0_REDIRECT_URI: Optional[str] = None
    AUTH0_CONNECTION: str = "Username-Password-Authentication"
    AUTH0_MANAGEMENT_API_AUDIENCE: Optional[str] = None
    AUTH0_MANAGEMENT_API_CLIENT_ID: Optional[str] = None
    AUTH0_MANAGEMENT_API_CLIENT_SECRET: Optional[str] = None

    class Config:
        env_file = ".env"

    @field_validator("DATABASE_URL", mode="before")
    @classmethod
    def _normalize_database_url(cls, value: str) -> str:
        """Force the psycopg2 driver on PostgreSQL URLs.

        Managed Postgres providers still hand out ``postgres://`` URLs, which
        SQLAlchemy no longer accepts as a dialect name, and a bare
        ``postgresql://`` resolves to whichever default driver SQLAlchemy ships.
        """

        if not isinstance(value, str):
            return value
        return normalize_database_url(value)

    @property
    def auth0_configured(self) -> bool:
        return all(
            (
                self.AUTH0_DOMAIN,
                self.AUTH0_CLIENT_ID,
                self.AUTH0_CLIENT_SECRET,
                self.AUTH0_MANAGEMENT_API_CLIENT_ID,
                self.AUTH0_MANAGEMENT_API_CLIENT_SECRET,
            )
        )


def _log_settings_validation_error(exc: ValidationError) -> None:
    """Pretty-print missing or invalid environment variables.

    The exception bubbles up during module import, which makes it hard to spot
    the offending variable. The structured payload is printed before the
    exception is re-raised.
    """

    print("Configuration error while loading environment variables:", file=sys.stderr)

    details = exc.errors()
    if details:
        for error in details:
            location = ".".join(str(part) for part in error.get("loc", ()))
            message = error.get("msg", "Unknown validation error")
            type_name = error.get("type")
            hint = f"{message} (type={type_name})" if type_name else message
            print(f"  - {location}: {hint}", file=sys.stderr)
    else:
        print(exc, file=sys.stderr)


try:
    settings = Settings()
except ValidationError as exc:  # pragma: no cover - exercised at runtime
    _log_settings_validation_error(exc)
    raise
