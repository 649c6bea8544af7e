from typing import Optional, List
from urllib.parse import urlsplit

from pydantic import computed_field, Field, AliasChoices, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Known insecure default values that must be changed in production
_INSECURE_SECRET_KEYS = {
    "your-secret-key-change-this-in-production-min-32-chars",
    "changeme",
    "secret",
    "development-secret",
}
_INSECURE_DB_PASSWORDS = {
    "postgres",
    "password",
    "changeme",
}

_INSECURE_ALLOWED_ORIGINS_DEFAULTS = {
    "http://localhost:3000",
    "http://localhost:5173",
    "http://127.0.0.1:3000",
    "http://127.0.0.1:5173",
}


def _extract_password_from_database_url(database_url: str | None) -> str | None:
    if not database_url:
        return None
    try:
        parts = urlsplit(database_url)
        return parts.password
    except ValueError:
        return None


class Settings(BaseSettings):
    # Allow comma-separated env vars for list fields like ALLOWED_ORIGINS
    model_config = SettingsConfigDict(env_file=".env", env_parse_delimiter=",")
    PROJECT_NAME: str = "Vodichron HRMS"
    API_V1_STR: str = "/api"
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"
    LOG_DIR: Optional[str] = None
    LOG_RETENTION_DAYS: int = 14

    # CORS
    # Accepts either a JSON array or a comma-separated string, normalized below.
    ALLOWED_ORIGINS: List[str] | str = Field(
        default_factory=lambda: ["http://localhost:3000", "http://localhost:5173"],
        validation_alias=AliasChoices("ALLOWED_ORIGINS", "CORS_ORIGINS"),
    )

    # Database settings
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_SERVER: str = Field(
        default="db",
        validation_alias=AliasChoices("POSTGRES_SERVER", "POSTGRES_HOST", "DB_HOST"),
    )
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str = "vodichron"

    # Database connection pooling
    DB_POOL_SIZE: int = Field(default=10, description="Number of persistent DB connections")
    DB_MAX_OVERFLOW: int = Field(default=20, description="Max additional connections under load")

    # Full DB URL (preferred in CI/containers). If not provided, we build it from POSTGRES_*.
    DATABASE_URL: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("DATABASE_URL", "SQLALCHEMY_DATABASE_URI"),
    )

    SQLALCHEMY_ECHO: bool = False

    # JWT / session settings
    SECRET_KEY: str = Field(
        default="your-secret-key-change-this-in-production-min-32-chars",
        validation_alias=AliasChoices("JWT_SECRET_KEY", "SECRET_KEY"),
    )
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7
    REFRESH_COOKIE_NAME: str = "refreshToken"
    REFRESH_COOKIE_PATH: str = "/api/auth"

    # Password policy
    MIN_PASSWORD_LENGTH: int = 8
    BCRYPT_ROUNDS: int = 10

    # Login lockout
    LOGIN_MAX_ATTEMPTS: int = 5
    LOGIN_LOCKOUT_MINUTES: int = 15
    LOGIN_ATTEMPT_WINDOW_MINUTES: int = 15

    # Password reset links
    RESET_LINK_EXPIRE_MINUTES: int = 15
    FRONTEND_URL: str = "http://localhost:3000"

    # Field-level encryption key for employee PII (PAN, Aadhaar, bank, PF)
    # Generate with: python -c "from cryptography.fernet import Fernet; print(Fernet.generate_key().decode())"
    ENCRYPTION_KEY: Optional[str] = None

    # Uploaded assets
    ASSET_PATH: str = Field(
        default="./vodichron_data/assets",
        validation_alias=AliasChoices("ASSET_PATH", "ASSETS_PATH"),
    )
    ALLOW_DOCUMENT_UPLOAD: bool = True
    MAX_UPLOAD_SIZE_MB: int = 10

    # SMTP
    SMTP_HOST: Optional[str] = None
    SMTP_PORT: int = 587
    SMTP_USER: Optional[str] = None
    SMTP_PASSWORD: Optional[str] = None
    SMTP_FROM_EMAIL: str = "no-reply@vodichron.com"
    SMTP_FROM_NAME: str = "Vodichron HRMS"
    SMTP_USE_TLS: bool = True

    # Background jobs
    CRON_TIMEZONE: str = "Asia/Kolkata"
    SESSION_CLEANUP_ENABLED: bool = True
    SESSION_CLEANUP_INTERVAL_MINUTES: int = 30
    SESSION_RETENTION_DAYS: int = 90
    SESSION_DELETE_REVOKED: bool = False

    BACKUP_ENABLED: bool = False
    BACKUP_DIR: str = "./vodichron_data/backups"
    BACKUP_INTERVAL_MINUTES: int = 60
    BACKUP_RETENTION_DAYS: int = 30
    BACKUP_ENCRYPT: bool = False
    PG_DUMP_PATH: str = "pg_dump"

    TIMESHEET_SYNC_ENABLED: bool = True

    @computed_field
    @property
    def COOKIE_SECURE(self) -> bool:
        """Only set secure cookies in production."""
        return self.ENVIRONMENT.lower() == "production"

    @computed_field
    @property
    def EMAIL_ENABLED(self) -> bool:
        return bool(self.SMTP_HOST)

    def model_post_init(self, __context):
        """
        Validate configuration on startup. In production, fail hard if insecure defaults are detected.
        """
        # Fill DATABASE_URL if it wasn't provided explicitly
        if not self.DATABASE_URL:
            self.DATABASE_URL = (
                f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
                f"@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
            )

        is_prod = self.ENVIRONMENT.lower() == "production"
        errors = []
        db_url_password = _extract_password_from_database_url(self.DATABASE_URL)

        if self.SECRET_KEY in _INSECURE_SECRET_KEYS or len(self.SECRET_KEY) < 32:
            if is_prod:
                errors.append(
                    "SECRET_KEY is insecure. Generate a new key with: "
                    "python -c \"import secrets; print(secrets.token_urlsafe(32))\""
                )

        if is_prod and db_url_password in _INSECURE_DB_PASSWORDS:
            errors.append("Database password is insecure. Set POSTGRES_PASSWORD or DATABASE_URL.")

        if is_prod and not self.ENCRYPTION_KEY:
            errors.append(
                "ENCRYPTION_KEY is required in production. "
                "Generate with: python -c \"from cryptography.fernet import Fernet; print(Fernet.generate_key().decode())\""
            )

        if is_prod and (
            not self.ALLOWED_ORIGINS
            or "*" in self.ALLOWED_ORIGINS
            or set(self.ALLOWED_ORIGINS).issubset(_INSECURE_ALLOWED_ORIGINS_DEFAULTS)
        ):
            errors.append(
                "ALLOWED_ORIGINS must be set to your domain(s) in production (not localhost or '*')."
            )

        if is_prod and self.DEBUG:
            errors.append("DEBUG must be False in production.")

        if errors:
            error_msg = "Production configuration errors:\n" + "\n".join(f"  - {e}" for e in errors)
            raise ValueError(error_msg)

    @field_validator("ALLOWED_ORIGINS", mode="before")
    @classmethod
    def _split_origins(cls, value):
        if isinstance(value, str):
            return [v.strip() for v in value.split(",") if v.strip()]
        return value

settings = Settings()
