"""
Centralised application settings loaded from environment / .env file.

Uses pydantic-settings so every value can be overridden via env vars
or the .env file at the project root.  A ``Settings`` instance is frozen:
it is built once by ``create_app`` and handed to every component through
``app.state.settings``.
"""

from __future__ import annotations

from pydantic import field_validator
from pydantic_settings import BaseSettings
from sqlalchemy.engine import URL

INSECURE_SECRET_KEY = "CHANGE-ME-TO-A-RANDOM-64-CHAR-HEX-STRING-IN-PRODUCTION"


class Settings(BaseSettings):
    # ── Project ──────────────────────────────────────────────────────
    PROJECT_NAME: str = "Restaurant App API"
    VERSION: str = "1.0.0"
    API_PREFIX: str = "/api"
    APP_ENV: str = "development"  # development | production

    # ── Server ───────────────────────────────────────────────────────
    SERVER_HOST: str = "localhost"
    SERVER_PORT: int = 8080

    # ── Database (async PostgreSQL via asyncpg) ─────────────────────
    # DATABASE_URL wins when set; otherwise the DSN is built from DB_*.
    DATABASE_URL: str | None = None
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432
    DB_USER: str = "postgres"
    DB_PASSWORD: str = "password"
    DB_NAME: str = "restaurantapp"
    DB_SSLMODE: str = "disable"

    # ── JWT ──────────────────────────────────────────────────────────
    SECRET_KEY: str = INSECURE_SECRET_KEY
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24
    PASSWORD_RESET_EXPIRE_MINUTES: int = 60

    # ── CORS ─────────────────────────────────────────────────────────
    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def _parse_cors(cls, v: object) -> list[str]:
        if isinstance(v, str):
            return [o.strip() for o in v.split(",") if o.strip()]
        return v  # type: ignore[return-value]

    # ── Logging ──────────────────────────────────────────────────────
    LOG_LEVEL: str = "INFO"

    # ── Default admin (seeded on first startup) ─────────────────────
    FIRST_ADMIN_EMAIL: str = "admin@restaurantapp.local"
    FIRST_ADMIN_PASSWORD: str = "changeme123"

    # ── Uploads ──────────────────────────────────────────────────────
    UPLOAD_DIR: str = "uploads"
    MAX_UPLOAD_SIZE: int = 5 * 1024 * 1024

    # ── Checkout pricing ─────────────────────────────────────────────
    DEFAULT_DELIVERY_FEE: float = 2.99
    FREE_DELIVERY_THRESHOLD: float = 35.0
    TAX_RATE: float = 0.08

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
        "extra": "ignore",
        "frozen": True,
    }

    @property
    def is_production(self) -> bool:
        return self.APP_ENV == "production"

    @property
    def uses_insecure_secret(self) -> bool:
        return self.SECRET_KEY == INSECURE_SECRET_KEY

    @property
    def database_url(self) -> str | URL:
        """SQLAlchemy URL for the async engine."""
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return URL.create(
            "postgresql+asyncpg",
            username=self.DB_USER,
            password=self.DB_PASSWORD,
            host=self.DB_HOST,
            port=self.DB_PORT,
            database=self.DB_NAME,
            query={"ssl": self.DB_SSLMODE},
        )
