# academy_auth/core/config.py
import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


def _default_database_url() -> str:
    url = os.getenv("DATABASE_URL")
    if url and url.strip():
        return url
    data_dir = os.path.abspath(os.getenv("DATA_DIR", "./data"))
    os.makedirs(data_dir, exist_ok=True)
    return f"sqlite:///{os.path.join(data_dir, 'auth.db')}"


class Settings(BaseModel):
    """Process configuration. Immutable once built; pass it explicitly."""

    model_config = {"frozen": True}

    DATABASE_URL: str = Field(default_factory=_default_database_url)

    # access and refresh tokens are signed with different keys
    SECRET_KEY: str = Field(default_factory=lambda: os.getenv("SECRET_KEY", "CHANGE_ME_SUPER_SECRET"))
    REFRESH_SECRET_KEY: str = Field(default_factory=lambda: os.getenv("REFRESH_SECRET_KEY", "CHANGE_ME_ANOTHER_SECRET"))
    ALGORITHM: str = Field(default_factory=lambda: os.getenv("JWT_ALGORITHM", "HS256"))
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(default_factory=lambda: int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "30")))
    REFRESH_TOKEN_EXPIRE_DAYS: int = Field(default_factory=lambda: int(os.getenv("REFRESH_TOKEN_EXPIRE_DAYS", "7")))
    # grace past the refresh JWT exp; within it the stored record decides expiry
    REFRESH_TOKEN_LEEWAY_SECONDS: int = Field(default_factory=lambda: int(os.getenv("REFRESH_TOKEN_LEEWAY_SECONDS", "86400")))

    EVENTS_TOPIC: str = Field(default_factory=lambda: os.getenv("EVENTS_TOPIC", "user-events"))
    KAFKA_BOOTSTRAP_SERVERS: Optional[str] = Field(default_factory=lambda: os.getenv("KAFKA_BOOTSTRAP_SERVERS") or None)
    KAFKA_MAX_BLOCK_MS: int = Field(default_factory=lambda: int(os.getenv("KAFKA_MAX_BLOCK_MS", "2000")))

    LOG_LEVEL: str = Field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    LOG_JSON: bool = Field(default_factory=lambda: _env_bool("LOG_JSON", "true"))

    RUN_MIGRATIONS_ON_STARTUP: bool = Field(default_factory=lambda: _env_bool("RUN_MIGRATIONS_ON_STARTUP", "true"))
    SEED_TENANT_ID: str = Field(default_factory=lambda: os.getenv("SEED_TENANT_ID", "demo"))
    SEED_ADMIN_EMAIL: Optional[str] = Field(default_factory=lambda: os.getenv("SEED_ADMIN_EMAIL") or None)
    SEED_ADMIN_PASSWORD: Optional[str] = Field(default_factory=lambda: os.getenv("SEED_ADMIN_PASSWORD") or None)


settings = Settings()
