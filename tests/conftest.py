import os

# keep the app module from touching a real database or running migrations
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("RUN_MIGRATIONS_ON_STARTUP", "false")
os.environ.setdefault("LOG_JSON", "false")

from typing import Any, Dict, List, Tuple

import pytest
from passlib.context import CryptContext
from sqlalchemy.orm import sessionmaker

from academy_auth.core.config import Settings
from academy_auth.core.security_password import PasswordHasher
from academy_auth.core.tokens import TokenCodec
from academy_auth.crud.user import user_store
from academy_auth.db.base import Base
from academy_auth.db.session import build_engine
from academy_auth.models.user import Role, UserStatus
import academy_auth.models  # noqa: F401
from academy_auth.services.accounts import AccountService
from academy_auth.services.events import UserEventEmitter
from academy_auth.services.sessions import SessionManager


class RecordingPublisher:
    """Captures published events; can be told to blow up."""

    def __init__(self):
        self.published: List[Tuple[str, Dict[str, Any]]] = []
        self.fail = False

    def publish(self, topic: str, payload: Dict[str, Any]) -> None:
        if self.fail:
            raise ConnectionError("broker unavailable")
        self.published.append((topic, payload))

    def of_type(self, event_type: str) -> List[Dict[str, Any]]:
        return [p for _, p in self.published if p["eventType"] == event_type]


@pytest.fixture
def settings():
    """Create test settings."""
    return Settings(
        DATABASE_URL="sqlite://",
        SECRET_KEY="test-access-secret-0123456789",
        REFRESH_SECRET_KEY="test-refresh-secret-9876543210",
        ACCESS_TOKEN_EXPIRE_MINUTES=15,
        REFRESH_TOKEN_EXPIRE_DAYS=7,
        EVENTS_TOPIC="user-events",
    )


@pytest.fixture
def engine(tmp_path):
    eng = build_engine(f"sqlite:///{tmp_path / 'auth.db'}")
    Base.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def hasher():
    # cheap argon2 parameters; sha256_crypt is there to exercise hash upgrades
    return PasswordHasher(CryptContext(
        schemes=["argon2", "sha256_crypt"],
        deprecated="auto",
        argon2__time_cost=1,
        argon2__memory_cost=1024,
        argon2__parallelism=1,
    ))


@pytest.fixture
def publisher():
    return RecordingPublisher()


@pytest.fixture
def emitter(publisher, settings):
    return UserEventEmitter(publisher, topic=settings.EVENTS_TOPIC)


@pytest.fixture
def codec(settings):
    return TokenCodec(settings)


@pytest.fixture
def accounts(db, hasher, emitter):
    return AccountService(db, hasher, emitter)


@pytest.fixture
def sessions(db, settings, accounts, codec, emitter):
    return SessionManager(db, settings, accounts, codec, emitter)


@pytest.fixture
def register_user(accounts, db):
    """Register a user and optionally promote it past approval."""

    def _register(
        email="ana@academy.com",
        password="Correct-Horse-1",
        tenant_id="tenant-a",
        academy_id=42,
        role=Role.STUDENT,
        active=True,
    ):
        accounts.register(
            name="Ana Souza",
            email=email,
            raw_password=password,
            role=role,
            tenant_id=tenant_id,
            academy_id=academy_id,
            phone_number="+55 11 99999-0000",
        )
        user = user_store.find_by_tenant_and_email(db, tenant_id, email.lower())
        if active:
            user = user_store.set_status(db, user, UserStatus.ACTIVE)
        return user

    return _register
