# academy_auth/api/deps.py
from functools import lru_cache
from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from academy_auth.core.config import Settings, settings
from academy_auth.core.security_password import PasswordHasher
from academy_auth.core.tokens import TokenClaims, TokenCodec, TokenType
from academy_auth.db.session import get_db
from academy_auth.services.accounts import AccountService
from academy_auth.services.events import EventPublisher, UserEventEmitter, build_event_publisher
from academy_auth.services.sessions import SessionManager


def get_settings() -> Settings:
    return settings


@lru_cache
def _codec_for(config: Settings) -> TokenCodec:
    return TokenCodec(config)


@lru_cache
def _publisher_for(config: Settings) -> EventPublisher:
    return build_event_publisher(config)


def get_token_codec(config: Settings = Depends(get_settings)) -> TokenCodec:
    return _codec_for(config)


def get_event_emitter(config: Settings = Depends(get_settings)) -> UserEventEmitter:
    return UserEventEmitter(_publisher_for(config), topic=config.EVENTS_TOPIC)


def get_password_hasher() -> PasswordHasher:
    return PasswordHasher()


def get_account_service(
    db: Session = Depends(get_db),
    hasher: PasswordHasher = Depends(get_password_hasher),
    events: UserEventEmitter = Depends(get_event_emitter),
) -> AccountService:
    return AccountService(db, hasher, events)


def get_session_manager(
    db: Session = Depends(get_db),
    config: Settings = Depends(get_settings),
    accounts: AccountService = Depends(get_account_service),
    codec: TokenCodec = Depends(get_token_codec),
    events: UserEventEmitter = Depends(get_event_emitter),
) -> SessionManager:
    return SessionManager(db, config, accounts, codec, events)


# ----------------------------------------------------------------------
# Lê o Bearer do header Authorization (sem usar OAuth2PasswordBearer)
# ----------------------------------------------------------------------
def get_bearer_token(authorization: Optional[str] = Header(None, alias="Authorization")) -> Optional[str]:
    if not authorization:
        return None
    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    return parts[1]


def get_optional_principal(
    token: Optional[str] = Depends(get_bearer_token),
    codec: TokenCodec = Depends(get_token_codec),
) -> Optional[TokenClaims]:
    """Claims of a valid access token, or None when the caller is anonymous."""
    verification = codec.verify(token, TokenType.ACCESS)
    return verification.claims if verification.valid else None
