# academy_auth/services/sessions.py
from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

import structlog
from sqlalchemy.orm import Session

from academy_auth.core.config import Settings
from academy_auth.core.errors import InvalidToken, TokenExpired, TokenNotFound
from academy_auth.core.tokens import TokenClaims, TokenCodec, TokenType
from academy_auth.crud.refresh_token import TokenStore, token_store
from academy_auth.crud.user import CredentialStore, user_store
from academy_auth.models.refresh_token import RefreshToken
from academy_auth.models.user import User
from academy_auth.schemas.auth import AuthResponse
from academy_auth.services.accounts import AccountService
from academy_auth.services.events import UserEventEmitter, UserEventType

logger = structlog.get_logger(__name__)


def _auth_response(user: User, access_token: str, refresh_token: str, message: str) -> AuthResponse:
    return AuthResponse(
        access_token=access_token,
        refresh_token=refresh_token,
        role=user.role.value,
        message=message,
        user_id=user.id,
        name=user.name,
        email=user.email,
        tenant_id=user.tenant_id,
        academy_id=user.academy_id,
    )


class SessionManager:
    """Login, refresh and logout on top of accounts, tokens and the token store.

    Every operation commits its store change before an event is emitted.
    Refresh does not rotate: the same refresh token is handed back until it
    expires or the user logs out.
    """

    def __init__(
        self,
        db: Session,
        config: Settings,
        accounts: AccountService,
        codec: TokenCodec,
        events: UserEventEmitter,
        tokens: TokenStore = token_store,
        users: CredentialStore = user_store,
    ):
        self.db = db
        self.config = config
        self.accounts = accounts
        self.codec = codec
        self.events = events
        self.tokens = tokens
        self.users = users

    def login(self, email: str, raw_password: str, tenant_id: Optional[str] = None) -> AuthResponse:
        user = self.accounts.authenticate(email, raw_password, tenant_id)

        issued_at = datetime.now(timezone.utc)
        access_token = self.codec.issue_access(user)
        refresh_token = self.codec.issue_refresh(user, issued_at=issued_at)
        # same instant as the JWT exp; past it, refresh finds the record and cleans it up
        record = RefreshToken(
            token=refresh_token,
            user_id=user.id,
            expiry_date=self.codec.refresh_expiry(issued_at),
        )
        self.tokens.save(self.db, record)
        logger.info("user_logged_in", user_id=user.id, tenant_id=user.tenant_id)

        self.events.emit(UserEventType.USER_LOGIN, user)
        return _auth_response(user, access_token, refresh_token, "Login successful")

    def refresh(self, refresh_token: str) -> AuthResponse:
        if not self.codec.verify(refresh_token, TokenType.REFRESH).valid:
            raise InvalidToken()

        record = self.tokens.find_by_token(self.db, refresh_token)
        if record is None:
            raise TokenNotFound()

        if record.is_expired():
            user_id = record.user_id
            self.tokens.delete(self.db, record)
            logger.info("refresh_token_expired", user_id=user_id)
            raise TokenExpired()

        user = record.user
        access_token = self.codec.issue_access(user)
        return _auth_response(user, access_token, refresh_token, "Token refreshed")

    def logout(self, principal: Optional[TokenClaims]) -> int:
        """Revoke every refresh token of ``principal``; no principal is a no-op."""
        if principal is None:
            return 0
        user = self.users.get(self.db, principal.sub)
        if user is None:
            return 0

        revoked = self.tokens.delete_by_user(self.db, user)
        logger.info("user_logged_out", user_id=user.id, revoked=revoked)

        self.events.emit(UserEventType.USER_LOGOUT, user)
        return revoked

    def validate(self, token: str) -> bool:
        # signature and expiry only; revoked refresh records are not consulted
        return self.codec.verify(token, TokenType.ACCESS).valid
