# academy_auth/core/tokens.py
from __future__ import annotations

import enum
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import structlog
from jose import ExpiredSignatureError, JWTError, jwt
from pydantic import BaseModel, ValidationError

from academy_auth.core.config import Settings
from academy_auth.models.user import User

logger = structlog.get_logger(__name__)


class TokenType(str, enum.Enum):
    ACCESS = "access"
    REFRESH = "refresh"


class TokenClaims(BaseModel):
    sub: int  # user id
    type: TokenType
    tenant_id: str
    academy_id: Optional[int] = None
    role: Optional[str] = None
    jti: str
    iat: int
    exp: int


@dataclass(frozen=True)
class TokenVerification:
    valid: bool
    claims: Optional[TokenClaims] = None


INVALID = TokenVerification(valid=False)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class TokenCodec:
    """Signs and verifies access/refresh JWTs.

    Access and refresh tokens use different keys and carry a ``type`` claim,
    so one can never be accepted as the other. ``verify`` never raises on bad
    input; every rejection collapses into the same invalid result.
    """

    def __init__(self, config: Settings):
        self._config = config

    def _key(self, token_type: TokenType) -> str:
        if token_type is TokenType.REFRESH:
            return self._config.REFRESH_SECRET_KEY
        return self._config.SECRET_KEY

    def _encode(self, payload: Dict[str, Any], token_type: TokenType) -> str:
        return jwt.encode(payload, self._key(token_type), algorithm=self._config.ALGORITHM)

    def issue_access(self, user: User) -> str:
        now = _now()
        payload: Dict[str, Any] = {
            "type": TokenType.ACCESS.value,
            "sub": str(user.id),
            "role": user.role.value,
            "tenant_id": user.tenant_id,
            "academy_id": user.academy_id,
            "jti": uuid.uuid4().hex,
            "iat": int(now.timestamp()),
            "exp": int((now + timedelta(minutes=self._config.ACCESS_TOKEN_EXPIRE_MINUTES)).timestamp()),
        }
        return self._encode(payload, TokenType.ACCESS)

    def refresh_expiry(self, issued_at: datetime) -> datetime:
        """Whole-second expiry shared by the refresh JWT and its stored record."""
        exp = int((issued_at + timedelta(days=self._config.REFRESH_TOKEN_EXPIRE_DAYS)).timestamp())
        return datetime.fromtimestamp(exp, timezone.utc)

    def issue_refresh(self, user: User, issued_at: Optional[datetime] = None) -> str:
        now = issued_at or _now()
        payload: Dict[str, Any] = {
            "type": TokenType.REFRESH.value,
            "sub": str(user.id),
            "tenant_id": user.tenant_id,
            "jti": uuid.uuid4().hex,
            "iat": int(now.timestamp()),
            "exp": int(self.refresh_expiry(now).timestamp()),
        }
        return self._encode(payload, TokenType.REFRESH)

    def verify(self, token: Optional[str], token_type: TokenType = TokenType.ACCESS) -> TokenVerification:
        if not token or not isinstance(token, str):
            logger.debug("token_rejected", reason="empty")
            return INVALID
        leeway = self._config.REFRESH_TOKEN_LEEWAY_SECONDS if token_type is TokenType.REFRESH else 0
        try:
            payload = jwt.decode(
                token, self._key(token_type), algorithms=[self._config.ALGORITHM], options={"leeway": leeway},
            )
        except ExpiredSignatureError:
            logger.debug("token_rejected", reason="expired")
            return INVALID
        except JWTError:
            logger.debug("token_rejected", reason="signature_or_malformed")
            return INVALID
        if not isinstance(payload, dict) or payload.get("type") != token_type.value:
            logger.debug("token_rejected", reason="wrong_type")
            return INVALID
        try:
            claims = TokenClaims.model_validate(payload)
        except ValidationError:
            logger.debug("token_rejected", reason="missing_claims")
            return INVALID
        return TokenVerification(valid=True, claims=claims)
