# academy_auth/services/accounts.py
from __future__ import annotations

from typing import Optional

import structlog
from sqlalchemy.orm import Session

from academy_auth.core.errors import AccountNotActive, DuplicateAccount, InvalidCredentials
from academy_auth.core.security_password import PasswordHasher
from academy_auth.crud.user import CredentialStore, user_store
from academy_auth.models.user import Role, User, UserStatus
from academy_auth.services.events import UserEventEmitter, UserEventType

logger = structlog.get_logger(__name__)

REGISTRATION_ACK = "Registration successful. Waiting for approval."


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


class AccountService:
    """Registration and credential checks.

    New accounts start as PENDING_APPROVAL; only ACTIVE accounts may log in.
    Promotion happens elsewhere (see ``CredentialStore.set_status``).
    """

    def __init__(
        self,
        db: Session,
        hasher: PasswordHasher,
        events: UserEventEmitter,
        users: CredentialStore = user_store,
    ):
        self.db = db
        self.hasher = hasher
        self.events = events
        self.users = users

    def register(
        self,
        *,
        name: str,
        email: str,
        raw_password: str,
        role: Role,
        tenant_id: str,
        academy_id: Optional[int] = None,
        phone_number: Optional[str] = None,
    ) -> str:
        email = normalize_email(email)
        # fast path only; save() re-checks through the unique constraints
        if self.users.exists_by_email(self.db, email):
            raise DuplicateAccount("Email already exists")
        if self.users.exists_by_tenant_and_email(self.db, tenant_id, email):
            raise DuplicateAccount("Email already exists in this tenant")

        user = User(
            name=name,
            email=email,
            hashed_password=self.hasher.hash(raw_password),
            role=Role(role),
            status=UserStatus.PENDING_APPROVAL,
            tenant_id=tenant_id,
            academy_id=academy_id,
            phone_number=phone_number,
        )
        user = self.users.save(self.db, user)
        logger.info("user_registered", user_id=user.id, tenant_id=tenant_id)

        self.events.emit(UserEventType.USER_REGISTERED, user, role=user.role.value)
        return REGISTRATION_ACK

    def authenticate(self, email: str, raw_password: str, tenant_id: Optional[str] = None) -> User:
        email = normalize_email(email)
        if tenant_id:
            user = self.users.find_by_tenant_and_email(self.db, tenant_id, email)
        else:
            user = self.users.find_by_email(self.db, email)

        if user is None:
            self.hasher.dummy_verify()
            raise InvalidCredentials()

        ok, new_hash = self.hasher.verify_and_update(raw_password, user.hashed_password)
        if not ok:
            raise InvalidCredentials()
        if new_hash:
            self.users.update_password_hash(self.db, user, new_hash)
            logger.info("password_hash_upgraded", user_id=user.id)

        if not user.is_active:
            logger.info("login_blocked", user_id=user.id, status=user.status.value)
            raise AccountNotActive()
        return user
