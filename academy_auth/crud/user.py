# academy_auth/crud/user.py
from typing import Optional

from sqlalchemy import exists, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from academy_auth.core.errors import DuplicateAccount
from academy_auth.crud.base import CRUDBase
from academy_auth.models.user import User, UserStatus

_EMAIL_CONSTRAINTS = ("uq_users_email", "uq_users_tenant_email")


def _is_email_conflict(exc: IntegrityError) -> bool:
    orig = getattr(exc, "orig", None)
    name = getattr(getattr(orig, "diag", None), "constraint_name", None)
    if name:
        return name in _EMAIL_CONSTRAINTS
    text = str(orig or exc)
    if any(c in text for c in _EMAIL_CONSTRAINTS):
        return True
    # sqlite reports the columns, not the constraint name
    return "UNIQUE constraint failed" in text and "users.email" in text


class CredentialStore(CRUDBase[User]):
    def exists_by_email(self, db: Session, email: str) -> bool:
        return bool(db.scalar(select(exists().where(User.email == email))))

    def exists_by_tenant_and_email(self, db: Session, tenant_id: str, email: str) -> bool:
        return bool(db.scalar(select(exists().where(User.tenant_id == tenant_id, User.email == email))))

    def find_by_email(self, db: Session, email: str) -> Optional[User]:
        return db.execute(select(User).where(User.email == email)).scalar_one_or_none()

    def find_by_tenant_and_email(self, db: Session, tenant_id: str, email: str) -> Optional[User]:
        return db.execute(
            select(User).where(User.tenant_id == tenant_id, User.email == email)
        ).scalar_one_or_none()

    def save(self, db: Session, obj: User) -> User:
        # the unique constraints are the real guard; a lost race lands here
        try:
            return super().save(db, obj)
        except IntegrityError as exc:
            db.rollback()
            if _is_email_conflict(exc):
                raise DuplicateAccount("Email already exists in this tenant") from exc
            raise

    def update_password_hash(self, db: Session, user: User, hashed: str) -> User:
        user.hashed_password = hashed
        return super().save(db, user)

    def set_status(self, db: Session, user: User, status: UserStatus) -> User:
        user.status = status
        return super().save(db, user)


user_store = CredentialStore(User)
