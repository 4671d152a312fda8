# academy_auth/core/security_password.py
from __future__ import annotations
from typing import Tuple
from passlib.context import CryptContext

pwd_context = CryptContext(
    schemes=["argon2", "bcrypt_sha256", "bcrypt"],
    deprecated="auto",
    argon2__time_cost=2,
    argon2__memory_cost=19456,
    argon2__parallelism=1,
)


class PasswordHasher:
    """One-way salted hashing. Raw passwords never leave this object."""

    def __init__(self, context: CryptContext = pwd_context):
        self._context = context

    def hash(self, plain: str) -> str:
        return self._context.hash(plain)

    def verify(self, plain: str, stored_hash: str) -> bool:
        return self._context.verify(plain, stored_hash)

    def verify_and_update(self, plain: str, stored_hash: str) -> Tuple[bool, str | None]:
        ok = self._context.verify(plain, stored_hash)
        if not ok:
            return False, None
        if self._context.needs_update(stored_hash):
            return True, self._context.hash(plain)
        return True, None

    def dummy_verify(self) -> None:
        # burns the same time as a real verify when the account is unknown
        self._context.dummy_verify()


def hash_password(plain: str) -> str:
    return pwd_context.hash(plain)
