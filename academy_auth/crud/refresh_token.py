# academy_auth/crud/refresh_token.py
from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from academy_auth.crud.base import CRUDBase
from academy_auth.models.refresh_token import RefreshToken
from academy_auth.models.user import User


class TokenStore(CRUDBase[RefreshToken]):
    def find_by_token(self, db: Session, token: str) -> Optional[RefreshToken]:
        return db.execute(select(RefreshToken).where(RefreshToken.token == token)).scalar_one_or_none()

    def list_by_user(self, db: Session, user: User) -> List[RefreshToken]:
        return list(db.scalars(select(RefreshToken).where(RefreshToken.user_id == user.id)).all())

    def delete_by_user(self, db: Session, user: User) -> int:
        result = db.execute(delete(RefreshToken).where(RefreshToken.user_id == user.id))
        db.commit()
        return result.rowcount or 0


token_store = TokenStore(RefreshToken)
