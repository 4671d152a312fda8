# academy_auth/db/init_db.py
from typing import Optional

import structlog
from sqlalchemy.orm import Session

from academy_auth.core.config import Settings, settings as default_settings
from academy_auth.core.security_password import hash_password
from academy_auth.crud.user import user_store
from academy_auth.models.user import Role, User, UserStatus

logger = structlog.get_logger(__name__)


def init_db(db: Session, config: Optional[Settings] = None) -> Optional[User]:
    """Seed an ACTIVE admin so a fresh install has someone who can log in."""
    config = config or default_settings
    if not config.SEED_ADMIN_EMAIL or not config.SEED_ADMIN_PASSWORD:
        return None

    email = config.SEED_ADMIN_EMAIL.strip().lower()
    admin = user_store.find_by_tenant_and_email(db, config.SEED_TENANT_ID, email)
    if not admin:
        admin = user_store.save(db, User(
            tenant_id=config.SEED_TENANT_ID,
            name="Admin",
            email=email,
            hashed_password=hash_password(config.SEED_ADMIN_PASSWORD),
            role=Role.ADMIN,
            status=UserStatus.PENDING_APPROVAL,
        ))
        logger.info("seed_admin_created", user_id=admin.id, tenant_id=admin.tenant_id)
    if admin.status != UserStatus.ACTIVE:
        admin = user_store.set_status(db, admin, UserStatus.ACTIVE)
    return admin
