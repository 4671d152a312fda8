# academy_auth/models/__init__.py
# Carrega módulos para registrar tabelas no metadata:
from academy_auth.models.user import Role, User, UserStatus  # noqa: F401
from academy_auth.models.refresh_token import RefreshToken  # noqa: F401

__all__ = ["RefreshToken", "Role", "User", "UserStatus"]
