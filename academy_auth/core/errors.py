# academy_auth/core/errors.py
from __future__ import annotations


class AuthError(Exception):
    """Base for every rejected auth operation.

    ``code`` is stable and meant for clients; ``status_code`` is only the
    suggested HTTP mapping used by the API layer.
    """

    code = "AUTH_ERROR"
    status_code = 400
    default_message = "Authentication error."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class DuplicateAccount(AuthError):
    code = "DUPLICATE_ACCOUNT"
    status_code = 409
    default_message = "Email already registered."


class InvalidCredentials(AuthError):
    code = "INVALID_CREDENTIALS"
    status_code = 401
    default_message = "Invalid email or password."


class AccountNotActive(AuthError):
    code = "ACCOUNT_NOT_ACTIVE"
    status_code = 403
    default_message = "Account not approved yet."


class InvalidToken(AuthError):
    code = "INVALID_TOKEN"
    status_code = 401
    default_message = "Invalid refresh token."


class TokenNotFound(AuthError):
    code = "TOKEN_NOT_FOUND"
    status_code = 401
    default_message = "Refresh token not found."


class TokenExpired(AuthError):
    code = "TOKEN_EXPIRED"
    status_code = 401
    default_message = "Refresh token expired."
