# academy_auth/api/v1/auth.py
from __future__ import annotations
from typing import Optional

from fastapi import APIRouter, Depends, Query
import structlog

from academy_auth.api.deps import get_account_service, get_optional_principal, get_session_manager
from academy_auth.core.tokens import TokenClaims
from academy_auth.schemas.auth import AuthResponse, LoginRequest, MessageResponse, RegisterRequest
from academy_auth.services.accounts import AccountService
from academy_auth.services.sessions import SessionManager

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.post("/register", response_model=MessageResponse)
def register(body: RegisterRequest, accounts: AccountService = Depends(get_account_service)):
    logger.info("register_requested", tenant_id=body.tenant_id)
    message = accounts.register(
        name=body.name,
        email=body.email,
        raw_password=body.password,
        role=body.role,
        tenant_id=body.tenant_id,
        academy_id=body.academy_id,
        phone_number=body.phone_number,
    )
    return MessageResponse(message=message)


@router.post("/login", response_model=AuthResponse)
def login(body: LoginRequest, sessions: SessionManager = Depends(get_session_manager)):
    return sessions.login(body.email, body.password, body.tenant_id)


@router.post("/refresh", response_model=AuthResponse)
def refresh(
    refresh_token: str = Query(..., alias="refreshToken"),
    sessions: SessionManager = Depends(get_session_manager),
):
    return sessions.refresh(refresh_token)


@router.post("/logout", response_model=MessageResponse)
def logout(
    principal: Optional[TokenClaims] = Depends(get_optional_principal),
    sessions: SessionManager = Depends(get_session_manager),
):
    sessions.logout(principal)
    return MessageResponse(message="Logout successful")


@router.get("/validate", response_model=bool)
def validate(token: str = Query(...), sessions: SessionManager = Depends(get_session_manager)):
    return sessions.validate(token)
