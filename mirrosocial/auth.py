"""
Password login, session tokens and the FastAPI dependencies that resolve the caller.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from fastapi.responses import JSONResponse
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from passlib.context import CryptContext

from mirrosocial.config import get_settings
from mirrosocial.db import DbClient, SessionRecord, UserRecord
from mirrosocial.dependencies import get_db_client
from mirrosocial.schemas import (
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    UserResponse,
    ValidateUserResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth")

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")
security = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    try:
        return pwd_context.verify(plain, hashed)
    except ValueError:
        # Unrecognised hash format.
        return False


def _session_token(
    request: Request, credentials: Optional[HTTPAuthorizationCredentials]
) -> Optional[str]:
    # An explicit header wins over the browser cookie.
    if credentials:
        return credentials.credentials
    return request.cookies.get(get_settings().session_cookie_name) or None


def _active_session(db: DbClient, token: Optional[str]) -> Optional[SessionRecord]:
    if not token:
        return None
    session = db.get_session(token)
    if session and session.is_expired():
        db.delete_session(token)
        return None
    return session


def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: DbClient = Depends(get_db_client),
) -> UserRecord:
    session = _active_session(db, _session_token(request, credentials))
    if not session:
        raise HTTPException(status_code=401, detail="Unauthorized")
    user = db.get_user(session.user_id)
    if not user:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return user


def get_optional_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: DbClient = Depends(get_db_client),
) -> Optional[UserRecord]:
    session = _active_session(db, _session_token(request, credentials))
    if not session:
        return None
    return db.get_user(session.user_id)


@router.post("/register", response_model=UserResponse, status_code=201)
def register(payload: RegisterRequest, db: DbClient = Depends(get_db_client)):
    email = payload.email.strip().lower()
    if db.get_user_by_email(email):
        raise HTTPException(status_code=400, detail="Email already registered")
    user = db.create_user(
        username=payload.username.strip(),
        email=email,
        password_hash=hash_password(payload.password),
        nickname=payload.nickname,
    )
    logger.info("Registered user %s", user.id)
    return UserResponse(**user.as_dict())


@router.post("/login", response_model=LoginResponse)
def login(
    payload: LoginRequest,
    response: Response,
    db: DbClient = Depends(get_db_client),
):
    settings = get_settings()
    user = db.get_user_by_email(payload.email.strip())
    if not user or not verify_password(payload.password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid email or password")
    session = db.create_session(user.id, settings.session_ttl_seconds)
    response.set_cookie(
        settings.session_cookie_name,
        session.token,
        max_age=settings.session_ttl_seconds,
        httponly=True,
        samesite="lax",
        path="/",
    )
    return LoginResponse(
        token=session.token,
        expires_at=session.expires_at,
        user=UserResponse(**user.as_dict()),
    )


@router.post("/logout")
def logout(
    request: Request,
    response: Response,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: DbClient = Depends(get_db_client),
):
    token = _session_token(request, credentials)
    if token:
        db.delete_session(token)
    response.delete_cookie(get_settings().session_cookie_name, path="/")
    return {"message": "Logged out successfully"}


@router.get("/me", response_model=UserResponse)
def me(current_user: UserRecord = Depends(get_current_user)):
    return UserResponse(**current_user.as_dict())


@router.get("/validate-user", response_model=ValidateUserResponse)
def validate_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: DbClient = Depends(get_db_client),
):
    """Check that the session's user still exists (stale sessions after a reset)."""
    session = _active_session(db, _session_token(request, credentials))
    if not session:
        return JSONResponse(status_code=401, content={"valid": False, "reason": "No session"})
    if not db.get_user(session.user_id):
        logger.warning("Session %s points at missing user %s", session.token[:8], session.user_id)
        return JSONResponse(
            status_code=404,
            content={"valid": False, "reason": "User not found in database"},
        )
    return ValidateUserResponse(valid=True, user_id=session.user_id)
