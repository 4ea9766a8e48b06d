"""Auth API — register, login, refresh, logout, me, change-password.

Learn: Two tokens, two transports:
- The ACCESS token goes back in the JSON body; the client sends it as
  `Authorization: Bearer ...` on every call.
- The REFRESH token goes in an HttpOnly cookie, so page JavaScript can
  never read it. SameSite=strict keeps other sites from riding on it;
  Secure is set in production only (local dev runs over plain HTTP).

Every successful login and refresh issues a brand new pair and rewrites
the cookie. Login failures are a single generic 401 whatever the cause.
"""

import uuid

import structlog
from fastapi import APIRouter, Depends, Request, Response
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from inkwell.auth.credentials import CredentialValidator
from inkwell.auth.dependencies import (
    CurrentUser,
    get_current_user,
    get_token_issuer,
    get_token_rotator,
)
from inkwell.auth.jwt import TokenError, TokenIssuer, TokenPair, TokenRotator
from inkwell.auth.password import needs_rehash
from inkwell.config import settings
from inkwell.db.engine import get_db
from inkwell.errors import NotFoundError, UnauthorizedError
from inkwell.schemas.user import PASSWORD_MAX_LEN, PASSWORD_MIN_LEN, UserCreate, UserRead
from inkwell.services.user_service import UserService

logger = structlog.get_logger()

router = APIRouter(prefix="/auth")


# ─── Schemas ─────────────────────────────────────────────


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class ChangePasswordRequest(BaseModel):
    old_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class MessageResponse(BaseModel):
    message: str


class MeResponse(BaseModel):
    id: str
    email: str
    role: str


# ─── Cookie helpers ──────────────────────────────────────


def _set_refresh_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.refresh_cookie_name,
        value=token,
        max_age=settings.refresh_cookie_max_age,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="strict",
    )


def _clear_refresh_cookie(response: Response) -> None:
    response.delete_cookie(
        key=settings.refresh_cookie_name,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="strict",
    )


def _token_response(response: Response, pair: TokenPair) -> TokenResponse:
    _set_refresh_cookie(response, pair.refresh_token)
    return TokenResponse(access_token=pair.access_token)


# ─── Register ────────────────────────────────────────────


@router.post("/register", response_model=UserRead, status_code=201)
async def register(body: UserCreate, db: AsyncSession = Depends(get_db)):
    """Create a new account. New accounts always get the `user` role."""
    user = await UserService(db).create(
        first_name=body.first_name,
        last_name=body.last_name,
        email=body.email,
        password=body.password,
    )
    logger.info("auth.registered", user_id=str(user.id))
    return user


# ─── Login ───────────────────────────────────────────────


@router.post("/login", response_model=TokenResponse)
async def login(
    body: LoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
    issuer: TokenIssuer = Depends(get_token_issuer),
):
    """Email + password → access token (body) and refresh token (cookie)."""
    user = await CredentialValidator(db).validate(body.email, body.password)
    if user is None:
        logger.info("auth.login_failed")
        raise UnauthorizedError("Invalid credentials")

    # Hashes made with an older cost factor get upgraded while we have the password
    if needs_rehash(user.password_hash):
        await UserService(db).upgrade_hash(user, body.password)

    pair = await issuer.issue(str(user.id), user.email, user.role)
    logger.info("auth.login", user_id=str(user.id))
    return _token_response(response, pair)


# ─── Refresh ────────────────────────────────────────────


@router.post("/refresh", response_model=TokenResponse)
async def refresh(
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_db),
    rotator: TokenRotator = Depends(get_token_rotator),
):
    """Exchange the refresh cookie for a new token pair.

    The new pair carries the account's current email and role, so a
    demotion takes effect on the next refresh and a deleted account
    can't refresh at all.
    """
    token = request.cookies.get(settings.refresh_cookie_name)
    if not token:
        raise UnauthorizedError("Refresh token missing")

    async def current_claims(sub: str) -> tuple[str, str]:
        try:
            user = await UserService(db).get(uuid.UUID(sub))
        except (ValueError, NotFoundError):
            raise TokenError("User no longer exists")
        return user.email, user.role

    try:
        pair = await rotator.rotate(token, lookup=current_claims)
    except TokenError as e:
        logger.info("auth.refresh_rejected", reason=str(e))
        raise UnauthorizedError(str(e))

    return _token_response(response, pair)


# ─── Logout ─────────────────────────────────────────────


@router.post("/logout", response_model=MessageResponse)
async def logout(response: Response, user: CurrentUser = Depends(get_current_user)):
    """Clear the refresh cookie. The access token simply runs out."""
    _clear_refresh_cookie(response)
    logger.info("auth.logout", user_id=user.id)
    return MessageResponse(message="Logged out successfully")


# ─── Current user ───────────────────────────────────────


@router.get("/me", response_model=MeResponse)
async def get_me(user: CurrentUser = Depends(get_current_user)):
    """The caller's claims, straight from the access token."""
    return user.claims()


# ─── Change password ────────────────────────────────────


@router.post("/change-password", response_model=MessageResponse)
async def change_password(
    body: ChangePasswordRequest,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await UserService(db).change_password(user.user_id, body.old_password, body.new_password)
    return MessageResponse(message="Password changed successfully")
