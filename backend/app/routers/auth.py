"""Admin session routes.

Route overview:
  POST /api/admin-login   — username + password → http-only session cookie
  POST /api/admin-logout  — clear the session cookie
  GET  /api/admin/me      — the identity behind the current cookie
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.deps import require_admin
from app.auth.jwt import create_session_token
from app.auth.password import verify_password
from app.config import settings
from app.database import get_db
from app.models.user import User
from app.schemas.auth import LoginRequest, SessionOut
from app.schemas.storefront import OkResponse

logger = logging.getLogger("signshop.auth")

router = APIRouter()


def _set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=settings.session_expire_hours * 3600,
        httponly=True,
        samesite="lax",
        secure=settings.environment == "production",
        path="/",
    )


@router.post("/api/admin-login", response_model=SessionOut)
async def admin_login(
    body: LoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
):
    # Unknown user and wrong password answer identically
    result = await db.execute(select(User).where(User.username == body.username.strip()))
    user = result.scalar_one_or_none()
    if not user or not body.password or not verify_password(body.password, user.password_hash):
        logger.warning("Failed admin login for %r", body.username)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
        )

    _set_session_cookie(response, create_session_token(user.id, user.username))
    logger.info("Admin %s logged in", user.username)
    return SessionOut(username=user.username, user_id=user.id)


@router.post("/api/admin-logout", response_model=OkResponse)
async def admin_logout(response: Response):
    response.delete_cookie(settings.session_cookie_name, path="/")
    return OkResponse()


@router.get("/api/admin/me", response_model=SessionOut)
async def whoami(session: dict = Depends(require_admin)):
    return SessionOut(username=session.get("username", ""), user_id=session["sub"])
