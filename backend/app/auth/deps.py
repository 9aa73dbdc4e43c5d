"""FastAPI dependencies for the admin session.

Dependencies:
  get_session_payload  → decoded session cookie claims, or None
  require_admin        → verified session claims (raises 401 otherwise)
  get_admin_db         → privileged DB session for admin routes

The browser keeps its own "logged in" flag for UI purposes only; the
cookie verified here is the sole authority for every admin write.
"""

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.jwt import decode_token
from app.config import settings
from app.database import get_db


def get_session_payload(request: Request) -> dict | None:
    token = request.cookies.get(settings.session_cookie_name)
    if not token:
        return None
    payload = decode_token(token)
    return payload or None


async def require_admin(request: Request) -> dict:
    """Return the verified session claims or raise 401.

    Missing, malformed, and expired cookies all produce the same error.
    """
    payload = get_session_payload(request)
    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    return payload


async def get_admin_db(
    _admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> AsyncSession:
    return db
