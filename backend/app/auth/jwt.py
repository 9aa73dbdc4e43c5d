"""Admin session token creation and decoding.

Token claims:
  - sub:       user ID
  - username:  admin username
  - type:      "session"
  - iat / exp: issue and expiry timestamps (expiry = settings.session_expire_hours)
"""

from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from app.config import settings

ALGORITHM = settings.jwt_algorithm


def create_session_token(
    user_id: str,
    username: str,
    expires_delta: timedelta | None = None,
) -> str:
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(hours=settings.session_expire_hours))
    payload = {
        "sub": user_id,
        "username": username,
        "type": "session",
        "iat": now,
        "exp": expire,
    }
    return jwt.encode(payload, settings.secret_key, algorithm=ALGORITHM)


def decode_token(token: str) -> dict:
    """Decode and validate a session token. Returns empty dict on failure."""
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[ALGORITHM])
    except JWTError:
        return {}
    if payload.get("type") != "session" or not payload.get("sub"):
        return {}
    return payload
