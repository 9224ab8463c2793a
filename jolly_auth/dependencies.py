"""Authentication dependencies and cookie helpers for FastAPI routes."""

from datetime import datetime, timedelta, timezone

from fastapi import Depends, HTTPException, Request, Response
from sqlalchemy.orm import Session

from jolly_auth.config import get_settings
from jolly_auth.database import get_db
from jolly_auth.models.user import User
from jolly_auth.services.jwt import get_jwt_service

AUTH_COOKIE_NAME = "token"
COOKIE_MAX_AGE = 24 * 60 * 60  # 1 day


def get_token_from_request(request: Request) -> str | None:
    """Return the identity token from the Bearer header or the auth cookie."""
    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.startswith("Bearer "):
        return auth_header[7:]
    return request.cookies.get(AUTH_COOKIE_NAME)


def get_current_user(
    request: Request,
    db: Session = Depends(get_db),
) -> User:
    """Resolve the logged-in user from the identity token. Raises 401 if invalid."""
    token = get_token_from_request(request)
    if not token:
        raise HTTPException(status_code=401, detail="Not authorized, please login")

    payload = get_jwt_service().decode_token(token)
    if not payload or "id" not in payload:
        raise HTTPException(status_code=401, detail="Not authorized, please login")

    user = db.get(User, int(payload["id"]))
    if not user:
        raise HTTPException(status_code=401, detail="User not found")
    return user


def set_auth_cookie(response: Response, token: str) -> None:
    """Set the identity cookie for a cross-site frontend."""
    response.set_cookie(
        key=AUTH_COOKIE_NAME,
        value=token,
        path="/",
        httponly=True,
        samesite="none",
        secure=get_settings().COOKIE_SECURE,
        max_age=COOKIE_MAX_AGE,
        expires=datetime.now(timezone.utc) + timedelta(seconds=COOKIE_MAX_AGE),
    )


def clear_auth_cookie(response: Response) -> None:
    """Overwrite the identity cookie with an empty, already expired one."""
    response.delete_cookie(
        key=AUTH_COOKIE_NAME,
        path="/",
        httponly=True,
        samesite="none",
        secure=get_settings().COOKIE_SECURE,
    )
