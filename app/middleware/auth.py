import time
from typing import Optional

import jwt
from fastapi import Request, Response

from app.config import Settings
from app.context import get_context
from app.models.user import Identity
from app.services.errors import AuthError

JWT_ALGORITHM = "HS256"


def issue_token(user: dict, settings: Settings) -> str:
    """Sign a session token carrying the user's email and id"""
    now = int(time.time())
    payload = {
        "email": user["email"],
        "id": str(user["id"]),
        "iat": now,
        "exp": now + settings.session_ttl_seconds,
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=JWT_ALGORITHM)


def verify_token(token: Optional[str], secret: str) -> Identity:
    """
    Verify a session token and return the identity it carries.
    Raises AuthError if the token is missing, malformed, badly signed or expired.
    """
    if not token:
        raise AuthError("Missing session token")

    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=[JWT_ALGORITHM],
            options={"require": ["exp", "id"]},
        )
    except jwt.ExpiredSignatureError:
        raise AuthError("Session expired")
    except jwt.InvalidTokenError:
        # Don't expose decoding details to the client
        raise AuthError("Invalid session token")

    if not payload.get("id") or not isinstance(payload.get("email"), str):
        raise AuthError("Invalid session token")

    return Identity(id=str(payload["id"]), email=payload["email"])


def resolve_identity(request: Request) -> Optional[Identity]:
    """
    Identity of the caller, or None for anonymous requests.
    A cookie that is present but invalid is an AuthError, not anonymous.
    """
    settings = get_context(request).settings
    token = request.cookies.get(settings.cookie_name)
    if not token:
        return None
    return verify_token(token, settings.jwt_secret)


def require_identity(request: Request) -> Identity:
    """Identity of the caller; raises AuthError when there is no valid session"""
    identity = resolve_identity(request)
    if identity is None:
        raise AuthError("Missing session token")
    return identity


def set_session_cookie(response: Response, token: str, settings: Settings) -> None:
    response.set_cookie(
        key=settings.cookie_name,
        value=token,
        max_age=settings.session_ttl_seconds,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
    )


def clear_session_cookie(response: Response, settings: Settings) -> None:
    response.delete_cookie(
        key=settings.cookie_name,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
    )
