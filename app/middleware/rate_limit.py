import os

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from app.middleware.auth import verify_token
from app.services.errors import AuthError

storage_uri = os.getenv("RATE_LIMIT_STORAGE_URI", "memory://")


def get_user_or_ip(request: Request) -> str:
    """
    Get unique identifier for rate limiting.
    Verify the session cookie and use the user id, or fallback to IP.
    """
    context = getattr(request.app.state, "context", None)
    if context is not None:
        token = request.cookies.get(context.settings.cookie_name)
        if token:
            try:
                identity = verify_token(token, context.settings.jwt_secret)
                return f"user:{identity.id}"
            except AuthError:
                pass  # Invalid token, fall through to IP-based limiting

    return f"ip:{get_remote_address(request)}"


# Universal limiter: uses user id for authenticated requests, IP for anonymous
limiter = Limiter(key_func=get_user_or_ip, storage_uri=storage_uri)


def custom_rate_limit_handler(request: Request, exc: RateLimitExceeded) -> Response:
    retry_seconds = 60

    # Extract time period from detail (e.g., "1 minute", "1 hour")
    if "minute" in str(exc.detail):
        retry_seconds = 60
    elif "hour" in str(exc.detail):
        retry_seconds = 3600
    elif "day" in str(exc.detail):
        retry_seconds = 86400
    elif "second" in str(exc.detail):
        retry_seconds = 1

    return JSONResponse(
        status_code=429,
        content={
            "error": "Rate limit exceeded",
            "message": f"Too many requests. Please try again in {retry_seconds} seconds.",
            "retry_after": retry_seconds,
        },
        headers={"Retry-After": str(retry_seconds)},
    )
