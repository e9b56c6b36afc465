"""
Account and session endpoints: signup, login, profile, logout.
"""
import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from app.context import get_context
from app.middleware.auth import clear_session_cookie, resolve_identity, set_session_cookie
from app.middleware.rate_limit import limiter
from app.models.user import UserLogin, UserSignup
from app.services import auth_service

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)

router = APIRouter(tags=["auth"])


@router.post("/signup")
@limiter.limit("5/hour")
async def signup(request: Request, payload: UserSignup):
    ctx = get_context(request)
    user = await auth_service.signup(ctx, payload)
    return user


@router.post("/login")
@limiter.limit("20/minute")
async def login(request: Request, payload: UserLogin):
    ctx = get_context(request)
    user, token = await auth_service.login(ctx, payload)

    response = JSONResponse(content=user.model_dump(by_alias=True))
    set_session_cookie(response, token, ctx.settings)
    return response


@router.get("/profile")
@limiter.limit("100/minute")
async def profile(request: Request):
    """
    Current user's profile.
    null for anonymous callers, 401 when the session cookie is invalid.
    """
    ctx = get_context(request)
    identity = resolve_identity(request)
    return await auth_service.get_profile(ctx, identity)


@router.post("/logout")
async def logout(request: Request):
    ctx = get_context(request)
    response = JSONResponse(content=True)
    clear_session_cookie(response, ctx.settings)
    return response
