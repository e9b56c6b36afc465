import logging
from typing import Optional

import bcrypt

from app.middleware.auth import issue_token
from app.models.user import Identity, UserLogin, UserPublic, UserSignup
from app.services.errors import AuthError, IncorrectPassword, UserNotFound

logger = logging.getLogger(__name__)


def hash_password(password: str, rounds: int = 10) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Constant-time check of a plaintext password against a stored bcrypt hash"""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


def to_public(user: dict) -> UserPublic:
    return UserPublic(
        id=user["id"],
        firstname=user.get("firstname"),
        lastname=user.get("lastname"),
        email=user["email"],
    )


async def signup(ctx, payload: UserSignup) -> UserPublic:
    user = await ctx.db.insert_user(
        {
            "firstname": payload.firstname,
            "lastname": payload.lastname,
            "email": payload.email,
            "password_hash": hash_password(payload.password, ctx.settings.bcrypt_rounds),
        }
    )
    logger.info(f"New user signed up: {user['id']}")
    return to_public(user)


async def login(ctx, payload: UserLogin) -> tuple[UserPublic, str]:
    user = await ctx.db.find_user_by_email(payload.email)
    if not user:
        raise UserNotFound()

    if not verify_password(payload.password, user["password_hash"]):
        logger.info(f"Incorrect password for user {user['id']}")
        raise IncorrectPassword()

    token = issue_token(user, ctx.settings)
    logger.info(f"User logged in: {user['id']}")
    return to_public(user), token


async def get_profile(ctx, identity: Optional[Identity]) -> Optional[UserPublic]:
    if identity is None:
        return None

    user = await ctx.db.find_user_by_id(identity.id)
    if not user:
        # Token is validly signed but the account behind it is gone
        raise AuthError("Unauthorized")
    return to_public(user)
