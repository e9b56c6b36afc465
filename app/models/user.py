from typing import Annotated

from pydantic import BaseModel, EmailStr, Field

from app.models.utils import camel_config


class UserSignup(BaseModel):
    model_config = camel_config

    firstname: Annotated[str, Field(max_length=100)]
    lastname: Annotated[str, Field(max_length=100)]
    email: Annotated[EmailStr, Field(max_length=255)]
    password: Annotated[str, Field(min_length=1, max_length=72)]


class UserLogin(BaseModel):
    model_config = camel_config

    # Normalized the same way as at signup so lookups match the stored address
    email: Annotated[EmailStr, Field(max_length=255)]
    password: str


class UserPublic(BaseModel):
    """User as returned to clients, never carries the password hash"""

    model_config = camel_config

    id: str
    firstname: str | None = None
    lastname: str | None = None
    email: str


class Identity(BaseModel):
    """Authenticated caller resolved from a verified session token"""

    id: str
    email: str
