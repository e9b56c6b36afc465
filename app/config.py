"""
Stayhub runtime configuration.

Everything is read from environment variables once at startup and frozen
into a Settings object that lives on the application context.
"""

import os
from dataclasses import dataclass, field
from typing import List


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def cors_origins_from_env() -> List[str]:
    origins = os.getenv("CORS_ORIGINS", "http://localhost:5173")
    return [o.strip() for o in origins.split(",") if o.strip()]


@dataclass(frozen=True)
class Settings:
    jwt_secret: str
    session_ttl_seconds: int = 7 * 24 * 3600
    cookie_name: str = "token"
    cookie_secure: bool = False
    cors_origins: List[str] = field(default_factory=lambda: ["http://localhost:5173"])
    bcrypt_rounds: int = 10

    bucket_name: str = "stayhub-place-photos"
    max_upload_bytes: int = 5_000_000
    max_upload_files: int = 50
    download_timeout_seconds: int = 15

    default_page_size: int = 20
    max_page_size: int = 100

    @classmethod
    def from_env(cls) -> "Settings":
        jwt_secret = os.getenv("JWT_SECRET")
        if not jwt_secret:
            raise ValueError("Missing required JWT_SECRET environment variable")

        return cls(
            jwt_secret=jwt_secret,
            session_ttl_seconds=int(os.getenv("SESSION_TTL_SECONDS", str(7 * 24 * 3600))),
            cookie_secure=_env_bool("COOKIE_SECURE", False),
            cors_origins=cors_origins_from_env(),
            bcrypt_rounds=int(os.getenv("BCRYPT_ROUNDS", "10")),
            bucket_name=os.getenv("GOOGLE_CLOUD_STORAGE_BUCKET", "stayhub-place-photos"),
            max_upload_bytes=int(os.getenv("MAX_UPLOAD_BYTES", "5000000")),
            download_timeout_seconds=int(os.getenv("DOWNLOAD_TIMEOUT_SECONDS", "15")),
        )
