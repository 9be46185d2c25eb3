from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

# Loads .env from the project root
load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./menu_builder.db")
ENV = os.getenv("ENV", "dev")
ENV_NORMALIZED = ENV.lower()
IS_DEV = ENV_NORMALIZED in {"dev", "development", "local"}
IS_PROD = ENV_NORMALIZED in {"prod", "production"}

# Public menu links point at the front end, not at this API
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000").strip().rstrip("/")

# CORS
_cors_env = os.getenv("CORS_ORIGINS", "")
CORS_ORIGINS = [origin.strip() for origin in _cors_env.split(",") if origin.strip() and origin.strip() != "*"]

if not CORS_ORIGINS and IS_DEV:
    CORS_ORIGINS = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

# Auth (JWT)
JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_EXPIRE_MINUTES = int(os.getenv("JWT_EXPIRE_MINUTES", str(7 * 24 * 60)))

# QR rendering
QR_RENDER_TIMEOUT_SECONDS = float(os.getenv("QR_RENDER_TIMEOUT_SECONDS", "5"))

# Uploads
UPLOADS_DIR = os.getenv("UPLOADS_DIR", "uploads")
MAX_UPLOAD_SIZE_BYTES = int(os.getenv("MAX_UPLOAD_SIZE_BYTES", str(5 * 1024 * 1024)))

# 0 disables the limit
FREE_TIER_MENU_ITEM_LIMIT = int(os.getenv("FREE_TIER_MENU_ITEM_LIMIT", "0"))

_DEV_JWT_SECRET = "dev-only-menu-builder-secret"


@dataclass(frozen=True)
class AuthSettings:
    secret_key: str
    algorithm: str = "HS256"
    expire_minutes: int = 7 * 24 * 60

    @classmethod
    def from_env(cls) -> "AuthSettings":
        secret = JWT_SECRET_KEY
        if not secret:
            if IS_PROD:
                raise RuntimeError("JWT_SECRET_KEY must be set in production")
            secret = _DEV_JWT_SECRET
        return cls(secret_key=secret, algorithm=JWT_ALGORITHM, expire_minutes=JWT_EXPIRE_MINUTES)
