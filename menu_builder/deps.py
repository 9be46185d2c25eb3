# menu_builder/deps.py
from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any, Dict, Optional

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from menu_builder.core.config import AuthSettings, UPLOADS_DIR
from menu_builder.core.database import get_db
from menu_builder.core.errors import Unauthorized
from menu_builder.core.request_context import bind_identity
from menu_builder.models.user import User
from menu_builder.services.image_storage import LocalImageStorage
from menu_builder.services.qr_codes import QRCodeRenderer
from menu_builder.services.tokens import TokenIssuer, user_id_from_claims

# Swagger "Authorize" (OAuth2 password flow) posts to this endpoint
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/token", auto_error=False)

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_token_issuer() -> TokenIssuer:
    return TokenIssuer(AuthSettings.from_env())


@lru_cache(maxsize=1)
def get_qr_renderer() -> QRCodeRenderer:
    return QRCodeRenderer()


@lru_cache(maxsize=1)
def get_image_storage() -> LocalImageStorage:
    return LocalImageStorage(UPLOADS_DIR)


def get_token_claims(
    token: Optional[str] = Depends(oauth2_scheme),
    tokens: TokenIssuer = Depends(get_token_issuer),
) -> Dict[str, Any]:
    if not token:
        raise Unauthorized("Access token required")
    return tokens.verify(token)


def load_token_user(
    claims: Dict[str, Any] = Depends(get_token_claims),
    db: Session = Depends(get_db),
) -> User:
    """Resolve the token to a stored user.

    Ownership decisions read the database, so claims issued before a company
    was created still authorize its owner.
    """
    user_id = user_id_from_claims(claims)
    user = db.get(User, user_id)
    if user is None:
        logger.info("token for unknown user_id=%s", user_id)
        raise Unauthorized("Invalid or expired token")
    return user


async def get_current_user(request: Request, user: User = Depends(load_token_user)) -> User:
    # async so the identity lands in the request's context, not a worker copy
    request.state.user = user
    bind_identity(user.id, user.company_id)
    return user


def resolve_public_base_url(request: Request) -> str:
    forwarded_proto = request.headers.get("x-forwarded-proto")
    forwarded_host = request.headers.get("x-forwarded-host")

    if forwarded_host:
        scheme = forwarded_proto or request.url.scheme
        return f"{scheme}://{forwarded_host}"

    return str(request.base_url).rstrip("/")
