from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import JWTError, jwt

from menu_builder.core.config import AuthSettings
from menu_builder.core.errors import Unauthorized


class TokenIssuer:
    """Signs and verifies the stateless session tokens.

    Claims carry a snapshot of the identity at issue time:
    ``sub``/``user_id``, ``email``, ``display_name``, ``company_id`` and
    ``subscription_tier``. There is no revocation list, so a token stays valid
    until ``exp`` even after logout.
    """

    def __init__(self, settings: AuthSettings) -> None:
        self._settings = settings

    @property
    def settings(self) -> AuthSettings:
        return self._settings

    def issue_for(self, user, *, now: Optional[datetime] = None) -> str:
        return self.sign(
            {
                "sub": str(user.id),
                "user_id": user.id,
                "email": user.email,
                "display_name": user.display_name,
                "company_id": user.company_id,
                "subscription_tier": user.subscription_tier,
            },
            now=now,
        )

    def sign(self, claims: Dict[str, Any], *, now: Optional[datetime] = None) -> str:
        issued_at = now or datetime.now(timezone.utc)
        expires_at = issued_at + timedelta(minutes=self._settings.expire_minutes)
        payload = dict(claims)
        payload["iat"] = int(issued_at.timestamp())
        payload["exp"] = int(expires_at.timestamp())
        return jwt.encode(payload, self._settings.secret_key, algorithm=self._settings.algorithm)

    def verify(self, token: str) -> Dict[str, Any]:
        if not token:
            raise Unauthorized("Access token required")
        try:
            claims = jwt.decode(token, self._settings.secret_key, algorithms=[self._settings.algorithm])
        except JWTError as exc:
            raise Unauthorized("Invalid or expired token") from exc

        if _extract_user_id(claims) is None:
            raise Unauthorized("Invalid or expired token")
        return claims


def _extract_user_id(claims: Dict[str, Any]) -> Optional[int]:
    raw = claims.get("user_id", claims.get("sub"))
    if isinstance(raw, int):
        return raw
    if isinstance(raw, str) and raw.strip().isdigit():
        return int(raw.strip())
    return None


def user_id_from_claims(claims: Dict[str, Any]) -> int:
    user_id = _extract_user_id(claims)
    if user_id is None:
        raise Unauthorized("Invalid or expired token")
    return user_id
