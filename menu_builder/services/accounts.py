from __future__ import annotations

import logging
from datetime import datetime, timezone
from functools import lru_cache

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from menu_builder.core.errors import Conflict, Unauthorized
from menu_builder.models.company import Company
from menu_builder.models.user import FREE_TIER, User
from menu_builder.services.passwords import hash_password, verify_password
from menu_builder.services.tokens import TokenIssuer

logger = logging.getLogger(__name__)
AUTH_PREFIX = "[AUTH]"

INVALID_CREDENTIALS = "Invalid email or password"


@lru_cache(maxsize=1)
def _dummy_password_hash() -> str:
    return hash_password("menu-builder-unknown-user")


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def get_user_by_email(db: Session, email: str) -> User | None:
    return db.query(User).filter(User.email == normalize_email(email)).first()


def register_user(
    db: Session,
    tokens: TokenIssuer,
    *,
    email: str,
    password: str,
    display_name: str,
) -> tuple[User, str]:
    email = normalize_email(email)
    if get_user_by_email(db, email):
        raise Conflict("User with this email already exists")

    user = User(
        email=email,
        password_hash=hash_password(password),
        display_name=display_name.strip(),
        company_id=None,
        is_first_login=True,
        subscription_tier=FREE_TIER,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as exc:
        # lost a race against a concurrent registration of the same email
        db.rollback()
        raise Conflict("User with this email already exists") from exc
    db.refresh(user)

    logger.info("%s registered user_id=%s", AUTH_PREFIX, user.id)
    return user, tokens.issue_for(user)


def authenticate_user(db: Session, tokens: TokenIssuer, *, email: str, password: str) -> tuple[User, str]:
    user = get_user_by_email(db, email)
    # Same error for unknown email and wrong password; hash anyway so timing matches
    password_hash = user.password_hash if user else _dummy_password_hash()
    if not verify_password(password, password_hash) or user is None:
        logger.info("%s login rejected", AUTH_PREFIX)
        raise Unauthorized(INVALID_CREDENTIALS)

    user.updated_at = datetime.now(timezone.utc)
    db.commit()
    db.refresh(user)

    logger.info("%s login user_id=%s", AUTH_PREFIX, user.id)
    return user, tokens.issue_for(user)


def company_name_for(db: Session, user: User) -> str | None:
    row = db.query(Company.name).filter(Company.owner_id == user.id).first()
    return row[0] if row else None


def user_to_dict(db: Session, user: User) -> dict:
    return {
        "id": user.id,
        "email": user.email,
        "display_name": user.display_name,
        "company_id": user.company_id,
        "company_name": company_name_for(db, user),
        "is_first_login": bool(user.is_first_login),
        "subscription_tier": user.subscription_tier,
    }
