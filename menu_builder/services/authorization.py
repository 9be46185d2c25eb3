from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import Session

from menu_builder.core.errors import Forbidden, NotFound
from menu_builder.models.company import Company
from menu_builder.models.menu_item import MenuItem

logger = logging.getLogger(__name__)

COMPANY = "company"
MENU_ITEM = "menu_item"

_LABELS = {
    COMPANY: "Company",
    MENU_ITEM: "Menu item",
}


@dataclass(frozen=True)
class ResourceRef:
    kind: str
    id: int

    @property
    def label(self) -> str:
        return _LABELS[self.kind]


def resolve_owner(db: Session, ref: ResourceRef) -> Optional[int]:
    """Walk the ownership chain and return the owning user id, or None if absent."""
    if ref.kind == COMPANY:
        row = db.query(Company.owner_id).filter(Company.id == ref.id).first()
    elif ref.kind == MENU_ITEM:
        row = (
            db.query(Company.owner_id)
            .join(MenuItem, MenuItem.company_id == Company.id)
            .filter(MenuItem.id == ref.id)
            .first()
        )
    else:
        raise ValueError(f"unknown resource kind: {ref.kind}")
    return row[0] if row else None


def assert_owner(db: Session, user_id: int, ref: ResourceRef) -> None:
    owner_id = resolve_owner(db, ref)
    if owner_id is None:
        raise NotFound(f"{ref.label} not found")
    if int(owner_id) != int(user_id):
        logger.warning(
            "Access denied (not_owner): user_id=%s resource=%s resource_id=%s",
            user_id,
            ref.kind,
            ref.id,
        )
        if ref.kind == COMPANY:
            raise Forbidden("Access denied. You can only manage your own company.")
        raise Forbidden("Access denied. You can only manage menu items from your own company.")


def ensure_company_owner(db: Session, user_id: int, company_id: int) -> None:
    assert_owner(db, user_id, ResourceRef(COMPANY, company_id))


def ensure_menu_item_owner(db: Session, user_id: int, menu_item_id: int) -> None:
    assert_owner(db, user_id, ResourceRef(MENU_ITEM, menu_item_id))
