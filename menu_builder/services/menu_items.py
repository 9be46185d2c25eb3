from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Mapping, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.orm import Session

from menu_builder.core.config import FREE_TIER_MENU_ITEM_LIMIT
from menu_builder.core.errors import Forbidden, NotFound
from menu_builder.models.company import Company
from menu_builder.models.menu_item import DEFAULT_CATEGORY, MenuItem
from menu_builder.models.user import FREE_TIER, User
from menu_builder.services.authorization import ensure_company_owner, ensure_menu_item_owner
from menu_builder.services.updates import MENU_ITEM_FIELDS, FieldUpdateSet

logger = logging.getLogger(__name__)
MENU_PREFIX = "[MENU_ITEM]"


def normalize_category(category: Optional[str]) -> str:
    value = (category or "").strip()
    return value or DEFAULT_CATEGORY


def price_to_number(price: Decimal | float | int | None) -> float | None:
    if price is None:
        return None
    return float(price)


def menu_item_to_dict(item: MenuItem) -> dict:
    return {
        "id": item.id,
        "company_id": item.company_id,
        "name": item.name,
        "price": price_to_number(item.price),
        "description": item.description,
        "category": normalize_category(item.category),
        "image_url": item.image_url,
        "available": bool(item.available),
        "created_at": item.created_at.isoformat() if item.created_at else None,
        "updated_at": item.updated_at.isoformat() if item.updated_at else None,
    }


def _owned_by(user_id: int):
    return select(Company.id).where(Company.owner_id == user_id)


def _enforce_plan_limit(db: Session, owner: User, company_id: int, limit: int) -> None:
    if limit <= 0 or owner.subscription_tier != FREE_TIER:
        return
    count = db.query(MenuItem).filter(MenuItem.company_id == company_id).count()
    if count >= limit:
        raise Forbidden(f"Free plan is limited to {limit} menu items. Upgrade to Pro to add more.")


def create_menu_item(
    db: Session,
    *,
    owner: User,
    company_id: int,
    name: str,
    price: Decimal,
    description: Optional[str] = None,
    category: Optional[str] = None,
    image_url: Optional[str] = None,
    available: bool = True,
    item_limit: int = FREE_TIER_MENU_ITEM_LIMIT,
) -> MenuItem:
    ensure_company_owner(db, owner.id, company_id)
    _enforce_plan_limit(db, owner, company_id, item_limit)

    item = MenuItem(
        company_id=company_id,
        name=name,
        price=price,
        description=description,
        category=normalize_category(category),
        image_url=image_url,
        available=available,
    )
    db.add(item)
    db.commit()
    db.refresh(item)

    logger.info("%s created item_id=%s company_id=%s", MENU_PREFIX, item.id, company_id)
    return item


def get_menu_item(db: Session, user_id: int, item_id: int) -> MenuItem:
    ensure_menu_item_owner(db, user_id, item_id)
    item = db.get(MenuItem, item_id)
    if item is None:
        raise NotFound("Menu item not found")
    return item


def list_menu_items(
    db: Session,
    user_id: int,
    company_id: int,
    *,
    category: Optional[str] = None,
    available: Optional[bool] = None,
) -> list[MenuItem]:
    ensure_company_owner(db, user_id, company_id)
    query = db.query(MenuItem).filter(MenuItem.company_id == company_id)
    if category is not None:
        query = query.filter(MenuItem.category == normalize_category(category))
    if available is not None:
        query = query.filter(MenuItem.available.is_(available))
    return query.order_by(MenuItem.category.asc(), MenuItem.name.asc(), MenuItem.id.asc()).all()


def update_menu_item(db: Session, user_id: int, item_id: int, changes: Mapping[str, Any]) -> MenuItem:
    changes = dict(changes)
    if "category" in changes:
        changes["category"] = normalize_category(changes["category"])
    update_set = FieldUpdateSet.from_changes(changes, MENU_ITEM_FIELDS)

    ensure_menu_item_owner(db, user_id, item_id)
    result = db.execute(
        update(MenuItem)
        .where(MenuItem.id == item_id, MenuItem.company_id.in_(_owned_by(user_id)))
        .values(**update_set.values)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        db.rollback()
        raise NotFound("Menu item not found")
    db.commit()

    item = db.get(MenuItem, item_id)
    if item is None:
        raise NotFound("Menu item not found")
    db.refresh(item)
    logger.info(
        "%s updated item_id=%s fields=%s",
        MENU_PREFIX,
        item_id,
        ",".join(update_set.fields()),
    )
    return item


def set_menu_item_image(db: Session, user_id: int, item_id: int, image_url: str) -> MenuItem:
    return update_menu_item(db, user_id, item_id, {"image_url": image_url})


def delete_menu_item(db: Session, user_id: int, item_id: int) -> None:
    ensure_menu_item_owner(db, user_id, item_id)
    result = db.execute(
        delete(MenuItem)
        .where(MenuItem.id == item_id, MenuItem.company_id.in_(_owned_by(user_id)))
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        # a concurrent delete won
        db.rollback()
        raise NotFound("Menu item not found")
    db.commit()
    logger.info("%s deleted item_id=%s", MENU_PREFIX, item_id)
