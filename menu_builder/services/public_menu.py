from __future__ import annotations

import logging
from typing import Iterable

from sqlalchemy import or_
from sqlalchemy.orm import Session

from menu_builder.core.errors import NotFound, ValidationFailed
from menu_builder.models.company import Company
from menu_builder.models.menu_item import MenuItem
from menu_builder.services.menu_items import normalize_category, price_to_number

logger = logging.getLogger(__name__)
PUBLIC_MENU_PREFIX = "[PUBLIC_MENU]"

MENU_NOT_FOUND = "Menu not found"


def _item_sort_key(item: MenuItem) -> tuple:
    return (item.name.casefold(), item.name, item.id)


def _category_sort_key(category: str) -> tuple:
    return (category.casefold(), category)


def public_item_to_dict(item: MenuItem) -> dict:
    return {
        "id": item.id,
        "name": item.name,
        "price": price_to_number(item.price),
        "description": item.description,
        "category": normalize_category(item.category),
        "image_url": item.image_url,
    }


def company_summary(company: Company) -> dict:
    return {
        "id": company.id,
        "name": company.name,
        "description": company.description,
        "logo_url": company.logo_url,
    }


def company_info(company: Company) -> dict:
    summary = company_summary(company)
    summary["qr_code_url"] = company.qr_code_url
    summary["menu_link"] = company.menu_link
    return summary


def get_public_company(db: Session, company_id: int) -> Company:
    company = db.get(Company, company_id)
    if company is None:
        raise NotFound(MENU_NOT_FOUND)
    return company


def find_company_by_link_token(db: Session, token: str) -> Company:
    """Match the opaque ``/<token>`` suffix of the stored menu link."""
    token = (token or "").strip().strip("/")
    if not token:
        raise NotFound(MENU_NOT_FOUND)
    company = db.query(Company).filter(Company.menu_link.endswith(f"/{token}", autoescape=True)).first()
    if company is None:
        raise NotFound(MENU_NOT_FOUND)
    return company


def _available_items(db: Session, company_id: int):
    return db.query(MenuItem).filter(MenuItem.company_id == company_id, MenuItem.available.is_(True))


def group_by_category(items: Iterable[MenuItem]) -> dict[str, list[dict]]:
    grouped: dict[str, list[MenuItem]] = {}
    for item in items:
        grouped.setdefault(normalize_category(item.category), []).append(item)
    return {
        category: [public_item_to_dict(item) for item in sorted(grouped[category], key=_item_sort_key)]
        for category in sorted(grouped, key=_category_sort_key)
    }


def build_published_menu(db: Session, company: Company) -> dict:
    items = _available_items(db, company.id).all()
    menu = group_by_category(items)
    logger.info(
        "%s company_id=%s categories=%s items=%s",
        PUBLIC_MENU_PREFIX,
        company.id,
        len(menu),
        len(items),
    )
    return {
        "company": company_summary(company),
        "menu": menu,
        "categories": list(menu),
        "total_items": len(items),
    }


def get_published_menu(db: Session, company_id: int) -> dict:
    return build_published_menu(db, get_public_company(db, company_id))


def get_published_menu_by_link(db: Session, token: str) -> dict:
    return build_published_menu(db, find_company_by_link_token(db, token))


def list_categories(db: Session, company_id: int) -> list[str]:
    company = get_public_company(db, company_id)
    rows = _available_items(db, company.id).with_entities(MenuItem.category).distinct().all()
    categories = {normalize_category(row[0]) for row in rows}
    return sorted(categories, key=_category_sort_key)


def get_items_by_category(db: Session, company_id: int, category: str) -> list[dict]:
    company = get_public_company(db, company_id)
    items = _available_items(db, company.id).filter(MenuItem.category == normalize_category(category)).all()
    return [public_item_to_dict(item) for item in sorted(items, key=_item_sort_key)]


def search_items(db: Session, company_id: int, query: str | None) -> list[dict]:
    term = (query or "").strip()
    if not term:
        raise ValidationFailed("Search query required")

    company = get_public_company(db, company_id)
    items = (
        _available_items(db, company.id)
        .filter(
            or_(
                MenuItem.name.icontains(term, autoescape=True),
                MenuItem.description.icontains(term, autoescape=True),
                MenuItem.category.icontains(term, autoescape=True),
            )
        )
        .all()
    )
    items.sort(key=lambda item: (_category_sort_key(normalize_category(item.category)), _item_sort_key(item)))
    return [public_item_to_dict(item) for item in items]
