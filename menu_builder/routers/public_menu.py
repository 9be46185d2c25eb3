from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from menu_builder.core.database import get_db
from menu_builder.schemas.menu_item import (
    CategoriesResponse,
    CategoryItemsResponse,
    CompanyInfoResponse,
    PublishedMenuResponse,
    SearchResponse,
)
from menu_builder.services.menu_items import normalize_category
from menu_builder.services.public_menu import (
    company_info,
    get_items_by_category,
    get_public_company,
    get_published_menu,
    get_published_menu_by_link,
    list_categories,
    search_items,
)

router = APIRouter(prefix="/api/public", tags=["public-menu"])


@router.get("/link/{token}", response_model=PublishedMenuResponse)
def menu_by_link(token: str, db: Session = Depends(get_db)):
    return get_published_menu_by_link(db, token)


@router.get("/{company_id}", response_model=PublishedMenuResponse)
def published_menu(company_id: int, db: Session = Depends(get_db)):
    return get_published_menu(db, company_id)


@router.get("/{company_id}/categories", response_model=CategoriesResponse)
def categories(company_id: int, db: Session = Depends(get_db)):
    return {"categories": list_categories(db, company_id)}


@router.get("/{company_id}/category/{category}", response_model=CategoryItemsResponse)
def category_items(company_id: int, category: str, db: Session = Depends(get_db)):
    return {
        "category": normalize_category(category),
        "items": get_items_by_category(db, company_id, category),
    }


@router.get("/{company_id}/search", response_model=SearchResponse)
def search(company_id: int, q: Optional[str] = Query(default=None, max_length=100), db: Session = Depends(get_db)):
    items = search_items(db, company_id, q)
    return {"query": (q or "").strip(), "items": items, "total": len(items)}


@router.get("/{company_id}/info", response_model=CompanyInfoResponse)
def info(company_id: int, db: Session = Depends(get_db)):
    return {"company": company_info(get_public_company(db, company_id))}
