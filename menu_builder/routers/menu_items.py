from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, File, Query, Request, UploadFile, status
from sqlalchemy.orm import Session

from menu_builder.core.config import FREE_TIER_MENU_ITEM_LIMIT, MAX_UPLOAD_SIZE_BYTES
from menu_builder.core.database import get_db
from menu_builder.deps import get_current_user, get_image_storage, resolve_public_base_url
from menu_builder.models.user import User
from menu_builder.schemas.auth import MessageResponse
from menu_builder.schemas.menu_item import (
    MenuItemCreate,
    MenuItemListResponse,
    MenuItemMessageResponse,
    MenuItemResponse,
    MenuItemUpdate,
)
from menu_builder.services.authorization import ensure_menu_item_owner
from menu_builder.services.image_storage import LocalImageStorage, read_image_upload
from menu_builder.services.menu_items import (
    create_menu_item,
    delete_menu_item,
    get_menu_item,
    list_menu_items,
    menu_item_to_dict,
    set_menu_item_image,
    update_menu_item,
)

router = APIRouter(prefix="/api/menu-items", tags=["menu-items"])


def _listing(items) -> dict:
    return {"menu_items": [menu_item_to_dict(item) for item in items], "total": len(items)}


@router.post("", response_model=MenuItemMessageResponse, status_code=status.HTTP_201_CREATED)
def create(
    payload: MenuItemCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    item = create_menu_item(
        db,
        owner=user,
        company_id=payload.company_id,
        name=payload.name,
        price=payload.price,
        description=payload.description,
        category=payload.category,
        image_url=payload.image_url,
        available=payload.available,
        item_limit=FREE_TIER_MENU_ITEM_LIMIT,
    )
    return {"message": "Menu item created successfully", "menu_item": menu_item_to_dict(item)}


@router.get("", response_model=MenuItemListResponse)
def list_items(
    company_id: int = Query(..., ge=1),
    category: Optional[str] = Query(default=None, max_length=50),
    available: Optional[bool] = Query(default=None),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    items = list_menu_items(db, user.id, company_id, category=category, available=available)
    return _listing(items)


@router.get("/company/{company_id}", response_model=MenuItemListResponse)
def list_for_company(company_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return _listing(list_menu_items(db, user.id, company_id))


@router.get("/{item_id}", response_model=MenuItemResponse)
def read(item_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return {"menu_item": menu_item_to_dict(get_menu_item(db, user.id, item_id))}


@router.put("/{item_id}", response_model=MenuItemMessageResponse)
def update(
    item_id: int,
    payload: MenuItemUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    item = update_menu_item(db, user.id, item_id, payload.model_dump(exclude_unset=True))
    return {"message": "Menu item updated successfully", "menu_item": menu_item_to_dict(item)}


@router.delete("/{item_id}", response_model=MessageResponse)
def delete(item_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    delete_menu_item(db, user.id, item_id)
    return {"message": "Menu item deleted successfully"}


@router.post("/{item_id}/image", response_model=MenuItemMessageResponse)
def upload_image(
    item_id: int,
    request: Request,
    file: UploadFile = File(...),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    storage: LocalImageStorage = Depends(get_image_storage),
):
    ensure_menu_item_owner(db, user.id, item_id)
    data = read_image_upload(file, MAX_UPLOAD_SIZE_BYTES)
    path = storage.store(data, file.filename or "")
    item = set_menu_item_image(db, user.id, item_id, f"{resolve_public_base_url(request)}{path}")
    return {"message": "Image uploaded successfully", "menu_item": menu_item_to_dict(item)}
