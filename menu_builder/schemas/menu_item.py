from __future__ import annotations

from decimal import Decimal
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from menu_builder.schemas.validators import validate_image_url


class MenuItemCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    company_id: int = Field(..., ge=1)
    name: str = Field(..., min_length=1, max_length=100)
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    description: Optional[str] = Field(default=None, max_length=500)
    category: Optional[str] = Field(default=None, max_length=50)
    image_url: Optional[str] = None
    available: bool = Field(default=True, validation_alias=AliasChoices("available", "is_available"))

    @field_validator("image_url")
    @classmethod
    def _validate_image_url(cls, value: Optional[str]) -> Optional[str]:
        return validate_image_url(value)


class MenuItemUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    price: Optional[Decimal] = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    description: Optional[str] = Field(default=None, max_length=500)
    category: Optional[str] = Field(default=None, max_length=50)
    image_url: Optional[str] = None
    available: Optional[bool] = Field(default=None, validation_alias=AliasChoices("available", "is_available"))

    @field_validator("image_url")
    @classmethod
    def _validate_image_url(cls, value: Optional[str]) -> Optional[str]:
        return validate_image_url(value)


class MenuItemOut(BaseModel):
    id: int
    company_id: int
    name: str
    price: float
    description: Optional[str] = None
    category: str
    image_url: Optional[str] = None
    available: bool
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class MenuItemResponse(BaseModel):
    menu_item: MenuItemOut


class MenuItemMessageResponse(BaseModel):
    message: str
    menu_item: MenuItemOut


class MenuItemListResponse(BaseModel):
    menu_items: list[MenuItemOut]
    total: int


class PublicMenuItemOut(BaseModel):
    id: int
    name: str
    price: float
    description: Optional[str] = None
    category: str
    image_url: Optional[str] = None


class PublicCompanyOut(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    logo_url: Optional[str] = None


class PublicCompanyInfo(PublicCompanyOut):
    qr_code_url: Optional[str] = None
    menu_link: str


class PublishedMenuResponse(BaseModel):
    company: PublicCompanyOut
    menu: dict[str, list[PublicMenuItemOut]]
    categories: list[str]
    total_items: int


class CategoriesResponse(BaseModel):
    categories: list[str]


class CategoryItemsResponse(BaseModel):
    category: str
    items: list[PublicMenuItemOut]


class SearchResponse(BaseModel):
    query: str
    items: list[PublicMenuItemOut]
    total: int


class CompanyInfoResponse(BaseModel):
    company: PublicCompanyInfo
