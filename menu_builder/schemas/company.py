from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from menu_builder.schemas.validators import validate_image_url


class CompanyCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    logo_url: Optional[str] = None

    @field_validator("logo_url")
    @classmethod
    def _validate_logo_url(cls, value: Optional[str]) -> Optional[str]:
        return validate_image_url(value)


class CompanyUpdate(BaseModel):
    """Partial update; only the fields present in the body are applied."""

    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    logo_url: Optional[str] = None

    @field_validator("logo_url")
    @classmethod
    def _validate_logo_url(cls, value: Optional[str]) -> Optional[str]:
        return validate_image_url(value)


class CompanyOut(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    logo_url: Optional[str] = None
    owner_id: int
    menu_link: str
    qr_code_url: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class CompanyResponse(BaseModel):
    company: CompanyOut


class CompanyCreatedResponse(BaseModel):
    message: str
    company: CompanyOut
    token: str


class CompanyMessageResponse(BaseModel):
    message: str
    company: CompanyOut


class QRCodeResponse(BaseModel):
    message: str
    qr_code_url: Optional[str] = None


class MenuLinkResponse(BaseModel):
    menu_link: str
    qr_code_url: Optional[str] = None
