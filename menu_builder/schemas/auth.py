from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, EmailStr, Field


class RegisterPayload(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    email: EmailStr
    password: str = Field(..., min_length=6, max_length=200)
    display_name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        validation_alias=AliasChoices("display_name", "first_name"),
    )


class LoginPayload(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    email: EmailStr
    password: str = Field(..., min_length=1)


class UserOut(BaseModel):
    id: int
    email: str
    display_name: str
    company_id: Optional[int] = None
    company_name: Optional[str] = None
    is_first_login: bool
    subscription_tier: str


class AuthResponse(BaseModel):
    message: str
    user: UserOut
    token: str


class ProfileResponse(BaseModel):
    user: UserOut


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class MessageResponse(BaseModel):
    message: str
