# menu_builder/routers/auth.py
from __future__ import annotations

from fastapi import APIRouter, Depends, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from menu_builder.core.database import get_db
from menu_builder.deps import get_current_user, get_token_issuer
from menu_builder.models.user import User
from menu_builder.schemas.auth import (
    AuthResponse,
    LoginPayload,
    MessageResponse,
    ProfileResponse,
    RegisterPayload,
    TokenResponse,
)
from menu_builder.services.accounts import authenticate_user, register_user, user_to_dict
from menu_builder.services.tokens import TokenIssuer

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(
    payload: RegisterPayload,
    db: Session = Depends(get_db),
    tokens: TokenIssuer = Depends(get_token_issuer),
):
    user, token = register_user(
        db,
        tokens,
        email=payload.email,
        password=payload.password,
        display_name=payload.display_name,
    )
    return {"message": "User registered successfully", "user": user_to_dict(db, user), "token": token}


@router.post("/login", response_model=AuthResponse)
def login(
    payload: LoginPayload,
    db: Session = Depends(get_db),
    tokens: TokenIssuer = Depends(get_token_issuer),
):
    user, token = authenticate_user(db, tokens, email=payload.email, password=payload.password)
    return {"message": "Login successful", "user": user_to_dict(db, user), "token": token}


@router.post("/token", response_model=TokenResponse)
def token(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db),
    tokens: TokenIssuer = Depends(get_token_issuer),
):
    """Password flow used by the interactive docs."""
    _, access_token = authenticate_user(db, tokens, email=form_data.username, password=form_data.password)
    return {"access_token": access_token, "token_type": "bearer"}


@router.get("/profile", response_model=ProfileResponse)
def profile(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return {"user": user_to_dict(db, user)}


@router.post("/logout", response_model=MessageResponse)
def logout(user: User = Depends(get_current_user)):
    # tokens are stateless; the client discards its copy
    return {"message": "Logout successful"}
