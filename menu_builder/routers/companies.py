from __future__ import annotations

from fastapi import APIRouter, Depends, File, Request, UploadFile, status
from sqlalchemy.orm import Session

from menu_builder.core.config import MAX_UPLOAD_SIZE_BYTES
from menu_builder.core.database import get_db
from menu_builder.deps import (
    get_current_user,
    get_image_storage,
    get_qr_renderer,
    get_token_issuer,
    resolve_public_base_url,
)
from menu_builder.models.user import User
from menu_builder.schemas.company import (
    CompanyCreate,
    CompanyCreatedResponse,
    CompanyMessageResponse,
    CompanyResponse,
    CompanyUpdate,
    MenuLinkResponse,
    QRCodeResponse,
)
from menu_builder.services.authorization import ensure_company_owner
from menu_builder.services.companies import (
    company_to_dict,
    create_company,
    get_company,
    get_my_company,
    regenerate_qr_code,
    set_company_logo,
    update_company,
)
from menu_builder.services.image_storage import LocalImageStorage, read_image_upload
from menu_builder.services.qr_codes import QRCodeRenderer
from menu_builder.services.tokens import TokenIssuer

router = APIRouter(prefix="/api/companies", tags=["companies"])


@router.post("", response_model=CompanyCreatedResponse, status_code=status.HTTP_201_CREATED)
def create(
    payload: CompanyCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    tokens: TokenIssuer = Depends(get_token_issuer),
    qr_renderer: QRCodeRenderer = Depends(get_qr_renderer),
):
    company, token = create_company(
        db,
        tokens,
        qr_renderer,
        owner=user,
        name=payload.name,
        description=payload.description,
        logo_url=payload.logo_url,
    )
    return {"message": "Company created successfully", "company": company_to_dict(company), "token": token}


# declared before /{company_id} so "my" is not parsed as an id
@router.get("/my/company", response_model=CompanyResponse)
def my_company(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return {"company": company_to_dict(get_my_company(db, user.id))}


@router.get("/{company_id}", response_model=CompanyResponse)
def read(company_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return {"company": company_to_dict(get_company(db, user.id, company_id))}


@router.put("/{company_id}", response_model=CompanyMessageResponse)
def update(
    company_id: int,
    payload: CompanyUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    company = update_company(db, user.id, company_id, payload.model_dump(exclude_unset=True))
    return {"message": "Company updated successfully", "company": company_to_dict(company)}


@router.post("/{company_id}/regenerate-qr", response_model=QRCodeResponse)
@router.post("/{company_id}/qr-code", response_model=QRCodeResponse, include_in_schema=False)
def regenerate_qr(
    company_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    qr_renderer: QRCodeRenderer = Depends(get_qr_renderer),
):
    company = regenerate_qr_code(db, qr_renderer, user.id, company_id)
    return {"message": "QR code regenerated successfully", "qr_code_url": company.qr_code_url}


@router.get("/{company_id}/menu-link", response_model=MenuLinkResponse)
def menu_link(company_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    company = get_company(db, user.id, company_id)
    return {"menu_link": company.menu_link, "qr_code_url": company.qr_code_url}


@router.post("/{company_id}/logo", response_model=CompanyMessageResponse)
def upload_logo(
    company_id: int,
    request: Request,
    file: UploadFile = File(...),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    storage: LocalImageStorage = Depends(get_image_storage),
):
    ensure_company_owner(db, user.id, company_id)
    data = read_image_upload(file, MAX_UPLOAD_SIZE_BYTES)
    path = storage.store(data, file.filename or "")
    logo_url = f"{resolve_public_base_url(request)}{path}"
    company = set_company_logo(db, user.id, company_id, logo_url)
    return {"message": "Logo uploaded successfully", "company": company_to_dict(company)}
