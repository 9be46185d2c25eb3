from __future__ import annotations

import logging
from typing import Any, Mapping
from uuid import uuid4

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from menu_builder.core.config import FRONTEND_URL
from menu_builder.core.errors import Conflict, NotFound, ServiceUnavailable
from menu_builder.models.company import Company
from menu_builder.models.user import User
from menu_builder.services.authorization import ensure_company_owner
from menu_builder.services.qr_codes import QRCodeRenderer, QRRenderError
from menu_builder.services.tokens import TokenIssuer
from menu_builder.services.updates import COMPANY_FIELDS, FieldUpdateSet

logger = logging.getLogger(__name__)
COMPANY_PREFIX = "[COMPANY]"


def build_menu_link(frontend_url: str = FRONTEND_URL) -> str:
    return f"{frontend_url.rstrip('/')}/menu/{uuid4()}"


def company_to_dict(company: Company) -> dict:
    return {
        "id": company.id,
        "name": company.name,
        "description": company.description,
        "logo_url": company.logo_url,
        "owner_id": company.owner_id,
        "menu_link": company.menu_link,
        "qr_code_url": company.qr_code_url,
        "created_at": company.created_at.isoformat() if company.created_at else None,
        "updated_at": company.updated_at.isoformat() if company.updated_at else None,
    }


def _owned_company(db: Session, user_id: int) -> Company | None:
    return db.query(Company).filter(Company.owner_id == user_id).first()


def create_company(
    db: Session,
    tokens: TokenIssuer,
    qr_renderer: QRCodeRenderer,
    *,
    owner: User,
    name: str,
    description: str | None = None,
    logo_url: str | None = None,
    frontend_url: str = FRONTEND_URL,
) -> tuple[Company, str]:
    """Create the caller's company and link it to them.

    Returns the company and a fresh token whose claims carry the new
    ``company_id``. A QR render failure leaves ``qr_code_url`` empty
    without failing the creation.
    """
    if _owned_company(db, owner.id):
        raise Conflict("User already has a company")

    menu_link = build_menu_link(frontend_url)
    try:
        qr_code_url = qr_renderer.render_data_url(menu_link)
    except QRRenderError:
        logger.warning("%s QR pending owner_id=%s", COMPANY_PREFIX, owner.id)
        qr_code_url = None

    company = Company(
        name=name,
        description=description,
        logo_url=logo_url,
        owner_id=owner.id,
        menu_link=menu_link,
        qr_code_url=qr_code_url,
    )
    db.add(company)
    try:
        db.flush()
        owner.company_id = company.id
        owner.is_first_login = False
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise Conflict("User already has a company") from exc
    db.refresh(company)
    db.refresh(owner)

    logger.info("%s created company_id=%s owner_id=%s", COMPANY_PREFIX, company.id, owner.id)
    return company, tokens.issue_for(owner)


def get_company(db: Session, user_id: int, company_id: int) -> Company:
    ensure_company_owner(db, user_id, company_id)
    company = db.get(Company, company_id)
    if company is None:
        raise NotFound("Company not found")
    return company


def get_my_company(db: Session, user_id: int) -> Company:
    company = _owned_company(db, user_id)
    if company is None:
        raise NotFound("No company found for this user")
    return company


def _apply_company_update(db: Session, user_id: int, company_id: int, update_set: FieldUpdateSet) -> Company:
    # owner_id in the WHERE clause guards the window between check and write
    result = db.execute(
        update(Company)
        .where(Company.id == company_id, Company.owner_id == user_id)
        .values(**update_set.values)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        db.rollback()
        raise NotFound("Company not found")
    db.commit()

    company = db.get(Company, company_id)
    if company is None:
        raise NotFound("Company not found")
    db.refresh(company)
    return company


def update_company(db: Session, user_id: int, company_id: int, changes: Mapping[str, Any]) -> Company:
    update_set = FieldUpdateSet.from_changes(changes, COMPANY_FIELDS)
    ensure_company_owner(db, user_id, company_id)
    company = _apply_company_update(db, user_id, company_id, update_set)
    logger.info(
        "%s updated company_id=%s fields=%s",
        COMPANY_PREFIX,
        company_id,
        ",".join(update_set.fields()),
    )
    return company


def set_company_logo(db: Session, user_id: int, company_id: int, logo_url: str) -> Company:
    return update_company(db, user_id, company_id, {"logo_url": logo_url})


def regenerate_qr_code(db: Session, qr_renderer: QRCodeRenderer, user_id: int, company_id: int) -> Company:
    """Re-render the QR image for the existing menu link.

    On failure the stored ``qr_code_url`` is left as it was.
    """
    company = get_company(db, user_id, company_id)
    try:
        qr_code_url = qr_renderer.render_data_url(company.menu_link)
    except QRRenderError as exc:
        raise ServiceUnavailable("Failed to generate QR code, please try again") from exc

    company = _apply_company_update(db, user_id, company_id, FieldUpdateSet(values={"qr_code_url": qr_code_url}))
    logger.info("%s regenerated QR company_id=%s", COMPANY_PREFIX, company_id)
    return company
