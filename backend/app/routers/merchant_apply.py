import logging
import uuid
from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query
from sqlalchemy.orm import Session, selectinload

from app.core.auth import Capability, Principal, require_capability
from app.core.deps import get_db
from app.core.errors import error_detail
from app.models.merchant import Merchant, MerchantStatus
from app.models.merchant_application import ApplicationStatus, MerchantApplication
from app.models.merchant_user import MerchantUser
from app.models.user import User, UserRole
from app.schemas.application import (
    AdminApplicationListResponse,
    ApplicationCreate,
    ApplicationListResponse,
    ApplicationResponse,
    ApplicationReview,
    ApprovalResponse,
)
from app.services.user_sync import effective_role

logger = logging.getLogger(__name__)

router = APIRouter()

require_admin = require_capability(Capability.ADMINISTER)


def _pending_application(db: Session, application_id: str) -> MerchantApplication:
    application = db.query(MerchantApplication).filter(MerchantApplication.id == application_id).first()
    if not application:
        raise HTTPException(status_code=404, detail="Application not found")
    if application.status != ApplicationStatus.PENDING:
        raise HTTPException(status_code=400, detail=error_detail("invalid_status", "Application is not pending"))
    return application


@router.post("/merchant/apply", response_model=ApplicationResponse, status_code=201)
def apply_for_merchant(
    body: ApplicationCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_capability(Capability.APPLY_FOR_MERCHANT)),
):
    """Submit a request to become a merchant. One pending application per user."""
    pending = (
        db.query(MerchantApplication)
        .filter(
            MerchantApplication.user_id == principal.user_id,
            MerchantApplication.status == ApplicationStatus.PENDING,
        )
        .first()
    )
    if pending:
        raise HTTPException(status_code=400, detail=error_detail("duplicate", "You already have a pending application"))
    if db.query(MerchantUser).filter(MerchantUser.user_id == principal.user_id).first():
        raise HTTPException(status_code=400, detail=error_detail("already_merchant", "You are already a merchant"))

    application = MerchantApplication(
        id=str(uuid.uuid4()),
        user_id=principal.user_id,
        company_name=body.company_name,
        contact_name=body.contact_name,
        contact_email=str(body.contact_email),
        description=body.description,
        status=ApplicationStatus.PENDING,
    )
    db.add(application)
    db.commit()
    db.refresh(application)
    logger.info("Merchant application %s submitted by user %s", application.id, principal.user_id)
    return application


@router.get("/merchant/apply/status", response_model=ApplicationListResponse)
def application_status(
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_capability(Capability.APPLY_FOR_MERCHANT)),
):
    applications = (
        db.query(MerchantApplication)
        .filter(MerchantApplication.user_id == principal.user_id)
        .order_by(MerchantApplication.created_at.desc())
        .all()
    )
    return ApplicationListResponse.model_validate({"applications": applications})


# --- Admin review ---


@router.get("/admin/merchant-applications", response_model=AdminApplicationListResponse)
def list_applications(
    status: Optional[ApplicationStatus] = Query(None, description="Filter by status"),
    db: Session = Depends(get_db),
    admin: Principal = Depends(require_admin),
):
    q = db.query(MerchantApplication).options(selectinload(MerchantApplication.user))
    if status is not None:
        q = q.filter(MerchantApplication.status == status)
    applications = q.order_by(MerchantApplication.created_at.desc()).all()
    return AdminApplicationListResponse.model_validate({"applications": applications})


@router.post("/admin/merchant-applications/{application_id}/approve", response_model=ApprovalResponse)
def approve_application(
    application_id: str,
    body: Optional[ApplicationReview] = Body(None),
    db: Session = Depends(get_db),
    admin: Principal = Depends(require_admin),
):
    """Create the merchant, link the applicant and promote them to MERCHANT, all in one transaction."""
    application = _pending_application(db, application_id)
    review_note = body.review_note if body else None

    merchant = Merchant(
        id=str(uuid.uuid4()),
        name=application.company_name,
        email=application.contact_email,
        status=MerchantStatus.ACTIVE,
    )
    db.add(merchant)
    db.flush()
    db.add(MerchantUser(id=str(uuid.uuid4()), merchant_id=merchant.id, user_id=application.user_id))
    user = db.query(User).filter(User.id == application.user_id).first()
    user.role = effective_role(user.role, UserRole.MERCHANT)
    application.status = ApplicationStatus.APPROVED
    application.review_note = review_note or None
    db.commit()
    db.refresh(merchant)
    db.refresh(application)
    logger.info(
        "Application %s approved by %s: merchant %s created for user %s",
        application.id,
        admin.subject,
        merchant.id,
        application.user_id,
    )
    return ApprovalResponse.model_validate({"merchant": merchant, "application": application})


@router.post("/admin/merchant-applications/{application_id}/reject", response_model=ApplicationResponse)
def reject_application(
    application_id: str,
    body: Optional[ApplicationReview] = Body(None),
    db: Session = Depends(get_db),
    admin: Principal = Depends(require_admin),
):
    application = _pending_application(db, application_id)
    application.status = ApplicationStatus.REJECTED
    application.review_note = (body.review_note if body else None) or "Application rejected"
    db.commit()
    db.refresh(application)
    logger.info("Application %s rejected by %s", application.id, admin.subject)
    return application
