from datetime import datetime
from typing import Optional

from pydantic import EmailStr, Field

from app.models.merchant_application import ApplicationStatus
from app.schemas.common import CamelModel
from app.schemas.merchant import MerchantResponse


class ApplicationCreate(CamelModel):
    company_name: str = Field(min_length=1, max_length=200)
    contact_name: str = Field(min_length=1, max_length=100)
    contact_email: EmailStr
    description: str = Field(min_length=10, max_length=2000)


class ApplicationReview(CamelModel):
    review_note: Optional[str] = None


class ApplicantSummary(CamelModel):
    id: str
    email: Optional[str] = None
    name: Optional[str] = None


class ApplicationResponse(CamelModel):
    id: str
    user_id: str
    company_name: str
    contact_name: str
    contact_email: str
    description: str
    status: ApplicationStatus
    review_note: Optional[str] = None
    created_at: Optional[datetime] = None


class AdminApplicationResponse(ApplicationResponse):
    user: Optional[ApplicantSummary] = None


class ApplicationListResponse(CamelModel):
    applications: list[ApplicationResponse]


class AdminApplicationListResponse(CamelModel):
    applications: list[AdminApplicationResponse]


class ApprovalResponse(CamelModel):
    merchant: MerchantResponse
    application: ApplicationResponse
