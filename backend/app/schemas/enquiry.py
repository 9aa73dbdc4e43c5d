"""Pydantic schemas for enquiries, their workflow actions and activity."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class CustomerRef(BaseModel):
    id: str
    company_name: str
    email: str | None
    phone: str | None

    model_config = {"from_attributes": True}


class ProductRef(BaseModel):
    id: str
    name: str

    model_config = {"from_attributes": True}


class EnquiryOut(BaseModel):
    id: str
    customer_id: str
    product_id: str
    size: str | None
    quantity: int
    material: str | None
    delivery_date: str | None
    comments: str | None
    status: str
    reply_template_id: str | None
    quotation_amount: Decimal | None
    invoice_number: str | None
    created_at: datetime
    updated_at: datetime
    customer: CustomerRef | None = None
    product: ProductRef | None = None

    model_config = {"from_attributes": True}


class ActivityOut(BaseModel):
    id: str
    enquiry_id: str
    action: str
    note: str | None
    created_at: datetime

    model_config = {"from_attributes": True}


class ManualEnquiryCreate(BaseModel):
    company_name: str = ""
    email: str | None = None
    phone: str | None = None
    product_id: str = ""
    size: str | None = None
    quantity: int = Field(1, ge=1)
    material: str | None = None
    delivery_date: str | None = None
    comments: str | None = None


class StatusChangeRequest(BaseModel):
    status: str
    invoice_number: str | None = None


class ReplyRequest(BaseModel):
    template_id: str | None = None
    # Decimal text as typed by the admin; blank means "no amount"
    quotation_amount: str | None = None
    status: str = "replied"


class BulkStatusRequest(BaseModel):
    ids: list[str] = Field(..., min_length=1)
    status: str


class BulkDeleteRequest(BaseModel):
    ids: list[str] = Field(..., min_length=1)


class BulkResult(BaseModel):
    affected: int


class ReplyEmailRequest(BaseModel):
    enquiry_ids: list[str] = Field(default_factory=list, alias="enquiryIds")
    template_id: str = Field("", alias="templateId")
    status: str = ""

    model_config = ConfigDict(populate_by_name=True)
