from pydantic import BaseModel, Field, field_validator

from app.schemas.validators import optional_phone, validate_email


class ContactRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., max_length=255)
    phone: str | None = None
    company: str | None = None
    subject: str | None = None
    message: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        return validate_email(v)

    @field_validator("phone")
    @classmethod
    def _phone(cls, v: str | None) -> str | None:
        return optional_phone(v)


class UploadOut(BaseModel):
    success: bool = True
    url: str
    file_id: str
    name: str


class OkResponse(BaseModel):
    ok: bool = True


class DashboardStats(BaseModel):
    total_customers: int
    total_enquiries: int
    pending_enquiries: int
    completed_enquiries: int
    low_stock_items: int
