from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


class TemplateCreate(BaseModel):
    type: Literal["customer", "supplier"] = "customer"
    category: str | None = None
    title: str = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1)
    is_active: bool = True


class TemplateUpdate(BaseModel):
    type: Literal["customer", "supplier"] | None = None
    category: str | None = None
    title: str | None = Field(None, min_length=1, max_length=255)
    content: str | None = Field(None, min_length=1)
    is_active: bool | None = None


class TemplateOut(BaseModel):
    id: str
    type: str
    category: str | None
    title: str
    content: str
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class TemplatePreviewRequest(BaseModel):
    values: dict[str, str] = Field(default_factory=dict)


class TemplatePreviewOut(BaseModel):
    rendered: str
    placeholders: list[str] = Field(default_factory=list)
