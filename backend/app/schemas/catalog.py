"""Pydantic schemas for categories and products."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator


def _clean_list(values: list[str] | None) -> list[str] | None:
    if values is None:
        return None
    return [v.strip() for v in values if v and v.strip()]


class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None


class CategoryUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None


class CategoryOut(BaseModel):
    id: str
    name: str
    description: str | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    category_id: str = Field(..., min_length=1)
    image_urls: list[str] = Field(default_factory=list)
    sizes: list[str] = Field(default_factory=list)
    materials: list[str] = Field(default_factory=list)
    is_active: bool = True
    top_seller: bool = False

    clean_lists = field_validator("sizes", "materials", "image_urls")(_clean_list)


class ProductUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    category_id: str | None = None
    image_urls: list[str] | None = None
    sizes: list[str] | None = None
    materials: list[str] | None = None
    is_active: bool | None = None
    top_seller: bool | None = None

    clean_lists = field_validator("sizes", "materials", "image_urls")(_clean_list)


class ProductOut(BaseModel):
    id: str
    name: str
    description: str | None
    category_id: str
    category_name: str | None = None
    image_url: str | None
    image_urls: list[str]
    sizes: list[str]
    materials: list[str]
    is_active: bool
    top_seller: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}

    @field_validator("sizes", "materials", mode="before")
    @classmethod
    def _none_as_empty(cls, v):
        return v or []
