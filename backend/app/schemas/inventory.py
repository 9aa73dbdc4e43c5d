from datetime import datetime

from pydantic import BaseModel, Field


class InventoryCreate(BaseModel):
    item_name: str = Field(..., min_length=1, max_length=255)
    quantity: int = Field(0, ge=0)
    threshold: int = Field(10, ge=0)
    supplier_whatsapp: str | None = None
    supplier_name: str | None = None
    unit_price: float | None = Field(None, ge=0)


class InventoryUpdate(BaseModel):
    item_name: str | None = Field(None, min_length=1, max_length=255)
    quantity: int | None = Field(None, ge=0)
    threshold: int | None = Field(None, ge=0)
    supplier_whatsapp: str | None = None
    supplier_name: str | None = None
    unit_price: float | None = Field(None, ge=0)


class InventoryOut(BaseModel):
    id: str
    item_name: str
    quantity: int
    threshold: int
    is_low_stock: bool
    can_reorder: bool = False
    supplier_whatsapp: str | None
    supplier_name: str | None
    unit_price: float | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class QuantityAdjustRequest(BaseModel):
    """Stepper action: +1 / -1 (any non-zero step is accepted)."""
    delta: int = Field(..., description="Signed step; result is clamped at 0")


class ReorderOut(BaseModel):
    item_id: str
    reorder_quantity: int
    message: str
    whatsapp_url: str
