"""Inventory threshold monitor.

Low stock is `quantity < threshold`, derived on every read. A reorder is
a pre-filled WhatsApp message to the supplier; nothing is tracked after
the link is handed out.
"""

import logging
import re
from datetime import datetime
from urllib.parse import quote

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.middleware.exceptions import (
    ResourceNotFoundError,
    ValidationFailed,
    WorkflowConflict,
)
from app.models.inventory_item import InventoryItem
from app.schemas.inventory import InventoryOut, ReorderOut

logger = logging.getLogger("signshop.inventory")

WHATSAPP_BASE = "https://wa.me/"


def clamp_quantity(quantity: int, delta: int) -> int:
    return max(0, quantity + delta)


def whatsapp_digits(number: str | None) -> str:
    return re.sub(r"\D", "", number or "")


def can_reorder(item: InventoryItem) -> bool:
    return item.is_low_stock and bool(whatsapp_digits(item.supplier_whatsapp))


def reorder_message(item: InventoryItem, company_name: str | None = None) -> str:
    return (
        "Hello,\n\n"
        "We need to place an order for:\n"
        f"Item: {item.item_name}\n"
        f"Quantity: {item.threshold}\n"
        f"Current Stock: {item.quantity}\n\n"
        "Please confirm availability and pricing.\n\n"
        "Best regards,\n"
        f"{company_name or settings.company_name}"
    )


def whatsapp_url(number: str, message: str) -> str:
    return f"{WHATSAPP_BASE}{whatsapp_digits(number)}?text={quote(message, safe='')}"


def to_out(item: InventoryItem) -> InventoryOut:
    out = InventoryOut.model_validate(item)
    out.can_reorder = can_reorder(item)
    return out


async def get_item(db: AsyncSession, item_id: str) -> InventoryItem:
    result = await db.execute(select(InventoryItem).where(InventoryItem.id == item_id))
    item = result.scalar_one_or_none()
    if not item:
        raise ResourceNotFoundError("Inventory item", item_id)
    return item


async def list_items(
    db: AsyncSession,
    *,
    low_stock: bool = False,
    search: str | None = None,
) -> list[InventoryItem]:
    query = select(InventoryItem)
    if low_stock:
        query = query.where(InventoryItem.quantity < InventoryItem.threshold)
    if search:
        term = f"%{search.strip()}%"
        query = query.where(
            or_(
                InventoryItem.item_name.ilike(term),
                InventoryItem.supplier_name.ilike(term),
            )
        )
    result = await db.execute(query.order_by(InventoryItem.item_name))
    return list(result.scalars().all())


async def count_low_stock(db: AsyncSession) -> int:
    result = await db.execute(
        select(func.count(InventoryItem.id)).where(
            InventoryItem.quantity < InventoryItem.threshold
        )
    )
    return result.scalar() or 0


async def adjust_quantity(db: AsyncSession, item_id: str, delta: int) -> InventoryItem:
    """Apply a stepper change; the result never goes below zero."""
    if delta == 0:
        raise ValidationFailed("delta must be non-zero")
    item = await get_item(db, item_id)
    item.quantity = clamp_quantity(item.quantity, delta)
    item.updated_at = datetime.utcnow()
    await db.flush()
    logger.info("Inventory %s quantity → %d", item.id, item.quantity)
    return item


async def build_reorder(db: AsyncSession, item_id: str) -> ReorderOut:
    item = await get_item(db, item_id)
    if not item.is_low_stock:
        raise WorkflowConflict(
            f"'{item.item_name}' is not low on stock", error_code="NOT_LOW_STOCK"
        )
    if not whatsapp_digits(item.supplier_whatsapp):
        raise WorkflowConflict(
            "No supplier WhatsApp number available", error_code="NO_SUPPLIER_WHATSAPP"
        )
    message = reorder_message(item)
    return ReorderOut(
        item_id=item.id,
        reorder_quantity=item.threshold,
        message=message,
        whatsapp_url=whatsapp_url(item.supplier_whatsapp, message),
    )
