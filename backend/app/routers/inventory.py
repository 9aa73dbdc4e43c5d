"""Admin inventory routes — CRUD, stepper, and supplier reorder links."""

import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.deps import get_admin_db
from app.models.inventory_item import InventoryItem
from app.schemas.inventory import (
    InventoryCreate,
    InventoryOut,
    InventoryUpdate,
    QuantityAdjustRequest,
    ReorderOut,
)
from app.services import inventory as stock

logger = logging.getLogger("signshop.inventory")

router = APIRouter()

NOT_NULL_FIELDS = {"item_name", "quantity", "threshold"}


@router.get("/", response_model=list[InventoryOut])
async def list_inventory(
    low_stock: bool = Query(False),
    search: str | None = Query(None),
    db: AsyncSession = Depends(get_admin_db),
):
    items = await stock.list_items(db, low_stock=low_stock, search=search)
    return [stock.to_out(i) for i in items]


@router.post("/", response_model=InventoryOut, status_code=status.HTTP_201_CREATED)
async def create_item(
    body: InventoryCreate,
    db: AsyncSession = Depends(get_admin_db),
):
    item = InventoryItem(**body.model_dump())
    db.add(item)
    await db.flush()
    logger.info("Created inventory item %s (%s)", item.id, item.item_name)
    return stock.to_out(item)


@router.get("/{item_id}", response_model=InventoryOut)
async def get_item(item_id: str, db: AsyncSession = Depends(get_admin_db)):
    return stock.to_out(await stock.get_item(db, item_id))


@router.patch("/{item_id}", response_model=InventoryOut)
async def update_item(
    item_id: str,
    body: InventoryUpdate,
    db: AsyncSession = Depends(get_admin_db),
):
    item = await stock.get_item(db, item_id)
    for key, value in body.model_dump(exclude_unset=True).items():
        if value is None and key in NOT_NULL_FIELDS:
            continue
        setattr(item, key, value)
    await db.flush()
    await db.refresh(item)
    return stock.to_out(item)


@router.post("/{item_id}/adjust", response_model=InventoryOut)
async def adjust_item(
    item_id: str,
    body: QuantityAdjustRequest,
    db: AsyncSession = Depends(get_admin_db),
):
    return stock.to_out(await stock.adjust_quantity(db, item_id, body.delta))


@router.get("/{item_id}/reorder", response_model=ReorderOut)
async def reorder_item(item_id: str, db: AsyncSession = Depends(get_admin_db)):
    return await stock.build_reorder(db, item_id)


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_item(item_id: str, db: AsyncSession = Depends(get_admin_db)):
    item = await stock.get_item(db, item_id)
    await db.delete(item)
    await db.flush()
