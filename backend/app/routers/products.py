"""Admin product routes (any product, active or not)."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.deps import get_admin_db
from app.schemas.catalog import ProductCreate, ProductOut, ProductUpdate
from app.services import catalog

router = APIRouter()


@router.get("/", response_model=list[ProductOut])
async def list_products(
    category_id: str | None = Query(None),
    search: str | None = Query(None),
    db: AsyncSession = Depends(get_admin_db),
):
    products = await catalog.list_products(
        db, active_only=False, category_id=category_id, search=search
    )
    return [ProductOut.model_validate(p) for p in products]


@router.post("/", response_model=ProductOut, status_code=status.HTTP_201_CREATED)
async def create_product(body: ProductCreate, db: AsyncSession = Depends(get_admin_db)):
    return ProductOut.model_validate(await catalog.create_product(db, body))


@router.get("/{product_id}", response_model=ProductOut)
async def get_product(product_id: str, db: AsyncSession = Depends(get_admin_db)):
    return ProductOut.model_validate(await catalog.get_product(db, product_id))


@router.patch("/{product_id}", response_model=ProductOut)
async def update_product(
    product_id: str,
    body: ProductUpdate,
    db: AsyncSession = Depends(get_admin_db),
):
    return ProductOut.model_validate(await catalog.update_product(db, product_id, body))


@router.post("/{product_id}/toggle-active", response_model=ProductOut)
async def toggle_active(product_id: str, db: AsyncSession = Depends(get_admin_db)):
    product = await catalog.get_product(db, product_id)
    return ProductOut.model_validate(
        await catalog.update_product(db, product_id, ProductUpdate(is_active=not product.is_active))
    )


@router.post("/{product_id}/toggle-top-seller", response_model=ProductOut)
async def toggle_top_seller(product_id: str, db: AsyncSession = Depends(get_admin_db)):
    product = await catalog.get_product(db, product_id)
    return ProductOut.model_validate(
        await catalog.update_product(db, product_id, ProductUpdate(top_seller=not product.top_seller))
    )


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product(product_id: str, db: AsyncSession = Depends(get_admin_db)):
    await catalog.delete_product(db, product_id)
