"""Catalog reads and writes shared by the storefront and admin routers."""

import logging

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.middleware.exceptions import ResourceNotFoundError, WorkflowConflict
from app.models.category import Category
from app.models.enquiry import Enquiry
from app.models.product import Product, encode_image_urls
from app.schemas.catalog import ProductCreate, ProductUpdate

logger = logging.getLogger("signshop.catalog")

TOP_SELLER_LIMIT = 6


async def get_category(db: AsyncSession, category_id: str) -> Category:
    category = await db.get(Category, category_id)
    if not category:
        raise ResourceNotFoundError("Category", category_id)
    return category


async def get_product(
    db: AsyncSession, product_id: str, *, active_only: bool = False
) -> Product:
    query = select(Product).where(Product.id == product_id)
    if active_only:
        query = query.where(Product.is_active.is_(True))
    product = (await db.execute(query)).scalar_one_or_none()
    if not product:
        raise ResourceNotFoundError("Product", product_id)
    return product


async def list_products(
    db: AsyncSession,
    *,
    active_only: bool = True,
    category_id: str | None = None,
    search: str | None = None,
    top_sellers: bool = False,
    limit: int | None = None,
) -> list[Product]:
    query = select(Product)
    if active_only:
        query = query.where(Product.is_active.is_(True))
    if top_sellers:
        query = query.where(Product.top_seller.is_(True))
    if category_id:
        query = query.where(Product.category_id == category_id)
    if search:
        term = f"%{search.strip()}%"
        query = query.where(or_(Product.name.ilike(term), Product.description.ilike(term)))
    query = query.order_by(Product.created_at.desc())
    if limit is not None:
        query = query.limit(limit)
    return list((await db.execute(query)).scalars().all())


async def list_categories(db: AsyncSession) -> list[Category]:
    result = await db.execute(select(Category).order_by(Category.name))
    return list(result.scalars().all())


async def create_product(db: AsyncSession, body: ProductCreate) -> Product:
    await get_category(db, body.category_id)
    data = body.model_dump(exclude={"image_urls"})
    product = Product(**data, image_url=encode_image_urls(body.image_urls))
    db.add(product)
    await db.flush()
    await db.refresh(product, ["category"])
    logger.info("Created product %s (%s)", product.id, product.name)
    return product


async def update_product(db: AsyncSession, product_id: str, body: ProductUpdate) -> Product:
    product = await get_product(db, product_id)
    updates = body.model_dump(exclude_unset=True)
    if "image_urls" in updates:
        product.image_url = encode_image_urls(updates.pop("image_urls") or [])
    if updates.get("category_id"):
        await get_category(db, updates["category_id"])
    for key, value in updates.items():
        if value is None and key in ("name", "category_id", "is_active", "top_seller"):
            continue
        setattr(product, key, value)
    await db.flush()
    await db.refresh(product, ["category"])
    return product


async def delete_product(db: AsyncSession, product_id: str) -> None:
    product = await get_product(db, product_id)
    in_use = await db.scalar(
        select(func.count(Enquiry.id)).where(Enquiry.product_id == product_id)
    )
    if in_use:
        raise WorkflowConflict(
            f"Product is referenced by {in_use} enquiries; deactivate it instead",
            error_code="PRODUCT_IN_USE",
        )
    await db.delete(product)
    await db.flush()


async def delete_category(db: AsyncSession, category_id: str) -> None:
    category = await get_category(db, category_id)
    if category.name == settings.custom_orders_category:
        raise WorkflowConflict(
            f"'{category.name}' is reserved for custom orders",
            error_code="CATEGORY_RESERVED",
        )
    in_use = await db.scalar(
        select(func.count(Product.id)).where(Product.category_id == category_id)
    )
    if in_use:
        raise WorkflowConflict(
            f"Category still has {in_use} products",
            error_code="CATEGORY_IN_USE",
        )
    await db.delete(category)
    await db.flush()
