"""Public storefront routes: catalog reads and the contact form.

Only active products are visible here; admin routes see everything.
"""

import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import get_db
from app.schemas.catalog import CategoryOut, ProductOut
from app.schemas.storefront import ContactRequest, OkResponse
from app.services import catalog
from app.services.mailer import Mailer, get_mailer

logger = logging.getLogger("signshop.storefront")

router = APIRouter()


@router.get("/api/products", response_model=list[ProductOut])
async def list_products(
    category_id: str | None = Query(None),
    search: str | None = Query(None),
    db: AsyncSession = Depends(get_db),
):
    products = await catalog.list_products(db, category_id=category_id, search=search)
    return [ProductOut.model_validate(p) for p in products]


@router.get("/api/products/top-sellers", response_model=list[ProductOut])
async def top_sellers(db: AsyncSession = Depends(get_db)):
    products = await catalog.list_products(
        db, top_sellers=True, limit=catalog.TOP_SELLER_LIMIT
    )
    return [ProductOut.model_validate(p) for p in products]


@router.get("/api/products/{product_id}", response_model=ProductOut)
async def get_product(product_id: str, db: AsyncSession = Depends(get_db)):
    product = await catalog.get_product(db, product_id, active_only=True)
    return ProductOut.model_validate(product)


@router.get("/api/categories", response_model=list[CategoryOut])
async def list_categories(db: AsyncSession = Depends(get_db)):
    return [CategoryOut.model_validate(c) for c in await catalog.list_categories(db)]


def contact_email_body(body: ContactRequest) -> str:
    return (
        f"Name: {body.name}\n"
        f"Company: {body.company or 'Not specified'}\n"
        f"Email: {body.email}\n"
        f"Phone: {body.phone or 'Not specified'}\n\n"
        f"Message:\n{body.message.strip()}"
    )


@router.post("/api/contact", response_model=OkResponse)
async def contact(body: ContactRequest, mailer: Mailer = Depends(get_mailer)):
    msg = mailer.new_message(
        to=settings.company_mailbox,
        subject=f"Contact Form: {body.subject or 'General Inquiry'}",
        body=contact_email_body(body),
        reply_to=body.email,
    )
    await mailer.send_async(msg)
    logger.info("Contact form forwarded from %s", body.email)
    return OkResponse()
