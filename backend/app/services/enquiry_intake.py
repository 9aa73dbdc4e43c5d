"""Cart → enquiry ingestion.

Turns one cart submission into:
  1. one Customer, found by exact company name or created (source=web);
     on reuse its email/phone are overwritten by the new submission
  2. for each custom line, a Product in the reserved "Custom Orders"
     category, found by exact name or created
  3. one pending Enquiry per line

Everything is validated before the first write. All writes share the
request's session, so a failure part-way rolls back that request; the
quotation email is a separate call made after this one has committed.
Customers, the category and custom products are all looked up by natural
key first, so a retried submission never duplicates them. Enquiries are
not deduplicated: submitting the same cart twice creates two sets.
"""

import logging
from dataclasses import dataclass, field

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.middleware.exceptions import ResourceNotFoundError, ValidationFailed
from app.models.category import Category
from app.models.customer import Customer, CustomerSource
from app.models.enquiry import Enquiry, EnquiryStatus
from app.models.product import Product
from app.schemas.cart import CartSubmission, CustomLine, ProductLine
from app.schemas.enquiry import ManualEnquiryCreate
from app.schemas.validators import blank_to_none

logger = logging.getLogger("signshop.intake")

COMMENT_SEPARATOR = " | "


@dataclass
class IntakeResult:
    customer_id: str
    customer_created: bool
    enquiry_ids: list[str] = field(default_factory=list)


def join_comments(*parts: str | None) -> str | None:
    """Join the non-empty parts with " | "; None when nothing is left."""
    kept = [p.strip() for p in parts if p and p.strip()]
    return COMMENT_SEPARATOR.join(kept) or None


# ── Lookups (find-or-create by natural key) ─────────────────

async def resolve_customer(
    db: AsyncSession,
    company_name: str,
    email: str | None,
    phone: str | None,
    *,
    source: CustomerSource = CustomerSource.WEB,
    overwrite_contact: bool = True,
) -> tuple[Customer, bool]:
    """Return (customer, created) for an exact company-name match."""
    result = await db.execute(
        select(Customer).where(Customer.company_name == company_name)
    )
    customer = result.scalar_one_or_none()
    if customer:
        if overwrite_contact:
            customer.email = blank_to_none(email)
            customer.phone = blank_to_none(phone)
            await db.flush()
        return customer, False

    customer = Customer(
        company_name=company_name,
        email=blank_to_none(email),
        phone=blank_to_none(phone),
        source=source,
    )
    db.add(customer)
    await db.flush()
    logger.info("Created customer %s (%s)", customer.id, company_name)
    return customer, True


async def ensure_custom_orders_category(db: AsyncSession) -> Category:
    name = settings.custom_orders_category
    result = await db.execute(select(Category).where(Category.name == name))
    category = result.scalar_one_or_none()
    if category:
        return category
    category = Category(name=name, description="Freeform items from custom orders")
    db.add(category)
    await db.flush()
    logger.info("Created reserved category '%s'", name)
    return category


async def ensure_custom_product(db: AsyncSession, name: str) -> Product:
    """Find a product by exact name inside Custom Orders, or create it."""
    category = await ensure_custom_orders_category(db)
    result = await db.execute(
        select(Product)
        .where(Product.category_id == category.id, Product.name == name)
        .order_by(Product.created_at)
        .limit(1)
    )
    product = result.scalar_one_or_none()
    if product:
        return product
    product = Product(name=name, category_id=category.id, is_active=True)
    db.add(product)
    await db.flush()
    logger.info("Created custom product %s (%s)", product.id, name)
    return product


async def _check_products_exist(db: AsyncSession, product_ids: set[str]) -> None:
    if not product_ids:
        return
    result = await db.execute(select(Product.id).where(Product.id.in_(product_ids)))
    missing = product_ids - set(result.scalars().all())
    if missing:
        raise ResourceNotFoundError("Product", ", ".join(sorted(missing)))


# ── Pipeline ─────────────────────────────────────────────────

def validate_submission(body: CartSubmission) -> str:
    """Return the trimmed company name, or raise before anything is written."""
    company_name = (body.company_name or "").strip()
    if not company_name:
        raise ValidationFailed("Company name is required")
    if not body.items:
        raise ValidationFailed("Cart is empty")
    for idx, item in enumerate(body.items, start=1):
        if not item.name.strip():
            raise ValidationFailed(f"Item {idx} has no name")
    return company_name


async def ingest_cart(db: AsyncSession, body: CartSubmission) -> IntakeResult:
    company_name = validate_submission(body)
    await _check_products_exist(
        db, {item.product_id for item in body.items if isinstance(item, ProductLine)}
    )

    customer, created = await resolve_customer(
        db, company_name, body.email, body.contact, source=CustomerSource.WEB
    )
    result = IntakeResult(customer_id=customer.id, customer_created=created)

    for item in body.items:
        if isinstance(item, CustomLine):
            product_id = (await ensure_custom_product(db, item.name.strip())).id
        else:
            product_id = item.product_id

        enquiry = Enquiry(
            customer_id=customer.id,
            product_id=product_id,
            size=blank_to_none(item.size),
            quantity=item.quantity or 1,
            material=blank_to_none(item.material),
            delivery_date=blank_to_none(body.delivery),
            comments=join_comments(body.comments, item.comments),
            status=EnquiryStatus.PENDING.value,
        )
        db.add(enquiry)
        await db.flush()
        result.enquiry_ids.append(enquiry.id)

    logger.info(
        "Ingested %d enquiries for customer %s",
        len(result.enquiry_ids), customer.id,
    )
    return result


async def create_manual_enquiry(
    db: AsyncSession, body: ManualEnquiryCreate
) -> Enquiry:
    """Admin-entered enquiry for a catalog product.

    An existing customer is reused as-is (its contact details are kept);
    a new one is created with source=manual.
    """
    company_name = (body.company_name or "").strip()
    if not company_name or not body.product_id:
        raise ValidationFailed("Company name and product are required")
    await _check_products_exist(db, {body.product_id})

    customer, _ = await resolve_customer(
        db,
        company_name,
        body.email,
        body.phone,
        source=CustomerSource.MANUAL,
        overwrite_contact=False,
    )
    enquiry = Enquiry(
        customer_id=customer.id,
        product_id=body.product_id,
        size=blank_to_none(body.size),
        quantity=body.quantity,
        material=blank_to_none(body.material),
        delivery_date=blank_to_none(body.delivery_date),
        comments=blank_to_none(body.comments),
        status=EnquiryStatus.PENDING.value,
    )
    db.add(enquiry)
    await db.flush()
    return enquiry
