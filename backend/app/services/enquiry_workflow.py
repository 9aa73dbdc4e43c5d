"""Enquiry status workflow, replies and the templated reply email.

Status is an open label set: every enumerated status may follow every
other one. ALLOWED_TRANSITIONS spells that out and is checked before
anything is persisted; narrowing the workflow means editing that table.

Two transitions carry side effects:
  - replied:   optional reply template and quotation amount, plus a
               "reply" activity row
  - completed: only with an invoice number (the single-enquiry path
               refuses without one and leaves the status unchanged)

Bulk status changes skip the invoice requirement. That matches how the
back office has always behaved and is kept on purpose.
"""

import logging
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Sequence

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.middleware.exceptions import (
    AppError,
    ResourceNotFoundError,
    ValidationFailed,
    WorkflowConflict,
)
from app.models.customer import Customer
from app.models.enquiry import ActivityAction, Enquiry, EnquiryActivity, EnquiryStatus
from app.models.product import Product
from app.models.template import Template
from app.services.mailer import Mailer
from app.utils.activity import log_enquiry_activity
from app.utils.templating import fill_template

logger = logging.getLogger("signshop.workflow")

ALL_STATUSES: tuple[str, ...] = tuple(s.value for s in EnquiryStatus)

ALLOWED_TRANSITIONS: dict[str, frozenset[str]] = {
    s: frozenset(ALL_STATUSES) for s in ALL_STATUSES
}

SECTION_SEPARATOR = "\n\n---\n\n"


def parse_status(value: str) -> EnquiryStatus:
    try:
        return EnquiryStatus((value or "").strip())
    except ValueError:
        raise ValidationFailed(
            f"Invalid status '{value}'. Choose: {', '.join(ALL_STATUSES)}",
            error_code="INVALID_STATUS",
        )


def check_transition(current: str, target: EnquiryStatus) -> None:
    allowed = ALLOWED_TRANSITIONS.get(current, frozenset(ALL_STATUSES))
    if target.value not in allowed:
        raise WorkflowConflict(
            f"Cannot move enquiry from '{current}' to '{target.value}'",
            error_code="TRANSITION_NOT_ALLOWED",
        )


def parse_quotation_amount(text: str | None) -> Decimal | None:
    """Parse the admin's decimal text; blank means no amount."""
    if text is None or not str(text).strip():
        return None
    try:
        amount = Decimal(str(text).strip())
    except InvalidOperation:
        amount = None
    if amount is None or not amount.is_finite() or amount < 0:
        raise AppError(
            f"Invalid quotation amount '{text}'",
            status_code=422,
            error_code="INVALID_AMOUNT",
        )
    return amount.quantize(Decimal("0.01"))


# ── Reads ────────────────────────────────────────────────────

async def get_enquiry(db: AsyncSession, enquiry_id: str) -> Enquiry:
    result = await db.execute(select(Enquiry).where(Enquiry.id == enquiry_id))
    enquiry = result.scalar_one_or_none()
    if not enquiry:
        raise ResourceNotFoundError("Enquiry", enquiry_id)
    return enquiry


def _filtered(query, status: str | None, search: str | None):
    if status:
        query = query.where(Enquiry.status == parse_status(status).value)
    if search:
        term = f"%{search.strip()}%"
        query = query.where(
            or_(
                Customer.company_name.ilike(term),
                Product.name.ilike(term),
                Enquiry.comments.ilike(term),
            )
        )
    return query


async def list_enquiries(
    db: AsyncSession,
    *,
    status: str | None = None,
    search: str | None = None,
    limit: int | None = None,
    offset: int = 0,
) -> tuple[list[Enquiry], int]:
    """Newest first, with customer and product loaded."""
    base = (
        select(Enquiry)
        .join(Customer, Enquiry.customer_id == Customer.id)
        .join(Product, Enquiry.product_id == Product.id)
    )
    base = _filtered(base, status, search)

    count_q = _filtered(
        select(func.count(Enquiry.id))
        .select_from(Enquiry)
        .join(Customer, Enquiry.customer_id == Customer.id)
        .join(Product, Enquiry.product_id == Product.id),
        status,
        search,
    )
    total = (await db.execute(count_q)).scalar() or 0

    query = base.order_by(Enquiry.created_at.desc()).offset(offset)
    if limit is not None:
        query = query.limit(limit)
    result = await db.execute(query)
    return list(result.scalars().all()), total


async def list_activity(db: AsyncSession, enquiry_id: str) -> list[EnquiryActivity]:
    await get_enquiry(db, enquiry_id)
    result = await db.execute(
        select(EnquiryActivity)
        .where(EnquiryActivity.enquiry_id == enquiry_id)
        .order_by(EnquiryActivity.created_at)
    )
    return list(result.scalars().all())


# ── Single-enquiry transitions ───────────────────────────────

async def change_status(
    db: AsyncSession,
    enquiry_id: str,
    status: str,
    invoice_number: str | None = None,
) -> Enquiry:
    target = parse_status(status)
    enquiry = await get_enquiry(db, enquiry_id)
    check_transition(enquiry.status, target)

    note = f"status:{enquiry.status}->{target.value}"
    if target is EnquiryStatus.COMPLETED:
        invoice_number = (invoice_number or "").strip()
        if not invoice_number:
            raise WorkflowConflict(
                "An invoice number is required to complete an enquiry",
                error_code="INVOICE_REQUIRED",
                details={"enquiry_id": enquiry_id},
            )
        enquiry.invoice_number = invoice_number
        note += f"; invoice:{invoice_number}"

    enquiry.status = target.value
    enquiry.updated_at = datetime.utcnow()
    await log_enquiry_activity(db, enquiry.id, ActivityAction.STATUS_CHANGE, note)
    await db.flush()
    logger.info("Enquiry %s → %s", enquiry.id, target.value)
    return enquiry


async def record_reply(
    db: AsyncSession,
    enquiry_id: str,
    *,
    template_id: str | None = None,
    quotation_amount: str | None = None,
    status: str = EnquiryStatus.REPLIED.value,
) -> Enquiry:
    target = parse_status(status)
    if target is EnquiryStatus.COMPLETED:
        raise WorkflowConflict(
            "Use the status action with an invoice number to complete an enquiry",
            error_code="INVOICE_REQUIRED",
        )
    amount = parse_quotation_amount(quotation_amount)
    enquiry = await get_enquiry(db, enquiry_id)
    check_transition(enquiry.status, target)

    if template_id:
        if not await db.get(Template, template_id):
            raise ResourceNotFoundError("Template", template_id)
        enquiry.reply_template_id = template_id
    if amount is not None:
        enquiry.quotation_amount = amount
    enquiry.status = target.value
    enquiry.updated_at = datetime.utcnow()

    note = (
        f"template:{template_id or '-'}; "
        f"amount:{amount if amount is not None else '-'}; "
        f"status:{target.value}"
    )
    await log_enquiry_activity(db, enquiry.id, ActivityAction.REPLY, note)
    await db.flush()
    return enquiry


# ── Bulk actions ─────────────────────────────────────────────

async def _existing_ids(db: AsyncSession, ids: Sequence[str]) -> list[str]:
    result = await db.execute(select(Enquiry.id).where(Enquiry.id.in_(set(ids))))
    return list(result.scalars().all())


async def bulk_change_status(db: AsyncSession, ids: Sequence[str], status: str) -> int:
    """One UPDATE for all ids. No invoice number is asked for here."""
    target = parse_status(status)
    found = await _existing_ids(db, ids)
    if not found:
        return 0

    await db.execute(
        update(Enquiry)
        .where(Enquiry.id.in_(found))
        .values(status=target.value, updated_at=datetime.utcnow())
        .execution_options(synchronize_session=False)
    )
    for enquiry_id in found:
        await log_enquiry_activity(
            db, enquiry_id, ActivityAction.STATUS_CHANGE, f"bulk status:{target.value}"
        )
    await db.flush()
    logger.info("Bulk status %s applied to %d enquiries", target.value, len(found))
    return len(found)


async def delete_enquiries(db: AsyncSession, ids: Sequence[str]) -> int:
    """Hard delete; the activity trail of each enquiry goes with it."""
    found = await _existing_ids(db, ids) if ids else []
    if not found:
        return 0
    await db.execute(
        delete(EnquiryActivity)
        .where(EnquiryActivity.enquiry_id.in_(found))
        .execution_options(synchronize_session=False)
    )
    await db.execute(
        delete(Enquiry)
        .where(Enquiry.id.in_(found))
        .execution_options(synchronize_session=False)
    )
    logger.info("Deleted %d enquiries", len(found))
    return len(found)


# ── Templated reply email ────────────────────────────────────

def reply_context(enquiry: Enquiry) -> dict[str, str]:
    customer, product = enquiry.customer, enquiry.product
    return {
        "customer_name": customer.company_name if customer else "",
        "product_name": product.name if product else "",
        "quotation_id": enquiry.id,
        "delivery_date": enquiry.delivery_date or "",
        "size": enquiry.size or "",
        "material": enquiry.material or "",
        "quantity": str(enquiry.quantity or ""),
        "quotation_amount": (
            str(enquiry.quotation_amount) if enquiry.quotation_amount is not None else ""
        ),
    }


def compose_reply_body(template_content: str, enquiries: Sequence[Enquiry]) -> str:
    sections = []
    for idx, enquiry in enumerate(enquiries, start=1):
        ctx = reply_context(enquiry)
        sections.append(
            f"Item {idx} ({ctx['product_name']})\n{fill_template(template_content, ctx)}"
        )
    return SECTION_SEPARATOR.join(sections)


def reply_subject(company_name: str, item_count: int) -> str:
    plural = "s" if item_count > 1 else ""
    return f"{company_name or 'Customer'} - Enquiry Update ({item_count} item{plural})"


def single_recipient(enquiries: Sequence[Enquiry]) -> tuple[str, str]:
    """Return (company_name, email) shared by every enquiry, or raise."""
    companies = {(e.customer.company_name if e.customer else "") for e in enquiries}
    emails = {((e.customer.email or "") if e.customer else "") for e in enquiries}
    if len(companies) > 1 or len(emails) > 1:
        raise ValidationFailed(
            "Different companies/emails selected. Select a single customer.",
            error_code="MIXED_CUSTOMERS",
        )
    company, email = companies.pop(), emails.pop()
    if not email:
        raise ValidationFailed("Customer has no email", error_code="NO_CUSTOMER_EMAIL")
    return company, email


async def send_templated_reply(
    db: AsyncSession,
    mailer: Mailer,
    enquiry_ids: Sequence[str],
    template_id: str,
    status: str | None = None,
) -> list[Enquiry]:
    """Send one email covering every selected enquiry, then record it.

    Nothing is sent and nothing is updated unless all enquiries belong to
    one company with one email address. Rows are only touched after the
    email has gone out.
    """
    if not enquiry_ids or not template_id:
        raise ValidationFailed("Missing enquiryIds or templateId")
    target = parse_status(status) if status else None
    mailer.ensure_configured()

    template = await db.get(Template, template_id)
    if not template:
        raise ResourceNotFoundError("Template", template_id)

    wanted = list(dict.fromkeys(enquiry_ids))
    result = await db.execute(select(Enquiry).where(Enquiry.id.in_(wanted)))
    by_id = {e.id: e for e in result.scalars().all()}
    missing = [i for i in wanted if i not in by_id]
    if missing:
        raise ResourceNotFoundError("Enquiry", ", ".join(missing))
    enquiries = [by_id[i] for i in wanted]

    company, email = single_recipient(enquiries)
    msg = mailer.new_message(
        to=email,
        subject=reply_subject(company, len(enquiries)),
        body=compose_reply_body(template.content, enquiries),
    )
    await mailer.send_async(msg)

    now = datetime.utcnow()
    for enquiry in enquiries:
        if target is not None:
            enquiry.status = target.value
            enquiry.reply_template_id = template.id
            enquiry.updated_at = now
        await log_enquiry_activity(
            db,
            enquiry.id,
            ActivityAction.REPLY_EMAIL,
            f"template:{template.id}; status:{status or ''}",
        )
    await db.flush()
    logger.info("Reply email sent to %s for %d enquiries", email, len(enquiries))
    return enquiries
