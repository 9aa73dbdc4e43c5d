"""Storefront intake: cart → enquiries, and the quotation request email.

The browser makes two calls: first POST /api/cart-enquiries (rows are
committed when it returns), then POST /api/send-quotation-email with the
composed message and the item images. A failed email leaves the
enquiries in place.
"""

import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.datastructures import UploadFile

from app.config import settings
from app.database import get_db
from app.schemas.cart import CartSubmission, IntakeResponse
from app.schemas.storefront import OkResponse
from app.services.enquiry_intake import ingest_cart
from app.services.mailer import Mailer, get_mailer
from app.services.quotation import Attachment, build_quotation_email, is_attachment_field

logger = logging.getLogger("signshop.intake")

router = APIRouter()


@router.post("/api/cart-enquiries", response_model=IntakeResponse)
async def create_cart_enquiries(
    body: CartSubmission,
    db: AsyncSession = Depends(get_db),
):
    result = await ingest_cart(db, body)
    return IntakeResponse(
        customer_id=result.customer_id,
        customer_created=result.customer_created,
        enquiry_ids=result.enquiry_ids,
    )


def _form_text(form, key: str) -> str:
    value = form.get(key)
    return value if isinstance(value, str) else ""


@router.post("/api/send-quotation-email", response_model=OkResponse)
async def send_quotation_email(
    request: Request,
    mailer: Mailer = Depends(get_mailer),
):
    """Multipart form: subject, body, to?, reply_to?, cart_manifest?, files."""
    form = await request.form()
    try:
        attachments = []
        for key, value in form.multi_items():
            if isinstance(value, UploadFile) and is_attachment_field(key):
                attachments.append(
                    Attachment(
                        filename=value.filename or "attachment",
                        content=await value.read(),
                        content_type=value.content_type or "application/octet-stream",
                    )
                )

        msg = build_quotation_email(
            mailer,
            subject=_form_text(form, "subject"),
            body=_form_text(form, "body"),
            to=_form_text(form, "to") or settings.company_mailbox,
            reply_to=_form_text(form, "reply_to") or None,
            manifest=_form_text(form, "cart_manifest") or None,
            attachments=attachments,
        )
    finally:
        await form.close()

    await mailer.send_async(msg)
    logger.info("Quotation request sent with %d attachment(s)", len(attachments))
    return OkResponse()
