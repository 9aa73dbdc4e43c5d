"""Templated reply email to a customer for one or more enquiries."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.deps import get_admin_db
from app.schemas.enquiry import BulkResult, ReplyEmailRequest
from app.services.enquiry_workflow import send_templated_reply
from app.services.mailer import Mailer, get_mailer

router = APIRouter()


@router.post("/api/admin-send-reply", response_model=BulkResult)
async def admin_send_reply(
    body: ReplyEmailRequest,
    db: AsyncSession = Depends(get_admin_db),
    mailer: Mailer = Depends(get_mailer),
):
    """Body: {enquiryIds, templateId, status}. All enquiries must share one customer."""
    enquiries = await send_templated_reply(
        db, mailer, body.enquiry_ids, body.template_id, body.status or None
    )
    return BulkResult(affected=len(enquiries))
