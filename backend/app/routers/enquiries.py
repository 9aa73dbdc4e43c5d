"""Admin enquiry routes: listing, export, workflow actions and deletion.

Route overview (all under /api/admin/enquiries, admin session required):
  GET    /                 — newest first; ?status= &search= &limit= &offset=
  GET    /export.csv       — same filters, as CSV
  POST   /                 — manual enquiry for an existing product
  GET    /{id}             — one enquiry with customer and product
  POST   /{id}/status      — single transition (completed needs invoice_number)
  POST   /{id}/reply       — mark replied with template / quotation amount
  GET    /{id}/activity    — activity trail, oldest first
  DELETE /{id}             — hard delete
  POST   /bulk-status      — one status for many ids
  POST   /bulk-delete      — hard delete many ids
"""

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.deps import get_admin_db
from app.schemas.common import PaginatedResponse
from app.schemas.enquiry import (
    ActivityOut,
    BulkDeleteRequest,
    BulkResult,
    BulkStatusRequest,
    EnquiryOut,
    ManualEnquiryCreate,
    ReplyRequest,
    StatusChangeRequest,
)
from app.services import enquiry_workflow as workflow
from app.services.enquiry_intake import create_manual_enquiry
from app.utils.csv_export import ColumnDef, rows_to_csv

router = APIRouter()

ENQUIRY_CSV_COLUMNS = [
    ColumnDef("Enquiry ID", lambda e: e.id),
    ColumnDef("Created", lambda e: e.created_at),
    ColumnDef("Company", lambda e: e.customer.company_name if e.customer else None),
    ColumnDef("Email", lambda e: e.customer.email if e.customer else None),
    ColumnDef("Phone", lambda e: e.customer.phone if e.customer else None),
    ColumnDef("Product", lambda e: e.product.name if e.product else None),
    ColumnDef("Size", lambda e: e.size),
    ColumnDef("Material", lambda e: e.material),
    ColumnDef("Quantity", lambda e: e.quantity),
    ColumnDef("Delivery", lambda e: e.delivery_date),
    ColumnDef("Comments", lambda e: e.comments),
    ColumnDef("Status", lambda e: e.status),
    ColumnDef("Quotation Amount", lambda e: e.quotation_amount),
    ColumnDef("Invoice Number", lambda e: e.invoice_number),
]


@router.get("/", response_model=PaginatedResponse[EnquiryOut])
async def list_enquiries(
    status_filter: str | None = Query(None, alias="status"),
    search: str | None = Query(None),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_admin_db),
):
    items, total = await workflow.list_enquiries(
        db, status=status_filter, search=search, limit=limit, offset=offset
    )
    return PaginatedResponse(
        items=[EnquiryOut.model_validate(e) for e in items],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.get("/export.csv")
async def export_enquiries(
    status_filter: str | None = Query(None, alias="status"),
    search: str | None = Query(None),
    db: AsyncSession = Depends(get_admin_db),
):
    items, _ = await workflow.list_enquiries(db, status=status_filter, search=search)
    return StreamingResponse(
        iter([rows_to_csv(ENQUIRY_CSV_COLUMNS, items)]),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="enquiries.csv"'},
    )


@router.post("/", response_model=EnquiryOut, status_code=status.HTTP_201_CREATED)
async def create_enquiry(
    body: ManualEnquiryCreate,
    db: AsyncSession = Depends(get_admin_db),
):
    enquiry = await create_manual_enquiry(db, body)
    await db.refresh(enquiry, ["customer", "product"])
    return EnquiryOut.model_validate(enquiry)


@router.post("/bulk-status", response_model=BulkResult)
async def bulk_status(
    body: BulkStatusRequest,
    db: AsyncSession = Depends(get_admin_db),
):
    affected = await workflow.bulk_change_status(db, body.ids, body.status)
    return BulkResult(affected=affected)


@router.post("/bulk-delete", response_model=BulkResult)
async def bulk_delete(
    body: BulkDeleteRequest,
    db: AsyncSession = Depends(get_admin_db),
):
    affected = await workflow.delete_enquiries(db, body.ids)
    return BulkResult(affected=affected)


@router.get("/{enquiry_id}", response_model=EnquiryOut)
async def get_enquiry(
    enquiry_id: str,
    db: AsyncSession = Depends(get_admin_db),
):
    return EnquiryOut.model_validate(await workflow.get_enquiry(db, enquiry_id))


@router.post("/{enquiry_id}/status", response_model=EnquiryOut)
async def change_status(
    enquiry_id: str,
    body: StatusChangeRequest,
    db: AsyncSession = Depends(get_admin_db),
):
    enquiry = await workflow.change_status(
        db, enquiry_id, body.status, invoice_number=body.invoice_number
    )
    return EnquiryOut.model_validate(enquiry)


@router.post("/{enquiry_id}/reply", response_model=EnquiryOut)
async def record_reply(
    enquiry_id: str,
    body: ReplyRequest,
    db: AsyncSession = Depends(get_admin_db),
):
    enquiry = await workflow.record_reply(
        db,
        enquiry_id,
        template_id=body.template_id,
        quotation_amount=body.quotation_amount,
        status=body.status,
    )
    return EnquiryOut.model_validate(enquiry)


@router.get("/{enquiry_id}/activity", response_model=list[ActivityOut])
async def enquiry_activity(
    enquiry_id: str,
    db: AsyncSession = Depends(get_admin_db),
):
    rows = await workflow.list_activity(db, enquiry_id)
    return [ActivityOut.model_validate(r) for r in rows]


@router.delete("/{enquiry_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_enquiry(
    enquiry_id: str,
    db: AsyncSession = Depends(get_admin_db),
):
    await workflow.get_enquiry(db, enquiry_id)
    await workflow.delete_enquiries(db, [enquiry_id])
