"""Admin dashboard: headline counts, plus the gated admin pages.

/admin and /admin/dashboard are placeholders for the admin UI; the
AdminGateMiddleware decides who reaches them.
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.deps import get_admin_db, get_session_payload
from app.models.customer import Customer
from app.models.enquiry import Enquiry, EnquiryStatus
from app.schemas.storefront import DashboardStats
from app.services.inventory import count_low_stock

router = APIRouter()


async def _count(db: AsyncSession, query) -> int:
    return (await db.execute(query)).scalar() or 0


def _by_status(status: EnquiryStatus):
    return select(func.count(Enquiry.id)).where(Enquiry.status == status.value)


@router.get("/api/admin/dashboard", response_model=DashboardStats)
async def dashboard_stats(db: AsyncSession = Depends(get_admin_db)):
    return DashboardStats(
        total_customers=await _count(db, select(func.count(Customer.id))),
        total_enquiries=await _count(db, select(func.count(Enquiry.id))),
        pending_enquiries=await _count(
            db, _by_status(EnquiryStatus.PENDING)
        ),
        completed_enquiries=await _count(
            db, _by_status(EnquiryStatus.COMPLETED)
        ),
        low_stock_items=await count_low_stock(db),
    )


@router.get("/admin", include_in_schema=False)
async def admin_login_page():
    return {"page": "login", "action": "/api/admin-login"}


@router.get("/admin/dashboard", include_in_schema=False)
async def admin_dashboard_page(request: Request):
    session = get_session_payload(request) or {}
    return {"page": "dashboard", "username": session.get("username")}
