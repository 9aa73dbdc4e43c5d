"""Lightweight helper for recording enquiry activity entries.

Usage:
    await log_enquiry_activity(
        db, enquiry.id, ActivityAction.STATUS_CHANGE,
        note="status:completed; invoice:INV-1001",
    )

The row is added to the current session and committed with the
enclosing transaction — no extra flush is performed.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enquiry import ActivityAction, EnquiryActivity


async def log_enquiry_activity(
    db: AsyncSession,
    enquiry_id: str,
    action: ActivityAction | str,
    note: str | None = None,
) -> EnquiryActivity:
    """Append an activity entry for one enquiry to the current DB session."""
    entry = EnquiryActivity(
        enquiry_id=enquiry_id,
        action=ActivityAction(action).value,
        note=note,
    )
    db.add(entry)
    return entry
