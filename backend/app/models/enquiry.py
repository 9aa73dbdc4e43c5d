"""Enquiry — one requested line item tied to a customer and a product.

EnquiryActivity is the append-only audit trail of reply/status actions
taken on an enquiry.
"""

import enum
import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base


class EnquiryStatus(str, enum.Enum):
    PENDING = "pending"
    PO_PENDING = "po_pending"
    ORDER_CONFIRMED = "order_confirmed"
    INCORRECT_PO = "incorrect_po"
    ARTWORK_SENT = "artwork_sent"
    WIP = "wip"
    REPLIED = "replied"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ActivityAction(str, enum.Enum):
    REPLY = "reply"
    STATUS_CHANGE = "status_change"
    REPLY_EMAIL = "reply_email"


class Enquiry(Base):
    __tablename__ = "enquiries"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    customer_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("customers.id"), nullable=False, index=True
    )
    product_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("products.id"), nullable=False, index=True
    )

    # ── Specs ──────────────────────────────────────────────────
    size: Mapped[str | None] = mapped_column(String(100))
    quantity: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    material: Mapped[str | None] = mapped_column(String(255))
    delivery_date: Mapped[str | None] = mapped_column(String(50))
    comments: Mapped[str | None] = mapped_column(Text)

    # ── Workflow ───────────────────────────────────────────────
    # Stored as plain text; app.services.enquiry_workflow validates values
    status: Mapped[str] = mapped_column(
        String(30), default=EnquiryStatus.PENDING.value, nullable=False, index=True
    )
    reply_template_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("templates.id", ondelete="SET NULL")
    )
    quotation_amount: Mapped[Decimal | None] = mapped_column(Numeric(12, 2))
    invoice_number: Mapped[str | None] = mapped_column(String(100))

    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    customer = relationship("Customer", lazy="selectin")
    product = relationship("Product", lazy="selectin")
    activity = relationship(
        "EnquiryActivity",
        back_populates="enquiry",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="EnquiryActivity.created_at",
    )


class EnquiryActivity(Base):
    __tablename__ = "enquiry_activity"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    enquiry_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("enquiries.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # reply | status_change | reply_email
    action: Mapped[str] = mapped_column(String(30), nullable=False)
    note: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, nullable=False
    )

    enquiry = relationship("Enquiry", back_populates="activity")
