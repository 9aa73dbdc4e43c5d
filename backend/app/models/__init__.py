"""Aggregate model imports for Alembic auto-detection."""

from app.models.user import User
from app.models.customer import Customer, CustomerSource
from app.models.category import Category
from app.models.product import Product
from app.models.template import Template
from app.models.enquiry import ActivityAction, Enquiry, EnquiryActivity, EnquiryStatus
from app.models.inventory_item import InventoryItem

__all__ = [
    "User",
    "Customer", "CustomerSource",
    "Category", "Product",
    "Template",
    "Enquiry", "EnquiryActivity", "EnquiryStatus", "ActivityAction",
    "InventoryItem",
]
