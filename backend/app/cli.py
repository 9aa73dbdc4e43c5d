"""Management CLI.

Usage:
    python -m app.cli create-admin USERNAME PASSWORD   # Create or reset an admin login
    python -m app.cli seed-templates                   # Insert the starter message templates
"""

import sys

from sqlalchemy import create_engine, select
from sqlalchemy.orm import Session

from app.auth.password import hash_password
from app.config import settings
from app.models.template import Template
from app.models.user import User

DEFAULT_TEMPLATES = [
    {
        "type": "customer",
        "category": "quotation",
        "title": "Quotation ready",
        "content": (
            "Dear {customer_name},\n\n"
            "Thank you for your enquiry for {product_name} "
            "(size {size}, material {material}, qty {quantity}).\n"
            "Your quotation reference is {quotation_id}. "
            "We can deliver by {delivery_date}.\n\n"
            "Regards,\n" + settings.company_name
        ),
    },
    {
        "type": "customer",
        "category": "artwork",
        "title": "Artwork sent for approval",
        "content": (
            "Dear {customer_name},\n\n"
            "The artwork for {product_name} ({quotation_id}) has been sent. "
            "Please confirm so we can start production.\n\n"
            "Regards,\n" + settings.company_name
        ),
    },
    {
        "type": "supplier",
        "category": "reorder",
        "title": "Stock reorder",
        "content": (
            "Hello {supplier_name},\n\n"
            "Please supply {threshold} units of {item_name}. "
            "Current stock is {quantity}.\n\n"
            "Regards,\n" + settings.company_name
        ),
    },
]


def create_admin(session: Session, username: str, password: str) -> User:
    """Create the admin, or reset the password of an existing one."""
    user = session.execute(
        select(User).where(User.username == username)
    ).scalar_one_or_none()
    if user:
        user.password_hash = hash_password(password)
    else:
        user = User(username=username, password_hash=hash_password(password))
        session.add(user)
    session.commit()
    return user


def seed_templates(session: Session) -> int:
    """Insert starter templates whose title is not taken yet."""
    existing = set(session.execute(select(Template.title)).scalars().all())
    added = 0
    for data in DEFAULT_TEMPLATES:
        if data["title"] in existing:
            continue
        session.add(Template(**data))
        added += 1
    session.commit()
    return added


def _session() -> Session:
    return Session(create_engine(settings.database_url_sync))


if __name__ == "__main__":
    cmd = sys.argv[1] if len(sys.argv) > 1 else ""
    if cmd == "create-admin" and len(sys.argv) == 4:
        with _session() as session:
            user = create_admin(session, sys.argv[2], sys.argv[3])
            print(f"  Admin '{user.username}' ready")
    elif cmd == "seed-templates":
        with _session() as session:
            print(f"  {seed_templates(session)} template(s) added")
    else:
        print("Usage: python -m app.cli [create-admin USERNAME PASSWORD|seed-templates]")
