"""Quotation request email composition.

A cart submission produces one email to the company mailbox:

  subject:  "Quotation Request - N item(s)"
  body:     the submission-level fields, then the cart manifest (a JSON
            array of the lines, without their images)
  files:    every image of every line, named
            "{type}-{line id}-{index}-{original filename}" so that files
            from different lines never collide

The browser posts these as multipart form data; image fields are named
"item{N}_file_{M}" (or the older "file_*").
"""

import json
import re
from dataclasses import dataclass
from email.message import EmailMessage
from typing import Sequence

from app.middleware.exceptions import ValidationFailed
from app.schemas.cart import CartLine, ContactFields, QuotationDraft
from app.services.mailer import Mailer

ATTACHMENT_FIELD_RE = re.compile(r"^(item\d+_file_\d+|file_.+)$")

CONTACT_LABELS = (
    ("Company", "company_name"),
    ("Email", "email"),
    ("Department", "department"),
    ("Contact", "contact"),
    ("Delivery", "delivery"),
    ("Comments", "comments"),
)


@dataclass
class Attachment:
    filename: str
    content: bytes
    content_type: str = "application/octet-stream"


def is_attachment_field(name: str) -> bool:
    return bool(ATTACHMENT_FIELD_RE.match(name))


def attachment_field(item_index: int, file_index: int) -> str:
    return f"item{item_index}_file_{file_index}"


def attachment_filename(line_type: str, line_id: str, index: int, original: str) -> str:
    return f"{line_type}-{line_id}-{index}-{original}"


def quotation_subject(item_count: int) -> str:
    return f"Quotation Request - {item_count} item(s)"


def quotation_body(fields: ContactFields) -> str:
    return "\n".join(
        f"{label}: {getattr(fields, attr) or ''}" for label, attr in CONTACT_LABELS
    )


def cart_manifest(items: Sequence[CartLine]) -> str:
    return json.dumps(
        [item.model_dump(exclude={"images"}, exclude_none=True) for item in items]
    )


def draft_quotation(
    fields: ContactFields,
    items: Sequence[CartLine],
    to: str,
) -> QuotationDraft:
    """Everything a client needs to post to /api/send-quotation-email."""
    attachment_fields: dict[str, str] = {}
    for idx, item in enumerate(items):
        for fidx, original in enumerate(item.images):
            attachment_fields[attachment_field(idx, fidx)] = attachment_filename(
                item.type, item.id or str(idx), fidx, original
            )
    return QuotationDraft(
        to=to,
        subject=quotation_subject(len(items)),
        body=quotation_body(fields),
        cart_manifest=cart_manifest(items),
        attachment_fields=attachment_fields,
    )


def _manifest_text(raw: str) -> str:
    try:
        parsed = json.loads(raw)
    except ValueError:
        raise ValidationFailed("cart_manifest must be a JSON array")
    if not isinstance(parsed, list):
        raise ValidationFailed("cart_manifest must be a JSON array")
    return json.dumps(parsed, indent=2, ensure_ascii=False)


def build_quotation_email(
    mailer: Mailer,
    *,
    subject: str,
    body: str,
    to: str,
    reply_to: str | None = None,
    manifest: str | None = None,
    attachments: Sequence[Attachment] = (),
) -> EmailMessage:
    if not subject or not subject.strip() or not body or not body.strip():
        raise ValidationFailed("Missing fields: subject and body are required")

    text = body
    if manifest:
        text = f"{body}\n\nCart manifest:\n{_manifest_text(manifest)}"

    msg = mailer.new_message(to=to, subject=subject, body=text, reply_to=reply_to)
    for att in attachments:
        maintype, _, subtype = (att.content_type or "").partition("/")
        if not maintype or not subtype:
            maintype, subtype = "application", "octet-stream"
        msg.add_attachment(
            att.content, maintype=maintype, subtype=subtype, filename=att.filename
        )
    return msg
