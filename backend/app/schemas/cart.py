"""Cart line items and the cart submission payload.

A line is a tagged variant on `type`:
  - "product": refers to a catalog product by `product_id`
  - "custom":  a freeform item, resolved to a product in the reserved
               "Custom Orders" category at submission time

Older clients send product lines with a composite `id` of the form
"<productId>:<timestamp>" and no `product_id`; that id is still accepted.
"""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, RootModel, model_validator


class _LineBase(BaseModel):
    id: str | None = Field(None, description="Client-side line id")
    name: str = Field(..., min_length=1, max_length=255)
    size: str | None = None
    quantity: int | None = Field(1, ge=0)
    material: str | None = None
    comments: str | None = None
    images: list[str] = Field(
        default_factory=list,
        description="Original filenames of images the client will attach",
    )


class ProductLine(_LineBase):
    type: Literal["product"] = "product"
    product_id: str = Field(..., min_length=1)

    @model_validator(mode="before")
    @classmethod
    def _legacy_composite_id(cls, data):
        if isinstance(data, dict) and not data.get("product_id") and data.get("id"):
            data = {**data, "product_id": str(data["id"]).split(":", 1)[0]}
        return data


class CustomLine(_LineBase):
    type: Literal["custom"] = "custom"


CartLine = Annotated[Union[ProductLine, CustomLine], Field(discriminator="type")]


class ContactFields(BaseModel):
    """Submission-level fields shared by enquiry intake and the quotation email."""
    company_name: str = ""
    email: str | None = None
    department: str | None = None
    contact: str | None = None
    delivery: str | None = None
    comments: str | None = None


class CartSubmission(ContactFields):
    items: list[CartLine] = Field(default_factory=list)


class IntakeResponse(BaseModel):
    ok: bool = True
    customer_id: str
    customer_created: bool = False
    enquiry_ids: list[str]


class CartLineIn(RootModel[CartLine]):
    """A single line posted on its own (the body is the line itself)."""


class CartReplace(BaseModel):
    items: list[CartLine] = Field(default_factory=list)


class CartLinePatch(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    size: str | None = None
    quantity: int | None = Field(None, ge=1)
    material: str | None = None
    comments: str | None = None
    images: list[str] | None = None


class CartOut(BaseModel):
    cart_id: str
    items: list[CartLine]


class QuotationDraft(BaseModel):
    """What a client posts to /api/send-quotation-email for a cart."""
    to: str
    subject: str
    body: str
    cart_manifest: str
    attachment_fields: dict[str, str] = Field(
        default_factory=dict,
        description="Form field name → attachment filename, per declared image",
    )
