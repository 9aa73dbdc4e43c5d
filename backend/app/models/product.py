"""Product — a catalog entry.

`image_url` holds either a single URL or a JSON-encoded list of URLs
(a slideshow). Use `image_urls` to read it as a list.
"""

import json
import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base


def decode_image_urls(raw: str | None) -> list[str]:
    if not raw:
        return []
    if raw.lstrip().startswith("["):
        try:
            urls = json.loads(raw)
        except ValueError:
            return [raw]
        return [str(u) for u in urls if u]
    return [raw]


def encode_image_urls(urls: list[str]) -> str | None:
    urls = [u for u in urls if u]
    if not urls:
        return None
    if len(urls) == 1:
        return urls[0]
    return json.dumps(urls)


class Product(Base):
    __tablename__ = "products"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    description: Mapped[str | None] = mapped_column(Text)
    category_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("categories.id"), nullable=False, index=True
    )
    image_url: Mapped[str | None] = mapped_column(Text)
    sizes: Mapped[list] = mapped_column(JSON, default=list)
    materials: Mapped[list] = mapped_column(JSON, default=list)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    top_seller: Mapped[bool] = mapped_column(Boolean, default=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    category = relationship("Category", back_populates="products", lazy="selectin")

    @property
    def image_urls(self) -> list[str]:
        return decode_image_urls(self.image_url)

    @property
    def category_name(self) -> str | None:
        return self.category.name if self.category else None
