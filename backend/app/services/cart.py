"""Server-mirrored cart.

The storefront keeps its cart in the browser; this module mirrors it on
the server so it survives a reload or a device switch. A cart is an
ordered list of lines (see app.schemas.cart) keyed by the `cart_id`
cookie. Lines keep insertion order; update and remove address a line by
its id.
"""

import json
import logging
import re
import uuid
from pathlib import Path
from typing import Protocol

from pydantic import TypeAdapter

from app.config import settings
from app.middleware.exceptions import ResourceNotFoundError, ValidationFailed
from app.schemas.cart import CartLine, CartLinePatch, CustomLine

logger = logging.getLogger("signshop.cart")

_lines_adapter = TypeAdapter(list[CartLine])

CART_ID_RE = re.compile(r"^[0-9a-f]{32}$")


def new_cart_id() -> str:
    return uuid.uuid4().hex


def is_valid_cart_id(cart_id: str | None) -> bool:
    return bool(cart_id and CART_ID_RE.match(cart_id))


class Cart:
    def __init__(self, cart_id: str, items: list | None = None):
        self.cart_id = cart_id
        self.items: list = list(items or [])

    def _index(self, line_id: str) -> int:
        for idx, line in enumerate(self.items):
            if line.id == line_id:
                return idx
        raise ResourceNotFoundError("Cart item", line_id)

    def add(self, line) -> object:
        """Append a line, giving it a fresh id when it has none or a taken one."""
        taken = {i.id for i in self.items}
        if not line.id or line.id in taken:
            prefix = "custom:" if isinstance(line, CustomLine) else ""
            line = line.model_copy(update={"id": f"{prefix}{uuid.uuid4()}"})
        self.items.append(line)
        return line

    def update(self, line_id: str, patch: CartLinePatch) -> object:
        idx = self._index(line_id)
        changes = patch.model_dump(exclude_unset=True)
        if "name" in changes and not (changes["name"] or "").strip():
            raise ValidationFailed("Item name cannot be blank")
        if "images" in changes and changes["images"] is None:
            changes["images"] = []
        # Revalidate so a stored line always loads back.
        line = self.items[idx]
        self.items[idx] = type(line).model_validate({**line.model_dump(), **changes})
        return self.items[idx]

    def remove(self, line_id: str) -> None:
        del self.items[self._index(line_id)]

    def clear(self) -> None:
        self.items = []

    def replace(self, lines: list) -> None:
        self.clear()
        for line in lines:
            self.add(line)

    def to_json(self) -> str:
        return json.dumps(
            {"cart_id": self.cart_id, "items": _lines_adapter.dump_python(self.items, mode="json")}
        )

    @classmethod
    def from_json(cls, raw: str) -> "Cart":
        data = json.loads(raw)
        return cls(data["cart_id"], _lines_adapter.validate_python(data.get("items") or []))


class CartStorage(Protocol):
    def load(self, cart_id: str) -> str | None: ...

    def save(self, cart_id: str, raw: str) -> None: ...

    def delete(self, cart_id: str) -> None: ...


class JsonFileCartStorage:
    """One `<cart_id>.json` file per cart under a directory."""

    def __init__(self, directory: str | Path):
        self.directory = Path(directory)

    def _path(self, cart_id: str) -> Path:
        if not is_valid_cart_id(cart_id):
            raise ValidationFailed("Invalid cart id")
        return self.directory / f"{cart_id}.json"

    def load(self, cart_id: str) -> str | None:
        path = self._path(cart_id)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def save(self, cart_id: str, raw: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self._path(cart_id)
        tmp = path.with_suffix(".tmp")
        tmp.write_text(raw, encoding="utf-8")
        tmp.replace(path)

    def delete(self, cart_id: str) -> None:
        self._path(cart_id).unlink(missing_ok=True)


class CartStore:
    def __init__(self, storage: CartStorage):
        self.storage = storage

    def get(self, cart_id: str | None) -> Cart:
        """Load a cart, or start an empty one under a new id."""
        if not is_valid_cart_id(cart_id):
            return Cart(new_cart_id())
        raw = self.storage.load(cart_id)
        if raw is None:
            return Cart(cart_id)
        try:
            return Cart.from_json(raw)
        except (ValueError, KeyError):
            logger.warning("Discarding unreadable cart %s", cart_id)
            return Cart(cart_id)

    def save(self, cart: Cart) -> None:
        self.storage.save(cart.cart_id, cart.to_json())

    def delete(self, cart_id: str) -> None:
        self.storage.delete(cart_id)


def get_cart_storage() -> CartStorage:
    return JsonFileCartStorage(settings.cart_storage_dir)
