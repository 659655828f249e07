# stockroom/models.py
"""Value objects shared by the sync loop and the browser layer."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping

from .errors import ValidationError


def _clean_category(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


@dataclass(frozen=True)
class Product:
    id: Any
    name: str
    quantity: int
    price: Decimal
    category: str | None = None

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> "Product":
        """Build a product from an API record.

        Raises ``ValueError`` (or ``KeyError``/``TypeError``) when the record
        is missing ``id``/``name``, its stock is not a whole number >= 0 or
        its price is not a finite decimal >= 0.
        """
        pid = data.get("id", data.get("_id"))
        if pid is None:
            raise ValueError("product without id")
        name = data["name"]
        if not isinstance(name, str) or not name:
            raise ValueError("product without name")
        try:
            price = Decimal(str(data.get("price", 0)))
            quantity = Decimal(str(data.get("quantity", 0)))
        except InvalidOperation as e:
            raise ValueError(f"bad price or quantity for product {pid}") from e
        if not price.is_finite() or price < 0:
            raise ValueError(f"bad price for product {pid}")
        if not quantity.is_finite() or quantity < 0 or quantity != quantity.to_integral_value():
            raise ValueError(f"bad quantity for product {pid}")
        return cls(
            id=pid,
            name=name,
            quantity=int(quantity),
            price=price,
            category=_clean_category(data.get("category")),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "quantity": self.quantity,
            "price": str(self.price),
            "category": self.category,
        }


@dataclass(frozen=True)
class ProductDraft:
    """A product payload without the server-assigned id."""

    name: str
    quantity: int
    price: Decimal
    category: str | None = None

    @classmethod
    def from_form(cls, data: Mapping[str, Any]) -> "ProductDraft":
        """Parse browser form or JSON data, enforcing the form constraints.

        ``name`` is required, ``quantity`` must be a whole number >= 0 and
        ``price`` a decimal >= 0.  A blank category means "no category".
        """
        name = str(data.get("name") or "").strip()
        if not name:
            raise ValidationError("name", "Name is required")

        raw_qty = data.get("quantity")
        if raw_qty is None or str(raw_qty).strip() == "":
            raise ValidationError("quantity", "Quantity is required")
        try:
            quantity = int(str(raw_qty).strip())
        except ValueError:
            raise ValidationError("quantity", "Quantity must be a whole number")
        if quantity < 0:
            raise ValidationError("quantity", "Quantity cannot be negative")

        raw_price = data.get("price")
        if raw_price is None or str(raw_price).strip() == "":
            raise ValidationError("price", "Price is required")
        try:
            price = Decimal(str(raw_price).strip())
        except InvalidOperation:
            raise ValidationError("price", "Price must be a number")
        if not price.is_finite() or price < 0:
            raise ValidationError("price", "Price cannot be negative")

        return cls(
            name=name,
            quantity=quantity,
            price=price,
            category=_clean_category(data.get("category")),
        )

    def to_payload(self) -> dict:
        return {
            "name": self.name,
            "quantity": self.quantity,
            "price": float(self.price),
            "category": self.category,
        }


@dataclass(frozen=True)
class ViewModel:
    """Render-ready snapshot of one page of products and its status."""

    items: tuple[Product, ...] = ()
    page: int = 1
    total_pages: int = 0
    total_items: int = 0
    loading: bool = False
    error: str | None = None

    @property
    def placeholder(self) -> bool:
        # First fetch of a session: nothing to show yet.
        return self.loading and not self.items

    def begin_loading(self) -> "ViewModel":
        return replace(self, loading=True)

    def failed(self, message: str) -> "ViewModel":
        return replace(self, loading=False, error=message)

    def to_dict(self) -> dict:
        return {
            "items": [p.to_dict() for p in self.items],
            "page": self.page,
            "total_pages": self.total_pages,
            "total_items": self.total_items,
            "loading": self.loading,
            "error": self.error,
        }


@dataclass(frozen=True)
class MutationResult:
    ok: bool
    error: str | None = None
    product: Product | None = field(default=None)

    @classmethod
    def success(cls, product: Product | None = None) -> "MutationResult":
        return cls(ok=True, product=product)

    @classmethod
    def failure(cls, message: str) -> "MutationResult":
        return cls(ok=False, error=message)
