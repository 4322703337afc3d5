"""Shopping cart with cutting and edge-banding services, plus basket sync.

The cart lives in the local store between page reloads and is mirrored to the
backend basket so a sale started on one till can be finished on another.
"""

from __future__ import annotations

import uuid
from decimal import Decimal
from typing import Dict, List, Optional

from pydantic import TypeAdapter, ValidationError

from api import ApiError
from ledger import parse_amount
from logging_setup import get_logger
from schemas import CartItem, CuttingService, EdgeBandingService, Product, Sale
from storage import CART_KEY

DEFAULT_PRICE_PER_CUT = Decimal("20000")

# edge tape thickness (cm) -> price per linear meter
EDGE_BANDING_PRICES: Dict[Decimal, Decimal] = {
    Decimal("0.4"): Decimal("2800"),
    Decimal("1"): Decimal("3200"),
    Decimal("2"): Decimal("3500"),
    Decimal("0.32"): Decimal("6000"),
}

_items_adapter = TypeAdapter(List[CartItem])
_logger = get_logger("pos_ui.cart")


class CartError(ValueError):
    pass


class Cart:
    def __init__(self, items: Optional[List[CartItem]] = None):
        self.items: List[CartItem] = list(items or [])

    def __len__(self):
        return len(self.items)

    def __iter__(self):
        return iter(self.items)

    def get(self, item_id: str) -> CartItem:
        for item in self.items:
            if item.id == item_id:
                return item
        raise CartError(f"no cart item {item_id}")

    def add(self, product: Product, quantity: int = 1) -> CartItem:
        """Add ``quantity`` of ``product``; an existing line for it grows instead."""
        if quantity < 1:
            raise CartError("quantity must be at least 1")
        for i, item in enumerate(self.items):
            if item.product.id == product.id:
                merged = item.model_copy(update={"quantity": item.quantity + quantity})
                self.items[i] = merged
                return merged
        item = CartItem(id=uuid.uuid4().hex, product=product, quantity=quantity)
        self.items.append(item)
        return item

    def remove(self, item_id: str) -> None:
        self.items = [i for i in self.items if i.id != item_id]

    def update_quantity(self, item_id: str, quantity: int) -> None:
        if quantity <= 0:
            self.remove(item_id)
            return
        self._replace(item_id, quantity=quantity)

    def set_cutting(self, item_id: str, boards: int, price_per_cut=DEFAULT_PRICE_PER_CUT) -> CuttingService:
        try:
            service = CuttingService(number_of_boards=boards, price_per_cut=price_per_cut)
        except ValidationError as e:
            raise CartError(f"invalid cutting service: {e}") from e
        self._replace(item_id, cutting_service=service)
        return service

    def set_edge_banding(
        self, item_id: str, thickness, width_mm: int, height_mm: int, price_per_meter=None
    ) -> EdgeBandingService:
        thickness = Decimal(str(thickness))
        if price_per_meter is None:
            try:
                price_per_meter = EDGE_BANDING_PRICES[thickness]
            except KeyError:
                raise CartError(f"no edge banding price for thickness {thickness}") from None
        try:
            service = EdgeBandingService(
                thickness=thickness,
                width=width_mm,
                height=height_mm,
                price_per_meter=price_per_meter,
            )
        except ValidationError as e:
            raise CartError(f"invalid edge banding service: {e}") from e
        self._replace(item_id, edge_banding_service=service)
        return service

    def clear_services(self, item_id: str) -> None:
        self._replace(item_id, cutting_service=None, edge_banding_service=None)

    def subtotal(self) -> Decimal:
        return sum((i.total for i in self.items), Decimal("0.00"))

    def total(self, discount=0) -> Decimal:
        return self.subtotal() - self._discount(discount)

    def checkout(
        self,
        *,
        payment_method: str = "cash",
        discount=0,
        amount_paid=None,
        salesperson=None,
        customer=None,
    ) -> Sale:
        """Build the sale draft for the current cart.

        Credit sales record what was paid now and what remains as debt.
        """
        if not self.items:
            raise CartError("cart is empty")
        discount = self._discount(discount)
        subtotal = self.subtotal()
        total = subtotal - discount

        fields = {
            "items": list(self.items),
            "subtotal": subtotal,
            "discount": discount,
            "total": total,
            "payment_method": payment_method,
        }
        if salesperson is not None:
            fields["salesperson_id"] = salesperson.id
            fields["salesperson_name"] = salesperson.name
        if customer is not None:
            fields["customer_id"] = customer.id
            fields["customer_name"] = customer.name

        if payment_method == "credit":
            paid = parse_amount(amount_paid or 0)
            if paid > total:
                raise CartError("amount paid exceeds the sale total")
            if customer is None:
                raise CartError("credit sales need a customer")
            fields["amount_paid"] = paid
            fields["amount_due"] = total - paid

        try:
            return Sale(**fields)
        except ValidationError as e:
            raise CartError(f"invalid sale: {e}") from e

    def clear(self) -> None:
        self.items = []

    def to_json(self) -> list:
        return _items_adapter.dump_python(self.items, mode="json")

    @classmethod
    def from_json(cls, data) -> "Cart":
        return cls(_items_adapter.validate_python(data or []))

    def _discount(self, discount) -> Decimal:
        try:
            discount = parse_amount(discount or 0)
        except ValueError as e:
            raise CartError(str(e)) from e
        if discount > self.subtotal():
            raise CartError("discount exceeds subtotal")
        return discount

    def _replace(self, item_id: str, **update) -> None:
        for i, item in enumerate(self.items):
            if item.id == item_id:
                self.items[i] = item.model_copy(update=update)
                return
        raise CartError(f"no cart item {item_id}")


class BasketSync:
    """Keeps the local cart and the backend basket in step."""

    def __init__(self, store, api):
        self.store = store
        self.api = api

    def load(self) -> Cart:
        try:
            return Cart.from_json(self.store.get(CART_KEY))
        except ValidationError:
            _logger.warning("basket:local_cart_invalid; starting empty")
            self.store.remove(CART_KEY)
            return Cart()

    def save(self, cart: Cart) -> None:
        self.store.set(CART_KEY, cart.to_json())

    def sync(self, cart: Cart) -> Cart:
        """Merge the remote basket into ``cart`` and push the result back.

        Lines are matched by product id; when both sides hold a product the
        local line wins. If the backend cannot be reached the local cart is
        kept as is.
        """
        try:
            remote = self._remote_items()
        except (ApiError, ValidationError) as e:
            _logger.warning("basket:fetch_failed; keeping local cart: %s", e)
            self.save(cart)
            return cart

        local_products = {i.product.id for i in cart.items}
        merged = Cart(cart.items + [i for i in remote if i.product.id not in local_products])

        try:
            self.api.replace_basket(merged.to_json())
        except ApiError as e:
            _logger.warning("basket:push_failed: %s", e)
        self.save(merged)
        _logger.debug(
            "basket:synced local=%d remote=%d merged=%d", len(cart), len(remote), len(merged)
        )
        return merged

    def clear(self, cart: Cart) -> None:
        cart.clear()
        self.save(cart)
        try:
            self.api.clear_basket()
        except ApiError as e:
            _logger.warning("basket:clear_failed: %s", e)

    def _remote_items(self) -> List[CartItem]:
        payload = self.api.get_basket()
        if isinstance(payload, dict):
            payload = payload.get("items", [])
        return _items_adapter.validate_python(payload or [])
