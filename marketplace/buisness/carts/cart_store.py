from __future__ import annotations

from dataclasses import dataclass

from marketplace import db
from marketplace.data.carts.cart import Cart, CartLine
from marketplace.errors import ValidationError


@dataclass(frozen=True)
class CartLineSnapshot:
    inventory_item_id: int
    quantity: int


class CartStore:
    """
    The checkout's view of a vendor cart: read the lines, clear after success.

    Line editing lives with the cart service; set_line() exists so demo data and
    tests can fill a cart through the same tables.
    """

    @staticmethod
    def _cart_for(vendor_id: int) -> Cart | None:
        return Cart.query.filter_by(vendor_id=vendor_id).first()

    def get_lines(self, vendor_id: int) -> list[CartLineSnapshot]:
        cart = self._cart_for(vendor_id)
        if cart is None:
            return []
        return [CartLineSnapshot(line.inventory_item_id, line.quantity) for line in cart.lines]

    def clear(self, vendor_id: int) -> None:
        """Empty the cart in the caller's transaction; the cart row itself stays."""
        cart = self._cart_for(vendor_id)
        if cart is None:
            return
        cart.lines.clear()
        cart.updated_by_id = vendor_id

    def set_line(self, vendor_id: int, inventory_item_id: int, quantity: int) -> CartLine:
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
            raise ValidationError("quantity must be a positive integer", details={'quantity': quantity})
        cart = self._cart_for(vendor_id)
        if cart is None:
            cart = Cart(vendor_id=vendor_id, created_by_id=vendor_id)
            db.session.add(cart)
        return cart.set_quantity(inventory_item_id, quantity)
