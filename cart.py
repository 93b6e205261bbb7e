"""
Client cart state.

The cart is an immutable value; every reducer returns a new Cart and leaves
its input untouched. The total is derived from the lines on every read.
"""
from dataclasses import dataclass, replace
from typing import Optional, Tuple


@dataclass(frozen=True)
class CartLine:
    food: str
    name: str
    price: float
    quantity: int

    @property
    def subtotal(self) -> float:
        return self.price * self.quantity


@dataclass(frozen=True)
class Cart:
    lines: Tuple[CartLine, ...] = ()

    @property
    def total(self) -> float:
        return round(sum(line.subtotal for line in self.lines), 2)

    @property
    def count(self) -> int:
        return sum(line.quantity for line in self.lines)

    def find(self, food_id: str) -> Optional[CartLine]:
        return next((line for line in self.lines if line.food == food_id), None)


def add_item(cart: Cart, food: dict, quantity: int = 1) -> Cart:
    """Add ``quantity`` of a food document, merging with an existing line."""
    if quantity < 1:
        return cart
    existing = cart.find(food["_id"])
    if existing:
        return update_quantity(cart, food["_id"], existing.quantity + quantity)
    line = CartLine(food=food["_id"], name=food["name"], price=float(food["price"]), quantity=quantity)
    return replace(cart, lines=cart.lines + (line,))


def remove_item(cart: Cart, food_id: str) -> Cart:
    return replace(cart, lines=tuple(line for line in cart.lines if line.food != food_id))


def update_quantity(cart: Cart, food_id: str, quantity: int) -> Cart:
    if quantity <= 0:
        return remove_item(cart, food_id)
    return replace(cart, lines=tuple(
        replace(line, quantity=quantity) if line.food == food_id else line
        for line in cart.lines
    ))


def clear(cart: Cart) -> Cart:
    return Cart()


def to_order_payload(cart: Cart, delivery_address: Optional[str] = None, contact_number: Optional[str] = None) -> dict:
    """Body for POST /orders."""
    return {
        "items": [{"food": line.food, "quantity": line.quantity, "price": line.price} for line in cart.lines],
        "totalAmount": cart.total,
        "deliveryAddress": delivery_address,
        "contactNumber": contact_number,
    }
