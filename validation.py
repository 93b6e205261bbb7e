"""
Explicit validation run before anything is persisted.

Every validator returns a ValidationResult instead of raising, so callers can
inspect all problems; ensure_valid() turns the first one into a 400.
"""
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, get_args

from errors import ValidationError
from schemas import OrderStatus, PaymentMethod, PaymentStatus

ORDER_STATUSES = get_args(OrderStatus)
PAYMENT_METHODS = get_args(PaymentMethod)
PAYMENT_STATUSES = get_args(PaymentStatus)


@dataclass
class FieldError:
    field: str
    message: str


@dataclass
class ValidationResult:
    errors: List[FieldError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def add(self, field_name: str, message: str) -> None:
        self.errors.append(FieldError(field_name, message))


def ensure_valid(result: ValidationResult) -> None:
    if not result.ok:
        raise ValidationError(result.errors[0].message)


def _blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


def _finite(value) -> bool:
    return value is not None and math.isfinite(value)


def validate_signup(data: Dict[str, Any]) -> ValidationResult:
    result = ValidationResult()
    for name in ("name", "email", "password"):
        if _blank(data.get(name)):
            result.add(name, f"{name} is required")
    return result


def validate_food(data: Dict[str, Any], partial: bool = False) -> ValidationResult:
    result = ValidationResult()
    if not partial or "name" in data:
        if _blank(data.get("name")):
            result.add("name", "name is required")
    if not partial or "price" in data:
        price = data.get("price")
        if price is None:
            result.add("price", "price is required")
        elif not _finite(price):
            result.add("price", "price must be a finite number")
        elif price < 0:
            result.add("price", "price must be greater than or equal to 0")
    return result


def validate_order(data: Dict[str, Any]) -> ValidationResult:
    result = ValidationResult()
    items = data.get("items") or []
    if not items:
        result.add("items", "Order must contain at least one item")
    for index, item in enumerate(items):
        if _blank(item.get("food")):
            result.add(f"items[{index}].food", "Each item must reference a food")
        if item.get("quantity") is None or item["quantity"] < 1:
            result.add(f"items[{index}].quantity", "Quantity must be at least 1")
        if not _finite(item.get("price")) or item["price"] < 0:
            result.add(f"items[{index}].price", "Price must be greater than or equal to 0")
    if data.get("total_amount") is None:
        result.add("total_amount", "totalAmount is required")
    elif not _finite(data["total_amount"]) or data["total_amount"] < 0:
        result.add("total_amount", "totalAmount must be a finite number greater than or equal to 0")
    return result


def validate_status(status: Optional[str]) -> ValidationResult:
    result = ValidationResult()
    if status not in ORDER_STATUSES:
        result.add("status", f"Invalid status. Expected one of: {', '.join(ORDER_STATUSES)}")
    return result


def validate_payment(data: Dict[str, Any]) -> ValidationResult:
    result = ValidationResult()
    if _blank(data.get("order")):
        result.add("order", "orderId is required")
    amount = data.get("amount")
    if not _finite(amount) or amount < 0:
        result.add("amount", "amount must be a finite number greater than or equal to 0")
    if data.get("method") not in PAYMENT_METHODS:
        result.add("method", f"Invalid payment method. Expected one of: {', '.join(PAYMENT_METHODS)}")
    if data.get("status") not in PAYMENT_STATUSES:
        result.add("status", f"Invalid payment status. Expected one of: {', '.join(PAYMENT_STATUSES)}")
    return result


def validate_payment_intent(amount: Optional[float]) -> ValidationResult:
    result = ValidationResult()
    if not _finite(amount) or amount <= 0:
        result.add("amount", "amount must be greater than 0")
    return result
