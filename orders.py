"""
Order service: creation, visibility and status transitions.

Status flow:
    pending -> confirmed -> preparing -> ready -> delivered
    any non-terminal state -> cancelled

Admin transitions overwrite the status with whatever valid status was
requested. Jumps outside ORDER_TRANSITIONS are applied and logged, not
rejected.
"""
import logging
from typing import List, Optional

from database import create_document, get_document_by_id, get_documents, update_document
from errors import AuthorizationError, NotFoundError
from schemas import LineItem, Order
from security import RequestContext

logger = logging.getLogger(__name__)

ORDER_TRANSITIONS = {
    "pending": {"confirmed", "cancelled"},
    "confirmed": {"preparing", "cancelled"},
    "preparing": {"ready", "cancelled"},
    "ready": {"delivered", "cancelled"},
    "delivered": set(),
    "cancelled": set(),
}
TERMINAL_STATUSES = {status for status, targets in ORDER_TRANSITIONS.items() if not targets}


def is_reachable(current: str, target: str) -> bool:
    return target in ORDER_TRANSITIONS.get(current, set())


def line_items_total(items) -> float:
    return round(sum(item["quantity"] * item["price"] for item in items), 2)


def create_order(ctx: RequestContext, data: dict) -> dict:
    """Persist a new order owned by the actor. ``data`` is already validated."""
    items = [LineItem(**item).model_dump() for item in data["items"]]
    total_amount = data["total_amount"]
    expected = line_items_total(items)
    if round(total_amount, 2) != expected:
        logger.warning(
            "Order total %.2f from user %s differs from line items total %.2f",
            total_amount, ctx.actor_id, expected,
        )

    order = Order(
        user=ctx.actor_id,
        items=items,
        total_amount=total_amount,
        delivery_address=data.get("delivery_address"),
        contact_number=data.get("contact_number"),
    )
    order_id = create_document("order", order)
    logger.info("Order %s created by user %s", order_id, ctx.actor_id)
    return get_document_by_id("order", order_id)


def list_user_orders(user_id: str) -> List[dict]:
    return get_documents("order", {"user": user_id}, sort=[("created_at", -1)])


def list_all_orders() -> List[dict]:
    return get_documents("order", {}, sort=[("created_at", -1)])


def expand_items(order: dict) -> dict:
    """Replace each line item's food id with the food's current catalog entry."""
    expanded = dict(order)
    expanded["items"] = [
        {**item, "food": get_document_by_id("food", item["food"])}
        for item in order.get("items", [])
    ]
    return expanded


def get_order_for(ctx: RequestContext, order_id: str) -> dict:
    order = get_document_by_id("order", order_id)
    if not order:
        raise NotFoundError("Order not found")
    if ctx.is_admin:
        return expand_items(order)
    if order["user"] != ctx.actor_id:
        raise AuthorizationError("Not authorized to view this order")
    return order


def set_status(order_id: str, status: str, actor_id: Optional[str] = None) -> dict:
    order = get_document_by_id("order", order_id)
    if not order:
        raise NotFoundError("Order not found")
    current = order.get("status")
    if current != status and not is_reachable(current, status):
        logger.warning("Order %s moved from %s to %s outside the normal flow", order_id, current, status)
    update_document("order", order_id, {"status": status})
    logger.info("Order %s status %s -> %s by %s", order_id, current, status, actor_id)
    return get_document_by_id("order", order_id)
