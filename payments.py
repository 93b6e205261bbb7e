"""
Payments: Stripe payment intents and locally recorded payments.

Recorded payments are stored as sent by the client; nothing is checked
against Stripe.
"""
import logging
from typing import List, Optional

import stripe
from fastapi import HTTPException

import config
from database import create_document, get_document_by_id, get_documents
from errors import AuthorizationError, NotFoundError
from schemas import Payment
from security import RequestContext

logger = logging.getLogger(__name__)


def to_minor_units(amount: float) -> int:
    return int(round(amount * 100))


def create_payment_intent(amount: float, currency: Optional[str] = None, metadata: Optional[dict] = None) -> dict:
    if not config.STRIPE_SECRET_KEY:
        logger.error("STRIPE_SECRET_KEY is not configured")
        raise HTTPException(status_code=500, detail="Payment gateway not configured")
    try:
        intent = stripe.PaymentIntent.create(
            amount=to_minor_units(amount),
            currency=currency or config.PAYMENT_CURRENCY,
            metadata=metadata or {},
            api_key=config.STRIPE_SECRET_KEY,
        )
    except stripe.StripeError as e:
        logger.error("Stripe payment intent failed: %s", e)
        raise HTTPException(status_code=500, detail="Payment gateway error")
    return {"clientSecret": intent.client_secret, "paymentIntentId": intent.id}


def _order_visible_to(ctx: RequestContext, order_id: str) -> dict:
    order = get_document_by_id("order", order_id)
    if not order:
        raise NotFoundError("Order not found")
    if not ctx.is_admin and order["user"] != ctx.actor_id:
        raise AuthorizationError("Not authorized for this order")
    return order


def record_payment(ctx: RequestContext, data: dict) -> dict:
    """Persist a payment for one of the actor's orders. ``data`` is already validated."""
    order = _order_visible_to(ctx, data["order"])
    payment = Payment(
        order=order["_id"],
        user=ctx.actor_id,
        amount=data["amount"],
        method=data["method"],
        status=data["status"],
        transaction_id=data.get("transaction_id"),
    )
    payment_id = create_document("payment", payment)
    logger.info("Payment %s (%s, %s) recorded for order %s", payment_id, payment.method, payment.status, order["_id"])
    return get_document_by_id("payment", payment_id)


def list_order_payments(ctx: RequestContext, order_id: str) -> List[dict]:
    order = _order_visible_to(ctx, order_id)
    return get_documents("payment", {"order": order["_id"]}, sort=[("created_at", -1)])
