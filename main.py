import logging
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import FastAPI, Depends, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pymongo.errors import DuplicateKeyError
from starlette.exceptions import HTTPException as StarletteHTTPException

import config
import database
import orders
import payments
from database import create_document, get_documents, get_document_by_id, find_document, update_document, delete_document
from errors import AuthenticationError, NotFoundError, ValidationError
from schemas import User, Food
from search import build_food_filter
from security import RequestContext, admin_only, authenticated, create_access_token, hash_password, public_user, verify_password
from validation import (
    ensure_valid, validate_food, validate_order, validate_payment, validate_payment_intent, validate_signup, validate_status,
)

logging.basicConfig(level=config.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if database.db is not None:
        database.ensure_indexes()
    else:
        logger.warning("DATABASE_URL/DATABASE_NAME not set; requests touching the database will fail")
    yield


app = FastAPI(title="Food Ordering API", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ===================== Error responses =====================
@app.exception_handler(StarletteHTTPException)
async def http_error(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"message": exc.detail}, headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def request_validation_error(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = "Invalid request"
    if errors:
        loc = [str(part) for part in errors[0].get("loc", ()) if part not in ("body", "query", "path")]
        message = f"{'.'.join(loc)}: {errors[0].get('msg')}" if loc else errors[0].get("msg", message)
    return JSONResponse(status_code=400, content={"message": message})


@app.exception_handler(database.DatabaseUnavailableError)
async def database_unavailable(request: Request, exc: database.DatabaseUnavailableError):
    logger.error("%s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=500, content={"message": "Database not available"})


@app.exception_handler(Exception)
async def unhandled_error(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"message": "Server error"})


# ===================== Request bodies =====================
class SignupRequest(BaseModel):
    name: str
    email: EmailStr
    password: str
    phone: Optional[str] = None


class SigninRequest(BaseModel):
    email: EmailStr
    password: str


class ProfileUpdate(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None


class FoodCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True, allow_inf_nan=False)

    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = None
    category: Optional[str] = None
    image_url: Optional[str] = Field(None, alias="imageUrl")
    is_available: bool = Field(True, alias="isAvailable")


class FoodUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True, allow_inf_nan=False)

    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = None
    category: Optional[str] = None
    image_url: Optional[str] = Field(None, alias="imageUrl")
    is_available: Optional[bool] = Field(None, alias="isAvailable")


class OrderItemIn(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    food: Optional[str] = None
    quantity: Optional[int] = None
    price: Optional[float] = None


class CreateOrderRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, allow_inf_nan=False)

    items: List[OrderItemIn] = []
    total_amount: Optional[float] = Field(None, alias="totalAmount")
    delivery_address: Optional[str] = Field(None, alias="deliveryAddress")
    contact_number: Optional[str] = Field(None, alias="contactNumber")


class UpdateOrderStatusRequest(BaseModel):
    status: Optional[str] = None


class PaymentIntentRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, allow_inf_nan=False)

    amount: Optional[float] = None
    currency: Optional[str] = None
    order_id: Optional[str] = Field(None, alias="orderId")


class RecordPaymentRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, allow_inf_nan=False)

    order: Optional[str] = Field(None, alias="orderId")
    amount: Optional[float] = None
    method: str = "card"
    status: str = "completed"
    transaction_id: Optional[str] = Field(None, alias="transactionId")


# ===================== Public Endpoints =====================
@app.get("/")
def root():
    return {"message": "Food Ordering API running"}


@app.get("/health")
def health():
    if database.db is None:
        return {"status": "degraded", "database": "not configured", "indexes_ready": False}
    ready = database.indexes_ready()
    return {"status": "ok" if ready else "degraded", "database": "configured", "indexes_ready": ready}


# ===================== Users =====================
@app.post("/users/signup", status_code=201)
def signup(payload: SignupRequest):
    ensure_valid(validate_signup(payload.model_dump()))
    if find_document("user", {"email": payload.email}):
        raise ValidationError("Email already registered")
    user = User(name=payload.name.strip(), email=payload.email, password_hash=hash_password(payload.password), phone=payload.phone)
    try:
        user_id = create_document("user", user)
    except DuplicateKeyError:
        raise ValidationError("Email already registered")
    logger.info("User %s signed up", user_id)
    return {"user": public_user(get_document_by_id("user", user_id)), "token": create_access_token(user_id)}


@app.post("/users/signin")
def signin(payload: SigninRequest):
    user = find_document("user", {"email": payload.email})
    if not user or not verify_password(payload.password, user["password_hash"]):
        raise AuthenticationError("Invalid credentials")
    return {"user": public_user(user), "token": create_access_token(user["_id"])}


@app.get("/users/profile")
def get_profile(ctx: RequestContext = Depends(authenticated)):
    return ctx.actor


@app.put("/users/profile")
def update_profile(payload: ProfileUpdate, ctx: RequestContext = Depends(authenticated)):
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    if "name" in changes:
        changes["name"] = changes["name"].strip()
        if not changes["name"]:
            raise ValidationError("name is required")
    if changes:
        update_document("user", ctx.actor_id, changes)
    return public_user(get_document_by_id("user", ctx.actor_id))


# ===================== Foods =====================
@app.get("/foods")
def list_foods():
    return get_documents("food", {}, sort=[("name", 1)])


@app.get("/foods/{food_id}")
def get_food(food_id: str):
    food = get_document_by_id("food", food_id)
    if not food:
        raise NotFoundError("Food not found")
    return food


@app.post("/foods", status_code=201)
def create_food(payload: FoodCreate, ctx: RequestContext = Depends(admin_only)):
    data = payload.model_dump()
    ensure_valid(validate_food(data))
    food_id = create_document("food", Food(**data))
    logger.info("Food %s created by %s", food_id, ctx.actor_id)
    return get_document_by_id("food", food_id)


@app.put("/foods/{food_id}")
def update_food(food_id: str, payload: FoodUpdate, ctx: RequestContext = Depends(admin_only)):
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    ensure_valid(validate_food(changes, partial=True))
    if not update_document("food", food_id, changes):
        raise NotFoundError("Food not found")
    return get_document_by_id("food", food_id)


@app.delete("/foods/{food_id}")
def remove_food(food_id: str, ctx: RequestContext = Depends(admin_only)):
    if not delete_document("food", food_id):
        raise NotFoundError("Food not found")
    logger.info("Food %s deleted by %s", food_id, ctx.actor_id)
    return {"message": "Food deleted"}


# ===================== Search =====================
@app.get("/search/foods")
def search_foods(
    query: Optional[str] = None,
    category: Optional[str] = None,
    min_price: Optional[float] = Query(None, alias="minPrice"),
    max_price: Optional[float] = Query(None, alias="maxPrice"),
):
    return get_documents("food", build_food_filter(query, category, min_price, max_price), sort=[("name", 1)])


# ===================== Orders =====================
@app.post("/orders", status_code=201)
def create_order(payload: CreateOrderRequest, ctx: RequestContext = Depends(authenticated)):
    data = payload.model_dump()
    ensure_valid(validate_order(data))
    return orders.create_order(ctx, data)


@app.get("/orders/my-orders")
def my_orders(ctx: RequestContext = Depends(authenticated)):
    return orders.list_user_orders(ctx.actor_id)


@app.get("/orders")
def all_orders(ctx: RequestContext = Depends(admin_only)):
    return orders.list_all_orders()


@app.get("/orders/{order_id}")
def get_order(order_id: str, ctx: RequestContext = Depends(authenticated)):
    return orders.get_order_for(ctx, order_id)


@app.patch("/orders/{order_id}/status")
def update_order_status(order_id: str, payload: UpdateOrderStatusRequest, ctx: RequestContext = Depends(admin_only)):
    ensure_valid(validate_status(payload.status))
    return orders.set_status(order_id, payload.status, actor_id=ctx.actor_id)


# ===================== Payments =====================
@app.post("/payments/create-payment-intent")
def create_payment_intent(payload: PaymentIntentRequest, ctx: RequestContext = Depends(authenticated)):
    ensure_valid(validate_payment_intent(payload.amount))
    metadata = {"user_id": ctx.actor_id}
    if payload.order_id:
        metadata["order_id"] = payload.order_id
    return payments.create_payment_intent(payload.amount, payload.currency, metadata)


@app.post("/payments/record", status_code=201)
def record_payment(payload: RecordPaymentRequest, ctx: RequestContext = Depends(authenticated)):
    data = payload.model_dump()
    ensure_valid(validate_payment(data))
    return payments.record_payment(ctx, data)


@app.get("/payments/order/{order_id}")
def order_payments(order_id: str, ctx: RequestContext = Depends(authenticated)):
    return payments.list_order_payments(ctx, order_id)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=config.PORT)
