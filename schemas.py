"""
Database Schemas for the Food Ordering System

Each Pydantic model below corresponds to a MongoDB collection.
The collection name is the lowercase class name (e.g., User -> "user").
"""
from typing import List, Optional, Literal
from pydantic import BaseModel, Field, EmailStr

Role = Literal["user", "admin"]
OrderStatus = Literal["pending", "confirmed", "preparing", "ready", "delivered", "cancelled"]
PaymentMethod = Literal["card", "cash", "upi"]
PaymentStatus = Literal["pending", "completed", "failed"]


class User(BaseModel):
    name: str = Field(..., description="Full name")
    email: EmailStr = Field(..., description="Unique email address")
    password_hash: str = Field(..., description="BCrypt password hash")
    role: Role = Field("user", description="Admins may manage foods and orders")
    phone: Optional[str] = None


class Food(BaseModel):
    name: str = Field(..., description="Menu item name")
    description: Optional[str] = None
    price: float = Field(..., ge=0)
    category: Optional[str] = None
    image_url: Optional[str] = None
    is_available: bool = True


class LineItem(BaseModel):
    food: str = Field(..., description="Reference to food _id")
    quantity: int = Field(..., ge=1)
    price: float = Field(..., ge=0, description="Unit price at order time")


class Order(BaseModel):
    user: str = Field(..., description="Owner _id, taken from the authenticated actor")
    items: List[LineItem]
    total_amount: float = Field(..., description="As submitted by the client, not recomputed")
    status: OrderStatus = "pending"
    delivery_address: Optional[str] = None
    contact_number: Optional[str] = None


class Payment(BaseModel):
    order: str = Field(..., description="Reference to order _id")
    user: str = Field(..., description="Actor that recorded the payment")
    amount: float = Field(..., ge=0)
    method: PaymentMethod = "card"
    status: PaymentStatus = "completed"
    transaction_id: Optional[str] = None
