import logging
import os

import database
from database import create_document, find_document, get_documents
from schemas import User, Food
from security import hash_password

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("seed")

ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "admin@foodorder.com")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "password")

FOODS = [
    Food(name="Margherita Pizza", description="Tomato, mozzarella and basil", price=249, category="Pizza"),
    Food(name="Paneer Tikka", description="Grilled cottage cheese with spices", price=199, category="Starters"),
    Food(name="Veg Biryani", description="Basmati rice with vegetables", price=179, category="Main Course"),
    Food(name="Gulab Jamun", description="Two pieces in sugar syrup", price=89, category="Desserts"),
]


def seed():
    database.ensure_indexes()
    if not find_document("user", {"email": ADMIN_EMAIL}):
        create_document("user", User(name="Admin", email=ADMIN_EMAIL, password_hash=hash_password(ADMIN_PASSWORD), role="admin"))
        logger.info("Created admin %s", ADMIN_EMAIL)
    if not get_documents("food", limit=1):
        for food in FOODS:
            create_document("food", food)
        logger.info("Added %d foods", len(FOODS))


if __name__ == "__main__":
    seed()
    print(f"Seeded. Email={ADMIN_EMAIL}, Password={ADMIN_PASSWORD}")
