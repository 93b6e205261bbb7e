"""
Catalog search filter composition
"""
import re
from typing import Optional


def build_food_filter(query: Optional[str] = None, category: Optional[str] = None,
                      min_price: Optional[float] = None, max_price: Optional[float] = None) -> dict:
    """Compose one Mongo filter; every given field narrows the result (AND)."""
    filter_q = {}
    query = (query or "").strip()
    if query:
        pattern = re.escape(query)
        filter_q["$or"] = [
            {"name": {"$regex": pattern, "$options": "i"}},
            {"description": {"$regex": pattern, "$options": "i"}},
        ]
    if category:
        filter_q["category"] = category
    if min_price is not None or max_price is not None:
        price_filter = {}
        if min_price is not None:
            price_filter["$gte"] = min_price
        if max_price is not None:
            price_filter["$lte"] = max_price
        filter_q["price"] = price_filter
    return filter_q
