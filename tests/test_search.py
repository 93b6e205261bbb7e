import re

import pytest

from search import build_food_filter


@pytest.fixture
def catalog(make_food):
    return {
        "soup": make_food(name="Tomato Soup", price=90, category="Starters", description="Fresh and hot"),
        "tikka": make_food(name="Paneer Tikka", price=199, category="Starters", description="Smoky grilled paneer"),
        "pizza": make_food(name="Farmhouse Pizza", price=300, category="Pizza", description="Loaded with veggies"),
        "thali": make_food(name="Deluxe Thali", price=100, category="Main Course", description="A full meal"),
        "feast": make_food(name="Family Feast", price=301, category="Main Course", description="Serves four (1+ kg)"),
    }


def names(resp):
    assert resp.status_code == 200
    return sorted(f["name"] for f in resp.json())


def test_no_filters_builds_empty_query():
    assert build_food_filter() == {}


def test_filter_composition():
    filt = build_food_filter(query="a.b", category="Pizza", min_price=10, max_price=20)
    assert filt["category"] == "Pizza"
    assert filt["price"] == {"$gte": 10, "$lte": 20}
    assert filt["$or"][0]["name"] == {"$regex": re.escape("a.b"), "$options": "i"}
    assert build_food_filter(min_price=0) == {"price": {"$gte": 0}}
    assert build_food_filter(query="   ") == {}


def test_without_filters_returns_whole_catalog(client, catalog):
    assert len(client.get("/search/foods").json()) == len(catalog)


def test_price_range_is_inclusive(client, catalog):
    resp = client.get("/search/foods", params={"minPrice": 100, "maxPrice": 300})
    assert names(resp) == ["Deluxe Thali", "Farmhouse Pizza", "Paneer Tikka"]
    for food in resp.json():
        assert 100 <= food["price"] <= 300


def test_category_narrows_price_range(client, catalog):
    resp = client.get("/search/foods", params={"minPrice": 100, "maxPrice": 300, "category": "Starters"})
    assert names(resp) == ["Paneer Tikka"]


def test_single_bound(client, catalog):
    assert names(client.get("/search/foods", params={"maxPrice": 99})) == ["Tomato Soup"]
    assert names(client.get("/search/foods", params={"minPrice": 301})) == ["Family Feast"]


def test_query_matches_name_or_description_case_insensitively(client, catalog):
    assert names(client.get("/search/foods", params={"query": "PIZZA"})) == ["Farmhouse Pizza"]
    assert names(client.get("/search/foods", params={"query": "smoky"})) == ["Paneer Tikka"]
    assert names(client.get("/search/foods", params={"query": "zzz"})) == []


def test_query_is_a_literal_substring(client, catalog):
    assert names(client.get("/search/foods", params={"query": "(1+"})) == ["Family Feast"]


def test_all_filters_combined(client, catalog):
    params = {"query": "a", "category": "Main Course", "minPrice": 50, "maxPrice": 200}
    assert names(client.get("/search/foods", params=params)) == ["Deluxe Thali"]


def test_bad_price_is_rejected(client):
    assert client.get("/search/foods", params={"minPrice": "cheap"}).status_code == 400
