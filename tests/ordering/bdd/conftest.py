"""Shared BDD fixtures and step definitions for checkout."""

import pytest
from pytest_bdd import given, parsers, then


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def catalog():
    """Products listed during a scenario, by title."""
    return {}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a seller with a store named "{name}"'), target_fixture="store")
def seller_with_store(marketplace, seller, name):
    return marketplace.catalog.create_store(seller, name=name, category="tools")


@given(parsers.cfparse('the store sells "{title}" for "{price}"'))
def store_sells(marketplace, seller, store, catalog, title, price):
    catalog[title] = marketplace.catalog.create_product(seller, store.id, title=title, price=price, kind="one_time")


@given(parsers.cfparse('a product "{title}" priced "{price}" paying affiliates {percent:d}%'))
def store_sells_with_commission(marketplace, seller, store, catalog, title, price, percent):
    catalog[title] = marketplace.catalog.create_product(
        seller, store.id, title=title, price=price, kind="one_time", affiliate_percent=percent
    )


@given(parsers.cfparse('a product "{title}" priced "{price}" holding license keys "{keys}"'))
def store_sells_with_keys(marketplace, seller, store, catalog, title, price, keys):
    catalog[title] = marketplace.catalog.create_product(
        seller,
        store.id,
        title=title,
        price=price,
        kind="one_time",
        deliverables=[{"kind": "license_keys", "details": {"keys": keys.split(",")}}],
    )


@given("a registered buyer", target_fixture="buyer")
def registered_buyer(register):
    return register(email="buyer@example.com", name="Bob Buyer")


@given("a registered affiliate", target_fixture="affiliate")
def registered_affiliate(register):
    return register(email="affiliate@example.com", name="Ann Affiliate")


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the order is active at "{price}"'))
def order_is_active(order, price):
    assert order.status == "active"
    assert str(order.amount) == price


@then(parsers.cfparse('the buyer has {count:d} order for "{title}"'))
def buyer_has_orders(marketplace, buyer, count, title):
    views = marketplace.orders.list_for_user(buyer)
    assert len(views) == count
    assert all(view.product.title == title for view in views)
