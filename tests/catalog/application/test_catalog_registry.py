"""Tests for store and product management through the CatalogRegistry."""

from decimal import Decimal

import pytest
from protean.exceptions import ObjectNotFoundError, ValidationError
from shared.errors import Conflict, Forbidden


class TestCreateStore:
    def test_create_store(self, marketplace, seller):
        store = marketplace.catalog.create_store(seller, name="Acme", category="tools")

        assert store.owner_id == seller.user_id
        assert marketplace.catalog.get_store(store.id).name == "Acme"

    @pytest.mark.parametrize("name, category", [(None, "tools"), ("Acme", ""), (None, None)])
    def test_name_and_category_are_required(self, marketplace, seller, name, category):
        with pytest.raises(ValidationError) as exc:
            marketplace.catalog.create_store(seller, name=name, category=category)
        assert exc.value.messages == {"store": ["Name and category are required"]}

    def test_one_store_per_owner(self, marketplace, seller, store):
        with pytest.raises(Conflict) as exc:
            marketplace.catalog.create_store(seller, name="Second", category="books")
        assert exc.value.messages == {"store": ["User already has a store"]}

    def test_non_sellers_may_open_a_store(self, marketplace, buyer):
        store = marketplace.catalog.create_store(buyer, name="Side Hustle", category="art")
        assert store.owner_id == buyer.user_id


class TestUpdateStore:
    def test_owner_can_update(self, marketplace, seller, store):
        updated = marketplace.catalog.update_store(seller, store.id, name="Acme Tools", banner_image="b.png")

        assert updated.name == "Acme Tools"
        assert updated.banner_image == "b.png"
        assert updated.category == "tools"
        assert updated.updated_at is not None

    def test_unknown_store(self, marketplace, seller):
        with pytest.raises(ObjectNotFoundError):
            marketplace.catalog.update_store(seller, "missing", name="X")

    def test_non_owner_is_forbidden(self, marketplace, buyer, store):
        with pytest.raises(Forbidden):
            marketplace.catalog.update_store(buyer, store.id, name="Hijacked")
        assert marketplace.catalog.get_store(store.id).name == "Acme"


class TestCreateProduct:
    def test_one_time_product(self, make_product):
        product = make_product()

        assert product.amount == Decimal("9.99")
        assert product.kind == "one_time"
        assert product.billing_interval is None
        assert product.affiliate_percent == 5.0

    def test_subscription_defaults_to_monthly(self, make_product):
        product = make_product(kind="subscription")
        assert product.billing_interval == "monthly"

    def test_zero_trial_days_means_no_trial(self, make_product):
        assert make_product(kind="subscription", trial_days=0).trial_days is None

    def test_one_time_product_drops_billing_terms(self, make_product):
        product = make_product(kind="one_time", billing_interval="yearly", trial_days=7)
        assert product.billing_interval is None
        assert product.trial_days is None

    def test_explicit_zero_affiliate_percent_is_kept(self, make_product):
        assert make_product(affiliate_percent=0).affiliate_percent == 0.0

    def test_free_product(self, make_product):
        assert make_product(price=0).amount == Decimal("0.00")

    def test_price_is_rounded_half_up_to_cents(self, make_product):
        assert make_product(price="9.995").amount == Decimal("10.00")

    def test_non_numeric_price_is_rejected(self, make_product):
        with pytest.raises(ValidationError) as exc:
            make_product(price="ten")
        assert "price" in exc.value.messages

    def test_deliverables_keep_their_listed_order(self, make_product):
        product = make_product(
            deliverables=[
                {"kind": "file", "details": {"url": "https://cdn.example.com/a.zip"}},
                {"kind": "license_keys", "details": {"keys": ["K1"]}},
            ]
        )
        assert [d.kind for d in product.specs()] == ["file", "license_keys"]

    def test_non_object_deliverable_is_rejected(self, make_product):
        with pytest.raises(ValidationError) as exc:
            make_product(deliverables=["license_keys"])
        assert "deliverables" in exc.value.messages

    @pytest.mark.parametrize(
        "overrides",
        [{"title": ""}, {"price": None}, {"kind": None}, {"title": None, "price": None}],
    )
    def test_title_price_and_kind_are_required(self, make_product, overrides):
        with pytest.raises(ValidationError) as exc:
            make_product(**overrides)
        assert exc.value.messages == {"product": ["Title, price and kind are required"]}

    def test_invalid_values_are_reported_by_field(self, make_product):
        with pytest.raises(ValidationError) as exc:
            make_product(price="-5")
        assert "price" in exc.value.messages

    def test_invalid_deliverables_are_rejected(self, make_product):
        with pytest.raises(ValidationError):
            make_product(deliverables=[{"kind": "license_keys", "details": {"keys": "not-a-list"}}])

    def test_unknown_store(self, marketplace, seller):
        with pytest.raises(ObjectNotFoundError):
            marketplace.catalog.create_product(seller, "missing", title="X", price="1", kind="one_time")

    def test_only_the_store_owner_can_add_products(self, marketplace, buyer, store):
        with pytest.raises(Forbidden) as exc:
            marketplace.catalog.create_product(buyer, store.id, title="X", price="1", kind="one_time")
        assert exc.value.messages == {"store": ["You do not own this store"]}

    def test_products_for_store_in_creation_order(self, marketplace, store, make_product):
        first = make_product(title="First")
        second = make_product(title="Second")
        assert [p.id for p in marketplace.catalog.products_for_store(store.id)] == [first.id, second.id]

    def test_products_for_unknown_store(self, marketplace):
        with pytest.raises(ObjectNotFoundError) as exc:
            marketplace.catalog.products_for_store("missing")
        assert exc.value.messages == {"store": ["Store not found"]}

    def test_get_unknown_product(self, marketplace):
        with pytest.raises(ObjectNotFoundError) as exc:
            marketplace.catalog.get_product("missing")
        assert exc.value.messages == {"product": ["Product not found"]}


def test_default_affiliate_percent_comes_from_settings(gateway, clock):
    from marketplace import build_marketplace
    from shared.config import Settings

    marketplace = build_marketplace(
        settings=Settings(env="test", password_hash_rounds=1000, default_affiliate_percent=12),
        gateway=gateway,
        clock=clock,
    )
    token, _ = marketplace.identity.register(email="s@example.com", password="pw", name="S", is_seller=True)
    ctx = marketplace.identity.authenticate(token)
    store = marketplace.catalog.create_store(ctx, name="Acme", category="tools")

    product = marketplace.catalog.create_product(ctx, store.id, title="X", price="10", kind="one_time")
    assert product.affiliate_percent == 12.0
