"""Tests for the Product aggregate and its deliverables."""

import json
from decimal import Decimal

import pytest
from catalog.api.schemas import ProductView
from catalog.product import Deliverable, DeliverableKind, Product, ProductKind
from catalog.store import Store
from protean.exceptions import ValidationError


def _deliverable(position, kind, **details):
    return Deliverable(position=position, kind=kind, details=json.dumps(details))


def _product(**overrides):
    fields = {"store_id": "store-1", "title": "Pro Plan", "price": 9.99, "kind": "one_time"}
    fields.update(overrides)
    return Product(**fields)


class TestProduct:
    def test_amount_is_a_two_place_decimal(self):
        assert _product(price=9.99).amount == Decimal("9.99")

    def test_zero_price_is_allowed(self):
        assert _product(price=0.0).amount == Decimal("0.00")

    def test_negative_price_is_rejected(self):
        with pytest.raises(ValidationError) as exc:
            _product(price=-1.0)
        assert "price" in exc.value.messages

    def test_default_affiliate_percent(self):
        assert _product().affiliate_percent == 5.0

    @pytest.mark.parametrize("percent", [-1.0, 101.0])
    def test_affiliate_percent_bounds(self, percent):
        with pytest.raises(ValidationError) as exc:
            _product(affiliate_percent=percent)
        assert "affiliate_percent" in exc.value.messages

    def test_one_time_product_cannot_have_billing_terms(self):
        with pytest.raises(ValidationError) as exc:
            _product(billing_interval="monthly")
        assert "billing_interval" in exc.value.messages

    def test_subscription_needs_an_interval(self):
        with pytest.raises(ValidationError):
            _product(kind="subscription")

    def test_subscription(self):
        product = _product(kind="subscription", billing_interval="yearly", trial_days=14)
        assert product.is_subscription
        assert product.billing_interval == "yearly"
        assert product.trial_days == 14

    def test_unknown_kind_is_rejected(self):
        with pytest.raises(ValidationError) as exc:
            _product(kind="rental")
        assert "kind" in exc.value.messages


class TestDeliverables:
    def test_pools_lists_only_license_key_deliverables_in_listed_order(self):
        product = _product(
            deliverables=[
                _deliverable(2, "role", role="vip"),
                _deliverable(0, "file", url="https://cdn.example.com/a.zip"),
                _deliverable(1, "license_keys", keys=["K1", "K2"]),
            ]
        )
        assert [d.kind for d in product.specs()] == ["file", "license_keys", "role"]
        pools = product.pools()
        assert [pool.position for pool in pools] == [1]
        assert pools[0].available_keys == ["K1", "K2"]

    def test_license_keys_must_be_non_empty_strings(self):
        with pytest.raises(ValidationError):
            _deliverable(0, "license_keys", keys=["K1", ""])
        with pytest.raises(ValidationError):
            _deliverable(0, "license_keys", keys="K1")

    def test_details_must_be_a_json_object(self):
        with pytest.raises(ValidationError) as exc:
            Deliverable(position=0, kind="file", details="[1, 2]")
        assert "details" in exc.value.messages

    def test_unknown_deliverable_kind_is_rejected(self):
        with pytest.raises(ValidationError) as exc:
            _deliverable(0, "hologram")
        assert "kind" in exc.value.messages

    def test_empty_pool_is_valid(self):
        pool = _deliverable(0, "license_keys", keys=[])
        assert pool.is_pool
        assert pool.available_keys == []

    def test_non_pool_deliverables_have_no_keys(self):
        invite = _deliverable(0, DeliverableKind.INVITE.value, keys=["ignored"])
        assert not invite.is_pool
        assert invite.available_keys == []

    def test_take_key_pops_the_oldest_and_return_key_restores_it(self):
        pool = _deliverable(0, "license_keys", keys=["K1", "K2"])

        assert pool.take_key() == "K1"
        assert pool.available_keys == ["K2"]

        pool.return_key("K1")
        assert pool.available_keys == ["K1", "K2"]

    def test_public_spec_hides_keys_but_keeps_counts(self):
        product = _product(
            deliverables=[
                _deliverable(0, "license_keys", keys=["K1", "K2", "K3"]),
                _deliverable(1, "file", url="https://cdn.example.com/a.zip"),
            ]
        )
        view = ProductView.from_product(product, redacted=True)

        assert view.deliverables[0] == {"kind": "license_keys", "details": {"available": 3}}
        assert view.deliverables[1] == {"kind": "file", "details": {"url": "https://cdn.example.com/a.zip"}}
        assert product.pools()[0].available_keys == ["K1", "K2", "K3"]


class TestStore:
    def test_apply_update_skips_empty_values(self):
        store = Store(owner_id="user-1", name="Acme", category="tools", description="Old")
        store.apply_update(name="Acme 2", description="", category=None)

        assert store.name == "Acme 2"
        assert store.description == "Old"
        assert store.category == "tools"
        assert store.updated_at is not None

    def test_apply_update_validates(self):
        store = Store(owner_id="user-1", name="Acme", category="tools")
        with pytest.raises(ValidationError):
            store.apply_update(name="x" * 300)


def test_product_kind_values():
    assert {kind.value for kind in ProductKind} == {"one_time", "subscription"}
