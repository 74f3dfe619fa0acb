import os
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_sessionstart(session):
    """Pin the environment before any marketplace module is imported."""
    os.environ["MARKETPLACE_ENV"] = session.config.option.env
    os.environ["PROTEAN_ENV"] = session.config.option.env
    os.environ.setdefault("PASSWORD_HASH_ROUNDS", "1000")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = Path(item.fspath)

        if "/domain/" in str(test_path):
            item.add_marker(pytest.mark.domain)
        elif "/application/" in str(test_path):
            item.add_marker(pytest.mark.application)
        elif "/bdd/" in str(test_path):
            item.add_marker(pytest.mark.bdd)
        elif "/integration/" in str(test_path):
            item.add_marker(pytest.mark.integration)
            # Integration tests are often slower
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


@pytest.fixture(scope="session")
def _marketplace_domain():
    """Initialize the marketplace domain once per session."""
    import marketplace  # noqa: F401  registers every aggregate
    from shared.domain import init_domain

    return init_domain()


@pytest.fixture(autouse=True)
def run_around_tests(_marketplace_domain):
    """Push domain context before each test, cleanup after."""
    ctx = _marketplace_domain.domain_context()
    ctx.push()

    yield

    from protean import current_domain

    for _, provider in current_domain.providers.items():
        provider._data_reset()

    for _, broker in current_domain.brokers.items():
        broker._data_reset()

    current_domain.event_store.store._data_reset()
    ctx.pop()


class FrozenClock:
    """Clock that only moves when a test tells it to."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def clock():
    return FrozenClock(datetime(2024, 1, 31, 9, 30, tzinfo=UTC))


@pytest.fixture
def gateway():
    from payments.gateway import FakeGateway

    return FakeGateway()


@pytest.fixture
def settings():
    from shared.config import Settings

    return Settings(env="test", password_hash_rounds=1000)


@pytest.fixture
def marketplace(settings, gateway, clock):
    from marketplace import build_marketplace

    return build_marketplace(settings=settings, gateway=gateway, clock=clock)


@pytest.fixture
def register(marketplace):
    """Factory: register a user and return their authenticated RequestContext."""
    counter = iter(range(1, 10_000))

    def _register(email=None, name="Test User", is_seller=False, referral_code=None, password="s3cret-pass"):
        email = email or f"user{next(counter)}@example.com"
        token, _ = marketplace.identity.register(
            email=email,
            password=password,
            name=name,
            is_seller=is_seller,
            referral_code=referral_code,
        )
        return marketplace.identity.authenticate(token)

    return _register


@pytest.fixture
def seller(register):
    return register(email="seller@example.com", name="Sally Seller", is_seller=True)


@pytest.fixture
def buyer(register):
    return register(email="buyer@example.com", name="Bob Buyer")


@pytest.fixture
def store(marketplace, seller):
    return marketplace.catalog.create_store(seller, name="Acme", category="tools", description="Tools for builders")


@pytest.fixture
def make_product(marketplace, seller, store):
    """Factory: create a product in the seller's store."""

    def _make_product(**overrides):
        fields = {
            "title": "Pro Plan",
            "price": "9.99",
            "kind": "one_time",
        }
        fields.update(overrides)
        return marketplace.catalog.create_product(seller, store.id, **fields)

    return _make_product


@pytest.fixture
def client(marketplace):
    from fastapi.testclient import TestClient

    from app import create_app

    return TestClient(create_app(marketplace))


def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def signup(client):
    """Factory: register over HTTP and return (token, user summary)."""
    counter = iter(range(1, 10_000))

    def _signup(email=None, name="Test User", is_seller=False, ref=None, password="s3cret-pass"):
        email = email or f"http{next(counter)}@example.com"
        params = {"ref": ref} if ref else None
        response = client.post(
            "/auth/register",
            json={"email": email, "password": password, "name": name, "is_seller": is_seller},
            params=params,
        )
        assert response.status_code == 201, response.text
        body = response.json()
        return body["token"], body["user"]

    return _signup


@pytest.fixture
def headers():
    return auth_headers
