"""Composition root: wires the services of every bounded context into one Marketplace.

Importing this module registers every aggregate with the protean domain;
``build_marketplace`` initializes the domain before handing services out.
Records live in the domain's configured provider (the in-memory provider by
default), reached through ``current_domain.repository_for``, so callers need
an active domain context.

Usage:
    marketplace = build_marketplace()                     # settings from env
    marketplace = build_marketplace(Settings(env="test"))  # explicit settings
"""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from affiliates.ledger import AttributionLedger
from catalog.registry import CatalogRegistry
from deliverables.allocator import DeliverableAllocator
from identity.credentials import CredentialVerifier
from identity.service import IdentityService
from identity.session import SessionStore
from ordering.lifecycle import OrderLifecycle, utc_now
from payments.gateway import FakeGateway, PaymentGateway
from shared.config import Settings
from shared.domain import init_domain


@dataclass
class Marketplace:
    settings: Settings
    identity: IdentityService
    catalog: CatalogRegistry
    allocator: DeliverableAllocator
    ledger: AttributionLedger
    orders: OrderLifecycle
    gateway: PaymentGateway


def build_marketplace(
    settings: Settings | None = None,
    gateway: PaymentGateway | None = None,
    clock: Callable[[], datetime] = utc_now,
) -> Marketplace:
    settings = settings or Settings.from_env()
    gateway = gateway or FakeGateway()
    init_domain()

    identity = IdentityService(
        sessions=SessionStore(token_bytes=settings.session_token_bytes),
        verifier=CredentialVerifier(rounds=settings.password_hash_rounds),
        referral_code_bytes=settings.referral_code_bytes,
    )
    catalog = CatalogRegistry(default_affiliate_percent=settings.default_affiliate_percent)
    allocator = DeliverableAllocator()
    ledger = AttributionLedger(identity)
    identity.referral_recorder = ledger.record_referral

    lifecycle = OrderLifecycle(
        catalog=catalog,
        allocator=allocator,
        ledger=ledger,
        gateway=gateway,
        clock=clock,
    )

    return Marketplace(
        settings=settings,
        identity=identity,
        catalog=catalog,
        allocator=allocator,
        ledger=ledger,
        orders=lifecycle,
        gateway=gateway,
    )
