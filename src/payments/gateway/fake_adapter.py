"""Configurable fake payment gateway.

Succeeds by default, which is how checkout treats payment. Tests can flip it
to decline and inspect the charges it received.
"""

from decimal import Decimal
from uuid import uuid4

from payments.gateway.port import ChargeResult, PaymentGateway


class FakeGateway(PaymentGateway):
    """Configurable fake payment gateway."""

    def __init__(self) -> None:
        self.should_succeed: bool = True
        self.failure_reason: str = "Card declined"
        self.calls: list[dict] = []

    def configure(self, should_succeed: bool, failure_reason: str = "Card declined") -> None:
        """Configure gateway behavior at runtime."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def create_charge(
        self,
        amount: Decimal,
        currency: str,
        customer_id: str,
        idempotency_key: str,
    ) -> ChargeResult:
        self.calls.append(
            {
                "method": "create_charge",
                "amount": amount,
                "currency": currency,
                "customer_id": customer_id,
                "idempotency_key": idempotency_key,
            }
        )

        if self.should_succeed:
            return ChargeResult(
                success=True,
                gateway_transaction_id=f"fake_txn_{uuid4().hex[:12]}",
            )
        return ChargeResult(success=False, failure_reason=self.failure_reason)
