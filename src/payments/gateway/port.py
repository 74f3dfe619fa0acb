"""Payment gateway port (abstract interface).

Checkout charges the locked-in price through this contract. Settlement is
out of scope: the only adapter is ``FakeGateway``.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class ChargeResult:
    """Result of a payment charge attempt."""

    success: bool
    gateway_transaction_id: str | None = None
    failure_reason: str | None = None


class PaymentGateway(ABC):
    """Abstract payment gateway interface."""

    @abstractmethod
    def create_charge(
        self,
        amount: Decimal,
        currency: str,
        customer_id: str,
        idempotency_key: str,
    ) -> ChargeResult:
        """Charge a customer via the payment gateway."""
        ...
