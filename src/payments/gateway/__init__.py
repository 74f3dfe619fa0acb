"""Payment gateway adapters."""

from payments.gateway.fake_adapter import FakeGateway
from payments.gateway.port import ChargeResult, PaymentGateway

__all__ = ["ChargeResult", "FakeGateway", "PaymentGateway"]
