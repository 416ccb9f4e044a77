"""Payment gateway port (abstract interface).

Defines the contract that all payment gateway adapters must implement.
Adapters never raise for gateway-side failures: timeouts, connection errors
and rejected requests come back as unsuccessful results carrying a status
code and reason, and the caller decides what to do with them.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


@dataclass(frozen=True)
class IntentResult:
    """Result of a payment intent (gateway order) creation attempt."""

    success: bool
    gateway_order_ref: str | None = None
    payload: dict = field(default_factory=dict)
    status_code: int | None = None
    failure_reason: str | None = None


@dataclass(frozen=True)
class PaymentStatusResult:
    """What the gateway knows about the payments made against one intent."""

    success: bool
    gateway_order_ref: str
    captured: bool = False
    gateway_payment_ref: str | None = None
    gateway_status: str | None = None
    status_code: int | None = None
    failure_reason: str | None = None


class PaymentGateway(ABC):
    """Abstract payment gateway interface."""

    @abstractmethod
    def create_intent(self, amount_minor_units: int, currency: str, receipt: str) -> IntentResult:
        """Ask the gateway to open a payment intent the buyer can pay against."""
        ...

    @abstractmethod
    def fetch_payment_status(self, gateway_order_ref: str) -> PaymentStatusResult:
        """Look up whether a captured payment exists for an intent."""
        ...
