"""Configurable fake payment gateway for development and testing.

This adapter simulates the hosted gateway without any external calls. It can
be configured at runtime to succeed or fail, and can play the buyer's side of
a payment: :meth:`FakeGateway.complete_payment` records a captured payment and
returns the signed callback the real gateway would send.
"""

import time
from dataclasses import dataclass
from uuid import uuid4

from storefront.gateway.port import IntentResult, PaymentGateway, PaymentStatusResult
from storefront.gateway.signature import SignatureVerifier


@dataclass(frozen=True)
class SignedPayment:
    gateway_order_ref: str
    gateway_payment_ref: str
    signature: str


class FakeGateway(PaymentGateway):
    """Configurable fake payment gateway."""

    def __init__(self, verifier: SignatureVerifier) -> None:
        self.verifier = verifier
        self.should_succeed: bool = True
        self.failure_reason: str = "Gateway unavailable"
        self.failure_status_code: int = 502
        self.calls: list[dict] = []
        self.intents: dict[str, dict] = {}
        self.captured: dict[str, str] = {}  # gateway order ref -> payment ref

    def configure(
        self,
        should_succeed: bool,
        failure_reason: str = "Gateway unavailable",
        status_code: int = 502,
    ) -> None:
        """Configure gateway behavior at runtime."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason
        self.failure_status_code = status_code

    def create_intent(self, amount_minor_units: int, currency: str, receipt: str) -> IntentResult:
        self.calls.append(
            {
                "method": "create_intent",
                "amount": amount_minor_units,
                "currency": currency,
                "receipt": receipt,
            }
        )

        if not self.should_succeed:
            return IntentResult(
                success=False,
                status_code=self.failure_status_code,
                failure_reason=self.failure_reason,
            )

        gateway_order_ref = f"order_{uuid4().hex[:14]}"
        payload = {
            "id": gateway_order_ref,
            "entity": "order",
            "amount": amount_minor_units,
            "amount_paid": 0,
            "amount_due": amount_minor_units,
            "currency": currency,
            "receipt": receipt,
            "status": "created",
            "attempts": 0,
            "created_at": int(time.time()),
        }
        self.intents[gateway_order_ref] = payload
        return IntentResult(success=True, gateway_order_ref=gateway_order_ref, payload=payload, status_code=200)

    def fetch_payment_status(self, gateway_order_ref: str) -> PaymentStatusResult:
        self.calls.append({"method": "fetch_payment_status", "gateway_order_ref": gateway_order_ref})

        if not self.should_succeed:
            return PaymentStatusResult(
                success=False,
                gateway_order_ref=gateway_order_ref,
                status_code=self.failure_status_code,
                failure_reason=self.failure_reason,
            )

        payment_ref = self.captured.get(gateway_order_ref)
        return PaymentStatusResult(
            success=True,
            gateway_order_ref=gateway_order_ref,
            captured=payment_ref is not None,
            gateway_payment_ref=payment_ref,
            gateway_status="captured" if payment_ref else "created",
            status_code=200,
        )

    def complete_payment(self, gateway_order_ref: str) -> SignedPayment:
        """Simulate the buyer paying: capture the intent and sign the callback."""
        payment_ref = f"pay_{uuid4().hex[:14]}"
        self.captured[gateway_order_ref] = payment_ref
        return SignedPayment(
            gateway_order_ref=gateway_order_ref,
            gateway_payment_ref=payment_ref,
            signature=self.verifier.sign(gateway_order_ref, payment_ref),
        )
