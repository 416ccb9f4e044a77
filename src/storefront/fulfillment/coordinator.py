"""Fulfillment coordinator: the gate between a payment callback and the order.

Untrusted callbacks go through :meth:`FulfillmentCoordinator.confirm_payment`,
which checks the HMAC signature before anything is read. Callers that learned
about the payment from the authenticated gateway API (the reconciliation job)
use :meth:`FulfillmentCoordinator.confirm_verified`.

Confirmations for the same gateway reference are serialized in-process with a
per-reference lock. Across processes the compare-and-swap in
:class:`~storefront.fulfillment.confirmation.ConfirmPaymentHandler` keeps
duplicates harmless.
"""

import threading
from contextlib import contextmanager

import structlog
from protean.utils.globals import current_domain
from sqlalchemy.exc import SQLAlchemyError

from storefront.errors import ConsistencyError, InvalidSignatureError
from storefront.fulfillment.confirmation import ConfirmationResult, ConfirmPayment
from storefront.gateway.signature import SignatureVerifier

logger = structlog.get_logger(__name__)


class FulfillmentCoordinator:
    def __init__(self, verifier: SignatureVerifier) -> None:
        self._verifier = verifier
        self._guard = threading.Lock()
        self._locks: dict[str, list] = {}  # reference -> [lock, waiters]

    @contextmanager
    def _serialized(self, gateway_order_ref: str):
        with self._guard:
            entry = self._locks.setdefault(gateway_order_ref, [threading.Lock(), 0])
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[gateway_order_ref]

    def confirm_payment(
        self,
        gateway_order_ref: str,
        gateway_payment_ref: str,
        supplied_signature: str | None,
        customer_id: str | None = None,
    ) -> ConfirmationResult:
        """Verify a signed payment callback and apply the paid order's side effects."""
        if not self._verifier.verify(gateway_order_ref, gateway_payment_ref, supplied_signature):
            logger.warning(
                "Payment signature rejected",
                gateway_order_ref=gateway_order_ref,
                gateway_payment_ref=gateway_payment_ref,
            )
            raise InvalidSignatureError()

        return self.confirm_verified(gateway_order_ref, gateway_payment_ref, customer_id=customer_id)

    def confirm_verified(
        self,
        gateway_order_ref: str,
        gateway_payment_ref: str,
        customer_id: str | None = None,
    ) -> ConfirmationResult:
        command = ConfirmPayment(
            gateway_order_ref=gateway_order_ref,
            gateway_payment_ref=gateway_payment_ref,
            customer_id=customer_id,
        )
        with self._serialized(gateway_order_ref):
            try:
                result = current_domain.process(command, asynchronous=False)
            except SQLAlchemyError as exc:
                logger.error(
                    "Payment confirmation failed",
                    gateway_order_ref=gateway_order_ref,
                    gateway_payment_ref=gateway_payment_ref,
                    error=type(exc).__name__,
                )
                raise ConsistencyError(
                    {"order": ["Payment confirmation could not be saved; retrying is safe"]}
                ) from exc

        if not result.already_confirmed:
            logger.info(
                "Payment confirmed",
                order_id=result.order_id,
                gateway_order_ref=gateway_order_ref,
                gateway_payment_ref=gateway_payment_ref,
            )
        return result
