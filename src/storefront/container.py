"""Wires the pipeline's collaborators together once per process.

The domain itself (aggregates, repositories, command handlers) lives on
``storefront.domain.storefront``; the container holds what Protean does not
build: the payment gateway, the signature verifier and the services that
talk to them.
"""

from dataclasses import dataclass

from protean.exceptions import ConfigurationError

from storefront.cart.snapshot import CartSnapshotProvider, RepositoryCartSnapshotProvider
from storefront.checkout.initiator import CheckoutInitiator
from storefront.config import Settings
from storefront.fulfillment.coordinator import FulfillmentCoordinator
from storefront.gateway import build_gateway
from storefront.gateway.port import PaymentGateway
from storefront.gateway.signature import SignatureVerifier
from storefront.projections.order_queries import OrderQueryService
from storefront.reconciliation.reconciler import PaymentReconciler


@dataclass
class Container:
    settings: Settings
    gateway: PaymentGateway
    verifier: SignatureVerifier
    checkout: CheckoutInitiator
    fulfillment: FulfillmentCoordinator
    queries: OrderQueryService
    reconciler: PaymentReconciler

    @classmethod
    def build(
        cls,
        settings: Settings,
        gateway: PaymentGateway | None = None,
        cart_snapshots: CartSnapshotProvider | None = None,
    ) -> "Container":
        """Build every collaborator from settings. The gateway and cart pricing can be passed in instead."""
        if not settings.gateway_key_secret and settings.environment != "test":
            # An empty HMAC key makes every callback signature forgeable
            raise ConfigurationError("RAZORPAY_KEY_SECRET must be set outside the test environment")

        verifier = SignatureVerifier(settings.gateway_key_secret)
        gateway = gateway or build_gateway(settings, verifier)
        fulfillment = FulfillmentCoordinator(verifier)
        return cls(
            settings=settings,
            gateway=gateway,
            verifier=verifier,
            checkout=CheckoutInitiator(
                cart_snapshots or RepositoryCartSnapshotProvider(),
                gateway,
                currency=settings.settlement_currency,
            ),
            fulfillment=fulfillment,
            queries=OrderQueryService(),
            reconciler=PaymentReconciler(gateway, fulfillment),
        )
