"""Payment gateway factory.

``build_gateway(settings, verifier)`` picks the adapter named by
``settings.gateway_provider``:
- FakeGateway for development and testing
- RazorpayGateway for production

The gateway is built once at startup and injected; there is no module-level
instance.
"""

from protean.exceptions import ConfigurationError

from storefront.config import Settings
from storefront.gateway.fake_adapter import FakeGateway
from storefront.gateway.port import PaymentGateway
from storefront.gateway.razorpay_adapter import RazorpayGateway
from storefront.gateway.signature import SignatureVerifier


def build_gateway(settings: Settings, verifier: SignatureVerifier) -> PaymentGateway:
    if settings.gateway_provider == "fake":
        return FakeGateway(verifier)
    if settings.gateway_provider == "razorpay":
        if not settings.gateway_key_id or not settings.gateway_key_secret:
            raise ConfigurationError("RAZORPAY_KEY_ID and RAZORPAY_KEY_SECRET must be set for the razorpay gateway")
        return RazorpayGateway(
            key_id=settings.gateway_key_id,
            key_secret=settings.gateway_key_secret,
            api_url=settings.gateway_api_url,
            timeout=settings.gateway_timeout_seconds,
        )
    raise ConfigurationError(f"Unknown payment gateway {settings.gateway_provider!r}")
