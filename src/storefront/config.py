"""Process configuration, read once from the environment at startup."""

import os
from dataclasses import dataclass, field
from urllib.parse import urlencode


@dataclass(frozen=True)
class Settings:
    environment: str = "development"  # development, test, staging, production
    database_url: str = "sqlite:///storefront.db"
    gateway_provider: str = "fake"  # fake, razorpay
    gateway_key_id: str = ""
    gateway_key_secret: str = field(default="", repr=False)
    gateway_api_url: str = "https://api.razorpay.com/v1"
    gateway_timeout_seconds: float = 10.0
    settlement_currency: str = "INR"
    frontend_url: str = "http://localhost:3000"
    payment_success_path: str = "/paymentsuccess"
    reconcile_after_minutes: int = 15

    @classmethod
    def from_env(cls, environ=None) -> "Settings":
        """Build settings from environment variables, falling back to defaults."""
        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            environment=(
                env.get("ENV") or env.get("ENVIRONMENT") or env.get("PROTEAN_ENV") or defaults.environment
            ).lower(),
            database_url=env.get("DATABASE_URL", defaults.database_url),
            gateway_provider=env.get("PAYMENT_GATEWAY", defaults.gateway_provider).lower(),
            gateway_key_id=env.get("RAZORPAY_KEY_ID", defaults.gateway_key_id),
            gateway_key_secret=env.get("RAZORPAY_KEY_SECRET", defaults.gateway_key_secret),
            gateway_api_url=env.get("RAZORPAY_API_URL", defaults.gateway_api_url),
            gateway_timeout_seconds=float(env.get("GATEWAY_TIMEOUT_SECONDS", defaults.gateway_timeout_seconds)),
            settlement_currency=env.get("SETTLEMENT_CURRENCY", defaults.settlement_currency).upper(),
            frontend_url=env.get("FRONTEND_URL", defaults.frontend_url),
            payment_success_path=env.get("PAYMENT_SUCCESS_PATH", defaults.payment_success_path),
            reconcile_after_minutes=int(env.get("RECONCILE_AFTER_MINUTES", defaults.reconcile_after_minutes)),
        )

    @property
    def database_provider(self) -> str:
        """Protean database provider for ``database_url``: ``postgresql`` or ``sqlite``."""
        return "postgresql" if self.database_url.startswith("postgresql") else "sqlite"

    def success_redirect_url(self, gateway_payment_ref: str) -> str:
        """Where the buyer lands after a verified payment."""
        base = self.frontend_url.rstrip("/")
        return f"{base}{self.payment_success_path}?{urlencode({'ref': gateway_payment_ref})}"
