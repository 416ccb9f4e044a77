"""Razorpay payment gateway adapter.

Talks to the Razorpay REST API over ``requests`` with HTTP basic auth
(key id / key secret). Every call carries the configured timeout; timeouts,
connection failures and non-2xx responses are turned into unsuccessful
results instead of exceptions.
"""

import requests
import structlog

from storefront.gateway.port import IntentResult, PaymentGateway, PaymentStatusResult

logger = structlog.get_logger(__name__)

GATEWAY_TIMEOUT_STATUS = 504
GATEWAY_UNREACHABLE_STATUS = 502


class RazorpayGateway(PaymentGateway):
    """Production Razorpay gateway adapter."""

    def __init__(
        self,
        key_id: str,
        key_secret: str,
        api_url: str = "https://api.razorpay.com/v1",
        timeout: float = 10.0,
        session: requests.Session | None = None,
    ) -> None:
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self._session = session or requests.Session()
        self._session.auth = (key_id, key_secret)

    def __repr__(self) -> str:
        return f"RazorpayGateway(api_url={self.api_url!r}, timeout={self.timeout})"

    def create_intent(self, amount_minor_units: int, currency: str, receipt: str) -> IntentResult:
        body = {"amount": amount_minor_units, "currency": currency, "receipt": receipt}
        try:
            response = self._session.post(f"{self.api_url}/orders", json=body, timeout=self.timeout)
        except requests.exceptions.Timeout:
            logger.warning("Gateway intent request timed out", receipt=receipt, timeout=self.timeout)
            return IntentResult(
                success=False,
                status_code=GATEWAY_TIMEOUT_STATUS,
                failure_reason="Payment gateway timed out",
            )
        except requests.exceptions.RequestException as exc:
            logger.warning("Gateway intent request failed", receipt=receipt, error=type(exc).__name__)
            return IntentResult(
                success=False,
                status_code=GATEWAY_UNREACHABLE_STATUS,
                failure_reason="Payment gateway unreachable",
            )

        if not response.ok:
            return IntentResult(
                success=False,
                status_code=response.status_code,
                failure_reason=_error_description(response),
            )

        payload = response.json()
        return IntentResult(
            success=True,
            gateway_order_ref=payload["id"],
            payload=payload,
            status_code=response.status_code,
        )

    def fetch_payment_status(self, gateway_order_ref: str) -> PaymentStatusResult:
        url = f"{self.api_url}/orders/{gateway_order_ref}/payments"
        try:
            response = self._session.get(url, timeout=self.timeout)
        except requests.exceptions.Timeout:
            return PaymentStatusResult(
                success=False,
                gateway_order_ref=gateway_order_ref,
                status_code=GATEWAY_TIMEOUT_STATUS,
                failure_reason="Payment gateway timed out",
            )
        except requests.exceptions.RequestException:
            return PaymentStatusResult(
                success=False,
                gateway_order_ref=gateway_order_ref,
                status_code=GATEWAY_UNREACHABLE_STATUS,
                failure_reason="Payment gateway unreachable",
            )

        if not response.ok:
            return PaymentStatusResult(
                success=False,
                gateway_order_ref=gateway_order_ref,
                status_code=response.status_code,
                failure_reason=_error_description(response),
            )

        payments = response.json().get("items", [])
        captured = next((p for p in payments if p.get("status") == "captured"), None)
        latest = captured or (payments[0] if payments else None)
        return PaymentStatusResult(
            success=True,
            gateway_order_ref=gateway_order_ref,
            captured=captured is not None,
            gateway_payment_ref=latest.get("id") if latest else None,
            gateway_status=latest.get("status") if latest else None,
            status_code=response.status_code,
        )


def _error_description(response: requests.Response) -> str:
    try:
        return response.json()["error"]["description"]
    except (ValueError, KeyError, TypeError):
        return f"Payment gateway returned HTTP {response.status_code}"
