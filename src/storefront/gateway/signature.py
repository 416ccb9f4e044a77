"""HMAC-SHA256 verification of payment confirmation callbacks.

The gateway signs ``"<gateway order ref>|<gateway payment ref>"`` with the
shared secret and sends the lowercase hex digest along with the callback.
"""

import hashlib
import hmac


class SignatureVerifier:
    def __init__(self, secret: str) -> None:
        self._secret = secret.encode("utf-8")

    def __repr__(self) -> str:
        return "SignatureVerifier(secret=***)"

    def sign(self, gateway_order_ref: str, gateway_payment_ref: str) -> str:
        message = f"{gateway_order_ref}|{gateway_payment_ref}".encode("utf-8")
        return hmac.new(self._secret, message, hashlib.sha256).hexdigest()

    def verify(self, gateway_order_ref: str, gateway_payment_ref: str, supplied_signature: str | None) -> bool:
        """Constant-time check of a supplied signature. Empty signatures never verify."""
        if not supplied_signature or not gateway_order_ref or not gateway_payment_ref:
            return False
        expected = self.sign(gateway_order_ref, gateway_payment_ref)
        return hmac.compare_digest(expected.encode("utf-8"), supplied_signature.encode("utf-8"))
