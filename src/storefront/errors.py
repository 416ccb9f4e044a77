"""Error taxonomy for the checkout pipeline.

Bad input and missing records are Protean's own ``ValidationError`` and
``ObjectNotFoundError`` (raised directly by aggregates, or through the
subclasses below). Everything else derives from :class:`StorefrontError`.
All of them carry ``messages`` shaped ``{"field": ["message", ...]}`` so the
API layer can render them uniformly.
"""

from protean.exceptions import ObjectNotFoundError, ProteanException, ValidationError


def error_message(exc: ProteanException) -> str:
    """Flatten an error's field messages into one line."""
    messages = exc.messages
    if not isinstance(messages, dict):
        return str(messages)
    flat = []
    for value in messages.values():
        flat.extend(value if isinstance(value, (list, tuple)) else [value])
    return "; ".join(str(msg) for msg in flat)


def status_code_for(exc: ProteanException) -> int:
    """HTTP status for an error: its own ``status_code``, else by Protean error class."""
    code = getattr(exc, "status_code", None)
    if code:
        return code
    if isinstance(exc, ValidationError):
        return 400
    if isinstance(exc, ObjectNotFoundError):
        return 404
    return 500


# ---------------------------------------------------------------------------
# Bad input (no mutation)
# ---------------------------------------------------------------------------
class EmptyCartError(ValidationError):
    def __init__(self) -> None:
        super().__init__({"cart": ["Cart is empty"]})


class AddressNotOwnedError(ValidationError):
    status_code = 403

    def __init__(self, address_id: str) -> None:
        super().__init__({"address_id": [f"Address {address_id} not found for this customer"]})


# ---------------------------------------------------------------------------
# Missing records
# ---------------------------------------------------------------------------
class OrderNotFoundError(ObjectNotFoundError):
    def __init__(self, reference: str) -> None:
        super().__init__({"order": [f"Order {reference} not found"]})


# ---------------------------------------------------------------------------
# Failures outside Protean's taxonomy
# ---------------------------------------------------------------------------
class StorefrontError(ProteanException):
    status_code = 500

    def __init__(self, messages: dict, status_code: int | None = None) -> None:
        super().__init__(messages)
        if status_code is not None:
            self.status_code = status_code


class SecurityError(StorefrontError):
    status_code = 401


class InvalidSignatureError(SecurityError):
    def __init__(self) -> None:
        super().__init__({"signature": ["Payment signature verification failed"]})


class ForbiddenError(StorefrontError):
    status_code = 403


class PaymentGatewayError(StorefrontError):
    status_code = 502

    def __init__(self, reason: str, status_code: int | None = None) -> None:
        self.reason = reason
        super().__init__({"gateway": [reason]}, status_code=status_code)


# Store transaction failures that need a retry or reconciliation
class ConsistencyError(StorefrontError):
    status_code = 409
