"""Request-scoped dependencies: the wired container, the caller's identity and
the payment callback body.

Authentication happens upstream; the gateway in front of this service
forwards the authenticated identity as headers.
"""

import json
from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, Header, Request
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError as PydanticValidationError

from storefront.api.schemas import PaymentCallbackRequest
from storefront.container import Container
from storefront.errors import ForbiddenError, SecurityError

ORDER_ADMIN_ROLES = {"ADMIN", "SELLER"}


@dataclass(frozen=True)
class Requester:
    user_id: str
    role: str


@dataclass(frozen=True)
class Viewer:
    """Who is reading an order: a customer, or an admin who may read any order."""

    customer_id: str | None
    is_admin: bool


def get_container(request: Request) -> Container:
    return request.app.state.container


def current_customer(x_customer_id: Annotated[str | None, Header()] = None) -> str:
    if not x_customer_id:
        raise SecurityError({"customer": ["Authentication required"]})
    return x_customer_id


def optional_customer(x_customer_id: Annotated[str | None, Header()] = None) -> str | None:
    return x_customer_id or None


def order_admin(
    x_user_id: Annotated[str | None, Header()] = None,
    x_user_role: Annotated[str | None, Header()] = None,
) -> Requester:
    if not x_user_id:
        raise SecurityError({"user": ["Authentication required"]})
    role = (x_user_role or "").upper()
    if role not in ORDER_ADMIN_ROLES:
        raise ForbiddenError({"role": ["Admin or seller role required"]})
    return Requester(user_id=x_user_id, role=role)


def order_viewer(
    x_customer_id: Annotated[str | None, Header()] = None,
    x_user_id: Annotated[str | None, Header()] = None,
    x_user_role: Annotated[str | None, Header()] = None,
) -> Viewer:
    if x_user_id and (x_user_role or "").upper() == "ADMIN":
        return Viewer(customer_id=None, is_admin=True)
    if not x_customer_id:
        raise SecurityError({"customer": ["Authentication required"]})
    return Viewer(customer_id=x_customer_id, is_admin=False)


async def payment_callback(request: Request) -> PaymentCallbackRequest:
    """The gateway callback, posted as a form by the hosted checkout or as JSON by API clients."""
    content_type = request.headers.get("content-type", "")
    try:
        if content_type.startswith("application/json"):
            payload = await request.json()
        else:
            payload = dict(await request.form())
    except json.JSONDecodeError as exc:
        raise RequestValidationError(
            [{"type": "json_invalid", "loc": ("body",), "msg": "Malformed JSON body", "input": None}]
        ) from exc

    try:
        return PaymentCallbackRequest.model_validate(payload)
    except PydanticValidationError as exc:
        raise RequestValidationError(
            [{**error, "loc": ("body", *error["loc"])} for error in exc.errors()]
        ) from exc


ContainerDep = Annotated[Container, Depends(get_container)]
CustomerDep = Annotated[str, Depends(current_customer)]
OptionalCustomerDep = Annotated[str | None, Depends(optional_customer)]
AdminDep = Annotated[Requester, Depends(order_admin)]
ViewerDep = Annotated[Viewer, Depends(order_viewer)]
PaymentCallbackDep = Annotated[PaymentCallbackRequest, Depends(payment_callback)]
