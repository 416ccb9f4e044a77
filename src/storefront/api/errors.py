"""Render every error as an ``ErrorResponse``: ``{status_code, message, errors, success}``."""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from protean.exceptions import ObjectNotFoundError, ProteanException, ValidationError

from storefront.api.schemas import ErrorResponse
from storefront.errors import ConsistencyError, PaymentGatewayError, StorefrontError, error_message, status_code_for

logger = structlog.get_logger(__name__)


def _field_messages(messages) -> dict[str, list[str]]:
    if not isinstance(messages, dict):
        return {"error": [str(messages)]}
    return {
        str(key): [str(msg) for msg in (value if isinstance(value, (list, tuple)) else [value])]
        for key, value in messages.items()
    }


def _render(status_code: int, message: str, errors: dict[str, list[str]]) -> JSONResponse:
    body = ErrorResponse(status_code=status_code, message=message, errors=errors)
    return JSONResponse(status_code=status_code, content=body.model_dump())


def _render_protean(exc: ProteanException) -> JSONResponse:
    return _render(status_code_for(exc), error_message(exc), _field_messages(exc.messages))


async def _handle_validation(request: Request, exc: ValidationError) -> JSONResponse:
    return _render_protean(exc)


async def _handle_not_found(request: Request, exc: ObjectNotFoundError) -> JSONResponse:
    return _render_protean(exc)


async def _handle_gateway(request: Request, exc: PaymentGatewayError) -> JSONResponse:
    logger.warning("Upstream failure", path=request.url.path, status_code=exc.status_code, error=exc.reason)
    return _render_protean(exc)


async def _handle_consistency(request: Request, exc: ConsistencyError) -> JSONResponse:
    logger.error("Consistency failure", path=request.url.path, error=error_message(exc))
    return _render_protean(exc)


async def _handle_storefront(request: Request, exc: StorefrontError) -> JSONResponse:
    return _render_protean(exc)


async def _handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors: dict[str, list[str]] = {}
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part != "body"]
        errors.setdefault(".".join(loc) or "body", []).append(error.get("msg", "Invalid value"))
    return _render(422, "Request validation failed", errors)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ValidationError, _handle_validation)
    app.add_exception_handler(ObjectNotFoundError, _handle_not_found)
    app.add_exception_handler(PaymentGatewayError, _handle_gateway)
    app.add_exception_handler(ConsistencyError, _handle_consistency)
    app.add_exception_handler(StorefrontError, _handle_storefront)
    app.add_exception_handler(RequestValidationError, _handle_request_validation)
