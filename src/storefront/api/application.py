"""FastAPI application factory for the Orders API."""

from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from storefront.api.errors import register_exception_handlers
from storefront.api.routes import order_router
from storefront.container import Container
from storefront.domain import storefront
from storefront.utils.logging import add_context, clear_context, get_logger

logger = get_logger(__name__)


def create_app(container: Container) -> FastAPI:
    """Build the app around an already-wired container. The domain must be initialized first."""
    app = FastAPI(
        title="Storefront API",
        description="Checkout, payment verification and order fulfillment",
    )
    app.state.container = container

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[container.settings.frontend_url],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def domain_context_middleware(request: Request, call_next):
        """Push the storefront domain context for each order request."""
        if request.url.path.startswith(order_router.prefix):
            with storefront.domain_context():
                return await call_next(request)
        return await call_next(request)

    @app.middleware("http")
    async def request_log_context(request: Request, call_next):
        """Tag every log line emitted while serving a request with its id and path."""
        clear_context()
        add_context(request_id=request.headers.get("X-Request-Id") or uuid4().hex, path=request.url.path)
        try:
            return await call_next(request)
        finally:
            clear_context()

    register_exception_handlers(app)
    app.include_router(order_router)

    @app.get("/health")
    async def health():
        return JSONResponse(
            content={
                "status": "ok",
                "domain": storefront.name,
                "gateway": container.settings.gateway_provider,
                "currency": container.settings.settlement_currency,
            }
        )

    logger.info(
        "Storefront app created",
        gateway=container.settings.gateway_provider,
        currency=container.settings.settlement_currency,
    )
    return app
