"""Marketplace FastAPI application.

Thin HTTP surface over the transaction core. Routes parse requests and
extract the bearer token; every rule lives in the services. Each request is
wrapped in the marketplace domain context, and every domain failure reaches
the client through one exception handler.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from protean.exceptions import InvalidOperationError, ObjectNotFoundError, ValidationError

from affiliates.api import router as affiliates_router
from catalog.api import product_router, store_router
from identity.api import router as identity_router
from marketplace import Marketplace, build_marketplace
from ordering.api import checkout_router, order_router
from shared.domain import domain
from shared.errors import MarketplaceError, error_response
from shared.logging import add_context, clear_context, configure_logging, get_logger

logger = get_logger(__name__)


def create_app(marketplace: Marketplace | None = None) -> FastAPI:
    marketplace = marketplace or build_marketplace()

    app = FastAPI(
        title="Marketplace API",
        description="Marketplace transaction core: identity, catalog, checkout and affiliates",
    )
    app.state.marketplace = marketplace

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def domain_context_middleware(request: Request, call_next):
        """Push the marketplace domain context and bind request metadata to every log line."""
        clear_context()
        add_context(method=request.method, path=request.url.path)
        with domain.domain_context():
            response = await call_next(request)
        return response

    async def domain_error_handler(request: Request, exc: Exception) -> JSONResponse:
        status_code, body = error_response(exc)
        logger.info("Request rejected", status_code=status_code, error=body["error"])
        return JSONResponse(status_code=status_code, content=body)

    for exc_class in (MarketplaceError, ValidationError, ObjectNotFoundError, InvalidOperationError):
        app.add_exception_handler(exc_class, domain_error_handler)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        messages: dict[str, list[str]] = {}
        for error in exc.errors():
            field = ".".join(str(part) for part in error["loc"] if part != "body") or "body"
            messages.setdefault(field, []).append(error["msg"])
        return JSONResponse(status_code=400, content={"error": "invalid_argument", "messages": messages})

    app.include_router(identity_router)
    app.include_router(store_router)
    app.include_router(product_router)
    app.include_router(checkout_router)
    app.include_router(order_router)
    app.include_router(affiliates_router)

    @app.get("/health")
    async def health():
        return JSONResponse(content={"status": "ok", "domain": domain.name})

    return app


configure_logging()
app = create_app()
