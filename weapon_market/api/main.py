"""FastAPI application entry point."""
from contextlib import asynccontextmanager
from collections.abc import AsyncGenerator

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from weapon_market.api.dependencies import get_cache_store
from weapon_market.api.routes import health, market_weapon, search
from weapon_market.application.errors import PersistenceError, ValidationError
from weapon_market.infrastructure.cache.database_cache_store import SqlAlchemyCacheStore
from weapon_market.logging_config import configure_logging

logger = structlog.get_logger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal server error."


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    configure_logging()
    logger.info("weapon_market_starting")

    cache_store = get_cache_store()
    if isinstance(cache_store, SqlAlchemyCacheStore):
        try:
            await cache_store.purge_expired()
        except PersistenceError:
            logger.warning("cache_purge_failed")

    yield
    logger.info("weapon_market_stopping")


async def _validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": str(exc)})


async def _request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    logger.info("request_rejected", path=request.url.path, errors=exc.errors())
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": "Invalid request."})


async def _http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def _internal_error_handler(request: Request, exc: Exception) -> JSONResponse:
    # Full detail goes to the log only
    logger.error("request_failed", path=request.url.path, method=request.method, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": INTERNAL_ERROR_MESSAGE},
    )


def create_app() -> FastAPI:
    app = FastAPI(
        title="Weapon Market",
        description="Multi-network marketplace search and listing maintenance for weapons.",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(ValidationError, _validation_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _request_validation_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, _http_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(PersistenceError, _internal_error_handler)
    app.add_exception_handler(Exception, _internal_error_handler)

    app.include_router(health.router)
    app.include_router(search.router)
    app.include_router(market_weapon.router)

    return app


app = create_app()
