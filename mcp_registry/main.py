from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from mcp_registry.api.router import router as api_router
from mcp_registry.core.caching import PublicCachePolicy
from mcp_registry.core.config import settings
from mcp_registry.core.db import engine
from mcp_registry.core.telemetry import setup_logging, setup_telemetry
from mcp_registry.services.listing_validate import format_validation_errors
from mcp_registry.services.rate_limit import TokenRateLimiter


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await app.state.rate_limiter.r.aclose()
    await engine.dispose()


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    # Every error body has the same shape: {"error": "..."}
    return JSONResponse({"error": exc.detail}, status_code=exc.status_code, headers=getattr(exc, "headers", None))


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        {"error": "Invalid request", "details": format_validation_errors(exc.errors())},
        status_code=422,
    )


def create_app() -> FastAPI:
    setup_logging()

    app = FastAPI(title=f"{settings.app_name} API", version=settings.app_version, lifespan=lifespan)

    # Resolved once; handlers get them through dependencies
    app.state.cache_policy = PublicCachePolicy.from_settings(settings)
    app.state.rate_limiter = TokenRateLimiter(settings.redis_url)

    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)

    setup_telemetry(app)
    app.include_router(api_router)
    return app


app = create_app()
