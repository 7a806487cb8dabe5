"""
FastAPI Proxy Application Factory
=================================

This is the main entry point for the proxy that sits between browser clients
and the Freepik image-to-video API, keeping the provider API key on the server.

Architecture:
    Browser UI → Kling proxy (this service) → Freepik image-to-video API

Routers:
    - /api/*    : Task submission and polling (optional x-app-token gate)
    - /health   : Health check endpoint (never gated)
    - /         : Plain-text banner

Environment Variables (all optional):
    - PORT: Listener port (default: 8787)
    - HOST: Listener host (default: 0.0.0.0)
    - APP_TOKEN: Shared secret required in x-app-token
    - FREEPIK_API_KEY: Server-side provider API key
    - FREEPIK_BASE_URL: Provider base URL
    - ALLOWED_ORIGINS: Comma-separated CORS origins (default: *)
    - LOG_LEVEL: Logging level (default: INFO)

Running the Service:
    Development:
        uvicorn kling_proxy.app.main:app --reload --port 8787

    Production:
        kling-proxy
"""

import logging
import sys
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import httpx
import uvicorn

from .config import Settings, get_settings
from .models import HealthResponse
from .proxy import proxy_router


# Configure structured JSON logging
def setup_logging(log_level: str = "INFO") -> None:
    """
    Configure structured logging for the application.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format='{"timestamp": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", "message": "%(message)s", "module": "%(module)s", "function": "%(funcName)s"}',
        handlers=[logging.StreamHandler(sys.stdout)]
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Startup: configure logging and open the shared upstream HTTP client.
    Shutdown: close the client.
    """
    settings: Settings = app.state.settings

    setup_logging(settings.LOG_LEVEL)
    logger = logging.getLogger("kling_proxy.main")

    app.state.upstream_client = httpx.AsyncClient()

    logger.info(
        "Starting Kling proxy",
        extra={
            "upstream_base_url": settings.upstream_base_url,
            "gate_enabled": settings.gate_enabled,
            "server_api_key": bool(settings.FREEPIK_API_KEY),
            "port": settings.PORT,
        }
    )

    yield

    logger.info("Shutting down Kling proxy")
    await app.state.upstream_client.aclose()
    app.state.upstream_client = None


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Application factory function.

    Args:
        settings: Configuration to run with; loaded from the environment
            when omitted

    Returns:
        FastAPI: Configured application instance
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Kling Backend Proxy",
        description="Image-to-video proxy that injects a server-held Freepik API key",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.upstream_client = None

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins_list,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    app.include_router(proxy_router, prefix="/api", tags=["Proxy"])

    @app.get("/health", tags=["System"], response_model=HealthResponse)
    async def health_check() -> HealthResponse:
        """Liveness probe; always succeeds."""
        return HealthResponse(
            ok=True,
            service=settings.SERVICE_NAME,
            ts=int(time.time() * 1000),
        )

    @app.get("/", tags=["System"], response_class=PlainTextResponse)
    async def root() -> str:
        return "Kling Backend Proxy is running. Try GET /health"

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        """Render errors raised by the proxy as ``{"message": ...}``."""
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = exc.errors()
        if errors:
            location = ".".join(str(part) for part in errors[0].get("loc", ()))
            message = f"Invalid request ({location}): {errors[0].get('msg', 'invalid value')}"
        else:
            message = "Invalid request"
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"message": message},
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """
        Global exception handler for unhandled errors.

        Logs the error and returns the exception message as a 500.
        """
        logger = logging.getLogger("kling_proxy.main")
        logger.error(
            f"Unhandled exception: {str(exc)}",
            extra={
                "path": request.url.path,
                "method": request.method,
                "exception_type": type(exc).__name__
            },
            exc_info=True
        )

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"message": str(exc) or "Server error"}
        )

    return app


# Create app instance for uvicorn
app = create_app()


def run() -> None:
    """Console entry point: serve the app on the configured host and port."""
    settings = get_settings()

    uvicorn.run(
        app,
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower()
    )


if __name__ == "__main__":
    run()
