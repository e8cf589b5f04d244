import asyncio
import logging
from contextlib import asynccontextmanager, suppress
from typing import Optional

import uvicorn
from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from app.api.v1.router import api_router
from app.core.config import Settings, get_settings
from app.core.exceptions import APIException, ErrorCode
from app.core.metrics import ERROR_COUNT
from app.middleware.tracing import RequestTracingMiddleware, install_trace_filter
from app.schemas.error import ErrorResponse
from app.schemas.payment import HealthResponse
from app.service_container import Services, build_services
from app.tasks.keep_alive import keep_alive_loop

# Fails fast when STRIPE_SECRET_KEY is missing
settings = get_settings()

# Configure logging
logging.basicConfig(
    level=logging.INFO if settings.ENVIRONMENT == "development" else logging.WARNING,
    format="%(asctime)s - %(name)s - %(levelname)s - [%(trace_id)s] %(message)s"
)
install_trace_filter()
logger = logging.getLogger("healthxray-payments")

ENDPOINTS = [
    "/create-checkout-session",
    "/verify-session/:sessionId",
    "/webhook",
    "/send-welcome-email",
    "/packages",
]


def _error_response(request: Request, status_code: int, code: str, message: str, details=None) -> JSONResponse:
    ERROR_COUNT.labels(error_code=code, status_code=status_code).inc()
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(
            error=message,
            code=code,
            details=details,
            trace_id=getattr(request.state, "trace_id", None),
        ).model_dump(exclude_none=True)
    )


def create_app(app_settings: Settings, services: Optional[Services] = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        logger.info("Starting up payment backend...")
        if getattr(app.state, "services", None) is None:
            app.state.services = build_services(app_settings)

        keep_alive: Optional[asyncio.Task] = None
        if app_settings.SELF_PING_URL:
            keep_alive = asyncio.create_task(
                keep_alive_loop(app_settings.SELF_PING_URL, app_settings.SELF_PING_INTERVAL_SECONDS)
            )
        yield
        # Shutdown
        logger.info("Shutting down payment backend...")
        if keep_alive is not None:
            keep_alive.cancel()
            with suppress(asyncio.CancelledError):
                await keep_alive
        await app.state.services.side_effects.drain()

    app = FastAPI(
        title="HealthXRay Payment Backend",
        description="Stripe subscription checkout, webhook handling, credits and transactional email",
        version="1.0.0",
        docs_url="/docs" if app_settings.ENVIRONMENT == "development" else None,
        redoc_url=None,
        lifespan=lifespan,
    )
    app.state.services = services

    # Tracing, timing and request metrics
    app.add_middleware(RequestTracingMiddleware)

    # CORS middleware, also answers preflight requests
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Exception handlers
    @app.exception_handler(APIException)
    async def api_exception_handler(request: Request, exc: APIException):
        return _error_response(request, exc.status_code, exc.error_code.value, exc.message, exc.details)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return _error_response(request, 400, ErrorCode.INVALID_INPUT.value, "Invalid request body")

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        return _error_response(request, exc.status_code, "HTTP_ERROR", str(exc.detail))

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception occurred")
        return _error_response(request, 500, ErrorCode.INTERNAL_ERROR.value, "An unexpected error occurred")

    @app.get("/", response_model=HealthResponse)
    async def health_check():
        return HealthResponse(
            status="running",
            message="HealthXRay Payment Backend",
            endpoints=ENDPOINTS,
        )

    @app.get("/metrics")
    async def get_metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    app.include_router(api_router)
    return app


app = create_app(settings)


if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=settings.PORT)
