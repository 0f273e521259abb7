"""FastAPI application factory and setup."""

import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import HTTPException, RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

from src.onboarding.api.http.app_data import ApplicationDependencies, build_dependencies
from src.onboarding.api.http.routers.auth import router as auth_router
from src.onboarding.api.http.routers.health import router as health_router
from src.onboarding.api.http.routers.signup import router as signup_router
from src.onboarding.api.utils.app_startup import configure_logging
from src.onboarding.core.exceptions import AuthFailure, OnboardingError, SignupFailed
from src.onboarding.runtime.config.config_data import ConfigData
from src.onboarding.runtime.settings import load_config

__all__ = ["create_app"]


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", None) or str(uuid.uuid4())


# --- Security middleware ---
class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, environment: str = "development"):
        super().__init__(app)
        self.environment = environment

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault(
            "Referrer-Policy", "strict-origin-when-cross-origin"
        )
        response.headers.setdefault("Cache-Control", "no-store")
        # HSTS only in prod
        if self.environment == "production":
            response.headers.setdefault(
                "Strict-Transport-Security",
                "max-age=31536000; includeSubDomains; preload",
            )
        return response


# --- Exception handlers ---
async def onboarding_error_handler(request: Request, exc: OnboardingError) -> JSONResponse:
    request_id = _request_id(request)
    content = {"message": exc.message, "request_id": request_id}
    headers = {"X-Request-ID": request_id}

    if isinstance(exc, SignupFailed):
        content["reason"] = exc.reason
        if exc.upstream_message:
            content["upstream"] = exc.upstream_message
        logger.bind(reason=exc.reason, saga_state=exc.state.value).warning(
            f"Signup rejected: {exc.detail}"
        )
    elif isinstance(exc, AuthFailure):
        headers["WWW-Authenticate"] = "Bearer"
        logger.info(f"Authentication failed: {exc.detail or exc.message}")
    elif exc.status_code >= 500:
        logger.bind(error_type=type(exc).__name__).error(
            f"{exc.message}: {exc.detail or '-'}"
        )
    else:
        logger.info(f"{exc.message}: {exc.detail or '-'}")

    return JSONResponse(status_code=exc.status_code, content=content, headers=headers)


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    request_id = _request_id(request)
    fields = [".".join(str(part) for part in err.get("loc", ())) for err in exc.errors()]
    logger.bind(fields=fields).info("request.validation_error")
    return JSONResponse(
        status_code=400,
        content={"message": "Invalid request", "request_id": request_id},
        headers={"X-Request-ID": request_id},
    )


# --- Request logging middleware ---
async def log_requests(request: Request, call_next):
    # Correlation / tracing
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    request.state.request_id = request_id

    # Prefer proxy headers if you run behind a reverse proxy (set up trust chain!)
    xff = request.headers.get("x-forwarded-for")
    client_ip = (
        xff.split(",")[0].strip()
        if xff
        else request.client.host
        if request.client
        else "unknown"
    )

    # query strings may carry natural keys; not logged
    base_ctx = {
        "request_id": request_id,
        "method": request.method,
        "path": request.url.path,
        "client_ip": client_ip,
        "user_agent": request.headers.get("user-agent", "unknown"),
    }

    start = time.perf_counter()

    # Everything that logs within this block inherits base_ctx
    with logger.contextualize(**base_ctx):
        try:
            logger.info("request.start")
            response = await call_next(request)

            duration_ms = (time.perf_counter() - start) * 1000
            logger.bind(
                status_code=response.status_code,
                duration_ms=round(duration_ms, 1),
            ).info("request.end")

            # Attach correlation id
            response.headers.setdefault("X-Request-ID", request_id)
            return response

        except HTTPException as exc:
            duration_ms = (time.perf_counter() - start) * 1000
            logger.bind(
                status_code=exc.status_code,
                duration_ms=round(duration_ms, 1),
                error_type=type(exc).__name__,
            ).warning("request.error")
            return JSONResponse(
                status_code=exc.status_code,
                content={"message": str(exc.detail), "request_id": request_id},
                headers={"X-Request-ID": request_id},
            )

        except Exception as exc:
            duration_ms = (time.perf_counter() - start) * 1000
            logger.bind(
                status_code=500,
                duration_ms=round(duration_ms, 1),
                error_type=type(exc).__name__,
            ).exception("request.error")
            return JSONResponse(
                status_code=500,
                content={"message": "Internal Server Error", "request_id": request_id},
                headers={"X-Request-ID": request_id},
            )


def create_app(
    config: ConfigData | None = None,
    dependencies: ApplicationDependencies | None = None,
) -> FastAPI:
    """Build the FastAPI application.

    Args:
        config: Process configuration; loaded from config.yaml when omitted
        dependencies: Prebuilt dependency container, used as-is when given

    Raises:
        ConfigurationError: If no config was given and loading it fails
    """
    if config is None:
        config = dependencies.config if dependencies is not None else load_config()

    configure_logging(config)
    is_production = config.app.environment == "production"

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if getattr(app.state, "app_dependencies", None) is None:
            app.state.app_dependencies = build_dependencies(config)
        logger.bind(
            identity_provider=config.identity_provider.backend,
            resource_service=config.resource_service.backend,
        ).info(f"Starting up application in {config.app.environment} environment")
        try:
            yield
        finally:
            logger.info("Shutting down application")

    app = FastAPI(
        title="Client Onboarding",
        lifespan=lifespan,
        docs_url=None if is_production else "/docs",
        redoc_url=None if is_production else "/redoc",
    )
    app.state.app_dependencies = dependencies

    app.add_middleware(SecurityHeadersMiddleware, environment=config.app.environment)

    # --- CORS configuration ---
    cors = config.app.cors
    if is_production and "*" in cors.origins and cors.allow_credentials:
        raise RuntimeError(
            "CORS misconfigured: cannot use '*' with allow_credentials=True in production"
        )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors.origins,
        allow_credentials=cors.allow_credentials,
        allow_methods=cors.allow_methods,
        allow_headers=cors.allow_headers,
    )
    app.middleware("http")(log_requests)

    app.add_exception_handler(OnboardingError, onboarding_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)

    # --- Router registration ---
    app.include_router(signup_router)
    app.include_router(auth_router)
    app.include_router(health_router)

    return app


if __name__ == "__main__":
    import uvicorn

    settings = load_config()
    uvicorn.run(
        create_app(settings),
        host=settings.app.host,
        port=settings.app.port,
        access_log=False,  # We handle access logging in middleware
    )
