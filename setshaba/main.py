"""
Setshaba Connect - FastAPI Application Entry Point

Citizen reporting for South African municipalities: residents file service
delivery reports, officials of the same municipality triage them.

Collaborators (Firestore, identity provider, geocoder) live on ``app.state``.
``create_app`` accepts them as arguments; any left out are built from
settings when the app starts.
"""

import logging
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from setshaba.config.firebase import initialize_firestore
from setshaba.core.errors import DomainError, InternalError, ValidationFailed
from setshaba.core.settings import Settings, settings
from setshaba.models.base import ErrorResponse
from setshaba.routes import auth, health, municipalities, reports, users
from setshaba.services.geocoding import GeocodingProvider, MunicipalityResolver, get_geocoding_provider
from setshaba.services.identity import IdentityProvider, get_identity_provider

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)


def _error_response(status_code: int, error: str, **extra) -> JSONResponse:
    body = ErrorResponse(error=error, statusCode=status_code, **extra)
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json", exclude_none=True))


def _validation_details(exc: RequestValidationError):
    # ctx may hold exception instances, which are not JSON-serializable
    return [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg"), "type": error.get("type")}
        for error in exc.errors()
    ]


def register_exception_handlers(app: FastAPI, app_settings: Settings) -> None:

    @app.exception_handler(DomainError)
    async def domain_error_handler(request: Request, exc: DomainError):
        extra = {}
        if isinstance(exc, ValidationFailed) and exc.details:
            extra["details"] = exc.details
        if isinstance(exc, InternalError) and exc.__cause__ is not None and not app_settings.is_production:
            extra["detail"] = str(exc.__cause__)
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
        return _error_response(exc.status_code, exc.message, **extra)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.info(f"Validation failed: {request.method} {request.url.path}: {exc.errors()}")
        return _error_response(status.HTTP_400_BAD_REQUEST, "Validation failed", details=_validation_details(exc))

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == status.HTTP_404_NOT_FOUND:
            return _error_response(exc.status_code, "API endpoint not found")
        return _error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Catch all unhandled exceptions and log them with full traceback."""
        logger.error(f"Unhandled exception on {request.method} {request.url.path}: {exc}", exc_info=exc)
        extra = {} if app_settings.is_production else {"detail": str(exc)}
        return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error", **extra)


def create_app(
    app_settings: Optional[Settings] = None,
    db=None,
    identity: Optional[IdentityProvider] = None,
    geocoder: Optional[GeocodingProvider] = None,
) -> FastAPI:
    """Build the application. Collaborators passed in are used as-is."""
    app_settings = app_settings or settings

    app = FastAPI(
        title=app_settings.APP_NAME,
        version=app_settings.APP_VERSION,
        description="Citizen service delivery reports for South African municipalities",
        debug=app_settings.DEBUG,
    )

    app.state.settings = app_settings
    app.state.db = db
    app.state.identity = identity
    app.state.resolver = MunicipalityResolver(geocoder or get_geocoding_provider(app_settings))

    register_exception_handlers(app, app_settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.on_event("startup")
    def startup_event():
        """Build whichever collaborators were not supplied."""
        logger.info(f"Starting {app_settings.APP_NAME} v{app_settings.APP_VERSION} ({app_settings.ENVIRONMENT})")

        if app.state.db is None:
            try:
                app.state.db = initialize_firestore(app_settings)
            except RuntimeError as e:
                logger.error(f"{e}. The app will start but database operations will fail.")

        if app.state.identity is None:
            try:
                app.state.identity = get_identity_provider(app_settings)
            except Exception as e:
                logger.error(f"Identity provider initialization failed: {e}", exc_info=True)

    @app.on_event("shutdown")
    def shutdown_event():
        logger.info(f"Shutting down {app_settings.APP_NAME}")

    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(users.router)
    app.include_router(municipalities.router)
    app.include_router(reports.router)

    @app.get("/")
    def root():
        """
        Root endpoint - API information.
        """
        return {
            "service": app_settings.APP_NAME,
            "version": app_settings.APP_VERSION,
            "status": "running",
            "docs": "/docs",
            "health": "/health",
        }

    return app


configure_logging(settings.LOG_LEVEL)
app = create_app()
