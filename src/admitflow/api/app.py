"""FastAPI application setup."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from admitflow.api.dependencies import (
    close_access_guard,
    close_registry_store,
    close_state_machine,
    close_submission_handler,
    init_access_guard,
    init_event_manager,
    init_registry_store,
    init_state_machine,
    init_submission_handler,
)
from admitflow.api.models import APIResponse, FieldErrorResponse
from admitflow.api.routes import classes, events, identities, registrations, reports
from admitflow.approval import (
    ApprovalPendingError,
    ApprovalStateMachine,
    ClassAssignmentRequiredError,
    InvalidLoginError,
    InvalidStateTransitionError,
    MissingReasonError,
    MissingReviewerError,
    PortalAccessDeniedError,
    PortalAccessGuard,
    RegistrationRejectedError,
)
from admitflow.config import AdmitFlowConfig, load_config
from admitflow.identity import IdentityError, LocalIdentityProvider, SupabaseIdentityProvider
from admitflow.logging import setup_logging
from admitflow.regnumber import (
    InvalidComponentError,
    InvalidRegistrationNumberError,
    SequenceExhaustedError,
)
from admitflow.registry import (
    AdmissionNumberLockedError,
    ClassExistsError,
    ClassNotFoundError,
    RegistrationNotFoundError,
    RegistryError,
)
from admitflow.reporting import InvalidDateRangeError
from admitflow.storage import LocalBlobStore, SupabaseBlobStore
from admitflow.submission import (
    AuthError,
    DuplicateEmailError,
    PersistenceError,
    RegistrationSubmissionHandler,
)
from admitflow.submission import ValidationError as SubmissionValidationError

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from admitflow.identity import IdentityProvider
    from admitflow.registry import RegistryStore
    from admitflow.storage import BlobStore

logger = logging.getLogger(__name__)

# Domain errors whose message is safe to show to the client
_CLIENT_ERRORS: dict[type[Exception], int] = {
    RegistrationNotFoundError: status.HTTP_404_NOT_FOUND,
    ClassNotFoundError: status.HTTP_404_NOT_FOUND,
    MissingReasonError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    MissingReviewerError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    InvalidRegistrationNumberError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    InvalidComponentError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    InvalidDateRangeError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    DuplicateEmailError: status.HTTP_409_CONFLICT,
    ClassExistsError: status.HTTP_409_CONFLICT,
    InvalidStateTransitionError: status.HTTP_409_CONFLICT,
    ClassAssignmentRequiredError: status.HTTP_409_CONFLICT,
    AdmissionNumberLockedError: status.HTTP_409_CONFLICT,
    SequenceExhaustedError: status.HTTP_409_CONFLICT,
    AuthError: status.HTTP_400_BAD_REQUEST,
    InvalidLoginError: status.HTTP_401_UNAUTHORIZED,
    PortalAccessDeniedError: status.HTTP_403_FORBIDDEN,
    ApprovalPendingError: status.HTTP_403_FORBIDDEN,
    RegistrationRejectedError: status.HTTP_403_FORBIDDEN,
}


def build_identity_provider(config: AdmitFlowConfig, store: RegistryStore) -> IdentityProvider:
    """Create the identity provider selected by the configuration."""
    if config.identity_backend == "supabase":
        return SupabaseIdentityProvider(config.supabase.url, config.supabase.service_key)
    return LocalIdentityProvider(store.database)


def build_blob_store(config: AdmitFlowConfig) -> BlobStore:
    """Create the blob store selected by the configuration."""
    if config.storage.backend == "supabase":
        return SupabaseBlobStore(
            config.supabase.url,
            config.supabase.service_key,
            bucket=config.supabase.bucket,
        )
    return LocalBlobStore(config.storage.local_dir, config.storage.public_base_url)


def _error_response(status_code: int, message: str, data: Any = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(APIResponse[Any](data=data, error=message)),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Translate domain errors into APIResponse envelopes."""

    async def client_error_handler(_request: Request, exc: Exception) -> JSONResponse:
        status_code = next(
            _CLIENT_ERRORS[cls] for cls in type(exc).__mro__ if cls in _CLIENT_ERRORS
        )
        return _error_response(status_code, str(exc))

    for error_type in _CLIENT_ERRORS:
        app.add_exception_handler(error_type, client_error_handler)

    @app.exception_handler(SubmissionValidationError)
    async def submission_validation_handler(
        _request: Request, exc: SubmissionValidationError
    ) -> JSONResponse:
        errors = [FieldErrorResponse(field=e.field, message=e.message) for e in exc.errors]
        return _error_response(
            status.HTTP_422_UNPROCESSABLE_ENTITY, "Validation failed", data=errors
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        _request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors = [
            FieldErrorResponse(
                field=".".join(str(part) for part in err["loc"] if part != "body") or "body",
                message=err["msg"],
            )
            for err in exc.errors()
        ]
        return _error_response(
            status.HTTP_422_UNPROCESSABLE_ENTITY, "Validation failed", data=errors
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        _request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        return _error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(PersistenceError)
    async def persistence_error_handler(_request: Request, exc: PersistenceError) -> JSONResponse:
        logger.error("Registration not saved (step=%s): %s", exc.step, exc)
        return _error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR, "Registration could not be saved"
        )

    @app.exception_handler(IdentityError)
    async def identity_error_handler(_request: Request, exc: IdentityError) -> JSONResponse:
        logger.error("Identity provider error: %s", exc)
        return _error_response(status.HTTP_502_BAD_GATEWAY, "Identity provider unavailable")

    @app.exception_handler(RegistryError)
    async def registry_error_handler(_request: Request, exc: RegistryError) -> JSONResponse:
        logger.error("Registry error: %s", exc)
        return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    # Startup
    config: AdmitFlowConfig = app.state.config or load_config()
    if app.state.configure_logging:
        setup_logging(
            log_dir=config.logging.log_dir,
            level=config.logging.level,
            console=config.logging.console,
        )

    store = init_registry_store(config.db_path, school_code=config.school_code)
    event_manager = init_event_manager()
    identity_provider = build_identity_provider(config, store)
    blob_store = build_blob_store(config)

    init_submission_handler(
        RegistrationSubmissionHandler(
            store=store,
            identity_provider=identity_provider,
            blob_store=blob_store,
            config=config,
            event_manager=event_manager,
        )
    )
    init_state_machine(ApprovalStateMachine(store, event_manager=event_manager))
    init_access_guard(PortalAccessGuard(store, identity_provider))
    logger.info(
        "AdmitFlow started (db=%s, identity=%s, storage=%s)",
        config.db_path,
        config.identity_backend,
        config.storage.backend,
    )

    yield
    # Shutdown
    close_access_guard()
    close_state_machine()
    close_submission_handler()
    for client in (identity_provider, blob_store):
        if isinstance(client, (SupabaseIdentityProvider, SupabaseBlobStore)):
            client.close()
    close_registry_store()


def create_app(
    config: AdmitFlowConfig | None = None,
    configure_logging: bool = True,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        config: Service configuration; loaded from ADMITFLOW_CONFIG and the
            environment at startup when omitted
        configure_logging: Install the rotating file handler on startup
    """
    app = FastAPI(
        title="AdmitFlow API",
        description="REST API for AdmitFlow - student registration and approval",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Store config for lifespan manager
    app.state.config = config
    app.state.configure_logging = configure_logging

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # Include routers
    app.include_router(registrations.router, prefix="/api/v1")
    app.include_router(reports.router, prefix="/api/v1")
    app.include_router(classes.router, prefix="/api/v1")
    app.include_router(events.router, prefix="/api/v1")
    app.include_router(identities.router, prefix="/api/v1")

    return app


# Default app instance
app = create_app()
