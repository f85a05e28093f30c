"""Fixtures for route tests: a bare app wired to an in-memory store."""

from unittest.mock import MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from admitflow.api.app import register_exception_handlers
from admitflow.api.dependencies import (
    get_access_guard,
    get_registry_store,
    get_state_machine,
    get_submission_handler,
)
from admitflow.api.events import EventManager
from admitflow.api.routes import classes, identities, registrations, reports
from admitflow.approval import ApprovalStateMachine, PortalAccessGuard
from admitflow.registry import RegistryStore
from admitflow.submission import RegistrationSubmissionHandler


@pytest.fixture
def identity_provider() -> MagicMock:
    provider = MagicMock()
    provider.create_identity.side_effect = lambda email, password: f"uid-{email}"
    return provider


@pytest.fixture
def app(store: RegistryStore, identity_provider: MagicMock) -> FastAPI:
    """Create a test FastAPI app with overridden dependencies."""
    app = FastAPI()
    event_manager = EventManager()
    handler = RegistrationSubmissionHandler(
        store=store,
        identity_provider=identity_provider,
        blob_store=MagicMock(),
        event_manager=event_manager,
    )
    state_machine = ApprovalStateMachine(store, event_manager=event_manager)
    access_guard = PortalAccessGuard(store, identity_provider)

    def override_get_registry_store():
        yield store

    app.dependency_overrides[get_registry_store] = override_get_registry_store
    app.dependency_overrides[get_submission_handler] = lambda: handler
    app.dependency_overrides[get_state_machine] = lambda: state_machine
    app.dependency_overrides[get_access_guard] = lambda: access_guard

    register_exception_handlers(app)

    app.include_router(registrations.router, prefix="/api/v1")
    app.include_router(reports.router, prefix="/api/v1")
    app.include_router(classes.router, prefix="/api/v1")
    app.include_router(identities.router, prefix="/api/v1")
    return app


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    """Create a test client."""
    return TestClient(app, raise_server_exceptions=False)
