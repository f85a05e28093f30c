"""FastAPI dependencies for dependency injection."""

from __future__ import annotations

from collections.abc import Generator  # noqa: TC003
from typing import Annotated

from fastapi import Depends

from admitflow.api.events import EventManager
from admitflow.approval import ApprovalStateMachine, PortalAccessGuard
from admitflow.config import DEFAULT_SCHOOL_CODE
from admitflow.registry import RegistryStore
from admitflow.reporting import ReportingAggregator
from admitflow.submission import RegistrationSubmissionHandler

# Global RegistryStore instance (initialized on app startup)
_registry_store: RegistryStore | None = None


def init_registry_store(
    db_path: str = "admitflow.db", school_code: str = DEFAULT_SCHOOL_CODE
) -> RegistryStore:
    """Initialize the global RegistryStore instance."""
    global _registry_store  # noqa: PLW0603
    _registry_store = RegistryStore(db_path, school_code=school_code)
    return _registry_store


def close_registry_store() -> None:
    """Close the global RegistryStore instance."""
    global _registry_store  # noqa: PLW0603
    if _registry_store is not None:
        _registry_store.close()
        _registry_store = None


def get_registry_store() -> Generator[RegistryStore, None, None]:
    """Dependency that provides the RegistryStore instance."""
    if _registry_store is None:
        raise RuntimeError("RegistryStore not initialized. Call init_registry_store() first.")
    yield _registry_store


# Type alias for dependency injection
RegistryStoreDep = Annotated[RegistryStore, Depends(get_registry_store)]

# Global EventManager instance
_event_manager: EventManager | None = None


def init_event_manager() -> EventManager:
    """Initialize the global EventManager instance."""
    global _event_manager  # noqa: PLW0603
    _event_manager = EventManager()
    return _event_manager


def get_event_manager() -> Generator[EventManager, None, None]:
    """Dependency that provides the EventManager instance."""
    if _event_manager is None:
        raise RuntimeError("EventManager not initialized. Call init_event_manager() first.")
    yield _event_manager


# Type alias for dependency injection
EventManagerDep = Annotated[EventManager, Depends(get_event_manager)]

# Global submission handler (initialized on app startup)
_submission_handler: RegistrationSubmissionHandler | None = None


def init_submission_handler(handler: RegistrationSubmissionHandler) -> None:
    """Initialize the global RegistrationSubmissionHandler instance."""
    global _submission_handler  # noqa: PLW0603
    _submission_handler = handler


def close_submission_handler() -> None:
    """Close the global RegistrationSubmissionHandler instance."""
    global _submission_handler  # noqa: PLW0603
    _submission_handler = None


def get_submission_handler() -> Generator[RegistrationSubmissionHandler, None, None]:
    """Dependency that provides the RegistrationSubmissionHandler instance."""
    if _submission_handler is None:
        raise RuntimeError(
            "Submission handler not initialized. Call init_submission_handler() first."
        )
    yield _submission_handler


# Type alias for dependency injection
SubmissionHandlerDep = Annotated[RegistrationSubmissionHandler, Depends(get_submission_handler)]

# Global ApprovalStateMachine instance (initialized on app startup)
_state_machine: ApprovalStateMachine | None = None


def init_state_machine(state_machine: ApprovalStateMachine) -> None:
    """Initialize the global ApprovalStateMachine instance."""
    global _state_machine  # noqa: PLW0603
    _state_machine = state_machine


def close_state_machine() -> None:
    """Close the global ApprovalStateMachine instance."""
    global _state_machine  # noqa: PLW0603
    _state_machine = None


def get_state_machine() -> Generator[ApprovalStateMachine, None, None]:
    """Dependency that provides the ApprovalStateMachine instance."""
    if _state_machine is None:
        raise RuntimeError("ApprovalStateMachine not initialized. Call init_state_machine() first.")
    yield _state_machine


# Type alias for dependency injection
StateMachineDep = Annotated[ApprovalStateMachine, Depends(get_state_machine)]

# Global PortalAccessGuard instance (initialized on app startup)
_access_guard: PortalAccessGuard | None = None


def init_access_guard(guard: PortalAccessGuard) -> None:
    """Initialize the global PortalAccessGuard instance."""
    global _access_guard  # noqa: PLW0603
    _access_guard = guard


def close_access_guard() -> None:
    """Close the global PortalAccessGuard instance."""
    global _access_guard  # noqa: PLW0603
    _access_guard = None


def get_access_guard() -> Generator[PortalAccessGuard, None, None]:
    """Dependency that provides the PortalAccessGuard instance."""
    if _access_guard is None:
        raise RuntimeError("PortalAccessGuard not initialized. Call init_access_guard() first.")
    yield _access_guard


# Type alias for dependency injection
AccessGuardDep = Annotated[PortalAccessGuard, Depends(get_access_guard)]


def get_aggregator(store: RegistryStoreDep) -> ReportingAggregator:
    """Dependency that provides a ReportingAggregator over the registry."""
    return ReportingAggregator(store)


# Type alias for dependency injection
AggregatorDep = Annotated[ReportingAggregator, Depends(get_aggregator)]
