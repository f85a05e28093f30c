"""REST API for AdmitFlow."""

from admitflow.api.app import app, create_app
from admitflow.api.models import (
    APIResponse,
    ClassCreate,
    ClassResponse,
    RegistrationResponse,
)

__all__ = [
    "APIResponse",
    "ClassCreate",
    "ClassResponse",
    "RegistrationResponse",
    "app",
    "create_app",
]
