"""Shared pytest fixtures and configuration."""

import base64
from collections.abc import Callable
from datetime import date, datetime, timedelta
from typing import Any

import pytest

from admitflow.registry import Registration, RegistryStore

# Smallest valid PNG header, enough for content-type checks
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 24
PDF_BYTES = b"%PDF-1.4\n%\xe2\xe3\xcf\xd3\n"


# Register custom markers
def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for test categorization."""
    config.addinivalue_line("markers", "unit: fast tests with no external dependencies")
    config.addinivalue_line("markers", "integration: component interaction tests")


class FakeClock:
    """Settable clock returning naive-UTC datetimes."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


# Shared fixtures


@pytest.fixture
def clock() -> FakeClock:
    """Clock fixed at 2025-03-14 09:30 UTC."""
    return FakeClock(datetime(2025, 3, 14, 9, 30))


@pytest.fixture
def store(clock: FakeClock):
    """Create an in-memory RegistryStore driven by the fake clock."""
    s = RegistryStore(":memory:", clock=clock)
    yield s
    s.close()


def encode(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


@pytest.fixture
def make_form() -> Callable[..., dict[str, Any]]:
    """Factory for a valid registration form; keyword arguments override fields."""

    def _make(**overrides: Any) -> dict[str, Any]:
        form: dict[str, Any] = {
            "email": "ada.obi@example.com",
            "password": "Secure123",
            "confirm_password": "Secure123",
            "first_name": "Ada",
            "last_name": "Obi",
            "gender": "Female",
            "date_of_birth": f"{date.today().year - 15}-04-12",
            "phone": "+234 803 123 4567",
            "address": "12 Marina Road, Lagos Island",
            "state": "Lagos",
            "lga": "Lagos Island",
            "guardian_name": "Chinedu Obi",
            "guardian_phone": "+234 803 765 4321",
            "guardian_email": "chinedu.obi@example.com",
            "guardian_relationship": "Father",
            "previous_school": "Bright Future Primary",
            "documents": [],
        }
        form.update(overrides)
        return form

    return _make


@pytest.fixture
def photo_upload() -> dict[str, str]:
    """A valid passport photo document."""
    return {
        "slot": "photo",
        "filename": "passport photo.png",
        "content_type": "image/png",
        "content": encode(PNG_BYTES),
    }


def profile_data(**overrides: Any) -> dict[str, Any]:
    """Profile fields as persisted on a registration row."""
    profile: dict[str, Any] = {
        "first_name": "Ada",
        "last_name": "Obi",
        "gender": "Female",
        "date_of_birth": date(2010, 4, 12),
        "phone": "08031234567",
        "address": "12 Marina Road",
        "state": "Lagos",
        "lga": "Lagos Island",
        "guardian_name": "Chinedu Obi",
        "guardian_phone": "08037654321",
        "guardian_email": "chinedu.obi@example.com",
        "guardian_relationship": "Father",
        "previous_school": None,
    }
    profile.update(overrides)
    return profile


@pytest.fixture
def make_registration(store: RegistryStore) -> Callable[..., Registration]:
    """Factory creating a user profile and its registration directly in the store."""
    counter = {"n": 0}

    def _make(
        email: str | None = None,
        class_id: str | None = None,
        **profile_overrides: Any,
    ) -> Registration:
        counter["n"] += 1
        email = email or f"student{counter['n']}@example.com"
        user = store.create_user_profile(
            user_id=f"user-{counter['n']}",
            email=email,
            full_name="Test Student",
        )
        return store.create_registration(
            user_id=user.id,
            email=email,
            profile=profile_data(**profile_overrides),
            class_id=class_id,
        )

    return _make
