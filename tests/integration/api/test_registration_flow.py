"""Integration tests for the registration API on a real database."""

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
from fastapi.testclient import TestClient

from admitflow.api.app import create_app
from admitflow.config import AdmitFlowConfig, StorageConfig
from admitflow.identity import LocalIdentityProvider
from admitflow.registry import Database, utcnow


@pytest.fixture
def config(tmp_path: Path) -> AdmitFlowConfig:
    return AdmitFlowConfig(
        db_path=str(tmp_path / "admitflow.db"),
        storage=StorageConfig(
            local_dir=str(tmp_path / "uploads"),
            public_base_url="http://testserver/uploads",
        ),
    )


@pytest.fixture
def client(config: AdmitFlowConfig):
    """Create a test client; the lifespan wires the real components."""
    app = create_app(config, configure_logging=False)
    with TestClient(app, raise_server_exceptions=False) as client:
        yield client


@pytest.mark.integration
class TestRegistrationFullFlow:
    """Class setup, submission, review and reporting over HTTP."""

    def test_full_flow(
        self,
        client: TestClient,
        config: AdmitFlowConfig,
        tmp_path: Path,
        make_form: Callable[..., dict[str, Any]],
        photo_upload: dict[str, str],
    ) -> None:
        year = utcnow().year % 100

        # 1. Create the class
        class_response = client.post(
            "/api/v1/classes", json={"name": "SS 3 B", "class_code": "SS3B"}
        )
        assert class_response.status_code == 201
        class_id = class_response.json()["data"]["id"]

        # 2. Submit
        submit_response = client.post(
            "/api/v1/registrations",
            json=make_form(class_id=class_id, documents=[photo_upload]),
        )
        assert submit_response.status_code == 201
        submission = submit_response.json()["data"]
        admission_number = f"ELBA/{year:02d}/SS3B/001"
        assert submission["admission_number"] == admission_number
        assert submission["failed_documents"] == []

        # The identity was created with a hashed password
        database = Database(config.db_path)
        try:
            provider = LocalIdentityProvider(database)
            assert provider.verify_credentials("ada.obi@example.com", "Secure123") == (
                submission["user_id"]
            )
        finally:
            database.close()

        # The document landed in the upload directory
        registration = client.get(
            f"/api/v1/registrations/{submission['registration_id']}"
        ).json()["data"]
        (document,) = registration["documents"]
        relative = document["url"].removeprefix("http://testserver/uploads/")
        assert (tmp_path / "uploads" / relative).exists()

        # 3. Pending export
        csv_response = client.get("/api/v1/reports/pending.csv")
        assert csv_response.status_code == 200
        assert admission_number in csv_response.text

        # The student cannot enter the portal yet
        login = {"email": "ada.obi@example.com", "password": "Secure123"}
        assert client.post("/api/v1/registrations/access", json=login).status_code == 403

        # 4. Approve
        approve_response = client.post(
            f"/api/v1/registrations/{submission['registration_id']}/approve",
            json={"reviewer_id": "admin-1", "comments": "ok"},
        )
        assert approve_response.status_code == 200
        assert approve_response.json()["data"]["status"] == "approved"

        access = client.post("/api/v1/registrations/access", json=login)
        assert access.status_code == 200
        assert access.json()["data"]["admission_number"] == admission_number

        # 5. Stats
        stats = client.get("/api/v1/reports/stats").json()["data"]
        assert stats["pending"] == 0
        assert stats["approved"] == 1

        # 6. Lookup by number
        lookup = client.get(
            "/api/v1/registrations/lookup", params={"admission_number": admission_number}
        )
        assert lookup.json()["data"]["approval"]["comments"] == "ok"

        # 7. Second decision is refused
        again = client.post(
            f"/api/v1/registrations/{submission['registration_id']}/reject",
            json={"reviewer_id": "admin-2", "reason": "Late"},
        )
        assert again.status_code == 409
        assert client.get("/api/v1/reports/pending.csv").status_code == 204

    def test_duplicate_submission(
        self, client: TestClient, make_form: Callable[..., dict[str, Any]]
    ) -> None:
        first = client.post("/api/v1/registrations", json=make_form())
        second = client.post(
            "/api/v1/registrations", json=make_form(email="ADA.OBI@example.com")
        )

        assert first.status_code == 201
        assert second.status_code == 409
        assert client.get("/api/v1/registrations").json()["data"][0]["admission_number"] is None
