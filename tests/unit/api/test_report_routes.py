"""Unit tests for report routes."""

from collections.abc import Callable

import pytest
from fastapi.testclient import TestClient

from admitflow.registry import ApprovalStatus, Registration, RegistryStore


@pytest.mark.unit
class TestStatsRoute:
    """Tests for GET /reports/stats."""

    def test_stats(
        self,
        client: TestClient,
        store: RegistryStore,
        make_registration: Callable[..., Registration],
    ) -> None:
        registration = make_registration()
        make_registration()
        store.transition_approval(registration.id, ApprovalStatus.REJECTED, "admin-1")

        response = client.get("/api/v1/reports/stats")

        assert response.status_code == 200
        assert response.json()["data"] == {
            "total": 2,
            "approved": 0,
            "pending": 1,
            "rejected": 1,
            "approval_rate": 0.0,
        }

    def test_stats_with_range(
        self, client: TestClient, make_registration: Callable[..., Registration]
    ) -> None:
        make_registration()

        response = client.get(
            "/api/v1/reports/stats", params={"start": "2025-04-01", "end": "2025-04-30"}
        )

        assert response.json()["data"]["total"] == 0

    def test_stats_half_range(self, client: TestClient) -> None:
        response = client.get("/api/v1/reports/stats", params={"start": "2025-04-01"})

        assert response.status_code == 422
        assert response.json()["error"] == "start and end must be given together"

    def test_stats_inverted_range(self, client: TestClient) -> None:
        response = client.get(
            "/api/v1/reports/stats", params={"start": "2025-02-01", "end": "2025-01-01"}
        )

        assert response.status_code == 422
        assert response.json()["data"] is None
        assert "is after end" in response.json()["error"]


@pytest.mark.unit
class TestApprovalReportRoute:
    """Tests for GET /reports/approvals."""

    def test_report(
        self, client: TestClient, make_registration: Callable[..., Registration]
    ) -> None:
        make_registration()

        response = client.get(
            "/api/v1/reports/approvals", params={"start": "2025-03-01", "end": "2025-03-31"}
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["period"] == "2025-03-01 to 2025-03-31"
        assert data["total_pending"] == 1
        assert data["average_approval_time_hours"] is None

    def test_report_requires_period(self, client: TestClient) -> None:
        response = client.get("/api/v1/reports/approvals")

        assert response.status_code == 422

    def test_report_inverted_range(self, client: TestClient) -> None:
        response = client.get(
            "/api/v1/reports/approvals", params={"start": "2025-02-01", "end": "2025-01-01"}
        )

        assert response.status_code == 422


@pytest.mark.unit
class TestPendingCsvRoute:
    """Tests for GET /reports/pending.csv."""

    def test_no_content_when_nothing_pending(self, client: TestClient) -> None:
        response = client.get("/api/v1/reports/pending.csv")

        assert response.status_code == 204
        assert response.content == b""

    def test_csv_download(
        self, client: TestClient, make_registration: Callable[..., Registration]
    ) -> None:
        registration = make_registration()

        response = client.get("/api/v1/reports/pending.csv")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert "attachment" in response.headers["content-disposition"]
        assert registration.email in response.text
        assert response.text.startswith('"Admission Number"')
