"""Unit tests for the outbox admin HTTP routes."""

from __future__ import annotations

from unittest.mock import AsyncMock
from uuid import uuid4

import pytest
from fastapi import FastAPI, status
from fastapi.testclient import TestClient
from pydantic import SecretStr

from identity.application.services.outbox_admin_service import OutboxAdminService
from infrastructure.settings import InternalApiSettings, get_internal_api_settings
from shared_kernel.outbox.exceptions import OutboundEventNotFoundError
from shared_kernel.outbox.value_objects import OutboxStats

API_KEY = "internal-secret"
HEADERS = {"X-API-Key": API_KEY}


@pytest.fixture
def mock_admin_service() -> AsyncMock:
    """Mock OutboxAdminService for testing."""
    return AsyncMock(spec=OutboxAdminService)


@pytest.fixture
def test_client(mock_admin_service: AsyncMock) -> TestClient:
    """Create TestClient with mocked dependencies."""
    from identity.dependencies.outbox import get_outbox_admin_service
    from identity.presentation.outbox_admin import router

    app = FastAPI()

    app.dependency_overrides[get_outbox_admin_service] = lambda: mock_admin_service
    app.dependency_overrides[get_internal_api_settings] = lambda: InternalApiSettings(
        api_key=SecretStr(API_KEY)
    )

    app.include_router(router)

    return TestClient(app)


class TestInternalApiKey:
    """Every admin route requires the internal API key."""

    @pytest.mark.parametrize(
        "method,path",
        [
            ("GET", "/internal/admin/outbox/failed"),
            ("GET", "/internal/admin/outbox/stats"),
            ("POST", f"/internal/admin/outbox/{uuid4()}/retry"),
        ],
    )
    def test_missing_key_returns_401(
        self, test_client: TestClient, mock_admin_service: AsyncMock, method, path
    ) -> None:
        response = test_client.request(method, path)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert mock_admin_service.mock_calls == []

    def test_wrong_key_returns_401(self, test_client: TestClient) -> None:
        response = test_client.get(
            "/internal/admin/outbox/stats", headers={"X-API-Key": "nope"}
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.headers["WWW-Authenticate"] == "API-Key"

    def test_unconfigured_key_rejects_everything(
        self, mock_admin_service: AsyncMock
    ) -> None:
        from identity.dependencies.outbox import get_outbox_admin_service
        from identity.presentation.outbox_admin import router

        app = FastAPI()
        app.dependency_overrides[get_outbox_admin_service] = lambda: mock_admin_service
        app.dependency_overrides[get_internal_api_settings] = (
            lambda: InternalApiSettings(api_key=SecretStr(""))
        )
        app.include_router(router)

        response = TestClient(app).get(
            "/internal/admin/outbox/stats", headers={"X-API-Key": ""}
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


class TestListFailedRoute:
    """Tests for GET /internal/admin/outbox/failed."""

    def test_lists_records(
        self, test_client: TestClient, mock_admin_service: AsyncMock, make_record
    ) -> None:
        record = make_record(
            status="PERMANENTLY_FAILED", retry_count=5, last_error="HTTP 500"
        )
        mock_admin_service.list_permanently_failed.return_value = [
            record.to_value_object()
        ]

        response = test_client.get("/internal/admin/outbox/failed", headers=HEADERS)

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert len(body) == 1
        assert body[0]["id"] == str(record.id)
        assert body[0]["event_id"] == "INV_ACC:INV1"
        assert body[0]["status"] == "PERMANENTLY_FAILED"
        assert body[0]["retry_count"] == 5
        assert body[0]["last_error"] == "HTTP 500"
        assert body[0]["payload"]["invitationId"] == "INV1"

    def test_empty_list(
        self, test_client: TestClient, mock_admin_service: AsyncMock
    ) -> None:
        mock_admin_service.list_permanently_failed.return_value = []

        response = test_client.get("/internal/admin/outbox/failed", headers=HEADERS)

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == []

    def test_unexpected_error_returns_500(
        self, test_client: TestClient, mock_admin_service: AsyncMock
    ) -> None:
        mock_admin_service.list_permanently_failed.side_effect = RuntimeError("db")

        response = test_client.get("/internal/admin/outbox/failed", headers=HEADERS)

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.json()["detail"] == "Failed to list failed events"


class TestRetryRoute:
    """Tests for POST /internal/admin/outbox/{record_id}/retry."""

    def test_resets_record(
        self, test_client: TestClient, mock_admin_service: AsyncMock, make_record
    ) -> None:
        record = make_record()
        mock_admin_service.reset_event.return_value = record.to_value_object()

        response = test_client.post(
            f"/internal/admin/outbox/{record.id}/retry", headers=HEADERS
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {
            "id": str(record.id),
            "event_id": "INV_ACC:INV1",
            "status": "PENDING",
            "message": "Event INV_ACC:INV1 reset for redelivery",
        }
        mock_admin_service.reset_event.assert_awaited_once_with(record.id)

    def test_path_parameter_is_the_record_id(self, test_client: TestClient) -> None:
        schema = test_client.app.openapi()
        operation = schema["paths"]["/internal/admin/outbox/{record_id}/retry"]["post"]

        assert [p["name"] for p in operation["parameters"] if p["in"] == "path"] == [
            "record_id"
        ]

    def test_event_id_is_not_accepted_as_record_id(
        self, test_client: TestClient, mock_admin_service: AsyncMock
    ) -> None:
        response = test_client.post(
            "/internal/admin/outbox/INV_ACC:INV1/retry", headers=HEADERS
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        mock_admin_service.reset_event.assert_not_called()

    def test_invalid_id_returns_400(
        self, test_client: TestClient, mock_admin_service: AsyncMock
    ) -> None:
        response = test_client.post(
            "/internal/admin/outbox/not-a-uuid/retry", headers=HEADERS
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["detail"] == "Invalid record ID format"
        mock_admin_service.reset_event.assert_not_called()

    def test_missing_record_returns_404(
        self, test_client: TestClient, mock_admin_service: AsyncMock
    ) -> None:
        mock_admin_service.reset_event.side_effect = OutboundEventNotFoundError("gone")

        response = test_client.post(
            f"/internal/admin/outbox/{uuid4()}/retry", headers=HEADERS
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["detail"] == "Event not found"

    def test_unexpected_error_returns_500(
        self, test_client: TestClient, mock_admin_service: AsyncMock
    ) -> None:
        mock_admin_service.reset_event.side_effect = RuntimeError("db")

        response = test_client.post(
            f"/internal/admin/outbox/{uuid4()}/retry", headers=HEADERS
        )

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR


class TestStatsRoute:
    """Tests for GET /internal/admin/outbox/stats."""

    def test_returns_counts(
        self, test_client: TestClient, mock_admin_service: AsyncMock
    ) -> None:
        mock_admin_service.get_stats.return_value = OutboxStats(
            pending=3, failed=2, delivered=10, permanently_failed=1
        )

        response = test_client.get("/internal/admin/outbox/stats", headers=HEADERS)

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {
            "pending": 3,
            "failed": 2,
            "delivered": 10,
            "permanently_failed": 1,
            "total": 16,
        }

    def test_unexpected_error_returns_500(
        self, test_client: TestClient, mock_admin_service: AsyncMock
    ) -> None:
        mock_admin_service.get_stats.side_effect = RuntimeError("db")

        response = test_client.get("/internal/admin/outbox/stats", headers=HEADERS)

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
