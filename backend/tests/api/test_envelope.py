# backend/tests/api/test_envelope.py
"""Tests for the response envelope and error mapping."""

import json
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from cfc_monitoring.api.envelope import iso_timestamp, monitoring_error_handler, ok
from cfc_monitoring.errors import (
    InvalidTransitionError,
    MonitoringError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)


class TestIsoTimestamp:
    def test_millisecond_precision_with_z(self):
        value = datetime(2026, 3, 1, 12, 0, 5, 123456, tzinfo=timezone.utc)
        assert iso_timestamp(value) == "2026-03-01T12:00:05.123Z"

    def test_defaults_to_now(self):
        assert iso_timestamp().endswith("Z")


class TestOk:
    def test_wraps_data(self):
        response = ok({"a": 1}, "done")

        assert response.success is True
        assert response.data == {"a": 1}
        assert response.message == "done"
        assert response.error is None


class TestMonitoringErrorHandler:
    """Tests for domain error to HTTP status mapping."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "exc,status_code,error",
        [
            (NotFoundError("Alert 'x' not found"), 404, "not_found"),
            (InvalidTransitionError("Cannot resolve"), 400, "invalid_transition"),
            (ValidationError("bad", field="limit"), 400, "validation_error"),
            (PersistenceError("Storage error during create"), 500, "persistence_error"),
            (MonitoringError("unexpected"), 500, "internal_error"),
        ],
    )
    async def test_mapping(self, exc, status_code, error):
        request = MagicMock()
        request.method = "GET"
        request.url.path = "/api/alerts"

        response = await monitoring_error_handler(request, exc)

        body = json.loads(response.body)
        assert response.status_code == status_code
        assert body["success"] is False
        assert body["error"] == error
        assert body["message"] == str(exc)
