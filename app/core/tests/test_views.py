"""
Tests for core infrastructure views.
"""

from unittest import mock

from django.db import DatabaseError
from rest_framework import status

HEALTH_URL = "/health/"


class TestHealthCheck:
    def test_healthy(self, db, client):
        response = client.get(HEALTH_URL)

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"status": "healthy", "database": "connected"}

    def test_database_down(self, db, client):
        with mock.patch("core.views.connection.cursor", side_effect=DatabaseError("down")):
            response = client.get(HEALTH_URL)

        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
        assert response.json()["database"] == "disconnected"
