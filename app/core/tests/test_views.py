"""
Tests for core infrastructure views.
"""

from __future__ import annotations

from unittest.mock import patch

from django.db import DatabaseError
from django.test import Client


class TestHealthCheck:
    """Tests for GET /health/."""

    def test_healthy(self, db):
        """Reachable database reports healthy."""
        response = Client().get("/health/")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "database": "connected"}

    def test_database_down(self, db):
        """Database errors report unhealthy with 503."""
        with patch("core.views.connection") as connection:
            connection.cursor.side_effect = DatabaseError("connection refused")
            response = Client().get("/health/")

        assert response.status_code == 503
        assert response.json() == {"status": "unhealthy", "database": "disconnected"}
