"""Tests for application wiring: health, API index, error envelope, middleware."""

import unittest
from importlib import metadata
from unittest.mock import MagicMock, patch

from fastapi.testclient import TestClient

from adapter.fake.user_repository import FakeUserRepository
from api.app import DISTRIBUTION_NAME, VERSION, _read_version, create_app
from utils.config import AuthSettings, Settings

AUTH_SETTINGS = AuthSettings(
    jwt_secret="test-access-secret",
    jwt_refresh_secret="test-refresh-secret",
    bcrypt_rounds=4,
)


def _make_app(repo=None, environment="test", **settings):
    return create_app(
        Settings(auth=AUTH_SETTINGS, environment=environment, **settings),
        user_repo=repo or FakeUserRepository(),
    )


class TestHealth(unittest.TestCase):
    """Tests for GET /health."""

    def test_health_ok(self):
        client = TestClient(_make_app())

        response = client.get("/health")

        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data["status"], "healthy")
        self.assertEqual(data["environment"], "test")
        self.assertGreaterEqual(data["uptime"], 0)
        self.assertTrue(data["timestamp"].endswith("Z"))
        self.assertEqual(data["services"]["database"]["status"], "healthy")

    def test_health_degraded_when_store_down(self):
        repo = MagicMock()
        repo.ping.return_value = False
        client = TestClient(_make_app(repo))

        response = client.get("/health")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "degraded")
        self.assertEqual(response.json()["services"]["database"]["status"], "unhealthy")

    def test_health_degraded_when_ping_raises(self):
        repo = MagicMock()
        repo.ping.side_effect = RuntimeError("boom")
        client = TestClient(_make_app(repo))

        response = client.get("/health")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "degraded")
        self.assertIn("boom", response.json()["services"]["database"]["message"])


class TestApiIndex(unittest.TestCase):
    """Tests for GET /api."""

    def test_api_index(self):
        client = TestClient(_make_app())

        response = client.get("/api")

        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertIn("Project Nexus", data["message"])
        self.assertEqual(data["version"], VERSION)
        self.assertEqual(data["endpoints"], {"health": "/health", "api": "/api", "auth": "/api/auth"})

        auth_routes = {(ep["method"], ep["path"]) for ep in data["routes"]["auth"]}
        self.assertIn(("POST", "/api/auth/register"), auth_routes)
        self.assertIn(("POST", "/api/auth/login"), auth_routes)
        self.assertIn(("GET", "/api/auth/profile"), auth_routes)
        self.assertIn(("POST", "/api/auth/logout"), auth_routes)
        self.assertIn(("POST", "/api/auth/refresh"), auth_routes)
        self.assertNotIn("meta", data["routes"])


class TestErrorEnvelope(unittest.TestCase):
    """Tests for 404 and 500 handling."""

    def _app_with_failing_route(self, environment):
        app = _make_app(environment=environment)

        @app.get("/boom")
        async def boom():
            raise RuntimeError("kaboom")

        return app

    def test_unknown_route_returns_404_envelope(self):
        client = TestClient(_make_app())

        response = client.get("/api/nope")

        self.assertEqual(response.status_code, 404)
        self.assertEqual(
            response.json(),
            {"success": False, "message": "Route not found", "path": "/api/nope"},
        )

    def test_unhandled_error_in_development_includes_stack(self):
        client = TestClient(self._app_with_failing_route("development"), raise_server_exceptions=False)

        response = client.get("/boom")

        self.assertEqual(response.status_code, 500)
        data = response.json()
        self.assertFalse(data["success"])
        self.assertEqual(data["message"], "Internal Server Error")
        self.assertIn("kaboom", data["stack"])

    def test_unhandled_error_in_production_hides_stack(self):
        client = TestClient(self._app_with_failing_route("production"), raise_server_exceptions=False)

        response = client.get("/boom")

        self.assertEqual(response.status_code, 500)
        self.assertNotIn("stack", response.json())
        self.assertNotIn("kaboom", response.text)

    def test_unhandled_error_carries_cors_headers(self):
        app = _make_app(environment="production", cors_origins=["http://localhost:3000"])

        @app.get("/boom")
        async def boom():
            raise RuntimeError("kaboom")

        client = TestClient(app)

        response = client.get("/boom", headers={"Origin": "http://localhost:3000"})

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {"success": False, "message": "Internal Server Error"})
        self.assertEqual(response.headers["access-control-allow-origin"], "http://localhost:3000")
        self.assertEqual(response.headers["X-Content-Type-Options"], "nosniff")


class TestMiddleware(unittest.TestCase):
    """Tests for security headers, request logging and CORS."""

    def test_security_headers(self):
        client = TestClient(_make_app())

        response = client.get("/health")

        self.assertEqual(response.headers["X-Content-Type-Options"], "nosniff")
        self.assertEqual(response.headers["X-Frame-Options"], "DENY")
        self.assertIn("X-Response-Time", response.headers)

    def test_requests_are_logged(self):
        client = TestClient(_make_app())

        with self.assertLogs("api.middleware.request_logging", level="INFO") as logs:
            client.get("/health")

        self.assertTrue(any("GET /health 200" in line for line in logs.output))

    def test_cors_preflight_for_allowed_origin(self):
        client = TestClient(_make_app(cors_origins=["http://localhost:3000"]))

        response = client.options(
            "/api/auth/login",
            headers={
                "Origin": "http://localhost:3000",
                "Access-Control-Request-Method": "POST",
            },
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.headers["access-control-allow-origin"], "http://localhost:3000")
        self.assertEqual(response.headers["access-control-allow-credentials"], "true")

    def test_cors_wildcard_disables_credentials(self):
        client = TestClient(_make_app(cors_origins="*"))

        response = client.get("/health", headers={"Origin": "http://elsewhere.test"})

        self.assertEqual(response.headers["access-control-allow-origin"], "*")
        self.assertNotIn("access-control-allow-credentials", response.headers)


class TestLifespan(unittest.TestCase):
    """Startup creates the schema, shutdown closes the store."""

    def test_lifespan_calls_store_hooks(self):
        repo = MagicMock()
        repo.ping.return_value = True

        with TestClient(_make_app(repo)) as client:
            repo.ensure_schema.assert_called_once()
            client.get("/health")
            repo.close.assert_not_called()

        repo.close.assert_called_once()


class TestVersion(unittest.TestCase):
    """Tests for version lookup."""

    def test_installed_distribution_version_wins(self):
        with patch("api.app.metadata.version", return_value="9.9.9") as version:
            self.assertEqual(_read_version(), "9.9.9")
        version.assert_called_once_with(DISTRIBUTION_NAME)

    def test_falls_back_to_pyproject_in_checkout(self):
        missing = metadata.PackageNotFoundError(DISTRIBUTION_NAME)
        with patch("api.app.metadata.version", side_effect=missing):
            self.assertEqual(_read_version(), "1.0.0")


if __name__ == '__main__':
    unittest.main()
