"""Tests for standardized error handling."""

from fastapi import FastAPI, HTTPException
from fastapi.testclient import TestClient


class TestAPIErrors:
    def test_not_found_error_with_context(self):
        from whentomeet.errors import NotFoundError

        error = NotFoundError(detail="Event not found", event_id="abc")
        assert error.status_code == 404
        assert error.error == "not_found"
        assert error.context == {"event_id": "abc"}

    def test_validation_error_defaults(self):
        from whentomeet.errors import ValidationError

        error = ValidationError()
        assert error.status_code == 422
        assert error.detail == "Invalid input"
        assert error.context is None

    def test_not_configured_is_service_unavailable(self):
        from whentomeet.errors import PersistenceNotConfiguredError, ServiceUnavailableError

        error = PersistenceNotConfiguredError()
        assert isinstance(error, ServiceUnavailableError)
        assert error.status_code == 503
        assert error.error == "not_configured"

    def test_to_response_excludes_none(self):
        from whentomeet.errors import DatabaseError

        data = DatabaseError().to_response().model_dump(exclude_none=True)
        assert data == {"error": "database_error", "detail": "Database operation failed"}


class TestExceptionHandlers:
    def _app(self):
        from whentomeet.errors import (
            PersistenceNotConfiguredError,
            register_exception_handlers,
        )

        app = FastAPI()
        register_exception_handlers(app)

        @app.get("/not-configured")
        async def not_configured():
            raise PersistenceNotConfiguredError()

        @app.get("/teapot")
        async def teapot():
            raise HTTPException(status_code=418, detail="short and stout")

        @app.get("/boom")
        async def boom():
            raise RuntimeError("boom")

        return TestClient(app, raise_server_exceptions=False)

    def test_api_error(self):
        res = self._app().get("/not-configured")
        assert res.status_code == 503
        assert res.json() == {"error": "not_configured", "detail": "Poll storage is not configured"}

    def test_http_exception(self):
        res = self._app().get("/teapot")
        assert res.status_code == 418
        assert res.json() == {"error": "error", "detail": "short and stout"}

    def test_unhandled_exception(self):
        res = self._app().get("/boom")
        assert res.status_code == 500
        assert res.json()["error"] == "internal_error"


def test_status_to_error_type():
    from whentomeet.errors import _status_to_error_type

    assert _status_to_error_type(404) == "not_found"
    assert _status_to_error_type(422) == "validation_error"
    assert _status_to_error_type(503) == "service_unavailable"
    assert _status_to_error_type(418) == "error"
