"""Tests for the web API.

The API exposes the shell and the simulation snapshot over HTTP.  Tests
use ``pytest.importorskip`` so they are skipped gracefully when Flask
is not installed.
"""

from __future__ import annotations

from typing import Any

import pytest

flask = pytest.importorskip("flask")

from py_prm.manager import Manager  # noqa: E402
from py_prm.web.app import create_app  # noqa: E402

HTTP_OK = 200
HTTP_BAD_REQUEST = 400


def _create_client(manager: Manager | None = None) -> Any:
    """Create a test client from a fresh app."""
    app = create_app(manager=manager)
    app.config["TESTING"] = True
    return app.test_client()


class TestAppCreation:
    """Verify the app factory."""

    def test_create_app_returns_flask(self) -> None:
        """create_app should return a Flask application."""
        assert isinstance(create_app(), flask.Flask)


class TestExecuteEndpoint:
    """Verify ``POST /api/execute``."""

    def test_runs_command(self) -> None:
        """A valid command returns the rendered line."""
        client = _create_client()
        response = client.post("/api/execute", json={"command": "cr P1 1"})
        assert response.status_code == HTTP_OK
        assert response.get_json() == {"output": "P1 is running", "halted": False}

    def test_state_persists_between_requests(self) -> None:
        """Requests share one simulation."""
        manager = Manager()
        client = _create_client(manager)
        client.post("/api/execute", json={"command": "cr P1 1"})
        client.post("/api/execute", json={"command": "req R1"})
        assert manager.process("P1").holds(manager.resource("R1").rid)

    def test_errors_are_explained(self) -> None:
        """The API uses the verbose error form."""
        client = _create_client()
        data = client.post("/api/execute", json={"command": "de Init"}).get_json()
        assert data["output"].startswith("error: forbidden:")

    def test_quit_halts(self) -> None:
        """Quit reports termination."""
        client = _create_client()
        data = client.post("/api/execute", json={"command": "quit"}).get_json()
        assert data == {"output": "process terminated", "halted": True}

    def test_commands_refused_after_quit(self) -> None:
        """A halted app runs nothing further."""
        manager = Manager()
        client = _create_client(manager)
        client.post("/api/execute", json={"command": "quit"})
        data = client.post("/api/execute", json={"command": "cr P1 1"}).get_json()
        assert data == {"output": "process terminated", "halted": True}
        assert [p.name for p in manager.processes()] == ["Init"]
        assert client.get("/api/status").status_code == HTTP_OK

    @pytest.mark.parametrize("body", [{}, {"command": 3}, ["cr P1 1"]])
    def test_bad_body(self, body: Any) -> None:
        """Anything but a command string is a bad request."""
        client = _create_client()
        response = client.post("/api/execute", json=body)
        assert response.status_code == HTTP_BAD_REQUEST
        assert response.get_json() == {"error": "Missing 'command' field"}


class TestStatusEndpoint:
    """Verify ``GET /api/status``."""

    def test_initial_status(self) -> None:
        """A fresh simulation has the root running."""
        data = _create_client().get("/api/status").get_json()
        assert data["running"] == "Init"
        assert [r["name"] for r in data["resources"]] == ["R1", "R2", "R3", "R4", "IO"]

    def test_status_tracks_commands(self) -> None:
        """The snapshot reflects executed commands."""
        client = _create_client()
        client.post("/api/execute", json={"command": "cr P1 1"})
        client.post("/api/execute", json={"command": "rio"})
        data = client.get("/api/status").get_json()
        assert data["running"] == "Init"
        assert data["blocked"] == ["P1"]
