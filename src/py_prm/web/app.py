"""Flask application factory for the py-prm web API.

The ``create_app`` function creates a manager and a shell and returns
a Flask app with two endpoints:

- ``POST /api/execute`` — execute a command line and return JSON.
- ``GET /api/status`` — return the full simulation snapshot.

After ``quit`` the app is halted: later commands are refused and
answered with the quit message, while ``/api/status`` keeps working.

The manager serializes commands internally, so the threaded
development server can call it from several request threads.
"""

from __future__ import annotations

from flask import Flask, Response, jsonify, request

from py_prm.manager import Manager
from py_prm.shell import QUIT_MESSAGE, Shell

_HTTP_BAD_REQUEST = 400


def create_app(*, manager: Manager | None = None) -> Flask:
    """Create and configure the Flask application.

    Args:
        manager: Simulation to serve; a fresh one by default.

    Returns:
        A configured Flask application ready to serve.

    """
    manager = manager if manager is not None else Manager()
    shell = Shell(manager=manager, verbose=True)
    halted = False

    app = Flask(__name__)

    @app.route("/api/execute", methods=["POST"])
    def execute() -> tuple[Response, int] | Response:  # pyright: ignore[reportUnusedFunction]
        """Execute a command line and return JSON output.

        Expects JSON body: ``{"command": "..."}``

        Returns:
            JSON with ``output`` and ``halted`` fields.

        """
        data = request.get_json(silent=True)
        if not isinstance(data, dict) or not isinstance(data.get("command"), str):
            return jsonify({"error": "Missing 'command' field"}), _HTTP_BAD_REQUEST

        nonlocal halted
        if halted:
            return jsonify({"output": QUIT_MESSAGE, "halted": True})

        result = shell.execute(data["command"])
        if result == Shell.EXIT_SENTINEL:
            halted = True
            return jsonify({"output": QUIT_MESSAGE, "halted": True})
        return jsonify({"output": result, "halted": False})

    @app.route("/api/status")
    def status() -> Response:  # pyright: ignore[reportUnusedFunction]
        """Return the simulation snapshot."""
        return jsonify(manager.snapshot())

    return app


def main() -> None:
    """Run the web API development server.

    This is the ``py-prm-web`` console entry point.
    """
    app = create_app()
    app.run(debug=True, port=8080)
