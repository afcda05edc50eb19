"""HTTP API for py-prm.

This package provides a Flask application that exposes the shell over
HTTP.  It is an **optional** extra — install with::

    pip install py-prm[web]

The ``create_app`` factory in ``app.py`` creates a manager and a shell
and serves two endpoints:

- ``POST /api/execute`` — execute a command line and return JSON.
- ``GET /api/status`` — simulation snapshot for live polling.
"""
