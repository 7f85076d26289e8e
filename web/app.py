#!/usr/bin/env python3
"""Flask front end for the command catalog and the mirror sync trigger."""

from __future__ import annotations

import json
import logging

from flask import Flask, Response, jsonify, render_template_string, request
from flask_cors import CORS

from core import Core
from core.errors import CatalogError
from modules.catalog import catalog_etag

logger = logging.getLogger("commands_api.web")

ALLOWED_METHODS = "GET, POST, OPTIONS"
ALLOWED_HEADERS = "Authorization, Content-Type, Accept"

EXAMPLE_COMMAND = {
    "name": "convert",
    "aliases": [],
    "help": "Convert image to different format",
    "syntax": "convert [format] (url)",
    "example": "convert png",
    "cooldown": False,
    "permissions": False,
    "donor": True,
    "donor_tier": 1,
    "parameters": ["format", "url"],
}

INDEX_TEMPLATE = """<!DOCTYPE html>
<html>
  <head>
    <title>Commands API</title>
    <style>
      body { font-family: Arial, sans-serif; margin: 20px; }
      h1 { color: #333; }
      pre { background-color: #f4f4f4; padding: 10px; border-radius: 5px; }
    </style>
  </head>
  <body>
    <h1>Commands API</h1>
    <p>This API serves command data from JSON files.</p>
    <h2>Available Endpoints:</h2>
    <ul>
      <li><code>/cmds</code> - List all commands from all categories</li>
      <li><code>/cmds/{category}</code> - List all commands in a specific category</li>
      <li><code>/cmds/{category}/{command}</code> - Get details for a specific command</li>
      <li><code>POST /update</code> - Pull the latest commands from the source repository</li>
      <li><code>/health</code> - Service status and the last sync result</li>
    </ul>
    <h2>Example Command Structure:</h2>
    <pre>{{ example }}</pre>
  </body>
</html>
"""


def _catalog_response(payload):
    """JSON response with an ETag; answers 304 when the client copy is current."""
    etag = catalog_etag(payload)
    if etag in request.if_none_match:
        resp = Response(status=304, mimetype="application/json")
        resp.set_etag(etag)
        return resp
    resp = jsonify(payload)
    resp.set_etag(etag)
    return resp


def create_app(core: Core) -> Flask:
    app = Flask(__name__)
    app.json.sort_keys = False

    def dispatch(command: str, **payload):
        result = core.dispatch(command, payload)
        if not result.handled:
            raise RuntimeError(f"Command '{command}' is not registered")
        return result.payload

    @app.before_request
    def preflight():
        if request.method == "OPTIONS":
            resp = Response(status=200)
            resp.headers["Allow"] = ALLOWED_METHODS
            return resp
        return None

    @app.after_request
    def allow_any_origin(resp):
        if "Access-Control-Allow-Origin" not in resp.headers:
            resp.headers["Access-Control-Allow-Origin"] = "*"
        if request.method == "OPTIONS":
            # flask-cors only answers pre-flights that carry an Origin.
            resp.headers.setdefault("Access-Control-Allow-Methods", ALLOWED_METHODS)
            resp.headers.setdefault("Access-Control-Allow-Headers", ALLOWED_HEADERS)
            resp.headers.setdefault("Access-Control-Max-Age", str(core.settings.cors_max_age))
        return resp

    @app.errorhandler(CatalogError)
    def catalog_error(exc: CatalogError):
        return jsonify({"error": str(exc)}), exc.status

    @app.errorhandler(404)
    def not_found(exc):
        return jsonify({"error": "Not found"}), 404

    @app.errorhandler(405)
    def method_not_allowed(exc):
        return jsonify({"error": "Method not allowed"}), 405

    @app.route('/cmds')
    @app.route('/cmds/')
    def list_commands():
        return _catalog_response(dispatch("catalog.all"))

    @app.route('/cmds/<category>')
    def list_category(category):
        return _catalog_response(dispatch("catalog.category", category=category))

    @app.route('/cmds/<category>/<command>')
    def show_command(category, command):
        return _catalog_response(dispatch("catalog.command", category=category, name=command))

    @app.route('/update', methods=['POST'])
    def update():
        result = dispatch("mirror.sync")
        logger.info({"evt": "manual_sync", "status": result.status, "revision": result.revision})
        return jsonify({
            "success": result.success,
            "message": result.message,
            "status": result.status,
            "revision": result.revision,
        })

    @app.route('/health')
    def health():
        last = dispatch("mirror.status")
        return jsonify({
            "ok": True,
            "service": "commands-api",
            "mirror": last.to_dict() if last is not None else None,
        })

    @app.route('/')
    def index():
        return render_template_string(INDEX_TEMPLATE, example=json.dumps(EXAMPLE_COMMAND, indent=2))

    # Registered after the wildcard hook so flask-cors headers win on cross-origin requests.
    CORS(
        app,
        supports_credentials=True,
        methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "Accept"],
        expose_headers=["Content-Type"],
        max_age=core.settings.cors_max_age,
    )
    return app


__all__ = ["create_app"]
