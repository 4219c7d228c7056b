# routes/__init__.py
# Shared helpers for the blueprints

from flask import jsonify


def respond(result):
    """Serializes an ActionResult with the HTTP status matching its error code."""
    return jsonify(result.to_dict()), result.http_status
