"""Flask API routes: serialize form ASTs into hidden form fields."""

from __future__ import annotations

import functools
import hmac
import logging
import os
from typing import Any

from flask import Blueprint, Response, current_app, jsonify, request

from schema.loader import parse_ast
from serializer.emitter import FieldPair
from serializer.errors import MalformedNode, MaxDepthExceeded, UnknownFieldType
from serializer.options import SerializerOptions
from serializer.registry import Behavior, FieldTypeRegistry, default_registry, load_field_types
from serializer.serialize import MODE_AST, MODE_DATA, serialize, serialize_data
from utils.hidden_inputs import render_hidden_inputs

logger = logging.getLogger(__name__)

api_bp = Blueprint("api", __name__, url_prefix="/api")


def require_api_key(f):
    """Decorator that checks X-API-Key header against SERIALIZER_API_KEY env var."""
    @functools.wraps(f)
    def decorated(*args, **kwargs):
        api_key = os.environ.get("SERIALIZER_API_KEY")
        if not api_key:
            logger.error("SERIALIZER_API_KEY not configured")
            return jsonify({"error": "Server misconfiguration: API key not set"}), 500

        provided = request.headers.get("X-API-Key", "")
        if not provided:
            return jsonify({"error": "Missing X-API-Key header"}), 401

        if not hmac.compare_digest(provided, api_key):
            return jsonify({"error": "Invalid API key"}), 403

        return f(*args, **kwargs)
    return decorated


def _get_registry() -> FieldTypeRegistry:
    """Return the app's registry, loading FIELD_TYPES_PATH once if set."""
    registry = current_app.extensions.get("field_type_registry")
    if registry is None:
        path = current_app.config.get("FIELD_TYPES_PATH")
        registry = load_field_types(path) if path else default_registry()
        current_app.extensions["field_type_registry"] = registry
    return registry


def _get_default_options() -> SerializerOptions:
    """Options from app config if provided, else from env vars."""
    options = current_app.config.get("SERIALIZER_OPTIONS")
    if isinstance(options, SerializerOptions):
        return options
    return SerializerOptions.from_env()


# --- Health ---


@api_bp.route("/health", methods=["GET"])
def health():
    """Health check endpoint."""
    return jsonify({"status": "ok", "service": "form-serializer"})


# --- Field types ---


@api_bp.route("/field-types", methods=["GET"])
def get_field_types():
    """List registered field type tags grouped by behavior."""
    registry = _get_registry()
    return jsonify({
        behavior.value: registry.tags(behavior) for behavior in Behavior
    })


# --- Serialize ---


@api_bp.route("/serialize", methods=["POST"])
@require_api_key
def serialize_fields():
    """Serialize an AST or data object into (name, value) pairs.

    Request body:
    {
        "ast": [{"type": "string", "name": "title", "value": "..."}, ...],
        "mode": "ast",                          (optional, or "data")
        "prefix": "post",                       (optional)
        "additional_field_types": ["slug"],     (optional)
        "indexing": "explicit",                 (optional, or "implicit")
        "list_of_maps_placeholder": false       (optional)
    }

    A plain nested object can be sent as "data" instead of "ast".
    """
    result = _serialize_request()
    if isinstance(result, tuple):
        return result

    return jsonify({
        "fields": [[pair.name, pair.value] for pair in result],
        "count": len(result),
    })


@api_bp.route("/serialize/html", methods=["POST"])
@require_api_key
def serialize_html():
    """Same request body as /serialize, answered with hidden input markup."""
    result = _serialize_request()
    if isinstance(result, tuple):
        return result

    return Response(str(render_hidden_inputs(result)), mimetype="text/html")


# --- Helpers ---


def _serialize_request() -> list[FieldPair] | tuple[Response, int]:
    """Run a serialization request, returning pairs or an error response."""
    body = request.get_json(silent=True)
    if not isinstance(body, dict) or not body:
        return jsonify({"error": "Request body must be a JSON object"}), 400

    error = _validate_serialize_request(body)
    if error:
        return jsonify({"error": error}), 400

    try:
        options = SerializerOptions.from_dict(body, defaults=_get_default_options())
    except ValueError as e:
        return jsonify({"error": f"Invalid options: {e}"}), 400

    try:
        if "data" in body:
            pairs = serialize_data(body["data"], options, _get_registry())
        else:
            nodes = parse_ast(body["ast"], options.max_depth)
            pairs = serialize(
                nodes, options, _get_registry(), mode=body.get("mode", MODE_AST)
            )
    except UnknownFieldType as e:
        return jsonify({
            "error": str(e),
            "tag": e.tag,
            "path": list(e.path),
        }), 422
    except MaxDepthExceeded as e:
        return jsonify({"error": str(e), "path": list(e.path)}), 422
    except MalformedNode as e:
        return jsonify({"error": str(e), "path": list(e.path)}), 400

    logger.info("Serialized request into %d fields", len(pairs))
    return pairs


def _validate_serialize_request(body: dict[str, Any]) -> str:
    """Validate the serialize request body, return error string or empty."""
    if "ast" not in body and "data" not in body:
        return "Missing required field: 'ast' or 'data'"
    if "ast" in body and "data" in body:
        return "Send either 'ast' or 'data', not both"
    if "data" in body and not isinstance(body["data"], dict):
        return "'data' must be an object"
    if body.get("mode", MODE_AST) not in (MODE_AST, MODE_DATA):
        return f"'mode' must be '{MODE_AST}' or '{MODE_DATA}'"
    return ""
