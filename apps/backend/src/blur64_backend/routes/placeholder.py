"""Placeholder generation routes."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from flask import Blueprint, abort, current_app, jsonify, request
from werkzeug.utils import secure_filename

from blur64_shared.files import has_image_ext, is_remote_url
from blur64_shared.protocol import (
    Blur64ImageData,
    ValidationError,
    parse_ratio_text,
    parse_size_text,
)

logger = logging.getLogger(__name__)

placeholder_bp = Blueprint("placeholder", __name__, url_prefix="/api")

_FLOAT_FIELDS = ("scale", "brightness", "saturation", "hue", "lightness")
_INT_FIELDS = ("quality",)
_STR_FIELDS = ("format", "fit", "kernel")


def _parse_str(value: str | None) -> str | None:
    return None if value is None or value == "" else value


def _parse_float(name: str, value: str | None) -> float | None:
    value = _parse_str(value)
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        raise ValidationError(f"{name} must be a number") from None


def _parse_blur(value: str | None) -> float | bool | None:
    value = _parse_str(value)
    if value is None:
        return None
    if value.lower() in ("false", "0", "off", "none"):
        return False
    return _parse_float("blur_radius", value)


def _form_options(form: Mapping[str, str]) -> dict[str, Any]:
    """Turn multipart form fields into an options mapping."""
    options: dict[str, Any] = {}

    size = _parse_str(form.get("size"))
    if size is not None:
        options["size"] = parse_size_text(size)
    ratio = _parse_str(form.get("ratio"))
    if ratio is not None:
        options["ratio"] = parse_ratio_text(ratio)

    for name in _FLOAT_FIELDS:
        value = _parse_float(name, form.get(name))
        if value is not None:
            options[name] = value
    for name in _INT_FIELDS:
        value = _parse_float(name, form.get(name))
        if value is not None:
            options[name] = int(value)
    for name in _STR_FIELDS:
        value = _parse_str(form.get(name))
        if value is not None:
            options[name] = value

    blur = _parse_blur(form.get("blur_radius"))
    if blur is not None:
        options["blur_radius"] = blur
    return options


def _respond(result: Blur64ImageData):
    return jsonify({**result.to_dict(), "placeholder": result.placeholder})


@placeholder_bp.post("/placeholder")
def placeholder_from_url():
    """Generate a placeholder for a remote image given as JSON."""
    service = current_app.config["placeholder_service"]

    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        abort(400, description="Expected a JSON object body")

    options = dict(body)
    src = options.pop("src", None)
    if not isinstance(src, str) or not is_remote_url(src):
        abort(400, description="src must be an http(s) URL")

    try:
        result = service.generate(src, options)
    except ValidationError as e:
        abort(400, description=str(e))

    logger.info("Placeholder for %s: %s", src, result.placeholder)
    return _respond(result)


@placeholder_bp.post("/placeholder/upload")
def placeholder_from_upload():
    """Generate a placeholder for an uploaded image file."""
    service = current_app.config["placeholder_service"]

    f = request.files.get("file")
    if f is None:
        abort(400, description="Missing file field 'file'")

    filename = secure_filename(f.filename or "")
    if filename and not has_image_ext(filename):
        abort(400, description=f"Unsupported file type: {filename}")

    data = f.read()
    if not data:
        abort(400, description="Uploaded file is empty")

    try:
        result = service.generate(data, _form_options(request.form))
    except ValidationError as e:
        abort(400, description=str(e))

    logger.info("Placeholder for upload %s (%d bytes): %s", filename or "<unnamed>", len(data), result.placeholder)
    return _respond(result)
