"""
API Blueprint - document upload and text extraction
"""
from flask import Blueprint, current_app, jsonify, request

from app.handler import CORS_HEADERS, extract_upload

api_bp = Blueprint('api', __name__)

BASE64_FLAGS = {"1", "true", "yes", "on"}


def _settings():
    return current_app.extensions["extraction_settings"]


def body_is_base64() -> bool:
    if (request.headers.get("X-Body-Encoding") or "").strip().lower() == "base64":
        return True
    return (request.args.get("base64") or "").strip().lower() in BASE64_FLAGS


@api_bp.after_request
def add_cors_headers(response):
    response.headers["Access-Control-Allow-Origin"] = current_app.config.get("CORS_ALLOW_ORIGIN", "*")
    return response


@api_bp.errorhandler(413)
def upload_too_large(e):
    limit = current_app.config.get("MAX_CONTENT_LENGTH")
    return jsonify({"error": f"File too large (limit {limit} bytes)"}), 413


# ============ API Routes ============

@api_bp.route("/extract", methods=["POST", "OPTIONS"])
@api_bp.route("/extractResume", methods=["POST", "OPTIONS"])
def extract():
    if request.method == "OPTIONS":
        return "", 204, CORS_HEADERS

    body = request.get_data(cache=False)
    payload, status = extract_upload(
        body,
        request.headers.get("Content-Type"),
        is_base64=body_is_base64(),
        settings=_settings(),
    )
    if status >= 500:
        current_app.logger.error("Extraction failed: %s %s", payload.get("error"), payload.get("details"))
    return jsonify(payload), status
