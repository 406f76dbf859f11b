"""Request-level entry points.

``extract_upload`` is the whole upload-to-response path; the Flask blueprint
and ``handle_event`` (the serverless function shape: headers, body,
isBase64Encoded) both call it.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from app.errors import UploadError
from app.services.multipart import body_bytes, decode_upload
from app.services.pipeline import ExtractionPipeline
from app.services.responses import build_response, unexpected_error_response, upload_error_response
from app.utils.config import ExtractionSettings

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Headers": "Content-Type, X-Body-Encoding",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
}


def extract_upload(
    body: Union[bytes, str, None],
    content_type: Optional[str],
    is_base64: bool = False,
    settings: Optional[ExtractionSettings] = None,
) -> Tuple[Dict[str, Any], int]:
    settings = settings or ExtractionSettings()
    try:
        # The limit applies to the decoded upload, not its base64 transport form
        data = body_bytes(body, is_base64=is_base64)
        if len(data) > settings.max_upload_bytes:
            return {"error": f"File too large (limit {settings.max_upload_bytes} bytes)"}, 413
        record = decode_upload(data, content_type)
    except UploadError as e:
        logger.warning("Rejected upload: %s", e.reason)
        return upload_error_response(e)

    logger.info("File received: name=%s type=%s size=%d", record.name, record.declared_type, record.size)
    try:
        outcome = ExtractionPipeline(settings).run(record)
    except Exception as e:
        logger.exception("Extraction failed for %s", record.name)
        return unexpected_error_response(e)
    return build_response(outcome)


def _header(headers: Mapping[str, str], name: str) -> str:
    for k, v in (headers or {}).items():
        if k.lower() == name.lower():
            return v or ""
    return ""


def handle_event(event: Optional[Dict[str, Any]], settings: Optional[ExtractionSettings] = None,
                 allow_origin: str = "*") -> Dict[str, Any]:
    """Serverless-style handler: event dict in, {statusCode, headers, body} out."""
    headers = {"Content-Type": "application/json", "Access-Control-Allow-Origin": allow_origin}
    method = ((event or {}).get("httpMethod") or "POST").upper()
    if method == "OPTIONS":
        return {"statusCode": 204, "headers": {**headers, **CORS_HEADERS}, "body": ""}
    if method != "POST":
        return {"statusCode": 405, "headers": headers, "body": json.dumps({"error": "Method not allowed"})}

    event = event or {}
    event_headers = event.get("headers") or {}
    payload, status = extract_upload(
        event.get("body"),
        _header(event_headers, "content-type"),
        is_base64=bool(event.get("isBase64Encoded")),
        settings=settings,
    )
    return {"statusCode": status, "headers": headers, "body": json.dumps(payload)}
