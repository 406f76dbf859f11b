"""Map extraction outcomes to (payload, status) pairs."""
from __future__ import annotations

from typing import Any, Dict, Tuple, Union

from app.errors import UploadError
from app.models import ExtractionFailure, ExtractionResult, FailureKind

STATUS_BY_KIND = {
    FailureKind.MALFORMED_REQUEST: 400,
    FailureKind.NO_FILE_PART: 400,
    FailureKind.NO_READABLE_TEXT: 500,
    FailureKind.TIMEOUT: 504,
}


def upload_error_response(err: UploadError) -> Tuple[Dict[str, Any], int]:
    return {"error": err.reason, "kind": err.kind.value}, STATUS_BY_KIND.get(err.kind, 400)


def build_response(outcome: Union[ExtractionResult, ExtractionFailure]) -> Tuple[Dict[str, Any], int]:
    if isinstance(outcome, ExtractionResult):
        return {"text": outcome.text, "strategy": outcome.strategy_id.value}, 200
    return {
        "error": outcome.detail,
        "kind": outcome.kind.value,
        "details": outcome.reasons,
    }, STATUS_BY_KIND.get(outcome.kind, 500)


def unexpected_error_response(err: Exception) -> Tuple[Dict[str, Any], int]:
    return {
        "error": "Failed to read or parse file.",
        "details": [f"{type(err).__name__}: {err}"],
    }, 500
