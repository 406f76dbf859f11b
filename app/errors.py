"""
Transport-level upload errors
"""
from app.models import FailureKind


class UploadError(Exception):
    """Raised when the request body cannot yield a file record"""
    kind = FailureKind.MALFORMED_REQUEST

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class MalformedRequest(UploadError):
    kind = FailureKind.MALFORMED_REQUEST


class NoFilePart(UploadError):
    kind = FailureKind.NO_FILE_PART

    def __init__(self, reason: str = "No file part found in the multipart body"):
        super().__init__(reason)
