"""
Extraction settings handed to the pipeline
"""
import tempfile
from dataclasses import dataclass
from typing import Any, Mapping, Optional

DEFAULT_MIN_CHARS = 10
DEFAULT_TIMEOUT_SECONDS = 25.0
DEFAULT_MAX_UPLOAD_BYTES = 10 * 1024 * 1024


@dataclass(frozen=True)
class ExtractionSettings:
    """Explicit configuration for one extraction pipeline.

    min_chars is the acceptance threshold: trimmed text must be non-empty
    and at least this long. A timeout of 0 disables the wall-clock budget.
    """
    min_chars: int = DEFAULT_MIN_CHARS
    tmp_dir: Optional[str] = None
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES

    def __post_init__(self):
        if self.min_chars < 0:
            raise ValueError("min_chars must not be negative")
        if self.timeout_seconds < 0:
            raise ValueError("timeout_seconds must not be negative")

    @property
    def temp_directory(self) -> str:
        return self.tmp_dir or tempfile.gettempdir()

    def accepts(self, text: Optional[str]) -> bool:
        s = (text or "").strip()
        return bool(s) and len(s) >= self.min_chars

    @classmethod
    def from_mapping(cls, conf: Mapping[str, Any]) -> "ExtractionSettings":
        """Build settings from a Flask config (or any mapping)"""
        max_upload = conf.get("MAX_CONTENT_LENGTH")
        return cls(
            min_chars=int(conf.get("EXTRACT_MIN_CHARS", DEFAULT_MIN_CHARS)),
            tmp_dir=(conf.get("EXTRACT_TMP_DIR") or None),
            timeout_seconds=float(conf.get("EXTRACT_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS)),
            max_upload_bytes=int(max_upload) if max_upload else DEFAULT_MAX_UPLOAD_BYTES,
        )
