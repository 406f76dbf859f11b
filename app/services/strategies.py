"""Text extraction strategies.

Every strategy exposes ``attempt(record) -> StrategyOutcome`` and never lets an
exception escape: malformed, encrypted or image-only documents come back as
failed outcomes with a reason the pipeline can report.
"""
from __future__ import annotations

import io
import logging
import os
import tempfile
import zipfile
from typing import Dict, List

import docx
import PyPDF2
from PyPDF2.errors import PyPdfError

from app.models import FileRecord, StrategyId, StrategyOutcome
from app.utils.config import ExtractionSettings

logger = logging.getLogger(__name__)

REPLACEMENT_CHAR = "\ufffd"


class ExtractionFailed(Exception):
    """A strategy ran but could not produce text"""


class ExtractionStrategy:
    strategy_id: StrategyId

    def __init__(self, settings: ExtractionSettings):
        self.settings = settings

    def extract(self, record: FileRecord) -> str:
        raise NotImplementedError

    def attempt(self, record: FileRecord) -> StrategyOutcome:
        try:
            text = self.extract(record) or ""
        except ExtractionFailed as e:
            return StrategyOutcome.failure(self.strategy_id, str(e))
        except Exception as e:
            return StrategyOutcome.failure(self.strategy_id, f"{type(e).__name__}: {e}")
        if not text.strip():
            return StrategyOutcome.failure(self.strategy_id, "no text extracted")
        return StrategyOutcome.success(self.strategy_id, text)


def _resources_have_image(resources, seen) -> bool:
    """Look for image XObjects, descending into form XObjects"""
    if resources is None:
        return False
    xobjects = resources.get_object().get("/XObject")
    if xobjects is None:
        return False
    for ref in xobjects.get_object().values():
        key = getattr(ref, "idnum", None)
        if key is not None:
            if key in seen:
                continue
            seen.add(key)
        obj = ref.get_object()
        subtype = obj.get("/Subtype")
        if subtype == "/Image":
            return True
        if subtype == "/Form" and _resources_have_image(obj.get("/Resources"), seen):
            return True
    return False


def pdf_has_images(reader) -> bool:
    seen = set()
    for page in reader.pages:
        if _resources_have_image(page.get("/Resources"), seen):
            return True
    return False


class PdfStrategy(ExtractionStrategy):
    strategy_id = StrategyId.PDF

    def extract(self, record: FileRecord) -> str:
        reader = PyPDF2.PdfReader(io.BytesIO(record.content))
        if reader.is_encrypted:
            try:
                unlocked = reader.decrypt("")
            except Exception as e:
                raise ExtractionFailed(f"PDF is encrypted: {e}")
            if not unlocked:
                raise ExtractionFailed("PDF is encrypted")
        parts: List[str] = []
        for page in reader.pages:
            parts.append(page.extract_text() or "")
        text = "\n".join(parts).strip()
        if not text:
            try:
                scanned = pdf_has_images(reader)
            except PyPdfError as e:
                logger.warning("Could not inspect PDF images: %s", e)
                scanned = False
            if scanned:
                raise ExtractionFailed("no text layer found; document looks image-only (scanned)")
            raise ExtractionFailed("no text layer found")
        return text


def docx_text(path: str) -> str:
    document = docx.Document(path)
    parts = [p.text for p in document.paragraphs]
    for table in document.tables:
        for row in table.rows:
            cells = [c.text.strip() for c in row.cells if c.text.strip()]
            if cells:
                parts.append("\t".join(cells))
    return "\n".join(parts)


class WordStrategy(ExtractionStrategy):
    """Word documents are read from a path, so the bytes go to a scoped temp file."""
    strategy_id = StrategyId.WORD

    def extract(self, record: FileRecord) -> str:
        if not zipfile.is_zipfile(io.BytesIO(record.content)):
            raise ExtractionFailed("not a Word (.docx) archive")
        suffix = record.extension or ".docx"
        fd, path = tempfile.mkstemp(prefix="upload_", suffix=suffix, dir=self.settings.temp_directory)
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(record.content)
            return docx_text(path)
        finally:
            try:
                os.remove(path)
            except FileNotFoundError:
                pass
            except OSError as e:
                logger.warning("Could not remove temp file %s: %s", path, e)


class PlainTextStrategy(ExtractionStrategy):
    strategy_id = StrategyId.PLAIN_TEXT

    def extract(self, record: FileRecord) -> str:
        if not record.content:
            raise ExtractionFailed("file is empty")
        try:
            return record.content.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ExtractionFailed(f"not valid UTF-8 (byte {e.start})")


class RawDecodeStrategy(ExtractionStrategy):
    strategy_id = StrategyId.RAW_DECODE

    def extract(self, record: FileRecord) -> str:
        text = record.content.decode("utf-8", errors="replace")
        if not text.replace(REPLACEMENT_CHAR, "").strip():
            raise ExtractionFailed("decoded to replacement characters only")
        return text


STRATEGY_CLASSES = (PdfStrategy, WordStrategy, PlainTextStrategy, RawDecodeStrategy)


def build_strategies(settings: ExtractionSettings) -> Dict[StrategyId, ExtractionStrategy]:
    return {cls.strategy_id: cls(settings) for cls in STRATEGY_CLASSES}
