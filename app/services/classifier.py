"""Upload format classification.

Maps a file record to the ordered list of strategies worth trying. The
extension decides; the declared MIME type only breaks ties when the extension
is missing or generic.
"""
from __future__ import annotations

from typing import List, Optional

from app.models import FileRecord, StrategyId

PDF_ORDER = [StrategyId.PDF]
WORD_ORDER = [StrategyId.WORD, StrategyId.PLAIN_TEXT]
TEXT_ORDER = [StrategyId.PLAIN_TEXT, StrategyId.RAW_DECODE]
RAW_ORDER = [StrategyId.RAW_DECODE]

EXTENSION_ORDERS = {
    ".pdf": PDF_ORDER,
    ".docx": WORD_ORDER,
    ".doc": WORD_ORDER,
    ".txt": TEXT_ORDER,
}

# Extensions that say nothing about the format
GENERIC_EXTENSIONS = {".bin", ".dat", ".tmp", ".upload"}

WORD_MIMETYPES = {
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}


def order_for_mimetype(mimetype: Optional[str]) -> Optional[List[StrategyId]]:
    m = (mimetype or "").strip().lower()
    if not m:
        return None
    if m == "application/pdf" or m.endswith("/pdf"):
        return PDF_ORDER
    if m in WORD_MIMETYPES or "wordprocessingml" in m:
        return WORD_ORDER
    if m.startswith("text/"):
        return TEXT_ORDER
    return None


def classify(record: FileRecord) -> List[StrategyId]:
    ext = record.extension
    if ext in EXTENSION_ORDERS:
        return list(EXTENSION_ORDERS[ext])
    if not ext or ext in GENERIC_EXTENSIONS:
        by_type = order_for_mimetype(record.declared_type)
        if by_type is not None:
            return list(by_type)
        if not ext:
            return list(TEXT_ORDER)
    return list(RAW_ORDER)
