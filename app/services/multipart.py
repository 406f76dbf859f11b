"""Multipart upload decoding.

The body is scanned as bytes: delimiter lines are matched exactly and the file
content between them is never decoded, so binary payloads survive untouched.
Only part headers are turned into text.
"""
from __future__ import annotations

import base64
import binascii
import re
from typing import Dict, Iterator, List, Optional, Tuple, Union

from werkzeug.http import parse_options_header

from app.errors import MalformedRequest, NoFilePart
from app.models import FileRecord


FILE_FIELD = "file"


def parse_boundary(content_type: Optional[str]) -> bytes:
    mimetype, options = parse_options_header(content_type or "")
    if not mimetype.lower().startswith("multipart/"):
        raise MalformedRequest("Content-Type is not multipart/form-data")
    boundary = (options.get("boundary") or "").strip()
    if not boundary:
        raise MalformedRequest("Could not find multipart boundary")
    return boundary.encode("latin-1", errors="replace")


def body_bytes(body: Union[bytes, str, None], is_base64: bool = False) -> bytes:
    if body is None:
        return b""
    if is_base64:
        raw = body.encode("ascii", errors="ignore") if isinstance(body, str) else body
        try:
            return base64.b64decode(raw)
        except (binascii.Error, ValueError):
            raise MalformedRequest("Request body is not valid base64")
    if isinstance(body, str):
        return body.encode("utf-8")
    return bytes(body)


def iter_delimiters(body: bytes, delimiter: bytes) -> Iterator[Tuple[int, int, bool]]:
    """Yield (start, end, closing) for each delimiter line in the body.

    A match only counts at the start of a line and when followed by the
    closing ``--``, whitespace or a line break; a delimiter-like prefix inside
    file content is skipped.
    """
    pos = 0
    size = len(body)
    while True:
        idx = body.find(delimiter, pos)
        if idx == -1:
            return
        after = idx + len(delimiter)
        at_line_start = idx == 0 or body[idx - 1:idx] == b"\n"
        tail = body[after:after + 2]
        if at_line_start and (after == size or tail == b"--" or tail[:1] in (b"\r", b"\n", b" ", b"\t")):
            if tail == b"--":
                yield idx, after + 2, True
                return
            eol = body.find(b"\n", after)
            end = size if eol == -1 else eol + 1
            yield idx, end, False
            pos = end
        else:
            pos = idx + 1


def split_parts(body: bytes, boundary: bytes) -> Tuple[List[bytes], bool]:
    """Return the raw parts between delimiters and whether the body was cut short."""
    delimiter = b"--" + boundary
    parts: List[bytes] = []
    prev_end: Optional[int] = None
    crlf = True
    closed = False
    for start, end, closing in iter_delimiters(body, delimiter):
        if prev_end is not None:
            # Drop the line break owned by the delimiter, in the body's own framing
            raw = body[prev_end:start - 1]
            if crlf and raw.endswith(b"\r"):
                raw = raw[:-1]
            if raw:
                parts.append(raw)
        prev_end = end
        crlf = body[end - 2:end] == b"\r\n"
        closed = closing
    if prev_end is None:
        raise MalformedRequest("Multipart body does not contain the declared boundary")
    truncated = not closed and bool(body[prev_end:].strip())
    return parts, truncated


def _header_split(raw: bytes) -> Tuple[bytes, bytes]:
    if raw.startswith(b"\r\n"):
        return b"", raw[2:]
    if raw.startswith(b"\n"):
        return b"", raw[1:]
    hits = []
    for sep in (b"\r\n\r\n", b"\n\n"):
        i = raw.find(sep)
        if i != -1:
            hits.append((i, len(sep)))
    if not hits:
        return raw, b""
    i, n = min(hits)
    return raw[:i], raw[i + n:]


def parse_part_headers(block: bytes) -> Dict[str, str]:
    try:
        text = block.decode("utf-8")
    except UnicodeDecodeError:
        text = block.decode("latin-1")
    lines: List[str] = []
    for line in re.split(r"\r?\n", text):
        if line[:1] in (" ", "\t") and lines:
            lines[-1] += " " + line.strip()
        elif line.strip():
            lines.append(line)
    headers: Dict[str, str] = {}
    for line in lines:
        if ":" not in line:
            continue
        k, v = line.split(":", 1)
        headers[k.strip().lower()] = v.strip()
    return headers


_QUOTED_FILENAME = re.compile(r'(?<![\w*])filename\s*=\s*"([^"]*)"', re.IGNORECASE)


def _raw_filename(disposition: str, parsed: str) -> str:
    """Browsers send Windows paths with unescaped backslashes inside the quotes"""
    m = _QUOTED_FILENAME.search(disposition)
    if m and "\\" in m.group(1):
        return m.group(1)
    return parsed


def _base_name(filename: str) -> str:
    return re.split(r"[\\/]", filename)[-1].strip()


def decode_upload(body: Union[bytes, str, None], content_type: Optional[str], is_base64: bool = False) -> FileRecord:
    """Turn a raw multipart body into the FileRecord of its file part.

    Raises MalformedRequest for missing or broken framing and NoFilePart when
    the body is well formed but carries no file.
    """
    data = body_bytes(body, is_base64=is_base64)
    if not data:
        raise MalformedRequest("No body in request")
    boundary = parse_boundary(content_type)
    parts, truncated = split_parts(data, boundary)

    candidates: List[Tuple[str, FileRecord]] = []
    for raw in parts:
        header_block, content = _header_split(raw)
        headers = parse_part_headers(header_block)
        disposition = headers.get("content-disposition")
        if not disposition:
            continue
        _, params = parse_options_header(disposition)
        filename = _base_name(_raw_filename(disposition, params.get("filename") or ""))
        if not filename:
            continue
        declared = None
        if headers.get("content-type"):
            declared = parse_options_header(headers["content-type"])[0] or None
        record = FileRecord(name=filename, content=content, declared_type=declared)
        candidates.append((params.get("name") or "", record))

    if not candidates:
        if truncated:
            raise MalformedRequest("Multipart body is truncated")
        raise NoFilePart()

    for field_name, record in candidates:
        if field_name == FILE_FIELD:
            return record
    return candidates[0][1]
