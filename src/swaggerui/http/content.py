"""Content-type detection and conditional/range serving for assets.

``serve_content`` turns an asset's bytes into a ``Response`` that honours
``If-Match``, ``If-Unmodified-Since``, ``If-None-Match``,
``If-Modified-Since``, ``Range`` and ``If-Range``, evaluated in the
order RFC 9110 §13.2.2 prescribes.

Precondition and range failures are raised as ``HTTPError`` subclasses;
the handler turns them into responses like any other HTTP error.
"""

import mimetypes
import re
import secrets
from email.utils import formatdate, parsedate_to_datetime
from pathlib import PurePosixPath

from swaggerui.errors import PreconditionFailed, RangeNotSatisfiable
from swaggerui.http.headers import Headers
from swaggerui.http.response import Response

# Checked before ``mimetypes`` so results don't depend on the host's mime.types
_EXTENSION_TYPES: dict[str, str] = {
    ".js": "application/javascript",
    ".mjs": "application/javascript",
    ".css": "text/css",
    ".html": "text/html; charset=utf-8",
    ".htm": "text/html; charset=utf-8",
    ".png": "image/png",
    ".json": "application/json",
    ".map": "application/json",
    ".svg": "image/svg+xml",
}

_SNIFF_LEN = 512

_HTML_PREFIXES = (
    b"<!doctype html",
    b"<html",
    b"<head",
    b"<body",
    b"<script",
    b"<iframe",
    b"<title",
    b"<style",
    b"<table",
    b"<div",
    b"<br",
    b"<h1",
    b"<p",
    b"<a",
    b"<!--",
)

_MAGIC: tuple[tuple[bytes, str], ...] = (
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"\x00\x00\x01\x00", "image/x-icon"),
    (b"%PDF-", "application/pdf"),
    (b"wOFF", "font/woff"),
    (b"wOF2", "font/woff2"),
    (b"\x1f\x8b\x08", "application/x-gzip"),
    (b"PK\x03\x04", "application/zip"),
)

# Bytes that never appear in text files (everything below 0x20 except \t \n \f \r ESC)
_BINARY_BYTES = frozenset(set(range(0x20)) - {0x09, 0x0A, 0x0C, 0x0D, 0x1B})

_ETAG_RE = re.compile(r'\s*((?:W/)?"[^"]*")\s*(?:,|$)')


# ---------------------------------------------------------------------------
# Content type
# ---------------------------------------------------------------------------


def sniff_content_type(content: bytes) -> str:
    """Guess a media type from the first bytes of *content*."""
    head = content[:_SNIFF_LEN]
    for magic, media_type in _MAGIC:
        if head.startswith(magic):
            return media_type
    if head.startswith(b"RIFF") and head[8:12] == b"WEBP":
        return "image/webp"

    stripped = head.lstrip(b" \t\n\r\x0c").lower()
    for prefix in _HTML_PREFIXES:
        if stripped.startswith(prefix):
            rest = stripped[len(prefix) : len(prefix) + 1]
            # Tag names must end at a space or '>' ("<pre" is not "<p")
            if prefix == b"<!--" or rest in (b" ", b">", b""):
                return "text/html; charset=utf-8"
    if stripped.startswith(b"<?xml"):
        return "text/xml; charset=utf-8"

    if any(byte in _BINARY_BYTES for byte in head):
        return "application/octet-stream"
    return "text/plain; charset=utf-8"


def content_type_for(name: str, content: bytes) -> str:
    """Media type for an asset: extension table, then ``mimetypes``, then sniffing."""
    suffix = PurePosixPath(name).suffix.lower()
    if suffix in _EXTENSION_TYPES:
        return _EXTENSION_TYPES[suffix]
    if suffix:
        guessed, _ = mimetypes.guess_type(f"file{suffix}", strict=False)
        if guessed is not None:
            if guessed.startswith("text/"):
                return f"{guessed}; charset=utf-8"
            return guessed
    return sniff_content_type(content)


# ---------------------------------------------------------------------------
# Validators
# ---------------------------------------------------------------------------


def http_date(timestamp: float) -> str:
    """Format a POSIX timestamp as an IMF-fixdate (``Sun, 06 Nov 1994 08:49:37 GMT``)."""
    return formatdate(int(timestamp), usegmt=True)


def parse_http_date(value: str | None) -> int | None:
    """Parse an HTTP date to whole seconds, or ``None`` if absent or malformed."""
    if not value:
        return None
    try:
        return int(parsedate_to_datetime(value).timestamp())
    except (TypeError, ValueError, IndexError, OverflowError):
        return None


def _parse_etags(value: str) -> list[str] | None:
    """Split an ``If-Match``/``If-None-Match`` list; ``None`` for ``*``."""
    if value.strip() == "*":
        return None
    return [m.group(1) for m in _ETAG_RE.finditer(value)]


def _opaque(tag: str) -> str:
    return tag[2:] if tag.startswith("W/") else tag


def _strong_match(candidate: str, etag: str) -> bool:
    return not candidate.startswith("W/") and not etag.startswith("W/") and candidate == etag


def _weak_match(candidate: str, etag: str) -> bool:
    return _opaque(candidate) == _opaque(etag)


def _matches_any(header: str, etag: str, *, weak: bool) -> bool:
    tags = _parse_etags(header)
    if tags is None:
        return True
    compare = _weak_match if weak else _strong_match
    return any(compare(tag, etag) for tag in tags)


def _is_get_or_head(method: str) -> bool:
    return method in ("GET", "HEAD")


# ---------------------------------------------------------------------------
# Ranges
# ---------------------------------------------------------------------------


class _MalformedRange(ValueError):
    pass


def parse_range(header: str, size: int) -> list[tuple[int, int]] | None:
    """Parse a ``Range`` header into inclusive ``(start, end)`` pairs.

    Returns ``None`` when the header is malformed (the caller ignores it)
    and raises ``RangeNotSatisfiable`` when it is well-formed but no range
    overlaps the content.
    """
    try:
        return _parse_range(header, size)
    except _MalformedRange:
        return None


def _parse_range(header: str, size: int) -> list[tuple[int, int]]:
    unit, _, spec = header.partition("=")
    if unit.strip().lower() != "bytes" or not spec:
        raise _MalformedRange(header)

    ranges: list[tuple[int, int]] = []
    saw_any = False
    for part in spec.split(","):
        part = part.strip()
        if not part:
            continue
        saw_any = True
        first, dash, last = part.partition("-")
        first, last = first.strip(), last.strip()
        if not dash or not (first or last):
            raise _MalformedRange(header)
        if (first and not first.isdigit()) or (last and not last.isdigit()):
            raise _MalformedRange(header)

        if not first:
            # Suffix range: the final N bytes
            length = int(last)
            if length == 0 or size == 0:
                continue
            ranges.append((max(size - length, 0), size - 1))
            continue

        start = int(first)
        if last and int(last) < start:
            raise _MalformedRange(header)
        if start >= size:
            continue
        end = min(int(last), size - 1) if last else size - 1
        ranges.append((start, end))

    if not saw_any:
        raise _MalformedRange(header)
    if not ranges:
        raise RangeNotSatisfiable(size)
    return ranges


def _range_applies(headers: Headers, etag: str, mtime: float | None) -> bool:
    """Whether ``If-Range`` (if present) lets the ``Range`` header through."""
    if_range = headers.get("if-range")
    if if_range is None:
        return True
    if_range = if_range.strip()
    if if_range.startswith(('"', 'W/"')):
        return _strong_match(if_range, etag)
    since = parse_http_date(if_range)
    return since is not None and mtime is not None and int(mtime) == since


def _multipart(
    content: bytes, ranges: list[tuple[int, int]], content_type: str
) -> tuple[bytes, str]:
    boundary = secrets.token_hex(16)
    size = len(content)
    parts: list[bytes] = []
    for start, end in ranges:
        head = (
            f"--{boundary}\r\n"
            f"Content-Type: {content_type}\r\n"
            f"Content-Range: bytes {start}-{end}/{size}\r\n\r\n"
        )
        parts.append(head.encode("latin-1") + content[start : end + 1] + b"\r\n")
    parts.append(f"--{boundary}--\r\n".encode("latin-1"))
    return b"".join(parts), f"multipart/byteranges; boundary={boundary}"


# ---------------------------------------------------------------------------
# Serving
# ---------------------------------------------------------------------------


def serve_content(
    method: str,
    headers: Headers,
    *,
    name: str,
    content: bytes,
    mtime: float | None,
    etag: str,
    content_type: str | None = None,
    cache_control: str | None = None,
) -> Response:
    """Build the response for one asset, honouring conditional and range requests.

    ``mtime`` of ``None`` means the asset has no meaningful modification
    time: ``Last-Modified`` is omitted and date preconditions are skipped.

    Raises:
        PreconditionFailed: ``If-Match``/``If-Unmodified-Since`` failed, or
            ``If-None-Match`` matched on a non-GET/HEAD request.
        RangeNotSatisfiable: ``Range`` was well-formed but out of bounds.
    """
    media_type = content_type or content_type_for(name, content)

    validators: list[tuple[str, str]] = []
    if mtime is not None:
        validators.append(("Last-Modified", http_date(mtime)))
    if etag:
        validators.append(("ETag", etag))
    if cache_control:
        validators.append(("Cache-Control", cache_control))

    # 1. If-Match / If-Unmodified-Since
    if_match = headers.get("if-match")
    if if_match is not None:
        if not _matches_any(if_match, etag, weak=False):
            raise PreconditionFailed()
    else:
        since = parse_http_date(headers.get("if-unmodified-since"))
        if since is not None and mtime is not None and int(mtime) > since:
            raise PreconditionFailed()

    # 2. If-None-Match / If-Modified-Since
    if_none_match = headers.get_joined("if-none-match")
    not_modified = Response(body=b"", status=304, content_type=None, headers=tuple(validators))
    if if_none_match is not None:
        if _matches_any(if_none_match, etag, weak=True):
            if _is_get_or_head(method):
                return not_modified
            raise PreconditionFailed()
    elif _is_get_or_head(method):
        since = parse_http_date(headers.get("if-modified-since"))
        if since is not None and mtime is not None and int(mtime) <= since:
            return not_modified

    response = Response(
        body=content,
        content_type=media_type,
        headers=(*validators, ("Accept-Ranges", "bytes")),
    )

    # 3. Range / If-Range
    range_header = headers.get("range")
    if range_header is None or not _is_get_or_head(method):
        return response
    if not _range_applies(headers, etag, mtime):
        return response

    size = len(content)
    ranges = parse_range(range_header, size)
    if not ranges:
        return response
    if sum(end - start + 1 for start, end in ranges) > size:
        # Overlapping ranges that add up to more than the file: send it whole
        return response

    if len(ranges) == 1:
        start, end = ranges[0]
        return (
            Response(
                body=content[start : end + 1],
                status=206,
                content_type=media_type,
                headers=response.headers,
            )
            .with_header("Content-Range", f"bytes {start}-{end}/{size}")
        )

    body, multipart_type = _multipart(content, ranges, media_type)
    return Response(body=body, status=206, content_type=multipart_type, headers=response.headers)
