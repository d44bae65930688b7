"""
Resolves a command-line source token into HTML text.

``-`` reads standard input, ``http://``/``https://`` tokens are fetched with a
GET request, and anything else is read as a file path.
"""

from __future__ import annotations

import logging
import re
import sys

import requests

logger = logging.getLogger(__name__)

_META_CHARSET_RE = re.compile(r"<meta\b[^>]*?charset=[\"']?([A-Za-z0-9_-]+)", re.IGNORECASE)


class AcquisitionError(Exception):
    """The HTML source could not be read."""


def _detect_meta_charset(data: bytes) -> str | None:
    head = data[:4096].decode("latin-1", errors="ignore")
    match = _META_CHARSET_RE.search(head)
    if not match:
        return None
    return match.group(1).strip().lower()


def charset_from_content_type(content_type: str) -> str | None:
    if "charset=" not in content_type:
        return None
    charset = content_type.split("charset=")[-1].split(";")[0].strip().strip("\"'")
    return charset or None


def decode_html_bytes(data: bytes, declared: str | None = None) -> str:
    candidates = []
    if declared:
        candidates.append(declared)
    charset = _detect_meta_charset(data)
    if charset:
        candidates.append(charset)
    candidates.append("utf-8")

    for enc in candidates:
        try:
            return data.decode(enc)
        except (LookupError, UnicodeDecodeError):
            continue
    return data.decode("latin-1", errors="replace")


def _read_stdin() -> str:
    try:
        data = sys.stdin.buffer.read()
    except OSError as e:
        raise AcquisitionError(f"failed to read from stdin: {e}") from e
    return decode_html_bytes(data)


def _fetch_url(url: str, timeout: float) -> str:
    try:
        response = requests.get(url, timeout=timeout, stream=True)
    except requests.RequestException as e:
        raise AcquisitionError(f"failed to fetch URL: {e}") from e

    with response:
        if response.status_code != 200:
            raise AcquisitionError(f"HTTP error: {response.status_code}")
        try:
            data = response.content
        except requests.RequestException as e:
            raise AcquisitionError(f"failed to read response: {e}") from e
        declared = charset_from_content_type(response.headers.get("Content-Type", ""))

    logger.debug("Fetched %s (%d bytes)", url, len(data))
    return decode_html_bytes(data, declared=declared)


def _read_file(path: str) -> str:
    try:
        with open(path, "rb") as f:
            data = f.read()
    except OSError as e:
        raise AcquisitionError(f"failed to read file: {e}") from e
    return decode_html_bytes(data)


def get_html(source: str, timeout: float = 30) -> str:
    """Read HTML from stdin (``-``), a URL, or a file path."""
    if not source:
        raise ValueError("source must be a non-empty file path, URL, or '-'")

    if source == "-":
        return _read_stdin()
    if source.startswith("http://") or source.startswith("https://"):
        return _fetch_url(source, timeout)
    return _read_file(source)
