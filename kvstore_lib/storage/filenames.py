"""Mapping between record keys and local filenames.

A record `key` stored with content type `text/plain` lives in `key.txt`.
The extension is the only place the content type survives on disk, so the
mapping back (extension -> content type) is a best-effort table lookup.
"""
from __future__ import annotations
from typing import Any, Callable, Optional, Pattern
import mimetypes
import re

from kvstore_lib.errors import ParameterError
from kvstore_lib.storage.serializer import JSON_CONTENT_TYPE, parse_content_type

MAX_KEY_LENGTH = 256
RESERVED_KEY_CHARACTERS = '?|\\/"*<>%:'
DEFAULT_EXTENSION = "json"
FALLBACK_EXTENSION = "bin"
FALLBACK_CONTENT_TYPE = "application/octet-stream"

# Preferred extensions; mimetypes is consulted for anything not listed here.
_EXTENSIONS = {
    JSON_CONTENT_TYPE: "json",
    "text/plain": "txt",
    "text/html": "html",
    "text/csv": "csv",
    "text/xml": "xml",
    "application/xml": "xml",
    "application/octet-stream": "bin",
    "application/pdf": "pdf",
    "application/zip": "zip",
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
    "image/svg+xml": "svg",
    "audio/mpeg": "mp3",
    "video/mp4": "mp4",
}
_CONTENT_TYPES = {ext: ctype for ctype, ext in _EXTENSIONS.items()}
_CONTENT_TYPES["xml"] = "application/xml"
_CONTENT_TYPES["jpeg"] = "image/jpeg"
_CONTENT_TYPES["htm"] = "text/html"

_EXTENSION_RE = re.compile(r"^[a-z0-9]+$")
_RECORD_FILE_RE = re.compile(r"^(.+)\.[a-z0-9]+$")


def validate_key(key: Any) -> str:
    if not isinstance(key, str):
        raise ParameterError('Parameter "key" of type str must be provided')
    if not key:
        raise ParameterError('The "key" parameter cannot be empty')
    if len(key) > MAX_KEY_LENGTH:
        raise ParameterError(f'The "key" parameter must be at most {MAX_KEY_LENGTH} characters long')
    if any(ch in RESERVED_KEY_CHARACTERS for ch in key):
        raise ParameterError(
            f'The "key" parameter must not contain any of the following characters: {RESERVED_KEY_CHARACTERS}'
        )
    return key


def extension_for(content_type: str | None) -> str:
    media, _ = parse_content_type(content_type)
    if media is None:
        return DEFAULT_EXTENSION
    ext = _EXTENSIONS.get(media)
    if ext:
        return ext
    guessed = mimetypes.guess_extension(media)
    if guessed:
        guessed = guessed.lstrip(".").lower()
        if _EXTENSION_RE.match(guessed):
            return guessed
    return FALLBACK_EXTENSION


def filename_for(key: str, content_type: str | None = None) -> str:
    return f"{key}.{extension_for(content_type)}"


def file_name_pattern(key: str) -> Pattern[str]:
    """Regex accepting `key.<ext>` for any single lower-case alphanumeric extension."""
    return re.compile(rf"^{re.escape(key)}\.[a-z0-9]+$")


def matches_key(key: str) -> Callable[[str], bool]:
    pattern = file_name_pattern(key)
    return lambda filename: pattern.match(filename) is not None


def key_from_filename(filename: str) -> Optional[str]:
    """Return the record key stored in `filename`, or None if it is not a record file.

    Only names `get_value` would find count: a key followed by one
    lower-case alphanumeric extension.
    """
    match = _RECORD_FILE_RE.match(filename)
    return match.group(1) if match else None


def content_type_for(filename: str) -> str:
    _, _, ext = filename.rpartition(".")
    ctype = _CONTENT_TYPES.get(ext.lower())
    if ctype:
        return ctype
    guessed, _ = mimetypes.guess_type(f"file.{ext}", strict=False)
    return guessed or FALLBACK_CONTENT_TYPE
