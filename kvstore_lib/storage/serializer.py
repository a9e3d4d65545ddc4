"""Value codec: turn record values into payloads and back.

Values stored without a content type are JSON documents; values stored
with an explicit content type must already be text or bytes and are passed
through untouched.
"""
from __future__ import annotations
from typing import Any, Dict, Optional, Protocol, Tuple, Union
import json

from kvstore_lib.errors import EncodingError, ValueTypeError

JSON_CONTENT_TYPE = "application/json"
DEFAULT_CHARSET = "utf-8"

Payload = Union[str, bytes]


class _Unset:
    """Marker for "no value supplied", distinct from None (which deletes)."""

    _instance: Optional["_Unset"] = None

    def __new__(cls) -> "_Unset":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()


class Serializer(Protocol):
    def dump(self, value: Any) -> str: ...

    def load(self, data: Payload) -> Any: ...


class JSONSerializer:
    """JSON with stable two-space indentation."""

    def dump(self, value: Any) -> str:
        if value is UNSET or callable(value):
            raise EncodingError(
                'The "value" parameter was stringified to JSON and returned undefined. '
                "Make sure you're not trying to stringify an undefined value."
            )
        try:
            return json.dumps(value, indent=2, ensure_ascii=False)
        except (TypeError, ValueError, RecursionError) as e:
            raise EncodingError(f'The "value" parameter cannot be stringified to JSON: {e}') from e

    def load(self, data: Payload) -> Any:
        try:
            return json.loads(data)
        except ValueError as e:
            raise EncodingError(f"Stored value cannot be parsed as JSON: {e}") from e


_json = JSONSerializer()


def parse_content_type(content_type: Optional[str]) -> Tuple[Optional[str], Dict[str, str]]:
    """Split `type/subtype; k=v` into a lower-cased media type and its parameters."""
    if not content_type:
        return None, {}
    media, *rest = content_type.split(";")
    params: Dict[str, str] = {}
    for part in rest:
        name, sep, val = part.partition("=")
        if sep:
            params[name.strip().lower()] = val.strip().strip('"')
    return media.strip().lower() or None, params


def is_json_content_type(content_type: Optional[str]) -> bool:
    media, _ = parse_content_type(content_type)
    return media is None or media == JSON_CONTENT_TYPE


def maybe_stringify(value: Any, content_type: Optional[str]) -> Payload:
    """Return the transport payload for `value`.

    Without a content type the value is serialized to JSON. With one, the
    value must already be a `str` or a bytes-like object.
    """
    if content_type is None:
        return _json.dump(value)
    if isinstance(value, str):
        return value
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    raise ValueTypeError('The "value" parameter must be a String or Buffer when "options.contentType" is specified.')


def encode_value(value: Any, content_type: Optional[str] = None) -> Tuple[Payload, str]:
    payload = maybe_stringify(value, content_type)
    return payload, content_type or JSON_CONTENT_TYPE


def decode_value(payload: Any, content_type: Optional[str]) -> Any:
    """Reconstruct a value from a stored payload.

    JSON payloads are parsed, `text/*` bytes are decoded with their charset,
    anything else is returned as the backend delivered it.
    """
    media, params = parse_content_type(content_type)
    if media is None or media == JSON_CONTENT_TYPE:
        if isinstance(payload, (str, bytes, bytearray)):
            return _json.load(payload)
        return payload
    if media.startswith("text/") and isinstance(payload, (bytes, bytearray)):
        return bytes(payload).decode(params.get("charset") or DEFAULT_CHARSET)
    return payload


def to_bytes(payload: Payload) -> bytes:
    if isinstance(payload, str):
        return payload.encode(DEFAULT_CHARSET)
    return payload
