"""Helpers for coercing Vultr v1 payloads and user-data values."""

from __future__ import annotations

import base64
import binascii
import re
from datetime import datetime
from typing import Any, Mapping

from vmetal_http import ApiException

_WHITESPACE = re.compile(r"[ \t\r\n\v\f]+")
_BASE64_BODY = re.compile(r"[A-Za-z0-9+/]*={0,2}")


def encode_user_data(text: str) -> str:
    """Return ``text`` as base64, the encoding Vultr expects for user-data.

    Text produced by :func:`decode_user_data` for non UTF-8 payloads encodes
    back to the original bytes.
    """

    return base64.b64encode(text.encode("utf-8", "surrogateescape")).decode("ascii")


def decode_user_data(encoded: str) -> str:
    """Return the text behind a base64 user-data value.

    Bytes that are not UTF-8 (gzip-compressed cloud-init, for one) are kept
    as lone surrogates; ``value.encode("utf-8", "surrogateescape")`` gives the
    raw payload back.
    """

    if not encoded:
        return ""
    try:
        raw = base64.b64decode(encoded)
    except (binascii.Error, ValueError) as exc:
        raise ApiException("Vultr returned user-data that is not valid base64") from exc
    return raw.decode("utf-8", "surrogateescape")


def is_base64(value: str) -> bool:
    """Return True when ``value`` already is base64 encoded user-data.

    ASCII whitespace is ignored, so wrapped output of ``base64`` or
    ``base64.encodebytes`` qualifies, and missing padding is accepted.
    ``=`` may only close the value, and a trailing group of one character
    is rejected. Plain text made only of base64 characters (``abcd``)
    passes as well.
    """

    stripped = _WHITESPACE.sub("", value)
    if not _BASE64_BODY.fullmatch(stripped):
        return False
    data = stripped.rstrip("=")
    if len(data) % 4 == 1:
        return False
    if len(data) != len(stripped) and len(stripped) % 4:
        return False
    try:
        base64.b64decode(data + "=" * (-len(data) % 4), validate=True)
    except (binascii.Error, ValueError):
        return False
    return True


def record_list(payload: Any) -> list[Mapping[str, Any]]:
    """Flatten a list response into its records.

    Vultr v1 answers list calls with an object keyed by identifier, and with
    an empty JSON array when nothing matches.
    """

    if not payload:
        return []
    if isinstance(payload, Mapping):
        return [item for item in payload.values() if isinstance(item, Mapping)]
    if isinstance(payload, list):
        return [item for item in payload if isinstance(item, Mapping)]
    raise ApiException(f"Unexpected list payload from Vultr API: {type(payload).__name__}")


def keyed_records(payload: Any, subscription_id: int) -> Any:
    """Return the entry stored under ``subscription_id`` in a keyed response."""

    if not isinstance(payload, Mapping):
        raise ApiException("Unexpected payload from Vultr API: expected an object")
    key = str(int(subscription_id))
    if key not in payload:
        raise ApiException(f"Vultr response does not contain subscription {key}")
    return payload[key]


def optional_int(value: Any) -> int | None:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def as_float(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def parse_created(value: Any) -> datetime | None:
    """Parse Vultr's ``YYYY-MM-DD HH:MM:SS`` timestamps."""

    if not value or not isinstance(value, str):
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        return None
