"""Typed accessors over a decoded JSON request document.

Lookups take a key path (``doc.require_str("request", "intent", "name")``)
and fail with ValidationError instead of propagating None. A path segment
that exists but is JSON null counts as missing.
"""

import json
from datetime import datetime, timezone
from typing import Any, Optional, Tuple

from .exceptions import ValidationError

_MISSING = object()


def _path(keys: Tuple[str, ...]) -> str:
    return ".".join(keys)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO 8601 request timestamp into an aware UTC datetime.

    Returns None for anything that is not a parseable string. Naive values
    are taken as UTC.
    """
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


class Document:
    """Read-only view over a decoded JSON object."""

    def __init__(self, data: dict):
        if not isinstance(data, dict):
            raise ValidationError.malformed_json(
                f"top-level value must be an object, got {type(data).__name__}"
            )
        self._data = data

    @classmethod
    def loads(cls, body: bytes) -> "Document":
        """Decode raw body bytes.

        Raises:
            ValidationError: MALFORMED_JSON if the bytes are not a JSON object.
        """
        try:
            data = json.loads(body)
        except (UnicodeDecodeError, ValueError) as e:
            raise ValidationError.malformed_json(str(e))
        return cls(data)

    @property
    def data(self) -> dict:
        return self._data

    def get(self, *keys: str, default: Any = None) -> Any:
        """Return the value at ``keys`` or ``default`` if any segment is absent."""
        value = self._lookup(keys)
        return default if value is _MISSING else value

    def has(self, *keys: str) -> bool:
        return self._lookup(keys) is not _MISSING

    def require(self, *keys: str) -> Any:
        value = self._lookup(keys)
        if value is _MISSING:
            raise ValidationError.missing_field(_path(keys))
        return value

    def require_str(self, *keys: str) -> str:
        return self._typed(keys, str, "a string", required=True)

    def require_dict(self, *keys: str) -> dict:
        return self._typed(keys, dict, "an object", required=True)

    def require_list(self, *keys: str) -> list:
        return self._typed(keys, list, "an array", required=True)

    def optional_str(self, *keys: str) -> Optional[str]:
        return self._typed(keys, str, "a string", required=False)

    def optional_dict(self, *keys: str) -> Optional[dict]:
        return self._typed(keys, dict, "an object", required=False)

    def optional_bool(self, *keys: str) -> Optional[bool]:
        return self._typed(keys, bool, "a boolean", required=False)

    def _typed(self, keys, expected_type, expected_name, required):
        value = self._lookup(keys)
        if value is _MISSING:
            if required:
                raise ValidationError.missing_field(_path(keys))
            return None
        if not isinstance(value, expected_type):
            raise ValidationError.type_mismatch(_path(keys), expected_name, value)
        return value

    def _lookup(self, keys: Tuple[str, ...]) -> Any:
        node: Any = self._data
        for i, key in enumerate(keys):
            if not isinstance(node, dict):
                raise ValidationError.type_mismatch(_path(keys[:i]), "an object", node)
            node = node.get(key, _MISSING)
            if node is _MISSING or node is None:
                return _MISSING
        return node
