"""
Session value obfuscation.

Values stored in the browser session are turned into opaque looking tokens:
JSON text -> percent encoding (same unreserved set as JavaScript's
encodeURIComponent, so Korean text survives) -> Base64.

This is NOT encryption. There is no key and no integrity check, anyone can
reverse a token. Do not replace it with real cryptography either: tokens
already stored by earlier sessions must keep decoding.
"""

import base64
import json
from typing import Any
from urllib.parse import quote, unquote

from advice_errors import DecodeError

# Base64 of '{"'; tokens starting with it are treated as encoded objects
ENCODED_OBJECT_PREFIX = "eyJ"

# Characters encodeURIComponent leaves untouched (besides alphanumerics)
_URI_COMPONENT_SAFE = "-_.!~*'()"


def _to_json(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False)


def encode(value: Any) -> str:
    """
    Obfuscate a JSON-serializable value into a token.

    Never raises. If the value cannot be encoded the plain JSON text is
    returned instead, so callers must accept that a token may be plain JSON.
    """
    try:
        json_text = _to_json(value)
        percent_text = quote(json_text, safe=_URI_COMPONENT_SAFE)
        return base64.b64encode(percent_text.encode('ascii')).decode('ascii')
    except (TypeError, ValueError, RecursionError) as e:
        print(f"⚠️  Session value could not be encoded, storing plain JSON: {e}")
        return _degraded_json(value)


def _degraded_json(value: Any) -> str:
    # default=str covers unknown types; circular structures still fail there
    try:
        return json.dumps(value, ensure_ascii=False, default=str)
    except (TypeError, ValueError, RecursionError):
        return json.dumps(repr(value), ensure_ascii=False)


def decode(token: str) -> Any:
    """
    Recover the value behind a token.

    Tries Base64 -> percent decoding -> JSON first, then the raw token as
    legacy plain JSON. Raises DecodeError when both paths fail.
    """
    try:
        percent_text = base64.b64decode(token, validate=True).decode('ascii')
        return json.loads(unquote(percent_text, errors='strict'))
    except (TypeError, ValueError) as e:
        first_error = e

    try:
        return json.loads(token)
    except (TypeError, ValueError) as e:
        raise DecodeError(
            f"Could not decode session value (encoded: {first_error}; legacy: {e})"
        ) from e


def is_obfuscated(token: str) -> bool:
    """Guess whether a stored token is encoded rather than legacy plain JSON"""
    return token.startswith(ENCODED_OBJECT_PREFIX) or "{" not in token


def load_token(token: str) -> Any:
    """
    Decode a stored token, choosing the first path with is_obfuscated().

    Legacy tokens go straight to JSON parsing; a failure there is a
    DecodeError just like a failed decode().
    """
    if is_obfuscated(token):
        return decode(token)
    try:
        return json.loads(token)
    except ValueError as e:
        raise DecodeError(f"Could not parse legacy session value: {e}") from e
