"""JSON, form and cookie encoding helpers shared by requests and responses."""

from collections.abc import Iterable, Mapping
from email.utils import parsedate_to_datetime
from functools import lru_cache
from http.cookies import CookieError, SimpleCookie
from typing import Any
from urllib.parse import urlencode

import httpx
import pydantic_core
from pydantic import TypeAdapter

from .models import Cookie

# Accepted shapes for a string multimap: {"k": "v"}, {"k": ["v1", "v2"]},
# [("k", "v"), ...] or httpx.QueryParams.
Values = Mapping[str, Any] | Iterable[tuple[str, Any]] | httpx.QueryParams


# =============================================================================
# JSON
# =============================================================================


def marshal(obj: Any) -> bytes:
    """
    Serialize an object to JSON bytes.

    Pydantic models, dataclasses, enums, datetimes and plain containers are
    all supported.

    Raises:
        pydantic_core.PydanticSerializationError: If the object is not serializable
    """
    return pydantic_core.to_json(obj)


@lru_cache(maxsize=128)
def _adapter(target: Any) -> TypeAdapter:
    return TypeAdapter(target)


def unmarshal(data: bytes, target: Any = None) -> Any:
    """
    Deserialize JSON bytes.

    Args:
        data: Raw JSON document
        target: Optional type to validate into (pydantic model, dataclass,
            TypedDict, ``dict[str, int]``...). ``None`` returns plain
            Python data.

    Raises:
        ValueError: If the document is not valid JSON or does not match target
    """
    if target is None:
        return pydantic_core.from_json(data)
    return _adapter(target).validate_json(data)


# =============================================================================
# Multimaps
# =============================================================================


def iter_pairs(values: Values) -> list[tuple[str, str]]:
    """Flatten any accepted multimap shape into ``(key, value)`` string pairs."""
    if isinstance(values, httpx.QueryParams):
        return [(str(k), str(v)) for k, v in values.multi_items()]

    items: Iterable[tuple[str, Any]]
    items = values.items() if isinstance(values, Mapping) else values

    pairs: list[tuple[str, str]] = []
    for key, value in items:
        if isinstance(value, (list, tuple)):
            pairs.extend((str(key), str(v)) for v in value)
        else:
            pairs.append((str(key), str(value)))
    return pairs


def encode_values(values: Values) -> str:
    """
    URL-encode a multimap as ``application/x-www-form-urlencoded``.

    Pairs are sorted by key; values under the same key keep their order.
    """
    pairs = sorted(iter_pairs(values), key=lambda pair: pair[0])
    return urlencode(pairs)


def render_query_value(value: Any) -> str:
    """Render a decoded JSON value as a query parameter string.

    Nested values are flattened to their compact JSON text, so the
    conversion is lossy for anything but scalars.
    """
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    if isinstance(value, (int, float)):
        return str(value)
    return pydantic_core.to_json(value).decode()


def object_to_query_pairs(obj: Any) -> list[tuple[str, str]]:
    """
    Flatten an object into query pairs through a JSON round trip.

    Raises:
        pydantic_core.PydanticSerializationError: If obj is not serializable
        ValueError: If obj does not serialize to a JSON object
    """
    decoded = unmarshal(marshal(obj))
    if not isinstance(decoded, dict):
        raise ValueError(
            f"expected an object to serialize to a JSON object, got {type(decoded).__name__}"
        )
    return [(key, render_query_value(value)) for key, value in decoded.items()]


# =============================================================================
# Cookies
# =============================================================================

_COOKIE_VALUE_INVALID = set('";\\')


def _sanitize_cookie_name(name: str) -> str:
    return name.replace("\r", "-").replace("\n", "-")


def _sanitize_cookie_value(value: str) -> str:
    cleaned = "".join(
        ch for ch in value if 0x20 <= ord(ch) < 0x7F and ch not in _COOKIE_VALUE_INVALID
    )
    if " " in cleaned or "," in cleaned:
        return f'"{cleaned}"'
    return cleaned


def format_request_cookie(cookie: Cookie) -> str:
    """Render a cookie as a ``name=value`` pair for the Cookie request header."""
    return f"{_sanitize_cookie_name(cookie.name)}={_sanitize_cookie_value(cookie.value)}"


def parse_request_cookies(header: str) -> list[Cookie]:
    """Parse a Cookie request header into name/value cookies."""
    cookies = []
    for part in header.split(";"):
        part = part.strip()
        if not part:
            continue
        name, _, value = part.partition("=")
        if len(value) >= 2 and value[0] == value[-1] == '"':
            value = value[1:-1]
        cookies.append(Cookie(name=name.strip(), value=value))
    return cookies


def parse_set_cookie(header: str) -> Cookie | None:
    """
    Parse one Set-Cookie header value.

    Returns:
        The parsed cookie, or None if the header is malformed
    """
    jar: SimpleCookie = SimpleCookie()
    try:
        jar.load(header)
    except CookieError:
        return None
    if not jar:
        return None

    morsel = next(iter(jar.values()))

    expires = None
    if morsel["expires"]:
        try:
            expires = parsedate_to_datetime(morsel["expires"])
        except (TypeError, ValueError):
            expires = None

    max_age = None
    if morsel["max-age"]:
        try:
            max_age = int(morsel["max-age"])
        except ValueError:
            max_age = None

    return Cookie(
        name=morsel.key,
        value=morsel.value,
        path=morsel["path"] or None,
        domain=morsel["domain"] or None,
        expires=expires,
        max_age=max_age,
        secure=bool(morsel["secure"]),
        http_only=bool(morsel["httponly"]),
        same_site=morsel["samesite"] or None,
        raw=header,
    )
