"""Data models for fluxos-http."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


# =============================================================================
# Enums
# =============================================================================


class HTTPMethod(str, Enum):
    """Request methods a builder can be created with."""

    OPTIONS = "OPTIONS"
    GET = "GET"
    HEAD = "HEAD"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    TRACE = "TRACE"
    CONNECT = "CONNECT"


class ContentType(str, Enum):
    """Content types set by the body helpers."""

    form = "application/x-www-form-urlencoded"
    json = "application/json"


SUCCESS_STATUS = 200

CONTENT_TYPE_HEADER = "Content-Type"
CONTENT_LENGTH_HEADER = "Content-Length"
COOKIE_HEADER = "Cookie"
SET_COOKIE_HEADER = "Set-Cookie"


# =============================================================================
# Cookies
# =============================================================================


class Cookie(BaseModel):
    """An HTTP cookie.

    Only ``name`` and ``value`` are sent on requests; the remaining attributes
    are filled in when parsing ``Set-Cookie`` response headers.
    """

    name: str
    value: str = ""
    path: str | None = None
    domain: str | None = None
    expires: datetime | None = None
    max_age: int | None = Field(default=None, description="Max-Age in seconds")
    secure: bool = False
    http_only: bool = False
    same_site: str | None = None
    raw: str | None = Field(default=None, description="Unparsed Set-Cookie value")
