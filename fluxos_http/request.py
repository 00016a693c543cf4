"""Fluent request builders.

A builder accumulates method, URL, headers, query parameters, cookies and
body through chained calls, then ``execute()`` sends it once and wraps the
outcome in a Response. Configuration failures never raise from the chain:
the first one is recorded and returned from ``execute()`` instead.
"""

from collections.abc import AsyncIterable, Iterable
from copy import copy as shallow_copy
from enum import Enum
from typing import TYPE_CHECKING, Any, TypeVar

import httpx
import pydantic_core
import structlog

from . import codec
from .exceptions import RequestBuildError, TransportError
from .models import (
    CONTENT_LENGTH_HEADER,
    CONTENT_TYPE_HEADER,
    COOKIE_HEADER,
    ContentType,
    Cookie,
    HTTPMethod,
)
from .response import AsyncResponse, Response

if TYPE_CHECKING:
    from .client import AsyncHTTPClient, HTTPClient

logger = structlog.get_logger(__name__)

Body = bytes | Iterable[bytes] | AsyncIterable[bytes]

_BuilderT = TypeVar("_BuilderT", bound="_BaseRequestBuilder")

_SERIALIZATION_ERRORS = (pydantic_core.PydanticSerializationError, TypeError, ValueError)


def _content_type_value(content_type: ContentType | str) -> str:
    if isinstance(content_type, Enum):
        return str(content_type.value)
    return content_type


class _BaseRequestBuilder:
    """Configuration surface shared by RequestBuilder and AsyncRequestBuilder."""

    def __init__(self, owner: Any, method: HTTPMethod | str, url: httpx.URL | str) -> None:
        self._owner = owner
        self._error: Exception | None = None
        self._method = ""
        self._url: httpx.URL | None = None
        self._headers = httpx.Headers()
        self._query: list[tuple[str, str]] = []
        self._body: Body | None = None

        if isinstance(method, HTTPMethod):
            self._method = method.value
        else:
            try:
                self._method = HTTPMethod(str(method).upper()).value
            except ValueError:
                self._fail(RequestBuildError(f"unsupported request method: {method!r}"))

        try:
            self._url = httpx.URL(url)
        except (httpx.InvalidURL, TypeError) as e:
            self._fail(RequestBuildError(f"invalid URL {url!r}: {e}"))

    def __repr__(self) -> str:
        return f"<{type(self).__name__} [{self._method} {self._url}]>"

    def _fail(self, error: Exception) -> None:
        # First error wins.
        if self._error is None:
            self._error = error
            logger.debug("Request configuration failed", error=str(error))

    # =========================================================================
    # Accessors
    # =========================================================================

    @property
    def error(self) -> Exception | None:
        """The deferred configuration error, or None."""
        return self._error

    @property
    def method(self) -> str:
        return self._method

    @property
    def url(self) -> httpx.URL | None:
        return self._url

    @property
    def headers(self) -> httpx.Headers:
        """Headers set on this builder (client defaults are merged at send time)."""
        return self._headers

    @property
    def query(self) -> httpx.QueryParams:
        return httpx.QueryParams(self._query)

    @property
    def cookies(self) -> list[Cookie]:
        header = self._headers.get(COOKIE_HEADER)
        if not header:
            return []
        return codec.parse_request_cookies(header)

    @property
    def body(self) -> Body | None:
        return self._body

    def copy(self: _BuilderT) -> _BuilderT:
        """Return an independent builder with the same configuration."""
        clone = shallow_copy(self)
        clone._headers = self._headers.copy()
        clone._query = list(self._query)
        return clone

    # =========================================================================
    # Query parameters
    # =========================================================================

    def add_query(self: _BuilderT, key: str, value: str) -> _BuilderT:
        """Append a query parameter. Repeated keys are all sent, in order."""
        if self._error is None:
            self._query.append((key, value))
        return self

    def add_query_from_object(self: _BuilderT, obj: Any) -> _BuilderT:
        """
        Add every field of an object as a query parameter.

        The object goes through a JSON round trip, so anything pydantic can
        serialize works. Only scalar fields keep their meaning: nested lists
        and objects are sent as their compact JSON text.
        """
        if self._error is not None:
            return self
        try:
            pairs = codec.object_to_query_pairs(obj)
        except _SERIALIZATION_ERRORS as e:
            self._fail(RequestBuildError(f"cannot convert {type(obj).__name__} to query: {e}"))
            return self
        self._query.extend(pairs)
        return self

    # =========================================================================
    # Headers and cookies
    # =========================================================================

    def set_header(self: _BuilderT, key: str, value: str) -> _BuilderT:
        """Set a header, replacing any existing values for the same key."""
        if self._error is None:
            self._headers[key] = value
        return self

    def add_header(self: _BuilderT, key: str, value: str) -> _BuilderT:
        """Append a header value, keeping existing values for the same key."""
        if self._error is None:
            self._headers = httpx.Headers([*self._headers.raw, (key, value)])
        return self

    def del_header(self: _BuilderT, key: str) -> _BuilderT:
        if self._error is None and key in self._headers:
            del self._headers[key]
        return self

    def set_cookie(self: _BuilderT, cookie: Cookie | tuple[str, str]) -> _BuilderT:
        """Append a cookie to the Cookie header."""
        if self._error is not None:
            return self
        if not isinstance(cookie, Cookie):
            name, value = cookie
            cookie = Cookie(name=name, value=value)

        pair = codec.format_request_cookie(cookie)
        existing = self._headers.get(COOKIE_HEADER)
        self._headers[COOKIE_HEADER] = f"{existing}; {pair}" if existing else pair
        return self

    # =========================================================================
    # Body
    # =========================================================================

    def set_body(
        self: _BuilderT, content_type: ContentType | str, length: int, stream: Body
    ) -> _BuilderT:
        """
        Set the request body.

        Content-Type and Content-Length are always overwritten with the given
        values, so ``length`` must match what ``stream`` yields.

        Args:
            content_type: Value for the Content-Type header
            length: Value for the Content-Length header
            stream: Body bytes, or an iterable of byte chunks. Sync builders
                take a plain iterable and async builders an async iterable; a
                mismatch is reported by ``execute()``.
        """
        if self._error is not None:
            return self
        self._body = stream
        self._headers[CONTENT_TYPE_HEADER] = _content_type_value(content_type)
        self._headers[CONTENT_LENGTH_HEADER] = str(length)
        return self

    def set_body_from_bytes(
        self: _BuilderT, content_type: ContentType | str, data: bytes | str
    ) -> _BuilderT:
        if isinstance(data, str):
            data = data.encode("utf-8")
        return self.set_body(content_type, len(data), data)

    def set_body_from_form(self: _BuilderT, values: codec.Values) -> _BuilderT:
        """Send ``values`` as an application/x-www-form-urlencoded body."""
        if self._error is not None:
            return self
        try:
            encoded = codec.encode_values(values)
        except (TypeError, ValueError) as e:
            self._fail(RequestBuildError(f"cannot encode form values: {e}"))
            return self
        return self.set_body_from_bytes(ContentType.form, encoded.encode("ascii"))

    def set_body_from_json(self: _BuilderT, obj: Any) -> _BuilderT:
        """Send ``obj`` serialized as an application/json body."""
        if self._error is not None:
            return self
        try:
            data = codec.marshal(obj)
        except _SERIALIZATION_ERRORS as e:
            self._fail(RequestBuildError(f"cannot serialize {type(obj).__name__} to JSON: {e}"))
            return self
        return self.set_body_from_bytes(ContentType.json, data)

    # =========================================================================
    # Execution
    # =========================================================================

    def _apply_query(self, url: httpx.URL) -> httpx.URL:
        encoded = codec.encode_values(self._query)
        existing = url.query.decode("ascii")
        if self._owner.config.legacy_query_join:
            # Always joins with "&", so a URL without a query gets "?&a=1".
            raw_query = f"{existing}&{encoded}"
        else:
            raw_query = "&".join(part for part in (existing, encoded) if part)
        return url.copy_with(query=raw_query.encode("ascii"))

    def _accepts_stream(self, body: Body) -> bool:
        raise NotImplementedError

    def _build_with(self, client: httpx.Client | httpx.AsyncClient) -> httpx.Request:
        if self._error is not None:
            raise self._error
        if self._body is not None and not isinstance(self._body, (bytes, str)):
            if not self._accepts_stream(self._body):
                raise RequestBuildError(
                    f"{type(self).__name__} cannot send a {type(self._body).__name__} body"
                )
        try:
            request = client.build_request(
                self._method,
                self._url,
                headers=self._headers,
                content=self._body,
            )
            request.url = self._apply_query(request.url)
        except (httpx.InvalidURL, TypeError, ValueError) as e:
            raise RequestBuildError(f"cannot build {self._method} {self._url}: {e}") from e
        return request

    def _short_circuit(self) -> Exception | None:
        if self._error is not None:
            logger.warning(
                "Request not sent due to configuration error",
                method=self._method,
                url=str(self._url),
                error=str(self._error),
            )
        return self._error

    def _transport_error(self, request: httpx.Request, exc: httpx.HTTPError) -> TransportError:
        logger.error(
            "Request failed",
            method=request.method,
            url=str(request.url),
            error=str(exc),
        )
        error = TransportError(f"{request.method} {request.url}: {exc}")
        error.__cause__ = exc
        return error


class RequestBuilder(_BaseRequestBuilder):
    """
    Mutable, chainable request configuration bound to an HTTPClient.

    Example:
        ```python
        resp = (
            client.post("https://api.example.com/items")
            .set_header("Authorization", f"Bearer {token}")
            .add_query("dry_run", "true")
            .set_body_from_json({"name": "widget"})
            .execute()
        )
        item = resp.to_json(Item)
        ```
    """

    def __init__(self, owner: "HTTPClient", method: HTTPMethod | str, url: httpx.URL | str) -> None:
        super().__init__(owner, method, url)

    def _accepts_stream(self, body: Body) -> bool:
        return isinstance(body, Iterable) and not isinstance(body, AsyncIterable)

    def build(self) -> httpx.Request:
        """
        Build the httpx request that ``execute()`` would send.

        Raises:
            RequestBuildError: If a configuration error was recorded
        """
        return self._build_with(self._owner._get_client())

    def execute(self) -> Response:
        """
        Send the request.

        Never raises: configuration and transport failures are stored on the
        returned Response and surface from its decode methods.
        """
        error = self._short_circuit()
        if error is not None:
            return Response(None, error)

        try:
            request = self.build()
        except RequestBuildError as e:
            self._fail(e)
            return Response(None, e)

        logger.debug("Sending request", method=request.method, url=str(request.url))
        try:
            raw = self._owner._get_client().send(request, stream=True)
        except httpx.HTTPError as e:
            return Response(None, self._transport_error(request, e))
        return Response(raw)


class AsyncRequestBuilder(_BaseRequestBuilder):
    """Async counterpart of RequestBuilder, bound to an AsyncHTTPClient."""

    def __init__(
        self, owner: "AsyncHTTPClient", method: HTTPMethod | str, url: httpx.URL | str
    ) -> None:
        super().__init__(owner, method, url)

    def _accepts_stream(self, body: Body) -> bool:
        return isinstance(body, AsyncIterable)

    def build(self) -> httpx.Request:
        return self._build_with(self._owner._get_client())

    async def execute(self) -> AsyncResponse:
        """Send the request. See RequestBuilder.execute."""
        error = self._short_circuit()
        if error is not None:
            return AsyncResponse(None, error)

        try:
            request = self.build()
        except RequestBuildError as e:
            self._fail(e)
            return AsyncResponse(None, e)

        logger.debug("Sending request", method=request.method, url=str(request.url))
        try:
            raw = await self._owner._get_client().send(request, stream=True)
        except httpx.HTTPError as e:
            return AsyncResponse(None, self._transport_error(request, e))
        return AsyncResponse(raw)
