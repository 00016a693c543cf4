"""Response wrappers with lazy, cached body materialization."""

import asyncio
import threading
from typing import Any

import httpx
import structlog

from . import codec
from .exceptions import BodyReadError, DecodeError, status_error_for
from .models import SET_COOKIE_HEADER, SUCCESS_STATUS, Cookie

logger = structlog.get_logger(__name__)


class _BaseResponse:
    """Accessors shared by the sync and async response wrappers.

    ``raw`` is None whenever the request failed before a response was
    obtained; every accessor then returns an empty value instead of failing.
    """

    def __init__(
        self, raw: httpx.Response | None, error: Exception | None = None
    ) -> None:
        self._raw = raw
        self._error = error
        self._data: bytes | None = None
        self._materialized = False

    def __repr__(self) -> str:
        if self._raw is None:
            return f"<{type(self).__name__} [error: {self._error!r}]>"
        return f"<{type(self).__name__} [{self.status}]>"

    @property
    def error(self) -> Exception | None:
        """The stored error, or None."""
        return self._error

    @property
    def raw(self) -> httpx.Response | None:
        """The underlying httpx response for callers needing full control."""
        return self._raw

    @property
    def headers(self) -> httpx.Headers:
        if self._raw is None:
            return httpx.Headers()
        return self._raw.headers

    @property
    def status(self) -> str:
        """Status line, e.g. ``"404 Not Found"``."""
        if self._raw is None:
            return ""
        return f"{self._raw.status_code} {self._raw.reason_phrase}".rstrip()

    @property
    def status_code(self) -> int:
        if self._raw is None:
            return 0
        return self._raw.status_code

    @property
    def cookies(self) -> list[Cookie]:
        """Cookies set by the response, in header order."""
        if self._raw is None:
            return []
        cookies = []
        for header in self._raw.headers.get_list(SET_COOKIE_HEADER):
            cookie = codec.parse_set_cookie(header)
            if cookie is not None:
                cookies.append(cookie)
        return cookies

    def get_cookie(self, name: str) -> Cookie | None:
        for cookie in self.cookies:
            if cookie.name == name:
                return cookie
        return None

    def raise_for_error(self):
        """Raise the stored error, if any. Returns the response otherwise.

        This does not materialize the body, so a non-200 status is not
        reported here until one of the decode methods has run.
        """
        if self._error is not None:
            raise self._error
        return self

    def _record_read_error(self, exc: Exception) -> None:
        # An error recorded before the read takes precedence.
        logger.warning(
            "Response body read failed",
            status_code=self.status_code,
            error=str(exc),
        )
        if self._error is None:
            error = BodyReadError(
                f"failed to read response body: {exc}", status_code=self.status_code
            )
            error.__cause__ = exc
            self._error = error

    def _check_status(self) -> None:
        if self._error is not None or self.status_code == SUCCESS_STATUS:
            return
        body = self._data or b""
        message = f"{self.status} {body.decode('utf-8', errors='replace')}"
        self._error = status_error_for(
            self.status_code,
            message,
            body=body,
            retry_after=self.headers.get("Retry-After"),
        )

    def _result(self) -> bytes:
        if self._error is not None:
            raise self._error
        return self._data if self._data is not None else b""

    def _decode_json(self, data: bytes, target: Any) -> Any:
        try:
            return codec.unmarshal(data, target)
        except ValueError as e:
            raise DecodeError(
                f"failed to decode response body: {e}", status_code=self.status_code
            ) from e

    def _decode_text(self, data: bytes, encoding: str | None) -> str:
        if encoding is None and self._raw is not None:
            encoding = self._raw.encoding
        return data.decode(encoding or "utf-8", errors="replace")


class Response(_BaseResponse):
    """
    Outcome of one executed request.

    The body is read from the underlying stream on the first call to
    ``to_bytes``, ``to_json`` or ``to_string`` and cached; the stream is
    closed right after that read. Concurrent callers share one read.

    Example:
        ```python
        resp = client.get("https://api.example.com/users").add_query("page", "2").execute()
        users = resp.to_json(list[User])
        ```
    """

    def __init__(
        self, raw: httpx.Response | None, error: Exception | None = None
    ) -> None:
        super().__init__(raw, error)
        self._lock = threading.Lock()

    def __enter__(self) -> "Response":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    def close(self) -> None:
        """Release the underlying stream without reading it."""
        with self._lock:
            if self._raw is not None and not self._raw.is_closed:
                self._raw.close()

    def to_bytes(self) -> bytes:
        """
        Materialize and return the response body.

        Returns:
            The raw body bytes

        Raises:
            HTTPClientError: The stored construction, transport or body-read
                error, or a StatusError when the status is not 200. The
                same exception instance is raised on every call.
        """
        with self._lock:
            if not self._materialized:
                try:
                    self._materialize()
                finally:
                    self._materialized = True
        return self._result()

    def _materialize(self) -> None:
        if self._raw is not None:
            try:
                self._data = self._raw.read()
                logger.debug(
                    "Response body materialized",
                    status_code=self._raw.status_code,
                    size=len(self._data),
                )
            except Exception as e:
                self._record_read_error(e)
            finally:
                try:
                    self._raw.close()
                except Exception as e:
                    self._record_read_error(e)
        self._check_status()

    def to_json(self, target: Any = None) -> Any:
        """
        Decode the body as JSON.

        Args:
            target: Optional type to validate into, e.g. a pydantic model or
                ``dict[str, int]``. None returns plain Python data.

        Raises:
            DecodeError: If the body is not valid JSON for target
        """
        return self._decode_json(self.to_bytes(), target)

    def to_string(self, encoding: str | None = None) -> str:
        """Decode the body as text using the response charset (UTF-8 by default)."""
        return self._decode_text(self.to_bytes(), encoding)


class AsyncResponse(_BaseResponse):
    """Async counterpart of Response, produced by AsyncRequestBuilder."""

    def __init__(
        self, raw: httpx.Response | None, error: Exception | None = None
    ) -> None:
        super().__init__(raw, error)
        self._lock = asyncio.Lock()

    async def __aenter__(self) -> "AsyncResponse":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Release the underlying stream without reading it."""
        async with self._lock:
            if self._raw is not None and not self._raw.is_closed:
                await self._raw.aclose()

    async def to_bytes(self) -> bytes:
        """Materialize and return the response body. See Response.to_bytes."""
        async with self._lock:
            if not self._materialized:
                try:
                    await self._materialize()
                finally:
                    self._materialized = True
        return self._result()

    async def _materialize(self) -> None:
        if self._raw is not None:
            try:
                self._data = await self._raw.aread()
                logger.debug(
                    "Response body materialized",
                    status_code=self._raw.status_code,
                    size=len(self._data),
                )
            except Exception as e:
                self._record_read_error(e)
            finally:
                try:
                    await self._raw.aclose()
                except Exception as e:
                    self._record_read_error(e)
        self._check_status()

    async def to_json(self, target: Any = None) -> Any:
        return self._decode_json(await self.to_bytes(), target)

    async def to_string(self, encoding: str | None = None) -> str:
        return self._decode_text(await self.to_bytes(), encoding)
