"""HTTP client facades producing request builders."""

import threading
from typing import Any

import httpx
import structlog

from .config import HTTPClientConfig
from .models import HTTPMethod
from .request import AsyncRequestBuilder, RequestBuilder

logger = structlog.get_logger(__name__)


class HTTPClient:
    """
    Sync client that hands out fluent request builders.

    Connection pooling, timeouts, TLS and redirects are all handled by the
    wrapped ``httpx.Client``; this class only configures it.

    Example:
        ```python
        from fluxos_http import HTTPClient, HTTPClientConfig

        config = HTTPClientConfig(base_url="http://inkpass:8000", timeout=10.0)
        with HTTPClient(config) as client:
            user = (
                client.get("/api/v1/users/me")
                .set_header("Authorization", f"Bearer {token}")
                .execute()
                .to_json(UserResponse)
            )
        ```
    """

    def __init__(
        self,
        config: HTTPClientConfig | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """
        Initialize HTTP client.

        Args:
            config: Client configuration. If None, uses default config.
            transport: Optional httpx transport (e.g. ``httpx.MockTransport`` in tests)
        """
        self.config = config or HTTPClientConfig()
        self._transport = transport
        self._client: httpx.Client | None = None
        logger.info("HTTPClient initialized", base_url=self.config.base_url)

    def __enter__(self) -> "HTTPClient":
        self._get_client()
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    def _get_client(self) -> httpx.Client:
        """Get or create the underlying httpx client."""
        if self._client is None:
            self._client = httpx.Client(
                base_url=self.config.base_url,
                timeout=self.config.timeout,
                verify=self.config.verify_ssl,
                follow_redirects=self.config.follow_redirects,
                headers=self.config.headers,
                transport=self._transport,
            )
        return self._client

    def close(self) -> None:
        """Close the underlying httpx client and release pooled connections."""
        if self._client:
            self._client.close()
            self._client = None
            logger.info("HTTPClient closed")

    # =========================================================================
    # Builder factories
    # =========================================================================

    def request(self, method: HTTPMethod | str, url: httpx.URL | str) -> RequestBuilder:
        return RequestBuilder(self, method, url)

    def options(self, url: httpx.URL | str) -> RequestBuilder:
        return self.request(HTTPMethod.OPTIONS, url)

    def get(self, url: httpx.URL | str) -> RequestBuilder:
        return self.request(HTTPMethod.GET, url)

    def head(self, url: httpx.URL | str) -> RequestBuilder:
        return self.request(HTTPMethod.HEAD, url)

    def post(self, url: httpx.URL | str) -> RequestBuilder:
        return self.request(HTTPMethod.POST, url)

    def put(self, url: httpx.URL | str) -> RequestBuilder:
        return self.request(HTTPMethod.PUT, url)

    def delete(self, url: httpx.URL | str) -> RequestBuilder:
        return self.request(HTTPMethod.DELETE, url)

    def trace(self, url: httpx.URL | str) -> RequestBuilder:
        return self.request(HTTPMethod.TRACE, url)

    def connect(self, url: httpx.URL | str) -> RequestBuilder:
        return self.request(HTTPMethod.CONNECT, url)


class AsyncHTTPClient:
    """
    Async client that hands out fluent request builders.

    Example:
        ```python
        async with AsyncHTTPClient(HTTPClientConfig(base_url="http://mimic:8000")) as client:
            resp = await client.get("/api/v1/templates").execute()
            templates = await resp.to_json(list[dict[str, Any]])
        ```
    """

    def __init__(
        self,
        config: HTTPClientConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config or HTTPClientConfig()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        logger.info("AsyncHTTPClient initialized", base_url=self.config.base_url)

    async def __aenter__(self) -> "AsyncHTTPClient":
        self._get_client()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.aclose()

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the underlying httpx client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.config.base_url,
                timeout=self.config.timeout,
                verify=self.config.verify_ssl,
                follow_redirects=self.config.follow_redirects,
                headers=self.config.headers,
                transport=self._transport,
            )
        return self._client

    async def aclose(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None
            logger.info("AsyncHTTPClient closed")

    def request(self, method: HTTPMethod | str, url: httpx.URL | str) -> AsyncRequestBuilder:
        return AsyncRequestBuilder(self, method, url)

    def options(self, url: httpx.URL | str) -> AsyncRequestBuilder:
        return self.request(HTTPMethod.OPTIONS, url)

    def get(self, url: httpx.URL | str) -> AsyncRequestBuilder:
        return self.request(HTTPMethod.GET, url)

    def head(self, url: httpx.URL | str) -> AsyncRequestBuilder:
        return self.request(HTTPMethod.HEAD, url)

    def post(self, url: httpx.URL | str) -> AsyncRequestBuilder:
        return self.request(HTTPMethod.POST, url)

    def put(self, url: httpx.URL | str) -> AsyncRequestBuilder:
        return self.request(HTTPMethod.PUT, url)

    def delete(self, url: httpx.URL | str) -> AsyncRequestBuilder:
        return self.request(HTTPMethod.DELETE, url)

    def trace(self, url: httpx.URL | str) -> AsyncRequestBuilder:
        return self.request(HTTPMethod.TRACE, url)

    def connect(self, url: httpx.URL | str) -> AsyncRequestBuilder:
        return self.request(HTTPMethod.CONNECT, url)


# =============================================================================
# Default client
# =============================================================================

_default_client: HTTPClient | None = None
_default_lock = threading.Lock()


def get_default_client() -> HTTPClient:
    """Return the shared client used by the module-level helpers."""
    global _default_client
    with _default_lock:
        if _default_client is None:
            _default_client = HTTPClient()
        return _default_client


def set_default_client(client: HTTPClient | None) -> None:
    """Replace the shared client. None resets it to a lazily created default."""
    global _default_client
    with _default_lock:
        _default_client = client


def get(url: httpx.URL | str) -> RequestBuilder:
    return get_default_client().get(url)


def post(url: httpx.URL | str) -> RequestBuilder:
    return get_default_client().post(url)


def put(url: httpx.URL | str) -> RequestBuilder:
    return get_default_client().put(url)


def delete(url: httpx.URL | str) -> RequestBuilder:
    return get_default_client().delete(url)


def options(url: httpx.URL | str) -> RequestBuilder:
    return get_default_client().options(url)


def head(url: httpx.URL | str) -> RequestBuilder:
    return get_default_client().head(url)


def trace(url: httpx.URL | str) -> RequestBuilder:
    return get_default_client().trace(url)


def connect(url: httpx.URL | str) -> RequestBuilder:
    return get_default_client().connect(url)


def get_as_json(url: httpx.URL | str, target: Any = None) -> Any:
    """
    GET a URL with the shared client and decode the JSON body.

    Raises:
        HTTPClientError: Any stored construction, transport, status or decode error
    """
    return get(url).execute().to_json(target)
