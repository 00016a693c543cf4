"""Pytest configuration for fluxos-http tests."""

from collections.abc import Callable

import httpx
import pytest

from fluxos_http import AsyncHTTPClient, HTTPClient, HTTPClientConfig


@pytest.fixture(autouse=True)
def configure_structlog():
    """Configure structlog for testing."""
    import structlog

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.dev.ConsoleRenderer(),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it was asked to send."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self.requests: list[httpx.Request] = []

        def record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(record)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def ok_transport():
    """Transport answering every request with 200 and a small JSON body."""
    return RecordingTransport(lambda request: httpx.Response(200, json={"ok": True}))


@pytest.fixture
def make_client():
    """Factory for sync clients over a transport; closes them afterwards."""
    clients: list[HTTPClient] = []

    def factory(transport: httpx.BaseTransport, **config_kwargs) -> HTTPClient:
        client = HTTPClient(HTTPClientConfig(**config_kwargs), transport=transport)
        clients.append(client)
        return client

    yield factory

    for client in clients:
        client.close()


@pytest.fixture
def client(make_client, ok_transport):
    """Sync client over ok_transport."""
    return make_client(ok_transport)


@pytest.fixture
def make_async_client():
    """Factory for async clients over a transport."""

    def factory(transport: httpx.AsyncBaseTransport, **config_kwargs) -> AsyncHTTPClient:
        return AsyncHTTPClient(HTTPClientConfig(**config_kwargs), transport=transport)

    return factory
