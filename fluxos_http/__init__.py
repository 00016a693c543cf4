"""
    fluxos-http - Fluent HTTP request builder shared by services in this repo.

    Chain query parameters, headers, cookies and a body onto a request, send it
    once, then decode the response as bytes, text or JSON. Configuration
    errors are deferred to ``execute()`` and status errors to the first decode.

Example usage:
    from fluxos_http import HTTPClient, HTTPClientConfig

    client = HTTPClient(HTTPClientConfig(base_url="http://mimic:8000"))

    # Query parameters and JSON decoding
    logs = (
        client.get("/api/v1/logs")
        .add_query("limit", "50")
        .add_query("provider", "email")
        .execute()
        .to_json()
    )

    # JSON body
    resp = (
        client.post("/api/v1/send")
        .set_header("Authorization", "Bearer <token>")
        .set_body_from_json({"recipient": "user@example.com", "content": "Hello!"})
        .execute()
    )
    if resp.error is None:
        print(resp.status_code, resp.get_cookie("session"))

    # Shared default client
    import fluxos_http

    users = fluxos_http.get_as_json("https://jsonplaceholder.typicode.com/users")
"""

from .client import (
    AsyncHTTPClient,
    HTTPClient,
    connect,
    delete,
    get,
    get_as_json,
    get_default_client,
    head,
    options,
    post,
    put,
    set_default_client,
    trace,
)
from .config import HTTPClientConfig
from .exceptions import (
    AuthenticationError,
    BodyReadError,
    DecodeError,
    HTTPClientError,
    PermissionDeniedError,
    RateLimitError,
    RequestBuildError,
    ResourceNotFoundError,
    ServiceUnavailableError,
    StatusError,
    TransportError,
)
from .models import ContentType, Cookie, HTTPMethod
from .request import AsyncRequestBuilder, RequestBuilder
from .response import AsyncResponse, Response
from .version import __version__

__all__ = [
    # Clients
    "HTTPClient",
    "AsyncHTTPClient",
    # Builders
    "RequestBuilder",
    "AsyncRequestBuilder",
    # Responses
    "Response",
    "AsyncResponse",
    # Default client helpers
    "get",
    "post",
    "put",
    "delete",
    "options",
    "head",
    "trace",
    "connect",
    "get_as_json",
    "get_default_client",
    "set_default_client",
    # Config
    "HTTPClientConfig",
    # Exceptions
    "HTTPClientError",
    "RequestBuildError",
    "TransportError",
    "BodyReadError",
    "DecodeError",
    "StatusError",
    "AuthenticationError",
    "PermissionDeniedError",
    "ResourceNotFoundError",
    "RateLimitError",
    "ServiceUnavailableError",
    # Models
    "HTTPMethod",
    "ContentType",
    "Cookie",
    # Version
    "__version__",
]
