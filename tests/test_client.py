"""Tests for HTTPClient and the default client helpers."""

import httpx
import pytest

import fluxos_http
from fluxos_http import HTTPClient, HTTPClientConfig, ResourceNotFoundError, StatusError

from .conftest import RecordingTransport


@pytest.fixture
def default_transport():
    """Install a default client over a mock transport for the test."""

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/users":
            return httpx.Response(200, json=[{"id": 1, "name": "Alice"}])
        return httpx.Response(404, content=b"no such page")

    transport = RecordingTransport(handler)
    client = HTTPClient(transport=transport)
    fluxos_http.set_default_client(client)
    yield transport
    fluxos_http.set_default_client(None)
    client.close()


class TestHTTPClient:
    """Tests for HTTPClient."""

    def test_init_without_config(self):
        """Test client initialization without config uses defaults."""
        client = HTTPClient()
        assert client.config == HTTPClientConfig()
        assert client._client is None

    def test_underlying_client_configuration(self):
        """Test the httpx client is built from the config."""
        config = HTTPClientConfig(
            base_url="http://mimic:8000",
            timeout=7.0,
            follow_redirects=False,
            headers={"X-API-Key": "k"},
        )
        client = HTTPClient(config, transport=httpx.MockTransport(lambda r: httpx.Response(200)))

        http = client._get_client()

        assert http is client._get_client()
        assert http.base_url == httpx.URL("http://mimic:8000/")
        assert http.timeout == httpx.Timeout(7.0)
        assert http.follow_redirects is False
        assert http.headers["X-API-Key"] == "k"
        client.close()

    def test_follows_redirects_by_default(self, make_client):
        """Test redirects are followed unless disabled in the config."""

        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/old":
                return httpx.Response(302, headers={"Location": "/final"})
            return httpx.Response(200, text="arrived")

        resp = make_client(RecordingTransport(handler)).get("http://test/old").execute()
        assert resp.to_string() == "arrived"

        no_follow = make_client(RecordingTransport(handler), follow_redirects=False)
        resp = no_follow.get("http://test/old").execute()
        assert resp.status_code == 302
        with pytest.raises(StatusError, match="^302 Found"):
            resp.to_bytes()

    def test_context_manager_closes(self):
        """Test leaving the context closes the httpx client."""
        with HTTPClient(transport=httpx.MockTransport(lambda r: httpx.Response(200))) as client:
            assert client._client is not None
        assert client._client is None

    def test_close_is_idempotent(self):
        """Test closing an unused client is a no-op."""
        client = HTTPClient()
        client.close()
        client.close()
        assert client._client is None


class TestDefaultClient:
    """Tests for the module-level helpers."""

    def test_default_client_is_shared(self):
        """Test the default client is created once."""
        fluxos_http.set_default_client(None)
        try:
            assert fluxos_http.get_default_client() is fluxos_http.get_default_client()
        finally:
            fluxos_http.get_default_client().close()
            fluxos_http.set_default_client(None)

    def test_get_as_json(self, default_transport):
        """Test get_as_json fetches and decodes in one call."""
        users = fluxos_http.get_as_json("http://test/users")
        assert users == [{"id": 1, "name": "Alice"}]
        assert default_transport.last.method == "GET"

    def test_get_as_json_status_error(self, default_transport):
        """Test get_as_json raises status errors."""
        with pytest.raises(ResourceNotFoundError, match="no such page"):
            fluxos_http.get_as_json("http://test/missing")

    def test_module_helpers_use_default_client(self, default_transport):
        """Test post/put/delete helpers go through the default client."""
        fluxos_http.post("http://test/users").set_body_from_form({"name": "Bob"}).execute()
        fluxos_http.put("http://test/users/1").execute()
        fluxos_http.delete("http://test/users/1").execute()

        assert [r.method for r in default_transport.requests] == ["POST", "PUT", "DELETE"]
        assert default_transport.requests[0].content == b"name=Bob"

    def test_remaining_method_helpers(self, default_transport):
        """Test options/head/trace/connect helpers go through the default client."""
        for helper in (fluxos_http.options, fluxos_http.head, fluxos_http.trace, fluxos_http.connect):
            helper("http://test/users").execute().close()

        assert [r.method for r in default_transport.requests] == [
            "OPTIONS",
            "HEAD",
            "TRACE",
            "CONNECT",
        ]
