"""Configuration for fluxos-http."""

from dataclasses import dataclass, field


@dataclass
class HTTPClientConfig:
    """
    Configuration for HTTPClient and AsyncHTTPClient.

    Attributes:
        base_url: Base URL that relative request URLs are resolved against (default: none)
        timeout: Request timeout in seconds (default: 30.0)
        verify_ssl: Whether to verify SSL certificates (default: True)
        follow_redirects: Whether the transport follows redirects (default: True)
        headers: Default headers sent with every request
        legacy_query_join: Append builder query parameters as ``<query>&<params>``
            even when the URL has no query string, producing ``?&a=1``
            (default: True). Set to False to join cleanly.

    Example:
        ```python
        config = HTTPClientConfig(
            base_url="http://inkpass:8000",
            timeout=10.0,
            headers={"X-API-Key": "your-service-api-key"},
        )
        ```
    """

    base_url: str = ""
    timeout: float = 30.0
    verify_ssl: bool = True
    follow_redirects: bool = True
    headers: dict[str, str] = field(default_factory=dict)
    legacy_query_join: bool = True

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        # Remove trailing slash from base_url
        self.base_url = self.base_url.rstrip("/")

        if self.timeout <= 0:
            raise ValueError("timeout must be greater than 0")

        for key, value in self.headers.items():
            if not isinstance(key, str) or not isinstance(value, str):
                raise ValueError("headers must map strings to strings")
