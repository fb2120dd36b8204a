"""HTTP client service shared by the authentication chain and the Halo client."""

from typing import Any

import httpx
import structlog

log = structlog.stdlib.get_logger()

USER_AGENT = "statlink/0.1.0"


class HttpClientService:
    """Thin async HTTP client with logging and timeout handling.

    Requests are made exactly once; failures are logged and re-raised to the
    caller, which decides whether they are fatal.
    """

    def __init__(
        self,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the HTTP client service.

        Args:
            timeout: Request timeout in seconds
            transport: Optional transport override (used by tests)
        """
        self.timeout = timeout
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(timeout),
            headers={"User-Agent": USER_AGENT},
            follow_redirects=True,
            transport=transport,
        )

        log.debug("HTTP client service initialized", timeout=timeout)

    async def get(
        self,
        url: str,
        headers: dict[str, str] | None = None,
        params: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Make a GET request.

        Raises:
            httpx.HTTPStatusError: If the server answers with a 4xx/5xx status
            httpx.RequestError: If the request could not be completed
        """
        return await self._send("GET", url, headers=headers, params=params)

    async def post(
        self,
        url: str,
        json: Any = None,
        data: dict[str, str] | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Make a POST request with either a JSON or a form-encoded body.

        Raises:
            httpx.HTTPStatusError: If the server answers with a 4xx/5xx status
            httpx.RequestError: If the request could not be completed
        """
        return await self._send("POST", url, headers=headers, json=json, data=data)

    async def _send(
        self,
        method: str,
        url: str,
        headers: dict[str, str] | None = None,
        **kwargs: Any,
    ) -> httpx.Response:
        log.debug("Making HTTP request", method=method, url=url)

        try:
            response = await self._client.request(method, url, headers=headers, **kwargs)
            response.raise_for_status()
        except (httpx.HTTPStatusError, httpx.RequestError) as e:
            status_code = e.response.status_code if isinstance(e, httpx.HTTPStatusError) else None
            log.warning(
                "HTTP request failed",
                method=method,
                url=url,
                status_code=status_code,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise

        log.debug(
            "HTTP request successful",
            method=method,
            url=url,
            status_code=response.status_code,
            content_length=len(response.content),
        )
        return response

    async def close(self) -> None:
        """Close the HTTP client and clean up resources."""
        await self._client.aclose()
        log.debug("HTTP client closed")

    async def __aenter__(self) -> "HttpClientService":
        return self

    async def __aexit__(self, exc_type: type[Exception] | None, exc_val: Exception | None, exc_tb: Any) -> None:
        await self.close()
