"""
HTTP fetcher for public YouTube pages and the internal web endpoint.

Every request carries a fixed set of browser-identifying headers so the
upstream treats it as an ordinary page view. Requests to the internal
endpoint are POSTs whose JSON body embeds the fixed client-context envelope
the endpoint requires.

The fetcher makes exactly one attempt per call. There is no retry, backoff
or connection pooling: each call opens and closes its own
``httpx.AsyncClient``, and any non-2xx status or transport failure surfaces
as ``NetworkError`` for the caller's fallback policy to handle.

Classes
-------
RawPage
    Text body of a fetched page plus its final URL and status.
Fetcher
    Async client for page, JSON and internal-endpoint requests.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any

import httpx

from tubescope.config.settings import Settings
from tubescope.config.settings import settings as default_settings
from tubescope.exceptions import NetworkError, ParseError
from tubescope.models.json_value import JsonValue

logger = logging.getLogger(__name__)

INNERTUBE_PATH = "/youtubei/v1/{endpoint}"


@dataclass(frozen=True)
class RawPage:
    """
    Text body returned for one request.

    Attributes
    ----------
    url : str
        Final URL after redirects.
    status_code : int
        HTTP status of the response.
    text : str
        Decoded response body.
    """

    url: str
    status_code: int
    text: str


class Fetcher:
    """
    Async HTTP client with browser-like headers.

    Parameters
    ----------
    settings : Settings | None, optional
        Settings providing base URL, headers, client context and timeout.
        Defaults to the global settings instance.

    Examples
    --------
    >>> fetcher = Fetcher()
    >>> html = await fetcher.get_text("https://www.youtube.com/watch?v=dQw4w9WgXcQ")
    >>> data = await fetcher.post_innertube("search", {"query": "lofi"})
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or default_settings

    @property
    def settings(self) -> Settings:
        """Settings this fetcher was built with."""
        return self._settings

    @property
    def headers(self) -> dict[str, str]:
        """Fixed browser-identifying headers sent with every request."""
        return {
            "User-Agent": self._settings.user_agent,
            "Accept": (
                "text/html,application/xhtml+xml,application/xml;q=0.9,"
                "application/json;q=0.9,*/*;q=0.8"
            ),
            "Accept-Language": self._settings.accept_language,
        }

    def url_for(self, path: str) -> str:
        """Resolve a site-relative path against the configured base URL."""
        if path.startswith(("http://", "https://")):
            return path
        return f"{self._settings.base_url}/{path.lstrip('/')}"

    async def fetch(
        self,
        url: str,
        *,
        method: str = "GET",
        params: dict[str, str] | None = None,
        json_body: dict[str, Any] | None = None,
    ) -> RawPage:
        """
        Issue a single HTTP request.

        Parameters
        ----------
        url : str
            Absolute URL or site-relative path.
        method : str, optional
            ``"GET"`` or ``"POST"`` (default: ``"GET"``).
        params : dict[str, str] | None, optional
            Query string parameters.
        json_body : dict[str, Any] | None, optional
            JSON body for POST requests.

        Returns
        -------
        RawPage
            The response body and metadata.

        Raises
        ------
        NetworkError
            On a non-2xx status or any transport failure.
        """
        target = self.url_for(url)
        headers = dict(self.headers)
        if json_body is not None:
            headers["Content-Type"] = "application/json"

        logger.debug("%s %s", method, target)
        try:
            async with httpx.AsyncClient(follow_redirects=True) as client:
                response = await client.request(
                    method,
                    target,
                    params=params,
                    json=json_body,
                    headers=headers,
                    timeout=self._settings.request_timeout,
                )
        except httpx.HTTPError as e:
            raise NetworkError(
                message=f"Request to {target} failed: {type(e).__name__}",
                url=target,
                original_error=e,
            ) from e

        if not 200 <= response.status_code < 300:
            raise NetworkError(
                message=(
                    f"Request to {target} returned status {response.status_code}"
                ),
                url=target,
                status_code=response.status_code,
            )

        return RawPage(
            url=str(response.url),
            status_code=response.status_code,
            text=response.text,
        )

    async def get_text(
        self, url: str, params: dict[str, str] | None = None
    ) -> str:
        """GET ``url`` and return the body as text."""
        page = await self.fetch(url, params=params)
        return page.text

    async def get_json(
        self, url: str, params: dict[str, str] | None = None
    ) -> JsonValue:
        """
        GET ``url`` and decode the body as JSON.

        Raises
        ------
        NetworkError
            On a non-2xx status or transport failure.
        ParseError
            If the body is not valid JSON.
        """
        page = await self.fetch(url, params=params)
        return _decode_json(page)

    async def post_innertube(
        self,
        endpoint: str,
        payload: dict[str, Any],
        *,
        region: str | None = None,
    ) -> JsonValue:
        """
        POST to the internal structured endpoint.

        The body is ``{"context": <client envelope>, **payload}``. The
        client envelope always comes from settings; a ``context`` key in
        ``payload`` is ignored.

        Parameters
        ----------
        endpoint : str
            Endpoint name (``"search"``, ``"browse"``, ``"next"``, ``"player"``).
        payload : dict[str, Any]
            Request fields such as ``query``, ``params``, ``browseId``.
        region : str | None, optional
            Two-letter region code replacing the configured ``gl`` in the
            client envelope (default: None).

        Returns
        -------
        JsonValue
            The decoded JSON response.

        Raises
        ------
        NetworkError
            On a non-2xx status or transport failure.
        ParseError
            If the body is not valid JSON.
        """
        body = {key: value for key, value in payload.items() if key != "context"}
        context = self._settings.innertube_context
        if region:
            context["client"]["gl"] = region.upper()
        body = {"context": context, **body}
        page = await self.fetch(
            INNERTUBE_PATH.format(endpoint=endpoint),
            method="POST",
            params={"prettyPrint": "false"},
            json_body=body,
        )
        return _decode_json(page)


def _decode_json(page: RawPage) -> JsonValue:
    """Decode a page body as JSON or raise ParseError."""
    try:
        data: JsonValue = json.loads(page.text)
    except (json.JSONDecodeError, ValueError) as e:
        raise ParseError(f"Response from {page.url} is not valid JSON") from e
    return data
