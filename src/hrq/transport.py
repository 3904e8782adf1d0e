"""One logical send: the wire exchange plus any redirects it triggers.

Redirects are followed here rather than by httpx so that every redirected
request can be recorded and the chain can be cut off at the request's
``max_redirects``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import httpx

from .errors import TooManyRedirects, TransportError
from .response import Response

if TYPE_CHECKING:
    from .request import Request

logger = logging.getLogger(__name__)


def send(
    request: Request,
    client: httpx.Client | None = None,
    transport: httpx.BaseTransport | None = None,
) -> Response:
    """Send ``request`` and wrap the final response.

    Args:
        request: The request to send; its body is encoded first if needed
        client: Client to send through (a Session's). When omitted a fresh
            client with an empty cookie jar is created and owned by the
            returned Response.
        transport: httpx transport for the fresh client

    Raises:
        TypeMismatch: If the data does not fit the content type
        EncodingError: If the data cannot be serialized
        TransportError: If the exchange fails
        TooManyRedirects: If the redirect cap is reached
    """
    content = request.prepare()
    owned = client is None
    if client is None:
        client = httpx.Client(
            timeout=request.timeout,
            cookies=httpx.Cookies(),
            follow_redirects=False,
            transport=transport,
        )
    try:
        raw, history = _exchange(client, request, content)
    except BaseException:
        if owned:
            client.close()
        raise
    response = Response(raw, history=history, client=client if owned else None)
    if raw.request.method == "HEAD" or raw.headers.get("Content-Length") == "0":
        # Nothing to read; release the stream and any owned client now.
        response.content()
    return response


def _exchange(
    client: httpx.Client,
    request: Request,
    content: bytes | None,
) -> tuple[httpx.Response, list[httpx.Request]]:
    wire = client.build_request(
        request.method,
        request.url,
        headers=request.headers,
        content=content,
        timeout=request.timeout,
    )
    _add_cookies(wire, request.cookies)
    history: list[httpx.Request] = []
    while True:
        logger.debug(f"{wire.method} {wire.url}")
        try:
            response = client.send(wire, stream=True, follow_redirects=False)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise TransportError(f"{wire.method} {wire.url} failed: {exc}") from exc

        next_request = response.next_request
        if next_request is None:
            return response, history

        _discard(response)
        history.append(wire)
        if len(history) >= request.max_redirects:
            raise TooManyRedirects(f"Stopped after {len(history)} redirects at {next_request.url}")
        logger.debug(f"Redirect {response.status_code}: {wire.url} -> {next_request.url}")
        if next_request.url.host == request.url.host:
            _add_cookies(next_request, request.cookies)
        wire = next_request


def _add_cookies(wire: httpx.Request, cookies: list[tuple[str, str]]) -> None:
    """Append explicit cookies to whatever the cookie jar put on the request."""
    if not cookies:
        return
    rendered = "; ".join(f"{name}={value}" for name, value in cookies)
    existing = wire.headers.get("Cookie")
    wire.headers["Cookie"] = f"{existing}; {rendered}" if existing else rendered


def _discard(response: httpx.Response) -> None:
    try:
        response.read()
    except httpx.HTTPError as exc:
        raise TransportError(f"Failed to read redirect response from {response.url}: {exc}") from exc
    finally:
        response.close()
