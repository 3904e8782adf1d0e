from __future__ import annotations

import http.cookiejar
from types import TracebackType

import httpx

from .config import Defaults, get_defaults
from .request import Request
from .response import Response
from .transport import send


class Session:
    """Sends requests through one client whose cookie jar persists.

    Cookies set by any response are replayed on later sends to matching
    domains and paths. A Session is not safe for simultaneous ``send()``
    calls from several threads: the cookie jar and the client timeout are
    shared, so callers must serialize sends themselves.

    Example:
        >>> with Session() as session:
        ...     session.send(hrq.post("https://example.com/login", {"user": "me"}))
        ...     session.cookie_value("https://example.com/", "sessionid")
    """

    def __init__(
        self,
        *,
        defaults: Defaults | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        defaults = defaults or get_defaults()
        self.timeout = defaults.timeout
        self._client = httpx.Client(
            timeout=defaults.timeout,
            cookies=httpx.Cookies(),
            follow_redirects=False,
            transport=transport,
        )

    def __enter__(self) -> Session:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

    @property
    def cookie_jar(self) -> http.cookiejar.CookieJar:
        return self._client.cookies.jar

    def send(self, request: Request) -> Response:
        self._client.timeout = httpx.Timeout(request.timeout)
        return send(request, client=self._client)

    def cookie_value(self, url: str, name: str) -> str:
        lowered = name.lower()
        for cookie_name, value in self._cookies_for(url):
            if cookie_name.lower() == lowered:
                return value
        return ""

    def cookies(self, url: str) -> dict[str, str]:
        return dict(self._cookies_for(url))

    def close(self) -> None:
        self._client.close()

    def _cookies_for(self, url: str) -> list[tuple[str, str]]:
        lookup = httpx.Request("GET", url)
        self._client.cookies.set_cookie_header(lookup)
        cookies: list[tuple[str, str]] = []
        for pair in lookup.headers.get("Cookie", "").split(";"):
            name, sep, value = pair.strip().partition("=")
            if sep and name:
                cookies.append((name, value))
        return cookies
