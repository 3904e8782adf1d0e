from __future__ import annotations

import json
import threading
from types import TracebackType
from typing import Any, TypeVar, overload

import httpx
from pydantic import TypeAdapter, ValidationError

from .charset import sniff_encoding
from .errors import DecodeError, MalformedJSON, TransportError

T = TypeVar("T")


class Response:
    """A received response with lazy, cached body access.

    The body is read from the underlying stream on the first call to
    ``content()`` (or anything built on it) and kept afterwards. The first
    read is locked, so a Response shared between threads still reads its
    stream once.

    A Response from a standalone send owns its connection until the body is
    read. Call ``close()`` or use it as a context manager when the body is
    not needed. HEAD responses and empty bodies are released right away.

    Attributes:
        history: Requests that were redirected before the final one, oldest first
    """

    def __init__(
        self,
        raw: httpx.Response,
        history: list[httpx.Request] | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        self.raw = raw
        self.history = list(history or [])
        self._client = client
        self._content: bytes | None = None
        self._lock = threading.Lock()

    def __repr__(self) -> str:
        return f"<Response [{self.status_code}]>"

    def __enter__(self) -> Response:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

    @property
    def status_code(self) -> int:
        return self.raw.status_code

    @property
    def headers(self) -> httpx.Headers:
        return self.raw.headers

    @property
    def request(self) -> httpx.Request:
        return self.raw.request

    @property
    def url(self) -> httpx.URL:
        """URL of the final request, after redirects."""
        return self.raw.request.url

    def header_value(self, name: str) -> str:
        values = self.raw.headers.get_list(name)
        return values[0] if values else ""

    def content_type(self) -> str:
        return self.header_value("Content-Type")

    def content(self) -> bytes:
        """Return the body, decompressed according to Content-Encoding.

        Raises:
            DecodeError: If the compressed body is corrupt
            TransportError: If reading the stream fails
        """
        if self._content is None:
            with self._lock:
                if self._content is None:
                    self._content = self._read()
        return self._content

    def encoding(self) -> str:
        return sniff_encoding(self.content(), self.content_type())

    def text(self) -> str:
        encoding = self.encoding()
        try:
            text = self.content().decode(encoding)
        except UnicodeDecodeError as exc:
            raise DecodeError(f"Body is not valid {encoding}") from exc
        return text.removeprefix("\ufeff")

    @overload
    def json(self) -> Any: ...

    @overload
    def json(self, target: type[T]) -> T: ...

    def json(self, target: Any = None) -> Any:
        """Parse the body as JSON, whatever the status code.

        Args:
            target: Optional type to validate the parsed value into
                (a pydantic model, a dataclass, ``list[int]``, ...)

        Raises:
            MalformedJSON: If the body is not JSON or does not fit ``target``
        """
        try:
            value = json.loads(self.content())
        except ValueError as exc:
            raise MalformedJSON(f"Response body is not valid JSON: {exc}") from exc
        if target is None:
            return value
        try:
            return TypeAdapter(target).validate_python(value)
        except ValidationError as exc:
            raise MalformedJSON(f"Response body does not match {target!r}") from exc

    def cookie_value(self, name: str) -> str:
        lowered = name.lower()
        for cookie_name, value in self._cookies():
            if cookie_name.lower() == lowered:
                return value
        return ""

    def cookies_map(self) -> dict[str, str]:
        return dict(self._cookies())

    def close(self) -> None:
        self.raw.close()
        self._release_client()

    def _cookies(self) -> list[tuple[str, str]]:
        cookies: list[tuple[str, str]] = []
        for header in self.raw.headers.get_list("set-cookie"):
            cookie = parse_set_cookie(header)
            if cookie is not None:
                cookies.append(cookie)
        return cookies

    def _read(self) -> bytes:
        try:
            return self.raw.read()
        except httpx.DecodingError as exc:
            raise DecodeError(f"Failed to decode response body: {exc}") from exc
        except (httpx.HTTPError, httpx.StreamError) as exc:
            raise TransportError(f"Failed to read response body: {exc}") from exc
        finally:
            self.close()

    def _release_client(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None


def parse_set_cookie(header: str) -> tuple[str, str] | None:
    """Return the name and value of a Set-Cookie header, ignoring attributes."""
    pair = header.split(";", 1)[0]
    name, sep, value = pair.partition("=")
    name = name.strip()
    if not sep or not name:
        return None
    value = value.strip()
    if len(value) > 1 and value[0] == value[-1] == '"':
        value = value[1:-1]
    return name, value
