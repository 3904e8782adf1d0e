"""Chainable request builder and the per-method factories.

Example:
    >>> import hrq
    >>> response = (
    ...     hrq.post("https://example.com/items", {"name": "pen"})
    ...     .set_application_json()
    ...     .set_header("X-Trace", "1")
    ...     .set_timeout(5)
    ...     .send()
    ... )
    >>> response.json()
"""

from __future__ import annotations

from typing import TYPE_CHECKING, BinaryIO

import httpx

from .config import Defaults, get_defaults
from .encoding import EncodedBody, encode_body
from .errors import InvalidURL, UnsupportedMethod
from .payload import APPLICATION_FORM_URLENCODED, APPLICATION_JSON, MULTIPART_FORM_DATA, File

if TYPE_CHECKING:
    from .response import Response

METHODS = ("GET", "POST", "PUT", "DELETE", "HEAD", "OPTIONS")


class Request:
    """An HTTP request under construction.

    The request owns its method, URL and headers and only builds the
    ``httpx.Request`` at send time. The body is encoded on the first send and
    kept, so sending again replays the same bytes.
    """

    def __init__(
        self,
        method: str,
        url: str | httpx.URL,
        timeout: float,
        *,
        max_redirects: int = 10,
    ) -> None:
        method = method.upper()
        if method not in METHODS:
            raise UnsupportedMethod(f"Unsupported method: {method}")
        try:
            self.url = httpx.URL(url)
        except httpx.InvalidURL as exc:
            raise InvalidURL(f"Invalid URL {url!r}: {exc}") from exc
        self.method = method
        self.timeout = timeout
        self.max_redirects = max_redirects
        self.headers = httpx.Headers()
        self.cookies: list[tuple[str, str]] = []
        self.files: list[File] = []
        self.gzip = False
        self._data: object = None
        self._encoded: EncodedBody | None = None
        self._is_encoded = False
        self._replaced: dict[str, str | None] = {}

    def __repr__(self) -> str:
        return f"<Request [{self.method} {self.url}]>"

    @property
    def data(self) -> object:
        return self._data

    @data.setter
    def data(self, value: object) -> None:
        self._data = value
        self._reset_body()

    def set_data(self, data: object) -> Request:
        self.data = data
        return self

    def set_header(self, key: str, value: str) -> Request:
        self.headers[key] = value
        if key.lower() == "content-type":
            self._reset_body()
        return self

    def add_header(self, key: str, value: str) -> Request:
        self.headers = httpx.Headers([*self.headers.multi_items(), (key, value)])
        return self

    def header_value(self, key: str) -> str:
        values = self.headers.get_list(key)
        return values[0] if values else ""

    def del_header(self, key: str) -> Request:
        if key in self.headers:
            del self.headers[key]
        return self

    def put_cookie(self, name: str, value: str) -> Request:
        self.cookies.append((name, value))
        return self

    def set_timeout(self, seconds: float) -> Request:
        self.timeout = seconds
        return self

    def content_type(self) -> str:
        return self.header_value("Content-Type")

    def set_application_form_urlencoded(self) -> Request:
        return self.set_header("Content-Type", APPLICATION_FORM_URLENCODED)

    def set_application_json(self) -> Request:
        return self.set_header("Content-Type", APPLICATION_JSON)

    def set_multipart_form_data(self) -> Request:
        return self.set_header("Content-Type", MULTIPART_FORM_DATA)

    def add_file(self, content_type: str, field_name: str, file_name: str, file: BinaryIO) -> Request:
        self.files.append(
            File(
                content_type=content_type,
                field_name=field_name,
                file_name=file_name,
                file=file,
            )
        )
        self._reset_body()
        return self

    def use_gzip(self, enabled: bool = True) -> Request:
        self.gzip = enabled
        self._reset_body()
        return self

    def prepare(self) -> bytes | None:
        """Encode the body once and return the bytes to send.

        Headers required by the body (the multipart boundary, Content-Encoding)
        are written onto the request.
        """
        if not self._is_encoded:
            self._encoded = encode_body(
                self.method,
                self.content_type(),
                self._data,
                self.files,
                gzip=self.gzip,
            )
            self._is_encoded = True
            if self._encoded is not None:
                for key, value in self._encoded.headers.items():
                    self._replaced[key] = self.headers.get(key)
                    self.headers[key] = value
        return None if self._encoded is None else self._encoded.content

    @property
    def body(self) -> bytes | None:
        if self._encoded is None:
            return None
        return self._encoded.content

    def send(self, transport: httpx.BaseTransport | None = None) -> Response:
        """Encode the body and perform the request.

        Args:
            transport: httpx transport to use instead of the network

        Raises:
            TypeMismatch: If the data does not fit the content type
            EncodingError: If the data cannot be serialized
            TransportError: If the exchange fails
            TooManyRedirects: If the redirect cap is reached
        """
        from .transport import send

        return send(self, transport=transport)

    def _reset_body(self) -> None:
        # Undo headers written by the previous encode unless the caller has
        # since replaced them.
        if self._encoded is not None:
            for key, value in self._encoded.headers.items():
                if self.headers.get(key) != value:
                    continue
                previous = self._replaced.get(key)
                if previous is None:
                    del self.headers[key]
                else:
                    self.headers[key] = previous
        self._encoded = None
        self._is_encoded = False
        self._replaced = {}


def new_request(
    method: str,
    url: str | httpx.URL,
    timeout: float | None = None,
    *,
    defaults: Defaults | None = None,
) -> Request:
    defaults = defaults or get_defaults()
    request = Request(
        method,
        url,
        timeout=defaults.timeout if timeout is None else timeout,
        max_redirects=defaults.max_redirects,
    )
    request.set_header("User-Agent", defaults.user_agent)
    return request


def get(url: str | httpx.URL, *, defaults: Defaults | None = None) -> Request:
    return new_request("GET", url, defaults=defaults)


def delete(url: str | httpx.URL, *, defaults: Defaults | None = None) -> Request:
    return new_request("DELETE", url, defaults=defaults)


def head(url: str | httpx.URL, *, defaults: Defaults | None = None) -> Request:
    return new_request("HEAD", url, defaults=defaults)


def options(url: str | httpx.URL, *, defaults: Defaults | None = None) -> Request:
    return new_request("OPTIONS", url, defaults=defaults)


def post(url: str | httpx.URL, data: object = None, *, defaults: Defaults | None = None) -> Request:
    return _post_or_put("POST", url, data, defaults)


def put(url: str | httpx.URL, data: object = None, *, defaults: Defaults | None = None) -> Request:
    return _post_or_put("PUT", url, data, defaults)


def _post_or_put(method: str, url: str | httpx.URL, data: object, defaults: Defaults | None) -> Request:
    defaults = defaults or get_defaults()
    request = new_request(method, url, defaults=defaults)
    request.set_header("Content-Type", defaults.content_type)
    request.data = data
    return request
