"""Body encoding for outgoing requests.

``encode_body()`` turns the data of a POST or PUT request into wire bytes
according to the declared Content-Type:

- ``multipart/form-data``: text fields plus attached files, boundary added to
  the Content-Type header
- ``application/x-www-form-urlencoded``: sorted ``key=value`` pairs
- ``application/json``: compact JSON
- anything else: no body

When gzip is requested the encoded bytes are compressed afterwards and a
``Content-Encoding: gzip`` header is added.
"""

from __future__ import annotations

import contextlib
import dataclasses
import gzip as gzip_codec
import json
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from urllib.parse import urlencode

from pydantic import BaseModel
from urllib3.fields import RequestField
from urllib3.filepost import encode_multipart_formdata

from .errors import EncodingError
from .payload import MULTIPART_FORM_DATA, File, FormData, JsonBody, MultipartData, Payload, media_type, payload_for

logger = logging.getLogger(__name__)

BODY_METHODS = frozenset({"POST", "PUT"})


@dataclass(frozen=True)
class EncodedBody:
    """Final request body and the headers it requires.

    Attributes:
        content: Bytes sent on the wire
        headers: Headers to set on the request (Content-Type, Content-Encoding)
    """

    content: bytes
    headers: dict[str, str] = field(default_factory=dict)


def encode_body(
    method: str,
    content_type: str,
    data: object,
    files: Sequence[File] = (),
    gzip: bool = False,
) -> EncodedBody | None:
    """Encode request data for the wire.

    Args:
        method: HTTP method; only POST and PUT carry an encoded body
        content_type: Declared Content-Type header value
        data: Request data, shaped for the content type
        files: Files attached for multipart requests
        gzip: Whether to gzip the encoded body

    Returns:
        The encoded body, or None if the request carries no body

    Raises:
        TypeMismatch: If data does not fit the content type
        EncodingError: If data cannot be serialized or a file cannot be read
    """
    if method.upper() not in BODY_METHODS:
        return None
    multipart = media_type(content_type) == MULTIPART_FORM_DATA
    try:
        payload = payload_for(content_type, data, files)
        if payload is None:
            return None
        content, headers = encode_payload(payload)
    finally:
        if multipart:
            _close_files(files)
    if gzip:
        content = gzip_codec.compress(content)
        headers["Content-Encoding"] = "gzip"
    logger.debug(f"Encoded {type(payload).__name__} body: {len(content)} bytes (gzip={gzip})")
    return EncodedBody(content=content, headers=headers)


def encode_payload(payload: Payload) -> tuple[bytes, dict[str, str]]:
    if isinstance(payload, FormData):
        return encode_form(payload), {}
    if isinstance(payload, JsonBody):
        return encode_json(payload.value), {}
    if isinstance(payload, MultipartData):
        return encode_multipart(payload)
    raise TypeError(f"Unknown payload variant: {type(payload).__name__}")


def encode_form(payload: FormData) -> bytes:
    pairs = [(key, value) for key in sorted(payload.fields) for value in payload.fields[key]]
    return urlencode(pairs).encode("ascii")


def encode_json(value: object) -> bytes:
    try:
        text = json.dumps(
            value,
            default=_json_default,
            ensure_ascii=False,
            allow_nan=False,
            separators=(",", ":"),
        )
    except (TypeError, ValueError, RecursionError) as exc:
        raise EncodingError(f"Failed to encode JSON body: {exc}") from exc
    return text.encode("utf-8")


def encode_multipart(payload: MultipartData) -> tuple[bytes, dict[str, str]]:
    parts: list[RequestField] = []
    for name, value in payload.fields.items():
        part = RequestField(name=name, data=value)
        part.make_multipart(content_disposition="form-data")
        parts.append(part)
    for file in payload.files:
        try:
            data = file.file.read()
        except (OSError, ValueError) as exc:
            raise EncodingError(f"Failed to read file {file.file_name!r}: {exc}") from exc
        part = RequestField(name=file.field_name, data=data, filename=file.file_name)
        part.make_multipart(content_disposition="form-data", content_type=file.content_type)
        parts.append(part)
    content, content_type = encode_multipart_formdata(parts)
    return content, {"Content-Type": content_type}


def _json_default(value: object) -> object:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _close_files(files: Sequence[File]) -> None:
    """Close every handle, even when closing an earlier one fails."""
    try:
        with contextlib.ExitStack() as stack:
            for file in files:
                stack.callback(file.file.close)
    except OSError as exc:
        raise EncodingError(f"Failed to close file: {exc}") from exc
