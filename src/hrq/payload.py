"""Request payload variants.

The data handed to a POST or PUT request is untyped until its content type is
known. ``payload_for()`` looks at the declared content type and wraps the data
in the matching variant, checking its shape on the way:

- FormData: ``application/x-www-form-urlencoded``, str -> str | list[str]
- JsonBody: ``application/json``, anything the JSON codec accepts
- MultipartData: ``multipart/form-data``, str -> str plus attached files
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import BinaryIO, Union

from .errors import TypeMismatch

APPLICATION_FORM_URLENCODED = "application/x-www-form-urlencoded"
APPLICATION_JSON = "application/json"
MULTIPART_FORM_DATA = "multipart/form-data"


@dataclass
class File:
    """A file part for ``multipart/form-data`` requests.

    The handle is read once and closed by the encoder.
    """

    content_type: str
    field_name: str
    file_name: str
    file: BinaryIO


@dataclass(frozen=True)
class FormData:
    fields: dict[str, list[str]]


@dataclass(frozen=True)
class JsonBody:
    value: object


@dataclass(frozen=True)
class MultipartData:
    fields: dict[str, str]
    files: list[File] = field(default_factory=list)


Payload = Union[FormData, JsonBody, MultipartData]


def media_type(content_type: str) -> str:
    """Return the lowercased media type without parameters."""
    return content_type.split(";", 1)[0].strip().lower()


def payload_for(content_type: str, data: object, files: Sequence[File] = ()) -> Payload | None:
    """Wrap ``data`` in the variant selected by ``content_type``.

    Returns None when the content type has no encoder, or when there is no
    data for a form or JSON body.

    Raises:
        TypeMismatch: If the data does not fit the content type
    """
    kind = media_type(content_type)
    if kind == MULTIPART_FORM_DATA:
        return MultipartData(fields=_string_fields(data), files=list(files))
    if data is None:
        return None
    if kind == APPLICATION_FORM_URLENCODED:
        return FormData(fields=_form_fields(data))
    if kind == APPLICATION_JSON:
        return JsonBody(value=data)
    return None


def _string_fields(data: object) -> dict[str, str]:
    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise TypeMismatch(f"multipart data must be a mapping of str to str, got {type(data).__name__}")
    fields: dict[str, str] = {}
    for key, value in data.items():
        if not isinstance(key, str) or not isinstance(value, str):
            raise TypeMismatch(f"multipart field {key!r} must map str to str")
        fields[key] = value
    return fields


def _form_fields(data: object) -> dict[str, list[str]]:
    if not isinstance(data, Mapping):
        raise TypeMismatch(f"form data must be a mapping, got {type(data).__name__}")
    fields: dict[str, list[str]] = {}
    for key, value in data.items():
        if not isinstance(key, str):
            raise TypeMismatch(f"form field names must be str, got {key!r}")
        if isinstance(value, str):
            fields[key] = [value]
        elif isinstance(value, (list, tuple)) and all(isinstance(item, str) for item in value):
            fields[key] = list(value)
        else:
            raise TypeMismatch(f"form field {key!r} must be a str or a list of str")
    return fields
