from .config import Defaults, configure, get_defaults, reset_defaults
from .encoding import EncodedBody, encode_body
from .errors import (
    DecodeError,
    EncodingError,
    HrqError,
    InvalidURL,
    MalformedJSON,
    TooManyRedirects,
    TransportError,
    TypeMismatch,
    UnsupportedMethod,
)
from .payload import APPLICATION_FORM_URLENCODED, APPLICATION_JSON, MULTIPART_FORM_DATA, File
from .request import Request, delete, get, head, new_request, options, post, put
from .response import Response
from .session import Session
from .url import make_url

__all__ = [
    "APPLICATION_FORM_URLENCODED",
    "APPLICATION_JSON",
    "MULTIPART_FORM_DATA",
    "Defaults",
    "configure",
    "get_defaults",
    "reset_defaults",
    "EncodedBody",
    "encode_body",
    "HrqError",
    "InvalidURL",
    "UnsupportedMethod",
    "TypeMismatch",
    "EncodingError",
    "TransportError",
    "TooManyRedirects",
    "DecodeError",
    "MalformedJSON",
    "File",
    "Request",
    "new_request",
    "get",
    "post",
    "put",
    "delete",
    "head",
    "options",
    "Response",
    "Session",
    "make_url",
]
