from __future__ import annotations


class HrqError(Exception):
    pass


class InvalidURL(HrqError, ValueError):
    pass


class TypeMismatch(HrqError, TypeError):
    """Request data does not have the shape its content type requires."""


class EncodingError(HrqError):
    pass


class TransportError(HrqError):
    pass


class TooManyRedirects(TransportError):
    pass


class DecodeError(HrqError):
    pass


class MalformedJSON(DecodeError):
    pass


class UnsupportedMethod(HrqError, ValueError):
    pass
