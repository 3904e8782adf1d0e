from __future__ import annotations

import dataclasses
from dataclasses import dataclass

from .payload import APPLICATION_FORM_URLENCODED


@dataclass(frozen=True)
class Defaults:
    """Settings shared by the request factories and sessions.

    Attributes:
        timeout: Seconds before a send gives up
        content_type: Content-Type given to POST and PUT requests
        max_redirects: Number of redirects that aborts a send
        user_agent: User-Agent header sent when the caller sets none
    """

    timeout: float = 15.0
    content_type: str = APPLICATION_FORM_URLENCODED
    max_redirects: int = 10
    user_agent: str = "hrq"

    def replace(self, **changes: object) -> "Defaults":
        return dataclasses.replace(self, **changes)  # type: ignore[arg-type]


_defaults = Defaults()


def get_defaults() -> Defaults:
    return _defaults


def configure(**changes: object) -> Defaults:
    """Replace the process-wide defaults.

    Meant to be called once at startup; requests that were already built keep
    the values they were created with.
    """
    global _defaults
    _defaults = _defaults.replace(**changes)
    return _defaults


def reset_defaults() -> Defaults:
    global _defaults
    _defaults = Defaults()
    return _defaults
