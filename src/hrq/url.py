from __future__ import annotations

from collections.abc import Mapping
from urllib.parse import urlencode


def make_url(base_url: str, params: Mapping[str, str]) -> str:
    """Append ``params`` to ``base_url`` as a query string, keys sorted."""
    query = urlencode(sorted(params.items()))
    return f"{base_url}?{query}"
