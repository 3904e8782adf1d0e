from __future__ import annotations

from collections.abc import Generator

import pytest

from hrq import reset_defaults


@pytest.fixture(autouse=True)
def default_settings() -> Generator[None, None, None]:
    reset_defaults()
    yield
    reset_defaults()
