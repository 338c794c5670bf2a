import pytest

from mash.mash_diagnostics import Diagnostics


@pytest.fixture  # type: ignore[misc]
def diagnostics() -> Diagnostics:
    return Diagnostics()
