import pytest

from beans import reset_counters


@pytest.fixture(autouse=True)
def reset_sample_types():
    reset_counters()
    yield
    reset_counters()
